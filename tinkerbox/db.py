"""An in-memory key-value store with key expiry and publish/subscribe channels."""

from __future__ import annotations

import asyncio
import bisect
import time
import weakref
from collections import deque
from dataclasses import dataclass
from datetime import timedelta

_CHANNEL_CAPACITY = 1024


class Lagged(Exception):
    """A subscriber fell so far behind that messages were dropped before it read them."""

    def __init__(self, skipped: int) -> None:
        super().__init__(f"receiver lagged by {skipped} messages")
        self.skipped = skipped


class _Broadcast:
    """A bounded channel whose every message is seen by every subscriber."""

    def __init__(self, capacity: int) -> None:
        self.buffer: deque[bytes] = deque(maxlen=capacity)
        self.next_seq = 0
        self.receivers: weakref.WeakSet[Subscription] = weakref.WeakSet()
        self.changed = asyncio.Event()

    @property
    def oldest_seq(self) -> int:
        return self.next_seq - len(self.buffer)

    def send(self, value: bytes) -> int:
        count = len(self.receivers)
        if not count:
            return 0
        self.buffer.append(value)
        self.next_seq += 1
        changed, self.changed = self.changed, asyncio.Event()
        changed.set()
        return count


class Subscription:
    """Receives the messages published on one channel after it was created."""

    def __init__(self, channel: _Broadcast) -> None:
        self._channel = channel
        self._pos = channel.next_seq
        channel.receivers.add(self)

    async def recv(self) -> bytes:
        """Wait for and return the next message.

        Raises Lagged when messages were dropped before this subscriber saw them;
        the following call then returns the oldest message still held.
        """
        channel = self._channel
        while self._pos == channel.next_seq:
            await channel.changed.wait()
        oldest = channel.oldest_seq
        if self._pos < oldest:
            skipped = oldest - self._pos
            self._pos = oldest
            raise Lagged(skipped)
        value = channel.buffer[self._pos - oldest]
        self._pos += 1
        return value


@dataclass
class _Entry:
    data: bytes
    expires_at: float | None


class Db:
    """Key-value entries with optional time-to-live and pub/sub channels.

    Expired keys are removed by a background task that ``start`` launches.
    """

    def __init__(self) -> None:
        self._entries: dict[str, _Entry] = {}
        self._pub_sub: dict[str, _Broadcast] = {}
        self._expirations: list[tuple[float, str]] = []
        self._shutdown = False
        self._wakeup = asyncio.Event()
        self._task: asyncio.Task[None] | None = None

    def start(self) -> None:
        """Launch the background task that purges expired keys."""
        if self._task is not None:
            raise RuntimeError("the purge task is already running")
        self._task = asyncio.get_running_loop().create_task(self._purge_expired_tasks())

    def close(self) -> None:
        """Signal the background task to stop."""
        self._shutdown = True
        self._wakeup.set()

    def get(self, key: str) -> bytes | None:
        """Return the value stored under ``key``, or None."""
        entry = self._entries.get(key)
        return entry.data if entry is not None else None

    def set(
        self,
        key: str,
        value: bytes,
        expire: float | timedelta | None = None,
    ) -> None:
        """Store ``value`` under ``key``, expiring after ``expire`` seconds if given."""
        if isinstance(value, str):
            raise TypeError("value must be bytes, not str")
        notify = False
        expires_at: float | None = None
        if expire is not None:
            seconds = expire.total_seconds() if isinstance(expire, timedelta) else float(expire)
            if seconds < 0:
                raise ValueError("expire must not be negative")
            expires_at = time.monotonic() + seconds
            upcoming = self._next_expiration()
            notify = upcoming is None or upcoming > expires_at

        prev = self._entries.get(key)
        self._entries[key] = _Entry(bytes(value), expires_at)
        if prev is not None and prev.expires_at is not None:
            self._remove_expiration(prev.expires_at, key)
        if expires_at is not None:
            bisect.insort(self._expirations, (expires_at, key))

        if notify:
            self._wakeup.set()

    def subscribe(self, key: str) -> Subscription:
        """Return a subscription to the channel named ``key``."""
        channel = self._pub_sub.get(key)
        if channel is None:
            channel = self._pub_sub[key] = _Broadcast(_CHANNEL_CAPACITY)
        return Subscription(channel)

    def publish(self, key: str, value: bytes) -> int:
        """Send ``value`` on channel ``key``; return how many subscribers listen."""
        channel = self._pub_sub.get(key)
        return channel.send(bytes(value)) if channel is not None else 0

    async def __aenter__(self) -> Db:
        self.start()
        return self

    async def __aexit__(self, *args: object) -> None:
        self.close()
        if self._task is not None:
            await self._task

    def _next_expiration(self) -> float | None:
        return self._expirations[0][0] if self._expirations else None

    def _remove_expiration(self, when: float, key: str) -> None:
        idx = bisect.bisect_left(self._expirations, (when, key))
        if idx < len(self._expirations) and self._expirations[idx] == (when, key):
            del self._expirations[idx]

    def _purge_expired_keys(self) -> float | None:
        if self._shutdown:
            return None
        now = time.monotonic()
        while self._expirations:
            when, key = self._expirations[0]
            if when > now:
                return when
            self._entries.pop(key, None)
            del self._expirations[0]
        return None

    async def _purge_expired_tasks(self) -> None:
        while not self._shutdown:
            when = self._purge_expired_keys()
            timeout = None if when is None else max(0.0, when - time.monotonic())
            try:
                await asyncio.wait_for(self._wakeup.wait(), timeout)
            except asyncio.TimeoutError:
                pass
            self._wakeup.clear()