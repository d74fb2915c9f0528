"""Messages and statistics for measuring network delivery lag."""

from __future__ import annotations

import math
import re
import time
from dataclasses import dataclass
from typing import Union

_U64_LIMIT = 1 << 64


@dataclass(frozen=True)
class Micro:
    """A timestamp, in milliseconds since the Unix epoch, taken when sent."""

    value: int

    def __post_init__(self) -> None:
        if not 0 <= self.value < _U64_LIMIT:
            raise ValueError(f"timestamp out of range: {self.value}")


@dataclass(frozen=True)
class Finish:
    """Tells the receiver that no more timestamps follow."""


Message = Union[Micro, Finish]

_MESSAGE_RE = re.compile(r"\s*(?:Micro\s*\(\s*(\d+)\s*\)|(Finish))\s*")


def now_millis() -> int:
    """Return the current time in milliseconds since the Unix epoch."""
    return time.time_ns() // 1_000_000


def encode_message(message: Message) -> str:
    """Return the text form of ``message``."""
    if isinstance(message, Micro):
        return f"Micro({message.value})"
    if isinstance(message, Finish):
        return "Finish"
    raise TypeError(f"not a message: {message!r}")


def decode_message(text: str) -> Message:
    """Parse the text form of a message; raise ValueError when it is malformed."""
    match = _MESSAGE_RE.fullmatch(text)
    if match is None:
        raise ValueError(f"invalid message: {text!r}")
    if match.group(2):
        return Finish()
    return Micro(int(match.group(1)))


def _format_float(value: float) -> str:
    if math.isnan(value):
        return "NaN"
    if math.isinf(value):
        return "inf" if value > 0 else "-inf"
    if value.is_integer():
        return str(int(value))
    return repr(value)


class Calculator:
    """Collects the lag of each received timestamp."""

    def __init__(self) -> None:
        self.lags: list[int] = []

    def add_msg(self, first: int) -> None:
        """Record the milliseconds between ``first`` and now."""
        last = now_millis()
        if first > last:
            raise ValueError(f"timestamp {first} lies in the future")
        self.lags.append(last - first)

    def report(self) -> str:
        """Return a summary line with the count and average lag."""
        count = len(self.lags)
        avg = sum(self.lags) / count if count else math.nan
        return f"total :{count} , avg lag: {_format_float(avg)} ms"


def _split_addr(addr: str) -> tuple[str, int]:
    host, sep, port = addr.rpartition(":")
    if not sep or not host or not port.isdigit():
        raise ValueError(f"invalid address: {addr!r}")
    return host.strip("[]"), int(port)