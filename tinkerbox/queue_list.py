"""A first-in, first-out queue."""

from __future__ import annotations

from collections import deque
from collections.abc import Callable, Iterator
from typing import Generic, TypeVar

T = TypeVar("T")


class Queue(Generic[T]):
    """Elements are pushed at the back and popped from the front."""

    def __init__(self) -> None:
        self._items: deque[T] = deque()

    def push(self, elem: T) -> None:
        """Add ``elem`` at the back."""
        self._items.append(elem)

    def pop(self) -> T | None:
        """Remove and return the front element, or None when empty."""
        return self._items.popleft() if self._items else None

    def peek(self) -> T | None:
        """Return the front element without removing it, or None when empty."""
        return self._items[0] if self._items else None

    def update_peek(self, func: Callable[[T], T]) -> T | None:
        """Replace the front element with ``func(front)``; return the new value."""
        if not self._items:
            return None
        self._items[0] = func(self._items[0])
        return self._items[0]

    def map_in_place(self, func: Callable[[T], T]) -> None:
        """Replace every element with ``func(element)``."""
        self._items = deque(func(item) for item in self._items)

    def drain(self) -> Iterator[T]:
        """Pop elements from the front until the queue is empty."""
        while self._items:
            yield self._items.popleft()

    def __iter__(self) -> Iterator[T]:
        return iter(self._items)

    def __len__(self) -> int:
        return len(self._items)