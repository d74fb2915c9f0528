"""A last-in, first-out stack."""

from __future__ import annotations

from collections.abc import Callable, Iterator
from typing import Generic, TypeVar

T = TypeVar("T")


class Stack(Generic[T]):
    """A stack whose most recently pushed element comes out first."""

    def __init__(self) -> None:
        self._items: list[T] = []

    def push(self, elem: T) -> None:
        """Put ``elem`` on top of the stack."""
        self._items.append(elem)

    def pop(self) -> T | None:
        """Remove and return the top element, or None when empty."""
        return self._items.pop() if self._items else None

    def peek(self) -> T | None:
        """Return the top element without removing it, or None when empty."""
        return self._items[-1] if self._items else None

    def update_peek(self, func: Callable[[T], T]) -> T | None:
        """Replace the top element with ``func(top)``; return the new value."""
        if not self._items:
            return None
        self._items[-1] = func(self._items[-1])
        return self._items[-1]

    def map_in_place(self, func: Callable[[T], T]) -> None:
        """Replace every element with ``func(element)``."""
        self._items = [func(item) for item in self._items]

    def drain(self) -> Iterator[T]:
        """Pop elements one at a time, top first, until the stack is empty."""
        while self._items:
            yield self._items.pop()

    def __iter__(self) -> Iterator[T]:
        return reversed(self._items)

    def __len__(self) -> int:
        return len(self._items)