"""A double-ended queue with access at both ends."""

from __future__ import annotations

from collections import deque
from collections.abc import Callable, Iterator
from typing import Generic, TypeVar

T = TypeVar("T")


class Deque(Generic[T]):
    """Elements can be pushed, popped and inspected at either end."""

    def __init__(self) -> None:
        self._items: deque[T] = deque()

    def push_front(self, elem: T) -> None:
        self._items.appendleft(elem)

    def pop_front(self) -> T | None:
        """Remove and return the front element, or None when empty."""
        return self._items.popleft() if self._items else None

    def peek_front(self) -> T | None:
        return self._items[0] if self._items else None

    def update_front(self, func: Callable[[T], T]) -> T | None:
        """Replace the front element with ``func(front)``; return the new value."""
        if not self._items:
            return None
        self._items[0] = func(self._items[0])
        return self._items[0]

    def push_back(self, elem: T) -> None:
        self._items.append(elem)

    def pop_back(self) -> T | None:
        """Remove and return the back element, or None when empty."""
        return self._items.pop() if self._items else None

    def peek_back(self) -> T | None:
        return self._items[-1] if self._items else None

    def update_back(self, func: Callable[[T], T]) -> T | None:
        """Replace the back element with ``func(back)``; return the new value."""
        if not self._items:
            return None
        self._items[-1] = func(self._items[-1])
        return self._items[-1]

    def drain(self) -> DequeDrain[T]:
        """Return an iterator that removes elements from either end."""
        return DequeDrain(self)

    def __len__(self) -> int:
        return len(self._items)


class DequeDrain(Generic[T]):
    """Consumes a Deque from the front via ``next`` and from the back via ``next_back``."""

    def __init__(self, source: Deque[T]) -> None:
        self._source = source

    def __iter__(self) -> Iterator[T]:
        return self

    def __next__(self) -> T:
        if not len(self._source):
            raise StopIteration
        return self._source.pop_front()  # type: ignore[return-value]

    def next_back(self) -> T | None:
        """Remove and return the back element, or None when exhausted."""
        return self._source.pop_back()