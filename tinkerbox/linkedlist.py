"""A doubly linked list with a double-ended, length-aware iterator."""

from __future__ import annotations

from collections.abc import Callable, Iterable, Iterator
from itertools import zip_longest
from typing import Any, Generic, TypeVar

T = TypeVar("T")

_MISSING = object()


class _Node:
    __slots__ = ("elem", "prev", "next")

    def __init__(self, elem: Any, prev: _Node | None, next: _Node | None) -> None:
        self.elem = elem
        self.prev = prev
        self.next = next


def _partial_cmp(left: Iterable[Any], right: Iterable[Any]) -> int | None:
    """Compare two sequences lexicographically.

    Returns -1, 0 or 1, or None when two elements cannot be ordered (NaN).
    """
    for a, b in zip_longest(left, right, fillvalue=_MISSING):
        if a is _MISSING:
            return -1
        if b is _MISSING:
            return 1
        if a == b:
            continue
        if a < b:
            return -1
        if a > b:
            return 1
        return None
    return 0


class LinkedList(Generic[T]):
    """A list of nodes linked in both directions, with O(1) work at either end."""

    def __init__(self, iterable: Iterable[T] | None = None) -> None:
        self._front: _Node | None = None
        self._back: _Node | None = None
        self._len = 0
        if iterable is not None:
            self.extend(iterable)

    def push_front(self, elem: T) -> None:
        node = _Node(elem, None, self._front)
        if self._front is not None:
            self._front.prev = node
        else:
            self._back = node
        self._front = node
        self._len += 1

    def push_back(self, elem: T) -> None:
        node = _Node(elem, self._back, None)
        if self._back is not None:
            self._back.next = node
        else:
            self._front = node
        self._back = node
        self._len += 1

    def pop_front(self) -> T | None:
        """Remove and return the front element, or None when empty."""
        node = self._front
        if node is None:
            return None
        self._front = node.next
        if self._front is not None:
            self._front.prev = None
        else:
            self._back = None
        self._len -= 1
        return node.elem

    def pop_back(self) -> T | None:
        """Remove and return the back element, or None when empty."""
        node = self._back
        if node is None:
            return None
        self._back = node.prev
        if self._back is not None:
            self._back.next = None
        else:
            self._front = None
        self._len -= 1
        return node.elem

    def front(self) -> T | None:
        return self._front.elem if self._front is not None else None

    def back(self) -> T | None:
        return self._back.elem if self._back is not None else None

    def set_front(self, value: T) -> None:
        """Replace the front element; raise IndexError when empty."""
        if self._front is None:
            raise IndexError("set_front on an empty list")
        self._front.elem = value

    def set_back(self, value: T) -> None:
        """Replace the back element; raise IndexError when empty."""
        if self._back is None:
            raise IndexError("set_back on an empty list")
        self._back.elem = value

    def is_empty(self) -> bool:
        return self._len == 0

    def clear(self) -> None:
        while self.pop_front() is not None or self._len:
            pass

    def extend(self, iterable: Iterable[T]) -> None:
        """Append every element of ``iterable`` at the back."""
        for item in iterable:
            self.push_back(item)

    def copy(self) -> LinkedList[T]:
        return LinkedList(self)

    def iter(self) -> ListIter[T]:
        """Return an iterator that can be consumed from both ends."""
        return ListIter(self._front, self._back, self._len)

    def map_in_place(self, func: Callable[[T], T]) -> None:
        """Replace every element with ``func(element)``."""
        node = self._front
        while node is not None:
            node.elem = func(node.elem)
            node = node.next

    def drain(self) -> ListDrain[T]:
        """Return an iterator that removes elements from either end."""
        return ListDrain(self)

    def __len__(self) -> int:
        return self._len

    def __iter__(self) -> ListIter[T]:
        return self.iter()

    def __reversed__(self) -> ListIter[T]:
        return ListIter(self._back, self._front, self._len, forward=False)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, LinkedList):
            return NotImplemented
        return self._len == other._len and all(a == b for a, b in zip(self, other))

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, LinkedList):
            return NotImplemented
        return _partial_cmp(self, other) == -1

    def __le__(self, other: object) -> bool:
        if not isinstance(other, LinkedList):
            return NotImplemented
        return _partial_cmp(self, other) in (-1, 0)

    def __gt__(self, other: object) -> bool:
        if not isinstance(other, LinkedList):
            return NotImplemented
        return _partial_cmp(self, other) == 1

    def __ge__(self, other: object) -> bool:
        if not isinstance(other, LinkedList):
            return NotImplemented
        return _partial_cmp(self, other) in (1, 0)

    def __hash__(self) -> int:
        return hash((self._len, *self))

    def __repr__(self) -> str:
        return repr(list(self))


class ListIter(Generic[T]):
    """Walks a LinkedList from its front with ``next`` and its back with ``next_back``."""

    def __init__(
        self,
        front: _Node | None,
        back: _Node | None,
        length: int,
        forward: bool = True,
    ) -> None:
        self._front = front
        self._back = back
        self._len = length
        self._forward = forward

    def __iter__(self) -> Iterator[T]:
        return self

    def __next__(self) -> T:
        if self._len == 0 or self._front is None:
            raise StopIteration
        node = self._front
        self._front = node.next if self._forward else node.prev
        self._len -= 1
        return node.elem

    def next_back(self) -> T | None:
        """Return the next element from the far end, or None when exhausted."""
        if self._len == 0 or self._back is None:
            return None
        node = self._back
        self._back = node.prev if self._forward else node.next
        self._len -= 1
        return node.elem

    def __len__(self) -> int:
        return self._len


class ListDrain(Generic[T]):
    """Consumes a LinkedList from the front via ``next`` and the back via ``next_back``."""

    def __init__(self, source: LinkedList[T]) -> None:
        self._source = source

    def __iter__(self) -> Iterator[T]:
        return self

    def __next__(self) -> T:
        if self._source.is_empty():
            raise StopIteration
        return self._source.pop_front()  # type: ignore[return-value]

    def next_back(self) -> T | None:
        """Remove and return the back element, or None when exhausted."""
        return self._source.pop_back()

    def __len__(self) -> int:
        return len(self._source)