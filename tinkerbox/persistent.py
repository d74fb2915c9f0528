"""An immutable singly linked list that shares its tails."""

from __future__ import annotations

from collections.abc import Iterator
from typing import Any, Generic, NamedTuple, TypeVar

T = TypeVar("T")


class _Node(NamedTuple):
    elem: Any
    next: "_Node | None"


class PersistentList(Generic[T]):
    """A list whose operations return new lists and never change old ones."""

    __slots__ = ("_head",)

    def __init__(self) -> None:
        self._head: _Node | None = None

    @classmethod
    def _from_node(cls, node: _Node | None) -> PersistentList[T]:
        lst = cls()
        lst._head = node
        return lst

    def prepend(self, elem: T) -> PersistentList[T]:
        """Return a new list with ``elem`` in front of this one."""
        return self._from_node(_Node(elem, self._head))

    def tail(self) -> PersistentList[T]:
        """Return the list without its first element (empty stays empty)."""
        return self._from_node(self._head.next if self._head else None)

    def head(self) -> T | None:
        """Return the first element, or None when empty."""
        return self._head.elem if self._head else None

    def __iter__(self) -> Iterator[T]:
        node = self._head
        while node is not None:
            yield node.elem
            node = node.next