"""Byte-string keys for a storage engine."""

from __future__ import annotations

from functools import total_ordering


@total_ordering
class Key:
    """A mutable key made of raw bytes, ordered byte by byte."""

    __slots__ = ("_data",)

    def __init__(self, data: bytes | bytearray | memoryview = b"") -> None:
        if isinstance(data, str):
            raise TypeError("Key data must be bytes, not str")
        self._data = bytearray(data)

    def __len__(self) -> int:
        return len(self._data)

    def is_empty(self) -> bool:
        return not self._data

    def raw_ref(self) -> bytes:
        """Return the key's bytes."""
        return bytes(self._data)

    def clear(self) -> None:
        self._data.clear()

    def append(self, data: bytes | bytearray | memoryview) -> None:
        """Add ``data`` to the end of the key."""
        if isinstance(data, str):
            raise TypeError("Key data must be bytes, not str")
        self._data.extend(data)

    def set_from(self, other: Key) -> None:
        """Make this key hold the same bytes as ``other``."""
        self._data[:] = other._data

    def copy(self) -> Key:
        return Key(self._data)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Key):
            return NotImplemented
        return self._data == other._data

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, Key):
            return NotImplemented
        return self._data < other._data

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return f"Key({bytes(self._data)!r})"