"""Frames of the Redis serialization protocol: validation, parsing and encoding."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Union

DEFAULT_PORT = 6379

_U64_LIMIT = 1 << 64
_INVALID_FORMAT = "protocol error; invalid frame format"


class ProtocolError(Exception):
    """The bytes received do not form a valid frame."""


class Incomplete(ProtocolError):
    """Not enough data is available yet to read a whole frame."""

    def __init__(self, message: str = "stream ended early") -> None:
        super().__init__(message)


@dataclass(frozen=True, eq=False)
class Simple:
    """A simple string reply such as ``OK``."""

    text: str

    def __eq__(self, other: object) -> bool:
        if isinstance(other, str):
            return self.text == other
        if isinstance(other, Simple):
            return self.text == other.text
        return NotImplemented

    def __hash__(self) -> int:
        return hash((Simple, self.text))

    def __str__(self) -> str:
        return self.text


@dataclass(frozen=True)
class ErrorReply:
    """An error reply."""

    message: str

    def __str__(self) -> str:
        return f"error: {self.message}"


@dataclass(frozen=True)
class Integer:
    """An unsigned 64-bit integer reply."""

    value: int

    def __post_init__(self) -> None:
        if not 0 <= self.value < _U64_LIMIT:
            raise ValueError(f"integer frame out of range: {self.value}")

    def __str__(self) -> str:
        return str(self.value)


@dataclass(frozen=True, eq=False)
class Bulk:
    """A binary-safe bulk string."""

    data: bytes

    def __post_init__(self) -> None:
        if isinstance(self.data, str):
            raise TypeError("bulk data must be bytes, not str")
        object.__setattr__(self, "data", bytes(self.data))

    def __eq__(self, other: object) -> bool:
        if isinstance(other, str):
            return self.data == other.encode()
        if isinstance(other, Bulk):
            return self.data == other.data
        return NotImplemented

    def __hash__(self) -> int:
        return hash((Bulk, self.data))

    def __str__(self) -> str:
        try:
            return self.data.decode("utf-8")
        except UnicodeDecodeError:
            return repr(self.data)


@dataclass(frozen=True)
class Null:
    """The null bulk string."""

    def __str__(self) -> str:
        return "(nil)"


@dataclass
class Array:
    """An ordered collection of frames."""

    items: list[Frame] = field(default_factory=list)

    def push_bulk(self, data: bytes) -> None:
        """Append a bulk string entry."""
        self.items.append(Bulk(data))

    def push_int(self, value: int) -> None:
        """Append an integer entry."""
        self.items.append(Integer(value))

    def __str__(self) -> str:
        return " ".join(str(item) for item in self.items)


Frame = Union[Simple, ErrorReply, Integer, Bulk, Null, Array]


class _Cursor:
    __slots__ = ("data", "pos")

    def __init__(self, data: bytes | bytearray | memoryview) -> None:
        self.data = bytes(data)
        self.pos = 0

    def remaining(self) -> int:
        return len(self.data) - self.pos

    def peek_u8(self) -> int:
        if self.remaining() <= 0:
            raise Incomplete()
        return self.data[self.pos]

    def get_u8(self) -> int:
        byte = self.peek_u8()
        self.pos += 1
        return byte

    def skip(self, n: int) -> None:
        if self.remaining() < n:
            raise Incomplete()
        self.pos += n

    def get_line(self) -> bytes:
        end = self.data.find(b"\r\n", self.pos)
        if end < 0:
            raise Incomplete()
        line = self.data[self.pos : end]
        self.pos = end + 2
        return line

    def get_decimal(self) -> int:
        line = self.get_line()
        if line.startswith(b"+"):
            line = line[1:]
        digits = bytearray()
        for byte in line:
            if not 0x30 <= byte <= 0x39:
                break
            digits.append(byte)
        if not digits:
            raise ProtocolError(_INVALID_FORMAT)
        value = int(digits)
        if value >= _U64_LIMIT:
            raise ProtocolError(_INVALID_FORMAT)
        return value


def _check(cur: _Cursor) -> None:
    kind = cur.get_u8()
    if kind in (ord("+"), ord("-")):
        cur.get_line()
    elif kind == ord(":"):
        cur.get_decimal()
    elif kind == ord("$"):
        if cur.peek_u8() == ord("-"):
            cur.skip(4)
        else:
            cur.skip(cur.get_decimal() + 2)
    elif kind == ord("*"):
        for _ in range(cur.get_decimal()):
            _check(cur)
    else:
        raise ProtocolError(f"protocol error; invalid frame type byte `{kind}`")


def _decode_line(line: bytes) -> str:
    try:
        return line.decode("utf-8")
    except UnicodeDecodeError:
        raise ProtocolError(_INVALID_FORMAT) from None


def _parse(cur: _Cursor) -> Frame:
    kind = cur.get_u8()
    if kind == ord("+"):
        return Simple(_decode_line(cur.get_line()))
    if kind == ord("-"):
        return ErrorReply(_decode_line(cur.get_line()))
    if kind == ord(":"):
        return Integer(cur.get_decimal())
    if kind == ord("$"):
        if cur.peek_u8() == ord("-"):
            if cur.get_line() != b"-1":
                raise ProtocolError(_INVALID_FORMAT)
            return Null()
        length = cur.get_decimal()
        if cur.remaining() < length + 2:
            raise Incomplete()
        data = cur.data[cur.pos : cur.pos + length]
        cur.skip(length + 2)
        return Bulk(data)
    if kind == ord("*"):
        return Array([_parse(cur) for _ in range(cur.get_decimal())])
    raise ProtocolError(f"protocol error; invalid frame type byte `{kind}`")


def check(data: bytes | bytearray | memoryview) -> int:
    """Verify that ``data`` starts with a whole frame and return its length in bytes.

    Raises Incomplete when more data is needed, ProtocolError when it is malformed.
    """
    cur = _Cursor(data)
    _check(cur)
    return cur.pos


def parse(data: bytes | bytearray | memoryview) -> Frame:
    """Parse the frame at the start of ``data``."""
    return _parse(_Cursor(data))


def _encode_decimal(value: int) -> bytes:
    return str(value).encode("ascii") + b"\r\n"


def _encode_value(frame: Frame) -> bytes:
    if isinstance(frame, Simple):
        return b"+" + frame.text.encode("utf-8") + b"\r\n"
    if isinstance(frame, ErrorReply):
        return b"-" + frame.message.encode("utf-8") + b"\r\n"
    if isinstance(frame, Integer):
        return b":" + _encode_decimal(frame.value)
    if isinstance(frame, Null):
        return b"$-1\r\n"
    if isinstance(frame, Bulk):
        return b"$" + _encode_decimal(len(frame.data)) + frame.data + b"\r\n"
    if isinstance(frame, Array):
        raise ValueError("nested arrays cannot be encoded")
    raise TypeError(f"not a frame: {frame!r}")


def encode(frame: Frame) -> bytes:
    """Return the wire bytes of ``frame``; arrays may not contain arrays."""
    if isinstance(frame, Array):
        parts = [b"*", _encode_decimal(len(frame.items))]
        parts.extend(_encode_value(entry) for entry in frame.items)
        return b"".join(parts)
    return _encode_value(frame)