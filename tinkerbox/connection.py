"""Reading and writing protocol frames over an asyncio stream."""

from __future__ import annotations

import asyncio

from tinkerbox.frame import Frame, Incomplete, check, encode, parse

_READ_SIZE = 4 * 1024


class ConnectionResetError_(ConnectionError):
    """The peer closed the connection in the middle of a frame."""


class Connection:
    """Sends and receives frames on a stream, buffering partial reads."""

    def __init__(self, reader: asyncio.StreamReader, writer: asyncio.StreamWriter) -> None:
        self._reader = reader
        self._writer = writer
        self._buffer = bytearray()

    async def read_frame(self) -> Frame | None:
        """Return the next frame, or None when the peer closed the stream cleanly."""
        while True:
            frame = self._parse_frame()
            if frame is not None:
                return frame
            chunk = await self._reader.read(_READ_SIZE)
            if not chunk:
                if not self._buffer:
                    return None
                raise ConnectionResetError_("connection reset by peer")
            self._buffer += chunk

    def _parse_frame(self) -> Frame | None:
        try:
            length = check(self._buffer)
        except Incomplete:
            return None
        frame = parse(self._buffer)
        del self._buffer[:length]
        return frame

    async def write_frame(self, frame: Frame) -> None:
        """Encode ``frame`` and flush it to the stream."""
        self._writer.write(encode(frame))
        await self._writer.drain()