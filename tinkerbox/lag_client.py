"""A client that sends timestamps to the lag server."""

from __future__ import annotations

import argparse
import socket
from collections.abc import Sequence

from tinkerbox.lag import Finish, Message, Micro, _split_addr, encode_message, now_millis

DEFAULT_ADDR = "127.0.0.1:33443"


def send_msg(addr: str, message: Message) -> None:
    """Open a connection to ``addr``, send ``message`` and close it."""
    with socket.create_connection(_split_addr(addr)) as stream:
        stream.sendall(encode_message(message).encode("utf-8"))


def gen_msg() -> Micro:
    """Return a message stamped with the current time."""
    return Micro(now_millis())


def main(argv: Sequence[str] | None = None) -> int:
    """Send a batch of timestamps followed by Finish."""
    parser = argparse.ArgumentParser(description="Send timestamps to a lag server.")
    parser.add_argument("addr", nargs="?", default=DEFAULT_ADDR, help="host:port of the server")
    parser.add_argument("--count", type=int, default=100, help="number of timestamps to send")
    args = parser.parse_args(argv)
    for _ in range(args.count):
        send_msg(args.addr, gen_msg())
    send_msg(args.addr, Finish())
    return 0


if __name__ == "__main__":
    raise SystemExit(main())