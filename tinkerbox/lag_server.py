"""A server that receives timestamps and reports their average lag."""

from __future__ import annotations

import argparse
import socket
import threading
from collections.abc import Sequence

from tinkerbox.lag import Calculator, Finish, Micro, _split_addr, decode_message

DEFAULT_ADDR = "127.0.0.1:33443"


class LagServer:
    """Accepts one message per connection until a Finish message arrives."""

    def __init__(self, addr: str = DEFAULT_ADDR) -> None:
        self.addr = addr
        self.finish = False
        self.calculator = Calculator()
        self.address: tuple[str, int] | None = None
        self.listening = threading.Event()

    def start(self) -> None:
        """Listen on the address and handle connections until finished."""
        host, port = _split_addr(self.addr)
        with socket.create_server((host, port)) as listener:
            self.address = listener.getsockname()[:2]
            self.listening.set()
            while True:
                conn, _ = listener.accept()
                with conn:
                    self.handle_connection(conn)
                if self.finish:
                    print(self.calculator.report())
                    break

    def handle_connection(self, stream: socket.socket) -> None:
        """Read one message from ``stream`` (up to an empty line or EOF) and record it."""
        content = bytearray()
        with stream.makefile("rb") as reader:
            for raw in reader:
                line = raw.rstrip(b"\n")
                if line.endswith(b"\r"):
                    line = line[:-1]
                if not line:
                    break
                content += line
        message = decode_message(content.decode("utf-8"))
        if isinstance(message, Micro):
            self.calculator.add_msg(message.value)
        elif isinstance(message, Finish):
            self.finish = True


def main(argv: Sequence[str] | None = None) -> int:
    """Run the lag server until a client sends Finish."""
    parser = argparse.ArgumentParser(description="Measure the lag of received timestamps.")
    parser.add_argument("addr", nargs="?", default=DEFAULT_ADDR, help="host:port to listen on")
    args = parser.parse_args(argv)
    LagServer(args.addr).start()
    print("server shutdown")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())