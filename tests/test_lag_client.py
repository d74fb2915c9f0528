import socket
import threading

import pytest

from tinkerbox.lag import Finish, Micro, decode_message, encode_message, now_millis
from tinkerbox.lag_client import gen_msg, main, send_msg
from tinkerbox.lag_server import LagServer


def _capture_one():
    listener = socket.create_server(("127.0.0.1", 0))
    received = []

    def accept():
        conn, _ = listener.accept()
        with conn:
            chunks = []
            while True:
                data = conn.recv(1024)
                if not data:
                    break
                chunks.append(data)
            received.append(b"".join(chunks))
        listener.close()

    thread = threading.Thread(target=accept, daemon=True)
    thread.start()
    host, port = listener.getsockname()[:2]
    return f"{host}:{port}", thread, received


def test_send_msg_writes_encoded_finish():
    addr, thread, received = _capture_one()
    send_msg(addr, Finish())
    thread.join(5)
    assert received == [b"Finish"]
    assert received == [encode_message(Finish()).encode()]
    assert isinstance(decode_message(received[0].decode()), Finish)


def test_send_msg_round_trips_micro():
    addr, thread, received = _capture_one()
    message = Micro(now_millis())
    send_msg(addr, message)
    thread.join(5)
    assert decode_message(received[0].decode()) == message
    assert received[0] == encode_message(message).encode()


def test_gen_msg_uses_current_time():
    before = now_millis()
    message = gen_msg()
    after = now_millis()
    assert before <= message.value <= after


def test_send_msg_rejects_bad_address():
    with pytest.raises(ValueError):
        send_msg("localhost", Finish())


def test_main_sends_count_then_finish():
    server = LagServer("127.0.0.1:0")
    thread = threading.Thread(target=server.start, daemon=True)
    thread.start()
    assert server.listening.wait(5)
    host, port = server.address
    assert main([f"{host}:{port}", "--count", "3"]) == 0
    thread.join(5)
    assert not thread.is_alive()
    assert server.finish is True
    assert len(server.calculator.lags) == 3