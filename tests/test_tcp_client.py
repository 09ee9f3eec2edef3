import socket
import threading

import pytest

from gorplay.tcp_client import TCPClient, TCPClientConfig


@pytest.fixture
def server():
    started = []

    def start(handler):
        listener = socket.socket()
        listener.bind(("127.0.0.1", 0))
        listener.listen(16)
        state = {"connections": 0}

        def accept_loop():
            while True:
                try:
                    conn, _ = listener.accept()
                except OSError:
                    return
                state["connections"] += 1
                threading.Thread(target=handler, args=(conn,), daemon=True).start()

        threading.Thread(target=accept_loop, daemon=True).start()
        started.append(listener)
        return "127.0.0.1:%d" % listener.getsockname()[1], state

    yield start
    for listener in started:
        listener.close()


def _reply(make_response):
    def handler(conn):
        with conn:
            request = conn.recv(65536)
            conn.sendall(make_response(request))
    return handler


def test_defaults_applied():
    config = TCPClientConfig()
    client = TCPClient("127.0.0.1:1", config)
    assert client.config.timeout == 5.0
    assert client.config.connection_timeout == 5.0
    assert client.config.response_buffer_size == 100 * 1024


def test_connection_timeout_follows_timeout():
    client = TCPClient("127.0.0.1:1", TCPClientConfig(timeout=2.5, connection_timeout=9.0))
    assert client.config.connection_timeout == client.config.timeout == 2.5


def test_send_echo_round_trip(server):
    address, _ = server(_reply(lambda req: req))
    client = TCPClient(address, TCPClientConfig(timeout=2.0))
    request = b"GET / HTTP/1.1\r\nHost: example.com\r\n\r\n"
    assert client.send(request) == request


def test_response_truncated_to_buffer(server):
    address, _ = server(_reply(lambda req: b"abcdefgh"))
    client = TCPClient(address, TCPClientConfig(timeout=2.0, response_buffer_size=4))
    assert client.send(b"x") == b"abcd"


def test_reconnects_after_peer_closed(server):
    address, state = server(_reply(lambda req: req))
    client = TCPClient(address, TCPClientConfig(timeout=2.0))
    assert client.send(b"first") == b"first"
    assert client.send(b"second") == b"second"
    assert state["connections"] == 2


def test_send_after_disconnect(server):
    address, state = server(_reply(lambda req: req))
    client = TCPClient(address, TCPClientConfig(timeout=2.0))
    client.connect()
    client.disconnect()
    assert client.send(b"again") == b"again"
    assert state["connections"] == 2


def test_connection_refused_raises():
    probe = socket.socket()
    probe.bind(("127.0.0.1", 0))
    port = probe.getsockname()[1]
    probe.close()
    client = TCPClient("127.0.0.1:%d" % port, TCPClientConfig(timeout=1.0))
    with pytest.raises(OSError):
        client.send(b"data")


def test_read_timeout_raises(server):
    release = threading.Event()

    def hold(conn):
        with conn:
            conn.recv(65536)
            release.wait(5)

    address, _ = server(hold)
    client = TCPClient(address, TCPClientConfig(timeout=0.2))
    try:
        with pytest.raises(TimeoutError):
            client.send(b"ping")
    finally:
        release.set()
        client.disconnect()