"""
Unit tests for the accept loop.
"""

import socket
import threading

import pytest

from webserver.config import ServerConfig
from webserver.core.connection import Connection
from webserver.core.socket_server import SocketServer


@pytest.fixture
def socket_server():
    server = SocketServer(ServerConfig(host="127.0.0.1", port=0, timeout=2.0))
    yield server
    server.shutdown()


def start_in_background(server: SocketServer, handler) -> threading.Thread:
    thread = threading.Thread(target=server.start, args=(handler,), daemon=True)
    thread.start()
    assert server.wait_until_ready(timeout=5.0)
    return thread


def test_hands_each_connection_to_handler(socket_server):
    received: list[Connection] = []
    done = threading.Event()

    def handler(conn: Connection):
        received.append(conn)
        conn.close()
        done.set()

    start_in_background(socket_server, handler)

    with socket.create_connection(socket_server.address, timeout=5.0):
        assert done.wait(timeout=5.0)

    assert received[0].timeout == 2.0
    assert received[0].client_ip == "127.0.0.1"


def test_failing_handler_does_not_stop_loop(socket_server):
    calls = []
    second = threading.Event()

    def handler(conn: Connection):
        calls.append(conn.id)
        if len(calls) == 1:
            raise RuntimeError("cannot start worker")
        conn.close()
        second.set()

    start_in_background(socket_server, handler)

    with socket.create_connection(socket_server.address, timeout=5.0) as first:
        # The loop closes the connection it could not dispatch
        first.settimeout(5.0)
        assert first.recv(1) == b""

    with socket.create_connection(socket_server.address, timeout=5.0):
        assert second.wait(timeout=5.0)


def test_shutdown_stops_loop(socket_server):
    thread = start_in_background(socket_server, lambda conn: conn.close())

    socket_server.shutdown()
    thread.join(timeout=5.0)

    assert not thread.is_alive()
    assert not socket_server.is_running
