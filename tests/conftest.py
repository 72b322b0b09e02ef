"""
pytest configuration and fixtures.
"""

import socket
import threading
from typing import Generator
import pytest

# Add src to path for imports
import sys
from pathlib import Path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from webserver import WebServer, ServerConfig
from webserver.core.connection import Connection
from webserver.http.resolver import ResourceResolver


# Ten bytes, including the line-ending bytes a text read would mangle
GIF_BYTES = b"GIF89a\x00\n\r\xff"

# Not valid UTF-8, with CRLF and lone LF bytes in it
PNG_BYTES = b"\x89PNG\r\n\x1a\n\x00\x00\x00\rIHDR\xff\xfe\n\x80\x81"

INDEX_HTML = (
    "<html><body>\n"
    "<p>Today is <cs371date>.</p>\n"
    "<p>Served by <cs371server>, yes <cs371server>.</p>\n"
    "<p>Nothing to replace here.</p>\n"
    "</body></html>"
)


@pytest.fixture
def document_root(tmp_path: Path) -> Path:
    """
    A document root with one file of each kind.

    Lives in tmp_path/www so tests can place files outside the root.
    """
    root = tmp_path / "www"
    root.mkdir()

    (root / "index.html").write_text(INDEX_HTML, encoding="utf-8")
    (root / "plain.html").write_text("<p>plain</p>\n", encoding="utf-8")
    (root / "notes.txt").write_text("just notes\n", encoding="utf-8")
    (root / "README").write_text("no extension\n", encoding="utf-8")
    (root / "photo.gif").write_bytes(GIF_BYTES)
    (root / "logo.png").write_bytes(PNG_BYTES)
    (root / "pic.jpg").write_bytes(b"\xff\xd8\xff\xe0\x00\x10JFIF\x00")
    (root / "SHOUT.GIF").write_bytes(GIF_BYTES)

    (root / "sub").mkdir()
    (root / "sub" / "page.html").write_text("<p>in sub</p>\n", encoding="utf-8")

    (tmp_path / "secret.txt").write_text("outside the root\n", encoding="utf-8")

    return root


@pytest.fixture
def resolver(document_root: Path) -> ResourceResolver:
    """Resolver confined to the test document root."""
    return ResourceResolver(document_root)


class RecordingConnection:
    """Stands in for a Connection; keeps every chunk sent."""

    def __init__(self):
        self.chunks: list[bytes] = []

    def send(self, data: bytes) -> None:
        self.chunks.append(data)

    @property
    def data(self) -> bytes:
        return b"".join(self.chunks)


@pytest.fixture
def recorder() -> RecordingConnection:
    return RecordingConnection()


@pytest.fixture
def connection_pair() -> Generator[tuple[Connection, socket.socket], None, None]:
    """
    A Connection on one end of a socket pair, the raw client socket on
    the other.
    """
    server_sock, client_sock = socket.socketpair()
    conn = Connection(
        socket=server_sock,
        address=("127.0.0.1", 54321),
        timeout=2.0,
    )
    client_sock.settimeout(5.0)

    yield conn, client_sock

    conn.close()
    client_sock.close()


def send_request(client: socket.socket, data: bytes) -> None:
    """Send a request and signal that nothing more will follow."""
    client.sendall(data)
    client.shutdown(socket.SHUT_WR)


def read_all(client: socket.socket) -> bytes:
    """Read until the server closes the connection."""
    chunks = []
    while True:
        chunk = client.recv(65536)
        if not chunk:
            break
        chunks.append(chunk)
    return b"".join(chunks)


def split_response(raw: bytes) -> tuple[str, dict[str, str], bytes]:
    """Split a raw response into status line, headers and body."""
    head, _, body = raw.partition(b"\r\n\r\n")
    lines = head.decode("latin-1").split("\r\n")
    headers = {}
    for line in lines[1:]:
        name, _, value = line.partition(": ")
        headers[name] = value
    return lines[0], headers, body


def http_request(address: tuple[str, int], raw: bytes) -> bytes:
    """Open a TCP connection, send raw bytes, return the full response."""
    with socket.create_connection(address, timeout=5.0) as sock:
        sock.sendall(raw)
        return read_all(sock)


def http_get(address: tuple[str, int], path: str) -> bytes:
    """Send a GET for path and return the full response."""
    return http_request(
        address,
        f"GET {path} HTTP/1.1\r\nHost: localhost\r\nUser-Agent: pytest\r\n\r\n".encode(),
    )


@pytest.fixture
def test_server(document_root: Path) -> Generator[WebServer, None, None]:
    """A WebServer on a free port, running in a background thread."""
    server = WebServer(ServerConfig(
        host="127.0.0.1",
        port=0,  # Let OS pick a free port
        timeout=2.0,
        document_root=str(document_root),
        server_name="TestServer/0.1",
        template_server="Test Server",
        log_level="WARNING",
    ))

    thread = threading.Thread(target=server.run, daemon=True)
    thread.start()

    if not server.wait_until_ready(timeout=5.0):
        raise RuntimeError("Server failed to start")

    yield server

    server.shutdown()
    thread.join(timeout=5.0)
