"""
=============================================================================
HTTP RESPONSE HEADERS
=============================================================================

Every response starts with the same fixed header block. Only two things
ever vary: the status line and the Content-Type value.

    ┌─────────────────────────────────────────────────────────────────┐
    │  HTTP/1.1 200 OK\r\n                     ← or 404 NOT FOUND     │
    │  Date: Mon, 19 Oct 2026 14:03:11 GMT\r\n ← time of writing      │
    │  Server: SimpleWebServer/1.0\r\n         ← fixed per server     │
    │  Connection: close\r\n                   ← always, no keep-alive│
    │  Content-Type: text/html\r\n             ← from the resolver    │
    │  \r\n                                    ← end of headers       │
    ├─────────────────────────────────────────────────────────────────┤
    │  body ...                                                        │
    └─────────────────────────────────────────────────────────────────┘

=============================================================================
WHY NO CONTENT-LENGTH?
=============================================================================

The body is streamed as it is produced (templated text is rewritten line
by line while it is sent), so its length is not known up front. Instead
every response carries "Connection: close" and the server closes the
socket after the body. The client reads until EOF.

=============================================================================
"""

from datetime import datetime, timezone
from typing import Optional, Protocol

from .status_codes import HTTPStatus


class Writable(Protocol):
    """Anything the writers can send bytes to (normally a Connection)."""

    def send(self, data: bytes) -> None: ...


def format_http_date(dt: datetime) -> str:
    """
    Format a datetime as an HTTP-date (RFC 7231).

    Format: Day, DD Mon YYYY HH:MM:SS GMT
    Example: Mon, 19 Oct 2026 14:03:11 GMT

    HTTP dates are ALWAYS in GMT, never local time. Aware datetimes are
    converted; naive ones are taken to be UTC already.
    """
    if dt.tzinfo is not None:
        dt = dt.astimezone(timezone.utc)

    # Weekday names (0=Monday in Python's datetime)
    days = ["Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun"]

    # Month names (1-indexed, so we subtract 1)
    months = ["Jan", "Feb", "Mar", "Apr", "May", "Jun",
              "Jul", "Aug", "Sep", "Oct", "Nov", "Dec"]

    return (
        f"{days[dt.weekday()]}, "
        f"{dt.day:02d} {months[dt.month - 1]} {dt.year} "
        f"{dt.hour:02d}:{dt.minute:02d}:{dt.second:02d} GMT"
    )


def status_line(status_ok: bool) -> str:
    """
    Build the status line.

        >>> status_line(True)
        'HTTP/1.1 200 OK'
        >>> status_line(False)
        'HTTP/1.1 404 NOT FOUND'
    """
    status = HTTPStatus.OK if status_ok else HTTPStatus.NOT_FOUND
    return f"HTTP/1.1 {status.value} {status.phrase}"


def build_header_block(
    content_type: str,
    status_ok: bool,
    server_name: str,
    now: Optional[datetime] = None,
) -> bytes:
    """
    Build the complete header block, blank line included.

    Args:
        content_type: Value for the Content-Type header.
        status_ok: 200 if True, 404 otherwise.
        server_name: Value for the Server header.
        now: Time for the Date header (defaults to the current time).

    Returns:
        The header block as bytes, ready to send.
    """
    if now is None:
        now = datetime.now(timezone.utc)

    lines = [
        status_line(status_ok),
        f"Date: {format_http_date(now)}",
        f"Server: {server_name}",
        "Connection: close",
        f"Content-Type: {content_type}",
    ]

    # Headers end with an empty line (two CRLFs in a row)
    return ("\r\n".join(lines) + "\r\n\r\n").encode("latin-1")


class HeaderWriter:
    """
    Writes the status line and response headers to a connection.

    Usage:
        writer = HeaderWriter("SimpleWebServer/1.0")
        writer.write(conn, "image/gif", status_ok=True)
    """

    def __init__(self, server_name: str):
        self.server_name = server_name

    def write(self, conn: Writable, content_type: str, status_ok: bool) -> None:
        """
        Send the header block in one write.

        Raises:
            OSError: If the client has gone away.
        """
        conn.send(build_header_block(content_type, status_ok, self.server_name))
