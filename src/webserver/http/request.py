"""
=============================================================================
HTTP REQUEST READING
=============================================================================

The server reads the whole request header block but only interprets the
first line, the request line:

    ┌─────────────────────────────────────────────────────────────────┐
    │  GET /images/photo.gif HTTP/1.1\r\n      ← request line         │
    │      └────────────────┘                                         │
    │       resource path = "images/photo.gif"                        │
    ├─────────────────────────────────────────────────────────────────┤
    │  Host: localhost:8080\r\n                ← read, ignored        │
    │  User-Agent: curl/8.5.0\r\n              ← read, ignored        │
    │  \r\n                                    ← end of header block  │
    └─────────────────────────────────────────────────────────────────┘

=============================================================================
PATH EXTRACTION
=============================================================================

    1. Find the first '/' and drop everything before it
       "GET /images/photo.gif HTTP/1.1"  →  "/images/photo.gif HTTP/1.1"

    2. Cut at the first space after it
       "/images/photo.gif HTTP/1.1"      →  "/images/photo.gif"

    3. Drop the leading '/'
       "/images/photo.gif"               →  "images/photo.gif"

"GET / HTTP/1.1" yields the empty path, which means the root page.

The method and version are never looked at, and the query string is
not split off: "GET /a.html?x=1 HTTP/1.1" asks for the file "a.html?x=1".

=============================================================================
"""

from dataclasses import dataclass, field


class HTTPParseError(Exception):
    """Raised when no usable request could be read from a connection."""


class EmptyRequestError(HTTPParseError):
    """The client connected and sent nothing before closing."""


class MalformedRequestError(HTTPParseError):
    """The request line has no resource path in it."""


@dataclass
class HTTPRequest:
    """
    A request as far as this server cares about it.

    Attributes:
        request_line: The first line, as sent (without CRLF).
        path: The resource path; empty string for the root page.
        lines: Every header line read, request line and terminator included.
    """

    request_line: str
    path: str
    lines: list[str] = field(default_factory=list, repr=False)

    @property
    def is_root(self) -> bool:
        return self.path == ""


def parse_request_path(request_line: str) -> str:
    """
    Extract the resource path from a request line.

    Args:
        request_line: e.g. "GET /index.html HTTP/1.1"

    Returns:
        The path without its leading '/', e.g. "index.html".

    Raises:
        MalformedRequestError: If there is no '/' in the line, or no
            space after the path.

    Examples:
        >>> parse_request_path("GET /index.html HTTP/1.1")
        'index.html'
        >>> parse_request_path("GET / HTTP/1.1")
        ''
    """
    slash = request_line.find("/")
    if slash == -1:
        raise MalformedRequestError(f"No path in request line: {request_line!r}")

    target = request_line[slash:]

    space = target.find(" ")
    if space == -1:
        raise MalformedRequestError(f"Unterminated path in request line: {request_line!r}")

    return target[1:space]


def parse_request(lines: list[str]) -> HTTPRequest:
    """
    Build an HTTPRequest from the header lines read off a connection.

    Raises:
        EmptyRequestError: If no lines were read at all.
        MalformedRequestError: If the first line carries no path.
    """
    if not lines:
        raise EmptyRequestError("No request received")

    request_line = lines[0]
    return HTTPRequest(
        request_line=request_line,
        path=parse_request_path(request_line),
        lines=lines,
    )

