"""
=============================================================================
HTTP PROTOCOL COMPONENTS
=============================================================================

The protocol side of the server, one module per step of a response:

    request.py       Extract the resource path from the request line
    resolver.py      Map the path to a file, decide status and type
    response.py      Write the status line and header block
    mime_types.py    Fixed extension → Content-Type table
    status_codes.py  200 OK / 404 NOT FOUND

The body itself is written by webserver.handlers.static.

=============================================================================
"""

from .request import (
    HTTPRequest,
    HTTPParseError,
    EmptyRequestError,
    MalformedRequestError,
    parse_request,
    parse_request_path,
)
from .resolver import Resolution, ResourceResolver
from .response import HeaderWriter, build_header_block, format_http_date
from .status_codes import HTTPStatus
from .mime_types import get_content_type, is_binary_type

__all__ = [
    # Request reading
    "HTTPRequest",
    "HTTPParseError",
    "EmptyRequestError",
    "MalformedRequestError",
    "parse_request",
    "parse_request_path",

    # Resolution
    "Resolution",
    "ResourceResolver",

    # Headers
    "HeaderWriter",
    "build_header_block",
    "format_http_date",

    # Status codes
    "HTTPStatus",

    # Content types
    "get_content_type",
    "is_binary_type",
]
