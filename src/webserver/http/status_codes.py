"""
=============================================================================
HTTP STATUS CODES
=============================================================================

The server only ever answers with two statuses:

    200 OK          The root page, or a file that exists
    404 NOT FOUND   Anything else

The reason phrase for 404 is written in capitals on the status line
(HTTP/1.1 404 NOT FOUND). Per RFC 7230 reason phrases are informational
only, so clients key off the number.

=============================================================================
"""

from enum import IntEnum


class HTTPStatus(IntEnum):
    """
    HTTP status codes used by the server.

        >>> HTTPStatus.OK == 200
        True
        >>> HTTPStatus.NOT_FOUND.phrase
        'NOT FOUND'
    """

    OK = 200
    NOT_FOUND = 404

    @property
    def phrase(self) -> str:
        """
        Reason phrase written after the code on the status line.

            HTTP/1.1 404 NOT FOUND
                     ─── ─────────
                      │   │
                      │   └── Reason phrase
                      └────── Status code
        """
        return _STATUS_PHRASES[self]


_STATUS_PHRASES = {
    HTTPStatus.OK: "OK",
    HTTPStatus.NOT_FOUND: "NOT FOUND",
}
