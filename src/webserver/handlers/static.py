"""
=============================================================================
RESPONSE BODY WRITER
=============================================================================

Writes the body of a response once the header block is out.

=============================================================================
FOUR KINDS OF BODY
=============================================================================

The first matching branch wins:

    ┌─────────────────────────────────────────────────────────────────────┐
    │                    BODY SELECTION                                   │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   1. status not OK      → fixed "404 NOT FOUND" page                │
    │                           (whatever was asked for)                  │
    │                                                                      │
    │   2. binary type        → the file's bytes, untouched               │
    │      (.gif .png .jpg)     read and sent in chunks                   │
    │                                                                      │
    │   3. root page ("")     → fixed "My web server works!" page         │
    │                                                                      │
    │   4. text file          → the file, line by line, with              │
    │                           <cs371date> and <cs371server> replaced    │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
BINARY VS TEXT
=============================================================================

Images MUST bypass the text path. Reading a PNG "line by line" and
re-encoding each line would split on arbitrary 0x0A bytes and can
change bytes that are not valid UTF-8. Binary files are opened in "rb"
mode and copied chunk by chunk, so the client gets exactly the bytes
on disk.

Text files are read with newline="" so each line keeps the terminator it
had in the file ("\n", "\r\n", or none at all on a last line). What goes
over the wire is the file with only the tokens changed. Undecodable
bytes survive the round trip through the surrogateescape error handler.

=============================================================================
"""

import logging
from pathlib import Path

from ..http.resolver import Resolution
from ..http.response import Writable
from .template import substitute, template_tokens


logger = logging.getLogger(__name__)


NOT_FOUND_PAGE = (
    b"<html><head></head><body>\n"
    b"<h3>404 NOT FOUND</h3>\n"
    b"</body></html>\n"
)

WELCOME_PAGE = (
    b"<html><head></head><body>\n"
    b"<h3>My web server works!</h3>\n"
    b"</body></html>\n"
)


class BodyWriter:
    """
    Writes response bodies for resolved resources.

    Usage:
        writer = BodyWriter(template_server="SimpleWebServer")
        writer.write(conn, resolver.resolve("index.html"))

    File errors are not caught here. If a file vanishes between the
    resolver's check and the read, the OSError reaches the worker, which
    abandons the connection with the body cut short.
    """

    def __init__(self, template_server: str, chunk_size: int = 8192):
        """
        Args:
            template_server: Replacement for the <cs371server> token.
            chunk_size: Bytes per read when copying binary files.
        """
        self.template_server = template_server
        self.chunk_size = chunk_size

    def write(self, conn: Writable, resolution: Resolution) -> None:
        """
        Send the body for a resolution.

        Raises:
            OSError: If the file cannot be read or the client went away.
        """
        if not resolution.status_ok:
            conn.send(NOT_FOUND_PAGE)
        elif resolution.is_binary:
            self._send_binary(conn, resolution.file_path)
        elif resolution.is_root:
            conn.send(WELCOME_PAGE)
        else:
            self._send_template(conn, resolution.file_path)

    def _send_binary(self, conn: Writable, path: Path) -> None:
        """Copy a file to the connection byte for byte."""
        logger.debug(f"Sending binary file {path}")
        with open(path, "rb") as f:
            while True:
                chunk = f.read(self.chunk_size)
                if not chunk:
                    break
                conn.send(chunk)

    def _send_template(self, conn: Writable, path: Path) -> None:
        """Send a text file with template tokens substituted on every line."""
        # One token mapping per response, so the date is current
        tokens = template_tokens(self.template_server)

        with open(path, "r", encoding="utf-8", errors="surrogateescape", newline="") as f:
            for line in f:
                line = substitute(line, tokens)
                conn.send(line.encode("utf-8", errors="surrogateescape"))
