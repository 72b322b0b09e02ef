"""
=============================================================================
CONNECTION WORKER
=============================================================================

A WebWorker handles exactly one accepted connection, start to finish.
It runs in its own thread, owns its connection, and shares nothing
mutable with any other worker, so there is no locking anywhere here.

=============================================================================
ONE CONNECTION, FOUR STEPS
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │                    WebWorker.run()                                  │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   1. READ       conn.read_header_lines() → parse_request()          │
    │                 "GET /photo.gif HTTP/1.1"  →  "photo.gif"           │
    │                                    │                                 │
    │                                    ▼        state: REQUEST_READ     │
    │   2. RESOLVE    resolver.resolve("photo.gif")                       │
    │                 exists=True, image/gif, 200                         │
    │                                    │                                 │
    │                                    ▼        state: RESOLVED         │
    │   3. HEADERS    HTTP/1.1 200 OK, Date, Server,                      │
    │                 Connection: close, Content-Type                     │
    │                                    │                                 │
    │                                    ▼        state: HEADER_SENT      │
    │   4. BODY       raw bytes of photo.gif                              │
    │                                    │                                 │
    │                                    ▼        state: BODY_SENT        │
    │   close()                                   state: CLOSED           │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

No step starts before the previous one finished: the whole request is
read before the first header byte goes out, and the whole header block
goes out before the first body byte.

=============================================================================
FAILURES STAY INSIDE THE CONNECTION
=============================================================================

    Failure                          Client sees          Logged at
    ───────────────────────────────  ───────────────────  ─────────
    sent nothing, closed             nothing              DEBUG
    request line without a path      full 404 response    WARNING
    header block too large           full 404 response    WARNING
    read timeout                     nothing              WARNING
    client gone / file unreadable    truncated response   WARNING
    anything unexpected              truncated response   ERROR + traceback

In every case the connection is closed (the "with conn:" block) and the
exception goes no further than run(). The accept loop never sees it.

=============================================================================
"""

import logging
from typing import Optional

from .access_log import AccessLog, AccessLogger, access_timestamp
from .core.connection import Connection, ConnectionState, RequestTooLargeError
from .handlers.static import BodyWriter
from .http.request import (
    HTTPRequest,
    EmptyRequestError,
    MalformedRequestError,
    parse_request,
)
from .http.resolver import Resolution, ResourceResolver
from .http.response import HeaderWriter


logger = logging.getLogger(__name__)


class WebWorker:
    """
    Handles a single HTTP request on a single connection.

    Usage:
        worker = WebWorker(conn, resolver, header_writer, body_writer)
        worker.run()   # returns once conn is closed

    run() never raises. It is meant to be the target of a thread.
    """

    def __init__(
        self,
        conn: Connection,
        resolver: ResourceResolver,
        header_writer: HeaderWriter,
        body_writer: BodyWriter,
        access_logger: Optional[AccessLogger] = None,
    ):
        """
        Args:
            conn: The accepted connection. The worker closes it.
            resolver: Maps resource paths to files.
            header_writer: Writes the header block.
            body_writer: Writes the body.
            access_logger: Receives one entry per connection, if given.
        """
        self.conn = conn
        self.resolver = resolver
        self.header_writer = header_writer
        self.body_writer = body_writer
        self.access_logger = access_logger

        # Per-connection results, kept for the access log
        self.request_line = "-"
        self.request: Optional[HTTPRequest] = None
        self.resolution: Optional[Resolution] = None
        self._responded = False

    def run(self) -> None:
        """Worker thread starting point."""
        conn = self.conn
        logger.debug(f"[{conn.id}] Handling connection from {conn.client_ip}")

        with conn:
            try:
                self._handle()

            except EmptyRequestError:
                logger.debug(f"[{conn.id}] No request received")

            except MalformedRequestError as e:
                logger.warning(f"[{conn.id}] Malformed request: {e}")
                self._send_not_found()

            except RequestTooLargeError as e:
                logger.warning(f"[{conn.id}] {e}")
                self._send_not_found()

            except TimeoutError as e:
                logger.warning(f"[{conn.id}] {e}")

            except OSError as e:
                # Client went away, or the file vanished after resolving
                logger.warning(f"[{conn.id}] I/O error in state {conn.state.value}: {e}")

            except Exception as e:
                logger.exception(f"[{conn.id}] Connection error: {e}")

        self._log_access()
        logger.debug(f"[{conn.id}] Done handling connection")

    # =========================================================================
    # THE FOUR STEPS
    # =========================================================================

    def _handle(self) -> None:
        conn = self.conn

        # 1. READ
        lines = conn.read_header_lines()
        if lines:
            self.request_line = lines[0]
        self.request = parse_request(lines)
        conn.state = ConnectionState.REQUEST_READ

        # 2. RESOLVE
        self.resolution = self.resolver.resolve(self.request.path)
        conn.state = ConnectionState.RESOLVED
        logger.debug(
            f"[{conn.id}] {self.request.path!r} → "
            f"{self.resolution.status.value} {self.resolution.content_type}"
        )

        # 3 + 4. HEADERS, BODY
        self._respond(self.resolution)

    def _respond(self, resolution: Resolution) -> None:
        conn = self.conn

        self.header_writer.write(conn, resolution.content_type, resolution.status_ok)
        self._responded = True
        conn.state = ConnectionState.HEADER_SENT

        self.body_writer.write(conn, resolution)
        conn.state = ConnectionState.BODY_SENT

    def _send_not_found(self) -> None:
        """
        Best-effort 404 for a request whose path could not be read.

        Only attempted while nothing has been written yet; a failure
        here just means the client is gone.
        """
        if self._responded:
            return

        self.resolution = Resolution.not_found()
        try:
            self._respond(self.resolution)
        except OSError as e:
            logger.debug(f"[{self.conn.id}] Could not send 404: {e}")

    # =========================================================================
    # ACCESS LOG
    # =========================================================================

    def _log_access(self) -> None:
        if self.access_logger is None:
            return

        resolution = self.resolution if self._responded else None
        self.access_logger.log(AccessLog(
            connection_id=self.conn.id,
            client_ip=self.conn.client_ip,
            request_line=self.request_line,
            path=self.request.path if self.request else "",
            status_code=resolution.status.value if resolution else None,
            content_type=resolution.content_type if resolution else None,
            bytes_sent=self.conn.bytes_sent,
            duration_ms=self.conn.age * 1000,
            timestamp=access_timestamp(),
        ))
