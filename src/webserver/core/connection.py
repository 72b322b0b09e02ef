"""
=============================================================================
CONNECTION MANAGEMENT
=============================================================================

This module wraps one accepted client socket with the small API the
connection worker needs: read the request header block line by line,
write response bytes, and close the socket exactly once.

=============================================================================
TCP IS A BYTE STREAM, NOT A LINE PROTOCOL
=============================================================================

TCP only guarantees that bytes arrive IN ORDER and INTACT. It does not
preserve the boundaries the client used when sending:

    Client sends:
        GET /index.html HTTP/1.1\r\n
        Host: localhost\r\n
        \r\n

    Server might receive:
        First recv():  "GET /ind"
        Second recv(): "ex.html HTTP/1.1\r\nHost: loc"
        Third recv():  "alhost\r\n\r\n"

So we keep a buffer, pull complete lines out of it, and only call
recv() again when the buffer holds no full line.

=============================================================================
BLOCKING READS, NOT POLLING
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │                    WAITING FOR CLIENT DATA                          │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   POLLING (avoid)                 BLOCKING WITH TIMEOUT (ours)      │
    │   ───────────────                 ────────────────────────────      │
    │                                                                      │
    │   while not ready():              socket.settimeout(30.0)           │
    │       sleep(0.001)                data = socket.recv(8192)          │
    │   data = read()                                                      │
    │                                                                      │
    │   Burns CPU while idle            Thread sleeps inside the kernel   │
    │   No upper bound on waiting       Raises TimeoutError after 30s     │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

The timeout bounds the WHOLE header block, not each recv(). Every recv()
waits only for what is left of the deadline, so a client trickling one
byte at a time still runs out of time after 30s. Draining on close is
bounded the same way, by time and by byte count.

=============================================================================
CONNECTION STATE MACHINE
=============================================================================

Every connection walks forward through these states exactly once:

    START ──► REQUEST_READ ──► RESOLVED ──► HEADER_SENT ──► BODY_SENT ──┐
      │            │               │              │                     │
      └────────────┴───────────────┴──────────────┴──────► CLOSED ◄─────┘

Any failure jumps straight to CLOSED through close(). No state is ever
revisited and CLOSED is the only terminal state.

=============================================================================
"""

import socket
import time
import logging
from enum import Enum
from dataclasses import dataclass, field
from typing import Optional
import uuid


logger = logging.getLogger(__name__)

# Limits for reading leftover client data on close
DRAIN_TIMEOUT = 0.5
DRAIN_LIMIT = 64 * 1024


class RequestTooLargeError(ValueError):
    """Raised when the request header block exceeds the configured limit."""


class ConnectionState(Enum):
    """
    Connection lifecycle states.

    The worker advances the state as each phase completes, which makes
    log lines and post-mortem debugging much easier to follow.
    """
    START = "start"                # Just accepted, nothing read yet
    REQUEST_READ = "request_read"  # Header block consumed, path extracted
    RESOLVED = "resolved"          # Resource looked up on disk
    HEADER_SENT = "header_sent"    # Status line and headers written
    BODY_SENT = "body_sent"        # Body written completely
    CLOSED = "closed"              # Socket released


@dataclass
class Connection:
    """
    Represents one accepted client connection.

    ┌─────────────────────────────────────────────────────────────────────┐
    │                    Connection Responsibilities                       │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │  1. LINE-ORIENTED READING                                            │
    │     └── Buffer recv() chunks, hand out one text line at a time       │
    │     └── Stop at the empty line that ends the header block            │
    │                                                                      │
    │  2. TIMEOUT                                                          │
    │     └── A slow or silent client fails this connection only           │
    │                                                                      │
    │  3. WRITING                                                          │
    │     └── sendall() so partial sends never truncate a response         │
    │     └── Count bytes sent for the access log                          │
    │                                                                      │
    │  4. CLOSE EXACTLY ONCE                                               │
    │     └── shutdown(SHUT_WR), drain, close()                            │
    │     └── Safe to call repeatedly, used by the context manager         │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

    Attributes:
        socket: The client socket.
        address: Client's (ip, port) tuple.
        id: Short unique identifier used as a log prefix.
        state: Current lifecycle state.
        bytes_sent: Total response bytes written so far.
    """

    # Required parameters
    socket: socket.socket
    address: tuple[str, int]

    # Generated/default parameters
    id: str = field(default_factory=lambda: str(uuid.uuid4())[:8])
    state: ConnectionState = ConnectionState.START
    created_at: float = field(default_factory=time.time)
    bytes_sent: int = 0

    # Configuration (passed from ServerConfig)
    buffer_size: int = 8192
    timeout: Optional[float] = 30.0
    max_header_size: int = 64 * 1024

    # Internal state (not shown in repr for cleaner logs)
    _buffer: bytes = field(default=b"", repr=False)
    _bytes_read: int = field(default=0, repr=False)
    _deadline: Optional[float] = field(default=None, repr=False)

    def __post_init__(self):
        """Put the socket in blocking mode bounded by the read timeout."""
        self.socket.setblocking(True)
        if self.timeout:
            self.socket.settimeout(self.timeout)

    # =========================================================================
    # PROPERTIES
    # =========================================================================

    @property
    def client_ip(self) -> str:
        """Get the client IP address."""
        return self.address[0]

    @property
    def age(self) -> float:
        """Get connection age in seconds."""
        return time.time() - self.created_at

    @property
    def is_closed(self) -> bool:
        return self.state == ConnectionState.CLOSED

    # =========================================================================
    # READING: The request header block, one line at a time
    # =========================================================================

    def read_header_lines(self) -> list[str]:
        """
        Read text lines until the empty line that ends the header block.

        ┌─────────────────────────────────────────────────────────────────┐
        │                 read_header_lines() Flow                        │
        ├─────────────────────────────────────────────────────────────────┤
        │                                                                  │
        │   ┌──────────────────────┐                                      │
        │   │ _read_line()         │ ◄─────────────────┐                  │
        │   └──────────┬───────────┘                   │                  │
        │              │                               │                  │
        │      None? ──┴── yes ──► stream ended, stop  │                  │
        │              │                               │                  │
        │   ┌──────────▼───────────┐                   │                  │
        │   │ append line          │                   │                  │
        │   └──────────┬───────────┘                   │                  │
        │              │                               │                  │
        │     empty? ──┴── no ─────────────────────────┘                  │
        │              │                                                   │
        │             yes ──► end of header block, stop                   │
        │                                                                  │
        └─────────────────────────────────────────────────────────────────┘

        Every line is collected (the empty terminator included) so the
        caller sees exactly what the client sent. Lines are decoded as
        UTF-8 with surrogateescape: a non-ASCII path names the same file
        on disk, and bytes that are not UTF-8 survive the round trip
        through os.fsencode() instead of failing the decode.

        Returns:
            The header lines with their CRLF/LF terminators stripped.
            An empty list means the client sent nothing at all.

        Raises:
            TimeoutError: If the block is not complete within the timeout.
            RequestTooLargeError: If the block exceeds max_header_size.
        """
        if self.timeout:
            self._deadline = time.monotonic() + self.timeout
        lines: list[str] = []

        try:
            while True:
                line = self._read_line()
                if line is None:
                    break  # Stream ended before the blank line

                lines.append(line)
                logger.debug(f"[{self.id}] Request line: ({line!r})")

                if not line:
                    break  # Empty line terminates the header block
        finally:
            # Writes get the full per-operation timeout again
            self._deadline = None
            if self.timeout:
                self.socket.settimeout(self.timeout)

        return lines

    def _read_line(self) -> Optional[str]:
        """
        Pull one line out of the buffer, receiving more data as needed.

        Returns:
            The decoded line, or None if the stream ended with nothing
            left in the buffer.
        """
        while b"\n" not in self._buffer:
            chunk = self._recv()
            if not chunk:
                # Client closed its side. Whatever is buffered is the
                # last (unterminated) line.
                if not self._buffer:
                    return None
                raw, self._buffer = self._buffer, b""
                return raw.rstrip(b"\r").decode("utf-8", "surrogateescape")

            self._buffer += chunk
            self._bytes_read += len(chunk)

            if self._bytes_read > self.max_header_size:
                raise RequestTooLargeError(
                    f"Request header block too large: {self._bytes_read} bytes"
                )

        raw, _, self._buffer = self._buffer.partition(b"\n")
        return raw.rstrip(b"\r").decode("utf-8", "surrogateescape")

    def _recv(self) -> bytes:
        """
        Receive data from the socket.

        Returns:
            Received bytes, or empty bytes if the client went away.

        Raises:
            TimeoutError: If the read deadline passes before data arrives.
        """
        if self._deadline is not None:
            remaining = self._deadline - time.monotonic()
            if remaining <= 0:
                raise TimeoutError("Request read timeout")
            self.socket.settimeout(remaining)

        try:
            return self.socket.recv(self.buffer_size)
        except socket.timeout:
            raise TimeoutError("Request read timeout")
        except (ConnectionResetError, BrokenPipeError):
            # Client disconnected abruptly
            return b""

    # =========================================================================
    # WRITING: Response bytes go out in the order they are handed to us
    # =========================================================================

    def send(self, data: bytes) -> None:
        """
        Send bytes to the client.

        sendall() blocks until every byte is handed to the kernel. Errors
        propagate: once the header is out there is nothing to renegotiate,
        so the worker just abandons the connection.

        Raises:
            OSError: If the client disconnected.
        """
        self.socket.sendall(data)
        self.bytes_sent += len(data)

    # =========================================================================
    # CLOSING
    # =========================================================================

    def close(self):
        """
        Close the connection gracefully.

        1. shutdown(SHUT_WR): send FIN so the client sees end-of-body.
           With no Content-Length header this is how the client knows
           the response is complete.
        2. Drain whatever the client still has in flight, for at most
           DRAIN_TIMEOUT seconds and DRAIN_LIMIT bytes in total.
        3. close(): release the file descriptor.
        """
        if self.state == ConnectionState.CLOSED:
            return  # Already closed

        try:
            self.socket.shutdown(socket.SHUT_WR)
        except OSError:
            pass  # Already disconnected

        self._drain()

        try:
            self.socket.close()
        except OSError:
            pass

        self.state = ConnectionState.CLOSED
        logger.debug(f"[{self.id}] Connection closed after {self.age * 1000:.1f}ms")

    def _drain(self) -> None:
        """Discard unread client data so close() does not send a RST."""
        deadline = time.monotonic() + DRAIN_TIMEOUT
        drained = 0

        try:
            while drained < DRAIN_LIMIT:
                remaining = deadline - time.monotonic()
                if remaining <= 0:
                    break
                self.socket.settimeout(remaining)
                chunk = self.socket.recv(1024)
                if not chunk:
                    break
                drained += len(chunk)
        except OSError:
            pass  # Includes socket.timeout

        if drained:
            logger.debug(f"[{self.id}] Discarded {drained} unread bytes")

    # =========================================================================
    # CONTEXT MANAGER: For use with 'with' statement
    # =========================================================================

    def __enter__(self):
        """
        Context manager entry.

            with conn:
                lines = conn.read_header_lines()
                conn.send(response)
            # Connection closed here, whatever happened inside
        """
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Context manager exit - ensure connection is closed."""
        self.close()
        return False  # Don't suppress exceptions
