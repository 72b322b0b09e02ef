"""
=============================================================================
ACCESS LOGGING
=============================================================================

One log entry per handled connection, written to its own logger so it
can be routed separately from the server's diagnostic messages:

    logging.getLogger("webserver.access").addHandler(file_handler)

Two formats:

    text   127.0.0.1 - - [19/Oct/2026:14:03:11 +0000] "GET / HTTP/1.1"
           200 text/html 74 1.32ms [a1b2c3d4]

    json   {"connection_id": "a1b2c3d4", "client_ip": "127.0.0.1", ...}

A connection that never produced a response (client sent nothing, read
timed out) is still logged, with "-" for the status.

=============================================================================
"""

import json
import logging
import time
from dataclasses import dataclass, asdict
from typing import Optional


# ═══════════════════════════════════════════════════════════════════════════
# LOGGER CONFIGURATION
# ═══════════════════════════════════════════════════════════════════════════
# Namespaced under "webserver" so the level set by WebServer applies, and
# still separately configurable:
#   logging.getLogger("webserver.access").setLevel(logging.WARNING)
# ═══════════════════════════════════════════════════════════════════════════
logger = logging.getLogger("webserver.access")


@dataclass
class AccessLog:
    """
    Structured log entry for one connection.

    Fields:
        connection_id:  Short id shared with the connection's debug logs
        client_ip:      Client's IP address
        request_line:   First line of the request, "-" if none was read
        path:           Resource path ("" for the root page)
        status_code:    200 or 404, None if no response was written
        content_type:   Announced Content-Type, None if no response
        bytes_sent:     Header plus body bytes written
        duration_ms:    Time from accept to close
        timestamp:      When the entry was made
    """

    connection_id: str
    client_ip: str
    request_line: str
    path: str
    status_code: Optional[int]
    content_type: Optional[str]
    bytes_sent: int
    duration_ms: float
    timestamp: str

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        data = asdict(self)
        data["duration_ms"] = round(self.duration_ms, 2)
        return data

    def to_text(self) -> str:
        """Format in the style of the Apache common log format."""
        status = self.status_code if self.status_code is not None else "-"
        # Undecodable request bytes are kept as surrogates; show them escaped
        request_line = self.request_line.encode("utf-8", "backslashreplace").decode("utf-8")
        return (
            f'{self.client_ip} - - [{self.timestamp}] '
            f'"{request_line}" {status} {self.content_type or "-"} '
            f'{self.bytes_sent} {self.duration_ms:.2f}ms [{self.connection_id}]'
        )


class AccessLogger:
    """
    Emits AccessLog entries on the "webserver.access" logger.

    Usage:
        access = AccessLogger(log_format="json")
        access.log(entry)
    """

    def __init__(self, log_format: str = "text", log_level: int = logging.INFO):
        """
        Args:
            log_format: "text" or "json".
            log_level: Level the entries are logged at.
        """
        self.log_format = log_format
        self.log_level = log_level

    def log(self, entry: AccessLog) -> None:
        if self.log_format == "json":
            logger.log(self.log_level, json.dumps(entry.to_dict()))
        else:
            logger.log(self.log_level, entry.to_text())


def access_timestamp() -> str:
    """Current time as [day/Mon/year:HH:MM:SS zone]."""
    return time.strftime("%d/%b/%Y:%H:%M:%S %z")
