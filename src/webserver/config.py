"""
=============================================================================
SERVER CONFIGURATION
=============================================================================

Centralized configuration for the web server.

=============================================================================
CONFIGURATION SOURCES
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │                    CONFIGURATION HIERARCHY                          │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   Priority (highest to lowest):                                     │
    │                                                                      │
    │   1. Command-line arguments                                         │
    │      └── python -m webserver --port 3000                           │
    │                                                                      │
    │   2. Environment variables                                          │
    │      └── WEBSERVER_PORT=3000 python -m webserver                   │
    │                                                                      │
    │   3. Default values (in this dataclass)                            │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

Configuration is validated once at startup (fail fast) rather than
when the first request happens to touch a bad value.

=============================================================================
"""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional


LOG_FORMATS = ("text", "json")


@dataclass
class ServerConfig:
    """
    Configuration for the web server.

    =========================================================================
    CONFIGURATION GROUPS
    =========================================================================

    NETWORK SETTINGS
    - host, port, backlog, buffer_size, timeout, max_header_size

    CONTENT
    - document_root, confine_to_root

    SERVER IDENTITY
    - server_name, template_server

    LOGGING
    - log_level, log_format

    =========================================================================
    """

    # ─────────────────────────────────────────────────────────────────────
    # NETWORK SETTINGS
    # ─────────────────────────────────────────────────────────────────────

    host: str = "127.0.0.1"
    """
    The IP address to bind to.
    - "127.0.0.1" - Localhost only (development)
    - "0.0.0.0" - All network interfaces
    """

    port: int = 8080
    """
    The port number to listen on. 0 asks the OS for a free port.
    """

    backlog: int = 128
    """
    Maximum number of queued connections waiting for accept().
    """

    buffer_size: int = 8192
    """
    Size of each recv() and of each file chunk sent for binary files.
    """

    timeout: Optional[float] = 30.0
    """
    Read timeout in seconds for a client's request header block.
    A client that stalls longer than this loses its connection.
    None = wait forever (not recommended).
    """

    max_header_size: int = 64 * 1024
    """
    Maximum size of the request header block in bytes.
    """

    # ─────────────────────────────────────────────────────────────────────
    # CONTENT
    # ─────────────────────────────────────────────────────────────────────

    document_root: str = "."
    """
    Directory that request paths are resolved against.
    """

    confine_to_root: bool = True
    """
    Reject paths that escape document_root (../, absolute paths,
    symlinks pointing outside). Rejected paths are answered as 404.
    Turn off only to reproduce the unconfined lookup of older setups.
    """

    # ─────────────────────────────────────────────────────────────────────
    # SERVER IDENTITY
    # ─────────────────────────────────────────────────────────────────────

    server_name: str = "SimpleWebServer/1.0"
    """
    Value of the Server response header.
    """

    template_server: str = "SimpleWebServer"
    """
    Replacement for the <cs371server> token in served text files.
    """

    # ─────────────────────────────────────────────────────────────────────
    # LOGGING
    # ─────────────────────────────────────────────────────────────────────

    log_level: str = "INFO"
    """
    Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL).
    DEBUG also logs every request line.
    """

    log_format: str = "text"
    """
    Access log format: 'text' (Apache-like) or 'json'.
    """

    @classmethod
    def from_env(cls) -> "ServerConfig":
        """
        Create configuration from environment variables.

        =====================================================================
        ENVIRONMENT VARIABLES
        =====================================================================

        WEBSERVER_HOST             Server host (default: 127.0.0.1)
        WEBSERVER_PORT             Server port (default: 8080)
        WEBSERVER_TIMEOUT          Read timeout in seconds (default: 30)
        WEBSERVER_ROOT             Document root (default: .)
        WEBSERVER_NAME             Server header value
        WEBSERVER_TEMPLATE_SERVER  <cs371server> replacement
        WEBSERVER_LOG_LEVEL        Logging level (default: INFO)
        WEBSERVER_LOG_FORMAT       text or json (default: text)

        =====================================================================
        """
        defaults = cls()
        return cls(
            host=os.getenv("WEBSERVER_HOST", defaults.host),
            port=int(os.getenv("WEBSERVER_PORT", str(defaults.port))),
            timeout=float(os.getenv("WEBSERVER_TIMEOUT", str(defaults.timeout))),
            document_root=os.getenv("WEBSERVER_ROOT", defaults.document_root),
            server_name=os.getenv("WEBSERVER_NAME", defaults.server_name),
            template_server=os.getenv(
                "WEBSERVER_TEMPLATE_SERVER", defaults.template_server
            ),
            log_level=os.getenv("WEBSERVER_LOG_LEVEL", defaults.log_level),
            log_format=os.getenv("WEBSERVER_LOG_FORMAT", defaults.log_format),
        )

    def validate(self) -> None:
        """
        Validate configuration values.

        Raises:
            ValueError: On the first invalid setting found.
        """
        if not 0 <= self.port < 65536:
            raise ValueError(f"Invalid port: {self.port}. Must be 0-65535.")

        if self.buffer_size < 1024:
            raise ValueError("buffer_size must be >= 1024")

        if self.timeout is not None and self.timeout <= 0:
            raise ValueError("timeout must be > 0")

        if self.max_header_size < self.buffer_size:
            raise ValueError("max_header_size must be >= buffer_size")

        if not Path(self.document_root).is_dir():
            raise ValueError(f"document_root is not a directory: {self.document_root}")

        if self.log_format not in LOG_FORMATS:
            raise ValueError(
                f"Invalid log_format: {self.log_format!r}. Must be one of {LOG_FORMATS}."
            )
