"""
=============================================================================
WEB SERVER
=============================================================================

Ties the pieces together: configuration, logging, the accept loop, and
one WebWorker thread per connection.

    ┌─────────────────────────────────────────────────────────────────────┐
    │                         WebServer                                   │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   ServerConfig ──► ResourceResolver   (document_root)               │
    │                ──► HeaderWriter       (server_name)                 │
    │                ──► BodyWriter         (template_server)             │
    │                ──► AccessLogger       (log_format)                  │
    │                ──► SocketServer       (host, port, timeout)         │
    │                                                                      │
    │   SocketServer.start(_handle_connection)                            │
    │        │                                                             │
    │        └──► for each Connection:                                     │
    │                 Thread(target=WebWorker(conn, ...).run).start()     │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

The resolver and writers are shared by all workers but hold only
configuration, never per-request data.

=============================================================================
"""

import logging
import threading
from typing import Optional, Tuple

from .access_log import AccessLogger
from .config import ServerConfig
from .core.connection import Connection
from .core.socket_server import SocketServer
from .handlers.static import BodyWriter
from .http.resolver import ResourceResolver
from .http.response import HeaderWriter
from .worker import WebWorker


logger = logging.getLogger(__name__)


class WebServer:
    """
    A minimal static web server.

    Example:
        server = WebServer(ServerConfig(port=8080, document_root="./www"))
        server.run()  # Blocks until Ctrl+C

    Raises:
        ValueError: From __init__, if the configuration is invalid.
    """

    def __init__(self, config: Optional[ServerConfig] = None):
        self.config = config or ServerConfig()
        self.config.validate()

        self._resolver = ResourceResolver(
            self.config.document_root,
            confine_to_root=self.config.confine_to_root,
        )
        self._header_writer = HeaderWriter(self.config.server_name)
        self._body_writer = BodyWriter(
            self.config.template_server,
            chunk_size=self.config.buffer_size,
        )
        self._access_logger = AccessLogger(self.config.log_format)
        self._socket_server = SocketServer(self.config)

    @property
    def address(self) -> Tuple[str, int]:
        """Bound (host, port); the real port once listening."""
        return self._socket_server.address

    @property
    def is_running(self) -> bool:
        return self._socket_server.is_running

    # =========================================================================
    # SERVER LIFECYCLE
    # =========================================================================

    def run(self, host: Optional[str] = None, port: Optional[int] = None):
        """
        Start the server (blocking).

        Args:
            host: Override config host.
            port: Override config port.

        Raises:
            ValueError: If an override makes the configuration invalid.
        """
        if host:
            self.config.host = host
        if port is not None:
            self.config.port = port
        self.config.validate()

        self._setup_logging()

        logger.info(
            f"Starting {self.config.server_name} on {self.config.host}:{self.config.port}, "
            f"serving {self._resolver.document_root}"
        )
        if not self.config.confine_to_root:
            logger.warning("Path confinement is off: requests may read outside the document root")

        try:
            self._socket_server.start(self._handle_connection)
        except KeyboardInterrupt:
            logger.info("Received keyboard interrupt")
        finally:
            logger.info("Server stopped")

    def wait_until_ready(self, timeout: Optional[float] = None) -> bool:
        """Block until the server is accepting connections."""
        return self._socket_server.wait_until_ready(timeout)

    def shutdown(self):
        """Stop accepting connections. Workers already running finish on their own."""
        self._socket_server.shutdown()

    def _setup_logging(self):
        """Configure logging based on config."""
        level = getattr(logging, self.config.log_level.upper(), logging.INFO)

        logging.basicConfig(
            level=level,
            format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )

        logging.getLogger("webserver").setLevel(level)

    # =========================================================================
    # CONNECTION HANDLING
    # =========================================================================

    def _handle_connection(self, conn: Connection):
        """
        Start a worker thread for a new connection.

        Called by SocketServer for each accepted client. Returns at once
        so the accept loop can go back to accept().
        """
        worker = self._create_worker(conn)
        thread = threading.Thread(
            target=worker.run,
            name=f"webworker-{conn.id}",
            daemon=True,
        )
        thread.start()

    def _create_worker(self, conn: Connection) -> WebWorker:
        return WebWorker(
            conn,
            resolver=self._resolver,
            header_writer=self._header_writer,
            body_writer=self._body_writer,
            access_logger=self._access_logger,
        )
