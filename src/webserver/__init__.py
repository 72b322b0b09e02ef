"""
=============================================================================
WEBSERVER - A Minimal Single-Request HTTP Responder
=============================================================================

Each accepted connection gets one request and one response, then the
connection is closed. Files are served from a document root; text files
get live template substitution, images are passed through untouched.

=============================================================================
PROJECT OVERVIEW
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │                    PER-CONNECTION PIPELINE                          │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   1. REQUEST READER                                                  │
    │      - Read header lines until the blank line                       │
    │      - Path = request-line token after the first '/'                │
    │                                                                      │
    │   2. RESOURCE RESOLVER                                               │
    │      - "" → synthetic root page                                     │
    │      - Existing file → 200, type from .gif/.png/.jpg or text/html   │
    │      - Anything else → 404                                          │
    │                                                                      │
    │   3. HEADER WRITER                                                   │
    │      - Status, Date, Server, Connection: close, Content-Type        │
    │                                                                      │
    │   4. BODY WRITER                                                     │
    │      - 404 page / raw image bytes / welcome page / templated text  │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
PACKAGE STRUCTURE
=============================================================================

    webserver/
    ├── __init__.py          # This file - package exports
    ├── __main__.py          # CLI entry point (python -m webserver)
    ├── server.py            # WebServer: accept loop + worker threads
    ├── worker.py            # WebWorker: one connection, four steps
    ├── config.py            # ServerConfig dataclass
    ├── access_log.py        # One structured log entry per connection
    ├── core/
    │   ├── socket_server.py # Listening socket, accept loop
    │   └── connection.py    # Client socket wrapper, state machine
    ├── http/
    │   ├── request.py       # Request-line path extraction
    │   ├── resolver.py      # Path → file, status, content type
    │   ├── response.py      # Header block
    │   ├── status_codes.py  # 200 / 404
    │   └── mime_types.py    # Fixed extension table
    └── handlers/
        ├── static.py        # Body writer
        └── template.py      # <cs371date> / <cs371server>

=============================================================================
QUICK START
=============================================================================

    from webserver import WebServer, ServerConfig

    server = WebServer(ServerConfig(port=8080, document_root="./www"))
    server.run()

    # or from the shell
    python -m webserver --port 8080 --root ./www

=============================================================================
"""

__version__ = "1.0.0"

from .server import WebServer
from .config import ServerConfig
from .worker import WebWorker

__all__ = ["WebServer", "ServerConfig", "WebWorker", "__version__"]
