"""
=============================================================================
CORE NETWORKING COMPONENTS
=============================================================================

    socket_server.py   Listening socket and accept loop
    connection.py      One client socket: line reading, sending, closing

=============================================================================
THREAD-PER-CONNECTION MODEL
=============================================================================

Every accepted connection gets its own thread running one WebWorker.
Workers share no mutable state, so none of this code needs a lock.

    accept loop ──► Connection ──► Thread(WebWorker.run) ──► close
         │
         └──► next accept()   (never waits for a worker)

=============================================================================
"""

from .socket_server import SocketServer
from .connection import Connection, ConnectionState, RequestTooLargeError

__all__ = [
    "SocketServer",          # Listening socket + accept loop
    "Connection",            # Wrapper for a client socket
    "ConnectionState",       # Per-connection lifecycle states
    "RequestTooLargeError",  # Header block over the size limit
]
