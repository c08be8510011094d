"""
=============================================================================
CORE SERVER COMPONENTS
=============================================================================

Socket plumbing for the fixture server.

    ┌─────────────────────────────────────────────────────────────────────┐
    │                         SOCKET SERVER                               │
    │  ─────────────────────────────────────────────────────────────────  │
    │  • Creates, binds and listens on the TCP socket                     │
    │  • Runs the accept() loop on the server thread                      │
    │  • Hands each connection to the handler, then closes it             │
    └─────────────────────────────────────────────────────────────────────┘
                                    │
                                    │ One connection at a time
                                    ▼
    ┌─────────────────────────────────────────────────────────────────────┐
    │                          CONNECTION                                 │
    │  ─────────────────────────────────────────────────────────────────  │
    │  • Wraps a client socket with read/write helpers                    │
    │  • Tracks state and byte counts for logging                         │
    │  • Drains unread input before closing                               │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
"""

from .connection import Connection, ConnectionState
from .socket_server import ServerStartError, SocketServer

__all__ = [
    "Connection",
    "ConnectionState",
    "ServerStartError",
    "SocketServer",
]
