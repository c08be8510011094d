"""
=============================================================================
FIXTUREHTTPD - Minimal HTTP/1.0 Fixture Server for Transfer Tests
=============================================================================

A small, deliberately simple web server that download clients are tested
against. It serves files from a directory, answers byte-range requests,
and exposes a few redirect fixtures that exercise a client's redirect
handling.

=============================================================================
PROJECT OVERVIEW
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │                   FIXTURE SERVER ARCHITECTURE                       │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                     │
    │   1. ONE THREAD, ONE CONNECTION AT A TIME                           │
    │      - Accept, read head, answer, close, repeat                     │
    │      - Start and stop from the test's own thread                    │
    │                                                                     │
    │   2. HTTP/1.0 SUBSET                                                │
    │      - GET and POST; anything else gets no answer                   │
    │      - Range: bytes=<start>-<end> → 206                             │
    │      - Always "connection: close"                                   │
    │                                                                     │
    │   3. REDIRECT FIXTURES                                              │
    │      - /redirect           → /test_file                             │
    │      - /infinite_redirect  → itself, forever                        │
    │      - /relative/redirect  → ../test_file                           │
    │                                                                     │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
PACKAGE STRUCTURE
=============================================================================

    fixturehttpd/
    ├── __init__.py          # This file - package exports
    ├── __main__.py          # CLI entry point (python -m fixturehttpd)
    ├── server.py            # WebServer handle, start/stop functions
    ├── config.py            # ServerConfig dataclass
    ├── access_log.py        # One log line per answered request
    ├── core/                # Sockets
    │   ├── socket_server.py # Listening socket and accept loop
    │   └── connection.py    # Client socket wrapper
    ├── http/                # Protocol
    │   ├── request.py       # Incremental request head parser
    │   ├── ranges.py        # Range header resolver
    │   ├── response.py      # Response framing
    │   ├── router.py        # Redirect fixtures and file dispatch
    │   └── status_codes.py  # Status codes and reason phrases
    └── handlers/
        └── files.py         # File loading

=============================================================================
QUICK START
=============================================================================

    from fixturehttpd import ServerConfig, start_web_server, stop_web_server

    server = start_web_server(0, config=ServerConfig(host="127.0.0.1",
                                                     root_dir="fixtures"))
    try:
        download(f"http://127.0.0.1:{server.port}/test_file")
    finally:
        stop_web_server(server)

=============================================================================
"""

__version__ = "1.0.0"

from .config import ServerConfig
from .core.socket_server import ServerStartError
from .handlers.files import prepare_fixture_dirs
from .server import (
    ServerState,
    WebServer,
    setup_logging,
    start_web_server,
    stop_web_server,
)

__all__ = [
    "ServerConfig",
    "ServerStartError",
    "ServerState",
    "WebServer",
    "prepare_fixture_dirs",
    "setup_logging",
    "start_web_server",
    "stop_web_server",
    "__version__",
]
