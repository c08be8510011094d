"""
=============================================================================
SERVER CONFIGURATION
=============================================================================

Centralized configuration for the fixture server.

=============================================================================
CONFIGURATION SOURCES
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │   Priority (highest to lowest):                                     │
    │                                                                     │
    │   1. Command-line arguments                                         │
    │      └── python -m fixturehttpd --port 3000                         │
    │                                                                     │
    │   2. Environment variables                                          │
    │      └── FIXTURE_PORT=3000 python -m fixturehttpd                   │
    │                                                                     │
    │   3. Defaults in ServerConfig                                       │
    └─────────────────────────────────────────────────────────────────────┘

Test harnesses usually build a ServerConfig directly and pass it to
start_web_server().

=============================================================================
"""

import os
from dataclasses import dataclass
from typing import Optional


@dataclass
class ServerConfig:
    """
    Configuration for the fixture server.

    =========================================================================
    CONFIGURATION GROUPS
    =========================================================================

    NETWORK SETTINGS
    - host, port, backlog, buffer_size, read_timeout, accept_timeout

    CONTENT
    - root_dir, max_file_size

    REDIRECT FIXTURES
    - redirect_path, redirect_target, infinite_redirect_path,
      relative_redirect_path, relative_redirect_target, fixture_dirs

    LOGGING
    - log_level, log_format

    =========================================================================
    """

    # ─────────────────────────────────────────────────────────────────────
    # NETWORK SETTINGS
    # ─────────────────────────────────────────────────────────────────────

    host: str = "0.0.0.0"
    """
    The IP address to bind to. All interfaces by default, so clients
    going through a local proxy can reach us too.
    """

    port: int = 8080
    """
    The port number to listen on. 0 lets the OS pick a free port; read
    the real one from WebServer.port after start().
    """

    backlog: int = 10
    """
    Maximum number of queued connections. We serve one at a time, so a
    small queue is plenty.
    """

    buffer_size: int = 10000
    """
    Size of each read, and the largest request head we accept.
    """

    read_timeout: Optional[float] = 30.0
    """
    How long a single read may block before the connection is abandoned.
    Bounds how long stop() can wait on an in-flight request.
    None = wait forever.
    """

    accept_timeout: float = 0.5
    """
    Poll interval for accept(), so the loop notices stop() even on
    platforms where closing the socket does not wake a blocked accept.
    """

    # ─────────────────────────────────────────────────────────────────────
    # CONTENT
    # ─────────────────────────────────────────────────────────────────────

    root_dir: str = "."
    """
    Directory request paths are resolved against.
    """

    max_file_size: int = 8_000_000
    """
    Files larger than this are answered with 503.
    """

    # ─────────────────────────────────────────────────────────────────────
    # REDIRECT FIXTURES
    # ─────────────────────────────────────────────────────────────────────

    redirect_path: str = "/redirect"
    redirect_target: str = "/test_file"
    infinite_redirect_path: str = "/infinite_redirect"
    relative_redirect_path: str = "/relative/redirect"
    relative_redirect_target: str = "../test_file"

    fixture_dirs: tuple = ("relative",)
    """
    Directories prepare_fixture_dirs() creates under root_dir.
    """

    # ─────────────────────────────────────────────────────────────────────
    # LOGGING
    # ─────────────────────────────────────────────────────────────────────

    log_level: str = "INFO"
    """
    Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL).
    """

    log_format: str = "text"
    """
    Access log format: 'text' or 'json'.
    """

    server_name: str = "fixturehttpd/1.0"
    """
    Name used in log lines and the startup message.
    """

    @classmethod
    def from_env(cls) -> "ServerConfig":
        """
        Create configuration from environment variables.

        =====================================================================
        ENVIRONMENT VARIABLES
        =====================================================================

        FIXTURE_HOST            Bind address (default: 0.0.0.0)
        FIXTURE_PORT            Port (default: 8080)
        FIXTURE_ROOT            Serve root (default: .)
        FIXTURE_MAX_FILE_SIZE   Largest servable file in bytes
        FIXTURE_READ_TIMEOUT    Read timeout in seconds
        FIXTURE_LOG_LEVEL       Logging level (default: INFO)
        FIXTURE_LOG_FORMAT      Access log format (default: text)

        =====================================================================
        """
        return cls(
            host=os.getenv("FIXTURE_HOST", "0.0.0.0"),
            port=int(os.getenv("FIXTURE_PORT", "8080")),
            root_dir=os.getenv("FIXTURE_ROOT", "."),
            max_file_size=int(os.getenv("FIXTURE_MAX_FILE_SIZE", "8000000")),
            read_timeout=float(os.getenv("FIXTURE_READ_TIMEOUT", "30")),
            log_level=os.getenv("FIXTURE_LOG_LEVEL", "INFO"),
            log_format=os.getenv("FIXTURE_LOG_FORMAT", "text"),
        )

    def validate(self) -> None:
        """
        Validate configuration values.

        Called by WebServer before binding, so a bad value fails the start
        instead of surfacing halfway through a test run.
        """
        if not 0 <= self.port < 65536:
            raise ValueError(f"Invalid port: {self.port}. Must be 0-65535.")

        if self.backlog < 1:
            raise ValueError("backlog must be >= 1")

        if self.buffer_size < 256:
            raise ValueError("buffer_size must be >= 256")

        if self.read_timeout is not None and self.read_timeout <= 0:
            raise ValueError("read_timeout must be > 0")

        if self.accept_timeout <= 0:
            raise ValueError("accept_timeout must be > 0")

        if self.max_file_size < 0:
            raise ValueError("max_file_size must be >= 0")

        if self.log_format not in ("text", "json"):
            raise ValueError(f"Invalid log_format: {self.log_format}. Must be 'text' or 'json'.")

        for path in (self.redirect_path, self.infinite_redirect_path, self.relative_redirect_path):
            if not path.startswith("/"):
                raise ValueError(f"Redirect paths must start with '/': {path}")
