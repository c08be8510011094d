"""
=============================================================================
FIXTURE WEB SERVER
=============================================================================

Ties the pieces together and gives test harnesses a start/stop handle.

=============================================================================
ARCHITECTURE OVERVIEW
=============================================================================

    control thread                       server thread
    ──────────────                       ─────────────

    start_web_server(port)
        │
        ├── SocketServer.open()  (bind + listen, errors raised here)
        ├── Thread(target=_run) ───────► SocketServer.serve_forever()
        │                                    │
        ◄── WebServer handle                 ├── accept()
                                             ├── _handle_connection(conn)
                                             │       ├── read_some() ─┐
                                             │       ├── parser.feed()┘ until done
                                             │       ├── router.dispatch()
                                             │       └── send head, send body
                                             ├── conn.close()
                                             └── accept() ...
    stop_web_server(handle)
        │
        ├── SocketServer.close() ──────────► accept() fails, loop ends
        └── thread.join()        ◄──────────

=============================================================================
REQUEST LIFECYCLE
=============================================================================

    1. ACCEPT        One connection at a time
    2. READ + PARSE  Repeat recv() and feed() until the head is complete.
                     EOF, read error, timeout or malformed head → abandon.
    3. DISPATCH      Router picks the response. Unsupported method → abandon.
    4. WRITE         Head, then body. Write error → abandon.
    5. CLOSE         Always.

"Abandon" means the connection is closed without a response. Nothing that
happens to one connection changes the server's state.

=============================================================================
"""

import logging
import threading
import time
from dataclasses import replace
from enum import Enum
from typing import Optional

from .access_log import AccessLogger
from .config import ServerConfig
from .core.connection import Connection
from .core.socket_server import ServerStartError, SocketServer
from .http.request import RequestParser
from .http.router import Router


logger = logging.getLogger(__name__)


class ServerState(Enum):
    """Lifecycle of a WebServer handle."""
    IDLE = "idle"          # Created, never started
    RUNNING = "running"    # Listening, loop thread alive
    STOPPED = "stopped"    # Loop ended (stop() or accept failure)
    FAILED = "failed"      # Last start() could not bind/listen


class WebServer:
    """
    Handle for one fixture server instance.

    =========================================================================
    USAGE
    =========================================================================

        server = WebServer(ServerConfig(root_dir="fixtures"))
        server.start(port=0)
        url = f"http://127.0.0.1:{server.port}/test_file"
        ...
        server.stop()

        # Or as a context manager
        with WebServer(config).start(8080) as server:
            ...

    =========================================================================
    THREADING
    =========================================================================

    start() and stop() are called from the control thread. The server
    thread only runs the accept loop. stop() returns only after the server
    thread has exited, so start() on the same port right afterwards does
    not collide with a half-stopped instance.

    =========================================================================
    """

    def __init__(self, config: Optional[ServerConfig] = None, router: Optional[Router] = None):
        # Own copy: start(port) must not rewrite the caller's config
        self.config = replace(config) if config is not None else ServerConfig()
        self._router = router
        self._access_log = AccessLogger(self.config.log_format)

        self._state = ServerState.IDLE
        self._acceptor: Optional[SocketServer] = None
        self._thread: Optional[threading.Thread] = None
        self._port: Optional[int] = None
        self._lock = threading.Lock()

    # =========================================================================
    # PROPERTIES
    # =========================================================================

    @property
    def state(self) -> ServerState:
        return self._state

    @property
    def is_running(self) -> bool:
        return self._state is ServerState.RUNNING

    @property
    def port(self) -> Optional[int]:
        """The bound port (the real one when started with port 0)."""
        return self._port

    @property
    def address(self) -> tuple:
        return (self.config.host, self._port)

    @property
    def router(self) -> Router:
        if self._router is None:
            self._router = Router.from_config(self.config)
        return self._router

    # =========================================================================
    # LIFECYCLE
    # =========================================================================

    def start(self, port: Optional[int] = None, ssl: bool = False) -> "WebServer":
        """
        Bind and start serving on a background thread.

        Args:
            port: Port to listen on. Overrides config.port. 0 = any free port.
            ssl: Accepted for compatibility; TLS is not implemented and the
                 server always speaks plain HTTP.

        Returns:
            self, so start() can be chained into a with statement.

        Raises:
            RuntimeError: If this handle is already running.
            ServerStartError: If the socket could not be bound or listened.
        """
        with self._lock:
            if self._state is ServerState.RUNNING:
                raise RuntimeError(f"Server already running on port {self._port}")

            if port is not None:
                self.config.port = port
            self.config.validate()

            if ssl:
                logger.warning("SSL requested but not supported; serving plain HTTP")

            acceptor = SocketServer(self.config)
            try:
                acceptor.open()
            except ServerStartError:
                self._state = ServerState.FAILED
                raise

            self._acceptor = acceptor
            self._port = acceptor.address[1]
            self._state = ServerState.RUNNING

            self._thread = threading.Thread(
                target=self._run,
                args=(acceptor,),
                name=f"fixturehttpd-{self._port}",
                daemon=True,
            )
            self._thread.start()

        logger.info(f"{self.config.server_name} serving {self.config.root_dir} on port {self._port}")
        return self

    def stop(self) -> None:
        """
        Stop the server and wait for the server thread to exit.

        Blocks until any in-flight request finishes (bounded by
        config.read_timeout for the head, plus the connection's short
        drain on close). Calling stop() on a server that is not
        running does nothing.
        """
        with self._lock:
            acceptor, thread = self._acceptor, self._thread
            self._acceptor = None
            self._thread = None

        if acceptor is None:
            return

        logger.info(f"Stopping server on port {self._port}")
        acceptor.close()

        if thread is not None and thread is not threading.current_thread():
            thread.join()

        self._state = ServerState.STOPPED
        logger.info(f"Server on port {self._port} stopped")

    def _run(self, acceptor: SocketServer) -> None:
        try:
            acceptor.serve_forever(self._handle_connection)
        finally:
            if self._state is ServerState.RUNNING:
                self._state = ServerState.STOPPED

    def __enter__(self) -> "WebServer":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.stop()
        return False

    # =========================================================================
    # REQUEST HANDLING
    # =========================================================================

    def _handle_connection(self, conn: Connection) -> None:
        """
        Serve one request on conn. The caller closes conn afterwards.
        """
        started = time.time()
        parser = RequestParser(max_head_size=self.config.buffer_size)

        # read_timeout covers the whole head, however it is fragmented
        read_timeout = self.config.read_timeout
        deadline = time.monotonic() + read_timeout if read_timeout else None

        # ─────────────────────────────────────────────────────────────────
        # READ UNTIL THE HEAD IS COMPLETE
        # ─────────────────────────────────────────────────────────────────
        while True:
            remaining = None
            if deadline is not None:
                remaining = deadline - time.monotonic()
                if remaining <= 0:
                    logger.warning(
                        f"[{conn.id}] Request head not complete after {read_timeout}s"
                    )
                    return

            try:
                chunk = conn.read_some(remaining)
            except OSError as e:
                logger.warning(f"[{conn.id}] Read failed: {e}")
                return

            if not chunk:
                logger.warning(
                    f"[{conn.id}] Connection closed after {parser.buffered} bytes, "
                    f"before the request was complete"
                )
                return

            result = parser.feed(chunk)
            if result.is_malformed:
                logger.warning(f"[{conn.id}] Malformed request: {result.error}")
                return
            if result.is_complete:
                break

        request = result.request
        logger.debug(f"[{conn.id}] {request.method.upper()} {request.path} {dict(request.headers)}")

        # ─────────────────────────────────────────────────────────────────
        # DISPATCH
        # ─────────────────────────────────────────────────────────────────
        response = self.router.dispatch(request)
        if response is None:
            return  # unsupported method, router already logged it

        # ─────────────────────────────────────────────────────────────────
        # WRITE
        # ─────────────────────────────────────────────────────────────────
        sent = conn.send_response(response.head_bytes(), response.body)
        self._access_log.log(conn, request, response, sent, started)


# =============================================================================
# CONTROL SURFACE
# =============================================================================

def start_web_server(
    port: int,
    ssl: bool = False,
    config: Optional[ServerConfig] = None,
) -> WebServer:
    """
    Start a fixture server and return its handle.

    Args:
        port: Port to listen on (0 = any free port; see WebServer.port).
        ssl: Accepted but not implemented; requests are served in plaintext.
        config: Server configuration. Defaults to ServerConfig().

    Raises:
        ServerStartError: If the port cannot be bound.
    """
    return WebServer(config).start(port, ssl)


def stop_web_server(server: Optional[WebServer]) -> None:
    """
    Stop a server started with start_web_server().

    Returns once the server thread has exited and the port is free again.
    None is accepted and ignored.
    """
    if server is not None:
        server.stop()


def setup_logging(level: str = "INFO") -> None:
    """Configure root logging for command-line use."""
    numeric_level = getattr(logging, level.upper(), logging.INFO)

    logging.basicConfig(
        level=numeric_level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    logging.getLogger("fixturehttpd").setLevel(numeric_level)
