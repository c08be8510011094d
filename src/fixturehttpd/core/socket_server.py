"""
=============================================================================
LISTENING SOCKET AND ACCEPT LOOP
=============================================================================

Owns the listening socket and hands accepted connections, one at a time,
to a connection handler.

=============================================================================
SOCKET LIFECYCLE
=============================================================================

    1. socket()    Create a TCP socket
    2. setsockopt  SO_REUSEADDR, so a restart does not hit TIME_WAIT
    3. bind()      Reserve host:port
    4. listen()    Start queueing connections (small backlog)
    5. accept()    Loop: one connection at a time
    6. close()     From the control thread, to end the loop

Steps 1-4 run in open(), on the caller's thread, so bind errors reach the
caller. Step 5 runs in serve_forever() on the server thread.

=============================================================================
SEQUENTIAL SERVICE
=============================================================================

                    ┌───────────────────────┐
                    │   Listening Socket    │
                    └───────────┬───────────┘
                                │ accept()
                                ▼
                    ┌───────────────────────┐
                    │  handler(connection)  │  ◄── runs to completion
                    └───────────┬───────────┘
                                │ close()
                                ▼
                          back to accept()

While one connection is being handled, others wait in the listen backlog.
They are served in the order the kernel completed them.

=============================================================================
STOPPING A BLOCKED accept()
=============================================================================

close() runs on the control thread while the server thread may be blocked
in accept(). Two mechanisms make sure the loop notices:

    shutdown(SHUT_RDWR)   Wakes a blocked accept() on Linux immediately.
    accept timeout        accept() returns every accept_timeout seconds, so
                          the loop re-checks _running everywhere else.

Once the socket is closed, accept() fails with EBADF and the loop ends. The
caller then joins the server thread (see server.py), so nothing is left
holding the port when stop() returns.

SO_REUSEPORT is NOT set: two live servers on one port would be a bug in
the harness and should fail loudly at bind().

=============================================================================
"""

import logging
import socket
import threading
from typing import Callable, Optional, Tuple

from ..config import ServerConfig
from .connection import Connection


logger = logging.getLogger(__name__)


class ServerStartError(OSError):
    """Raised when the listening socket cannot be set up."""

    def __init__(self, message: str, host: str, port: int):
        super().__init__(message)
        self.host = host
        self.port = port


class SocketServer:
    """
    Single-connection-at-a-time TCP acceptor.

    Usage:
        acceptor = SocketServer(config)
        acceptor.open()                       # bind + listen, may raise
        thread = Thread(target=acceptor.serve_forever, args=(handle,))
        thread.start()
        ...
        acceptor.close()                      # from any thread
        thread.join()
    """

    def __init__(self, config: ServerConfig):
        self.config = config
        self._socket: Optional[socket.socket] = None
        self._running = False
        self._lock = threading.Lock()

    @property
    def is_running(self) -> bool:
        return self._running

    @property
    def address(self) -> Tuple[str, int]:
        """The bound (host, port). The port is real even if 0 was asked for."""
        sock = self._socket
        if sock is None:
            return (self.config.host, self.config.port)
        try:
            return sock.getsockname()[:2]
        except OSError:
            return (self.config.host, self.config.port)

    def _create_socket(self) -> socket.socket:
        sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)

        # Allow rebinding while old connections sit in TIME_WAIT
        sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)

        sock.settimeout(self.config.accept_timeout)
        return sock

    def open(self) -> None:
        """
        Create, bind and listen.

        Raises:
            ServerStartError: If any step fails. The socket is closed.
        """
        host, port = self.config.host, self.config.port
        try:
            sock = self._create_socket()
        except OSError as e:
            logger.error(f"Error opening listen socket: {e}")
            raise ServerStartError(f"Error opening listen socket: {e}", host, port) from e

        try:
            sock.bind((host, port))
            sock.listen(self.config.backlog)
        except OSError as e:
            sock.close()
            logger.error(f"Failed to bind/listen on {host}:{port}: {e}")
            raise ServerStartError(f"Failed to bind/listen on {host}:{port}: {e}", host, port) from e

        with self._lock:
            self._socket = sock
            self._running = True

        logger.info(f"Listening on {self.address[0]}:{self.address[1]}")

    def serve_forever(self, connection_handler: Callable[[Connection], None]) -> None:
        """
        Accept connections until close() is called or accept() fails.

        Each connection is passed to connection_handler and closed
        afterwards, whatever happened. An exception from the handler is
        logged and the loop moves on to the next connection.
        """
        sock = self._socket
        if sock is None:
            raise RuntimeError("serve_forever() called before open()")

        try:
            while self._running:
                try:
                    client_socket, client_address = sock.accept()
                except socket.timeout:
                    continue  # poll _running again
                except OSError as e:
                    if self._running:
                        logger.error(f"Accept failed: {e}")
                    break

                conn = Connection(
                    socket=client_socket,
                    address=client_address,
                    buffer_size=self.config.buffer_size,
                    timeout=self.config.read_timeout,
                )
                logger.debug(f"[{conn.id}] Accepted connection from {client_address[0]}:{client_address[1]}")

                with conn:
                    try:
                        connection_handler(conn)
                    except Exception as e:
                        logger.exception(f"[{conn.id}] Connection handler error: {e}")
        finally:
            self._running = False
            self.close()

        logger.info("Accept loop stopped")

    def close(self) -> None:
        """
        Stop accepting and release the listening socket.

        Safe to call from any thread, any number of times, including while
        serve_forever() is blocked in accept().
        """
        with self._lock:
            self._running = False
            sock, self._socket = self._socket, None

        if sock is None:
            return

        try:
            sock.shutdown(socket.SHUT_RDWR)
        except OSError:
            pass  # not connected / already shut down; close() still applies
        sock.close()
