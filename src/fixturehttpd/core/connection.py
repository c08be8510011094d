"""
=============================================================================
CONNECTION
=============================================================================

Wraps one accepted client socket for exactly one request/response cycle.

=============================================================================
ONE REQUEST PER CONNECTION
=============================================================================

The server speaks HTTP/1.0 and always sends "connection: close":

    ┌─────────────────────────────────────────────────────────────────┐
    │   TCP Connect → read head → write head → write body → close     │
    │   TCP Connect → read head → write head → write body → close     │
    └─────────────────────────────────────────────────────────────────┘

There is no keep-alive, no pipelining, and no buffered leftovers to carry
over, so the Connection holds no request state of its own. The parser owns
the bytes; the Connection only moves them.

=============================================================================
CONNECTION STATE MACHINE
=============================================================================

    NEW ──────► READING ──────► WRITING ──────► CLOSED
                   │                ▲              ▲
                   │                │              │
                   └── (abandon) ───┼──────────────┘
                                    │
                          (unsupported method:
                           nothing is written)

=============================================================================
"""

import logging
import socket
import time
import uuid
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional


logger = logging.getLogger(__name__)


class ConnectionState(Enum):
    """Connection lifecycle states, for logging and tests."""
    NEW = "new"            # Just accepted
    READING = "reading"    # Waiting on the request head
    WRITING = "writing"    # Sending the response
    CLOSED = "closed"      # Socket released


@dataclass
class Connection:
    """
    A client connection.

    Attributes:
        socket: The client socket.
        address: Client's (ip, port) tuple.
        id: Short identifier for log lines.
        state: Current connection state.
        created_at: Timestamp when the connection was accepted.
        bytes_received: Total bytes read.
        bytes_sent: Total bytes written.
    """

    socket: socket.socket
    address: tuple

    id: str = field(default_factory=lambda: str(uuid.uuid4())[:8])
    state: ConnectionState = ConnectionState.NEW
    created_at: float = field(default_factory=time.time)
    bytes_received: int = 0
    bytes_sent: int = 0

    buffer_size: int = 10000
    timeout: Optional[float] = 30.0
    drain_timeout: float = 0.2

    def __post_init__(self):
        # Accepted sockets can inherit the listener's timeout; reset it
        self.socket.setblocking(True)
        if self.timeout:
            self.socket.settimeout(self.timeout)
        try:
            self.socket.setsockopt(socket.IPPROTO_TCP, socket.TCP_NODELAY, 1)
        except OSError:
            pass  # not a TCP socket (socketpair in tests)

    @property
    def client_ip(self) -> str:
        return self.address[0] if self.address else ""

    @property
    def age(self) -> float:
        """Connection age in seconds."""
        return time.time() - self.created_at

    # =========================================================================
    # READING
    # =========================================================================

    def read_some(self, timeout: Optional[float] = None) -> bytes:
        """
        One blocking read of up to buffer_size bytes.

        Args:
            timeout: Limit for this read only. Defaults to the connection
                     timeout.

        Returns:
            The bytes read. Empty bytes means the peer closed the connection.

        Raises:
            OSError: On reset, timeout (socket.timeout is an OSError) or any
                     other transport failure.
        """
        self.state = ConnectionState.READING
        self.socket.settimeout(timeout if timeout is not None else self.timeout)
        data = self.socket.recv(self.buffer_size)
        self.bytes_received += len(data)
        return data

    # =========================================================================
    # WRITING
    # =========================================================================

    def send_all(self, data: bytes) -> bool:
        """
        Write every byte of data, or fail.

        sendall() either sends everything or raises; there is no partial
        write to retry.

        Returns:
            True if the write succeeded, False if the connection failed.
        """
        if not data:
            return True

        self.state = ConnectionState.WRITING
        try:
            self.socket.sendall(data)
        except OSError as e:
            logger.warning(f"[{self.id}] Send failed: {e}")
            return False

        self.bytes_sent += len(data)
        return True

    def send_response(self, head: bytes, body: bytes = b"") -> bool:
        """
        Write a response head, then its body as a second write.

        Returns:
            True if both writes succeeded.
        """
        return self.send_all(head) and self.send_all(body)

    # =========================================================================
    # CLOSING
    # =========================================================================

    def close(self):
        """
        Close the connection.

        shutdown(SHUT_WR) first sends our FIN. We then drain whatever the
        client still sends (a POST body we never read, for instance): closing
        with unread data makes the kernel send RST, which can destroy the
        response before the client reads it.
        """
        if self.state == ConnectionState.CLOSED:
            return

        try:
            self.socket.shutdown(socket.SHUT_WR)
        except OSError:
            pass  # Already disconnected

        # drain_timeout bounds the whole drain, not each recv
        deadline = time.monotonic() + self.drain_timeout
        try:
            while True:
                remaining = deadline - time.monotonic()
                if remaining <= 0:
                    break
                self.socket.settimeout(remaining)
                if not self.socket.recv(1024):
                    break
        except OSError:
            pass  # timeout or reset, we are closing anyway

        try:
            self.socket.close()
        except OSError:
            pass

        self.state = ConnectionState.CLOSED
        logger.debug(
            f"[{self.id}] Closed: {self.bytes_received} bytes in, "
            f"{self.bytes_sent} bytes out, {self.age * 1000:.1f}ms"
        )

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False
