"""
pytest configuration and fixtures.
"""

import socket
import time
from pathlib import Path
from typing import Generator, Optional

import pytest

# Add src to path for imports
import sys
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from fixturehttpd import ServerConfig, WebServer, prepare_fixture_dirs


TEST_FILE_CONTENT = b"test file content\n" * 64
DATA_BIN_CONTENT = bytes(i % 256 for i in range(1000))
GZ_CONTENT = b"\x1f\x8b\x08\x00" + b"not really compressed" * 10


@pytest.fixture
def sample_get_request() -> bytes:
    """Sample HTTP GET request with a Range header."""
    return (
        b"GET /data.bin HTTP/1.0\r\n"
        b"Host: 127.0.0.1\r\n"
        b"User-Agent: pytest\r\n"
        b"Range: bytes=100-199\r\n"
        b"\r\n"
    )


@pytest.fixture
def free_port() -> int:
    """Get a free port for testing."""
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as s:
        s.bind(("127.0.0.1", 0))
        return s.getsockname()[1]


@pytest.fixture
def serve_dir(tmp_path: Path) -> Path:
    """A serve root populated with the standard fixture files."""
    (tmp_path / "test_file").write_bytes(TEST_FILE_CONTENT)
    (tmp_path / "data.bin").write_bytes(DATA_BIN_CONTENT)
    (tmp_path / "test_file.gz").write_bytes(GZ_CONTENT)
    (tmp_path / "empty").write_bytes(b"")
    prepare_fixture_dirs(tmp_path)
    return tmp_path


@pytest.fixture
def config(serve_dir: Path) -> ServerConfig:
    """Test server configuration bound to loopback on any free port."""
    return ServerConfig(
        host="127.0.0.1",
        port=0,
        root_dir=str(serve_dir),
        read_timeout=5.0,
        accept_timeout=0.1,
        log_level="WARNING",
    )


@pytest.fixture
def server(config: ServerConfig) -> Generator[WebServer, None, None]:
    """A running server; stopped after the test."""
    srv = WebServer(config).start()
    yield srv
    srv.stop()


def send_raw(
    port: int,
    data: bytes,
    chunks: Optional[list] = None,
    delay: float = 0.0,
    timeout: float = 5.0,
) -> bytes:
    """
    Send a raw request and read until the server closes the connection.

    If chunks is given, data is ignored and each chunk is sent separately
    with delay seconds in between.
    """
    with socket.create_connection(("127.0.0.1", port), timeout=timeout) as s:
        for i, chunk in enumerate(chunks if chunks is not None else [data]):
            if i and delay:
                time.sleep(delay)
            s.sendall(chunk)

        received = b""
        while True:
            try:
                part = s.recv(65536)
            except ConnectionResetError:
                break
            if not part:
                break
            received += part
        return received


def split_response(raw: bytes):
    """Split raw response bytes into (status_code, reason, headers, body)."""
    head, _, body = raw.partition(b"\r\n\r\n")
    lines = head.decode("latin-1").split("\r\n")
    _, code, reason = lines[0].split(" ", 2)

    headers = {}
    for line in lines[1:]:
        name, _, value = line.partition(":")
        headers[name.strip().lower()] = value.strip()

    return int(code), reason, headers, body


@pytest.fixture
def http_get(server: WebServer):
    """GET a path from the running server, returning split_response()."""

    def _get(path: str, range_header: Optional[str] = None, method: str = "GET"):
        request = f"{method} {path} HTTP/1.0\r\nHost: 127.0.0.1\r\n"
        if range_header is not None:
            request += f"Range: {range_header}\r\n"
        request += "\r\n"
        return split_response(send_raw(server.port, request.encode("latin-1")))

    return _get


@pytest.fixture
def raw_request(server: WebServer):
    """Send raw bytes (or chunks) to the running server; returns the reply."""

    def _send(data: bytes = b"", **kwargs) -> bytes:
        return send_raw(server.port, data, **kwargs)

    return _send


@pytest.fixture
def parse_reply():
    """Expose split_response() to test modules."""
    return split_response
