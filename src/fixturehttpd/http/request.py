"""
=============================================================================
INCREMENTAL HTTP REQUEST PARSER
=============================================================================

Recognizes an HTTP/1.0 request head from bytes that arrive in arbitrary
fragments.

=============================================================================
WHY INCREMENTAL?
=============================================================================

TCP is a byte stream. A client that writes

    GET /test_file HTTP/1.0\r\n
    Range: bytes=0-99\r\n
    \r\n

may be read by the server as one chunk, or as

    recv() → "GET /te"
    recv() → "st_file HTTP/1.0\r\nRan"
    recv() → "ge: bytes=0-99\r\n\r\n"

The transfer clients under test deliberately split requests like this, so
the parser has to keep state between reads:

    ┌──────────────┐  feed(chunk)   ┌─────────────────────────────────────┐
    │   Acceptor   │ ─────────────► │           RequestParser             │
    │     Loop     │                │                                     │
    │              │ ◄───────────── │  _buffer       (all bytes so far)   │
    │ (does recv)  │  ParseResult   │  _scan_pos     (first unread line)  │
    └──────────────┘                │  _request_line (once seen)          │
                                    │  _header_lines (so far)             │
                                    └─────────────────────────────────────┘

The parser never touches the socket. All blocking happens in the acceptor
loop between calls to feed().

=============================================================================
PARSE RESULTS
=============================================================================

    INCOMPLETE  Head not finished yet. Read more and feed again.
    COMPLETE    Empty line seen. ParseResult.request holds the request.
    MALFORMED   Give up on this connection (ParseResult.error says why).

COMPLETE and MALFORMED are terminal: further feed() calls return the same
result until reset() is called.

=============================================================================
LENIENCY RULES
=============================================================================

    - Lines may end in "\r\n" or a bare "\n".
    - Empty lines before the request line are skipped.
    - Header lines without ":" are ignored, not fatal.
    - Repeated headers: the last one wins.
    - The request line needs at least 3 tokens; anything less is MALFORMED.
    - A head that does not finish within max_head_size bytes is MALFORMED.

A request body (POST) is never read; completion is signaled at the end of
the head.

=============================================================================
"""

from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Dict, List, Mapping, Optional, Tuple
from urllib.parse import unquote, urlsplit


class ParseStatus(Enum):
    """Outcome of feeding bytes to the parser."""
    INCOMPLETE = "incomplete"
    COMPLETE = "complete"
    MALFORMED = "malformed"


@dataclass(frozen=True)
class ParsedRequest:
    """
    An HTTP request head.

    Attributes:
        method:  Lower-cased method ("get", "post", ...).
        path:    Decoded path, always starting with "/", no query string.
        version: Version token from the request line ("HTTP/1.0").
        headers: Read-only mapping of lower-cased header name → value.
        query:   Raw query string without the "?" ("" if none).
    """

    method: str
    path: str
    version: str = "HTTP/1.0"
    headers: Mapping[str, str] = field(default_factory=dict)
    query: str = ""

    def __post_init__(self):
        # Frozen dataclass: bypass __setattr__ to swap in a read-only view
        object.__setattr__(self, "headers", MappingProxyType(dict(self.headers)))

    @property
    def range(self) -> Optional[str]:
        """The Range header value, or None if the client sent none."""
        value = self.headers.get("range")
        return value if value else None


@dataclass(frozen=True)
class ParseResult:
    """What the parser knows after the latest feed()."""

    status: ParseStatus
    request: Optional[ParsedRequest] = None
    error: Optional[str] = None

    @property
    def is_complete(self) -> bool:
        return self.status is ParseStatus.COMPLETE

    @property
    def is_malformed(self) -> bool:
        return self.status is ParseStatus.MALFORMED


_INCOMPLETE = ParseResult(ParseStatus.INCOMPLETE)


class RequestParser:
    """
    Incremental HTTP request head parser.

    Usage:
        parser = RequestParser()
        while True:
            chunk = conn.read_some()
            result = parser.feed(chunk)
            if result.status is not ParseStatus.INCOMPLETE:
                break

    One parser instance handles exactly one request. Call reset() to reuse
    it for the next connection.
    """

    def __init__(self, max_head_size: int = 10000):
        """
        Args:
            max_head_size: Largest head we are willing to buffer. Matches the
                           size of the server's read buffer by default.
        """
        self.max_head_size = max_head_size
        self.reset()

    def reset(self) -> None:
        """Forget everything and get ready for a new request."""
        self._buffer = b""
        self._scan_pos = 0
        self._request_line: Optional[str] = None
        self._header_lines: List[str] = []
        self._result = _INCOMPLETE

    @property
    def buffered(self) -> int:
        """Number of bytes fed so far."""
        return len(self._buffer)

    def feed(self, chunk: bytes) -> ParseResult:
        """
        Add a chunk of received bytes and try to finish the head.

        Args:
            chunk: Bytes just read from the connection (may be empty).

        Returns:
            The current ParseResult.
        """
        if self._result.status is not ParseStatus.INCOMPLETE:
            return self._result

        self._buffer += chunk

        # Walk every complete line we have not looked at yet
        while True:
            newline = self._buffer.find(b"\n", self._scan_pos)
            if newline == -1:
                break

            line = self._buffer[self._scan_pos:newline]
            if line.endswith(b"\r"):
                line = line[:-1]
            self._scan_pos = newline + 1
            text = line.decode("utf-8", errors="replace")

            if self._request_line is None:
                if not text:
                    continue  # stray CRLF before the request line
                if len(text.split()) < 3:
                    return self._fail(f"Invalid request line: {text!r}")
                self._request_line = text
                continue

            if not text:
                return self._finish()

            self._header_lines.append(text)

        if len(self._buffer) >= self.max_head_size:
            return self._fail(f"Request head exceeds {self.max_head_size} bytes")

        return self._result

    def _fail(self, reason: str) -> ParseResult:
        self._result = ParseResult(ParseStatus.MALFORMED, error=reason)
        return self._result

    def _finish(self) -> ParseResult:
        method, target, version = self._request_line.split(None, 2)
        path, query = _split_target(target)

        request = ParsedRequest(
            method=method.lower(),
            path=path,
            version=version.strip(),
            headers=_parse_headers(self._header_lines),
            query=query,
        )
        self._result = ParseResult(ParseStatus.COMPLETE, request=request)
        return self._result


def _split_target(target: str) -> Tuple[str, str]:
    """
    Split a request target into (path, query).

        "/test_file"                 → ("/test_file", "")
        "/seed?piece=3"              → ("/seed", "piece=3")
        "http://host:8080/test_file" → ("/test_file", "")   (proxy form)
        "test_file"                  → ("/test_file", "")
    """
    if "://" in target.split("?", 1)[0]:
        parts = urlsplit(target)
        path, query = parts.path, parts.query
    else:
        path, _, query = target.partition("?")

    path = unquote(path)
    if not path.startswith("/"):
        path = "/" + path
    return path, query


def _parse_headers(lines: List[str]) -> Dict[str, str]:
    headers: Dict[str, str] = {}
    for line in lines:
        name, sep, value = line.partition(":")
        if not sep:
            continue  # no colon: ignore the line
        name = name.strip().lower()
        if not name:
            continue
        headers[name] = value.strip()
    return headers
