"""
=============================================================================
RESPONSE FRAMER
=============================================================================

Builds the byte-exact HTTP/1.0 responses the fixture server sends.

=============================================================================
RESPONSE LAYOUT
=============================================================================

Every response has the same shape:

    ┌─────────────────────────────────────────────────────────────────────┐
    │  HTTP/1.0 206 Partial\r\n             ← Status line                  │
    │  content-length: 100\r\n              ← Always present               │
    │  connection: close\r\n                ← Always present (HTTP/1.0)    │
    │  Content-Encoding: gzip\r\n           ← Optional single extra line   │
    │  \r\n                                 ← End of head                  │
    ├─────────────────────────────────────────────────────────────────────┤
    │  <100 bytes of body>                  ← Written separately           │
    └─────────────────────────────────────────────────────────────────────┘

The head and the body go out as two writes. Clients must cope with the
body arriving in a later segment than the head, which is part of what we
are testing.

The body is always delimited by content-length. There is no chunked
encoding and no keep-alive: the server closes the connection after the
body.

=============================================================================
"""

from dataclasses import dataclass
from typing import Optional, Union

from .status_codes import HTTPStatus


HTTP_VERSION = "HTTP/1.0"


def header_line(name: str, value: str) -> str:
    """Format a single 'Name: value' header line (without CRLF)."""
    return f"{name}: {value}"


def frame_response_head(
    status: Union[HTTPStatus, int],
    reason: Optional[str] = None,
    extra_header: Optional[str] = None,
    content_length: int = 0,
) -> bytes:
    """
    Build a response head.

    Args:
        status: Status code.
        reason: Reason phrase. Defaults to the phrase for status.
        extra_header: One extra header line, written verbatim. A trailing
                      CRLF is added if the caller did not supply one.
        content_length: Declared length of the body that follows.

    Returns:
        Status line, headers and the blank line, as bytes.
    """
    code = int(status)
    if reason is None:
        reason = HTTPStatus(code).phrase

    head = (
        f"{HTTP_VERSION} {code} {reason}\r\n"
        f"content-length: {content_length}\r\n"
        f"connection: close\r\n"
    )
    if extra_header:
        head += extra_header if extra_header.endswith("\r\n") else extra_header + "\r\n"
    head += "\r\n"

    return head.encode("latin-1")


@dataclass
class HTTPResponse:
    """
    A response waiting to be written.

    Attributes:
        status: Status code.
        body: Body bytes (empty for redirects and errors).
        extra_header: Optional single header line beyond the fixed ones.
        reason: Override for the reason phrase.
    """

    status: HTTPStatus = HTTPStatus.OK
    body: bytes = b""
    extra_header: Optional[str] = None
    reason: Optional[str] = None

    @property
    def reason_phrase(self) -> str:
        return self.reason if self.reason is not None else self.status.phrase

    @property
    def content_length(self) -> int:
        return len(self.body)

    def head_bytes(self) -> bytes:
        """The framed head, ready for the first write."""
        return frame_response_head(
            self.status, self.reason_phrase, self.extra_header, self.content_length
        )


# =============================================================================
# CONVENIENCE FUNCTIONS
# =============================================================================

def redirect(location: str) -> HTTPResponse:
    """301 with a Location header and no body."""
    return HTTPResponse(
        status=HTTPStatus.MOVED_PERMANENTLY,
        extra_header=header_line("Location", location),
    )


def empty(status: HTTPStatus, extra_header: Optional[str] = None) -> HTTPResponse:
    """A bodiless response, used for every error the server reports."""
    return HTTPResponse(status=status, extra_header=extra_header)


def content(
    body: bytes,
    status: HTTPStatus = HTTPStatus.OK,
    extra_header: Optional[str] = None,
) -> HTTPResponse:
    """A response carrying file bytes (whole file or a slice of it)."""
    return HTTPResponse(status=status, body=body, extra_header=extra_header)
