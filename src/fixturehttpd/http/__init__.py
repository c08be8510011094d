"""
=============================================================================
HTTP PROTOCOL IMPLEMENTATION
=============================================================================

The HTTP/1.0 subset the fixture server speaks, independent of sockets.

    ┌─────────────────────────────────────────────────────────────────────┐
    │                                                                     │
    │   bytes ──► RequestParser ──► ParsedRequest                         │
    │                                     │                               │
    │                                     ▼                               │
    │                                  Router ──► FileLoader              │
    │                                     │       parse_range             │
    │                                     ▼                               │
    │                               HTTPResponse ──► head bytes + body    │
    │                                                                     │
    └─────────────────────────────────────────────────────────────────────┘

Everything in here is pure: feed it bytes or a request and get a value
back. Reading and writing sockets happens in fixturehttpd.core.

=============================================================================
"""

from .request import (
    ParsedRequest,
    ParseResult,
    ParseStatus,
    RequestParser,
)
from .ranges import (
    ByteRange,
    RangeError,
    RangeNotSatisfiableError,
    RangeSyntaxError,
    parse_range,
)
from .response import (
    HTTPResponse,
    content,
    empty,
    frame_response_head,
    redirect,
)
from .router import Route, RouteKind, Router
from .status_codes import HTTPStatus

__all__ = [
    # Request parsing
    "RequestParser",
    "ParsedRequest",
    "ParseResult",
    "ParseStatus",

    # Ranges
    "ByteRange",
    "RangeError",
    "RangeSyntaxError",
    "RangeNotSatisfiableError",
    "parse_range",

    # Response framing
    "HTTPResponse",
    "frame_response_head",
    "content",
    "empty",
    "redirect",

    # Routing
    "Router",
    "Route",
    "RouteKind",

    # Status codes
    "HTTPStatus",
]
