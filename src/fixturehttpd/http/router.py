"""
=============================================================================
REQUEST ROUTER
=============================================================================

Decides what to send back for a parsed request.

=============================================================================
ROUTING TABLE
=============================================================================

A few exact paths are redirect fixtures. Everything else is a file:

    ┌──────────────────────────┬─────────────────────┬─────────────────────┐
    │ Path                     │ Kind                │ Response            │
    ├──────────────────────────┼─────────────────────┼─────────────────────┤
    │ /redirect                │ REDIRECT            │ 301 → /test_file    │
    │ /infinite_redirect       │ INFINITE_REDIRECT   │ 301 → itself        │
    │ /relative/redirect       │ RELATIVE_REDIRECT   │ 301 → ../test_file  │
    │ anything else            │ FILE                │ 200/206/4xx/5xx     │
    └──────────────────────────┴─────────────────────┴─────────────────────┘

The infinite redirect never resolves. It exists so the client's loop
detection has something to detect.

The relative redirect sends a relative reference. A correct client resolves
it against /relative/redirect and asks for /test_file.

=============================================================================
FILE RESPONSES
=============================================================================

        load file
            │
            ├── FileNotFound ───────────────────────► 404
            ├── FileUnreadable ─────────────────────► 503
            │
            ├── no Range header ────────────────────► 200 + whole file
            │
            └── Range header
                    ├── bad syntax ─────────────────► 400
                    ├── outside the file ───────────► 416
                    └── ok ─────────────────────────► 206 + slice

Files ending in ".gz" are precompressed variants and get
"Content-Encoding: gzip" on 200 and 206.

=============================================================================
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Dict, Optional

from .ranges import RangeNotSatisfiableError, RangeSyntaxError, parse_range
from .request import ParsedRequest
from .response import HTTPResponse, content, empty, header_line, redirect
from .status_codes import HTTPStatus
from ..handlers.files import FileLoader, FileNotFound, FileUnreadable


logger = logging.getLogger(__name__)


SUPPORTED_METHODS = frozenset({"get", "post"})

# Extension → Content-Encoding for precompressed variants
PRECOMPRESSED_EXTENSIONS = {
    ".gz": "gzip",
}


class RouteKind(Enum):
    """What a path maps to."""
    REDIRECT = "redirect"
    INFINITE_REDIRECT = "infinite_redirect"
    RELATIVE_REDIRECT = "relative_redirect"
    FILE = "file"


@dataclass(frozen=True)
class Route:
    """
    A resolved route.

    Attributes:
        kind: Route kind.
        path: Request path that matched.
        location: Redirect target (None for FILE).
    """
    kind: RouteKind
    path: str
    location: Optional[str] = None


class Router:
    """
    Maps requests to responses.

    Usage:
        router = Router(FileLoader("."))
        response = router.dispatch(request)
        if response is None:
            ...  # unsupported method: close without answering
    """

    def __init__(
        self,
        loader: FileLoader,
        redirect_path: str = "/redirect",
        redirect_target: str = "/test_file",
        infinite_redirect_path: str = "/infinite_redirect",
        relative_redirect_path: str = "/relative/redirect",
        relative_redirect_target: str = "../test_file",
    ):
        self.loader = loader
        self._table: Dict[str, Route] = {}

        self.add_redirect(RouteKind.REDIRECT, redirect_path, redirect_target)
        # Points back at itself
        self.add_redirect(
            RouteKind.INFINITE_REDIRECT, infinite_redirect_path, infinite_redirect_path
        )
        self.add_redirect(
            RouteKind.RELATIVE_REDIRECT, relative_redirect_path, relative_redirect_target
        )

    @classmethod
    def from_config(cls, config) -> "Router":
        """Build a router and its file loader from a ServerConfig."""
        return cls(
            FileLoader(config.root_dir, config.max_file_size),
            redirect_path=config.redirect_path,
            redirect_target=config.redirect_target,
            infinite_redirect_path=config.infinite_redirect_path,
            relative_redirect_path=config.relative_redirect_path,
            relative_redirect_target=config.relative_redirect_target,
        )

    # =========================================================================
    # ROUTING TABLE
    # =========================================================================

    def add_redirect(self, kind: RouteKind, path: str, location: str) -> None:
        """Register a redirect fixture at an exact path."""
        if kind is RouteKind.FILE:
            raise ValueError("FILE routes are implicit and cannot be registered")
        self._table[path] = Route(kind=kind, path=path, location=location)

    def resolve(self, path: str) -> Route:
        """Look up the route for a path. Unlisted paths are files."""
        route = self._table.get(path)
        if route is None:
            return Route(kind=RouteKind.FILE, path=path)
        return route

    # =========================================================================
    # DISPATCH
    # =========================================================================

    def dispatch(self, request: ParsedRequest) -> Optional[HTTPResponse]:
        """
        Produce the response for a request.

        Returns:
            The response, or None if the method is not supported. In that
            case the caller closes the connection without writing anything.
        """
        if request.method not in SUPPORTED_METHODS:
            logger.warning(f"Unsupported method: {request.method} {request.path}")
            return None

        route = self.resolve(request.path)

        if route.kind is RouteKind.FILE:
            return self._serve_file(request)

        logger.debug(f"{route.kind.value}: {route.path} -> {route.location}")
        return redirect(route.location)

    def _serve_file(self, request: ParsedRequest) -> HTTPResponse:
        relative_path = request.path[1:]  # strip the leading "/"
        logger.debug(f"Serving file {relative_path}")

        try:
            data = self.loader.load(relative_path)
        except FileNotFound as e:
            logger.info(str(e))
            return empty(HTTPStatus.NOT_FOUND)
        except FileUnreadable as e:
            logger.warning(str(e))
            return empty(HTTPStatus.SERVICE_UNAVAILABLE)

        encoding_header = _content_encoding_header(relative_path)

        range_value = request.range
        if range_value is None:
            return content(data, HTTPStatus.OK, encoding_header)

        try:
            byte_range = parse_range(range_value, len(data))
        except RangeSyntaxError as e:
            logger.warning(str(e))
            return empty(HTTPStatus.BAD_REQUEST)
        except RangeNotSatisfiableError as e:
            logger.warning(str(e))
            return empty(
                HTTPStatus.RANGE_NOT_SATISFIABLE,
                header_line("Content-Range", f"bytes */{e.content_length}"),
            )

        return content(byte_range.slice(data), HTTPStatus.PARTIAL_CONTENT, encoding_header)


def _content_encoding_header(path: str) -> Optional[str]:
    for extension, encoding in PRECOMPRESSED_EXTENSIONS.items():
        if path.endswith(extension):
            return header_line("Content-Encoding", encoding)
    return None
