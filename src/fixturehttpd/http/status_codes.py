"""
=============================================================================
HTTP STATUS CODES
=============================================================================

The handful of status codes the fixture server can put on the wire.

=============================================================================
REASON PHRASES
=============================================================================

The reason phrase is the text after the code on the status line:

    HTTP/1.0 206 Partial
             ─── ───────
              │     └──── Reason phrase (informational only)
              └────────── Status code

Clients must not depend on the phrase, but the transfer clients we test
against have historically been checked against these exact lines, so the
phrases below are the ones this server has always sent. Note that two of
them differ from the RFC 7231 suggestions:

    206  "Partial"          (RFC: "Partial Content")
    503  "Internal Error"   (RFC: "Service Unavailable")

=============================================================================
"""

from enum import IntEnum


class HTTPStatus(IntEnum):
    """
    HTTP status codes produced by the server.

    Extends IntEnum, so members compare equal to plain integers:

        >>> HTTPStatus.PARTIAL_CONTENT == 206
        True
        >>> HTTPStatus.PARTIAL_CONTENT.phrase
        'Partial'
    """

    # 2xx SUCCESS
    OK = 200                        # Whole file served
    PARTIAL_CONTENT = 206           # Byte range served

    # 3xx REDIRECTION
    MOVED_PERMANENTLY = 301         # All redirect fixtures

    # 4xx CLIENT ERRORS
    BAD_REQUEST = 400               # Range header we cannot parse
    NOT_FOUND = 404                 # No such file under the serve root
    RANGE_NOT_SATISFIABLE = 416     # Range outside the file

    # 5xx SERVER ERRORS
    SERVICE_UNAVAILABLE = 503       # File too large or unreadable

    @property
    def phrase(self) -> str:
        """Reason phrase used on the status line."""
        return _STATUS_PHRASES[self]


_STATUS_PHRASES = {
    HTTPStatus.OK: "OK",
    HTTPStatus.PARTIAL_CONTENT: "Partial",
    HTTPStatus.MOVED_PERMANENTLY: "Moved Permanently",
    HTTPStatus.BAD_REQUEST: "Bad Request",
    HTTPStatus.NOT_FOUND: "Not Found",
    HTTPStatus.RANGE_NOT_SATISFIABLE: "Range Not Satisfiable",
    HTTPStatus.SERVICE_UNAVAILABLE: "Internal Error",
}
