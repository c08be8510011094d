"""
=============================================================================
BYTE-RANGE RESOLVER
=============================================================================

Turns a Range header into a validated slice of a file.

=============================================================================
RANGE REQUESTS
=============================================================================

A client that only wants part of a resource asks for it by byte offset:

    GET /data.bin HTTP/1.0
    Range: bytes=100-199

Both offsets are INCLUSIVE, so this asks for 100 bytes:

    offset:   0 ........ 99 │ 100 ............ 199 │ 200 ........ 999
              ──────────────┼──────────────────────┼────────────────
                            └──── sent (206) ──────┘

    length = end - start + 1

=============================================================================
SUPPORTED FORMS
=============================================================================

Only the single, fully specified form is accepted:

    bytes=<start>-<end>     ✓

Everything else RFC 7233 allows is rejected as a syntax error:

    bytes=-500              ✗  suffix range
    bytes=500-              ✗  open-ended range
    bytes=0-99,200-299      ✗  multiple ranges

The server answers a syntax error with 400 and an unsatisfiable range with
416; see router.py.

=============================================================================
"""

import re
from dataclasses import dataclass


class RangeError(ValueError):
    """Base class for Range header problems."""

    def __init__(self, message: str, value: str):
        super().__init__(message)
        self.value = value


class RangeSyntaxError(RangeError):
    """The header is not of the form bytes=<start>-<end>."""


class RangeNotSatisfiableError(RangeError):
    """The range is well formed but does not fit inside the content."""

    def __init__(self, message: str, value: str, content_length: int):
        super().__init__(message, value)
        self.content_length = content_length


@dataclass(frozen=True)
class ByteRange:
    """
    An inclusive byte interval [start, end].

    Invariant (checked by parse_range): 0 <= start <= end < content_length
    """

    start: int
    end: int

    def slice(self, data: bytes) -> bytes:
        """The bytes this range selects from data."""
        return data[self.start:self.end + 1]


# "bytes=100-199" with optional whitespace around the pieces.
# Multi-range values contain a comma and therefore never match.
RANGE_PATTERN = re.compile(r"^\s*bytes\s*=\s*(\d+)\s*-\s*(\d+)\s*$", re.IGNORECASE)


def parse_range(value: str, content_length: int) -> ByteRange:
    """
    Resolve a Range header value against a content length.

    Args:
        value: Raw header value (e.g. "bytes=100-199").
        content_length: Size of the content being sliced.

    Returns:
        The validated ByteRange.

    Raises:
        RangeSyntaxError: If value is not bytes=<start>-<end>.
        RangeNotSatisfiableError: If the interval is empty, reversed, or
                                  reaches past the end of the content.
    """
    match = RANGE_PATTERN.match(value)
    if not match:
        raise RangeSyntaxError(f"Unsupported Range header: {value!r}", value)

    start, end = int(match.group(1)), int(match.group(2))

    if start > end:
        raise RangeNotSatisfiableError(
            f"Range start {start} is after end {end}", value, content_length
        )
    if end >= content_length:
        raise RangeNotSatisfiableError(
            f"Range {start}-{end} exceeds content length {content_length}",
            value,
            content_length,
        )

    return ByteRange(start, end)
