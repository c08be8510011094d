"""
=============================================================================
ACCESS LOG
=============================================================================

One log line per answered request, on the "fixturehttpd.access" logger.

When a transfer test fails, the first question is usually "what did the
client actually ask for?". The access log answers it:

    127.0.0.1 - - [16/Oct/2026:19:05:12 +0000] "GET /test_file" 206 100 range=bytes=100-199 0.41ms

Requests that are abandoned (malformed head, unsupported method, read
failure) get a WARNING from the server module instead, since no status was
sent.

The logger can be configured separately from the rest of the server:

    logging.getLogger("fixturehttpd.access").setLevel(logging.WARNING)

=============================================================================
"""

import json
import logging
import time
from dataclasses import dataclass
from typing import Optional

from .core.connection import Connection
from .http.request import ParsedRequest
from .http.response import HTTPResponse


logger = logging.getLogger("fixturehttpd.access")


@dataclass
class RequestLog:
    """
    Structured log entry for one request/response cycle.
    """

    connection_id: str
    client_ip: str
    method: str
    path: str
    range: Optional[str]
    status_code: int
    content_length: int
    sent: bool
    duration_ms: float
    timestamp: str

    def to_dict(self) -> dict:
        """Dictionary form for JSON output."""
        return {
            "connection_id": self.connection_id,
            "client_ip": self.client_ip,
            "method": self.method,
            "path": self.path,
            "range": self.range,
            "status_code": self.status_code,
            "content_length": self.content_length,
            "sent": self.sent,
            "duration_ms": round(self.duration_ms, 2),
            "timestamp": self.timestamp,
        }

    def to_text(self) -> str:
        """Apache-style line, with the Range header appended when present."""
        line = (
            f'{self.client_ip} - - [{self.timestamp}] '
            f'"{self.method.upper()} {self.path}" {self.status_code} '
            f'{self.content_length}'
        )
        if self.range:
            line += f" range={self.range}"
        if not self.sent:
            line += " (write failed)"
        return line + f" {self.duration_ms:.2f}ms"


class AccessLogger:
    """
    Formats and emits RequestLog entries.

    Args:
        log_format: "text" (Apache style) or "json".
        log_level: Level the entries are logged at.
    """

    def __init__(self, log_format: str = "text", log_level: int = logging.INFO):
        self.log_format = log_format
        self.log_level = log_level

    def log(
        self,
        conn: Connection,
        request: ParsedRequest,
        response: HTTPResponse,
        sent: bool,
        started: float,
    ) -> RequestLog:
        """Build the entry for a finished request and emit it."""
        entry = RequestLog(
            connection_id=conn.id,
            client_ip=conn.client_ip,
            method=request.method,
            path=request.path,
            range=request.range,
            status_code=int(response.status),
            content_length=response.content_length,
            sent=sent,
            duration_ms=(time.time() - started) * 1000,
            timestamp=time.strftime("%d/%b/%Y:%H:%M:%S %z"),
        )

        if self.log_format == "json":
            logger.log(self.log_level, json.dumps(entry.to_dict()))
        else:
            logger.log(self.log_level, entry.to_text())

        return entry
