"""
=============================================================================
ACCESS LOGGING MIDDLEWARE
=============================================================================

Writes one line per handled request to the "pyhttpd.access" logger.

    127.0.0.1 - - [18/Oct/2026:10:00:00 +0000] "GET /echo/abc" 200 23 0.41ms

The byte count is the body as SENT, so a gzipped response logs its
compressed size. That only holds because this middleware is outermost and
sees the response after CompressionMiddleware has run.

Requests that fail to decode never reach the pipeline; they are logged by
the connection thread instead (see server.py).

=============================================================================
"""

import time
import json
import logging
from dataclasses import dataclass, asdict

from .base import Middleware, NextHandler
from ..http.request import HTTPRequest
from ..http.response import HTTPResponse


# Namespaced so the access log can be routed separately:
#   logging.getLogger("pyhttpd.access").addHandler(file_handler)
logger = logging.getLogger("pyhttpd.access")


@dataclass
class RequestLog:
    """Structured log entry for one request."""

    method: str
    path: str
    client_ip: str
    user_agent: str
    status_code: int
    content_length: int
    duration_ms: float
    timestamp: str

    def to_dict(self) -> dict:
        entry = asdict(self)
        entry["duration_ms"] = round(self.duration_ms, 2)
        return entry

    def to_text(self) -> str:
        """Apache-style access log line."""
        return (
            f'{self.client_ip or "-"} - - [{self.timestamp}] '
            f'"{self.method} {self.path}" {self.status_code} '
            f'{self.content_length} {self.duration_ms:.2f}ms'
        )


class LoggingMiddleware(Middleware):
    """
    Request logging middleware. Add it FIRST so it wraps everything.

    Args:
        log_format: "text" (Apache-like) or "json".
        log_level: Level the access lines are logged at.
    """

    def __init__(self, log_format: str = "text", log_level: int = logging.INFO):
        self.log_format = log_format
        self.log_level = log_level

    def __call__(self, request: HTTPRequest, next: NextHandler) -> HTTPResponse:
        start_time = time.time()

        try:
            response = next(request)
        except Exception as e:
            duration_ms = (time.time() - start_time) * 1000
            logger.error(
                f"Request failed: {request.method} {request.path} "
                f"- {type(e).__name__}: {e} ({duration_ms:.2f}ms)"
            )
            raise

        duration_ms = (time.time() - start_time) * 1000

        log_entry = RequestLog(
            method=request.method,
            path=request.path,
            client_ip=request.client_address[0],
            user_agent=request.user_agent or "-",
            status_code=int(response.status),
            content_length=len(response.body),
            duration_ms=duration_ms,
            timestamp=time.strftime("%d/%b/%Y:%H:%M:%S %z"),
        )

        if self.log_format == "json":
            logger.log(self.log_level, json.dumps(log_entry.to_dict()))
        else:
            logger.log(self.log_level, log_entry.to_text())

        return response
