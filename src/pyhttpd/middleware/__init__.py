"""
=============================================================================
MIDDLEWARE
=============================================================================

Wraps the router with cross-cutting behavior:

    Request → [Logging] → [Compression] → Router
                                            │
    Response ← [Logging] ← [Compression] ←──┘

Available middleware:
- LoggingMiddleware: one access log line per request
- CompressionMiddleware: gzip when the client accepts it

=============================================================================
"""

from .base import Middleware, MiddlewarePipeline, NextHandler
from .logging import LoggingMiddleware, RequestLog
from .compression import CompressionMiddleware, accepts_gzip, encode_content

__all__ = [
    "Middleware",
    "MiddlewarePipeline",
    "NextHandler",
    "LoggingMiddleware",
    "RequestLog",
    "CompressionMiddleware",
    "accepts_gzip",
    "encode_content",
]
