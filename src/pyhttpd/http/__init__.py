"""
=============================================================================
HTTP PROTOCOL LAYER
=============================================================================

Bytes in, bytes out:

    ┌─────────────────────────────────────────────────────────────────────┐
    │ request.py       raw bytes → HTTPRequest        (RequestParser)     │
    │ router.py        HTTPRequest → HTTPResponse     (Router)            │
    │ response.py      HTTPResponse → raw bytes       (to_bytes)          │
    │ status_codes.py  200/201/404/500 and their reason phrases           │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
"""

# router imports the handlers, which import request/response: keep this order
from .request import HTTPRequest, RequestParser, HTTPParseError, parse_request
from .response import (
    HTTPResponse,
    ResponseBuilder,
    ok,              # 200 OK
    created,         # 201 Created
    not_found,       # 404 Not Found
    internal_error,  # 500 Internal Server Error
)
from .status_codes import HTTPStatus, reason_phrase
from .router import Router, RouteName, split_path

__all__ = [
    # Request parsing
    "HTTPRequest",
    "RequestParser",
    "HTTPParseError",
    "parse_request",

    # Response building
    "HTTPResponse",
    "ResponseBuilder",
    "ok",
    "created",
    "not_found",
    "internal_error",

    # Status codes
    "HTTPStatus",
    "reason_phrase",

    # Routing
    "Router",
    "RouteName",
    "split_path",
]
