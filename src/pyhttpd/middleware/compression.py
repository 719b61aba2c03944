"""
=============================================================================
COMPRESSION (CONTENT NEGOTIATION)
=============================================================================

Gzips the response body when the client says it accepts gzip.

=============================================================================
THE NEGOTIATION RULE
=============================================================================

    Accept-Encoding value          Compressed?
    ─────────────────────────────  ───────────
    (header absent)                no
    "gzip"                         yes
    "deflate, gzip"                yes
    "invalid-encoding"             no
    "gzip;q=0"                     yes   (substring match, q-values ignored)

A plain substring test on the header value. There is no preference list,
no quality-value parsing, no minimum size and no content-type filter:
every body is compressed when the substring is present, even an empty
one (an empty body becomes a ~20 byte gzip stream).

=============================================================================
WHAT CHANGES ON THE RESPONSE
=============================================================================

    BEFORE                                AFTER
    ──────────────────────────────        ─────────────────────────────────
    Content-Type: text/plain              Content-Type: text/plain
    Content-Length: 3                     Content-Length: 23
                                          Content-Encoding: gzip
    body = b"abc"                         body = gzip.compress(b"abc")

Content-Length is recomputed from the compressed bytes, so this step must
run AFTER the router finalizes the body and BEFORE to_bytes().

=============================================================================
"""

import gzip
import zlib
from typing import Optional

from .base import Middleware, NextHandler
from ..http.request import HTTPRequest
from ..http.response import HTTPResponse


GZIP = "gzip"

# zlib's own default (Z_DEFAULT_COMPRESSION resolves to 6)
DEFAULT_LEVEL = 6


def accepts_gzip(accept_encoding: Optional[str]) -> bool:
    """True when the Accept-Encoding value mentions gzip anywhere."""
    return accept_encoding is not None and GZIP in accept_encoding


def encode_content(
    response: HTTPResponse,
    accept_encoding: Optional[str],
    level: int = DEFAULT_LEVEL,
) -> HTTPResponse:
    """
    Gzip `response` in place when `accept_encoding` allows it.

    A response that already carries Content-Encoding is returned
    untouched, so the body is never compressed twice.

    Args:
        response: The finalized response from the router.
        accept_encoding: The request's Accept-Encoding value, or None.
        level: zlib compression level.

    Returns:
        The same response object.
    """
    if not accepts_gzip(accept_encoding):
        return response

    if "Content-Encoding" in response.headers:
        return response

    response.body = gzip.compress(response.body, compresslevel=level)
    response.headers["Content-Encoding"] = GZIP
    response.headers["Content-Length"] = str(len(response.body))
    return response


class CompressionMiddleware(Middleware):
    """
    Middleware form of encode_content().

    Place it last in the pipeline (closest to the router):

        pipeline.add(LoggingMiddleware())
        pipeline.add(CompressionMiddleware())
    """

    def __init__(self, level: int = DEFAULT_LEVEL):
        """
        Args:
            level: Compression level (1-9).
                  1 = fastest, least compression
                  6 = balanced (default)
                  9 = slowest, best compression
        """
        if not (1 <= level <= 9 or level == zlib.Z_DEFAULT_COMPRESSION):
            raise ValueError(f"Invalid compression level: {level}")
        self.level = level

    def __call__(self, request: HTTPRequest, next: NextHandler) -> HTTPResponse:
        response = next(request)
        return encode_content(response, request.accept_encoding, self.level)


# =============================================================================
# MODULE SUMMARY
# =============================================================================
#
# 1. Substring check of Accept-Encoding for "gzip"
# 2. gzip.compress() the body at level 6
# 3. Set Content-Encoding: gzip, recompute Content-Length
# 4. Never touch a response that is already encoded
# =============================================================================
