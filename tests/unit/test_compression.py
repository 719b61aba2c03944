"""
Unit tests for gzip content encoding.
"""

import gzip

import pytest

from pyhttpd.http.request import HTTPRequest
from pyhttpd.http.response import HTTPResponse, ResponseBuilder, not_found
from pyhttpd.middleware.compression import (
    CompressionMiddleware,
    accepts_gzip,
    encode_content,
)


class TestAcceptsGzip:
    """Tests for the Accept-Encoding substring check."""

    @pytest.mark.parametrize("value,expected", [
        (None, False),
        ("gzip", True),
        ("deflate, gzip", True),
        ("gzip;q=0", True),
        ("invalid-encoding", False),
        ("deflate, br", False),
        ("", False),
    ])
    def test_negotiation(self, value, expected):
        assert accepts_gzip(value) is expected


class TestEncodeContent:
    """Tests for encode_content()."""

    def test_compresses_body(self):
        """Test that gzip output decompresses to the original body."""
        response = ResponseBuilder().text("abc").build()

        encode_content(response, "gzip")

        assert response.headers["Content-Encoding"] == "gzip"
        assert response.headers["Content-Length"] == str(len(response.body))
        assert gzip.decompress(response.body) == b"abc"

    def test_keeps_content_type(self):
        response = ResponseBuilder().text("abc").build()

        encode_content(response, "deflate, gzip")

        assert response.headers["Content-Type"] == "text/plain"

    def test_no_accept_encoding(self):
        response = ResponseBuilder().text("abc").build()

        encode_content(response, None)

        assert "Content-Encoding" not in response.headers
        assert response.body == b"abc"

    def test_unsupported_encoding(self):
        response = ResponseBuilder().text("abc").build()

        encode_content(response, "invalid-encoding")

        assert "Content-Encoding" not in response.headers
        assert response.headers["Content-Length"] == "3"

    def test_empty_body_is_compressed(self):
        response = not_found()

        encode_content(response, "gzip")

        assert response.headers["Content-Encoding"] == "gzip"
        assert gzip.decompress(response.body) == b""
        assert response.headers["Content-Length"] == str(len(response.body))

    def test_already_encoded_untouched(self):
        response = HTTPResponse(headers={"Content-Encoding": "br"}, body=b"xyz")

        encode_content(response, "gzip")

        assert response.body == b"xyz"
        assert response.headers["Content-Encoding"] == "br"

    def test_returns_same_response(self):
        response = ResponseBuilder().text("abc").build()
        assert encode_content(response, "gzip") is response


class TestCompressionMiddleware:
    """Tests for CompressionMiddleware."""

    def test_compresses_when_accepted(self):
        middleware = CompressionMiddleware()
        request = HTTPRequest("GET", "/echo/abc", headers={"Accept-Encoding": "gzip"})

        response = middleware(request, lambda req: ResponseBuilder().text("abc").build())

        assert response.headers["Content-Encoding"] == "gzip"
        assert gzip.decompress(response.body) == b"abc"

    def test_passthrough_when_not_accepted(self):
        middleware = CompressionMiddleware()
        request = HTTPRequest("GET", "/echo/abc")

        response = middleware(request, lambda req: ResponseBuilder().text("abc").build())

        assert response.body == b"abc"

    @pytest.mark.parametrize("level", [0, 10, -5])
    def test_invalid_level(self, level):
        with pytest.raises(ValueError):
            CompressionMiddleware(level=level)
