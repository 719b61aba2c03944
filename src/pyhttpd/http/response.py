"""
=============================================================================
HTTP RESPONSE
=============================================================================

Holds a response while it is being built and serializes it to HTTP/1.1
wire bytes.

=============================================================================
HTTP RESPONSE ANATOMY
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │                     HTTP RESPONSE STRUCTURE                         │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │    HTTP/1.1 200 OK\r\n                   ← status line              │
    │    Content-Type: text/plain\r\n          ← headers, any order       │
    │    Content-Length: 3\r\n                                            │
    │    \r\n                                  ← blank line               │
    │    abc                                   ← raw body bytes           │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
WHY IS THE RESPONSE MUTABLE?
=============================================================================

Unlike HTTPRequest, a response is edited after the handler returns it:

    Router          builds status, headers, body
       │
       ▼
    Compression     replaces body with gzip bytes,
       │            sets Content-Encoding, rewrites Content-Length
       ▼
    to_bytes()      serializes whatever is there now

Content-Length must describe the body AT TRANSMISSION TIME, which is why
to_bytes() fills it in from len(body) when nobody set it.

=============================================================================
"""

from dataclasses import dataclass, field
from typing import Dict, Union

from .status_codes import HTTPStatus, reason_phrase


HTTP_VERSION = "HTTP/1.1"


@dataclass
class HTTPResponse:
    """
    An HTTP response under construction.

        Handler returns          to_bytes()              Socket sends
        HTTPResponse    ─────►   serializes    ─────►    raw bytes
    """

    status: int = HTTPStatus.OK
    headers: Dict[str, str] = field(default_factory=dict)
    body: bytes = b""

    @property
    def reason(self) -> str:
        """Reason phrase for the status ("Unknown" for unmapped codes)."""
        return reason_phrase(self.status)

    @property
    def status_line(self) -> str:
        """
        Status line without the trailing CRLF.

        Example: "HTTP/1.1 404 Not Found"
        """
        return f"{HTTP_VERSION} {int(self.status)} {self.reason}"

    def set_header(self, name: str, value: str) -> "HTTPResponse":
        """Set a header and return self for chaining."""
        self.headers[name] = value
        return self

    def set_body(self, body: Union[str, bytes]) -> "HTTPResponse":
        """Set the body, encoding str as UTF-8."""
        if isinstance(body, str):
            self.body = body.encode("utf-8")
        else:
            self.body = body
        return self

    def to_bytes(self) -> bytes:
        """
        Serialize the response for socket.sendall().

        Headers are written in dict order, each as "Name: Value\\r\\n",
        with no escaping or folding. If no Content-Length header is set,
        one is added from the body so a keep-alive client can frame the
        message.

        Returns:
            The complete response as bytes.
        """
        response_headers = dict(self.headers)
        if "Content-Length" not in response_headers:
            response_headers["Content-Length"] = str(len(self.body))

        lines = [self.status_line]
        for name, value in response_headers.items():
            lines.append(f"{name}: {value}")
        lines.append("")

        header_bytes = "\r\n".join(lines).encode("utf-8") + b"\r\n"
        return header_bytes + self.body


class ResponseBuilder:
    """
    Fluent builder for responses.

        response = (ResponseBuilder()
            .status(HTTPStatus.OK)
            .text("hello")
            .build())

    Every setter returns self; build() hands back the HTTPResponse.
    """

    def __init__(self):
        self._status: int = HTTPStatus.OK
        self._headers: Dict[str, str] = {}
        self._body: bytes = b""

    def status(self, status: int) -> "ResponseBuilder":
        self._status = status
        return self

    def header(self, name: str, value: str) -> "ResponseBuilder":
        self._headers[name] = value
        return self

    def content_type(self, content_type: str) -> "ResponseBuilder":
        return self.header("Content-Type", content_type)

    def body(self, body: Union[str, bytes]) -> "ResponseBuilder":
        """Set the raw body and its Content-Length."""
        if isinstance(body, str):
            body = body.encode("utf-8")
        self._body = body
        self._headers["Content-Length"] = str(len(body))
        return self

    def text(self, text: str) -> "ResponseBuilder":
        """
        Plain text body.

        Content-Length counts UTF-8 BYTES, not characters:
        "héllo" is 5 characters but 6 bytes.
        """
        return self.content_type("text/plain").body(text)

    def octet_stream(self, content: bytes) -> "ResponseBuilder":
        """Binary body, as served by the files route."""
        return self.content_type("application/octet-stream").body(content)

    def build(self) -> HTTPResponse:
        return HTTPResponse(
            status=self._status,
            headers=dict(self._headers),
            body=self._body,
        )


# =============================================================================
# CONVENIENCE FUNCTIONS
# =============================================================================
#
# One per status in the server's vocabulary. Each returns a fresh response
# with an empty body; callers fill in what they need.
#
# =============================================================================

def ok(body: Union[str, bytes] = b"") -> HTTPResponse:
    """200 OK. A str body is sent as text/plain."""
    if isinstance(body, str):
        return ResponseBuilder().text(body).build()
    return HTTPResponse(status=HTTPStatus.OK, body=body)


def created() -> HTTPResponse:
    """201 Created."""
    return HTTPResponse(status=HTTPStatus.CREATED)


def not_found() -> HTTPResponse:
    """404 Not Found."""
    return HTTPResponse(status=HTTPStatus.NOT_FOUND)


def internal_error() -> HTTPResponse:
    """500 Internal Server Error."""
    return HTTPResponse(status=HTTPStatus.INTERNAL_SERVER_ERROR)
