"""
=============================================================================
ERROR TAXONOMY
=============================================================================

Every failure the server can report is a subclass of HTTPServerError.
There are two families, split by WHERE they happen:

    ┌─────────────────────────────────────────────────────────────────────┐
    │                         ERROR FAMILIES                              │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   HTTPParseError  (raised by RequestParser, before routing)         │
    │   ├── MalformedFraming       no \\r\\n\\r\\n in the buffer              │
    │   ├── InvalidEncoding        header block is not UTF-8              │
    │   ├── MalformedRequestLine   request line is not 3 tokens           │
    │   └── MalformedHeader        header line is not "Name: Value"       │
    │                                                                      │
    │   HandlerError    (raised inside the router boundary)               │
    │   ├── UnsupportedMethod      files route with a non GET/POST verb   │
    │   ├── MissingHeader          required request header absent         │
    │   └── IoFailure              socket or file read/write failed       │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

WHO CATCHES WHAT:
─────────────────

    HandlerError raised by a route handler → Router.handle() turns it into
    a 500 response. The client always gets an answer.

    HTTPParseError, or IoFailure raised by the socket → nothing catches it
    inside the connection loop. The connection thread logs it and the
    socket is closed. The client gets no response.

=============================================================================
"""


class HTTPServerError(Exception):
    """Base class for every error raised by pyhttpd."""

    def __init__(self, message: str, status_code: int = 500):
        super().__init__(message)
        self.status_code = status_code  # HTTP status a handler would map this to


# =============================================================================
# DECODE-TIME ERRORS
# =============================================================================

class HTTPParseError(HTTPServerError):
    """
    Raised when raw request bytes cannot be decoded into an HTTPRequest.

    Carries a status code for symmetry with HandlerError, although the
    connection loop never sends it: a request that fails to decode drops
    the connection.
    """

    def __init__(self, message: str, status_code: int = 400):
        super().__init__(message, status_code)


class MalformedFraming(HTTPParseError):
    """The header/body separator (CRLF CRLF) was not found."""


class InvalidEncoding(HTTPParseError):
    """The header block is not valid UTF-8."""


class MalformedRequestLine(HTTPParseError):
    """The request line did not split into exactly 3 tokens."""


class MalformedHeader(HTTPParseError):
    """A header line did not split into exactly 2 parts on ': '."""


# =============================================================================
# HANDLING-TIME ERRORS
# =============================================================================

class HandlerError(HTTPServerError):
    """Raised by route handlers. The router converts these to a 500."""


class UnsupportedMethod(HandlerError):
    """The route exists but does not handle this method."""

    def __init__(self, method: str, route: str):
        super().__init__(f"Unsupported method {method} for /{route}")
        self.method = method
        self.route = route


class MissingHeader(HandlerError):
    """A header the route depends on is absent from the request."""

    def __init__(self, header: str):
        super().__init__(f"Missing required header: {header}")
        self.header = header


class IoFailure(HandlerError):
    """
    A read, write or stat on a socket or file failed.

    Wraps the underlying OSError as __cause__ so the original errno
    survives into the logs.
    """
