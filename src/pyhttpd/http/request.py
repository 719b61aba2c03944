"""
=============================================================================
HTTP REQUEST PARSER
=============================================================================

Turns the bytes of ONE socket read into a structured HTTPRequest.

=============================================================================
HTTP REQUEST ANATOMY
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │                     HTTP REQUEST STRUCTURE                          │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │  ┌─ REQUEST LINE ─────────────────────────────────────────────────┐ │
    │  │    POST /files/report.txt HTTP/1.1\r\n                         │ │
    │  │    ─┬── ────────┬───────── ───┬────                            │ │
    │  │   Method       Path        Version                             │ │
    │  └─────────────────────────────────────────────────────────────────┘ │
    │                                                                      │
    │  ┌─ HEADERS ──────────────────────────────────────────────────────┐ │
    │  │    Host: localhost:4221\r\n                                    │ │
    │  │    Content-Length: 5\r\n                                       │ │
    │  │    Accept-Encoding: gzip\r\n                                   │ │
    │  └─────────────────────────────────────────────────────────────────┘ │
    │                                                                      │
    │  ┌─ SEPARATOR ────────────────────────────────────────────────────┐ │
    │  │    \r\n            (the header block ends at \r\n\r\n)         │ │
    │  └─────────────────────────────────────────────────────────────────┘ │
    │                                                                      │
    │  ┌─ BODY ─────────────────────────────────────────────────────────┐ │
    │  │    hello           (exactly Content-Length bytes)              │ │
    │  └─────────────────────────────────────────────────────────────────┘ │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
A STRICT, MINIMAL PARSER
=============================================================================

The parser is literal:

1. HEADER NAMES ARE CASE-SENSITIVE
   "User-Agent" and "user-agent" are different keys. Names and values are
   stored exactly as sent; a repeated name overwrites the earlier value.

2. ONE SEPARATOR PER HEADER LINE
   A header line must contain ": " exactly once. "Name:value" (no space)
   and "X-Time: 12: 30" (two separators) are both rejected.

3. THE PATH IS RAW
   No percent-decoding, no query string splitting. "/echo/a%20b" echoes
   "a%20b".

4. THE BODY NEVER READS PAST THE BUFFER
   body = buffer[after separator : after separator + Content-Length],
   clamped to what actually arrived. A body that spans two TCP reads is
   truncated, not reassembled.

=============================================================================
"""

from dataclasses import dataclass, field
from typing import Dict, Optional

from ..errors import (
    HTTPParseError,
    MalformedFraming,
    InvalidEncoding,
    MalformedRequestLine,
    MalformedHeader,
)


HEADER_TERMINATOR = b"\r\n\r\n"
HEADER_SEPARATOR = ": "


@dataclass(frozen=True)
class HTTPRequest:
    """
    A decoded HTTP request.

    Frozen: a handler can read a request but never change it. A request
    belongs to the single handle() call processing it.

    Attributes:
        method:  Request verb ("GET", "POST", ...). Not validated.
        path:    Raw request target ("/files/report.txt").
        version: Protocol token from the request line ("HTTP/1.1").
        headers: Header name → value, names case-sensitive.
        body:    Body bytes, at most Content-Length long.
        client_address: (ip, port) of the peer, for logging only.
    """

    method: str
    path: str
    version: str = "HTTP/1.1"
    headers: Dict[str, str] = field(default_factory=dict)
    body: bytes = b""
    client_address: tuple[str, int] = ("", 0)

    # =========================================================================
    # HEADER ACCESSORS
    # =========================================================================

    def get_header(self, name: str, default: Optional[str] = None) -> Optional[str]:
        """
        Exact-name header lookup.

            request.get_header("User-Agent")  # not "user-agent"
        """
        return self.headers.get(name, default)

    @property
    def content_length(self) -> int:
        """
        The declared Content-Length, or 0 when absent or not an unsigned
        decimal ("12" and "+12" yes; "-1", "abc", "1_000" no).
        """
        return _parse_content_length(self.headers.get("Content-Length"))

    @property
    def user_agent(self) -> Optional[str]:
        return self.headers.get("User-Agent")

    @property
    def accept_encoding(self) -> Optional[str]:
        return self.headers.get("Accept-Encoding")

    @property
    def wants_close(self) -> bool:
        """True when the client sent `Connection: close`."""
        return self.headers.get("Connection") == "close"


def _parse_content_length(value: Optional[str]) -> int:
    if value is None:
        return 0
    digits = value[1:] if value.startswith("+") else value
    if not (digits.isascii() and digits.isdigit()):
        return 0
    return int(digits)


class RequestParser:
    """
    Parses raw request bytes into HTTPRequest objects.

    ==========================================================================
    PARSER PIPELINE
    ==========================================================================

        Raw bytes (one recv)
              │
              ▼
        1. Find \\r\\n\\r\\n ──────────── absent? → MalformedFraming
              │
              ▼
        2. Decode header block (UTF-8) ── invalid? → InvalidEncoding
              │
              ▼
        3. Request line → 3 tokens ───── else → MalformedRequestLine
              │
              ▼
        4. Header lines → Name: Value ── else → MalformedHeader
              │
              ▼
        5. Body = min(Content-Length, available) bytes
              │
              ▼
        HTTPRequest

    ==========================================================================

    The parser holds no state, so one instance is shared by every
    connection thread.
    """

    def parse(
        self,
        data: bytes,
        client_address: tuple[str, int] = ("", 0)
    ) -> HTTPRequest:
        """
        Parse one request out of `data`.

        Args:
            data: Bytes from a single socket read. May contain trailing
                  bytes beyond the logical message; they are ignored.
            client_address: Client's (ip, port) tuple for logging.

        Returns:
            The decoded HTTPRequest.

        Raises:
            HTTPParseError: One of its four subclasses, see module docs.
        """
        # =====================================================================
        # STEP 1: Split header block and candidate body at \r\n\r\n
        # =====================================================================
        header_end = data.find(HEADER_TERMINATOR)
        if header_end == -1:
            raise MalformedFraming("Unable to find header/body separator")

        header_bytes = data[:header_end]
        body_bytes = data[header_end + len(HEADER_TERMINATOR):]

        # =====================================================================
        # STEP 2: Header block must be valid UTF-8 text
        # =====================================================================
        try:
            header_text = header_bytes.decode("utf-8")
        except UnicodeDecodeError as e:
            raise InvalidEncoding(f"Header block is not valid UTF-8: {e}") from e

        # =====================================================================
        # STEP 3: Lines split on \n, tolerating a trailing \r
        # =====================================================================
        lines = [line[:-1] if line.endswith("\r") else line
                 for line in header_text.split("\n")]

        method, path, version = self._parse_request_line(lines[0])
        headers = self._parse_headers(lines[1:])

        # =====================================================================
        # STEP 4: Body, clamped to what this read actually delivered
        # =====================================================================
        length = min(_parse_content_length(headers.get("Content-Length")), len(body_bytes))

        return HTTPRequest(
            method=method,
            path=path,
            version=version,
            headers=headers,
            body=bytes(body_bytes[:length]),
            client_address=client_address,
        )

    def _parse_request_line(self, line: str) -> tuple[str, str, str]:
        """
        Split "METHOD PATH VERSION" on whitespace.

        Any run of whitespace separates tokens, so "GET  /  HTTP/1.1"
        is accepted while "GET /" and "GET / HTTP/1.1 extra" are not.
        """
        parts = line.split()
        if len(parts) != 3:
            raise MalformedRequestLine(
                f"Invalid request line: expected 3 parts, got {len(parts)}"
            )
        method, path, version = parts
        return method, path, version

    def _parse_headers(self, lines: list[str]) -> Dict[str, str]:
        headers: Dict[str, str] = {}
        for line in lines:
            if not line:
                break
            parts = line.split(HEADER_SEPARATOR)
            if len(parts) != 2:
                raise MalformedHeader(
                    f"Invalid header: expected 2 parts, got {len(parts)}"
                )
            name, value = parts
            headers[name] = value  # last write wins
        return headers


# =============================================================================
# CONVENIENCE FUNCTION
# =============================================================================

_default_parser = RequestParser()


def parse_request(
    data: bytes,
    client_address: tuple[str, int] = ("", 0)
) -> HTTPRequest:
    """Parse `data` with a shared RequestParser."""
    return _default_parser.parse(data, client_address)


__all__ = [
    "HTTPRequest",
    "RequestParser",
    "HTTPParseError",
    "parse_request",
]
