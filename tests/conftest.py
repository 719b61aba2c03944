"""
pytest configuration and fixtures.
"""

import os
import socket
import threading
from typing import Dict, Generator, Optional, Tuple
import pytest

# Add src to path for imports
import sys
from pathlib import Path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from pyhttpd import HTTPServer, ServerConfig, create_app


@pytest.fixture
def sample_get_request() -> bytes:
    """Sample HTTP GET request."""
    return (
        b"GET /echo/abc HTTP/1.1\r\n"
        b"Host: localhost:4221\r\n"
        b"User-Agent: pytest\r\n"
        b"Accept: */*\r\n"
        b"\r\n"
    )


@pytest.fixture
def sample_post_request() -> bytes:
    """Sample HTTP POST request with a body."""
    body = b"hello, file"
    return (
        b"POST /files/report.txt HTTP/1.1\r\n"
        b"Host: localhost:4221\r\n"
        b"Content-Type: application/octet-stream\r\n"
        b"Content-Length: %d\r\n"
        b"\r\n"
        % len(body)
    ) + body


@pytest.fixture
def files_dir(tmp_path: Path) -> str:
    """A directory for the files route, with the trailing separator it needs."""
    return str(tmp_path) + os.sep


@pytest.fixture
def config(files_dir: str) -> ServerConfig:
    """Test server configuration."""
    return ServerConfig(
        host="127.0.0.1",
        port=0,  # Let OS pick a free port
        directory=files_dir,
        log_level="WARNING",
    )


@pytest.fixture
def free_port() -> int:
    """Get a free port for testing."""
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as s:
        s.bind(('127.0.0.1', 0))
        return s.getsockname()[1]


# =============================================================================
# CLIENT HELPERS
# =============================================================================

def read_response(sock: socket.socket) -> Optional[Tuple[int, Dict[str, str], bytes]]:
    """
    Read one framed response from `sock`.

    Returns (status, headers, body), or None if the server closed the
    connection before sending anything. Never reads past the response, so
    a following response on the same socket stays unread.
    """
    data = b""
    while not data.endswith(b"\r\n\r\n"):
        chunk = sock.recv(1)
        if not chunk:
            if not data:
                return None
            raise AssertionError(f"Connection closed mid-headers: {data!r}")
        data += chunk

    lines = data[:-4].decode("utf-8").split("\r\n")
    status = int(lines[0].split(" ")[1])
    headers = dict(line.split(": ", 1) for line in lines[1:])

    length = int(headers.get("Content-Length", "0"))
    body = b""
    while len(body) < length:
        chunk = sock.recv(length - len(body))
        if not chunk:
            raise AssertionError("Connection closed mid-body")
        body += chunk

    return status, headers, body


def send_request(port: int, raw: bytes) -> Optional[Tuple[int, Dict[str, str], bytes]]:
    """Open a connection, send one request, read one response."""
    with socket.create_connection(("127.0.0.1", port), timeout=5.0) as sock:
        sock.sendall(raw)
        return read_response(sock)


class TestServer:
    """Test server helper that runs in a background thread."""

    def __init__(self, server: HTTPServer):
        self.server = server
        self._thread: Optional[threading.Thread] = None

    @property
    def port(self) -> int:
        return self.server.address[1]

    def start(self):
        """Start server in background thread."""
        self._thread = threading.Thread(target=self.server.run, daemon=True)
        self._thread.start()

        if not self.server.wait_until_ready(timeout=5.0):
            raise RuntimeError("Server failed to start")

    def stop(self):
        """Stop the server."""
        self.server.shutdown()

        if self._thread and self._thread.is_alive():
            self._thread.join(timeout=5.0)

    def connect(self) -> socket.socket:
        return socket.create_connection(("127.0.0.1", self.port), timeout=5.0)

    def request(self, raw: bytes):
        return send_request(self.port, raw)


@pytest.fixture
def test_server(config: ServerConfig) -> Generator[TestServer, None, None]:
    """A running server with the standard middleware and /files enabled."""
    test_srv = TestServer(create_app(config))
    test_srv.start()

    yield test_srv

    test_srv.stop()


@pytest.fixture
def response_reader():
    """The read_response() helper, for tests that manage their own sockets."""
    return read_response
