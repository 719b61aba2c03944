"""
=============================================================================
CONNECTION MANAGEMENT
=============================================================================

Wraps one accepted client socket.

=============================================================================
TCP IS A BYTE STREAM, NOT A MESSAGE PROTOCOL
=============================================================================

TCP only guarantees bytes arrive IN ORDER and INTACT, not in the chunks
they were sent in:

    Client sends:    "GET / HTTP/1.1\\r\\n\\r\\n"
    Server recv():   "GET / HT"  then  "TP/1.1\\r\\n\\r\\n"   (possible!)

A robust server buffers until it sees \\r\\n\\r\\n. THIS ONE DOES NOT.
read_request() performs exactly ONE recv() into a fresh buffer and returns
whatever arrived:

    ┌─────────────────────────────────────────────────────────────────────┐
    │                  SINGLE-READ FRAMING                                │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   iteration 1:  recv(buffer_size) → one complete request            │
    │   iteration 2:  recv(buffer_size) → the next complete request       │
    │   ...                                                                │
    │                                                                      │
    │   Nothing is carried over between iterations.                       │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

Small requests from well-behaved clients arrive in one segment, so this
works on loopback. A request split across segments, or bigger than
buffer_size, fails to decode (or has its body truncated) and the
connection is dropped.

=============================================================================
CONNECTION STATE MACHINE
=============================================================================

    ┌─────────┐   ┌──────────┐   ┌──────────┐   ┌──────────┐   ┌─────────┐
    │ READING │──►│ DECODING │──►│ HANDLING │──►│ ENCODING │──►│ WRITING │
    └────┬────┘   └────┬─────┘   └──────────┘   └──────────┘   └────┬────┘
         ▲             │                                            │
         │             │  Connection: close                        │
         │             ▼                                            │
         │        ┌─────────┐                                       │
         │        │ CLOSED  │◄── peer EOF, or any I/O / decode error│
         │        └─────────┘                                       │
         └──────────────────────────────────────────────────────────┘

=============================================================================
"""

import socket
import logging
from enum import Enum
from dataclasses import dataclass, field
import uuid

from ..errors import IoFailure


logger = logging.getLogger(__name__)


class ConnectionState(Enum):
    """Where a connection is in its request/response cycle."""
    READING = "reading"      # Waiting on recv()
    DECODING = "decoding"    # Parsing the bytes just read
    HANDLING = "handling"    # Middleware + router running
    ENCODING = "encoding"    # Serializing the response
    WRITING = "writing"      # In sendall()
    CLOSED = "closed"        # Socket released


@dataclass
class Connection:
    """
    A client connection.

    Attributes:
        socket: The client socket (blocking, no timeout).
        address: Client's (ip, port) tuple.
        id: Short unique identifier for log lines.
        state: Current ConnectionState.
        buffer_size: Maximum bytes per read_request().
        requests_handled: Responses written so far.
    """

    socket: socket.socket
    address: tuple[str, int]

    id: str = field(default_factory=lambda: str(uuid.uuid4())[:8])
    state: ConnectionState = ConnectionState.READING
    buffer_size: int = 1024
    requests_handled: int = 0

    def __post_init__(self):
        # No timeout: a silent peer holds its thread until it goes away
        self.socket.setblocking(True)

    @property
    def client_ip(self) -> str:
        return self.address[0]

    # =========================================================================
    # READING
    # =========================================================================

    def read_request(self) -> bytes:
        """
        Read up to buffer_size bytes with a single recv().

        Returns:
            The bytes received. b"" means the peer closed its side.

        Raises:
            IoFailure: recv() failed (reset, aborted, ...).
        """
        self.state = ConnectionState.READING
        try:
            data = self.socket.recv(self.buffer_size)
        except OSError as e:
            raise IoFailure(f"Failed to read from {self.client_ip}: {e}") from e

        if not data:
            logger.debug(f"[{self.id}] Peer closed the connection")
        return data

    # =========================================================================
    # WRITING
    # =========================================================================

    def send_response(self, data: bytes) -> None:
        """
        Send all of `data`.

        sendall() loops over send() until every byte is written; plain
        send() may write only part of a large response.

        Raises:
            IoFailure: The write failed (peer gone, broken pipe, ...).
        """
        self.state = ConnectionState.WRITING
        try:
            self.socket.sendall(data)
        except OSError as e:
            raise IoFailure(f"Failed to write to {self.client_ip}: {e}") from e
        self.requests_handled += 1

    # =========================================================================
    # CLOSING
    # =========================================================================

    def close(self):
        """Close the socket. Safe to call more than once."""
        if self.state == ConnectionState.CLOSED:
            return

        try:
            # Send FIN so the client sees EOF right away
            self.socket.shutdown(socket.SHUT_RDWR)
        except OSError:
            pass  # peer already gone

        self.socket.close()
        self.state = ConnectionState.CLOSED
        logger.debug(f"[{self.id}] Connection closed after {self.requests_handled} requests")

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False  # Don't suppress exceptions
