"""
=============================================================================
TCP LISTENER
=============================================================================

Owns the listening socket: bind, listen, accept, and hand every accepted
client to a callback.

=============================================================================
SOCKET LIFECYCLE (Server Side)
=============================================================================

    1. socket()    Create the listening socket
    2. bind()      Reserve 127.0.0.1:4221      ← only fatal error path
    3. listen()    OS starts queueing clients (up to `backlog`)
    4. accept()    Returns a NEW socket per client; the listener keeps going
    5. close()     On shutdown

                    ┌───────────────────────┐
                    │   Listening Socket    │  bound to 127.0.0.1:4221
                    └───────────┬───────────┘  never sends/receives data
                                │ accept()
            ┌───────────────────┼───────────────────┐
            ▼                   ▼                   ▼
      ┌───────────┐       ┌───────────┐       ┌───────────┐
      │ client #1 │       │ client #2 │       │ client #3 │
      │  thread   │       │  thread   │       │  thread   │
      └───────────┘       └───────────┘       └───────────┘

The listener itself does not decide HOW a client is served. It wraps the
socket in a Connection and calls connection_handler(conn). HTTPServer
passes a handler that starts one thread per connection.

=============================================================================
INTERRUPTIBLE ACCEPT
=============================================================================

accept() blocks forever by default, which would make shutdown() useless.
The listening socket gets a 1 second timeout instead:

    while running:
        try:
            accept()          # at most 1 second
        except timeout:
            continue          # re-check `running`

Client sockets do NOT inherit this; Connection switches them back to
plain blocking mode.

=============================================================================
"""

import socket
import signal
import logging
import threading
from typing import Optional, Callable, Tuple

from ..config import ServerConfig
from .connection import Connection


logger = logging.getLogger(__name__)


class SocketServer:
    """
    Accepts TCP connections and dispatches them.

    Usage:
        def handle_connection(conn: Connection):
            ...

        server = SocketServer(config)
        server.start(handle_connection)  # Blocks until shutdown
    """

    ACCEPT_POLL_INTERVAL = 1.0

    def __init__(self, config: ServerConfig):
        self.config = config

        self._socket: Optional[socket.socket] = None
        self._running = False

        # Set once the listener is bound
        self._ready_event = threading.Event()

        self._original_handlers: dict = {}

    @property
    def address(self) -> Tuple[str, int]:
        """
        The bound (host, port).

        With port=0 in the config this is the port the OS actually picked,
        once start() has bound the socket.
        """
        if self._socket is not None:
            return self._socket.getsockname()[:2]
        return (self.config.host, self.config.port)

    def _create_socket(self) -> socket.socket:
        sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)

        # SO_REUSEADDR: restart without waiting out TIME_WAIT
        sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)

        # TCP_NODELAY: small responses go out immediately
        sock.setsockopt(socket.IPPROTO_TCP, socket.TCP_NODELAY, 1)

        sock.settimeout(self.ACCEPT_POLL_INTERVAL)
        return sock

    def _setup_signals(self):
        """
        Turn SIGINT/SIGTERM into a graceful shutdown.

        signal.signal() only works in the main thread, so a server started
        from a background thread (as the tests do) skips this step.
        """
        if threading.current_thread() is not threading.main_thread():
            return

        def shutdown_handler(signum, frame):
            signal_name = signal.Signals(signum).name
            logger.info(f"Received {signal_name}, initiating shutdown...")
            self.shutdown()

        self._original_handlers[signal.SIGTERM] = signal.signal(signal.SIGTERM, shutdown_handler)
        self._original_handlers[signal.SIGINT] = signal.signal(signal.SIGINT, shutdown_handler)

    def _restore_signals(self):
        for sig, handler in self._original_handlers.items():
            signal.signal(sig, handler)
        self._original_handlers.clear()

    def start(self, connection_handler: Callable[[Connection], None]):
        """
        Bind, listen and run the accept loop. Blocks until shutdown().

        Args:
            connection_handler: Called with every accepted Connection. It
                must return quickly; the accept loop waits for it.

        Raises:
            OSError: bind() failed (port in use, permission denied).
        """
        self._socket = self._create_socket()

        try:
            self._socket.bind((self.config.host, self.config.port))
        except OSError as e:
            logger.error(f"Failed to bind to {self.config.host}:{self.config.port}: {e}")
            self._socket.close()
            self._socket = None
            raise

        self._socket.listen(self.config.backlog)

        self._running = True
        self._setup_signals()

        host, port = self.address
        logger.info(f"Server listening on {host}:{port}")
        self._ready_event.set()

        try:
            self._accept_loop(connection_handler)
        finally:
            self._cleanup()

    def _accept_loop(self, connection_handler: Callable[[Connection], None]):
        while self._running:
            try:
                client_socket, client_address = self._socket.accept()
            except socket.timeout:
                continue
            except OSError as e:
                if self._running:
                    logger.error(f"Accept error: {e}")
                break

            logger.debug(f"Accepted connection from {client_address[0]}:{client_address[1]}")

            conn = Connection(
                socket=client_socket,
                address=client_address,
                buffer_size=self.config.buffer_size,
            )
            connection_handler(conn)

    def shutdown(self):
        """Stop the accept loop. Idempotent, callable from any thread."""
        logger.info("Shutting down socket server...")
        self._running = False

    def _cleanup(self):
        self._restore_signals()

        if self._socket:
            try:
                self._socket.close()
            except OSError:
                pass
            self._socket = None

        self._running = False
        self._ready_event.clear()
        logger.info("Socket server stopped")

    def wait_until_ready(self, timeout: Optional[float] = None) -> bool:
        """Block until the socket is bound and listening."""
        return self._ready_event.wait(timeout)
