"""
=============================================================================
HTTP SERVER
=============================================================================

Orchestrates the listener, the per-connection loop, the middleware
pipeline and the router.

=============================================================================
REQUEST FLOW
=============================================================================

    SocketServer.accept()
        │
        ▼
    HTTPServer._handle_connection(conn)      one new thread per connection
        │
        ▼
    HTTPServer._process_connection(conn)     the keep-alive loop
        │
        │   ┌───────────────────────────────────────────────────────────┐
        │   │ loop:                                                     │
        ├──►│   data = conn.read_request()        READING               │
        │   │   if not data: stop                 (peer closed)         │
        │   │   request = parser.parse(data)      DECODING              │
        │   │   if Connection: close: stop        (no response sent)    │
        │   │   response = handler(request)       HANDLING              │
        │   │       LoggingMiddleware                                   │
        │   │         CompressionMiddleware                             │
        │   │           Router.handle(request, config copy)             │
        │   │   wire = response.to_bytes()        ENCODING              │
        │   │   conn.send_response(wire)          WRITING               │
        │   └───────────────────────────────────────────────────────────┘
        │
        ▼
    read/decode/write error → propagates out of the loop → logged by the
    connection thread → socket closed

=============================================================================
CONCURRENCY MODEL
=============================================================================

Thread per connection, no pool, no limit. Connections share nothing
mutable: each thread gets its own copy of the (frozen) ServerConfig and
its own handler chain bound to that copy. The router, parser and
middleware objects are shared but stateless.

A client that connects and never sends anything holds its thread until
it disconnects. There are no read timeouts.

=============================================================================
"""

import functools
import logging
import threading
from typing import Callable, Optional

from .config import ServerConfig
from .core import SocketServer, Connection, ConnectionState
from .http import HTTPRequest, HTTPResponse, RequestParser, Router
from .middleware import MiddlewarePipeline, Middleware


logger = logging.getLogger(__name__)


class HTTPServer:
    """
    HTTP/1.1 server.

    Usage:
        server = HTTPServer(ServerConfig(directory="/tmp/data/"))
        server.use(LoggingMiddleware())
        server.use(CompressionMiddleware())
        server.run()  # blocks until SIGINT/SIGTERM

    Args:
        config: Server configuration. Defaults to ServerConfig().
        router: Router instance. Defaults to Router().
    """

    def __init__(self, config: Optional[ServerConfig] = None, router: Optional[Router] = None):
        self.config = config or ServerConfig()
        self.config.validate()

        self._socket_server = SocketServer(self.config)
        self._parser = RequestParser()
        self._router = router or Router()
        self._middleware = MiddlewarePipeline()

    # =========================================================================
    # CONFIGURATION
    # =========================================================================

    def use(self, middleware: Middleware) -> "HTTPServer":
        """
        Add middleware. First added is outermost.

            server.use(LoggingMiddleware()).use(CompressionMiddleware())
        """
        self._middleware.add(middleware)
        return self

    @property
    def router(self) -> Router:
        return self._router

    @property
    def address(self):
        """Bound (host, port); see SocketServer.address."""
        return self._socket_server.address

    def build_handler(self, config: ServerConfig) -> Callable[[HTTPRequest], HTTPResponse]:
        """
        Build the request handler chain for one connection.

        The router is bound to `config`, which the caller owns.
        """
        route = functools.partial(self._router.handle, config=config)
        return self._middleware.wrap(route)

    # =========================================================================
    # LIFECYCLE
    # =========================================================================

    def run(self):
        """Start the server. Blocks until shutdown()."""
        self._setup_logging()

        logger.info(f"Starting {self.config.server_name} on {self.config.host}:{self.config.port}")
        if self.config.directory is not None:
            logger.info(f"Serving files from {self.config.directory}")
        else:
            logger.info("No directory configured, /files is disabled")

        try:
            self._socket_server.start(self._handle_connection)
        except KeyboardInterrupt:
            logger.info("Received keyboard interrupt")
        finally:
            logger.info("Server stopped")

    def shutdown(self):
        """
        Stop accepting connections.

        Connection threads are daemons and are not joined: an open
        keep-alive connection keeps being served until its peer closes.
        """
        self._socket_server.shutdown()

    def wait_until_ready(self, timeout: Optional[float] = None) -> bool:
        return self._socket_server.wait_until_ready(timeout)

    def _setup_logging(self):
        level = getattr(logging, self.config.log_level.upper(), logging.INFO)

        logging.basicConfig(
            level=level,
            format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
        logging.getLogger("pyhttpd").setLevel(level)

    # =========================================================================
    # CONNECTION HANDLING
    # =========================================================================

    def _handle_connection(self, conn: Connection):
        """
        Start a thread for `conn`. Called by the accept loop.

        The thread receives a copy of the config, never the server's
        own instance.
        """
        thread = threading.Thread(
            target=self._run_connection,
            args=(conn, self.config.copy()),
            name=f"conn-{conn.id}",
            daemon=True,
        )
        try:
            thread.start()
        except RuntimeError as e:
            # Out of threads: drop this client, keep accepting others
            logger.error(f"[{conn.id}] Could not start connection thread: {e}")
            conn.close()

    def _run_connection(self, conn: Connection, config: ServerConfig):
        """Thread body: run the loop, log whatever ends it abnormally."""
        try:
            self._process_connection(conn, config)
        except Exception as e:
            logger.error(f"[{conn.id}] Connection error: {type(e).__name__}: {e}")

    def _process_connection(self, conn: Connection, config: ServerConfig):
        """
        The keep-alive loop for one connection.

        Returns normally when the peer closes or sends `Connection: close`.
        Raises on read, decode or write failure; the socket is closed
        either way.
        """
        handler = self.build_handler(config)

        with conn:
            while True:
                data = conn.read_request()
                if not data:
                    break

                conn.state = ConnectionState.DECODING
                request = self._parser.parse(data, conn.address)

                # Checked before dispatch: the close request gets no response
                if request.wants_close:
                    logger.debug(f"[{conn.id}] Client requested close")
                    break

                conn.state = ConnectionState.HANDLING
                response = handler(request)

                conn.state = ConnectionState.ENCODING
                wire = response.to_bytes()

                conn.send_response(wire)


def create_app(config: Optional[ServerConfig] = None) -> HTTPServer:
    """Create a server with the standard middleware (logging, compression)."""
    from .middleware import LoggingMiddleware, CompressionMiddleware

    config = config or ServerConfig()
    server = HTTPServer(config)
    server.use(LoggingMiddleware(log_format=config.log_format))
    server.use(CompressionMiddleware())
    return server


# =============================================================================
# MODULE SUMMARY
# =============================================================================
#
# 1. SocketServer accepts; _handle_connection starts one thread each
# 2. _process_connection: read → decode → (close?) → handle → encode → write
# 3. Each connection gets its own config copy and handler chain
# 4. Failures end the connection and are logged by its thread
# =============================================================================
