"""
=============================================================================
PYHTTPD - A minimal HTTP/1.1 server on raw sockets
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │                        PYHTTPD ROUTES                               │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   GET  /                  200, empty body                            │
    │   GET  /echo/<value>      200, text/plain, body = <value>            │
    │   GET  /user-agent        200, text/plain, body = User-Agent header  │
    │   GET  /files/<name>      200 file bytes, or 404                     │
    │   POST /files/<name>      201 after writing the request body         │
    │   anything else           404                                        │
    │                                                                      │
    │   Keep-alive by default; gzip when Accept-Encoding mentions it.     │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
PACKAGE STRUCTURE
=============================================================================

    pyhttpd/
    ├── __init__.py          # This file - package exports
    ├── __main__.py          # CLI entry point (python -m pyhttpd)
    ├── server.py            # HTTPServer: connection loop, one thread each
    ├── config.py            # ServerConfig frozen dataclass
    ├── errors.py            # Parse and handler error families
    ├── core/
    │   ├── socket_server.py # Bind, listen, accept
    │   └── connection.py    # One client socket
    ├── http/
    │   ├── request.py       # Request parsing
    │   ├── response.py      # Response building and serialization
    │   ├── router.py        # Route dispatch
    │   └── status_codes.py  # Status codes and reason phrases
    ├── handlers/
    │   ├── basic.py         # /, /echo, /user-agent
    │   └── files.py         # /files
    └── middleware/
        ├── base.py          # Middleware ABC + pipeline
        ├── logging.py       # Access log
        └── compression.py   # gzip content encoding

=============================================================================
QUICK START
=============================================================================

    from pyhttpd import ServerConfig, create_app

    server = create_app(ServerConfig(directory="/tmp/data/"))
    server.run()

Or from the command line:

    python -m pyhttpd --directory /tmp/data/

=============================================================================
"""

__version__ = "1.0.0"

from .server import HTTPServer, create_app
from .config import ServerConfig

__all__ = ["HTTPServer", "ServerConfig", "create_app", "__version__"]
