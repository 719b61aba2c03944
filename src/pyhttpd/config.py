"""
=============================================================================
SERVER CONFIGURATION
=============================================================================

Centralized configuration for the server.

The only setting the request handlers care about is `directory`, the root
the `/files/<name>` route reads from and writes to. Everything else is
about how the process listens and logs.

=============================================================================
CONFIGURATION SOURCES
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │                    CONFIGURATION HIERARCHY                          │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   Priority (highest to lowest):                                     │
    │                                                                      │
    │   1. Command-line arguments                                         │
    │      └── python -m pyhttpd --directory /tmp/files/                 │
    │                                                                      │
    │   2. Environment variables                                          │
    │      └── HTTP_DIRECTORY=/tmp/files/ python -m pyhttpd              │
    │                                                                      │
    │   3. Default values (in this dataclass)                            │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
WHY FROZEN?
=============================================================================

Every connection thread reads the config. None of them may change it.
A frozen dataclass makes that a runtime guarantee instead of a convention:

    config.directory = "/etc/"   → dataclasses.FrozenInstanceError

Each connection still gets its OWN copy (see copy()), so there is no
shared object at all between connection threads, and no lock is needed.

=============================================================================
"""

import os
import dataclasses
from dataclasses import dataclass
from typing import Optional


LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR")


@dataclass(frozen=True)
class ServerConfig:
    """
    Configuration for the HTTP server.

    =========================================================================
    CONFIGURATION GROUPS
    =========================================================================

    NETWORK SETTINGS
    - host, port, backlog, buffer_size

    FILES ROUTE
    - directory

    LOGGING
    - log_level, log_format

    =========================================================================
    """

    # ─────────────────────────────────────────────────────────────────────
    # NETWORK SETTINGS
    # ─────────────────────────────────────────────────────────────────────

    host: str = "127.0.0.1"
    """Loopback by default. The server is not meant to face the internet."""

    port: int = 4221

    backlog: int = 128
    """Pending connections the OS queues before refusing new ones."""

    buffer_size: int = 1024
    """
    Size of the single recv() per request.

    A request larger than this, or split across TCP segments, is NOT
    reassembled: the loop reads once per request and decodes what arrived.
    """

    # ─────────────────────────────────────────────────────────────────────
    # FILES ROUTE
    # ─────────────────────────────────────────────────────────────────────

    directory: Optional[str] = None
    """
    Root of the /files route. None disables it (always 404).

    The filename is appended to this string as-is, so it should end
    with a path separator: "/tmp/data/" not "/tmp/data".
    """

    # ─────────────────────────────────────────────────────────────────────
    # LOGGING
    # ─────────────────────────────────────────────────────────────────────

    log_level: str = "INFO"
    log_format: str = "text"  # access log: "text" or "json"

    server_name: str = "pyhttpd/1.0"

    @classmethod
    def from_env(cls) -> "ServerConfig":
        """
        Create configuration from environment variables.

        HTTP_HOST         Server host (default: 127.0.0.1)
        HTTP_PORT         Server port (default: 4221)
        HTTP_DIRECTORY    Files route root (default: unset, route disabled)
        HTTP_BUFFER_SIZE  Bytes per recv() (default: 1024)
        HTTP_LOG_LEVEL    Logging level (default: INFO)
        """
        return cls(
            host=os.getenv("HTTP_HOST", "127.0.0.1"),
            port=int(os.getenv("HTTP_PORT", "4221")),
            directory=os.getenv("HTTP_DIRECTORY") or None,
            buffer_size=int(os.getenv("HTTP_BUFFER_SIZE", "1024")),
            log_level=os.getenv("HTTP_LOG_LEVEL", "INFO").upper(),
        )

    def validate(self) -> None:
        """
        Validate configuration values.

        Called once at startup so a bad value fails before the socket
        is bound, not on the first request.
        """
        if not 0 <= self.port < 65536:
            raise ValueError(f"Invalid port: {self.port}. Must be 0-65535.")

        if self.buffer_size < 64:
            raise ValueError("buffer_size must be >= 64")

        if self.backlog < 1:
            raise ValueError("backlog must be >= 1")

        if self.log_level.upper() not in LOG_LEVELS:
            raise ValueError(f"log_level must be one of {', '.join(LOG_LEVELS)}")

        if self.log_format not in ("text", "json"):
            raise ValueError("log_format must be 'text' or 'json'")

    def copy(self, **changes) -> "ServerConfig":
        """Return an independent copy, optionally with some fields replaced."""
        return dataclasses.replace(self, **changes)

    @property
    def files_enabled(self) -> bool:
        return self.directory is not None


# =============================================================================
# MODULE SUMMARY
# =============================================================================
#
# 1. Frozen dataclass: no connection thread can mutate shared settings
# 2. Environment variable support (from_env)
# 3. Validation at startup (fail-fast)
# 4. copy() hands every connection its own value
# =============================================================================
