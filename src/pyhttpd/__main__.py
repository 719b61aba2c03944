"""
=============================================================================
PYHTTPD CLI ENTRY POINT
=============================================================================

    # Defaults (127.0.0.1:4221, /files disabled)
    python -m pyhttpd

    # Serve and accept uploads under /tmp/data/
    python -m pyhttpd --directory /tmp/data/

    # Listen on all interfaces, custom port
    python -m pyhttpd --host 0.0.0.0 --port 8080

Unset options fall back to the environment (HTTP_HOST, HTTP_PORT,
HTTP_DIRECTORY, HTTP_BUFFER_SIZE, HTTP_LOG_LEVEL), then to the defaults.

=============================================================================
"""

import argparse
import sys

from . import __version__
from .config import LOG_LEVELS, ServerConfig
from .server import create_app


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="pyhttpd",
        description="Minimal HTTP/1.1 server on raw sockets",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python -m pyhttpd                              # Run with defaults
  python -m pyhttpd --directory /tmp/data/       # Enable /files
  python -m pyhttpd --port 8080 --log-level DEBUG
        """
    )

    # ─────────────────────────────────────────────────────────────────────
    # NETWORK ARGUMENTS
    # ─────────────────────────────────────────────────────────────────────

    parser.add_argument(
        "--host", "-H",
        default=None,
        help="Host to bind to (default: 127.0.0.1)"
    )

    parser.add_argument(
        "--port", "-p",
        type=int,
        default=None,
        help="Port to listen on (default: 4221)"
    )

    # ─────────────────────────────────────────────────────────────────────
    # FEATURE ARGUMENTS
    # ─────────────────────────────────────────────────────────────────────

    parser.add_argument(
        "--directory", "-d",
        default=None,
        help="Root of the /files route, ending in a separator (e.g. /tmp/data/)"
    )

    parser.add_argument(
        "--log-level", "-l",
        choices=list(LOG_LEVELS),
        default=None,
        help="Logging level (default: INFO)"
    )

    parser.add_argument(
        "--version", "-v",
        action="version",
        version=f"pyhttpd {__version__}"
    )

    return parser


def config_from_args(args: argparse.Namespace) -> ServerConfig:
    """Overlay the given CLI options on the environment config."""
    overrides = {
        name: value
        for name, value in (
            ("host", args.host),
            ("port", args.port),
            ("directory", args.directory),
            ("log_level", args.log_level),
        )
        if value is not None
    }
    return ServerConfig.from_env().copy(**overrides)


def main(argv=None):
    args = build_parser().parse_args(argv)

    try:
        config = config_from_args(args)
        server = create_app(config)
        server.run()
    except Exception as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
