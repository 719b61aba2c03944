"""
=============================================================================
URL ROUTER
=============================================================================

Maps a decoded request to a response.

=============================================================================
ROUTE TABLE
=============================================================================

The route set is closed and small, so dispatch is on the FIRST PATH
SEGMENT through an enum, not through pattern matching:

    ┌──────────────────┬─────────────┬──────────────────────────────────┐
    │ First segment    │ RouteName   │ Handler                          │
    ├──────────────────┼─────────────┼──────────────────────────────────┤
    │ (none)           │ ROOT        │ 200, empty body                  │
    │ "echo"           │ ECHO        │ 200, body = second segment       │
    │ "user-agent"     │ USER_AGENT  │ 200, body = User-Agent header    │
    │ "files"          │ FILES       │ GET → file / POST → write        │
    │ anything else    │ (None)      │ 404                              │
    └──────────────────┴─────────────┴──────────────────────────────────┘

Adding a route means adding an enum member and one entry to the
dispatch table in Router.__init__.

=============================================================================
PATH SEGMENTS
=============================================================================

The path is split on "/" and empty segments are discarded:

    "/"               → []
    ""                → []
    "/echo/abc"       → ["echo", "abc"]
    "/a//b/"          → ["a", "b"]        (same as "/a/b")

=============================================================================
A TOTAL FUNCTION
=============================================================================

Router.handle() never raises. A handler that fails with HandlerError or
OSError is logged and answered with 500. The connection survives and the
client always receives a well-formed response.

=============================================================================
"""

import logging
from enum import Enum
from typing import Callable, Dict, List, Optional

from ..config import ServerConfig
from ..errors import HandlerError
from ..handlers import basic
from ..handlers.files import FilesHandler
from .request import HTTPRequest
from .response import HTTPResponse, internal_error, not_found


logger = logging.getLogger(__name__)


class RouteName(Enum):
    """The routes the server knows, keyed by first path segment."""

    ROOT = ""
    ECHO = "echo"
    USER_AGENT = "user-agent"
    FILES = "files"

    @classmethod
    def resolve(cls, segments: List[str]) -> Optional["RouteName"]:
        """
        Pick the route for a segmented path.

        Returns None for an unrecognized first segment.
        """
        if not segments:
            return cls.ROOT
        try:
            route = cls(segments[0])
        except ValueError:
            return None
        # ROOT has no segment of its own; "/" is the only way to reach it
        return route if route is not cls.ROOT else None


def split_path(path: str) -> List[str]:
    """Split a request path on "/" dropping empty segments."""
    return [segment for segment in path.split("/") if segment]


RouteHandler = Callable[[HTTPRequest, List[str], ServerConfig], HTTPResponse]


class Router:
    """
    Dispatches requests over the closed RouteName set.

    Usage:
        router = Router()
        response = router.handle(request, config)

    Args:
        files: Handler for /files. Pass one with a fake FileSystem in tests.
    """

    def __init__(self, files: Optional[FilesHandler] = None):
        self._files = files or FilesHandler()

        # Every RouteName member has exactly one entry here
        self._dispatch: Dict[RouteName, RouteHandler] = {
            RouteName.ROOT: self._root,
            RouteName.ECHO: self._echo,
            RouteName.USER_AGENT: self._user_agent,
            RouteName.FILES: self._files_route,
        }

    def handle(self, request: HTTPRequest, config: ServerConfig) -> HTTPResponse:
        """
        Produce a response for `request`. Never raises.

        Args:
            request: The decoded request.
            config: The connection's copy of the server configuration.

        Returns:
            The route's response, 404 for an unknown route, or 500 when
            the route's handler failed.
        """
        segments = split_path(request.path)
        route = RouteName.resolve(segments)

        if route is None:
            return not_found()

        try:
            return self._dispatch[route](request, segments, config)
        except (HandlerError, OSError) as e:
            logger.exception(f"{request.method} {request.path} failed: {e}")
            return internal_error()

    # =========================================================================
    # ROUTE ADAPTERS
    # =========================================================================
    #
    # Each adapter pulls what its handler needs out of the segments and
    # config. The handlers themselves live in pyhttpd.handlers.
    #
    # =========================================================================

    def _root(self, request: HTTPRequest, segments: List[str], config: ServerConfig) -> HTTPResponse:
        return basic.root(request)

    def _echo(self, request: HTTPRequest, segments: List[str], config: ServerConfig) -> HTTPResponse:
        value = segments[1] if len(segments) > 1 else None
        return basic.echo(request, value)

    def _user_agent(self, request: HTTPRequest, segments: List[str], config: ServerConfig) -> HTTPResponse:
        return basic.user_agent(request)

    def _files_route(self, request: HTTPRequest, segments: List[str], config: ServerConfig) -> HTTPResponse:
        # Both a filename and a configured directory are required
        if len(segments) < 2 or config.directory is None:
            return not_found()
        return self._files.handle(request, config.directory, segments[1])

    @property
    def routes(self) -> List[RouteName]:
        return list(self._dispatch)


# =============================================================================
# MODULE SUMMARY
# =============================================================================
#
# 1. split_path(): "/" separated, empty segments dropped
# 2. RouteName.resolve(): first segment → enum member or None (404)
# 3. Router.handle(): dispatch, converting handler failures into 500
# =============================================================================
