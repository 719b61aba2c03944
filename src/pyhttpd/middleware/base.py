"""
=============================================================================
BASE MIDDLEWARE INTERFACE
=============================================================================

Defines the middleware protocol and the pipeline that chains middleware
around the router.

=============================================================================
CHAIN OF RESPONSIBILITY
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │                 REQUEST / RESPONSE FLOW                             │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   Request ──────────────────────────────────────────►               │
    │                                                                      │
    │   ┌──────────┐    ┌─────────────┐    ┌──────────────┐               │
    │   │ Logging  │───►│ Compression │───►│ router.handle│               │
    │   └────┬─────┘    └──────┬──────┘    └──────┬───────┘               │
    │        ▲                 ▲                  │                       │
    │   log status,       gzip body,              │                       │
    │   size, timing      fix Content-Length      │                       │
    │                                                                      │
    │   ◄──────────────────────────────────────────── Response            │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

Each middleware receives the request and `next`, the rest of the chain.
It must call next(request) exactly once (or short-circuit) and return a
response. Compression sits closest to the router so it sees the final
body, and runs once per request by construction.

=============================================================================
"""

from abc import ABC, abstractmethod
from typing import Callable, List
import logging

from ..http.request import HTTPRequest
from ..http.response import HTTPResponse


logger = logging.getLogger(__name__)


# NextHandler is the signature for the next middleware or final handler.
NextHandler = Callable[[HTTPRequest], HTTPResponse]


class Middleware(ABC):
    """
    Abstract base class for middleware.

        class MyMiddleware(Middleware):
            def __call__(self, request, next):
                response = next(request)      # continue the chain
                response.set_header("X-Seen", "yes")
                return response
    """

    @abstractmethod
    def __call__(self, request: HTTPRequest, next: NextHandler) -> HTTPResponse:
        """
        Process the request.

        Args:
            request: The incoming HTTP request
            next: The next handler in the chain

        Returns:
            HTTP response (either from next() or short-circuited)
        """

    @property
    def name(self) -> str:
        """Get the middleware name for logging."""
        return self.__class__.__name__


class MiddlewarePipeline:
    """
    Chains middleware together with a final handler.

    First added is outermost:

        pipeline.add(LoggingMiddleware())      # outermost
        pipeline.add(CompressionMiddleware())  # closest to the router
        handler = pipeline.wrap(router_handle)
        response = handler(request)
    """

    def __init__(self):
        self._middleware: List[Middleware] = []

    def add(self, middleware: Middleware) -> "MiddlewarePipeline":
        """Append middleware; returns self for chaining."""
        self._middleware.append(middleware)
        logger.debug(f"Added middleware: {middleware.name}")
        return self

    def wrap(self, handler: NextHandler) -> NextHandler:
        """
        Wrap `handler` with every middleware in the pipeline.

        Given [MW1, MW2] the result calls MW1 → MW2 → handler. We wrap in
        REVERSE order so the first-added middleware ends up outermost.

        wrap() may be called many times; the server calls it once per
        connection, around a router bound to that connection's config.
        """
        current = handler
        for middleware in reversed(self._middleware):
            current = self._create_wrapped_handler(middleware, current)
        return current

    def _create_wrapped_handler(
        self,
        middleware: Middleware,
        next_handler: NextHandler
    ) -> NextHandler:
        def wrapped(request: HTTPRequest) -> HTTPResponse:
            return middleware(request, next_handler)

        return wrapped

    def __len__(self) -> int:
        return len(self._middleware)

    def __iter__(self):
        return iter(self._middleware)
