"""
Handlers for the routes that need no configuration: /, /echo, /user-agent.
"""

from typing import Optional

from ..errors import MissingHeader
from ..http.request import HTTPRequest
from ..http.response import HTTPResponse, ResponseBuilder, ok


def root(request: HTTPRequest) -> HTTPResponse:
    """GET / → 200 with an empty body."""
    return ok()


def echo(request: HTTPRequest, value: Optional[str]) -> HTTPResponse:
    """
    /echo/<value> → 200, text/plain, body is the segment verbatim.

    The segment is not percent-decoded: /echo/a%20b answers "a%20b".
    /echo alone answers an empty body.
    """
    return ResponseBuilder().text(value or "").build()


def user_agent(request: HTTPRequest) -> HTTPResponse:
    """
    /user-agent → 200 with the User-Agent header as the body.

    Raises:
        MissingHeader: The request has no User-Agent header. The router
            reports this as 500, not 400.
    """
    agent = request.user_agent
    if agent is None:
        raise MissingHeader("User-Agent")
    return ResponseBuilder().text(agent).build()
