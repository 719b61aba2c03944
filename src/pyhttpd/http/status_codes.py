"""
=============================================================================
HTTP STATUS CODES
=============================================================================

The server speaks a small vocabulary:

    ┌────────┬─────────────────────────┬──────────────────────────────────┐
    │  Code  │ Reason phrase           │ When                             │
    ├────────┼─────────────────────────┼──────────────────────────────────┤
    │  200   │ OK                      │ /, /echo, /user-agent, GET files │
    │  201   │ Created                 │ POST /files/<name>               │
    │  404   │ Not Found               │ unknown route, missing file      │
    │  500   │ Internal Server Error   │ any handler failure              │
    └────────┴─────────────────────────┴──────────────────────────────────┘

A response built with any other integer still serializes; its status line
carries the reason phrase "Unknown".

=============================================================================
"""

from enum import IntEnum


UNKNOWN_PHRASE = "Unknown"


class HTTPStatus(IntEnum):
    """
    Status codes the server emits.

    IntEnum, so members compare equal to plain integers:

        >>> HTTPStatus.OK == 200
        True
        >>> HTTPStatus.NOT_FOUND.phrase
        'Not Found'
    """

    OK = 200
    CREATED = 201
    NOT_FOUND = 404
    INTERNAL_SERVER_ERROR = 500

    @property
    def phrase(self) -> str:
        return _STATUS_PHRASES[self]


_STATUS_PHRASES = {
    HTTPStatus.OK: "OK",
    HTTPStatus.CREATED: "Created",
    HTTPStatus.NOT_FOUND: "Not Found",
    HTTPStatus.INTERNAL_SERVER_ERROR: "Internal Server Error",
}


def reason_phrase(status: int) -> str:
    """
    Map any integer status to its reason phrase.

        reason_phrase(201) → "Created"
        reason_phrase(418) → "Unknown"
    """
    try:
        return HTTPStatus(status).phrase
    except ValueError:
        return UNKNOWN_PHRASE
