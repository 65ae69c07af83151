"""Error taxonomy for the terminal client.

Every failure surfaced by the client is a TerminalError subclass whose
``kind`` names the category, so callers can branch on either the class
or the string.
"""

from __future__ import annotations


class TerminalError(Exception):
    """Base class for all terminal client failures."""

    kind = "terminal"

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class InvalidEndpointError(TerminalError):
    """The base URL and path do not form a usable request target."""

    kind = "invalid_endpoint"


class NetworkError(TerminalError):
    """Transport-level failure: DNS, connection, TLS or timeout."""

    kind = "network"


class ResponseError(TerminalError):
    """The server answered with an error payload or an unexpected shape."""

    kind = "response"


class SessionError(TerminalError):
    """No usable session when one was required."""

    kind = "session"


class ParseError(TerminalError):
    """The response body could not be decoded as a JSON object."""

    kind = "parse"
