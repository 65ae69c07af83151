"""Remote command execution client for termrelay.

Manages the server-side terminal session and relays commands to the
execution endpoint.

Public API:
    TerminalClient -- Session-managed command client
    ShellCommandRunner -- String-in / string-out adapter
    TerminalError -- Base class of the error taxonomy
"""

from termrelay.client.errors import (
    InvalidEndpointError,
    NetworkError,
    ParseError,
    ResponseError,
    SessionError,
    TerminalError,
)

__all__ = [
    "InvalidEndpointError",
    "NetworkError",
    "ParseError",
    "ResponseError",
    "SessionError",
    "ShellCommandRunner",
    "TerminalClient",
    "TerminalError",
]


def __getattr__(name: str) -> type:
    """Lazy import for implementations that require httpx."""
    if name == "TerminalClient":
        from termrelay.client.http_client import TerminalClient
        return TerminalClient
    if name == "ShellCommandRunner":
        from termrelay.client.legacy import ShellCommandRunner
        return ShellCommandRunner
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
