"""Core domain models for the termrelay system.

These models represent the data flowing through the client: the
connection configuration, the server-issued session, command results,
and the JSON bodies exchanged with the execution server.
"""

from __future__ import annotations

import enum
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


# ---------------------------------------------------------------------------
# Enumerations
# ---------------------------------------------------------------------------


class SessionState(str, enum.Enum):
    """Lifecycle state of the client's terminal session."""

    NO_SESSION = "no_session"
    CREATING = "creating"  # Creation request outstanding
    ACTIVE = "active"
    VALIDATING = "validating"  # Validation request outstanding


# ---------------------------------------------------------------------------
# Client State Models
# ---------------------------------------------------------------------------


class ClientConfig(BaseModel):
    """Connection settings for one configuration generation.

    Replaced wholesale whenever the preference store changes.
    """

    model_config = ConfigDict(frozen=True)

    base_url: str = Field(description="Execution server base URL")
    api_key: str = Field(repr=False, description="Value sent in the X-API-Key header")

    def url_for(self, path: str) -> str:
        """Join the base URL with an endpoint path."""
        return f"{self.base_url.rstrip('/')}{path}"


class Session(BaseModel):
    """A terminal session issued by the execution server."""

    model_config = ConfigDict(frozen=True)

    session_id: str = Field(description="Opaque identifier sent as X-Session-Id")
    owner_id: str = Field(description="Server-assigned user id, or the device id sent")
    issued_at: datetime = Field(default_factory=datetime.now)


class CommandResult(BaseModel):
    """Outcome of one command execution, as a value instead of an exception."""

    model_config = ConfigDict(frozen=True)

    command: str
    output: str | None = None
    error_kind: str | None = Field(default=None, description="TerminalError kind on failure")
    error_message: str | None = None

    @property
    def succeeded(self) -> bool:
        return self.error_kind is None


# ---------------------------------------------------------------------------
# Wire Models
# ---------------------------------------------------------------------------


class CreateSessionRequest(BaseModel):
    user_id: str = Field(serialization_alias="userId")


class CommandRequest(BaseModel):
    command: str = Field(description="Command line to run on the server")


class CreateSessionResponse(BaseModel):
    session_id: str = Field(alias="sessionId", min_length=1)
    user_id: str | None = Field(default=None, alias="userId")


class CommandResponse(BaseModel):
    output: str
