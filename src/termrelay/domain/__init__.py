"""Domain models for termrelay.

This package contains the core data structures, enumerations, and value
objects used throughout the client. All models use Pydantic v2 for
validation and serialization.
"""

from termrelay.domain.models import (
    ClientConfig,
    CommandRequest,
    CommandResponse,
    CommandResult,
    CreateSessionRequest,
    CreateSessionResponse,
    Session,
    SessionState,
)

__all__ = [
    "ClientConfig",
    "CommandRequest",
    "CommandResponse",
    "CommandResult",
    "CreateSessionRequest",
    "CreateSessionResponse",
    "Session",
    "SessionState",
]
