"""Domain models and errors for kioskctl.

Command value objects, display options, and the two-kind error taxonomy
(bad input vs. connection failure). Models use Pydantic v2.
"""

from kioskctl.domain.errors import ConnectionFailureError, InvalidInputError, KioskError
from kioskctl.domain.models import (
    CancelReload,
    Command,
    CommandResponse,
    CommandStatus,
    DisplayMode,
    Navigate,
    Reload,
    RunScript,
    SessionStatus,
    SetReloadInterval,
)

__all__ = [
    "CancelReload",
    "Command",
    "CommandResponse",
    "CommandStatus",
    "ConnectionFailureError",
    "DisplayMode",
    "InvalidInputError",
    "KioskError",
    "Navigate",
    "Reload",
    "RunScript",
    "SessionStatus",
    "SetReloadInterval",
]
