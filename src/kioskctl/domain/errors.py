"""Error taxonomy for kioskctl.

Every command-level failure is one of two kinds: the caller sent bad
input, or the remote browser connection failed. The HTTP layer maps
them to distinct status codes.
"""

from __future__ import annotations

from kioskctl.domain.models import CommandStatus


class KioskError(Exception):
    """Base class for all command failures."""

    code: CommandStatus

    def __init__(self, message: str) -> None:
        super().__init__(message)


class InvalidInputError(KioskError):
    """Raised before a command reaches the connection when its input is malformed."""

    code = CommandStatus.INVALID_INPUT


class ConnectionFailureError(KioskError):
    """Raised when the browser connection rejects, times out, or is closed."""

    code = CommandStatus.CONNECTION_FAILURE

    def __init__(self, message: str, backend: str = "") -> None:
        super().__init__(message)
        self.backend = backend
