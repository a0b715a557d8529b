"""Core domain models for kioskctl.

Commands are value objects describing one action against the browser
session. They are not stored anywhere; the session controller applies
each one atomically and discards it.
"""

from __future__ import annotations

import enum
from typing import Annotated, Literal, Union

from pydantic import BaseModel, ConfigDict, Field


# ---------------------------------------------------------------------------
# Enumerations
# ---------------------------------------------------------------------------


class CommandStatus(str, enum.Enum):
    """Outcome of a command, as reported to callers."""

    OK = "ok"
    INVALID_INPUT = "invalid_input"
    CONNECTION_FAILURE = "connection_failure"


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------


class Navigate(BaseModel):
    """Load a URL. Cancels any running reload schedule first."""

    model_config = ConfigDict(frozen=True)

    action_type: Literal["navigate"] = "navigate"
    url: str = Field(description="Absolute URL to load")


class Reload(BaseModel):
    """Reload the current page."""

    model_config = ConfigDict(frozen=True)

    action_type: Literal["reload"] = "reload"


class RunScript(BaseModel):
    """Evaluate a script in the page; the result is discarded."""

    model_config = ConfigDict(frozen=True)

    action_type: Literal["run_script"] = "run_script"
    source: str = Field(description="JavaScript source to evaluate")


class SetReloadInterval(BaseModel):
    """Replace the reload schedule with one ticking every ``interval`` seconds."""

    model_config = ConfigDict(frozen=True)

    action_type: Literal["set_reload_interval"] = "set_reload_interval"
    interval: float = Field(description="Seconds between reloads, must be > 0")


class CancelReload(BaseModel):
    """Stop the reload schedule, if any."""

    model_config = ConfigDict(frozen=True)

    action_type: Literal["cancel_reload"] = "cancel_reload"


Command = Annotated[
    Union[Navigate, Reload, RunScript, SetReloadInterval, CancelReload],
    Field(discriminator="action_type"),
]


# ---------------------------------------------------------------------------
# Options / results
# ---------------------------------------------------------------------------


class DisplayMode(BaseModel):
    """Display toggles applied to the current page via scripts."""

    model_config = ConfigDict(frozen=True)

    fullscreen: bool = Field(default=False, description="Request document fullscreen")
    hide_scrollbar: bool = Field(default=False, description="Hide page scrollbars")


class SessionStatus(BaseModel):
    """Point-in-time snapshot of the session controller."""

    connected: bool = False
    current_url: str | None = None
    reload_active: bool = False
    reload_interval: float | None = None
    reload_ticks: int = 0


class CommandResponse(BaseModel):
    """Result of a command as returned over HTTP."""

    status: CommandStatus = CommandStatus.OK
    detail: str = ""
    interval: int | None = None
