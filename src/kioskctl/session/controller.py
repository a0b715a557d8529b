"""The session controller that owns the browser connection.

Every command against the browser funnels through RemoteSession. It
serializes connection commands one at a time and owns the single
reload-schedule slot, so the "at most one active schedule" rule is
enforced here and nowhere else.
"""

from __future__ import annotations

import asyncio
import logging
import math
import re
from typing import Awaitable, Callable
from urllib.parse import urlsplit

from kioskctl.browser.base import BrowserConnection
from kioskctl.domain.errors import ConnectionFailureError, InvalidInputError
from kioskctl.domain.models import (
    CancelReload,
    Command,
    DisplayMode,
    Navigate,
    Reload,
    RunScript,
    SessionStatus,
    SetReloadInterval,
)
from kioskctl.session.scheduler import ReloadScheduler

logger = logging.getLogger(__name__)

DEFAULT_PROTOCOL = "https"
YOUTUBE_EMBED_URL = "https://youtube.com/embed/{video_id}?autoplay=1"
_VIDEO_ID_RE = re.compile(r"^[A-Za-z0-9_-]+$")
_PROTOCOL_RE = re.compile(r"^[A-Za-z][A-Za-z0-9+.-]*$")

SCROLLBAR_STYLE_ID = "kioskctl-hide-scrollbar"

# Promise rejections are swallowed: fullscreen needs a user gesture on some builds
ENTER_FULLSCREEN_JS = (
    "document.fullscreenElement || "
    "document.documentElement.requestFullscreen().catch(() => null)"
)
EXIT_FULLSCREEN_JS = "document.fullscreenElement && document.exitFullscreen().catch(() => null)"
HIDE_SCROLLBAR_JS = f"""(() => {{
  if (document.getElementById('{SCROLLBAR_STYLE_ID}')) return;
  const style = document.createElement('style');
  style.id = '{SCROLLBAR_STYLE_ID}';
  style.textContent = 'html, body {{ overflow: hidden !important; }} ::-webkit-scrollbar {{ display: none; }}';
  (document.head || document.documentElement).appendChild(style);
}})()"""
SHOW_SCROLLBAR_JS = f"document.getElementById('{SCROLLBAR_STYLE_ID}')?.remove()"


def validate_url(url: str) -> str:
    """Return ``url`` stripped, or raise InvalidInputError unless it is absolute."""
    if not isinstance(url, str) or not url.strip():
        raise InvalidInputError("URL must not be empty")
    url = url.strip()
    try:
        parts = urlsplit(url)
    except ValueError as e:
        raise InvalidInputError(f"Malformed URL {url!r}: {e}") from e
    if not parts.scheme or not parts.netloc:
        raise InvalidInputError(f"URL {url!r} must include a scheme and host")
    return url


def _coerce_interval(seconds: float) -> float:
    if isinstance(seconds, bool) or not isinstance(seconds, (int, float)):
        raise InvalidInputError(f"Reload interval must be a number, got {seconds!r}")
    try:
        value = float(seconds)
    except OverflowError as e:
        raise InvalidInputError(f"Reload interval {seconds} is too large") from e
    if not math.isfinite(value) or value <= 0:
        raise InvalidInputError(f"Reload interval must be positive, got {seconds!r}")
    return value


def build_url(target: str, protocol: str | None = None) -> str:
    """Join a bare host/path with a protocol, defaulting to https.

    Targets that already carry a scheme are returned unchanged.
    """
    target = (target or "").strip()
    if "://" in target:
        return validate_url(target)
    protocol = (protocol or "").strip().rstrip(":/") or DEFAULT_PROTOCOL
    if not _PROTOCOL_RE.match(protocol):
        raise InvalidInputError(f"Invalid protocol {protocol!r}")
    return validate_url(f"{protocol}://{target}")


class RemoteSession:
    """Serializes commands against the one browser connection.

    Owns two locks: the command lock keeps connection commands strictly
    one at a time, and the reload lock guards the current-scheduler slot
    so that replacing a schedule (cancel old, install new) is atomic.

    Navigation cancels any active reload schedule before loading the new
    page. A reload tick already in flight finishes first because it holds
    the command lock; no tick starts after the cancel.

    Usage::

        async with RemoteSession(PlaywrightConnection()) as session:
            await session.navigate("https://example.com")
            await session.set_reload_interval(30)
    """

    def __init__(
        self,
        connection: BrowserConnection,
        bookmarks: dict[str, str] | None = None,
    ) -> None:
        self._connection = connection
        self._bookmarks = dict(bookmarks or {})
        self._command_lock = asyncio.Lock()
        self._reload_lock = asyncio.Lock()
        self._current_reload: ReloadScheduler | None = None
        self._schedulers: set[ReloadScheduler] = set()
        self._closed = False

    @property
    def current_reload(self) -> ReloadScheduler | None:
        return self._current_reload

    @property
    def bookmarks(self) -> dict[str, str]:
        return dict(self._bookmarks)

    # -------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------

    async def start(self) -> None:
        """Open the browser connection."""
        await self._connection.connect()
        logger.info("Remote session started")

    async def close(self) -> None:
        """Stop any reload schedule, wait for its loop, and close the connection.

        No new reload schedule can be installed afterwards.
        """
        async with self._reload_lock:
            self._closed = True
            self._retire_current()
        pending = list(self._schedulers)
        if pending:
            await asyncio.gather(*(s.wait_closed() for s in pending), return_exceptions=True)
        await self._connection.disconnect()
        logger.info("Remote session closed")

    async def __aenter__(self) -> RemoteSession:
        await self.start()
        return self

    async def __aexit__(self, exc_type: type | None, exc_val: Exception | None, exc_tb: object) -> None:
        await self.close()

    # -------------------------------------------------------------------
    # Connection commands
    # -------------------------------------------------------------------

    async def navigate(self, url: str) -> None:
        """Load ``url``, cancelling any active reload schedule first.

        Raises:
            InvalidInputError: If ``url`` is not an absolute URL.
            ConnectionFailureError: If the browser rejects or times out.
        """
        url = validate_url(url)
        await self.cancel_reload()
        await self._execute("navigate", self._connection.navigate, url)
        logger.info("Navigated to %s", url)

    async def reload(self) -> None:
        """Reload the current page. Never touches the reload schedule."""
        await self._execute("reload", self._connection.reload)

    async def run_script(self, source: str) -> None:
        """Evaluate ``source`` in the page. The result is discarded."""
        if not isinstance(source, str) or not source.strip():
            raise InvalidInputError("Script source must not be empty")
        await self._execute("run_script", self._connection.evaluate, source)

    async def _execute(self, name: str, func: Callable[..., Awaitable[object]], *args: str) -> None:
        async with self._command_lock:
            logger.debug("Executing %s", name)
            await func(*args)

    # -------------------------------------------------------------------
    # Reload schedule
    # -------------------------------------------------------------------

    async def set_reload_interval(self, seconds: float) -> ReloadScheduler:
        """Replace the reload schedule with one ticking every ``seconds``.

        Returns immediately with the new scheduler; the first tick fires
        one interval from now.

        Raises:
            InvalidInputError: If ``seconds`` is not a finite positive number.
                Any existing schedule is left running in that case.
            ConnectionFailureError: If the session has been closed.
        """
        seconds = _coerce_interval(seconds)
        async with self._reload_lock:
            if self._closed:
                raise ConnectionFailureError("Session is closed", backend="session")
            self._retire_current()
            scheduler = ReloadScheduler(self.reload, seconds)
            self._current_reload = scheduler
            self._schedulers.add(scheduler)
            scheduler.add_done_callback(self._schedulers.discard)
        return scheduler

    async def cancel_reload(self) -> bool:
        """Cancel the active reload schedule.

        Returns True if a schedule was running, False if there was none.
        """
        async with self._reload_lock:
            return self._retire_current()

    def _retire_current(self) -> bool:
        scheduler, self._current_reload = self._current_reload, None
        if scheduler is None:
            return False
        return scheduler.cancel()

    # -------------------------------------------------------------------
    # Higher-level operations
    # -------------------------------------------------------------------

    async def navigate_to(self, target: str, protocol: str | None = None) -> str:
        """Navigate to ``target``, prefixing ``protocol`` when it has no scheme."""
        url = build_url(target, protocol)
        await self.navigate(url)
        return url

    async def play_youtube(self, video_id: str) -> str:
        """Open the autoplaying embed player for a YouTube video."""
        if not video_id or not _VIDEO_ID_RE.match(video_id):
            raise InvalidInputError(f"Invalid YouTube video id {video_id!r}")
        url = YOUTUBE_EMBED_URL.format(video_id=video_id)
        await self.navigate(url)
        return url

    async def open_bookmark(self, name: str) -> str:
        url = self._bookmarks.get(name)
        if url is None:
            raise InvalidInputError(f"Unknown bookmark {name!r}")
        await self.navigate(url)
        return url

    async def set_display_mode(self, mode: DisplayMode) -> None:
        await self.run_script(ENTER_FULLSCREEN_JS if mode.fullscreen else EXIT_FULLSCREEN_JS)
        await self.run_script(HIDE_SCROLLBAR_JS if mode.hide_scrollbar else SHOW_SCROLLBAR_JS)
        logger.info(
            "Display mode set (fullscreen=%s, hide_scrollbar=%s)",
            mode.fullscreen, mode.hide_scrollbar,
        )

    async def apply(self, command: Command) -> None:
        """Dispatch a command value to the matching operation."""
        if isinstance(command, Navigate):
            await self.navigate(command.url)
        elif isinstance(command, Reload):
            await self.reload()
        elif isinstance(command, RunScript):
            await self.run_script(command.source)
        elif isinstance(command, SetReloadInterval):
            await self.set_reload_interval(command.interval)
        elif isinstance(command, CancelReload):
            await self.cancel_reload()
        else:
            raise InvalidInputError(f"Unsupported command: {command!r}")

    def status(self) -> SessionStatus:
        scheduler = self._current_reload
        return SessionStatus(
            connected=self._connection.is_connected,
            current_url=self._connection.current_url,
            reload_active=scheduler is not None and scheduler.is_active,
            reload_interval=scheduler.interval if scheduler else None,
            reload_ticks=scheduler.tick_count if scheduler else 0,
        )
