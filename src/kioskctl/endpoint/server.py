"""FastAPI HTTP server for remote control of the browser session.

Translates inbound requests into calls on the RemoteSession and its
results into responses. Bad input yields 400, a browser connection
problem yields 502; neither stops the server.

    GET    /health                    -> session status
    POST   /navigate                  <- {"url": "example.com", "protocol": "https"}
    GET    /url/{protocol}/{target}   -> navigate to protocol://target
    GET    /queue/{target}            -> navigate to https://target
    GET    /youtube/{video_id}        -> open the autoplaying embed player
    GET    /bookmark/{name}           -> navigate to a configured URL
    POST   /reload
    POST   /display                   <- {"fullscreen": true, "hide_scrollbar": true}
    POST   /schedule                  <- {"interval": 30}
    DELETE /schedule
    POST   /command                   <- {"action_type": "reload", ...}
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, Awaitable

import uvicorn
from fastapi import FastAPI, HTTPException
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from kioskctl.browser.base import BrowserConnection
from kioskctl.config.settings import Settings
from kioskctl.domain.errors import ConnectionFailureError, InvalidInputError, KioskError
from kioskctl.domain.models import Command, CommandResponse, DisplayMode, SessionStatus
from kioskctl.session.controller import RemoteSession

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Request / response models
# ---------------------------------------------------------------------------

class NavigateRequest(BaseModel):
    url: str = Field(description="Target URL, or host/path when protocol is given")
    protocol: str | None = Field(default=None, description="Scheme for bare targets (default https)")


class ScheduleRequest(BaseModel):
    interval: int = Field(description="Seconds between reloads, must be > 0")


class HealthResponse(SessionStatus):
    status: str = "ok"


# ---------------------------------------------------------------------------
# Application factory
# ---------------------------------------------------------------------------

def create_app(
    settings: Settings | None = None,
    session: RemoteSession | None = None,
    connection: BrowserConnection | None = None,
) -> FastAPI:
    """Create the remote control application.

    Args:
        settings: Configuration; defaults are used when None.
        session: Optional pre-configured RemoteSession (for testing). Its
                 lifecycle is left to the caller.
        connection: Optional browser connection used to build the session.
                    Defaults to a PlaywrightConnection built from settings.
    """
    settings = settings or Settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        owned = app.state.session is None
        if owned:
            conn = connection
            if conn is None:
                from kioskctl.browser.playwright_backend import PlaywrightConnection

                b = settings.browser
                conn = PlaywrightConnection(
                    cdp_url=b.cdp_url,
                    headless=b.headless,
                    kiosk=b.kiosk,
                    navigation_timeout=b.navigation_timeout,
                    wait_until=b.wait_until,
                )
            s = RemoteSession(conn, bookmarks=settings.bookmarks)
            await s.start()
            app.state.session = s
            await _apply_startup_settings(s, settings)
        logger.info("Remote control server started")
        yield
        if owned:
            await app.state.session.close()
            app.state.session = None
        logger.info("Remote control server stopped")

    app = FastAPI(
        title="kioskctl",
        description="Remote control for a single persistent browser session",
        version="0.1.0",
        lifespan=lifespan,
    )
    app.state.session = session

    async def _run(
        call: Awaitable[object], detail: str = "", interval: int | None = None
    ) -> CommandResponse | JSONResponse:
        try:
            await call
        except InvalidInputError as e:
            return _error_response(400, e)
        except ConnectionFailureError as e:
            logger.error("Browser command failed: %s", e)
            return _error_response(502, e)
        return CommandResponse(detail=detail, interval=interval)

    def _session() -> RemoteSession:
        s = app.state.session
        if s is None:
            raise HTTPException(status_code=503, detail="Browser session not started")
        return s

    @app.get("/health")
    async def health_check() -> HealthResponse:
        s: RemoteSession | None = app.state.session
        if s is None:
            return HealthResponse(status="starting")
        return HealthResponse(**s.status().model_dump())

    # -------------------------------------------------------------------
    # Navigation
    # -------------------------------------------------------------------

    @app.post("/navigate")
    async def navigate(request: NavigateRequest) -> CommandResponse:
        s = _session()
        return await _run(s.navigate_to(request.url, request.protocol), detail=f"Getting URL {request.url}.")

    @app.get("/url/{protocol}/{target:path}")
    async def navigate_path(protocol: str, target: str) -> CommandResponse:
        s = _session()
        return await _run(s.navigate_to(target, protocol), detail=f"Getting URL {target}.")

    @app.get("/queue/{target:path}")
    async def navigate_queue(target: str) -> CommandResponse:
        s = _session()
        return await _run(s.navigate_to(target), detail=f"Getting URL {target}.")

    @app.get("/youtube/{video_id}")
    async def youtube(video_id: str) -> CommandResponse:
        s = _session()
        return await _run(s.play_youtube(video_id), detail="Getting Youtube.")

    @app.get("/bookmark/{name}")
    async def bookmark(name: str) -> CommandResponse:
        s = _session()
        return await _run(s.open_bookmark(name), detail=f"Getting {name}.")

    # -------------------------------------------------------------------
    # Page commands
    # -------------------------------------------------------------------

    @app.post("/reload")
    async def reload_now() -> CommandResponse:
        s = _session()
        return await _run(s.reload(), detail="Reloaded.")

    @app.post("/display")
    async def display(request: DisplayMode) -> CommandResponse:
        s = _session()
        return await _run(s.set_display_mode(request), detail="Display mode set.")

    @app.post("/schedule")
    async def schedule(request: ScheduleRequest) -> CommandResponse:
        s = _session()
        return await _run(
            s.set_reload_interval(request.interval),
            detail=f"Reloading every {request.interval}s.",
            interval=request.interval,
        )

    @app.delete("/schedule")
    async def cancel_schedule() -> CommandResponse:
        s = _session()
        return await _run(s.cancel_reload(), detail="Reload schedule cancelled.")

    @app.post("/command")
    async def command(request: Command) -> CommandResponse:
        s = _session()
        return await _run(s.apply(request), detail=request.action_type)

    return app


def _error_response(status_code: int, error: KioskError) -> JSONResponse:
    body = CommandResponse(status=error.code, detail=str(error))
    return JSONResponse(status_code=status_code, content=body.model_dump(mode="json"))


async def _apply_startup_settings(session: RemoteSession, settings: Settings) -> None:
    """Open the start URL and default reload schedule, if configured."""
    if settings.browser.start_url:
        try:
            await session.navigate(settings.browser.start_url)
        except (InvalidInputError, ConnectionFailureError) as e:
            logger.warning("Could not open start URL %s: %s", settings.browser.start_url, e)
    if settings.reload.default_interval:
        await session.set_reload_interval(settings.reload.default_interval)


# ---------------------------------------------------------------------------
# Standalone entry point
# ---------------------------------------------------------------------------

def main(settings: Settings | None = None) -> None:
    """Run the remote control server."""
    settings = settings or Settings()
    app = create_app(settings=settings)
    uvicorn.run(app, host=settings.server.host, port=settings.server.port)


if __name__ == "__main__":
    main()
