"""HTTP client for a running kioskctl server.

Used by the CLI to send commands to the remote control surface.
"""

from __future__ import annotations

import logging
from typing import Any

import httpx

from kioskctl.domain.errors import ConnectionFailureError, InvalidInputError

logger = logging.getLogger(__name__)


class KioskClient:
    """Sends remote control commands to the kioskctl HTTP server.

    Example usage::

        async with KioskClient("http://kiosk.local:8000") as kiosk:
            await kiosk.navigate("example.com")
            await kiosk.schedule_reload(60)
    """

    def __init__(
        self,
        base_url: str = "http://localhost:8000",
        timeout: float = 60.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    async def connect(self) -> None:
        self._client = httpx.AsyncClient(
            base_url=self._base_url,
            timeout=self._timeout,
            transport=self._transport,
        )

    async def disconnect(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def health(self) -> dict[str, Any]:
        return await self._request("GET", "/health")

    async def navigate(self, url: str, protocol: str | None = None) -> dict[str, Any]:
        return await self._request("POST", "/navigate", {"url": url, "protocol": protocol})

    async def youtube(self, video_id: str) -> dict[str, Any]:
        return await self._request("GET", f"/youtube/{video_id}")

    async def bookmark(self, name: str) -> dict[str, Any]:
        return await self._request("GET", f"/bookmark/{name}")

    async def reload(self) -> dict[str, Any]:
        return await self._request("POST", "/reload")

    async def set_display_mode(self, fullscreen: bool, hide_scrollbar: bool) -> dict[str, Any]:
        return await self._request(
            "POST", "/display", {"fullscreen": fullscreen, "hide_scrollbar": hide_scrollbar}
        )

    async def schedule_reload(self, interval: int) -> dict[str, Any]:
        return await self._request("POST", "/schedule", {"interval": interval})

    async def cancel_reload(self) -> dict[str, Any]:
        return await self._request("DELETE", "/schedule")

    async def _request(self, method: str, path: str, payload: dict | None = None) -> dict[str, Any]:
        """Send a request and map error statuses back onto the error taxonomy."""
        if self._client is None:
            raise ConnectionFailureError("Not connected to server", backend="http")
        try:
            resp = await self._client.request(method, path, json=payload)
        except httpx.HTTPError as e:
            raise ConnectionFailureError(
                f"HTTP request to {path} failed: {e}", backend="http"
            ) from e
        if resp.status_code in (400, 422):
            raise InvalidInputError(_detail(resp))
        if resp.is_error:
            raise ConnectionFailureError(_detail(resp), backend="http")
        logger.debug("%s %s -> %s", method, path, resp.status_code)
        return resp.json()

    async def __aenter__(self) -> KioskClient:
        await self.connect()
        return self

    async def __aexit__(self, exc_type: type | None, exc_val: Exception | None, exc_tb: object) -> None:
        await self.disconnect()


def _detail(resp: httpx.Response) -> str:
    try:
        detail = resp.json().get("detail")
    except ValueError:
        detail = None
    return str(detail or f"HTTP {resp.status_code}")
