"""Abstract base class for the remote browser connection.

The session controller talks to the browser only through this
interface, so the Playwright backend can be swapped for a fake in
tests without changing any other code.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod

logger = logging.getLogger(__name__)


class BrowserConnection(ABC):
    """The single persistent control channel to a browser page.

    Implementations translate the three supported primitives (navigate,
    reload, evaluate) into their protocol and raise
    ``ConnectionFailureError`` when the browser rejects a command, times
    out, or has gone away.

    Example usage::

        async with PlaywrightConnection(cdp_url="http://localhost:9222") as conn:
            await conn.navigate("https://example.com")
            await conn.reload()
    """

    @abstractmethod
    async def connect(self) -> None:
        """Open the connection and make a page available.

        Raises:
            ConnectionFailureError: If the browser cannot be reached or launched.
        """
        ...

    @abstractmethod
    async def disconnect(self) -> None:
        """Close the connection. Safe to call multiple times."""
        ...

    @property
    @abstractmethod
    def is_connected(self) -> bool:
        ...

    @property
    @abstractmethod
    def current_url(self) -> str | None:
        """URL of the page as last reported by the browser."""
        ...

    @abstractmethod
    async def navigate(self, url: str) -> None:
        """Load ``url`` in the page, blocking until the browser reports it loaded."""
        ...

    @abstractmethod
    async def reload(self) -> None:
        """Reload the current page."""
        ...

    @abstractmethod
    async def evaluate(self, source: str) -> object:
        """Evaluate ``source`` in the page context and return its result."""
        ...

    async def __aenter__(self) -> BrowserConnection:
        await self.connect()
        return self

    async def __aexit__(self, exc_type: type | None, exc_val: Exception | None, exc_tb: object) -> None:
        await self.disconnect()
