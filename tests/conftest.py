"""Shared test fixtures for the kioskctl test suite.

Provides a mocked browser connection and a RemoteSession built on it,
so controller and route tests never launch a real browser.
"""

from __future__ import annotations

from unittest.mock import AsyncMock

import pytest

from kioskctl.browser.base import BrowserConnection
from kioskctl.session.controller import RemoteSession


# ---------------------------------------------------------------------------
# Connection Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def mock_connection() -> AsyncMock:
    """A mock BrowserConnection with all async methods stubbed."""
    conn = AsyncMock(spec=BrowserConnection)
    conn.is_connected = True
    conn.current_url = "https://example.com/"
    return conn


@pytest.fixture
def bookmarks() -> dict[str, str]:
    return {"dashboard": "http://grafana.local:3000/d/overview"}


# ---------------------------------------------------------------------------
# Session Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def session(mock_connection: AsyncMock, bookmarks: dict[str, str]) -> RemoteSession:
    """A RemoteSession driving the mock connection.

    Tests that start a reload schedule should ``await session.close()``.
    """
    return RemoteSession(mock_connection, bookmarks=bookmarks)
