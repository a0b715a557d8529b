"""Browser connection module for kioskctl.

Public API:
    BrowserConnection -- Abstract base class
    PlaywrightConnection -- Playwright/Chromium backend
"""

from kioskctl.browser.base import BrowserConnection

__all__ = ["BrowserConnection", "PlaywrightConnection"]


def __getattr__(name: str) -> type:
    """Lazy import for the backend that requires Playwright."""
    if name == "PlaywrightConnection":
        from kioskctl.browser.playwright_backend import PlaywrightConnection
        return PlaywrightConnection
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
