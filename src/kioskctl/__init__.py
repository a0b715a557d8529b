"""kioskctl -- Remote control for a single persistent browser session.

This package exposes a small HTTP surface that drives one long-lived
browser: navigate to a URL, toggle display modes, or reload the page on
a repeating schedule. All commands funnel through a single session
controller that owns the browser connection.
"""

__version__ = "0.1.0"
