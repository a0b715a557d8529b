"""Command-line interface for kioskctl.

Starts the remote control server, or sends single commands to a
running one.
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path

logger = logging.getLogger(__name__)


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        prog="kioskctl",
        description="Remote control for a single persistent browser session",
    )
    parser.add_argument(
        "-c", "--config",
        type=Path,
        default=None,
        help="Path to YAML configuration file (default: config/kioskctl.yaml)",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable debug logging",
    )
    parser.add_argument(
        "--server",
        type=str,
        default=None,
        help="Base URL of a running kioskctl server (overrides client.base_url)",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    subparsers.add_parser("serve", help="Start the browser and the HTTP control server")

    nav_parser = subparsers.add_parser("navigate", help="Navigate the browser to a URL")
    nav_parser.add_argument("url", help="Absolute URL, or host/path with --protocol")
    nav_parser.add_argument("--protocol", default=None, help="Scheme for bare targets (default https)")

    yt_parser = subparsers.add_parser("youtube", help="Play a YouTube video full-page")
    yt_parser.add_argument("video_id")

    bm_parser = subparsers.add_parser("bookmark", help="Open a configured bookmark")
    bm_parser.add_argument("name")

    subparsers.add_parser("reload", help="Reload the current page now")

    display_parser = subparsers.add_parser("display", help="Set display mode toggles")
    display_parser.add_argument(
        "--fullscreen", action=argparse.BooleanOptionalAction, default=False,
    )
    display_parser.add_argument(
        "--hide-scrollbar", action=argparse.BooleanOptionalAction, default=False,
    )

    schedule_parser = subparsers.add_parser("schedule", help="Reload the page every N seconds")
    schedule_parser.add_argument("interval", type=int)

    subparsers.add_parser("cancel", help="Cancel the reload schedule")
    subparsers.add_parser("status", help="Show session status")

    return parser.parse_args(argv)


async def _send(settings, args) -> dict:
    """Send one command to a running server."""
    from kioskctl.client import KioskClient

    base_url = args.server or settings.client.base_url
    async with KioskClient(base_url=base_url, timeout=settings.client.timeout) as kiosk:
        if args.command == "navigate":
            return await kiosk.navigate(args.url, args.protocol)
        if args.command == "youtube":
            return await kiosk.youtube(args.video_id)
        if args.command == "bookmark":
            return await kiosk.bookmark(args.name)
        if args.command == "reload":
            return await kiosk.reload()
        if args.command == "display":
            return await kiosk.set_display_mode(args.fullscreen, args.hide_scrollbar)
        if args.command == "schedule":
            return await kiosk.schedule_reload(args.interval)
        if args.command == "cancel":
            return await kiosk.cancel_reload()
        return await kiosk.health()


def main(argv: list[str] | None = None) -> None:
    """Main entry point for the kioskctl CLI."""
    args = parse_args(argv)

    if args.command is None:
        parse_args(["--help"])
        return

    from kioskctl.config.settings import load_settings
    from kioskctl.domain.errors import KioskError
    from kioskctl.utils.logging import setup_logging

    settings = load_settings(args.config)

    if args.verbose:
        settings.logging.level = "DEBUG"

    setup_logging(settings.logging)

    if args.command == "serve":
        logger.info("Starting remote control server")
        from kioskctl.endpoint.server import main as serve

        serve(settings)
        return

    try:
        result = asyncio.run(_send(settings, args))
    except KioskError as e:
        print(f"{e.code.value}: {e}", file=sys.stderr)
        sys.exit(1)
    print(json.dumps(result, indent=2))


if __name__ == "__main__":
    main()
