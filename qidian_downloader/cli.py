"""Command-line entry point: ``qidian-downloader run --book ID ...``."""

import argparse
import asyncio
import logging
import sys
from pathlib import Path
from typing import List, Optional

from playwright.async_api import Browser, async_playwright

from .config import (
    AUTH_TIMEOUT,
    CONTENT_TIMEOUT,
    DEFAULT_UA,
    LOCALE,
    NAV_TIMEOUT,
    THROTTLE_MS,
    VIEWPORT,
    Timeouts,
)
from .engine import download
from .errors import AcquisitionError, ConfigError
from .models import Credentials, resolve_credentials
from .render import FORMATS, write_document

logger = logging.getLogger("qidian_downloader")


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(
        prog="qidian-downloader",
        description="Download a book you have access to on QiDian into a single HTML or EPUB file.",
    )
    ap.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")
    sub = ap.add_subparsers(dest="action", required=True)

    run = sub.add_parser("run", help="Run the downloading process.", description="Run the downloading process.")
    run.add_argument("--book", "-i", dest="book_id", type=int, required=True, metavar="BOOK_ID",
                     help="ID of the book you want to download from QiDian.")
    run.add_argument("--cookie", "-c", action="store_true",
                     help="Use cookie to login (requires --ywguid and --ywkey).")
    run.add_argument("--ywguid", metavar="YWGUID", help="The ywguid cookie (cookie login).")
    run.add_argument("--ywkey", metavar="YWKEY", help="The ywkey cookie (cookie login).")
    run.add_argument("--username", "-u", metavar="USERNAME", help="The username of your account in QiDian.")
    run.add_argument("--password", "-p", metavar="PASSWORD", help="The password of your account in QiDian.")
    run.add_argument("--no-chrome-headless", action="store_true",
                     help="Launch Chrome/Chromium browser not in headless mode.")
    run.add_argument("--out", default=".", help="Output folder (default: current directory)")
    run.add_argument("--format", choices=FORMATS, default="html", help="Output format (default: html)")
    run.add_argument("--throttle", type=int, default=THROTTLE_MS,
                     help=f"Milliseconds to wait between chapters (default: {THROTTLE_MS})")
    run.add_argument("--nav-timeout", type=int, default=NAV_TIMEOUT, help="Page navigation timeout in ms")
    run.add_argument("--auth-timeout", type=int, default=AUTH_TIMEOUT, help="Login step timeout in ms")
    run.add_argument("--content-timeout", type=int, default=CONTENT_TIMEOUT,
                     help="Timeout in ms for a chapter's text to render")
    return ap


async def run(args: argparse.Namespace, credentials: Credentials) -> Path:
    timeouts = Timeouts(navigation=args.nav_timeout, auth=args.auth_timeout, content=args.content_timeout)
    async with async_playwright() as p:
        browser: Browser = await p.chromium.launch(
            headless=not args.no_chrome_headless,
            args=["--disable-blink-features=AutomationControlled"],
        )
        try:
            context = await browser.new_context(user_agent=DEFAULT_UA, locale=LOCALE, viewport=VIEWPORT)
            context.set_default_timeout(timeouts.content)
            context.set_default_navigation_timeout(timeouts.navigation)
            document = await download(context, credentials, args.book_id,
                                      timeouts=timeouts, throttle_ms=args.throttle)
            await context.close()
        finally:
            await browser.close()
    return write_document(document, Path(args.out), args.format)


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.INFO, format="%(message)s")

    try:
        if args.book_id <= 0:
            raise ConfigError(f"--book must be a positive integer, got {args.book_id}")
        credentials = resolve_credentials(args.ywguid, args.ywkey, args.username, args.password,
                                          use_cookie=args.cookie)
    except ConfigError as e:
        logger.error("[error] %s", e)
        return 2

    try:
        asyncio.run(run(args, credentials))
    except AcquisitionError as e:
        logger.error("[error] %s failed: %s", type(e).__name__, e)
        return 1
    except KeyboardInterrupt:
        logger.warning("[warn] aborted by user")
        return 130
    return 0


if __name__ == "__main__":
    sys.exit(main())
