"""Chapter page loading and content normalization."""

import logging
import re
from html import escape as hesc
from typing import List

from bs4 import BeautifulSoup
from playwright.async_api import Error as PWError, Page, TimeoutError as PWTimeout

from .auth import is_login_url, looks_logged_out
from .config import (
    CHAPTER_TITLE_SELECTORS,
    CHROME_SELECTORS,
    CONTENT_CONTAINERS,
    CONTENT_SELECTOR,
    DEFAULT_TIMEOUTS,
    LOCKED_SELECTORS,
    Timeouts,
)
from .errors import ExtractError, ExtractErrorKind
from .models import CatalogEntry, ContentFragment

logger = logging.getLogger(__name__)

_WS = re.compile(r"[ \t\r\f\v　\xa0]+")


def _rm_all(root, selectors):
    for sel in selectors:
        for el in root.select(sel):
            el.decompose()


def _clean(text: str) -> str:
    return _WS.sub(" ", text).strip()


def _paragraphs(node) -> List[str]:
    paras = [_clean(p.get_text(" ")) for p in node.find_all("p")]
    paras = [t for t in paras if t]
    if paras:
        return paras
    # Some layouts separate paragraphs with <br> only.
    for br in node.find_all("br"):
        br.replace_with("\n")
    return [t for t in (_clean(line) for line in node.get_text().split("\n")) if t]


def _is_good_title(t: str) -> bool:
    if not t:
        return False
    return len(t.strip()) >= 2


def extract_readable(html: str, list_title: str = "") -> ContentFragment:
    """Pull the chapter title and paragraphs out of a chapter page.

    Raises:
        ValueError: If the chapter is locked or has no readable text.
    """
    soup = BeautifulSoup(html, "html.parser")
    for sel in LOCKED_SELECTORS:
        if soup.select_one(sel):
            raise ValueError("chapter is locked (not purchased?)")

    node = None
    for sel in CONTENT_CONTAINERS:
        node = soup.select_one(sel)
        if node:
            break
    if node is None:
        raise ValueError("no content container on page")

    header_title = ""
    for sel in CHAPTER_TITLE_SELECTORS:
        h = soup.select_one(sel)
        if h:
            header_title = _clean(h.get_text(" "))
            if header_title:
                break
    # Headings inside the container are not part of the text.
    for h in node.select(", ".join(CHAPTER_TITLE_SELECTORS)):
        h.decompose()

    _rm_all(node, CHROME_SELECTORS)
    paras = _paragraphs(node)
    if not paras:
        raise ValueError("no readable content found (might be gated)")

    final_title = header_title if _is_good_title(header_title) else (list_title or header_title or "Chapter")
    body_html = "".join(f"<p>{hesc(t)}</p>" for t in paras)
    return ContentFragment(title=final_title, rendered_content=body_html)


async def extract(page: Page, entry: CatalogEntry, timeouts: Timeouts = DEFAULT_TIMEOUTS) -> ContentFragment:
    """Open *entry* and return its normalized content.

    Raises:
        ExtractError: ``SESSION_EXPIRED`` when the site logged us out,
            ``CONTENT_MISSING`` when the chapter text never shows up.
    """
    logger.info("[open] %d.%d %s -> %s", entry.section_index + 1, entry.subsection_index + 1,
                entry.title, entry.source_locator)
    try:
        await page.goto(entry.source_locator, wait_until="domcontentloaded", timeout=timeouts.navigation)
    except PWError as e:
        raise ExtractError(ExtractErrorKind.CONTENT_MISSING, entry, f"navigation failed: {e}") from e

    if is_login_url(page.url):
        raise ExtractError(ExtractErrorKind.SESSION_EXPIRED, entry, "redirected to login")

    try:
        await page.wait_for_selector(CONTENT_SELECTOR, timeout=timeouts.content)
    except PWTimeout as e:
        if await looks_logged_out(page):
            raise ExtractError(ExtractErrorKind.SESSION_EXPIRED, entry, "login prompt shown") from e
        raise ExtractError(ExtractErrorKind.CONTENT_MISSING, entry,
                           f"content did not render within {timeouts.content}ms") from e

    try:
        fragment = extract_readable(await page.content(), list_title=entry.title)
    except ValueError as e:
        raise ExtractError(ExtractErrorKind.CONTENT_MISSING, entry, str(e)) from e
    logger.debug("[open]   %r: %d bytes", fragment.title, len(fragment.rendered_content))
    return fragment
