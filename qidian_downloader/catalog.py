"""Table-of-contents discovery for a single book."""

import copy
import logging
from typing import List, Optional

from bs4 import BeautifulSoup
from playwright.async_api import Error as PWError, Page, TimeoutError as PWTimeout

from .config import (
    BASE,
    BOOK_AUTHOR_META,
    BOOK_AUTHOR_SELECTORS,
    BOOK_TITLE_META,
    BOOK_TITLE_SELECTORS,
    BOOK_URL,
    CATALOG_SELECTOR,
    CHAPTER_LINK_SELECTOR,
    DEFAULT_TIMEOUTS,
    VOLUME_SELECTORS,
    VOLUME_TITLE_SELECTORS,
    Timeouts,
)
from .errors import CatalogError, CatalogErrorKind
from .models import BookInfo, CatalogEntry

logger = logging.getLogger(__name__)


def abs_url(href: Optional[str]) -> Optional[str]:
    if not href:
        return None
    href = href.strip()
    if href.startswith("http://") or href.startswith("https://"):
        return href
    if href.startswith("//"):
        return "https:" + href
    if href.startswith("/"):
        return f"{BASE}{href}"
    return href


def _volume_title(volume, index: int) -> str:
    """Heading text of a volume, without the chapter-count and badge children."""
    for sel in VOLUME_TITLE_SELECTORS:
        h = volume.select_one(sel)
        if h is None:
            continue
        h = copy.copy(h)
        for child in h.find_all(["i", "em", "span", "a", "b"]):
            child.decompose()
        text = h.get_text(" ", strip=True).strip(" ·")
        if text:
            return text
    return f"Volume {index + 1}"


def parse_catalog(html: str) -> List[CatalogEntry]:
    """Parse catalog markup into entries, in document order."""
    soup = BeautifulSoup(html, "html.parser")
    volumes = []
    for sel in VOLUME_SELECTORS:
        volumes = soup.select(sel)
        if volumes:
            break

    entries: List[CatalogEntry] = []
    section_index = 0
    for volume in volumes:
        links = volume.select(CHAPTER_LINK_SELECTOR)
        if not links:
            continue
        section_title = _volume_title(volume, section_index)
        subsection_index = 0
        for a in links:
            url = abs_url(a.get("href"))
            if not url:
                continue
            title = a.get_text(" ", strip=True) or f"Chapter {len(entries) + 1}"
            entries.append(CatalogEntry(
                section_index=section_index,
                subsection_index=subsection_index,
                section_title=section_title,
                title=title,
                source_locator=url,
            ))
            subsection_index += 1
        if subsection_index:
            section_index += 1
    return entries


async def resolve_catalog(page: Page, book_id: int, timeouts: Timeouts = DEFAULT_TIMEOUTS) -> List[CatalogEntry]:
    """Load the book page and return its chapters in reading order.

    Raises:
        CatalogError: If the book does not exist or lists no chapters.
    """
    url = BOOK_URL.format(book_id=book_id)
    logger.info("[nav] %s", url)
    try:
        response = await page.goto(url, wait_until="domcontentloaded", timeout=timeouts.navigation)
    except PWError as e:
        raise CatalogError(CatalogErrorKind.TIMEOUT, f"{url} did not load: {e}") from e
    if response is not None and response.status >= 400:
        raise CatalogError(CatalogErrorKind.BOOK_NOT_FOUND, f"book {book_id} returned HTTP {response.status}")

    try:
        await page.wait_for_selector(CATALOG_SELECTOR, timeout=timeouts.content)
    except PWTimeout as e:
        raise CatalogError(CatalogErrorKind.BOOK_NOT_FOUND, f"no catalog found for book {book_id}") from e

    entries = parse_catalog(await page.content())
    if not entries:
        raise CatalogError(CatalogErrorKind.EMPTY, f"book {book_id} has no chapters")

    sections = entries[-1].section_index + 1
    logger.info("[toc] %d chapters in %d volumes", len(entries), sections)
    return entries


def parse_book_info(html: str) -> BookInfo:
    soup = BeautifulSoup(html, "html.parser")

    def first_text(meta_sel: str, selectors: List[str]) -> str:
        meta = soup.select_one(meta_sel)
        if meta and (meta.get("content") or "").strip():
            return meta["content"].strip()
        for sel in selectors:
            node = soup.select_one(sel)
            if node:
                text = node.get_text(" ", strip=True)
                if text:
                    return text
        return ""

    return BookInfo(
        title=first_text(BOOK_TITLE_META, BOOK_TITLE_SELECTORS),
        author=first_text(BOOK_AUTHOR_META, BOOK_AUTHOR_SELECTORS),
    )


async def read_book_info(page: Page) -> BookInfo:
    """Title and author of the book page currently loaded in *page*."""
    info = parse_book_info(await page.content())
    if not info.title:
        raise CatalogError(CatalogErrorKind.METADATA_MISSING, "book title not found")
    if not info.author:
        raise CatalogError(CatalogErrorKind.METADATA_MISSING, "book author not found")
    logger.info("[meta] title=%r author=%r", info.title, info.author)
    return info
