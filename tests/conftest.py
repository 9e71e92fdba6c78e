"""Shared fixtures: an in-memory stand-in for a Playwright page/context.

Selector checks (``wait_for_selector``, ``locator().count()``) run
BeautifulSoup over the canned HTML of the current page, so the real CSS
selectors from ``qidian_downloader.config`` are exercised. Pages are keyed by
URL on a :class:`FakeSite`; a route may be a callable that decides where the
page ends up (redirects, login state).
"""

from __future__ import annotations

import asyncio
from typing import Callable, Dict, List, Optional, Sequence, Tuple

import pytest
from bs4 import BeautifulSoup
from playwright.async_api import Error as PWError, TimeoutError as PWTimeout

from qidian_downloader.config import (
    ACCOUNT_URL,
    BOOK_URL,
    GUID_COOKIE,
    KEY_COOKIE,
    LOGIN_PASSWORD_SELECTOR,
    LOGIN_SUBMIT_SELECTOR,
    LOGIN_URL,
    LOGIN_USERNAME_SELECTOR,
)

GOOD_GUID = "1234567890"
GOOD_KEY = "good-key"
GOOD_USER = "reader@example.com"
GOOD_PASSWORD = "hunter2"
BOOK_ID = 1010868264
BOOK_TITLE = "诡秘之主"
BOOK_AUTHOR = "爱潜水的乌贼"


# ---------------------------------------------------------------------------
# HTML builders
# ---------------------------------------------------------------------------

def chapter_url(n: int) -> str:
    return f"https://read.qidian.com/chapter/{n}"


def catalog_html(
    volumes: Sequence[Tuple[str, Sequence[str]]],
    title: str = BOOK_TITLE,
    author: str = BOOK_AUTHOR,
) -> str:
    """Old-layout book page; chapters are numbered from 1 across volumes."""
    n = 0
    parts = []
    for name, chapters in volumes:
        items = []
        for ch in chapters:
            n += 1
            items.append(f'<li data-rid="{n}"><a href="//read.qidian.com/chapter/{n}">{ch}</a></li>')
        parts.append(
            f'<div class="volume"><h3><span class="free">免费</span>{name}<i>·</i>'
            f'<em class="count">共{len(chapters)}章</em></h3><ul class="cf">{"".join(items)}</ul></div>'
        )
    metas = ""
    if title:
        metas += f'<meta property="og:novel:book_name" content="{title}">'
    if author:
        metas += f'<meta property="og:novel:author" content="{author}">'
    return (
        f"<html><head>{metas}<title>{title}</title></head><body>"
        f'<div class="book-info"><h1><em>{title}</em></h1></div>'
        f'<div class="catalog-content-wrap" id="j-catalogWrap"><div class="volume-wrap">{"".join(parts)}</div></div>'
        "</body></html>"
    )


def chapter_html(title: str, paragraphs: Sequence[str]) -> str:
    paras = "".join(f"<p>　　{p}<span class=\"review\">3</span></p>" for p in paragraphs)
    return (
        '<html><body><div class="header"><a href="/">起点中文网</a></div>'
        '<div class="main-text-wrap"><div class="text-head">'
        f'<h3 class="j_chapterName"><span class="content-wrap">{title}</span></h3></div>'
        f'<div class="read-content j_readContent">{paras}'
        '<div class="admire-wrap"><button>打赏</button></div><script>track()</script></div>'
        '<div class="chapter-control"><a href="#">下一章</a></div></div></body></html>'
    )


ACCOUNT_HTML = '<html><body><div id="elUidWrap"><span class="user-nickname">reader</span></div></body></html>'
LOGIN_HTML = (
    '<html><body><form><input id="username"><input id="password" type="password">'
    '<a id="j-loginBtn">登录</a></form></body></html>'
)
LOGIN_ERROR_HTML = LOGIN_HTML.replace("</form>", '</form><div id="j_errorTip">账号或密码错误</div>')
LOGIN_CAPTCHA_HTML = LOGIN_HTML.replace("</form>", '</form><iframe id="tcaptcha_iframe"></iframe>')
NOT_FOUND_HTML = "<html><body><h1>404</h1></body></html>"


# ---------------------------------------------------------------------------
# Fake Playwright objects
# ---------------------------------------------------------------------------

class FakeResponse:
    def __init__(self, status: int):
        self.status = status


class FakeSite:
    def __init__(self):
        self.pages: Dict[str, object] = {}
        self.on_click: Dict[str, Callable[["FakePage"], None]] = {}
        self.hang: set = set()
        self.reset: set = set()
        self.blocked: Dict[str, asyncio.Event] = {}
        self.reached = asyncio.Event()

    def add(self, url: str, html: str, status: int = 200) -> None:
        self.pages[url] = (html, status)

    def route(self, url: str, handler: Callable[["FakePage"], None]) -> None:
        self.pages[url] = handler


class FakeLocator:
    def __init__(self, page: "FakePage", selector: str):
        self.page = page
        self.selector = selector

    @property
    def first(self) -> "FakeLocator":
        return self

    async def count(self) -> int:
        return len(self.page.select(self.selector))

    async def is_visible(self) -> bool:
        return await self.count() > 0

    async def text_content(self) -> Optional[str]:
        found = self.page.select(self.selector)
        return found[0].get_text() if found else None

    async def fill(self, value: str, timeout: Optional[int] = None) -> None:
        if not self.page.select(self.selector):
            raise PWTimeout(f"Timeout {timeout}ms exceeded waiting for {self.selector!r}")
        self.page.filled[self.selector] = value

    async def click(self, timeout: Optional[int] = None) -> None:
        if not self.page.select(self.selector):
            raise PWTimeout(f"Timeout {timeout}ms exceeded waiting for {self.selector!r}")
        handler = self.page.context.site.on_click.get(self.selector)
        if handler:
            handler(self.page)


class FakePage:
    def __init__(self, context: "FakeContext"):
        self.context = context
        self.url = "about:blank"
        self.html = "<html></html>"
        self.status = 200
        self.visited: List[str] = []
        self.filled: Dict[str, str] = {}
        self.waited_ms = 0
        self.closed = False

    def load(self, url: str, html: str, status: int = 200) -> None:
        self.url, self.html, self.status = url, html, status

    def select(self, selector: str):
        return BeautifulSoup(self.html, "html.parser").select(selector)

    async def goto(self, url: str, wait_until: Optional[str] = None, timeout: Optional[int] = None):
        site = self.context.site
        self.visited.append(url)
        if url in site.blocked:
            site.reached.set()
            await site.blocked[url].wait()
        if url in site.hang:
            raise PWTimeout(f"Timeout {timeout}ms exceeded navigating to {url}")
        if url in site.reset:
            raise PWError(f"net::ERR_CONNECTION_RESET at {url}")
        target = site.pages.get(url)
        if target is None:
            self.load(url, NOT_FOUND_HTML, 404)
        elif callable(target):
            target(self)
        else:
            html, status = target
            self.load(url, html, status)
        return FakeResponse(self.status)

    async def content(self) -> str:
        return self.html

    async def wait_for_selector(self, selector: str, timeout: Optional[int] = None, state: Optional[str] = None):
        await asyncio.sleep(0)
        if self.select(selector):
            return True
        raise PWTimeout(f"Timeout {timeout}ms exceeded waiting for {selector!r}")

    async def wait_for_timeout(self, ms: int) -> None:
        self.waited_ms += ms
        await asyncio.sleep(0)

    def locator(self, selector: str) -> FakeLocator:
        return FakeLocator(self, selector)

    async def close(self) -> None:
        self.closed = True


class FakeContext:
    def __init__(self, site: FakeSite):
        self.site = site
        self.cookies: List[dict] = []
        self.pages: List[FakePage] = []
        self.logged_in = False

    async def add_cookies(self, cookies: List[dict]) -> None:
        self.cookies.extend(cookies)

    def cookie(self, name: str) -> Optional[str]:
        for c in self.cookies:
            if c["name"] == name:
                return c["value"]
        return None

    async def new_page(self) -> FakePage:
        page = FakePage(self)
        self.pages.append(page)
        return page


# ---------------------------------------------------------------------------
# Site wiring
# ---------------------------------------------------------------------------

def _account_page(page: FakePage) -> None:
    ctx = page.context
    if ctx.logged_in or (ctx.cookie(GUID_COOKIE) == GOOD_GUID and ctx.cookie(KEY_COOKIE) == GOOD_KEY):
        page.load(ACCOUNT_URL, ACCOUNT_HTML)
    else:
        page.load(LOGIN_URL + "?returnUrl=my.qidian.com", LOGIN_HTML)


def _submit_login(page: FakePage) -> None:
    user = page.filled.get(LOGIN_USERNAME_SELECTOR)
    password = page.filled.get(LOGIN_PASSWORD_SELECTOR)
    if (user, password) == (GOOD_USER, GOOD_PASSWORD):
        page.context.logged_in = True
        page.load("https://www.qidian.com/", "<html><body>home</body></html>")
    else:
        page.load(LOGIN_URL, LOGIN_ERROR_HTML)


def build_site(
    volumes: Sequence[Tuple[str, Sequence[str]]] = (("第一卷 小丑", ["第一章 绯红", "第二章 情况"]),
                                                   ("第二卷 无面人", ["第三章 占卜"])),
    book_id: int = BOOK_ID,
) -> FakeSite:
    site = FakeSite()
    site.route(ACCOUNT_URL, _account_page)
    site.add(LOGIN_URL, LOGIN_HTML)
    site.on_click[LOGIN_SUBMIT_SELECTOR] = _submit_login
    site.add(BOOK_URL.format(book_id=book_id), catalog_html(volumes))
    n = 0
    for _, chapters in volumes:
        for ch in chapters:
            n += 1
            site.add(chapter_url(n), chapter_html(ch, [f"{ch}的第一段。", f"{ch}的第二段。"]))
    return site


@pytest.fixture
def site() -> FakeSite:
    return build_site()


@pytest.fixture
def context(site: FakeSite) -> FakeContext:
    return FakeContext(site)


@pytest.fixture
def page(context: FakeContext) -> FakePage:
    return FakePage(context)
