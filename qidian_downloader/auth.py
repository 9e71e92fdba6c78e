"""Log a browser session into QiDian with cookies or an account."""

import logging
import math
import re

from playwright.async_api import Error as PWError, Page, TimeoutError as PWTimeout

from .config import (
    ACCOUNT_URL,
    CHALLENGE_SELECTOR,
    COOKIE_DOMAIN,
    DEFAULT_TIMEOUTS,
    GUID_COOKIE,
    KEY_COOKIE,
    LOGGED_IN_SELECTOR,
    LOGIN_ERROR_SELECTOR,
    LOGIN_PASSWORD_SELECTOR,
    LOGIN_SUBMIT_SELECTOR,
    LOGIN_URL,
    LOGIN_URL_PATTERN,
    LOGIN_USERNAME_SELECTOR,
    POLL_MS,
    SESSION_EXPIRED_SELECTOR,
    Timeouts,
)
from .errors import AuthError, AuthErrorKind, ConfigError
from .models import AccountCredentials, CookieCredentials, Credentials

logger = logging.getLogger(__name__)


def is_login_url(url: str) -> bool:
    return bool(re.search(LOGIN_URL_PATTERN, url or "", re.I))


async def looks_logged_out(page: Page) -> bool:
    """Heuristic: bounced to the passport site, or a login overlay is shown."""
    if is_login_url(page.url):
        return True
    return await page.locator(SESSION_EXPIRED_SELECTOR).count() > 0


def cookie_params(credentials: CookieCredentials):
    return [
        {"name": GUID_COOKIE, "value": credentials.guid, "domain": COOKIE_DOMAIN, "path": "/"},
        {"name": KEY_COOKIE, "value": credentials.key, "domain": COOKIE_DOMAIN, "path": "/"},
    ]


async def _goto(page: Page, url: str, timeouts: Timeouts) -> None:
    try:
        await page.goto(url, wait_until="domcontentloaded", timeout=timeouts.auth)
    except PWError as e:
        raise AuthError(AuthErrorKind.TIMEOUT, f"{url} did not load: {e}") from e


async def verify_session(page: Page, timeouts: Timeouts, on_anonymous: AuthErrorKind) -> None:
    """Open the account page and make sure it is not served anonymously."""
    await _goto(page, ACCOUNT_URL, timeouts)
    if is_login_url(page.url):
        raise AuthError(on_anonymous, "account page redirected to login")
    try:
        await page.wait_for_selector(LOGGED_IN_SELECTOR, timeout=timeouts.auth)
    except PWTimeout as e:
        raise AuthError(on_anonymous, "account page shows no logged-in user") from e


async def _login_with_cookies(page: Page, credentials: CookieCredentials, timeouts: Timeouts) -> None:
    await page.context.add_cookies(cookie_params(credentials))
    logger.info("[auth] injected %s/%s cookies", GUID_COOKIE, KEY_COOKIE)
    await verify_session(page, timeouts, AuthErrorKind.INVALID_COOKIE)


async def _login_outcome(page: Page, timeouts: Timeouts) -> None:
    """Poll until the login page navigates away, shows an error or a challenge."""
    for _ in range(max(1, math.ceil(timeouts.auth / POLL_MS))):
        if await page.locator(CHALLENGE_SELECTOR).count():
            raise AuthError(AuthErrorKind.CHALLENGE_REQUIRED, "login asked for a captcha")
        if not is_login_url(page.url):
            return
        tip = page.locator(LOGIN_ERROR_SELECTOR).first
        if await tip.count() and await tip.is_visible():
            text = ((await tip.text_content()) or "").strip()
            raise AuthError(AuthErrorKind.INVALID_CREDENTIALS, text or "login rejected")
        await page.wait_for_timeout(POLL_MS)
    raise AuthError(AuthErrorKind.TIMEOUT, f"no login result after {timeouts.auth}ms")


async def _login_with_account(page: Page, credentials: AccountCredentials, timeouts: Timeouts) -> None:
    await _goto(page, LOGIN_URL, timeouts)
    try:
        await page.wait_for_selector(LOGIN_USERNAME_SELECTOR, timeout=timeouts.auth)
    except PWTimeout as e:
        if await page.locator(CHALLENGE_SELECTOR).count():
            raise AuthError(AuthErrorKind.CHALLENGE_REQUIRED, "login page shows a captcha") from e
        raise AuthError(AuthErrorKind.TIMEOUT, "login form did not appear") from e
    if await page.locator(CHALLENGE_SELECTOR).count():
        raise AuthError(AuthErrorKind.CHALLENGE_REQUIRED, "login page shows a captcha")

    logger.info("[auth] submitting login form for %s", credentials.username)
    try:
        await page.locator(LOGIN_USERNAME_SELECTOR).first.fill(credentials.username, timeout=timeouts.auth)
        await page.locator(LOGIN_PASSWORD_SELECTOR).first.fill(credentials.password, timeout=timeouts.auth)
    except PWTimeout as e:
        raise AuthError(AuthErrorKind.TIMEOUT, "login form could not be filled in") from e
    try:
        await page.locator(LOGIN_SUBMIT_SELECTOR).first.click(timeout=timeouts.auth)
    except PWTimeout as e:
        raise AuthError(AuthErrorKind.TIMEOUT, "login button could not be clicked") from e

    await _login_outcome(page, timeouts)
    await verify_session(page, timeouts, AuthErrorKind.INVALID_CREDENTIALS)


async def authenticate(page: Page, credentials: Credentials, timeouts: Timeouts = DEFAULT_TIMEOUTS) -> Page:
    """Authenticate the context behind *page*; returns the same page.

    Raises:
        AuthError: If the site does not accept the credentials.
    """
    if isinstance(credentials, CookieCredentials):
        await _login_with_cookies(page, credentials, timeouts)
    elif isinstance(credentials, AccountCredentials):
        await _login_with_account(page, credentials, timeouts)
    else:
        raise ConfigError(f"Unsupported credentials: {type(credentials).__name__}")
    logger.info("[auth] session authenticated")
    return page
