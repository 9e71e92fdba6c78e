"""Site constants, selectors and timeouts."""

from dataclasses import dataclass

# --------- Site ---------
BASE = "https://www.qidian.com"
BOOK_URL = "https://book.qidian.com/info/{book_id}#Catalog"
ACCOUNT_URL = "https://my.qidian.com/"
LOGIN_URL = "https://passport.qidian.com/"
COOKIE_DOMAIN = ".qidian.com"
GUID_COOKIE = "ywguid"
KEY_COOKIE = "ywkey"
LOGIN_URL_PATTERN = r"passport\.qidian\.com|/login"

DEFAULT_UA = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) "
    "AppleWebKit/537.36 (KHTML, like Gecko) "
    "Chrome/125.0.0.0 Safari/537.36"
)
LOCALE = "zh-CN"
VIEWPORT = {"width": 1280, "height": 2100}

# --------- Timing (ms) ---------
NAV_TIMEOUT = 25_000
AUTH_TIMEOUT = 15_000
CONTENT_TIMEOUT = 10_000
POLL_MS = 250
THROTTLE_MS = 700

# --------- Selectors ---------
# Old (book.qidian.com) and new (www.qidian.com/book) layouts.
LOGGED_IN_SELECTOR = "#elUidWrap, .user-info, .my-user-info, .user-nickname"
LOGIN_USERNAME_SELECTOR = "#username, input[name='username']"
LOGIN_PASSWORD_SELECTOR = "#password, input[name='password']"
LOGIN_SUBMIT_SELECTOR = "#j-loginBtn, .login-button, button[type='submit']"
LOGIN_ERROR_SELECTOR = "#j_errorTip, .error-tip, .login-error"
CHALLENGE_SELECTOR = "#tcaptcha_iframe, iframe[src*='captcha'], #captcha, .geetest_panel"
SESSION_EXPIRED_SELECTOR = "#loginIfr, .login-mask"

CATALOG_SELECTOR = "#j-catalogWrap, .catalog-all"
VOLUME_SELECTORS = [".volume-wrap .volume", ".catalog-all .catalog-volume", "#j-catalogWrap .volume"]
VOLUME_TITLE_SELECTORS = ["h3.volume-name", "h3", "h2"]
CHAPTER_LINK_SELECTOR = "li a[href]"

BOOK_TITLE_META = 'meta[property="og:novel:book_name"]'
BOOK_AUTHOR_META = 'meta[property="og:novel:author"]'
BOOK_TITLE_SELECTORS = ["#bookName", ".book-info h1 em", ".book-info h1"]
BOOK_AUTHOR_SELECTORS = [".book-info .writer", "a.writer-name", ".author"]

CONTENT_SELECTOR = ".read-content, main.content, .chapter-wrapper main, #j_chapterBox .main-text-wrap"
CONTENT_CONTAINERS = [
    ".read-content", ".j_readContent", "main.content", ".chapter-wrapper main",
    ".main-text-wrap", ".chapter-content",
]
CHAPTER_TITLE_SELECTORS = [".j_chapterName .content-wrap", ".j_chapterName", "h1.title", ".chapter-title", "h1"]
LOCKED_SELECTORS = [".vip-limit-wrap", ".lock-mask", ".chapter-lock", "[data-locked='true']"]
CHROME_SELECTORS = [
    "script", "style", "noscript", "iframe", "form", "button", "input",
    "span.review", ".review", ".review-count", ".admire-wrap", ".j_chapterRewardWrap",
    ".chapter-control", ".chapter-nav", ".ad", ".ads", "[class*='advert']",
    ".tip-wrap", ".share", ".comment", ".comments",
]


@dataclass(frozen=True)
class Timeouts:
    """Bounds for each kind of suspension point, in milliseconds."""

    navigation: int = NAV_TIMEOUT
    auth: int = AUTH_TIMEOUT
    content: int = CONTENT_TIMEOUT


DEFAULT_TIMEOUTS = Timeouts()
