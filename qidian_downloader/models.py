"""Data models for the download pipeline."""

from dataclasses import dataclass, field
from typing import List, Optional, Union

from .errors import ConfigError


# --------- Credentials ---------
@dataclass(frozen=True)
class CookieCredentials:
    """The ``ywguid``/``ywkey`` cookie pair of a logged-in browser."""

    guid: str
    key: str

    def __repr__(self) -> str:
        return f"CookieCredentials(guid={self.guid!r}, key='***')"


@dataclass(frozen=True)
class AccountCredentials:
    username: str
    password: str

    def __repr__(self) -> str:
        return f"AccountCredentials(username={self.username!r}, password='***')"


Credentials = Union[CookieCredentials, AccountCredentials]


def validate_credentials(credentials) -> Credentials:
    """Return *credentials* unchanged, or raise :class:`ConfigError`."""
    if isinstance(credentials, CookieCredentials):
        if not (credentials.guid or "").strip() or not (credentials.key or "").strip():
            raise ConfigError("Cookie login needs both a ywguid and a ywkey value.")
    elif isinstance(credentials, AccountCredentials):
        if not (credentials.username or "").strip() or not credentials.password:
            raise ConfigError("Account login needs both a username and a password.")
    else:
        raise ConfigError(f"Unsupported credentials: {type(credentials).__name__}")
    return credentials


def resolve_credentials(
    ywguid: Optional[str] = None,
    ywkey: Optional[str] = None,
    username: Optional[str] = None,
    password: Optional[str] = None,
    use_cookie: bool = False,
) -> Credentials:
    """Pick the single credential variant described by raw options.

    Cookie values and account values are mutually exclusive; exactly one
    group must be given, and given completely. *use_cookie* forces the
    cookie group.
    """
    cookie_given = bool(ywguid or ywkey)
    account_given = bool(username or password)
    if cookie_given and account_given:
        raise ConfigError("Use either --ywguid/--ywkey or --username/--password, not both.")
    if use_cookie and account_given:
        raise ConfigError("--cookie logs in with --ywguid/--ywkey; drop --username/--password.")
    if cookie_given or use_cookie:
        return validate_credentials(CookieCredentials(guid=ywguid or "", key=ywkey or ""))
    if account_given:
        return validate_credentials(AccountCredentials(username=username or "", password=password or ""))
    raise ConfigError("No credentials: pass --ywguid/--ywkey or --username/--password.")


# --------- Catalog ---------
@dataclass(frozen=True)
class CatalogEntry:
    section_index: int
    subsection_index: int
    section_title: str
    title: str
    source_locator: str


@dataclass(frozen=True)
class BookInfo:
    title: str
    author: str


@dataclass(frozen=True)
class ContentFragment:
    title: str
    rendered_content: str


# --------- Document ---------
@dataclass
class Subsection:
    title: str
    content_html: str


@dataclass
class Section:
    title: str
    subsections: List[Subsection] = field(default_factory=list)


@dataclass
class Document:
    """A fully downloaded book, ready to be written out."""

    title: str
    author: str
    sections: List[Section] = field(default_factory=list)

    @property
    def subsection_count(self) -> int:
        return sum(len(s.subsections) for s in self.sections)
