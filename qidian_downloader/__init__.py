"""Download a QiDian book you can read into a single document."""

from .assemble import DocumentBuilder, assemble
from .auth import authenticate
from .catalog import read_book_info, resolve_catalog
from .engine import AcquisitionEngine, EngineState, download
from .errors import (
    AcquisitionError,
    AuthError,
    AuthErrorKind,
    CatalogError,
    CatalogErrorKind,
    ConfigError,
    ExtractError,
    ExtractErrorKind,
    QidianDownloaderError,
)
from .extract import extract
from .models import (
    AccountCredentials,
    BookInfo,
    CatalogEntry,
    ContentFragment,
    CookieCredentials,
    Document,
    Section,
    Subsection,
    resolve_credentials,
)

__all__ = [
    "AcquisitionEngine", "EngineState", "download",
    "authenticate", "resolve_catalog", "read_book_info", "extract", "assemble", "DocumentBuilder",
    "CookieCredentials", "AccountCredentials", "resolve_credentials",
    "CatalogEntry", "BookInfo", "ContentFragment", "Document", "Section", "Subsection",
    "QidianDownloaderError", "ConfigError", "AcquisitionError",
    "AuthError", "AuthErrorKind", "CatalogError", "CatalogErrorKind", "ExtractError", "ExtractErrorKind",
]
