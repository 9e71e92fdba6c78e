"""Exceptions raised by qidian-downloader."""

import enum


class QidianDownloaderError(Exception):
    """Base exception for qidian-downloader."""


class ConfigError(QidianDownloaderError):
    """Raised when credentials or run options are missing or invalid."""


class AuthErrorKind(enum.Enum):
    INVALID_COOKIE = "invalid-cookie"
    INVALID_CREDENTIALS = "invalid-credentials"
    CHALLENGE_REQUIRED = "challenge-required"
    TIMEOUT = "timeout"


class CatalogErrorKind(enum.Enum):
    BOOK_NOT_FOUND = "book-not-found"
    EMPTY = "empty"
    TIMEOUT = "timeout"
    METADATA_MISSING = "metadata-missing"


class ExtractErrorKind(enum.Enum):
    CONTENT_MISSING = "content-missing"
    SESSION_EXPIRED = "session-expired"


class AcquisitionError(QidianDownloaderError):
    """A failure that aborts a download run.

    ``kind`` tells the caller which step failed and why.
    """

    def __init__(self, kind: enum.Enum, message: str = ""):
        self.kind = kind
        self.message = message
        super().__init__(kind, message)

    def __str__(self) -> str:
        if self.message:
            return f"{self.kind.value}: {self.message}"
        return self.kind.value


class AuthError(AcquisitionError):
    """Raised when the session could not be authenticated."""


class CatalogError(AcquisitionError):
    """Raised when the book's table of contents cannot be resolved."""


class ExtractError(AcquisitionError):
    """Raised when a single chapter cannot be extracted."""

    def __init__(self, kind: ExtractErrorKind, entry, message: str = ""):
        self.entry = entry
        super().__init__(kind, message)
