"""The download pipeline: authenticate, read the catalog, fetch every chapter."""

import asyncio
import enum
import logging
from typing import Optional

from playwright.async_api import BrowserContext, Error as PWError

from .assemble import DocumentBuilder
from .auth import authenticate
from .catalog import read_book_info, resolve_catalog
from .config import DEFAULT_TIMEOUTS, THROTTLE_MS, Timeouts
from .errors import ConfigError
from .extract import extract
from .models import Credentials, Document, validate_credentials

logger = logging.getLogger(__name__)


class EngineState(enum.Enum):
    IDLE = "idle"
    AUTHENTICATING = "authenticating"
    RESOLVING_CATALOG = "resolving-catalog"
    EXTRACTING = "extracting"
    ASSEMBLING = "assembling"
    DONE = "done"
    FAILED = "failed"


class AcquisitionEngine:
    """Runs one download on a browser context it borrows for the run.

    The engine opens a single page, drives every step on it in order and
    closes it when the run ends, whatever the outcome. Any failure aborts
    the run; a Document is only returned when every chapter was fetched.
    """

    def __init__(
        self,
        context: BrowserContext,
        credentials: Credentials,
        book_id: int,
        timeouts: Timeouts = DEFAULT_TIMEOUTS,
        throttle_ms: int = THROTTLE_MS,
    ):
        self.context = context
        self.credentials = credentials
        self.book_id = book_id
        self.timeouts = timeouts
        self.throttle_ms = max(0, int(throttle_ms or 0))
        self.state = EngineState.IDLE
        self.position: Optional[int] = None
        self.failure: Optional[BaseException] = None

    def _enter(self, state: EngineState, position: Optional[int] = None) -> None:
        self.state = state
        self.position = position
        if position is None:
            logger.debug("[stage] %s", state.value)

    def _validate(self) -> None:
        validate_credentials(self.credentials)
        if isinstance(self.book_id, bool) or not isinstance(self.book_id, int) or self.book_id <= 0:
            raise ConfigError(f"Book id must be a positive integer, got {self.book_id!r}")

    async def run(self) -> Document:
        if self.state is not EngineState.IDLE:
            raise RuntimeError("an AcquisitionEngine can only run once")
        try:
            self._validate()
        except ConfigError as e:
            self._fail(e)
            raise

        page = await self.context.new_page()
        try:
            self._enter(EngineState.AUTHENTICATING)
            await authenticate(page, self.credentials, self.timeouts)

            self._enter(EngineState.RESOLVING_CATALOG)
            entries = await resolve_catalog(page, self.book_id, self.timeouts)
            info = await read_book_info(page)

            builder = DocumentBuilder(info.title, info.author)
            for i, entry in enumerate(entries):
                self._enter(EngineState.EXTRACTING, i)
                builder.add(entry, await extract(page, entry, self.timeouts))
                if self.throttle_ms and i < len(entries) - 1:
                    await page.wait_for_timeout(self.throttle_ms)

            self._enter(EngineState.ASSEMBLING)
            document = builder.build()
            self._enter(EngineState.DONE)
            logger.info("[ok] %r: %d chapters in %d volumes",
                        document.title, document.subsection_count, len(document.sections))
            return document
        except BaseException as e:
            self._fail(e)
            raise
        finally:
            try:
                await page.close()
            except PWError as e:
                logger.warning("[stage] could not close page: %s", e)

    def _fail(self, reason: BaseException) -> None:
        where = self.state.value if self.position is None else f"{self.state.value}[{self.position}]"
        self.failure = reason
        self.state = EngineState.FAILED
        if isinstance(reason, asyncio.CancelledError):
            logger.warning("[stage] cancelled during %s", where)
        else:
            logger.error("[stage] failed during %s: %s", where, reason)


async def download(
    context: BrowserContext,
    credentials: Credentials,
    book_id: int,
    timeouts: Timeouts = DEFAULT_TIMEOUTS,
    throttle_ms: int = THROTTLE_MS,
) -> Document:
    """Download book *book_id* using an already open browser context."""
    engine = AcquisitionEngine(context, credentials, book_id, timeouts=timeouts, throttle_ms=throttle_ms)
    return await engine.run()
