from __future__ import annotations

import asyncio
import logging
import time
from abc import ABC, abstractmethod

from core.errors import ParseFailure, StructuralTimeout
from core.models import ErrorKind, ExtractionResult, Platform, RawItem
from scrapers.page import Page

log = logging.getLogger(__name__)

DEFAULT_WAIT_SECONDS = 10.0


def epoch_millis() -> int:
    return int(time.time() * 1000)


class BaseExtractor(ABC):
    """Turns one fetched page of a source into normalised items.

    DOM-based extractors set ``ready_selector``; the fetcher renders the page
    until it appears (bounded by ``wait_timeout``) and ``_parse`` checks for it.
    JSON extractors leave it as None and get a plain HTTP body.
    """

    platform: Platform
    ready_selector: str | None = None

    def __init__(self, wait_timeout: float = DEFAULT_WAIT_SECONDS) -> None:
        self.wait_timeout = wait_timeout

    async def extract(self, page: Page, include_images: bool) -> ExtractionResult:
        try:
            items = await self._parse(page, include_images)
        except ParseFailure as e:
            log.error("Error parsing %s JSON: %s", self.platform.value, e)
            return ExtractionResult.err(ErrorKind.PARSE_FAILURE, str(e))
        except StructuralTimeout as e:
            return ExtractionResult.err(ErrorKind.STRUCTURAL_TIMEOUT, str(e))
        return ExtractionResult.ok(items)

    @abstractmethod
    async def _parse(self, page: Page, include_images: bool) -> list[RawItem]:
        """Parse the page. Raise ParseFailure / StructuralTimeout on total failure."""
        ...


class RateLimiter:
    """Spaces consecutive requests at least ``delay_seconds`` apart."""

    def __init__(self, delay_seconds: float = 1.0) -> None:
        self._delay = delay_seconds
        self._lock = asyncio.Lock()
        self._last_request: float = 0.0

    async def wait(self) -> None:
        async with self._lock:
            now = asyncio.get_event_loop().time()
            elapsed = now - self._last_request
            if elapsed < self._delay:
                await asyncio.sleep(self._delay - elapsed)
            self._last_request = asyncio.get_event_loop().time()
