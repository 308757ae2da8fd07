"""Fetch collaborator: navigates to a seed URL and hands back a ready Page."""

from __future__ import annotations

import asyncio
import logging

from scrapling.fetchers import DynamicFetcher, Fetcher

from config.settings import settings
from core.errors import FetchError
from core.models import SeedRequest
from scrapers.base import RateLimiter
from scrapers.page import Page

log = logging.getLogger(__name__)


def _decode(body: bytes | str, encoding: str | None) -> str:
    if isinstance(body, bytes):
        return body.decode(encoding or "utf-8", errors="replace")
    return body


class PageFetcher:
    """Fetches pages with fixed browser-like headers.

    Plain HTTP (scrapling ``Fetcher``) for JSON endpoints; a headless browser
    (scrapling ``DynamicFetcher``) when the caller needs a rendered DOM, in
    which case rendering waits for ``wait_selector`` up to ``wait_timeout``.
    """

    def __init__(
        self,
        *,
        user_agent: str | None = None,
        accept_language: str | None = None,
        timeout: float | None = None,
        headless: bool | None = None,
        request_delay: float | None = None,
    ) -> None:
        self._user_agent = user_agent or settings.USER_AGENT
        self._accept_language = accept_language or settings.ACCEPT_LANGUAGE
        self._timeout = timeout if timeout is not None else settings.FETCH_TIMEOUT_SECONDS
        self._headless = settings.HEADLESS if headless is None else headless
        delay = settings.SCRAPE_REQUEST_DELAY if request_delay is None else request_delay
        self._limiter = RateLimiter(delay)

    @property
    def headers(self) -> dict[str, str]:
        return {
            "Accept": "application/json, text/html",
            "Accept-Language": self._accept_language,
            "User-Agent": self._user_agent,
        }

    async def fetch(
        self,
        seed: SeedRequest,
        wait_selector: str | None = None,
        wait_timeout: float = 10.0,
    ) -> Page:
        await self._limiter.wait()
        if wait_selector:
            return await asyncio.to_thread(
                self._render, seed.url, wait_selector, wait_timeout
            )
        return await asyncio.to_thread(self._get, seed.url)

    def _get(self, url: str) -> Page:
        response = Fetcher().get(
            url,
            headers=self.headers,
            timeout=self._timeout,
            stealthy_headers=True,
            follow_redirects=True,
        )
        return self._to_page(response, url)

    def _render(self, url: str, wait_selector: str, wait_timeout: float) -> Page:
        wait_ms = int(wait_timeout * 1000)

        def bound_selector_wait(page) -> None:
            # navigation keeps the fetch timeout; selector waits use the DOM bound
            page.set_default_navigation_timeout(int(self._timeout * 1000))
            page.set_default_timeout(wait_ms)

        response = DynamicFetcher.fetch(
            url,
            headless=self._headless,
            useragent=self._user_agent,
            extra_headers=self.headers,
            timeout=int(self._timeout * 1000),
            wait_selector=wait_selector,
            page_setup=bound_selector_wait,
        )
        log.debug("Rendered %s waiting for %s (bound %.0fs)", url, wait_selector, wait_timeout)
        return self._to_page(response, url)

    @staticmethod
    def _to_page(response, requested_url: str) -> Page:
        if response.status >= 400:
            raise FetchError(f"HTTP {response.status} from {requested_url}")
        return Page(
            _decode(response.body, getattr(response, "encoding", None)),
            str(response.url or requested_url),
        )
