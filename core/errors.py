from __future__ import annotations


class CrawlError(Exception):
    """Base class for per-request crawl failures. Never fatal to a run."""


class FetchError(CrawlError):
    """The page for a seed could not be fetched (bad status, network error)."""


class ExtractionError(CrawlError):
    """An extractor could not turn a fetched page into items."""


class ParseFailure(ExtractionError):
    """The page body was expected to be JSON but did not parse."""


class StructuralTimeout(ExtractionError):
    """The expected DOM structure never appeared within the wait bound."""

    def __init__(self, selector: str, timeout: float) -> None:
        super().__init__(f"selector {selector!r} not found within {timeout:g}s")
        self.selector = selector
        self.timeout = timeout
