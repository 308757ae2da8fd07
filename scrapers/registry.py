from __future__ import annotations

from core.models import Platform
from scrapers.base import DEFAULT_WAIT_SECONDS, BaseExtractor
from scrapers.hackernews import HackerNewsExtractor
from scrapers.news import NewsExtractor
from scrapers.reddit import RedditExtractor
from scrapers.twitter import TwitterExtractor


def default_extractors(wait_timeout: float = DEFAULT_WAIT_SECONDS) -> dict[Platform, BaseExtractor]:
    extractors: list[BaseExtractor] = [
        RedditExtractor(wait_timeout),
        TwitterExtractor(wait_timeout),
        NewsExtractor(wait_timeout),
        HackerNewsExtractor(wait_timeout),
    ]
    return {e.platform: e for e in extractors}
