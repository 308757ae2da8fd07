"""Crawl loop: budget, dedup across seeds, failure handling."""

import logging
import re
from unittest.mock import AsyncMock, MagicMock

import pytest
from conftest import ListSink, long_text, make_item

from core.errors import FetchError
from core.models import ErrorKind, ExtractionResult, Platform, SeedRequest
from scrapers.base import BaseExtractor
from scrapers.crawler import CrawlOptions, CrawlOrchestrator
from scrapers.page import Page
from scrapers.pipeline import content_fingerprint


class StubExtractor(BaseExtractor):
    """Returns canned items per keyword, ignoring the page."""

    def __init__(self, platform: Platform, items_by_keyword=None, error=None) -> None:
        super().__init__()
        self.platform = platform
        self.items_by_keyword = items_by_keyword or {}
        self.error = error
        self.calls = 0

    async def extract(self, page, include_images):
        self.calls += 1
        if self.error is not None:
            raise self.error
        return ExtractionResult.ok(list(self.items_by_keyword.get(page.url, [])))

    async def _parse(self, page, include_images):
        return []


def seed(platform: Platform, keyword: str) -> SeedRequest:
    return SeedRequest(url=f"https://{platform.value}/{keyword}", platform=platform, keyword=keyword)


def make_fetcher():
    fetcher = MagicMock()
    fetcher.fetch = AsyncMock(side_effect=lambda s, **kw: Page("{}", s.url))
    return fetcher


def batch(prefix: str, n: int, source: Platform = Platform.HACKERNEWS):
    return [make_item(long_text(f"{prefix}-{i}"), source, i) for i in range(n)]


@pytest.mark.asyncio
async def test_budget_is_hard_stop():
    hn = StubExtractor(
        Platform.HACKERNEWS,
        {
            "https://hackernews/a": batch("a", 3),
            "https://hackernews/b": batch("b", 3),
            "https://hackernews/c": batch("c", 3),
        },
    )
    sink = ListSink()
    fetcher = make_fetcher()
    crawler = CrawlOrchestrator(
        fetcher, sink, CrawlOptions(max_records=4), {Platform.HACKERNEWS: hn}
    )

    summary = await crawler.run([seed(Platform.HACKERNEWS, k) for k in "abc"])

    assert len(sink.records) == 4
    assert summary.records_saved == 4
    assert summary.budget_reached is True
    # third seed never fetched
    assert fetcher.fetch.await_count == 2
    assert [r.keyword for r in sink.records] == ["a", "a", "a", "b"]


@pytest.mark.asyncio
async def test_duplicates_across_platforms_persist_once():
    text = long_text("shared")
    extractors = {
        Platform.REDDIT: StubExtractor(Platform.REDDIT, {"https://reddit/ai": [make_item(text, Platform.REDDIT)]}),
        Platform.HACKERNEWS: StubExtractor(
            Platform.HACKERNEWS, {"https://hackernews/ai": [make_item(text, Platform.HACKERNEWS)]}
        ),
    }
    sink = ListSink()
    crawler = CrawlOrchestrator(make_fetcher(), sink, CrawlOptions(), extractors)

    await crawler.run([seed(Platform.REDDIT, "ai"), seed(Platform.HACKERNEWS, "ai")])

    assert len(sink.records) == 1
    assert sink.records[0].item.source is Platform.REDDIT
    fingerprints = {content_fingerprint(r.item.text.content) for r in sink.records}
    assert len(fingerprints) == len(sink.records)


@pytest.mark.asyncio
async def test_min_length_enforced():
    items = [make_item("too short"), make_item(long_text("ok"), idx=1)]
    hn = StubExtractor(Platform.HACKERNEWS, {"https://hackernews/ai": items})
    sink = ListSink()
    crawler = CrawlOrchestrator(make_fetcher(), sink, CrawlOptions(min_text_length=50), {Platform.HACKERNEWS: hn})

    await crawler.run([seed(Platform.HACKERNEWS, "ai")])

    assert len(sink.records) == 1
    assert all(len(r.item.text.content) >= 50 for r in sink.records)


@pytest.mark.asyncio
async def test_unsupported_platform_warns_and_continues(caplog):
    hn = StubExtractor(Platform.HACKERNEWS, {"https://hackernews/ai": batch("x", 1)})
    sink = ListSink()
    fetcher = make_fetcher()
    crawler = CrawlOrchestrator(fetcher, sink, CrawlOptions(), {Platform.HACKERNEWS: hn})

    with caplog.at_level(logging.WARNING):
        summary = await crawler.run([seed(Platform.NEWS, "ai"), seed(Platform.HACKERNEWS, "ai")])

    assert "Unsupported platform: news" in caplog.text
    assert summary.skipped == 1
    assert len(sink.records) == 1
    assert fetcher.fetch.await_count == 1


@pytest.mark.asyncio
async def test_fetch_and_extractor_errors_are_not_fatal():
    reddit = StubExtractor(Platform.REDDIT, error=RuntimeError("boom"))
    hn = StubExtractor(Platform.HACKERNEWS, {"https://hackernews/ai": batch("x", 2)})
    fetcher = make_fetcher()
    original = fetcher.fetch.side_effect

    def flaky(s, **kw):
        if s.keyword == "down":
            raise FetchError("HTTP 503")
        return original(s, **kw)

    fetcher.fetch.side_effect = flaky
    sink = ListSink()
    crawler = CrawlOrchestrator(
        fetcher, sink, CrawlOptions(), {Platform.REDDIT: reddit, Platform.HACKERNEWS: hn}
    )

    summary = await crawler.run(
        [seed(Platform.HACKERNEWS, "down"), seed(Platform.REDDIT, "ai"), seed(Platform.HACKERNEWS, "ai")]
    )

    assert len(sink.records) == 2
    assert len(summary.failures) == 2
    assert summary.requests == 3


@pytest.mark.asyncio
async def test_err_result_treated_as_empty():
    class Failing(StubExtractor):
        async def extract(self, page, include_images):
            return ExtractionResult.err(ErrorKind.STRUCTURAL_TIMEOUT, "no tweets")

    sink = ListSink()
    crawler = CrawlOrchestrator(
        make_fetcher(), sink, CrawlOptions(), {Platform.TWITTER: Failing(Platform.TWITTER)}
    )
    summary = await crawler.run([seed(Platform.TWITTER, "ai")])

    assert sink.records == []
    assert summary.failures == ["twitter/ai: structural_timeout"]


@pytest.mark.asyncio
async def test_records_carry_keyword_and_timestamp():
    hn = StubExtractor(Platform.HACKERNEWS, {"https://hackernews/llm": batch("x", 1)})
    sink = ListSink()
    crawler = CrawlOrchestrator(make_fetcher(), sink, CrawlOptions(), {Platform.HACKERNEWS: hn})

    await crawler.run([seed(Platform.HACKERNEWS, "llm")])

    (record,) = sink.records
    out = record.to_dict()
    assert out["keyword"] == "llm"
    assert re.fullmatch(r"\d{4}-\d\d-\d\dT\d\d:\d\d:\d\d\.\d{3}Z", out["scraped_at"])
    assert out["source"] == "hackernews"
    assert out["text"]["content"] == record.item.text.content


@pytest.mark.asyncio
async def test_wait_selector_passed_to_fetcher():
    tw = StubExtractor(Platform.TWITTER)
    tw.ready_selector = 'article[data-testid="tweet"]'
    fetcher = make_fetcher()
    crawler = CrawlOrchestrator(fetcher, ListSink(), CrawlOptions(), {Platform.TWITTER: tw})

    await crawler.run([seed(Platform.TWITTER, "ai")])

    kwargs = fetcher.fetch.await_args.kwargs
    assert kwargs["wait_selector"] == 'article[data-testid="tweet"]'
    assert kwargs["wait_timeout"] == 10.0


@pytest.mark.asyncio
async def test_seeds_built_from_options_when_not_given():
    hn = StubExtractor(Platform.HACKERNEWS)
    fetcher = make_fetcher()
    options = CrawlOptions(platforms=["hackernews", "bogus"], keywords=["a", "b"])
    crawler = CrawlOrchestrator(fetcher, ListSink(), options, {Platform.HACKERNEWS: hn})

    summary = await crawler.run()

    assert summary.requests == 2
    urls = [c.args[0].url for c in fetcher.fetch.await_args_list]
    assert urls[0].startswith("https://hn.algolia.com/api/v1/search?query=a&")


@pytest.mark.asyncio
async def test_items_lost_to_sink_failure_stay_eligible():
    class FailOnce(ListSink):
        def __init__(self):
            super().__init__()
            self.failed = False

        async def push(self, record):
            if not self.failed and len(self.records) == 1:
                self.failed = True
                raise OSError("disk full")
            await super().push(record)

    first = batch("x", 3)
    retry = [make_item(first[1].text.content, idx=9), make_item(first[2].text.content, idx=10)]
    hn = StubExtractor(Platform.HACKERNEWS, {"https://hackernews/a": first, "https://hackernews/b": retry})
    sink = FailOnce()
    crawler = CrawlOrchestrator(make_fetcher(), sink, CrawlOptions(), {Platform.HACKERNEWS: hn})

    summary = await crawler.run([seed(Platform.HACKERNEWS, "a"), seed(Platform.HACKERNEWS, "b")])

    assert [r.item.id for r in sink.records] == ["hackernews_0", "hackernews_9", "hackernews_10"]
    assert summary.records_saved == 3
    assert summary.failures == ["hackernews/a: disk full"]
    assert crawler.context.seen_hashes == {
        content_fingerprint(r.item.text.content) for r in sink.records
    }
