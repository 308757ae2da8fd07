"""Sequential crawl loop: seeds -> fetch -> extract -> filter/dedup -> sink."""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from typing import Any

from config.settings import Settings, settings
from core.models import CrawlSummary, Platform, RawItem, Record, RunContext, SeedRequest
from data.sinks import RecordSink
from scrapers.base import BaseExtractor
from scrapers.fetcher import PageFetcher
from scrapers.pipeline import content_fingerprint, filter_items
from scrapers.registry import default_extractors
from scrapers.seeds import DEFAULT_KEYWORDS, DEFAULT_PLATFORMS, build_seeds

log = logging.getLogger(__name__)

# Each seed is one page; the ceiling only guards against runaway request growth.
REQUESTS_PER_SEED_CEILING = 5


@dataclass
class CrawlOptions:
    platforms: list[str] = field(default_factory=lambda: list(DEFAULT_PLATFORMS))
    keywords: list[str] = field(default_factory=lambda: list(DEFAULT_KEYWORDS))
    max_records: int = 1000
    include_images: bool = True
    min_text_length: int = 50

    @classmethod
    def from_settings(cls, s: Settings = settings) -> CrawlOptions:
        return cls(
            platforms=s.platform_list or list(DEFAULT_PLATFORMS),
            keywords=s.keyword_list or list(DEFAULT_KEYWORDS),
            max_records=s.MAX_RECORDS,
            include_images=s.INCLUDE_IMAGES,
            min_text_length=s.MIN_TEXT_LENGTH,
        )

    @classmethod
    def from_input(cls, data: dict[str, Any], base: CrawlOptions | None = None) -> CrawlOptions:
        """Build options from an actor-style input object (camelCase keys)."""
        base = base or cls()
        return cls(
            platforms=list(data.get("platforms") or base.platforms),
            keywords=list(data.get("keywords") or base.keywords),
            max_records=int(data.get("maxRecords", base.max_records)),
            include_images=bool(data.get("includeImages", base.include_images)),
            min_text_length=int(data.get("minTextLength", base.min_text_length)),
        )


class CrawlOrchestrator:
    """Drives one crawl run over a seed list, one request at a time.

    Owns the run's RunContext: the record budget and the content fingerprint
    set are only mutated here, so no locking is needed.
    """

    def __init__(
        self,
        fetcher: PageFetcher,
        sink: RecordSink,
        options: CrawlOptions | None = None,
        extractors: dict[Platform, BaseExtractor] | None = None,
    ) -> None:
        self._fetcher = fetcher
        self._sink = sink
        self.options = options or CrawlOptions()
        self._extractors = (
            extractors if extractors is not None
            else default_extractors(settings.DOM_WAIT_SECONDS)
        )
        self.context = RunContext()

    async def run(self, seeds: list[SeedRequest] | None = None) -> CrawlSummary:
        opts = self.options
        if seeds is None:
            seeds = build_seeds(opts.platforms, opts.keywords)

        self.context = ctx = RunContext()
        max_requests = len(seeds) * REQUESTS_PER_SEED_CEILING
        failures: list[str] = []
        skipped = 0
        budget_reached = False
        start = time.monotonic()

        for seed in seeds:
            if ctx.record_count >= opts.max_records:
                log.info("Max records reached, stopping...")
                budget_reached = True
                break
            if ctx.requests_issued >= max_requests:
                log.warning("Request ceiling of %d reached, stopping", max_requests)
                break

            extractor = self._extractors.get(seed.platform)
            if extractor is None:
                log.warning("Unsupported platform: %s", seed.platform.value)
                skipped += 1
                continue

            log.info('Scraping %s for "%s"', seed.platform.value, seed.keyword)
            ctx.requests_issued += 1
            try:
                items = await self._extract(seed, extractor, failures)
                log.info("Scraped %d items from %s", len(items), seed.platform.value)

                kept = filter_items(items, ctx, opts.min_text_length)
                saved = 0
                for pos, item in enumerate(kept):
                    if ctx.record_count >= opts.max_records:
                        break
                    try:
                        await self._sink.push(Record(item=item, keyword=seed.keyword))
                    except Exception:
                        # unpersisted items stay eligible for later seeds
                        self._forget(kept[pos:], ctx)
                        raise
                    ctx.record_count += 1
                    saved += 1

                log.info(
                    "Collected %d records. Total: %d/%d",
                    saved, ctx.record_count, opts.max_records,
                )
            except Exception as e:
                msg = f"{seed.platform.value}/{seed.keyword}: {e}"
                log.error("Error scraping %s: %s", seed.platform.value, e)
                failures.append(msg)

        if ctx.record_count >= opts.max_records:
            budget_reached = True

        summary = CrawlSummary(
            records_saved=ctx.record_count,
            requests=ctx.requests_issued,
            failures=failures,
            skipped=skipped,
            duration_seconds=time.monotonic() - start,
            budget_reached=budget_reached,
        )
        log.info(
            "Crawl finished | %d records | %d requests | %d failures | %.1fs",
            summary.records_saved, summary.requests, len(failures), summary.duration_seconds,
        )
        return summary

    async def _extract(
        self, seed: SeedRequest, extractor: BaseExtractor, failures: list[str]
    ) -> list[RawItem]:
        page = await self._fetcher.fetch(
            seed,
            wait_selector=extractor.ready_selector,
            wait_timeout=extractor.wait_timeout,
        )
        result = await extractor.extract(page, self.options.include_images)
        if not result.is_ok:
            log.warning(
                "Extraction failed for %s (%s): %s",
                seed.platform.value, result.error.value, result.message,
            )
            failures.append(f"{seed.platform.value}/{seed.keyword}: {result.error.value}")
            return []
        return result.items

    @staticmethod
    def _forget(items: list[RawItem], ctx: RunContext) -> None:
        for item in items:
            ctx.seen_hashes.discard(content_fingerprint(item.text.content))
