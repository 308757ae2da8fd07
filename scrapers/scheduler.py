from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from datetime import datetime, timezone

from apscheduler.schedulers.asyncio import AsyncIOScheduler

from config.settings import settings
from core.models import CrawlSummary
from data.database import get_session
from data.repositories import CrawlLogRepository
from scrapers.crawler import CrawlOptions, CrawlOrchestrator

log = logging.getLogger(__name__)


class CrawlScheduler:
    """Runs crawls periodically and on demand, and logs every run.

    Runs never overlap: a crawl owns its fetcher and run state until it ends.
    """

    def __init__(
        self,
        orchestrator_factory: Callable[[CrawlOptions], CrawlOrchestrator],
        interval_minutes: int | None = None,
    ) -> None:
        self._make_orchestrator = orchestrator_factory
        self._interval = (
            settings.CRAWL_INTERVAL_MINUTES if interval_minutes is None else interval_minutes
        )
        self._scheduler = AsyncIOScheduler()
        self._lock = asyncio.Lock()

    def start(self) -> None:
        if self._interval > 0:
            self._scheduler.add_job(
                self._run_scheduled,
                "interval",
                minutes=self._interval,
                id="crawl",
                replace_existing=True,
                next_run_time=datetime.now(timezone.utc),
            )
        self._scheduler.start()
        log.info("Crawl scheduler started (interval: %s min)", self._interval or "disabled")

    def stop(self) -> None:
        self._scheduler.shutdown(wait=False)

    @property
    def busy(self) -> bool:
        return self._lock.locked()

    def get_status(self) -> dict:
        jobs = []
        for job in self._scheduler.get_jobs():
            jobs.append(
                {
                    "id": job.id,
                    "next_run": job.next_run_time.isoformat()
                    if job.next_run_time
                    else None,
                }
            )
        return {"running": self._scheduler.running, "busy": self.busy, "jobs": jobs}

    async def _run_scheduled(self) -> None:
        await self.run_now(trigger="schedule")

    async def run_now(
        self, options: CrawlOptions | None = None, trigger: str = "manual"
    ) -> CrawlSummary:
        async with self._lock:
            options = options or CrawlOptions.from_settings()
            started_at = datetime.now(timezone.utc)
            log.info("Starting crawl (%s): %s x %s", trigger, options.platforms, options.keywords)

            summary = await self._make_orchestrator(options).run()

            status = "success" if not summary.failures else "partial"
            if summary.failures and not summary.records_saved:
                status = "failed"
            try:
                async with get_session() as session:
                    await CrawlLogRepository(session).log_run(
                        trigger=trigger,
                        status=status,
                        requests=summary.requests,
                        records_saved=summary.records_saved,
                        error_message="; ".join(summary.failures)[:500],
                        duration_seconds=summary.duration_seconds,
                        started_at=started_at,
                    )
            except Exception as e:
                log.error("Failed to log crawl run: %s", e)
            return summary
