from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import func, select
from sqlalchemy.dialects.sqlite import insert as sqlite_upsert
from sqlalchemy.ext.asyncio import AsyncSession

from core.models import Record
from data.schema import DBCrawlRun, DBRecord
from scrapers.pipeline import content_fingerprint


def _parse_iso(value: str) -> datetime:
    return datetime.fromisoformat(value.replace("Z", "+00:00"))


# ── RecordRepository ─────────────────────────────────────────────────


class RecordRepository:
    def __init__(self, session: AsyncSession) -> None:
        self._s = session

    async def upsert(self, record: Record) -> None:
        """Insert a record; a row with the same content fingerprint is refreshed."""
        item = record.item
        scraped_at = _parse_iso(record.scraped_at)
        stmt = (
            sqlite_upsert(DBRecord)
            .values(
                item_id=item.id,
                source=item.source.value,
                url=item.url,
                keyword=record.keyword,
                content_type=item.content_type.value,
                title=item.text.title,
                content=item.text.content,
                images=list(item.media.images),
                item_metadata=item.metadata.to_dict(),
                fingerprint=content_fingerprint(item.text.content),
                scraped_at=scraped_at,
            )
            .on_conflict_do_update(
                index_elements=["fingerprint"],
                set_={
                    "keyword": record.keyword,
                    "item_metadata": item.metadata.to_dict(),
                    "scraped_at": scraped_at,
                },
            )
        )
        await self._s.execute(stmt)

    async def list_records(
        self,
        *,
        source: str | None = None,
        keyword: str | None = None,
        search: str | None = None,
        limit: int = 50,
        offset: int = 0,
    ) -> list[DBRecord]:
        q = select(DBRecord)
        if source:
            q = q.where(DBRecord.source == source)
        if keyword:
            q = q.where(DBRecord.keyword == keyword)
        if search:
            pattern = f"%{search}%"
            q = q.where(DBRecord.title.ilike(pattern) | DBRecord.content.ilike(pattern))
        q = q.order_by(DBRecord.scraped_at.desc()).limit(limit).offset(offset)
        result = await self._s.execute(q)
        return list(result.scalars().all())

    async def get_stats(self) -> dict:
        total = await self._s.scalar(select(func.count(DBRecord.id))) or 0
        rows = (
            await self._s.execute(
                select(DBRecord.source, func.count(DBRecord.id)).group_by(DBRecord.source)
            )
        ).all()
        return {
            "total_records": total,
            "per_source": {row[0]: row[1] for row in rows},
        }


# ── CrawlLogRepository ───────────────────────────────────────────────


class CrawlLogRepository:
    def __init__(self, session: AsyncSession) -> None:
        self._s = session

    async def log_run(
        self,
        *,
        trigger: str,
        status: str,
        requests: int,
        records_saved: int,
        error_message: str,
        duration_seconds: float,
        started_at: datetime,
    ) -> None:
        run = DBCrawlRun(
            trigger=trigger,
            status=status,
            requests=requests,
            records_saved=records_saved,
            error_message=error_message,
            duration_seconds=round(duration_seconds, 2),
            started_at=started_at,
            finished_at=datetime.now(timezone.utc),
        )
        self._s.add(run)

    async def recent_runs(self, limit: int = 20) -> list[DBCrawlRun]:
        q = (
            select(DBCrawlRun)
            .order_by(DBCrawlRun.started_at.desc())
            .limit(limit)
        )
        result = await self._s.execute(q)
        return list(result.scalars().all())
