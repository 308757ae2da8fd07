from __future__ import annotations

from fastapi import APIRouter, Query

from data.database import get_session
from data.repositories import RecordRepository

router = APIRouter(prefix="/api/records", tags=["records"])


def _record_to_dict(r) -> dict:
    return {
        "id": r.item_id,
        "source": r.source,
        "url": r.url,
        "content_type": r.content_type,
        "text": {"title": r.title, "content": r.content},
        "media": {"images": r.images or []},
        "metadata": r.item_metadata or {},
        "keyword": r.keyword,
        "scraped_at": r.scraped_at.isoformat() if r.scraped_at else None,
    }


@router.get("")
async def list_records(
    source: str | None = None,
    keyword: str | None = None,
    search: str | None = None,
    limit: int = Query(50, ge=1, le=200),
    offset: int = Query(0, ge=0),
):
    async with get_session() as session:
        repo = RecordRepository(session)
        records = await repo.list_records(
            source=source,
            keyword=keyword,
            search=search,
            limit=limit,
            offset=offset,
        )
        return [_record_to_dict(r) for r in records]


@router.get("/stats")
async def record_stats():
    async with get_session() as session:
        return await RecordRepository(session).get_stats()
