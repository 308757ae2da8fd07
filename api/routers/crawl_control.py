from __future__ import annotations

from fastapi import APIRouter, HTTPException, Query

from data.database import get_session
from data.repositories import CrawlLogRepository

router = APIRouter(prefix="/api/crawl", tags=["crawl"])

# The scheduler reference is injected by main.py at startup
_scheduler = None


def set_scheduler(scheduler) -> None:
    global _scheduler
    _scheduler = scheduler


@router.post("/run")
async def trigger_crawl():
    if _scheduler is None:
        raise HTTPException(503, "Scheduler not initialized")
    if _scheduler.busy:
        raise HTTPException(409, "A crawl is already running")

    summary = await _scheduler.run_now()
    return {
        "records_saved": summary.records_saved,
        "requests": summary.requests,
        "skipped": summary.skipped,
        "failures": summary.failures,
        "budget_reached": summary.budget_reached,
        "duration_seconds": round(summary.duration_seconds, 2),
    }


@router.get("/status")
async def scheduler_status():
    if _scheduler is None:
        return {"running": False, "busy": False, "jobs": []}
    return _scheduler.get_status()


@router.get("/runs")
async def recent_runs(limit: int = Query(20, ge=1, le=100)):
    async with get_session() as session:
        runs = await CrawlLogRepository(session).recent_runs(limit=limit)
        return [
            {
                "id": r.id,
                "trigger": r.trigger,
                "status": r.status,
                "requests": r.requests,
                "records_saved": r.records_saved,
                "error_message": r.error_message,
                "duration_seconds": r.duration_seconds,
                "started_at": r.started_at.isoformat() if r.started_at else None,
                "finished_at": r.finished_at.isoformat() if r.finished_at else None,
            }
            for r in runs
        ]
