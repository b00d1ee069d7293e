from __future__ import annotations

from fastapi import APIRouter, HTTPException

router = APIRouter(prefix="/api/runs", tags=["runs"])

# The scheduler reference is injected by main.py at startup
_scheduler = None


def set_scheduler(scheduler) -> None:
    global _scheduler
    _scheduler = scheduler


@router.post("/trigger")
async def trigger_run():
    if _scheduler is None:
        raise HTTPException(503, "Scheduler not initialized")
    if not _scheduler.configured:
        raise HTTPException(400, "No default collection is configured on the server")

    report = await _scheduler.run_now()
    return {"success": True, "data": report.to_dict(), **report.totals}


@router.get("/latest")
async def latest_run():
    if _scheduler is None or _scheduler.latest is None:
        raise HTTPException(404, "No collection has run yet")
    report = _scheduler.latest
    return {
        "finished_at": _scheduler.latest_at.isoformat(),
        "duration_seconds": round(report.duration_seconds, 2),
        "data": report.to_dict(),
        **report.totals,
    }


@router.get("/status")
async def scheduler_status():
    if _scheduler is None:
        return {"running": False, "configured": False, "jobs": []}
    return _scheduler.get_status()
