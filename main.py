"""Media Mention Tracker: server entry point."""

from __future__ import annotations

import logging

import uvicorn

from api.app import create_app
from api.routers.runs import set_scheduler
from collectors.scheduler import CollectionScheduler
from config.settings import settings

logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL),
    format="%(asctime)s  %(levelname)-8s  %(name)s  %(message)s",
)
log = logging.getLogger(__name__)

app = create_app()


@app.on_event("startup")
async def start_scheduled_collection() -> None:
    scheduler = CollectionScheduler(
        aggregator=app.state.aggregator,
        publish=app.state.events.publish,
    )
    app.state.scheduler = scheduler
    set_scheduler(scheduler)
    scheduler.start()
    log.info(
        "Serving on port %d, scheduled collection %s",
        settings.DASHBOARD_PORT,
        "enabled" if scheduler.configured and settings.COLLECT_INTERVAL_MINUTES > 0 else "off",
    )


@app.on_event("shutdown")
async def stop_scheduled_collection() -> None:
    scheduler: CollectionScheduler | None = getattr(app.state, "scheduler", None)
    if scheduler is not None:
        scheduler.stop()
        set_scheduler(None)


if __name__ == "__main__":
    uvicorn.run(
        "main:app",
        host="0.0.0.0",
        port=settings.DASHBOARD_PORT,
        reload=False,
    )
