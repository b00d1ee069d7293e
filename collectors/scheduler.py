from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Awaitable, Callable

from apscheduler.schedulers.asyncio import AsyncIOScheduler

from collectors.aggregator import Aggregator
from config.defaults import default_config
from config.settings import settings
from core.models import CollectionConfig, Report

log = logging.getLogger(__name__)

# (event name, **payload), e.g. EventHub.publish
Publisher = Callable[..., Awaitable[Any]]


class CollectionScheduler:
    """Runs the server's default collection periodically and keeps the latest report."""

    def __init__(
        self,
        aggregator: Aggregator | None = None,
        config: CollectionConfig | None = None,
        publish: Publisher | None = None,
    ) -> None:
        self._aggregator = aggregator or Aggregator()
        self._config = config or default_config()
        self._publish = publish
        self._scheduler = AsyncIOScheduler()
        self.latest: Report | None = None
        self.latest_at: datetime | None = None

    @property
    def configured(self) -> bool:
        return not self._config.validate(require_credentials=True)

    def start(self) -> None:
        minutes = settings.COLLECT_INTERVAL_MINUTES
        if minutes > 0 and self.configured:
            self._scheduler.add_job(
                self.run_now,
                "interval",
                minutes=minutes,
                id="collect_default",
                replace_existing=True,
                next_run_time=datetime.now(timezone.utc),
            )
            log.info("Scheduled collection every %d minutes", minutes)
        else:
            log.info("Scheduled collection disabled")
        self._scheduler.start()

    def stop(self) -> None:
        self._scheduler.shutdown(wait=False)

    def get_status(self) -> dict:
        jobs = [
            {
                "id": job.id,
                "next_run": job.next_run_time.isoformat() if job.next_run_time else None,
            }
            for job in self._scheduler.get_jobs()
        ]
        return {
            "running": self._scheduler.running,
            "configured": self.configured,
            "client_name": self._config.client_name,
            "last_run": self.latest_at.isoformat() if self.latest_at else None,
            "jobs": jobs,
        }

    async def run_now(self) -> Report:
        log.info("Starting scheduled collection for '%s'", self._config.client_name)
        report = await self._aggregator.run(self._config, progress=self._progress)
        self.latest = report
        self.latest_at = datetime.now(timezone.utc)

        if self._publish:
            await self._publish(
                "collection_complete",
                client=self._config.client_name,
                **report.totals,
                errors=list(report.errors),
            )
        return report

    async def _progress(self, percent: int, message: str) -> None:
        if self._publish:
            await self._publish("progress", percent=percent, message=message)
