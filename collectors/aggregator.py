"""Fan a collection run out to every configured source and merge the results.

A source without credentials is skipped silently. A configured source that
fails contributes one ``"<Source>: <message>"`` entry to the report's errors
and never stops the other sources. Sheet writes only start once every source
has finished, and a failed write does not discard collected mentions.
"""

from __future__ import annotations

import asyncio
import inspect
import logging
import time
from typing import Awaitable, Callable, Iterable, Sequence, Union

import httpx

from collectors.base import BaseCollector
from collectors.meltwater import MeltwaterCollector
from collectors.news import NewsCollector
from collectors.twitter import TwitterCollector
from config.settings import settings
from core.errors import CollectionError, SinkError
from core.models import CollectionConfig, Mention, Report
from core.tables import SHEET_NAMES, to_table
from sinks.sheets import GoogleSheetsSink

log = logging.getLogger(__name__)

ProgressCallback = Callable[[int, str], Union[Awaitable[None], None]]

SINK_NAME = "Sheets"


def default_collectors() -> list[BaseCollector]:
    return [TwitterCollector(), NewsCollector(), MeltwaterCollector()]


async def _notify(progress: ProgressCallback | None, percent: int, message: str) -> None:
    # Progress is cosmetic: an observer that breaks must not break the run.
    if progress is None:
        return
    try:
        result = progress(percent, message)
        if inspect.isawaitable(result):
            await result
    except Exception:
        log.warning("Progress observer failed at %d%%", percent, exc_info=True)


class Aggregator:
    """Runs collectors concurrently and reduces them to one Report."""

    def __init__(
        self,
        collectors: Sequence[BaseCollector] | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
        timeout: float | None = None,
    ) -> None:
        self._collectors = list(collectors) if collectors is not None else default_collectors()
        self._transport = transport
        self._timeout = timeout if timeout is not None else settings.HTTP_TIMEOUT_SECONDS

    @property
    def source_names(self) -> list[str]:
        return [c.source_name for c in self._collectors]

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            transport=self._transport,
            timeout=self._timeout,
            headers={"User-Agent": settings.USER_AGENT},
            follow_redirects=True,
        )

    async def run(
        self,
        config: CollectionConfig,
        sources: Iterable[str] | None = None,
        progress: ProgressCallback | None = None,
    ) -> Report:
        config.ensure_valid()
        start = time.monotonic()
        wanted = set(sources) if sources is not None else set(self.source_names)
        active = [c for c in self._collectors if c.source_name in wanted and c.enabled(config)]

        mentions: dict[str, list[Mention]] = {c.source_name: [] for c in self._collectors}
        failures: dict[str, str] = {}
        log.info(
            "Collection run for '%s': %s",
            config.client_name,
            ", ".join(c.source_name for c in active) or "no sources enabled",
        )
        await _notify(progress, 10, f"Collecting from {len(active)} source(s)...")

        async with self._client() as client:
            finished = 0

            async def _collect(collector: BaseCollector) -> None:
                nonlocal finished
                try:
                    mentions[collector.source_name] = await collector.collect(config, client)
                except CollectionError as exc:
                    log.warning("%s collection failed: %s", collector.display_name, exc)
                    failures[collector.source_name] = f"{collector.display_name}: {exc}"
                except Exception as exc:
                    log.exception("%s collection crashed", collector.display_name)
                    failures[collector.source_name] = f"{collector.display_name}: {exc}"
                finally:
                    finished += 1
                    await _notify(
                        progress,
                        10 + 70 * finished // len(active),
                        f"Collected {collector.display_name} data",
                    )

            await asyncio.gather(*(_collect(c) for c in active))

            # Errors are listed in collector order, not completion order.
            errors = [failures[c.source_name] for c in active if c.source_name in failures]

            if config.sheets_enabled and any(mentions.values()):
                await _notify(progress, 80, "Updating Google Sheets...")
                batches = [
                    (c.table_kind, mentions[c.source_name])
                    for c in self._collectors
                    if mentions[c.source_name]
                ]
                errors.extend(await self._export(client, config, batches))

        await _notify(progress, 100, "Collection complete!")
        report = Report.build(mentions, errors, time.monotonic() - start)
        log.info(
            "Finished collection | %s | %d errors | %.1fs",
            ", ".join(f"{k}={len(v)}" for k, v in report.mentions.items()),
            len(report.errors),
            report.duration_seconds,
        )
        return report

    async def export(
        self, config: CollectionConfig, kind: str, items: Sequence[Mention]
    ) -> list[str]:
        """Write one table to the configured spreadsheet; returns error strings."""
        if not config.sheets_enabled or not items:
            return []
        async with self._client() as client:
            return await self._export(client, config, [(kind, items)])

    async def _export(
        self,
        client: httpx.AsyncClient,
        config: CollectionConfig,
        batches: Sequence[tuple[str, Sequence[Mention]]],
    ) -> list[str]:
        sink = GoogleSheetsSink(client, config.google_sheets_id, config.google_api_key)

        async def _write(kind: str, items: Sequence[Mention]) -> str | None:
            try:
                await sink.write(SHEET_NAMES[kind], to_table(items, kind))
            except SinkError as exc:
                log.warning("Sheet write for %s failed: %s", SHEET_NAMES[kind], exc)
                return f"{SINK_NAME}: {exc}"
            except Exception as exc:
                log.exception("Sheet write for %s crashed", SHEET_NAMES[kind])
                return f"{SINK_NAME}: {exc}"
            return None

        results = await asyncio.gather(*(_write(kind, items) for kind, items in batches))
        return [msg for msg in results if msg]
