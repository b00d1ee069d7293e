"""Pipeline events (progress, finished runs, webhook pushes) streamed over SSE."""

from __future__ import annotations

import asyncio
import json
import logging
from dataclasses import dataclass, field
from typing import Any

from fastapi import APIRouter, Request
from sse_starlette.sse import EventSourceResponse

log = logging.getLogger(__name__)

router = APIRouter(tags=["events"])

PROGRESS = "progress"
COLLECTION_COMPLETE = "collection_complete"
WEBHOOK_RECEIVED = "webhook_received"

PING_SECONDS = 30.0


@dataclass(frozen=True)
class PipelineEvent:
    name: str
    payload: dict[str, Any] = field(default_factory=dict)

    def as_dict(self) -> dict[str, Any]:
        return {"event": self.name, **self.payload}

    def to_sse(self) -> dict[str, str]:
        return {"event": self.name, "data": json.dumps(self.as_dict())}


class EventHub:
    """Fans each published event out to every connected stream.

    A listener whose queue is full misses events rather than slowing the run.
    """

    def __init__(self, queue_size: int = 50) -> None:
        self._queue_size = queue_size
        self._listeners: list[asyncio.Queue[PipelineEvent]] = []

    @property
    def listener_count(self) -> int:
        return len(self._listeners)

    async def publish(self, name: str, **payload: Any) -> None:
        event = PipelineEvent(name, payload)
        for queue in list(self._listeners):
            try:
                queue.put_nowait(event)
            except asyncio.QueueFull:
                log.debug("Dropping %s event for a slow listener", name)

    def subscribe(self) -> asyncio.Queue[PipelineEvent]:
        queue: asyncio.Queue[PipelineEvent] = asyncio.Queue(maxsize=self._queue_size)
        self._listeners.append(queue)
        return queue

    def unsubscribe(self, queue: asyncio.Queue[PipelineEvent]) -> None:
        if queue in self._listeners:
            self._listeners.remove(queue)


@router.get("/api/events")
async def stream_events(request: Request):
    hub: EventHub = request.app.state.events
    queue = hub.subscribe()

    async def event_stream():
        try:
            while not await request.is_disconnected():
                try:
                    event = await asyncio.wait_for(queue.get(), timeout=PING_SECONDS)
                except asyncio.TimeoutError:
                    yield {"event": "ping", "data": ""}
                    continue
                yield event.to_sse()
        finally:
            hub.unsubscribe(queue)

    return EventSourceResponse(event_stream())
