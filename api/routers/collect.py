from __future__ import annotations

import logging

from fastapi import APIRouter, HTTPException, Request, Response
from fastapi.responses import JSONResponse

from api.events import COLLECTION_COMPLETE, PROGRESS, EventHub
from api.schemas import CollectRequest
from collectors.aggregator import Aggregator
from core.errors import ConfigurationError

log = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["collect"])

MISSING_CONFIG = "Missing required configuration: clientName and searchTerms are required"


@router.options("/collect-data")
async def collect_preflight() -> Response:
    return Response(status_code=200)


@router.post("/collect-data")
async def collect_data(body: CollectRequest, request: Request):
    config = body.to_config()
    if config.validate():
        raise HTTPException(400, MISSING_CONFIG)

    aggregator: Aggregator = request.app.state.aggregator
    events: EventHub = request.app.state.events

    async def progress(percent: int, message: str) -> None:
        await events.publish(PROGRESS, percent=percent, message=message)

    try:
        report = await aggregator.run(config, sources=body.sources, progress=progress)
    except ConfigurationError as exc:
        raise HTTPException(400, str(exc)) from exc
    except Exception as exc:
        log.exception("Data collection error")
        return JSONResponse(
            status_code=500,
            content={"error": "Internal server error", "message": str(exc)},
        )

    await events.publish(COLLECTION_COMPLETE, **report.totals, errors=list(report.errors))
    return {"success": True, "data": report.to_dict(), **report.totals}
