from __future__ import annotations

import logging

from fastapi import APIRouter, HTTPException, Request, Response
from fastapi.responses import JSONResponse

from api.events import WEBHOOK_RECEIVED
from api.schemas import CsvRequest
from collectors.aggregator import Aggregator
from collectors.meltwater import SIGNATURE_HEADER, MeltwaterWebhook, collect_csv
from config.settings import settings
from core.errors import CollectionError, SignatureError
from core.models import MONITORING

log = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["meltwater"])


@router.options("/meltwater-csv")
async def csv_preflight() -> Response:
    return Response(status_code=200)


@router.post("/meltwater-csv")
async def meltwater_csv(body: CsvRequest, request: Request):
    if not body.csv_data:
        raise HTTPException(400, "CSV data is required")

    config = body.to_config()
    aggregator: Aggregator = request.app.state.aggregator
    try:
        mentions = collect_csv(body.csv_data, config)
        errors = await aggregator.export(config, MONITORING, mentions)
    except Exception as exc:
        log.exception("Meltwater CSV processing error")
        return JSONResponse(
            status_code=500,
            content={"error": "CSV processing failed", "message": str(exc)},
        )

    return {
        "success": True,
        "data": [m.to_dict() for m in mentions],
        "totalItems": len(mentions),
        "message": "CSV processed successfully",
        "errors": errors,
    }


@router.options("/meltwater-webhook")
async def webhook_preflight() -> Response:
    return Response(status_code=200)


@router.post("/meltwater-webhook")
async def meltwater_webhook(request: Request):
    body = await request.body()
    webhook = MeltwaterWebhook(
        secret=settings.MELTWATER_WEBHOOK_SECRET,
        require_signature=settings.MELTWATER_WEBHOOK_REQUIRE_SIGNATURE,
    )
    try:
        mentions = webhook.receive(body, request.headers.get(SIGNATURE_HEADER))
    except SignatureError as exc:
        log.warning("Rejected Meltwater webhook: %s", exc)
        raise HTTPException(401, str(exc)) from exc
    except CollectionError as exc:
        raise HTTPException(400, str(exc)) from exc
    except Exception as exc:
        log.exception("Meltwater webhook error")
        return JSONResponse(
            status_code=500,
            content={"error": "Webhook processing failed", "message": str(exc)},
        )

    # Hand the documents on to whoever is listening; nothing is stored here.
    await request.app.state.events.publish(
        WEBHOOK_RECEIVED,
        items=len(mentions),
        mentions=[m.to_dict() for m in mentions],
    )
    return {
        "success": True,
        "message": "Webhook processed successfully",
        "itemsProcessed": len(mentions),
    }
