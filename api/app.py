from __future__ import annotations

import httpx
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from api.events import EventHub, router as events_router
from api.routers import collect, meltwater, runs
from collectors.aggregator import Aggregator


async def _http_error(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.detail},
        headers=getattr(exc, "headers", None),
    )


async def _validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
    details = [
        f"{'.'.join(str(part) for part in err.get('loc', ()))}: {err.get('msg', '')}"
        for err in exc.errors()
    ]
    return JSONResponse(status_code=400, content={"error": "Invalid request body", "details": details})


def create_app(transport: httpx.AsyncBaseTransport | None = None) -> FastAPI:
    """Build the API. ``transport`` replaces the network for every upstream call."""
    app = FastAPI(title="Media Mention Tracker", version="0.1.0")
    app.state.events = EventHub()
    app.state.aggregator = Aggregator(transport=transport)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_exception_handler(StarletteHTTPException, _http_error)
    app.add_exception_handler(RequestValidationError, _validation_error)

    app.include_router(collect.router)
    app.include_router(meltwater.router)
    app.include_router(runs.router)
    app.include_router(events_router)

    @app.get("/health")
    async def health():
        return {"status": "ok"}

    return app
