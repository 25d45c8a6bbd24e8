"""FastAPI application factory and polling lifespan."""

from __future__ import annotations

import asyncio
import contextlib
import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from app.api import router
from devices.ecoflow import EcoFlowClient
from logging_config import configure_logging
from services.aggregator import NoDataError
from services.telemetry import build_default_service
from settings import get_settings

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncIterator[None]:
    settings = get_settings()
    service = build_default_service()
    client: Optional[EcoFlowClient] = None
    poller: Optional[asyncio.Task[None]] = None

    if settings.polling_enabled:
        client = EcoFlowClient(
            access_key=settings.access_key or "",
            secret_key=settings.secret_key or "",
            host=settings.api_host,
        )
        poller = asyncio.create_task(
            service.run_polling(
                client,
                settings.device_serial or "",
                interval=settings.sampling_interval_seconds,
                switch_on=settings.auto_switch_on,
            )
        )
    else:
        logger.warning("Device credentials not configured; smart plug polling disabled")

    try:
        yield
    finally:
        if poller is not None:
            poller.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await poller
        if client is not None:
            await client.aclose()
        build_default_service.cache_clear()


async def no_data_handler(_request: Request, exc: NoDataError) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"error": str(exc)},
    )


def create_app() -> FastAPI:
    configure_logging()
    app = FastAPI(
        title="Smart Plug Telemetry",
        description="Polls a smart plug and serves time-bucketed energy aggregates.",
        version="0.1.0",
        lifespan=lifespan,
    )
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_exception_handler(NoDataError, no_data_handler)
    app.include_router(router)
    return app

app = create_app()
