"""Ingestion and reporting orchestration for smart plug telemetry."""

from __future__ import annotations

import asyncio
import logging
from functools import lru_cache
from typing import Any, List, Mapping, Optional

import httpx

from datastore.sample_store import SampleStore, build_default_store
from devices.ecoflow import DeviceAPIError, EcoFlowClient
from models.records import Granularity, Sample
from services.aggregator import Aggregator, PeriodReport
from services.normalizer import (
    SAMPLING_INTERVAL_SECONDS,
    InvalidReadingError,
    normalize_reading,
)
from settings import get_settings

logger = logging.getLogger(__name__)


class TelemetryService:
    """Coordinates sample ingestion, storage, and period reports."""

    def __init__(
        self,
        store: SampleStore,
        aggregator: Aggregator,
        sampling_interval_seconds: float = SAMPLING_INTERVAL_SECONDS,
    ) -> None:
        self.store = store
        self.aggregator = aggregator
        self.sampling_interval_seconds = sampling_interval_seconds

    def ingest(self, properties: Mapping[str, Any]) -> Optional[Sample]:
        """Normalize and store one device payload.

        Malformed payloads are logged and dropped; nothing is raised so the
        polling loop keeps its cadence.
        """
        try:
            sample = normalize_reading(properties, self.sampling_interval_seconds)
        except InvalidReadingError as exc:
            logger.warning(
                "Dropping malformed device reading",
                extra={"reason": str(exc)},
            )
            return None

        self.store.append(sample)
        logger.debug(
            "Stored sample",
            extra={
                "updated_at": sample.timestamp.isoformat(),
                "watts": sample.watts,
                "sample_count": len(self.store),
            },
        )
        return sample

    def aggregate(self, granularity: Granularity) -> List[PeriodReport]:
        """Summarize every stored sample by ``granularity``.

        Raises :class:`~services.aggregator.NoDataError` when nothing has
        been ingested yet.
        """
        samples = self.store.snapshot()
        reports = self.aggregator.aggregate(samples, granularity)
        logger.debug(
            "Aggregated samples",
            extra={
                "granularity": granularity.value,
                "sample_count": len(samples),
                "bucket_count": len(reports),
            },
        )
        return reports

    def latest(self) -> Optional[Sample]:
        return self.store.latest()

    async def poll_once(
        self, client: EcoFlowClient, serial: str, switch_on: bool = True
    ) -> Optional[Sample]:
        """Run one polling cycle against the device API."""
        try:
            properties = await client.get_properties(serial)
        except (DeviceAPIError, httpx.HTTPError) as exc:
            logger.warning(
                "Failed to read smart plug properties",
                extra={"serial": serial, "reason": str(exc)},
            )
            return None

        sample = self.ingest(properties)

        if switch_on:
            try:
                await client.set_switch(serial, True)
            except (DeviceAPIError, httpx.HTTPError) as exc:
                logger.warning(
                    "Failed to switch smart plug on",
                    extra={"serial": serial, "reason": str(exc)},
                )

        return sample

    async def run_polling(
        self,
        client: EcoFlowClient,
        serial: str,
        interval: Optional[float] = None,
        switch_on: bool = True,
    ) -> None:
        """Poll the device at a fixed interval until cancelled."""
        period = interval if interval is not None else self.sampling_interval_seconds
        logger.info("Starting smart plug polling", extra={"serial": serial})
        loop = asyncio.get_running_loop()
        next_tick = loop.time()
        while True:
            next_tick += period
            try:
                await self.poll_once(client, serial, switch_on=switch_on)
            except Exception:
                logger.exception(
                    "Unexpected error during smart plug poll",
                    extra={"serial": serial},
                )
            await asyncio.sleep(max(0.0, next_tick - loop.time()))


@lru_cache
def build_default_service() -> TelemetryService:
    """Factory that wires the service with the process-wide store."""
    settings = get_settings()
    return TelemetryService(
        store=build_default_store(),
        aggregator=Aggregator(),
        sampling_interval_seconds=settings.sampling_interval_seconds,
    )
