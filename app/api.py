"""HTTP route definitions for the service."""

from __future__ import annotations

from typing import Any, Dict, List

from fastapi import APIRouter, Depends, HTTPException, status

from app.schemas import ErrorResponse, PeriodReportOut, SampleOut
from models.records import Granularity
from services.telemetry import TelemetryService, build_default_service

router = APIRouter()

# Per-granularity paths the dashboard frontend requests.
LEGACY_PATHS = {
    "10seconds": Granularity.ten_seconds,
    "minute": Granularity.minute,
    "hourly": Granularity.hour,
    "daily": Granularity.day,
    "weekly": Granularity.week,
    "monthly": Granularity.month,
    "annual": Granularity.year,
}

_NO_DATA_RESPONSES = {
    status.HTTP_500_INTERNAL_SERVER_ERROR: {
        "model": ErrorResponse,
        "description": "No sample has been collected yet.",
    }
}


def get_service() -> TelemetryService:
    return build_default_service()


def _report(service: TelemetryService, granularity: Granularity) -> List[PeriodReportOut]:
    return [PeriodReportOut.from_report(report) for report in service.aggregate(granularity)]


def _register_legacy_route(path: str, granularity: Granularity) -> None:
    async def legacy_report(
        service: TelemetryService = Depends(get_service),
    ) -> List[PeriodReportOut]:
        return _report(service, granularity)

    router.add_api_route(
        f"/smart-plug/{path}",
        legacy_report,
        methods=["GET"],
        response_model=List[PeriodReportOut],
        responses=_NO_DATA_RESPONSES,
        summary=f"Smart plug aggregates per {granularity.value}.",
        name=f"smart_plug_{path}",
    )


@router.get(
    "/smart-plug/latest",
    response_model=SampleOut,
    summary="Most recent normalized smart plug reading.",
)
async def latest_sample(
    service: TelemetryService = Depends(get_service),
) -> SampleOut:
    sample = service.latest()
    if sample is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="No device data available",
        )
    return SampleOut.from_sample(sample)


for _path, _granularity in LEGACY_PATHS.items():
    _register_legacy_route(_path, _granularity)


@router.get(
    "/aggregates/{granularity}",
    response_model=List[PeriodReportOut],
    responses=_NO_DATA_RESPONSES,
    summary="Aggregate stored samples by the requested granularity.",
)
async def get_aggregates(
    granularity: Granularity,
    service: TelemetryService = Depends(get_service),
) -> List[PeriodReportOut]:
    return _report(service, granularity)


@router.get(
    "/health",
    summary="Health check endpoint.",
    status_code=status.HTTP_200_OK,
)
async def healthcheck(
    service: TelemetryService = Depends(get_service),
) -> Dict[str, Any]:
    return {"status": "ok", "sample_count": len(service.store)}


@router.get(
    "/",
    summary="Root endpoint mirrors health information.",
    status_code=status.HTTP_200_OK,
)
async def root() -> dict[str, str]:
    return {"status": "ok", "detail": "See /health for service status."}
