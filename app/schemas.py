"""Pydantic schemas for the HTTP API layer."""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from models.records import Sample
from services.aggregator import PeriodReport


class PeriodReportOut(BaseModel):
    """Aggregate metrics for one period, in the dashboard's field names."""

    model_config = ConfigDict(populate_by_name=True)

    index: int = Field(..., ge=1)
    period: str = Field(..., description="Period start as an ISO-8601 UTC string.")
    total_watt_hours: float = Field(..., alias="totalWattHours")
    average_volt: float = Field(..., alias="averageVolt")
    average_current: float = Field(..., alias="averageCurrent")
    average_watts: float = Field(..., alias="averageWatts")
    max_watts: float = Field(..., alias="maxWatts")
    min_watts: float = Field(..., alias="minWatts")
    total_count: int = Field(..., ge=1, alias="totalCount")

    @classmethod
    def from_report(cls, report: PeriodReport) -> "PeriodReportOut":
        return cls(
            index=report.sequence_index,
            period=report.period,
            total_watt_hours=report.total_watt_hours,
            average_volt=report.average_voltage,
            average_current=report.average_current,
            average_watts=report.average_watts,
            max_watts=report.max_watts,
            min_watts=report.min_watts,
            total_count=report.sample_count,
        )


class SampleOut(BaseModel):
    """The most recent normalized reading."""

    model_config = ConfigDict(populate_by_name=True)

    update_time: datetime = Field(..., alias="updateTime")
    switch_status: bool = Field(..., alias="switchStatus")
    country: Optional[str] = None
    town: Optional[str] = None
    volt: float
    current: float
    watts: float
    watt_hours: float = Field(..., alias="wattHours")

    @classmethod
    def from_sample(cls, sample: Sample) -> "SampleOut":
        return cls(
            update_time=sample.timestamp,
            switch_status=sample.switch_status,
            country=sample.country,
            town=sample.town,
            volt=sample.voltage,
            current=sample.current,
            watts=sample.watts,
            watt_hours=sample.watt_hours,
        )


class ErrorResponse(BaseModel):
    """Error body returned when no report can be produced."""

    error: str
