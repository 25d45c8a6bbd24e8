"""Domain models shared across services."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Optional


class Granularity(str, Enum):
    """Calendar periods a report can be bucketed by."""

    ten_seconds = "10seconds"
    minute = "minute"
    hour = "hour"
    day = "day"
    week = "week"
    month = "month"
    year = "year"


@dataclass(frozen=True, slots=True)
class Sample:
    """A single normalized smart plug reading."""

    timestamp: datetime
    switch_status: bool
    country: Optional[str]
    town: Optional[str]
    voltage: float
    current: float
    watts: float
    watt_hours: float
