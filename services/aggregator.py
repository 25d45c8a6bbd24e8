"""Aggregation logic for smart plug samples."""

from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import datetime
from typing import Dict, Iterable, List

from models.records import Granularity, Sample
from services.bucketing import bucket_key, period_start


class NoDataError(LookupError):
    """Raised when a report is requested before any sample has been stored."""

    def __init__(self, message: str = "No device data available") -> None:
        super().__init__(message)


@dataclass
class BucketAccumulator:
    """Running totals for one period while samples are being folded in."""

    period_start: datetime
    total_watt_hours: float = 0.0
    total_voltage: float = 0.0
    total_current: float = 0.0
    total_watts: float = 0.0
    max_watts: float = -math.inf
    min_watts: float = math.inf
    count: int = 0

    def add(self, sample: Sample) -> None:
        self.total_watt_hours += sample.watt_hours
        self.total_voltage += sample.voltage
        self.total_current += sample.current
        self.total_watts += sample.watts
        self.max_watts = max(self.max_watts, sample.watts)
        self.min_watts = min(self.min_watts, sample.watts)
        self.count += 1


@dataclass(frozen=True)
class PeriodReport:
    """Computed statistics for the samples sharing one period."""

    sequence_index: int
    period: str
    period_start: datetime
    total_watt_hours: float
    average_voltage: float
    average_current: float
    average_watts: float
    max_watts: float
    min_watts: float
    sample_count: int


class Aggregator:
    """Pure aggregation component that can be unit tested in isolation."""

    def aggregate(
        self, samples: Iterable[Sample], granularity: Granularity
    ) -> List[PeriodReport]:
        """Group samples by period and summarize each group.

        Reports come back in the order their period was first seen while
        walking ``samples``, not sorted by time.
        """
        buckets: Dict[str, BucketAccumulator] = {}

        for sample in samples:
            key = bucket_key(sample.timestamp, granularity)
            bucket = buckets.get(key)
            if bucket is None:
                bucket = BucketAccumulator(
                    period_start=period_start(sample.timestamp, granularity)
                )
                buckets[key] = bucket
            bucket.add(sample)

        if not buckets:
            raise NoDataError()

        return [
            self._finalize(index, key, bucket)
            for index, (key, bucket) in enumerate(buckets.items(), start=1)
        ]

    @staticmethod
    def _finalize(index: int, key: str, bucket: BucketAccumulator) -> PeriodReport:
        count = bucket.count
        return PeriodReport(
            sequence_index=index,
            period=key,
            period_start=bucket.period_start,
            total_watt_hours=bucket.total_watt_hours,
            average_voltage=bucket.total_voltage / count,
            average_current=bucket.total_current / count,
            average_watts=bucket.total_watts / count,
            max_watts=bucket.max_watts,
            min_watts=bucket.min_watts,
            sample_count=count,
        )
