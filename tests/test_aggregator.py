"""Unit tests for the aggregation logic."""

from __future__ import annotations

import math
from datetime import datetime, timezone

import pytest

from models.records import Granularity, Sample
from services.aggregator import Aggregator, NoDataError
from services.bucketing import bucket_key
from services.normalizer import watt_hours_for


def _sample(
    timestamp: datetime,
    watts: float = 100.0,
    voltage: float = 230.0,
    current: float = 0.45,
) -> Sample:
    """Helper to build deterministic samples."""

    return Sample(
        timestamp=timestamp,
        switch_status=True,
        country="KE",
        town="Nairobi",
        voltage=voltage,
        current=current,
        watts=watts,
        watt_hours=watt_hours_for(watts, 10),
    )


def _utc(*args: int) -> datetime:
    return datetime(*args, tzinfo=timezone.utc)


@pytest.mark.parametrize("granularity", list(Granularity))
def test_aggregate_empty_iterable_raises_no_data(granularity: Granularity) -> None:
    aggregator = Aggregator()

    with pytest.raises(NoDataError):
        aggregator.aggregate([], granularity)


def test_ten_second_buckets_split_on_boundary() -> None:
    aggregator = Aggregator()
    samples = [
        _sample(_utc(2024, 5, 15, 12, 0, 3)),
        _sample(_utc(2024, 5, 15, 12, 0, 7)),
        _sample(_utc(2024, 5, 15, 12, 0, 15)),
    ]

    reports = aggregator.aggregate(samples, Granularity.ten_seconds)

    assert len(reports) == 2
    first, second = reports
    assert first.sequence_index == 1
    assert first.period == "2024-05-15T04:00:00.000Z"
    assert first.sample_count == 2
    assert first.total_watt_hours == pytest.approx(0.5556, abs=1e-4)
    assert first.max_watts == first.min_watts == first.average_watts == 100.0
    assert second.sequence_index == 2
    assert second.period == "2024-05-15T04:00:10.000Z"
    assert second.sample_count == 1
    assert second.total_watt_hours == pytest.approx(100 * 10 / 3600)


def test_aggregate_computes_statistics() -> None:
    aggregator = Aggregator()
    samples = [
        _sample(_utc(2024, 5, 15, 12, 0, 0), watts=50.0, voltage=220.0, current=0.2),
        _sample(_utc(2024, 5, 15, 12, 20, 0), watts=150.0, voltage=240.0, current=0.6),
        _sample(_utc(2024, 5, 15, 12, 40, 0), watts=100.0, voltage=230.0, current=0.4),
    ]

    (report,) = aggregator.aggregate(samples, Granularity.hour)

    assert report.sample_count == 3
    assert report.total_watt_hours == sum(sample.watt_hours for sample in samples)
    assert report.average_watts == pytest.approx(100.0)
    assert report.average_voltage == pytest.approx(230.0)
    assert report.average_current == pytest.approx(0.4)
    assert report.max_watts == 150.0
    assert report.min_watts == 50.0
    assert report.period_start == _utc(2024, 5, 15, 4, 0, 0)


def test_year_buckets_follow_shifted_calendar_year() -> None:
    aggregator = Aggregator()
    samples = [
        _sample(_utc(2023, 12, 31, 23, 0, 0)),
        _sample(_utc(2024, 1, 1, 7, 0, 0)),
        _sample(_utc(2024, 1, 1, 9, 0, 0)),
    ]

    reports = aggregator.aggregate(samples, Granularity.year)

    assert [report.period for report in reports] == [
        "2023-01-01T00:00:00.000Z",
        "2024-01-01T00:00:00.000Z",
    ]
    assert [report.sample_count for report in reports] == [2, 1]


def test_reports_keep_first_seen_order() -> None:
    aggregator = Aggregator()
    samples = [
        _sample(_utc(2024, 5, 15, 12, 5, 0)),
        _sample(_utc(2024, 5, 15, 12, 1, 0)),
        _sample(_utc(2024, 5, 15, 12, 5, 30)),
    ]

    reports = aggregator.aggregate(samples, Granularity.minute)

    assert [report.period for report in reports] == [
        "2024-05-15T04:05:00.000Z",
        "2024-05-15T04:01:00.000Z",
    ]
    assert [report.sequence_index for report in reports] == [1, 2]


@pytest.mark.parametrize("granularity", list(Granularity))
def test_counts_cover_every_sample(granularity: Granularity) -> None:
    aggregator = Aggregator()
    start = _utc(2023, 12, 30, 20, 0, 0)
    samples = [
        _sample(datetime.fromtimestamp(start.timestamp() + offset * 3907, tz=timezone.utc), watts=float(offset))
        for offset in range(60)
    ]

    reports = aggregator.aggregate(samples, granularity)

    distinct = {bucket_key(sample.timestamp, granularity) for sample in samples}
    assert len(reports) == len(distinct)
    assert sum(report.sample_count for report in reports) == len(samples)
    assert all(report.sample_count >= 1 for report in reports)
    assert all(math.isfinite(report.max_watts) for report in reports)


def test_aggregate_is_repeatable() -> None:
    aggregator = Aggregator()
    samples = [
        _sample(_utc(2024, 5, 15, 12, 0, 3)),
        _sample(_utc(2024, 5, 16, 12, 0, 3), watts=80.0),
    ]

    assert aggregator.aggregate(samples, Granularity.day) == aggregator.aggregate(
        samples, Granularity.day
    )
