"""Map timestamps onto canonical period starts for each granularity."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Callable, Dict

from models.records import Granularity

# Subtracted from UTC before truncation. The deployment labels this as the
# plug's local time; the value is kept exactly as configured there.
LOCAL_TIME_OFFSET = timedelta(hours=8)


def _midnight(local: datetime) -> datetime:
    return local.replace(hour=0, minute=0, second=0, microsecond=0)


def _truncate_ten_seconds(local: datetime) -> datetime:
    return local.replace(second=local.second - local.second % 10, microsecond=0)


def _truncate_minute(local: datetime) -> datetime:
    return local.replace(second=0, microsecond=0)


def _truncate_hour(local: datetime) -> datetime:
    return local.replace(minute=0, second=0, microsecond=0)


def _truncate_day(local: datetime) -> datetime:
    return _midnight(local)


def _truncate_week(local: datetime) -> datetime:
    # Weeks start on Sunday; datetime.weekday() puts Monday at 0.
    days_since_sunday = (local.weekday() + 1) % 7
    return _midnight(local) - timedelta(days=days_since_sunday)


def _truncate_month(local: datetime) -> datetime:
    return _midnight(local).replace(day=1)


def _truncate_year(local: datetime) -> datetime:
    return _midnight(local).replace(month=1, day=1)


_TRUNCATORS: Dict[Granularity, Callable[[datetime], datetime]] = {
    Granularity.ten_seconds: _truncate_ten_seconds,
    Granularity.minute: _truncate_minute,
    Granularity.hour: _truncate_hour,
    Granularity.day: _truncate_day,
    Granularity.week: _truncate_week,
    Granularity.month: _truncate_month,
    Granularity.year: _truncate_year,
}


def to_local(timestamp: datetime) -> datetime:
    """Shift a UTC instant by :data:`LOCAL_TIME_OFFSET`, keeping it UTC-tagged."""

    if timestamp.tzinfo is None:
        timestamp = timestamp.replace(tzinfo=timezone.utc)
    return timestamp.astimezone(timezone.utc) - LOCAL_TIME_OFFSET


def period_start(timestamp: datetime, granularity: Granularity) -> datetime:
    """Return the start of the period containing ``timestamp``.

    Calendar fields are read from the shifted local instant and the truncated
    result is re-encoded as UTC without shifting back.
    """

    return _TRUNCATORS[granularity](to_local(timestamp))


def format_period(instant: datetime) -> str:
    """Render an instant as ``YYYY-MM-DDTHH:MM:SS.mmmZ``."""

    utc = instant.astimezone(timezone.utc)
    return utc.strftime("%Y-%m-%dT%H:%M:%S.") + f"{utc.microsecond // 1000:03d}Z"


def bucket_key(timestamp: datetime, granularity: Granularity) -> str:
    return format_period(period_start(timestamp, granularity))
