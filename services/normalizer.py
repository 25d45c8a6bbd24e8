"""Convert raw smart plug property payloads into :class:`Sample` records."""

from __future__ import annotations

import math
from datetime import datetime, timezone
from typing import Any, Mapping, Optional

from models.records import Sample

SAMPLING_INTERVAL_SECONDS = 10.0
SECONDS_PER_HOUR = 3600.0

# The plug reports power in tenths of a watt.
WATTS_SCALE = 10.0

UPDATE_TIME_KEY = "2_1.updateTime"
SWITCH_STATUS_KEY = "2_1.switchSta"
COUNTRY_KEY = "2_1.country"
TOWN_KEY = "2_1.town"
VOLTAGE_KEY = "2_1.volt"
CURRENT_KEY = "2_1.current"
WATTS_KEY = "2_1.watts"

_DEVICE_TIME_FORMAT = "%Y-%m-%d %H:%M:%S"


class InvalidReadingError(ValueError):
    """A device payload could not be turned into a sample."""

    def __init__(self, key: str, reason: str) -> None:
        super().__init__(f"{key}: {reason}")
        self.key = key
        self.reason = reason


def watt_hours_for(watts: float, sampling_interval_seconds: float) -> float:
    return watts * (sampling_interval_seconds / SECONDS_PER_HOUR)


def normalize_reading(
    properties: Mapping[str, Any],
    sampling_interval_seconds: float = SAMPLING_INTERVAL_SECONDS,
) -> Sample:
    """Build a sample from the plug's ``2_1.*`` properties.

    Watts are descaled from deciwatts and watt-hours are always derived from
    the sampling interval, never read from the payload.
    """
    timestamp = parse_update_time(_require(properties, UPDATE_TIME_KEY))
    watts = _read_float(properties, WATTS_KEY) / WATTS_SCALE

    return Sample(
        timestamp=timestamp,
        switch_status=_read_switch(properties),
        country=_read_optional_str(properties, COUNTRY_KEY),
        town=_read_optional_str(properties, TOWN_KEY),
        voltage=_read_float(properties, VOLTAGE_KEY),
        current=_read_float(properties, CURRENT_KEY),
        watts=watts,
        watt_hours=watt_hours_for(watts, sampling_interval_seconds),
    )


def parse_update_time(value: Any) -> datetime:
    """Parse the device's update time into an aware UTC datetime.

    Accepts epoch milliseconds, ISO-8601 strings and the device's
    ``YYYY-MM-DD HH:MM:SS`` form. Values without an offset are taken as UTC.
    """
    if isinstance(value, bool):
        raise InvalidReadingError(UPDATE_TIME_KEY, "invalid timestamp")

    if isinstance(value, (int, float)):
        return _from_epoch_ms(value)

    if not isinstance(value, str):
        raise InvalidReadingError(UPDATE_TIME_KEY, "invalid timestamp")

    candidate = value.strip()
    if not candidate:
        raise InvalidReadingError(UPDATE_TIME_KEY, "missing timestamp")

    if candidate.isascii() and candidate.isdigit():
        return _from_epoch_ms(int(candidate))

    if candidate.endswith("Z"):
        candidate = candidate[:-1] + "+00:00"

    try:
        parsed = datetime.fromisoformat(candidate)
    except ValueError:
        try:
            parsed = datetime.strptime(candidate, _DEVICE_TIME_FORMAT)
        except ValueError as exc:
            raise InvalidReadingError(UPDATE_TIME_KEY, "invalid timestamp") from exc

    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)

    return parsed.astimezone(timezone.utc)


def _from_epoch_ms(value: float) -> datetime:
    try:
        return datetime.fromtimestamp(value / 1000.0, tz=timezone.utc)
    except (OverflowError, OSError, ValueError) as exc:
        raise InvalidReadingError(UPDATE_TIME_KEY, "timestamp out of range") from exc


def _require(properties: Mapping[str, Any], key: str) -> Any:
    value = properties.get(key)
    if value is None:
        raise InvalidReadingError(key, "missing value")
    return value


def _read_float(properties: Mapping[str, Any], key: str) -> float:
    value = _require(properties, key)
    if isinstance(value, bool):
        raise InvalidReadingError(key, "invalid numeric value")
    try:
        result = float(value)
    except (TypeError, ValueError) as exc:
        raise InvalidReadingError(key, "invalid numeric value") from exc
    if not math.isfinite(result):
        raise InvalidReadingError(key, "non-finite numeric value")
    return result


def _read_switch(properties: Mapping[str, Any]) -> bool:
    value = _require(properties, SWITCH_STATUS_KEY)
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        return value != 0
    if isinstance(value, str):
        candidate = value.strip().lower()
        if candidate in {"1", "true", "on"}:
            return True
        if candidate in {"0", "false", "off"}:
            return False
    raise InvalidReadingError(SWITCH_STATUS_KEY, "invalid switch status")


def _read_optional_str(properties: Mapping[str, Any], key: str) -> Optional[str]:
    value = properties.get(key)
    if value is None:
        return None
    return str(value)
