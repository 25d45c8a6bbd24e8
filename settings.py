from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from typing import Optional


_ACCESS_KEY_ENV = "ECOFLOW_ACCESS_KEY"
_SECRET_KEY_ENV = "ECOFLOW_SECRET_KEY"
_API_HOST_ENV = "ECOFLOW_API_HOST"
_SERIAL_ENV = "SMART_PLUG_SERIAL"
_SAMPLING_INTERVAL_ENV = "SAMPLING_INTERVAL_SECONDS"
_AUTO_SWITCH_ON_ENV = "SMART_PLUG_AUTO_SWITCH_ON"
_LOG_LEVEL_ENV = "LOG_LEVEL"

DEFAULT_API_HOST = "https://api-e.ecoflow.com"
DEFAULT_SAMPLING_INTERVAL = 10.0

_TRUTHY = {"1", "true", "yes", "on"}
_FALSY = {"0", "false", "no", "off"}


@dataclass(frozen=True)
class Settings:
    access_key: Optional[str]
    secret_key: Optional[str]
    api_host: str
    device_serial: Optional[str]
    sampling_interval_seconds: float
    auto_switch_on: bool
    log_level: str

    @property
    def polling_enabled(self) -> bool:
        return bool(self.access_key and self.secret_key and self.device_serial)


def _read_str_env(name: str, default: str) -> str:
    value = os.getenv(name)
    if value is None:
        return default
    candidate = value.strip()
    return candidate or default


def _read_optional_env(name: str, default: Optional[str]) -> Optional[str]:
    value = os.getenv(name)
    if value is None:
        return default
    candidate = value.strip()
    return candidate or None


def _read_interval(default: float) -> float:
    value = os.getenv(_SAMPLING_INTERVAL_ENV)
    if value is None:
        return default
    candidate = value.strip()
    if not candidate:
        return default
    try:
        parsed = float(candidate)
    except ValueError:
        return default
    return parsed if parsed > 0 else default


def _read_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    candidate = value.strip().lower()
    if candidate in _TRUTHY:
        return True
    if candidate in _FALSY:
        return False
    return default


def _read_log_level(default: str) -> str:
    value = os.getenv(_LOG_LEVEL_ENV)
    if value is None:
        return default
    candidate = value.strip()
    if not candidate:
        return default
    return candidate.upper()


@lru_cache
def get_settings() -> Settings:
    return Settings(
        access_key=_read_optional_env(_ACCESS_KEY_ENV, None),
        secret_key=_read_optional_env(_SECRET_KEY_ENV, None),
        api_host=_read_str_env(_API_HOST_ENV, DEFAULT_API_HOST).rstrip("/"),
        device_serial=_read_optional_env(_SERIAL_ENV, None),
        sampling_interval_seconds=_read_interval(DEFAULT_SAMPLING_INTERVAL),
        auto_switch_on=_read_bool(_AUTO_SWITCH_ON_ENV, True),
        log_level=_read_log_level("INFO"),
    )
