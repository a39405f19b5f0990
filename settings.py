from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from typing import Optional

from models.records import Granularity


_STORE_PATH_ENV = "SENSOR_STORE_PATH"
_PAGE_SIZE_ENV = "READINGS_PAGE_SIZE"
_GRANULARITY_ENV = "DEFAULT_GRANULARITY"
_DISPLAY_TZ_ENV = "DISPLAY_TIMEZONE"
_LOG_LEVEL_ENV = "LOG_LEVEL"


@dataclass(frozen=True)
class Settings:
    store_path: Optional[str]
    page_size: int
    default_granularity: Granularity
    display_timezone: Optional[str]
    log_level: str


def _read_optional_env(name: str, default: Optional[str]) -> Optional[str]:
    value = os.getenv(name)
    if value is None:
        return default
    candidate = value.strip()
    return candidate or None


def _read_page_size(default: int) -> int:
    value = os.getenv(_PAGE_SIZE_ENV)
    if value is None:
        return default
    candidate = value.strip()
    if not candidate:
        return default
    try:
        parsed = int(candidate)
    except ValueError:
        return default
    return parsed if parsed > 0 else default


def _read_granularity(default: Granularity) -> Granularity:
    value = os.getenv(_GRANULARITY_ENV)
    if value is None:
        return default
    return Granularity.coerce(value.strip().lower(), default=default)


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
        store_path=_read_optional_env(_STORE_PATH_ENV, "./tmp/sensor_store.json"),
        page_size=_read_page_size(10),
        default_granularity=_read_granularity(Granularity.daily),
        display_timezone=_read_optional_env(_DISPLAY_TZ_ENV, None),
        log_level=_read_log_level("INFO"),
    )
