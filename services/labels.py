"""Axis label rendering for aggregated chart points."""

from __future__ import annotations

import logging
from datetime import datetime, tzinfo
from functools import lru_cache
from typing import Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from models.records import Granularity, as_utc

logger = logging.getLogger(__name__)

_LABEL_FORMATS = {
    Granularity.hourly: "%b %d, %H",
    Granularity.daily: "%b %d",
    Granularity.weekly: "%b %d",
    Granularity.monthly: "%b %y",
    Granularity.yearly: "%Y",
}
_FALLBACK_FORMAT = "%c"


@lru_cache
def resolve_timezone(name: Optional[str]) -> Optional[tzinfo]:
    """Look up an IANA zone; ``None`` means the process's local zone."""
    if not name:
        return None
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError):
        logger.warning("Unknown display timezone; using local time.", extra={"timezone": name})
        return None


def _parse(bucket_start: datetime | str) -> datetime:
    if isinstance(bucket_start, datetime):
        return bucket_start
    candidate = bucket_start.strip()
    if candidate.endswith("Z"):
        candidate = candidate[:-1] + "+00:00"
    return datetime.fromisoformat(candidate)


def format_label(
    bucket_start: datetime | str,
    granularity: Granularity | str,
    tz: Optional[tzinfo] = None,
) -> str:
    """Render a bucket start for display in the viewer's zone.

    Bucketing is done in UTC; labels are shown in local time, so a daily
    bucket may read as the previous day west of Greenwich.
    """
    moment = as_utc(_parse(bucket_start))
    local = moment.astimezone(tz) if tz is not None else moment.astimezone()
    fmt = _LABEL_FORMATS.get(Granularity.coerce(granularity), _FALLBACK_FORMAT)  # type: ignore[arg-type]
    return local.strftime(fmt)
