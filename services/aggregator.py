"""Aggregation logic for sensor readings."""

from __future__ import annotations

import logging
from datetime import datetime, timedelta
from typing import Callable, Dict, Iterable, List

from models.records import AggregatedPoint, Granularity, SensorReading, as_utc, iso_key

logger = logging.getLogger(__name__)


def _hour_start(moment: datetime) -> datetime:
    return moment.replace(minute=0, second=0, microsecond=0)


def _day_start(moment: datetime) -> datetime:
    return moment.replace(hour=0, minute=0, second=0, microsecond=0)


def _week_start(moment: datetime) -> datetime:
    # weekday() is Monday=0, so Sunday maps to 0 days back.
    days_since_sunday = (moment.weekday() + 1) % 7
    return _day_start(moment) - timedelta(days=days_since_sunday)


def _month_start(moment: datetime) -> datetime:
    return _day_start(moment).replace(day=1)


def _year_start(moment: datetime) -> datetime:
    return _day_start(moment).replace(month=1, day=1)


_BUCKET_STARTS: Dict[Granularity, Callable[[datetime], datetime]] = {
    Granularity.hourly: _hour_start,
    Granularity.daily: _day_start,
    Granularity.weekly: _week_start,
    Granularity.monthly: _month_start,
    Granularity.yearly: _year_start,
}

_TIME_RANGES: Dict[Granularity, timedelta] = {
    Granularity.hourly: timedelta(hours=1),
    Granularity.daily: timedelta(days=1),
    Granularity.weekly: timedelta(days=7),
    Granularity.monthly: timedelta(days=30),
    Granularity.yearly: timedelta(days=365),
}


def bucket_start(moment: datetime, granularity: Granularity | str) -> datetime:
    """Start of the UTC calendar bucket containing ``moment``."""
    resolved = Granularity.coerce(granularity, default=Granularity.daily)
    return _BUCKET_STARTS[resolved](as_utc(moment))


def time_range_for(granularity: Granularity | str) -> timedelta:
    """How far back to fetch readings for a chart at ``granularity``."""
    resolved = Granularity.coerce(granularity, default=Granularity.daily)
    return _TIME_RANGES[resolved]


def aggregate(
    readings: Iterable[SensorReading], granularity: Granularity | str
) -> List[AggregatedPoint]:
    """Average readings per UTC calendar bucket, oldest bucket first."""
    resolved = Granularity.coerce(granularity, default=Granularity.daily)
    to_start = _BUCKET_STARTS[resolved]

    buckets: Dict[str, List[float]] = {}
    starts: Dict[str, datetime] = {}
    for reading in readings:
        start = to_start(as_utc(reading.recorded_at))
        key = iso_key(start)
        starts.setdefault(key, start)
        buckets.setdefault(key, []).append(reading.value)

    points = [
        AggregatedPoint(time=starts[key], value=sum(values) / len(values))
        for key, values in sorted(buckets.items())
    ]
    logger.debug(
        "Aggregated readings.",
        extra={"granularity": resolved, "bucket_count": len(points)},
    )
    return points


class Aggregator:
    """Pure aggregation component that can be unit tested in isolation."""

    def aggregate(
        self, readings: Iterable[SensorReading], granularity: Granularity | str
    ) -> List[AggregatedPoint]:
        return aggregate(readings, granularity)

    def time_range(self, granularity: Granularity | str) -> timedelta:
        return time_range_for(granularity)
