"""Domain models shared across services."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Dict, List, Literal, Optional, Union


class Granularity(str, Enum):
    """Bucket sizes available for chart aggregation."""

    hourly = "hourly"
    daily = "daily"
    weekly = "weekly"
    monthly = "monthly"
    yearly = "yearly"

    @classmethod
    def coerce(
        cls, value: object, default: Optional["Granularity"] = None
    ) -> Optional["Granularity"]:
        """Return the matching member, or ``default`` for anything unrecognized."""
        if isinstance(value, cls):
            return value
        try:
            return cls(value)
        except ValueError:
            return default


class ThresholdColor(str, Enum):
    """Display colors a threshold band may carry."""

    none = "none"
    blue = "blue"
    green = "green"
    yellow = "yellow"
    orange = "orange"
    red = "red"


@dataclass(frozen=True, slots=True)
class SensorReading:
    """A single reading reported by a sensor."""

    sensor_id: str
    recorded_at: datetime
    value: float
    is_valid: bool = True


@dataclass(frozen=True, slots=True)
class ThresholdBand:
    """A named numeric range; a missing bound leaves that side open."""

    name: str
    min: Optional[float] = None
    max: Optional[float] = None
    color: ThresholdColor = ThresholdColor.none

    def contains(self, value: float) -> bool:
        return (self.min is None or value >= self.min) and (
            self.max is None or value <= self.max
        )

    @property
    def center(self) -> float:
        if self.min is not None and self.max is not None:
            return (self.min + self.max) / 2
        if self.max is not None:
            return self.max
        if self.min is not None:
            return self.min
        return 0.0


ThresholdSet = Dict[str, List[ThresholdBand]]


@dataclass(frozen=True, slots=True)
class AggregatedPoint:
    """Mean value of every reading that fell into one bucket."""

    time: datetime
    value: float

    @property
    def key(self) -> str:
        return iso_key(self.time)


def as_utc(moment: datetime) -> datetime:
    """Convert to UTC; naive datetimes are taken to already be UTC."""
    if moment.tzinfo is None:
        return moment.replace(tzinfo=timezone.utc)
    return moment.astimezone(timezone.utc)


def iso_key(moment: datetime) -> str:
    """Zero-padded UTC ISO-8601 form, e.g. ``2024-01-07T00:00:00.000Z``."""
    utc = as_utc(moment)
    return utc.replace(tzinfo=None).isoformat(timespec="milliseconds") + "Z"


ELLIPSIS = "ellipsis"
PageItem = Union[int, Literal["ellipsis"]]


@dataclass(frozen=True, slots=True)
class SensorKindProfile:
    """Display parameters that distinguish one sensor kind from another."""

    key: str
    title: str
    unit: str
    ideal_min: Optional[float] = None
    ideal_max: Optional[float] = None


SENSOR_KINDS: Dict[str, SensorKindProfile] = {
    profile.key: profile
    for profile in (
        SensorKindProfile("temperature", "Temperature", "°C", 24.0, 27.0),
        SensorKindProfile("ph", "pH", "pH", 6.8, 7.6),
        SensorKindProfile("turbidity", "Turbidity", "NTU", 0.0, 10.0),
        SensorKindProfile("water_level", "Water Level", "cm", 50.0, 70.0),
    )
}
