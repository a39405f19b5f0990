"""Pydantic schemas for the HTTP API layer and the record store."""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, Field, field_validator, model_validator

from models.records import (
    Granularity,
    SensorReading,
    ThresholdBand,
    ThresholdColor,
    ThresholdSet,
)

logger = logging.getLogger(__name__)


class ThresholdBandSchema(BaseModel):
    """One named band as written by the settings editor."""

    name: str = Field(..., min_length=1)
    min: Optional[float] = None
    max: Optional[float] = None
    color: ThresholdColor = ThresholdColor.none

    @field_validator("name")
    @classmethod
    def _strip_name(cls, value: str) -> str:
        stripped = value.strip()
        if not stripped:
            raise ValueError("Band name must not be blank.")
        return stripped

    @model_validator(mode="after")
    def _check_bounds(self) -> "ThresholdBandSchema":
        if self.min is not None and self.max is not None and self.min > self.max:
            raise ValueError(f"Band {self.name!r} has min greater than max.")
        return self

    def to_band(self) -> ThresholdBand:
        return ThresholdBand(name=self.name, min=self.min, max=self.max, color=self.color)

    @classmethod
    def from_band(cls, band: ThresholdBand) -> "ThresholdBandSchema":
        return cls(name=band.name, min=band.min, max=band.max, color=band.color)


def _coerce_interval(value: Any) -> Optional[Granularity]:
    if value is None or value == "":
        return None
    return Granularity.coerce(value)


class SensorRecord(BaseModel):
    """Sensor configuration as held by the record store.

    An unset or unrecognized ``aggregation_interval`` is stored as ``None``
    and resolved to the configured default when a chart is built.
    """

    id: str
    type: str
    location: Optional[str] = None
    description: Optional[str] = None
    model: Optional[str] = None
    aggregation_interval: Optional[Granularity] = None
    thresholds: Dict[str, List[ThresholdBandSchema]] = Field(default_factory=dict)

    @field_validator("aggregation_interval", mode="before")
    @classmethod
    def _known_interval(cls, value: Any) -> Optional[Granularity]:
        return _coerce_interval(value)

    @field_validator("thresholds", mode="before")
    @classmethod
    def _drop_legacy_thresholds(cls, value: Any) -> Any:
        if value is None:
            return {}
        if not isinstance(value, dict):
            return value
        kept = {}
        for kind, bands in value.items():
            if isinstance(bands, list):
                kept[kind] = bands
            else:
                logger.warning(
                    "Dropping legacy threshold layout.", extra={"sensor_type": kind}
                )
        return kept

    def threshold_set(self) -> ThresholdSet:
        return {
            kind: [band.to_band() for band in bands]
            for kind, bands in self.thresholds.items()
        }


class SensorSettingsUpdate(BaseModel):
    """Payload accepted by the settings endpoint."""

    type: Optional[str] = None
    model: Optional[str] = None
    location: Optional[str] = None
    description: Optional[str] = None
    aggregation_interval: Optional[Granularity] = None
    thresholds: List[ThresholdBandSchema] = Field(default_factory=list)


class ReadingRecord(BaseModel):
    """A stored reading."""

    sensor_id: str
    recorded_at: datetime
    value: float = Field(..., allow_inf_nan=False)
    is_valid: bool = True

    def to_reading(self) -> SensorReading:
        return SensorReading(
            sensor_id=self.sensor_id,
            recorded_at=self.recorded_at,
            value=self.value,
            is_valid=self.is_valid,
        )


class ReadingIn(BaseModel):
    recorded_at: datetime
    value: float = Field(..., allow_inf_nan=False)
    is_valid: bool = True


class ReadingsIngest(BaseModel):
    readings: List[ReadingIn] = Field(..., min_length=1)


class IngestResponse(BaseModel):
    sensor_id: str
    accepted: int = Field(..., ge=0)


class ChartPoint(BaseModel):
    time: datetime = Field(..., description="Bucket start in UTC.")
    label: str
    value: float


class ChartResponse(BaseModel):
    """Aggregated series for a sensor chart."""

    sensor_id: str
    sensor_type: str
    granularity: Granularity
    unit: str
    description: str
    points: List[ChartPoint] = Field(default_factory=list)


class ReadingRow(BaseModel):
    value: float
    recorded_at: datetime
    status: str
    status_label: str
    color: ThresholdColor = ThresholdColor.none


class ReadingsPageResponse(BaseModel):
    """One page of the readings table."""

    sensor_id: str
    sensor_type: str
    unit: str
    page: int = Field(..., ge=1)
    per_page: int = Field(..., ge=1)
    total_items: int = Field(..., ge=0)
    total_pages: int = Field(..., ge=0)
    pages: List[Union[int, Literal["ellipsis"]]] = Field(default_factory=list)
    items: List[ReadingRow] = Field(default_factory=list)


class CurrentReadingResponse(BaseModel):
    """Latest reading with its matched band, as shown on summary cards."""

    sensor_id: str
    sensor_type: str
    title: str
    unit: str
    location: Optional[str] = None
    value: Optional[float] = None
    recorded_at: Optional[datetime] = None
    status: Optional[str] = None
    status_label: Optional[str] = None
    color: ThresholdColor = ThresholdColor.none
    band_description: Optional[str] = None
    ideal_range: Optional[str] = None
