"""View payloads for sensor dashboards: cards, charts and reading tables."""

from __future__ import annotations

import logging
from datetime import datetime, timezone, tzinfo
from functools import lru_cache
from typing import Callable, List, Optional

from app.schemas import (
    ChartPoint,
    ChartResponse,
    CurrentReadingResponse,
    IngestResponse,
    ReadingIn,
    ReadingRecord,
    ReadingRow,
    ReadingsPageResponse,
    SensorRecord,
    SensorSettingsUpdate,
)
from datastore.mock_store import MockSensorStore, build_default_store
from models.records import (
    SENSOR_KINDS,
    Granularity,
    SensorKindProfile,
    ThresholdBand,
    ThresholdColor,
)
from services.aggregator import Aggregator
from services.labels import format_label, resolve_timezone
from services.pagination import paginate
from services.thresholds import (
    UNKNOWN_STATUS,
    bands_for,
    classify,
    describe_band,
    match_band,
    status_label,
)
from settings import get_settings

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _ideal_range(profile: SensorKindProfile) -> Optional[str]:
    if profile.ideal_min is None or profile.ideal_max is None:
        return None
    return f"{profile.ideal_min:g}–{profile.ideal_max:g} {profile.unit}"


class DashboardService:
    """Builds dashboard payloads from stored sensors and readings."""

    def __init__(
        self,
        store: MockSensorStore,
        aggregator: Aggregator,
        page_size: int = 10,
        default_granularity: Granularity = Granularity.daily,
        display_tz: Optional[tzinfo] = None,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self.store = store
        self.aggregator = aggregator
        self.page_size = page_size
        self.default_granularity = default_granularity
        self.display_tz = display_tz
        self._clock = clock

    @staticmethod
    def profile_for(sensor_type: str) -> SensorKindProfile:
        profile = SENSOR_KINDS.get(sensor_type)
        if profile is None:
            raise KeyError(f"Unsupported sensor type {sensor_type!r}.")
        return profile

    def list_sensors(self) -> list[SensorRecord]:
        return self.store.scan_sensors()

    def register_sensor(self, sensor: SensorRecord) -> SensorRecord:
        if sensor.type not in SENSOR_KINDS:
            raise ValueError(f"Unsupported sensor type {sensor.type!r}.")
        self.store.put_sensor(sensor)
        logger.info(
            "Registered sensor.", extra={"sensor_id": sensor.id, "sensor_type": sensor.type}
        )
        return sensor

    def get_sensor(self, sensor_type: str) -> SensorRecord:
        self.profile_for(sensor_type)
        sensor = self.store.find_sensor_by_type(sensor_type)
        if sensor is None:
            raise KeyError(f"No sensor of type {sensor_type!r} is registered.")
        return sensor

    def _bands(self, sensor: SensorRecord, sensor_type: str) -> List[ThresholdBand]:
        return bands_for(sensor.threshold_set(), sensor_type)

    def current(self, sensor_type: str) -> CurrentReadingResponse:
        """Latest valid reading matched against the sensor's bands."""
        profile = self.profile_for(sensor_type)
        sensor = self.get_sensor(sensor_type)
        response = CurrentReadingResponse(
            sensor_id=sensor.id,
            sensor_type=sensor_type,
            title=profile.title,
            unit=profile.unit,
            location=sensor.location,
            ideal_range=_ideal_range(profile),
        )

        latest = self.store.latest_reading(sensor.id)
        if latest is None:
            return response

        matched = match_band(latest.value, self._bands(sensor, sensor_type))
        status = matched.name if matched is not None else UNKNOWN_STATUS
        response.value = latest.value
        response.recorded_at = latest.recorded_at
        response.status = status
        response.status_label = status_label(status)
        response.color = matched.color if matched is not None else ThresholdColor.none
        response.band_description = describe_band(matched, profile.unit, status=status)
        return response

    def overview(self) -> List[CurrentReadingResponse]:
        """Current cards for every registered kind, in kind order."""
        registered = {sensor.type for sensor in self.store.scan_sensors()}
        return [self.current(kind) for kind in SENSOR_KINDS if kind in registered]

    def chart(
        self, sensor_type: str, granularity: Optional[Granularity | str] = None
    ) -> ChartResponse:
        """Aggregated series over the look-back window of ``granularity``."""
        profile = self.profile_for(sensor_type)
        sensor = self.get_sensor(sensor_type)
        resolved = Granularity.coerce(granularity) if granularity else None
        if resolved is None:
            resolved = sensor.aggregation_interval or self.default_granularity

        since = self._clock() - self.aggregator.time_range(resolved)
        records = self.store.query_readings(sensor.id, since=since)
        points = self.aggregator.aggregate(
            (record.to_reading() for record in records), resolved
        )
        logger.info(
            "Built chart series.",
            extra={
                "sensor_id": sensor.id,
                "granularity": resolved,
                "reading_count": len(records),
                "bucket_count": len(points),
            },
        )
        return ChartResponse(
            sensor_id=sensor.id,
            sensor_type=sensor_type,
            granularity=resolved,
            unit=profile.unit,
            description=f"{resolved.value.capitalize()} average {profile.title}",
            points=[
                ChartPoint(
                    time=point.time,
                    label=format_label(point.time, resolved, tz=self.display_tz),
                    value=round(point.value, 2),
                )
                for point in points
            ],
        )

    def readings_page(self, sensor_type: str, page: int = 1) -> ReadingsPageResponse:
        """Newest-first readings table with per-row classification."""
        profile = self.profile_for(sensor_type)
        sensor = self.get_sensor(sensor_type)
        bands = self._bands(sensor, sensor_type)
        records = self.store.query_readings(sensor.id)
        window = paginate(records, page, per_page=self.page_size)

        rows = []
        for record in window.items:
            status = classify(record.value, bands)
            matched = match_band(record.value, bands)
            rows.append(
                ReadingRow(
                    value=record.value,
                    recorded_at=record.recorded_at,
                    status=status,
                    status_label=status_label(status),
                    color=matched.color if matched is not None else ThresholdColor.none,
                )
            )

        logger.debug(
            "Built readings page.",
            extra={"sensor_id": sensor.id, "page": window.page, "total_pages": window.total_pages},
        )
        return ReadingsPageResponse(
            sensor_id=sensor.id,
            sensor_type=sensor_type,
            unit=profile.unit,
            page=window.page,
            per_page=window.per_page,
            total_items=window.total_items,
            total_pages=window.total_pages,
            pages=window.window,
            items=rows,
        )

    def update_settings(self, sensor_type: str, update: SensorSettingsUpdate) -> SensorRecord:
        """Replace the sensor's settings; the bands are stored under its resulting type."""
        if update.type and update.type not in SENSOR_KINDS:
            raise ValueError(f"Unsupported sensor type {update.type!r}.")
        sensor = self.get_sensor(sensor_type)
        kind = update.type or sensor.type
        thresholds = {key: bands for key, bands in sensor.thresholds.items() if key != sensor_type}
        thresholds[kind] = [band.model_copy() for band in update.thresholds]
        updated = sensor.model_copy(
            update={
                "type": kind,
                "model": update.model,
                "location": update.location,
                "description": update.description,
                "aggregation_interval": update.aggregation_interval,
                "thresholds": thresholds,
            }
        )
        self.store.put_sensor(updated)
        logger.info(
            "Updated sensor settings.",
            extra={"sensor_id": sensor.id, "sensor_type": kind},
        )
        return updated

    def ingest(self, sensor_type: str, readings: List[ReadingIn]) -> IngestResponse:
        sensor = self.get_sensor(sensor_type)
        accepted = self.store.put_readings(
            ReadingRecord(sensor_id=sensor.id, **reading.model_dump()) for reading in readings
        )
        logger.info(
            "Stored readings.",
            extra={"sensor_id": sensor.id, "reading_count": accepted},
        )
        return IngestResponse(sensor_id=sensor.id, accepted=accepted)


@lru_cache
def build_default_dashboard() -> DashboardService:
    """Factory that wires the dashboard with the default store."""
    settings = get_settings()
    return DashboardService(
        store=build_default_store(),
        aggregator=Aggregator(),
        page_size=settings.page_size,
        default_granularity=settings.default_granularity,
        display_tz=resolve_timezone(settings.display_timezone),
    )
