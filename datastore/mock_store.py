"""In-memory sensor and reading store with optional JSON persistence."""

from __future__ import annotations

import json
import logging
from datetime import datetime
from functools import lru_cache
from pathlib import Path
from threading import Lock
from typing import Dict, Iterable, List, Optional

from pydantic import ValidationError

from app.schemas import ReadingRecord, SensorRecord
from models.records import as_utc
from settings import get_settings

logger = logging.getLogger(__name__)


class MockSensorStore:
    """In-memory stand-in for the sensors/readings database."""

    def __init__(self, name: str = "sensors", persistence_path: Optional[Path] = None) -> None:
        self.name = name
        self._sensors: Dict[str, SensorRecord] = {}
        self._readings: Dict[str, List[ReadingRecord]] = {}
        self.persistence_path = persistence_path
        self._lock = Lock()
        if persistence_path:
            persistence_path.parent.mkdir(parents=True, exist_ok=True)
            self._load_from_disk()

    def put_sensor(self, sensor: SensorRecord) -> None:
        with self._lock:
            self._sensors[sensor.id] = sensor.model_copy(deep=True)
            self._readings.setdefault(sensor.id, [])
            self._persist()

    def get_sensor(self, sensor_id: str) -> Optional[SensorRecord]:
        with self._lock:
            sensor = self._sensors.get(sensor_id)
            if sensor is None:
                return None
            return sensor.model_copy(deep=True)

    def find_sensor_by_type(self, sensor_type: str) -> Optional[SensorRecord]:
        """Return the first sensor of ``sensor_type`` in insertion order."""
        with self._lock:
            for sensor in self._sensors.values():
                if sensor.type == sensor_type:
                    return sensor.model_copy(deep=True)
        return None

    def scan_sensors(self) -> list[SensorRecord]:
        with self._lock:
            return [sensor.model_copy(deep=True) for sensor in self._sensors.values()]

    def put_readings(self, readings: Iterable[ReadingRecord]) -> int:
        """Append readings; every reading must belong to a known sensor."""
        batch = [reading.model_copy(deep=True) for reading in readings]
        with self._lock:
            unknown = sorted({r.sensor_id for r in batch} - self._sensors.keys())
            if unknown:
                raise KeyError(f"Unknown sensor id(s): {', '.join(unknown)}.")
            for reading in batch:
                self._readings.setdefault(reading.sensor_id, []).append(reading)
            self._persist()
        return len(batch)

    def query_readings(
        self,
        sensor_id: str,
        since: Optional[datetime] = None,
        valid_only: bool = True,
        descending: bool = True,
        limit: Optional[int] = None,
    ) -> list[ReadingRecord]:
        """Readings for a sensor ordered by ``recorded_at``."""
        with self._lock:
            rows = list(self._readings.get(sensor_id, []))

        if valid_only:
            rows = [row for row in rows if row.is_valid]
        if since is not None:
            cutoff = as_utc(since)
            rows = [row for row in rows if as_utc(row.recorded_at) >= cutoff]
        rows.sort(key=lambda row: as_utc(row.recorded_at), reverse=descending)
        if limit is not None:
            rows = rows[:limit]
        return [row.model_copy(deep=True) for row in rows]

    def latest_reading(self, sensor_id: str) -> Optional[ReadingRecord]:
        rows = self.query_readings(sensor_id, limit=1)
        return rows[0] if rows else None

    def _persist(self) -> None:
        if not self.persistence_path:
            return
        payload = {
            "sensors": {
                sensor_id: sensor.model_dump(mode="json")
                for sensor_id, sensor in self._sensors.items()
            },
            "readings": {
                sensor_id: [row.model_dump(mode="json") for row in rows]
                for sensor_id, rows in self._readings.items()
            },
        }
        self.persistence_path.write_text(json.dumps(payload, indent=2, sort_keys=True))

    def _load_from_disk(self) -> None:
        if not self.persistence_path or not self.persistence_path.exists():
            return

        try:
            raw = self.persistence_path.read_text() or "{}"
            data = json.loads(raw)
        except (OSError, json.JSONDecodeError):
            logger.warning("Could not read sensor store; starting empty.")
            return

        try:
            if not isinstance(data, dict):
                raise TypeError("top level is not an object")
            sensors = {
                sensor_id: SensorRecord.model_validate(payload)
                for sensor_id, payload in (data.get("sensors") or {}).items()
            }
            readings = {
                sensor_id: [ReadingRecord.model_validate(row) for row in rows]
                for sensor_id, rows in (data.get("readings") or {}).items()
            }
        except (AttributeError, TypeError, ValidationError) as exc:
            logger.warning("Malformed sensor store; starting empty: %s", exc)
            return

        self._sensors.update(sensors)
        self._readings.update(readings)


@lru_cache
def build_default_store(path: Optional[str] = None) -> MockSensorStore:
    settings = get_settings()
    store_path = settings.store_path if path is None else path
    persistence = Path(store_path) if store_path else None
    return MockSensorStore(persistence_path=persistence)
