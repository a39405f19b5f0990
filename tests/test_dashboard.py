from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from app.schemas import (
    ReadingIn,
    ReadingRecord,
    SensorRecord,
    SensorSettingsUpdate,
    ThresholdBandSchema,
)
from datastore.mock_store import MockSensorStore
from models.records import Granularity, ThresholdColor
from services.aggregator import Aggregator
from services.dashboard import DashboardService

UTC = timezone.utc
NOW = datetime(2024, 5, 15, 12, 30, tzinfo=UTC)

BANDS = [
    ThresholdBandSchema(name="cold", max=18, color=ThresholdColor.blue),
    ThresholdBandSchema(name="normal", min=18, max=27, color=ThresholdColor.green),
    ThresholdBandSchema(name="hot", min=27, color=ThresholdColor.red),
]


@pytest.fixture()
def store() -> MockSensorStore:
    store = MockSensorStore()
    store.put_sensor(
        SensorRecord(
            id="temp-1",
            type="temperature",
            location="koi pond",
            aggregation_interval=Granularity.hourly,
            thresholds={"temperature": BANDS},
        )
    )
    return store


@pytest.fixture()
def dashboard(store: MockSensorStore) -> DashboardService:
    return DashboardService(
        store=store,
        aggregator=Aggregator(),
        page_size=3,
        display_tz=UTC,
        clock=lambda: NOW,
    )


def _add(store: MockSensorStore, *pairs: tuple[timedelta, float], is_valid: bool = True) -> None:
    store.put_readings(
        ReadingRecord(sensor_id="temp-1", recorded_at=NOW - ago, value=value, is_valid=is_valid)
        for ago, value in pairs
    )


def test_current_reports_matched_band(dashboard: DashboardService, store: MockSensorStore) -> None:
    _add(store, (timedelta(minutes=5), 19.0), (timedelta(minutes=1), 29.5))

    current = dashboard.current("temperature")

    assert current.value == 29.5
    assert current.status == "hot"
    assert current.status_label == "Hot"
    assert current.color is ThresholdColor.red
    assert current.band_description == "hot: ≥ 27 °C"
    assert current.ideal_range == "24–27 °C"
    assert current.location == "koi pond"


def test_current_without_match_is_unknown(store: MockSensorStore) -> None:
    store.put_sensor(
        SensorRecord(
            id="ph-1",
            type="ph",
            thresholds={"ph": [ThresholdBandSchema(name="ideal", min=6.8, max=7.6)]},
        )
    )
    store.put_readings([ReadingRecord(sensor_id="ph-1", recorded_at=NOW, value=9.1)])
    dashboard = DashboardService(store=store, aggregator=Aggregator())

    current = dashboard.current("ph")

    assert current.status == "Unknown"
    assert current.color is ThresholdColor.none
    assert current.band_description == "Status: Unknown"


def test_current_without_readings(dashboard: DashboardService) -> None:
    current = dashboard.current("temperature")

    assert current.value is None
    assert current.status is None
    assert current.title == "Temperature"


def test_chart_uses_sensor_interval_and_look_back(
    dashboard: DashboardService, store: MockSensorStore
) -> None:
    _add(
        store,
        (timedelta(minutes=10), 20.0),
        (timedelta(minutes=20), 22.0),
        (timedelta(minutes=50), 30.0),
        (timedelta(hours=3), 99.0),
    )

    chart = dashboard.chart("temperature")

    assert chart.granularity is Granularity.hourly
    assert chart.description == "Hourly average Temperature"
    assert [point.label for point in chart.points] == ["May 15, 11", "May 15, 12"]
    assert [point.value for point in chart.points] == [30.0, 21.0]


def test_chart_rounds_values_and_skips_invalid(
    dashboard: DashboardService, store: MockSensorStore
) -> None:
    _add(store, (timedelta(hours=1), 20.0), (timedelta(hours=2), 20.0), (timedelta(hours=3), 21.0))
    _add(store, (timedelta(hours=4), 500.0), is_valid=False)

    chart = dashboard.chart("temperature", Granularity.daily)

    assert len(chart.points) == 1
    assert chart.points[0].value == 20.33
    assert chart.points[0].label == "May 15"


def test_chart_unknown_granularity_falls_back_to_sensor_interval(
    dashboard: DashboardService,
) -> None:
    assert dashboard.chart("temperature", "fortnightly").granularity is Granularity.hourly


def test_chart_falls_back_to_default_when_sensor_has_no_interval(store: MockSensorStore) -> None:
    store.put_sensor(SensorRecord(id="wl-1", type="water_level"))
    dashboard = DashboardService(
        store=store,
        aggregator=Aggregator(),
        default_granularity=Granularity.weekly,
        clock=lambda: NOW,
    )

    chart = dashboard.chart("water_level")

    assert chart.granularity is Granularity.weekly
    assert chart.points == []


def test_readings_page_classifies_rows(dashboard: DashboardService, store: MockSensorStore) -> None:
    _add(
        store,
        (timedelta(minutes=1), 10.0),
        (timedelta(minutes=2), 20.0),
        (timedelta(minutes=3), 30.0),
        (timedelta(minutes=4), 25.0),
    )

    first = dashboard.readings_page("temperature", 1)

    assert first.total_items == 4
    assert first.total_pages == 2
    assert first.pages == [1, 2]
    assert [row.value for row in first.items] == [10.0, 20.0, 30.0]
    assert [row.status_label for row in first.items] == ["Cold", "Normal", "Hot"]
    assert [row.color for row in first.items] == [
        ThresholdColor.blue,
        ThresholdColor.green,
        ThresholdColor.red,
    ]

    clamped = dashboard.readings_page("temperature", 40)
    assert clamped.page == 2
    assert [row.value for row in clamped.items] == [25.0]


def test_readings_page_nearest_band_fallback(store: MockSensorStore) -> None:
    store.put_sensor(
        SensorRecord(
            id="turb-1",
            type="turbidity",
            thresholds={
                "turbidity": [
                    ThresholdBandSchema(name="clear", min=0, max=10),
                    ThresholdBandSchema(name="murky", min=30, max=50),
                ]
            },
        )
    )
    store.put_readings([ReadingRecord(sensor_id="turb-1", recorded_at=NOW, value=24.0)])
    dashboard = DashboardService(store=store, aggregator=Aggregator())

    row = dashboard.readings_page("turbidity").items[0]

    assert row.status == "murky"
    assert row.color is ThresholdColor.none


def test_update_settings_replaces_bands(dashboard: DashboardService, store: MockSensorStore) -> None:
    update = SensorSettingsUpdate(
        location="greenhouse",
        aggregation_interval=Granularity.monthly,
        thresholds=[ThresholdBandSchema(name="any")],
    )

    updated = dashboard.update_settings("temperature", update)

    assert updated.location == "greenhouse"
    assert updated.type == "temperature"
    stored = store.get_sensor("temp-1")
    assert stored is not None
    assert stored.aggregation_interval is Granularity.monthly
    assert [band.name for band in stored.thresholds["temperature"]] == ["any"]


def test_update_settings_moves_bands_with_new_type(
    dashboard: DashboardService, store: MockSensorStore
) -> None:
    update = SensorSettingsUpdate(
        type="ph",
        thresholds=[ThresholdBandSchema(name="ok", min=6, max=8, color=ThresholdColor.green)],
    )

    updated = dashboard.update_settings("temperature", update)
    dashboard.ingest("ph", [ReadingIn(recorded_at=NOW, value=7.0)])
    card = dashboard.current("ph")

    assert updated.type == "ph"
    assert list(updated.thresholds) == ["ph"]
    assert card.status == "ok"
    assert card.color is ThresholdColor.green
    assert dashboard.readings_page("ph").items[0].status == "ok"


def test_overview_lists_registered_kinds_in_order(
    dashboard: DashboardService, store: MockSensorStore
) -> None:
    store.put_sensor(SensorRecord(id="ph-1", type="ph"))
    _add(store, (timedelta(minutes=5), 25.0))

    cards = dashboard.overview()

    assert [card.sensor_type for card in cards] == ["temperature", "ph"]
    assert cards[0].status == "normal"
    assert cards[1].value is None


def test_overview_is_empty_without_sensors() -> None:
    dashboard = DashboardService(store=MockSensorStore(), aggregator=Aggregator())

    assert dashboard.overview() == []


def test_update_settings_rejects_unknown_type(dashboard: DashboardService) -> None:
    with pytest.raises(ValueError):
        dashboard.update_settings("temperature", SensorSettingsUpdate(type="oxygen"))


def test_ingest_stores_readings(dashboard: DashboardService, store: MockSensorStore) -> None:
    response = dashboard.ingest("temperature", [ReadingIn(recorded_at=NOW, value=23.0)])

    assert response.sensor_id == "temp-1"
    assert response.accepted == 1
    assert store.latest_reading("temp-1").value == 23.0  # type: ignore[union-attr]


def test_register_sensor_rejects_unknown_type(dashboard: DashboardService) -> None:
    with pytest.raises(ValueError):
        dashboard.register_sensor(SensorRecord(id="x", type="oxygen"))


def test_unknown_or_missing_sensor_raises_key_error(dashboard: DashboardService) -> None:
    with pytest.raises(KeyError):
        dashboard.chart("oxygen")
    with pytest.raises(KeyError):
        dashboard.current("ph")
