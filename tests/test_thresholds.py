"""Unit tests for threshold band matching and classification."""

from __future__ import annotations

import pytest

from models.records import ThresholdBand, ThresholdColor
from services.thresholds import (
    bands_for,
    classify,
    describe_band,
    match_band,
    status_label,
)

TEMPERATURE_BANDS = [
    ThresholdBand(name="cold", max=18, color=ThresholdColor.blue),
    ThresholdBand(name="normal", min=18, max=27, color=ThresholdColor.green),
    ThresholdBand(name="hot", min=27, color=ThresholdColor.red),
]


@pytest.mark.parametrize(
    ("value", "expected"),
    [(20, "normal"), (30, "hot"), (-5, "cold")],
)
def test_match_band_picks_containing_band(value: float, expected: str) -> None:
    band = match_band(value, TEMPERATURE_BANDS)

    assert band is not None
    assert band.name == expected


def test_match_band_shared_boundary_goes_to_earlier_band() -> None:
    assert match_band(18, TEMPERATURE_BANDS).name == "cold"  # type: ignore[union-attr]
    assert match_band(27, TEMPERATURE_BANDS).name == "normal"  # type: ignore[union-attr]


def test_match_band_prefers_first_match_over_tighter_fit() -> None:
    bands = [
        ThresholdBand(name="wide", min=0, max=100),
        ThresholdBand(name="narrow", min=40, max=60),
    ]

    assert match_band(50, bands).name == "wide"  # type: ignore[union-attr]


def test_match_band_returns_none_without_match_or_bands() -> None:
    gapped = [ThresholdBand(name="low", max=5), ThresholdBand(name="high", min=10)]

    assert match_band(7, gapped) is None
    assert match_band(7, []) is None
    assert match_band(7, None) is None


def test_open_band_matches_everything() -> None:
    bands = [ThresholdBand(name="anything")]

    assert match_band(-1e9, bands).name == "anything"  # type: ignore[union-attr]
    assert classify(42, bands) == "anything"


def test_classify_uses_exact_match_first() -> None:
    assert classify(20, TEMPERATURE_BANDS) == "normal"


def test_classify_empty_bands_is_unknown() -> None:
    assert classify(20, []) == "Unknown"
    assert classify(20, None) == "Unknown"


def test_classify_falls_back_to_nearest_center() -> None:
    bands = [
        ThresholdBand(name="low", min=0, max=4),  # center 2
        ThresholdBand(name="mid", min=10, max=14),  # center 12
        ThresholdBand(name="high", min=20, max=30),  # center 25
    ]

    assert classify(8, bands) == "mid"
    assert classify(5, bands) == "low"
    assert classify(19, bands) == "high"


def test_classify_tie_keeps_first_band() -> None:
    bands = [
        ThresholdBand(name="left", min=0, max=2),  # center 1
        ThresholdBand(name="right", min=8, max=10),  # center 9
    ]

    assert classify(5, bands) == "left"


def test_classify_single_bound_reference_points() -> None:
    bands = [
        ThresholdBand(name="below", max=-10),
        ThresholdBand(name="above", min=50),
        ThresholdBand(name="point", min=5, max=5),
    ]

    # None of these contain 20; "point" sits at 5, "above" at 50.
    assert classify(20, bands) == "point"
    assert classify(40, bands) == "above"


def test_classify_never_unknown_with_bands() -> None:
    bands = [ThresholdBand(name="only", min=100, max=200)]

    for value in (-1000.0, 0.0, 99.99, 150.0, 1e6):
        assert classify(value, bands) == "only"


def test_status_label_capitalizes_first_letter() -> None:
    assert status_label("normal") == "Normal"
    assert status_label("tooHot") == "TooHot"
    assert status_label("") == ""


def test_describe_band_variants() -> None:
    cold, normal, hot = TEMPERATURE_BANDS

    assert describe_band(normal, "°C") == "normal: 18–27 °C"
    assert describe_band(hot, "°C") == "hot: ≥ 27 °C"
    assert describe_band(cold, "°C") == "cold: ≤ 18 °C"
    assert describe_band(ThresholdBand(name="open"), "cm") == "Status: open"
    assert describe_band(None, "cm", status="Unknown") == "Status: Unknown"


def test_bands_for_ignores_missing_and_legacy_entries() -> None:
    thresholds = {
        "temperature": TEMPERATURE_BANDS,
        "ph": {"cold": {"max": 6}},
    }

    assert bands_for(thresholds, "temperature") == TEMPERATURE_BANDS
    assert bands_for(thresholds, "ph") == []
    assert bands_for(thresholds, "turbidity") == []
    assert bands_for(None, "temperature") == []
