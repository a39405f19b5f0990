"""Threshold band matching and classification."""

from __future__ import annotations

import logging
from typing import Any, Mapping, Optional, Sequence

from models.records import ThresholdBand

logger = logging.getLogger(__name__)

UNKNOWN_STATUS = "Unknown"


def match_band(
    value: float, bands: Optional[Sequence[ThresholdBand]]
) -> Optional[ThresholdBand]:
    """Return the first band containing ``value``, or ``None``.

    Bands are checked in configuration order, so an earlier overlapping band
    claims a value even when a later band would be a tighter fit.
    """
    if not bands:
        return None
    for band in bands:
        if band.contains(value):
            return band
    return None


def classify(value: float, bands: Optional[Sequence[ThresholdBand]]) -> str:
    """Return the name of the matching band, falling back to the nearest one.

    When no band contains ``value`` the band whose center lies closest wins;
    ties keep the earliest band. Only an empty band list yields ``"Unknown"``.
    """
    if not bands:
        return UNKNOWN_STATUS

    matched = match_band(value, bands)
    if matched is not None:
        return matched.name

    closest = bands[0]
    closest_distance = abs(value - closest.center)
    for band in bands[1:]:
        distance = abs(value - band.center)
        if distance < closest_distance:
            closest = band
            closest_distance = distance

    logger.debug(
        "No band contains value; using nearest band %r.", closest.name, extra={"value": value}
    )
    return closest.name


def status_label(status: str) -> str:
    return status[:1].upper() + status[1:]


def _format_bound(bound: float) -> str:
    return f"{bound:g}"


def describe_band(band: Optional[ThresholdBand], unit: str, status: str = "") -> str:
    """Human readable summary of a band's range, used in tooltips."""
    name = band.name if band is not None else status
    if band is None or (band.min is None and band.max is None):
        return f"Status: {name}"
    if band.min is not None and band.max is not None:
        return f"{name}: {_format_bound(band.min)}–{_format_bound(band.max)} {unit}"
    if band.min is not None:
        return f"{name}: ≥ {_format_bound(band.min)} {unit}"
    return f"{name}: ≤ {_format_bound(band.max)} {unit}"  # type: ignore[arg-type]


def bands_for(thresholds: Optional[Mapping[str, Any]], sensor_kind: str) -> list[ThresholdBand]:
    """Pick the ordered band list configured for ``sensor_kind``.

    Only list-shaped entries are honored; anything else under the key is an
    older fixed-level layout and counts as unconfigured.
    """
    if not thresholds:
        return []
    entry = thresholds.get(sensor_kind)
    if entry is None:
        return []
    if not isinstance(entry, (list, tuple)):
        logger.warning(
            "Ignoring non-list threshold configuration.", extra={"sensor_type": sensor_kind}
        )
        return []
    return list(entry)
