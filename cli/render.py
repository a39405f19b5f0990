from __future__ import annotations

from typing import Any, Dict, Iterable, List

import typer

_COLOR_STYLES = {
    "blue": typer.colors.BLUE,
    "green": typer.colors.GREEN,
    "yellow": typer.colors.YELLOW,
    "orange": typer.colors.BRIGHT_YELLOW,
    "red": typer.colors.RED,
}


def echo_heading(text: str) -> None:
    typer.secho(text, bold=True)


def echo_key_values(pairs: Iterable[tuple[str, Any]]) -> None:
    for key, value in pairs:
        typer.echo(f"{key}: {value if value is not None else '-'}")


def _status(label: str | None, color: str | None) -> str:
    if not label:
        return "-"
    fg = _COLOR_STYLES.get(color or "none")
    return typer.style(label, fg=fg) if fg else label


def render_sensors(sensors: List[Dict[str, Any]]) -> None:
    echo_heading("Sensors")
    if not sensors:
        typer.echo("No sensors registered.")
        return
    for sensor in sensors:
        typer.echo(
            f"  - {sensor.get('type')}: {sensor.get('id')} ({sensor.get('location') or '-'})"
        )


def render_current(payload: Dict[str, Any]) -> None:
    echo_heading(f"Current {payload.get('title')}")
    value = payload.get("value")
    if value is None:
        typer.echo("No readings available.")
        return
    echo_key_values(
        [
            ("value", f"{value:.1f} {payload.get('unit')}"),
            ("recorded_at", payload.get("recorded_at")),
            ("location", payload.get("location")),
            ("ideal_range", payload.get("ideal_range")),
        ]
    )
    typer.echo(f"status: {_status(payload.get('status_label'), payload.get('color'))}")
    typer.echo(f"band: {payload.get('band_description')}")


def render_chart(payload: Dict[str, Any]) -> None:
    echo_heading(payload.get("description") or "Chart")
    points = payload.get("points") or []
    if not points:
        typer.echo("Not enough data to display chart.")
        return
    width = max(len(point.get("label", "")) for point in points)
    for point in points:
        typer.echo(f"  {point.get('label', ''):<{width}}  {point.get('value')} {payload.get('unit')}")


def _page_items(pages: List[Any], current: int) -> str:
    rendered = []
    for item in pages:
        if item == "ellipsis":
            rendered.append("…")
        elif item == current:
            rendered.append(f"[{item}]")
        else:
            rendered.append(str(item))
    return " ".join(rendered)


def render_readings(payload: Dict[str, Any]) -> None:
    total = payload.get("total_items", 0)
    echo_heading(f"Readings ({total} total)")
    items = payload.get("items") or []
    if not items:
        typer.echo("No readings available.")
        return
    unit = payload.get("unit")
    for row in items:
        status = _status(row.get("status_label"), row.get("color"))
        typer.echo(f"  {row.get('recorded_at')}  {row.get('value'):.1f} {unit}  {status}")
    typer.echo()
    typer.echo(f"Pages: {_page_items(payload.get('pages') or [], payload.get('page', 1))}")
