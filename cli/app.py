from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

import typer

from cli.client import ApiClient
from cli.config import CLIConfig, load_config
from cli.render import render_chart, render_current, render_readings, render_sensors


@dataclass
class CLIState:
    config: CLIConfig
    client: ApiClient


app = typer.Typer(
    help="Utilities for querying the sensor dashboard service.",
    context_settings={"help_option_names": ["-h", "--help"]},
)


def _get_state(ctx: typer.Context) -> CLIState:
    state = ctx.obj
    if not isinstance(state, CLIState):
        raise typer.Exit(code=1)
    return state


@app.callback()
def main(
    ctx: typer.Context,
    base_url: Optional[str] = typer.Option(
        None,
        "--base-url",
        "-b",
        help="Dashboard API base URL (defaults to API_BASE_URL env or http://localhost:8000).",
    ),
    timeout: Optional[float] = typer.Option(
        None,
        "--timeout",
        help="Seconds to wait for each HTTP request.",
    ),
) -> None:
    """Entry point for the CLI."""
    config = load_config(base_url=base_url, request_timeout=timeout)
    client = ApiClient(config)
    ctx.obj = CLIState(config=config, client=client)
    ctx.call_on_close(client.close)


@app.command("sensors")
def sensors_command(ctx: typer.Context) -> None:
    """List registered sensors."""
    state = _get_state(ctx)
    render_sensors(state.client.list_sensors())


@app.command("dashboard")
def dashboard_command(ctx: typer.Context) -> None:
    """Show the current card for every registered sensor."""
    state = _get_state(ctx)
    cards = state.client.get_dashboard()
    if not cards:
        typer.echo("No sensors registered.")
        return
    for card in cards:
        render_current(card)


@app.command("current")
def current_command(
    ctx: typer.Context,
    sensor_type: str = typer.Argument(..., help="temperature, ph, turbidity or water_level."),
) -> None:
    """Show the latest reading and its threshold band."""
    state = _get_state(ctx)
    render_current(state.client.get_current(sensor_type))


@app.command("chart")
def chart_command(
    ctx: typer.Context,
    sensor_type: str = typer.Argument(..., help="temperature, ph, turbidity or water_level."),
    granularity: Optional[str] = typer.Option(
        None,
        "--granularity",
        "-g",
        help="hourly, daily, weekly, monthly or yearly (defaults to the sensor's interval).",
    ),
) -> None:
    """Print the averaged series for a sensor."""
    state = _get_state(ctx)
    render_chart(state.client.get_chart(sensor_type, granularity))


@app.command("readings")
def readings_command(
    ctx: typer.Context,
    sensor_type: str = typer.Argument(..., help="temperature, ph, turbidity or water_level."),
    page: int = typer.Option(1, "--page", "-p", help="Page number to display."),
) -> None:
    """Print one page of classified readings."""
    state = _get_state(ctx)
    render_readings(state.client.get_readings(sensor_type, page))


if __name__ == "__main__":
    app()
