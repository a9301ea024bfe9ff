from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional

import typer

from cli.client import ApiClient
from cli.config import CLIConfig, load_config
from cli.ingest import read_measurements_csv
from cli.render import echo_heading, render_groups, render_stats


@dataclass
class CLIState:
    config: CLIConfig
    client: ApiClient


app = typer.Typer(
    help="Utilities for querying and feeding the sensor network measurements service.",
    context_settings={"help_option_names": ["-h", "--help"]},
)

_SENSOR_OPTION = typer.Option(
    None,
    "--sensor",
    "-s",
    help="Sensor MAC address to include; repeat for several (defaults to all).",
)
_START_OPTION = typer.Option(None, "--start", help="Window start, ISO-8601 date-time.")
_END_OPTION = typer.Option(None, "--end", help="Window end, ISO-8601 date-time.")


def _get_state(ctx: typer.Context) -> CLIState:
    state = ctx.obj
    if not isinstance(state, CLIState):
        typer.secho("CLI state is uninitialized.", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1)
    return state


@app.callback()
def main(
    ctx: typer.Context,
    base_url: Optional[str] = typer.Option(
        None,
        "--base-url",
        "-b",
        help="Service base URL (defaults to API_BASE_URL env or http://localhost:8000).",
    ),
    timeout: Optional[float] = typer.Option(
        None,
        "--timeout",
        help="Seconds to wait for each HTTP request.",
    ),
) -> None:
    """Entry point for the CLI."""
    config = load_config(base_url=base_url, timeout=timeout)
    client = ApiClient(config)
    ctx.obj = CLIState(config=config, client=client)
    ctx.call_on_close(client.close)


@app.command("measurements")
def measurements_command(
    ctx: typer.Context,
    network: str = typer.Argument(..., help="Network code."),
    sensors: Optional[List[str]] = _SENSOR_OPTION,
    start: Optional[str] = _START_OPTION,
    end: Optional[str] = _END_OPTION,
) -> None:
    """Show readings and statistics for the sensors of a network."""
    state = _get_state(ctx)
    groups = state.client.get_network_measurements(network, sensors or (), start, end)
    render_groups(groups)


@app.command("stats")
def stats_command(
    ctx: typer.Context,
    network: str = typer.Argument(..., help="Network code."),
    sensors: Optional[List[str]] = _SENSOR_OPTION,
    start: Optional[str] = _START_OPTION,
    end: Optional[str] = _END_OPTION,
) -> None:
    """Show statistics for the sensors of a network."""
    state = _get_state(ctx)
    groups = state.client.get_network_stats(network, sensors or (), start, end)
    render_groups(groups)


@app.command("outliers")
def outliers_command(
    ctx: typer.Context,
    network: str = typer.Argument(..., help="Network code."),
    sensors: Optional[List[str]] = _SENSOR_OPTION,
    start: Optional[str] = _START_OPTION,
    end: Optional[str] = _END_OPTION,
) -> None:
    """Show only the outlier readings for the sensors of a network."""
    state = _get_state(ctx)
    groups = state.client.get_network_outliers(network, sensors or (), start, end)
    render_groups(groups)


@app.command("sensor-stats")
def sensor_stats_command(
    ctx: typer.Context,
    network: str = typer.Argument(..., help="Network code."),
    gateway: str = typer.Argument(..., help="Gateway MAC address."),
    sensor: str = typer.Argument(..., help="Sensor MAC address."),
    start: Optional[str] = _START_OPTION,
    end: Optional[str] = _END_OPTION,
) -> None:
    """Show statistics for a single sensor."""
    state = _get_state(ctx)
    stats = state.client.get_sensor_stats(network, gateway, sensor, start, end)
    echo_heading(f"Sensor {sensor}")
    render_stats(stats)


@app.command("ingest")
def ingest_command(
    ctx: typer.Context,
    network: str = typer.Argument(..., help="Network code."),
    gateway: str = typer.Argument(..., help="Gateway MAC address."),
    sensor: str = typer.Argument(..., help="Sensor MAC address."),
    file: Path = typer.Argument(..., exists=True, dir_okay=False, readable=True, help="Path to CSV file."),
) -> None:
    """Upload the readings of a ``createdAt,value`` CSV file for a sensor."""
    state = _get_state(ctx)
    try:
        batch = read_measurements_csv(file)
    except ValueError as exc:
        raise typer.BadParameter(str(exc)) from exc

    for error in batch.errors:
        typer.secho(f"Skipping {error}", fg=typer.colors.YELLOW, err=True)
    if not batch.measurements:
        typer.secho("No valid measurements to upload.", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1)

    state.client.upload_measurements(network, gateway, sensor, batch.measurements)
    typer.secho(
        f"Stored {len(batch.measurements)} measurements for sensor {sensor}.",
        fg=typer.colors.GREEN,
    )
