from __future__ import annotations

from typing import Any, Dict, Iterable, List

import typer

_STATS_KEYS = ("startDate", "endDate", "mean", "variance", "upperThreshold", "lowerThreshold")


def echo_heading(text: str) -> None:
    typer.secho(text, bold=True)


def echo_key_values(pairs: Iterable[tuple[str, Any]]) -> None:
    for key, value in pairs:
        typer.echo(f"{key}: {value}")


def render_stats(stats: Dict[str, Any] | None) -> None:
    if not stats:
        typer.echo("No statistics available.")
        return
    echo_key_values((key, stats[key]) for key in _STATS_KEYS if key in stats)


def render_group(group: Dict[str, Any]) -> None:
    echo_heading(f"Sensor {group.get('sensorMacAddress')}")
    render_stats(group.get("stats"))

    measurements = group.get("measurements")
    if measurements is None:
        return
    typer.echo(f"measurements: {len(measurements)}")
    for measurement in measurements:
        flag = " (outlier)" if measurement.get("isOutlier") else ""
        typer.echo(f"  - {measurement.get('createdAt')}: {measurement.get('value')}{flag}")


def render_groups(groups: List[Dict[str, Any]]) -> None:
    if not groups:
        typer.echo("No sensors matched the query.")
        return
    for index, group in enumerate(groups):
        if index:
            typer.echo()
        render_group(group)
