"""Diff output formatters: Rich report and JSON."""

from __future__ import annotations

import json

from rich.console import Console
from rich.table import Table

from forecast_drift.common.display import (
    format_millimeters,
    format_percent,
    format_temperature,
    format_wind,
)
from forecast_drift.common.timefmt import TimeFormat, format_clock, format_date_time
from forecast_drift.diff.models import ChangeRecord, ChangeType, DiffMetrics, DiffResult

_TAGS: dict[ChangeType, str] = {
    ChangeType.TEMPERATURE: "Temperature",
    ChangeType.PRECIP_PROBABILITY: "Precip chance",
    ChangeType.PRECIP_AMOUNT: "Precip amount",
    ChangeType.WIND: "Wind",
    ChangeType.CONDITION: "Condition",
    ChangeType.ALERTS_ADDED: "Alert added",
    ChangeType.ALERTS_REMOVED: "Alert removed",
    ChangeType.ALERTS_UPDATED: "Alert updated",
    ChangeType.PROVIDER: "Provider",
    ChangeType.UNITS: "Units",
}

_CONFIDENCE_COLORS = {"High": "green", "Medium": "yellow", "Low": "red"}


def change_tag(change_type: ChangeType) -> str:
    return _TAGS.get(change_type, "Change")


def _value_pair(
    change_type: ChangeType,
    from_value: object,
    to_value: object,
    temperature_unit: str,
    wind_unit: str,
) -> tuple[str, str] | None:
    if change_type is ChangeType.TEMPERATURE:
        return (
            format_temperature(from_value, temperature_unit),
            format_temperature(to_value, temperature_unit),
        )
    if change_type is ChangeType.WIND:
        return format_wind(from_value, wind_unit), format_wind(to_value, wind_unit)
    if change_type is ChangeType.PRECIP_PROBABILITY:
        return format_percent(from_value), format_percent(to_value)
    if change_type is ChangeType.PRECIP_AMOUNT:
        return format_millimeters(from_value), format_millimeters(to_value)
    return None


def format_change_message(
    change: ChangeRecord,
    compared_to: str | None,
    *,
    temperature_unit: str = "celsius",
    wind_unit: str = "kph",
    time_format: TimeFormat = "24h",
) -> str:
    """Re-render a change sentence in the user's display units.

    Alert and metadata changes keep the engine's message.
    """
    since = format_clock(compared_to, time_format)
    pair = _value_pair(change.type, change.from_value, change.to_value, temperature_unit, wind_unit)
    if pair is not None:
        metric = change_tag(change.type).lower()
        return f"{change.label}: {metric} changed {pair[0]} -> {pair[1]} since {since}."
    if change.type is ChangeType.CONDITION:
        return (
            f'{change.label}: condition changed "{change.from_value}" -> "{change.to_value}" '
            f"since {since}."
        )
    return change.message


def largest_change_label(
    metrics: DiffMetrics,
    *,
    temperature_unit: str = "celsius",
    wind_unit: str = "kph",
) -> str:
    largest = metrics.largest_change
    if largest is None:
        return "No major shift"
    pair = _value_pair(largest.type, largest.from_value, largest.to_value, temperature_unit, wind_unit)
    if pair is None:
        return "Shift detected"
    return f"{pair[0]} -> {pair[1]}"


def format_table(
    diff: DiffResult,
    console: Console | None = None,
    *,
    temperature_unit: str = "celsius",
    wind_unit: str = "kph",
    time_format: TimeFormat = "24h",
    snapshot_count: int | None = None,
) -> None:
    """Print the stability report and the ranked change summary."""
    if console is None:
        console = Console()

    if not diff.has_baseline:
        console.print(f"[yellow]{diff.unchanged_message}[/yellow]")
        console.print("[dim]Fetch again later to compare against a previous snapshot.[/dim]")
        return

    confidence = diff.confidence
    metrics = diff.metrics
    color = _CONFIDENCE_COLORS.get(confidence.label, "white")
    console.print(
        f"[bold]Stability:[/bold] [{color}]{confidence.label}[/{color}] "
        f"({max(0, round(confidence.score))}/100) - {confidence.reason}"
    )
    console.print(
        f"  Windows changed: {metrics.changed_windows}/{metrics.total_compared_windows} "
        f"({metrics.change_rate:.0%})  unchanged: {metrics.unchanged_windows}"
    )
    console.print(
        "  Largest change: "
        + largest_change_label(metrics, temperature_unit=temperature_unit, wind_unit=wind_unit)
    )
    console.print(f"  Alert changes: {metrics.alerts_changes}  Metadata changes: {metrics.meta_changes}")
    if snapshot_count is not None:
        console.print(f"  Snapshots kept: {snapshot_count}")

    if not diff.has_changes:
        console.print(f"\n[green]{diff.unchanged_message}[/green]")
        return

    table = Table(
        title=f"{diff.mode.value.capitalize()} changes since "
        f"{format_date_time(diff.compared_to, time_format)}",
        show_lines=True,
    )
    table.add_column("Change", style="bold", width=14)
    table.add_column("When", width=18)
    table.add_column("Detail", no_wrap=False)

    for change in diff.summary:
        table.add_row(
            change_tag(change.type),
            change.label,
            format_change_message(
                change,
                diff.compared_to,
                temperature_unit=temperature_unit,
                wind_unit=wind_unit,
                time_format=time_format,
            ),
        )

    console.print(table)
    hidden = len(diff.changes) - len(diff.summary)
    suffix = f", {hidden} more not shown" if hidden > 0 else ""
    console.print(f"\n[dim]{len(diff.changes)} change(s) total{suffix}[/dim]")


def format_json(diff: DiffResult) -> str:
    """Format a diff result as a JSON string."""
    return json.dumps(diff.to_dict(), indent=2, ensure_ascii=False, default=str)
