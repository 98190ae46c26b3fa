"""Metadata comparator: provider identity and display units."""

from __future__ import annotations

from forecast_drift.diff.models import ChangeRecord, ChangeType, Granularity
from forecast_drift.diff.utils import read_field


def _provider_name(snapshot: object) -> str:
    forecast = read_field(read_field(snapshot, "provider"), "forecast")
    name = read_field(forecast, "name")
    return "Unknown" if name is None else str(name)


def _units(snapshot: object) -> tuple[str, str]:
    units = read_field(snapshot, "units")
    temperature = read_field(units, "display_temperature")
    wind = read_field(units, "display_wind")
    return (
        "celsius" if temperature is None else str(temperature),
        "kph" if wind is None else str(wind),
    )


def compare_meta(
    previous_snapshot: object,
    current_snapshot: object,
    compared_clock: str,
) -> list[ChangeRecord]:
    changes: list[ChangeRecord] = []

    previous_provider = _provider_name(previous_snapshot)
    current_provider = _provider_name(current_snapshot)
    if previous_provider != current_provider:
        changes.append(
            ChangeRecord(
                type=ChangeType.PROVIDER,
                granularity=Granularity.META,
                key="provider",
                label="Data provider",
                from_value=previous_provider,
                to_value=current_provider,
                delta=1.0,
                message=(
                    f"Data provider changed {previous_provider} -> {current_provider} "
                    f"since {compared_clock}."
                ),
            )
        )

    previous_pair = _units(previous_snapshot)
    current_pair = _units(current_snapshot)
    if previous_pair != current_pair:
        previous_units = "/".join(previous_pair)
        current_units = "/".join(current_pair)
        changes.append(
            ChangeRecord(
                type=ChangeType.UNITS,
                granularity=Granularity.META,
                key="units",
                label="Display units",
                from_value=previous_units,
                to_value=current_units,
                delta=1.0,
                message=f"Display units changed {previous_units} -> {current_units} since {compared_clock}.",
            )
        )

    return changes
