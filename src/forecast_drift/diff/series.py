"""Series comparator: align hourly/daily rows by key and report metric moves."""

from __future__ import annotations

from dataclasses import dataclass

from forecast_drift.common.timefmt import TimeFormat, format_day_label, format_relative_forecast_label
from forecast_drift.diff.models import ChangeRecord, ChangeType, Granularity
from forecast_drift.diff.utils import as_number, build_map_by_key, format_numeric, read_field

DEFAULT_THRESHOLD = 0.01


@dataclass(frozen=True)
class MetricSpec:
    """A numeric row field to watch.

    Attributes:
        field: row attribute holding the value
        type: change type emitted when it moves
        label: wording used in messages ("max temp")
        unit: unit suffix used in messages
        threshold: absolute change that must be exceeded
    """

    field: str
    type: ChangeType
    label: str
    unit: str
    threshold: float = DEFAULT_THRESHOLD


@dataclass(frozen=True)
class SeriesConfig:
    granularity: Granularity
    key_field: str
    metrics: tuple[MetricSpec, ...]
    weather_code_field: str = "weather_code"


HOURLY_CONFIG = SeriesConfig(
    granularity=Granularity.HOURLY,
    key_field="time",
    metrics=(
        MetricSpec("temperature_c", ChangeType.TEMPERATURE, "temperature", "C"),
        MetricSpec("precip_probability", ChangeType.PRECIP_PROBABILITY, "precip chance", "%"),
        MetricSpec("precip_mm", ChangeType.PRECIP_AMOUNT, "precip amount", "mm"),
        MetricSpec("wind_kph", ChangeType.WIND, "wind", "kph"),
    ),
)

DAILY_CONFIG = SeriesConfig(
    granularity=Granularity.DAILY,
    key_field="date",
    metrics=(
        MetricSpec("temp_max_c", ChangeType.TEMPERATURE, "max temp", "C"),
        MetricSpec("precip_probability_max", ChangeType.PRECIP_PROBABILITY, "max precip chance", "%"),
        MetricSpec("precip_mm", ChangeType.PRECIP_AMOUNT, "precip amount", "mm"),
        MetricSpec("wind_max_kph", ChangeType.WIND, "max wind", "kph"),
    ),
)

SERIES_CONFIGS = {
    Granularity.HOURLY: HOURLY_CONFIG,
    Granularity.DAILY: DAILY_CONFIG,
}


def numeric_changed(before: float | None, after: float | None, threshold: float = DEFAULT_THRESHOLD) -> bool:
    """A value appearing or disappearing counts as a change."""
    if before is None and after is None:
        return False
    if before is None or after is None:
        return True
    return abs(after - before) > threshold


def build_time_label(
    granularity: Granularity,
    key: object,
    now_reference: object,
    time_format: TimeFormat = "12h",
) -> str:
    if granularity is Granularity.HOURLY:
        return format_relative_forecast_label(key, now_reference, time_format)
    if granularity is Granularity.DAILY:
        return format_day_label(key)
    return str(key)


def compare_series(
    previous_rows: object,
    current_rows: object,
    config: SeriesConfig,
    *,
    now_reference: object,
    compared_clock: str,
    time_format: TimeFormat = "12h",
) -> list[ChangeRecord]:
    """Compare two row sequences by key and return one record per moved metric.

    Only keys present on both sides are compared: the forecast window shifts
    between fetches, so rows that appear or drop off at the edges are not
    changes.
    """
    previous_map = build_map_by_key(previous_rows, config.key_field)
    current_map = build_map_by_key(current_rows, config.key_field)
    changes: list[ChangeRecord] = []

    for key, current in current_map.items():
        if key not in previous_map:
            continue
        previous = previous_map[key]
        label = build_time_label(config.granularity, key, now_reference, time_format)

        for metric in config.metrics:
            before = as_number(read_field(previous, metric.field))
            after = as_number(read_field(current, metric.field))
            if not numeric_changed(before, after, metric.threshold):
                continue
            changes.append(
                ChangeRecord(
                    type=metric.type,
                    granularity=config.granularity,
                    key=key,
                    label=label,
                    from_value=before,
                    to_value=after,
                    delta=(after or 0.0) - (before or 0.0),
                    message=(
                        f"{label}: {metric.label} changed "
                        f"{format_numeric(before)}{metric.unit} -> {format_numeric(after)}{metric.unit} "
                        f"since {compared_clock}."
                    ),
                )
            )

        previous_code = read_field(previous, config.weather_code_field)
        current_code = read_field(current, config.weather_code_field)
        if previous_code != current_code:
            previous_label = read_field(previous, "condition_label")
            current_label = read_field(current, "condition_label")
            changes.append(
                ChangeRecord(
                    type=ChangeType.CONDITION,
                    granularity=config.granularity,
                    key=key,
                    label=label,
                    from_value=previous_label if previous_label is not None else f"Code {previous_code}",
                    to_value=current_label if current_label is not None else f"Code {current_code}",
                    delta=1.0,
                    message=(
                        f'{label}: condition changed '
                        f'"{previous_label if previous_label is not None else previous_code}" -> '
                        f'"{current_label if current_label is not None else current_code}" '
                        f"since {compared_clock}."
                    ),
                )
            )

    return changes
