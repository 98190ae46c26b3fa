"""Forecast diff aggregator.

Wires together: series comparison (hourly or daily) -> alerts -> metadata ->
ranking -> metrics -> confidence. Everything here is a pure function of the
two snapshots and the mode; nothing is fetched, stored or cached.
"""

from __future__ import annotations

import logging
from collections import Counter
from collections.abc import Sequence

from forecast_drift.common.timefmt import TimeFormat, format_clock, in_utc_offset
from forecast_drift.diff.alerts import compare_alerts
from forecast_drift.diff.meta import compare_meta
from forecast_drift.diff.models import (
    NUMERIC_TYPES,
    SERIES_MODES,
    ChangeRecord,
    DiffMetrics,
    DiffResult,
    Granularity,
    LargestChange,
)
from forecast_drift.diff.scoring import calculate_confidence, sort_changes_by_impact
from forecast_drift.diff.series import SERIES_CONFIGS, compare_series
from forecast_drift.diff.utils import as_number, build_map_by_key, read_field

logger = logging.getLogger(__name__)

SUMMARY_SIZE = 12


def resolve_mode(mode: Granularity | str) -> Granularity:
    """Accept "hourly"/"daily" or the matching Granularity."""
    try:
        granularity = mode if isinstance(mode, Granularity) else Granularity(mode)
    except ValueError:
        granularity = None
    if granularity not in SERIES_MODES:
        raise ValueError(f"Unknown comparison mode: {mode!r} (expected 'hourly' or 'daily')")
    return granularity


def _series_name(mode: Granularity) -> str:
    return "hourly" if mode is Granularity.HOURLY else "daily"


def build_metrics(
    previous_model: object,
    current_model: object,
    mode: Granularity,
    changes: Sequence[ChangeRecord],
) -> DiffMetrics:
    """Summarize how much of the compared window moved.

    Window counts and the largest change only look at the active mode's
    series; alert/meta counts and categories cover every change.
    """
    config = SERIES_CONFIGS[mode]
    series = _series_name(mode)
    previous_map = build_map_by_key(read_field(previous_model, series), config.key_field)
    current_map = build_map_by_key(read_field(current_model, series), config.key_field)
    compared_keys = [key for key in current_map if key in previous_map]
    compared_set = set(compared_keys)

    changed_keys = {
        change.key
        for change in changes
        if change.granularity is mode and change.key in compared_set
    }

    numeric = [
        change
        for change in changes
        if change.granularity is mode
        and change.type in NUMERIC_TYPES
        and as_number(change.delta) is not None
    ]
    largest = max(numeric, key=lambda change: abs(change.delta), default=None)

    total = len(compared_keys)
    changed = len(changed_keys)
    return DiffMetrics(
        total_compared_windows=total,
        changed_windows=changed,
        unchanged_windows=max(0, total - changed),
        change_rate=changed / total if total > 0 else 0.0,
        largest_change=(
            LargestChange(
                type=largest.type,
                label=largest.label,
                from_value=largest.from_value,
                to_value=largest.to_value,
                delta=largest.delta,
            )
            if largest is not None
            else None
        ),
        alerts_changes=sum(1 for c in changes if c.granularity is Granularity.ALERTS),
        meta_changes=sum(1 for c in changes if c.granularity is Granularity.META),
        categories=dict(Counter(change.type.value for change in changes)),
    )


def empty_diff_result(mode: Granularity, message: str) -> DiffResult:
    """A no-baseline result: nothing compared, confidence "Unknown"."""
    return DiffResult(
        mode=mode,
        has_baseline=False,
        has_changes=False,
        changes=(),
        summary=(),
        unchanged_message=message,
        compared_to=None,
        confidence=calculate_confidence([], has_baseline=False),
        metrics=DiffMetrics(),
    )


def build_forecast_diff(
    previous_snapshot: object | None,
    current_snapshot: object | None,
    mode: Granularity | str = Granularity.HOURLY,
    *,
    time_format: TimeFormat = "12h",
) -> DiffResult:
    """Compare two snapshots of the same location.

    Args:
        previous_snapshot: older snapshot, or None when there is no history yet
        current_snapshot: newest snapshot, or None when nothing is loaded
        mode: which series to compare, "hourly" or "daily"
        time_format: clock style for labels and messages

    Returns:
        DiffResult with ranked changes, summary, metrics and confidence.

    Raises:
        ValueError: if mode is not "hourly" or "daily"
    """
    mode = resolve_mode(mode)
    if current_snapshot is None:
        return empty_diff_result(mode, "No current snapshot loaded.")
    if previous_snapshot is None:
        return empty_diff_result(mode, "No previous snapshot to compare yet.")

    # Row times are naive local wall-clock; read both fetch times on that clock
    utc_offset = as_number(read_field(read_field(current_snapshot, "source_meta"), "utc_offset_seconds"))
    compared_to = read_field(previous_snapshot, "fetched_at")
    compared_clock = format_clock(in_utc_offset(compared_to, utc_offset), time_format)
    now_reference = in_utc_offset(read_field(current_snapshot, "fetched_at"), utc_offset)

    previous_model = read_field(previous_snapshot, "normalized")
    current_model = read_field(current_snapshot, "normalized")
    series = _series_name(mode)

    changes: list[ChangeRecord] = []
    changes.extend(
        compare_series(
            read_field(previous_model, series),
            read_field(current_model, series),
            SERIES_CONFIGS[mode],
            now_reference=now_reference,
            compared_clock=compared_clock,
            time_format=time_format,
        )
    )
    changes.extend(
        compare_alerts(
            read_field(previous_model, "alerts"),
            read_field(current_model, "alerts"),
            compared_clock,
        )
    )
    changes.extend(compare_meta(previous_snapshot, current_snapshot, compared_clock))

    ranked = sort_changes_by_impact(changes)
    has_changes = bool(changes)
    metrics = build_metrics(previous_model, current_model, mode, ranked)
    confidence = calculate_confidence(changes, has_baseline=True)

    logger.debug(
        "Compared %s snapshots: %d change(s), %d/%d windows changed, confidence %s (%.0f)",
        mode.value,
        len(changes),
        metrics.changed_windows,
        metrics.total_compared_windows,
        confidence.label,
        confidence.score,
    )

    return DiffResult(
        mode=mode,
        has_baseline=True,
        has_changes=has_changes,
        changes=tuple(ranked),
        summary=tuple(ranked[:SUMMARY_SIZE]),
        unchanged_message="" if has_changes else f"No forecast changes since {compared_clock}.",
        compared_to=None if compared_to is None else str(compared_to),
        confidence=confidence,
        metrics=metrics,
    )
