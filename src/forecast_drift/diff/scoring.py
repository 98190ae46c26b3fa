"""Impact scoring, ranking and confidence for forecast changes."""

from __future__ import annotations

from collections.abc import Sequence

from forecast_drift.common.timefmt import timestamp_seconds
from forecast_drift.diff.models import ChangeRecord, ChangeType, Confidence
from forecast_drift.diff.utils import as_number

MAX_IMPACT = 4.0

# Divisor that maps one unit of impact to a metric's delta
_IMPACT_SCALE: dict[ChangeType, float] = {
    ChangeType.TEMPERATURE: 2.0,  # 2 C
    ChangeType.PRECIP_PROBABILITY: 15.0,  # 15 percentage points
    ChangeType.PRECIP_AMOUNT: 2.0,  # 2 mm
    ChangeType.WIND: 8.0,  # 8 kph
}

_FIXED_IMPACT: dict[ChangeType, float] = {
    ChangeType.CONDITION: 2.3,
    ChangeType.ALERTS_ADDED: 3.0,
    ChangeType.ALERTS_REMOVED: 3.0,
    ChangeType.ALERTS_UPDATED: 3.0,
    ChangeType.PROVIDER: 1.5,
    ChangeType.UNITS: 1.5,
}

# Confidence bands: (max total impact, max change count)
_HIGH_BAND = (5.0, 5)
_MEDIUM_BAND = (14.0, 18)


def change_impact(change: ChangeRecord) -> float:
    """Ranking weight for a change, capped at 4 for numeric moves."""
    scale = _IMPACT_SCALE.get(change.type)
    if scale is not None:
        delta = as_number(change.delta) or 0.0
        return min(MAX_IMPACT, abs(delta) / scale)
    return _FIXED_IMPACT.get(change.type, 1.0)


def sort_changes_by_impact(changes: Sequence[ChangeRecord]) -> list[ChangeRecord]:
    """Rank changes: sort by impact (descending), then re-sort by key time.

    Both sorts are stable, so the result is chronological by key with impact
    only ordering changes that share a timestamp. Keys that are not
    timestamps (alert ids, meta keys) sort as time 0, ahead of series rows.
    """
    by_impact = sorted(changes, key=change_impact, reverse=True)
    return sorted(by_impact, key=lambda change: timestamp_seconds(change.key))


def calculate_confidence(changes: Sequence[ChangeRecord], has_baseline: bool) -> Confidence:
    """Classify forecast stability from the full set of changes.

    Without a baseline the answer is "Unknown". With no changes it is "High"
    at 100. Otherwise total impact and change count pick the label, and the
    score is ``100 - impact*8 - count*2`` floored at 0 whatever the label.
    """
    if not has_baseline:
        return Confidence(
            label="Unknown",
            score=0,
            reason="Need at least two snapshots to assess stability.",
        )
    if not changes:
        return Confidence(
            label="High",
            score=100,
            reason="Forecast has remained stable since the previous snapshot.",
        )

    impact = sum(change_impact(change) for change in changes)
    count = len(changes)
    weighted_score = max(0.0, 100 - impact * 8 - count * 2)

    if impact < _HIGH_BAND[0] and count <= _HIGH_BAND[1]:
        return Confidence(
            label="High",
            score=weighted_score,
            reason="Only minor forecast movement since the previous snapshot.",
        )
    if impact < _MEDIUM_BAND[0] and count <= _MEDIUM_BAND[1]:
        return Confidence(
            label="Medium",
            score=weighted_score,
            reason="Moderate forecast movement since the previous snapshot.",
        )
    return Confidence(
        label="Low",
        score=weighted_score,
        reason="Large or frequent forecast revisions detected.",
    )
