"""Forecast diff data models."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from forecast_drift.common.types import JsonDict


class Granularity(Enum):
    """Which part of a snapshot a change came from."""

    HOURLY = "hourly"
    DAILY = "daily"
    ALERTS = "alerts"
    META = "meta"


class ChangeType(Enum):
    """Kind of change between two snapshots."""

    TEMPERATURE = "temperature"
    PRECIP_PROBABILITY = "precip_probability"
    PRECIP_AMOUNT = "precip_amount"
    WIND = "wind"
    CONDITION = "condition"
    ALERTS_ADDED = "alerts_added"
    ALERTS_REMOVED = "alerts_removed"
    ALERTS_UPDATED = "alerts_updated"
    PROVIDER = "provider"
    UNITS = "units"


NUMERIC_TYPES = frozenset({
    ChangeType.TEMPERATURE,
    ChangeType.PRECIP_PROBABILITY,
    ChangeType.PRECIP_AMOUNT,
    ChangeType.WIND,
})

SERIES_MODES = (Granularity.HOURLY, Granularity.DAILY)


@dataclass(frozen=True)
class ChangeRecord:
    """A single change between two snapshots.

    Attributes:
        type: what changed
        granularity: which comparator produced it
        key: aligning identity as the row carries it (row time/date, alert id,
            or a fixed meta key)
        label: human label for the key ("Today 3:00 PM", alert event, ...)
        from_value: value in the previous snapshot
        to_value: value in the current snapshot
        delta: signed magnitude (to - from for numeric types, +/-1 otherwise)
        message: full sentence describing the change
    """

    type: ChangeType
    granularity: Granularity
    key: object
    label: str
    from_value: float | str | None
    to_value: float | str | None
    delta: float
    message: str

    def to_dict(self) -> JsonDict:
        return {
            "type": self.type.value,
            "granularity": self.granularity.value,
            "key": self.key,
            "label": self.label,
            "from": self.from_value,
            "to": self.to_value,
            "delta": self.delta,
            "message": self.message,
        }


@dataclass(frozen=True)
class Confidence:
    """Stability assessment: a categorical label plus a 0-100 score.

    The label and score are independent signals; a handful of small changes
    can still be "High" while carrying a reduced score.
    """

    label: str
    score: float
    reason: str

    def to_dict(self) -> JsonDict:
        return {"label": self.label, "score": self.score, "reason": self.reason}


@dataclass(frozen=True)
class LargestChange:
    type: ChangeType
    label: str
    from_value: float | str | None
    to_value: float | str | None
    delta: float

    def to_dict(self) -> JsonDict:
        return {
            "type": self.type.value,
            "label": self.label,
            "from": self.from_value,
            "to": self.to_value,
            "delta": self.delta,
        }


@dataclass(frozen=True)
class DiffMetrics:
    """Honesty metrics for one comparison, scoped to the active mode's series."""

    total_compared_windows: int = 0
    changed_windows: int = 0
    unchanged_windows: int = 0
    change_rate: float = 0.0
    largest_change: LargestChange | None = None
    alerts_changes: int = 0
    meta_changes: int = 0
    categories: dict[str, int] = field(default_factory=dict)

    def to_dict(self) -> JsonDict:
        return {
            "total_compared_windows": self.total_compared_windows,
            "changed_windows": self.changed_windows,
            "unchanged_windows": self.unchanged_windows,
            "change_rate": self.change_rate,
            "largest_change": self.largest_change.to_dict() if self.largest_change else None,
            "alerts_changes": self.alerts_changes,
            "meta_changes": self.meta_changes,
            "categories": dict(self.categories),
        }


@dataclass(frozen=True)
class DiffResult:
    """Outcome of comparing a previous snapshot against the current one."""

    mode: Granularity
    has_baseline: bool
    has_changes: bool
    changes: tuple[ChangeRecord, ...]
    summary: tuple[ChangeRecord, ...]
    unchanged_message: str
    compared_to: str | None
    confidence: Confidence
    metrics: DiffMetrics

    def to_dict(self) -> JsonDict:
        return {
            "mode": self.mode.value,
            "has_baseline": self.has_baseline,
            "has_changes": self.has_changes,
            "changes": [c.to_dict() for c in self.changes],
            "summary": [c.to_dict() for c in self.summary],
            "unchanged_message": self.unchanged_message,
            "compared_to": self.compared_to,
            "confidence": self.confidence.to_dict(),
            "metrics": self.metrics.to_dict(),
        }
