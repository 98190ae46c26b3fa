"""Alerts comparator: align active alerts by id."""

from __future__ import annotations

from forecast_drift.diff.models import ChangeRecord, ChangeType, Granularity
from forecast_drift.diff.utils import build_map_by_key, read_field

# Fields whose change turns a carried-over alert into an update
_COMPARED_FIELDS = ("severity", "certainty", "urgency", "headline")


def _text(alert: object, name: str, default: str) -> str:
    value = read_field(alert, name)
    return default if value is None else str(value)


def compare_alerts(
    previous_alerts: object,
    current_alerts: object,
    compared_clock: str,
) -> list[ChangeRecord]:
    """Report alerts added, updated or cleared since the previous snapshot."""
    previous_map = build_map_by_key(previous_alerts, "id")
    current_map = build_map_by_key(current_alerts, "id")
    changes: list[ChangeRecord] = []

    for alert_id, current in current_map.items():
        event = _text(current, "event", "Unknown")
        label = _text(current, "event", "Alert")
        if alert_id not in previous_map:
            severity = _text(current, "severity", "Unknown")
            changes.append(
                ChangeRecord(
                    type=ChangeType.ALERTS_ADDED,
                    granularity=Granularity.ALERTS,
                    key=alert_id,
                    label=label,
                    from_value=0,
                    to_value=1,
                    delta=1.0,
                    message=f"Alert added: {event} ({severity}) since {compared_clock}.",
                )
            )
            continue

        previous = previous_map[alert_id]
        if any(read_field(previous, f) != read_field(current, f) for f in _COMPARED_FIELDS):
            changes.append(
                ChangeRecord(
                    type=ChangeType.ALERTS_UPDATED,
                    granularity=Granularity.ALERTS,
                    key=alert_id,
                    label=label,
                    from_value=_text(previous, "severity", "Unknown"),
                    to_value=_text(current, "severity", "Unknown"),
                    delta=1.0,
                    message=f"Alert updated: {event} changed severity/context since {compared_clock}.",
                )
            )

    for alert_id, previous in previous_map.items():
        if alert_id in current_map:
            continue
        changes.append(
            ChangeRecord(
                type=ChangeType.ALERTS_REMOVED,
                granularity=Granularity.ALERTS,
                key=alert_id,
                label=_text(previous, "event", "Alert"),
                from_value=1,
                to_value=0,
                delta=-1.0,
                message=f"Alert cleared: {_text(previous, 'event', 'Unknown')} since {compared_clock}.",
            )
        )

    return changes
