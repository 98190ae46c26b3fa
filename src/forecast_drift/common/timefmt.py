"""Timestamp parsing and human-readable clock/day labels.

Timestamps are rendered in their own offset: aware values keep the offset
they carry, naive values (Open-Meteo local times) are shown as wall-clock.
That keeps labels deterministic regardless of the host timezone.
"""

from __future__ import annotations

from datetime import date, datetime, time, timedelta, timezone
from typing import Literal

TimeFormat = Literal["12h", "24h"]


def parse_timestamp(value: object) -> datetime | None:
    """Parse an ISO-8601 string, epoch (seconds or milliseconds), date or datetime.

    Returns None for anything that cannot be interpreted as a point in time.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return datetime.combine(value, time.min)
    if isinstance(value, (int, float)):
        seconds = value / 1000 if abs(value) > 1e11 else value
        try:
            return datetime.fromtimestamp(seconds, tz=timezone.utc)
        except (OverflowError, OSError, ValueError):
            return None
    if isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        try:
            return datetime.fromisoformat(text)
        except ValueError:
            return None
    return None


def timestamp_seconds(value: object) -> float:
    """Epoch seconds for a timestamp-like value, 0.0 if unparseable.

    Naive values are read as UTC.
    """
    parsed = parse_timestamp(value)
    if parsed is None:
        return 0.0
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.timestamp()


def in_utc_offset(value: object, utc_offset_seconds: float | None) -> object:
    """Move an aware timestamp onto a fixed UTC offset.

    Naive, unparseable and offset-less input passes through unchanged.
    """
    if utc_offset_seconds is None or abs(utc_offset_seconds) >= 86400:
        return value
    parsed = parse_timestamp(value)
    if parsed is None or parsed.tzinfo is None:
        return value
    return parsed.astimezone(timezone(timedelta(seconds=utc_offset_seconds)))


def _clock(dt: datetime, time_format: TimeFormat) -> str:
    if time_format == "12h":
        hour = dt.hour % 12 or 12
        suffix = "AM" if dt.hour < 12 else "PM"
        return f"{hour}:{dt.minute:02d} {suffix}"
    return f"{dt.hour:02d}:{dt.minute:02d}"


def format_clock(value: object, time_format: TimeFormat = "24h") -> str:
    """``"9:12 AM"`` (12h) or ``"09:12"`` (24h); ``"Unknown"`` if unparseable."""
    dt = parse_timestamp(value)
    if dt is None:
        return "Unknown"
    return _clock(dt, time_format)


def format_date_time(value: object, time_format: TimeFormat = "24h") -> str:
    """``"Feb 20, 9:12 AM"``; ``"Unknown"`` if unparseable."""
    dt = parse_timestamp(value)
    if dt is None:
        return "Unknown"
    return f"{dt:%b} {dt.day}, {_clock(dt, time_format)}"


def format_day_label(value: object) -> str:
    """``"Sun, Feb 22"``; ``"Unknown day"`` if unparseable."""
    dt = parse_timestamp(value)
    if dt is None:
        return "Unknown day"
    return f"{dt:%a}, {dt:%b} {dt.day}"


def format_relative_forecast_label(
    value: object,
    now_value: object = None,
    time_format: TimeFormat = "24h",
) -> str:
    """Label a forecast time relative to *now_value*.

    ``"Today 3:00 PM"``, ``"Tomorrow 3:00 PM"``, ``"Yesterday 3:00 PM"`` or
    ``"Sat 3:00 PM"`` further out. Falls back to ``"Forecast window"``.

    Days are compared on the target's wall clock. An aware *now* is moved
    into an aware target's offset; against a naive target it is read in its
    own offset, which snapshots stamp with the forecast location's offset.
    """
    target = parse_timestamp(value)
    now = parse_timestamp(now_value) if now_value is not None else datetime.now(timezone.utc)
    if target is None or now is None:
        return "Forecast window"

    if now.tzinfo is not None and target.tzinfo is not None:
        now = now.astimezone(target.tzinfo)
    day_delta = (target.date() - now.date()).days
    clock = _clock(target, time_format)
    if day_delta == 0:
        return f"Today {clock}"
    if day_delta == 1:
        return f"Tomorrow {clock}"
    if day_delta == -1:
        return f"Yesterday {clock}"
    return f"{target:%a} {clock}"
