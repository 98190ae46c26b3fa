"""Shared type aliases and small pure helpers."""

from __future__ import annotations

import re
from typing import TypeAlias

# Latitude/longitude pair
LatLon: TypeAlias = tuple[float, float]

# JSON-like dict
JsonDict: TypeAlias = dict[str, object]

_WHITESPACE = re.compile(r"\s+")


def clamp(value: float, low: float, high: float) -> float:
    """Clamp value into [low, high]."""
    return min(high, max(low, value))


def round_coordinate(value: float) -> float:
    """Round a coordinate to 4 decimal places (~11 m)."""
    return round(float(value) * 10000) / 10000


def location_id_from_lat_lon(lat: float, lon: float) -> str:
    """Stable location identifier, e.g. ``"40.7128,-74.006"``."""
    return f"{_compact(round_coordinate(lat))},{_compact(round_coordinate(lon))}"


def _compact(value: float) -> str:
    # 40.0 -> "40", 40.5 -> "40.5"
    return f"{value:g}" if value == int(value) else repr(value)


def sanitize_text(text: object) -> str:
    """Collapse whitespace runs and strip; None becomes an empty string."""
    if text is None:
        return ""
    return _WHITESPACE.sub(" ", str(text)).strip()


def celsius_to_fahrenheit(c: float) -> float:
    """Convert Celsius to Fahrenheit."""
    return c * 9.0 / 5.0 + 32.0


def kph_to_mph(kph: float) -> float:
    """Convert km/h to mph."""
    return kph * 0.621371
