"""WMO weather interpretation codes (as used by Open-Meteo)."""

from __future__ import annotations

from typing import NamedTuple


class ConditionInfo(NamedTuple):
    label: str
    icon: str


UNKNOWN_CONDITION = ConditionInfo("Unknown", "❔")

_CODES: dict[int, ConditionInfo] = {
    0: ConditionInfo("Clear sky", "☀️"),
    1: ConditionInfo("Mainly clear", "\U0001f324️"),
    2: ConditionInfo("Partly cloudy", "⛅"),
    3: ConditionInfo("Overcast", "☁️"),
    45: ConditionInfo("Fog", "\U0001f32b️"),
    48: ConditionInfo("Depositing rime fog", "\U0001f32b️"),
    51: ConditionInfo("Light drizzle", "\U0001f326️"),
    53: ConditionInfo("Moderate drizzle", "\U0001f326️"),
    55: ConditionInfo("Dense drizzle", "\U0001f327️"),
    56: ConditionInfo("Light freezing drizzle", "\U0001f327️"),
    57: ConditionInfo("Dense freezing drizzle", "\U0001f327️"),
    61: ConditionInfo("Slight rain", "\U0001f327️"),
    63: ConditionInfo("Moderate rain", "\U0001f327️"),
    65: ConditionInfo("Heavy rain", "\U0001f327️"),
    66: ConditionInfo("Light freezing rain", "\U0001f327️"),
    67: ConditionInfo("Heavy freezing rain", "\U0001f327️"),
    71: ConditionInfo("Slight snow fall", "\U0001f328️"),
    73: ConditionInfo("Moderate snow fall", "\U0001f328️"),
    75: ConditionInfo("Heavy snow fall", "❄️"),
    77: ConditionInfo("Snow grains", "❄️"),
    80: ConditionInfo("Slight rain showers", "\U0001f326️"),
    81: ConditionInfo("Moderate rain showers", "\U0001f327️"),
    82: ConditionInfo("Violent rain showers", "⛈️"),
    85: ConditionInfo("Slight snow showers", "\U0001f328️"),
    86: ConditionInfo("Heavy snow showers", "❄️"),
    95: ConditionInfo("Thunderstorm", "⛈️"),
    96: ConditionInfo("Thunderstorm with slight hail", "⛈️"),
    99: ConditionInfo("Thunderstorm with heavy hail", "⛈️"),
}


def get_condition_info(code: object) -> ConditionInfo:
    """Label and icon for a weather code; unknown or missing codes map to "Unknown"."""
    if code is None or isinstance(code, bool):
        return UNKNOWN_CONDITION
    try:
        return _CODES.get(int(code), UNKNOWN_CONDITION)
    except (TypeError, ValueError, OverflowError):
        return UNKNOWN_CONDITION
