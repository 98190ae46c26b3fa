"""Display formatting for forecast values in the user's units."""

from __future__ import annotations

import math

from forecast_drift.common.types import celsius_to_fahrenheit, kph_to_mph

PLACEHOLDER = "--"


def _as_float(value: object) -> float | None:
    if value is None or isinstance(value, bool):
        return None
    try:
        result = float(value)
    except (TypeError, ValueError):
        return None
    return None if math.isnan(result) else result


def format_temperature(value_c: object, temperature_unit: str = "celsius") -> str:
    value = _as_float(value_c)
    if value is None:
        return PLACEHOLDER
    if temperature_unit == "fahrenheit":
        return f"{round(celsius_to_fahrenheit(value))} F"
    return f"{round(value)} C"


def format_wind(value_kph: object, wind_unit: str = "kph") -> str:
    value = _as_float(value_kph)
    if value is None:
        return PLACEHOLDER
    if wind_unit == "mph":
        value = kph_to_mph(value)
    return f"{round(value)} {wind_unit}"


def format_percent(value: object) -> str:
    number = _as_float(value)
    if number is None:
        return PLACEHOLDER
    return f"{round(number)}%"


def format_millimeters(value: object) -> str:
    number = _as_float(value)
    if number is None:
        return PLACEHOLDER
    return f"{number:.1f} mm"
