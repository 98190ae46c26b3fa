"""Convert raw Open-Meteo and NWS payloads into the normalized snapshot shape."""

from __future__ import annotations

import math

from forecast_drift.common.types import JsonDict
from forecast_drift.weather.codes import get_condition_info
from forecast_drift.weather.models import (
    AlertRecord,
    CurrentConditions,
    DailyRow,
    HourlyRow,
    NormalizedForecast,
    SourceMeta,
)


def number_or_none(value: object) -> float | None:
    """Coerce a payload value to float; missing or non-numeric becomes None."""
    if value is None or isinstance(value, bool):
        return None
    try:
        result = float(value)
    except (TypeError, ValueError):
        return None
    return None if math.isnan(result) else result


def _code_or_none(value: object) -> int | None:
    number = number_or_none(value)
    if number is None or math.isinf(number):
        return None
    return int(number)


def _section(payload: object, name: str) -> dict:
    if not isinstance(payload, dict):
        return {}
    section = payload.get(name)
    return section if isinstance(section, dict) else {}


def _column(section: dict, name: str) -> list:
    values = section.get(name)
    return values if isinstance(values, list) else []


def _at(values: list, index: int) -> object:
    return values[index] if index < len(values) else None


def normalize_hourly(raw_forecast: object) -> tuple[HourlyRow, ...]:
    hourly = _section(raw_forecast, "hourly")
    times = _column(hourly, "time")
    temperature = _column(hourly, "temperature_2m")
    probability = _column(hourly, "precipitation_probability")
    precipitation = _column(hourly, "precipitation")
    wind = _column(hourly, "wind_speed_10m")
    gusts = _column(hourly, "wind_gusts_10m")
    codes = _column(hourly, "weather_code")

    rows = []
    for i, time in enumerate(times):
        code = _code_or_none(_at(codes, i))
        condition = get_condition_info(code)
        rows.append(
            HourlyRow(
                time=time,
                temperature_c=number_or_none(_at(temperature, i)),
                precip_probability=number_or_none(_at(probability, i)),
                precip_mm=number_or_none(_at(precipitation, i)),
                wind_kph=number_or_none(_at(wind, i)),
                wind_gust_kph=number_or_none(_at(gusts, i)),
                weather_code=code,
                condition_label=condition.label,
                condition_icon=condition.icon,
            )
        )
    return tuple(rows)


def normalize_daily(raw_forecast: object) -> tuple[DailyRow, ...]:
    daily = _section(raw_forecast, "daily")
    dates = _column(daily, "time")
    temp_max = _column(daily, "temperature_2m_max")
    temp_min = _column(daily, "temperature_2m_min")
    probability = _column(daily, "precipitation_probability_max")
    precipitation = _column(daily, "precipitation_sum")
    wind = _column(daily, "wind_speed_10m_max")
    codes = _column(daily, "weather_code")

    rows = []
    for i, day in enumerate(dates):
        code = _code_or_none(_at(codes, i))
        condition = get_condition_info(code)
        rows.append(
            DailyRow(
                date=day,
                temp_max_c=number_or_none(_at(temp_max, i)),
                temp_min_c=number_or_none(_at(temp_min, i)),
                precip_probability_max=number_or_none(_at(probability, i)),
                precip_mm=number_or_none(_at(precipitation, i)),
                wind_max_kph=number_or_none(_at(wind, i)),
                weather_code=code,
                condition_label=condition.label,
                condition_icon=condition.icon,
            )
        )
    return tuple(rows)


def normalize_current(raw_forecast: object) -> CurrentConditions:
    current = _section(raw_forecast, "current")
    code = _code_or_none(current.get("weather_code"))
    condition = get_condition_info(code)
    return CurrentConditions(
        time=current.get("time"),
        temperature_c=number_or_none(current.get("temperature_2m")),
        wind_kph=number_or_none(current.get("wind_speed_10m")),
        precip_probability=number_or_none(current.get("precipitation_probability")),
        precip_mm=number_or_none(current.get("precipitation")),
        weather_code=code,
        condition_label=condition.label,
        condition_icon=condition.icon,
    )


def normalize_alerts(raw_alerts: object) -> tuple[AlertRecord, ...]:
    features = raw_alerts.get("features") if isinstance(raw_alerts, dict) else None
    if not isinstance(features, list):
        return ()

    alerts = []
    for feature in features:
        if not isinstance(feature, dict):
            continue
        props = feature.get("properties")
        if not isinstance(props, dict):
            props = {}
        event = props.get("event") or "Unknown event"
        alerts.append(
            AlertRecord(
                id=props.get("id") or feature.get("id") or "unknown-alert",
                event=event,
                severity=props.get("severity") or "Unknown",
                certainty=props.get("certainty") or "Unknown",
                urgency=props.get("urgency") or "Unknown",
                headline=props.get("headline") or props.get("event") or "No headline",
                effective=props.get("effective"),
                expires=props.get("expires"),
            )
        )
    return tuple(alerts)


def normalize_weather_data(
    raw_forecast: JsonDict | None,
    raw_alerts: JsonDict | None,
    alerts_status: str = "ok",
) -> tuple[NormalizedForecast, SourceMeta]:
    """Normalize a forecast + alerts pair fetched together.

    Arrays are always present in the result, possibly empty; numeric fields
    are float or None.
    """
    normalized = NormalizedForecast(
        current=normalize_current(raw_forecast),
        hourly=normalize_hourly(raw_forecast),
        daily=normalize_daily(raw_forecast),
        alerts=normalize_alerts(raw_alerts),
    )
    forecast = raw_forecast if isinstance(raw_forecast, dict) else {}
    utc_offset = number_or_none(forecast.get("utc_offset_seconds"))
    source_meta = SourceMeta(
        timezone=forecast.get("timezone"),
        utc_offset_seconds=None if utc_offset is None else int(utc_offset),
        generationtime_ms=number_or_none(forecast.get("generationtime_ms")),
        model_run_time=forecast.get("model_run"),
        alerts_status=alerts_status,
    )
    return normalized, source_meta
