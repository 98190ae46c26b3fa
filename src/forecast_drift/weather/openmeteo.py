"""Open-Meteo forecast API client."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from forecast_drift.common.http import HttpClient
from forecast_drift.common.types import JsonDict
from forecast_drift.config import get_settings
from forecast_drift.weather.models import ProviderIdentity

logger = logging.getLogger(__name__)

FORECAST_PROVIDER = ProviderIdentity(name="Open-Meteo", endpoint="/v1/forecast", version="v1")

_CURRENT_VARS = "temperature_2m,weather_code,wind_speed_10m,precipitation_probability,precipitation"
_HOURLY_VARS = (
    "temperature_2m,precipitation_probability,precipitation,"
    "weather_code,wind_speed_10m,wind_gusts_10m"
)
_DAILY_VARS = (
    "weather_code,temperature_2m_max,temperature_2m_min,"
    "precipitation_probability_max,precipitation_sum,wind_speed_10m_max"
)


@dataclass
class ForecastFetch:
    """Raw Open-Meteo payload plus the provider that produced it."""

    payload: JsonDict
    provider: ProviderIdentity


def forecast_params(lat: float, lon: float, forecast_days: int = 7) -> dict[str, str]:
    """Query parameters for a forecast request, always in base units (C, km/h, mm)."""
    return {
        "latitude": str(lat),
        "longitude": str(lon),
        "current": _CURRENT_VARS,
        "hourly": _HOURLY_VARS,
        "daily": _DAILY_VARS,
        "forecast_days": str(forecast_days),
        "timezone": "auto",
        "temperature_unit": "celsius",
        "wind_speed_unit": "kmh",
        "precipitation_unit": "mm",
    }


async def fetch_forecast(lat: float, lon: float) -> ForecastFetch:
    """Fetch the current/hourly/daily forecast for a point.

    Raises httpx.HTTPStatusError / httpx.TimeoutException once retries are
    exhausted; the caller decides how to surface the failure.
    """
    settings = get_settings()
    params = forecast_params(lat, lon, settings.forecast_days)

    async with HttpClient(base_url=settings.openmeteo_api_url) as client:
        payload = await client.get_json("/forecast", params=params)

    logger.debug(
        "Open-Meteo forecast for (%.4f, %.4f): %d hourly, %d daily rows",
        lat,
        lon,
        len(payload.get("hourly", {}).get("time", []) or []),
        len(payload.get("daily", {}).get("time", []) or []),
    )
    return ForecastFetch(payload=payload, provider=FORECAST_PROVIDER)
