"""NOAA/NWS API client: active alerts and location labels (US locations only)."""

from __future__ import annotations

import logging
from dataclasses import dataclass

import httpx

from forecast_drift.common.http import HttpClient
from forecast_drift.common.types import JsonDict, round_coordinate
from forecast_drift.config import get_settings
from forecast_drift.weather.models import ProviderIdentity

logger = logging.getLogger(__name__)

ALERTS_PROVIDER = ProviderIdentity(name="NWS Alerts", endpoint="/alerts/active", version="v1")


@dataclass
class AlertsFetch:
    """Raw alerts payload with fetch status.

    Attributes:
        payload: GeoJSON feature collection (empty on failure)
        provider: alerts provider identity
        status: "ok" or "unavailable"
        error: error text when unavailable
    """

    payload: JsonDict
    provider: ProviderIdentity
    status: str = "ok"
    error: str | None = None


def _nws_client() -> HttpClient:
    settings = get_settings()
    headers = {"User-Agent": settings.nws_user_agent, "Accept": "application/geo+json"}
    return HttpClient(base_url=settings.nws_api_url, headers=headers)


async def fetch_alerts(lat: float, lon: float) -> AlertsFetch:
    """Fetch active alerts for a point.

    Alerts are best effort: outside the US, or when the API is down, this
    returns an empty feature list with status "unavailable" instead of raising.
    """
    try:
        async with _nws_client() as client:
            payload = await client.get_json("/alerts/active", params={"point": f"{lat},{lon}"})
    except httpx.HTTPStatusError as exc:
        logger.info("NWS alerts API HTTP %d for (%.4f, %.4f)", exc.response.status_code, lat, lon)
        return _unavailable(f"HTTP {exc.response.status_code}")
    except httpx.TimeoutException:
        logger.info("NWS alerts API timeout for (%.4f, %.4f)", lat, lon)
        return _unavailable("timeout")
    except (httpx.HTTPError, ValueError) as exc:
        logger.info("NWS alerts API error for (%.4f, %.4f): %s", lat, lon, exc)
        return _unavailable(str(exc))

    return AlertsFetch(payload=payload, provider=ALERTS_PROVIDER)


def _unavailable(error: str) -> AlertsFetch:
    return AlertsFetch(
        payload={"features": []},
        provider=ALERTS_PROVIDER,
        status="unavailable",
        error=error,
    )


async def lookup_location_label(lat: float, lon: float) -> str:
    """Resolve "City, ST" via the NWS points API, falling back to coordinates."""
    lat = round_coordinate(lat)
    lon = round_coordinate(lon)
    try:
        async with _nws_client() as client:
            data = await client.get_json(f"/points/{lat},{lon}")
    except httpx.HTTPStatusError as exc:
        if exc.response.status_code == 404:
            logger.debug("Location (%.4f, %.4f) is outside NWS coverage", lat, lon)
        else:
            logger.info("NWS points API HTTP %d for (%.4f, %.4f)", exc.response.status_code, lat, lon)
    except (httpx.HTTPError, ValueError) as exc:
        logger.info("NWS points API error for (%.4f, %.4f): %s", lat, lon, exc)
    else:
        props = data.get("properties") or {}
        relative = (props.get("relativeLocation") or {}).get("properties") or {}
        city = relative.get("city")
        state = relative.get("state")
        if city and state:
            return f"{city}, {state}"
    return f"Lat {lat}, Lon {lon}"
