"""Location search: "lat, lon" input parsing and name lookup via geopy Nominatim."""

from __future__ import annotations

import logging
import re
from collections import OrderedDict

from geopy.adapters import AioHTTPAdapter
from geopy.exc import GeocoderServiceError, GeocoderTimedOut, GeocoderUnavailable
from geopy.geocoders import Nominatim

from forecast_drift.common.types import LatLon, location_id_from_lat_lon, sanitize_text
from forecast_drift.config import get_settings
from forecast_drift.weather.models import Location

logger = logging.getLogger(__name__)

_LAT_LON_RE = re.compile(r"^(-?\d+(?:\.\d+)?)\s*,\s*(-?\d+(?:\.\d+)?)$")

# Results returned per search
_MAX_RESULTS = 7

# Bounded LRU cache for search results (oldest evicted first)
_MAX_CACHE_SIZE = 256
_cache: OrderedDict[str, list[Location]] = OrderedDict()


def _cache_put(key: str, value: list[Location]) -> None:
    """Insert into bounded cache, evicting oldest if full."""
    _cache[key] = value
    _cache.move_to_end(key)
    if len(_cache) > _MAX_CACHE_SIZE:
        _cache.popitem(last=False)


def parse_lat_lon_input(text: str | None) -> LatLon | None:
    """Parse ``"40.71, -74.00"`` into a (lat, lon) pair.

    Returns None for anything else, including out-of-range coordinates.
    """
    if not text:
        return None
    match = _LAT_LON_RE.match(str(text).strip())
    if not match:
        return None
    lat = float(match.group(1))
    lon = float(match.group(2))
    if not (-90 <= lat <= 90 and -180 <= lon <= 180):
        return None
    return lat, lon


def location_from_lat_lon(lat: float, lon: float, name: str | None = None) -> Location:
    return Location(
        id=location_id_from_lat_lon(lat, lon),
        name=name or f"Lat {lat}, Lon {lon}",
        latitude=lat,
        longitude=lon,
        source="coordinates",
    )


def _display_name(raw: dict, fallback: str) -> str:
    address = raw.get("address") or {}
    parts = [
        raw.get("name") or address.get("city") or address.get("town") or address.get("village"),
        address.get("state"),
        address.get("country"),
    ]
    label = ", ".join(p for p in parts if p)
    return label or fallback


async def search_locations(query: str) -> list[Location]:
    """Search places by name.

    Uses Nominatim (free, no API key). Results are cached in memory with a
    max size of 256 queries (LRU eviction). Service errors yield an empty list.
    """
    clean = sanitize_text(query)
    if not clean:
        return []

    key = clean.lower()
    if key in _cache:
        _cache.move_to_end(key)
        return list(_cache[key])

    settings = get_settings()
    try:
        async with Nominatim(
            user_agent=settings.geocoding_user_agent,
            adapter_factory=AioHTTPAdapter,
        ) as geolocator:
            results = await geolocator.geocode(
                clean,
                exactly_one=False,
                limit=_MAX_RESULTS,
                addressdetails=True,
                language="en",
            )
    except (GeocoderTimedOut, GeocoderServiceError, GeocoderUnavailable) as exc:
        logger.warning("Geocoding service error for %r: %s", clean, exc)
        return []

    locations = []
    for result in results or []:
        try:
            lat = float(result.latitude)
            lon = float(result.longitude)
        except (TypeError, ValueError) as exc:
            logger.info("Skipping geocoding result with bad coordinates for %r: %s", clean, exc)
            continue
        raw = result.raw if isinstance(result.raw, dict) else {}
        locations.append(
            Location(
                id=location_id_from_lat_lon(lat, lon),
                name=_display_name(raw, result.address or clean),
                latitude=lat,
                longitude=lon,
                source="nominatim",
            )
        )

    if not locations:
        logger.debug("Geocoding returned no results for %r", clean)
    _cache_put(key, locations)
    return list(locations)
