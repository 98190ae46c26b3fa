"""Top-level pipeline orchestrator.

Wires together: location lookup -> forecast + alerts fetch -> normalization ->
snapshot storage -> diff against the previous snapshot.
Forecast and alerts are fetched concurrently with asyncio.gather.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from datetime import datetime, timezone

from rich.console import Console

from forecast_drift.common.timefmt import in_utc_offset
from forecast_drift.config import Settings, get_settings
from forecast_drift.diff.engine import build_forecast_diff, resolve_mode
from forecast_drift.diff.models import DiffResult, Granularity
from forecast_drift.snapshots.store import SnapshotStore
from forecast_drift.weather.geocoding import (
    location_from_lat_lon,
    parse_lat_lon_input,
    search_locations,
)
from forecast_drift.weather.models import (
    DisplayUnits,
    ForecastSnapshot,
    Location,
    SnapshotProviders,
)
from forecast_drift.weather.normalize import normalize_weather_data
from forecast_drift.weather.nws import AlertsFetch, fetch_alerts, lookup_location_label
from forecast_drift.weather.openmeteo import ForecastFetch, fetch_forecast

logger = logging.getLogger(__name__)
console = Console()


@dataclass
class RefreshResult:
    """Outcome of one refresh: stored history (newest first) and its diff."""

    snapshots: list[ForecastSnapshot]
    diff: DiffResult


async def resolve_location(query: str) -> Location | None:
    """Turn user input into a Location.

    ``"lat, lon"`` input is used directly (labelled via NWS when possible);
    anything else is geocoded and the best match returned.
    """
    lat_lon = parse_lat_lon_input(query)
    if lat_lon is not None:
        lat, lon = lat_lon
        label = await lookup_location_label(lat, lon)
        return location_from_lat_lon(lat, lon, name=label)

    matches = await search_locations(query)
    if not matches:
        logger.info("No location found for %r", query)
        return None
    return matches[0]


async def fetch_weather_bundle(lat: float, lon: float) -> tuple[ForecastFetch, AlertsFetch]:
    """Fetch forecast and alerts for one point concurrently.

    Forecast errors propagate; alerts never raise (see fetch_alerts).
    """
    forecast, alerts = await asyncio.gather(
        fetch_forecast(lat, lon),
        fetch_alerts(lat, lon),
    )
    if alerts.status != "ok":
        logger.info("Alerts unavailable for (%.4f, %.4f): %s", lat, lon, alerts.error)
    return forecast, alerts


def build_snapshot(
    location: Location,
    forecast: ForecastFetch,
    alerts: AlertsFetch,
    settings: Settings,
    fetched_at: str | None = None,
) -> ForecastSnapshot:
    """Normalize one fetch into a snapshot stamped with the current display units.

    *fetched_at* defaults to now in the forecast's UTC offset, so it reads on
    the same wall clock as the naive local row times.
    """
    normalized, source_meta = normalize_weather_data(
        forecast.payload, alerts.payload, alerts_status=alerts.status,
    )
    if fetched_at is None:
        now = in_utc_offset(datetime.now(timezone.utc), source_meta.utc_offset_seconds)
        fetched_at = now.isoformat()
    return ForecastSnapshot(
        id=f"{location.id}:{fetched_at}",
        fetched_at=fetched_at,
        provider=SnapshotProviders(forecast=forecast.provider, alerts=alerts.provider),
        units=DisplayUnits(
            display_temperature=settings.temperature_unit,
            display_wind=settings.wind_unit,
        ),
        normalized=normalized,
        location=location,
        source_meta=source_meta,
    )


def _diff_history(
    snapshots: list[ForecastSnapshot], mode: Granularity | str, settings: Settings,
) -> DiffResult:
    current = snapshots[0] if snapshots else None
    previous = snapshots[1] if len(snapshots) > 1 else None
    return build_forecast_diff(previous, current, mode, time_format=settings.time_format)


async def refresh_forecast(
    location: Location,
    mode: Granularity | str | None = None,
    store: SnapshotStore | None = None,
) -> RefreshResult:
    """Fetch, store and compare a new snapshot for a location.

    Raises ValueError for an unknown mode before anything is fetched, and
    httpx errors from the forecast fetch; nothing is stored in either case.
    """
    settings = get_settings()
    mode = resolve_mode(settings.comparison_mode if mode is None else mode)
    if store is None:
        store = SnapshotStore()

    console.print(f"[bold]Fetching forecast for {location.name}...[/bold]")
    forecast, alerts = await fetch_weather_bundle(location.latitude, location.longitude)
    snapshot = build_snapshot(location, forecast, alerts, settings)
    console.print(
        f"  {len(snapshot.normalized.hourly)} hourly / {len(snapshot.normalized.daily)} daily "
        f"window(s), {len(snapshot.normalized.alerts)} active alert(s)"
    )
    if alerts.status != "ok":
        console.print("  [yellow]Alerts unavailable for this location[/yellow]")

    snapshots = await store.save_snapshot(location.id, snapshot, settings.retention_limit)
    await store.save_last_location(location)
    logger.debug("Stored snapshot %s (%d kept)", snapshot.id, len(snapshots))

    return RefreshResult(snapshots=snapshots, diff=_diff_history(snapshots, mode, settings))


async def compare_stored(
    location_id: str,
    mode: Granularity | str | None = None,
    store: SnapshotStore | None = None,
) -> DiffResult:
    """Diff the two newest stored snapshots of a location without fetching."""
    settings = get_settings()
    mode = resolve_mode(settings.comparison_mode if mode is None else mode)
    if store is None:
        store = SnapshotStore()
    snapshots = await store.get_snapshots(location_id)
    return _diff_history(snapshots, mode, settings)
