"""Shared test fixtures."""

from __future__ import annotations

import tempfile
from pathlib import Path

import pytest

from forecast_drift.weather.codes import get_condition_info
from forecast_drift.weather.models import (
    AlertRecord,
    DailyRow,
    DisplayUnits,
    ForecastSnapshot,
    HourlyRow,
    Location,
    NormalizedForecast,
    ProviderIdentity,
    SnapshotProviders,
    SourceMeta,
)

NYC = Location(
    id="40.7128,-74.006",
    name="New York, NY",
    latitude=40.7128,
    longitude=-74.006,
)


def hourly_row(
    time: str = "2026-02-20T15:00",
    temperature_c: float | None = 10.0,
    precip_probability: float | None = 20.0,
    precip_mm: float | None = 0.2,
    wind_kph: float | None = 12.0,
    weather_code: int | None = 2,
) -> HourlyRow:
    condition = get_condition_info(weather_code)
    return HourlyRow(
        time=time,
        temperature_c=temperature_c,
        precip_probability=precip_probability,
        precip_mm=precip_mm,
        wind_kph=wind_kph,
        wind_gust_kph=None,
        weather_code=weather_code,
        condition_label=condition.label,
        condition_icon=condition.icon,
    )


def daily_row(
    date: str = "2026-02-22",
    temp_max_c: float | None = 8.0,
    precip_probability_max: float | None = 30.0,
    precip_mm: float | None = 1.0,
    wind_max_kph: float | None = 20.0,
    weather_code: int | None = 3,
) -> DailyRow:
    condition = get_condition_info(weather_code)
    return DailyRow(
        date=date,
        temp_max_c=temp_max_c,
        temp_min_c=1.0,
        precip_probability_max=precip_probability_max,
        precip_mm=precip_mm,
        wind_max_kph=wind_max_kph,
        weather_code=weather_code,
        condition_label=condition.label,
        condition_icon=condition.icon,
    )


def alert(
    alert_id: str = "urn:oid:alert-1",
    event: str = "Winter Storm Warning",
    severity: str = "Severe",
    headline: str = "Winter Storm Warning until 6 PM",
) -> AlertRecord:
    return AlertRecord(
        id=alert_id,
        event=event,
        severity=severity,
        certainty="Likely",
        urgency="Expected",
        headline=headline,
    )


def make_snapshot(
    fetched_at: str = "2026-02-20T09:12:00",
    hourly: tuple = (),
    daily: tuple = (),
    alerts: tuple = (),
    provider: str = "Open-Meteo",
    temperature_unit: str = "celsius",
    wind_unit: str = "kph",
    location: Location = NYC,
    source_meta: SourceMeta | None = None,
) -> ForecastSnapshot:
    return ForecastSnapshot(
        id=f"{location.id}:{fetched_at}",
        fetched_at=fetched_at,
        provider=SnapshotProviders(
            forecast=ProviderIdentity(name=provider, endpoint="/v1/forecast", version="v1"),
            alerts=ProviderIdentity(name="NWS Alerts", endpoint="/alerts/active", version="v1"),
        ),
        units=DisplayUnits(display_temperature=temperature_unit, display_wind=wind_unit),
        normalized=NormalizedForecast(
            hourly=tuple(hourly),
            daily=tuple(daily),
            alerts=tuple(alerts),
        ),
        location=location,
        source_meta=source_meta or SourceMeta(),
    )


@pytest.fixture
def nyc():
    return NYC


@pytest.fixture
def snapshot_factory():
    """Build ForecastSnapshot objects with sensible defaults."""
    return make_snapshot


@pytest.fixture
def hourly_factory():
    return hourly_row


@pytest.fixture
def daily_factory():
    return daily_row


@pytest.fixture
def alert_factory():
    return alert


@pytest.fixture
def tmp_db():
    """Create a temporary database file for testing."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir) / "test_snapshots.db"


@pytest.fixture
def openmeteo_response():
    """Realistic Open-Meteo forecast response (2 hours, 2 days)."""
    return {
        "latitude": 40.71,
        "longitude": -74.0,
        "generationtime_ms": 0.42,
        "timezone": "America/New_York",
        "utc_offset_seconds": -18000,
        "current": {
            "time": "2026-02-20T09:00",
            "temperature_2m": 3.4,
            "weather_code": 3,
            "wind_speed_10m": 14.2,
            "precipitation_probability": 10,
            "precipitation": 0.0,
        },
        "hourly": {
            "time": ["2026-02-20T09:00", "2026-02-20T10:00"],
            "temperature_2m": [3.4, 4.1],
            "precipitation_probability": [10, 35],
            "precipitation": [0.0, 0.3],
            "weather_code": [3, 61],
            "wind_speed_10m": [14.2, 16.0],
            "wind_gusts_10m": [25.0, None],
        },
        "daily": {
            "time": ["2026-02-20", "2026-02-21"],
            "weather_code": [61, 0],
            "temperature_2m_max": [6.0, 9.5],
            "temperature_2m_min": [-1.0, 2.0],
            "precipitation_probability_max": [60, 5],
            "precipitation_sum": [2.4, 0.0],
            "wind_speed_10m_max": [22.0, 11.0],
        },
    }


@pytest.fixture
def nws_alerts_response():
    """NWS active alerts GeoJSON with one winter storm warning."""
    return {
        "type": "FeatureCollection",
        "features": [
            {
                "id": "https://api.weather.gov/alerts/urn:oid:alert-1",
                "properties": {
                    "id": "urn:oid:alert-1",
                    "event": "Winter Storm Warning",
                    "severity": "Severe",
                    "certainty": "Likely",
                    "urgency": "Expected",
                    "headline": "Winter Storm Warning issued February 20",
                    "effective": "2026-02-20T06:00:00-05:00",
                    "expires": "2026-02-21T18:00:00-05:00",
                },
            }
        ],
    }
