"""Tests for the fetch -> store -> diff pipeline with mocked providers."""

from __future__ import annotations

import copy
from unittest.mock import AsyncMock, MagicMock, patch

import httpx
import pytest

from forecast_drift.config import Settings
from forecast_drift.diff.models import ChangeType, Granularity
from forecast_drift.pipeline import (
    build_snapshot,
    compare_stored,
    fetch_weather_bundle,
    refresh_forecast,
    resolve_location,
)
from forecast_drift.snapshots.store import SnapshotStore
from forecast_drift.weather.nws import ALERTS_PROVIDER, AlertsFetch
from forecast_drift.weather.openmeteo import FORECAST_PROVIDER, ForecastFetch


@pytest.fixture
def settings(tmp_db):
    return Settings(
        temperature_unit="fahrenheit",
        wind_unit="kph",
        time_format="12h",
        comparison_mode="hourly",
        retention_limit=5,
        db_path=tmp_db,
    )


@pytest.fixture
def store(tmp_db):
    return SnapshotStore(db_path=tmp_db)


def _alerts(payload, status="ok"):
    return AlertsFetch(payload=payload, provider=ALERTS_PROVIDER, status=status)


class TestResolveLocation:
    @pytest.mark.asyncio
    async def test_coordinates_are_labelled(self):
        with patch(
            "forecast_drift.pipeline.lookup_location_label",
            AsyncMock(return_value="New York, NY"),
        ) as lookup, patch("forecast_drift.pipeline.search_locations") as search:
            location = await resolve_location("40.7128, -74.006")

        assert location.id == "40.7128,-74.006"
        assert location.name == "New York, NY"
        assert location.source == "coordinates"
        lookup.assert_awaited_once_with(40.7128, -74.006)
        search.assert_not_called()

    @pytest.mark.asyncio
    async def test_names_are_geocoded(self, nyc):
        with patch("forecast_drift.pipeline.search_locations", AsyncMock(return_value=[nyc])):
            assert await resolve_location("New York") == nyc

    @pytest.mark.asyncio
    async def test_unknown_place(self):
        with patch("forecast_drift.pipeline.search_locations", AsyncMock(return_value=[])):
            assert await resolve_location("Atlantis") is None


@pytest.mark.asyncio
async def test_fetch_weather_bundle(openmeteo_response, nws_alerts_response):
    forecast = ForecastFetch(payload=openmeteo_response, provider=FORECAST_PROVIDER)
    alerts = _alerts(nws_alerts_response)

    with patch("forecast_drift.pipeline.fetch_forecast", AsyncMock(return_value=forecast)), \
         patch("forecast_drift.pipeline.fetch_alerts", AsyncMock(return_value=alerts)) as mock_alerts:
        result = await fetch_weather_bundle(40.7128, -74.006)

    assert result == (forecast, alerts)
    mock_alerts.assert_awaited_once_with(40.7128, -74.006)


def test_build_snapshot(nyc, settings, openmeteo_response):
    forecast = ForecastFetch(payload=openmeteo_response, provider=FORECAST_PROVIDER)
    alerts = AlertsFetch(payload={"features": []}, provider=ALERTS_PROVIDER, status="unavailable", error="HTTP 404")

    snapshot = build_snapshot(nyc, forecast, alerts, settings, fetched_at="2026-02-20T14:12:00+00:00")

    assert snapshot.id == "40.7128,-74.006:2026-02-20T14:12:00+00:00"
    assert snapshot.fetched_at == "2026-02-20T14:12:00+00:00"
    assert snapshot.provider.forecast.name == "Open-Meteo"
    assert snapshot.provider.alerts.name == "NWS Alerts"
    assert snapshot.units.display_temperature == "fahrenheit"
    assert snapshot.units.display_wind == "kph"
    assert snapshot.units.base_temperature == "celsius"
    assert snapshot.location == nyc
    assert len(snapshot.normalized.hourly) == 2
    assert snapshot.source_meta.alerts_status == "unavailable"


def test_build_snapshot_stamps_current_time_in_forecast_offset(nyc, settings, openmeteo_response):
    forecast = ForecastFetch(payload=openmeteo_response, provider=FORECAST_PROVIDER)

    snapshot = build_snapshot(nyc, forecast, _alerts({"features": []}), settings)

    assert snapshot.fetched_at.endswith("-05:00")
    assert snapshot.source_meta.utc_offset_seconds == -18000
    assert snapshot.id == f"{nyc.id}:{snapshot.fetched_at}"


def test_build_snapshot_without_offset_stamps_utc(nyc, settings, openmeteo_response):
    payload = dict(openmeteo_response)
    del payload["utc_offset_seconds"]
    forecast = ForecastFetch(payload=payload, provider=FORECAST_PROVIDER)

    snapshot = build_snapshot(nyc, forecast, _alerts({"features": []}), settings)

    assert snapshot.fetched_at.endswith("+00:00")


class TestRefreshForecast:
    @pytest.mark.asyncio
    async def test_first_then_second_fetch(self, nyc, settings, store, openmeteo_response, nws_alerts_response):
        changed = copy.deepcopy(openmeteo_response)
        changed["hourly"]["temperature_2m"][1] = 8.1
        bundles = [
            (ForecastFetch(payload=openmeteo_response, provider=FORECAST_PROVIDER), _alerts({"features": []})),
            (ForecastFetch(payload=changed, provider=FORECAST_PROVIDER), _alerts(nws_alerts_response)),
        ]

        with patch("forecast_drift.pipeline.get_settings", return_value=settings), \
             patch("forecast_drift.pipeline.fetch_weather_bundle", AsyncMock(side_effect=bundles)):
            first = await refresh_forecast(nyc, store=store)
            second = await refresh_forecast(nyc, store=store)

        assert len(first.snapshots) == 1
        assert first.diff.has_baseline is False
        assert first.diff.unchanged_message == "No previous snapshot to compare yet."

        assert len(second.snapshots) == 2
        assert second.diff.has_baseline is True
        assert second.diff.mode is Granularity.HOURLY
        assert [c.type for c in second.diff.changes] == [ChangeType.ALERTS_ADDED, ChangeType.TEMPERATURE]
        assert second.diff.compared_to == first.snapshots[0].fetched_at

        assert await store.get_last_location() == nyc

    @pytest.mark.asyncio
    async def test_daily_mode_override(self, nyc, settings, store, openmeteo_response):
        bundle = (ForecastFetch(payload=openmeteo_response, provider=FORECAST_PROVIDER), _alerts({"features": []}))

        with patch("forecast_drift.pipeline.get_settings", return_value=settings), \
             patch("forecast_drift.pipeline.fetch_weather_bundle", AsyncMock(return_value=bundle)):
            result = await refresh_forecast(nyc, mode="daily", store=store)

        assert result.diff.mode is Granularity.DAILY

    @pytest.mark.asyncio
    async def test_forecast_error_stores_nothing(self, nyc, settings, store):
        response = MagicMock()
        response.status_code = 503
        error = httpx.HTTPStatusError(
            "unavailable",
            request=httpx.Request("GET", "https://api.open-meteo.com/v1/forecast"),
            response=response,
        )

        with patch("forecast_drift.pipeline.get_settings", return_value=settings), \
             patch("forecast_drift.pipeline.fetch_weather_bundle", AsyncMock(side_effect=error)):
            with pytest.raises(httpx.HTTPStatusError):
                await refresh_forecast(nyc, store=store)

        assert await store.get_snapshots(nyc.id) == []


class TestCompareStored:
    @pytest.mark.asyncio
    async def test_nothing_stored(self, settings, store):
        with patch("forecast_drift.pipeline.get_settings", return_value=settings):
            diff = await compare_stored("0,0", store=store)

        assert diff.has_baseline is False
        assert diff.unchanged_message == "No current snapshot loaded."

    @pytest.mark.asyncio
    async def test_compares_two_newest(self, nyc, settings, store, snapshot_factory, hourly_factory):
        for fetched_at, temperature in [
            ("2026-02-20T07:00:00+00:00", 2.0),
            ("2026-02-20T08:00:00+00:00", 4.0),
            ("2026-02-20T09:00:00+00:00", 9.0),
        ]:
            snap = snapshot_factory(fetched_at=fetched_at, hourly=(hourly_factory(temperature_c=temperature),))
            await store.save_snapshot(nyc.id, snap, 10)

        with patch("forecast_drift.pipeline.get_settings", return_value=settings):
            diff = await compare_stored(nyc.id, "hourly", store=store)

        assert diff.compared_to == "2026-02-20T08:00:00+00:00"
        assert len(diff.changes) == 1
        assert diff.changes[0].from_value == 4.0
        assert diff.changes[0].to_value == 9.0
        assert diff.changes[0].message.endswith("since 8:00 AM.")

    @pytest.mark.asyncio
    async def test_bad_mode(self, nyc, settings, store):
        with patch("forecast_drift.pipeline.get_settings", return_value=settings):
            with pytest.raises(ValueError):
                await compare_stored(nyc.id, "weekly", store=store)


@pytest.mark.asyncio
async def test_refresh_rejects_bad_mode_before_fetching(nyc, settings, store):
    fetch = AsyncMock()
    with patch("forecast_drift.pipeline.get_settings", return_value=settings), \
         patch("forecast_drift.pipeline.fetch_weather_bundle", fetch):
        with pytest.raises(ValueError, match="Unknown comparison mode"):
            await refresh_forecast(nyc, mode="weekly", store=store)

    fetch.assert_not_called()
    assert await store.get_snapshots(nyc.id) == []
