"""Weather data models: normalized forecast content and snapshots."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field, fields
from typing import Any

from forecast_drift.common.types import JsonDict


def _pick(cls: type, data: object) -> Any:
    """Build a flat dataclass from the keys of *data* it knows about."""
    if not isinstance(data, dict):
        return cls()
    names = {f.name for f in fields(cls)}
    return cls(**{k: v for k, v in data.items() if k in names})


def _rows(cls: type, data: object) -> tuple:
    if not isinstance(data, (list, tuple)):
        return ()
    return tuple(_pick(cls, item) for item in data if isinstance(item, dict))


@dataclass(frozen=True)
class ProviderIdentity:
    """A data provider, identified across snapshots by ``name``."""

    name: str = "Unknown"
    endpoint: str = ""
    version: str = ""


@dataclass(frozen=True)
class SnapshotProviders:
    forecast: ProviderIdentity = field(default_factory=ProviderIdentity)
    alerts: ProviderIdentity = field(default_factory=ProviderIdentity)


@dataclass(frozen=True)
class DisplayUnits:
    """Units in effect when a snapshot was captured.

    Base units are what the normalized values are stored in; display units
    are only recorded so that a preference change shows up in the diff.
    """

    display_temperature: str = "celsius"
    display_wind: str = "kph"
    base_temperature: str = "celsius"
    base_wind: str = "kph"


@dataclass(frozen=True)
class CurrentConditions:
    time: str | None = None
    temperature_c: float | None = None
    wind_kph: float | None = None
    precip_probability: float | None = None
    precip_mm: float | None = None
    weather_code: int | None = None
    condition_label: str | None = None
    condition_icon: str | None = None


@dataclass(frozen=True)
class HourlyRow:
    """One hourly forecast window, keyed by ``time``."""

    time: str
    temperature_c: float | None = None
    precip_probability: float | None = None
    precip_mm: float | None = None
    wind_kph: float | None = None
    wind_gust_kph: float | None = None
    weather_code: int | None = None
    condition_label: str | None = None
    condition_icon: str | None = None


@dataclass(frozen=True)
class DailyRow:
    """One daily forecast window, keyed by ``date``."""

    date: str
    temp_max_c: float | None = None
    temp_min_c: float | None = None
    precip_probability_max: float | None = None
    precip_mm: float | None = None
    wind_max_kph: float | None = None
    weather_code: int | None = None
    condition_label: str | None = None
    condition_icon: str | None = None


@dataclass(frozen=True)
class AlertRecord:
    """An active weather alert; ``id`` is stable across fetches."""

    id: str
    event: str = "Unknown event"
    severity: str = "Unknown"
    certainty: str = "Unknown"
    urgency: str = "Unknown"
    headline: str = "No headline"
    effective: str | None = None
    expires: str | None = None


@dataclass(frozen=True)
class NormalizedForecast:
    current: CurrentConditions = field(default_factory=CurrentConditions)
    hourly: tuple[HourlyRow, ...] = ()
    daily: tuple[DailyRow, ...] = ()
    alerts: tuple[AlertRecord, ...] = ()

    @classmethod
    def from_dict(cls, data: object) -> NormalizedForecast:
        if not isinstance(data, dict):
            return cls()
        return cls(
            current=_pick(CurrentConditions, data.get("current")),
            hourly=_rows(HourlyRow, data.get("hourly")),
            daily=_rows(DailyRow, data.get("daily")),
            alerts=_rows(AlertRecord, data.get("alerts")),
        )


@dataclass(frozen=True)
class SourceMeta:
    timezone: str | None = None
    utc_offset_seconds: int | None = None
    generationtime_ms: float | None = None
    model_run_time: str | None = None
    alerts_status: str = "ok"


@dataclass(frozen=True)
class Location:
    """A place the user tracks.

    Attributes:
        id: stable identifier derived from rounded coordinates
        name: display label
        latitude: decimal degrees
        longitude: decimal degrees
        timezone: IANA zone if the geocoder returned one
        source: where the location came from ("coordinates", "nominatim", ...)
    """

    id: str
    name: str
    latitude: float
    longitude: float
    timezone: str | None = None
    source: str = "coordinates"


@dataclass(frozen=True)
class ForecastSnapshot:
    """One complete, timestamped forecast + alerts fetch for a location."""

    id: str
    fetched_at: str
    provider: SnapshotProviders = field(default_factory=SnapshotProviders)
    units: DisplayUnits = field(default_factory=DisplayUnits)
    normalized: NormalizedForecast = field(default_factory=NormalizedForecast)
    location: Location | None = None
    source_meta: SourceMeta = field(default_factory=SourceMeta)

    def to_dict(self) -> JsonDict:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: JsonDict) -> ForecastSnapshot:
        provider = data.get("provider")
        if not isinstance(provider, dict):
            provider = {}
        location = data.get("location")
        return cls(
            id=str(data.get("id", "")),
            fetched_at=str(data.get("fetched_at", "")),
            provider=SnapshotProviders(
                forecast=_pick(ProviderIdentity, provider.get("forecast")),
                alerts=_pick(ProviderIdentity, provider.get("alerts")),
            ),
            units=_pick(DisplayUnits, data.get("units")),
            normalized=NormalizedForecast.from_dict(data.get("normalized")),
            location=_pick(Location, location) if isinstance(location, dict) else None,
            source_meta=_pick(SourceMeta, data.get("source_meta")),
        )
