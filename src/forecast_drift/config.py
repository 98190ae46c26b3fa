"""Application configuration via pydantic-settings."""

from __future__ import annotations

from pathlib import Path
from typing import Literal

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from forecast_drift.common.types import clamp

MIN_RETENTION = 3
MAX_RETENTION = 50


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
    )

    # Display preferences recorded on every snapshot
    temperature_unit: Literal["celsius", "fahrenheit"] = "celsius"
    wind_unit: Literal["kph", "mph"] = "kph"
    time_format: Literal["12h", "24h"] = "24h"

    # Which series the diff compares by default
    comparison_mode: Literal["hourly", "daily"] = "hourly"

    # Snapshots kept per location (clamped to [3, 50])
    retention_limit: int = 10

    # SQLite database path for snapshot history
    db_path: Path = Path.home() / ".forecast-drift" / "snapshots.db"

    # Open-Meteo forecast base URL
    openmeteo_api_url: str = "https://api.open-meteo.com/v1"

    # Days of forecast requested from Open-Meteo
    forecast_days: int = 7

    # NOAA/NWS base URL (alerts and location labels)
    nws_api_url: str = "https://api.weather.gov"

    # NOAA/NWS user agent string
    nws_user_agent: str = "forecast-drift (forecast-drift@example.com)"

    # Nominatim user agent for location search
    geocoding_user_agent: str = "forecast-drift"

    # HTTP request timeout seconds
    http_timeout: float = 30.0

    @field_validator("retention_limit", mode="before")
    @classmethod
    def _clamp_retention(cls, v: object) -> int:
        return int(clamp(int(v), MIN_RETENTION, MAX_RETENTION))

    @field_validator("forecast_days")
    @classmethod
    def _forecast_days_in_range(cls, v: int) -> int:
        if not 1 <= v <= 16:
            raise ValueError(f"forecast_days must be in [1, 16], got {v}")
        return v

    @field_validator("http_timeout")
    @classmethod
    def _timeout_positive(cls, v: float) -> float:
        if v <= 0:
            raise ValueError(f"http_timeout must be > 0, got {v}")
        return v


def get_settings() -> Settings:
    """Get a settings instance."""
    return Settings()
