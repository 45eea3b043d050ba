"""Application settings loaded from environment variables via pydantic-settings.

Every field can be set with a ``FIELDHEAT_`` prefixed environment variable
(``FIELDHEAT_DAVIS_API_KEY=...``) or from a ``.env`` file in the working
directory.
"""

from __future__ import annotations

from datetime import date
from enum import StrEnum
from functools import lru_cache
from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict


class LogFormat(StrEnum):
    JSON = "json"
    CONSOLE = "console"


class Settings(BaseSettings):
    """Central configuration."""

    model_config = SettingsConfigDict(
        env_prefix="FIELDHEAT_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    app_name: str = "fieldheat"
    app_env: str = "development"
    debug: bool = False

    # -- Storage --------------------------------------------------------------
    database_url: str = "sqlite:///data/weather.db"
    data_dir: Path = Path("data")
    fieldbook_path: Path = Path("data/fieldbook.json")

    # Used when a location id has no coordinates in the geolocation store
    default_lat: float = 49.97
    default_lon: float = 33.60

    # -- Davis WeatherLink v2 ------------------------------------------------
    davis_api_key: str = ""
    davis_api_secret: str = ""
    davis_station_id: str = ""

    # -- Ecowitt Cloud v3 ----------------------------------------------------
    ecowitt_app_key: str = ""
    ecowitt_api_key: str = ""
    ecowitt_mac: str = ""

    # -- HTTP ----------------------------------------------------------------
    http_timeout: float = 30.0
    openmeteo_timeout: float = 60.0

    # -- Heat units ------------------------------------------------------------
    base_temp: float = 10.0
    # Treat partially cached ranges as a miss instead of serving them as-is
    strict_cache_coverage: bool = False
    # Emergence day offset used when a plot has no usable emergence record.
    # None disables the fallback and such plots are excluded.
    emergence_fallback_offset: int | None = None
    maturity_trait_id: str = "days_to_maturity"
    emergence_trait_id: str = "days_to_emergence"

    # -- Backfill ------------------------------------------------------------
    backfill_start: date = date(2020, 1, 1)

    # -- Observability -------------------------------------------------------
    log_level: str = "info"
    log_format: LogFormat = LogFormat.CONSOLE


@lru_cache
def get_settings() -> Settings:
    """Singleton settings instance (cached after first call)."""
    return Settings()
