"""Open-Meteo archive weather data source.

Reanalysis daily weather for any coordinate (free, no API key). Terminal
fallback of the provider chain.

Public API:
  - archive: fetch_archive_daily, parse_archive_daily, OpenMeteoProvider
  - client: API URL, requested variables
"""

from fieldheat.datasources.openmeteo.archive import (
    OpenMeteoProvider,
    fetch_archive_daily,
    parse_archive_daily,
)
from fieldheat.datasources.openmeteo.client import ARCHIVE_API, DAILY_VARS

__all__ = [
    "ARCHIVE_API",
    "DAILY_VARS",
    "OpenMeteoProvider",
    "fetch_archive_daily",
    "parse_archive_daily",
]
