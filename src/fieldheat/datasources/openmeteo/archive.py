"""Historical daily weather from the Open-Meteo Archive API."""

from __future__ import annotations

from datetime import date
from typing import TYPE_CHECKING, Any

from fieldheat.datasources.openmeteo.client import (
    ARCHIVE_API,
    DAILY_VARS,
    DEFAULT_TIMEOUT,
    FIELD_MAP,
)
from fieldheat.exceptions import ProviderError
from fieldheat.schemas import DailyWeatherRecord, Location, Source
from fieldheat.services.http import provider_session

if TYPE_CHECKING:
    import requests


def fetch_archive_daily(
    lat: float,
    lon: float,
    start: date,
    end: date,
    *,
    session: requests.Session | None = None,
    timeout: float = DEFAULT_TIMEOUT,
) -> dict[str, Any]:
    """
    Fetch historical daily weather from the Open-Meteo Archive API.

    Args:
        lat: Latitude.
        lon: Longitude.
        start: First day (inclusive).
        end: Last day (inclusive).
        session: HTTP session (defaults to the single-attempt provider session).
        timeout: Request timeout in seconds.

    Returns:
        Raw API response dict with ``daily`` key containing arrays.

    Raises:
        requests.RequestException: On network errors or non-2xx responses.
    """
    params: dict[str, Any] = {
        "latitude": f"{lat:.4f}",
        "longitude": f"{lon:.4f}",
        "start_date": start.isoformat(),
        "end_date": end.isoformat(),
        "daily": ",".join(DAILY_VARS),
        "timezone": "auto",
    }
    resp = (session or provider_session).get(ARCHIVE_API, params=params, timeout=timeout)
    resp.raise_for_status()
    result: dict[str, Any] = resp.json()
    return result


def parse_archive_daily(data: dict[str, Any], location_id: str) -> list[DailyWeatherRecord]:
    """Convert an archive response into normalized daily records.

    Values the API reports as null stay ``None``.
    """
    if data.get("error"):
        raise ProviderError(Source.OPEN_METEO, str(data.get("reason", "unknown error")))

    daily = data.get("daily") or {}
    dates = daily.get("time") or []

    records: list[DailyWeatherRecord] = []
    for i, date_str in enumerate(dates):
        values: dict[str, Any] = {}
        for var, field_name in FIELD_MAP.items():
            column = daily.get(var) or []
            values[field_name] = column[i] if i < len(column) else None
        records.append(
            DailyWeatherRecord(
                location_id=location_id,
                date=date.fromisoformat(date_str),
                source=Source.OPEN_METEO,
                **values,
            )
        )
    return records


class OpenMeteoProvider:
    """Open-Meteo ERA5 reanalysis. Free, no key, always available."""

    name = Source.OPEN_METEO
    requires_key = False

    def __init__(
        self,
        session: requests.Session | None = None,
        timeout: float = DEFAULT_TIMEOUT,
    ) -> None:
        self.session = session
        self.timeout = timeout

    @property
    def is_configured(self) -> bool:
        return True

    def fetch(self, location: Location, start: date, end: date) -> list[DailyWeatherRecord]:
        data = fetch_archive_daily(
            location.lat,
            location.lon,
            start,
            end,
            session=self.session,
            timeout=self.timeout,
        )
        return parse_archive_daily(data, location.location_id)
