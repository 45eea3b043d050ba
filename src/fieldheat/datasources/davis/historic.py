"""Historic station data from Davis WeatherLink v2."""

from __future__ import annotations

import time
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from fieldheat.datasources.davis.client import (
    DEFAULT_TIMEOUT,
    HISTORIC_API,
    ISS_SENSOR_TYPE,
    day_end_timestamp,
    day_start_timestamp,
    fahrenheit_to_celsius,
    sign_params,
    timestamp_to_date,
)
from fieldheat.exceptions import ProviderError
from fieldheat.schemas import DailyWeatherRecord, Location, Source
from fieldheat.services.http import provider_session

if TYPE_CHECKING:
    from collections.abc import Callable
    from datetime import date

    import requests


def fetch_historic(
    api_key: str,
    api_secret: str,
    station_id: str,
    start: date,
    end: date,
    *,
    now: Callable[[], float] = time.time,
    session: requests.Session | None = None,
    timeout: float = DEFAULT_TIMEOUT,
) -> dict[str, Any]:
    """
    Fetch historic records for a station with a signed GET.

    Args:
        api_key: WeatherLink API key.
        api_secret: Shared secret used to sign the request.
        station_id: WeatherLink station id.
        start: First day (inclusive).
        end: Last day (inclusive).
        now: Clock for the ``t`` request timestamp.
        session: HTTP session (defaults to the single-attempt provider session).
        timeout: Request timeout in seconds.

    Returns:
        Raw API response dict with a ``sensors`` list.

    Raises:
        requests.RequestException: On network errors or non-2xx responses.
    """
    params: dict[str, str | int] = {
        "api-key": api_key,
        "end-timestamp": day_end_timestamp(end),
        "start-timestamp": day_start_timestamp(start),
        "station-id": station_id,
        "t": int(now()),
    }
    signature = sign_params(params, api_secret)

    resp = (session or provider_session).get(
        HISTORIC_API.format(station_id=station_id),
        params=params,
        headers={"X-Api-Secret": signature},
        timeout=timeout,
    )
    resp.raise_for_status()
    result: dict[str, Any] = resp.json()
    return result


@dataclass
class _DayFold:
    """Running per-day aggregate of sub-daily station records."""

    tmax: float | None = None
    tmin: float | None = None
    rain: float | None = None

    def add(self, hi_f: float | None, lo_f: float | None, rain_mm: float | None) -> None:
        if hi_f is not None:
            hi = fahrenheit_to_celsius(hi_f)
            self.tmax = hi if self.tmax is None else max(self.tmax, hi)
        if lo_f is not None:
            lo = fahrenheit_to_celsius(lo_f)
            self.tmin = lo if self.tmin is None else min(self.tmin, lo)
        if rain_mm is not None:
            self.rain = rain_mm if self.rain is None else self.rain + rain_mm


def parse_historic(data: dict[str, Any], location_id: str) -> list[DailyWeatherRecord]:
    """Fold ISS sensor records into one record per day.

    Highs are maxed, lows are minned and rainfall is summed across every
    record whose interval falls on the same UTC day. ``ts`` marks the end
    of a record's interval, so a record stamped exactly at midnight
    belongs to the day that just ended.
    """
    if "sensors" not in data and data.get("message"):
        raise ProviderError(Source.DAVIS, str(data["message"]))

    days: dict[date, _DayFold] = {}
    for sensor in data.get("sensors") or []:
        if sensor.get("sensor_type") != ISS_SENSOR_TYPE:
            continue
        for rec in sensor.get("data") or []:
            ts = rec.get("ts")
            if ts is None:
                continue
            fold = days.setdefault(timestamp_to_date(ts - 1), _DayFold())
            fold.add(rec.get("temp_hi_at"), rec.get("temp_lo_at"), rec.get("rainfall_mm"))

    return [
        DailyWeatherRecord(
            location_id=location_id,
            date=day,
            source=Source.DAVIS,
            tmax=fold.tmax,
            tmin=fold.tmin,
            precipitation=fold.rain,
        )
        for day, fold in sorted(days.items())
    ]


class DavisProvider:
    """Davis WeatherLink station. Needs api key, secret and station id."""

    name = Source.DAVIS
    requires_key = True

    def __init__(
        self,
        api_key: str,
        api_secret: str,
        station_id: str,
        session: requests.Session | None = None,
        timeout: float = DEFAULT_TIMEOUT,
    ) -> None:
        self.api_key = api_key
        self.api_secret = api_secret
        self.station_id = station_id
        self.session = session
        self.timeout = timeout

    @property
    def is_configured(self) -> bool:
        return bool(self.api_key and self.api_secret and self.station_id)

    def fetch(self, location: Location, start: date, end: date) -> list[DailyWeatherRecord]:
        data = fetch_historic(
            self.api_key,
            self.api_secret,
            self.station_id,
            start,
            end,
            session=self.session,
            timeout=self.timeout,
        )
        # The window's last interval ends at the next midnight and can spill over.
        records = parse_historic(data, location.location_id)
        return [r for r in records if start <= r.date <= end]
