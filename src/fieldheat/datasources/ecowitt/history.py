"""Daily device history from Ecowitt Cloud v3."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from fieldheat.datasources.ecowitt.client import (
    CALL_BACK,
    CYCLE_TYPE,
    DEFAULT_TIMEOUT,
    HISTORY_API,
    RAINFALL_UNIT_ID,
    TEMP_UNIT_ID,
    parse_time,
    to_celsius,
    to_millimetres,
)
from fieldheat.exceptions import ProviderError
from fieldheat.schemas import DailyWeatherRecord, Location, Source
from fieldheat.services.http import provider_session

if TYPE_CHECKING:
    from datetime import date

    import requests


def fetch_history(
    app_key: str,
    api_key: str,
    mac: str,
    start: date,
    end: date,
    *,
    session: requests.Session | None = None,
    timeout: float = DEFAULT_TIMEOUT,
) -> dict[str, Any]:
    """
    Fetch daily outdoor and rainfall history with a form POST.

    Returns:
        Raw API response dict (``code``, ``msg``, ``data``).

    Raises:
        requests.RequestException: On network errors or non-2xx responses.
    """
    fields = {
        "application_key": app_key,
        "api_key": api_key,
        "mac": mac,
        "start_date": start.isoformat(),
        "end_date": end.isoformat(),
        "call_back": CALL_BACK,
        "cycle_type": CYCLE_TYPE,
        "temp_unitid": TEMP_UNIT_ID,
        "rainfall_unitid": RAINFALL_UNIT_ID,
    }
    resp = (session or provider_session).post(HISTORY_API, data=fields, timeout=timeout)
    resp.raise_for_status()
    result: dict[str, Any] = resp.json()
    return result


def parse_history(data: dict[str, Any], location_id: str) -> list[DailyWeatherRecord]:
    """Pair daily temperature highs/lows with the matching rainfall entry.

    Rainfall entries are matched by their own ``time`` when present,
    otherwise by position in the list. Values are normalized to Celsius
    and millimetres using each block's ``unit``, whatever units the
    account is set to.
    """
    code = data.get("code", 0)
    if code not in (0, "0"):
        raise ProviderError(Source.ECOWITT, f"code {code}: {data.get('msg', '')}")

    payload = data.get("data") or {}
    temperature = (payload.get("outdoor") or {}).get("temperature") or {}
    daily_rain = (payload.get("rainfall") or {}).get("daily") or {}
    temps = temperature.get("list") or []
    rain = daily_rain.get("list") or []
    temp_unit = temperature.get("unit")
    rain_unit = daily_rain.get("unit")

    rain_by_day = {parse_time(r["time"]): r.get("value") for r in rain if r.get("time")}

    records: list[DailyWeatherRecord] = []
    for i, entry in enumerate(temps):
        day = parse_time(entry["time"])
        if day in rain_by_day:
            precip = rain_by_day[day]
        else:
            precip = rain[i].get("value") if i < len(rain) else None
        records.append(
            DailyWeatherRecord(
                location_id=location_id,
                date=day,
                source=Source.ECOWITT,
                tmax=to_celsius(entry.get("high"), temp_unit),
                tmin=to_celsius(entry.get("low"), temp_unit),
                precipitation=to_millimetres(precip, rain_unit),
            )
        )
    return records


class EcowittProvider:
    """Ecowitt cloud-connected station. Needs application key, api key, MAC."""

    name = Source.ECOWITT
    requires_key = True

    def __init__(
        self,
        app_key: str,
        api_key: str,
        mac: str,
        session: requests.Session | None = None,
        timeout: float = DEFAULT_TIMEOUT,
    ) -> None:
        self.app_key = app_key
        self.api_key = api_key
        self.mac = mac
        self.session = session
        self.timeout = timeout

    @property
    def is_configured(self) -> bool:
        return bool(self.app_key and self.api_key and self.mac)

    def fetch(self, location: Location, start: date, end: date) -> list[DailyWeatherRecord]:
        data = fetch_history(
            self.app_key,
            self.api_key,
            self.mac,
            start,
            end,
            session=self.session,
            timeout=self.timeout,
        )
        return parse_history(data, location.location_id)
