"""Davis WeatherLink v2 API constants and request signing.

API docs: https://weatherlink.github.io/v2-api/
"""

from __future__ import annotations

import hashlib
import hmac
from datetime import UTC, date, datetime, timedelta

HISTORIC_API = "https://api.weatherlink.com/v2/historic/{station_id}"

# Integrated Sensor Suite, the outdoor temperature/rain package
ISS_SENSOR_TYPE = 45

DEFAULT_TIMEOUT = 30  # seconds


def canonical_query(params: dict[str, str | int]) -> str:
    """Parameters sorted by name and joined as a query string."""
    return "&".join(f"{name}={params[name]}" for name in sorted(params))


def sign_params(params: dict[str, str | int], secret: str) -> str:
    """HMAC-SHA256 signature of the canonical query string.

    Deterministic for a given parameter set; the ``t`` timestamp parameter
    is what bounds a signature in time.
    """
    message = canonical_query(params).encode()
    return hmac.new(secret.encode(), message, hashlib.sha256).hexdigest()


def day_start_timestamp(day: date) -> int:
    """Unix timestamp of midnight UTC at the start of ``day``."""
    return int(datetime(day.year, day.month, day.day, tzinfo=UTC).timestamp())


def day_end_timestamp(day: date) -> int:
    """Unix timestamp of midnight UTC at the end of ``day``."""
    return day_start_timestamp(day + timedelta(days=1))


def timestamp_to_date(ts: int | float) -> date:
    return datetime.fromtimestamp(ts, UTC).date()


def fahrenheit_to_celsius(value: float) -> float:
    return (value - 32) * 5 / 9
