"""Ecowitt Cloud v3 API constants.

API docs: https://doc.ecowitt.net/web/#/apiv3en
"""

from __future__ import annotations

from datetime import UTC, date, datetime

from fieldheat.datasources.davis.client import fahrenheit_to_celsius

HISTORY_API = "https://api.ecowitt.net/api/v3/device/history"

CALL_BACK = "outdoor,rainfall"
CYCLE_TYPE = "day"

# Unit ids requested on every call; 1 = Celsius, 12 = millimetres.
TEMP_UNIT_ID = 1
RAINFALL_UNIT_ID = 12

FAHRENHEIT_UNITS = frozenset({"℉", "°F", "F"})
INCH_UNITS = frozenset({"in", "inch", "inches"})
MM_PER_INCH = 25.4

DEFAULT_TIMEOUT = 30  # seconds


def parse_time(value: str | int | float) -> date:
    """Ecowitt list entries carry either an epoch or an ISO date/datetime."""
    text = str(value).strip()
    if text.isdigit():
        return datetime.fromtimestamp(int(text), UTC).date()
    return date.fromisoformat(text[:10])


def to_celsius(value: float | None, unit: str | None) -> float | None:
    """Normalize a temperature reported in ``unit`` to Celsius."""
    if value is None:
        return None
    value = float(value)
    if unit and unit.strip() in FAHRENHEIT_UNITS:
        return fahrenheit_to_celsius(value)
    return value


def to_millimetres(value: float | None, unit: str | None) -> float | None:
    if value is None:
        return None
    value = float(value)
    if unit and unit.strip().lower() in INCH_UNITS:
        return value * MM_PER_INCH
    return value
