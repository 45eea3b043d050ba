"""
Domain models for fieldheat.

Pydantic models for the canonical shapes every component agrees on.
Provider adapters normalize their API responses to ``DailyWeatherRecord``;
callers describe requested ranges with ``Season``.
"""

from __future__ import annotations

from datetime import date
from enum import StrEnum

from pydantic import AliasChoices, BaseModel, Field, model_validator

# =============================================================================
# Sources
# =============================================================================


class Source(StrEnum):
    """Weather source tags as stored in the cache and reported as origin."""

    DAVIS = "davis"
    ECOWITT = "ecowitt"
    OPEN_METEO = "open-meteo"
    NOAA = "noaa"
    CACHE = "cache"


# Lower rank wins when several sources cover the same day.
# Ground stations outrank reanalysis; unknown tags sort last.
SOURCE_PRIORITY: dict[str, int] = {
    Source.DAVIS: 1,
    Source.ECOWITT: 1,
    Source.OPEN_METEO: 2,
    Source.NOAA: 3,
}
UNKNOWN_SOURCE_RANK = 4


def source_rank(source: str) -> int:
    """Priority rank for a source tag (1 = most trusted)."""
    return SOURCE_PRIORITY.get(source, UNKNOWN_SOURCE_RANK)


# =============================================================================
# Locations
# =============================================================================


class Location(BaseModel):
    """A field location resolved for one request."""

    model_config = {"frozen": True}

    location_id: str
    lat: float = Field(..., ge=-90, le=90)
    lon: float = Field(..., ge=-180, le=180)


# =============================================================================
# Weather
# =============================================================================

# Measured fields, in storage column order. None means "not reported".
MEASURED_FIELDS: tuple[str, ...] = (
    "tmax",
    "tmin",
    "tmean",
    "precipitation",
    "humidity",
    "solar_radiation",
    "evapotranspiration",
    "wind_speed_max",
    "dew_point",
    "soil_temperature",
    "soil_moisture",
)


class DailyWeatherRecord(BaseModel):
    """One day of weather for one location from one source."""

    location_id: str
    date: date
    source: str
    tmax: float | None = None
    tmin: float | None = None
    tmean: float | None = None
    precipitation: float | None = None
    humidity: float | None = None
    solar_radiation: float | None = None
    evapotranspiration: float | None = None
    wind_speed_max: float | None = None
    dew_point: float | None = None
    soil_temperature: float | None = None
    soil_moisture: float | None = None

    def measured(self) -> dict[str, float | None]:
        """Measured fields only (no identity or source)."""
        return {name: getattr(self, name) for name in MEASURED_FIELDS}


# =============================================================================
# Requested ranges
# =============================================================================

# Growing season used when a caller only names a year
DEFAULT_SEASON_START = (4, 15)
DEFAULT_SEASON_END = (9, 30)


class Season(BaseModel):
    """A requested date range, optionally labelled with a year.

    ``start``/``end`` are accepted as aliases of ``start_date``/``end_date``.
    A season given only as ``{"year": 2024}`` spans 2024-04-15 .. 2024-09-30.
    """

    year: int | None = None
    start_date: date | None = Field(
        default=None, validation_alias=AliasChoices("start_date", "start")
    )
    end_date: date | None = Field(default=None, validation_alias=AliasChoices("end_date", "end"))

    @model_validator(mode="after")
    def _fill_and_check(self) -> Season:
        if self.start_date is None:
            if self.year is None:
                msg = "season needs a start_date or a year"
                raise ValueError(msg)
            self.start_date = date(self.year, *DEFAULT_SEASON_START)
        if self.end_date is None:
            if self.year is None:
                msg = "season needs an end_date or a year"
                raise ValueError(msg)
            self.end_date = date(self.year, *DEFAULT_SEASON_END)
        if self.start_date > self.end_date:
            msg = f"season start {self.start_date} is after end {self.end_date}"
            raise ValueError(msg)
        return self

    @property
    def start(self) -> date:
        assert self.start_date is not None
        return self.start_date

    @property
    def end(self) -> date:
        assert self.end_date is not None
        return self.end_date

    @property
    def label(self) -> str:
        if self.year is not None:
            return str(self.year)
        return f"{self.start.isoformat()}..{self.end.isoformat()}"
