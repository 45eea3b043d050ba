"""Heat-unit data models and constants."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from datetime import date

DEFAULT_BASE_TEMP_C = 10.0

# Stand-ins for a missing daily max/min so the day still counts
MISSING_TMAX_C = 20.0
MISSING_TMIN_C = 10.0

# Ontario CHU response curves
CHU_MAX_THRESHOLD_C = 10.0
CHU_MIN_THRESHOLD_C = 4.4


@dataclass(frozen=True)
class FilledTemperatures:
    """Daily max/min after substituting defaults for missing values."""

    tmax: float
    tmin: float
    tmax_defaulted: bool = False
    tmin_defaulted: bool = False

    @property
    def defaulted(self) -> bool:
        return self.tmax_defaulted or self.tmin_defaulted


@dataclass(frozen=True)
class DayIndex:
    """Heat units for a single day."""

    tavg: float
    gdd: float
    chu: float
    defaulted: bool = False


@dataclass
class DailyIndexResult:
    """One day of a season series with running totals."""

    date: date
    tmax: float
    tmin: float
    tavg: float
    gdd_day: float
    gdd_cumulative: float
    chu_day: float
    chu_cumulative: float
    precipitation_day: float
    precipitation_cumulative: float
    temperature_defaulted: bool = False


@dataclass
class SeasonIndex:
    """Heat-unit accumulation over one requested season."""

    label: str
    start: date
    end: date
    base_temp: float
    origin: str
    year: int | None = None
    daily: list[DailyIndexResult] = field(default_factory=list)

    @property
    def total_gdd(self) -> float:
        return self.daily[-1].gdd_cumulative if self.daily else 0.0

    @property
    def total_chu(self) -> float:
        return self.daily[-1].chu_cumulative if self.daily else 0.0

    @property
    def total_precipitation(self) -> float:
        return self.daily[-1].precipitation_cumulative if self.daily else 0.0

    @property
    def days_count(self) -> int:
        return len(self.daily)

    @property
    def avg_temp(self) -> float:
        """Mean daily average temperature over the season (0.0 when empty)."""
        if not self.daily:
            return 0.0
        return sum(d.tavg for d in self.daily) / len(self.daily)


@dataclass
class MultiSeasonSummary:
    """Per-season totals averaged across seasons (not pooled over days)."""

    avg_gdd: float
    avg_chu: float
    avg_precipitation: float
    total_days: int
    seasons_count: int
