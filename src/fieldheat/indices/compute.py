"""Pure heat-unit computation functions (no I/O).

GDD (simple average method, no upper cutoff)::

    T_avg = (T_max + T_min) / 2
    GDD_daily = max(0, T_avg - base_temp)

CHU (Ontario method)::

    Y_max = 3.33 (T_max - 10) - 0.084 (T_max - 10)^2   if T_max > 10 else 0
    Y_min = 1.8 (T_min - 4.4)                          if T_min > 4.4 else 0
    CHU_daily = max(0, (Y_max + Y_min) / 2)

Only the averaged CHU is floored; ``Y_max`` can go negative on very hot days
(above ~49.6 C) and is averaged as-is. Every caller goes through
``compute_day_index`` so the season series and the phenology windows use the
same convention.
"""

from __future__ import annotations

import statistics
from typing import TYPE_CHECKING

from fieldheat.indices.models import (
    CHU_MAX_THRESHOLD_C,
    CHU_MIN_THRESHOLD_C,
    DEFAULT_BASE_TEMP_C,
    MISSING_TMAX_C,
    MISSING_TMIN_C,
    DailyIndexResult,
    DayIndex,
    FilledTemperatures,
    MultiSeasonSummary,
    SeasonIndex,
)

if TYPE_CHECKING:
    from collections.abc import Iterable

    from fieldheat.schemas import DailyWeatherRecord


def fill_missing_temperatures(tmax: float | None, tmin: float | None) -> FilledTemperatures:
    """Substitute 20 C / 10 C for a missing daily max / min.

    This is the only place temperature defaults are applied; the flags let
    callers tell a measured 20 C from a substituted one.
    """
    return FilledTemperatures(
        tmax=MISSING_TMAX_C if tmax is None else tmax,
        tmin=MISSING_TMIN_C if tmin is None else tmin,
        tmax_defaulted=tmax is None,
        tmin_defaulted=tmin is None,
    )


def compute_daily_gdd(tmax: float, tmin: float, base_temp: float = DEFAULT_BASE_TEMP_C) -> float:
    """Growing degree days for one day (>= 0)."""
    tavg = (tmax + tmin) / 2
    return max(0.0, tavg - base_temp)


def compute_daily_chu(tmax: float, tmin: float) -> float:
    """Ontario crop heat units for one day (>= 0)."""
    excess_max = tmax - CHU_MAX_THRESHOLD_C
    y_max = 3.33 * excess_max - 0.084 * excess_max**2 if excess_max > 0 else 0.0
    y_min = 1.8 * (tmin - CHU_MIN_THRESHOLD_C) if tmin > CHU_MIN_THRESHOLD_C else 0.0
    return max(0.0, (y_max + y_min) / 2)


def compute_day_index(
    tmax: float | None,
    tmin: float | None,
    base_temp: float = DEFAULT_BASE_TEMP_C,
) -> DayIndex:
    """GDD and CHU for one day, filling missing temperatures first.

    Args:
        tmax: Daily maximum temperature in Celsius, or None if not reported.
        tmin: Daily minimum temperature in Celsius, or None if not reported.
        base_temp: GDD base temperature in Celsius.
    """
    temps = fill_missing_temperatures(tmax, tmin)
    return DayIndex(
        tavg=(temps.tmax + temps.tmin) / 2,
        gdd=compute_daily_gdd(temps.tmax, temps.tmin, base_temp),
        chu=compute_daily_chu(temps.tmax, temps.tmin),
        defaulted=temps.defaulted,
    )


def accumulate_season(
    records: Iterable[DailyWeatherRecord],
    base_temp: float = DEFAULT_BASE_TEMP_C,
) -> list[DailyIndexResult]:
    """Daily GDD/CHU/precipitation with running totals starting at zero.

    Args:
        records: Daily weather for one season (one record per date).
        base_temp: GDD base temperature in Celsius.

    Returns:
        Results ordered by date. Missing precipitation counts as 0.
    """
    results: list[DailyIndexResult] = []
    gdd_total = chu_total = precip_total = 0.0
    for rec in sorted(records, key=lambda r: r.date):
        temps = fill_missing_temperatures(rec.tmax, rec.tmin)
        day = compute_day_index(rec.tmax, rec.tmin, base_temp)
        precip = rec.precipitation or 0.0
        gdd_total += day.gdd
        chu_total += day.chu
        precip_total += precip
        results.append(
            DailyIndexResult(
                date=rec.date,
                tmax=temps.tmax,
                tmin=temps.tmin,
                tavg=day.tavg,
                gdd_day=day.gdd,
                gdd_cumulative=gdd_total,
                chu_day=day.chu,
                chu_cumulative=chu_total,
                precipitation_day=precip,
                precipitation_cumulative=precip_total,
                temperature_defaulted=day.defaulted,
            )
        )
    return results


def summarize_seasons(seasons: list[SeasonIndex]) -> MultiSeasonSummary:
    """Average the per-season totals across seasons.

    Each season weighs the same regardless of its length.
    """
    if not seasons:
        return MultiSeasonSummary(
            avg_gdd=0.0, avg_chu=0.0, avg_precipitation=0.0, total_days=0, seasons_count=0
        )
    return MultiSeasonSummary(
        avg_gdd=statistics.mean(s.total_gdd for s in seasons),
        avg_chu=statistics.mean(s.total_chu for s in seasons),
        avg_precipitation=statistics.mean(s.total_precipitation for s in seasons),
        total_days=sum(s.days_count for s in seasons),
        seasons_count=len(seasons),
    )
