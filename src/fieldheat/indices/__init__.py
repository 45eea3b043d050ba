"""Growing Degree Days (GDD) and Crop Heat Units (CHU).

Both measure heat accumulated over a period: GDD above a crop-specific base
temperature, CHU with the Ontario day/night response curves.

Public API:
  - models: DayIndex, DailyIndexResult, SeasonIndex, MultiSeasonSummary
  - compute: fill_missing_temperatures, compute_daily_gdd, compute_daily_chu,
             compute_day_index, accumulate_season, summarize_seasons
  - serialization: season_index_to_dict, summary_to_dict
"""

from fieldheat.indices.compute import (
    accumulate_season,
    compute_daily_chu,
    compute_daily_gdd,
    compute_day_index,
    fill_missing_temperatures,
    summarize_seasons,
)
from fieldheat.indices.models import (
    DEFAULT_BASE_TEMP_C,
    MISSING_TMAX_C,
    MISSING_TMIN_C,
    DailyIndexResult,
    DayIndex,
    FilledTemperatures,
    MultiSeasonSummary,
    SeasonIndex,
)
from fieldheat.indices.serialization import (
    daily_result_to_dict,
    season_index_to_dict,
    summary_to_dict,
)

__all__ = [
    "DEFAULT_BASE_TEMP_C",
    "MISSING_TMAX_C",
    "MISSING_TMIN_C",
    "DailyIndexResult",
    "DayIndex",
    "FilledTemperatures",
    "MultiSeasonSummary",
    "SeasonIndex",
    "accumulate_season",
    "compute_daily_chu",
    "compute_daily_gdd",
    "compute_day_index",
    "daily_result_to_dict",
    "fill_missing_temperatures",
    "season_index_to_dict",
    "summarize_seasons",
    "summary_to_dict",
]
