"""JSON serialization helpers for heat-unit results."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from fieldheat.indices.models import DailyIndexResult, MultiSeasonSummary, SeasonIndex


def daily_result_to_dict(entry: DailyIndexResult) -> dict[str, Any]:
    """Serialize one day, values rounded to one decimal."""
    return {
        "date": entry.date.isoformat(),
        "tmax": round(entry.tmax, 1),
        "tmin": round(entry.tmin, 1),
        "tavg": round(entry.tavg, 1),
        "gdd_day": round(entry.gdd_day, 1),
        "gdd_cumulative": round(entry.gdd_cumulative, 1),
        "chu_day": round(entry.chu_day, 1),
        "chu_cumulative": round(entry.chu_cumulative, 1),
        "precipitation_day": round(entry.precipitation_day, 1),
        "precipitation_cumulative": round(entry.precipitation_cumulative, 1),
        "temperature_defaulted": entry.temperature_defaulted,
    }


def season_index_to_dict(season: SeasonIndex) -> dict[str, Any]:
    """Serialize a SeasonIndex to a JSON-compatible dict.

    Args:
        season: The season to serialize.

    Returns:
        Dict with range, totals, origin and daily entries.
    """
    return {
        "label": season.label,
        "year": season.year,
        "start_date": season.start.isoformat(),
        "end_date": season.end.isoformat(),
        "base_temp": season.base_temp,
        "total_gdd": round(season.total_gdd, 1),
        "total_chu": round(season.total_chu, 1),
        "total_precipitation": round(season.total_precipitation, 1),
        "days_count": season.days_count,
        "avg_temp": round(season.avg_temp, 1),
        "data_source": season.origin,
        "daily": [daily_result_to_dict(entry) for entry in season.daily],
    }


def summary_to_dict(summary: MultiSeasonSummary) -> dict[str, Any]:
    return {
        "avg_gdd": round(summary.avg_gdd, 1),
        "avg_chu": round(summary.avg_chu, 1),
        "avg_precipitation": round(summary.avg_precipitation, 1),
        "total_days": summary.total_days,
        "seasons_count": summary.seasons_count,
    }
