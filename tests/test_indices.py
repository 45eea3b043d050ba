"""Tests for the heat-unit (GDD/CHU) computation package.

Covers:
- Single-day GDD and CHU formulas, including clamping
- Missing-temperature substitution
- Season accumulation (running totals, ordering, precipitation)
- Multi-season summary
- JSON serialization helpers
"""

from __future__ import annotations

from datetime import date, timedelta

import pytest

from fieldheat.indices import (
    DEFAULT_BASE_TEMP_C,
    MISSING_TMAX_C,
    MISSING_TMIN_C,
    SeasonIndex,
    accumulate_season,
    compute_daily_chu,
    compute_daily_gdd,
    compute_day_index,
    fill_missing_temperatures,
    season_index_to_dict,
    summarize_seasons,
    summary_to_dict,
)
from fieldheat.schemas import DailyWeatherRecord


def _record(
    day: date,
    tmax: float | None = 25.0,
    tmin: float | None = 15.0,
    precipitation: float | None = 1.0,
) -> DailyWeatherRecord:
    return DailyWeatherRecord(
        location_id="field-1",
        date=day,
        source="open-meteo",
        tmax=tmax,
        tmin=tmin,
        precipitation=precipitation,
    )


def _season(label: str, days: int, tmax: float = 25.0, tmin: float = 15.0) -> SeasonIndex:
    start = date(2024, 5, 1)
    records = [_record(start + timedelta(days=i), tmax, tmin) for i in range(days)]
    return SeasonIndex(
        label=label,
        start=start,
        end=start + timedelta(days=days - 1),
        base_temp=10.0,
        origin="open-meteo",
        daily=accumulate_season(records, 10.0),
    )


# =============================================================================
# compute_daily_gdd
# =============================================================================


class TestComputeDailyGDD:
    """Tests for the single-day GDD computation."""

    def test_warm_day(self):
        """(25 + 15) / 2 - 10 = 10."""
        assert compute_daily_gdd(25.0, 15.0, 10.0) == pytest.approx(10.0)

    def test_default_base_temp(self):
        assert DEFAULT_BASE_TEMP_C == 10.0
        assert compute_daily_gdd(20.0, 10.0) == pytest.approx(5.0)

    @pytest.mark.parametrize(
        ("tmax", "tmin", "base"),
        [(10.0, 10.0, 10.0), (12.0, 4.0, 10.0), (-5.0, -15.0, 0.0), (8.0, 0.0, 8.0)],
    )
    def test_zero_when_average_at_or_below_base(self, tmax, tmin, base):
        """No heat accumulates when tavg <= base."""
        assert compute_daily_gdd(tmax, tmin, base) == 0.0

    def test_no_upper_cutoff(self):
        """Hot days are not capped: (40 + 30) / 2 - 10 = 25."""
        assert compute_daily_gdd(40.0, 30.0, 10.0) == pytest.approx(25.0)

    def test_base_temp_shifts_result(self):
        assert compute_daily_gdd(25.0, 15.0, 0.0) == pytest.approx(20.0)
        assert compute_daily_gdd(25.0, 15.0, 4.4) == pytest.approx(15.6)


# =============================================================================
# compute_daily_chu
# =============================================================================


class TestComputeDailyCHU:
    """Tests for the Ontario crop heat unit formula."""

    def test_reference_day(self):
        """tmax 25 / tmin 15: Ymax = 31.05, Ymin = 19.08, CHU = 25.065."""
        assert compute_daily_chu(25.0, 15.0) == pytest.approx(25.065)

    def test_cold_day_is_zero(self):
        """Both curves are zero below their thresholds."""
        assert compute_daily_chu(9.0, 3.0) == 0.0

    def test_only_night_component(self):
        """tmax at the 10 C threshold contributes nothing."""
        # Ymin = 1.8 * (8.4 - 4.4) = 7.2, halved
        assert compute_daily_chu(10.0, 8.4) == pytest.approx(3.6)

    def test_extreme_heat_floored_at_zero(self):
        """Ymax goes negative above ~49.6 C; the average is floored."""
        assert compute_daily_chu(60.0, 0.0) == 0.0

    def test_only_average_is_floored(self):
        """A negative Ymax still offsets a positive Ymin before flooring."""
        # Ymax = 3.33 * 50 - 0.084 * 2500 = -43.5; Ymin = 1.8 * 25.6 = 46.08
        assert compute_daily_chu(60.0, 30.0) == pytest.approx((46.08 - 43.5) / 2)

    @pytest.mark.parametrize("tmax", [-30.0, 0.0, 10.0, 30.0, 49.6, 55.0, 70.0])
    @pytest.mark.parametrize("tmin", [-30.0, 0.0, 4.4, 15.0, 35.0])
    def test_never_negative(self, tmax, tmin):
        assert compute_daily_chu(tmax, tmin) >= 0.0


# =============================================================================
# Missing temperatures
# =============================================================================


class TestFillMissingTemperatures:
    """Tests for the 20 C / 10 C substitution."""

    def test_both_present(self):
        filled = fill_missing_temperatures(25.0, 15.0)
        assert (filled.tmax, filled.tmin) == (25.0, 15.0)
        assert filled.defaulted is False

    def test_both_missing(self):
        filled = fill_missing_temperatures(None, None)
        assert (filled.tmax, filled.tmin) == (MISSING_TMAX_C, MISSING_TMIN_C)
        assert filled.tmax_defaulted and filled.tmin_defaulted
        assert filled.defaulted is True

    def test_only_tmin_missing(self):
        filled = fill_missing_temperatures(30.0, None)
        assert filled.tmax == 30.0
        assert filled.tmin == MISSING_TMIN_C
        assert filled.tmax_defaulted is False
        assert filled.defaulted is True

    def test_zero_is_a_value(self):
        """0 C is a measurement, not a missing value."""
        filled = fill_missing_temperatures(0.0, 0.0)
        assert (filled.tmax, filled.tmin) == (0.0, 0.0)
        assert filled.defaulted is False


class TestComputeDayIndex:
    """Tests for the combined day index."""

    def test_measured_day(self):
        day = compute_day_index(25.0, 15.0, 10.0)
        assert day.tavg == pytest.approx(20.0)
        assert day.gdd == pytest.approx(10.0)
        assert day.chu == pytest.approx(25.065)
        assert day.defaulted is False

    def test_missing_day_uses_defaults(self):
        """20/10 defaults give tavg 15 and GDD 5 at base 10."""
        day = compute_day_index(None, None, 10.0)
        assert day.tavg == pytest.approx(15.0)
        assert day.gdd == pytest.approx(5.0)
        assert day.defaulted is True


# =============================================================================
# accumulate_season
# =============================================================================


class TestAccumulateSeason:
    """Tests for running totals over a season."""

    def test_running_totals(self):
        start = date(2024, 5, 1)
        records = [_record(start + timedelta(days=i)) for i in range(3)]
        results = accumulate_season(records, 10.0)

        assert [r.gdd_cumulative for r in results] == pytest.approx([10.0, 20.0, 30.0])
        assert [r.chu_cumulative for r in results] == pytest.approx([25.065, 50.13, 75.195])
        assert [r.precipitation_cumulative for r in results] == pytest.approx([1.0, 2.0, 3.0])

    def test_first_day_starts_from_zero(self):
        results = accumulate_season([_record(date(2024, 5, 1))], 10.0)
        assert results[0].gdd_cumulative == pytest.approx(results[0].gdd_day)

    def test_sorted_by_date(self):
        records = [_record(date(2024, 5, 3)), _record(date(2024, 5, 1)), _record(date(2024, 5, 2))]
        results = accumulate_season(records, 10.0)
        assert [r.date for r in results] == [date(2024, 5, 1), date(2024, 5, 2), date(2024, 5, 3)]

    def test_cumulative_monotonic(self):
        """Totals never decrease, even across cold and hot days."""
        temps = [(30.0, 18.0), (5.0, -3.0), (None, None), (12.0, 9.0), (55.0, 2.0), (22.0, 11.0)]
        start = date(2024, 4, 15)
        records = [
            _record(start + timedelta(days=i), tmax, tmin) for i, (tmax, tmin) in enumerate(temps)
        ]
        results = accumulate_season(records, 10.0)

        for prev, cur in zip(results, results[1:], strict=False):
            assert cur.gdd_cumulative >= prev.gdd_cumulative
            assert cur.chu_cumulative >= prev.chu_cumulative

    def test_missing_precipitation_counts_as_zero(self):
        records = [
            _record(date(2024, 5, 1), precipitation=None),
            _record(date(2024, 5, 2), precipitation=4.0),
        ]
        results = accumulate_season(records, 10.0)
        assert results[0].precipitation_day == 0.0
        assert results[1].precipitation_cumulative == pytest.approx(4.0)

    def test_defaulted_flag_carried(self):
        results = accumulate_season([_record(date(2024, 5, 1), tmax=None)], 10.0)
        assert results[0].temperature_defaulted is True
        assert results[0].tmax == MISSING_TMAX_C

    def test_empty(self):
        assert accumulate_season([], 10.0) == []


# =============================================================================
# summarize_seasons
# =============================================================================


class TestSummarizeSeasons:
    """Tests for the multi-season summary."""

    def test_mean_of_season_totals(self):
        """Each season weighs the same regardless of length."""
        short = _season("2023", 2)  # 20 GDD
        long = _season("2024", 4)  # 40 GDD
        summary = summarize_seasons([short, long])

        assert summary.avg_gdd == pytest.approx(30.0)
        assert summary.avg_chu == pytest.approx(25.065 * 3)
        assert summary.avg_precipitation == pytest.approx(3.0)
        assert summary.total_days == 6
        assert summary.seasons_count == 2

    def test_no_seasons(self):
        summary = summarize_seasons([])
        assert summary.avg_gdd == 0.0
        assert summary.seasons_count == 0


class TestSeasonIndex:
    """Tests for SeasonIndex properties."""

    def test_totals(self):
        season = _season("2024", 5)
        assert season.total_gdd == pytest.approx(50.0)
        assert season.days_count == 5
        assert season.avg_temp == pytest.approx(20.0)

    def test_empty_season(self):
        season = SeasonIndex(
            label="2024",
            start=date(2024, 5, 1),
            end=date(2024, 5, 2),
            base_temp=10.0,
            origin="open-meteo",
        )
        assert season.total_gdd == 0.0
        assert season.avg_temp == 0.0


# =============================================================================
# Serialization
# =============================================================================


class TestSerialization:
    """Tests for JSON serialization helpers."""

    def test_season_index_to_dict(self):
        result = season_index_to_dict(_season("2024", 3))

        assert result["label"] == "2024"
        assert result["start_date"] == "2024-05-01"
        assert result["total_gdd"] == 30.0
        assert result["total_chu"] == 75.2
        assert result["data_source"] == "open-meteo"
        assert len(result["daily"]) == 3
        assert result["daily"][0]["chu_day"] == 25.1
        assert result["daily"][0]["temperature_defaulted"] is False

    def test_summary_to_dict(self):
        result = summary_to_dict(summarize_seasons([_season("2024", 2)]))
        assert result == {
            "avg_gdd": 20.0,
            "avg_chu": 50.1,
            "avg_precipitation": 2.0,
            "total_days": 2,
            "seasons_count": 1,
        }
