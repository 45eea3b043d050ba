"""Heat units accumulated between recorded emergence and maturity per plot.

Trial observations record phenological events as free-form strings: a day
count after planting, or a date in one of three encodings. Each value is
turned into a day offset from the trial's planting date, and a plot's heat
units are summed over its window ``[emergence, maturity)`` from a day-offset
table built once per trial.

Plots that cannot be used are excluded and reported, never given zero
totals, so "excluded" stays distinguishable from "no heat accumulated".
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from datetime import date
from enum import StrEnum
from typing import TYPE_CHECKING, Any

from fieldheat.exceptions import AggregationError
from fieldheat.indices.compute import compute_day_index

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping

    from fieldheat.indices.models import DayIndex
    from fieldheat.schemas import DailyWeatherRecord

# Bare integers below this are day counts; larger ones must be dates
MAX_DAY_COUNT = 200

EXPECTED_FORMATS = "a day count below 200, YYYYMMDD, YYMMDD or YYYY-MM-DD"

_DIGITS = re.compile(r"[0-9]+")
# Signed whole number, optionally written as a float ("45.0")
_DAY_COUNT = re.compile(r"([+-]?[0-9]+)(?:\.0*)?")
_ISO_PREFIX = re.compile(r"([0-9]{4})-([0-9]{2})-([0-9]{2})")


class ExclusionReason(StrEnum):
    UNPARSEABLE = "unparseable"
    NOT_AFTER_PLANTING = "not_after_planting"
    NO_EMERGENCE = "no_emergence"
    NO_WEATHER = "no_weather"


# =============================================================================
# Day offsets
# =============================================================================


def _parse_date(text: str) -> date | None:
    if _DIGITS.fullmatch(text):
        if len(text) == 8:
            return date(int(text[:4]), int(text[4:6]), int(text[6:8]))
        if len(text) == 6:
            return date(2000 + int(text[:2]), int(text[2:4]), int(text[4:6]))
        return None
    match = _ISO_PREFIX.match(text)
    if match:
        return date(int(match[1]), int(match[2]), int(match[3]))
    return None


def parse_day_offset(raw: Any, planting_date: date) -> int | None:
    """Detect the format of a recorded value and convert it to a day offset.

    Formats are tried in order:

    1. integer below 200: the offset itself. A sign or a zero fraction
       (``-5``, ``45.0``) is accepted; negatives are rejected later as
       not after planting.
    2. ``YYYYMMDD``
    3. ``YYMMDD`` (year 20YY)
    4. anything starting with ``YYYY-MM-DD``

    Returns:
        Days after ``planting_date`` (may be zero or negative), or None when
        the value matches no format or names an impossible date.
    """
    if raw is None:
        return None
    text = str(raw).strip()
    count = _DAY_COUNT.fullmatch(text)
    if count and int(count[1]) < MAX_DAY_COUNT:
        return int(count[1])
    try:
        parsed = _parse_date(text)
    except ValueError:
        return None
    if parsed is None:
        return None
    return (parsed - planting_date).days


def resolve_day_offset(raw: Any, planting_date: date) -> int | None:
    """Like ``parse_day_offset`` but offsets at or before planting are None."""
    offset = parse_day_offset(raw, planting_date)
    if offset is None or offset <= 0:
        return None
    return offset


# =============================================================================
# Data structures
# =============================================================================


@dataclass(frozen=True)
class PhenologyWindow:
    """Accumulation window in day offsets: emergence inclusive, maturity exclusive."""

    start_offset: int
    end_offset: int
    emergence_defaulted: bool = False

    def __post_init__(self) -> None:
        if self.start_offset >= self.end_offset:
            msg = f"window start {self.start_offset} must be before end {self.end_offset}"
            raise ValueError(msg)

    def offsets(self) -> range:
        return range(self.start_offset, self.end_offset)


@dataclass
class PlotDiagnostic:
    """Why a plot was left out of an aggregation."""

    plot_id: str
    reason: ExclusionReason
    raw_value: str | None = None
    detail: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {
            "plot_id": self.plot_id,
            "reason": str(self.reason),
            "raw_value": self.raw_value,
            "detail": self.detail,
        }


@dataclass
class PlotHeatUnits:
    """Heat units summed over one plot's window."""

    plot_id: str
    gdd_total: float
    chu_total: float
    maturity_day_offset: int
    emergence_day_offset: int
    days_counted: int
    emergence_defaulted: bool = False

    def to_dict(self) -> dict[str, Any]:
        return {
            "plot_id": self.plot_id,
            "gdd_total": round(self.gdd_total, 1),
            "chu_total": round(self.chu_total, 1),
            "maturity_day_offset": self.maturity_day_offset,
            "emergence_day_offset": self.emergence_day_offset,
            "days_counted": self.days_counted,
            "emergence_defaulted": self.emergence_defaulted,
        }


@dataclass
class WindowResolution:
    """Per-plot windows derived from raw observations, plus exclusions."""

    windows: dict[str, PhenologyWindow] = field(default_factory=dict)
    diagnostics: list[PlotDiagnostic] = field(default_factory=list)

    @property
    def min_offset(self) -> int:
        return min(w.start_offset for w in self.windows.values())

    @property
    def max_offset(self) -> int:
        """Last day offset any window reads."""
        return max(w.end_offset for w in self.windows.values()) - 1


@dataclass
class PlotAggregation:
    results: list[PlotHeatUnits] = field(default_factory=list)
    diagnostics: list[PlotDiagnostic] = field(default_factory=list)


# =============================================================================
# Day-offset table
# =============================================================================


class DayIndexTable:
    """Day indices addressed by offset from planting.

    Built once per trial from the trial's weather and shared read-only by
    every plot. Offsets with no weather record hold None.
    """

    def __init__(self, planting_date: date, days: list[DayIndex | None]) -> None:
        self.planting_date = planting_date
        self._days = days

    @classmethod
    def build(
        cls,
        records: Iterable[DailyWeatherRecord],
        planting_date: date,
        base_temp: float,
    ) -> DayIndexTable:
        by_offset: dict[int, DayIndex] = {}
        for rec in records:
            offset = (rec.date - planting_date).days
            if offset < 0:
                continue
            by_offset[offset] = compute_day_index(rec.tmax, rec.tmin, base_temp)

        size = max(by_offset) + 1 if by_offset else 0
        days: list[DayIndex | None] = [None] * size
        for offset, day in by_offset.items():
            days[offset] = day
        return cls(planting_date, days)

    def __len__(self) -> int:
        return len(self._days)

    def get(self, offset: int) -> DayIndex | None:
        if 0 <= offset < len(self._days):
            return self._days[offset]
        return None


# =============================================================================
# Aggregation
# =============================================================================


def resolve_windows(
    maturity: Mapping[str, Any],
    emergence: Mapping[str, Any],
    planting_date: date,
    fallback_emergence_offset: int | None = None,
) -> WindowResolution:
    """Derive each plot's window from its recorded maturity and emergence.

    A plot whose emergence is missing, unreadable or not before maturity
    uses ``fallback_emergence_offset`` when it is set and before maturity;
    otherwise the plot is excluded.

    Raises:
        AggregationError: No plots were given, or no maturity value could be
            read at all.
    """
    if not maturity:
        msg = "No maturity observations recorded for this trial"
        raise AggregationError(msg)

    resolution = WindowResolution()
    unparseable = 0

    for plot_id, raw in maturity.items():
        raw_text = None if raw is None else str(raw)
        maturity_offset = parse_day_offset(raw, planting_date)
        if maturity_offset is None:
            unparseable += 1
            resolution.diagnostics.append(
                PlotDiagnostic(plot_id, ExclusionReason.UNPARSEABLE, raw_text, "maturity")
            )
            continue
        if maturity_offset <= 0:
            resolution.diagnostics.append(
                PlotDiagnostic(
                    plot_id,
                    ExclusionReason.NOT_AFTER_PLANTING,
                    raw_text,
                    f"maturity offset {maturity_offset}",
                )
            )
            continue

        emergence_raw = emergence.get(plot_id)
        emergence_offset = resolve_day_offset(emergence_raw, planting_date)
        if emergence_offset is not None and emergence_offset < maturity_offset:
            resolution.windows[plot_id] = PhenologyWindow(emergence_offset, maturity_offset)
        elif (
            fallback_emergence_offset is not None
            and 0 <= fallback_emergence_offset < maturity_offset
        ):
            resolution.windows[plot_id] = PhenologyWindow(
                fallback_emergence_offset, maturity_offset, emergence_defaulted=True
            )
        else:
            detail = (
                "no emergence recorded"
                if emergence_raw is None
                else f"emergence {emergence_raw!r} unusable before maturity {maturity_offset}"
            )
            resolution.diagnostics.append(
                PlotDiagnostic(plot_id, ExclusionReason.NO_EMERGENCE, raw_text, detail)
            )

    if unparseable == len(maturity):
        msg = (
            f"None of the {unparseable} maturity values could be read; "
            f"expected {EXPECTED_FORMATS}"
        )
        raise AggregationError(msg)

    return resolution


def aggregate_window(
    plot_id: str,
    window: PhenologyWindow,
    table: DayIndexTable,
) -> PlotHeatUnits | None:
    """Sum day indices over a plot's window.

    Offsets without weather are skipped. Returns None when no day in the
    window had weather, so the plot can be excluded rather than zeroed.
    """
    gdd_total = chu_total = 0.0
    days = 0
    for offset in window.offsets():
        day = table.get(offset)
        if day is None:
            continue
        gdd_total += day.gdd
        chu_total += day.chu
        days += 1

    if days == 0:
        return None
    return PlotHeatUnits(
        plot_id=plot_id,
        gdd_total=gdd_total,
        chu_total=chu_total,
        maturity_day_offset=window.end_offset,
        emergence_day_offset=window.start_offset,
        days_counted=days,
        emergence_defaulted=window.emergence_defaulted,
    )


def aggregate_windows(resolution: WindowResolution, table: DayIndexTable) -> PlotAggregation:
    """Aggregate every resolved window against one shared table."""
    aggregation = PlotAggregation(diagnostics=list(resolution.diagnostics))
    for plot_id, window in resolution.windows.items():
        result = aggregate_window(plot_id, window, table)
        if result is None:
            aggregation.diagnostics.append(
                PlotDiagnostic(
                    plot_id,
                    ExclusionReason.NO_WEATHER,
                    detail=f"no weather for offsets {window.start_offset}..{window.end_offset - 1}",
                )
            )
            continue
        aggregation.results.append(result)
    return aggregation
