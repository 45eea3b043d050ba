"""Trial-level analysis over cached weather.

Pure functions: callers fetch weather and trait values, this package only
turns them into per-plot results.

Public API:
  - phenology: parse_day_offset, resolve_day_offset, DayIndexTable,
               resolve_windows, aggregate_window, aggregate_windows
"""

from fieldheat.analysis.phenology import (
    ExclusionReason,
    DayIndexTable,
    PhenologyWindow,
    PlotAggregation,
    PlotDiagnostic,
    PlotHeatUnits,
    WindowResolution,
    aggregate_window,
    aggregate_windows,
    parse_day_offset,
    resolve_day_offset,
    resolve_windows,
)

__all__ = [
    "DayIndexTable",
    "ExclusionReason",
    "PhenologyWindow",
    "PlotAggregation",
    "PlotDiagnostic",
    "PlotHeatUnits",
    "WindowResolution",
    "aggregate_window",
    "aggregate_windows",
    "parse_day_offset",
    "resolve_day_offset",
    "resolve_windows",
]
