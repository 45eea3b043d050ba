"""
Request-level entry points.

Two request shapes share the same weather resolution:

- ``compute_heat_units``: one location, one or more seasons -> per-day
  series, per-season totals and a multi-season summary
- ``aggregate_trial``: one trial -> per-plot totals over each plot's
  emergence..maturity window, plus the plots that were left out and why

Both run sequentially: one season at a time, one provider call at a time.
A request with at least one good season or plot is a partial success; only
total failure raises.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from datetime import date, timedelta
from typing import TYPE_CHECKING, Any

import structlog
from pydantic import ValidationError

from fieldheat.analysis.phenology import (
    DayIndexTable,
    PlotAggregation,
    aggregate_windows,
    resolve_windows,
)
from fieldheat.cache import WeatherCache
from fieldheat.config import Settings, get_settings
from fieldheat.datasources.providers import build_provider_chain
from fieldheat.exceptions import InputError, WeatherUnavailableError
from fieldheat.indices import (
    MultiSeasonSummary,
    SeasonIndex,
    accumulate_season,
    season_index_to_dict,
    summarize_seasons,
    summary_to_dict,
)
from fieldheat.orchestrator import SourceOrchestrator
from fieldheat.schemas import Location, Season

if TYPE_CHECKING:
    from collections.abc import Iterable

    import requests

    from fieldheat.fieldbook import GeolocationStore, TraitStore

logger = structlog.get_logger(__name__)


# =============================================================================
# Results
# =============================================================================


@dataclass
class SeasonFailure:
    label: str
    start: date
    end: date
    error: str


@dataclass
class HeatUnitReport:
    """Heat units for one location over the requested seasons."""

    location: Location
    base_temp: float
    seasons: list[SeasonIndex] = field(default_factory=list)
    failures: list[SeasonFailure] = field(default_factory=list)
    summary: MultiSeasonSummary | None = None
    synced_records: int = 0  # fetched from a provider for this request
    existing_records: int = 0  # served from the cache


@dataclass
class TrialAggregation:
    """Per-plot heat units for one trial."""

    trial_id: str
    location: Location
    planting_date: date
    base_temp: float
    origin: str | None
    plots: PlotAggregation


# =============================================================================
# Wiring
# =============================================================================


def resolve_location(
    location_id: str,
    geo_store: GeolocationStore | None,
    settings: Settings,
) -> Location:
    """Coordinates for ``location_id``, falling back to the configured default."""
    coords = geo_store.get_coordinates(location_id) if geo_store is not None else None
    if coords is None:
        logger.info(
            "location_default_coordinates",
            location_id=location_id,
            lat=settings.default_lat,
            lon=settings.default_lon,
        )
        coords = (settings.default_lat, settings.default_lon)
    try:
        return Location(location_id=location_id, lat=coords[0], lon=coords[1])
    except ValidationError as exc:
        msg = f"Invalid coordinates for location {location_id}: {coords}"
        raise InputError(msg) from exc


def build_orchestrator(
    settings: Settings | None = None,
    *,
    cache: WeatherCache | None = None,
    session: requests.Session | None = None,
) -> SourceOrchestrator:
    """Cache plus the default provider chain, as configured."""
    settings = settings or get_settings()
    return SourceOrchestrator(
        cache or WeatherCache.from_url(settings.database_url),
        build_provider_chain(settings, session=session),
        strict_cache_coverage=settings.strict_cache_coverage,
    )


def _parse_seasons(seasons: Iterable[Season | dict[str, Any]]) -> list[Season]:
    parsed: list[Season] = []
    for raw in seasons:
        if isinstance(raw, Season):
            parsed.append(raw)
            continue
        try:
            parsed.append(Season.model_validate(raw))
        except ValidationError as exc:
            msg = f"Invalid season {raw!r}: {exc.errors()[0]['msg']}"
            raise InputError(msg) from exc
    if not parsed:
        msg = "At least one season is required"
        raise InputError(msg)
    return parsed


def _check_base_temp(base_temp: float) -> float:
    try:
        value = float(base_temp)
    except (TypeError, ValueError) as exc:
        msg = f"base_temp must be a number, got {base_temp!r}"
        raise InputError(msg) from exc
    if not math.isfinite(value):
        msg = f"base_temp must be finite, got {base_temp!r}"
        raise InputError(msg)
    return value


# =============================================================================
# Seasons report
# =============================================================================


def compute_heat_units(
    location_id: str,
    seasons: Iterable[Season | dict[str, Any]],
    base_temp: float | None = None,
    *,
    orchestrator: SourceOrchestrator | None = None,
    geo_store: GeolocationStore | None = None,
    settings: Settings | None = None,
) -> HeatUnitReport:
    """
    Daily and cumulative GDD/CHU for each requested season.

    Args:
        location_id: Location to compute for.
        seasons: ``Season`` objects or dicts (``year``, ``start_date``/``start``,
            ``end_date``/``end``).
        base_temp: GDD base temperature in Celsius (default from settings).
        orchestrator: Weather source (default: configured cache + providers).
        geo_store: Coordinates lookup; unknown locations use the default.
        settings: Configuration (default: ``get_settings()``).

    Raises:
        InputError: Missing location, no seasons, or a malformed season.
        WeatherUnavailableError: Weather could not be obtained for any season.
    """
    if not location_id:
        msg = "location_id is required"
        raise InputError(msg)
    settings = settings or get_settings()
    requested = _parse_seasons(seasons)
    base = _check_base_temp(settings.base_temp if base_temp is None else base_temp)
    location = resolve_location(location_id, geo_store, settings)
    orchestrator = orchestrator or build_orchestrator(settings)

    report = HeatUnitReport(location=location, base_temp=base)
    for season in requested:
        try:
            resolved = orchestrator.resolve(location, season.start, season.end)
        except WeatherUnavailableError as exc:
            logger.warning("season_weather_unavailable", season=season.label, error=str(exc))
            report.failures.append(SeasonFailure(season.label, season.start, season.end, str(exc)))
            continue

        if resolved.from_cache:
            report.existing_records += len(resolved.records)
        else:
            report.synced_records += len(resolved.records)

        report.seasons.append(
            SeasonIndex(
                label=season.label,
                start=season.start,
                end=season.end,
                base_temp=base,
                origin=resolved.origin,
                year=season.year,
                daily=accumulate_season(resolved.records, base),
            )
        )

    if not report.seasons:
        errors = "; ".join(f"{f.label}: {f.error}" for f in report.failures)
        msg = f"No weather data for any requested season ({errors})"
        raise WeatherUnavailableError(msg)

    report.summary = summarize_seasons(report.seasons)
    logger.info(
        "heat_units_computed",
        location_id=location_id,
        seasons=len(report.seasons),
        failed=len(report.failures),
        synced=report.synced_records,
        existing=report.existing_records,
    )
    return report


def report_to_dict(report: HeatUnitReport) -> dict[str, Any]:
    """Serialize a report to a JSON-compatible dict."""
    return {
        "location": {
            "location_id": report.location.location_id,
            "lat": report.location.lat,
            "lon": report.location.lon,
        },
        "base_temp": report.base_temp,
        "seasons": [season_index_to_dict(s) for s in report.seasons],
        "failed_seasons": [
            {
                "label": f.label,
                "start_date": f.start.isoformat(),
                "end_date": f.end.isoformat(),
                "error": f.error,
            }
            for f in report.failures
        ],
        "summary": summary_to_dict(report.summary) if report.summary else None,
        "sync_info": {
            "synced": report.synced_records,
            "existing": report.existing_records,
        },
    }


# =============================================================================
# Trial aggregation
# =============================================================================


def aggregate_trial(
    trial_id: str,
    *,
    trait_store: TraitStore,
    geo_store: GeolocationStore | None = None,
    orchestrator: SourceOrchestrator | None = None,
    settings: Settings | None = None,
    base_temp: float | None = None,
) -> TrialAggregation:
    """
    Heat units per plot between recorded emergence and maturity.

    The weather for the union of all plot windows is resolved once and
    shared by every plot.

    Raises:
        InputError: Unknown trial, or the trial lacks a planting date or location.
        AggregationError: No plot's maturity value could be read.
        WeatherUnavailableError: The terminal provider failed.
    """
    if not trial_id:
        msg = "trial_id is required"
        raise InputError(msg)
    settings = settings or get_settings()
    base = _check_base_temp(settings.base_temp if base_temp is None else base_temp)

    trial = trait_store.get_trial(trial_id)
    if trial is None:
        msg = f"Unknown trial {trial_id}"
        raise InputError(msg)
    if trial.planting_date is None:
        msg = f"Trial {trial_id} has no planting date"
        raise InputError(msg)
    if not trial.location_id:
        msg = f"Trial {trial_id} has no location"
        raise InputError(msg)

    maturity = trait_store.get_trait_values(trial_id, settings.maturity_trait_id)
    emergence = trait_store.get_trait_values(trial_id, settings.emergence_trait_id)
    resolution = resolve_windows(
        maturity,
        emergence,
        trial.planting_date,
        settings.emergence_fallback_offset,
    )
    location = resolve_location(trial.location_id, geo_store, settings)

    if not resolution.windows:
        return TrialAggregation(
            trial_id=trial_id,
            location=location,
            planting_date=trial.planting_date,
            base_temp=base,
            origin=None,
            plots=PlotAggregation(diagnostics=list(resolution.diagnostics)),
        )

    orchestrator = orchestrator or build_orchestrator(settings)
    start = trial.planting_date + timedelta(days=resolution.min_offset)
    end = trial.planting_date + timedelta(days=resolution.max_offset)
    resolved = orchestrator.resolve(location, start, end)

    table = DayIndexTable.build(resolved.records, trial.planting_date, base)
    plots = aggregate_windows(resolution, table)
    logger.info(
        "trial_aggregated",
        trial_id=trial_id,
        plots=len(plots.results),
        excluded=len(plots.diagnostics),
        origin=resolved.origin,
    )
    return TrialAggregation(
        trial_id=trial_id,
        location=location,
        planting_date=trial.planting_date,
        base_temp=base,
        origin=resolved.origin,
        plots=plots,
    )


def aggregation_to_dict(aggregation: TrialAggregation) -> dict[str, Any]:
    return {
        "trial_id": aggregation.trial_id,
        "location_id": aggregation.location.location_id,
        "planting_date": aggregation.planting_date.isoformat(),
        "base_temp": aggregation.base_temp,
        "data_source": aggregation.origin,
        "plots": [r.to_dict() for r in aggregation.plots.results],
        "excluded": [d.to_dict() for d in aggregation.plots.diagnostics],
    }

