"""
Prefect flows computing heat-unit reports.

Run locally:
    python -m fieldheat.flows.compute field-1 2024

Run with Prefect dashboard:
    prefect server start &
    python -m fieldheat.flows.compute field-1 2023 2024
"""

from __future__ import annotations

import sys
from pathlib import Path
from typing import Any

from prefect import flow, task

from fieldheat import pipeline
from fieldheat.config import get_settings
from fieldheat.fieldbook import FieldBook
from fieldheat.store import DataStore

store = DataStore(get_settings().data_dir)

# Relative paths within the store
HEAT_UNITS_DIR = Path("derived/heat_units")
TRIALS_DIR = Path("derived/trials")


def _origins(report: dict[str, Any]) -> str:
    return ",".join(sorted({s["data_source"] for s in report.get("seasons", [])}))


@task(name="compute-heat-units")
def compute_heat_units(
    location_id: str,
    seasons: list[dict[str, Any]],
    base_temp: float | None = None,
) -> dict[str, Any]:
    """Resolve weather and compute GDD/CHU for every season."""
    settings = get_settings()
    report = pipeline.compute_heat_units(
        location_id,
        seasons,
        base_temp,
        geo_store=FieldBook.load(settings.fieldbook_path),
        settings=settings,
    )
    return pipeline.report_to_dict(report)


@task(name="save-heat-units")
def save_heat_units(location_id: str, report: dict[str, Any]) -> Path:
    """Save a heat-unit report via store."""
    return store.write(
        HEAT_UNITS_DIR / f"{location_id}.json",
        report,
        source=_origins(report),
        location_id=location_id,
        base_temp=report["base_temp"],
    )


@task(name="aggregate-trial")
def aggregate_trial(trial_id: str, base_temp: float | None = None) -> dict[str, Any]:
    """Per-plot heat units between emergence and maturity."""
    settings = get_settings()
    book = FieldBook.load(settings.fieldbook_path)
    aggregation = pipeline.aggregate_trial(
        trial_id,
        trait_store=book,
        geo_store=book,
        settings=settings,
        base_temp=base_temp,
    )
    return pipeline.aggregation_to_dict(aggregation)


@task(name="save-trial-aggregation")
def save_trial_aggregation(trial_id: str, result: dict[str, Any]) -> Path:
    """Save a trial aggregation via store."""
    return store.write(
        TRIALS_DIR / f"{trial_id}.json",
        result,
        source=result["data_source"] or "none",
        trial_id=trial_id,
        base_temp=result["base_temp"],
    )


@flow(name="heat-units", log_prints=True)
def heat_units(
    location_id: str,
    seasons: list[dict[str, Any]],
    base_temp: float | None = None,
) -> dict[str, Any]:
    """Compute and save a heat-unit report for one location."""
    print(f"Computing heat units for {location_id} ({len(seasons)} season(s))...")
    report = compute_heat_units(location_id, seasons, base_temp)
    output_path = save_heat_units(location_id, report)

    for season in report["seasons"]:
        print(
            f"  {season['label']}: {season['total_gdd']:.0f} GDD, "
            f"{season['total_chu']:.0f} CHU over {season['days_count']} days "
            f"({season['data_source']})"
        )
    for failed in report["failed_seasons"]:
        print(f"  {failed['label']}: FAILED ({failed['error']})")
    print(f"Saved report to {output_path}")
    return report


@flow(name="trial-aggregation", log_prints=True)
def trial_aggregation(trial_id: str, base_temp: float | None = None) -> dict[str, Any]:
    """Compute and save per-plot heat units for one trial."""
    print(f"Aggregating heat units for trial {trial_id}...")
    result = aggregate_trial(trial_id, base_temp)
    output_path = save_trial_aggregation(trial_id, result)
    print(
        f"  {len(result['plots'])} plot(s) aggregated, "
        f"{len(result['excluded'])} excluded ({result['data_source']})"
    )
    print(f"Saved aggregation to {output_path}")
    return result


if __name__ == "__main__":
    location, *years = sys.argv[1:] or ["default"]
    outcome = heat_units(location, [{"year": int(y)} for y in years] or [{"year": 2024}])
    print(f"Flow complete: {outcome['summary']}")
