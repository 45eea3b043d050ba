"""
Prefect flow that pre-fills the weather cache from the Open-Meteo archive.

For every field-book location with coordinates, fetches daily weather in
yearly chunks from ``backfill_start`` to yesterday and upserts it under the
``open-meteo`` source. Unlike request-time provider calls, this job retries
transient HTTP errors and pauses between chunks to stay under the archive
API's rate limit.

Run locally:
    python -m fieldheat.flows.backfill
"""

from __future__ import annotations

import time
from datetime import UTC, date, datetime, timedelta
from pathlib import Path
from typing import Any

from prefect import flow, task

from fieldheat.cache import WeatherCache
from fieldheat.config import get_settings
from fieldheat.datasources.openmeteo import fetch_archive_daily, parse_archive_daily
from fieldheat.exceptions import InputError
from fieldheat.fieldbook import FieldBook
from fieldheat.orchestrator import PROVIDER_FAILURES
from fieldheat.schemas import Source
from fieldheat.services.http import BACKFILL_RETRY, create_session
from fieldheat.store import DataStore

store = DataStore(get_settings().data_dir)

#: Retrying session, used only by this job.
backfill_session = create_session(retry=BACKFILL_RETRY, timeout=60)

BACKFILL_DIR = Path("historical/backfill")

# Seconds to wait after a chunk that returned data
CHUNK_PAUSE = 1.0


def year_chunks(start: date, end: date) -> list[tuple[date, date]]:
    """Split [start, end] at calendar-year boundaries."""
    chunks: list[tuple[date, date]] = []
    current = start
    while current <= end:
        chunk_end = min(date(current.year, 12, 31), end)
        chunks.append((current, chunk_end))
        current = chunk_end + timedelta(days=1)
    return chunks


@task(name="backfill-location")
def backfill_location(
    location_id: str,
    lat: float,
    lon: float,
    start: date,
    end: date,
) -> dict[str, Any]:
    """Fetch and cache one location's history, one year per request.

    A failed chunk is reported and skipped; the rest still run.
    """
    settings = get_settings()
    cache = WeatherCache.from_url(settings.database_url)
    fetched = written = 0
    failed: list[str] = []

    for chunk_start, chunk_end in year_chunks(start, end):
        label = f"{chunk_start.isoformat()}..{chunk_end.isoformat()}"
        try:
            data = fetch_archive_daily(
                lat,
                lon,
                chunk_start,
                chunk_end,
                session=backfill_session,
                timeout=settings.openmeteo_timeout,
            )
            records = parse_archive_daily(data, location_id)
        except PROVIDER_FAILURES as exc:
            print(f"  {location_id} {label}: failed ({exc})")
            failed.append(label)
            continue

        stored = cache.write(location_id, records, Source.OPEN_METEO)
        fetched += len(records)
        written += stored
        print(f"  {location_id} {label}: {len(records)} days fetched, {stored} stored")
        if records:
            time.sleep(CHUNK_PAUSE)

    return {
        "location_id": location_id,
        "start_date": start.isoformat(),
        "end_date": end.isoformat(),
        "fetched": fetched,
        "stored": written,
        "failed_chunks": failed,
        "cached_total": cache.count(location_id, Source.OPEN_METEO),
    }


@flow(name="backfill-weather", log_prints=True)
def backfill_weather(
    start: date | None = None,
    end: date | None = None,
    force: bool = False,
) -> dict[str, Any]:
    """
    Backfill historical weather for every located field-book location.

    Locations backfilled within the last day are skipped unless ``force``.
    """
    settings = get_settings()
    start = start or settings.backfill_start
    end = end or date.today() - timedelta(days=1)
    if start > end:
        msg = f"Backfill start {start} is after end {end}"
        raise InputError(msg)

    book = FieldBook.load(settings.fieldbook_path)
    location_ids = book.located_ids()
    if not location_ids:
        print(f"No locations with coordinates in {settings.fieldbook_path}, nothing to do.")
        return {}

    print(f"Backfilling {len(location_ids)} location(s) from {start} to {end}...")
    results: dict[str, Any] = {}
    for location_id in location_ids:
        marker = BACKFILL_DIR / f"{location_id}.json"
        if not force and store.is_fresh(marker):
            previous = store.read(marker) or {}
            print(
                f"{location_id}: backfilled recently "
                f"({previous.get('cached_total', 0)} cached), skipping."
            )
            continue

        coords = book.get_coordinates(location_id)
        assert coords is not None
        summary = backfill_location(location_id, coords[0], coords[1], start, end)
        store.write(
            marker,
            summary,
            source=Source.OPEN_METEO,
            valid_until=datetime.now(UTC) + timedelta(hours=24),
            location_id=location_id,
        )
        results[location_id] = summary
        print(
            f"{location_id}: {summary['stored']} records stored, "
            f"{len(summary['failed_chunks'])} chunk(s) failed"
        )

    return results


if __name__ == "__main__":
    result = backfill_weather()
    print(f"Flow complete: {len(result)} location(s) backfilled")
