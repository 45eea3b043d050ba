"""Source-prioritized weather cache over the ``weather_data`` table.

Reads return one whole row per day, chosen by ``schemas.SOURCE_PRIORITY``
(most recently written row on a tie). Fields are never merged across sources.

Writes upsert on (location_id, date, source). Both directions are
best-effort: storage errors are logged and turned into an empty read or a
zero write count so a request can still be answered from fresh provider data.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

import structlog
from sqlalchemy import case, func, select
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from fieldheat.db import COLUMN_MAP, WeatherData, init_db, make_engine
from fieldheat.schemas import (
    SOURCE_PRIORITY,
    UNKNOWN_SOURCE_RANK,
    DailyWeatherRecord,
)

if TYPE_CHECKING:
    from collections.abc import Iterable
    from datetime import date

    from sqlalchemy import Engine

logger = structlog.get_logger(__name__)

_UPSERT_DIALECTS = {
    "sqlite": sqlite.insert,
    "postgresql": postgresql.insert,
}


@dataclass
class CacheStats:
    """Summary of what the cache holds."""

    total_records: int = 0
    locations: int = 0
    min_date: date | None = None
    max_date: date | None = None
    by_source: dict[str, int] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            "total_records": self.total_records,
            "locations": self.locations,
            "date_range": {
                "min": self.min_date.isoformat() if self.min_date else None,
                "max": self.max_date.isoformat() if self.max_date else None,
            },
            "by_source": dict(self.by_source),
        }


def _priority_rank() -> Any:
    """SQL CASE expression ranking ``source`` like ``schemas.source_rank``."""
    return case(
        *[(WeatherData.source == src, rank) for src, rank in SOURCE_PRIORITY.items()],
        else_=UNKNOWN_SOURCE_RANK,
    )


def _row_to_record(row: WeatherData) -> DailyWeatherRecord:
    values = {name: getattr(row, column) for name, column in COLUMN_MAP.items()}
    return DailyWeatherRecord(
        location_id=row.location_id,
        date=row.date,
        source=row.source,
        **values,
    )


class WeatherCache:
    """Read/upsert daily weather records."""

    def __init__(self, engine: Engine) -> None:
        self.engine = engine
        self._sessions = sessionmaker(bind=engine, expire_on_commit=False)

    @classmethod
    def from_url(cls, database_url: str, *, create: bool = True) -> WeatherCache:
        """Open a cache on ``database_url``, creating the table if asked."""
        engine = make_engine(database_url)
        if create:
            init_db(engine)
        return cls(engine)

    def _session(self) -> Session:
        return self._sessions()

    def read(self, location_id: str, start: date, end: date) -> list[DailyWeatherRecord]:
        """One record per cached date in [start, end], best source first.

        Dates with nothing cached are absent. Returns ``[]`` on storage errors.
        """
        stmt = (
            select(WeatherData)
            .where(
                WeatherData.location_id == location_id,
                WeatherData.date >= start,
                WeatherData.date <= end,
            )
            .order_by(
                WeatherData.date,
                _priority_rank(),
                WeatherData.updated_at.desc(),
                WeatherData.id.desc(),
            )
        )
        try:
            with self._session() as session:
                rows = session.scalars(stmt).all()
        except SQLAlchemyError as exc:
            logger.warning("weather_cache_read_failed", location_id=location_id, error=str(exc))
            return []

        # Rows arrive best-first within each date; keep the first per date
        records: list[DailyWeatherRecord] = []
        last_date = None
        for row in rows:
            if row.date == last_date:
                continue
            last_date = row.date
            records.append(_row_to_record(row))
        return records

    def write(
        self,
        location_id: str,
        records: Iterable[DailyWeatherRecord],
        source: str,
    ) -> int:
        """Upsert records under ``source``; returns the number of rows written.

        An existing (location, date, source) row has every measured column
        replaced. Returns 0 and logs on storage errors.
        """
        rows = [
            {
                "location_id": location_id,
                "date": rec.date,
                "source": str(source),
                **{COLUMN_MAP[name]: value for name, value in rec.measured().items()},
            }
            for rec in records
        ]
        if not rows:
            return 0

        try:
            insert = _UPSERT_DIALECTS[self.engine.dialect.name]
        except KeyError:
            logger.warning("weather_cache_dialect_unsupported", dialect=self.engine.dialect.name)
            return 0

        stmt = insert(WeatherData.__table__)
        stmt = stmt.on_conflict_do_update(
            index_elements=["location_id", "date", "source"],
            set_={
                **{column: stmt.excluded[column] for column in COLUMN_MAP.values()},
                "updated_at": func.now(),
            },
        )
        try:
            with self._session() as session, session.begin():
                session.execute(stmt, rows)
        except SQLAlchemyError as exc:
            logger.warning(
                "weather_cache_write_failed",
                location_id=location_id,
                source=source,
                records=len(rows),
                error=str(exc),
            )
            return 0

        logger.debug(
            "weather_cache_write", location_id=location_id, source=source, records=len(rows)
        )
        return len(rows)

    def count(self, location_id: str, source: str | None = None) -> int:
        """Number of cached rows for a location (optionally one source)."""
        stmt = select(func.count()).select_from(WeatherData)
        stmt = stmt.where(WeatherData.location_id == location_id)
        if source is not None:
            stmt = stmt.where(WeatherData.source == source)
        try:
            with self._session() as session:
                return int(session.scalar(stmt) or 0)
        except SQLAlchemyError as exc:
            logger.warning("weather_cache_count_failed", location_id=location_id, error=str(exc))
            return 0

    def stats(self) -> CacheStats:
        """Totals across the whole cache. Empty stats if the table is unreadable."""
        totals = select(
            func.count(),
            func.count(func.distinct(WeatherData.location_id)),
            func.min(WeatherData.date),
            func.max(WeatherData.date),
        )
        per_source = select(WeatherData.source, func.count()).group_by(WeatherData.source)
        try:
            with self._session() as session:
                total, locations, min_date, max_date = session.execute(totals).one()
                by_source = {src: int(n) for src, n in session.execute(per_source).all()}
        except SQLAlchemyError as exc:
            logger.warning("weather_cache_stats_failed", error=str(exc))
            return CacheStats()

        return CacheStats(
            total_records=int(total or 0),
            locations=int(locations or 0),
            min_date=min_date,
            max_date=max_date,
            by_source=by_source,
        )
