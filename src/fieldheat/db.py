"""Weather cache table and engine setup.

One row per (location, date, source). Rows from different sources for the
same day coexist; which one is served is decided at read time by source
priority (see ``cache.WeatherCache.read``).
"""

from __future__ import annotations

import datetime as dt
from pathlib import Path

from sqlalchemy import (
    Date,
    DateTime,
    Engine,
    Float,
    Index,
    Integer,
    String,
    UniqueConstraint,
    create_engine,
    func,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    """Declarative base, shared MetaData registry."""

    pass


class WeatherData(Base):
    """Cached daily weather for a location from one source."""

    __tablename__ = "weather_data"
    __table_args__ = (
        UniqueConstraint("location_id", "date", "source", name="uq_weather_data_loc_date_src"),
        Index("ix_weather_data_loc_date", "location_id", "date"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    location_id: Mapped[str] = mapped_column(String(64), nullable=False)
    date: Mapped[dt.date] = mapped_column(Date, nullable=False)
    source: Mapped[str] = mapped_column(String(32), nullable=False)

    temp_max: Mapped[float | None] = mapped_column(Float)
    temp_min: Mapped[float | None] = mapped_column(Float)
    temp_mean: Mapped[float | None] = mapped_column(Float)
    precipitation: Mapped[float | None] = mapped_column(Float)
    humidity_mean: Mapped[float | None] = mapped_column(Float)
    solar_radiation: Mapped[float | None] = mapped_column(Float)
    evapotranspiration: Mapped[float | None] = mapped_column(Float)
    wind_speed_max: Mapped[float | None] = mapped_column(Float)
    dew_point: Mapped[float | None] = mapped_column(Float)
    soil_temp: Mapped[float | None] = mapped_column(Float)
    soil_moisture: Mapped[float | None] = mapped_column(Float)

    updated_at: Mapped[dt.datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
    )

    def __repr__(self) -> str:
        return f"<WeatherData loc={self.location_id} date={self.date} src={self.source}>"


# DailyWeatherRecord field -> column name
COLUMN_MAP: dict[str, str] = {
    "tmax": "temp_max",
    "tmin": "temp_min",
    "tmean": "temp_mean",
    "precipitation": "precipitation",
    "humidity": "humidity_mean",
    "solar_radiation": "solar_radiation",
    "evapotranspiration": "evapotranspiration",
    "wind_speed_max": "wind_speed_max",
    "dew_point": "dew_point",
    "soil_temperature": "soil_temp",
    "soil_moisture": "soil_moisture",
}


def make_engine(database_url: str) -> Engine:
    """Create an engine; SQLite file databases get their parent directory created."""
    if database_url.startswith("sqlite:///") and not database_url.endswith(":memory:"):
        Path(database_url.removeprefix("sqlite:///")).parent.mkdir(parents=True, exist_ok=True)
    return create_engine(database_url, future=True)


def init_db(engine: Engine) -> None:
    """Create the weather table if it does not exist."""
    Base.metadata.create_all(engine)
