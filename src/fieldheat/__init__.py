"""fieldheat - weather caching and heat-unit accounting for field trials.

Architecture::

    datasources/   Weather providers (Davis WeatherLink, Ecowitt, Open-Meteo)
    db.py          SQLAlchemy table for cached daily weather
    cache.py       Source-prioritized read / upsert over the weather table
    orchestrator.py  Cache-or-fetch decision and the provider fallback chain
    indices/       Pure GDD / CHU computation (day-level and per season)
    analysis/      Phenology windows: recorded emergence/maturity -> plot totals
    pipeline.py    Request-level entry points (seasons report, trial aggregation)
    flows/         Prefect orchestration (reports, historical backfill)
    services/      Shared utilities (HTTP session factory)

Data flow: datasources -> cache -> orchestrator -> indices / analysis -> flows

Extension points, see each package's docstring:
  - New weather provider:  datasources/__init__.py
  - New analysis:          analysis/__init__.py
"""

__version__ = "0.1.0"

from fieldheat.config import Settings, get_settings
from fieldheat.schemas import DailyWeatherRecord, Location, Season, Source

__all__ = [
    "DailyWeatherRecord",
    "Location",
    "Season",
    "Settings",
    "Source",
    "__version__",
    "get_settings",
]
