"""Cache-or-fetch resolution of daily weather for a date range.

Resolution order for one (location, range):

1. Cache. Any cached record short-circuits the chain, even when the range
   is only partly covered. This matches the historical behaviour; set
   ``strict_cache_coverage`` to treat partial coverage as a miss instead.
2. Providers, strictly in chain order, skipping unconfigured ones. The first
   provider returning records wins. Failures move on to the next provider;
   nothing is retried.
3. Records from a provider are written back to the cache (best-effort).

Only a failure of the last provider in the chain is raised to the caller.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

import requests
import structlog

from fieldheat.exceptions import ProviderError, WeatherUnavailableError
from fieldheat.schemas import Source

if TYPE_CHECKING:
    from collections.abc import Sequence
    from datetime import date

    from fieldheat.cache import WeatherCache
    from fieldheat.datasources.providers import WeatherProvider
    from fieldheat.schemas import DailyWeatherRecord, Location

logger = structlog.get_logger(__name__)

# Failures that hand over to the next provider. ValueError/KeyError cover
# payloads that do not match the expected shape.
PROVIDER_FAILURES = (requests.RequestException, ProviderError, ValueError, KeyError)


@dataclass
class ResolvedWeather:
    """Daily records for a range and where they came from."""

    records: list[DailyWeatherRecord]
    origin: str
    cached: int = 0  # records written back to the cache

    @property
    def from_cache(self) -> bool:
        return self.origin == Source.CACHE


class SourceOrchestrator:
    """Serves weather from the cache or the first provider that has it."""

    def __init__(
        self,
        cache: WeatherCache,
        providers: Sequence[WeatherProvider],
        *,
        strict_cache_coverage: bool = False,
    ) -> None:
        if not providers:
            msg = "provider chain is empty"
            raise ValueError(msg)
        self.cache = cache
        self.providers = list(providers)
        self.strict_cache_coverage = strict_cache_coverage

    def _cache_hit(self, records: list[DailyWeatherRecord], start: date, end: date) -> bool:
        if not records:
            return False
        if self.strict_cache_coverage:
            return len(records) >= (end - start).days + 1
        return True

    def resolve(self, location: Location, start: date, end: date) -> ResolvedWeather:
        """Weather for ``location`` over [start, end].

        Raises:
            WeatherUnavailableError: The last provider in the chain failed.
        """
        cached = self.cache.read(location.location_id, start, end)
        if self._cache_hit(cached, start, end):
            logger.debug(
                "weather_cache_hit",
                location_id=location.location_id,
                start=start.isoformat(),
                end=end.isoformat(),
                records=len(cached),
            )
            return ResolvedWeather(records=cached, origin=str(Source.CACHE))

        terminal = self.providers[-1]
        for provider in self.providers:
            if not provider.is_configured:
                continue
            try:
                records = provider.fetch(location, start, end)
            except PROVIDER_FAILURES as exc:
                logger.warning(
                    "weather_provider_failed",
                    provider=str(provider.name),
                    location_id=location.location_id,
                    error=str(exc),
                )
                if provider is terminal:
                    msg = (
                        f"No weather data for location {location.location_id} "
                        f"{start.isoformat()}..{end.isoformat()}: {provider.name} failed ({exc})"
                    )
                    raise WeatherUnavailableError(msg) from exc
                continue

            if records or provider is terminal:
                written = self.cache.write(location.location_id, records, provider.name)
                logger.info(
                    "weather_fetched",
                    provider=str(provider.name),
                    location_id=location.location_id,
                    records=len(records),
                    cached=written,
                )
                return ResolvedWeather(records=records, origin=str(provider.name), cached=written)

        msg = f"No configured weather provider for location {location.location_id}"
        raise WeatherUnavailableError(msg)
