"""Exception hierarchy.

Only ``InputError``, ``WeatherUnavailableError`` and ``AggregationError``
reach callers of the pipeline. ``ProviderError`` is raised by provider
adapters and absorbed by the fallback chain.
"""

from __future__ import annotations


class FieldHeatError(Exception):
    """Base class for all fieldheat errors."""


class InputError(FieldHeatError, ValueError):
    """Missing or malformed request parameters."""


class ProviderError(FieldHeatError):
    """A weather provider answered with an error or an unreadable payload."""

    def __init__(self, provider: str, message: str) -> None:
        super().__init__(f"{provider}: {message}")
        self.provider = provider


class WeatherUnavailableError(FieldHeatError):
    """No provider, including the terminal fallback, produced weather data."""


class AggregationError(FieldHeatError):
    """A batch phenology aggregation could not use any plot."""
