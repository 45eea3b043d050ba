"""The weather provider capability and the default fallback order."""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import TYPE_CHECKING, Any, Protocol

from fieldheat.datasources.davis import DavisProvider
from fieldheat.datasources.ecowitt import EcowittProvider
from fieldheat.datasources.openmeteo import OpenMeteoProvider

if TYPE_CHECKING:
    from datetime import date

    import requests

    from fieldheat.config import Settings
    from fieldheat.schemas import DailyWeatherRecord, Location


class WeatherProvider(Protocol):
    """A source able to return normalized daily weather for a date range."""

    name: str
    requires_key: bool

    @property
    def is_configured(self) -> bool:
        """Whether the credentials this provider needs are present."""
        ...

    def fetch(self, location: Location, start: date, end: date) -> list[DailyWeatherRecord]:
        """Return normalized records, or an empty list when there is no data.

        Raises ``requests.RequestException`` or ``ProviderError`` on failure.
        """
        ...


def build_provider_chain(
    settings: Settings,
    session: requests.Session | None = None,
) -> list[WeatherProvider]:
    """Providers in fallback order: Davis -> Ecowitt -> Open-Meteo.

    Open-Meteo needs no credentials and is always last, so the chain has a
    terminal fallback.
    """
    return [
        DavisProvider(
            settings.davis_api_key,
            settings.davis_api_secret,
            settings.davis_station_id,
            session=session,
            timeout=settings.http_timeout,
        ),
        EcowittProvider(
            settings.ecowitt_app_key,
            settings.ecowitt_api_key,
            settings.ecowitt_mac,
            session=session,
            timeout=settings.http_timeout,
        ),
        OpenMeteoProvider(session=session, timeout=settings.openmeteo_timeout),
    ]


@dataclass
class ProviderInfo:
    """Display metadata for a provider."""

    id: str
    name: str
    description: str
    configured: bool
    requires_key: bool


_DESCRIPTIONS = {
    "davis": ("Davis WeatherLink", "Davis Instruments weather stations"),
    "ecowitt": ("Ecowitt Cloud", "Ecowitt weather stations"),
    "open-meteo": ("Open-Meteo", "Free historical weather API (1940-present)"),
}


def describe_sources(settings: Settings) -> list[dict[str, Any]]:
    """Configured state of every provider, in fallback order."""
    infos: list[dict[str, Any]] = []
    for provider in build_provider_chain(settings):
        display, description = _DESCRIPTIONS.get(provider.name, (provider.name, ""))
        info = ProviderInfo(
            id=provider.name,
            name=display,
            description=description,
            configured=provider.is_configured,
            requires_key=provider.requires_key,
        )
        infos.append(asdict(info))
    return infos
