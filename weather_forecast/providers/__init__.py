"""
Weather data providers.
"""

import requests

from weather_forecast.config import ProviderKind, ProviderSelection
from weather_forecast.providers.base import WeatherProviderBase
from weather_forecast.providers.open_weather import OpenWeatherProvider
from weather_forecast.providers.weather_api import WeatherApiProvider

PROVIDERS: dict[ProviderKind, type[WeatherProviderBase]] = {
    ProviderKind.OPEN_WEATHER: OpenWeatherProvider,
    ProviderKind.WEATHER_API: WeatherApiProvider,
}


def build_provider(
    selection: ProviderSelection,
    timeout: float = 30.0,
    session: requests.Session | None = None,
) -> WeatherProviderBase:
    """Construct the adapter for a configured provider."""
    provider_cls = PROVIDERS[selection.kind]
    return provider_cls(
        selection.key.get_secret_value(), timeout=timeout, session=session
    )


__all__ = [
    "PROVIDERS",
    "OpenWeatherProvider",
    "WeatherApiProvider",
    "WeatherProviderBase",
    "build_provider",
]
