"""
Forecast service: the operations behind the CLI commands.

Each operation loads the configuration once, does its work, and writes the
configuration back only if something changed.
"""

from collections.abc import Callable

from pydantic import SecretStr

from weather_forecast.config import (
    ConfigStore,
    ProviderKind,
    ProviderSelection,
    WeatherConfig,
    get_settings,
)
from weather_forecast.coordinates import Coordinates, validate_coordinates
from weather_forecast.errors import (
    ProviderNotConfiguredError,
    ProviderSetupError,
    UnknownPlaceError,
)
from weather_forecast.logging_config import get_logger
from weather_forecast.models import ForecastWindow, UnitSystem, Weather
from weather_forecast.places import Place
from weather_forecast.providers import WeatherProviderBase, build_provider

logger = get_logger(__name__)

# A saved place tag, or coordinates typed in by the user.
Location = str | Coordinates

ProviderFactory = Callable[[ProviderSelection, float], WeatherProviderBase]


def _default_factory(selection: ProviderSelection, timeout: float) -> WeatherProviderBase:
    return build_provider(selection, timeout=timeout)


class ForecastService:
    """Orchestrates configuration, saved places and the configured provider."""

    def __init__(
        self,
        store: ConfigStore | None = None,
        provider_factory: ProviderFactory | None = None,
        timeout_s: float | None = None,
    ):
        self.store = store or ConfigStore()
        self.provider_factory = provider_factory or _default_factory
        self.timeout_s = timeout_s if timeout_s is not None else get_settings().request_timeout_s

    def configure_provider(self, kind: ProviderKind, key: str) -> ProviderSelection:
        """Store the provider to use for forecasts."""
        if not key or not key.strip():
            raise ProviderSetupError(f"{kind.display_name}: API key must not be empty")

        config = self.store.get()
        config.provider = ProviderSelection(kind=kind, key=SecretStr(key.strip()))
        self.store.save(config)
        logger.info(f"Configured provider {config.provider}")
        return config.provider

    def list_places(self) -> list[Place]:
        return self.store.get().places.list_places()

    def set_place(self, tag: str, latitude: float, longitude: float) -> list[Place]:
        """Add or update a saved place; nothing is saved if validation fails."""
        config = self.store.get()
        config.places.upsert(
            Place(tag=tag, coordinates=Coordinates(latitude=latitude, longitude=longitude))
        )
        self.store.save(config)
        return config.places.list_places()

    def remove_place(self, tag: str) -> tuple[bool, list[Place]]:
        """Remove a saved place if present. Returns (removed, remaining places)."""
        config = self.store.get()
        removed = config.places.remove(tag)
        if config.places.dirty:
            self.store.save(config)
        return removed, config.places.list_places()

    def resolve_location(self, config: WeatherConfig, location: Location) -> Coordinates:
        """
        Turn a place tag or raw coordinates into coordinates to query.

        Raw coordinates are validated; stored places were validated on save.
        """
        if isinstance(location, Coordinates):
            validate_coordinates(location)
            return location

        coordinates = config.place_by_tag(location)
        if coordinates is None:
            raise UnknownPlaceError(location)
        return coordinates

    def get_forecast(
        self,
        location: Location,
        window: ForecastWindow = ForecastWindow.NOW,
        unit: UnitSystem = UnitSystem.METRIC,
    ) -> tuple[ProviderKind, Weather]:
        """
        Fetch a forecast from the configured provider.

        Returns:
            The provider kind that served the request and the forecast
        """
        config = self.store.get()
        if config.provider is None:
            raise ProviderNotConfiguredError()

        coordinates = self.resolve_location(config, location)
        provider = self.provider_factory(config.provider, self.timeout_s)
        weather = provider.get_forecast(coordinates, window, unit)
        return config.provider.kind, weather
