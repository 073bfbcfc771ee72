"""Configuration management for weather-forecast.

Two layers live here:

- ``AppSettings``: runtime settings taken from environment variables (and a
  ``.env`` file when present).
- ``ConfigStore``: the user's persisted YAML document holding the selected
  provider with its credential and the saved places.
"""

import os
from dataclasses import dataclass, field
from enum import Enum
from functools import lru_cache
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field, SecretStr, ValidationError

from weather_forecast.coordinates import Coordinates
from weather_forecast.errors import ConfigError
from weather_forecast.logging_config import get_logger
from weather_forecast.places import Place, PlaceRegistry

logger = get_logger(__name__)

DEFAULT_CONFIG_PATH = Path("~/.config/weather-forecast/config.yaml")


def _env_flag(name: str) -> bool:
    return os.getenv(name, "").strip().lower() in ("1", "true", "yes", "on")


class AppSettings(BaseModel):
    """Runtime settings."""

    config_path: Path = DEFAULT_CONFIG_PATH
    request_timeout_s: float = Field(default=30.0, gt=0)
    log_level: str = "WARNING"
    log_file: Path | None = Field(default=None, description="Rotating log file; None disables file logging")


@lru_cache(maxsize=1)
def get_settings() -> AppSettings:
    """Get application settings with environment override support.

    Loads ``.env`` lazily so importing the package has no side effects.
    """
    from dotenv import load_dotenv

    load_dotenv(override=False)

    overrides: dict[str, Any] = {}
    if config_path := os.getenv("WEATHER_FORECAST_CONFIG"):
        overrides["config_path"] = Path(config_path)
    if timeout := os.getenv("WEATHER_FORECAST_TIMEOUT"):
        overrides["request_timeout_s"] = timeout
    if log_level := os.getenv("LOG_LEVEL"):
        overrides["log_level"] = log_level
    if (log_file := os.getenv("LOG_FILE")) and not _env_flag("DISABLE_FILE_LOGGING"):
        overrides["log_file"] = Path(log_file).expanduser()

    try:
        return AppSettings(**overrides)
    except ValidationError as e:
        raise ConfigError(f"Invalid environment settings: {e}") from e


def clear_settings_cache() -> None:
    """Clear settings cache to force reload from current environment."""
    get_settings.cache_clear()


class ProviderKind(str, Enum):
    """Supported weather providers."""

    OPEN_WEATHER = "open_weather"
    WEATHER_API = "weather_api"

    @property
    def display_name(self) -> str:
        return {
            ProviderKind.OPEN_WEATHER: "OpenWeather",
            ProviderKind.WEATHER_API: "WeatherAPI",
        }[self]


class ProviderSelection(BaseModel):
    """The configured provider and its credential."""

    kind: ProviderKind
    key: SecretStr

    def __str__(self) -> str:
        return self.kind.display_name


class StoredPlace(BaseModel):
    """On-disk shape of a place."""

    tag: str
    latitude: float
    longitude: float


class StoredConfig(BaseModel):
    """On-disk shape of the whole configuration document."""

    provider: ProviderSelection | None = None
    places: list[StoredPlace] = Field(default_factory=list)


@dataclass
class WeatherConfig:
    """In-memory configuration: provider selection plus the place registry."""

    provider: ProviderSelection | None = None
    places: PlaceRegistry = field(default_factory=PlaceRegistry)

    def place_by_tag(self, tag: str) -> Coordinates | None:
        return self.places.resolve(tag)


class ConfigStore:
    """
    Load and save ``WeatherConfig`` as a YAML file.

    The document is read and written whole; there is no partial update.
    """

    def __init__(self, path: Path | str | None = None):
        if path is None:
            path = get_settings().config_path
        self.path = Path(path).expanduser()

    def get(self) -> WeatherConfig:
        """
        Load the configuration. A missing file yields the default config.

        Raises:
            ConfigError: unreadable file, invalid YAML or invalid document
        """
        if not self.path.exists():
            logger.debug(f"No configuration at {self.path}; using defaults")
            return WeatherConfig()

        try:
            with open(self.path, encoding="utf-8") as f:
                data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigError(f"Invalid YAML in {self.path}: {e}") from e
        except OSError as e:
            raise ConfigError(f"Failed to read {self.path}: {e}") from e

        try:
            stored = StoredConfig.model_validate(data or {})
        except ValidationError as e:
            raise ConfigError(f"Invalid configuration in {self.path}: {e}") from e

        places = PlaceRegistry(
            Place(
                tag=p.tag,
                coordinates=Coordinates(latitude=p.latitude, longitude=p.longitude),
            )
            for p in stored.places
        )
        logger.debug(f"Loaded configuration from {self.path} ({len(places)} places)")
        return WeatherConfig(provider=stored.provider, places=places)

    def save(self, config: WeatherConfig) -> None:
        """
        Write the whole configuration back to disk.

        Raises:
            ConfigError: the file or its directory cannot be written
        """
        document: dict[str, Any] = {
            "provider": None,
            "places": [
                {
                    "tag": place.tag,
                    "latitude": place.coordinates.latitude,
                    "longitude": place.coordinates.longitude,
                }
                for place in config.places.list_places()
            ],
        }
        if config.provider is not None:
            document["provider"] = {
                "kind": config.provider.kind.value,
                "key": config.provider.key.get_secret_value(),
            }

        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with open(self.path, "w", encoding="utf-8") as f:
                yaml.safe_dump(document, f, sort_keys=False)
        except OSError as e:
            raise ConfigError(f"Failed to write {self.path}: {e}") from e

        config.places.dirty = False
        logger.info(f"Saved configuration to {self.path}")
