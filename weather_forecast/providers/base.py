"""
Base weather provider interface.
"""

from abc import ABC, abstractmethod
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from datetime import UTC, datetime, tzinfo
from typing import Any, TypeVar
from urllib.parse import urlparse

import requests
from pydantic import BaseModel, ValidationError

from weather_forecast.coordinates import Coordinates
from weather_forecast.errors import (
    ProviderSetupError,
    SchemaError,
    TimeParseError,
    TransportError,
)
from weather_forecast.http_client import get_session, redact_error, request
from weather_forecast.logging_config import get_logger
from weather_forecast.models import ForecastWindow, UnitSystem, Weather

logger = get_logger(__name__)

PayloadT = TypeVar("PayloadT", bound=BaseModel)

# Hourly entries this far behind "now" are still considered current.
CLOCK_SKEW_S = 3600

EpochValue = int | float | str


def epoch_seconds(value: EpochValue) -> int:
    """Coerce a raw epoch value to whole seconds."""
    try:
        return int(value)
    except (TypeError, ValueError, OverflowError) as e:
        raise TimeParseError(f"Unparseable timestamp: {value!r}") from e


def format_epoch(value: EpochValue, tz: tzinfo, fmt: str) -> str:
    """Format an epoch timestamp in the given zone.

    Raises:
        TimeParseError: the value is not an epoch or is out of range
    """
    seconds = epoch_seconds(value)
    try:
        return datetime.fromtimestamp(seconds, tz).strftime(fmt)
    except (OverflowError, OSError, ValueError) as e:
        raise TimeParseError(f"Timestamp out of range: {value!r}") from e


class WeatherProviderBase(ABC):
    """
    Abstract base class for weather data providers.

    A provider owns its session, endpoint and credential. It performs one
    request per ``get_forecast`` call and keeps no other state, so an
    instance can be shared between callers.
    """

    name: str = "provider"
    DEFAULT_BASE_URL: str = ""
    PATH: str = ""

    def __init__(
        self,
        api_key: str,
        base_url: str | None = None,
        timeout: float = 30.0,
        session: requests.Session | None = None,
        clock: Callable[[], datetime] | None = None,
    ):
        """
        Initialize the provider.

        Args:
            api_key: Provider credential
            base_url: Scheme and host of the API (defaults to the public one)
            timeout: Request timeout in seconds
            session: HTTP session to use (defaults to the shared session)
            clock: Returns the current aware datetime (injectable for tests)

        Raises:
            ProviderSetupError: empty credential or malformed base URL
        """
        if not api_key or not api_key.strip():
            raise ProviderSetupError(f"{self.name}: API key must not be empty")

        base_url = base_url or self.DEFAULT_BASE_URL
        parsed = urlparse(base_url)
        if parsed.scheme not in ("http", "https") or not parsed.netloc:
            raise ProviderSetupError(f"{self.name}: invalid base URL '{base_url}'")

        self.endpoint = base_url.rstrip("/") + self.PATH
        self._api_key = api_key
        self.timeout = timeout
        self.session = session or get_session()
        self._clock = clock or (lambda: datetime.now(UTC))

        logger.debug(f"Initialized {self.name} provider: {self.endpoint}")

    @abstractmethod
    def get_forecast(
        self, coordinates: Coordinates, window: ForecastWindow, unit: UnitSystem
    ) -> Weather:
        """
        Get weather for a location over the requested window.

        Args:
            coordinates: Location (assumed already validated)
            window: Time range / granularity of the forecast
            unit: Unit system for values and labels

        Returns:
            CurrentForecast, HourlyForecast or DailyForecast

        Raises:
            TransportError: network failure or non-success status
            SchemaError: payload did not match the expected shape
            TimeParseError: a timestamp or offset could not be used
        """

    def get_provider_info(self) -> dict[str, Any]:
        """Provider metadata (never includes the credential)."""
        return {
            "name": self.name,
            "endpoint": self.endpoint,
            "timeout": self.timeout,
        }

    def _hour_cutoff(self) -> int:
        """Earliest epoch an hourly entry may have to be included."""
        return int(self._clock().timestamp()) - CLOCK_SKEW_S

    def _fetch_json(self, params: dict[str, Any]) -> dict[str, Any]:
        """Issue the single GET for this forecast and decode the JSON body."""
        try:
            response = request(
                "GET",
                self.endpoint,
                session=self.session,
                params=params,
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            reason = redact_error(e, self._api_key)
            logger.error(f"{self.name} request to {self.endpoint} failed: {reason}")
            raise TransportError(f"{self.name} request failed: {reason}") from e

        if not 200 <= response.status_code < 300:
            message = self._error_message(response).replace(self._api_key, "***")
            logger.error(f"{self.name} API error {response.status_code}: {message}")
            raise TransportError(
                f"{self.name} API error {response.status_code}: {message}",
                status_code=response.status_code,
            )

        try:
            data = response.json()
        except ValueError as e:
            raise SchemaError(f"{self.name} returned a non-JSON body") from e

        if not isinstance(data, dict):
            raise SchemaError(f"{self.name} returned {type(data).__name__}, expected an object")
        return data

    def _error_message(self, response: requests.Response) -> str:
        """Best-effort error text from a failed response."""
        try:
            body = response.json()
        except ValueError:
            return response.text[:200]
        if isinstance(body, dict):
            error = body.get("error")
            if isinstance(error, dict) and "message" in error:
                return str(error["message"])
            if "message" in body:
                return str(body["message"])
        return response.text[:200]

    def _parse(self, model: type[PayloadT], data: dict[str, Any]) -> PayloadT:
        try:
            return model.model_validate(data)
        except ValidationError as e:
            logger.error(f"Unexpected {self.name} payload: {e}")
            raise SchemaError(f"Unexpected {self.name} payload: {e}") from e

    @contextmanager
    def _mapping(self) -> Iterator[None]:
        """Report payload values the unified model rejects as SchemaError."""
        try:
            yield
        except ValidationError as e:
            logger.error(f"{self.name} payload has unusable values: {e}")
            raise SchemaError(f"{self.name} payload has unusable values: {e}") from e
