"""
Exception hierarchy for weather-forecast.

Every error raised by the core derives from ``WeatherForecastError`` so the
CLI can report any failure with a single handler.
"""


class WeatherForecastError(Exception):
    """Base class for all weather-forecast errors."""


class CoordinateError(WeatherForecastError, ValueError):
    """Raised when a coordinate is outside its legal range."""

    axis = "coordinate"
    bounds = (0.0, 0.0)

    def __init__(self, value: float):
        self.value = value
        low, high = self.bounds
        super().__init__(
            f"{self.axis.capitalize()} must be between {low:g} and {high:g} "
            f"degrees. Your value is: {value}"
        )


class InvalidLatitude(CoordinateError):
    axis = "latitude"
    bounds = (-90.0, 90.0)


class InvalidLongitude(CoordinateError):
    axis = "longitude"
    bounds = (-180.0, 180.0)


class InvalidPlaceTagError(WeatherForecastError, ValueError):
    """Raised when a place tag is empty."""


class UnknownPlaceError(WeatherForecastError, LookupError):
    """Raised when a forecast is requested for a tag that is not saved."""

    def __init__(self, tag: str):
        self.tag = tag
        super().__init__(f"No saved place with tag '{tag}'")


class ConfigError(WeatherForecastError):
    """Raised when the configuration file cannot be loaded or saved."""


class ProviderNotConfiguredError(ConfigError):
    """Raised when a forecast is requested before a provider is configured."""

    def __init__(self) -> None:
        super().__init__(
            "No weather provider configured. Run 'weather configure' first."
        )


class ProviderSetupError(WeatherForecastError):
    """Raised when a provider cannot be constructed (bad credential or endpoint)."""


class ProviderError(WeatherForecastError):
    """Base class for errors raised while serving a forecast request."""


class TransportError(ProviderError):
    """Network failure or non-success HTTP status."""

    def __init__(self, message: str, status_code: int | None = None):
        self.status_code = status_code
        super().__init__(message)


class SchemaError(ProviderError):
    """Provider payload did not match the expected shape."""


class TimeParseError(ProviderError):
    """A timestamp or UTC offset in the payload could not be used."""
