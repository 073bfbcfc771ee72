"""Command-line interface for weather-forecast."""

import functools
import sys
from pathlib import Path

import click
from rich.console import Console

from weather_forecast import __version__
from weather_forecast.config import ConfigStore, ProviderKind, get_settings
from weather_forecast.coordinates import Coordinates
from weather_forecast.errors import WeatherForecastError
from weather_forecast.logging_config import get_logger, setup_logging
from weather_forecast.models import ForecastWindow, UnitSystem
from weather_forecast.places import Place
from weather_forecast.service import ForecastService, Location

console = Console(highlight=False)
err_console = Console(stderr=True, highlight=False)
logger = get_logger(__name__)

# Lets negative coordinates through as arguments instead of options.
COORDINATE_ARGS = {"ignore_unknown_options": True}


def handle_errors(func):
    """Report any weather-forecast error and exit with status 1."""

    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except WeatherForecastError as e:
            logger.error(f"{func.__name__} failed: {e}")
            err_console.print(f"❌ Error: {e}", markup=False, soft_wrap=True)
            sys.exit(1)

    return wrapper


def print_places(places: list[Place]) -> None:
    if not places:
        console.print("No saved places")
        return
    console.print("Places:")
    for place in places:
        console.print(f"  {place}", markup=False)


@click.group()
@click.version_option(version=__version__, prog_name="weather")
@click.option(
    "--log-level",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
    help="Set logging level, overriding LOG_LEVEL (default: WARNING). LOG_FILE adds a log file.",
)
@click.option(
    "--config",
    "config_path",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Configuration file (default: WEATHER_FORECAST_CONFIG or ~/.config/weather-forecast/config.yaml)",
)
@click.pass_context
@handle_errors
def cli(ctx: click.Context, log_level: str | None, config_path: Path | None) -> None:
    """Weather forecasts from OpenWeather or WeatherAPI."""
    settings = get_settings()
    setup_logging(level=log_level or settings.log_level, log_file=settings.log_file)
    ctx.obj = ForecastService(store=ConfigStore(config_path or settings.config_path))


@cli.group()
def configure() -> None:
    """Choose the weather provider and store its API key."""


def _configure(service: ForecastService, kind: ProviderKind, key: str) -> None:
    selection = service.configure_provider(kind, key)
    console.print(f"✅ Provider {selection} successfully configured!")


@configure.command(name="open-weather")
@click.argument("key")
@click.pass_obj
@handle_errors
def configure_open_weather(service: ForecastService, key: str) -> None:
    """Use OpenWeather (One Call 3.0) with API key KEY."""
    _configure(service, ProviderKind.OPEN_WEATHER, key)


@configure.command(name="weather-api")
@click.argument("key")
@click.pass_obj
@handle_errors
def configure_weather_api(service: ForecastService, key: str) -> None:
    """Use WeatherAPI.com with API key KEY."""
    _configure(service, ProviderKind.WEATHER_API, key)


@cli.group()
def places() -> None:
    """Manage saved places."""


@places.command(name="list")
@click.pass_obj
@handle_errors
def list_places(service: ForecastService) -> None:
    """Show saved places."""
    print_places(service.list_places())


@places.command(name="set", context_settings=COORDINATE_ARGS)
@click.argument("tag")
@click.argument("lat", type=float)
@click.argument("lon", type=float)
@click.pass_obj
@handle_errors
def set_place(service: ForecastService, tag: str, lat: float, lon: float) -> None:
    """Save place TAG at LAT LON, replacing any place with the same tag."""
    print_places(service.set_place(tag, lat, lon))


@places.command(name="remove")
@click.argument("tag")
@click.pass_obj
@handle_errors
def remove_place(service: ForecastService, tag: str) -> None:
    """Remove the place TAG if it exists."""
    removed, remaining = service.remove_place(tag)
    if not removed:
        console.print(f"No place tagged '{tag}'", markup=False)
    print_places(remaining)


def forecast_options(func):
    func = click.option(
        "--unit",
        type=click.Choice([u.value for u in UnitSystem]),
        default=UnitSystem.METRIC.value,
        show_default=True,
        help="Unit system",
    )(func)
    func = click.option(
        "--time",
        "window",
        type=click.Choice([w.value for w in ForecastWindow]),
        default=ForecastWindow.NOW.value,
        show_default=True,
        help="Time range of the forecast",
    )(func)
    return func


def run_forecast(service: ForecastService, location: Location, window: str, unit: str) -> None:
    kind, weather = service.get_forecast(
        location, ForecastWindow(window), UnitSystem(unit)
    )
    console.print(f"Weather provider: {kind.display_name}")

    blocks = weather.render_blocks()
    if not blocks:
        console.print("No forecast data returned")
        return
    for block in blocks:
        console.print(block, markup=False, soft_wrap=True)
        console.print()


@cli.group()
def forecast() -> None:
    """Get the weather for a saved place or coordinates."""


@forecast.command(name="place")
@click.argument("tag")
@forecast_options
@click.pass_obj
@handle_errors
def forecast_place(service: ForecastService, tag: str, window: str, unit: str) -> None:
    """Forecast for the saved place TAG."""
    run_forecast(service, tag, window, unit)


@forecast.command(name="coords", context_settings=COORDINATE_ARGS)
@click.argument("lat", type=float)
@click.argument("lon", type=float)
@forecast_options
@click.pass_obj
@handle_errors
def forecast_coords(
    service: ForecastService, lat: float, lon: float, window: str, unit: str
) -> None:
    """Forecast for coordinates LAT LON."""
    run_forecast(service, Coordinates(latitude=lat, longitude=lon), window, unit)


def main() -> None:
    cli()


if __name__ == "__main__":
    main()
