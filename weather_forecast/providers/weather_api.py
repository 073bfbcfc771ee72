"""
WeatherAPI.com forecast.json provider.

Every measurement comes back twice, once per unit system (``temp_c`` and
``temp_f``, ``vis_km`` and ``vis_miles``, ...). The adapter picks the field
matching the requested system instead of converting. The exception is
metric wind speed: the API reports kph, and m/s is derived from it.
"""

from datetime import datetime, tzinfo
from typing import Any
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pydantic import BaseModel, Field

from weather_forecast.coordinates import Coordinates
from weather_forecast.errors import SchemaError, TimeParseError
from weather_forecast.logging_config import get_logger
from weather_forecast.models import (
    CurrentForecast,
    CurrentWeather,
    DailyForecast,
    DailyWeather,
    ForecastWindow,
    HourlyForecast,
    HourWeather,
    UnitSystem,
    Weather,
)
from weather_forecast.providers.base import (
    EpochValue,
    WeatherProviderBase,
    epoch_seconds,
    format_epoch,
)

logger = get_logger(__name__)

KPH_PER_MPS = 3.6


def kph_to_mps(kph: float) -> float:
    return kph / KPH_PER_MPS


class _Condition(BaseModel):
    text: str | None = None


class _Location(BaseModel):
    tz_id: str | None = None


class _Current(BaseModel):
    temp_c: float
    temp_f: float
    feelslike_c: float
    feelslike_f: float
    vis_km: float | None = None
    vis_miles: float | None = None
    cloud: float
    humidity: float
    pressure_mb: float
    wind_kph: float
    wind_mph: float
    wind_degree: float
    uv: float
    precip_mm: float | None = None
    precip_in: float | None = None
    condition: _Condition | None = None


class _Hour(BaseModel):
    time_epoch: EpochValue
    temp_c: float
    temp_f: float
    feelslike_c: float
    feelslike_f: float
    vis_km: float | None = None
    vis_miles: float | None = None
    cloud: float
    humidity: float
    pressure_mb: float
    wind_kph: float
    wind_mph: float
    wind_degree: float
    uv: float
    precip_mm: float | None = None
    precip_in: float | None = None
    condition: _Condition | None = None


class _Day(BaseModel):
    maxtemp_c: float
    maxtemp_f: float
    mintemp_c: float
    mintemp_f: float
    avgtemp_c: float
    avgtemp_f: float
    maxwind_kph: float
    maxwind_mph: float
    totalprecip_mm: float | None = None
    totalprecip_in: float | None = None
    avgvis_km: float | None = None
    avgvis_miles: float | None = None
    avghumidity: float
    uv: float
    condition: _Condition | None = None


class _Astro(BaseModel):
    sunrise: str | None = None
    sunset: str | None = None
    moonrise: str | None = None
    moonset: str | None = None
    moon_phase: str | None = None


class _ForecastDay(BaseModel):
    date: str
    day: _Day
    astro: _Astro | None = None
    hour: list[_Hour] = Field(default_factory=list)


class _Forecast(BaseModel):
    forecastday: list[_ForecastDay] = Field(default_factory=list)


class _ForecastResponse(BaseModel):
    location: _Location | None = None
    current: _Current | None = None
    forecast: _Forecast | None = None


def _condition(condition: _Condition | None) -> str | None:
    return condition.text if condition else None


def parse_astro_time(value: str | None) -> str | None:
    """
    Normalise an astronomical time such as ``"06:45 AM"`` to ``"06:45"``.

    WeatherAPI reports events that do not occur as ``"No moonrise"`` and
    similar; those map to None.

    Raises:
        TimeParseError: any other value that is not an ``hh:mm AM/PM`` time
    """
    if value is None or not value.strip() or value.strip().lower().startswith("no "):
        return None
    try:
        return datetime.strptime(value.strip(), "%I:%M %p").strftime("%H:%M")
    except ValueError as e:
        raise TimeParseError(f"Unparseable time: {value!r}") from e


def parse_forecast_date(value: str) -> str:
    try:
        return datetime.strptime(value, "%Y-%m-%d").strftime("%Y-%m-%d")
    except ValueError as e:
        raise TimeParseError(f"Unparseable date: {value!r}") from e


def forecast_days(window: ForecastWindow) -> int:
    """Number of days to request for a window."""
    if window.days is not None:
        return window.days
    # 24 hours from now can run into tomorrow.
    return 2 if window.hours is not None else 1


class WeatherApiProvider(WeatherProviderBase):
    """WeatherAPI.com forecast provider."""

    name = "WeatherAPI"
    DEFAULT_BASE_URL = "https://api.weatherapi.com"
    PATH = "/v1/forecast.json"

    def get_forecast(
        self, coordinates: Coordinates, window: ForecastWindow, unit: UnitSystem
    ) -> Weather:
        """Fetch forecast.json and map the requested window."""
        logger.info(
            f"Fetching WeatherAPI {window.value} forecast for ({coordinates}) in {unit.value}"
        )

        params: dict[str, Any] = {
            "q": f"{coordinates.latitude},{coordinates.longitude}",
            "key": self._api_key,
            "days": forecast_days(window),
            "alerts": "yes",
        }
        payload = self._parse(_ForecastResponse, self._fetch_json(params))
        with self._mapping():
            return self._map(payload, window, unit)

    def _map(
        self, payload: _ForecastResponse, window: ForecastWindow, unit: UnitSystem
    ) -> Weather:
        forecast_days_list = payload.forecast.forecastday if payload.forecast else []

        if window is ForecastWindow.NOW:
            if payload.current is None:
                raise SchemaError("WeatherAPI response has no current conditions")
            astro = forecast_days_list[0].astro if forecast_days_list else None
            return CurrentForecast(
                current=self._parse_current(payload.current, astro, unit)
            )

        if payload.forecast is None:
            raise SchemaError("WeatherAPI response has no forecast")

        if window.hours is not None:
            tz = self._zone(payload.location)
            hours = [hour for day in forecast_days_list for hour in day.hour]
            return HourlyForecast(hours=self._parse_hours(hours, window.hours, tz, unit))

        days = forecast_days_list[: window.days]
        logger.debug(f"WeatherAPI returned {len(forecast_days_list)} days, using {len(days)}")
        return DailyForecast(days=[self._parse_day(d, unit) for d in days])

    def _zone(self, location: _Location | None) -> tzinfo:
        tz_id = location.tz_id if location else None
        if not tz_id:
            raise TimeParseError("WeatherAPI response has no location tz_id")
        try:
            return ZoneInfo(tz_id)
        except (ZoneInfoNotFoundError, ValueError) as e:
            raise TimeParseError(f"Unknown time zone: {tz_id!r}") from e

    def _parse_current(
        self, current: _Current, astro: _Astro | None, unit: UnitSystem
    ) -> CurrentWeather:
        metric = unit is UnitSystem.METRIC
        return CurrentWeather(
            temp=current.temp_c if metric else current.temp_f,
            feels_like=current.feelslike_c if metric else current.feelslike_f,
            visibility=current.vis_km if metric else current.vis_miles,
            clouds=current.cloud,
            humidity=current.humidity,
            pressure=current.pressure_mb,
            wind_speed=kph_to_mps(current.wind_kph) if metric else current.wind_mph,
            wind_deg=current.wind_degree,
            uvi=current.uv,
            sunrise=parse_astro_time(astro.sunrise) if astro else None,
            sunset=parse_astro_time(astro.sunset) if astro else None,
            condition=_condition(current.condition),
            precip=current.precip_mm if metric else current.precip_in,
            unit=unit,
        )

    def _parse_hours(
        self, hours: list[_Hour], count: int, tz: tzinfo, unit: UnitSystem
    ) -> list[HourWeather]:
        cutoff = self._hour_cutoff()
        upcoming = sorted(
            (h for h in hours if epoch_seconds(h.time_epoch) >= cutoff),
            key=lambda h: epoch_seconds(h.time_epoch),
        )[:count]
        logger.debug(f"WeatherAPI returned {len(hours)} hours, using {len(upcoming)}")

        metric = unit is UnitSystem.METRIC
        return [
            HourWeather(
                time=format_epoch(h.time_epoch, tz, "%Y-%m-%d %H:%M"),
                temp=h.temp_c if metric else h.temp_f,
                feels_like=h.feelslike_c if metric else h.feelslike_f,
                visibility=h.vis_km if metric else h.vis_miles,
                clouds=h.cloud,
                humidity=h.humidity,
                pressure=h.pressure_mb,
                wind_speed=kph_to_mps(h.wind_kph) if metric else h.wind_mph,
                wind_deg=h.wind_degree,
                uvi=h.uv,
                condition=_condition(h.condition),
                precip=h.precip_mm if metric else h.precip_in,
                unit=unit,
            )
            for h in upcoming
        ]

    def _parse_day(self, forecast_day: _ForecastDay, unit: UnitSystem) -> DailyWeather:
        day = forecast_day.day
        astro = forecast_day.astro or _Astro()
        metric = unit is UnitSystem.METRIC
        return DailyWeather(
            date=parse_forecast_date(forecast_day.date),
            temp=day.avgtemp_c if metric else day.avgtemp_f,
            min_temp=day.mintemp_c if metric else day.mintemp_f,
            max_temp=day.maxtemp_c if metric else day.maxtemp_f,
            visibility=day.avgvis_km if metric else day.avgvis_miles,
            humidity=day.avghumidity,
            wind_speed=kph_to_mps(day.maxwind_kph) if metric else day.maxwind_mph,
            uvi=day.uv,
            condition=_condition(day.condition),
            precip=day.totalprecip_mm if metric else day.totalprecip_in,
            sunrise=parse_astro_time(astro.sunrise),
            sunset=parse_astro_time(astro.sunset),
            moonrise=parse_astro_time(astro.moonrise),
            moonset=parse_astro_time(astro.moonset),
            moon_phase=astro.moon_phase,
            unit=unit,
        )
