"""
OpenWeather One Call 3.0 provider.

One Call converts units server-side: with ``units=metric|imperial`` the
temperatures and wind speed come back already in the requested system and
are used as-is. Visibility (metres) and precipitation (millimetres) are
always metric on this API and have no imperial counterpart, so those two
are derived here.
"""

from datetime import timedelta, timezone
from typing import Any

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

METRES_PER_KM = 1000.0
METRES_PER_MILE = 1609.344
MM_PER_INCH = 25.4

# Largest UTC offset in use anywhere (seconds).
MAX_UTC_OFFSET_S = 18 * 3600


class _Condition(BaseModel):
    description: str | None = None


class _HourlyPrecip(BaseModel):
    one_hour: float | None = Field(default=None, alias="1h")


class _Current(BaseModel):
    dt: EpochValue
    sunrise: EpochValue | None = None
    sunset: EpochValue | None = None
    temp: float
    feels_like: float
    pressure: float
    humidity: float
    clouds: float
    uvi: float
    visibility: float | None = None
    wind_speed: float
    wind_deg: float
    rain: _HourlyPrecip | None = None
    snow: _HourlyPrecip | None = None
    weather: list[_Condition] = Field(default_factory=list)


class _Hourly(BaseModel):
    dt: EpochValue
    temp: float
    feels_like: float
    pressure: float
    humidity: float
    clouds: float
    uvi: float
    visibility: float | None = None
    wind_speed: float
    wind_deg: float
    rain: _HourlyPrecip | None = None
    snow: _HourlyPrecip | None = None
    weather: list[_Condition] = Field(default_factory=list)


class _DailyTemperature(BaseModel):
    day: float
    min: float
    max: float


class _DailyFeelsLike(BaseModel):
    day: float


class _Daily(BaseModel):
    dt: EpochValue
    sunrise: EpochValue | None = None
    sunset: EpochValue | None = None
    moonrise: EpochValue | None = None
    moonset: EpochValue | None = None
    moon_phase: float | None = None
    temp: _DailyTemperature
    feels_like: _DailyFeelsLike | None = None
    pressure: float | None = None
    humidity: float
    clouds: float | None = None
    uvi: float
    wind_speed: float
    wind_deg: float | None = None
    rain: float | None = None
    snow: float | None = None
    weather: list[_Condition] = Field(default_factory=list)


class _OneCallResponse(BaseModel):
    timezone_offset: int | None = None
    current: _Current | None = None
    hourly: list[_Hourly] | None = None
    daily: list[_Daily] | None = None


def _condition(conditions: list[_Condition]) -> str | None:
    return conditions[0].description if conditions else None


def _sum_precip(*amounts: float | None) -> float | None:
    """Total of the reported amounts, or None when nothing was reported."""
    reported = [a for a in amounts if a is not None]
    return sum(reported) if reported else None


def _hourly_precip(
    rain: _HourlyPrecip | None, snow: _HourlyPrecip | None
) -> float | None:
    return _sum_precip(rain.one_hour if rain else None, snow.one_hour if snow else None)


class OpenWeatherProvider(WeatherProviderBase):
    """OpenWeather One Call provider."""

    name = "OpenWeather"
    DEFAULT_BASE_URL = "https://api.openweathermap.org"
    PATH = "/data/3.0/onecall"

    def get_forecast(
        self, coordinates: Coordinates, window: ForecastWindow, unit: UnitSystem
    ) -> Weather:
        """Fetch One Call data and map the requested window."""
        logger.info(
            f"Fetching OpenWeather {window.value} forecast for ({coordinates}) in {unit.value}"
        )

        params: dict[str, Any] = {
            "lat": coordinates.latitude,
            "lon": coordinates.longitude,
            "appid": self._api_key,
            "exclude": "minutely",
            "units": unit.value,
        }
        payload = self._parse(_OneCallResponse, self._fetch_json(params))
        with self._mapping():
            return self._map(payload, window, unit)

    def _map(
        self, payload: _OneCallResponse, window: ForecastWindow, unit: UnitSystem
    ) -> Weather:
        tz = self._offset(payload)

        if window is ForecastWindow.NOW:
            if payload.current is None:
                raise SchemaError("OpenWeather response has no current conditions")
            return CurrentForecast(current=self._parse_current(payload.current, tz, unit))

        if window.hours is not None:
            if payload.hourly is None:
                raise SchemaError("OpenWeather response has no hourly forecast")
            return HourlyForecast(hours=self._parse_hours(payload.hourly, window.hours, tz, unit))

        if payload.daily is None:
            raise SchemaError("OpenWeather response has no daily forecast")
        days = payload.daily[: window.days]
        logger.debug(f"OpenWeather returned {len(payload.daily)} days, using {len(days)}")
        return DailyForecast(days=[self._parse_day(d, tz, unit) for d in days])

    def _offset(self, payload: _OneCallResponse) -> timezone:
        offset = payload.timezone_offset
        if offset is None:
            raise TimeParseError("OpenWeather response has no timezone_offset")
        if abs(offset) > MAX_UTC_OFFSET_S:
            raise TimeParseError(f"Invalid timezone_offset: {offset}")
        return timezone(timedelta(seconds=offset))

    def _visibility(self, metres: float | None, unit: UnitSystem) -> float | None:
        if metres is None:
            return None
        if unit is UnitSystem.METRIC:
            return metres / METRES_PER_KM
        return metres / METRES_PER_MILE

    def _precip(self, mm: float | None, unit: UnitSystem) -> float | None:
        if mm is None or unit is UnitSystem.METRIC:
            return mm
        return mm / MM_PER_INCH

    def _parse_current(
        self, current: _Current, tz: timezone, unit: UnitSystem
    ) -> CurrentWeather:
        return CurrentWeather(
            temp=current.temp,
            feels_like=current.feels_like,
            visibility=self._visibility(current.visibility, unit),
            clouds=current.clouds,
            humidity=current.humidity,
            pressure=current.pressure,
            wind_speed=current.wind_speed,
            wind_deg=current.wind_deg,
            uvi=current.uvi,
            sunrise=self._clock_time(current.sunrise, tz),
            sunset=self._clock_time(current.sunset, tz),
            condition=_condition(current.weather),
            precip=self._precip(_hourly_precip(current.rain, current.snow), unit),
            unit=unit,
        )

    def _parse_hours(
        self, hourly: list[_Hourly], count: int, tz: timezone, unit: UnitSystem
    ) -> list[HourWeather]:
        cutoff = self._hour_cutoff()
        upcoming = sorted(
            (h for h in hourly if epoch_seconds(h.dt) >= cutoff),
            key=lambda h: epoch_seconds(h.dt),
        )[:count]
        logger.debug(f"OpenWeather returned {len(hourly)} hours, using {len(upcoming)}")

        return [
            HourWeather(
                time=format_epoch(h.dt, tz, "%Y-%m-%d %H:%M"),
                temp=h.temp,
                feels_like=h.feels_like,
                visibility=self._visibility(h.visibility, unit),
                clouds=h.clouds,
                humidity=h.humidity,
                pressure=h.pressure,
                wind_speed=h.wind_speed,
                wind_deg=h.wind_deg,
                uvi=h.uvi,
                condition=_condition(h.weather),
                precip=self._precip(_hourly_precip(h.rain, h.snow), unit),
                unit=unit,
            )
            for h in upcoming
        ]

    def _parse_day(self, day: _Daily, tz: timezone, unit: UnitSystem) -> DailyWeather:
        return DailyWeather(
            date=format_epoch(day.dt, tz, "%Y-%m-%d"),
            temp=day.temp.day,
            min_temp=day.temp.min,
            max_temp=day.temp.max,
            feels_like=day.feels_like.day if day.feels_like else None,
            clouds=day.clouds,
            humidity=day.humidity,
            pressure=day.pressure,
            wind_speed=day.wind_speed,
            wind_deg=day.wind_deg,
            uvi=day.uvi,
            condition=_condition(day.weather),
            precip=self._precip(_sum_precip(day.rain, day.snow), unit),
            sunrise=self._clock_time(day.sunrise, tz),
            sunset=self._clock_time(day.sunset, tz),
            moonrise=self._clock_time(day.moonrise, tz),
            moonset=self._clock_time(day.moonset, tz),
            moon_phase=f"{day.moon_phase:.2f}" if day.moon_phase is not None else None,
            unit=unit,
        )

    def _clock_time(self, value: EpochValue | None, tz: timezone) -> str | None:
        # One Call reports 0 for events that do not happen that day (polar regions).
        if value is None or value == 0:
            return None
        return format_epoch(value, tz, "%H:%M")
