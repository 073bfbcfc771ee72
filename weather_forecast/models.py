"""
Provider-agnostic weather models.

Every provider adapter produces one of the ``CurrentForecast``,
``HourlyForecast`` or ``DailyForecast`` shapes, which together form the
``Weather`` tagged union. Records know how to render themselves as a
multi-line text block; printing is left to the caller.
"""

import math
from enum import Enum
from typing import Annotated, Literal

from pydantic import BaseModel, BeforeValidator, Field, field_validator

NO_DATA = "No data"


class UnitSystem(str, Enum):
    """Measurement system used for request construction and labels."""

    METRIC = "metric"
    IMPERIAL = "imperial"

    @property
    def temperature_unit(self) -> str:
        return "°C" if self is UnitSystem.METRIC else "°F"

    @property
    def speed_unit(self) -> str:
        return "m/s" if self is UnitSystem.METRIC else "mph"

    @property
    def distance_unit(self) -> str:
        return "km" if self is UnitSystem.METRIC else "mi"

    @property
    def precipitation_unit(self) -> str:
        return "mm" if self is UnitSystem.METRIC else "in"

    @property
    def pressure_unit(self) -> str:
        # Both providers report pressure in hPa regardless of units.
        return "hPa"


class ForecastWindow(str, Enum):
    """Requested time range of a forecast."""

    NOW = "now"
    HOURS_24 = "hours24"
    DAYS_3 = "days3"
    DAYS_5 = "days5"

    @property
    def hours(self) -> int | None:
        """Number of hourly records, or None for non-hourly windows."""
        return 24 if self is ForecastWindow.HOURS_24 else None

    @property
    def days(self) -> int | None:
        """Number of daily records, or None for non-daily windows."""
        return {ForecastWindow.DAYS_3: 3, ForecastWindow.DAYS_5: 5}.get(self)


class WeatherRecord(BaseModel):
    """Fields shared by every snapshot and forecast record."""

    humidity: float = Field(description="Relative humidity in percent")
    wind_speed: float
    uvi: float = Field(description="UV index")
    condition: str = NO_DATA
    precip: float | None = None
    sunrise: str | None = None
    sunset: str | None = None
    unit: UnitSystem

    @field_validator("condition", mode="before")
    @classmethod
    def default_condition(cls, v):
        """Replace a missing or blank description with the placeholder."""
        if v is None or (isinstance(v, str) and not v.strip()):
            return NO_DATA
        return v

    def _fmt_temp(self, value: float) -> str:
        return f"{value:.1f}{self.unit.temperature_unit}"

    def _common_lines(
        self,
        *,
        clouds: float | None,
        pressure: float | None,
        wind_deg: int | None,
        visibility: float | None,
    ) -> list[str]:
        unit = self.unit
        lines = [f"Humidity: {self.humidity:.0f}%"]
        if clouds is not None:
            lines.append(f"Cloud cover: {clouds:.0f}%")
        if pressure is not None:
            lines.append(f"Pressure: {pressure:.0f} {unit.pressure_unit}")

        wind = f"Wind: {self.wind_speed:.1f} {unit.speed_unit}"
        if wind_deg is not None:
            wind += f", {wind_deg}°"
        lines.append(wind)

        if visibility is not None:
            lines.append(f"Visibility: {visibility:.1f} {unit.distance_unit}")
        lines.append(f"UV index: {self.uvi:.1f}")
        if self.precip is not None:
            lines.append(f"Precipitation: {self.precip:.1f} {unit.precipitation_unit}")
        if self.sunrise is not None:
            lines.append(f"Sunrise: {self.sunrise}")
        if self.sunset is not None:
            lines.append(f"Sunset: {self.sunset}")
        return lines


def _normalize_degrees(v):
    if v is None:
        return None
    degrees = float(v)
    if not math.isfinite(degrees):
        raise ValueError(f"wind direction must be finite, got {v!r}")
    return int(round(degrees)) % 360


# Wind direction in whole degrees, 0-359 (providers may report 360).
Degrees = Annotated[int, BeforeValidator(_normalize_degrees)]


class CurrentWeather(WeatherRecord):
    """Snapshot of current conditions."""

    temp: float
    feels_like: float
    visibility: float | None = None
    clouds: float
    pressure: float
    wind_deg: Degrees

    def render(self) -> str:
        lines = [
            f"Condition: {self.condition}",
            f"Temperature: {self._fmt_temp(self.temp)} (feels like {self._fmt_temp(self.feels_like)})",
        ]
        lines += self._common_lines(
            clouds=self.clouds,
            pressure=self.pressure,
            wind_deg=self.wind_deg,
            visibility=self.visibility,
        )
        return "\n".join(lines)


class HourWeather(WeatherRecord):
    """Forecast for a single hour."""

    time: str = Field(description="Local time, YYYY-MM-DD HH:MM")
    temp: float
    feels_like: float
    visibility: float | None = None
    clouds: float
    pressure: float
    wind_deg: Degrees

    def render(self) -> str:
        lines = [
            f"Time: {self.time}",
            f"Condition: {self.condition}",
            f"Temperature: {self._fmt_temp(self.temp)} (feels like {self._fmt_temp(self.feels_like)})",
        ]
        lines += self._common_lines(
            clouds=self.clouds,
            pressure=self.pressure,
            wind_deg=self.wind_deg,
            visibility=self.visibility,
        )
        return "\n".join(lines)


class DailyWeather(WeatherRecord):
    """Forecast for a single day.

    Providers differ in what they report per day, so several fields are
    optional here and simply omitted from the rendered block when absent.
    """

    date: str = Field(description="Local date, YYYY-MM-DD")
    temp: float = Field(description="Representative day temperature")
    min_temp: float
    max_temp: float
    feels_like: float | None = None
    visibility: float | None = None
    clouds: float | None = None
    pressure: float | None = None
    wind_deg: Degrees | None = None
    moonrise: str | None = None
    moonset: str | None = None
    moon_phase: str | None = None

    def render(self) -> str:
        temperature = (
            f"Temperature: {self._fmt_temp(self.temp)} "
            f"(min {self._fmt_temp(self.min_temp)}, max {self._fmt_temp(self.max_temp)})"
        )
        lines = [f"Date: {self.date}", f"Condition: {self.condition}", temperature]
        if self.feels_like is not None:
            lines.append(f"Feels like: {self._fmt_temp(self.feels_like)}")
        lines += self._common_lines(
            clouds=self.clouds,
            pressure=self.pressure,
            wind_deg=self.wind_deg,
            visibility=self.visibility,
        )
        if self.moonrise is not None:
            lines.append(f"Moonrise: {self.moonrise}")
        if self.moonset is not None:
            lines.append(f"Moonset: {self.moonset}")
        if self.moon_phase is not None:
            lines.append(f"Moon phase: {self.moon_phase}")
        return "\n".join(lines)


class CurrentForecast(BaseModel):
    kind: Literal["current"] = "current"
    current: CurrentWeather

    def render_blocks(self) -> list[str]:
        return [self.current.render()]


class HourlyForecast(BaseModel):
    kind: Literal["hourly"] = "hourly"
    hours: list[HourWeather] = Field(default_factory=list)

    def render_blocks(self) -> list[str]:
        return [hour.render() for hour in self.hours]


class DailyForecast(BaseModel):
    kind: Literal["daily"] = "daily"
    days: list[DailyWeather] = Field(default_factory=list)

    def render_blocks(self) -> list[str]:
        return [day.render() for day in self.days]


Weather = Annotated[
    CurrentForecast | HourlyForecast | DailyForecast,
    Field(discriminator="kind"),
]
