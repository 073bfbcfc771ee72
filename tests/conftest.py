"""
pytest configuration for weather-forecast tests.

Keeps tests isolated from the user's configuration, the shared HTTP session
and the real clock, and provides realistic provider payloads.
"""

import logging
from datetime import UTC, datetime, timedelta

import pytest

# Fixed "now" for hourly window selection: 2024-06-01 12:30 UTC.
NOW = datetime(2024, 6, 1, 12, 30, tzinfo=UTC)
HOUR_START = NOW.replace(minute=0)


def epoch(dt: datetime) -> int:
    return int(dt.timestamp())


@pytest.fixture(autouse=True)
def _isolate_environment(monkeypatch, tmp_path):
    """Point configuration at a temp file and clear cached settings."""
    for var in (
        "WEATHER_FORECAST_CONFIG",
        "WEATHER_FORECAST_TIMEOUT",
        "LOG_LEVEL",
        "LOG_FILE",
        "DISABLE_FILE_LOGGING",
    ):
        monkeypatch.delenv(var, raising=False)
    monkeypatch.setenv("WEATHER_FORECAST_CONFIG", str(tmp_path / "config.yaml"))

    from weather_forecast.config import clear_settings_cache

    clear_settings_cache()
    yield
    clear_settings_cache()


@pytest.fixture(autouse=True)
def _reset_http_session():
    """Reset the http_client singleton between tests."""
    import weather_forecast.http_client as hc

    hc.reset_session()
    yield
    hc.reset_session()


@pytest.fixture(autouse=True)
def _restore_root_logger():
    """Undo setup_logging() calls made by CLI tests."""
    root = logging.getLogger()
    urllib3_logger = logging.getLogger("urllib3")
    handlers, level = list(root.handlers), root.level
    urllib3_level = urllib3_logger.level
    yield
    for handler in root.handlers:
        if handler not in handlers:
            handler.close()
    root.handlers[:] = handlers
    root.setLevel(level)
    urllib3_logger.setLevel(urllib3_level)


@pytest.fixture
def clock():
    return lambda: NOW


@pytest.fixture
def config_path(tmp_path):
    return tmp_path / "config.yaml"


def _onecall_hour(dt: datetime, **overrides):
    hour = {
        "dt": epoch(dt),
        "temp": 20.0,
        "feels_like": 19.0,
        "pressure": 1012,
        "humidity": 60,
        "dew_point": 12.0,
        "uvi": 3.2,
        "clouds": 40,
        "visibility": 10000,
        "wind_speed": 4.0,
        "wind_deg": 200,
        "pop": 0.1,
        "weather": [
            {"id": 802, "main": "Clouds", "description": "scattered clouds", "icon": "03d"}
        ],
    }
    hour.update(overrides)
    return hour


def _onecall_day(dt: datetime, **overrides):
    day = {
        "dt": epoch(dt),
        "sunrise": epoch(dt.replace(hour=2, minute=10)),
        "sunset": epoch(dt.replace(hour=18, minute=5)),
        "moonrise": epoch(dt.replace(hour=23, minute=40)),
        "moonset": 0,
        "moon_phase": 0.25,
        "summary": "Expect a day of partly cloudy with rain",
        "temp": {"day": 22.0, "min": 14.0, "max": 25.0, "night": 16.0, "eve": 20.0, "morn": 15.0},
        "feels_like": {"day": 21.5, "night": 15.5, "eve": 19.5, "morn": 14.5},
        "pressure": 1010,
        "humidity": 55,
        "dew_point": 11.0,
        "wind_speed": 5.5,
        "wind_deg": 180,
        "clouds": 30,
        "uvi": 6.1,
        "pop": 0.4,
        "rain": 1.2,
        "weather": [{"id": 500, "main": "Rain", "description": "light rain", "icon": "10d"}],
    }
    day.update(overrides)
    return day


@pytest.fixture
def onecall_payload():
    """One Call 3.0 payload: 48 hours starting two hours ago, 8 days."""
    first_hour = HOUR_START - timedelta(hours=2)
    first_day = NOW.replace(hour=9, minute=0)
    return {
        "lat": 49.84,
        "lon": 24.03,
        "timezone": "Europe/Kyiv",
        "timezone_offset": 10800,
        "current": {
            "dt": epoch(NOW),
            "sunrise": epoch(NOW.replace(hour=2, minute=10)),
            "sunset": epoch(NOW.replace(hour=18, minute=5)),
            "temp": 21.3,
            "feels_like": 20.8,
            "pressure": 1013,
            "humidity": 58,
            "dew_point": 12.4,
            "clouds": 20,
            "uvi": 5.4,
            "visibility": 10000,
            "wind_speed": 3.6,
            "wind_deg": 360,
            "weather": [
                {"id": 801, "main": "Clouds", "description": "few clouds", "icon": "02d"}
            ],
        },
        "hourly": [_onecall_hour(first_hour + timedelta(hours=i)) for i in range(48)],
        "daily": [_onecall_day(first_day + timedelta(days=i)) for i in range(8)],
    }


@pytest.fixture
def onecall_hour():
    return _onecall_hour


def _condition(text):
    return {"text": text, "icon": "//cdn.weatherapi.com/weather/64x64/day/116.png", "code": 1003}


def _weatherapi_hour(dt: datetime, **overrides):
    hour = {
        "time_epoch": epoch(dt),
        "time": dt.strftime("%Y-%m-%d %H:%M"),
        "temp_c": 20.0,
        "temp_f": 68.0,
        "is_day": 1,
        "condition": _condition("Partly cloudy"),
        "wind_mph": 11.2,
        "wind_kph": 18.0,
        "wind_degree": 250,
        "wind_dir": "WSW",
        "pressure_mb": 1015.0,
        "pressure_in": 29.97,
        "precip_mm": 0.0,
        "precip_in": 0.0,
        "humidity": 65,
        "cloud": 50,
        "feelslike_c": 19.5,
        "feelslike_f": 67.1,
        "chance_of_rain": 10,
        "vis_km": 10.0,
        "vis_miles": 6.0,
        "gust_mph": 15.0,
        "gust_kph": 24.1,
        "uv": 4.0,
    }
    hour.update(overrides)
    return hour


def _weatherapi_day(day_start: datetime, **overrides):
    forecast_day = {
        "date": day_start.strftime("%Y-%m-%d"),
        "date_epoch": epoch(day_start),
        "day": {
            "maxtemp_c": 24.0,
            "maxtemp_f": 75.2,
            "mintemp_c": 13.0,
            "mintemp_f": 55.4,
            "avgtemp_c": 18.5,
            "avgtemp_f": 65.3,
            "maxwind_mph": 13.4,
            "maxwind_kph": 21.6,
            "totalprecip_mm": 2.5,
            "totalprecip_in": 0.1,
            "avgvis_km": 9.5,
            "avgvis_miles": 5.0,
            "avghumidity": 70,
            "daily_will_it_rain": 1,
            "daily_chance_of_rain": 80,
            "condition": _condition("Patchy rain nearby"),
            "uv": 5.0,
        },
        "astro": {
            "sunrise": "05:07 AM",
            "sunset": "09:15 PM",
            "moonrise": "No moonrise",
            "moonset": "02:31 PM",
            "moon_phase": "Waning Crescent",
            "moon_illumination": 22,
        },
        "hour": [_weatherapi_hour(day_start + timedelta(hours=h)) for h in range(24)],
    }
    forecast_day.update(overrides)
    return forecast_day


@pytest.fixture
def weatherapi_payload():
    """forecast.json payload with two full days of hours."""
    midnight = NOW.replace(hour=0, minute=0)
    return {
        "location": {
            "name": "Lviv",
            "region": "",
            "country": "Ukraine",
            "lat": 49.84,
            "lon": 24.03,
            "tz_id": "Europe/London",
            "localtime_epoch": epoch(NOW),
            "localtime": "2024-06-01 13:30",
        },
        "current": {
            "last_updated_epoch": epoch(NOW),
            "last_updated": "2024-06-01 13:30",
            "temp_c": 20.0,
            "temp_f": 68.0,
            "is_day": 1,
            "condition": _condition("Sunny"),
            "wind_mph": 11.2,
            "wind_kph": 18.0,
            "wind_degree": 270,
            "wind_dir": "W",
            "pressure_mb": 1016.0,
            "pressure_in": 30.0,
            "precip_mm": 0.2,
            "precip_in": 0.01,
            "humidity": 52,
            "cloud": 25,
            "feelslike_c": 19.0,
            "feelslike_f": 66.2,
            "vis_km": 10.0,
            "vis_miles": 6.0,
            "uv": 6.0,
            "gust_mph": 14.0,
            "gust_kph": 22.5,
        },
        "forecast": {
            "forecastday": [
                _weatherapi_day(midnight + timedelta(days=d)) for d in range(2)
            ]
        },
        "alerts": {"alert": []},
    }


@pytest.fixture
def weatherapi_day():
    return _weatherapi_day
