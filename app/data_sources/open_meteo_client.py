"""Helpers for fetching hourly ride-planning forecasts from the Open-Meteo API."""
from __future__ import annotations

import datetime as dt
from typing import Optional

from pydantic import BaseModel, ConfigDict, model_validator

from app.data_sources.sessions import thread_session
from app.errors import ForecastWindowError
from utils.logging_utils import get_tagged_logger

logger = get_tagged_logger(__name__, tag='open_meteo_client')

OPEN_METEO_WEATHER_URL = "https://api.open-meteo.com/v1/forecast"

HOURLY_VARIABLES = (
    "precipitation",
    "precipitation_probability",
    "temperature_2m",
    "wind_speed_10m",
    "wind_gusts_10m",
    "apparent_temperature",
    "wind_direction_10m",
    "sunshine_duration",
    "temperature_900hPa",
    "temperature_850hPa",
)

EXPECTED_HOURLY_UNITS = {
    "precipitation": "mm",
    "precipitation_probability": "%",
    "temperature_2m": "°C",
    "wind_speed_10m": "km/h",
    "wind_gusts_10m": "km/h",
    "apparent_temperature": "°C",
    "wind_direction_10m": "°",
    "sunshine_duration": "s",
    "temperature_900hPa": "°C",
    "temperature_850hPa": "°C",
}

# Acceptable alternative spellings that should not trigger warnings.
ALLOWED_HOURLY_UNIT_SYNONYMS = {
    "precipitation_probability": {"%", "percent"},
    "wind_direction_10m": {"°", "deg", "degrees"},
    "sunshine_duration": {"s", "seconds"},
}


class HourlyForecast(BaseModel):
    """Typed hourly payload; every series is aligned with `time`.

    Window helpers are bounds-checked and raise ForecastWindowError rather
    than returning a short slice.
    """
    model_config = ConfigDict(extra="ignore")

    time: list[str]
    precipitation: list[Optional[float]]
    precipitation_probability: list[Optional[float]]
    temperature_2m: list[Optional[float]]
    wind_speed_10m: list[Optional[float]]
    wind_gusts_10m: list[Optional[float]]
    apparent_temperature: list[Optional[float]]
    wind_direction_10m: list[Optional[float]]
    sunshine_duration: list[Optional[float]]
    temperature_900hPa: list[Optional[float]]
    temperature_850hPa: list[Optional[float]]

    @model_validator(mode="after")
    def check_series_lengths(self):
        expected = len(self.time)
        for name in HOURLY_VARIABLES:
            actual = len(getattr(self, name))
            if actual != expected:
                raise ValueError(f"hourly series '{name}' has {actual} values, expected {expected}")
        return self

    @property
    def hours(self) -> int:
        return len(self.time)

    def series(self, name: str) -> list[Optional[float]]:
        if name not in HOURLY_VARIABLES:
            raise KeyError(name)
        return getattr(self, name)

    def window(self, name: str, start: int, end: int) -> list[Optional[float]]:
        """Values of `name` for hour indices [start, end)."""
        if start < 0 or end < start or end > self.hours:
            raise ForecastWindowError(
                f"hours {start}..{end} of '{name}' outside forecast of {self.hours} hours"
            )
        return self.series(name)[start:end]

    def value_at(self, name: str, index: int) -> Optional[float]:
        """Single hourly value, or None when the index is past either end."""
        if index < 0 or index >= self.hours:
            return None
        return self.series(name)[index]


def _warn_on_unexpected_units(units: dict, *, context: str):
    """Log a warning if Open-Meteo returns units we did not request/expect."""
    if not units:
        return
    for field, expected in EXPECTED_HOURLY_UNITS.items():
        actual = units.get(field)
        if actual and actual != expected:
            allowed = ALLOWED_HOURLY_UNIT_SYNONYMS.get(field, set())
            if actual not in allowed:
                logger.warning(
                    "Unexpected Open-Meteo unit",
                    extra={"context": context, "field": field, "unit": actual, "expected": expected},
                )


def fetch_hourly_forecast(
    latitude: float,
    longitude: float,
    *,
    start_date: dt.date,
    end_date: dt.date,
    timezone: str = "Europe/Moscow",
    url: str = OPEN_METEO_WEATHER_URL,
    timeout: float = 8.0,
) -> HourlyForecast:
    """Fetch hourly data covering start_date..end_date (inclusive, local days).

    HTTP and validation errors propagate to the caller; a body that is not
    an object with an `hourly` object raises ValueError.
    """
    params = {
        "latitude": latitude,
        "longitude": longitude,
        "start_date": start_date.isoformat(),
        "end_date": end_date.isoformat(),
        "hourly": ",".join(HOURLY_VARIABLES),
        "timezone": timezone,
    }

    resp = thread_session().get(url, params=params, timeout=timeout)
    resp.raise_for_status()
    data = resp.json()
    if not isinstance(data, dict) or not isinstance(data.get("hourly"), dict):
        raise ValueError(f"Unexpected Open-Meteo payload: expected an object with \"hourly\", got {type(data).__name__}")

    _warn_on_unexpected_units(data.get("hourly_units") or {}, context="weather_hourly")
    forecast = HourlyForecast.model_validate(data["hourly"])
    logger.debug(
        "Fetched hourly forecast",
        extra={"lat": latitude, "lon": longitude, "start": params["start_date"], "hours": forecast.hours},
    )
    return forecast
