"""Interfaces and helpers for weather and GPX route sources."""

from __future__ import annotations

import datetime as dt
from dataclasses import dataclass
from typing import Callable, Optional, Protocol

from app.data_sources.open_meteo_client import HourlyForecast


class WeatherSource(Protocol):
    """Interface for anything that can provide an hourly forecast for a date range."""

    def fetch_hourly_forecast(
        self,
        latitude: float,
        longitude: float,
        *,
        start_date: dt.date,
        end_date: dt.date,
    ) -> HourlyForecast:
        """Return hourly data for start_date..end_date inclusive."""
        ...


class RouteSource(Protocol):
    """Interface for anything that can look up a GPX file by name."""

    def fetch_text(self, filename: str) -> Optional[str]:
        """Return the GPX document text, or None when the file is unavailable."""
        ...


@dataclass
class CallableWeatherSource(WeatherSource):
    """Wrap a fetch callable so it can be swapped for a different backend."""

    hourly_forecast: Callable[..., HourlyForecast]

    def fetch_hourly_forecast(self, *args, **kwargs) -> HourlyForecast:
        """Delegate to the configured hourly-forecast callable."""
        return self.hourly_forecast(*args, **kwargs)
