"""Data source factories for plugging different weather and route backends."""

from .base import CallableWeatherSource, RouteSource, WeatherSource
from .factory import build_route_source, build_weather_source
from .open_meteo_client import HourlyForecast, fetch_hourly_forecast
from .route_source import HttpRouteSource, LocalRouteSource

__all__ = [
    "build_route_source",
    "build_weather_source",
    "WeatherSource",
    "RouteSource",
    "CallableWeatherSource",
    "HourlyForecast",
    "fetch_hourly_forecast",
    "HttpRouteSource",
    "LocalRouteSource",
]
