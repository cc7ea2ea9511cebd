"""Factory helpers for choosing weather and route sources at startup."""

from __future__ import annotations

from functools import partial

from app import config
from app.data_sources.base import CallableWeatherSource, RouteSource, WeatherSource
from app.data_sources.open_meteo_client import fetch_hourly_forecast
from app.data_sources.route_source import HttpRouteSource, LocalRouteSource
from utils.logging_utils import get_tagged_logger

logger = get_tagged_logger(__name__, tag="data_sources/factory")


DEFAULT_ROUTE_SOURCE_NAME = "http"


def build_weather_source(settings: config.Settings | None = None) -> WeatherSource:
    """Instantiate the Open-Meteo weather source with configured URL, timezone and timeout."""
    settings = settings or config.settings
    logger.info("Using Open-Meteo data source", extra={"url": settings.weather_api_url, "timezone": settings.timezone})
    return CallableWeatherSource(
        hourly_forecast=partial(
            fetch_hourly_forecast,
            timezone=settings.timezone,
            url=settings.weather_api_url,
            timeout=settings.request_timeout_seconds,
        )
    )


def build_route_source(settings: config.Settings | None = None) -> RouteSource:
    """Instantiate the configured GPX route source."""
    settings = settings or config.settings
    source = (settings.route_source or DEFAULT_ROUTE_SOURCE_NAME).lower()

    if source == "http":
        logger.info("Using HTTP route source", extra={"base_url": settings.routes_base_url})
        return HttpRouteSource(settings.routes_base_url, timeout=settings.request_timeout_seconds)

    if source == "local":
        logger.info("Using local route source", extra={"routes_dir": settings.routes_dir})
        return LocalRouteSource(settings.routes_dir)

    raise ValueError(f"Unknown route source '{source}'")
