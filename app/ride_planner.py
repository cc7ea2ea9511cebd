"""Batched weather fetches and per-city ride analysis.

`RidePlanner` owns no global state: the registry, the weather source and the
route matcher are injected, and every call returns a fresh result list.
Blocking HTTP calls run in worker threads via `asyncio.to_thread` so a batch
of cities is fetched concurrently on one event loop.
"""

from __future__ import annotations

import asyncio
import datetime as dt
from typing import Iterable, Optional, Sequence

import requests

from app import config
from app.data_sources.base import WeatherSource
from app.data_sources.factory import build_route_source, build_weather_source
from app.data_sources.open_meteo_client import HourlyForecast
from app.domain import CityAnalysisResult, WeatherDayStats, WeekendStats
from app.elevation_profile import calculate_profile_score
from app.errors import RidePlannerError, WeatherFetchError
from app.registry import DEFAULT_REGISTRY, CityRegistry
from app.ride_analysis import DayWeather, build_day_stats, plan_ride, summarize_day
from app.route_matcher import RouteMatch, RouteMatcher
from utils.logging_utils import get_tagged_logger

logger = get_tagged_logger(__name__, tag="ride_planner")

SATURDAY = 5


def weekend_dates(today: dt.date) -> list[dt.date]:
    """Next Saturday (today when it is Saturday), its Sunday, and the following weekend."""
    saturday = today + dt.timedelta(days=(SATURDAY - today.weekday()) % 7)
    next_saturday = saturday + dt.timedelta(days=7)
    return [
        saturday,
        saturday + dt.timedelta(days=1),
        next_saturday,
        next_saturday + dt.timedelta(days=1),
    ]


def target_dates(today: dt.date, extra_dates: Iterable[dt.date] = ()) -> list[dt.date]:
    """Weekend slots followed by configured holidays not already among them."""
    dates = weekend_dates(today)
    for extra in sorted(set(extra_dates)):
        if extra not in dates:
            dates.append(extra)
    return dates


class RidePlanner:
    """Analyze every registry city for a list of target dates."""

    def __init__(
        self,
        registry: CityRegistry,
        weather_source: WeatherSource,
        route_matcher: RouteMatcher,
        *,
        batch_size: int = 10,
        batch_delay_seconds: float = 0.05,
        retries: int = 3,
        retry_delay_seconds: float = 1.0,
        planning_speed_kmh: float = 30.0,
    ):
        self.registry = registry
        self.weather_source = weather_source
        self.route_matcher = route_matcher
        self.batch_size = max(1, batch_size)
        self.batch_delay_seconds = batch_delay_seconds
        self.retries = max(1, retries)
        self.retry_delay_seconds = retry_delay_seconds
        self.planning_speed_kmh = planning_speed_kmh

    @classmethod
    def from_settings(
        cls,
        settings: config.Settings | None = None,
        registry: CityRegistry = DEFAULT_REGISTRY,
    ) -> "RidePlanner":
        settings = settings or config.settings
        return cls(
            registry,
            build_weather_source(settings),
            RouteMatcher(build_route_source(settings), registry),
            batch_size=settings.batch_size,
            batch_delay_seconds=settings.batch_delay_seconds,
            retries=settings.request_retries,
            retry_delay_seconds=settings.retry_delay_seconds,
            planning_speed_kmh=settings.planning_speed_kmh,
        )

    async def fetch_forecast(self, city: str, start: dt.date, end: dt.date) -> HourlyForecast:
        """Fetch one city's forecast, retrying network failures with a fixed delay."""
        coords = self.registry.get(city)
        if coords is None:
            raise WeatherFetchError(city, "city is not in the registry")

        for attempt in range(1, self.retries + 1):
            try:
                return await asyncio.to_thread(
                    self.weather_source.fetch_hourly_forecast,
                    coords.lat,
                    coords.lon,
                    start_date=start,
                    end_date=end,
                )
            except requests.RequestException as exc:
                if attempt == self.retries:
                    raise WeatherFetchError(city, f"giving up after {attempt} attempts: {exc}") from exc
                logger.warning(
                    "Weather request failed; retrying",
                    extra={"city": city, "attempt": attempt, "retries": self.retries, "error": str(exc)},
                )
                await asyncio.sleep(self.retry_delay_seconds)
        raise WeatherFetchError(city, "no attempts made")

    async def _match_route(self, city: str, day: DayWeather) -> Optional[RouteMatch]:
        if not day.is_dry or self.registry.is_flight_city(city):
            return None
        return await self.route_matcher.match(city, day.wind_deg)

    def _day_stats(
        self,
        city: str,
        date: dt.date,
        day: DayWeather,
        forecast: HourlyForecast,
        match: Optional[RouteMatch],
    ) -> WeatherDayStats:
        mountain = self.registry.is_mountain_city(city)
        if not day.is_dry:
            return build_day_stats(day, date=date, city=city, registry=self.registry)

        if self.registry.is_flight_city(city):
            plan = plan_ride(forecast, day.day_offset, mountain=mountain)
            return build_day_stats(day, date=date, city=city, registry=self.registry, plan=plan)

        if match is None or not match.found:
            return build_day_stats(day, date=date, city=city, registry=self.registry)

        track = match.default.track
        plan = plan_ride(
            forecast,
            day.day_offset,
            distance_km=track.total_distance_km,
            mountain=mountain,
            planning_speed_kmh=self.planning_speed_kmh,
        )
        return build_day_stats(
            day,
            date=date,
            city=city,
            registry=self.registry,
            plan=plan,
            route_distance_km=track.total_distance_km,
            route_count=len(match.candidates),
            profile_score=calculate_profile_score(track),
        )

    async def analyze_city(self, city: str, dates: Sequence[dt.date]) -> Optional[CityAnalysisResult]:
        """Analyze one city; None when its forecast cannot be fetched or processed.

        The first four dates fill the two weekends in order, the rest become
        extra days.
        """
        if not dates:
            return CityAnalysisResult(city_name=city)
        start, end = min(dates), max(dates)

        try:
            forecast = await self.fetch_forecast(city, start, end)
            days = [summarize_day(forecast, (date - start).days) for date in dates]
            matches = await asyncio.gather(*(self._match_route(city, day) for day in days))
            stats = [
                self._day_stats(city, date, day, forecast, match)
                for date, day, match in zip(dates, days, matches)
            ]
        except (RidePlannerError, KeyError, ValueError, TypeError, requests.RequestException) as exc:
            logger.error("City analysis failed", extra={"city": city, "error": str(exc)})
            return None

        slots: list[Optional[WeatherDayStats]] = (stats[:4] + [None] * 4)[:4]
        return CityAnalysisResult(
            city_name=city,
            weekend1=WeekendStats(saturday=slots[0], sunday=slots[1]),
            weekend2=WeekendStats(saturday=slots[2], sunday=slots[3]),
            extra_days=stats[4:],
        )

    async def _run_batches(
        self,
        cities: Sequence[str],
        dates: Sequence[dt.date],
        results: list[CityAnalysisResult],
    ) -> list[str]:
        """Analyze `cities` batch by batch, appending successes; return the failures."""
        failed: list[str] = []
        for i in range(0, len(cities), self.batch_size):
            batch = cities[i:i + self.batch_size]
            outcomes = await asyncio.gather(
                *(self.analyze_city(city, dates) for city in batch),
                return_exceptions=True,
            )
            for city, outcome in zip(batch, outcomes):
                if isinstance(outcome, BaseException) and not isinstance(outcome, Exception):
                    raise outcome
                if isinstance(outcome, Exception):
                    logger.error(
                        "Unexpected error analyzing city",
                        extra={"city": city, "error": f"{type(outcome).__name__}: {outcome}"},
                    )
                    failed.append(city)
                elif outcome is None:
                    failed.append(city)
                else:
                    results.append(outcome)
            if i + self.batch_size < len(cities):
                await asyncio.sleep(self.batch_delay_seconds)
        return failed

    async def analyze_all(self, dates: Sequence[dt.date]) -> list[CityAnalysisResult]:
        """Analyze the whole roster, then retry the failed cities once.

        Results are in completion order; callers sort for display.
        """
        results: list[CityAnalysisResult] = []
        failed = await self._run_batches(self.registry.city_names(), dates, results)
        if failed:
            logger.info("Retrying failed cities", extra={"cities": failed})
            still_failed = await self._run_batches(failed, dates, results)
            if still_failed:
                logger.warning("Cities omitted after retry", extra={"cities": still_failed})
        logger.info("Analysis complete", extra={"analyzed": len(results), "dates": [d.isoformat() for d in dates]})
        return results
