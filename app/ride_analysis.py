"""Per-day ride suitability: weather aggregates, clothing and the ride plan.

Analysis runs in two pure stages. `summarize_day` slices the hourly forecast
into the fixed local-time windows and reduces them to a `DayWeather`;
`build_day_stats` turns that summary plus the matched route into the public
`WeatherDayStats`.

All hour windows are offsets from local midnight of the analyzed day:

* rain window 04:00-24:00 (rain total, wet hours, max probability)
* active window 09:00-18:00 (sun, temperature, wind, riding rain)
* morning window 09:00-12:00
* free-air window 10:00-18:00 (900 and 850 hPa minima)
"""

from __future__ import annotations

import datetime as dt
import math
from dataclasses import dataclass, replace
from typing import Iterable, Optional, Sequence

from app.data_sources.open_meteo_client import HourlyForecast
from app.domain import WeatherDayStats
from app.geo import compass8, compass_label
from app.registry import CityRegistry

HOURS_PER_DAY = 24
RAIN_WINDOW = (4, 24)
ACTIVE_WINDOW = (9, 18)
MORNING_WINDOW = (9, 12)
FREE_AIR_WINDOW = (10, 18)
ARM_WARMER_START_WINDOW = (9, 12)  # 09-11
ARM_WARMER_END_WINDOW = (11, 19)  # 11-18
RIDE_START_HOUR = 10

WET_HOUR_MM = 0.1
MORNING_DRY_MM = 0.1
DRY_DAY_MM = 0.5
MAX_SUN_SECONDS = 9 * 3600

FLIGHT_RIDE_HOURS = 3
DEFAULT_PLANNING_SPEED_KMH = 30.0

DAY_NAMES = ("Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday")


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def _round_or_none(value: Optional[float]) -> Optional[int]:
    return round_half_up(value) if value is not None else None


def _total(values: Iterable[Optional[float]]) -> float:
    return sum(v for v in values if v is not None)


def _known(values: Iterable[Optional[float]]) -> list[float]:
    return [v for v in values if v is not None]


def _min(values: Iterable[Optional[float]]) -> Optional[float]:
    known = _known(values)
    return min(known) if known else None


def _max(values: Iterable[Optional[float]]) -> Optional[float]:
    known = _known(values)
    return max(known) if known else None


@dataclass(frozen=True)
class DayWeather:
    """Window aggregates for one day; min/max fields are None when no hour had data."""
    day_offset: int
    precip_sum: float
    wet_hours: tuple[int, ...]
    precipitation_probability: Optional[float]
    sun_seconds: float
    temperature_min: Optional[float]
    temperature_max: Optional[float]
    feels_like_min: Optional[float]
    feels_like_max: Optional[float]
    wind_min: Optional[float]
    wind_max: Optional[float]
    wind_gusts_max: Optional[float]
    wind_deg: float
    active_rain: float
    is_morning_ride_suitable: bool
    temperature_900hpa_min: Optional[float]
    temperature_850hpa_min: Optional[float]
    temps_09_11: tuple[float, ...]
    temps_11_18: tuple[float, ...]

    @property
    def is_dry(self) -> bool:
        return self.active_rain <= DRY_DAY_MM


@dataclass(frozen=True)
class RidePlan:
    duration: str
    start_temperature: Optional[int] = None
    end_temperature: Optional[int] = None
    start_temperature_900hpa: Optional[int] = None
    end_temperature_900hpa: Optional[int] = None
    start_temperature_850hpa: Optional[int] = None
    end_temperature_850hpa: Optional[int] = None


def summarize_day(forecast: HourlyForecast, day_offset: int) -> DayWeather:
    """Reduce one day of the hourly forecast to its window aggregates.

    Raises ForecastWindowError when the day reaches past the payload.
    """
    s = day_offset * HOURS_PER_DAY

    def window(name: str, bounds: tuple[int, int]) -> list[Optional[float]]:
        return forecast.window(name, s + bounds[0], s + bounds[1])

    rain = window("precipitation", RAIN_WINDOW)
    wet_hours = tuple(
        RAIN_WINDOW[0] + i for i, value in enumerate(rain) if value is not None and value > WET_HOUR_MM
    )

    temps = window("temperature_2m", ACTIVE_WINDOW)
    winds = window("wind_speed_10m", ACTIVE_WINDOW)
    directions = window("wind_direction_10m", ACTIVE_WINDOW)

    wind_max = _max(winds)
    wind_deg = 0.0
    if wind_max is not None:
        # direction at the first hour of peak wind
        direction = directions[winds.index(wind_max)]
        wind_deg = direction if direction is not None else 0.0

    return DayWeather(
        day_offset=day_offset,
        precip_sum=_total(rain),
        wet_hours=wet_hours,
        precipitation_probability=_max(window("precipitation_probability", RAIN_WINDOW)),
        sun_seconds=_total(window("sunshine_duration", ACTIVE_WINDOW)),
        temperature_min=_min(temps),
        temperature_max=_max(temps),
        feels_like_min=_min(window("apparent_temperature", ACTIVE_WINDOW)),
        feels_like_max=_max(window("apparent_temperature", ACTIVE_WINDOW)),
        wind_min=_min(winds),
        wind_max=wind_max,
        wind_gusts_max=_max(window("wind_gusts_10m", ACTIVE_WINDOW)),
        wind_deg=wind_deg,
        active_rain=_total(window("precipitation", ACTIVE_WINDOW)),
        is_morning_ride_suitable=_total(window("precipitation", MORNING_WINDOW)) <= MORNING_DRY_MM,
        temperature_900hpa_min=_min(window("temperature_900hPa", FREE_AIR_WINDOW)),
        temperature_850hpa_min=_min(window("temperature_850hPa", FREE_AIR_WINDOW)),
        temps_09_11=tuple(_known(window("temperature_2m", ARM_WARMER_START_WINDOW))),
        temps_11_18=tuple(_known(window("temperature_2m", ARM_WARMER_END_WINDOW))),
    )


def clothing_recommendations(
    t_min: float,
    t_max: float,
    w_max: float,
    active_rain: float,
    temps_09_11: Sequence[float],
    temps_11_18: Sequence[float],
    *,
    mountain: bool = False,
    morning_ride_suitable: bool = True,
) -> list[str]:
    """Rule-based kit list for the active window, in first-mention order."""
    if t_max < 5:
        return []
    if active_rain > DRY_DAY_MM and not morning_ride_suitable:
        return []

    # cool start warming into the afternoon
    use_arm_warmers = bool(temps_09_11 and temps_11_18) and min(temps_09_11) < 16 and max(temps_11_18) > 19

    hints: list[str] = []
    hints.append("Bib Tights" if t_max < 14 else "Bib Shorts")
    if 14 <= t_max <= 19:
        hints.append("Leg or Knee Warmers")

    if t_max < 15:
        jersey = "Long Sleeve Jersey Cold"
    elif t_max <= 22:
        jersey = "Long Sleeve Jersey Hot"
    else:
        jersey = "Jersey"
    if use_arm_warmers and jersey == "Long Sleeve Jersey Hot":
        jersey = "Jersey"

    outer_layer = ""
    if t_min < 12 or w_max > 15 or 10 < t_max <= 20:
        outer_layer = "Jacket" if w_max >= 15 or mountain else "Vest"

    if t_max <= 8:
        hints.append("Winter Jacket")
    else:
        hints.append(jersey)
        if outer_layer:
            hints.append(outer_layer)

    if use_arm_warmers:
        hints.append("Arm Warmers")
    if t_min <= 8:
        hints.append("Oversocks")
    elif t_min <= 14:
        hints.append("Toe covers")
    if t_min <= 8:
        hints.append("Buff")

    return list(dict.fromkeys(hints))


def format_rain_hours(hours: Iterable[int]) -> Optional[str]:
    """Collapse wet hours into ranges, e.g. [13, 14, 15, 20] -> "13:00–16:00, 20:00"."""
    ordered = sorted(set(hours))
    if not ordered:
        return None

    groups: list[list[int]] = [[ordered[0]]]
    for hour in ordered[1:]:
        if hour == groups[-1][-1] + 1:
            groups[-1].append(hour)
        else:
            groups.append([hour])

    parts = []
    for group in groups:
        start, end = group[0], group[-1]
        if start == end:
            parts.append(f"{start:02d}:00")
        else:
            parts.append(f"{start:02d}:00–{end + 1:02d}:00")
    return ", ".join(parts)


def format_sun_time(seconds: float) -> str:
    """Sunshine as "H h M min", capped at the nine-hour active window."""
    if seconds <= 0:
        return "0 h 0 min"
    capped = min(seconds, MAX_SUN_SECONDS)
    hours = int(capped // 3600)
    minutes = int((capped % 3600) // 60)
    return f"{hours} h {minutes} min"


def format_duration(hours: int, minutes: int) -> str:
    return f"{hours:02d}:{minutes:02d}"


def ride_duration_minutes(distance_km: float, planning_speed_kmh: float = DEFAULT_PLANNING_SPEED_KMH) -> int:
    return round_half_up(distance_km / planning_speed_kmh * 60)


def plan_ride(
    forecast: HourlyForecast,
    day_offset: int,
    *,
    distance_km: Optional[float] = None,
    mountain: bool = False,
    planning_speed_kmh: float = DEFAULT_PLANNING_SPEED_KMH,
) -> RidePlan:
    """Ride duration and start/end temperatures for a 10:00 start.

    Without a distance the nominal flight-city ride of three hours is used.
    Hours past the end of the forecast give None temperatures.
    """
    if distance_km is None:
        hours, minutes = FLIGHT_RIDE_HOURS, 0
    else:
        hours, minutes = divmod(ride_duration_minutes(distance_km, planning_speed_kmh), 60)

    start = day_offset * HOURS_PER_DAY + RIDE_START_HOUR
    end = start + hours

    def at(name: str, index: int) -> Optional[int]:
        return _round_or_none(forecast.value_at(name, index))

    plan = RidePlan(
        duration=format_duration(hours, minutes),
        start_temperature=at("temperature_2m", start),
        end_temperature=at("temperature_2m", end),
    )
    if not mountain:
        return plan
    return replace(
        plan,
        start_temperature_900hpa=at("temperature_900hPa", start),
        end_temperature_900hpa=at("temperature_900hPa", end),
        start_temperature_850hpa=at("temperature_850hPa", start),
        end_temperature_850hpa=at("temperature_850hPa", end),
    )


def build_day_stats(
    day: DayWeather,
    *,
    date: dt.date,
    city: str,
    registry: CityRegistry,
    plan: Optional[RidePlan] = None,
    route_distance_km: Optional[float] = None,
    route_count: int = 0,
    profile_score: Optional[int] = None,
) -> WeatherDayStats:
    """Assemble the public per-day stats.

    `plan` is given only for dry days that have a route or are flight-only;
    its presence is what makes the day rideable.
    """
    mountain = registry.is_mountain_city(city)
    has_route = day.is_dry and plan is not None

    hints = clothing_recommendations(
        day.temperature_min if day.temperature_min is not None else 0.0,
        day.temperature_max if day.temperature_max is not None else 0.0,
        day.wind_max if day.wind_max is not None else 0.0,
        day.active_rain,
        day.temps_09_11,
        day.temps_11_18,
        mountain=mountain,
        morning_ride_suitable=day.is_morning_ride_suitable,
    )

    fields = dict(
        date=date,
        day_name=DAY_NAMES[date.weekday()],
        precip_sum=day.precip_sum,
        precipitation_probability=day.precipitation_probability,
        rain_hours=format_rain_hours(day.wet_hours),
        temperature_min=day.temperature_min,
        temperature_max=day.temperature_max,
        feels_like_min=day.feels_like_min,
        feels_like_max=day.feels_like_max,
        wind_min=day.wind_min,
        wind_max=day.wind_max,
        wind_gusts_max=day.wind_gusts_max,
        wind_deg=day.wind_deg,
        wind_direction=compass8(day.wind_deg),
        wind_direction_full=compass_label(day.wind_deg),
        sun_seconds=day.sun_seconds,
        sun_str=format_sun_time(day.sun_seconds),
        is_dry=day.is_dry,
        is_morning_ride_suitable=day.is_morning_ride_suitable,
        has_route=has_route,
        route_count=route_count if has_route else 0,
        is_rideable=day.is_dry and has_route,
        clothing_hints=hints,
    )
    if mountain:
        fields.update(
            temperature_900hpa=_round_or_none(day.temperature_900hpa_min),
            temperature_850hpa=_round_or_none(day.temperature_850hpa_min),
        )
    if has_route:
        fields.update(
            ride_duration=plan.duration,
            route_distance_km=route_distance_km,
            profile_score=profile_score,
            start_temperature=plan.start_temperature,
            end_temperature=plan.end_temperature,
            start_temperature_900hpa=plan.start_temperature_900hpa,
            end_temperature_900hpa=plan.end_temperature_900hpa,
            start_temperature_850hpa=plan.start_temperature_850hpa,
            end_temperature_850hpa=plan.end_temperature_850hpa,
        )
    return WeatherDayStats(**fields)
