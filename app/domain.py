"""Strict schemas for per-day ride suitability and per-city analysis results.

These are the payloads that leave the core: the orchestrator builds them, the
ranking helpers read them and the HTTP API serializes them. No interpretation
logic lives here.
"""

from __future__ import annotations

import datetime as dt
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class _StrictBaseModel(BaseModel):
    """Base model with strict extra handling."""

    model_config = ConfigDict(extra="forbid")


class DaySlot(str, Enum):
    """Day of a weekend slot."""
    SATURDAY = "saturday"
    SUNDAY = "sunday"


class RankBy(str, Enum):
    """Criterion for the global city ranking."""
    SUN = "sun"
    SCORE = "score"


class WeatherDayStats(_StrictBaseModel):
    """Weather aggregates, ride eligibility and ride plan for one city and day."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    date: dt.date
    day_name: str

    # rain window 04:00-24:00
    precip_sum: float
    precipitation_probability: Optional[float] = None
    rain_hours: Optional[str] = None

    # active window 09:00-18:00
    temperature_min: Optional[float] = None
    temperature_max: Optional[float] = None
    feels_like_min: Optional[float] = None
    feels_like_max: Optional[float] = None
    wind_min: Optional[float] = None
    wind_max: Optional[float] = None
    wind_gusts_max: Optional[float] = None
    wind_deg: float = 0.0
    wind_direction: str
    wind_direction_full: str
    sun_seconds: float
    sun_str: str

    is_dry: bool
    is_morning_ride_suitable: bool
    has_route: bool = False
    route_count: int = Field(default=0, ge=0)
    is_rideable: bool = False
    clothing_hints: List[str] = Field(default_factory=list)

    # ride plan, set only for dry days with a route or flight
    ride_duration: Optional[str] = None  # "HH:MM" at planning pace
    route_distance_km: Optional[float] = None
    profile_score: Optional[int] = None
    start_temperature: Optional[int] = None
    end_temperature: Optional[int] = None

    # free-air temperatures, mountain cities only
    temperature_900hpa: Optional[int] = None
    temperature_850hpa: Optional[int] = None
    start_temperature_900hpa: Optional[int] = None
    end_temperature_900hpa: Optional[int] = None
    start_temperature_850hpa: Optional[int] = None
    end_temperature_850hpa: Optional[int] = None


class WeekendStats(_StrictBaseModel):
    """Saturday and Sunday of one weekend; a slot is None when it could not be analyzed."""
    saturday: Optional[WeatherDayStats] = None
    sunday: Optional[WeatherDayStats] = None

    def get(self, day: DaySlot | str) -> Optional[WeatherDayStats]:
        return getattr(self, DaySlot(day).value)


class CityAnalysisResult(_StrictBaseModel):
    """Everything computed for one city over the target dates."""
    city_name: str
    weekend1: WeekendStats = Field(default_factory=WeekendStats)
    weekend2: WeekendStats = Field(default_factory=WeekendStats)
    extra_days: List[WeatherDayStats] = Field(default_factory=list)

    def weekend(self, number: int) -> WeekendStats:
        if number == 1:
            return self.weekend1
        if number == 2:
            return self.weekend2
        raise ValueError(f"weekend must be 1 or 2, got {number}")

    def weekend_slots(self) -> List[Optional[WeatherDayStats]]:
        """The four weekend slots in date order."""
        return [
            self.weekend1.saturday,
            self.weekend1.sunday,
            self.weekend2.saturday,
            self.weekend2.sunday,
        ]

    def all_days(self) -> List[WeatherDayStats]:
        """Every analyzed day, weekends first, then extra days."""
        return [d for d in self.weekend_slots() if d is not None] + list(self.extra_days)
