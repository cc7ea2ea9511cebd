"""HTTP API for the weekend ride planner."""

import datetime as dt
from typing import Optional

from fastapi import APIRouter, HTTPException, Query
from pydantic import BaseModel

from .config import settings
from .domain import CityAnalysisResult, WeatherDayStats
from .elevation_profile import calculate_elevation_profile, calculate_profile_score, distance_label, gradient_band
from .geo import compass_label, route_endpoints
from .ranking import rank_cities, sunny_cities
from .registry import DEFAULT_REGISTRY
from .ride_planner import RidePlanner, target_dates
from .route_matcher import RouteCandidate, RouteMatch
from .transport import travel_links
from utils.logging_utils import get_tagged_logger

logger = get_tagged_logger(__name__, tag="app/api")

router = APIRouter()
REGISTRY = DEFAULT_REGISTRY
PLANNER = RidePlanner.from_settings(settings, REGISTRY)


class CityInfo(BaseModel):
    """Registry entry as exposed to clients."""
    name: str
    lat: float
    lon: float
    filename_token: str
    is_flight_city: bool
    is_mountain_city: bool


class AnalysisResponse(BaseModel):
    """Full dataset for the current target dates, cities in alphabetical order."""
    dates: list[dt.date]
    cities: list[CityAnalysisResult]


class SunnyCity(BaseModel):
    city_name: str
    stats: WeatherDayStats


class RankedCity(BaseModel):
    city_name: str
    value: float


class SummaryResponse(BaseModel):
    """Sunniest rideable cities per day of one weekend plus the global rankings."""
    weekend: int
    saturday: list[SunnyCity]
    sunday: list[SunnyCity]
    by_sun: list[RankedCity]
    by_score: list[RankedCity]


class RouteCandidateInfo(BaseModel):
    variant: int
    filename: str
    name: Optional[str] = None
    distance_km: float
    distance_label: str
    ascent_m: float
    profile_score: int
    start_city: Optional[str] = None
    end_city: Optional[str] = None
    start_link: Optional[str] = None  # hub -> start city ticket search
    end_link: Optional[str] = None  # end city -> hub ticket search


class RouteMatchResponse(BaseModel):
    city_name: str
    bearing: float
    direction: str
    direction_full: str
    status_text: str
    candidates: list[RouteCandidateInfo]


class ProfilePoint(BaseModel):
    dist_km: float
    elevation: float
    raw_elevation: Optional[float] = None
    gradient: float
    gradient_band: str
    speed_kmh: float
    time_h: float
    climb_m: float
    raw_climb_m: float
    lat: float
    lon: float


class ProfileResponse(BaseModel):
    """Modeled profile of one route variant at the requested pace."""
    city_name: str
    filename: str
    variant: int
    target_speed_kmh: float
    mountain: bool
    distance_km: float
    moving_time_h: float
    climb_m: float
    raw_climb_m: float
    profile_score: int
    points: list[ProfilePoint]


def _today() -> dt.date:
    return dt.date.today()


def _current_dates() -> list[dt.date]:
    return target_dates(_today(), settings.extra_dates)


def _ensure_city(city: str) -> None:
    """Raise a 404 for cities outside the registry."""
    if city not in REGISTRY:
        raise HTTPException(status_code=404, detail=f"Unknown city: {city}")


async def _match_or_404(city: str, bearing: float) -> RouteMatch:
    _ensure_city(city)
    match = await PLANNER.route_matcher.match(city, bearing)
    if not match.found:
        raise HTTPException(status_code=404, detail=match.status_text)
    return match


def _candidate_info(index: int, candidate: RouteCandidate, date: dt.date) -> RouteCandidateInfo:
    track = candidate.track
    start_city, end_city = route_endpoints(track, REGISTRY)
    start_link, end_link = travel_links(REGISTRY, start_city, end_city, date)
    return RouteCandidateInfo(
        variant=index,
        filename=candidate.filename,
        name=track.name,
        distance_km=track.total_distance_km,
        distance_label=distance_label(track.total_distance_km),
        ascent_m=track.total_ascent_m,
        profile_score=calculate_profile_score(track),
        start_city=start_city,
        end_city=end_city,
        start_link=start_link,
        end_link=end_link,
    )


@router.get("/cities", response_model=list[CityInfo])
def list_cities():
    """List the registry roster in alphabetical order."""
    out = []
    for name in REGISTRY.city_names():
        coords = REGISTRY.coordinates[name]
        out.append(
            CityInfo(
                name=name,
                lat=coords.lat,
                lon=coords.lon,
                filename_token=REGISTRY.filename_token(name),
                is_flight_city=REGISTRY.is_flight_city(name),
                is_mountain_city=REGISTRY.is_mountain_city(name),
            )
        )
    return out


@router.get("/analysis", response_model=AnalysisResponse)
async def get_analysis():
    """Analyze every city for the upcoming two weekends and configured holidays."""
    dates = _current_dates()
    logger.info("Running analysis", extra={"dates": [d.isoformat() for d in dates]})
    results = await PLANNER.analyze_all(dates)
    return AnalysisResponse(dates=dates, cities=sorted(results, key=lambda r: r.city_name))


@router.get("/summary", response_model=SummaryResponse)
async def get_summary(weekend: int = Query(default=1, ge=1, le=2)):
    """Sunniest rideable cities for each day of a weekend, with the global rankings."""
    results = await PLANNER.analyze_all(_current_dates())
    min_sun = settings.min_sun_hours

    def sunny(day: str) -> list[SunnyCity]:
        return [SunnyCity(city_name=name, stats=stats)
                for name, stats in sunny_cities(results, weekend, day, min_sun_hours=min_sun)]

    def ranked(by: str) -> list[RankedCity]:
        return [RankedCity(city_name=name, value=value) for name, value in rank_cities(results, by=by)]

    return SummaryResponse(
        weekend=weekend,
        saturday=sunny("saturday"),
        sunday=sunny("sunday"),
        by_sun=ranked("sun"),
        by_score=ranked("score"),
    )


@router.get("/routes/{city}", response_model=RouteMatchResponse)
async def get_routes(
    city: str,
    bearing: float = Query(..., description="Wind bearing in degrees"),
    date: Optional[dt.date] = Query(default=None, description="Travel date for ticket links"),
):
    """Routes built for the city and wind direction, default variant first.

    Ticket links default to the coming Saturday.
    """
    match = await _match_or_404(city, bearing)
    travel_date = date or _current_dates()[0]
    return RouteMatchResponse(
        city_name=city,
        bearing=bearing,
        direction=match.direction,
        direction_full=compass_label(bearing),
        status_text=match.status_text,
        candidates=[_candidate_info(i, c, travel_date) for i, c in enumerate(match.candidates)],
    )


@router.get("/routes/{city}/profile", response_model=ProfileResponse)
async def get_route_profile(
    city: str,
    bearing: float = Query(..., description="Wind bearing in degrees"),
    variant: int = Query(default=0, ge=0),
    speed: Optional[float] = Query(default=None, gt=0),
    mountain: Optional[bool] = None,
):
    """Elevation, speed and time profile of one route variant.

    The pace is clamped to the configured range; `mountain` defaults to the
    city's registry flag.
    """
    match = await _match_or_404(city, bearing)
    if variant >= len(match.candidates):
        raise HTTPException(status_code=404, detail=f"No route variant {variant} for {city}")

    candidate = match.candidates[variant]
    target = settings.clamp_target_speed(speed if speed is not None else settings.default_target_speed_kmh)
    is_mountain = REGISTRY.is_mountain_city(city) if mountain is None else mountain
    profile = calculate_elevation_profile(candidate.track, target_speed=target, mountain=is_mountain)
    last = profile[-1] if profile else None

    return ProfileResponse(
        city_name=city,
        filename=candidate.filename,
        variant=variant,
        target_speed_kmh=target,
        mountain=is_mountain,
        distance_km=candidate.track.total_distance_km,
        moving_time_h=last.time_h if last else 0.0,
        climb_m=last.climb_m if last else 0.0,
        raw_climb_m=last.raw_climb_m if last else 0.0,
        profile_score=calculate_profile_score(candidate.track),
        points=[
            ProfilePoint(
                dist_km=p.dist_km,
                elevation=p.elevation,
                raw_elevation=p.raw_elevation,
                gradient=p.gradient,
                gradient_band=gradient_band(p.gradient),
                speed_kmh=p.speed_kmh,
                time_h=p.time_h,
                climb_m=p.climb_m,
                raw_climb_m=p.raw_climb_m,
                lat=p.lat,
                lon=p.lon,
            )
            for p in profile
        ],
    )
