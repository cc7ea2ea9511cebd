"""Route geometry and elevation profile records used by the numeric engines."""

from dataclasses import dataclass


@dataclass(frozen=True)
class GeoPoint:
    lat: float
    lon: float
    elevation: float | None  # meters; None when the track point has no usable <ele>


@dataclass(frozen=True)
class RouteTrack:
    """A parsed GPX track with its cumulative distance table."""
    points: tuple[GeoPoint, ...]
    cumulative_distance_km: tuple[float, ...]  # same length as points, starts at 0
    total_distance_km: float
    total_ascent_m: float  # naive sum of positive raw deltas, no smoothing
    name: str | None = None


@dataclass(frozen=True)
class ElevationProfilePoint:
    """One modeled point along a route."""
    dist_km: float
    elevation: float  # smoothed, meters
    raw_elevation: float | None
    gradient: float  # percent
    speed_kmh: float
    time_h: float  # cumulative
    climb_m: float  # cumulative, from smoothed elevation
    raw_climb_m: float  # cumulative, from raw elevation
    lat: float
    lon: float
