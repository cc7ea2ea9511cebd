"""Great-circle distance, bearings and compass helpers.

Haversine on a spherical Earth is accurate to well under 1% at cycling
distances, which is all the route and city lookups need.
"""

from __future__ import annotations

import math
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from app.models import RouteTrack
    from app.registry import CityRegistry

# Earth's mean radius in kilometers
EARTH_RADIUS_KM = 6371.0

COMPASS_POINTS = ("N", "NE", "E", "SE", "S", "SW", "W", "NW")
COMPASS_LABELS = {
    "N": "North",
    "NE": "North-East",
    "E": "East",
    "SE": "South-East",
    "S": "South",
    "SW": "South-West",
    "W": "West",
    "NW": "North-West",
}


def haversine_km(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Calculate the great-circle distance between two points.

    Args:
        lat1, lon1: First point coordinates in degrees
        lat2, lon2: Second point coordinates in degrees

    Returns:
        Distance in kilometers
    """
    lat1_rad = math.radians(lat1)
    lat2_rad = math.radians(lat2)
    dlat = math.radians(lat2 - lat1)
    dlon = math.radians(lon2 - lon1)

    a = math.sin(dlat / 2) ** 2 + math.cos(lat1_rad) * math.cos(lat2_rad) * math.sin(dlon / 2) ** 2
    # clamp guards against a > 1 from rounding on near-antipodal pairs
    c = 2 * math.asin(math.sqrt(min(1.0, a)))

    return EARTH_RADIUS_KM * c


def bearing_degrees(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Initial compass bearing from point 1 to point 2.

    Returns:
        Bearing in degrees, 0 <= b < 360 (0 = North, 90 = East)
    """
    lat1_rad = math.radians(lat1)
    lat2_rad = math.radians(lat2)
    dlon = math.radians(lon2 - lon1)

    x = math.sin(dlon) * math.cos(lat2_rad)
    y = math.cos(lat1_rad) * math.sin(lat2_rad) - math.sin(lat1_rad) * math.cos(lat2_rad) * math.cos(dlon)

    bearing = math.degrees(math.atan2(x, y)) % 360.0
    return 0.0 if bearing >= 360.0 else bearing


def compass8(bearing: float) -> str:
    """Bucket a bearing into the nearest of the eight 45 degree compass points."""
    angle = bearing % 360.0
    return COMPASS_POINTS[int(math.floor(angle / 45.0 + 0.5)) % 8]


def compass_label(bearing: float) -> str:
    """Full English name of the compass point nearest to `bearing`."""
    return COMPASS_LABELS[compass8(bearing)]


def nearest_city(lat: float, lon: float, registry: CityRegistry) -> tuple[str, float] | None:
    """Return (city name, distance km) of the registry city closest to a point."""
    best: tuple[str, float] | None = None
    for name in registry.city_names():
        coords = registry.coordinates[name]
        d = haversine_km(lat, lon, coords.lat, coords.lon)
        if best is None or d < best[1]:
            best = (name, d)
    return best


def route_endpoints(track: RouteTrack, registry: CityRegistry) -> tuple[str | None, str | None]:
    """Identify the registry cities nearest to a route's start and finish."""
    if not track.points:
        return None, None
    first, last = track.points[0], track.points[-1]
    start = nearest_city(first.lat, first.lon, registry)
    end = nearest_city(last.lat, last.lon, registry)
    return (start[0] if start else None, end[0] if end else None)
