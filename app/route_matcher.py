"""Pick pre-built GPX routes that suit the day's wind direction.

Routes are authored per city and per compass point of the dominant wind and
stored as `<token>_<dir>.gpx` plus up to three numbered variants
(`<token>_<dir>_1.gpx` ... `_3.gpx`). All four candidates are requested
concurrently; a candidate exists only if it was fetched and parsed.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import Optional

from app.data_sources.base import RouteSource
from app.geo import compass8, compass_label
from app.gpx_parser import parse_gpx
from app.models import RouteTrack
from app.registry import CityRegistry
from utils.logging_utils import get_tagged_logger

logger = get_tagged_logger(__name__, tag="route_matcher")

VARIANT_SUFFIXES = (0, 1, 2, 3)
NOT_BUILT_STATUS = "route for this wind direction not built"


def candidate_filenames(token: str, direction: str) -> list[str]:
    """Candidate GPX filenames for a city token and compass code, in priority order."""
    base = f"{token}_{direction}"
    return [f"{base}.gpx" if suffix == 0 else f"{base}_{suffix}.gpx" for suffix in VARIANT_SUFFIXES]


@dataclass(frozen=True)
class RouteCandidate:
    filename: str
    suffix: int  # 0 for the base file, otherwise the numbered variant
    track: RouteTrack


@dataclass(frozen=True)
class RouteMatch:
    """Routes found for a city and wind bearing; candidates[0] is the default."""
    city: str
    bearing: float
    direction: str
    candidates: tuple[RouteCandidate, ...] = ()

    @property
    def found(self) -> bool:
        return bool(self.candidates)

    @property
    def default(self) -> Optional[RouteCandidate]:
        return self.candidates[0] if self.candidates else None

    @property
    def direction_full(self) -> str:
        return compass_label(self.bearing)

    @property
    def status_text(self) -> str:
        if not self.candidates:
            return NOT_BUILT_STATUS
        return f"{len(self.candidates)} route(s) for {self.direction} wind"


class RouteMatcher:
    """Resolve (city, wind bearing) to the available GPX routes."""

    def __init__(self, route_source: RouteSource, registry: CityRegistry):
        self.route_source = route_source
        self.registry = registry

    def _load(self, filename: str) -> Optional[RouteTrack]:
        """Fetch and parse one candidate; any failure means the candidate does not exist."""
        try:
            text = self.route_source.fetch_text(filename)
        except Exception as exc:
            logger.warning("Route source failed", extra={"route_file": filename, "error": str(exc)})
            return None
        if not text:
            return None
        track = parse_gpx(text)
        if track is None:
            logger.warning("Route file could not be parsed", extra={"route_file": filename})
        return track

    async def match(self, city: str, bearing: float) -> RouteMatch:
        direction = compass8(bearing)
        filenames = candidate_filenames(self.registry.filename_token(city), direction)
        tracks = await asyncio.gather(*(asyncio.to_thread(self._load, name) for name in filenames))

        candidates = tuple(
            RouteCandidate(filename=name, suffix=suffix, track=track)
            for name, suffix, track in zip(filenames, VARIANT_SUFFIXES, tracks)
            if track is not None
        )
        logger.debug(
            "Matched routes",
            extra={"city": city, "direction": direction, "found": [c.filename for c in candidates]},
        )
        return RouteMatch(city=city, bearing=bearing, direction=direction, candidates=candidates)
