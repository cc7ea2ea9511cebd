"""Parse GPX track text into a RouteTrack.

Both GPX vocabularies are accepted: track points (`trkpt`) and, when a file
has none, route points (`rtept`). Namespaces are ignored so GPX 1.0, 1.1 and
namespace-less exports all parse the same way.
"""

from __future__ import annotations

import math
import xml.etree.ElementTree as ET
from pathlib import Path

from app.geo import haversine_km
from app.models import GeoPoint, RouteTrack
from utils.logging_utils import get_tagged_logger

logger = get_tagged_logger(__name__, tag="gpx_parser")


def _parse_float(value: str | None) -> float | None:
    """Parse a finite float or return None."""
    if value is None:
        return None
    try:
        parsed = float(value.strip())
    except ValueError:
        return None
    return parsed if math.isfinite(parsed) else None


def _point_elements(root: ET.Element) -> list[ET.Element]:
    points = root.findall(".//{*}trkpt")
    if not points:
        points = root.findall(".//{*}rtept")
    return points


def parse_gpx(text: str) -> RouteTrack | None:
    """Parse GPX text; return None when the document holds no usable route."""
    try:
        root = ET.fromstring(text.lstrip("\ufeff").strip())
    except ET.ParseError as exc:
        logger.debug("Malformed GPX document", extra={"error": str(exc)})
        return None

    elements = _point_elements(root)
    if not elements:
        logger.debug("GPX document has no trkpt or rtept elements")
        return None

    points: list[GeoPoint] = []
    cumulative: list[float] = []
    total_dist = 0.0
    total_ascent = 0.0
    prev_ele: float | None = None  # unknown until a point with elevation is seen

    for el in elements:
        lat = _parse_float(el.get("lat"))
        lon = _parse_float(el.get("lon"))
        if lat is None or lon is None:
            continue

        ele_node = el.find("{*}ele")
        ele = _parse_float(ele_node.text) if ele_node is not None and ele_node.text else None

        if points:
            prev = points[-1]
            total_dist += haversine_km(prev.lat, prev.lon, lat, lon)
            if ele is not None and prev_ele is not None and ele > prev_ele:
                total_ascent += ele - prev_ele

        points.append(GeoPoint(lat=lat, lon=lon, elevation=ele))
        cumulative.append(total_dist)
        # a point without elevation breaks the chain: the next leg has no known start height
        prev_ele = ele

    if not points:
        logger.debug("GPX document has no points with valid coordinates")
        return None

    name_node = root.find(".//{*}trk/{*}name")
    if name_node is None:
        name_node = root.find(".//{*}rte/{*}name")
    name = name_node.text.strip() if name_node is not None and name_node.text else None

    return RouteTrack(
        points=tuple(points),
        cumulative_distance_km=tuple(cumulative),
        total_distance_km=total_dist,
        total_ascent_m=total_ascent,
        name=name,
    )


def parse_gpx_file(path: str | Path) -> RouteTrack | None:
    """Read and parse a GPX file from disk."""
    return parse_gpx(Path(path).read_text(encoding="utf-8"))
