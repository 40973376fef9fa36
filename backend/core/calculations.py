"""
Shared calculations module.

This module contains the distance and time calculations used by trip
segmentation and response shaping. It provides a single source of truth
for the geodesic math.
"""

import math
import logging
from datetime import datetime, timezone
from typing import Any, Iterable, Tuple

from geopy.distance import geodesic

from core.constants import (
    EARTH_RADIUS_KM, METERS_PER_KILOMETER, SECONDS_PER_MINUTE, MINUTES_PER_HOUR,
    DISTANCE_METHOD_HAVERSINE, DISTANCE_METHOD_GEODESIC, DISTANCE_METHODS
)
from core.validation import InvalidInputError, validate_coordinates

logger = logging.getLogger(__name__)


# =============================================================================
# BASIC GEOMETRIC CALCULATIONS
# =============================================================================

def haversine_distance_km(lat1: float, lon1: float, lat2: float, lon2: float,
                          radius_km: float = EARTH_RADIUS_KM) -> float:
    """Great-circle distance between two points in kilometers (spherical Earth)."""
    d_lat = math.radians(lat2 - lat1)
    d_lon = math.radians(lon2 - lon1)

    a = (math.sin(d_lat / 2) ** 2 +
         math.cos(math.radians(lat1)) * math.cos(math.radians(lat2)) *
         math.sin(d_lon / 2) ** 2)
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))

    return radius_km * c


def calculate_distance(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Calculate distance between two points in meters (WGS-84 ellipsoid)."""
    return geodesic((lat1, lon1), (lat2, lon2)).meters


def _coordinates_of(point: Any) -> Tuple[float, float]:
    """Extract (lat, lon) from a Waypoint, RawPosition, mapping or pair."""
    if isinstance(point, dict):
        return point.get('lat'), point.get('lon')
    if hasattr(point, 'lat') and hasattr(point, 'lon'):
        return point.lat, point.lon
    if isinstance(point, (tuple, list)) and len(point) >= 2:
        return point[0], point[1]
    raise InvalidInputError(f"Cannot read coordinates from {point!r}")


def estimate_distance_km(waypoints: Iterable[Any],
                         radius_km: float = EARTH_RADIUS_KM,
                         method: str = DISTANCE_METHOD_HAVERSINE) -> float:
    """
    Estimate the path length along an ordered sequence of waypoints.

    The distance is the sum of the great-circle distances between consecutive
    waypoints, not the straight distance from first to last. Sparse sampling
    along curved roads therefore undercounts the true path length.

    Args:
        waypoints: Ordered waypoints; Waypoint/RawPosition objects, dicts with
            'lat'/'lon' keys, or (lat, lon) pairs
        radius_km: Sphere radius for the Haversine method
        method: 'haversine' (spherical) or 'geodesic' (WGS-84 via geopy)

    Returns:
        Total distance in kilometers; 0.0 for fewer than two waypoints

    Raises:
        InvalidInputError: If a coordinate is missing or out of range, or the
            method is unknown

    Unlike segment_trips, bad input is raised rather than reported on a
    result object, since the return value is a bare float.
    """
    if method not in DISTANCE_METHODS:
        raise InvalidInputError(f"Unknown distance method {method!r}, expected one of {DISTANCE_METHODS}")

    points = [_coordinates_of(p) for p in waypoints]
    for i, (lat, lon) in enumerate(points):
        validate_coordinates(lat, lon, f"Waypoint {i}")

    total = 0.0
    for (lat1, lon1), (lat2, lon2) in zip(points, points[1:]):
        if method == DISTANCE_METHOD_GEODESIC:
            total += meters_to_kilometers(calculate_distance(lat1, lon1, lat2, lon2))
        else:
            total += haversine_distance_km(lat1, lon1, lat2, lon2, radius_km)

    logger.debug(f"Estimated {total:.3f} km over {len(points)} waypoints ({method})")
    return total


# =============================================================================
# UNIT CONVERSIONS
# =============================================================================

def meters_to_kilometers(distance_m: float) -> float:
    """Convert meters to kilometers."""
    return distance_m / METERS_PER_KILOMETER


def kilometers_to_meters(distance_km: float) -> float:
    """Convert kilometers to meters."""
    return distance_km * METERS_PER_KILOMETER


# =============================================================================
# TIME
# =============================================================================

def minutes_between(start: datetime, end: datetime) -> float:
    """Elapsed minutes from start to end (negative if end is earlier)."""
    return (end - start).total_seconds() / SECONDS_PER_MINUTE


def ensure_utc(timestamp: datetime) -> datetime:
    """Return an aware UTC datetime; naive values are taken to be UTC already."""
    if timestamp.tzinfo is None:
        return timestamp.replace(tzinfo=timezone.utc)
    return timestamp.astimezone(timezone.utc)


def format_duration(duration_minutes: float) -> str:
    """
    Format a duration as hours and minutes, e.g. 65 -> ``"1h 5m"``.

    Partial minutes are truncated.
    """
    total_minutes = max(0, int(duration_minutes))
    hours, minutes = divmod(total_minutes, MINUTES_PER_HOUR)
    return f"{hours}h {minutes}m"
