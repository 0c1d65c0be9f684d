"""Great-circle distance helpers.

All ordering decisions use the haversine great-circle distance on a
sphere of radius 6371 km, computed through geopy.
"""

from __future__ import annotations

from typing import Sequence

from geopy.distance import great_circle

from ..domain.models import GeoPoint

EARTH_RADIUS_KM = 6371.0


def distance_m(a: GeoPoint, b: GeoPoint) -> float:
    """Great-circle distance between two points in meters."""
    return great_circle((a.lat, a.lng), (b.lat, b.lng), radius=EARTH_RADIUS_KM).meters


def path_length_m(path: Sequence[GeoPoint]) -> float:
    """Total length of an open path visiting ``path`` in order."""
    return sum(distance_m(path[i], path[i + 1]) for i in range(len(path) - 1))
