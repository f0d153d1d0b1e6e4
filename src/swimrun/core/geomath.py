"""Great-circle distance helpers."""
from __future__ import annotations

from math import atan2, cos, radians, sin, sqrt
from typing import Iterable

from swimrun.core.models import Coordinate

EARTH_RADIUS_KM = 6371.0


def haversine_km(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Great-circle distance in kilometres between two WGS-84 points."""
    lat1r, lon1r, lat2r, lon2r = map(radians, [lat1, lon1, lat2, lon2])
    dlat = lat2r - lat1r
    dlon = lon2r - lon1r
    h = sin(dlat / 2) ** 2 + cos(lat1r) * cos(lat2r) * sin(dlon / 2) ** 2
    # Rounding can push h a hair outside [0, 1] for antipodal points
    h = min(1.0, max(0.0, h))
    return 2 * EARTH_RADIUS_KM * atan2(sqrt(h), sqrt(1 - h))


def distance_km(a: Coordinate, b: Coordinate) -> float:
    return haversine_km(a.lat, a.lon, b.lat, b.lon)


def polyline_length_km(coords: Iterable[Coordinate]) -> float:
    total = 0.0
    prev = None
    for c in coords:
        if prev is not None:
            total += distance_km(prev, c)
        prev = c
    return total
