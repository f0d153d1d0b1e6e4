from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum
from typing import Tuple

from swimrun.errors import InvalidCoordinate


class SegmentType(str, Enum):
    START = "start"
    SWIM = "swim"
    RUN = "run"
    STOP = "stop"
    UNKNOWN = "unknown"


class RouteState(str, Enum):
    EMPTY = "empty"
    BUILDING = "building"
    STOPPED = "stopped"


# Modes a user can pick from the button panel
USER_MODES = (SegmentType.SWIM, SegmentType.RUN, SegmentType.STOP)


@dataclass(frozen=True)
class Coordinate:
    lat: float
    lon: float

    def __post_init__(self) -> None:
        lat, lon = self.lat, self.lon
        if not (isinstance(lat, (int, float)) and isinstance(lon, (int, float))):
            raise InvalidCoordinate(lat, lon)
        if not (math.isfinite(lat) and math.isfinite(lon)):
            raise InvalidCoordinate(lat, lon)
        if not (-90.0 <= lat <= 90.0) or not (-180.0 <= lon <= 180.0):
            raise InvalidCoordinate(lat, lon)

    def as_lonlat(self) -> Tuple[float, float]:
        """(x, y) ordering used by shapely / GeoJSON."""
        return self.lon, self.lat


@dataclass
class Waypoint:
    """A route vertex; ``type`` and ``segment_km`` describe the segment ending here."""
    coordinate: Coordinate
    type: SegmentType
    segment_km: float = 0.0
