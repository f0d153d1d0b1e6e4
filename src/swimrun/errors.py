"""Exception types raised by the route engine."""
from __future__ import annotations


class SwimrunError(Exception):
    """Base class for every error raised by swimrun."""


class InvalidCoordinate(SwimrunError, ValueError):
    """Latitude/longitude outside the WGS-84 range (or not a finite number)."""

    def __init__(self, lat: float, lon: float):
        self.lat = lat
        self.lon = lon
        super().__init__(f"invalid coordinate lat={lat!r} lon={lon!r}")


class IndexOutOfRange(SwimrunError, IndexError):
    """An edit or drag referenced a waypoint that does not exist."""

    def __init__(self, index: int, length: int):
        self.index = index
        self.length = length
        super().__init__(f"waypoint index {index} out of range for route of length {length}")


class DatasetError(SwimrunError):
    """A land/water polygon file could not be read or holds no polygons."""
