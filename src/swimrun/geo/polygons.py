"""Polygon collections answering "is this coordinate inside?"."""
from __future__ import annotations

import json
import logging
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Iterable, List, Sequence, Tuple

import shapefile  # pyshp
from shapely import prepare
from shapely.geometry import Point, Polygon, shape
from shapely.geometry.base import BaseGeometry

from swimrun.core.models import Coordinate
from swimrun.errors import DatasetError

log = logging.getLogger(__name__)


class ContainmentTest(ABC):
    """Anything that can tell whether a coordinate lies inside it."""

    @abstractmethod
    def contains(self, coord: Coordinate) -> bool:
        raise NotImplementedError


def _explode(geom: BaseGeometry) -> List[Polygon]:
    if geom.is_empty:
        return []
    if geom.geom_type == "Polygon":
        return [geom]
    if geom.geom_type in ("MultiPolygon", "GeometryCollection"):
        out: List[Polygon] = []
        for g in geom.geoms:
            out.extend(_explode(g))
        return out
    # Lines and points carry no area
    return []


class PolygonSet(ContainmentTest):
    """
    Read-only set of polygons backed by shapely prepared geometries.

    A coordinate is contained if ANY polygon covers it (boundary included).
    Polygons are tested in order with a bounding-box pre-check and the first
    hit wins.
    """

    def __init__(self, polygons: Iterable[Polygon] = (), name: str = "polygons"):
        self.name = name
        self._polygons: List[Polygon] = []
        self._bounds: List[Tuple[float, float, float, float]] = []
        for poly in polygons:
            for part in _explode(poly):
                prepare(part)
                self._polygons.append(part)
                self._bounds.append(part.bounds)

    def __len__(self) -> int:
        return len(self._polygons)

    def contains(self, coord: Coordinate) -> bool:
        x, y = coord.as_lonlat()
        pt = None
        for poly, (min_x, min_y, max_x, max_y) in zip(self._polygons, self._bounds):
            if x < min_x or x > max_x or y < min_y or y > max_y:
                continue
            if pt is None:
                pt = Point(x, y)
            if poly.covers(pt):
                return True
        return False

    # ------------------------------------------------------------------
    # Constructors
    # ------------------------------------------------------------------

    @classmethod
    def from_rings(cls, rings: Iterable[Sequence[Tuple[float, float]]], name: str = "polygons") -> PolygonSet:
        """Build from closed rings given as ``(lat, lon)`` pairs."""
        polys = []
        for ring in rings:
            pts = [(lon, lat) for lat, lon in ring]
            if len(pts) < 3:
                raise DatasetError(f"{name}: ring needs at least 3 points, got {len(pts)}")
            polys.append(Polygon(pts))
        return cls(polys, name=name)

    @classmethod
    def from_geojson(cls, path: Path) -> PolygonSet:
        try:
            data = json.loads(Path(path).read_text(encoding="utf-8"))
        except (OSError, ValueError) as exc:
            raise DatasetError(f"cannot read GeoJSON {path}: {exc}") from exc

        if data.get("type") == "FeatureCollection":
            geoms = [f.get("geometry") for f in data.get("features", [])]
        elif data.get("type") == "Feature":
            geoms = [data.get("geometry")]
        else:
            geoms = [data]

        polys: List[Polygon] = []
        for g in geoms:
            if not g:
                continue
            polys.extend(_explode(shape(g)))
        return cls._checked(polys, path)

    @classmethod
    def from_shapefile(cls, path: Path) -> PolygonSet:
        try:
            reader = shapefile.Reader(str(path))
        except (OSError, shapefile.ShapefileException) as exc:
            raise DatasetError(f"cannot read shapefile {path}: {exc}") from exc

        polys: List[Polygon] = []
        with reader:
            for sr in reader.iterShapeRecords():
                polys.extend(_explode(shape(sr.shape.__geo_interface__)))
        return cls._checked(polys, path)

    @classmethod
    def from_path(cls, path: Path) -> PolygonSet:
        """Dispatch on the file suffix (``.shp`` vs GeoJSON)."""
        path = Path(path)
        if path.suffix.lower() == ".shp":
            return cls.from_shapefile(path)
        return cls.from_geojson(path)

    @classmethod
    def _checked(cls, polys: List[Polygon], path: Path) -> PolygonSet:
        if not polys:
            raise DatasetError(f"{path} contains no polygons")
        log.info("Loaded %d polygons from %s", len(polys), path)
        return cls(polys, name=Path(path).stem)


class UnionSet(ContainmentTest):
    """Several containment tests treated as one (e.g. ocean + lakes)."""

    def __init__(self, members: Iterable[ContainmentTest]):
        self.members = list(members)

    def contains(self, coord: Coordinate) -> bool:
        return any(m.contains(coord) for m in self.members)
