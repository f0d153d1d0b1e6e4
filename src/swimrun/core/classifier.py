"""Land/water segment classification."""
from __future__ import annotations

from typing import Optional

from swimrun.core.models import Coordinate, SegmentType
from swimrun.geo.polygons import ContainmentTest, PolygonSet


class SpatialClassifier:
    """
    Tags a segment ``run`` when both endpoints are on land, ``swim`` when both
    are on water and ``unknown`` otherwise.

    Land is tested first, so a point covered by both datasets resolves to run.
    """

    def __init__(self, land: Optional[ContainmentTest] = None, water: Optional[ContainmentTest] = None):
        self.land = land if land is not None else PolygonSet(name="land")
        self.water = water if water is not None else PolygonSet(name="water")

    def is_in_land(self, c: Coordinate) -> bool:
        return self.land.contains(c)

    def is_in_water(self, c: Coordinate) -> bool:
        return self.water.contains(c)

    def classify_segment(self, a: Coordinate, b: Coordinate) -> SegmentType:
        if self.is_in_land(a) and self.is_in_land(b):
            return SegmentType.RUN
        if self.is_in_water(a) and self.is_in_water(b):
            return SegmentType.SWIM
        return SegmentType.UNKNOWN


def build_classifier(cfg=None) -> SpatialClassifier:
    """Build a classifier from settings: explicit files win over Natural Earth."""
    from swimrun.config import settings
    from swimrun.geo.datasets import NaturalEarthData
    from swimrun.geo.polygons import UnionSet

    cfg = cfg or settings
    land: Optional[ContainmentTest] = None
    water: Optional[ContainmentTest] = None

    if cfg.use_natural_earth:
        ne = NaturalEarthData(cfg.data_dir)
        land, water = ne.land, ne.water

    if cfg.land_path:
        land = PolygonSet.from_path(cfg.land_path)
    if cfg.water_paths:
        water = UnionSet(PolygonSet.from_path(p) for p in cfg.water_paths)

    return SpatialClassifier(land=land, water=water)
