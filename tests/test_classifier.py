# tests/test_classifier.py
from swimrun.core.classifier import SpatialClassifier, build_classifier
from swimrun.core.models import Coordinate, SegmentType
from swimrun.geo.polygons import PolygonSet

ON_LAND = Coordinate(0.0, -0.05)
ON_LAND_2 = Coordinate(0.01, -0.02)
ON_WATER = Coordinate(0.0, 0.05)
ON_WATER_2 = Coordinate(0.01, 0.02)
NOWHERE = Coordinate(1.0, 1.0)
NOWHERE_2 = Coordinate(-1.0, -1.0)


def test_containment(classifier):
    assert classifier.is_in_land(ON_LAND)
    assert not classifier.is_in_water(ON_LAND)
    assert classifier.is_in_water(ON_WATER)
    assert not classifier.is_in_land(ON_WATER)


def test_land_land_is_run(classifier):
    assert classifier.classify_segment(ON_LAND, ON_LAND_2) is SegmentType.RUN


def test_water_water_is_swim(classifier):
    assert classifier.classify_segment(ON_WATER, ON_WATER_2) is SegmentType.SWIM


def test_mixed_is_unknown(classifier):
    assert classifier.classify_segment(ON_LAND, ON_WATER) is SegmentType.UNKNOWN
    assert classifier.classify_segment(ON_WATER, ON_LAND) is SegmentType.UNKNOWN


def test_outside_all_data_is_unknown(classifier):
    assert classifier.classify_segment(NOWHERE, NOWHERE_2) is SegmentType.UNKNOWN
    assert classifier.classify_segment(NOWHERE, ON_WATER) is SegmentType.UNKNOWN


def test_overlap_resolves_to_run():
    ring = [(0, 0), (1, 0), (1, 1), (0, 1)]
    clf = SpatialClassifier(
        land=PolygonSet.from_rings([ring]),
        water=PolygonSet.from_rings([ring]),
    )
    a, b = Coordinate(0.2, 0.2), Coordinate(0.8, 0.8)
    for _ in range(3):
        assert clf.classify_segment(a, b) is SegmentType.RUN


def test_no_data_means_unknown():
    clf = SpatialClassifier()
    assert clf.classify_segment(ON_LAND, ON_LAND_2) is SegmentType.UNKNOWN


class _Cfg:
    use_natural_earth = False
    data_dir = None
    land_path = None
    water_paths = []


def test_build_classifier_without_data():
    clf = build_classifier(_Cfg())
    assert not clf.is_in_land(ON_LAND)
    assert not clf.is_in_water(ON_WATER)


def test_build_classifier_from_files(tmp_path):
    import json

    land_path = tmp_path / "land.geojson"
    land_path.write_text(json.dumps({
        "type": "Polygon",
        "coordinates": [[[-1, -1], [0, -1], [0, 1], [-1, 1], [-1, -1]]],
    }))
    water_path = tmp_path / "sea.geojson"
    water_path.write_text(json.dumps({
        "type": "Polygon",
        "coordinates": [[[0, -1], [1, -1], [1, 1], [0, 1], [0, -1]]],
    }))

    cfg = _Cfg()
    cfg.land_path = land_path
    cfg.water_paths = [water_path]
    clf = build_classifier(cfg)
    assert clf.classify_segment(Coordinate(0, -0.5), Coordinate(0.5, -0.5)) is SegmentType.RUN
    assert clf.classify_segment(Coordinate(0, 0.5), Coordinate(0.5, 0.5)) is SegmentType.SWIM
