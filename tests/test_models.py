# tests/test_models.py
import math

import pytest

from swimrun.core.models import Coordinate
from swimrun.errors import InvalidCoordinate


@pytest.mark.parametrize(
    "lat,lon",
    [(90.1, 0), (-90.1, 0), (0, 180.5), (0, -181), (math.nan, 0), (0, math.inf), ("1", 2)],
)
def test_invalid_coordinates_rejected(lat, lon):
    with pytest.raises(InvalidCoordinate):
        Coordinate(lat, lon)


def test_invalid_coordinate_is_value_error():
    with pytest.raises(ValueError):
        Coordinate(100, 0)


def test_coordinate_is_immutable_value():
    c = Coordinate(1.5, 2.5)
    assert c == Coordinate(1.5, 2.5)
    assert c.as_lonlat() == (2.5, 1.5)
    with pytest.raises(AttributeError):
        c.lat = 3.0
