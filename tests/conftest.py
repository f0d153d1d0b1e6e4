# tests/conftest.py
import os
import sys

import pytest

# Add src/ to sys.path so that "import swimrun" works without installing
PROJECT_ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
SRC_DIR = os.path.join(PROJECT_ROOT, "src")
if SRC_DIR not in sys.path:
    sys.path.insert(0, SRC_DIR)

from swimrun.core.classifier import SpatialClassifier  # noqa: E402
from swimrun.geo.polygons import PolygonSet  # noqa: E402


# Synthetic coast along the equator: land west of lon 0, water east of it.
LAND_RING = [(-0.05, -0.1), (0.05, -0.1), (0.05, 0.0), (-0.05, 0.0)]
WATER_RING = [(-0.05, 0.0), (0.05, 0.0), (0.05, 0.1), (-0.05, 0.1)]


@pytest.fixture
def land():
    return PolygonSet.from_rings([LAND_RING], name="land")


@pytest.fixture
def water():
    return PolygonSet.from_rings([WATER_RING], name="water")


@pytest.fixture
def classifier(land, water):
    return SpatialClassifier(land=land, water=water)
