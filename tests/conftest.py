"""
Shared fixtures for segmentation tests.

Tracks are built by walking a geodesic from a fixed origin, so distances
between consecutive fixes are exact to well below a millimetre.
"""

import pytest
from geopy.distance import geodesic

from core.models.fix import Fix
from core.segments import SegmentationParams

ORIGIN = (52.5200, 13.4050)
START_MS = 1_700_000_000_000


def build_track(steps, origin=ORIGIN, start_ms=START_MS, bearing=90.0):
    """
    Build a fix tuple from (meters, seconds[, bearing]) steps.

    The first fix sits at the origin; every step moves the given distance
    along the bearing and advances the clock by the given seconds.
    """
    lat, lon = origin
    timestamp = start_ms
    fixes = [Fix(latitude=lat, longitude=lon, timestamp=timestamp)]

    for step in steps:
        meters, seconds = step[0], step[1]
        step_bearing = step[2] if len(step) > 2 else bearing
        if meters > 0:
            point = geodesic(meters=meters).destination((lat, lon), step_bearing)
            lat, lon = point.latitude, point.longitude
        timestamp += int(round(seconds * 1000))
        fixes.append(Fix(latitude=lat, longitude=lon, timestamp=timestamp))

    return tuple(fixes)


@pytest.fixture
def params():
    return SegmentationParams()


@pytest.fixture
def dwell_track():
    """Ten fixes jittering within 2m, 25s apart."""
    steps = []
    for k in range(9):
        steps.append((2.0, 25, 90.0 if k % 2 == 0 else 270.0))
    return build_track(steps)


@pytest.fixture
def walking_track():
    """Twenty fixes 30m apart every 20s (1.5 m/s)."""
    return build_track([(30.0, 20)] * 19)


@pytest.fixture
def drive_with_walk_legs():
    """Walk 30m, drive 540m at 10 m/s, walk 30m."""
    steps = [(15.0, 15)] * 2 + [(36.0, 3.6)] * 15 + [(15.0, 15)] * 2
    return build_track(steps)


@pytest.fixture
def mixed_day():
    """
    Walk to a place, stay there, then drive away.

    Fixes 0-25 walk at 1.5 m/s, fixes 26-36 sit on fix 25 every 30s and
    fixes 37-56 drive at 10 m/s.
    """
    steps = [(15.0, 10)] * 25 + [(0.0, 30)] * 11 + [(100.0, 10)] * 20
    return build_track(steps)
