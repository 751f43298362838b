"""
Shared fixtures for the analysis tests.
"""

import math
from datetime import datetime, timedelta, timezone

import pytest

from runrun_worker.analysis.route_track import build_route_samples

# Meters per degree of latitude on the haversine sphere
METERS_PER_DEGREE = 6371000 * math.pi / 180

TRACK_START = datetime(2025, 3, 1, 7, 0, tzinfo=timezone.utc)


def meridian_track(total_m, sample_count, seconds_per_sample=15, start=TRACK_START):
    """Samples evenly spaced northwards along longitude 0"""
    step_m = total_m / (sample_count - 1)
    return build_route_samples(
        (
            start + timedelta(seconds=i * seconds_per_sample),
            i * step_m / METERS_PER_DEGREE,
            0.0,
        )
        for i in range(sample_count)
    )


@pytest.fixture
def scenario_c_track():
    """25 samples spanning 1050 m"""
    return meridian_track(1050, 25)


@pytest.fixture
def make_track():
    return meridian_track
