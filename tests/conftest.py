"""Shared fixtures: sample factories on a local north-east grid."""

import math

import pytest

from trackgate.analysis.types import IngestDecision, LocationSample, Reason
from trackgate.utils.geo import EARTH_RADIUS_M

BASE_LAT = -23.5505
BASE_LNG = -46.6333
BASE_TS = 1_700_000_000_000

# metres per degree of latitude on the haversine sphere
M_PER_DEG = EARTH_RADIUS_M * math.pi / 180


def make_sample(north_m=0.0, t_s=0.0, accuracy=5.0, speed=None, east_m=0.0):
    """Sample `north_m` metres north (and `east_m` east) of the base point, `t_s` seconds in."""
    lng_scale = M_PER_DEG * math.cos(math.radians(BASE_LAT))
    return LocationSample(
        lat=BASE_LAT + north_m / M_PER_DEG,
        lng=BASE_LNG + east_m / lng_scale,
        accuracy=accuracy,
        timestamp_ms=BASE_TS + int(round(t_s * 1000)),
        speed_mps=speed,
    )


def make_decision(reason, accepted=None, delta_d=0.0):
    accepted = (reason is Reason.ACCEPTED) if accepted is None else accepted
    return IngestDecision(
        accepted=accepted,
        reason=reason,
        signal_weak=reason is Reason.WEAK_SIGNAL_ACCURACY,
        delta_time_seconds=1.0,
        delta_dist_meters=delta_d,
        implied_speed_mps=None,
        reported_speed_mps=None,
        point=make_sample(),
        is_stationary=not accepted,
    )


@pytest.fixture
def sample():
    return make_sample


@pytest.fixture
def decision():
    return make_decision
