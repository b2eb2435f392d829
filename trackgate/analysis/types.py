# trackgate/analysis/types.py

from __future__ import annotations

from dataclasses import dataclass, asdict
from enum import Enum
from typing import Any, Optional


class Reason(str, Enum):
    """
    Outcome tag attached to every ingest decision.
    """
    ACCEPTED = "accepted"
    FIRST_POINT = "first_point"
    WEAK_SIGNAL_ACCURACY = "weak_signal_accuracy"
    DELTA_TOO_SMALL = "delta_too_small"
    INVALID_DISTANCE = "invalid_distance"
    ANTI_JUMP = "anti_jump"
    STATIONARY_NO_MOTION = "stationary_no_motion"


class MovementState(str, Enum):
    MOVING = "moving"
    STATIONARY = "stationary"
    SIGNAL_WEAK = "signal_weak"


@dataclass(frozen=True)
class LocationSample:
    """
    One fix from a device location provider.

    Parameters
    ----------
    lat : float
        Latitude in decimal degrees (WGS84, not bounds-checked).
    lng : float
        Longitude in decimal degrees (WGS84, not bounds-checked).
    accuracy : float
        Horizontal accuracy radius in metres.
    timestamp_ms : int
        Milliseconds since epoch. Must be non-decreasing per tracker.
    speed_mps : float, optional
        Provider-reported speed in m/s; None when the platform gives none.
    """
    lat: float
    lng: float
    accuracy: float
    timestamp_ms: int
    speed_mps: Optional[float] = None

    @property
    def latlng(self) -> tuple[float, float]:
        return (self.lat, self.lng)


@dataclass(frozen=True)
class IngestDecision:
    """
    Result of feeding one sample to a Tracker.

    Parameters
    ----------
    accepted : bool
        True only when the sample is trusted as real movement.
    reason : Reason
        Which pipeline stage decided.
    signal_weak : bool
        The sample's accuracy exceeded the profile ceiling.
    delta_time_seconds : float
        Seconds since the previously seen sample (0 for bootstrap decisions).
    delta_dist_meters : float
        Distance from the anchor to the smoothed point (0 when not computed).
    implied_speed_mps : float, optional
        delta_dist / delta_time, None when not computed or non-finite.
    reported_speed_mps : float, optional
        The raw sample's provider speed, None when absent or non-finite.
    point : LocationSample
        Smoothed point used in the computation, or the raw sample when the
        pipeline stopped before smoothing.
    is_stationary : bool
        No reliable motion is implied by this decision.
    """
    accepted: bool
    reason: Reason
    signal_weak: bool
    delta_time_seconds: float
    delta_dist_meters: float
    implied_speed_mps: Optional[float]
    reported_speed_mps: Optional[float]
    point: LocationSample
    is_stationary: bool

    def to_dict(self) -> dict[str, Any]:
        out = asdict(self)
        out["reason"] = self.reason.value
        return out
