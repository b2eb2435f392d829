# trackgate/analysis/config.py

from __future__ import annotations

import math
from dataclasses import dataclass, asdict, fields, replace
from enum import Enum
from typing import Optional

from trackgate.utils.log import get_logger

logger = get_logger(__name__)


class ActivityMode(str, Enum):
    """
    Activity the tracked session is recording.
    """
    WALKING = "walking"
    RUNNING = "running"
    CYCLING = "cycling"
    TRAIL = "trail"
    DEFAULT = "default"

    @classmethod
    def parse(cls, tag: "ActivityMode | str | None") -> "ActivityMode":
        """
        Resolve a mode tag; unknown tags fall back to DEFAULT.
        """
        if isinstance(tag, cls):
            return tag
        if tag is None:
            return cls.DEFAULT
        key = str(tag).strip().lower()
        key = _MODE_ALIASES.get(key, key)
        try:
            return cls(key)
        except ValueError:
            logger.debug("Unknown activity mode %r, using default profile", tag)
            return cls.DEFAULT


# tags used by the mobile app (pt-BR)
_MODE_ALIASES = {
    "caminhada": "walking",
    "corrida":   "running",
    "ciclismo":  "cycling",
    "trilha":    "trail",
}


@dataclass(frozen=True)
class ThresholdOverrides:
    """
    Caller-supplied threshold overrides; None leaves the field to the preset.
    """
    max_accuracy_meters:    Optional[float] = None
    min_delta_seconds:      Optional[float] = None
    smoothing_window_size:  Optional[int]   = None
    min_speed_mps:          Optional[float] = None
    max_implicit_speed_mps: Optional[float] = None
    step_accuracy_factor:   Optional[float] = None
    min_step_meters:        Optional[float] = None

    def as_changes(self) -> dict[str, float | int]:
        return {k: v for k, v in asdict(self).items() if v is not None}

    def merged(self, other: "ThresholdOverrides | None") -> "ThresholdOverrides":
        """
        Overlay `other` on top of self (other's set fields win).
        """
        if other is None:
            return self
        return replace(self, **other.as_changes())


@dataclass(frozen=True)
class ThresholdProfile:
    """
    Numeric thresholds for the ingestion pipeline.

    Attributes
    ----------
    max_accuracy_meters
        Samples with a larger accuracy radius are weak-signal.
    min_delta_seconds
        Minimum gap (s) from the previously seen sample.
    smoothing_window_size
        Number of accuracy-acceptable samples kept for median smoothing.
    min_speed_mps
        Reported speed at or above this counts as motion evidence.
    max_implicit_speed_mps
        Ceiling (m/s) on distance/time; above it the sample is a jump.
    step_accuracy_factor, min_step_meters
        Step threshold is max(accuracy * factor, min_step_meters).
    """
    max_accuracy_meters:    float = 25.0
    min_delta_seconds:      float = 1.0
    smoothing_window_size:  int   = 5
    min_speed_mps:          float = 0.5
    max_implicit_speed_mps: float = 12.0
    step_accuracy_factor:   float = 0.5
    min_step_meters:        float = 5.0

    def __post_init__(self) -> None:
        for f in fields(self):
            value = getattr(self, f.name)
            if not math.isfinite(value) or value < 0:
                raise ValueError(f"{f.name} must be finite and non-negative, got {value!r}")
        if int(self.smoothing_window_size) != self.smoothing_window_size or self.smoothing_window_size < 1:
            raise ValueError(
                f"smoothing_window_size must be a positive integer, got {self.smoothing_window_size!r}"
            )
        object.__setattr__(self, "smoothing_window_size", int(self.smoothing_window_size))

    @classmethod
    def default(cls):
        """Base profile, also used for unknown modes."""
        return cls()

    @classmethod
    def walking(cls):
        """Preset for walks."""
        return cls(max_implicit_speed_mps=3.5, min_speed_mps=0.5)

    @classmethod
    def running(cls):
        """Preset for runs."""
        return cls(max_implicit_speed_mps=12.0, min_speed_mps=1.5)

    @classmethod
    def cycling(cls):
        """Preset for rides."""
        return cls(max_implicit_speed_mps=25.0, min_speed_mps=2.0)

    @classmethod
    def trail(cls):
        """Preset for trail activities (slower ceiling than running)."""
        return cls(max_implicit_speed_mps=8.0, min_speed_mps=0.5)

    @classmethod
    def for_mode(cls, mode: "ActivityMode | str | None"):
        return _PROFILE_PRESETS[ActivityMode.parse(mode)]()

    def step_threshold(self, accuracy: float) -> float:
        return max(accuracy * self.step_accuracy_factor, self.min_step_meters)

    def to_dict(self) -> dict[str, float | int]:
        return asdict(self)


_PROFILE_PRESETS = {
    ActivityMode.WALKING: ThresholdProfile.walking,
    ActivityMode.RUNNING: ThresholdProfile.running,
    ActivityMode.CYCLING: ThresholdProfile.cycling,
    ActivityMode.TRAIL:   ThresholdProfile.trail,
    ActivityMode.DEFAULT: ThresholdProfile.default,
}


def resolve_profile(
    mode: "ActivityMode | str | None" = None,
    overrides: ThresholdOverrides | None = None,
) -> ThresholdProfile:
    """
    Build the effective profile: base < mode preset < caller overrides.
    """
    profile = ThresholdProfile.for_mode(mode)
    if overrides is not None:
        profile = replace(profile, **overrides.as_changes())
    return profile


@dataclass(frozen=True)
class MovementConfig:
    """
    Confirmation rules for deriving a movement state from decisions.

    Attributes
    ----------
    min_accepted_to_move
        Consecutive accepted samples before the session counts as moving.
    min_rejected_to_stop
        Consecutive rejected samples before the session counts as stopped.
    min_distance_before_pace_m
        Accumulated distance (m) required before a pace is reported.
    tracker_overrides
        Anti-drift thresholds applied on top of the mode preset.
    """
    min_accepted_to_move:       int   = 3
    min_rejected_to_stop:       int   = 5
    min_distance_before_pace_m: float = 100.0
    tracker_overrides: ThresholdOverrides = ThresholdOverrides(min_speed_mps=0.8, min_step_meters=6.0)

    @classmethod
    def default(cls):
        return cls()

    @classmethod
    def walking(cls):
        """Walks need longer confirmation in both directions."""
        return cls(
            min_accepted_to_move=4,
            min_rejected_to_stop=6,
            min_distance_before_pace_m=150.0,
            tracker_overrides=ThresholdOverrides(min_speed_mps=0.6, min_step_meters=8.0),
        )

    @classmethod
    def running(cls):
        return cls(
            min_accepted_to_move=3,
            min_rejected_to_stop=5,
            min_distance_before_pace_m=100.0,
            tracker_overrides=ThresholdOverrides(min_speed_mps=1.0, min_step_meters=6.0),
        )

    @classmethod
    def for_mode(cls, mode: "ActivityMode | str | None"):
        match ActivityMode.parse(mode):
            case ActivityMode.WALKING:
                return cls.walking()
            case ActivityMode.RUNNING:
                return cls.running()
            case _:
                return cls.default()
