"""
Pydantic schemas to validate samples and settings at the file and HTTP boundaries.
"""

from typing import Optional
from pydantic import AliasChoices, BaseModel, Field, field_validator

from trackgate.analysis.config import ThresholdOverrides, ThresholdProfile
from trackgate.analysis.types import IngestDecision, LocationSample


class SampleIn(BaseModel):
    """
    Normalized record for a single location fix.
    """
    lat: float
    lng: float = Field(validation_alias=AliasChoices("lng", "lon"))
    accuracy: float = Field(ge=0)
    timestamp_ms: int = Field(validation_alias=AliasChoices("timestamp_ms", "timestamp"))
    speed_mps: Optional[float] = Field(
        default=None, validation_alias=AliasChoices("speed_mps", "speed")
    )

    @field_validator("speed_mps", mode="before")
    @classmethod
    def _blank_speed(cls, v):
        # CSV cells come through as "" when the provider had no speed
        if isinstance(v, str) and not v.strip():
            return None
        return v

    def to_sample(self) -> LocationSample:
        return LocationSample(
            lat=self.lat,
            lng=self.lng,
            accuracy=self.accuracy,
            timestamp_ms=self.timestamp_ms,
            speed_mps=self.speed_mps,
        )


class OverridesIn(BaseModel):
    """
    Optional per-field threshold overrides.
    """
    max_accuracy_meters:    Optional[float] = Field(default=None, ge=0)
    min_delta_seconds:      Optional[float] = Field(default=None, ge=0)
    smoothing_window_size:  Optional[int]   = Field(default=None, ge=1)
    min_speed_mps:          Optional[float] = Field(default=None, ge=0)
    max_implicit_speed_mps: Optional[float] = Field(default=None, ge=0)
    step_accuracy_factor:   Optional[float] = Field(default=None, ge=0)
    min_step_meters:        Optional[float] = Field(default=None, ge=0)

    def to_overrides(self) -> ThresholdOverrides:
        return ThresholdOverrides(**self.model_dump())


class SessionCreate(BaseModel):
    mode: Optional[str] = None
    overrides: Optional[OverridesIn] = None


class ProfileOut(BaseModel):
    """
    Fully resolved threshold profile.
    """
    max_accuracy_meters: float
    min_delta_seconds: float
    smoothing_window_size: int
    min_speed_mps: float
    max_implicit_speed_mps: float
    step_accuracy_factor: float
    min_step_meters: float

    @classmethod
    def from_profile(cls, profile: ThresholdProfile) -> "ProfileOut":
        return cls(**profile.to_dict())


class PointOut(BaseModel):
    lat: float
    lng: float
    accuracy: float
    timestamp_ms: int
    speed_mps: Optional[float]


class DecisionOut(BaseModel):
    """
    Wire form of an IngestDecision.
    """
    accepted: bool
    reason: str
    signal_weak: bool
    delta_time_seconds: float
    delta_dist_meters: float
    implied_speed_mps: Optional[float]
    reported_speed_mps: Optional[float]
    point: PointOut
    is_stationary: bool

    @classmethod
    def from_decision(cls, decision: IngestDecision) -> "DecisionOut":
        return cls(**decision.to_dict())
