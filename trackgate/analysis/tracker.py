"""
Per-sample plausibility filter for live location streams.

Each call to `Tracker.ingest` runs the stages below in order and stops at the
first one that rejects:
- time gap from the previously seen sample
- bootstrap (seed the anchor from the first good-accuracy sample)
- minimum-delta gate
- accuracy gate
- median smoothing over the last N acceptable samples
- distance from the anchor
- anti-jump (implied speed ceiling)
- anti-drift (reported speed or step-size evidence of motion)

Distances are always measured from the anchor, the last point whose movement
was accepted. Rejected samples never move it.

Samples must arrive with non-decreasing timestamps; backward timestamps are a
caller error and are not corrected here.
"""

from __future__ import annotations

import math
from collections import deque
from dataclasses import replace
from typing import Optional

from trackgate.analysis.config import (
    ActivityMode,
    ThresholdOverrides,
    ThresholdProfile,
    resolve_profile,
)
from trackgate.analysis.types import IngestDecision, LocationSample, Reason
from trackgate.utils.geo import haversine, is_finite, median
from trackgate.utils.log import get_logger

logger = get_logger(__name__)


class Tracker:
    """
    Stateful accept/reject filter for one tracked session.

    Not thread-safe: use one instance per session and do not call `ingest`
    and `reset` concurrently on the same instance.
    """
    def __init__(
        self,
        mode: ActivityMode | str | None = ActivityMode.DEFAULT,
        overrides: ThresholdOverrides | None = None,
    ) -> None:
        self.mode = ActivityMode.parse(mode)
        self.profile: ThresholdProfile = resolve_profile(self.mode, overrides)
        self._last_seen_at_ms: Optional[float] = None
        self._anchor: Optional[LocationSample] = None
        self._window: deque[LocationSample] = deque(maxlen=self.profile.smoothing_window_size)

    @property
    def anchor(self) -> Optional[LocationSample]:
        return self._anchor

    @property
    def last_seen_at_ms(self) -> Optional[float]:
        return self._last_seen_at_ms

    @property
    def window(self) -> tuple[LocationSample, ...]:
        return tuple(self._window)

    def reset(self) -> None:
        """Return to the pre-first-sample state."""
        self._last_seen_at_ms = None
        self._anchor = None
        self._window.clear()

    def ingest(self, sample: LocationSample) -> IngestDecision:
        """
        Run one sample through the pipeline and return its decision.
        """
        cfg = self.profile
        reported = sample.speed_mps if is_finite(sample.speed_mps) else None

        delta_t = self._advance_clock(sample)

        if self._anchor is None:
            return self._bootstrap(sample, reported)

        if not math.isfinite(delta_t) or delta_t < cfg.min_delta_seconds:
            return self._decline(
                Reason.DELTA_TOO_SMALL, sample, reported,
                delta_t=delta_t if math.isfinite(delta_t) else 0.0,
            )

        if self._is_weak(sample):
            return self._decline(
                Reason.WEAK_SIGNAL_ACCURACY, sample, reported,
                delta_t=delta_t, signal_weak=True,
            )

        point = self._push_and_smooth(sample)

        delta_d = haversine(self._anchor.latlng, point.latlng)
        if not math.isfinite(delta_d) or delta_d <= 0:
            return self._decline(Reason.INVALID_DISTANCE, point, reported, delta_t=delta_t)

        implied = _implied_speed(delta_d, delta_t)
        if not math.isfinite(implied) or implied > cfg.max_implicit_speed_mps:
            return self._decline(
                Reason.ANTI_JUMP, point, reported,
                delta_t=delta_t,
                delta_d=delta_d,
                implied=implied if math.isfinite(implied) else None,
                stationary=False,
            )

        step_threshold = cfg.step_threshold(point.accuracy)
        speed_evidence = reported is not None and reported >= cfg.min_speed_mps
        step_evidence = delta_d >= step_threshold
        if not (speed_evidence or step_evidence):
            return self._decline(
                Reason.STATIONARY_NO_MOTION, point, reported,
                delta_t=delta_t, delta_d=delta_d, implied=implied,
            )

        self._anchor = point
        logger.debug(
            "Accepted: d=%.2fm dt=%.2fs v=%.2fm/s (step>=%.2fm)",
            delta_d, delta_t, implied, step_threshold,
        )
        return IngestDecision(
            accepted=True,
            reason=Reason.ACCEPTED,
            signal_weak=False,
            delta_time_seconds=delta_t,
            delta_dist_meters=delta_d,
            implied_speed_mps=implied,
            reported_speed_mps=reported,
            point=point,
            is_stationary=False,
        )

    # -- stages ---------------------------------------------------------------

    def _advance_clock(self, sample: LocationSample) -> float:
        """
        Seconds since the previous sample (0 for the first); always moves the
        time baseline, whatever the decision turns out to be.
        """
        previous = self._last_seen_at_ms
        self._last_seen_at_ms = sample.timestamp_ms
        if previous is None:
            return 0.0
        return (sample.timestamp_ms - previous) / 1000

    def _bootstrap(self, sample: LocationSample, reported: Optional[float]) -> IngestDecision:
        """
        Seed the anchor; only a sample that passes the accuracy gate can.
        """
        if self._is_weak(sample):
            return self._decline(Reason.WEAK_SIGNAL_ACCURACY, sample, reported, signal_weak=True)

        point = self._push_and_smooth(sample)
        self._anchor = point
        logger.debug("Anchor seeded at (%.6f, %.6f)", point.lat, point.lng)
        return self._decline(Reason.FIRST_POINT, point, reported)

    def _is_weak(self, sample: LocationSample) -> bool:
        # NaN accuracy counts as weak
        return not sample.accuracy <= self.profile.max_accuracy_meters

    def _push_and_smooth(self, sample: LocationSample) -> LocationSample:
        """
        Append to the window and return the per-axis median point.

        Accuracy is the worst in the window; speed is the median of the
        finite reported speeds, falling back to the sample's own.
        """
        self._window.append(sample)
        speeds = [s.speed_mps for s in self._window if is_finite(s.speed_mps)]
        return replace(
            sample,
            lat=median(s.lat for s in self._window),
            lng=median(s.lng for s in self._window),
            accuracy=max(s.accuracy for s in self._window),
            speed_mps=median(speeds) if speeds else sample.speed_mps,
        )

    def _decline(
        self,
        reason: Reason,
        point: LocationSample,
        reported: Optional[float],
        *,
        delta_t: float = 0.0,
        delta_d: float = 0.0,
        implied: Optional[float] = None,
        signal_weak: bool = False,
        stationary: bool = True,
    ) -> IngestDecision:
        logger.debug("Not accepted (%s): dt=%.2fs d=%.2fm", reason.value, delta_t, delta_d)
        return IngestDecision(
            accepted=False,
            reason=reason,
            signal_weak=signal_weak,
            delta_time_seconds=delta_t,
            delta_dist_meters=delta_d,
            implied_speed_mps=implied,
            reported_speed_mps=reported,
            point=point,
            is_stationary=stationary,
        )


def _implied_speed(delta_d: float, delta_t: float) -> float:
    if delta_t == 0:
        return math.inf
    return delta_d / delta_t
