"""
Activity session: the caller side of a Tracker.

The Tracker only decides per sample. A session sums accepted deltas into a
distance, keeps the accepted route, derives a movement state and reports a
pace once enough distance has been covered.
"""

from __future__ import annotations

import math
from collections import Counter
from typing import Any, Optional

from trackgate.analysis.config import ActivityMode, MovementConfig, ThresholdOverrides
from trackgate.analysis.movement import MovementMonitor
from trackgate.analysis.tracker import Tracker
from trackgate.analysis.types import IngestDecision, LocationSample, MovementState, Reason
from trackgate.utils.log import get_logger

logger = get_logger(__name__)


class ActivitySession:
    """
    One recorded activity: a Tracker, a MovementMonitor and running totals.

    Parameters
    ----------
    mode
        Activity mode tag (see `ActivityMode.parse`).
    overrides
        Explicit threshold overrides; these win over the movement config's
        own tracker overrides.
    movement
        Movement confirmation rules; defaults to the preset for `mode`.
    """
    def __init__(
        self,
        mode: ActivityMode | str | None = ActivityMode.DEFAULT,
        overrides: ThresholdOverrides | None = None,
        movement: MovementConfig | None = None,
    ) -> None:
        self.mode = ActivityMode.parse(mode)
        self.movement_cfg = movement or MovementConfig.for_mode(self.mode)
        effective = self.movement_cfg.tracker_overrides.merged(overrides)
        self.tracker = Tracker(self.mode, effective)
        self.monitor = MovementMonitor(self.movement_cfg)
        self._clear_totals()
        logger.info("Session started: mode=%s, profile=%s", self.mode.value, self.tracker.profile)

    def _clear_totals(self) -> None:
        self.distance_meters = 0.0
        self.route: list[LocationSample] = []
        self.reason_counts: Counter[Reason] = Counter()
        self.first_ts_ms: Optional[int] = None
        self.last_ts_ms: Optional[int] = None

    def reset(self) -> None:
        self.tracker.reset()
        self.monitor.reset()
        self._clear_totals()

    def ingest(self, sample: LocationSample) -> IngestDecision:
        decision = self.tracker.ingest(sample)
        self.monitor.update(decision)
        self.reason_counts[decision.reason] += 1

        if self.first_ts_ms is None:
            self.first_ts_ms = sample.timestamp_ms
        self.last_ts_ms = sample.timestamp_ms

        if decision.accepted:
            self.distance_meters += decision.delta_dist_meters
            self.route.append(decision.point)
        return decision

    @property
    def state(self) -> MovementState:
        return self.monitor.state

    @property
    def paused(self) -> bool:
        return self.monitor.paused

    @property
    def elapsed_seconds(self) -> float:
        if self.first_ts_ms is None or self.last_ts_ms is None:
            return 0.0
        return max(0.0, (self.last_ts_ms - self.first_ts_ms) / 1000)

    @property
    def pace_min_per_km(self) -> Optional[float]:
        """
        Average pace, only once the session is confirmed moving and has
        covered the configured minimum distance.
        """
        if self.distance_meters <= 0 or self.distance_meters < self.movement_cfg.min_distance_before_pace_m:
            return None
        if self.state is not MovementState.MOVING or self.paused:
            return None
        return (self.elapsed_seconds / 60) / (self.distance_meters / 1000)

    def summary(self) -> dict[str, Any]:
        pace = self.pace_min_per_km
        return {
            "mode": self.mode.value,
            "distance_m": self.distance_meters,
            "elapsed_s": self.elapsed_seconds,
            "pace_min_per_km": pace,
            "pace": format_pace(pace),
            "state": self.state.value,
            "paused": self.paused,
            "route_points": len(self.route),
            "reasons": {r.value: n for r, n in self.reason_counts.items()},
        }


def format_pace(pace: Optional[float]) -> str:
    """
    Render a pace in minutes per km as "MM:SS /km", or "--" when unavailable.
    """
    if not pace or not math.isfinite(pace):
        return "--"
    minutes, seconds = divmod(round(pace * 60), 60)
    return f"{minutes:02d}:{seconds:02d} /km"
