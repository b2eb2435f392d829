# trackgate/analysis/movement.py

"""
Movement state derived from a stream of ingest decisions.

A single accepted sample is not enough to call the user moving, and a single
rejection is not enough to call them stopped: both transitions need a run of
consecutive decisions. Weak signal is reported immediately and never pauses
the session by itself.
"""

from __future__ import annotations

from trackgate.analysis.config import MovementConfig
from trackgate.analysis.types import IngestDecision, MovementState, Reason
from trackgate.utils.log import get_logger

logger = get_logger(__name__)


class MovementMonitor:
    def __init__(self, cfg: MovementConfig | None = None) -> None:
        self.cfg = cfg or MovementConfig.default()
        self.reset()

    def reset(self) -> None:
        self.state = MovementState.STATIONARY
        self.paused = False
        self.accepted_run = 0
        self.rejected_run = 0

    def update(self, decision: IngestDecision) -> MovementState:
        """
        Fold one decision into the counters and return the (possibly new) state.
        """
        nxt = self.state
        if decision.reason is Reason.WEAK_SIGNAL_ACCURACY:
            self.accepted_run = 0
            self.rejected_run = 0
            nxt = MovementState.SIGNAL_WEAK
        elif decision.accepted:
            self.accepted_run += 1
            self.rejected_run = 0
            if self.accepted_run >= self.cfg.min_accepted_to_move:
                nxt = MovementState.MOVING
        else:
            self.rejected_run += 1
            self.accepted_run = 0
            if self.rejected_run >= self.cfg.min_rejected_to_stop:
                nxt = MovementState.STATIONARY

        if nxt is not self.state:
            logger.info("Movement state %s -> %s", self.state.value, nxt.value)
            self.state = nxt

        if nxt is MovementState.MOVING:
            self.paused = False
        elif nxt is MovementState.STATIONARY:
            self.paused = True
        return self.state
