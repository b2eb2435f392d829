"""
Profile resolution tests.
"""

import math

import pytest

from trackgate.analysis.config import (
    ActivityMode,
    MovementConfig,
    ThresholdOverrides,
    ThresholdProfile,
    resolve_profile,
)


class TestActivityMode:
    @pytest.mark.parametrize(
        "tag, expected",
        [
            ("walking", ActivityMode.WALKING),
            ("caminhada", ActivityMode.WALKING),
            ("corrida", ActivityMode.RUNNING),
            ("ciclismo", ActivityMode.CYCLING),
            ("trilha", ActivityMode.TRAIL),
            (" Running ", ActivityMode.RUNNING),
            (ActivityMode.TRAIL, ActivityMode.TRAIL),
            (None, ActivityMode.DEFAULT),
            ("yoga", ActivityMode.DEFAULT),
            ("", ActivityMode.DEFAULT),
        ],
    )
    def test_parse(self, tag, expected):
        assert ActivityMode.parse(tag) is expected


class TestResolveProfile:
    def test_base_profile(self):
        p = resolve_profile("default")
        assert p.max_accuracy_meters == 25
        assert p.min_delta_seconds == 1
        assert p.smoothing_window_size == 5
        assert p.min_speed_mps == 0.5
        assert p.max_implicit_speed_mps == 12
        assert p.step_accuracy_factor == 0.5
        assert p.min_step_meters == 5

    @pytest.mark.parametrize(
        "mode, ceiling, floor",
        [
            ("walking", 3.5, 0.5),
            ("running", 12.0, 1.5),
            ("cycling", 25.0, 2.0),
            ("trail", 8.0, 0.5),
        ],
    )
    def test_mode_presets(self, mode, ceiling, floor):
        p = resolve_profile(mode)
        assert p.max_implicit_speed_mps == ceiling
        assert p.min_speed_mps == floor
        # everything else stays on the base values
        assert p.max_accuracy_meters == 25
        assert p.smoothing_window_size == 5

    def test_unknown_mode_is_base_profile(self):
        assert resolve_profile("skateboard") == ThresholdProfile()

    def test_caller_overrides_win_over_mode(self):
        p = resolve_profile("cycling", ThresholdOverrides(max_implicit_speed_mps=30, min_step_meters=3))
        assert p.max_implicit_speed_mps == 30
        assert p.min_step_meters == 3
        assert p.min_speed_mps == 2.0

    def test_none_fields_are_not_overrides(self):
        assert resolve_profile("trail", ThresholdOverrides()) == ThresholdProfile.trail()

    @pytest.mark.parametrize(
        "overrides",
        [
            ThresholdOverrides(smoothing_window_size=0),
            ThresholdOverrides(smoothing_window_size=2.5),
            ThresholdOverrides(max_accuracy_meters=-1),
            ThresholdOverrides(min_step_meters=math.nan),
            ThresholdOverrides(max_implicit_speed_mps=math.inf),
        ],
    )
    def test_invalid_overrides_raise(self, overrides):
        with pytest.raises(ValueError):
            resolve_profile("default", overrides)

    def test_step_threshold(self):
        p = ThresholdProfile()
        assert p.step_threshold(10) == 5
        assert p.step_threshold(4) == 5
        assert p.step_threshold(30) == 15


class TestOverrides:
    def test_merged_prefers_other(self):
        base = ThresholdOverrides(min_speed_mps=0.6, min_step_meters=8)
        merged = base.merged(ThresholdOverrides(min_step_meters=3))
        assert merged.min_speed_mps == 0.6
        assert merged.min_step_meters == 3

    def test_merged_with_none(self):
        base = ThresholdOverrides(min_speed_mps=0.6)
        assert base.merged(None) is base


class TestMovementConfig:
    def test_walking(self):
        cfg = MovementConfig.for_mode("caminhada")
        assert cfg.min_accepted_to_move == 4
        assert cfg.min_rejected_to_stop == 6
        assert cfg.min_distance_before_pace_m == 150
        assert cfg.tracker_overrides.min_step_meters == 8

    def test_running(self):
        cfg = MovementConfig.for_mode("running")
        assert cfg.min_accepted_to_move == 3
        assert cfg.tracker_overrides.min_speed_mps == 1.0

    @pytest.mark.parametrize("mode", ["cycling", "trail", "default", None])
    def test_fallback(self, mode):
        cfg = MovementConfig.for_mode(mode)
        assert cfg == MovementConfig()
        assert cfg.tracker_overrides.min_speed_mps == 0.8
