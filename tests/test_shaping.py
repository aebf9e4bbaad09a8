"""Tests for the envelope shaping curves."""

import pytest

from handtheremin.config import PadEnvelopeConfig, PluckConfig
from handtheremin.shaping import (
    RangeMapper,
    curved_speed,
    pad_attack_s,
    pad_release_s,
    pinch_openness,
    pluck_attack_s,
    reverb_mix,
    shaped_time,
)


class TestRangeMapper:
    """Tests for the clamped linear range mapper."""

    def test_midpoint(self):
        assert RangeMapper((0, 10), (0, 1))(5) == pytest.approx(0.5)

    def test_ingress_and_egress(self):
        mapper = RangeMapper((0, 1), (0, 100), ingress=abs, egress=round)
        assert mapper(-0.333) == 33

    def test_empty_value_range(self):
        with pytest.raises(ValueError):
            RangeMapper((1, 1), (0, 1))


class TestShaping:
    """Tests for speed to time constant shaping."""

    def test_curve_is_sub_linear(self):
        assert curved_speed(0.25, (0, 1), 0.5) > 0.25

    @pytest.mark.parametrize('shape', [pad_attack_s, pad_release_s, pluck_attack_s])
    def test_faster_is_shorter(self, shape):
        speeds = [0.0, 0.1, 0.3, 0.6, 1.0, 2.0, 5.0]
        times = [shape(s) for s in speeds]
        assert times == sorted(times, reverse=True)
        assert times[0] > times[-1]

    def test_pad_attack_bounds(self):
        config = PadEnvelopeConfig()
        assert pad_attack_s(0.0) == config.attack_slow_s
        assert pad_attack_s(10.0) == config.attack_fast_s

    def test_pluck_attack_is_shorter_than_pad_attack(self):
        assert pluck_attack_s(1.0) < pad_attack_s(0.1)
        assert pluck_attack_s(0.0) == PluckConfig().attack_slow_s

    def test_negative_speed_is_slow(self):
        assert pad_release_s(-1.0) == PadEnvelopeConfig().release_slow_s

    def test_shaped_time_interpolates(self):
        assert shaped_time(0.5, (0, 1), (1.0, 0.0), 1.0) == pytest.approx(0.5)


class TestReverbCurve:
    """Tests for the pinch to reverb mapping."""

    def test_openness_is_monotone(self):
        ratios = [0.1, 0.25, 0.4, 0.6, 0.8, 0.9, 1.2]
        values = [pinch_openness(r, pinch_min=0.25, pinch_max=0.9) for r in ratios]
        assert values == sorted(values)
        assert values[0] == 0.0 and values[-1] == 1.0

    def test_wet_is_capped(self):
        wet, dry = reverb_mix(1.0, max_wet=0.5, dry_duck=0.4)
        assert wet == 0.5
        assert dry == pytest.approx(0.8)

    def test_wet_grows_quadratically(self):
        wet, _ = reverb_mix(0.5, max_wet=0.85, dry_duck=0.4)
        assert wet == pytest.approx(0.25)
