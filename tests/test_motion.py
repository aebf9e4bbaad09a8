"""Tests for the hand shake and vibrato-rate tracker."""

import math

import pytest

from handtheremin.config import MotionConfig
from handtheremin.motion import MAX_SHAKE, HandMotion

FPS = 60


def wobble(hz, seconds, *, amplitude=0.05, phase=0.3):
    """Side to side hand motion at ``hz``, sampled at ``FPS``."""
    return [
        (0.5 + amplitude * math.sin(2 * math.pi * hz * k / FPS + phase), 0.5)
        for k in range(int(seconds * FPS))
    ]


def track(motion, positions, *, start=0):
    return [motion.update(p, (start + k) / FPS) for k, p in enumerate(positions)]


class TestVibratoRate:
    """Tests for the rate measured from the hand turning around."""

    def test_still_hand(self):
        results = track(HandMotion(), [(0.5, 0.5)] * 30)
        assert all(result == (0.0, 0.0) for result in results)

    def test_five_hertz_wobble(self):
        _, vibrato_hz = track(HandMotion(), wobble(5, 1.0))[-1]
        assert vibrato_hz == pytest.approx(5.0, abs=0.01)

    def test_slower_wobble_gives_lower_rate(self):
        _, vibrato_hz = track(HandMotion(), wobble(2.5, 2.0))[-1]
        assert vibrato_hz == pytest.approx(2.5, abs=0.01)

    def test_tiny_tremor_is_ignored(self):
        _, vibrato_hz = track(HandMotion(), wobble(5, 1.0, amplitude=0.002))[-1]
        assert vibrato_hz == 0.0

    def test_rate_falls_back_to_zero_when_the_hand_stops(self):
        motion = HandMotion()
        positions = wobble(5, 1.0)
        track(motion, positions)
        _, vibrato_hz = track(motion, [positions[-1]] * FPS, start=len(positions))[-1]
        assert vibrato_hz == 0.0


class TestShake:
    """Tests for the acceleration-based shake amount."""

    def test_jitter_shakes_up_to_the_ceiling(self):
        jitter = [(0.5 + 0.1 * (k % 2), 0.5) for k in range(30)]
        shake, _ = track(HandMotion(), jitter)[-1]
        assert 29.0 < shake <= MAX_SHAKE

    def test_sensitivity_scales_shake(self):
        jitter = [(0.5 + 0.0005 * (k % 2), 0.5) for k in range(10)]
        calm, _ = track(HandMotion(MotionConfig(shake_sensitivity=1.0)), jitter)[-1]
        nervous, _ = track(HandMotion(MotionConfig(shake_sensitivity=6.0)), jitter)[-1]
        assert 0.0 < calm < nervous

    def test_dropout_restarts(self):
        motion = HandMotion()
        track(motion, [(0.5 + 0.1 * (k % 2), 0.5) for k in range(10)])
        assert motion.update((0.5, 0.5), 10 / FPS + 0.3) == (0.0, 0.0)

    def test_reset(self):
        motion = HandMotion()
        track(motion, wobble(5, 1.0))
        motion.reset()
        assert motion.update((0.5, 0.5), 5.0) == (0.0, 0.0)
        assert motion.extrema == [None, None]
