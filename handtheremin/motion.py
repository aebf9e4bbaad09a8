"""
Hand motion of the sounding hand: how much it shakes, and how fast it wobbles.

Both are measured on the (mirrored) camera-view position of the hand while a
voice sounds:

* shake: the magnitude of the hand's acceleration, scaled by a sensitivity and
  smoothed.
* vibrato rate: every time the hand turns around on an axis (its velocity
  changes sign) the time since the previous turn is half a period. Turns that
  are too small, too quick or too slow are ignored, and the rate falls back to
  0 when no valid turn has been seen for a while.

>>> motion = HandMotion()
>>> motion.update((0.5, 0.5), 0.0)
(0.0, 0.0)
>>> motion.update((0.5, 0.5), 0.05)
(0.0, 0.0)
"""

import math
from typing import Optional, Tuple

from handtheremin.config import MotionConfig
from handtheremin.smoothing import ema
from handtheremin.util import clamp

Point = Tuple[float, float]

MAX_SHAKE = 30.0
VIBRATO_HZ_RANGE = (1.0, 14.0)
MIN_DT = 0.001


class HandMotion:
    """Track shake and vibrato rate from successive hand positions."""

    def __init__(self, config: MotionConfig = None):
        self.config = config or MotionConfig()
        self.reset()

    def reset(self):
        """Forget everything (a new voice starts)."""
        self._restart(None, None)
        self.extrema = [None, None]  # per axis: (time, position) of the last turn
        self.last_turn_at: Optional[float] = None

    def _restart(self, position: Optional[Point], now: Optional[float]):
        self.prev_at = now
        self.prev_position = position
        self.prev_velocity: Optional[Point] = None
        self.prev_signs: Optional[Tuple[int, int]] = None
        self.shake: Optional[float] = None
        self.vibrato_hz: Optional[float] = None

    def update(self, position: Point, now: float) -> Tuple[float, float]:
        """
        Add a position and return the current ``(shake, vibrato_hz)``.

        The first position, and any that comes after a gap longer than
        ``config.max_gap_s`` (a tracking dropout), restarts the measurement and
        gives ``(0.0, 0.0)``.
        """
        config = self.config
        if self.prev_at is None:
            self._restart(position, now)
            return 0.0, 0.0
        dt = now - self.prev_at
        if dt <= MIN_DT or dt >= config.max_gap_s:
            self._restart(position, now)
            return 0.0, 0.0

        velocity = tuple((p - q) / dt for p, q in zip(position, self.prev_position))
        signs = tuple(1 if v >= 0 else -1 for v in velocity)

        self._update_vibrato(position, signs, now)

        acceleration = 0.0
        if self.prev_velocity is not None:
            acceleration = math.hypot(
                *((v - u) / dt for v, u in zip(velocity, self.prev_velocity))
            )
        self.prev_at, self.prev_position = now, position
        self.prev_velocity, self.prev_signs = velocity, signs

        shake = clamp(acceleration * config.shake_sensitivity, 0.0, MAX_SHAKE)
        self.shake = ema(self.shake, shake, config.shake_alpha)
        return self.shake, self.vibrato_hz or 0.0

    def _update_vibrato(self, position: Point, signs: Tuple[int, int], now: float):
        config = self.config
        weighted_hz = weight = 0.0
        for axis in (0, 1):
            if self.prev_signs is None or signs[axis] == self.prev_signs[axis]:
                continue
            extremum = self.extrema[axis]
            if extremum is not None:
                half_period = now - extremum[0]
                amplitude = abs(position[axis] - extremum[1])
                if (
                    amplitude >= config.vibrato_min_amplitude
                    and config.vibrato_min_half_period_s
                    <= half_period
                    <= config.vibrato_max_half_period_s
                ):
                    self.last_turn_at = now
                    weighted_hz += amplitude / (2 * half_period)
                    weight += amplitude
            self.extrema[axis] = (now, position[axis])

        if weight > 0:
            hz = clamp(weighted_hz / weight, *VIBRATO_HZ_RANGE)
            self.vibrato_hz = ema(self.vibrato_hz, hz, config.vibrato_alpha)
        elif (
            self.last_turn_at is not None
            and now - self.last_turn_at > config.vibrato_timeout_s
        ):
            self.vibrato_hz = None
