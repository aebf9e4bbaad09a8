"""
Envelope shaping: turning gesture speed into attack and release times.

A speed is normalized against a ``(min, max)`` range, bent by a sub-linear
exponent (so moderate speeds already feel "fast"), then used to interpolate
from a slow time constant to a fast one.
"""

from typing import Callable, Tuple

from handtheremin.config import PadEnvelopeConfig, PluckConfig
from handtheremin.util import clamp


def identity(x):
    return x


class RangeMapper:
    """
    A callable class that maps values from one range to another, clamping to the
    target range. Precomputes scaling factors for better performance.

    >>> mapper = RangeMapper((0, 1), (100, 200))
    >>> mapper(0.5)
    150.0
    >>> mapper(-0.1)  # Below range
    100
    >>> mapper(1.5)   # Above range
    200

    The target range can be decreasing:

    >>> RangeMapper((0, 1), (0.25, 0.005))(1)
    0.005
    """

    def __init__(
        self,
        value_range: Tuple[float, float],
        target_range: Tuple[float, float],
        *,
        ingress: Callable = identity,
        egress: Callable = identity,
    ):
        """
        Initialize the range mapper with source and target ranges.

        Args:
            value_range: The range of the input value (min, max)
            target_range: The range to map to (start, end)
            ingress: Applied to the value before mapping
            egress: Applied to the output after mapping
        """
        self.value_min, self.value_max = value_range
        self.target_min, self.target_max = target_range
        if self.value_max <= self.value_min:
            raise ValueError(f"Empty value range: {value_range}")

        self._value_span = self.value_max - self.value_min
        self._target_span = self.target_max - self.target_min
        self._scale_factor = self._target_span / self._value_span
        self.ingress = ingress
        self.egress = egress

    def __call__(self, value: float) -> float:
        value = self.ingress(value)
        if value <= self.value_min:
            output = self.target_min
        elif value >= self.value_max:
            output = self.target_max
        else:
            output = self.target_min + (value - self.value_min) * self._scale_factor
        return self.egress(output)


def curved_speed(speed: float, speed_range: Tuple[float, float], curve: float) -> float:
    """
    Normalize ``speed`` into ``[0, 1]`` within ``speed_range`` and raise it to
    ``curve``.

    >>> curved_speed(0.25, (0.0, 1.0), 0.5)
    0.5
    >>> curved_speed(-3, (0.5, 4.0), 0.4), curved_speed(10, (0.5, 4.0), 0.4)
    (0.0, 1.0)
    """
    lo, hi = speed_range
    normalized = clamp((speed - lo) / (hi - lo), 0.0, 1.0)
    return normalized ** curve


def shaped_time(
    speed: float,
    speed_range: Tuple[float, float],
    time_range: Tuple[float, float],
    curve: float,
) -> float:
    """
    Interpolate from ``time_range[0]`` (slow) to ``time_range[1]`` (fast) by speed.

    Monotone non-increasing in ``speed`` whenever slow >= fast.

    >>> shaped_time(0.0, (0.0, 1.0), (0.2, 0.01), 0.5)
    0.2
    >>> shaped_time(2.0, (0.0, 1.0), (0.2, 0.01), 0.5)
    0.01
    """
    mapper = RangeMapper((0.0, 1.0), time_range)
    return mapper(curved_speed(speed, speed_range, curve))


def pad_attack_s(approach_speed: float, config: PadEnvelopeConfig = None) -> float:
    """Attack time for entering the pad zone at ``approach_speed`` (m/s)."""
    config = config or PadEnvelopeConfig()
    return shaped_time(
        approach_speed,
        (config.speed_min_m_per_s, config.speed_max_m_per_s),
        (config.attack_slow_s, config.attack_fast_s),
        config.velocity_curve,
    )


def pad_release_s(retreat_speed: float, config: PadEnvelopeConfig = None) -> float:
    """Release time for leaving the pad zone at ``retreat_speed`` (m/s)."""
    config = config or PadEnvelopeConfig()
    return shaped_time(
        retreat_speed,
        (config.speed_min_m_per_s, config.speed_max_m_per_s),
        (config.release_slow_s, config.release_fast_s),
        config.velocity_curve,
    )


def pluck_attack_s(closing_speed: float, config: PluckConfig = None) -> float:
    """Attack time for a pluck whose pinch closed at ``closing_speed`` (ratio/s)."""
    config = config or PluckConfig()
    return shaped_time(
        closing_speed,
        (config.close_min_per_s, config.close_max_per_s),
        (config.attack_slow_s, config.attack_fast_s),
        config.velocity_curve,
    )


def reverb_mix(openness: float, *, max_wet: float, dry_duck: float) -> Tuple[float, float]:
    """
    Reverb ``(wet, dry)`` for a pinch openness in ``[0, 1]``.

    Wetness grows with the square of openness, so the first part of the opening
    stays fairly dry. The dry signal is ducked as the wet one grows.

    >>> reverb_mix(0.0, max_wet=0.85, dry_duck=0.4)
    (0.0, 1.0)
    >>> wet, dry = reverb_mix(1.0, max_wet=0.85, dry_duck=0.4)
    >>> wet, round(dry, 6)
    (0.85, 0.66)
    """
    wet = clamp(openness * openness, 0.0, max_wet)
    return wet, 1.0 - wet * dry_duck


def pinch_openness(ratio: float, *, pinch_min: float, pinch_max: float) -> float:
    """
    >>> pinch_openness(0.9, pinch_min=0.25, pinch_max=0.9)
    1.0
    >>> pinch_openness(0.1, pinch_min=0.25, pinch_max=0.9)
    0.0
    """
    return clamp((ratio - pinch_min) / (pinch_max - pinch_min), 0.0, 1.0)
