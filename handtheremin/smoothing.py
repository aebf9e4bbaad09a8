"""Exponential smoothing of the per-role hand signals."""

from typing import Optional

from handtheremin.config import SmoothingConfig

# Smoothed quantity -> the SmoothingConfig field holding its alpha
SIGNAL_ALPHAS = {
    'x': 'position_alpha',
    'y': 'position_alpha',
    'palm_facing': 'palm_alpha',
    'resonance': 'resonance_alpha',
    'reverb': 'reverb_alpha',
    'depth': 'depth_alpha',
    'velocity': 'velocity_alpha',
    'pinch': 'pinch_alpha',
}


def ema(previous: Optional[float], next_value: float, alpha: float) -> float:
    """
    One step of an exponential moving average.

    With no previous value the new value is returned unchanged (no warm-up
    transient). Higher ``alpha`` is more responsive, lower is steadier.

    >>> ema(None, 0.7, 0.35)
    0.7
    >>> ema(1.0, 0.0, 0.25)
    0.75
    >>> ema(0.5, 0.5, 0.1)
    0.5
    """
    if previous is None:
        return next_value
    return previous + (next_value - previous) * alpha


class RoleSmoothing:
    """
    The EMA state of one hand role (``'filter'`` or ``'sound'``).

    Every signal starts as ``None`` and takes its first observation verbatim.
    ``smooth`` with a ``None`` observation leaves the stored value untouched, so
    a missing landmark holds the last value instead of resetting it.

    >>> s = RoleSmoothing('sound', SmoothingConfig(position_alpha=0.5))
    >>> s.x is None
    True
    >>> s.smooth('x', 0.2), s.smooth('x', 0.4), s.smooth('x', None)
    (0.2, 0.30000000000000004, 0.30000000000000004)
    """

    def __init__(self, role: str, config: SmoothingConfig = None):
        self.role = role
        self.config = config or SmoothingConfig()
        self.reset()

    def alpha(self, signal: str) -> float:
        return getattr(self.config, SIGNAL_ALPHAS[signal])

    def smooth(self, signal: str, value: Optional[float]) -> Optional[float]:
        """Feed ``value`` into ``signal``'s filter and return the smoothed value."""
        alpha = self.alpha(signal)
        previous = getattr(self, signal)
        if value is None:
            return previous
        smoothed = ema(previous, float(value), alpha)
        setattr(self, signal, smoothed)
        return smoothed

    def reset(self):
        """Forget every smoothed value."""
        for signal in SIGNAL_ALPHAS:
            setattr(self, signal, None)

    def as_dict(self) -> dict:
        return {signal: getattr(self, signal) for signal in SIGNAL_ALPHAS}

    def __repr__(self):
        return f"{type(self).__name__}({self.role!r}, {self.as_dict()})"
