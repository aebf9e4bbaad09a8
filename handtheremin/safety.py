"""
Fail-safe checks that force the active voice off when tracking degrades.

Three independent conditions release a voice: the sound hand went missing for
too many frames, the voice has lived outside the pad zone for too long, or no
continuous update reached it for too long. They are checked in that order, and
the first that fires wins.
"""

import logging
from typing import Optional

from handtheremin.config import SafetyConfig

logger = logging.getLogger(__name__)

LOST_HAND = 'lost_hand'
STUCK_VOICE = 'stuck_voice'
STALE_UPDATE = 'stale_update'
PLUCK_TIMEOUT = 'pluck_timeout'
TEARDOWN = 'teardown'


class SafetySupervisor:
    """
    Tracks the counters and timestamps the watchdogs need.

    The interpreter reports what happens (``hand_seen``, ``hand_lost``,
    ``voice_started``, ``voice_updated``, ...) and asks ``release_reason(now)``
    whether the voice must be forced off.

    >>> s = SafetySupervisor(SafetyConfig(lost_frames_to_release=2))
    >>> s.voice_started(0.0)
    >>> s.hand_lost(); s.release_reason(0.01) is None
    True
    >>> s.hand_lost(); s.release_reason(0.02)
    'lost_hand'
    """

    def __init__(self, config: SafetyConfig = None):
        self.config = config or SafetyConfig()
        self.reset()

    def reset(self):
        self.lost_frames = 0
        self.voice_active = False
        self.last_update_at: Optional[float] = None
        self.outside_pad_since: Optional[float] = None

    # Reports -------------------------------------------------------------------

    def hand_seen(self):
        self.lost_frames = 0

    def hand_lost(self):
        self.lost_frames += 1
        if self.lost_frames == self.config.lost_frames_to_release:
            logger.debug(f"Sound hand missing for {self.lost_frames} frames")

    def voice_started(self, now: float, *, in_pad: bool = False):
        self.voice_active = True
        self.last_update_at = now
        self.outside_pad_since = None if in_pad else now

    def voice_updated(self, now: float, *, in_pad: bool = False):
        self.last_update_at = now
        if in_pad:
            self.outside_pad_since = None
        elif self.outside_pad_since is None:
            self.outside_pad_since = now

    def voice_stopped(self):
        self.voice_active = False
        self.last_update_at = None
        self.outside_pad_since = None

    # Checks --------------------------------------------------------------------

    def lost_hand(self) -> bool:
        return self.lost_frames >= self.config.lost_frames_to_release

    def stuck_voice(self, now: float) -> bool:
        return (
            self.outside_pad_since is not None
            and now - self.outside_pad_since > self.config.stuck_voice_timeout_s
        )

    def stale_update(self, now: float) -> bool:
        return (
            self.last_update_at is not None
            and now - self.last_update_at > self.config.stale_update_timeout_s
        )

    def release_reason(self, now: float) -> Optional[str]:
        """The reason the active voice must be forced off, or None."""
        if not self.voice_active:
            return None
        if self.lost_hand():
            return LOST_HAND
        if self.stuck_voice(now):
            return STUCK_VOICE
        if self.stale_update(now):
            return STALE_UPDATE
        return None
