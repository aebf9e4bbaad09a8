"""
The gesture interpreter: turns a stream of hand observations into note and
control events.

One ``GestureInterpreter`` owns all the smoothing and gesture state of a
session. Feed it one ``LandmarkFrame`` per tracking frame (or ``None`` when no
hands were seen) and dispatch the events it returns:

>>> from handtheremin.hand_features import HandObservation, LandmarkFrame
>>> interpreter = GestureInterpreter()
>>> hand = HandObservation(handedness='Right', palm=(0.4, 0.55), depth_m=0.45)
>>> events = interpreter.update(LandmarkFrame([hand], timestamp=0.0))
>>> [type(event).__name__ for event in events]
['ShowCursor']
>>> interpreter.phase
<GesturePhase.HOVERING: 'hovering'>

Call ``teardown()`` when the instrument is switched off, so that no note is
left sounding.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import List, Optional, Tuple, Union

from handtheremin.config import InterpreterConfig, preset_config
from handtheremin.events import (
    HideCursor,
    NoteOff,
    NoteOn,
    NoteUpdate,
    Pulse,
    SetFilterCutoffMod,
    SetFilterResonance,
    SetHandShake,
    SetHandVibratoHz,
    SetReverb,
    SetReverbEnabled,
    ShowCursor,
)
from handtheremin.hand_features import (
    HandObservation,
    LandmarkFrame,
    hand_height,
    pinch_ratio,
)
from handtheremin.motion import HandMotion
from handtheremin.roles import FILTER, SOUND, RoleAssigner
from handtheremin.safety import PLUCK_TIMEOUT, TEARDOWN, SafetySupervisor
from handtheremin.shaping import (
    pad_attack_s,
    pad_release_s,
    pinch_openness,
    pluck_attack_s,
    reverb_mix,
)
from handtheremin.smoothing import RoleSmoothing
from handtheremin.zones import Zone, classify_zone, hand_depth_m, map_to_surface

logger = logging.getLogger(__name__)

# Smallest time step (s) a velocity is computed over.
MIN_DT = 0.001


class GesturePhase(Enum):
    IDLE = 'idle'
    HOVERING = 'hovering'
    PAD = 'pad'
    PLUCK = 'pluck'


@dataclass
class GestureState:
    """
    Gesture state of the sound hand.

    The lost-frame counter and the update timestamps the watchdogs need live in
    the interpreter's ``SafetySupervisor``.
    """

    phase: GesturePhase = GesturePhase.IDLE
    pluck_armed: bool = True
    voice_active: bool = False
    gesture_started_at: Optional[float] = None
    zone: Zone = Zone.NONE
    cursor_visible: bool = False
    pluck_position: Optional[Tuple[float, float]] = None
    prev_pinch: Optional[float] = None
    prev_pinch_at: Optional[float] = None
    depth_at: Optional[float] = None
    reverb_enabled: bool = False


def _view_point(point, zones) -> Tuple[float, float]:
    """The hand position as seen in the (optionally mirrored) camera view."""
    x, y = point
    return (1.0 - x if zones.mirror_x else x, y)


def _resolve_config(config) -> InterpreterConfig:
    if config is None:
        return InterpreterConfig()
    if isinstance(config, str):
        return preset_config(config)
    if isinstance(config, dict):
        return InterpreterConfig.from_dict(config)
    if not isinstance(config, InterpreterConfig):
        raise TypeError(f"Expected an InterpreterConfig, got {type(config)}")
    return config.validate()


class GestureInterpreter:
    """
    Interpret two-hand landmark frames as note lifecycle and control events.

    Args:
        config: An ``InterpreterConfig``, a dict of (partial) settings, or a
            preset name ('desktop', 'mobile'). Defaults to the desktop settings.

    Not thread-safe: calls to ``update``, ``check_watchdogs`` and ``teardown``
    must be serialized by the caller.
    """

    def __init__(self, config: Union[InterpreterConfig, dict, str] = None):
        self.config = _resolve_config(config)
        self.smoothing = {
            FILTER: RoleSmoothing(FILTER, self.config.smoothing),
            SOUND: RoleSmoothing(SOUND, self.config.smoothing),
        }
        self.roles = RoleAssigner(
            stickiness=self.config.role_stickiness,
            radius=self.config.role_stickiness_radius,
        )
        self.safety = SafetySupervisor(self.config.safety)
        self.motion = HandMotion(self.config.motion)
        self.state = GestureState()
        self._pending_config = None

    @property
    def phase(self) -> GesturePhase:
        return self.state.phase

    @property
    def voice_active(self) -> bool:
        return self.state.voice_active

    # -------------------------------------------------------------------------------
    # Entry points
    # -------------------------------------------------------------------------------

    def update(self, frame: Optional[LandmarkFrame], now: float = None) -> List:
        """
        Process one tracking frame and return the resulting events.

        Args:
            frame: The hands seen in this frame, or None if there were none
            now: Current time in seconds (defaults to ``frame.timestamp``)

        Returns:
            list: Events, in the order they should be dispatched
        """
        if now is None:
            now = frame.timestamp if frame is not None else None
        if now is None:
            raise ValueError("update needs a time: give a frame timestamp or `now`")

        events = []
        hands = frame.hands if frame is not None else ()
        image_size = frame.image_size if frame is not None else None
        filter_hand, sound_hand = self.roles(hands)

        if filter_hand is not None:
            self._update_filter(filter_hand, events)

        if sound_hand is not None:
            self.safety.hand_seen()
            self._update_sound(sound_hand, image_size, now, events)
        else:
            self.safety.hand_lost()
            if self.safety.lost_frames == self.config.safety.lost_frames_to_release:
                self._lose_sound_hand(now, events)

        self._run_watchdogs(now, events)
        self._apply_pending_config()
        return events

    def check_watchdogs(self, now: float) -> List:
        """Run the time-based safety checks without a new frame."""
        events = []
        self._run_watchdogs(now, events)
        self._apply_pending_config()
        return events

    def teardown(self) -> List:
        """Silence everything and forget all state (instrument switched off)."""
        events = []
        if self.state.voice_active:
            logger.info(f"Releasing active voice on {TEARDOWN}")
            events.append(NoteOff(self.config.safety.release_s))
        self._reset_motion(events)
        events.append(HideCursor())
        events.append(SetReverbEnabled(False))
        for smoothing in self.smoothing.values():
            smoothing.reset()
        self.roles.reset()
        self.safety.reset()
        self.state = GestureState()
        if self._pending_config is not None:
            self._apply(self._pending_config)
            self._pending_config = None
        logger.info("Gesture interpreter torn down")
        return events

    def set_config(self, config: Union[InterpreterConfig, dict, str]):
        """
        Change settings. While a voice is sounding the change waits until that
        voice is released, so a note never changes rules halfway through.
        """
        config = _resolve_config(config)
        if self.state.voice_active:
            logger.debug("Voice active: config change deferred")
            self._pending_config = config
        else:
            self._pending_config = None
            self._apply(config)

    # -------------------------------------------------------------------------------
    # Configuration
    # -------------------------------------------------------------------------------

    def _apply(self, config: InterpreterConfig):
        self.config = config
        for smoothing in self.smoothing.values():
            smoothing.config = config.smoothing
        self.roles.stickiness = config.role_stickiness
        self.roles.radius = config.role_stickiness_radius
        self.safety.config = config.safety
        self.motion.config = config.motion

    def _apply_pending_config(self):
        if self._pending_config is not None and not self.state.voice_active:
            logger.debug("Applying deferred config change")
            self._apply(self._pending_config)
            self._pending_config = None

    # -------------------------------------------------------------------------------
    # Filter hand
    # -------------------------------------------------------------------------------

    def _update_filter(self, hand: HandObservation, events: list):
        smoothing = self.smoothing[FILTER]
        height = hand_height(hand)
        if height is not None:
            events.append(SetFilterResonance(smoothing.smooth('resonance', height)))
        if hand.palm_facing is not None:
            events.append(
                SetFilterCutoffMod(smoothing.smooth('palm_facing', hand.palm_facing))
            )

    # -------------------------------------------------------------------------------
    # Sound hand
    # -------------------------------------------------------------------------------

    def _update_sound(self, hand: HandObservation, image_size, now, events: list):
        config, smoothing, state = self.config, self.smoothing[SOUND], self.state

        point = hand.palm or hand.wrist
        view = None
        if point is not None:
            smoothing.smooth('x', point[0])
            smoothing.smooth('y', point[1])
            view = _view_point(point, config.zones)
        position = None
        if smoothing.x is not None:
            position = map_to_surface(smoothing.x, smoothing.y, config.zones)

        approach = None
        depth = hand_depth_m(hand, image_size, config.zones)
        if depth is not None:
            previous_depth = smoothing.depth
            depth = smoothing.smooth('depth', depth)
            if previous_depth is not None and state.depth_at is not None:
                dt = now - state.depth_at
                if dt > MIN_DT:
                    approach = (previous_depth - depth) / dt
                    smoothing.smooth('velocity', approach)
            state.depth_at = now
        state.zone = zone = classify_zone(state.zone, depth, config.zones)

        closing = None
        ratio = pinch_ratio(hand)
        if ratio is not None:
            ratio = smoothing.smooth('pinch', ratio)
            if state.prev_pinch is not None:
                dt = now - state.prev_pinch_at
                if dt > MIN_DT:
                    closing = (state.prev_pinch - ratio) / dt
            state.prev_pinch, state.prev_pinch_at = ratio, now
            if not state.pluck_armed and ratio >= config.pluck.rearm_ratio:
                logger.debug("Pluck re-armed")
                state.pluck_armed = True
            self._update_reverb(ratio, events)

        self._arbitrate(zone, position, view, ratio, closing, approach, now, events)

    def _update_reverb(self, ratio: float, events: list):
        reverb = self.config.reverb
        openness = self.smoothing[SOUND].smooth(
            'reverb',
            pinch_openness(ratio, pinch_min=reverb.pinch_min, pinch_max=reverb.pinch_max),
        )
        wet, dry = reverb_mix(openness, max_wet=reverb.max_wet, dry_duck=reverb.dry_duck)
        enabled = wet > reverb.epsilon
        if enabled != self.state.reverb_enabled:
            self.state.reverb_enabled = enabled
            events.append(SetReverbEnabled(enabled))
        events.append(SetReverb(wet, dry))

    # -------------------------------------------------------------------------------
    # Arbiter
    # -------------------------------------------------------------------------------

    def _arbitrate(self, zone, position, view, ratio, closing, approach, now, events):
        state, config = self.state, self.config

        if state.phase is GesturePhase.PLUCK:
            if self._pluck_expired(now):
                self._release(config.pluck.release_s, events, reason=PLUCK_TIMEOUT)
            elif zone is Zone.NONE:
                self._release(config.pluck.release_s, events, reason='left pointer zone')
            elif config.pluck.release_on_reopen and state.pluck_armed:
                self._release(config.pluck.release_s, events, reason='pinch reopened')
            else:
                events.append(NoteUpdate(*state.pluck_position))
                self._track_motion(view, now, events)
                self.safety.voice_updated(now, in_pad=zone is Zone.PAD)
                return
            self._settle(zone, position, events)
            return

        if state.phase is GesturePhase.PAD:
            if zone is not Zone.PAD:
                smoothed = self.smoothing[SOUND].velocity
                retreat = max(0.0, -(approach or 0.0), -(smoothed or 0.0))
                self._release(
                    pad_release_s(retreat, config.pad), events, reason='left pad zone'
                )
                self._settle(zone, position, events)
            elif position is not None:
                events.append(NoteUpdate(*position))
                self._track_motion(view, now, events)
                self.safety.voice_updated(now, in_pad=True)
                self._show_cursor(position, hovering=False, events=events)
            return

        # IDLE or HOVERING: no voice
        if position is not None and zone is Zone.PAD:
            smoothed = self.smoothing[SOUND].velocity
            speed = max(0.0, approach or 0.0, smoothed or 0.0)
            attack = pad_attack_s(speed, config.pad)
            self._start_voice(GesturePhase.PAD, attack, position, view, now, events)
            return
        if (
            position is not None
            and zone is Zone.POINTER
            and state.pluck_armed
            and ratio is not None
            and ratio <= config.pluck.closed_ratio
            and closing is not None
            and closing >= config.pluck.close_min_per_s
        ):
            state.pluck_armed = False
            state.pluck_position = position
            attack = pluck_attack_s(closing, config.pluck)
            self._start_voice(GesturePhase.PLUCK, attack, position, view, now, events)
            return
        self._settle(zone, position, events)

    def _pluck_expired(self, now) -> bool:
        return (
            self.state.phase is GesturePhase.PLUCK
            and now - self.state.gesture_started_at >= self.config.pluck.max_duration_s
        )

    def _set_phase(self, phase: GesturePhase):
        if phase is not self.state.phase:
            logger.debug(f"Phase {self.state.phase.name} -> {phase.name}")
            self.state.phase = phase

    def _settle(self, zone, position, events):
        """Set the voiceless phase that matches ``zone`` and update the cursor."""
        if zone is Zone.POINTER:
            self._set_phase(GesturePhase.HOVERING)
            if position is not None:
                self._show_cursor(position, hovering=True, events=events)
        else:
            self._set_phase(GesturePhase.IDLE)
            self._hide_cursor(events)

    def _show_cursor(self, position, *, hovering: bool, events: list):
        self.state.cursor_visible = True
        events.append(ShowCursor(position[0], position[1], hovering))

    def _hide_cursor(self, events: list):
        if self.state.cursor_visible:
            self.state.cursor_visible = False
            events.append(HideCursor())

    def _start_voice(self, phase, attack_s, position, view, now, events):
        self._reset_motion(events)
        if view is not None:
            self.motion.update(view, now)
        events.append(NoteOn(attack_s))
        events.append(NoteUpdate(*position))
        events.append(Pulse(*position))
        self.state.voice_active = True
        self.state.gesture_started_at = now
        self._set_phase(phase)
        self.safety.voice_started(now, in_pad=phase is GesturePhase.PAD)
        self._show_cursor(position, hovering=False, events=events)
        logger.debug(f"Voice on ({phase.name}, attack {attack_s:.4f}s)")

    def _track_motion(self, view, now, events):
        if view is not None:
            shake, vibrato_hz = self.motion.update(view, now)
            events.append(SetHandShake(shake))
            events.append(SetHandVibratoHz(vibrato_hz))

    def _reset_motion(self, events):
        self.motion.reset()
        events.append(SetHandShake(0.0))
        events.append(SetHandVibratoHz(0.0))

    def _release(self, release_s, events, *, reason=None):
        events.append(NoteOff(release_s))
        self.state.voice_active = False
        self.state.gesture_started_at = None
        self.state.pluck_position = None
        self.safety.voice_stopped()
        logger.debug(f"Voice off ({reason}, release {release_s:.4f}s)")

    # -------------------------------------------------------------------------------
    # Safety
    # -------------------------------------------------------------------------------

    def _lose_sound_hand(self, now, events):
        """The sound hand has been missing for too long: forget where it was."""
        self.smoothing[SOUND].reset()
        self.state.prev_pinch = self.state.prev_pinch_at = None
        self.state.depth_at = None
        self.state.zone = Zone.NONE
        if not self.state.voice_active:
            self._set_phase(GesturePhase.IDLE)
            self._hide_cursor(events)

    def _run_watchdogs(self, now, events):
        if self._pluck_expired(now):
            self._release(self.config.pluck.release_s, events, reason=PLUCK_TIMEOUT)
            self._set_phase(GesturePhase.IDLE)
            self._hide_cursor(events)
            return
        reason = self.safety.release_reason(now)
        if reason is not None:
            self._force_release(reason, events)

    def _force_release(self, reason: str, events: list):
        logger.info(f"Forcing voice release: {reason}")
        self._release(self.config.safety.release_s, events, reason=reason)
        self._set_phase(GesturePhase.IDLE)
        self._hide_cursor(events)
