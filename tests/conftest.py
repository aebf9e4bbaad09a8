"""Shared builders for the handtheremin tests."""

import pytest

from handtheremin.events import NoteOff, NoteOn, NoteUpdate
from handtheremin.hand_features import HandObservation, LandmarkFrame
from handtheremin.interpreter import GestureInterpreter

FRAME_DT = 1 / 30
POINTER_DEPTH = 0.45
PAD_DEPTH = 0.2


def make_sound_hand(x=0.4, y=0.55, *, depth=POINTER_DEPTH, pinch=None, handedness='Right'):
    return HandObservation(
        handedness=handedness,
        palm=(x, y),
        wrist=(x, y + 0.2),
        depth_m=depth,
        pinch_ratio=pinch,
    )


def make_filter_hand(x=0.2, wrist_y=0.6, *, palm_facing=None, handedness='Left'):
    return HandObservation(
        handedness=handedness,
        palm=(x, wrist_y - 0.2),
        wrist=(x, wrist_y),
        palm_facing=palm_facing,
    )


def make_frame(*hands, t=0.0, image_size=None):
    return LandmarkFrame(hands=hands, timestamp=t, image_size=image_size)


def run_frames(interpreter, frames):
    """Feed frames (or ``(t, None)`` pairs) and return the events of each frame."""
    per_frame = []
    for frame in frames:
        if isinstance(frame, tuple):
            t, frame = frame
            per_frame.append(interpreter.update(frame, now=t))
        else:
            per_frame.append(interpreter.update(frame))
    return per_frame


def flatten(per_frame):
    return [event for events in per_frame for event in events]


def of_type(events, event_type):
    return [event for event in events if isinstance(event, event_type)]


def assert_voices_alternate(events):
    """Every NoteOn is followed by exactly one NoteOff before the next NoteOn."""
    active = False
    for event in events:
        if isinstance(event, NoteOn):
            assert not active, "NoteOn while a voice is active"
            active = True
        elif isinstance(event, NoteOff):
            assert active, "NoteOff without an active voice"
            active = False
        elif isinstance(event, NoteUpdate):
            assert active, "NoteUpdate without an active voice"


@pytest.fixture
def interpreter():
    return GestureInterpreter()

