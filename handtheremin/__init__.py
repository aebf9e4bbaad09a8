"""
Play a theremin-like instrument with your hands.

The hand tracker (MediaPipe, a depth camera plugin, ...) gives us, per video
frame, the landmarks of up to two hands. This package interprets that noisy
stream as an instrument: the right hand plays, the left hand shapes the sound.

* Bring the right hand close to the camera (the "pad" zone) and a note sounds
  for as long as it stays there. How fast you come in sets how hard the attack
  is, how fast you pull back sets the release.
* Hover farther away (the "pointer" zone) and a quick thumb-index pinch plucks
  a short note.
* Opening the right hand's pinch adds reverb.
* The left hand's height sets the filter resonance, the way its palm faces the
  camera modulates the cutoff.

The interpreter only decides *when* notes start, move and stop, and with what
shaping: the sound engine and the on-screen cursor are collaborators that
receive its events (see ``handtheremin.events``).

>>> from handtheremin import GestureInterpreter, LandmarkFrame, HandObservation
>>> interpreter = GestureInterpreter('desktop')
>>> near_hand = HandObservation(handedness='Right', palm=(0.5, 0.5), depth_m=0.2)
>>> events = interpreter.update(LandmarkFrame([near_hand], timestamp=0.0))
>>> [type(event).__name__ for event in events]
['SetHandShake', 'SetHandVibratoHz', 'NoteOn', 'NoteUpdate', 'Pulse', 'ShowCursor']
>>> [type(event).__name__ for event in interpreter.teardown()]
['NoteOff', 'SetHandShake', 'SetHandVibratoHz', 'HideCursor', 'SetReverbEnabled']
"""

from handtheremin.config import (
    InterpreterConfig,
    InvalidConfigError,
    MotionConfig,
    preset_config,
    desktop_config,
    mobile_config,
)
from handtheremin.hand_features import (
    HandObservation,
    LandmarkFrame,
    observations_from_mediapipe,
    observation_from_native,
    frame_from_mediapipe,
    frame_from_native,
    pinch_ratio,
)
from handtheremin.interpreter import GestureInterpreter, GesturePhase, GestureState
from handtheremin.events import (
    NoteOn,
    NoteUpdate,
    NoteOff,
    SetFilterResonance,
    SetFilterCutoffMod,
    SetReverb,
    SetReverbEnabled,
    SetHandShake,
    SetHandVibratoHz,
    ShowCursor,
    HideCursor,
    Pulse,
    OutputAdapter,
    EventRecorder,
)
from handtheremin.motion import HandMotion
from handtheremin.smoothing import ema
from handtheremin.zones import Zone, classify_zone
from handtheremin.script_utils import (
    SessionFormatError,
    read_session,
    run_session,
    frame_from_dict,
    frame_to_dict,
)
