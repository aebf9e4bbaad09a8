"""
Output events, and the adapter that forwards them to the audio and cursor
collaborators.

Events are small named tuples. Each maps to the collaborator method of the same
(snake_case) name, called with the event's fields:

>>> event_method(NoteOn(attack_s=0.01))
('audio', 'note_on')
>>> event_method(ShowCursor(0.5, 0.5, hovering=True))
('cursor', 'show_cursor')
"""

from typing import Iterable, List, NamedTuple


# -------------------------------------------------------------------------------
# Event types
# -------------------------------------------------------------------------------


class NoteOn(NamedTuple):
    attack_s: float


class NoteUpdate(NamedTuple):
    x: float
    y: float


class NoteOff(NamedTuple):
    release_s: float


class SetFilterResonance(NamedTuple):
    value: float


class SetFilterCutoffMod(NamedTuple):
    value: float


class SetReverb(NamedTuple):
    wet: float
    dry: float


class SetReverbEnabled(NamedTuple):
    enabled: bool


class SetHandShake(NamedTuple):
    value: float


class SetHandVibratoHz(NamedTuple):
    hz: float


class ShowCursor(NamedTuple):
    x: float
    y: float
    hovering: bool


class HideCursor(NamedTuple):
    pass


class Pulse(NamedTuple):
    x: float
    y: float


# event type -> (collaborator, method name)
event_methods = {
    NoteOn: ('audio', 'note_on'),
    NoteUpdate: ('audio', 'note_update'),
    NoteOff: ('audio', 'note_off'),
    SetFilterResonance: ('audio', 'set_filter_resonance'),
    SetFilterCutoffMod: ('audio', 'set_filter_cutoff_mod'),
    SetReverb: ('audio', 'set_reverb'),
    SetReverbEnabled: ('audio', 'set_reverb_enabled'),
    SetHandShake: ('audio', 'set_hand_shake'),
    SetHandVibratoHz: ('audio', 'set_hand_vibrato_hz'),
    ShowCursor: ('cursor', 'show_cursor'),
    HideCursor: ('cursor', 'hide_cursor'),
    Pulse: ('cursor', 'pulse'),
}


def event_method(event):
    try:
        return event_methods[type(event)]
    except KeyError:
        raise TypeError(f"Not an output event: {event!r}") from None


def event_to_dict(event) -> dict:
    """
    JSON-friendly form of an event.

    >>> event_to_dict(SetReverb(wet=0.5, dry=0.8))
    {'event': 'set_reverb', 'wet': 0.5, 'dry': 0.8}
    """
    _, method = event_method(event)
    return dict({'event': method}, **event._asdict())


# -------------------------------------------------------------------------------
# Dispatch
# -------------------------------------------------------------------------------


class OutputAdapter:
    """
    Forward events to an audio collaborator and an (optional) cursor collaborator.

    Collaborators are duck-typed: any object with the needed methods will do.
    Cursor events are dropped when there is no cursor collaborator.
    """

    def __init__(self, audio, cursor=None):
        self.audio = audio
        self.cursor = cursor

    def dispatch(self, event):
        target_name, method_name = event_method(event)
        target = getattr(self, target_name)
        if target is None:
            return
        getattr(target, method_name)(*event)

    def __call__(self, events: Iterable):
        for event in events:
            self.dispatch(event)


class EventRecorder:
    """
    A collaborator that records every call it gets, as ``(method_name, args)``.

    Can stand in for both the audio and the cursor collaborator.

    >>> recorder = EventRecorder()
    >>> OutputAdapter(recorder, recorder)([NoteOn(0.01), HideCursor()])
    >>> recorder.calls
    [('note_on', (0.01,)), ('hide_cursor', ())]
    """

    def __init__(self):
        self.calls: List[tuple] = []

    def __getattr__(self, name):
        if name.startswith('_'):
            raise AttributeError(name)

        def record(*args):
            self.calls.append((name, args))

        return record

    def clear(self):
        self.calls.clear()

    def count(self, method_name: str) -> int:
        return sum(1 for name, _ in self.calls if name == method_name)
