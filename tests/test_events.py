"""Tests for the output events and their dispatch."""

from unittest.mock import MagicMock

import pytest

from handtheremin.events import (
    EventRecorder,
    HideCursor,
    NoteOff,
    NoteOn,
    NoteUpdate,
    OutputAdapter,
    Pulse,
    SetFilterCutoffMod,
    SetFilterResonance,
    SetHandShake,
    SetHandVibratoHz,
    SetReverb,
    SetReverbEnabled,
    ShowCursor,
    event_methods,
    event_to_dict,
)


class TestOutputAdapter:
    """Tests for forwarding events to collaborators."""

    def test_audio_events(self):
        audio = MagicMock()
        adapter = OutputAdapter(audio)
        adapter(
            [
                NoteOn(0.01),
                NoteUpdate(0.2, 0.7),
                SetFilterResonance(0.5),
                SetFilterCutoffMod(0.25),
                SetReverb(0.3, 0.88),
                SetReverbEnabled(True),
                SetHandShake(2.5),
                SetHandVibratoHz(5.0),
                NoteOff(0.08),
            ]
        )
        audio.note_on.assert_called_once_with(0.01)
        audio.note_update.assert_called_once_with(0.2, 0.7)
        audio.set_filter_resonance.assert_called_once_with(0.5)
        audio.set_filter_cutoff_mod.assert_called_once_with(0.25)
        audio.set_reverb.assert_called_once_with(0.3, 0.88)
        audio.set_reverb_enabled.assert_called_once_with(True)
        audio.set_hand_shake.assert_called_once_with(2.5)
        audio.set_hand_vibrato_hz.assert_called_once_with(5.0)
        audio.note_off.assert_called_once_with(0.08)

    def test_cursor_events(self):
        audio, cursor = MagicMock(), MagicMock()
        OutputAdapter(audio, cursor)([ShowCursor(0.1, 0.2, True), Pulse(0.1, 0.2), HideCursor()])
        cursor.show_cursor.assert_called_once_with(0.1, 0.2, True)
        cursor.pulse.assert_called_once_with(0.1, 0.2)
        cursor.hide_cursor.assert_called_once_with()
        assert not audio.method_calls

    def test_no_cursor_collaborator(self):
        audio = MagicMock()
        OutputAdapter(audio)([ShowCursor(0.1, 0.2, False), NoteOn(0.1)])
        audio.note_on.assert_called_once_with(0.1)
        assert len(audio.method_calls) == 1

    def test_dispatch_order(self):
        recorder = EventRecorder()
        OutputAdapter(recorder, recorder)([NoteOn(0.1), NoteUpdate(0.5, 0.5), Pulse(0.5, 0.5)])
        assert [name for name, _ in recorder.calls] == ['note_on', 'note_update', 'pulse']

    def test_not_an_event(self):
        with pytest.raises(TypeError):
            OutputAdapter(MagicMock()).dispatch(('note_on', 0.1))


class TestEvents:
    """Tests for event helpers."""

    def test_every_event_has_a_method(self):
        assert len(set(event_methods.values())) == len(event_methods)

    def test_event_to_dict(self):
        assert event_to_dict(HideCursor()) == {'event': 'hide_cursor'}
        assert event_to_dict(ShowCursor(0.5, 0.4, True)) == {
            'event': 'show_cursor',
            'x': 0.5,
            'y': 0.4,
            'hovering': True,
        }

    def test_recorder_count(self):
        recorder = EventRecorder()
        recorder.note_on(0.1)
        recorder.note_off(0.08)
        recorder.note_on(0.1)
        assert recorder.count('note_on') == 2
        recorder.clear()
        assert recorder.calls == []
