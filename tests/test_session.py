"""InputSession: reference-counted holds, views and chord selection."""
import pytest

from harmonicon.events import NOTE_OFF, NOTE_ON
from harmonicon.midi_bridge import MidiBridge
from harmonicon.modifiers import Modifier, ModifierSource
from harmonicon.notation import Note
from harmonicon.session import InputSession, NoteSource


class FakeAudio:
    def __init__(self):
        self.calls = []

    def play_notes(self, notes):
        self.calls.append(("play", list(notes)))

    def stop_notes(self, notes):
        self.calls.append(("stop", list(notes)))

    def stop_all(self):
        self.calls.append(("stop_all",))


@pytest.fixture
def audio():
    return FakeAudio()


@pytest.fixture
def session(audio):
    return InputSession(audio=audio)


@pytest.fixture
def events(session):
    seen = []
    session.bus.subscribe(lambda e: seen.append((e.type, e.note)))
    return seen


C4 = Note.of("C", 4)


def test_reference_counting(session):
    session.add_note("C4", "keyboard")
    session.add_note("C4", "pointer")
    session.remove_note("C4", "keyboard")
    assert session.is_active(C4)
    session.remove_note("C4", "pointer")
    assert not session.is_active(C4)


def test_same_source_is_idempotent(session):
    assert session.add_note(C4, NoteSource.KEYBOARD)
    assert not session.add_note(C4, NoteSource.KEYBOARD)
    assert session.remove_note(C4, NoteSource.KEYBOARD)
    assert not session.is_active(C4)
    assert not session.remove_note(C4, NoteSource.KEYBOARD)


def test_audio_only_on_sounding_transitions(session, audio):
    session.add_note(C4, "keyboard")
    session.add_note(C4, "pointer")
    session.remove_note(C4, "keyboard")
    session.remove_note(C4, "pointer")
    assert audio.calls == [("play", [("C", 4)]), ("stop", [("C", 4)])]


def test_outbound_events_skip_external_source(session, events):
    session.add_note(C4, "midi")
    assert events == []
    session.add_note(C4, "keyboard")
    session.add_note(C4, "pointer")
    assert events == [(NOTE_ON, C4)]
    session.remove_note(C4, "keyboard")
    session.remove_note(C4, "pointer")
    # midi still holds it: silent for audio, released for MIDI out
    assert events == [(NOTE_ON, C4), (NOTE_OFF, C4)]
    assert session.is_active(C4)
    assert session.holders(C4) == {NoteSource.MIDI}


def test_velocity_is_forwarded(session):
    seen = []
    session.bus.subscribe(seen.append)
    session.add_note(C4, "keyboard", velocity=110)
    assert seen[0].velocity == 110


def test_release_source(session):
    session.add_notes(["C4", "E4", "G4"], "keyboard")
    session.add_note("E4", "pointer")
    session.release_source("keyboard")
    assert session.active_notes() == [Note.of("E", 4)]


def test_blur_clears_everything(session, audio, events):
    session.add_note("C4", "keyboard")
    session.add_note("E4", "midi")
    session.modifiers.press(Modifier.EXT7, ModifierSource.KEYBOARD)
    audio.calls.clear()
    events.clear()
    session.blur()
    assert session.active_notes() == []
    assert events == [(NOTE_OFF, C4)]
    assert audio.calls == [("stop_all",)]
    assert not session.modifiers.ext7


def test_clear_when_nothing_is_held(session, audio, events):
    session.clear()
    assert audio.calls == []
    assert events == []


def test_views_are_recomputed(session):
    session.add_notes(["E4", "G4", "Bb4", "C5"], "pointer")
    assert session.detected_chord().symbol == "C7/E"
    session.remove_note("Bb4", "pointer")
    assert session.detected_chord().symbol == "C/E"
    session.remove_note("C5", "pointer")
    assert session.detected_chord() is None


def test_highlight_and_degrees(session):
    session.add_notes([("Bb", 3), ("D", 4), ("F", 4), ("F#", 4)], "keyboard")
    assert session.highlighted_notes("F") == [("Bb", 3), ("D", 4), ("F", 4), ("Gb", 4)]
    assert session.highlighted_notes() == [("A#", 3), ("D", 4), ("F", 4), ("F#", 4)]
    degrees = session.note_degrees("F", "major")
    assert degrees[Note.of("Bb", 3)] == 4
    assert degrees[Note.of("F#", 4)] is None


def test_press_degree_uses_modifiers(session):
    assert session.press_degree(1, "C", "major") == \
        [Note.of("C", 2), Note.of("E", 2), Note.of("G", 2)]
    session.modifiers.press(Modifier.EXT7, ModifierSource.KEYBOARD)
    notes = session.press_degree(5, "C", "major")
    assert notes == [Note.of("G", 2), Note.of("B", 2), Note.of("D", 3), Note.of("F", 3)]
    # the previous chord was let go
    assert session.active_notes() == notes
    assert session.detected_chord().symbol == "G7"


def test_press_degree_inversion_and_ninth(session):
    session.modifiers.press(Modifier.INV1, ModifierSource.POINTER)
    assert session.press_degree(1, "C", "major") == \
        [Note.of("E", 2), Note.of("G", 2), Note.of("C", 3)]
    session.modifiers.release(Modifier.INV1, ModifierSource.POINTER)
    session.modifiers.press(Modifier.EXT9, ModifierSource.KEYBOARD)
    notes = session.press_degree(2, "C", "major")
    assert notes == [Note.of("D", 2), Note.of("F", 2), Note.of("A", 2),
                     Note.of("C", 3), Note.of("E", 3)]
    assert session.detected_chord().symbol == "Dm9"


def test_chord_shares_notes_with_other_sources(session):
    session.add_note("E2", "keyboard")
    session.press_chord(["C", "E", "G"])
    session.release_chord()
    assert session.active_notes() == [Note.of("E", 2)]
    assert session.notes_held_by(NoteSource.CHORD) == []


def test_press_chord_inversion(session):
    session.toggle_voicing()
    assert session.press_chord([9, 0, 4], inversion=2) == \
        [Note.of("E", 3), Note.of("A", 3), Note.of("C", 4)]


def test_octave_bounds(session):
    assert session.base_octave == 3
    assert session.decrement_octave() == 3
    assert session.increment_octave() == 4
    assert session.increment_octave() == 5
    assert session.increment_octave() == 5
    assert InputSession(base_octave=9).base_octave == 5


def test_toggle_voicing(session):
    assert session.voicing == "open"
    assert session.toggle_voicing() == "closed"
    assert session.toggle_voicing() == "open"
    with pytest.raises(ValueError):
        InputSession(voicing="spread")


def test_works_without_audio():
    s = InputSession()
    s.add_note("C4", "keyboard")
    s.blur()
    assert s.active_notes() == []


class FailingPort:
    def send(self, msg):
        raise OSError("MIDI device unplugged")


def test_blur_resets_even_when_midi_out_fails(session, audio):
    bridge = MidiBridge(session)
    session.add_note("C4", "keyboard")
    session.modifiers.press(Modifier.EXT7, ModifierSource.KEYBOARD)
    bridge.attach_output(FailingPort())
    audio.calls.clear()
    with pytest.raises(OSError):
        session.blur()
    assert session.active_notes() == []
    assert not session.modifiers.ext7
    assert audio.calls == [("stop_all",)]
