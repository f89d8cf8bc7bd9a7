# ===============================
# File: harmonicon/midi_bridge.py
# ===============================
"""
MIDI in/out for an InputSession, over mido messages.

IN : note_on (vel > 0) -> session.add_note(..., "midi")
     note_off, or note_on vel 0 -> session.remove_note(..., "midi")
OUT: NoteEvents published by the session -> mido.Message on channel 1

Notes coming in are tagged "midi" (external), so the session never
publishes them back and there is no feedback loop.
"""
from __future__ import annotations
from typing import Any, Callable, Dict, Optional
import logging

import mido

from .config import MIDI_CHANNEL
from .events import NOTE_ON, NoteEvent
from .notation import Note
from .session import InputSession, NoteSource

log = logging.getLogger(__name__)

LOWEST_MIDI_NOTE = 12     # C0


def midi_to_note(midi: int) -> Note:
    # 60 -> C4
    return Note(octave=midi // 12 - 1, pitch_class=midi % 12)


def note_to_midi(note: Note) -> int:
    return min(max(note.midi, 0), 127)


def event_to_message(event: NoteEvent, channel: int = MIDI_CHANNEL) -> mido.Message:
    if event.type == NOTE_ON:
        return mido.Message("note_on", note=note_to_midi(event.note),
                            velocity=min(max(event.velocity, 0), 127), channel=channel)
    return mido.Message("note_off", note=note_to_midi(event.note), velocity=0, channel=channel)


class MidiBridge:
    def __init__(self, session: InputSession, channel: int = MIDI_CHANNEL):
        self.session = session
        self.channel = channel
        self.output: Optional[Any] = None      # anything with .send(msg)
        self._pressed: Dict[int, Note] = {}
        self._unsubscribe: Optional[Callable[[], None]] = session.bus.subscribe(self._on_event)

    # ---- IN --------------------------------------------------------------
    def handle_message(self, msg: mido.Message) -> None:
        if msg.type not in ("note_on", "note_off"):
            return
        if msg.note < LOWEST_MIDI_NOTE:
            # sous C0 : pas de Note distincte
            log.debug("midi note %d below C0 ignored", msg.note)
            return
        if msg.type == "note_on" and msg.velocity > 0:
            note = midi_to_note(msg.note)
            self._pressed[msg.note] = note
            self.session.add_note(note, NoteSource.MIDI, msg.velocity)
        elif msg.type == "note_off" or (msg.type == "note_on" and msg.velocity == 0):
            note = self._pressed.pop(msg.note, None)
            if note is None:
                log.debug("note_off for unseen note %d ignored", msg.note)
                return
            self.session.remove_note(note, NoteSource.MIDI)

    def release_all(self) -> None:
        """Drop hanging notes, e.g. when the input device changes."""
        for note in self._pressed.values():
            self.session.remove_note(note, NoteSource.MIDI)
        self._pressed.clear()

    @property
    def pressed(self) -> Dict[int, Note]:
        return dict(self._pressed)

    # ---- OUT -------------------------------------------------------------
    def attach_output(self, port: Optional[Any]) -> None:
        self.output = port

    def _on_event(self, event: NoteEvent) -> None:
        if self.output is None:
            return
        msg = event_to_message(event, self.channel)
        log.debug("midi out %s", msg)
        self.output.send(msg)

    def close(self) -> None:
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None
        self.output = None


def open_input(bridge: MidiBridge, name: Optional[str] = None):
    """Open a mido input port feeding the bridge; the previous device's notes are released."""
    bridge.release_all()
    port = mido.open_input(name, callback=bridge.handle_message)
    log.info("MIDI input: %s", port.name)
    return port


def open_output(bridge: MidiBridge, name: Optional[str] = None):
    port = mido.open_output(name)
    bridge.attach_output(port)
    log.info("MIDI output: %s", port.name)
    return port
