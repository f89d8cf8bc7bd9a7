# harmonicon/events.py
"""
Outbound note events, decoupled from the session.

    session.add_note -> bus.publish(NoteEvent) <- midi_bridge (subscriber) sends MIDI out

Notes coming *from* MIDI are never published, so nothing is echoed back.
"""
from __future__ import annotations
from dataclasses import dataclass
from typing import Callable, Iterable, List

from .config import DEFAULT_VELOCITY
from .notation import Note

NOTE_ON = "note-on"
NOTE_OFF = "note-off"


@dataclass(frozen=True)
class NoteEvent:
    type: str           # NOTE_ON | NOTE_OFF
    note: Note
    velocity: int = DEFAULT_VELOCITY


Handler = Callable[[NoteEvent], None]


class NoteEventBus:
    def __init__(self):
        self._subscribers: List[Handler] = []

    def subscribe(self, handler: Handler) -> Callable[[], None]:
        """Returns an unsubscribe function."""
        self._subscribers.append(handler)

        def unsubscribe() -> None:
            if handler in self._subscribers:
                self._subscribers.remove(handler)
        return unsubscribe

    def publish(self, event: NoteEvent) -> None:
        for handler in list(self._subscribers):
            handler(event)

    def note_on(self, note: Note, velocity: int = DEFAULT_VELOCITY) -> None:
        self.publish(NoteEvent(NOTE_ON, note, velocity))

    def note_off(self, note: Note) -> None:
        self.publish(NoteEvent(NOTE_OFF, note, 0))

    def notes_on(self, notes: Iterable[Note], velocity: int = DEFAULT_VELOCITY) -> None:
        for n in notes:
            self.note_on(n, velocity)

    def notes_off(self, notes: Iterable[Note]) -> None:
        for n in notes:
            self.note_off(n)
