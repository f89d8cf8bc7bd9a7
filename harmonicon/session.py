# ===============================
# File: harmonicon/session.py
# ===============================
"""
InputSession: one authoritative set of sounding notes fed by every input.

Membership is reference-counted per source: a note sounds while at least one
source holds it. Adding twice from the same source or releasing a note the
source never held changes nothing.

    keyboard / pointer / chord  -> audio + outbound NoteEvents
    midi (external)             -> audio only, never echoed back out

Chord, highlight and degree views are recomputed on every call.
"""
from __future__ import annotations
from enum import Enum
from typing import Dict, Iterable, List, Optional, Protocol, Set, Tuple
import logging

from .config import (DEFAULT_CHORD_OCTAVE, DEFAULT_VELOCITY, DEFAULT_VOICING,
                     MIN_CHORD_OCTAVE, MAX_CHORD_OCTAVE)
from .detection import ChordIdentity, NoteLike, detect_chord
from .events import NoteEventBus
from .modifiers import ModifierStateMachine
from .notation import Note, PitchLike, as_note
from .scale import scale_membership
from .voicing import VOICINGS, chord_notes_for_degree, voice

log = logging.getLogger(__name__)


class NoteSource(str, Enum):
    KEYBOARD = "keyboard"
    POINTER = "pointer"
    MIDI = "midi"
    CHORD = "chord"

    @property
    def is_external(self) -> bool:
        return self is NoteSource.MIDI


class AudioOutput(Protocol):
    def play_notes(self, notes: List[Tuple[str, int]]) -> None: ...
    def stop_notes(self, notes: List[Tuple[str, int]]) -> None: ...
    def stop_all(self) -> None: ...


class InputSession:
    def __init__(self, audio: Optional[AudioOutput] = None, bus: Optional[NoteEventBus] = None,
                 modifiers: Optional[ModifierStateMachine] = None,
                 base_octave: int = DEFAULT_CHORD_OCTAVE, voicing: str = DEFAULT_VOICING):
        self.audio = audio
        self.bus = bus if bus is not None else NoteEventBus()
        self.modifiers = modifiers if modifiers is not None else ModifierStateMachine()
        self.base_octave = min(max(int(base_octave), MIN_CHORD_OCTAVE), MAX_CHORD_OCTAVE)
        if voicing not in VOICINGS:
            raise ValueError(f"voicing must be 'open' or 'closed', got {voicing!r}")
        self.voicing = voicing
        self._holds: Dict[Note, Set[NoteSource]] = {}

    # ---- membership ------------------------------------------------------
    @staticmethod
    def _outbound(holders: Set[NoteSource]) -> bool:
        return any(not s.is_external for s in holders)

    def add_notes(self, notes: Iterable[NoteLike | str], source: NoteSource | str,
                  velocity: int = DEFAULT_VELOCITY) -> List[Note]:
        """Hold notes for a source. Returns the notes that started sounding."""
        source = NoteSource(source)
        started: List[Note] = []
        for n in map(as_note, notes):
            holders = self._holds.setdefault(n, set())
            if source in holders:
                continue
            sounding, outbound = bool(holders), self._outbound(holders)
            holders.add(source)
            log.debug("hold %s (%s) -> %s", n.label(), source.value,
                      sorted(s.value for s in holders))
            if not sounding:
                started.append(n)
            if not outbound and not source.is_external:
                self.bus.note_on(n, velocity)
        if started and self.audio is not None:
            self.audio.play_notes([n.as_pair() for n in started])
        return started

    def remove_notes(self, notes: Iterable[NoteLike | str], source: NoteSource | str) -> List[Note]:
        """Release notes held by a source. Returns the notes that stopped sounding."""
        source = NoteSource(source)
        stopped: List[Note] = []
        for n in map(as_note, notes):
            holders = self._holds.get(n)
            if not holders or source not in holders:
                continue
            outbound = self._outbound(holders)
            holders.discard(source)
            log.debug("release %s (%s)", n.label(), source.value)
            if outbound and not self._outbound(holders):
                self.bus.note_off(n)
            if not holders:
                del self._holds[n]
                stopped.append(n)
        if stopped and self.audio is not None:
            self.audio.stop_notes([n.as_pair() for n in stopped])
        return stopped

    def add_note(self, note: NoteLike | str, source: NoteSource | str,
                 velocity: int = DEFAULT_VELOCITY) -> bool:
        return bool(self.add_notes([note], source, velocity))

    def remove_note(self, note: NoteLike | str, source: NoteSource | str) -> bool:
        return bool(self.remove_notes([note], source))

    def notes_held_by(self, source: NoteSource | str) -> List[Note]:
        source = NoteSource(source)
        return sorted(n for n, holders in self._holds.items() if source in holders)

    def release_source(self, source: NoteSource | str) -> List[Note]:
        return self.remove_notes(self.notes_held_by(source), source)

    def clear(self) -> None:
        """Drop every hold from every source in one step."""
        if not self._holds:
            return
        outbound = sorted(n for n, holders in self._holds.items() if self._outbound(holders))
        self._holds = {}
        log.debug("clear: %d outbound note-offs", len(outbound))
        try:
            self.bus.notes_off(outbound)
        finally:
            # audio stops even if a MIDI-out subscriber failed
            if self.audio is not None:
                self.audio.stop_all()

    def blur(self) -> None:
        """Focus lost: nothing stays held, no modifier stays on."""
        try:
            self.clear()
        finally:
            self.modifiers.reset_all()

    # ---- views -----------------------------------------------------------
    def active_notes(self) -> List[Note]:
        return sorted(self._holds)

    def is_active(self, note: NoteLike | str) -> bool:
        return as_note(note) in self._holds

    def holders(self, note: NoteLike | str) -> Set[NoteSource]:
        return set(self._holds.get(as_note(note), ()))

    def detected_chord(self, key_root: PitchLike | None = None) -> Optional[ChordIdentity]:
        return detect_chord(self._holds, key_root)

    def highlighted_notes(self, key_root: PitchLike | None = None) -> List[Tuple[str, int]]:
        return [n.as_pair(key_root) for n in self.active_notes()]

    def note_degrees(self, key_root: PitchLike, mode: str) -> Dict[Note, Optional[int]]:
        return {n: scale_membership(n, key_root, mode) for n in self.active_notes()}

    # ---- chord selection -------------------------------------------------
    def press_degree(self, degree: int, key_root: PitchLike, mode: str) -> List[Note]:
        """Hold the diatonic chord of a degree, voiced with the current modifiers."""
        self.release_chord()
        notes = chord_notes_for_degree(
            degree, key_root, mode,
            inversion=self.modifiers.current_inversion(),
            base_octave=self.base_octave, style=self.voicing,
            seventh=self.modifiers.ext7, ninth=self.modifiers.ext9,
        )
        self.add_notes(notes, NoteSource.CHORD)
        return notes

    def press_chord(self, tones: Iterable[PitchLike], inversion: int = 0) -> List[Note]:
        self.release_chord()
        notes = voice(list(tones), inversion, self.base_octave, self.voicing)
        self.add_notes(notes, NoteSource.CHORD)
        return notes

    def release_chord(self) -> List[Note]:
        return self.release_source(NoteSource.CHORD)

    # ---- display settings ------------------------------------------------
    def increment_octave(self) -> int:
        self.base_octave = min(self.base_octave + 1, MAX_CHORD_OCTAVE)
        return self.base_octave

    def decrement_octave(self) -> int:
        self.base_octave = max(self.base_octave - 1, MIN_CHORD_OCTAVE)
        return self.base_octave

    def toggle_voicing(self) -> str:
        self.voicing = "closed" if self.voicing == "open" else "open"
        return self.voicing
