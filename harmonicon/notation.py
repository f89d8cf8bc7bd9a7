# harmonicon/notation.py
from __future__ import annotations
from dataclasses import dataclass
from typing import Tuple, Union
import re

import music21 as m21

from .config import MIN_OCTAVE, MAX_OCTAVE

SHARP_NAMES = ("C", "C#", "D", "D#", "E", "F", "F#", "G", "G#", "A", "A#", "B")
FLAT_NAMES  = ("C", "Db", "D", "Eb", "E", "F", "Gb", "G", "Ab", "A", "Bb", "B")

SHARP_TO_FLAT = {"C#":"Db","D#":"Eb","F#":"Gb","G#":"Ab","A#":"Bb"}
FLAT_TO_SHARP = {v:k for k,v in SHARP_TO_FLAT.items()}

# Key roots conventionally written with flats (circle of fifths, flat side)
FLAT_KEYS = {"F", "Bb", "Eb", "Ab", "Db", "Gb", "Cb"}
FLAT_KEY_PCS = {5, 10, 3, 8, 1, 6}

INTERVAL_NAMES = ("P1", "m2", "M2", "m3", "M3", "P4", "TT", "P5", "m6", "M6", "m7", "M7")

NOTE_RX = re.compile(r"^(?P<step>[A-Ga-g])(?P<acc>(?:#|b|♯|♭)*)(?P<octave>-?\d+)?$")

PitchLike = Union[int, str]


@dataclass(frozen=True, order=True)
class Note:
    """A pitch class in a given octave. Orders by absolute pitch."""
    octave: int
    pitch_class: int

    def __post_init__(self):
        # inputs come from closed internal enumerations: clamp, never raise
        object.__setattr__(self, "pitch_class", min(max(int(self.pitch_class), 0), 11))
        object.__setattr__(self, "octave", min(max(int(self.octave), MIN_OCTAVE), MAX_OCTAVE))

    @classmethod
    def of(cls, pitch: PitchLike, octave: int) -> "Note":
        return cls(octave=octave, pitch_class=pitch_class(pitch))

    @property
    def absolute(self) -> int:
        return self.octave * 12 + self.pitch_class

    @property
    def midi(self) -> int:
        return self.absolute + 12

    def name(self, key_root: PitchLike | None = None) -> str:
        return spell(self.pitch_class, key_root)

    def label(self, key_root: PitchLike | None = None) -> str:
        return f"{self.name(key_root)}{self.octave}"

    def as_pair(self, key_root: PitchLike | None = None) -> Tuple[str, int]:
        return self.name(key_root), self.octave


def _normalize_name(name: str) -> str:
    return name.strip().replace("♯", "#").replace("♭", "b")


def _to_m21_name(text: str) -> str:
    """'Bb3' -> 'B-3' (music21 writes flats as '-')."""
    m = NOTE_RX.match(text.strip())
    if not m:
        raise ValueError(f"Unknown note name: {text!r}")
    acc = m.group("acc").replace("♯", "#").replace("♭", "-").replace("b", "-")
    return m.group("step").upper() + acc + (m.group("octave") or "")


def pitch_class(pitch: PitchLike) -> int:
    """Pitch class of an int (clamped to 0..11) or a note name (any spelling)."""
    if isinstance(pitch, int):
        return min(max(pitch, 0), 11)
    return m21.pitch.Pitch(_to_m21_name(pitch)).pitchClass


def as_note(value: "Note | Tuple[PitchLike, int] | str") -> Note:
    """Note, (pitch, octave) pair or note name such as 'F#3'."""
    if isinstance(value, Note):
        return value
    if isinstance(value, str):
        return parse_note(value)
    pitch, octave = value
    return Note.of(pitch, octave)


def parse_note(text: str, default_octave: int = 4) -> Note:
    """
    Note name with optional octave -> sounding Note.
      'C4' -> (0, 4) ; 'Bb3' -> (10, 3) ; 'B#3' -> (0, 4) ; 'Cb4' -> (11, 3)
    """
    p = m21.pitch.Pitch(_to_m21_name(text))
    if p.octave is None:
        p.octave = default_octave
    midi = int(p.midi)
    return Note(octave=midi // 12 - 1, pitch_class=midi % 12)


# ---- SpellingRules ----------------------------------------------------------

def uses_flat_spelling(key_root: PitchLike | None) -> bool:
    if key_root is None:
        return False
    if isinstance(key_root, int):
        return key_root in FLAT_KEY_PCS
    return _normalize_name(key_root) in FLAT_KEYS


def to_flat_spelling(pitch: PitchLike) -> str:
    return FLAT_NAMES[pitch_class(pitch)]


def to_sharp_spelling(pitch: PitchLike) -> str:
    return SHARP_NAMES[pitch_class(pitch)]


def spell(pitch: PitchLike, key_root: PitchLike | None = None) -> str:
    if uses_flat_spelling(key_root):
        return to_flat_spelling(pitch)
    return to_sharp_spelling(pitch)


def split_chord(ch: str) -> Tuple[str, str|None]:
    # "B/F#" -> ("B", "F#") ; "F#m7" -> ("F#m7", None)
    if "/" in ch:
        root, bass = ch.split("/", 1)
        return root, bass
    return ch, None


def join_chord(root: str, bass: str|None) -> str:
    return f"{root}/{bass}" if bass else root


def respell_chord(symbol: str, flats: bool) -> str:
    """Switch root and bass of a chord symbol to flat or sharp names.
    'C#m7/G#' -> 'Dbm7/Ab' (flats=True) ; 'Bbmaj7' -> 'A#maj7' (flats=False)
    """
    head, bass = split_chord(_normalize_name(symbol))
    table = SHARP_TO_FLAT if flats else FLAT_TO_SHARP
    root = head[:2] if len(head) > 1 and head[1] in "#b" else head[:1]
    body = head[len(root):]
    new_bass = table.get(bass, bass) if bass else None
    return join_chord(table.get(root, root) + body, new_bass)


# ---- display helpers ----------------------------------------------------------

def format_note(note: str) -> str:
    """ASCII accidentals -> music symbols: 'C#' -> 'C♯', 'Bb' -> 'B♭'."""
    return re.sub(r"([A-Ga-g])b", r"\1♭", note.replace("#", "♯"))


def unformat_note(note: str) -> str:
    """Inverse of format_note; '°' becomes 'dim'."""
    return note.replace("♯", "#").replace("♭", "b").replace("°", "dim")


def interval_name(semitones: int) -> str:
    """Figured-bass interval label of a semitone distance above the bass."""
    return INTERVAL_NAMES[semitones % 12]
