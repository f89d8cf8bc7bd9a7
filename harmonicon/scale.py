# harmonicon/scale.py
"""
Scale-degree arithmetic for a selected key root and mode.

"minor" always means the relative minor of the selected major key
(C selected + minor -> A natural minor), never the parallel minor.
"""
from __future__ import annotations
from typing import List, Optional, Tuple

from .labeling import ChordQuality, ChordSpec, quality_for_intervals
from .notation import Note, PitchLike, pitch_class

MAJOR_STEPS         = (0, 2, 4, 5, 7, 9, 11)
NATURAL_MINOR_STEPS = (0, 2, 3, 5, 7, 8, 10)

MAJOR_NUMERALS = ("I", "ii", "iii", "IV", "V", "vi", "vii°")
MINOR_NUMERALS = ("i", "ii°", "♭III", "iv", "v", "♭VI", "♭VII")

# Flat spelling only: distance 1 is ♭II, never ♯I
CHROMATIC_NUMERALS = ("I", "♭II", "II", "♭III", "III", "IV",
                      "♭V", "V", "♭VI", "VI", "♭VII", "VII")

MODES = ("major", "minor")


def _check_mode(mode: str) -> str:
    if mode not in MODES:
        raise ValueError(f"mode must be 'major' or 'minor', got {mode!r}")
    return mode


def tonic_root(key_root: PitchLike, mode: str) -> int:
    root = pitch_class(key_root)
    if _check_mode(mode) == "major":
        return root
    return (root + 9) % 12


def scale(key_root: PitchLike, mode: str) -> List[int]:
    tonic = tonic_root(key_root, mode)
    steps = MAJOR_STEPS if mode == "major" else NATURAL_MINOR_STEPS
    return [(tonic + s) % 12 for s in steps]


def _stacked_thirds(degree: int, key_root: PitchLike, mode: str, size: int) -> Optional[ChordSpec]:
    if not 1 <= degree <= 7:
        return None
    sc = scale(key_root, mode)
    tones = [sc[(degree - 1 + 2 * k) % 7] for k in range(size)]
    root = tones[0]
    # ninth sits an octave above the second
    intervals = [(t - root) % 12 + (12 if k == 4 else 0) for k, t in enumerate(tones)]
    quality = quality_for_intervals(intervals)
    if quality is None:
        return None
    return ChordSpec(root, quality)


def diatonic_triad(degree: int, key_root: PitchLike, mode: str) -> Optional[ChordSpec]:
    return _stacked_thirds(degree, key_root, mode, 3)


def diatonic_seventh(degree: int, key_root: PitchLike, mode: str) -> Optional[ChordSpec]:
    return _stacked_thirds(degree, key_root, mode, 4)


def diatonic_ninth(degree: int, key_root: PitchLike, mode: str) -> Optional[ChordSpec]:
    """None for degrees whose stacked ninth is not a supported shape (iii, vii° in major)."""
    return _stacked_thirds(degree, key_root, mode, 5)


def _as_pc(note: Note | PitchLike) -> int:
    return note.pitch_class if isinstance(note, Note) else pitch_class(note)


def scale_membership(note: Note | PitchLike, key_root: PitchLike, mode: str) -> Optional[int]:
    """1-based scale degree of a note, None if it is not in the scale."""
    pc = _as_pc(note)
    sc = scale(key_root, mode)
    return sc.index(pc) + 1 if pc in sc else None


def major_key_degree(note: Note | PitchLike, key_root: PitchLike) -> Optional[int]:
    return scale_membership(note, key_root, "major")


def roman_numeral(degree: int, mode: str) -> Optional[str]:
    if not 1 <= degree <= 7:
        return None
    numerals = MAJOR_NUMERALS if _check_mode(mode) == "major" else MINOR_NUMERALS
    return numerals[degree - 1]


def chromatic_roman_numeral(semitones: int, quality: ChordQuality) -> str:
    base = CHROMATIC_NUMERALS[semitones % 12]
    triad = quality.triad
    if triad in (ChordQuality.MINOR, ChordQuality.DIMINISHED):
        base = base.lower()
    if triad is ChordQuality.DIMINISHED:
        base += "°"
    return base


def chord_degree(root: PitchLike, quality: ChordQuality, key_root: PitchLike, mode: str) -> Optional[int]:
    """Degree of a diatonic chord (root and triad family both match), else None."""
    root_pc = pitch_class(root)
    for degree in range(1, 8):
        triad = diatonic_triad(degree, key_root, mode)
        if triad.root == root_pc and triad.quality is quality.triad:
            return degree
    return None


def chord_roman_numeral(root: PitchLike, quality: ChordQuality, key_root: PitchLike,
                        mode: str) -> Tuple[str, bool]:
    """(numeral, is_diatonic) for any chord in the key."""
    degree = chord_degree(root, quality, key_root, mode)
    if degree is not None:
        return roman_numeral(degree, mode), True
    semitones = (pitch_class(root) - tonic_root(key_root, mode)) % 12
    return chromatic_roman_numeral(semitones, quality), False
