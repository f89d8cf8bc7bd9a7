# ===============================
# File: harmonicon/voicing.py
# ===============================
from __future__ import annotations
from typing import List, Optional, Sequence

from .config import DEFAULT_VOICING, MIN_BASE_OCTAVE, MAX_BASE_OCTAVE
from .labeling import ChordQuality, ChordSpec
from .notation import Note, PitchLike, pitch_class
from . import scale as sc

VOICINGS = ("open", "closed")


def clamp_inversion(inversion: int, size: int) -> int:
    """Nearest valid inversion for a chord of `size` tones (third inversion at most)."""
    if size <= 0:
        return 0
    return min(max(int(inversion), 0), min(3, size - 1))


def bass_octave(base_octave: int, style: str) -> int:
    """open: bass sits one octave below the base octave's C ; closed: inside it."""
    if style not in VOICINGS:
        raise ValueError(f"voicing must be 'open' or 'closed', got {style!r}")
    base = min(max(int(base_octave), MIN_BASE_OCTAVE), MAX_BASE_OCTAVE)
    return base - 1 if style == "open" else base


def voice(tones: Sequence[PitchLike], inversion: int, base_octave: int,
          style: str = DEFAULT_VOICING) -> List[Note]:
    """
    Concrete notes for a chord given in root-position order.

    The tone list is rotated left by `inversion`; the new first tone is the bass.
    A later tone lands in the bass octave, or one octave up when its pitch class
    is below the bass's. Compound tones (the 9th) are pushed up until they sit
    above the previous note, so the result is strictly ascending.

    voice([C, E, G], 1, 3, "open") -> [E2, G2, C3]
    """
    pcs = [pitch_class(t) for t in tones]
    if not pcs:
        return []
    inv = clamp_inversion(inversion, len(pcs))
    rotated = pcs[inv:] + pcs[:inv]
    bass = rotated[0]
    b_oct = bass_octave(base_octave, style)

    out: List[Note] = [Note.of(bass, b_oct)]
    for pc in rotated[1:]:
        octave = b_oct + 1 if pc < bass else b_oct
        while octave * 12 + pc <= out[-1].absolute:
            octave += 1
        out.append(Note.of(pc, octave))
    return out


def chord_for_degree(degree: int, key_root: PitchLike, mode: str,
                     seventh: bool = False, ninth: bool = False) -> Optional[ChordSpec]:
    """Diatonic chord of a degree; a ninth that is not a supported shape falls back to the seventh."""
    if ninth:
        chord = sc.diatonic_ninth(degree, key_root, mode)
        if chord is not None:
            return chord
        return sc.diatonic_seventh(degree, key_root, mode)
    if seventh:
        return sc.diatonic_seventh(degree, key_root, mode)
    return sc.diatonic_triad(degree, key_root, mode)


def chord_notes_for_degree(degree: int, key_root: PitchLike, mode: str, inversion: int,
                           base_octave: int, style: str = DEFAULT_VOICING,
                           seventh: bool = False, ninth: bool = False) -> List[Note]:
    chord = chord_for_degree(degree, key_root, mode, seventh=seventh, ninth=ninth)
    if chord is None:
        return []
    return voice(chord.tones, inversion, base_octave, style)


def chord_for_root(root: PitchLike, minor: bool, seventh: bool = False,
                   ninth: bool = False) -> ChordSpec:
    """C, Cm, Cmaj7, Cm7, C9, Cm9: a ninth implies the seventh."""
    if ninth:
        quality = ChordQuality.MINOR_9 if minor else ChordQuality.DOMINANT_9
    elif seventh:
        quality = ChordQuality.MINOR_7 if minor else ChordQuality.MAJOR_7
    else:
        quality = ChordQuality.MINOR if minor else ChordQuality.MAJOR
    return ChordSpec(pitch_class(root), quality)


def chord_notes_for_root(root: PitchLike, minor: bool, inversion: int, base_octave: int,
                         style: str = DEFAULT_VOICING, seventh: bool = False,
                         ninth: bool = False) -> List[Note]:
    chord = chord_for_root(root, minor, seventh=seventh, ninth=ninth)
    return voice(chord.tones, inversion, base_octave, style)
