# ===============================
# File: harmonicon/labeling.py
# ===============================
from __future__ import annotations
from dataclasses import dataclass
from enum import Enum
from typing import List, Optional, Sequence, Set, Tuple
import re

from .notation import pitch_class, spell, split_chord, PitchLike


class ChordQuality(Enum):
    """Chord shapes known to the detector, in matching order.

    value = (symbol suffix, intervals above the root in root-position order)
    """
    MAJOR             = ("",     (0, 4, 7))
    MINOR             = ("m",    (0, 3, 7))
    DIMINISHED        = ("dim",  (0, 3, 6))
    AUGMENTED         = ("aug",  (0, 4, 8))
    MAJOR_7           = ("maj7", (0, 4, 7, 11))
    MINOR_7           = ("m7",   (0, 3, 7, 10))
    DOMINANT_7        = ("7",    (0, 4, 7, 10))
    HALF_DIMINISHED_7 = ("m7b5", (0, 3, 6, 10))
    DIMINISHED_7      = ("dim7", (0, 3, 6, 9))
    AUGMENTED_7       = ("7#5",  (0, 4, 8, 10))
    DOMINANT_7_FLAT_5 = ("7b5",  (0, 4, 6, 10))
    MAJOR_9           = ("maj9", (0, 4, 7, 11, 14))
    MINOR_9           = ("m9",   (0, 3, 7, 10, 14))
    DOMINANT_9        = ("9",    (0, 4, 7, 10, 14))

    @property
    def suffix(self) -> str:
        return self.value[0]

    @property
    def intervals(self) -> Tuple[int, ...]:
        return self.value[1]

    @property
    def pitch_set(self) -> frozenset:
        return frozenset(i % 12 for i in self.intervals)

    @property
    def size(self) -> int:
        return len(self.intervals)

    @property
    def is_triad(self) -> bool:
        return self.size == 3

    @property
    def is_seventh(self) -> bool:
        return self.size == 4

    @property
    def is_ninth(self) -> bool:
        return self.size == 5

    @property
    def triad(self) -> "ChordQuality":
        """Underlying triad: maj7/7/9 -> MAJOR, m7/m9 -> MINOR, m7b5/dim7 -> DIMINISHED..."""
        return base_triad(set(self.intervals)) or self

    @property
    def is_diminished_family(self) -> bool:
        return self in (ChordQuality.DIMINISHED, ChordQuality.HALF_DIMINISHED_7,
                        ChordQuality.DIMINISHED_7)

    @property
    def has_altered_fifth(self) -> bool:
        """Raised or lowered fifth outside the diminished families (aug, 7#5, 7b5)."""
        I = set(self.intervals)
        return 7 not in I and not self.is_diminished_family


SUFFIX_TO_QUALITY = {q.suffix: q for q in ChordQuality}

# Extra spellings accepted when parsing symbols
SUFFIX_ALIASES = {
    "maj": "", "M": "", "min": "m", "-": "m", "°": "dim", "o": "dim",
    "+": "aug", "M7": "maj7", "Δ7": "maj7", "min7": "m7", "-7": "m7",
    "ø": "m7b5", "ø7": "m7b5", "o7": "dim7", "°7": "dim7", "M9": "maj9",
    "min9": "m9", "+7": "7#5", "aug7": "7#5",
}

NOTE_RE = r"[A-G](?:#|b|♯|♭)?"

LABEL_RX = re.compile(fr"^(?P<root>{NOTE_RE})(?P<body>[^/]*)$")


@dataclass(frozen=True)
class ChordSpec:
    """An abstract chord: root pitch class + quality."""
    root: int
    quality: ChordQuality

    @property
    def tones(self) -> List[int]:
        return chord_tones(self.root, self.quality)

    def symbol(self, key_root: PitchLike | None = None) -> str:
        return chord_symbol(self.root, self.quality, key_root=key_root)


def base_triad(I: Set[int]) -> Optional[ChordQuality]:
    """Triad family of an interval set, or None if it holds no triad."""
    has_m3, has_M3 = 3 in I, 4 in I
    has_P5, has_d5, has_A5 = 7 in I, 6 in I, 8 in I
    if has_M3 and has_P5:
        return ChordQuality.MAJOR
    if has_m3 and has_P5:
        return ChordQuality.MINOR
    if has_M3 and has_A5:
        return ChordQuality.AUGMENTED
    if has_m3 and has_d5:
        return ChordQuality.DIMINISHED
    # 7b5: major third over a lowered fifth, still heard as major
    if has_M3 and has_d5:
        return ChordQuality.MAJOR
    return None


def chord_tones(root: int, quality: ChordQuality) -> List[int]:
    """Root-position pitch classes, e.g. (0, DOMINANT_9) -> [0, 4, 7, 10, 2]."""
    return [(root + i) % 12 for i in quality.intervals]


def quality_for_intervals(intervals: Sequence[int]) -> Optional[ChordQuality]:
    """Exact shape lookup for stacked intervals above a root (order ignored)."""
    wanted = frozenset(i % 12 for i in intervals)
    for q in ChordQuality:
        if q.pitch_set == wanted and q.size == len(intervals):
            return q
    return None


def chord_symbol(root: PitchLike, quality: ChordQuality, bass: PitchLike | None = None,
                 key_root: PitchLike | None = None) -> str:
    name = spell(pitch_class(root), key_root) + quality.suffix
    if bass is None or pitch_class(bass) == pitch_class(root):
        return name
    return f"{name}/{spell(pitch_class(bass), key_root)}"


def parse_chord_symbol(symbol: str) -> Tuple[ChordSpec, Optional[int]]:
    """
    'C7' -> (ChordSpec(0, DOMINANT_7), None) ; 'Am/E' -> (ChordSpec(9, MINOR), 4)
    Raises ValueError on unknown symbols.
    """
    head, bass = split_chord(symbol.strip())
    m = LABEL_RX.match(head)
    if not m:
        raise ValueError(f"Unknown chord symbol: {symbol!r}")
    body = m.group("body")
    body = SUFFIX_ALIASES.get(body, body)
    quality = SUFFIX_TO_QUALITY.get(body)
    if quality is None:
        raise ValueError(f"Unsupported chord quality {m.group('body')!r} in {symbol!r}")
    bass_pc = pitch_class(bass) if bass else None
    return ChordSpec(pitch_class(m.group("root")), quality), bass_pc
