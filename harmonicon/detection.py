# ===============================
# File: harmonicon/detection.py
# ===============================
from __future__ import annotations
from dataclasses import dataclass
from typing import Iterable, List, Optional, Tuple, Union
import logging

from .config import MIN_CHORD_NOTES, MAX_CHORD_NOTES
from .labeling import ChordQuality, chord_tones
from .notation import Note, PitchLike, as_note, spell

log = logging.getLogger(__name__)

NoteLike = Union[Note, Tuple[PitchLike, int]]

ALTERED_FIFTH_PENALTY = 100
SLASH_PENALTY         = 10
NINTH_BONUS           = 5


@dataclass(frozen=True)
class ChordCandidate:
    root: int
    quality: ChordQuality
    bass: int | None            # None = root position
    order: int                  # position in matching order (stable tie-break)

    @property
    def is_slash(self) -> bool:
        return self.bass is not None


@dataclass(frozen=True)
class ChordIdentity:
    root: int
    quality: ChordQuality
    bass: int | None
    inversion: int
    root_name: str
    bass_name: str | None

    @property
    def symbol(self) -> str:
        name = self.root_name + self.quality.suffix
        return f"{name}/{self.bass_name}" if self.bass_name else name

    @property
    def tones(self) -> List[int]:
        return chord_tones(self.root, self.quality)


def unique_pitch_classes(notes: Iterable[NoteLike]) -> List[int]:
    """Pitch classes sorted by the acoustic order of their lowest occurrence."""
    out: List[int] = []
    for n in sorted(as_note(x) for x in notes):
        if n.pitch_class not in out:
            out.append(n.pitch_class)
    return out


def match_candidates(pcs: List[int]) -> List[ChordCandidate]:
    """Every (root, shape) whose pitch-class set equals pcs exactly.
    pcs[0] is the bass. Roots are tried bass-first, shapes in library order.
    """
    wanted = set(pcs)
    bass = pcs[0]
    out: List[ChordCandidate] = []
    for root in pcs:
        for q in ChordQuality:
            if q.size != len(pcs):
                continue
            if {(root + i) % 12 for i in q.intervals} == wanted:
                out.append(ChordCandidate(root=root, quality=q,
                                          bass=None if bass == root else bass,
                                          order=len(out)))
    return out


def candidate_score(c: ChordCandidate, unique_count: int) -> Tuple[int, int]:
    """Sort key, lower is better. Ties fall back to matching order."""
    score = 0
    if c.quality.has_altered_fifth:
        score += ALTERED_FIFTH_PENALTY
    if c.is_slash:
        score += SLASH_PENALTY
    if unique_count == 5 and c.quality.is_ninth:
        score -= NINTH_BONUS
    return score, c.order


def best_candidate(candidates: List[ChordCandidate], unique_count: int) -> Optional[ChordCandidate]:
    if not candidates:
        return None
    return min(candidates, key=lambda c: candidate_score(c, unique_count))


def inversion_of(root: int, quality: ChordQuality, bass: int | None) -> int:
    if bass is None:
        return 0
    tones = chord_tones(root, quality)
    if bass in tones[:4]:
        return tones.index(bass)
    # bass outside the first four tones (e.g. the 9th): root position + slash
    return 0


def detect_chord(notes: Iterable[NoteLike], key_root: PitchLike | None = None) -> Optional[ChordIdentity]:
    """Best chord reading of the held notes, or None.

    >>> detect_chord([("E", 4), ("G", 4), ("A#", 4), ("C", 5)]).symbol
    'C7/E'
    """
    pcs = unique_pitch_classes(notes)
    if not MIN_CHORD_NOTES <= len(pcs) <= MAX_CHORD_NOTES:
        return None
    win = best_candidate(match_candidates(pcs), len(pcs))
    if win is None:
        log.debug("no chord for pitch classes %s", pcs)
        return None
    ident = ChordIdentity(
        root=win.root,
        quality=win.quality,
        bass=win.bass,
        inversion=inversion_of(win.root, win.quality, win.bass),
        root_name=spell(win.root, key_root),
        bass_name=spell(win.bass, key_root) if win.bass is not None else None,
    )
    log.debug("detected %s from %s", ident.symbol, pcs)
    return ident


def detect_symbol(notes: Iterable[NoteLike], key_root: PitchLike | None = None) -> Optional[str]:
    ident = detect_chord(notes, key_root)
    return ident.symbol if ident else None

