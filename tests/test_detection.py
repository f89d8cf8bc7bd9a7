"""Chord detection from held notes."""
import itertools

from harmonicon.detection import (
    ChordCandidate, candidate_score, detect_chord, detect_symbol, inversion_of,
    match_candidates, unique_pitch_classes,
)
from harmonicon.labeling import ChordQuality
from harmonicon.notation import Note, parse_note


def notes(*names):
    return [parse_note(n) for n in names]


def test_dominant_seventh_root_position():
    ident = detect_chord(notes("C4", "E4", "G4", "Bb4"))
    assert ident.root == 0
    assert ident.quality is ChordQuality.DOMINANT_7
    assert ident.bass is None
    assert ident.inversion == 0
    assert ident.symbol == "C7"


def test_dominant_seventh_first_inversion():
    ident = detect_chord(notes("E4", "G4", "Bb4", "C5"))
    assert ident.root == 0
    assert ident.quality is ChordQuality.DOMINANT_7
    assert ident.bass == 4
    assert ident.inversion == 1
    assert ident.symbol == "C7/E"


def test_detection_is_order_independent():
    held = notes("E4", "G4", "Bb4", "C5", "E5")
    expected = detect_chord(held)
    for perm in itertools.permutations(held):
        assert detect_chord(list(perm)) == expected


def test_bass_is_the_lowest_sounding_note():
    assert unique_pitch_classes(notes("G4", "C5", "E3", "C4")) == [4, 0, 7]
    assert detect_symbol(notes("G4", "C5", "E3", "C4")) == "C/E"


def test_too_few_or_too_many_pitch_classes():
    assert detect_chord(notes("C4", "C5", "E4")) is None
    assert detect_chord([]) is None
    assert detect_chord(notes("C4", "D4", "E4", "F4", "G4", "A4")) is None


def test_unknown_shape():
    assert detect_chord(notes("C4", "C#4", "D4")) is None


def test_ninth_chord():
    assert detect_symbol(notes("C4", "E4", "G4", "Bb4", "D5")) == "C9"
    assert detect_symbol(notes("D4", "F4", "A4", "C5", "E5")) == "Dm9"


def test_bass_on_the_ninth_keeps_the_slash():
    ident = detect_chord(notes("D3", "C4", "E4", "G4", "Bb4"))
    assert ident.quality is ChordQuality.DOMINANT_9
    assert ident.bass == 2
    assert ident.inversion == 0
    assert ident.symbol == "C9/D"


def test_slash_reading_when_it_is_the_only_one():
    ident = detect_chord(notes("C4", "E4", "G4", "A4"))
    assert ident.symbol == "Am7/C"
    assert ident.inversion == 1


def test_symmetric_chords_prefer_root_position():
    assert detect_symbol(notes("C4", "E4", "G#4")) == "Caug"
    assert detect_symbol(notes("C4", "D#4", "F#4", "A4")) == "Cdim7"
    assert detect_symbol(notes("D#3", "C4", "F#4", "A4")) == "D#dim7"


def test_spelling_uses_key_context():
    held = notes("Bb3", "D4", "F4")
    assert detect_symbol(held) == "A#"
    assert detect_symbol(held, key_root="F") == "Bb"
    assert detect_symbol(notes("D4", "F#4", "A4", "C5"), key_root="Bb") == "D7"
    assert detect_symbol(notes("Eb4", "G4", "Bb4", "C5"), key_root="Eb") == "Cm7/Eb"


def test_accepts_pairs():
    assert detect_symbol([("A", 3), ("C", 4), ("E", 4)]) == "Am"
    assert detect_symbol([Note.of(7, 3), Note.of(11, 3), Note.of(2, 4), Note.of(5, 4)]) == "G7"


def test_scoring_rules():
    aug = ChordCandidate(root=0, quality=ChordQuality.AUGMENTED, bass=None, order=0)
    slash = ChordCandidate(root=4, quality=ChordQuality.MAJOR, bass=0, order=1)
    plain = ChordCandidate(root=0, quality=ChordQuality.MAJOR, bass=None, order=2)
    assert candidate_score(plain, 3) < candidate_score(slash, 3) < candidate_score(aug, 3)
    ninth = ChordCandidate(root=0, quality=ChordQuality.DOMINANT_9, bass=None, order=0)
    assert candidate_score(ninth, 5) == (-5, 0)
    # half-diminished is not an altered fifth
    half = ChordCandidate(root=11, quality=ChordQuality.HALF_DIMINISHED_7, bass=None, order=0)
    assert candidate_score(half, 4) == (0, 0)


def test_match_candidates_order():
    cands = match_candidates([0, 4, 8])
    assert [c.root for c in cands] == [0, 4, 8]
    assert all(c.quality is ChordQuality.AUGMENTED for c in cands)
    assert [c.order for c in cands] == [0, 1, 2]


def test_inversion_of():
    assert inversion_of(0, ChordQuality.MAJOR, None) == 0
    assert inversion_of(0, ChordQuality.MAJOR, 7) == 2
    assert inversion_of(0, ChordQuality.DOMINANT_7, 10) == 3
    assert inversion_of(0, ChordQuality.MAJOR, 2) == 0
