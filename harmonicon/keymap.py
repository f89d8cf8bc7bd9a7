# harmonicon/keymap.py
"""Computer-keyboard layout: piano keys, scale-degree digits, modifier keys."""
from __future__ import annotations
from typing import Dict, Optional, Tuple

from .modifiers import Modifier
from .notation import Note

# touche -> (note, décalage d'octave) ; rangée du milieu = blanches, rangée du haut = noires
KEY_TO_NOTE: Dict[str, Tuple[str, int]] = {
    "a": ("C", 0), "s": ("D", 0), "d": ("E", 0), "f": ("F", 0), "g": ("G", 0),
    "h": ("A", 0), "j": ("B", 0), "k": ("C", 1), "l": ("D", 1), ";": ("E", 1),
    "w": ("C#", 0), "e": ("D#", 0), "t": ("F#", 0), "y": ("G#", 0), "u": ("A#", 0),
    "o": ("C#", 1), "p": ("D#", 1),
}

KEY_TO_DEGREE: Dict[str, int] = {str(d): d for d in range(1, 8)}

KEY_TO_MODIFIER: Dict[str, Modifier] = {
    "alt": Modifier.INV1,
    "shift": Modifier.INV2,
    "tab": Modifier.EXT7,
    "9": Modifier.EXT9,
}


def is_piano_key(key: Optional[str]) -> bool:
    return key is not None and key.lower() in KEY_TO_NOTE


def note_for_key(key: str, base_octave: int) -> Optional[Note]:
    """The piano row plays one octave above the chord octave."""
    info = KEY_TO_NOTE.get(key.lower())
    if info is None:
        return None
    name, offset = info
    return Note.of(name, base_octave + 1 + offset)


def degree_for_key(key: str) -> Optional[int]:
    return KEY_TO_DEGREE.get(key)


def modifier_for_key(key: str) -> Optional[Modifier]:
    return KEY_TO_MODIFIER.get(key.lower())
