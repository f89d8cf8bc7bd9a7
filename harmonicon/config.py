# ===============================
# File: harmonicon/config.py
# ===============================

# Contexte tonal par défaut
DEFAULT_KEY_ROOT = "C"
DEFAULT_MODE     = "major"      # "major" | "minor"

# Voicing des accords
DEFAULT_CHORD_OCTAVE = 3        # octave de base (C3)
MIN_CHORD_OCTAVE     = 3        # bornes des boutons octave -/+
MAX_CHORD_OCTAVE     = 5
DEFAULT_VOICING      = "open"   # "open" (basse sous l'octave) | "closed"
MIN_BASE_OCTAVE      = 1        # clamp du voicing
MAX_BASE_OCTAVE      = 7

# Plage des notes (clamp)
MIN_OCTAVE = 0
MAX_OCTAVE = 9

# Détection d'accords
MIN_CHORD_NOTES = 3             # < 3 classes de hauteur -> pas d'accord
MAX_CHORD_NOTES = 5             # > 5 (au-delà d'un 9e) -> trop ambigu

# MIDI
DEFAULT_VELOCITY = 80
MIDI_CHANNEL     = 0            # canal 1 côté utilisateur

# Logs
LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
