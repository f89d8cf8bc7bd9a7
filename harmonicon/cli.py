# ===============================
# File: harmonicon/cli.py
# ===============================
from __future__ import annotations
import argparse
import logging

from .config import (
    DEFAULT_KEY_ROOT, DEFAULT_MODE, DEFAULT_CHORD_OCTAVE, DEFAULT_VOICING, LOG_FORMAT,
)
from .detection import detect_chord
from .labeling import chord_tones, parse_chord_symbol
from .notation import parse_note, spell
from .scale import MODES, chord_roman_numeral, diatonic_triad, roman_numeral, scale
from .voicing import VOICINGS, voice

log = logging.getLogger(__name__)


def _init_logging(verbose: bool) -> None:
    if logging.getLogger().handlers:
        return
    logging.basicConfig(level=logging.DEBUG if verbose else logging.WARNING, format=LOG_FORMAT)


def cmd_detect(args):
    notes = [parse_note(n) for n in args.notes]
    ident = detect_chord(notes, args.key)
    if ident is None:
        print("N.C.")
        return
    print(ident.symbol)
    print("inversion:", ident.inversion)
    if args.key:
        numeral, diatonic = chord_roman_numeral(ident.root, ident.quality, args.key, args.mode)
        print("numeral:", numeral if diatonic else f"{numeral} (chromatic)")


def cmd_voice(args):
    spec, bass = parse_chord_symbol(args.chord)
    tones = chord_tones(spec.root, spec.quality)
    inversion = args.inversion
    # slash chord: the bass picks the inversion unless given explicitly
    if inversion is None:
        inversion = tones.index(bass) if bass in tones[:4] else 0
    notes = voice(tones, inversion, args.octave, args.style)
    print(" ".join(n.label(args.key) for n in notes))


def cmd_scale(args):
    for degree, pc in enumerate(scale(args.key, args.mode), start=1):
        triad = diatonic_triad(degree, args.key, args.mode)
        print(f"{degree}\t{spell(pc, args.key)}\t{triad.symbol(args.key)}\t{roman_numeral(degree, args.mode)}")


def cmd_numeral(args):
    spec, _ = parse_chord_symbol(args.chord)
    numeral, diatonic = chord_roman_numeral(spec.root, spec.quality, args.key, args.mode)
    print(numeral if diatonic else f"{numeral} (chromatic)")


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser("harmonicon")
    p.add_argument("-v", "--verbose", action="store_true", help="Logs DEBUG sur stderr")
    sub = p.add_subparsers(dest="cmd", required=True)

    # Detect -------------------------------------------------------------
    p0 = sub.add_parser("detect", help="Notes -> accord (ex: E4 G4 Bb4 C5)")
    p0.add_argument("notes", nargs="+")
    p0.add_argument("--key", help="Tonalité pour l'orthographe et le chiffrage (ex: Bb)")
    p0.add_argument("--mode", choices=MODES, default=DEFAULT_MODE)
    p0.set_defaults(func=cmd_detect)

    # Voice --------------------------------------------------------------
    p1 = sub.add_parser("voice", help="Symbole d'accord -> notes avec octaves")
    p1.add_argument("chord")
    p1.add_argument("--inversion", type=int, help="0..3 (sinon déduit de la basse)")
    p1.add_argument("--octave", type=int, default=DEFAULT_CHORD_OCTAVE)
    p1.add_argument("--style", choices=VOICINGS, default=DEFAULT_VOICING)
    p1.add_argument("--key", help="Tonalité pour l'orthographe")
    p1.set_defaults(func=cmd_voice)

    # Scale --------------------------------------------------------------
    p2 = sub.add_parser("scale", help="Degrés, triades et chiffres romains d'une tonalité")
    p2.add_argument("--key", default=DEFAULT_KEY_ROOT)
    p2.add_argument("--mode", choices=MODES, default=DEFAULT_MODE)
    p2.set_defaults(func=cmd_scale)

    # Numeral ------------------------------------------------------------
    p3 = sub.add_parser("numeral", help="Chiffre romain d'un accord dans une tonalité")
    p3.add_argument("chord")
    p3.add_argument("--key", default=DEFAULT_KEY_ROOT)
    p3.add_argument("--mode", choices=MODES, default=DEFAULT_MODE)
    p3.set_defaults(func=cmd_numeral)

    return p


def main(argv: list[str] | None = None):
    parser = build_parser()
    args = parser.parse_args(argv)
    _init_logging(args.verbose)
    try:
        args.func(args)
    except ValueError as e:
        parser.error(str(e))


if __name__ == "__main__":
    main()
