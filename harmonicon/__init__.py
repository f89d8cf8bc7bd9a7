"""Harmonic input and analysis core for the Harmonicon visualizer."""

__version__ = "0.1.0"
