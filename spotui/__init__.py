"""Configuration, key input, events, and playback and library state for a terminal music player."""

__version__ = "0.1.0"