"""Exception types shared across Pavilion."""

from __future__ import annotations


class PavilionError(Exception):
    """Base class for Pavilion errors."""


class ActionBusClosed(PavilionError):
    """Raised when sending on a bus whose consumer is gone."""


class PlaybackError(PavilionError):
    """Raised when a track cannot be opened or decoded."""


class OutputUnavailable(PavilionError, RuntimeError):
    """Raised when the audio output device cannot be opened."""


class KeymapError(PavilionError, ValueError):
    """Raised for malformed keybinding entries."""
