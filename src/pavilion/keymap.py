"""Keybinding tables and chord resolution."""

from __future__ import annotations

from enum import Enum
import logging
from typing import Any, Mapping, Optional

from typing_extensions import TypeAlias

from pavilion.action import Action
from pavilion.errors import KeymapError
from pavilion.event import KeyPress

logger = logging.getLogger(__name__)


class Mode(Enum):
    HOME = "Home"


Chord: TypeAlias = tuple[KeyPress, ...]
Keymap: TypeAlias = dict[Mode, dict[Chord, Action]]

DEFAULT_KEYBINDINGS: dict[str, dict[str, str]] = {
    "Home": {
        "q": "Quit",
        "ctrl+c": "Quit",
        "ctrl+d": "Quit",
        "ctrl+z": "Suspend",
        "plus": "VolumeUp",
        "equals_sign": "VolumeUp",
        "minus": "VolumeDown",
        "question_mark": "Help",
        "tab": "PressTab",
        "n": "NextTrack",
        "p": "PrevTrack",
        "s": "Stop",
        "space": "TogglePause",
        "g h": "Help",
    }
}


def parse_chord(text: str) -> Chord:
    """Parse ``"g g"`` into a chord of key presses."""
    keys = tuple(KeyPress(part) for part in text.split())
    if not keys:
        raise KeymapError("Empty key sequence")
    return keys


def build_keymap(
    raw: Mapping[str, Mapping[str, str]] | None = None,
    *,
    defaults: Mapping[str, Mapping[str, str]] = DEFAULT_KEYBINDINGS,
) -> Keymap:
    """Build a keymap from ``{mode: {chord: action}}``, user entries over defaults.

    Invalid entries are logged and skipped so a bad config never blocks startup.
    """
    keymap: Keymap = {}
    for source in (defaults, raw or {}):
        for mode_name, bindings in source.items():
            try:
                mode = Mode(mode_name)
            except ValueError:
                logger.warning("Ignoring keybindings for unknown mode %r", mode_name)
                continue
            if not isinstance(bindings, Mapping):
                logger.warning("Ignoring malformed keybindings for mode %r", mode_name)
                continue
            table = keymap.setdefault(mode, {})
            for chord_text, action_name in bindings.items():
                try:
                    chord = parse_chord(str(chord_text))
                    action = Action.parse(str(action_name))
                except KeymapError as exc:
                    logger.warning("Ignoring keybinding %r: %s", chord_text, exc)
                    continue
                table[chord] = action
    return keymap


def describe_bindings(keymap: Keymap, mode: Mode) -> list[tuple[str, str]]:
    """Return ``(keys, action)`` pairs for the help line, sorted by action."""
    table = keymap.get(mode, {})
    pairs = [
        (" ".join(str(key) for key in chord), str(action))
        for chord, action in table.items()
    ]
    return sorted(pairs, key=lambda pair: (pair[1], pair[0]))


class KeyResolver:
    """Resolve key presses against the keymap of the active mode.

    Single keys win immediately. Unbound keys accumulate into a pending
    sequence that is matched against multi-key chords until the next tick
    clears it.
    """

    def __init__(self, keymap: Keymap, mode: Mode = Mode.HOME) -> None:
        self.keymap = keymap
        self.mode = mode
        self._pending: list[KeyPress] = []

    @property
    def pending(self) -> Chord:
        return tuple(self._pending)

    def resolve(self, key: KeyPress) -> Optional[Action]:
        table = self.keymap.get(self.mode)
        if table is None:
            return None
        action = table.get((key,))
        if action is not None:
            logger.info("Got action: %s", action)
            return action
        self._pending.append(key)
        action = table.get(tuple(self._pending))
        if action is not None:
            logger.info("Got action: %s", action)
        return action

    def clear_pending(self) -> None:
        self._pending.clear()


def keymap_from_config(raw: Any) -> Keymap:
    if raw is not None and not isinstance(raw, Mapping):
        logger.warning("Ignoring keybindings: expected a mapping")
        raw = None
    return build_keymap(raw)
