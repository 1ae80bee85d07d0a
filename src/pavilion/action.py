"""Typed actions flowing through the action bus."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional

from pavilion.errors import KeymapError
from pavilion.event import KeyPress


class ActionKind(Enum):
    """Action tag without payload, used for interest filtering."""

    TICK = "Tick"
    RENDER = "Render"
    RESIZE = "Resize"
    SUSPEND = "Suspend"
    RESUME = "Resume"
    QUIT = "Quit"
    CLEAR_SCREEN = "ClearScreen"
    ERROR = "Error"
    KEY = "Key"
    VOLUME_UP = "VolumeUp"
    VOLUME_DOWN = "VolumeDown"
    NOOP = "Noop"
    HELP = "Help"
    PRESS_TAB = "PressTab"
    NEXT_TRACK = "NextTrack"
    PREV_TRACK = "PrevTrack"
    STOP = "Stop"
    TOGGLE_PAUSE = "TogglePause"
    PLAY_SELECTED = "PlaySelected"


_PAYLOAD_KINDS = {ActionKind.RESIZE, ActionKind.ERROR, ActionKind.KEY}


@dataclass(frozen=True)
class Action:
    """A command for the dispatcher and components.

    Resize carries ``(width, height)``, Error carries a message and Key carries
    a :class:`KeyPress`. Every other kind has no payload.
    """

    kind: ActionKind
    payload: Any = None

    @classmethod
    def resize(cls, width: int, height: int) -> "Action":
        return cls(ActionKind.RESIZE, (int(width), int(height)))

    @classmethod
    def error(cls, message: str) -> "Action":
        return cls(ActionKind.ERROR, str(message))

    @classmethod
    def key(cls, key: KeyPress) -> "Action":
        return cls(ActionKind.KEY, key)

    @classmethod
    def parse(cls, name: str) -> "Action":
        """Build a payload-free action from its kind name, e.g. ``"VolumeUp"``."""
        try:
            kind = ActionKind(name.strip())
        except ValueError:
            raise KeymapError(f"Unknown action: {name!r}") from None
        if kind in _PAYLOAD_KINDS:
            raise KeymapError(f"Action {name!r} cannot be bound to a key")
        return cls(kind)

    @property
    def message(self) -> Optional[str]:
        if self.kind is ActionKind.ERROR:
            return self.payload
        return None

    @property
    def key_press(self) -> Optional[KeyPress]:
        if self.kind is ActionKind.KEY:
            return self.payload
        return None

    @property
    def size(self) -> Optional[tuple[int, int]]:
        if self.kind is ActionKind.RESIZE:
            return self.payload
        return None

    def __str__(self) -> str:
        if self.payload is None:
            return self.kind.value
        return f"{self.kind.value}({self.payload})"


TICK = Action(ActionKind.TICK)
RENDER = Action(ActionKind.RENDER)
QUIT = Action(ActionKind.QUIT)
SUSPEND = Action(ActionKind.SUSPEND)
RESUME = Action(ActionKind.RESUME)
CLEAR_SCREEN = Action(ActionKind.CLEAR_SCREEN)
NOOP = Action(ActionKind.NOOP)
