"""Raw external signals produced by the event source."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional


@dataclass(frozen=True)
class KeyPress:
    """A single key press, named the way the terminal toolkit names keys."""

    key: str

    def __str__(self) -> str:
        return self.key


class EventKind(Enum):
    KEY = "Key"
    RESIZE = "Resize"
    TICK = "Tick"
    RENDER = "Render"
    SUSPEND = "Suspend"
    RESUME = "Resume"
    QUIT = "Quit"
    FOCUS_CHANGE = "FocusChange"


@dataclass(frozen=True)
class Event:
    """A raw signal. Only Key, Resize and FocusChange carry a payload."""

    kind: EventKind
    payload: Any = None

    @classmethod
    def key(cls, key: KeyPress | str) -> "Event":
        if isinstance(key, str):
            key = KeyPress(key)
        return cls(EventKind.KEY, key)

    @classmethod
    def resize(cls, width: int, height: int) -> "Event":
        return cls(EventKind.RESIZE, (int(width), int(height)))

    @classmethod
    def focus_change(cls, gained: bool) -> "Event":
        return cls(EventKind.FOCUS_CHANGE, bool(gained))

    @property
    def key_press(self) -> Optional[KeyPress]:
        if self.kind is EventKind.KEY:
            return self.payload
        return None

    @property
    def size(self) -> Optional[tuple[int, int]]:
        if self.kind is EventKind.RESIZE:
            return self.payload
        return None


TICK = Event(EventKind.TICK)
RENDER = Event(EventKind.RENDER)
QUIT = Event(EventKind.QUIT)
SUSPEND = Event(EventKind.SUSPEND)
RESUME = Event(EventKind.RESUME)
