"""Status line: error messages, help and transport hints."""

from __future__ import annotations

from dataclasses import dataclass
import time
from typing import Callable, Optional

from rich.layout import Layout
from rich.text import Text

from pavilion.action import Action, ActionKind
from pavilion.components import Component
from pavilion.keymap import Keymap, Mode, describe_bindings
from pavilion.ui.formatters import ellipsize
from pavilion.ui.frame import STATUS, Size

DEFAULT_HINT = "Enter: play  n/p: next/prev  Space: pause  ?: help  q: quit"


@dataclass(frozen=True)
class StatusMessage:
    text: str
    level: str
    until: Optional[float]


class StatusLine(Component):
    """Shows Error actions non-fatally, falling back to a key hint."""

    def __init__(
        self,
        keymap: Keymap,
        *,
        mode: Mode = Mode.HOME,
        now: Callable[[], float] = time.monotonic,
    ) -> None:
        self._keymap = keymap
        self._mode = mode
        self._now = now
        self._message: Optional[StatusMessage] = None

    def interested_actions(self) -> frozenset[ActionKind]:
        return frozenset(
            {
                ActionKind.ERROR,
                ActionKind.HELP,
                ActionKind.STOP,
                ActionKind.TOGGLE_PAUSE,
                ActionKind.TICK,
            }
        )

    def show_message(
        self,
        text: str,
        *,
        level: str = "info",
        timeout: Optional[float] = None,
    ) -> None:
        if timeout is None:
            timeout = 6.0 if level in {"warn", "error"} else 3.0
        until = None if timeout == 0 else self._now() + max(0.0, timeout)
        self._message = StatusMessage(text=text, level=level, until=until)

    def clear_message(self) -> None:
        self._message = None

    def help_text(self) -> str:
        pairs = describe_bindings(self._keymap, self._mode)
        return "  ".join(f"{keys}: {action}" for keys, action in pairs)

    def update(self, action: Action) -> Optional[Action]:
        kind = action.kind
        if kind is ActionKind.ERROR:
            self.show_message(action.message or "Unknown error", level="error")
        elif kind is ActionKind.HELP:
            self.show_message(self.help_text(), timeout=10.0)
        elif kind is ActionKind.STOP:
            self.show_message("Stopped")
        elif kind is ActionKind.TOGGLE_PAUSE:
            self.show_message("Pause toggled")
        elif kind is ActionKind.TICK:
            self._current_message()
        return None

    def render_line(self, width: int) -> Text:
        message = self._current_message()
        if message is None:
            return Text(ellipsize(DEFAULT_HINT, width), style="bright_black")
        line = ellipsize(message.text, width)
        if message.level == "error":
            return Text(line, style="#ff5f52")
        if message.level == "warn":
            return Text(line, style="#ffcc66")
        return Text(line)

    def draw(self, frame: Layout, area: Size) -> None:
        frame[STATUS].update(self.render_line(max(1, area.width)))

    def _current_message(self) -> Optional[StatusMessage]:
        if self._message is None:
            return None
        if self._message.until is None or self._message.until > self._now():
            return self._message
        self._message = None
        return None
