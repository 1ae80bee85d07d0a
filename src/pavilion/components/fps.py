"""Tick and frame rate readout."""

from __future__ import annotations

import time
from typing import Callable, Optional

from rich.layout import Layout
from rich.text import Text

from pavilion.action import Action, ActionKind
from pavilion.components import Component
from pavilion.ui.frame import FPS, Size


class FpsCounter(Component):
    """Counts Tick and Render actions over one-second windows."""

    def __init__(self, now: Callable[[], float] = time.monotonic) -> None:
        self._now = now
        start = now()
        self._tick_start = start
        self._tick_count = 0
        self._frame_start = start
        self._frame_count = 0
        self.ticks_per_second = 0.0
        self.frames_per_second = 0.0

    def interested_actions(self) -> frozenset[ActionKind]:
        return frozenset({ActionKind.TICK, ActionKind.RENDER})

    def update(self, action: Action) -> Optional[Action]:
        if action.kind is ActionKind.TICK:
            self._app_tick()
        elif action.kind is ActionKind.RENDER:
            self._render_tick()
        return None

    def _app_tick(self) -> None:
        self._tick_count += 1
        now = self._now()
        elapsed = now - self._tick_start
        if elapsed >= 1.0:
            self.ticks_per_second = self._tick_count / elapsed
            self._tick_start = now
            self._tick_count = 0

    def _render_tick(self) -> None:
        self._frame_count += 1
        now = self._now()
        elapsed = now - self._frame_start
        if elapsed >= 1.0:
            self.frames_per_second = self._frame_count / elapsed
            self._frame_start = now
            self._frame_count = 0

    def draw(self, frame: Layout, area: Size) -> None:
        message = (
            f"{self.ticks_per_second:.2f} ticks per sec, "
            f"{self.frames_per_second:.2f} frames per sec"
        )
        frame[FPS].update(Text(message, style="bright_black", justify="right"))
