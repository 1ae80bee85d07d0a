"""Playback state machine and now-playing panel."""

from __future__ import annotations

from enum import Enum
import logging
import threading
import time
from typing import Callable, Optional

from rich.console import Group
from rich.layout import Layout
from rich.panel import Panel
from rich.text import Text

from pavilion.action import Action, ActionKind
from pavilion.catalog import Catalog, CatalogEntry
from pavilion.components import Component
from pavilion.errors import PlaybackError
from pavilion.output import OutputDevice, OutputStream
from pavilion.ui.formatters import (
    format_transport_time,
    progress_ratio,
    render_progress_bar,
)
from pavilion.ui.frame import PLAYER, Size

logger = logging.getLogger(__name__)

VOLUME_STEP = 0.05


class PlaybackState(Enum):
    IDLE = "idle"
    PLAYING = "playing"
    PAUSED = "paused"
    STOPPED = "stopped"


class Player(Component):
    """Owns transport state and derives position from the wall clock.

    Position is ``now - start`` clamped to the catalog duration, sampled on
    every Tick. Without an output device the player is inert: every transport
    call returns without effect.
    """

    def __init__(
        self,
        catalog: Catalog,
        device: Optional[OutputDevice],
        *,
        volume: float = 0.5,
        now: Callable[[], float] = time.monotonic,
    ) -> None:
        self.catalog = catalog
        self._device = device
        self._now = now
        self._lock = threading.Lock()
        self._stream: Optional[OutputStream] = None
        self.track: Optional[CatalogEntry] = None
        self.volume = max(0.0, min(1.0, volume))
        self.position = 0.0
        self.duration = 0.0
        self.started_at: Optional[float] = None
        self.finished = False
        self.paused = False
        self._paused_at: Optional[float] = None

    @property
    def enabled(self) -> bool:
        return self._device is not None

    @property
    def has_stream(self) -> bool:
        return self._stream is not None

    @property
    def state(self) -> PlaybackState:
        if self.track is None:
            return PlaybackState.IDLE
        if self.started_at is None:
            return PlaybackState.STOPPED
        if self.paused:
            return PlaybackState.PAUSED
        return PlaybackState.PLAYING

    def interested_actions(self) -> frozenset[ActionKind]:
        return frozenset(
            {
                ActionKind.TICK,
                ActionKind.VOLUME_UP,
                ActionKind.VOLUME_DOWN,
                ActionKind.STOP,
                ActionKind.TOGGLE_PAUSE,
            }
        )

    def play(self, entry: CatalogEntry) -> bool:
        """Start ``entry`` on a fresh stream. Returns False if it cannot play."""
        if self._device is None:
            return False
        path = self.catalog.path_for(entry)
        with self._lock:
            if self._stream is not None:
                self._stream.stop()
                self._stream = None
            stream: Optional[OutputStream] = None
            failed: Optional[Exception] = None
            try:
                stream = self._device.open_stream()
                stream.set_volume(self.volume)
                stream.append(path)
            except (OSError, PlaybackError) as exc:
                if stream is not None:
                    stream.stop()
                failed = exc
            else:
                self._stream = stream
        if failed is not None:
            logger.warning("Failed to play %s: %s", path, failed)
            # The previous stream is gone, so the kept track reads as stopped.
            self.started_at = None
            self.paused = False
            self._paused_at = None
            self.send(Action.error(f"Failed to play {entry.name}: {failed}"))
            return False
        self.track = entry
        self.position = 0.0
        self.duration = float(entry.duration)
        self.started_at = self._now()
        self.finished = False
        self.paused = False
        self._paused_at = None
        logger.info("Playing %s (%ss)", entry.filename, entry.duration)
        return True

    def stop(self) -> None:
        if self._device is None:
            return
        with self._lock:
            if self._stream is not None:
                self._stream.stop()
                self._stream = None
        self.position = 0.0
        self.started_at = None
        self.paused = False
        self._paused_at = None

    def toggle_pause(self) -> None:
        if self._device is None or self.started_at is None:
            return
        with self._lock:
            stream = self._stream
            if stream is None:
                return
            if self.paused:
                stream.resume()
                if self._paused_at is not None:
                    self.started_at += self._now() - self._paused_at
                self._paused_at = None
                self.paused = False
            else:
                stream.pause()
                self._paused_at = self._now()
                self.paused = True

    def change_volume(self, up: bool) -> None:
        if self._device is None:
            return
        step = VOLUME_STEP if up else -VOLUME_STEP
        self.volume = round(max(0.0, min(1.0, self.volume + step)), 2)
        with self._lock:
            if self._stream is not None:
                self._stream.set_volume(self.volume)

    def on_tick(self) -> None:
        if self.started_at is None:
            return
        with self._lock:
            stream = self._stream
            if stream is None or stream.is_paused() or stream.is_empty():
                return
        elapsed = max(0.0, self._now() - self.started_at)
        self.position = min(elapsed, self.duration)
        if self.duration > 0 and self.position >= self.duration and not self.finished:
            self.finished = True
            logger.info("Finished %s", self.track.filename if self.track else None)

    def update(self, action: Action) -> Optional[Action]:
        kind = action.kind
        if kind is ActionKind.TICK:
            self.on_tick()
        elif kind is ActionKind.VOLUME_UP:
            self.change_volume(True)
        elif kind is ActionKind.VOLUME_DOWN:
            self.change_volume(False)
        elif kind is ActionKind.STOP:
            self.stop()
        elif kind is ActionKind.TOGGLE_PAUSE:
            self.toggle_pause()
        return None

    def draw(self, frame: Layout, area: Size) -> None:
        frame[PLAYER].update(self.render(area.width))

    def render(self, width: int) -> Panel:
        if self.track is None:
            title, artist = "Nothing playing", ""
        else:
            title, artist = self.track.name, self.track.artist or "Unknown Author"
        state = self.state.value.capitalize()
        if not self.enabled:
            state = "No audio output"
        header = f"{state} | Volume: {round(self.volume * 100)}%"
        bar = render_progress_bar(
            max(0, width - 4), progress_ratio(self.position, self.duration)
        )
        body = Group(
            Text(header, justify="center"),
            Text(""),
            Text(title, style="bold yellow", justify="center"),
            Text(artist, justify="center"),
            Text(""),
            Text(
                format_transport_time(self.position, self.duration),
                style="italic yellow",
                justify="center",
            ),
            Text(bar, style="yellow"),
        )
        return Panel(body, title="Player", border_style="bright_blue")
