"""Catalog browser: library sections, song list and auto-advance."""

from __future__ import annotations

import logging
from typing import Optional

from rich.layout import Layout
from rich.panel import Panel
from rich.text import Text

from pavilion.action import Action, ActionKind
from pavilion.catalog import Catalog
from pavilion.components import Component
from pavilion.components.player import Player
from pavilion.event import EventKind, KeyPress
from pavilion.ui.formatters import format_clock, pad_title
from pavilion.ui.frame import LIBRARY, SONGS, Size

logger = logging.getLogger(__name__)

LIBRARY_SECTIONS = ("All Tracks", "Favourites", "Playlists")

WIDGET_LIBRARY = 0
WIDGET_SONGS = 1
WIDGET_PLAYER = 2
WIDGET_COUNT = 3

HIGHLIGHT = "white on blue"
MARKER = "> "


class Home(Component):
    """Browses the catalog and drives the player from the selection.

    Home receives every action so it can poll ``player.finished`` after each
    one and advance to the next track.
    """

    def __init__(self, catalog: Catalog, player: Player) -> None:
        self.catalog = catalog
        self.player = player
        self.selected_widget = WIDGET_SONGS
        self.selected_index = 0
        self.selected_song_index = 0
        self.sections = list(LIBRARY_SECTIONS)

    def interested_events(self) -> frozenset[EventKind]:
        return frozenset({EventKind.KEY})

    def handle_key_event(self, key: KeyPress) -> Optional[Action]:
        return Action.key(key)

    def next_widget(self) -> None:
        self.selected_widget = (self.selected_widget + 1) % WIDGET_COUNT

    def move_selection(self, delta: int) -> None:
        if self.selected_widget == WIDGET_LIBRARY:
            self.selected_index = _clamp(
                self.selected_index + delta, len(self.sections)
            )
        elif self.selected_widget == WIDGET_SONGS:
            self.selected_song_index = _clamp(
                self.selected_song_index + delta, len(self.catalog)
            )

    def play_selected(self) -> bool:
        if not self.catalog:
            return False
        self.selected_song_index = _clamp(self.selected_song_index, len(self.catalog))
        return self.player.play(self.catalog[self.selected_song_index])

    def next_track(self) -> bool:
        """Select the following track, wrapping to the first, and play it."""
        if not self.catalog:
            return False
        self.selected_song_index = (self.selected_song_index + 1) % len(self.catalog)
        return self.play_selected()

    def prev_track(self) -> bool:
        """Select the previous track, wrapping to the last, and play it."""
        if not self.catalog:
            return False
        self.selected_song_index = (self.selected_song_index - 1) % len(self.catalog)
        return self.play_selected()

    def advance(self) -> bool:
        """Move past a finished track, skipping entries that fail to play.

        Gives up after one full lap of the catalog and stops the player, so a
        finished flag is consumed exactly once.
        """
        logger.info("Track finished, advancing")
        for _ in range(len(self.catalog)):
            if self.next_track():
                return True
        logger.warning("No playable track in %s, stopping", self.catalog.directory)
        self.player.stop()
        self.player.finished = False
        return False

    def update(self, action: Action) -> Optional[Action]:
        kind = action.kind
        if kind is ActionKind.KEY:
            key = action.key_press
            if key is not None and key.key == "up":
                self.move_selection(-1)
            elif key is not None and key.key == "down":
                self.move_selection(1)
            elif key is not None and key.key == "enter":
                self.play_selected()
        elif kind is ActionKind.PRESS_TAB:
            self.next_widget()
        elif kind is ActionKind.PLAY_SELECTED:
            self.play_selected()
        elif kind is ActionKind.NEXT_TRACK:
            self.next_track()
        elif kind is ActionKind.PREV_TRACK:
            self.prev_track()
        if self.player.finished:
            self.advance()
        return None

    def _border_style(self, widget: int) -> str:
        return "white" if self.selected_widget == widget else "bright_black"

    def draw(self, frame: Layout, area: Size) -> None:
        frame[LIBRARY].update(self.render_library())
        frame[SONGS].update(self.render_songs())

    def render_library(self) -> Panel:
        lines = Text()
        for index, name in enumerate(self.sections):
            if index:
                lines.append("\n")
            if index == self.selected_index:
                lines.append(MARKER + name, style=HIGHLIGHT)
            else:
                lines.append("  " + name)
        return Panel(
            lines, title="Library", border_style=self._border_style(WIDGET_LIBRARY)
        )

    def render_songs(self) -> Panel:
        lines = Text()
        if not self.catalog:
            lines.append(f"No tracks in {self.catalog.directory}", style="bright_black")
        playing = self.player.track
        for index, entry in enumerate(self.catalog):
            if index:
                lines.append("\n")
            prefix = MARKER if index == self.selected_song_index else "  "
            style = HIGHLIGHT if index == self.selected_song_index else None
            lines.append(prefix + pad_title(entry.name), style=style)
            duration_style = "yellow" if entry == playing else "grey70"
            lines.append(format_clock(entry.duration), style=duration_style)
        return Panel(
            lines, title="Songs", border_style=self._border_style(WIDGET_SONGS)
        )


def _clamp(index: int, length: int) -> int:
    if length <= 0:
        return 0
    return max(0, min(index, length - 1))
