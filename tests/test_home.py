"""Tests for the catalog browser and auto-advance."""

from __future__ import annotations

from pathlib import Path

import pytest

from pavilion.action import Action, ActionKind
from pavilion.bus import ActionBus
from pavilion.catalog import Catalog
from pavilion.components.home import WIDGET_LIBRARY, WIDGET_PLAYER, WIDGET_SONGS, Home
from pavilion.components.player import PlaybackState, Player
from pavilion.event import KeyPress


@pytest.fixture
def player(catalog, device, clock) -> Player:
    return Player(catalog, device, now=clock)


@pytest.fixture
def home(catalog, player) -> Home:
    return Home(catalog, player)


def _key(name: str) -> Action:
    return Action.key(KeyPress(name))


def test_next_track_wraps(home, player, catalog) -> None:
    home.selected_song_index = 3
    assert home.next_track() is True
    assert home.selected_song_index == 0
    assert player.track == catalog[0]


def test_prev_track_wraps(home, player, catalog) -> None:
    home.update(Action(ActionKind.PREV_TRACK))
    assert home.selected_song_index == 3
    assert player.track == catalog[3]


def test_empty_catalog_is_a_noop(device, clock) -> None:
    empty = Catalog(Path("music"), [])
    player = Player(empty, device, now=clock)
    home = Home(empty, player)
    assert home.next_track() is False
    assert home.prev_track() is False
    assert home.play_selected() is False
    assert home.selected_song_index == 0
    assert device.streams == []


def test_arrow_keys_move_and_clamp_song_selection(home) -> None:
    home.update(_key("up"))
    assert home.selected_song_index == 0
    for _ in range(10):
        home.update(_key("down"))
    assert home.selected_song_index == 3


def test_tab_cycles_widgets(home) -> None:
    assert home.selected_widget == WIDGET_SONGS
    home.update(Action(ActionKind.PRESS_TAB))
    assert home.selected_widget == WIDGET_PLAYER
    home.update(Action(ActionKind.PRESS_TAB))
    assert home.selected_widget == WIDGET_LIBRARY
    home.update(_key("down"))
    assert home.selected_index == 1
    assert home.selected_song_index == 0


def test_play_selected_plays_highlighted_entry(home, player, catalog) -> None:
    home.update(_key("down"))
    home.update(_key("down"))
    home.update(Action(ActionKind.PLAY_SELECTED))
    assert player.track == catalog[2]


def test_finished_track_advances(home, player, catalog, clock) -> None:
    home.play_selected()
    clock.advance(10.0)
    player.update(Action(ActionKind.TICK))
    assert player.finished is True
    home.update(Action(ActionKind.TICK))
    assert home.selected_song_index == 1
    assert player.track == catalog[1]
    assert player.finished is False
    assert player.position == 0.0


def test_key_events_become_key_actions(home) -> None:
    action = home.handle_key_event(KeyPress("x"))
    assert action == Action.key(KeyPress("x"))


def test_render_songs_marks_selection(home) -> None:
    from rich.console import Console

    console = Console(width=60, record=True)
    console.print(home.render_songs())
    text = console.export_text()
    assert "> track0" in text
    assert "0:10" in text


def test_render_songs_for_empty_catalog(device, clock) -> None:
    from rich.console import Console

    empty = Catalog(Path("music"), [])
    home = Home(empty, Player(empty, device, now=clock))
    console = Console(width=60, record=True)
    console.print(home.render_songs())
    assert "No tracks in music" in console.export_text()


def test_enter_key_plays_selection(home, player, catalog) -> None:
    home.update(_key("down"))
    home.update(_key("enter"))
    assert player.track == catalog[1]


def test_advance_gives_up_after_one_lap(
    home, player, catalog, device, clock
) -> None:
    bus = ActionBus()
    player.register_action_handler(bus)
    home.play_selected()
    device.broken.update(entry.filename for entry in catalog)
    clock.advance(10.0)
    player.update(Action(ActionKind.TICK))
    assert player.finished is True

    home.update(Action(ActionKind.TICK))

    assert player.finished is False
    assert player.state is PlaybackState.STOPPED
    assert player.track == catalog[0]
    errors = []
    while len(bus):
        action = bus.try_receive()
        assert action is not None
        errors.append(action)
    assert [a.kind for a in errors] == [ActionKind.ERROR] * len(catalog)
    for action in errors:
        home.update(action)
    assert device.active_streams == []
    assert len(device.streams) == 1 + len(catalog)


def test_advance_skips_a_broken_entry(
    home, player, catalog, device, clock
) -> None:
    home.play_selected()
    device.broken.add("track1.mp3")
    clock.advance(10.0)
    player.update(Action(ActionKind.TICK))
    home.update(Action(ActionKind.TICK))
    assert player.track == catalog[2]
    assert home.selected_song_index == 2
    assert player.finished is False
