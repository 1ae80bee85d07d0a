"""Playback through the dispatcher with a fake clock and output device."""

from __future__ import annotations

from typing import Optional

from pavilion.action import Action, ActionKind
from pavilion.app import Application
from pavilion.components import Component
from pavilion.components.fps import FpsCounter
from pavilion.components.home import Home
from pavilion.components.player import Player
from pavilion.components.status import StatusLine
from pavilion.event import QUIT, TICK, Event
from pavilion.event_source import EventSource
from pavilion.keymap import Mode, build_keymap


class FinishObserver(Component):
    """Sits between the player and the browser to watch ``finished``."""

    def __init__(self, player: Player) -> None:
        self.player = player
        self.transitions = 0
        self._last = False

    def interested_actions(self) -> frozenset[ActionKind]:
        return frozenset({ActionKind.TICK})

    def update(self, action: Action) -> Optional[Action]:
        if self.player.finished and not self._last:
            self.transitions += 1
        self._last = self.player.finished
        return None


def test_auto_advance_after_track_ends(catalog, device, driver, clock) -> None:
    player = Player(catalog, device, now=clock)
    observer = FinishObserver(player)
    home = Home(catalog, player)
    keymap = build_keymap()
    components = [
        player,
        observer,
        home,
        StatusLine(keymap, mode=Mode.HOME, now=clock),
        FpsCounter(now=clock),
    ]
    source = EventSource(driver, tick_rate=0, frame_rate=0)
    app = Application(components, source=source, keymap=keymap, now=clock)
    app.initialize_components(driver.size())

    app.dispatch_event(Event.key("enter"))
    app.handle_actions()
    assert player.track == catalog[0]

    for tick in range(1, 42):
        clock.advance(0.25)
        app.dispatch_event(TICK)
        app.handle_actions()
        if tick < 40:
            assert home.selected_song_index == 0
            assert player.position == tick * 0.25
        elif tick == 40:
            assert home.selected_song_index == 1
            assert player.track == catalog[1]
            assert player.position == 0.0
            assert player.finished is False

    assert observer.transitions == 1
    assert player.position == 0.25
    assert len(device.active_streams) == 1


def test_next_and_volume_keys(catalog, device, driver, clock) -> None:
    player = Player(catalog, device, now=clock)
    home = Home(catalog, player)
    source = EventSource(driver, tick_rate=0, frame_rate=0)
    app = Application([player, home], source=source, keymap=build_keymap(), now=clock)
    app.initialize_components(driver.size())

    for key in ("n", "n", "p", "plus", "minus", "minus"):
        app.dispatch_event(Event.key(key))
        app.handle_actions()

    assert home.selected_song_index == 1
    assert player.track == catalog[1]
    assert player.volume == 0.45
    assert device.streams[-1].volume == 0.45


def test_unplayable_library_does_not_stall_the_drain(
    catalog, device, driver, clock
) -> None:
    player = Player(catalog, device, now=clock)
    home = Home(catalog, player)
    status = StatusLine(build_keymap(), now=clock)
    source = EventSource(driver, tick_rate=0, frame_rate=0)
    app = Application(
        [player, home, status], source=source, keymap=build_keymap(), now=clock
    )
    app.initialize_components(driver.size())
    home.play_selected()
    device.broken.update(entry.filename for entry in catalog)

    clock.advance(10.0)
    app.dispatch_event(TICK)
    app.handle_actions()

    assert len(app.bus) == 0
    assert player.finished is False
    assert len(device.streams) == 1 + len(catalog)
    assert status.render_line(200).plain.startswith("Failed to play")

    app.dispatch_event(QUIT)
    app.handle_actions()
    assert app.should_quit is True
