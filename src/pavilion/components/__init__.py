"""Component interface shared by everything the dispatcher drives."""

from __future__ import annotations

from typing import TYPE_CHECKING, Optional

from rich.layout import Layout

from pavilion.action import Action, ActionKind
from pavilion.event import Event, EventKind, KeyPress
from pavilion.ui.frame import Size

if TYPE_CHECKING:
    from pavilion.bus import ActionBus
    from pavilion.config import AppConfig


class Component:
    """A UI or logic unit fed by the dispatcher.

    Interest lists are read once at registration. An empty set means the
    component receives every kind in that category.
    """

    action_bus: Optional["ActionBus"] = None
    config: Optional["AppConfig"] = None

    def interested_actions(self) -> frozenset[ActionKind]:
        return frozenset()

    def interested_events(self) -> frozenset[EventKind]:
        return frozenset()

    def register_action_handler(self, bus: "ActionBus") -> None:
        self.action_bus = bus

    def register_config_handler(self, config: "AppConfig") -> None:
        self.config = config

    def init(self, size: Size) -> None:
        del size

    def handle_events(self, event: Event) -> Optional[Action]:
        key = event.key_press
        if key is not None:
            return self.handle_key_event(key)
        return None

    def handle_key_event(self, key: KeyPress) -> Optional[Action]:
        del key
        return None

    def update(self, action: Action) -> Optional[Action]:
        del action
        return None

    def draw(self, frame: Layout, area: Size) -> None:
        del frame, area

    def send(self, action: Action) -> None:
        """Queue an action if a bus has been registered."""
        if self.action_bus is not None:
            self.action_bus.send(action)
