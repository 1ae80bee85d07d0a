"""Dispatcher: the control loop tying events, keys, actions and components."""

from __future__ import annotations

from enum import Enum
import logging
import time
from typing import Any, Callable, Iterable, Optional, TYPE_CHECKING

from rich.layout import Layout

from pavilion.action import CLEAR_SCREEN, RESUME, Action, ActionKind
from pavilion.bus import ActionBus
from pavilion.components import Component
from pavilion.errors import ActionBusClosed
from pavilion.event import Event, EventKind, KeyPress
from pavilion.event_source import EventSource
from pavilion.keymap import Keymap, KeyResolver, Mode
from pavilion.registry import ComponentRegistry
from pavilion.ui.frame import Size

if TYPE_CHECKING:
    from pavilion.config import AppConfig

logger = logging.getLogger(__name__)

_QUIET_ACTIONS = {ActionKind.TICK, ActionKind.RENDER}


class AppState(Enum):
    RUNNING = "running"
    SUSPENDED = "suspended"
    QUITTING = "quitting"


class Application:
    """Single-threaded dispatch loop.

    Each iteration awaits one event, turns it into actions, delivers the raw
    event to interested components and then drains the action bus until it is
    empty. Actions produced during the drain are handled in the same pass.
    """

    def __init__(
        self,
        components: Iterable[Component],
        *,
        source: EventSource,
        keymap: Keymap,
        config: Optional["AppConfig"] = None,
        mode: Mode = Mode.HOME,
        bus: Optional[ActionBus] = None,
        now: Callable[[], float] = time.monotonic,
    ) -> None:
        self.registry = ComponentRegistry(components)
        self.source = source
        self.config = config
        self.bus = bus or ActionBus()
        self.resolver = KeyResolver(keymap, mode)
        self.should_quit = False
        self.should_suspend = False
        self._now = now
        self.last_tick = now()

    @property
    def mode(self) -> Mode:
        return self.resolver.mode

    @property
    def state(self) -> AppState:
        if self.should_quit:
            return AppState.QUITTING
        if self.should_suspend:
            return AppState.SUSPENDED
        return AppState.RUNNING

    def initialize_components(self, size: Size) -> None:
        for component in self.registry:
            component.register_action_handler(self.bus)
        if self.config is not None:
            for component in self.registry:
                component.register_config_handler(self.config)
        for component in self.registry:
            component.init(size)

    async def run(self) -> int:
        """Run until a Quit action is handled. Returns the exit code."""
        self.source.start()
        try:
            with self.source.capture():
                self.initialize_components(self.source.current_size())
                await self.main_loop()
        finally:
            self.source.stop()
            self.bus.close()
        logger.info("Dispatcher stopped")
        return 0

    async def main_loop(self) -> None:
        while True:
            await self.handle_events()
            self.handle_actions()
            if self.should_suspend:
                self.source.suspend()
                self.bus.send(RESUME)
                self.bus.send(CLEAR_SCREEN)
                self.source.enter()
                self.should_suspend = False
            elif self.should_quit:
                self.source.exit()
                break

    async def handle_events(self) -> None:
        event = await self.source.next_event()
        self.dispatch_event(event)

    def dispatch_event(self, event: Event) -> None:
        kind = event.kind
        if kind is EventKind.QUIT:
            self.bus.send(Action(ActionKind.QUIT))
        elif kind is EventKind.TICK:
            self.bus.send(Action(ActionKind.TICK))
        elif kind is EventKind.RENDER:
            self.bus.send(Action(ActionKind.RENDER))
        elif kind is EventKind.SUSPEND:
            self.bus.send(Action(ActionKind.SUSPEND))
        elif kind is EventKind.RESUME:
            self.bus.send(RESUME)
        elif kind is EventKind.RESIZE and event.size is not None:
            self.bus.send(Action.resize(*event.size))
        elif kind is EventKind.KEY and event.key_press is not None:
            self.handle_key_event(event.key_press)

        for component in self.registry.for_event(kind):
            self._invoke(component, component.handle_events, event)

    def handle_key_event(self, key: KeyPress) -> None:
        action = self.resolver.resolve(key)
        if action is not None:
            self.bus.send(action)

    def handle_actions(self) -> None:
        while True:
            action = self.bus.try_receive()
            if action is None:
                break
            self.apply_action(action)

    def apply_action(self, action: Action) -> None:
        kind = action.kind
        if kind not in _QUIET_ACTIONS:
            logger.debug("%s", action)
        if kind is ActionKind.TICK:
            self.resolver.clear_pending()
            self.last_tick = self._now()
        elif kind is ActionKind.QUIT:
            self.should_quit = True
        elif kind is ActionKind.SUSPEND:
            logger.info("Application suspended")
            self.should_suspend = True
        elif kind is ActionKind.RESUME:
            logger.info("Application resumed")
            self.should_suspend = False
        elif kind is ActionKind.CLEAR_SCREEN:
            self.source.clear()
        elif kind is ActionKind.RESIZE and action.size is not None:
            self.handle_resize(*action.size)
        elif kind is ActionKind.RENDER:
            self.render()

        for component in self.registry.for_action(kind):
            self._invoke(component, component.update, action)

    def handle_resize(self, width: int, height: int) -> None:
        self.source.resize(Size(width, height))
        self.render()

    def render(self) -> None:
        self.source.draw(self._draw_components)

    def _draw_components(self, frame: Layout, area: Size) -> None:
        for component in self.registry:
            try:
                component.draw(frame, area)
            except Exception as exc:
                logger.exception("Failed to draw %s", type(component).__name__)
                self.bus.send(Action.error(f"Failed to draw: {exc!r}"))

    def _invoke(
        self,
        component: Component,
        callback: Callable[[Any], Optional[Action]],
        argument: Any,
    ) -> None:
        try:
            action = callback(argument)
        except ActionBusClosed:
            raise
        except Exception as exc:
            name = type(component).__name__
            logger.exception("Component %s failed", name)
            self.bus.send(Action.error(f"{name} failed: {exc}"))
            return
        if action is not None:
            self.bus.send(action)
