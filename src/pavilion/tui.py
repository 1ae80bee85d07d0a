"""Textual host: owns the terminal, feeds the event source, shows frames."""

from __future__ import annotations

import asyncio
import logging
import os
import signal
import time
from typing import Callable, Optional

try:
    from textual import events
    from textual.app import App, ComposeResult, SuspendNotSupported
    from textual.widgets import Static
    from rich.layout import Layout
except Exception as exc:  # pragma: no cover - depends on environment
    raise RuntimeError(
        "Textual is required for the TUI. Install the 'textual' dependency."
    ) from exc

from pavilion.app import Application
from pavilion.catalog import Catalog, build_catalog
from pavilion.components import Component
from pavilion.components.fps import FpsCounter
from pavilion.components.home import Home
from pavilion.components.player import Player
from pavilion.components.status import StatusLine
from pavilion.config import AppConfig, save_config
from pavilion.errors import OutputUnavailable
from pavilion.event import Event
from pavilion.event_source import DrawCallback, EventSource
from pavilion.hangwatch import HangWatchdog
from pavilion.keymap import Keymap, keymap_from_config
from pavilion.logging_setup import set_console_level
from pavilion.output import OutputDevice, VlcOutputDevice
from pavilion.ui.frame import Size, build_frame

logger = logging.getLogger(__name__)


class TextualDriver:
    """Terminal driver backed by a running Textual app."""

    def __init__(self, app: "PavilionApp") -> None:
        self._app = app

    def enter(self) -> None:
        self._app.refresh(layout=True)

    def exit(self) -> None:
        self._app.exit(return_code=0)

    def suspend(self) -> None:
        sigtstp = getattr(signal, "SIGTSTP", None)
        if sigtstp is None:
            logger.warning("Suspend is not supported on this platform")
            return
        try:
            with self._app.suspend():
                os.kill(os.getpid(), sigtstp)
        except SuspendNotSupported:
            logger.warning("Terminal driver cannot suspend")

    def size(self) -> Size:
        return Size(self._app.size.width, self._app.size.height)

    def resize(self, size: Size) -> None:
        del size
        self._app.refresh(layout=True)

    def clear(self) -> None:
        self._app.show_frame("")

    def draw(self, callback: DrawCallback) -> None:
        size = self.size()
        frame = build_frame(size)
        callback(frame, size)
        self._app.show_frame(frame)


def build_components(
    catalog: Catalog,
    keymap: Keymap,
    device: Optional[OutputDevice],
    *,
    volume: float,
    now: Callable[[], float] = time.monotonic,
) -> list[Component]:
    """Create the component list in delivery order.

    The player precedes the browser so a Tick that finishes a track is seen by
    the browser within the same delivery.
    """
    player = Player(catalog, device, volume=volume, now=now)
    return [
        player,
        Home(catalog, player),
        StatusLine(keymap, now=now),
        FpsCounter(now=now),
    ]


def open_output_device() -> Optional[OutputDevice]:
    try:
        return VlcOutputDevice()
    except OutputUnavailable as exc:
        logger.warning("Audio output unavailable, playback disabled: %s", exc)
        return None


class PavilionApp(App):
    """Textual shell around the dispatcher."""

    CSS_PATH = "app.tcss"
    TITLE = "Pavilion"
    ENABLE_COMMAND_PALETTE = False

    def __init__(
        self,
        *,
        catalog: Catalog,
        config: AppConfig,
        keymap: Keymap,
        device: Optional[OutputDevice],
        tick_rate: float = 4.0,
        frame_rate: float = 60.0,
    ) -> None:
        super().__init__()
        self.catalog = catalog
        self.app_config = config
        self.keymap = keymap
        self.source = EventSource(
            TextualDriver(self), tick_rate=tick_rate, frame_rate=frame_rate
        )
        self.components = build_components(
            catalog, keymap, device, volume=config.volume / 100
        )
        self.dispatcher = Application(
            self.components, source=self.source, keymap=keymap, config=config
        )
        self._hang_watchdog: Optional[HangWatchdog] = None

    @property
    def player(self) -> Player:
        return next(c for c in self.components if isinstance(c, Player))

    def compose(self) -> ComposeResult:
        yield Static(id="frame")

    def show_frame(self, frame: Layout | str) -> None:
        try:
            self.query_one("#frame", Static).update(frame)
        except Exception:
            logger.debug("Frame widget not mounted yet")

    def _install_asyncio_exception_handler(self) -> None:
        loop = asyncio.get_running_loop()

        def handler(_loop: asyncio.AbstractEventLoop, context: dict) -> None:
            exc = context.get("exception")
            if exc:
                logger.exception("Asyncio exception", exc_info=exc)
            else:
                logger.error("Asyncio error: %s", context.get("message"))

        loop.set_exception_handler(handler)

    async def _run_dispatcher(self) -> None:
        try:
            code = await self.dispatcher.run()
        except Exception:
            logger.exception("Dispatcher terminated")
            self.exit(return_code=1)
            return
        self.exit(return_code=code)

    def on_mount(self) -> None:
        self._install_asyncio_exception_handler()
        self._hang_watchdog = HangWatchdog(lambda: self.dispatcher.last_tick)
        self._hang_watchdog.start()
        self.run_worker(self._run_dispatcher(), name="dispatcher", exclusive=True)
        logger.info("TUI mounted with %d tracks", len(self.catalog))

    def on_unmount(self) -> None:
        if self._hang_watchdog:
            self._hang_watchdog.stop()
        self.player.stop()
        logger.info("TUI shutdown")

    def on_key(self, event: events.Key) -> None:
        event.prevent_default()
        event.stop()
        self.source.push(Event.key(event.key))

    def on_resize(self, event: events.Resize) -> None:
        self.source.push(Event.resize(event.size.width, event.size.height))

    def on_app_focus(self, event: events.AppFocus) -> None:
        del event
        self.source.push(Event.focus_change(True))

    def on_app_blur(self, event: events.AppBlur) -> None:
        del event
        self.source.push(Event.focus_change(False))


def run_tui(config: AppConfig, *, tick_rate: float, frame_rate: float) -> int:
    """Build the catalog, run the TUI and return an exit code."""
    logger.info("TUI start music_dir=%s", config.music_path)
    set_console_level(logging.WARNING)
    catalog = build_catalog(config.music_path)
    keymap = keymap_from_config(config.keybindings)
    app = PavilionApp(
        catalog=catalog,
        config=config,
        keymap=keymap,
        device=open_output_device(),
        tick_rate=tick_rate,
        frame_rate=frame_rate,
    )
    app.run()
    volume = round(app.player.volume * 100)
    if volume != config.volume:
        try:
            save_config(
                AppConfig(
                    music_dir=config.music_dir,
                    volume=volume,
                    keybindings=config.keybindings,
                )
            )
        except OSError:
            logger.exception("Failed to save config")
    logger.info("TUI exit")
    return app.return_code or 0
