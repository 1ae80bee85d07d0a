"""Single ordered stream of external signals for the dispatcher."""

from __future__ import annotations

import asyncio
from contextlib import contextmanager
import logging
import signal
from typing import Callable, Iterator, Optional, Protocol

from rich.layout import Layout

from pavilion.event import QUIT, RENDER, RESUME, TICK, Event
from pavilion.ui.frame import Size

logger = logging.getLogger(__name__)

DrawCallback = Callable[[Layout, Size], None]

# SIGTSTP keeps its default action; TextualDriver.suspend raises it.
_SIGNAL_EVENTS = (("SIGTERM", QUIT), ("SIGHUP", QUIT), ("SIGCONT", RESUME))


class TerminalDriver(Protocol):
    """Terminal capture and drawing, provided by the UI toolkit host."""

    def enter(self) -> None: ...

    def exit(self) -> None: ...

    def suspend(self) -> None: ...

    def size(self) -> Size: ...

    def resize(self, size: Size) -> None: ...

    def clear(self) -> None: ...

    def draw(self, callback: DrawCallback) -> None: ...


class EventSource:
    """Merges tick and render timers, terminal input and OS signals.

    Producers call :meth:`push` (or :meth:`push_threadsafe` from other
    threads); the dispatcher awaits :meth:`next_event`. Events come out in
    arrival order.
    """

    def __init__(
        self,
        driver: TerminalDriver,
        *,
        tick_rate: float = 4.0,
        frame_rate: float = 60.0,
    ) -> None:
        self.driver = driver
        self.tick_rate = tick_rate
        self.frame_rate = frame_rate
        self._queue: asyncio.Queue[Event] = asyncio.Queue()
        self._tasks: list[asyncio.Task] = []
        self._signals: list[int] = []
        self._loop: Optional[asyncio.AbstractEventLoop] = None
        self._captured = False

    @property
    def captured(self) -> bool:
        return self._captured

    def start(self) -> None:
        """Start the timer producers and signal handlers on the running loop."""
        if self._tasks:
            return
        self._loop = asyncio.get_running_loop()
        for rate, event in ((self.tick_rate, TICK), (self.frame_rate, RENDER)):
            if rate > 0:
                self._tasks.append(
                    self._loop.create_task(self._run_timer(1.0 / rate, event))
                )
        self._install_signal_handlers()

    def stop(self) -> None:
        for task in self._tasks:
            task.cancel()
        self._tasks.clear()
        if self._loop is not None:
            for signum in self._signals:
                self._loop.remove_signal_handler(signum)
        self._signals.clear()

    def _install_signal_handlers(self) -> None:
        assert self._loop is not None
        for name, event in _SIGNAL_EVENTS:
            signum = getattr(signal, name, None)
            if signum is None:
                continue
            try:
                self._loop.add_signal_handler(signum, self.push, event)
            except (NotImplementedError, RuntimeError, ValueError):
                logger.debug("Signal %s not supported on this platform", name)
                continue
            self._signals.append(signum)

    async def _run_timer(self, interval: float, event: Event) -> None:
        loop = asyncio.get_running_loop()
        next_at = loop.time() + interval
        while True:
            await asyncio.sleep(max(0.0, next_at - loop.time()))
            self.push(event)
            next_at += interval
            if next_at < loop.time():
                next_at = loop.time() + interval

    def push(self, event: Event) -> None:
        self._queue.put_nowait(event)

    def push_threadsafe(self, event: Event) -> None:
        if self._loop is None:
            self.push(event)
            return
        self._loop.call_soon_threadsafe(self.push, event)

    async def next_event(self) -> Event:
        return await self._queue.get()

    def pending(self) -> int:
        return self._queue.qsize()

    # --- Terminal ---
    def current_size(self) -> Size:
        return self.driver.size()

    def resize(self, size: Size) -> None:
        self.driver.resize(size)

    def enter(self) -> None:
        self.driver.enter()
        self._captured = True

    def exit(self) -> None:
        if not self._captured:
            return
        self._captured = False
        self.driver.exit()

    def suspend(self) -> None:
        """Hand the terminal back to the OS until the process is resumed.

        The caller re-acquires the terminal with :meth:`enter` afterwards.
        """
        self._captured = False
        self.driver.suspend()

    def clear(self) -> None:
        self.driver.clear()

    def draw(self, callback: DrawCallback) -> None:
        self.driver.draw(callback)

    @contextmanager
    def capture(self) -> Iterator["EventSource"]:
        """Hold the terminal for the block and always release it."""
        self.enter()
        try:
            yield self
        finally:
            self.exit()
