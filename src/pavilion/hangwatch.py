"""Faulthandler integration and a watchdog for a stalled dispatch loop."""

from __future__ import annotations

import faulthandler
import logging
import threading
import time
from pathlib import Path
from typing import Callable, Optional, TextIO

logger = logging.getLogger(__name__)

_HANG_FILE: Optional[TextIO] = None
_LOCK = threading.Lock()


def enable_faulthandler(log_path: Path) -> Path:
    """Send fatal tracebacks to ``hangdump.log`` beside the log file."""
    global _HANG_FILE
    hang_path = log_path.parent / "hangdump.log"
    try:
        hang_path.parent.mkdir(parents=True, exist_ok=True)
        handle = open(hang_path, "a", encoding="utf-8")
    except OSError:
        logger.warning("Cannot open %s, faulthandler disabled", hang_path)
        return hang_path
    with _LOCK:
        _HANG_FILE = handle
    faulthandler.enable(file=handle, all_threads=True)
    return hang_path


def dump_threads(label: str) -> None:
    """Write a labelled stack dump of every thread to the hang file."""
    with _LOCK:
        handle = _HANG_FILE
    if handle is None:
        return
    stamp = time.strftime("%Y-%m-%d %H:%M:%S", time.localtime())
    try:
        handle.write(f"\n[{stamp}] {label}\n")
        handle.flush()
        faulthandler.dump_traceback(file=handle, all_threads=True)
        handle.flush()
    except (OSError, ValueError):
        logger.warning("Failed to write thread dump: %s", label)


class HangWatchdog:
    """Background thread that dumps stacks when the dispatcher stops ticking."""

    def __init__(
        self,
        get_last_tick: Callable[[], float],
        *,
        threshold_seconds: float = 15.0,
        repeat_seconds: float = 30.0,
        poll_seconds: float = 1.0,
        now: Callable[[], float] = time.monotonic,
    ) -> None:
        self._get_last_tick = get_last_tick
        self._threshold_seconds = threshold_seconds
        self._repeat_seconds = repeat_seconds
        self._poll_seconds = poll_seconds
        self._now = now
        self._stop_event = threading.Event()
        self._thread = threading.Thread(
            target=self._run, name="HangWatchdog", daemon=True
        )
        self._last_dump: Optional[float] = None

    def start(self) -> None:
        self._thread.start()

    def stop(self) -> None:
        self._stop_event.set()

    def check(self) -> bool:
        """Dump threads if the last tick is too old. Returns True on a dump."""
        now = self._now()
        stalled = now - self._get_last_tick() > self._threshold_seconds
        if not stalled:
            return False
        if self._last_dump is not None and now - self._last_dump < self._repeat_seconds:
            return False
        self._last_dump = now
        logger.warning("Dispatch loop stalled, dumping threads")
        dump_threads("dispatch loop stalled")
        return True

    def _run(self) -> None:
        while not self._stop_event.is_set():
            self.check()
            self._stop_event.wait(self._poll_seconds)
