"""Unbounded multi-producer, single-consumer action queue."""

from __future__ import annotations

import queue
from typing import Optional

from pavilion.action import Action
from pavilion.errors import ActionBusClosed


class ActionBus:
    """FIFO of actions. Producers never block; the consumer drains it."""

    def __init__(self) -> None:
        self._queue: queue.SimpleQueue[Action] = queue.SimpleQueue()
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def send(self, action: Action) -> None:
        if self._closed:
            raise ActionBusClosed(f"Action bus closed, dropped {action}")
        self._queue.put(action)

    def try_receive(self) -> Optional[Action]:
        """Return the oldest pending action, or None when the bus is empty."""
        try:
            return self._queue.get_nowait()
        except queue.Empty:
            return None

    def close(self) -> None:
        """Mark the consumer gone. Later sends raise ActionBusClosed."""
        self._closed = True

    def __len__(self) -> int:
        return self._queue.qsize()
