"""Component registry with precomputed interest filters."""

from __future__ import annotations

from typing import Iterable, Iterator, Sequence

from pavilion.action import ActionKind
from pavilion.components import Component
from pavilion.event import EventKind


class ComponentRegistry:
    """Ordered components plus their interest lists, index-aligned."""

    def __init__(self, components: Iterable[Component]) -> None:
        self.components: list[Component] = list(components)
        self.action_interests: list[frozenset[ActionKind]] = [
            frozenset(component.interested_actions()) for component in self.components
        ]
        self.event_interests: list[frozenset[EventKind]] = [
            frozenset(component.interested_events()) for component in self.components
        ]

    def __len__(self) -> int:
        return len(self.components)

    def __iter__(self) -> Iterator[Component]:
        return iter(self.components)

    def for_action(self, kind: ActionKind) -> Iterator[Component]:
        """Yield components whose action interest matches ``kind``."""
        return self._matching(self.action_interests, kind)

    def for_event(self, kind: EventKind) -> Iterator[Component]:
        """Yield components whose event interest matches ``kind``."""
        return self._matching(self.event_interests, kind)

    def _matching(
        self, interests: Sequence[frozenset], kind: object
    ) -> Iterator[Component]:
        for index, component in enumerate(self.components):
            wanted = interests[index]
            if not wanted or kind in wanted:
                yield component
