"""Pytest configuration and shared fakes for Pavilion."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Callable, Optional

import pytest
from rich.layout import Layout

from pavilion.catalog import Catalog, CatalogEntry
from pavilion.errors import PlaybackError
from pavilion.ui.frame import Size, build_frame


def pytest_collection_modifyitems(
    config: pytest.Config, items: list[pytest.Item]
) -> None:
    del config
    if os.environ.get("PAVILION_CI") != "1":
        return
    skip_vlc = pytest.mark.skip(reason="Skipping VLC-dependent tests in CI.")
    for item in items:
        if "vlc" in item.keywords:
            item.add_marker(skip_vlc)


class FakeClock:
    def __init__(self, start: float = 0.0) -> None:
        self.value = start

    def __call__(self) -> float:
        return self.value

    def advance(self, seconds: float) -> None:
        self.value += seconds


class FakeStream:
    def __init__(self, device: "FakeDevice") -> None:
        self._device = device
        self.paths: list[Path] = []
        self.volume: Optional[float] = None
        self.stopped = False
        self.paused = False

    def append(self, path: Path) -> None:
        if path.name in self._device.broken:
            raise PlaybackError(f"cannot decode {path.name}")
        self.paths.append(path)

    def stop(self) -> None:
        self.stopped = True

    def pause(self) -> None:
        self.paused = True

    def resume(self) -> None:
        self.paused = False

    def set_volume(self, volume: float) -> None:
        self.volume = volume

    def is_paused(self) -> bool:
        return self.paused

    def is_empty(self) -> bool:
        return self.stopped or not self.paths


class FakeDevice:
    def __init__(self) -> None:
        self.streams: list[FakeStream] = []
        self.broken: set[str] = set()

    def open_stream(self) -> FakeStream:
        stream = FakeStream(self)
        self.streams.append(stream)
        return stream

    @property
    def active_streams(self) -> list[FakeStream]:
        return [stream for stream in self.streams if not stream.is_empty()]


class FakeDriver:
    def __init__(self, size: Size = Size(100, 30)) -> None:
        self.current = size
        self.calls: list[str] = []
        self.frames: list[Layout] = []

    def enter(self) -> None:
        self.calls.append("enter")

    def exit(self) -> None:
        self.calls.append("exit")

    def suspend(self) -> None:
        self.calls.append("suspend")

    def size(self) -> Size:
        return self.current

    def resize(self, size: Size) -> None:
        self.calls.append("resize")
        self.current = size

    def clear(self) -> None:
        self.calls.append("clear")

    def draw(self, callback: Callable[[Layout, Size], None]) -> None:
        self.calls.append("draw")
        frame = build_frame(self.current)
        callback(frame, self.current)
        self.frames.append(frame)


def _make_catalog(count: int = 4, duration: int = 10) -> Catalog:
    entries = [CatalogEntry(f"track{i}", "mp3", duration) for i in range(count)]
    return Catalog(Path("music"), entries)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def device() -> FakeDevice:
    return FakeDevice()


@pytest.fixture
def driver() -> FakeDriver:
    return FakeDriver()


@pytest.fixture
def catalog() -> Catalog:
    return _make_catalog()


@pytest.fixture
def catalog_factory() -> Callable[..., Catalog]:
    return _make_catalog
