"""Frame layout shared by the draw pass."""

from __future__ import annotations

from typing import NamedTuple

from rich.layout import Layout

LIBRARY = "library"
SONGS = "songs"
PLAYER = "player"
STATUS = "status"
FPS = "fps"


class Size(NamedTuple):
    width: int
    height: int


def build_frame(size: Size) -> Layout:
    """Return an empty frame split into the regions components draw into."""
    root = Layout(name="root")
    root.split_column(
        Layout(name="body", ratio=1),
        Layout(name="footer", size=1),
    )
    root["body"].split_row(
        Layout(name=LIBRARY, ratio=1),
        Layout(name="right", ratio=3),
    )
    root["right"].split_column(
        Layout(name=SONGS, ratio=1),
        Layout(name=PLAYER, ratio=1),
    )
    fps_width = min(40, max(0, size.width // 3))
    root["footer"].split_row(
        Layout(name=STATUS, ratio=1),
        Layout(name=FPS, size=fps_width, visible=fps_width > 0),
    )
    for name in (LIBRARY, SONGS, PLAYER, STATUS, FPS):
        root[name].update("")
    return root
