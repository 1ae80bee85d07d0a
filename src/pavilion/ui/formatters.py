"""Text helpers for transport rendering."""

from __future__ import annotations


def format_clock(seconds: float) -> str:
    """Format whole seconds as ``m:ss``."""
    total = max(0, int(seconds))
    minutes, secs = divmod(total, 60)
    return f"{minutes}:{secs:02d}"


def format_transport_time(position: float, duration: float) -> str:
    remaining = max(0, int(duration) - int(position))
    return (
        f"{format_clock(position)}/{format_clock(duration)}"
        f" (-{format_clock(remaining)})"
    )


def progress_ratio(position: float, duration: float) -> float:
    if duration <= 0:
        return 0.0
    return max(0.0, min(1.0, position / duration))


def ellipsize(text: str, max_len: int) -> str:
    if max_len <= 0:
        return ""
    if len(text) <= max_len:
        return text
    if max_len <= 3:
        return "." * max_len
    return text[: max_len - 3] + "..."


def render_progress_bar(width: int, ratio: float) -> str:
    if width <= 0:
        return ""
    if width < 3:
        return "=" * width if ratio >= 1.0 else "-" * width
    inner = width - 2
    filled = int(max(0.0, min(1.0, ratio)) * inner)
    return "[" + "=" * filled + "-" * (inner - filled) + "]"


def pad_title(title: str, width: int = 30) -> str:
    return f"{ellipsize(title, width):<{width}}"
