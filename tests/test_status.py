"""Tests for the status line component."""

from __future__ import annotations

from pavilion.action import Action, ActionKind
from pavilion.components.status import DEFAULT_HINT, StatusLine
from pavilion.keymap import build_keymap


def _status(clock) -> StatusLine:
    keymap = build_keymap({"Home": {"q": "Quit", "g g": "Help"}}, defaults={})
    return StatusLine(keymap, now=clock)


def test_hint_shown_without_message(clock) -> None:
    status = _status(clock)
    line = status.render_line(200)
    assert line.plain == DEFAULT_HINT
    assert str(line.style) == "bright_black"


def test_error_action_shows_and_expires(clock) -> None:
    status = _status(clock)
    status.update(Action.error("Failed to play x"))
    line = status.render_line(80)
    assert line.plain == "Failed to play x"
    assert str(line.style) == "#ff5f52"
    clock.advance(5.9)
    status.update(Action(ActionKind.TICK))
    assert status.render_line(80).plain == "Failed to play x"
    clock.advance(0.2)
    status.update(Action(ActionKind.TICK))
    assert status.render_line(80).plain == DEFAULT_HINT


def test_help_lists_bindings(clock) -> None:
    status = _status(clock)
    assert status.help_text() == "g g: Help  q: Quit"
    status.update(Action(ActionKind.HELP))
    assert status.render_line(80).plain == "g g: Help  q: Quit"


def test_transport_messages(clock) -> None:
    status = _status(clock)
    status.update(Action(ActionKind.STOP))
    assert status.render_line(80).plain == "Stopped"
    status.update(Action(ActionKind.TOGGLE_PAUSE))
    assert status.render_line(80).plain == "Pause toggled"
    clock.advance(3.1)
    assert status.render_line(80).plain == DEFAULT_HINT


def test_message_without_timeout_persists(clock) -> None:
    status = _status(clock)
    status.show_message("pinned", level="warn", timeout=0)
    clock.advance(1000)
    line = status.render_line(80)
    assert line.plain == "pinned"
    assert str(line.style) == "#ffcc66"
    status.clear_message()
    assert status.render_line(80).plain == DEFAULT_HINT


def test_long_messages_are_ellipsized(clock) -> None:
    status = _status(clock)
    status.show_message("x" * 50)
    assert status.render_line(10).plain == "xxxxxxx..."
