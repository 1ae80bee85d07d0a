"""Tests for hangwatch helpers."""

from __future__ import annotations

import io

from pavilion import hangwatch


def test_enable_faulthandler_creates_hangdump(tmp_path, monkeypatch) -> None:
    calls: list[object] = []

    def fake_enable(*, file, all_threads: bool) -> None:
        calls.append((file, all_threads))

    monkeypatch.setattr(hangwatch.faulthandler, "enable", fake_enable)
    hang_path = hangwatch.enable_faulthandler(tmp_path / "logs" / "app.log")
    assert hang_path == tmp_path / "logs" / "hangdump.log"
    assert hang_path.exists()
    assert calls
    handle = hangwatch._HANG_FILE
    assert handle is not None
    handle.close()
    hangwatch._HANG_FILE = None


def test_dump_threads_writes_header(monkeypatch) -> None:
    buffer = io.StringIO()

    def fake_dump_traceback(*, file, all_threads: bool) -> None:
        file.write("traceback")

    monkeypatch.setattr(hangwatch.faulthandler, "dump_traceback", fake_dump_traceback)
    monkeypatch.setattr(hangwatch, "_HANG_FILE", buffer)
    hangwatch.dump_threads("test")
    output = buffer.getvalue()
    assert "test" in output
    assert "traceback" in output


def test_dump_threads_without_file_is_noop(monkeypatch) -> None:
    monkeypatch.setattr(hangwatch, "_HANG_FILE", None)
    hangwatch.dump_threads("ignored")


def test_check_respects_threshold_and_repeat(monkeypatch) -> None:
    calls: list[str] = []
    monkeypatch.setattr(hangwatch, "dump_threads", calls.append)
    clock = {"now": 10.0}
    watchdog = hangwatch.HangWatchdog(
        lambda: 0.0,
        threshold_seconds=15.0,
        repeat_seconds=30.0,
        now=lambda: clock["now"],
    )
    assert watchdog.check() is False
    clock["now"] = 16.0
    assert watchdog.check() is True
    clock["now"] = 20.0
    assert watchdog.check() is False
    clock["now"] = 46.5
    assert watchdog.check() is True
    assert calls == ["dispatch loop stalled", "dispatch loop stalled"]


def test_watchdog_run_loop_triggers_dump(monkeypatch) -> None:
    calls: list[str] = []

    class _Stop:
        def __init__(self) -> None:
            self._set = False

        def is_set(self) -> bool:
            return self._set

        def set(self) -> None:
            self._set = True

        def wait(self, _seconds: float) -> bool:
            self._set = True
            return True

    monkeypatch.setattr(hangwatch, "dump_threads", calls.append)
    watchdog = hangwatch.HangWatchdog(
        lambda: 0.0, threshold_seconds=1.0, now=lambda: 100.0
    )
    watchdog._stop_event = _Stop()  # type: ignore[assignment]
    watchdog._run()
    assert calls == ["dispatch loop stalled"]
