"""Audio output contract and the python-vlc backend behind it."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Optional, Protocol, cast

from pavilion.errors import OutputUnavailable, PlaybackError

vlc: Any | None = None
_VLC_IMPORT_ERROR: Optional[Exception] = None

_EMPTY_STATES = {"nothingspecial", "stopped", "ended", "error", "unknown"}


class OutputStream(Protocol):
    """One playback stream. The player owns at most one at a time."""

    def append(self, path: Path) -> None: ...

    def stop(self) -> None: ...

    def pause(self) -> None: ...

    def resume(self) -> None: ...

    def set_volume(self, volume: float) -> None: ...

    def is_paused(self) -> bool: ...

    def is_empty(self) -> bool: ...


class OutputDevice(Protocol):
    def open_stream(self) -> OutputStream: ...


def _load_vlc() -> None:
    global vlc
    global _VLC_IMPORT_ERROR
    if vlc is not None or _VLC_IMPORT_ERROR is not None:
        return
    try:
        import vlc as vlc_module  # type: ignore
    except Exception as exc:  # pragma: no cover - platform-dependent import
        vlc = None
        _VLC_IMPORT_ERROR = exc
    else:
        vlc = cast(Any, vlc_module)
        _VLC_IMPORT_ERROR = None


class VlcStream:
    """A python-vlc MediaPlayer used as a single-source stream."""

    def __init__(self, instance: Any) -> None:
        self._instance = instance
        self._player = instance.media_player_new()
        self._loaded = False
        self._released = False

    def append(self, path: Path) -> None:
        try:
            with open(path, "rb") as handle:
                handle.read(1)
        except OSError as exc:
            raise PlaybackError(f"Cannot open {path}: {exc}") from exc
        media = self._instance.media_new(str(path))
        if media is None:
            raise PlaybackError(f"Cannot decode {path}")
        self._player.set_media(media)
        if self._player.play() == -1:
            raise PlaybackError(f"Cannot start playback of {path}")
        self._loaded = True

    def stop(self) -> None:
        """Stop playback and release the native player. The stream is spent."""
        self._loaded = False
        if self._released:
            return
        self._released = True
        self._player.stop()
        self._player.release()

    def pause(self) -> None:
        if not self._released:
            self._player.set_pause(1)

    def resume(self) -> None:
        if not self._released:
            self._player.set_pause(0)

    def set_volume(self, volume: float) -> None:
        if self._released:
            return
        self._player.audio_set_volume(int(round(max(0.0, min(1.0, volume)) * 100)))

    def state(self) -> str:
        """Return a best-effort playback state string."""
        if self._released:
            return "stopped"
        try:
            state = self._player.get_state()
        except Exception:
            return "unknown"
        if state is None:
            return "unknown"
        name = getattr(state, "name", None)
        if isinstance(name, str):
            return name.lower()
        return str(state).lower().rsplit(".", 1)[-1]

    def is_paused(self) -> bool:
        return self.state() == "paused"

    def is_empty(self) -> bool:
        if not self._loaded:
            return True
        return self.state() in _EMPTY_STATES


class VlcOutputDevice:
    """Opens VLC once; raises OutputUnavailable when VLC cannot be used."""

    def __init__(self) -> None:
        _load_vlc()
        if vlc is None:
            raise OutputUnavailable(
                "VLC backend is unavailable. Install VLC and the python-vlc package."
            ) from _VLC_IMPORT_ERROR
        try:
            self._instance = cast(Any, vlc).Instance("--no-video", "--quiet")
        except Exception as exc:
            raise OutputUnavailable(f"Cannot open audio output: {exc}") from exc
        if self._instance is None:
            raise OutputUnavailable("Cannot open audio output")

    def open_stream(self) -> VlcStream:
        return VlcStream(self._instance)
