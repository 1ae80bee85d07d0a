"""Startup scan of the local music directory."""

from __future__ import annotations

from dataclasses import dataclass
import logging
from pathlib import Path
from typing import Callable, Iterable, Iterator, Optional, Sequence

logger = logging.getLogger(__name__)

ACCEPTED_EXTENSIONS = {"mp3", "flac", "wav", "aac", "m4a"}


@dataclass(frozen=True)
class CatalogEntry:
    """A playable track: display name, extension and whole-second duration."""

    name: str
    extension: str
    duration: int
    artist: Optional[str] = None

    @property
    def filename(self) -> str:
        return f"{self.name}.{self.extension}"


@dataclass(frozen=True)
class ProbeResult:
    duration: float
    sample_rate: Optional[int]
    artist: Optional[str] = None


Probe = Callable[[Path], Optional[ProbeResult]]


def _extract_text(value: object | None) -> str | None:
    if value is None:
        return None
    if hasattr(value, "text"):
        value = getattr(value, "text")
    if isinstance(value, (list, tuple)):
        value = value[0] if value else None
    if value is None:
        return None
    if isinstance(value, bytes):
        text = value.decode("utf-8", errors="replace")
    else:
        text = str(value)
    text = text.strip()
    return text or None


def _read_artist(tags: object | None) -> str | None:
    getter = getattr(tags, "get", None)
    if getter is None:
        return None
    for key in ("artist", "ARTIST", "TPE1", "TPE2", "\xa9ART", "aART"):
        try:
            text = _extract_text(getter(key))
        except (KeyError, ValueError):
            continue
        if text:
            return text
    return None


def probe_file(path: Path) -> Optional[ProbeResult]:
    """Read duration, sample rate and artist with mutagen; None if unreadable."""
    from mutagen import File as MutagenFile
    from mutagen import MutagenError

    try:
        audio = MutagenFile(path)
    except (MutagenError, OSError) as exc:
        logger.debug("Probe failed for %s: %s", path, exc)
        return None
    if audio is None or getattr(audio, "info", None) is None:
        return None
    length = getattr(audio.info, "length", None)
    if length is None:
        return None
    sample_rate = getattr(audio.info, "sample_rate", None)
    return ProbeResult(
        duration=float(length),
        sample_rate=int(sample_rate) if sample_rate else None,
        artist=_read_artist(getattr(audio, "tags", None)),
    )


def is_accepted(path: Path) -> bool:
    return path.suffix[1:].lower() in ACCEPTED_EXTENSIONS


class Catalog(Sequence[CatalogEntry]):
    """Immutable list of playable tracks rooted at one directory."""

    def __init__(self, directory: Path, entries: Iterable[CatalogEntry]) -> None:
        self.directory = directory
        self._entries = tuple(entries)

    def __getitem__(self, index):  # type: ignore[override]
        return self._entries[index]

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[CatalogEntry]:
        return iter(self._entries)

    def path_for(self, entry: CatalogEntry) -> Path:
        return self.directory / entry.filename


def build_catalog(directory: Path, *, probe: Probe = probe_file) -> Catalog:
    """Scan ``directory`` once. Files that fail to probe are skipped."""
    try:
        candidates = sorted(
            path for path in directory.iterdir() if path.is_file() and is_accepted(path)
        )
    except OSError as exc:
        logger.warning("Cannot scan music directory %s: %s", directory, exc)
        return Catalog(directory, [])
    entries: list[CatalogEntry] = []
    for path in candidates:
        try:
            result = probe(path)
        except Exception:
            logger.exception("Probe raised for %s", path)
            continue
        if result is None or not result.sample_rate:
            logger.debug("Skipping unreadable track %s", path)
            continue
        entries.append(
            CatalogEntry(
                name=path.stem,
                extension=path.suffix[1:],
                duration=max(0, int(result.duration)),
                artist=result.artist,
            )
        )
    logger.info("Catalog built from %s: %d tracks", directory, len(entries))
    return Catalog(directory, entries)
