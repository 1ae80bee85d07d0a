"""Configuration persistence for Pavilion."""

from __future__ import annotations

from dataclasses import dataclass, field
import json
import logging
import os
from pathlib import Path
from typing import Any, Mapping

logger = logging.getLogger(__name__)

APP_NAME = "pavilion"


@dataclass(frozen=True)
class AppConfig:
    """Immutable user configuration loaded from disk."""

    music_dir: str = "local_music"
    volume: int = 50
    keybindings: Mapping[str, Mapping[str, str]] = field(default_factory=dict)

    @property
    def music_path(self) -> Path:
        return Path(self.music_dir).expanduser()


def get_config_dir(app_name: str = APP_NAME) -> Path:
    """Return the per-user config directory for the current platform."""
    override = os.environ.get("PAVILION_CONFIG")
    if override:
        return Path(override)
    if os.name == "nt":
        base = os.environ.get("APPDATA")
        root = Path(base) if base else Path.home() / "AppData" / "Roaming"
        return root / app_name
    if _is_macos():
        return Path.home() / "Library" / "Application Support" / app_name
    base = os.environ.get("XDG_CONFIG_HOME")
    root = Path(base) if base else Path.home() / ".config"
    return root / app_name


def get_data_dir(app_name: str = APP_NAME) -> Path:
    """Return the per-user data directory (logs live here)."""
    override = os.environ.get("PAVILION_DATA")
    if override:
        return Path(override)
    if os.name == "nt":
        base = os.environ.get("LOCALAPPDATA")
        root = Path(base) if base else Path.home() / "AppData" / "Local"
        return root / app_name
    if _is_macos():
        return Path.home() / "Library" / "Application Support" / app_name
    base = os.environ.get("XDG_DATA_HOME")
    root = Path(base) if base else Path.home() / ".local" / "share"
    return root / app_name


def get_config_path() -> Path:
    """Return the full config file path."""
    return get_config_dir() / "config.json"


def load_config() -> AppConfig:
    """Load configuration from disk, falling back to defaults on error."""
    path = get_config_path()
    if not path.exists():
        return AppConfig()
    try:
        raw = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError):
        logger.exception("Failed to load config from %s", path)
        return AppConfig()
    if not isinstance(raw, dict):
        return AppConfig()
    return _config_from_mapping(raw)


def save_config(cfg: AppConfig) -> None:
    """Persist configuration to disk atomically."""
    path = get_config_path()
    path.parent.mkdir(parents=True, exist_ok=True)
    temp_path = path.with_suffix(".tmp")
    data = {
        "music_dir": cfg.music_dir,
        "volume": cfg.volume,
        "keybindings": {mode: dict(table) for mode, table in cfg.keybindings.items()},
    }
    temp_path.write_text(json.dumps(data, indent=2), encoding="utf-8")
    os.replace(temp_path, path)


def _is_macos() -> bool:
    """Return True when running on macOS."""
    return os.uname().sysname == "Darwin" if hasattr(os, "uname") else False


def _get_int(
    raw: dict[str, Any],
    key: str,
    default: int,
    *,
    min_value: int | None = None,
    max_value: int | None = None,
) -> int:
    """Fetch an integer value with optional clamping."""
    value = raw.get(key, default)
    if not isinstance(value, int) or isinstance(value, bool):
        value = default
    if min_value is not None:
        value = max(min_value, value)
    if max_value is not None:
        value = min(max_value, value)
    return value


def _get_str(raw: dict[str, Any], key: str, default: str) -> str:
    value = raw.get(key, default)
    if not isinstance(value, str) or not value:
        return default
    return value


def _get_keybindings(raw: dict[str, Any]) -> dict[str, dict[str, str]]:
    value = raw.get("keybindings")
    if not isinstance(value, dict):
        return {}
    bindings: dict[str, dict[str, str]] = {}
    for mode, table in value.items():
        if not isinstance(table, dict):
            logger.warning("Ignoring keybindings for %r: expected an object", mode)
            continue
        bindings[str(mode)] = {
            str(chord): str(action)
            for chord, action in table.items()
            if isinstance(action, str)
        }
    return bindings


def _config_from_mapping(raw: dict[str, Any]) -> AppConfig:
    """Normalize raw JSON data into an AppConfig."""
    return AppConfig(
        music_dir=_get_str(raw, "music_dir", "local_music"),
        volume=_get_int(raw, "volume", 50, min_value=0, max_value=100),
        keybindings=_get_keybindings(raw),
    )
