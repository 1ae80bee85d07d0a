"""Logging setup for Pavilion.

The root logger writes to a rotating ``app.log`` in the data directory and to
stderr. While the TUI owns the terminal the stderr handler is raised to
WARNING with :func:`set_console_level`.
"""

from __future__ import annotations

import logging
from logging.handlers import RotatingFileHandler
import os
from pathlib import Path

from pavilion.config import APP_NAME, get_data_dir

LOG_LEVEL_ENV = "PAVILION_LOG_LEVEL"
LOG_FILE_NAME = "app.log"
LOG_FORMAT = "%(asctime)s %(levelname)s [%(threadName)s] %(name)s: %(message)s"
MAX_LOG_BYTES = 2_000_000
LOG_BACKUPS = 5


def _default_log_dir() -> Path:
    return get_data_dir() / "logs"


def _resolve_level() -> int:
    level = logging.getLevelName(os.getenv(LOG_LEVEL_ENV, "INFO").upper())
    return level if isinstance(level, int) else logging.INFO


def _is_console_handler(handler: logging.Handler) -> bool:
    return isinstance(handler, logging.StreamHandler) and not isinstance(
        handler, logging.FileHandler
    )


def _open_file_handler(log_path: Path) -> RotatingFileHandler:
    log_path.parent.mkdir(parents=True, exist_ok=True)
    return RotatingFileHandler(
        log_path, maxBytes=MAX_LOG_BYTES, backupCount=LOG_BACKUPS, encoding="utf-8"
    )


def init_logging(app_name: str = APP_NAME) -> Path:
    """Configure the root logger once and return the log file path.

    Handlers already present on the root logger are kept, so calling this
    twice does not duplicate output. If the log directory cannot be created
    logging falls back to stderr only.
    """
    log_path = _default_log_dir() / LOG_FILE_NAME
    level = _resolve_level()
    root = logging.getLogger()
    root.setLevel(level)
    formatter = logging.Formatter(LOG_FORMAT)

    handlers: list[logging.Handler] = []
    if not any(isinstance(h, RotatingFileHandler) for h in root.handlers):
        try:
            handlers.append(_open_file_handler(log_path))
        except OSError:
            logging.basicConfig(level=level, format=LOG_FORMAT)
    if not any(_is_console_handler(h) for h in root.handlers):
        handlers.append(logging.StreamHandler())
    for handler in handlers:
        handler.setLevel(level)
        handler.setFormatter(formatter)
        root.addHandler(handler)

    logging.getLogger(app_name).info("Logging initialized at %s", log_path)
    return log_path


def set_console_level(level: int) -> None:
    """Adjust the stderr handler level, e.g. while the TUI owns the screen."""
    for handler in logging.getLogger().handlers:
        if _is_console_handler(handler):
            handler.setLevel(level)
