"""Command-line interface for Pavilion."""

from __future__ import annotations

import argparse
from importlib import metadata
import logging
import os
import sys
import threading
from types import TracebackType
from typing import Iterable, Optional, Tuple

from pavilion.config import AppConfig, get_config_dir, get_data_dir, load_config
from pavilion.hangwatch import dump_threads, enable_faulthandler
from pavilion.logging_setup import init_logging

logger = logging.getLogger(__name__)

AUTHORS = "Pavilion contributors"


def package_version() -> str:
    try:
        return metadata.version("pavilion")
    except metadata.PackageNotFoundError:
        return "0.0.0"


def version() -> str:
    """Return the long version text: build metadata plus directories."""
    git_describe = os.environ.get("PAVILION_GIT_DESCRIBE") or "unknown"
    build_date = os.environ.get("PAVILION_BUILD_DATE") or "unknown"
    return (
        f"{package_version()}-{git_describe} ({build_date})\n"
        "\n"
        f"Authors: {AUTHORS}\n"
        "\n"
        f"Config directory: {get_config_dir()}\n"
        f"Data directory: {get_data_dir()}"
    )


def _positive_float(text: str) -> float:
    try:
        value = float(text)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid float value: {text!r}") from None
    if value <= 0:
        raise argparse.ArgumentTypeError("must be greater than zero")
    return value


def build_parser() -> argparse.ArgumentParser:
    """Build and return the CLI argument parser."""
    parser = argparse.ArgumentParser(
        prog="pavilion", description="Terminal music player for a local library"
    )
    parser.add_argument(
        "-t",
        "--tick-rate",
        type=_positive_float,
        default=4.0,
        metavar="FLOAT",
        help="Tick rate, i.e. number of ticks per second",
    )
    parser.add_argument(
        "-f",
        "--frame-rate",
        type=_positive_float,
        default=60.0,
        metavar="FLOAT",
        help="Frame rate, i.e. number of frames per second",
    )
    parser.add_argument("-V", "--version", action="version", version=version())
    return parser


def _run_tui(config: AppConfig, tick_rate: float, frame_rate: float) -> int:
    try:
        from pavilion.tui import run_tui
    except RuntimeError as exc:
        print(str(exc), file=sys.stderr)
        return 1
    return run_tui(config, tick_rate=tick_rate, frame_rate=frame_rate)


def _install_exception_hooks() -> None:
    def excepthook(exc_type, exc, tb) -> None:
        logger.exception("Uncaught exception", exc_info=(exc_type, exc, tb))
        dump_threads("uncaught exception")

    sys.excepthook = excepthook

    def thread_hook(args: threading.ExceptHookArgs) -> None:
        exc_value = args.exc_value or RuntimeError("unknown")
        exc_info: Tuple[type[BaseException], BaseException, Optional[TracebackType]] = (
            args.exc_type,
            exc_value,
            args.exc_traceback,
        )
        thread_name = args.thread.name if args.thread else "thread"
        logger.exception("Thread exception in %s", thread_name, exc_info=exc_info)
        dump_threads(f"thread exception in {thread_name}")

    threading.excepthook = thread_hook


def main(argv: Optional[Iterable[str]] = None) -> int:
    """Entry point for the CLI."""
    parser = build_parser()
    args = parser.parse_args(list(argv) if argv is not None else None)

    log_path = init_logging()
    enable_faulthandler(log_path)
    _install_exception_hooks()
    logger.info(
        "App start tick_rate=%s frame_rate=%s", args.tick_rate, args.frame_rate
    )

    config = load_config()
    exit_code = _run_tui(config, args.tick_rate, args.frame_rate)
    logger.info("App exit code=%s", exit_code)
    return exit_code


if __name__ == "__main__":
    raise SystemExit(main())
