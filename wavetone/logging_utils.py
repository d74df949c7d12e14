"""Logging setup for the ``wavetone`` logger tree.

Console records go to the real stderr so they never interleave with the
audio status line; every record at DEBUG and above also lands in
``$WAVETONE_LOG_DIR/wavetone.log``.
"""

from __future__ import annotations

import logging
import os
import sys
import traceback
from datetime import datetime
from pathlib import Path

_LOGGER = logging.getLogger("wavetone.logging")
_ROOT_LOGGER = "wavetone"
_LOG_DIR_ENV = "WAVETONE_LOG_DIR"
_DEBUG_ENV = "WAVETONE_DEBUG"
_configured = False


class _ConsoleFormatter(logging.Formatter):
    """``wavetone[W] notes: message``; drops the package prefix from logger names."""

    def __init__(self) -> None:
        super().__init__("wavetone[%(levelname).1s] %(short_name)s: %(message)s")

    def format(self, record: logging.LogRecord) -> str:
        name = record.name
        if name.startswith(_ROOT_LOGGER + "."):
            name = name[len(_ROOT_LOGGER) + 1 :]
        record.short_name = name
        return super().format(record)


def get_log_dir() -> Path:
    configured = os.environ.get(_LOG_DIR_ENV)
    if configured:
        return Path(configured).expanduser()
    return Path.home() / ".cache" / "wavetone" / "logs"


def get_log_path() -> Path:
    return get_log_dir() / "wavetone.log"


def debug_enabled() -> bool:
    return bool(os.environ.get(_DEBUG_ENV))


def _console_handler() -> logging.Handler:
    handler = logging.StreamHandler(stream=sys.__stderr__)
    handler.setLevel(logging.DEBUG if debug_enabled() else logging.INFO)
    handler.setFormatter(_ConsoleFormatter())
    return handler


def _file_handler() -> logging.Handler:
    path = get_log_path()
    path.parent.mkdir(parents=True, exist_ok=True)
    handler = logging.FileHandler(path, encoding="utf-8")
    handler.setLevel(logging.DEBUG)
    handler.setFormatter(
        logging.Formatter(
            "%(asctime)s %(levelname)-7s %(name)s %(message)s",
            datefmt="%Y-%m-%dT%H:%M:%S",
        )
    )
    return handler


def configure_logging(*, force: bool = False) -> None:
    """Attach console and file handlers to the ``wavetone`` logger once per process.

    The console handler is skipped when the host application already
    configured the root logger, unless ``force`` is set.
    """
    global _configured
    if _configured and not force:
        return

    logger = logging.getLogger(_ROOT_LOGGER)
    logger.setLevel(logging.DEBUG)
    if force:
        for handler in list(logger.handlers):
            logger.removeHandler(handler)
            handler.close()

    if force or not logging.getLogger().handlers:
        logger.addHandler(_console_handler())
    try:
        logger.addHandler(_file_handler())
    except OSError as exc:
        _LOGGER.warning("File logging disabled: %s", exc, exc_info=True)

    logger.propagate = True
    _configured = True


def log_exception(context: str, exc: BaseException) -> Path | None:
    """Append ``exc`` with its traceback to the log file; returns the path, or ``None`` on failure."""
    path = get_log_path()
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        with path.open("a", encoding="utf-8") as handle:
            handle.write(
                f"{datetime.now().isoformat(timespec='seconds')} {context}: "
                f"{type(exc).__name__}: {exc}\n"
            )
            traceback.print_exception(type(exc), exc, exc.__traceback__, file=handle)
            handle.write("\n")
    except OSError as log_exc:
        _LOGGER.warning("Could not write %s: %s", path, log_exc, exc_info=True)
        return None
    return path
