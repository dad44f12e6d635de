# src/taskboard/logging_setup.py

"""
Root logging for taskboard.

Two handlers hang off the root logger: a console handler that shows the app's
own records (other sources only from ERROR up) and a file handler that keeps
everything. Both are tagged, so a second setup replaces them without touching
handlers that someone else installed.
"""

from __future__ import annotations

import logging
import sys
from collections.abc import Iterable
from pathlib import Path

APP_LOGGER = "taskboard"

_HANDLER_TAG = "_taskboard_handler"

_FORMAT = "%(asctime)s.%(msecs)03d %(levelname)-7s [%(name)s] %(message)s"
_DATEFMT = "%H:%M:%S"


class _AppRecordsFilter(logging.Filter):
    def __init__(self, app_logger: str) -> None:
        super().__init__()
        self._app_logger = app_logger
        self._prefix = f"{app_logger}."

    def filter(self, record: logging.LogRecord) -> bool:
        if record.name == self._app_logger or record.name.startswith(self._prefix):
            return True
        # py.warnings and third-party loggers
        return record.levelno >= logging.ERROR


def installed_handlers() -> list[logging.Handler]:
    """Handlers on the root logger that setup_logging() put there."""
    return [h for h in logging.getLogger().handlers if getattr(h, _HANDLER_TAG, False)]


def teardown_logging() -> None:
    root = logging.getLogger()
    for handler in installed_handlers():
        root.removeHandler(handler)
        handler.close()


def setup_logging(
    *,
    log_dir: str | Path = ".local/taskboard",
    log_file: str = "taskboard.log",
    console_level: int = logging.INFO,
    file_level: int = logging.DEBUG,
    app_logger: str = APP_LOGGER,
    quiet_loggers: Iterable[str] = ("asyncio",),
) -> Path:
    """
    Install the console and file handlers and return the log file path.

    Loggers named in `quiet_loggers` are capped at WARNING.
    """
    path = Path(log_dir) / log_file
    path.parent.mkdir(parents=True, exist_ok=True)

    teardown_logging()

    root = logging.getLogger()
    root.setLevel(min(console_level, file_level))
    formatter = logging.Formatter(fmt=_FORMAT, datefmt=_DATEFMT)

    console = logging.StreamHandler(sys.stderr)
    console.setLevel(console_level)
    console.addFilter(_AppRecordsFilter(app_logger))

    file_handler = logging.FileHandler(str(path), encoding="utf-8")
    file_handler.setLevel(file_level)

    for handler in (console, file_handler):
        handler.setFormatter(formatter)
        setattr(handler, _HANDLER_TAG, True)
        root.addHandler(handler)

    logging.captureWarnings(True)

    for name in quiet_loggers:
        logging.getLogger(name).setLevel(logging.WARNING)

    logging.getLogger(__name__).debug(
        "logging ready file=%s console=%s file_level=%s",
        path,
        logging.getLevelName(console_level),
        logging.getLevelName(file_level),
    )
    return path
