# src/taskboard/bootstrap.py

"""
Composition root.

Explicit constructor injection, no container:
    Settings -> TaskStore -> TaskRepository -> holders

- loads settings once,
- configures logging from settings,
- ensures local (gitignored) directories exist,
- builds holders with the configured timeouts.
"""

from __future__ import annotations

import logging
from pathlib import Path

from .config import get_settings
from .core.state import AppState
from .logging_setup import setup_logging
from .presentation.detail_holder import TaskDetailHolder
from .presentation.list_holder import TaskListHolder
from .tasks.task_repository import TaskRepository
from .tasks.task_store import TaskStore

logger = logging.getLogger(__name__)


def _level(name: object, default: int) -> int:
    level = getattr(logging, str(name).upper(), default)
    return level if isinstance(level, int) else default


def configure_logging(settings) -> Path:
    """Map the logging fields of Settings onto setup_logging(). The file lives under data_dir."""
    return setup_logging(
        log_dir=getattr(settings, "data_dir", ".local/taskboard"),
        log_file=getattr(settings, "log_file_name", "taskboard.log"),
        console_level=_level(getattr(settings, "log_level", "INFO"), logging.INFO),
        file_level=_level(getattr(settings, "log_file_level", "DEBUG"), logging.DEBUG),
        quiet_loggers=getattr(settings, "quiet_loggers", ("asyncio",)),
    )


def _ensure_local_dirs(settings) -> None:
    Path(settings.data_dir).mkdir(parents=True, exist_ok=True)
    Path(settings.tasks_db_path).parent.mkdir(parents=True, exist_ok=True)


def create_initial_state(*, settings=None) -> AppState:
    """
    Create AppState from the provided settings.

    Keeping settings injectable makes the app easier to test and avoids hidden global config reads.
    If settings is None, falls back to get_settings().
    """
    if settings is None:
        settings = get_settings()

    _ensure_local_dirs(settings)

    store = TaskStore(
        settings.tasks_db_path,
        seed=bool(getattr(settings, "seed_on_create", True)),
        timeout=float(getattr(settings, "db_timeout_seconds", 30.0)),
    )
    state = AppState(settings=settings, task_store=store, repository=TaskRepository(store))
    logger.info("Starting %s (db=%s)", getattr(settings, "app_name", "taskboard"), store.db_path)
    return state


def _error_timeout(settings) -> float | None:
    seconds = float(getattr(settings, "error_display_seconds", 0.0) or 0.0)
    return seconds if seconds > 0 else None


def new_list_holder(state: AppState) -> TaskListHolder:
    return TaskListHolder(
        state.repository,
        stop_timeout=float(getattr(state.settings, "list_stop_timeout_seconds", 5.0)),
        error_timeout=_error_timeout(state.settings),
    )


def new_detail_holder(state: AppState, task_id: str | None) -> TaskDetailHolder:
    """Must be called inside the running event loop (the holder starts loading at once)."""
    return TaskDetailHolder(state.repository, task_id, error_timeout=_error_timeout(state.settings))


def shutdown(state: AppState) -> None:
    """Best-effort shutdown: end live subscriptions."""
    try:
        state.task_store.close()
    except Exception:
        logger.exception("TaskStore close failed.")
    logger.info("Bye.")
