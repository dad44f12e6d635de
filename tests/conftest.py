# tests/conftest.py

from __future__ import annotations

from pathlib import Path
from types import SimpleNamespace

import pytest

from taskboard.tasks.task_repository import TaskRepository
from taskboard.tasks.task_store import TaskStore


@pytest.fixture()
def settings(tmp_path: Path) -> SimpleNamespace:
    """
    Minimal settings object compatible with AppState and the bootstrap helpers.

    We intentionally use a SimpleNamespace rather than importing real config,
    to keep unit tests isolated and deterministic.
    """
    return SimpleNamespace(
        app_name="taskboard-test",
        log_level="DEBUG",
        log_file_name="taskboard-test.log",
        log_file_level="DEBUG",
        quiet_loggers=("taskboard-test.noisy",),
        data_dir=tmp_path / "data",
        tasks_db_path=tmp_path / "data" / "tasks.sqlite3",
        seed_on_create=True,
        db_timeout_seconds=5.0,
        list_stop_timeout_seconds=0.05,
        error_display_seconds=0.0,
    )


@pytest.fixture()
def store(tmp_path: Path):
    """Empty (unseeded) SQLite store; subscriptions are closed on teardown."""
    s = TaskStore(tmp_path / "tasks.sqlite3", seed=False)
    yield s
    s.close()


@pytest.fixture()
def seeded_store(tmp_path: Path):
    s = TaskStore(tmp_path / "seeded.sqlite3")
    yield s
    s.close()


@pytest.fixture()
def repository(store: TaskStore) -> TaskRepository:
    return TaskRepository(store)
