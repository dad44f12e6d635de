# src/taskboard/core/state.py

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from ..tasks.task_repository import TaskRepository
from ..tasks.task_store import TaskStore


@dataclass
class AppState:
    # Settings (or a compatible SimpleNamespace in tests).
    settings: Any

    task_store: TaskStore
    repository: TaskRepository
