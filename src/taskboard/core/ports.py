# src/taskboard/core/ports.py

from __future__ import annotations

"""
Ports (interfaces) used by the holders.

Holders depend on the TaskRepo Protocol instead of the concrete repository,
so the SQLite-backed implementation can be swapped for a test double.
"""

from typing import Protocol

from ..tasks.notifier import Subscription
from ..tasks.task_models import Task


class TaskRepo(Protocol):
    """Read/write contract over domain tasks. No business validation."""

    async def get_all_tasks(self) -> Subscription[list[Task]]: ...
    async def get_task_by_id(self, task_id: str) -> Task | None: ...

    async def add_task(self, task: Task) -> None: ...
    async def update_task(self, task: Task) -> None: ...
    async def delete_task(self, task_id: str) -> None: ...
    async def toggle_task_completion(self, task_id: str) -> None: ...
    async def delete_all_tasks(self) -> None: ...
