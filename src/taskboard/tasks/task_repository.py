# src/taskboard/tasks/task_repository.py

from __future__ import annotations

import logging
from collections.abc import Sequence

from .notifier import Subscription
from .task_models import Task, TaskRecord, record_to_task, task_to_record
from .task_store import TaskStore

logger = logging.getLogger(__name__)


def _records_to_tasks(records: Sequence[TaskRecord]) -> list[Task]:
    return [record_to_task(r) for r in records]


class TaskRepository:
    """
    Domain-facing facade over TaskStore.

    Pure pass-through plus record <-> Task mapping:
    - no validation (blank titles etc. are the holders' concern)
    - store errors propagate unchanged
    """

    def __init__(self, store: TaskStore) -> None:
        self._store = store

    async def get_all_tasks(self) -> Subscription[list[Task]]:
        records = await self._store.get_all()
        return records.map(_records_to_tasks)

    async def get_task_by_id(self, task_id: str) -> Task | None:
        record = await self._store.get_by_id(task_id)
        return record_to_task(record) if record is not None else None

    async def add_task(self, task: Task) -> None:
        await self._store.insert_or_replace(task_to_record(task))
        logger.debug("Task added id=%s", task.id)

    async def update_task(self, task: Task) -> None:
        await self._store.update(task_to_record(task))

    async def delete_task(self, task_id: str) -> None:
        await self._store.delete_by_id(task_id)

    async def toggle_task_completion(self, task_id: str) -> None:
        await self._store.toggle_completion(task_id)

    async def delete_all_tasks(self) -> None:
        await self._store.delete_all()
