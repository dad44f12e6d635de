# src/taskboard/presentation/detail_holder.py

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass

from ..core.ports import TaskRepo
from ..errors import MissingTaskIdError
from ..tasks.task_models import Task
from .state import StateHolder

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class TaskDetailUiState:
    task: Task | None = None
    is_loading: bool = False
    error: str | None = None
    is_deleted: bool = False


class TaskDetailHolder(StateHolder[TaskDetailUiState]):
    """
    Holder for a single task screen.

    - bound to one task id for its whole life
    - fetches the task once on creation (no live query)
    - after a successful write, updates local state optimistically instead of
      re-fetching

    Known race: if the task is deleted elsewhere, update/toggle become store
    no-ops but local state still changes, so the screen can drift from the store.
    """

    def __init__(
        self,
        repository: TaskRepo,
        task_id: str | None,
        *,
        error_timeout: float | None = None,
    ) -> None:
        if task_id is None or not str(task_id).strip():
            raise MissingTaskIdError("TaskDetailHolder requires a task id")

        super().__init__(TaskDetailUiState(is_loading=True), error_timeout=error_timeout, name="task_detail")
        self._repository = repository
        self._task_id = str(task_id)

        # Raises RuntimeError outside a running loop.
        loop = asyncio.get_running_loop()
        self._load_task = loop.create_task(self._load(), name=f"task-detail-load:{self._task_id}")

    @property
    def task_id(self) -> str:
        return self._task_id

    async def wait_loaded(self) -> None:
        await asyncio.gather(self._load_task, return_exceptions=True)

    async def _load(self) -> None:
        try:
            task = await self._repository.get_task_by_id(self._task_id)
        except Exception as exc:
            logger.exception("Loading task %s failed", self._task_id)
            self._report_error(exc, "Unknown error occurred", is_loading=False)
            return

        if task is None:
            logger.info("Task %s not found", self._task_id)
        self._set_state(task=task, is_loading=False, error=None)

    # ---- intents (no-ops while there is no task) ----

    async def toggle_task_completion(self) -> None:
        current = self.state.task
        if current is None:
            return
        try:
            await self._repository.toggle_task_completion(current.id)
        except Exception as exc:
            logger.exception("toggle_task_completion failed task_id=%s", current.id)
            self._report_error(exc, "Failed to update task")
            return
        self._set_state(task=current.with_changes(is_completed=not current.is_completed))

    async def update_task(self, title: str, description: str) -> None:
        current = self.state.task
        if current is None:
            return
        updated = current.with_changes(title=title, description=description)
        try:
            await self._repository.update_task(updated)
        except Exception as exc:
            logger.exception("update_task failed task_id=%s", current.id)
            self._report_error(exc, "Failed to update task")
            return
        self._set_state(task=updated)

    async def delete_task(self) -> None:
        current = self.state.task
        if current is None:
            return
        try:
            await self._repository.delete_task(current.id)
        except Exception as exc:
            logger.exception("delete_task failed task_id=%s", current.id)
            self._report_error(exc, "Failed to delete task")
            return
        self._set_state(task=None, is_deleted=True)

    async def close(self) -> None:
        if not self._load_task.done():
            self._load_task.cancel()
        await asyncio.gather(self._load_task, return_exceptions=True)
        self._close_state()
