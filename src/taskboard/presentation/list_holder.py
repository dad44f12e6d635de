# src/taskboard/presentation/list_holder.py

"""
Task list holder.

The upstream `get_all_tasks()` subscription only runs while someone observes
the holder:
- first observer attaches   -> subscribe upstream
- last observer detaches    -> wait `stop_timeout` seconds, then unsubscribe
- observer returns in time  -> pending teardown is cancelled
New observers always get the latest known state first.
"""

from __future__ import annotations

import asyncio
import logging
import uuid
from collections.abc import Awaitable
from dataclasses import dataclass

from ..core.ports import TaskRepo
from ..tasks.notifier import Subscription
from ..tasks.task_models import Task
from .state import StateHolder

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class TaskListUiState:
    tasks: tuple[Task, ...] = ()
    error: str | None = None


class TaskListHolder(StateHolder[TaskListUiState]):
    def __init__(
        self,
        repository: TaskRepo,
        *,
        stop_timeout: float = 5.0,
        error_timeout: float | None = None,
    ) -> None:
        super().__init__(TaskListUiState(), error_timeout=error_timeout, name="task_list")
        self._repository = repository
        self._stop_timeout = max(0.0, float(stop_timeout))
        self._observers = 0
        self._collector: asyncio.Task[None] | None = None
        self._stop_handle: asyncio.TimerHandle | None = None
        self._closed = False

    @property
    def tasks(self) -> tuple[Task, ...]:
        return self.state.tasks

    @property
    def observer_count(self) -> int:
        return self._observers

    @property
    def is_collecting(self) -> bool:
        return self._collector is not None and not self._collector.done()

    # ---- observation ----

    def observe(self) -> Subscription[TaskListUiState]:
        """Attach an observer. Must be called from inside the running event loop."""
        if self._closed:
            raise RuntimeError("TaskListHolder is closed")

        sub = self.watch()
        self._observers += 1
        sub.add_close_callback(self._on_observer_detached)
        self._cancel_pending_stop()
        self._ensure_collecting()
        return sub

    def _ensure_collecting(self) -> None:
        if self.is_collecting:
            return
        loop = asyncio.get_running_loop()
        self._collector = loop.create_task(self._collect(), name="task-list-collector")

    async def _collect(self) -> None:
        try:
            upstream = await self._repository.get_all_tasks()
            async with upstream:
                logger.debug("Task list upstream started")
                async for tasks in upstream:
                    self._set_state(tasks=tuple(tasks))
        except asyncio.CancelledError:
            logger.debug("Task list upstream cancelled")
            raise
        except Exception as exc:
            logger.exception("Task list subscription failed")
            self._report_error(exc, "Failed to load tasks")

    def _on_observer_detached(self) -> None:
        self._observers = max(0, self._observers - 1)
        if self._observers or self._closed or self._collector is None:
            return

        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            self._stop_collecting()
            return
        self._cancel_pending_stop()
        self._stop_handle = loop.call_later(self._stop_timeout, self._stop_collecting)

    def _stop_collecting(self) -> None:
        self._stop_handle = None
        if self._observers:
            return
        collector, self._collector = self._collector, None
        if collector is not None and not collector.done():
            collector.cancel()
            logger.debug("Task list upstream stopped after %.1fs without observers", self._stop_timeout)

    def _cancel_pending_stop(self) -> None:
        if self._stop_handle is not None:
            self._stop_handle.cancel()
            self._stop_handle = None

    # ---- intents ----

    async def _call(self, op: str, pending: Awaitable[None], default_error: str) -> bool:
        try:
            await pending
        except Exception as exc:
            logger.exception("%s failed", op)
            self._report_error(exc, default_error)
            return False
        return True

    async def add_task(self, task: Task) -> bool:
        return await self._call("add_task", self._repository.add_task(task), "Failed to add task")

    async def create_task(self, title: str, description: str = "") -> Task:
        """
        Build a new task from form input and add it.

        Blank titles are rejected here (ValueError); the repository never validates.
        """
        clean_title = (title or "").strip()
        if not clean_title:
            raise ValueError("title must not be blank")

        task = Task(id=str(uuid.uuid4()), title=clean_title, description=(description or "").strip())
        await self.add_task(task)
        return task

    async def toggle_task_completion(self, task_id: str) -> bool:
        return await self._call(
            "toggle_task_completion",
            self._repository.toggle_task_completion(task_id),
            "Failed to update task",
        )

    async def delete_task(self, task_id: str) -> bool:
        return await self._call("delete_task", self._repository.delete_task(task_id), "Failed to delete task")

    async def delete_all_tasks(self) -> bool:
        return await self._call("delete_all_tasks", self._repository.delete_all_tasks(), "Failed to delete tasks")

    # ---- lifecycle ----

    async def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        self._cancel_pending_stop()
        self._close_state()

        collector, self._collector = self._collector, None
        if collector is not None:
            collector.cancel()
            await asyncio.gather(collector, return_exceptions=True)
        self._observers = 0
