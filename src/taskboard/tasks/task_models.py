# src/taskboard/tasks/task_models.py

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Any


@dataclass(frozen=True, slots=True)
class TaskRecord:
    """One row of the `tasks` table."""

    id: str
    title: str
    description: str
    is_completed: bool = False


@dataclass(frozen=True, slots=True)
class Task:
    """
    Domain task handed to holders and screens.

    Instances are value snapshots: changing one never touches the store.
    """

    id: str
    title: str
    description: str = ""
    is_completed: bool = False

    def with_changes(self, **fields: Any) -> Task:
        return replace(self, **fields)


def record_to_task(record: TaskRecord) -> Task:
    return Task(
        id=record.id,
        title=record.title,
        description=record.description,
        is_completed=record.is_completed,
    )


def task_to_record(task: Task) -> TaskRecord:
    return TaskRecord(
        id=task.id,
        title=task.title,
        description=task.description,
        is_completed=task.is_completed,
    )


# Demonstration rows inserted when the table is created for the first time.
SEED_RECORDS: tuple[TaskRecord, ...] = (
    TaskRecord("1", "Learn the UI toolkit", "Finish the basics tutorial"),
    TaskRecord("2", "Adopt the state-holder architecture", "Use holders with observable state"),
    TaskRecord("3", "Wire dependencies explicitly", "Pass collaborators through constructors"),
    TaskRecord("4", "Implement the repository pattern", "Move data logic out of the holders"),
)
