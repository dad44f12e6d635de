"""
State holders consumed by screens.

Each holder owns a MutableState with a frozen UI-state dataclass and forwards
user intents to the repository.
"""

from .detail_holder import TaskDetailHolder, TaskDetailUiState
from .list_holder import TaskListHolder, TaskListUiState
from .state import MutableState

__all__ = [
    "MutableState",
    "TaskDetailHolder",
    "TaskDetailUiState",
    "TaskListHolder",
    "TaskListUiState",
]
