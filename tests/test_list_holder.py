# tests/test_list_holder.py

from __future__ import annotations

import asyncio

import pytest

from taskboard.errors import TransientStorageError
from taskboard.presentation.list_holder import TaskListHolder, TaskListUiState
from taskboard.tasks.task_models import Task
from taskboard.tasks.task_repository import TaskRepository

from .fakes import FakeTaskRepo, next_matching

A = Task(id="a", title="Alpha")
B = Task(id="b", title="Beta", description="second")


def _ids(state: TaskListUiState) -> list[str]:
    return [t.id for t in state.tasks]


@pytest.mark.asyncio
async def test_observer_gets_empty_state_then_repository_snapshot() -> None:
    repo = FakeTaskRepo([B, A])
    holder = TaskListHolder(repo, stop_timeout=0.05)

    sub = holder.observe()
    assert await sub.get(timeout=1) == TaskListUiState()
    loaded = await next_matching(sub, lambda s: s.tasks)
    assert _ids(loaded) == ["a", "b"]
    assert holder.tasks == (A, B)

    await holder.close()


@pytest.mark.asyncio
async def test_intents_flow_back_through_the_live_query() -> None:
    repo = FakeTaskRepo([A])
    holder = TaskListHolder(repo, stop_timeout=0.05)
    sub = holder.observe()
    await next_matching(sub, lambda s: len(s.tasks) == 1)

    assert await holder.add_task(B)
    await next_matching(sub, lambda s: _ids(s) == ["a", "b"])

    assert await holder.toggle_task_completion("a")
    toggled = await next_matching(sub, lambda s: s.tasks[0].is_completed)
    assert toggled.tasks[0].id == "a"

    assert await holder.delete_task("a")
    await next_matching(sub, lambda s: _ids(s) == ["b"])

    assert await holder.delete_all_tasks()
    await next_matching(sub, lambda s: s.tasks == ())

    await holder.close()


@pytest.mark.asyncio
async def test_create_task_trims_input_and_generates_id() -> None:
    repo = FakeTaskRepo()
    holder = TaskListHolder(repo)

    task = await holder.create_task("  Buy milk  ", "  two litres ")

    assert task.title == "Buy milk"
    assert task.description == "two litres"
    assert task.is_completed is False
    assert len(task.id) == 36
    assert repo.writes == [("add_task", task)]

    other = await holder.create_task("Buy bread")
    assert other.id != task.id


@pytest.mark.asyncio
async def test_create_task_rejects_blank_title() -> None:
    repo = FakeTaskRepo()
    holder = TaskListHolder(repo)

    with pytest.raises(ValueError):
        await holder.create_task("   ", "description")
    assert repo.writes == []


@pytest.mark.asyncio
async def test_upstream_stops_after_grace_period_without_observers() -> None:
    repo = FakeTaskRepo([A])
    holder = TaskListHolder(repo, stop_timeout=0.05)

    sub = holder.observe()
    await next_matching(sub, lambda s: s.tasks)
    assert holder.is_collecting
    assert repo.subscriber_count == 1

    sub.close()
    assert holder.observer_count == 0
    assert holder.is_collecting

    await asyncio.sleep(0.15)
    assert not holder.is_collecting
    assert repo.subscriber_count == 0

    await holder.close()


@pytest.mark.asyncio
async def test_reattaching_within_grace_period_keeps_upstream() -> None:
    repo = FakeTaskRepo([A])
    holder = TaskListHolder(repo, stop_timeout=0.1)

    first = holder.observe()
    await next_matching(first, lambda s: s.tasks)
    first.close()

    await asyncio.sleep(0.02)
    second = holder.observe()
    await asyncio.sleep(0.15)

    assert holder.is_collecting
    assert repo.count("get_all_tasks") == 1
    assert _ids(await second.get(timeout=1)) == ["a"]

    await holder.close()


@pytest.mark.asyncio
async def test_reattaching_after_teardown_replays_latest_state() -> None:
    repo = FakeTaskRepo([A])
    holder = TaskListHolder(repo, stop_timeout=0.01)

    sub = holder.observe()
    await next_matching(sub, lambda s: s.tasks)
    sub.close()
    await asyncio.sleep(0.05)
    assert not holder.is_collecting

    again = holder.observe()
    assert _ids(await again.get(timeout=1)) == ["a"]
    assert holder.is_collecting

    await asyncio.sleep(0.02)
    assert repo.count("get_all_tasks") == 2

    await holder.close()


@pytest.mark.asyncio
async def test_two_observers_keep_one_upstream() -> None:
    repo = FakeTaskRepo([A])
    holder = TaskListHolder(repo, stop_timeout=0.01)

    one = holder.observe()
    two = holder.observe()
    await next_matching(one, lambda s: s.tasks)
    one.close()
    await asyncio.sleep(0.05)

    assert holder.is_collecting
    assert repo.count("get_all_tasks") == 1
    await next_matching(two, lambda s: s.tasks)

    await holder.close()
    assert two.closed


@pytest.mark.asyncio
async def test_write_failure_becomes_error_and_can_be_cleared() -> None:
    repo = FakeTaskRepo([A])
    repo.fail_with["delete_task"] = TransientStorageError("database is locked")
    holder = TaskListHolder(repo)

    assert await holder.delete_task("a") is False
    assert holder.state.error == "database is locked"

    holder.clear_error()
    assert holder.state.error is None


@pytest.mark.asyncio
async def test_error_auto_clears_but_not_a_newer_one() -> None:
    repo = FakeTaskRepo()
    holder = TaskListHolder(repo, error_timeout=0.05)

    repo.fail_with["toggle_task_completion"] = RuntimeError("first")
    await holder.toggle_task_completion("a")
    await asyncio.sleep(0.03)

    repo.fail_with["toggle_task_completion"] = RuntimeError("second")
    await holder.toggle_task_completion("a")
    await asyncio.sleep(0.03)
    assert holder.state.error == "second"

    await asyncio.sleep(0.05)
    assert holder.state.error is None


@pytest.mark.asyncio
async def test_upstream_failure_is_reported() -> None:
    repo = FakeTaskRepo()
    repo.fail_with["get_all_tasks"] = TransientStorageError("database is locked")
    holder = TaskListHolder(repo)

    sub = holder.observe()
    state = await next_matching(sub, lambda s: s.error is not None)
    assert state.error == "database is locked"

    await holder.close()


@pytest.mark.asyncio
async def test_observe_after_close_is_rejected() -> None:
    holder = TaskListHolder(FakeTaskRepo())
    await holder.close()
    with pytest.raises(RuntimeError):
        holder.observe()


@pytest.mark.asyncio
async def test_list_holder_over_sqlite_repository(repository: TaskRepository) -> None:
    holder = TaskListHolder(repository, stop_timeout=0.05)
    sub = holder.observe()

    created = await holder.create_task("Write tests")
    state = await next_matching(sub, lambda s: s.tasks)
    assert state.tasks == (created,)

    await holder.toggle_task_completion(created.id)
    state = await next_matching(sub, lambda s: s.tasks and s.tasks[0].is_completed)
    assert state.tasks[0].id == created.id

    await holder.close()
