# src/taskboard/tasks/task_store.py

from __future__ import annotations

import asyncio
import contextlib
import functools
import logging
import sqlite3
from collections.abc import Callable, Coroutine, Sequence
from pathlib import Path
from typing import Any, TypeVar

from ..errors import StorageFaultError, translate_sqlite_error
from .notifier import ChangeNotifier, Subscription
from .task_models import SEED_RECORDS, TaskRecord

logger = logging.getLogger(__name__)

R = TypeVar("R")

# One published snapshot is shared by every subscriber.
Snapshot = tuple[TaskRecord, ...]


def _log_detached_failure(op: str, task: asyncio.Task[Any]) -> None:
    """Done-callback for store work whose caller went away before it finished."""
    if task.cancelled():
        return
    exc = task.exception()
    if exc is not None:
        logger.error("TaskStore %s failed after its caller was cancelled: %s", op, exc, exc_info=exc)


def _close_detached_subscription(task: asyncio.Task[Any]) -> None:
    if not task.cancelled() and task.exception() is None:
        task.result().close()


class TaskStore:
    """
    SQLite task store with a live "all tasks" query.

    Schema:
    - one fixed table, created if missing
    - seeded with demo rows only when the table is created for the first time

    Concurrency:
    - each operation opens its own SQLite connection inside a worker thread
    - one asyncio.Lock serializes every read and write, including the
      post-write snapshot read and the publish, so subscribers see
      snapshots in commit order
    - an operation handed to the store runs to completion even if the
      awaiting task gets cancelled; the lock stays held until its worker
      thread returns, and a write is still published
    - failures of such detached operations go to this module's logger

    Notifications:
    - get_all() subscribers receive the snapshot at subscription time,
      then one full snapshot (ordered by id) per write that changed rows
    """

    def __init__(
        self,
        db_path: str | Path = "tasks.sqlite3",
        *,
        seed: bool = True,
        timeout: float = 30.0,
    ) -> None:
        self._db_path = Path(db_path)
        self._timeout = float(timeout)
        self._lock = asyncio.Lock()
        self._notifier: ChangeNotifier[Snapshot] = ChangeNotifier("tasks")

        try:
            self._db_path.parent.mkdir(parents=True, exist_ok=True)
            created = self._ensure_schema(seed=seed)
            total = self._count_sync()
        except sqlite3.Error as exc:
            raise translate_sqlite_error(exc, op="schema setup") from exc
        except OSError as exc:
            raise StorageFaultError(f"schema setup failed: {exc}") from exc
        logger.info("TaskStore ready db=%s total=%s created=%s", self._db_path, total, created)

    @property
    def db_path(self) -> Path:
        return self._db_path

    @property
    def subscriber_count(self) -> int:
        return self._notifier.subscriber_count

    def close(self) -> None:
        """Close every live subscription. Connections are per-call, nothing else to release."""
        self._notifier.close_all()

    # ---- low-level helpers ----

    def _get_conn(self) -> sqlite3.Connection:
        conn = sqlite3.connect(str(self._db_path), timeout=self._timeout)
        conn.row_factory = sqlite3.Row
        self._configure_conn(conn)
        return conn

    @staticmethod
    def _configure_conn(conn: sqlite3.Connection) -> None:
        with contextlib.suppress(sqlite3.Error):
            conn.execute("PRAGMA journal_mode=WAL")

    def _ensure_schema(self, *, seed: bool) -> bool:
        conn = self._get_conn()
        try:
            cur = conn.cursor()
            cur.execute("SELECT 1 FROM sqlite_master WHERE type = 'table' AND name = 'tasks'")
            existed = cur.fetchone() is not None

            cur.execute(
                """
                CREATE TABLE IF NOT EXISTS tasks (
                    id TEXT PRIMARY KEY NOT NULL,
                    title TEXT NOT NULL,
                    description TEXT NOT NULL DEFAULT '',
                    is_completed INTEGER NOT NULL DEFAULT 0
                )
                """
            )

            if not existed and seed:
                cur.executemany(
                    "INSERT INTO tasks(id, title, description, is_completed) VALUES (?, ?, ?, ?)",
                    [self._record_params(r) for r in SEED_RECORDS],
                )
                logger.info("TaskStore seeded %d demo tasks", len(SEED_RECORDS))

            conn.commit()
            return not existed
        finally:
            conn.close()

    @staticmethod
    def _record_params(record: TaskRecord) -> tuple[str, str, str, int]:
        return (record.id, record.title, record.description, 1 if record.is_completed else 0)

    @staticmethod
    def _row_to_record(row: sqlite3.Row) -> TaskRecord:
        return TaskRecord(
            id=str(row["id"]),
            title=str(row["title"] or ""),
            description=str(row["description"] or ""),
            is_completed=bool(row["is_completed"]),
        )

    def _select_all(self, conn: sqlite3.Connection) -> Snapshot:
        cur = conn.execute("SELECT id, title, description, is_completed FROM tasks ORDER BY id ASC")
        return tuple(self._row_to_record(r) for r in cur.fetchall())

    def _count_sync(self) -> int:
        conn = self._get_conn()
        try:
            (n,) = conn.execute("SELECT COUNT(*) FROM tasks").fetchone()
            return int(n)
        finally:
            conn.close()

    def _read_all_sync(self) -> Snapshot:
        conn = self._get_conn()
        try:
            return self._select_all(conn)
        finally:
            conn.close()

    def _read_one_sync(self, task_id: str) -> TaskRecord | None:
        conn = self._get_conn()
        try:
            cur = conn.execute(
                "SELECT id, title, description, is_completed FROM tasks WHERE id = ?",
                (task_id,),
            )
            row = cur.fetchone()
            return self._row_to_record(row) if row else None
        finally:
            conn.close()

    def _write_sync(
        self, sql: str, params: Sequence[Any], want_snapshot: bool
    ) -> tuple[int, Snapshot | None]:
        """Run one write statement and commit. Returns (rows changed, snapshot or None)."""
        conn = self._get_conn()
        try:
            cur = conn.execute(sql, params)
            changed = int(cur.rowcount)
            conn.commit()
            if changed > 0 and want_snapshot:
                return changed, self._select_all(conn)
            return changed, None
        finally:
            conn.close()

    async def _run(self, op: str, fn: Callable[..., R], *args: Any) -> R:
        try:
            return await asyncio.to_thread(fn, *args)
        except sqlite3.Error as exc:
            logger.error("TaskStore %s failed db=%s: %s", op, self._db_path, exc)
            raise translate_sqlite_error(exc, op=op) from exc

    async def _detached(
        self,
        op: str,
        work: Coroutine[Any, Any, R],
        on_abandon: Callable[[asyncio.Task[Any]], None] | None = None,
    ) -> R:
        """
        Await `work` as a store-owned task.

        Cancelling the caller does not cancel the task. It keeps the lock until
        SQLite is done. A failure is then logged, and `on_abandon` (if given)
        disposes of a successful result.
        """
        task = asyncio.get_running_loop().create_task(work)
        try:
            return await asyncio.shield(task)
        except asyncio.CancelledError:
            task.add_done_callback(functools.partial(_log_detached_failure, op))
            if on_abandon is not None:
                task.add_done_callback(on_abandon)
            raise

    async def _read_locked(self, op: str, fn: Callable[..., R], *args: Any) -> R:
        async with self._lock:
            return await self._run(op, fn, *args)

    async def _write_locked(self, op: str, sql: str, params: Sequence[Any]) -> int:
        async with self._lock:
            want_snapshot = self._notifier.subscriber_count > 0
            changed, snapshot = await self._run(op, self._write_sync, sql, params, want_snapshot)
            if snapshot is not None:
                delivered = self._notifier.publish(snapshot)
                logger.debug(
                    "TaskStore %s changed=%d snapshot=%d delivered=%d",
                    op,
                    changed,
                    len(snapshot),
                    delivered,
                )
            else:
                logger.debug("TaskStore %s changed=%d", op, changed)
            return changed

    async def _subscribe_locked(self) -> Subscription[Snapshot]:
        async with self._lock:
            snapshot = await self._run("get_all", self._read_all_sync)
            return self._notifier.subscribe(initial=snapshot)

    async def _read(self, op: str, fn: Callable[..., R], *args: Any) -> R:
        return await self._detached(op, self._read_locked(op, fn, *args))

    async def _write(self, op: str, sql: str, params: Sequence[Any] = ()) -> int:
        return await self._detached(op, self._write_locked(op, sql, params))

    # ---- public API ----

    async def count(self) -> int:
        return await self._read("count", self._count_sync)

    async def get_by_id(self, task_id: str) -> TaskRecord | None:
        return await self._read("get_by_id", self._read_one_sync, str(task_id))

    async def snapshot(self) -> Snapshot:
        """One-shot ordered read of the whole table."""
        return await self._read("snapshot", self._read_all_sync)

    async def get_all(self) -> Subscription[Snapshot]:
        """
        Subscribe to the whole table.

        The first value is the table at subscription time; every later write that
        changes rows delivers a fresh snapshot. Close the subscription to stop.
        Snapshots are tuples shared by all subscribers.
        """
        return await self._detached(
            "get_all", self._subscribe_locked(), on_abandon=_close_detached_subscription
        )

    async def insert_or_replace(self, record: TaskRecord) -> None:
        await self._write(
            "insert_or_replace",
            "INSERT OR REPLACE INTO tasks(id, title, description, is_completed) VALUES (?, ?, ?, ?)",
            self._record_params(record),
        )

    async def update(self, record: TaskRecord) -> None:
        """Replace the row with the same id. Missing id is a no-op."""
        await self._write(
            "update",
            "UPDATE tasks SET title = ?, description = ?, is_completed = ? WHERE id = ?",
            (record.title, record.description, 1 if record.is_completed else 0, record.id),
        )

    async def delete(self, record: TaskRecord) -> None:
        await self.delete_by_id(record.id)

    async def delete_by_id(self, task_id: str) -> None:
        await self._write("delete_by_id", "DELETE FROM tasks WHERE id = ?", (str(task_id),))

    async def delete_all(self) -> None:
        await self._write("delete_all", "DELETE FROM tasks")

    async def toggle_completion(self, task_id: str) -> None:
        """Flip is_completed in a single statement. Missing id is a no-op."""
        await self._write(
            "toggle_completion",
            "UPDATE tasks SET is_completed = NOT is_completed WHERE id = ?",
            (str(task_id),),
        )
