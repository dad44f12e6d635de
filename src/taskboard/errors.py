# src/taskboard/errors.py

"""
Error taxonomy.

- Not-found is not an error: lookups return None.
- Update/delete/toggle on a missing id are silent no-ops.
- Storage errors are split into unrecoverable faults and transient failures;
  nobody retries automatically, the caller decides.
"""

from __future__ import annotations

import sqlite3

# SQLite primary result codes that describe a temporary resource problem.
_TRANSIENT_CODES = frozenset(
    {
        "SQLITE_BUSY",
        "SQLITE_LOCKED",
        "SQLITE_FULL",
        "SQLITE_NOMEM",
        "SQLITE_INTERRUPT",
    }
)


class TaskStoreError(Exception):
    """Base class for errors raised by the task store."""


class StorageFaultError(TaskStoreError):
    """The storage medium failed (I/O error, corrupt file, cannot open...)."""


class TransientStorageError(TaskStoreError):
    """A write/read failed for a temporary reason; retrying may succeed."""


class MissingTaskIdError(ValueError):
    """A detail holder was created without the task id it must be bound to."""


def _error_code_name(exc: sqlite3.Error) -> str:
    name = getattr(exc, "sqlite_errorname", None) or ""
    # Extended codes look like SQLITE_IOERR_WRITE; keep the primary part.
    parts = name.split("_")
    return "_".join(parts[:2]) if len(parts) > 2 else name


def translate_sqlite_error(exc: sqlite3.Error, *, op: str) -> TaskStoreError:
    """Map a raw sqlite3 error onto the store's error taxonomy."""
    code = _error_code_name(exc)
    if code in _TRANSIENT_CODES:
        return TransientStorageError(f"{op} failed ({code}): {exc}")

    if not code and isinstance(exc, sqlite3.OperationalError):
        # Older interpreters do not expose the error name; fall back to the message.
        msg = str(exc).lower()
        if "locked" in msg or "busy" in msg or "disk is full" in msg:
            return TransientStorageError(f"{op} failed: {exc}")

    return StorageFaultError(f"{op} failed ({code or type(exc).__name__}): {exc}")
