"""
Task subsystem.

Components:
- task_models.py: data structures (TaskRecord, Task) and seed rows
- notifier.py: per-table publish/subscribe channel for snapshots
- task_store.py: SQLite-backed storage with a live "all tasks" query
- task_repository.py: record <-> domain mapping over the store
"""
