"""
taskboard: task store, repository and view-state holders.

Packages:
- tasks/: record schema, SQLite store, change notifier, repository
- presentation/: list/detail state holders
- core/: ports (repository contract) and AppState
"""

__version__ = "0.1.0"
