# src/taskboard/config.py

"""Centralized settings loaded from environment variables (+ optional .env).

Design goals:
- One Settings object for the whole app.
- Nothing required at import time; every value has a default.
- Malformed numbers fall back to the default instead of failing.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path

from dotenv import load_dotenv

ENV_PREFIX = "TASKBOARD"


def _k(suffix: str) -> str:
    """Build env var name with the project prefix."""
    return f"{ENV_PREFIX}_{suffix}"


def _env(name: str, default: str = "") -> str:
    v = os.getenv(name)
    return default if v is None else v


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    return raw.strip().lower() in {"1", "true", "yes", "y", "on"}


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return float(raw)
    except ValueError:
        return default


def _env_list(name: str, default: tuple[str, ...]) -> tuple[str, ...]:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    return tuple(p.strip() for p in raw.replace(",", " ").split() if p.strip())


def _env_path(name: str, default: Path) -> Path:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    return Path(raw).expanduser()


@dataclass(frozen=True, slots=True)
class Settings:
    # ---- App / logging ----
    app_name: str
    log_level: str
    log_file_name: str
    log_file_level: str
    quiet_loggers: tuple[str, ...]

    # ---- Local data paths (ignored by git) ----
    data_dir: Path
    tasks_db_path: Path

    # ---- Store ----
    seed_on_create: bool
    db_timeout_seconds: float

    # ---- Holders ----
    list_stop_timeout_seconds: float
    error_display_seconds: float

    @staticmethod
    def from_env() -> Settings:
        app_name = _env(_k("APP_NAME"), "taskboard") or "taskboard"
        log_level = _env(_k("LOG_LEVEL"), "INFO")
        log_file_name = _env(_k("LOG_FILE"), "taskboard.log") or "taskboard.log"
        log_file_level = _env(_k("LOG_FILE_LEVEL"), "DEBUG")
        # Third-party loggers capped at WARNING.
        quiet_loggers = _env_list(_k("QUIET_LOGGERS"), ("asyncio",))

        data_dir = _env_path(_k("DATA_DIR"), Path(".local/taskboard"))
        tasks_db_path = _env_path(_k("TASKS_DB_PATH"), data_dir / "tasks.sqlite3")

        seed_on_create = _env_bool(_k("SEED_ON_CREATE"), True)
        db_timeout_seconds = max(0.0, _env_float(_k("DB_TIMEOUT"), 30.0))

        list_stop_timeout_seconds = max(0.0, _env_float(_k("LIST_STOP_TIMEOUT"), 5.0))
        # 0 disables auto-clear of error messages.
        error_display_seconds = max(0.0, _env_float(_k("ERROR_DISPLAY_SECONDS"), 4.0))

        return Settings(
            app_name=app_name,
            log_level=log_level,
            log_file_name=log_file_name,
            log_file_level=log_file_level,
            quiet_loggers=quiet_loggers,
            data_dir=data_dir,
            tasks_db_path=tasks_db_path,
            seed_on_create=seed_on_create,
            db_timeout_seconds=db_timeout_seconds,
            list_stop_timeout_seconds=list_stop_timeout_seconds,
            error_display_seconds=error_display_seconds,
        )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Load .env (without overriding the real environment) and build Settings once."""
    load_dotenv(override=False)
    return Settings.from_env()
