from __future__ import annotations

import os
from dataclasses import dataclass, replace
from typing import Optional

BACKENDS = {"sqlite", "memory"}
LOG_LEVELS = {"TRACE", "DEBUG", "INFO", "SUCCESS", "WARNING", "ERROR", "CRITICAL"}


@dataclass(frozen=True)
class Settings:
    """
    Application settings loaded from environment variables.

    Env vars:
    - HTRACKR_BACKEND: 'sqlite' (default) or 'memory'
    - HTRACKR_DB_PATH: path to the sqlite db file. Default 'habits.db'
    - HTRACKR_LOG_LEVEL: loguru level for the stderr sink. Default 'WARNING'
    - HTRACKR_LOG_FILE: optional path of an additional log file sink
    """

    backend: str
    db_path: str
    log_level: str
    log_file: Optional[str]

    def with_db_path(self, db_path: Optional[str]) -> "Settings":
        """Return a copy pointing at another database file (no-op for None)."""
        if not db_path:
            return self
        return replace(self, db_path=db_path)


def _get_env(name: str, default: str) -> str:
    value = os.getenv(name, default)
    if value is None or value == "":
        return default
    return value


def _parse_level(value: str, default: str = "WARNING") -> str:
    v = value.strip().upper()
    if v in LOG_LEVELS:
        return v
    return default


# PUBLIC_INTERFACE
def get_settings() -> Settings:
    """Return application settings loaded from environment variables."""
    backend = _get_env("HTRACKR_BACKEND", "sqlite").strip().lower()
    if backend not in BACKENDS:
        # Fallback to the durable store if unsupported
        backend = "sqlite"

    db_path = _get_env("HTRACKR_DB_PATH", "habits.db").strip()
    log_level = _parse_level(_get_env("HTRACKR_LOG_LEVEL", "WARNING"))
    log_file = os.getenv("HTRACKR_LOG_FILE", "").strip() or None

    return Settings(
        backend=backend,
        db_path=db_path,
        log_level=log_level,
        log_file=log_file,
    )
