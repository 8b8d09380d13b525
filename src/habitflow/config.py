"""Application configuration objects and helpers."""

from __future__ import annotations

import os
import tempfile
from pathlib import Path
from typing import Any

from dotenv import load_dotenv

load_dotenv()

WEEKDAY_NAMES = (
    "monday",
    "tuesday",
    "wednesday",
    "thursday",
    "friday",
    "saturday",
    "sunday",
)


def _env_bool(name: str, default: bool = False) -> bool:
    """Interpret environment variable values as booleans."""

    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


def parse_week_start(value: str) -> int:
    """Map a weekday name to its ``date.weekday()`` index (Monday is 0)."""

    name = (value or "").strip().lower()
    if name not in WEEKDAY_NAMES:
        raise ValueError(f"Invalid week start: {value!r} (expected a weekday name)")
    return WEEKDAY_NAMES.index(name)


class BaseConfig:
    """Base configuration shared across environments."""

    APP_NAME = "HabitFlow"
    DB_FILENAME = "habitflow.db"

    def __init__(self) -> None:
        self.DATA_DIR = self._resolve_data_dir()
        self.DEV_MODE = _env_bool("HABITFLOW_DEV_MODE", default=True)
        self.DATABASE_URL = os.getenv("HABITFLOW_DATABASE_URL", self._build_sqlite_url())
        self.WEEK_START = parse_week_start(os.getenv("HABITFLOW_WEEK_START", "monday"))
        self.STREAK_RESPECTS_SCHEDULE = _env_bool(
            "HABITFLOW_STREAK_RESPECTS_SCHEDULE", default=False
        )

    def _resolve_data_dir(self) -> Path:
        """Return the directory where the SQLite file and logs live."""

        data_root = os.getenv("HABITFLOW_DATA_DIR", "instance")
        path = Path(data_root).expanduser().resolve()
        path.mkdir(parents=True, exist_ok=True)
        return path

    def _build_sqlite_url(self) -> str:
        db_path = self.DATA_DIR / self.DB_FILENAME
        return f"sqlite:///{db_path}"

    def sqlalchemy_engine_options(self) -> dict[str, Any]:
        """Expose engine kwargs for SQLModel to consume."""

        if self.DATABASE_URL.startswith("sqlite"):
            return {"connect_args": {"check_same_thread": False}}
        return {}


class TestConfig(BaseConfig):
    """Configuration for tests; isolates data in a temporary directory."""

    __test__ = False  # keep pytest from collecting this class

    def _resolve_data_dir(self) -> Path:
        return Path(tempfile.mkdtemp(prefix="habitflow-test-"))
