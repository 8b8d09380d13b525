"""Pytest configuration and shared fixtures for HabitFlow tests.

This module provides database fixtures, test data factories, and helper utilities
for testing statistics, repositories, and the CLI without touching a real database.
"""

from __future__ import annotations

import tempfile
import time
from pathlib import Path

import pytest
from sqlmodel import create_engine

from habitflow.domain.records import CompletionRecord, HabitRecord
from habitflow.domain.schedule import schedule_from_fields
from habitflow.infra.database import create_session_factory, init_database
from habitflow.infra.repositories.habit import SQLModelHabitRepository
from habitflow.models import Habit, User
from habitflow.services.users import ensure_user

# =============================================================================
# Database Fixtures
# =============================================================================


@pytest.fixture(scope="function")
def db_engine():
    """Create an isolated SQLite database file for each test.

    Yields:
        Engine: SQLModel engine connected to test database
    """
    with tempfile.NamedTemporaryFile(suffix=".db", delete=False) as f:
        db_path = Path(f.name)

    engine = create_engine(f"sqlite:///{db_path}", echo=False)
    init_database(engine)

    yield engine

    engine.dispose()
    db_path.unlink(missing_ok=True)


@pytest.fixture(scope="function")
def session_factory(db_engine):
    """Session factory matching the one the application wires into repositories."""
    return create_session_factory(db_engine)


@pytest.fixture
def user(session_factory) -> User:
    """Default owner for habits created in tests."""
    return ensure_user("tester", session_factory)


@pytest.fixture
def habit_repo(session_factory) -> SQLModelHabitRepository:
    return SQLModelHabitRepository(session_factory)


# =============================================================================
# Test Data Factories
# =============================================================================


@pytest.fixture
def habit_factory(habit_repo, user):
    """Factory for creating persisted habits.

    Returns:
        Callable: Function that creates and persists Habit instances
    """

    def _create_habit(
        title: str = "Test Habit",
        description: str = "Test habit description",
        category: str = "Health",
        scheduled_days: list[str] | None = None,
        scheduled_dates: list[str] | None = None,
        owner: User | None = None,
    ) -> Habit:
        owner = owner or user
        return habit_repo.create(
            Habit(
                title=title,
                description=description,
                category=category,
                scheduled_days=scheduled_days or [],
                scheduled_dates=scheduled_dates or [],
            ),
            user_id=owner.id,
        )

    return _create_habit


def make_record(
    *,
    days: list[str] | None = None,
    dates: list[object] | None = None,
    created: object = None,
    done: tuple | list = (),
    title: str = "Habit",
) -> HabitRecord:
    """Build an in-memory habit snapshot for statistics tests."""
    return HabitRecord(
        title=title,
        schedule=schedule_from_fields(days, dates),
        created_at=created,
        completions=tuple(CompletionRecord(date=d) for d in done),
    )


@pytest.fixture
def record():
    """Expose ``make_record`` to tests as a fixture."""
    return make_record


@pytest.fixture
def reports() -> list[str]:
    """Collects diagnostics passed to the statistics reporter."""
    return []




@pytest.fixture
def local_tz(monkeypatch):
    """Pin the process time zone; call with a POSIX TZ string such as ``"LINT-14"``."""
    if not hasattr(time, "tzset"):
        pytest.skip("time.tzset is not available on this platform")

    def _set(name: str) -> None:
        monkeypatch.setenv("TZ", name)
        time.tzset()

    yield _set
    monkeypatch.undo()
    time.tzset()
