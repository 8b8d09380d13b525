"""SQLModel implementation of Habit repository."""

from __future__ import annotations

from datetime import date, datetime, timezone
from typing import Any, Callable, Mapping, Optional

from sqlalchemy.orm import selectinload
from sqlmodel import Session, select

from ...constants.categories import HABIT_CATEGORIES, icon_for
from ...domain.records import HabitRecord
from ...domain.repositories.habit import HabitNotFoundError
from ...domain.schedule import normalize_dates, normalize_weekdays
from ...logging_config import get_logger
from ...models.habit import Habit, HabitCompletion

logger = get_logger(__name__)

_UPDATABLE_FIELDS = {
    "title",
    "description",
    "category",
    "icon",
    "scheduled_days",
    "scheduled_dates",
}


def _clean_fields(habit: Habit) -> None:
    """Normalise schedule lists and check category and title in place."""

    habit.title = (habit.title or "").strip()
    if not habit.title:
        raise ValueError("Habit title is required")
    if habit.category not in HABIT_CATEGORIES:
        raise ValueError(
            f"Invalid category: {habit.category!r} (expected one of {', '.join(HABIT_CATEGORIES)})"
        )
    habit.scheduled_days = normalize_weekdays(habit.scheduled_days)
    habit.scheduled_dates = normalize_dates(habit.scheduled_dates)
    if not habit.icon:
        habit.icon = icon_for(habit.category)


def _validate_time(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    try:
        return datetime.strptime(value.strip(), "%H:%M").strftime("%H:%M")
    except ValueError as exc:
        raise ValueError(f"Invalid completion time: {value!r} (expected HH:MM)") from exc


class SQLModelHabitRepository:
    """SQLModel-based habit repository implementation."""

    def __init__(self, session_factory: Callable[[], Session]):
        """Initialize with a session factory."""
        self.session_factory = session_factory

    def _owned(self, session: Session, habit_id: int, user_id: int) -> Optional[Habit]:
        return session.exec(
            select(Habit)
            .where(Habit.id == habit_id, Habit.user_id == user_id)
            .options(selectinload(Habit.completions))
        ).first()

    def _require(self, session: Session, habit_id: int, user_id: int) -> Habit:
        habit = self._owned(session, habit_id, user_id)
        if habit is None:
            raise HabitNotFoundError(habit_id)
        return habit

    def get_by_id(self, habit_id: int, *, user_id: int) -> Optional[Habit]:
        """Retrieve a habit (with completions) by ID."""
        with self.session_factory() as session:
            obj = self._owned(session, habit_id, user_id)
            if obj:
                session.expunge(obj)
            return obj

    def list_all(self, *, user_id: int) -> list[Habit]:
        """List the user's habits ordered by title."""
        with self.session_factory() as session:
            statement = (
                select(Habit)
                .where(Habit.user_id == user_id)
                .options(selectinload(Habit.completions))
                .order_by(Habit.title, Habit.id)  # type: ignore
            )
            rows = list(session.exec(statement).all())
            session.expunge_all()
            return rows

    def create(self, habit: Habit, *, user_id: int) -> Habit:
        """Create a new habit owned by ``user_id``."""
        _clean_fields(habit)
        with self.session_factory() as session:
            habit.user_id = user_id
            habit.created_at = datetime.now(timezone.utc)
            habit.completions = []
            session.add(habit)
            session.commit()
            session.expunge(habit)
        logger.info("Habit created", extra={"habit_id": habit.id, "user_id": user_id})
        return habit

    def update(self, habit_id: int, changes: Mapping[str, Any], *, user_id: int) -> Habit:
        """Apply a partial update; unknown keys raise ValueError."""
        unknown = set(changes) - _UPDATABLE_FIELDS
        if unknown:
            raise ValueError(f"Cannot update field(s): {', '.join(sorted(unknown))}")
        with self.session_factory() as session:
            habit = self._require(session, habit_id, user_id)
            for key, value in changes.items():
                setattr(habit, key, value)
            if "category" in changes and "icon" not in changes:
                habit.icon = None
            _clean_fields(habit)
            habit.updated_at = datetime.now(timezone.utc)
            session.add(habit)
            session.commit()
            session.expunge(habit)
        logger.info(
            "Habit updated",
            extra={"habit_id": habit_id, "user_id": user_id, "fields": sorted(changes)},
        )
        return habit

    def delete(self, habit_id: int, *, user_id: int) -> None:
        """Delete a habit and its completions."""
        with self.session_factory() as session:
            session.delete(self._require(session, habit_id, user_id))
            session.commit()
        logger.info("Habit deleted", extra={"habit_id": habit_id, "user_id": user_id})

    # Completion operations
    def complete(
        self, habit_id: int, on: date, *, user_id: int, time: Optional[str] = None
    ) -> HabitCompletion:
        """Mark the habit done on ``on``; an existing completion is returned unchanged."""
        completed_time = _validate_time(time)
        with self.session_factory() as session:
            self._require(session, habit_id, user_id)
            existing = session.exec(
                select(HabitCompletion)
                .where(HabitCompletion.habit_id == habit_id)
                .where(HabitCompletion.completed_on == on)
            ).first()
            if existing:
                session.expunge(existing)
                return existing

            completion = HabitCompletion(
                user_id=user_id,
                habit_id=habit_id,
                completed_on=on,
                completed_time=completed_time,
            )
            session.add(completion)
            session.commit()
            session.refresh(completion)
            session.expunge(completion)
        logger.info(
            "Habit completed",
            extra={"habit_id": habit_id, "user_id": user_id, "completed_on": on.isoformat()},
        )
        return completion

    def uncomplete(self, habit_id: int, on: date, *, user_id: int) -> bool:
        """Remove the completion for ``on``; returns False when there was none."""
        with self.session_factory() as session:
            self._require(session, habit_id, user_id)
            completion = session.exec(
                select(HabitCompletion)
                .where(HabitCompletion.habit_id == habit_id)
                .where(HabitCompletion.completed_on == on)
            ).first()
            if not completion:
                return False
            session.delete(completion)
            session.commit()
        logger.info(
            "Habit completion removed",
            extra={"habit_id": habit_id, "user_id": user_id, "completed_on": on.isoformat()},
        )
        return True

    # Read-only snapshots for statistics
    def get_record(self, habit_id: int, *, user_id: int) -> Optional[HabitRecord]:
        """Snapshot a single habit for the statistics services."""
        habit = self.get_by_id(habit_id, user_id=user_id)
        return habit.to_record() if habit else None

    def list_records(self, *, user_id: int) -> list[HabitRecord]:
        """Snapshot all of the user's habits."""
        return [habit.to_record() for habit in self.list_all(user_id=user_id)]
