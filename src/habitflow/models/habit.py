"""Habit tracking tables."""

from __future__ import annotations

from datetime import date, datetime, timezone
from typing import TYPE_CHECKING, ClassVar, Optional

from sqlalchemy import JSON, Column
from sqlalchemy.orm import relationship
from sqlmodel import Field, Relationship, SQLModel

from ..constants.categories import DEFAULT_CATEGORY
from ..domain.records import CompletionRecord, HabitRecord
from ..domain.schedule import schedule_from_fields

if TYPE_CHECKING:  # pragma: no cover
    from .user import User


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _as_utc(value: Optional[datetime]) -> Optional[datetime]:
    # SQLite hands timestamps back naive; they were written in UTC.
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


class Habit(SQLModel, table=True):
    """A user-defined habit with a weekly, specific-dates or daily schedule."""

    __tablename__: ClassVar[str] = "habit"

    id: Optional[int] = Field(default=None, primary_key=True)
    user_id: int = Field(foreign_key="user.id", nullable=False, index=True)
    title: str = Field(nullable=False, max_length=80, index=True)
    description: str = Field(default="", max_length=255)
    category: str = Field(default=DEFAULT_CATEGORY, max_length=32)
    icon: Optional[str] = Field(default=None, max_length=64)
    scheduled_days: list[str] = Field(
        default_factory=list, sa_column=Column(JSON, nullable=False)
    )
    scheduled_dates: list[str] = Field(
        default_factory=list, sa_column=Column(JSON, nullable=False)
    )
    created_at: datetime = Field(default_factory=_utcnow, nullable=False)
    updated_at: Optional[datetime] = Field(default=None)

    completions: list["HabitCompletion"] = Relationship(
        back_populates="habit",
        sa_relationship=relationship(
            "HabitCompletion",
            back_populates="habit",
            cascade="all, delete-orphan",
            order_by="HabitCompletion.completed_on",
        ),
    )

    user: "User" = Relationship(sa_relationship=relationship("User", back_populates="habits"))

    def to_record(self) -> HabitRecord:
        """Snapshot this row (completions must already be loaded) for statistics."""
        return HabitRecord(
            id=self.id,
            title=self.title,
            description=self.description,
            category=self.category,
            schedule=schedule_from_fields(self.scheduled_days, self.scheduled_dates),
            created_at=_as_utc(self.created_at),
            completions=tuple(
                CompletionRecord(date=c.completed_on, time=c.completed_time)
                for c in self.completions
            ),
        )


class HabitCompletion(SQLModel, table=True):
    """A habit marked done on a calendar day; at most one row per habit and day."""

    __tablename__: ClassVar[str] = "habit_completion"

    user_id: int = Field(foreign_key="user.id", nullable=False, index=True)
    habit_id: int = Field(foreign_key="habit.id", primary_key=True)
    completed_on: date = Field(primary_key=True, index=True)
    completed_time: Optional[str] = Field(default=None, max_length=5)

    habit: "Habit" = Relationship(
        back_populates="completions",
        sa_relationship=relationship("Habit", back_populates="completions"),
    )
