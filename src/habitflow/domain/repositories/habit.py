"""Habit repository protocol."""

from __future__ import annotations

from datetime import date
from typing import Any, Mapping, Optional, Protocol

from ...models.habit import Habit, HabitCompletion
from ..records import HabitRecord


class HabitNotFoundError(LookupError):
    """Raised when a habit id does not exist for the requesting user."""

    def __init__(self, habit_id: int):
        super().__init__(f"Habit not found: {habit_id}")
        self.habit_id = habit_id


class HabitRepository(Protocol):
    """Repository for managing habits and their completion history."""

    def get_by_id(self, habit_id: int, *, user_id: int) -> Optional[Habit]:
        """Retrieve a habit (with completions) by ID."""
        ...

    def list_all(self, *, user_id: int) -> list[Habit]:
        """List the user's habits ordered by title."""
        ...

    def create(self, habit: Habit, *, user_id: int) -> Habit:
        """Create a new habit."""
        ...

    def update(self, habit_id: int, changes: Mapping[str, Any], *, user_id: int) -> Habit:
        """Apply a partial update to an existing habit."""
        ...

    def delete(self, habit_id: int, *, user_id: int) -> None:
        """Delete a habit and its completions; raises HabitNotFoundError when missing."""
        ...

    # Completion operations
    def complete(
        self, habit_id: int, on: date, *, user_id: int, time: Optional[str] = None
    ) -> HabitCompletion:
        """Mark the habit done on a day; a second call for the same day is a no-op."""
        ...

    def uncomplete(self, habit_id: int, on: date, *, user_id: int) -> bool:
        """Remove the completion for a day; False when there was none."""
        ...

    # Read-only snapshots for statistics
    def get_record(self, habit_id: int, *, user_id: int) -> Optional[HabitRecord]:
        """Snapshot a single habit."""
        ...

    def list_records(self, *, user_id: int) -> list[HabitRecord]:
        """Snapshot all of the user's habits."""
        ...
