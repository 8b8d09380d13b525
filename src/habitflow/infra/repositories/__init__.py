"""Concrete repository implementations using SQLModel."""

from .habit import SQLModelHabitRepository

__all__ = [
    "SQLModelHabitRepository",
]
