"""SQLModel table exports."""

from .habit import Habit, HabitCompletion
from .user import User

__all__ = [
    "Habit",
    "HabitCompletion",
    "User",
]
