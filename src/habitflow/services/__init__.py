"""Service module exports."""

from . import habits, users

__all__ = [
    "habits",
    "users",
]
