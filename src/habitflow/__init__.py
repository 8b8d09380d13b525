"""HabitFlow habit tracking package."""

from __future__ import annotations

from .config import BaseConfig, TestConfig
from .domain.records import CompletionRecord, HabitRecord

__all__ = ["BaseConfig", "CompletionRecord", "HabitRecord", "TestConfig"]
