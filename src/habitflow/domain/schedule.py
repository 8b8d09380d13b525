"""Habit schedule variants.

A habit is scheduled in exactly one of three ways:

- ``WeeklySchedule``: recurring on a set of weekday names;
- ``SpecificDatesSchedule``: one-off calendar dates;
- ``DailySchedule``: every day (neither weekdays nor dates stored).

Stored habits keep the two optional lists side by side; ``schedule_from_fields``
resolves them into one variant, weekdays taking precedence over dates.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Iterable, Optional, Union

from ..config import WEEKDAY_NAMES

_CALENDAR_DATE = re.compile(r"\d{4}-\d{2}-\d{2}")


@dataclass(frozen=True, slots=True)
class WeeklySchedule:
    """Recurring schedule on named weekdays (lowercase, e.g. ``"monday"``)."""

    days: frozenset[str]

    def includes(self, day: date) -> bool:
        return weekday_name(day) in self.days


@dataclass(frozen=True, slots=True)
class SpecificDatesSchedule:
    """Schedule on fixed calendar dates.

    ``dates`` holds the raw stored values; statistics parse them and report
    the ones that are not ISO calendar dates.
    """

    dates: tuple[object, ...] = field(default_factory=tuple)


@dataclass(frozen=True, slots=True)
class DailySchedule:
    """Implicit every-day schedule."""

    def includes(self, day: date) -> bool:
        return True


Schedule = Union[WeeklySchedule, SpecificDatesSchedule, DailySchedule]


def weekday_name(day: date) -> str:
    """Return the lowercase English weekday name for ``day``."""
    return WEEKDAY_NAMES[day.weekday()]


def parse_calendar_date(text: str) -> date:
    """Parse a plain ``YYYY-MM-DD`` string.

    Timestamps and the compact ``YYYYMMDD`` form are rejected with ValueError.
    """
    text = text.strip()
    if not _CALENDAR_DATE.fullmatch(text):
        raise ValueError(f"Not a YYYY-MM-DD date: {text!r}")
    return date.fromisoformat(text)


def normalize_weekdays(days: Optional[Iterable[str]]) -> list[str]:
    """Lowercase and de-duplicate weekday names, keeping week order.

    Raises ValueError for names that are not weekdays.
    """
    if not days:
        return []
    cleaned = {str(d).strip().lower() for d in days if d is not None and str(d).strip()}
    unknown = sorted(cleaned - set(WEEKDAY_NAMES))
    if unknown:
        raise ValueError(f"Unknown weekday name(s): {', '.join(unknown)}")
    return [name for name in WEEKDAY_NAMES if name in cleaned]


def normalize_dates(dates: Optional[Iterable[object]]) -> list[str]:
    """Return sorted, de-duplicated ISO date strings.

    Raises ValueError for values that are not calendar dates.
    """
    if not dates:
        return []
    result: set[str] = set()
    for value in dates:
        if isinstance(value, datetime):
            result.add(value.date().isoformat())
        elif isinstance(value, date):
            result.add(value.isoformat())
        else:
            try:
                result.add(parse_calendar_date(str(value)).isoformat())
            except ValueError as exc:
                raise ValueError(f"Invalid scheduled date: {value!r}") from exc
    return sorted(result)


def schedule_from_fields(
    scheduled_days: Optional[Iterable[str]],
    scheduled_dates: Optional[Iterable[object]],
) -> Schedule:
    """Resolve the stored optional lists into a schedule variant."""

    days = [d for d in (scheduled_days or []) if d]
    if days:
        return WeeklySchedule(days=frozenset(str(d).strip().lower() for d in days))
    dates = [d for d in (scheduled_dates or []) if d]
    if dates:
        return SpecificDatesSchedule(dates=tuple(dates))
    return DailySchedule()
