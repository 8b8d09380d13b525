"""Immutable habit snapshots consumed by the statistics services."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from typing import Any, Mapping, Optional

from ..constants.categories import DEFAULT_CATEGORY
from .schedule import DailySchedule, Schedule, parse_calendar_date, schedule_from_fields


@dataclass(frozen=True, slots=True)
class CompletionRecord:
    """A habit marked done on a calendar day.

    ``date`` is kept as stored (``date``, ``datetime`` or ``YYYY-MM-DD``) so that
    malformed history can be reported instead of failing on load.
    """

    date: object
    time: Optional[str] = None


@dataclass(frozen=True, slots=True)
class HabitRecord:
    """Read-only view of a habit: schedule plus completion history."""

    title: str = ""
    description: str = ""
    category: str = DEFAULT_CATEGORY
    schedule: Schedule = field(default_factory=DailySchedule)
    created_at: object = None
    completions: tuple[CompletionRecord, ...] = ()
    id: Optional[int | str] = None

    @classmethod
    def from_document(cls, doc: Mapping[str, Any]) -> "HabitRecord":
        """Build a record from a document in the mobile store's camelCase shape.

        Missing keys fall back to empty values; ``None`` completion entries and
        entries without a ``date`` are dropped. ``createdAt`` may be a datetime,
        an ISO timestamp, a store Timestamp mapping or epoch milliseconds.
        """
        completions = []
        for item in doc.get("completions") or []:
            if not item or not isinstance(item, Mapping):
                continue
            if item.get("date") in (None, ""):
                continue
            completions.append(CompletionRecord(date=item["date"], time=item.get("time")))

        return cls(
            id=doc.get("id"),
            title=doc.get("title") or "",
            description=doc.get("description") or "",
            category=doc.get("category") or DEFAULT_CATEGORY,
            schedule=schedule_from_fields(doc.get("scheduledDays"), doc.get("scheduledDates")),
            created_at=_document_timestamp(doc.get("createdAt")),
            completions=tuple(completions),
        )


def _document_timestamp(value: object) -> object:
    """Convert a store Timestamp to an aware UTC datetime.

    Accepts ``{"seconds": .., "nanoseconds": ..}`` mappings (also with leading
    underscores, as serialised by the admin SDK) and epoch milliseconds. Other
    values are returned unchanged.
    """
    if isinstance(value, Mapping):
        seconds = value.get("seconds", value.get("_seconds"))
        nanos = value.get("nanoseconds", value.get("_nanoseconds")) or 0
        if isinstance(seconds, (int, float)) and not isinstance(seconds, bool):
            return datetime.fromtimestamp(seconds + nanos / 1e9, tz=timezone.utc)
        return value
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return datetime.fromtimestamp(value / 1000, tz=timezone.utc)
    return value


def coerce_day(value: object) -> Optional[date]:
    """Return the calendar day for ``value`` or None when it cannot be read as one.

    Accepts ``date``, ``datetime`` and plain ``YYYY-MM-DD`` strings. Aware
    datetimes are converted to local time first, the frame ``date.today()``
    uses. Strings carrying a time part are not calendar days.
    """
    if isinstance(value, datetime):
        if value.tzinfo is not None:
            value = value.astimezone()
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        try:
            return parse_calendar_date(value)
        except ValueError:
            return None
    return None


def creation_day(value: object) -> Optional[date]:
    """Return the local calendar day a habit was created on.

    Like ``coerce_day`` but also reads ISO timestamps (``Z`` suffix included),
    which is how creation times arrive from documents.
    """
    day = coerce_day(value)
    if day is not None or not isinstance(value, str):
        return day
    try:
        return coerce_day(datetime.fromisoformat(value.strip().replace("Z", "+00:00")))
    except ValueError:
        return None
