"""Habit statistics: progress, streaks, completion rates and graph data.

Every function reads ``HabitRecord`` snapshots and never mutates them. The
current day is passed in as ``today`` (defaulting to ``date.today()`` only when
omitted) so results are reproducible.

Malformed history never raises: a completion or scheduled date that cannot be
read as a calendar day is handed to ``reporter`` and skipped, and ratios with
nothing scheduled are 0. The default reporter logs a warning.

Schedule conventions shared by all functions:

- weekly habits count only completions whose weekday is currently scheduled
  (completions left over from an older schedule are ignored, not deleted);
- specific-date habits count only completions on a scheduled date;
- habits with neither weekdays nor dates are daily;
- completions on the same day count once;
- dates match as calendar days: completion and scheduled values must be
  ``date`` objects or plain ``YYYY-MM-DD`` strings, and aware timestamps
  (creation times included) are read in local time, like ``today``.

Weeks start on Monday unless ``week_start`` says otherwise.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import date, timedelta
from typing import Callable, Iterable, Optional

from ..domain.records import HabitRecord, coerce_day, creation_day
from ..domain.schedule import DailySchedule, Schedule, SpecificDatesSchedule, WeeklySchedule
from ..logging_config import get_logger

logger = get_logger(__name__)

Reporter = Callable[[str], None]

MONDAY = 0
SUNDAY = 6


@dataclass(frozen=True, slots=True)
class CompletionStats:
    """Scheduled vs completed totals across a set of habits."""

    total_scheduled: int
    total_completed: int
    percent: float


@dataclass(frozen=True, slots=True)
class GraphPoint:
    """One day of the completion graph."""

    date: date
    completed: int
    scheduled: int


def _habit_reporter(habit: HabitRecord, reporter: Optional[Reporter]) -> Reporter:
    """Return ``reporter`` or a logger tagged with the habit being read."""
    if reporter is not None:
        return reporter
    context = {"habit_id": habit.id, "habit_title": habit.title}
    return lambda message: logger.warning(message, extra=context)


def _valid_days(values: Iterable[object], report: Reporter, label: str) -> set[date]:
    days: set[date] = set()
    for value in values:
        day = coerce_day(value)
        if day is None:
            report(f"Invalid {label} date: {value!r}")
            continue
        days.add(day)
    return days


def _completion_days(habit: HabitRecord, report: Reporter) -> set[date]:
    completions = habit.completions or ()
    return _valid_days((c.date for c in completions if c is not None), report, "completion")


def _days_since_creation(habit: HabitRecord, today: date, report: Reporter) -> int:
    """Whole days from creation to ``today``, both ends included."""
    created = None
    if habit.created_at is not None:
        created = creation_day(habit.created_at)
        if created is None:
            report(f"Invalid habit creation date: {habit.created_at!r}")
    if created is None:
        created = today
    return (today - created).days + 1


def _weekly_possible(schedule: WeeklySchedule, elapsed_days: int) -> int:
    if elapsed_days <= 0:
        return 0
    return len(schedule.days) * math.ceil(elapsed_days / 7)


def _schedule_predicate(schedule: Schedule, report: Reporter) -> Callable[[date], bool]:
    """Return a ``day -> is scheduled`` check for the schedule variant."""

    if isinstance(schedule, WeeklySchedule):
        return schedule.includes
    if isinstance(schedule, SpecificDatesSchedule):
        dates = _valid_days(schedule.dates, report, "scheduled")
        return lambda day: day in dates
    if isinstance(schedule, DailySchedule):
        return schedule.includes
    raise TypeError(f"Unsupported schedule: {schedule!r}")


def _cumulative_counts(habit: HabitRecord, today: date, report: Reporter) -> tuple[int, int]:
    """Return (possible, completed) for the habit's whole history."""

    schedule = habit.schedule
    done = _completion_days(habit, report)

    if isinstance(schedule, WeeklySchedule):
        possible = _weekly_possible(schedule, _days_since_creation(habit, today, report))
        completed = sum(1 for day in done if schedule.includes(day))
        return possible, completed

    if isinstance(schedule, SpecificDatesSchedule):
        dates = _valid_days(schedule.dates, report, "scheduled")
        return len(dates), len(dates & done)

    if isinstance(schedule, DailySchedule):
        return max(_days_since_creation(habit, today, report), 0), len(done)

    raise TypeError(f"Unsupported schedule: {schedule!r}")


def _percent(completed: int, scheduled: int) -> float:
    if scheduled == 0:
        return 0.0
    return completed / scheduled * 100


def compute_progress(
    habit: Optional[HabitRecord],
    *,
    today: Optional[date] = None,
    reporter: Optional[Reporter] = None,
) -> float:
    """Return the fraction of possible completions achieved, clamped to [0, 1].

    Weekly habits: possible = scheduled weekdays x weeks since creation (partial
    weeks round up, creation day included). Specific dates: possible = number of
    scheduled dates. Daily: possible = days since creation.
    """

    if habit is None:
        return 0.0
    today = today or date.today()
    possible, completed = _cumulative_counts(habit, today, _habit_reporter(habit, reporter))
    if possible <= 0:
        return 0.0
    return max(0.0, min(1.0, completed / possible))


def compute_streak(
    habit: Optional[HabitRecord],
    *,
    today: Optional[date] = None,
    reporter: Optional[Reporter] = None,
    respect_schedule: bool = False,
) -> int:
    """Return the number of consecutive completed days ending today.

    By default every calendar day counts, so a weekly habit's rest day ends the
    streak and a missing completion today gives 0. With ``respect_schedule``
    unscheduled days are stepped over instead; only a scheduled day without a
    completion ends the streak. Completions dated after ``today`` are ignored.
    """

    if habit is None:
        return 0
    today = today or date.today()
    report = _habit_reporter(habit, reporter)
    done = {day for day in _completion_days(habit, report) if day <= today}
    if not done:
        return 0

    streak = 0
    cursor = today
    if not respect_schedule:
        while cursor in done:
            streak += 1
            cursor -= timedelta(days=1)
        return streak

    is_scheduled = _schedule_predicate(habit.schedule, report)
    earliest = min(done)
    while cursor >= earliest:
        if is_scheduled(cursor):
            if cursor not in done:
                break
            streak += 1
        cursor -= timedelta(days=1)
    return streak


def compute_longest_streak(
    habit: Optional[HabitRecord], *, reporter: Optional[Reporter] = None
) -> int:
    """Return the longest run of consecutive completed calendar days."""

    if habit is None:
        return 0
    days = sorted(_completion_days(habit, _habit_reporter(habit, reporter)))
    longest = 0
    run = 0
    last_day: date | None = None
    for d in days:
        if last_day is not None and d == last_day + timedelta(days=1):
            run += 1
        else:
            run = 1
        longest = max(longest, run)
        last_day = d
    return longest


def week_bounds(today: date, *, week_start: int = MONDAY) -> tuple[date, date]:
    """Return the first and last day of the week containing ``today``."""

    if not 0 <= week_start <= 6:
        raise ValueError(f"week_start must be a weekday index 0-6, got {week_start}")
    start = today - timedelta(days=(today.weekday() - week_start) % 7)
    return start, start + timedelta(days=6)


def compute_weekly_stats(
    habits: Iterable[Optional[HabitRecord]],
    *,
    today: Optional[date] = None,
    week_start: int = MONDAY,
    reporter: Optional[Reporter] = None,
) -> CompletionStats:
    """Scheduled vs completed occurrences for the week containing ``today``."""

    today = today or date.today()
    start, _ = week_bounds(today, week_start=week_start)
    window = [start + timedelta(days=offset) for offset in range(7)]

    total_scheduled = 0
    total_completed = 0
    for habit in habits or ():
        if habit is None:
            continue
        report = _habit_reporter(habit, reporter)
        is_scheduled = _schedule_predicate(habit.schedule, report)
        scheduled_days = {day for day in window if is_scheduled(day)}
        total_scheduled += len(scheduled_days)
        total_completed += len(scheduled_days & _completion_days(habit, report))

    return CompletionStats(
        total_scheduled=total_scheduled,
        total_completed=total_completed,
        percent=_percent(total_completed, total_scheduled),
    )


def compute_overall_stats(
    habits: Iterable[Optional[HabitRecord]],
    *,
    today: Optional[date] = None,
    reporter: Optional[Reporter] = None,
) -> CompletionStats:
    """All-time scheduled vs completed occurrences.

    Totals are summed across habits before the percentage is taken, so habits
    with more history weigh more.
    """

    today = today or date.today()

    total_scheduled = 0
    total_completed = 0
    for habit in habits or ():
        if habit is None:
            continue
        report = _habit_reporter(habit, reporter)
        possible, completed = _cumulative_counts(habit, today, report)
        total_scheduled += possible
        total_completed += completed

    return CompletionStats(
        total_scheduled=total_scheduled,
        total_completed=total_completed,
        percent=_percent(total_completed, total_scheduled),
    )


def generate_graph_data(
    habits: Iterable[Optional[HabitRecord]],
    days: int = 7,
    *,
    today: Optional[date] = None,
    reporter: Optional[Reporter] = None,
) -> list[GraphPoint]:
    """Per-day scheduled and completed habit counts, oldest first, ending today."""

    today = today or date.today()
    if days <= 0:
        return []

    prepared = []
    for habit in habits or ():
        if habit is None:
            continue
        report = _habit_reporter(habit, reporter)
        prepared.append(
            (_schedule_predicate(habit.schedule, report), _completion_days(habit, report))
        )

    points: list[GraphPoint] = []
    for offset in range(days - 1, -1, -1):
        day = today - timedelta(days=offset)
        scheduled = sum(1 for is_scheduled, _ in prepared if is_scheduled(day))
        completed = sum(1 for _, done in prepared if day in done)
        points.append(GraphPoint(date=day, completed=completed, scheduled=scheduled))
    return points


__all__ = [
    "CompletionStats",
    "GraphPoint",
    "MONDAY",
    "Reporter",
    "SUNDAY",
    "compute_longest_streak",
    "compute_overall_stats",
    "compute_progress",
    "compute_streak",
    "compute_weekly_stats",
    "generate_graph_data",
    "week_bounds",
]
