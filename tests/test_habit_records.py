"""Schedule resolution and habit snapshot construction."""

from __future__ import annotations

from datetime import date, datetime, timedelta, timezone

import pytest

from habitflow.domain.records import CompletionRecord, HabitRecord, coerce_day, creation_day
from habitflow.domain.schedule import (
    DailySchedule,
    SpecificDatesSchedule,
    WeeklySchedule,
    normalize_dates,
    normalize_weekdays,
    schedule_from_fields,
    weekday_name,
)
from habitflow.services.habits import compute_overall_stats, compute_progress, compute_streak


class TestScheduleFromFields:
    def test_weekdays_take_precedence(self):
        schedule = schedule_from_fields(["Monday"], ["2024-01-01"])
        assert schedule == WeeklySchedule(days=frozenset({"monday"}))

    def test_dates_when_no_weekdays(self):
        schedule = schedule_from_fields([], ["2024-01-01"])
        assert isinstance(schedule, SpecificDatesSchedule)
        assert schedule.dates == ("2024-01-01",)

    @pytest.mark.parametrize("days,dates", [(None, None), ([], []), ([""], [None])])
    def test_daily_when_nothing_scheduled(self, days, dates):
        assert schedule_from_fields(days, dates) == DailySchedule()

    def test_weekday_name(self):
        assert weekday_name(date(2024, 1, 1)) == "monday"
        assert weekday_name(date(2024, 1, 7)) == "sunday"


class TestNormalisation:
    def test_weekdays_lowercased_deduplicated_and_ordered(self):
        assert normalize_weekdays(["Friday", " monday ", "MONDAY"]) == ["monday", "friday"]

    def test_unknown_weekday_rejected(self):
        with pytest.raises(ValueError, match="funday"):
            normalize_weekdays(["monday", "funday"])

    def test_dates_sorted_and_deduplicated(self):
        values = ["2024-01-08", date(2024, 1, 1), datetime(2024, 1, 8, 12, 0)]
        assert normalize_dates(values) == ["2024-01-01", "2024-01-08"]

    def test_invalid_date_rejected(self):
        with pytest.raises(ValueError, match="Invalid scheduled date"):
            normalize_dates(["2024-02-30"])


class TestCoerceDay:
    @pytest.mark.parametrize(
        "value,expected",
        [
            ("2024-01-05", date(2024, 1, 5)),
            (" 2024-01-05 ", date(2024, 1, 5)),
            (date(2024, 1, 5), date(2024, 1, 5)),
            (datetime(2024, 1, 5, 8, 0), date(2024, 1, 5)),
        ],
    )
    def test_readable_values(self, value, expected):
        assert coerce_day(value) == expected

    @pytest.mark.parametrize(
        "tz,expected", [("AOE+12", date(2024, 1, 4)), ("LINT-14", date(2024, 1, 5))]
    )
    def test_aware_datetime_uses_local_day(self, local_tz, tz, expected):
        local_tz(tz)
        # 2024-01-04 21:00 UTC
        value = datetime(2024, 1, 5, 2, 0, tzinfo=timezone(timedelta(hours=5)))
        assert coerce_day(value) == expected

    @pytest.mark.parametrize(
        "value",
        [None, "", "   ", "soon", "2024-13-01", 20240105, "20240105", "2024-01-05T10:00"],
    )
    def test_unreadable_values(self, value):
        assert coerce_day(value) is None


class TestCreationDay:
    def test_iso_timestamp_read_in_local_time(self, local_tz):
        local_tz("AOE+12")
        assert creation_day("2024-01-02T01:00:00Z") == date(2024, 1, 1)

    def test_plain_dates_and_garbage(self):
        assert creation_day("2024-01-02") == date(2024, 1, 2)
        assert creation_day("yesterday-ish") is None
        assert creation_day(None) is None

    def test_progress_counts_creation_day_in_local_time(self, record, local_tz):
        """A habit created late in the UTC day is created "today" further east."""
        local_tz("LINT-14")
        habit = record(
            created=datetime(2024, 1, 1, 12, 0, tzinfo=timezone.utc),  # 2024-01-02 02:00 local
            done=["2024-01-02"],
        )

        assert compute_progress(habit, today=date(2024, 1, 2)) == 1.0

    def test_progress_west_of_utc_keeps_creation_day(self, record, local_tz):
        local_tz("AOE+12")
        habit = record(
            created=datetime(2024, 1, 2, 1, 0, tzinfo=timezone.utc),  # 2024-01-01 13:00 local
            done=["2024-01-01"],
        )

        assert compute_progress(habit, today=date(2024, 1, 1)) == 1.0
        assert compute_overall_stats([habit], today=date(2024, 1, 1)).total_scheduled == 1


class TestFromDocument:
    """Documents in the mobile store's camelCase shape."""

    def test_full_document(self):
        doc = {
            "id": "abc123",
            "title": "Stretch",
            "description": "Ten minutes",
            "category": "Fitness",
            "scheduledDays": ["monday", "thursday"],
            "createdAt": "2024-01-01T08:00:00Z",
            "completions": [{"date": "2024-01-01", "time": "08:15"}, {"date": "2024-01-04"}],
        }

        habit = HabitRecord.from_document(doc)

        assert habit.id == "abc123"
        assert habit.category == "Fitness"
        assert habit.schedule == WeeklySchedule(days=frozenset({"monday", "thursday"}))
        assert habit.completions == (
            CompletionRecord(date="2024-01-01", time="08:15"),
            CompletionRecord(date="2024-01-04"),
        )
        assert compute_progress(habit, today=date(2024, 1, 4)) == 1.0

    def test_missing_fields_default_to_empty(self):
        habit = HabitRecord.from_document({"title": "Water"})

        assert habit.schedule == DailySchedule()
        assert habit.completions == ()
        assert habit.category == "Other"
        assert compute_progress(habit, today=date(2024, 1, 4)) == 0.0
        assert compute_streak(habit, today=date(2024, 1, 4)) == 0

    def test_null_and_dateless_completions_dropped(self):
        habit = HabitRecord.from_document(
            {"completions": [None, {}, {"date": None}, {"date": "2024-01-04"}]}
        )
        assert habit.completions == (CompletionRecord(date="2024-01-04"),)

    def test_null_completion_list(self):
        habit = HabitRecord.from_document({"completions": None, "scheduledDates": None})
        assert habit.completions == ()
        assert habit.schedule == DailySchedule()

    @pytest.mark.parametrize(
        "created_at",
        [
            {"seconds": 1704067200, "nanoseconds": 0},
            {"_seconds": 1704067200, "_nanoseconds": 500_000_000},
            1704067200000,
        ],
        ids=["timestamp", "admin-sdk-timestamp", "epoch-millis"],
    )
    def test_store_timestamps_converted(self, created_at):
        habit = HabitRecord.from_document({"createdAt": created_at})

        assert habit.created_at.tzinfo is timezone.utc
        assert habit.created_at.replace(microsecond=0) == datetime(
            2024, 1, 1, tzinfo=timezone.utc
        )


class TestScheduledDateMatching:
    def test_completion_with_time_part_does_not_match(self, record, reports):
        habit = record(
            dates=["2024-01-01", "2024-01-02"],
            created=date(2024, 1, 1),
            done=["2024-01-01T10:00", "20240102"],
        )

        assert compute_progress(habit, today=date(2024, 1, 2), reporter=reports.append) == 0.0
        assert len(reports) == 2

    def test_compact_scheduled_date_rejected(self):
        with pytest.raises(ValueError, match="Invalid scheduled date"):
            normalize_dates(["20240101"])
