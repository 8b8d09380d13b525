"""Command line front end for HabitFlow."""

from __future__ import annotations

from datetime import date
from functools import cached_property, wraps
from typing import Callable

import click
from sqlmodel import Session

from .config import BaseConfig
from .constants.categories import DEFAULT_CATEGORY, HABIT_CATEGORIES
from .domain.repositories.habit import HabitNotFoundError, HabitRepository
from .infra.database import bootstrap_database
from .infra.repositories.habit import SQLModelHabitRepository
from .logging_config import get_logger, setup_logging
from .models.habit import Habit
from .models.user import User
from .services import habits as stats
from .services.users import ensure_user

logger = get_logger(__name__)

_DATE = click.DateTime(formats=["%Y-%m-%d"])


class CliContext:
    """State shared by all commands of one invocation.

    Configuration, logging and the database are set up on first use, so
    ``--help`` and usage errors never touch the data directory.
    """

    def __init__(self, username: str, today: date):
        self.username = username
        self.today = today

    @cached_property
    def config(self) -> BaseConfig:
        config = BaseConfig()
        setup_logging(config)
        return config

    @cached_property
    def session_factory(self) -> Callable[[], Session]:
        _, session_factory = bootstrap_database(self.config)
        return session_factory

    @cached_property
    def repo(self) -> HabitRepository:
        return SQLModelHabitRepository(self.session_factory)

    @cached_property
    def user(self) -> User:
        return ensure_user(self.username, self.session_factory)


def _friendly_errors(func):
    """Turn domain errors into click errors with a non-zero exit code."""

    @wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except (ValueError, HabitNotFoundError) as exc:
            logger.error(f"Command failed: {exc}")
            raise click.ClickException(str(exc)) from exc

    return wrapper


def _schedule_label(habit: Habit) -> str:
    if habit.scheduled_days:
        return "weekly: " + ", ".join(habit.scheduled_days)
    if habit.scheduled_dates:
        return "dates: " + ", ".join(habit.scheduled_dates)
    return "daily"


@click.group()
@click.option("--user", "username", default="local", show_default=True, help="Owner of the habits.")
@click.option("--today", type=_DATE, default=None, help="Override the current day (YYYY-MM-DD).")
@click.pass_context
def cli(ctx: click.Context, username: str, today) -> None:
    """Track habits and review completion statistics."""

    ctx.obj = CliContext(username, today.date() if today else date.today())


@cli.command("init-db")
@click.pass_obj
def init_db(obj: CliContext) -> None:
    """Create the database schema (idempotent)."""
    obj.session_factory
    click.echo(f"Database ready: {obj.config.DATABASE_URL}")


@cli.command("add")
@click.argument("title")
@click.option("--description", default="", help="Free text description.")
@click.option(
    "--category",
    type=click.Choice(HABIT_CATEGORIES),
    default=DEFAULT_CATEGORY,
    show_default=True,
)
@click.option("--day", "days", multiple=True, help="Weekday name; repeat for several days.")
@click.option("--date", "dates", multiple=True, help="Specific date (YYYY-MM-DD); repeatable.")
@click.pass_obj
@_friendly_errors
def add_habit(obj: CliContext, title: str, description: str, category: str, days, dates) -> None:
    """Create a habit. Without --day or --date it is tracked daily."""
    habit = obj.repo.create(
        Habit(
            title=title,
            description=description,
            category=category,
            scheduled_days=list(days),
            scheduled_dates=list(dates),
        ),
        user_id=obj.user.id,
    )
    click.echo(f"Created habit {habit.id}: {habit.title} ({_schedule_label(habit)})")


@cli.command("list")
@click.pass_obj
def list_habits(obj: CliContext) -> None:
    """List habits with their schedule."""
    rows = obj.repo.list_all(user_id=obj.user.id)
    if not rows:
        click.echo("No habits yet.")
        return
    for habit in rows:
        click.echo(f"{habit.id:>4}  {habit.title:<30}  {habit.category:<12}  {_schedule_label(habit)}")


@cli.command("complete")
@click.argument("habit_id", type=int)
@click.option("--on", "on", type=_DATE, default=None, help="Day to mark (defaults to today).")
@click.option("--time", "time_", default=None, help="Completion time (HH:MM).")
@click.pass_obj
@_friendly_errors
def complete_habit(obj: CliContext, habit_id: int, on, time_) -> None:
    """Mark a habit done for a day."""
    day = on.date() if on else obj.today
    obj.repo.complete(habit_id, day, user_id=obj.user.id, time=time_)
    click.echo(f"Habit {habit_id} completed on {day.isoformat()}")


@cli.command("uncomplete")
@click.argument("habit_id", type=int)
@click.option("--on", "on", type=_DATE, default=None, help="Day to clear (defaults to today).")
@click.pass_obj
@_friendly_errors
def uncomplete_habit(obj: CliContext, habit_id: int, on) -> None:
    """Remove a habit's completion for a day."""
    day = on.date() if on else obj.today
    if obj.repo.uncomplete(habit_id, day, user_id=obj.user.id):
        click.echo(f"Habit {habit_id} no longer completed on {day.isoformat()}")
    else:
        click.echo(f"Habit {habit_id} had no completion on {day.isoformat()}")


@cli.command("delete")
@click.argument("habit_id", type=int)
@click.confirmation_option(prompt="Delete this habit and its history?")
@click.pass_obj
@_friendly_errors
def delete_habit(obj: CliContext, habit_id: int) -> None:
    """Delete a habit and its completion history."""
    obj.repo.delete(habit_id, user_id=obj.user.id)
    click.echo(f"Deleted habit {habit_id}")


@cli.command("stats")
@click.pass_obj
def show_stats(obj: CliContext) -> None:
    """Per-habit progress and streaks plus weekly and overall completion."""
    records = obj.repo.list_records(user_id=obj.user.id)
    respect = obj.config.STREAK_RESPECTS_SCHEDULE
    for record in records:
        progress = stats.compute_progress(record, today=obj.today)
        streak = stats.compute_streak(record, today=obj.today, respect_schedule=respect)
        longest = stats.compute_longest_streak(record)
        click.echo(
            f"{record.id:>4}  {record.title:<30}  {progress:>6.1%}  "
            f"streak {streak}  best {longest}"
        )

    start, end = stats.week_bounds(obj.today, week_start=obj.config.WEEK_START)
    weekly = stats.compute_weekly_stats(records, today=obj.today, week_start=obj.config.WEEK_START)
    overall = stats.compute_overall_stats(records, today=obj.today)
    click.echo(
        f"Week {start.isoformat()}..{end.isoformat()}: "
        f"{weekly.total_completed}/{weekly.total_scheduled} ({weekly.percent:.0f}%)"
    )
    click.echo(
        f"Overall: {overall.total_completed}/{overall.total_scheduled} ({overall.percent:.0f}%)"
    )


@cli.command("graph")
@click.option("--days", default=7, show_default=True, type=click.IntRange(min=1))
@click.pass_obj
def show_graph(obj: CliContext, days: int) -> None:
    """Daily completed vs scheduled counts ending today."""
    records = obj.repo.list_records(user_id=obj.user.id)
    for point in stats.generate_graph_data(records, days, today=obj.today):
        bar = "#" * point.completed + "." * max(point.scheduled - point.completed, 0)
        click.echo(f"{point.date.isoformat()}  {point.completed}/{point.scheduled}  {bar}")


def main() -> None:
    """Console script entry point."""
    cli()


if __name__ == "__main__":
    main()
