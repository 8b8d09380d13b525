"""Tests for structured logging functionality."""

from __future__ import annotations

import json
import logging
import logging.handlers
import sys
from datetime import date

import pytest

from habitflow.config import TestConfig
from habitflow.domain.records import CompletionRecord, HabitRecord
from habitflow.logging_config import JSONFormatter, get_logger, setup_logging
from habitflow.services.habits import compute_overall_stats, compute_streak


def _record(**overrides) -> logging.LogRecord:
    record = logging.LogRecord(
        name="test.logger",
        level=overrides.pop("level", logging.INFO),
        pathname="test.py",
        lineno=42,
        msg=overrides.pop("msg", "Test message"),
        args=(),
        exc_info=overrides.pop("exc_info", None),
    )
    record.module = "test_module"
    record.funcName = "test_function"
    return record


def test_json_formatter():
    """JSONFormatter renders the standard fields."""
    log_data = json.loads(JSONFormatter().format(_record()))

    assert log_data["level"] == "INFO"
    assert log_data["logger"] == "test.logger"
    assert log_data["message"] == "Test message"
    assert log_data["module"] == "test_module"
    assert log_data["function"] == "test_function"
    assert log_data["line"] == 42
    assert "timestamp" in log_data
    assert "extra" not in log_data


def test_json_formatter_with_exception():
    """JSONFormatter includes exception type, message and traceback."""
    try:
        raise ValueError("Test error")
    except ValueError:
        exc_info = sys.exc_info()

    log_data = json.loads(
        JSONFormatter().format(_record(level=logging.ERROR, msg="Error occurred", exc_info=exc_info))
    )

    assert log_data["exception"]["type"] == "ValueError"
    assert "Test error" in log_data["exception"]["message"]
    assert log_data["exception"]["traceback"] is not None


def test_json_formatter_with_extra_fields():
    record = _record()
    record.habit_id = 7

    log_data = json.loads(JSONFormatter().format(record))

    assert log_data["extra"] == {"habit_id": 7}


def test_setup_logging(tmp_path):
    """Logging setup creates a JSON log file alongside the console handler."""
    config = TestConfig()
    config.DATA_DIR = tmp_path
    config.DEV_MODE = True

    logger = setup_logging(config)

    assert logger.name == "habitflow"
    assert logger.level == logging.INFO
    assert len(logger.handlers) == 2  # Console + File

    log_file = tmp_path / "logs" / "habitflow.log"
    assert log_file.exists()

    logger.warning("Test warning message")
    for handler in logger.handlers:
        handler.flush()

    lines = [line for line in log_file.read_text(encoding="utf-8").splitlines() if line.strip()]
    assert len(lines) >= 2
    for line in lines:
        entry = json.loads(line)
        assert {"timestamp", "level", "message"} <= entry.keys()


def test_get_logger():
    """get_logger returns loggers under the package namespace."""
    assert get_logger("module1").name == "habitflow.module1"
    assert get_logger("habitflow.services.habits").name == "habitflow.services.habits"
    assert get_logger("module1") is not get_logger("module2")


@pytest.mark.parametrize("dev_mode", [True, False])
def test_logging_levels_by_mode(tmp_path, dev_mode):
    """Console logging level adjusts based on dev mode."""
    config = TestConfig()
    config.DATA_DIR = tmp_path
    config.DEV_MODE = dev_mode

    logger = setup_logging(config)

    console_handler = next(
        handler
        for handler in logger.handlers
        if isinstance(handler, logging.StreamHandler)
        and not isinstance(handler, logging.handlers.RotatingFileHandler)
    )
    expected_level = logging.INFO if dev_mode else logging.WARNING
    assert console_handler.level == expected_level


def test_default_reporter_logs_warning(record, caplog):
    """Without a reporter, skipped dates are logged as warnings."""
    habit = record(done=["not-a-date"])

    with caplog.at_level(logging.WARNING, logger="habitflow.services.habits"):
        compute_streak(habit)

    assert "Invalid completion date: 'not-a-date'" in caplog.text


def test_reporter_warnings_carry_habit_context(caplog):
    habit = HabitRecord(id=7, title="Stretch", completions=(CompletionRecord(date="2024-1-5"),))

    with caplog.at_level(logging.WARNING, logger="habitflow.services.habits"):
        compute_overall_stats([habit], today=date(2024, 1, 5))

    (warning,) = [r for r in caplog.records if r.levelno == logging.WARNING]
    assert warning.habit_id == 7
    assert warning.habit_title == "Stretch"
    assert json.loads(JSONFormatter().format(warning))["extra"]["habit_id"] == 7
