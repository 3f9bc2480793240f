from __future__ import annotations

import logging

import pytest

from lib_log_discord.domain.levels import LogLevel


@pytest.mark.parametrize(
    "name, expected",
    [
        ("trace", LogLevel.TRACE),
        ("INFO", LogLevel.INFO),
        ("Warning", LogLevel.WARNING),
        ("warn", LogLevel.WARNING),
        ("error", LogLevel.ERROR),
        ("critical", LogLevel.FATAL),
        (" panic ", LogLevel.PANIC),
    ],
)
def test_from_name_accepts_case_insensitive_matches(name: str, expected: LogLevel) -> None:
    assert LogLevel.from_name(name) is expected


def test_from_name_rejects_unknown_level() -> None:
    with pytest.raises(ValueError, match="Unknown log level"):
        LogLevel.from_name("verbose")


@pytest.mark.parametrize("number", [0, 15, 25, 35, 45, 55, 70])
def test_from_numeric_rejects_non_member_values(number: int) -> None:
    with pytest.raises(ValueError, match="Unsupported log level numeric"):
        LogLevel.from_numeric(number)


def test_from_numeric_maps_exact_values() -> None:
    assert LogLevel.from_numeric(60) is LogLevel.PANIC


@pytest.mark.parametrize(
    "python_level, expected",
    [
        (logging.DEBUG, LogLevel.DEBUG),
        (logging.INFO, LogLevel.INFO),
        (logging.WARNING, LogLevel.WARNING),
        (logging.ERROR, LogLevel.ERROR),
        (logging.CRITICAL, LogLevel.FATAL),
        (45, LogLevel.ERROR),
        (1, LogLevel.TRACE),
    ],
)
def test_from_python_level_rounds_down(python_level: int, expected: LogLevel) -> None:
    assert LogLevel.from_python_level(python_level) is expected


def test_to_python_level_caps_at_critical() -> None:
    assert LogLevel.PANIC.to_python_level() == logging.CRITICAL
    assert LogLevel.FATAL.to_python_level() == logging.CRITICAL
    assert LogLevel.WARNING.to_python_level() == logging.WARNING


def test_severity_is_lowercase_name() -> None:
    assert LogLevel.WARNING.severity == "warning"
