"""Log level abstraction shared by the hook, the classifier, and the handler.

Purpose
-------
Offer a domain-specific severity scale that covers both the stdlib
:mod:`logging` levels and the two "process is going down" levels (``FATAL`` and
``PANIC``) that webhook alerts care about.

Contents
--------
* :class:`LogLevel` enum with conversion helpers.
* ``_ALIASES`` constant mapping alternative spellings to canonical members.

System Role
-----------
Used by :mod:`lib_log_discord.domain.severity` to pick colours and default
subscriptions and by the logging handler to translate ``LogRecord.levelno``.
"""

from __future__ import annotations

import logging
from enum import Enum


class LogLevel(Enum):
    """Enumerated severities ordered from least to most severe."""

    TRACE = 5
    DEBUG = 10
    INFO = 20
    WARNING = 30
    ERROR = 40
    FATAL = 50
    PANIC = 60

    @property
    def severity(self) -> str:
        """Return the lowercase severity name."""

        return self.name.lower()

    def to_python_level(self) -> int:
        """Return the closest :mod:`logging` constant for this level.

        Examples
        --------
        >>> LogLevel.PANIC.to_python_level() == logging.CRITICAL
        True
        >>> LogLevel.TRACE.to_python_level()
        5
        """

        return min(self.value, logging.CRITICAL)

    @classmethod
    def from_name(cls, name: str) -> "LogLevel":
        normalized = name.strip().upper()
        normalized = _ALIASES.get(normalized, normalized)
        try:
            return cls[normalized]
        except KeyError as exc:
            raise ValueError(f"Unknown log level: {name!r}") from exc

    @classmethod
    def from_numeric(cls, level: int) -> "LogLevel":
        """Return the :class:`LogLevel` whose value is exactly ``level``."""
        try:
            return cls(level)
        except ValueError as exc:
            raise ValueError(f"Unsupported log level numeric: {level}") from exc

    @classmethod
    def from_python_level(cls, level: int) -> "LogLevel":
        """Translate a stdlib logging level into :class:`LogLevel`.

        Custom levels registered with :func:`logging.addLevelName` are rounded
        down to the nearest known member; ``CRITICAL`` maps to ``FATAL``.

        Examples
        --------
        >>> LogLevel.from_python_level(logging.CRITICAL)
        <LogLevel.FATAL: 50>
        >>> LogLevel.from_python_level(25)
        <LogLevel.INFO: 20>
        >>> LogLevel.from_python_level(1)
        <LogLevel.TRACE: 5>
        """
        candidates = [member for member in cls if member.value <= level]
        if not candidates:
            return cls.TRACE
        return max(candidates, key=lambda member: member.value)


_ALIASES = {
    "WARN": "WARNING",
    "CRITICAL": "FATAL",
}


__all__ = ["LogLevel"]
