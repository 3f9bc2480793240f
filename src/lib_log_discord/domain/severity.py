"""Severity classification: embed colour and subscription decision per level.

Contents
--------
* Colour constants ``RED``, ``YELLOW``, ``BLUE`` (Discord embed integers).
* :data:`DEFAULT_LEVELS` - subscription used when the caller supplies none.
* :func:`resolve_levels`, :func:`color_for`, :func:`classify`.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass

from .levels import LogLevel

RED = 16725591
YELLOW = 16760630
BLUE = 12434877

DEFAULT_LEVELS: tuple[LogLevel, ...] = (
    LogLevel.PANIC,
    LogLevel.FATAL,
    LogLevel.ERROR,
    LogLevel.WARNING,
)

_COLOR_MAP = {
    LogLevel.PANIC: RED,
    LogLevel.FATAL: RED,
    LogLevel.ERROR: RED,
    LogLevel.WARNING: YELLOW,
}


@dataclass(slots=True, frozen=True)
class Classification:
    """Presentation colour and subscription flag for one level."""

    color: int
    subscribed: bool


def resolve_levels(levels: Iterable[LogLevel]) -> tuple[LogLevel, ...]:
    """Return the effective subscription for ``levels``.

    An explicit selection replaces the default set; it never extends it.

    Examples
    --------
    >>> resolve_levels([]) == DEFAULT_LEVELS
    True
    >>> resolve_levels([LogLevel.INFO, LogLevel.INFO, LogLevel.DEBUG])
    (<LogLevel.INFO: 20>, <LogLevel.DEBUG: 10>)
    """

    selected = tuple(dict.fromkeys(levels))
    return selected or DEFAULT_LEVELS


def color_for(level: LogLevel) -> int:
    """Return the embed colour for ``level``."""

    return _COLOR_MAP.get(level, BLUE)


def classify(level: LogLevel, subscribed: Iterable[LogLevel]) -> Classification:
    """Classify ``level`` against the ``subscribed`` selection."""

    return Classification(color=color_for(level), subscribed=level in tuple(subscribed))


__all__ = [
    "BLUE",
    "Classification",
    "DEFAULT_LEVELS",
    "RED",
    "YELLOW",
    "classify",
    "color_for",
    "resolve_levels",
]
