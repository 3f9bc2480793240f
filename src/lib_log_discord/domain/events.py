"""Domain event describing one log call handed to the webhook hook.

Purpose
-------
Provide an immutable representation of a log entry with typed, optional
slots for the error value and the request payload, so the delivery pipeline
asks "does this event carry a request?" instead of digging through an
untyped field map.

Contents
--------
* :class:`LogEvent` dataclass with capability helpers.
* Utility function ``_ensure_aware`` for timestamp validation.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import datetime, timezone
from typing import Any

from .levels import LogLevel
from .request import RequestPayload


def _ensure_aware(ts: datetime) -> datetime:
    """Validate that ``ts`` is timezone-aware and normalise to UTC."""
    if ts.tzinfo is None or ts.tzinfo.utcoffset(ts) is None:
        raise ValueError("timestamp must be timezone-aware")
    return ts.astimezone(timezone.utc)


@dataclass(slots=True, frozen=True)
class LogEvent:
    """Immutable log event delivered to the webhook.

    Attributes
    ----------
    level:
        :class:`LogLevel` severity of the entry.
    timestamp:
        Time of the entry, normalised to UTC.
    message:
        Rendered message text; any length, may be empty.
    error:
        Optional exception or error string reported alongside the message.
    request:
        Optional :data:`RequestPayload` describing the request being served.
    logger_name:
        Name of the emitting logger when known.
    """

    level: LogLevel
    timestamp: datetime
    message: str
    error: BaseException | str | None = None
    request: RequestPayload | None = None
    logger_name: str = ""

    def __post_init__(self) -> None:
        object.__setattr__(self, "timestamp", _ensure_aware(self.timestamp))

    @property
    def has_error(self) -> bool:
        return self.error is not None

    @property
    def has_request(self) -> bool:
        return self.request is not None

    @property
    def error_message(self) -> str:
        """Return the error text, or ``""`` when no error is attached.

        Examples
        --------
        >>> event = LogEvent(LogLevel.ERROR, datetime(2025, 1, 1, tzinfo=timezone.utc), 'boom', error=KeyError('id'))
        >>> event.error_message
        "'id'"
        """

        if self.error is None:
            return ""
        return str(self.error)

    def replace(self, **changes: Any) -> "LogEvent":
        """Return a copied event with ``changes`` applied."""

        return replace(self, **changes)


__all__ = ["LogEvent"]
