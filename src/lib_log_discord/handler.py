"""Bridge from the stdlib :mod:`logging` module to :class:`WebhookHook`.

Purpose
-------
Let applications attach Discord delivery with ``logger.addHandler(...)`` and
pass the error and request through ``extra``::

    logger.error(
        "user creation failed",
        extra={"request": LiveRequest(request), "error": exc},
    )

Contents
--------
* :data:`REQUEST_FIELD_KEY` / :data:`ERROR_FIELD_KEY` - ``extra`` keys.
* :func:`event_from_record` - ``LogRecord`` to :class:`LogEvent`.
* :class:`DiscordWebhookHandler` - the handler itself.

System Role
-----------
This is the only place where untyped ``extra`` values are type-tested; past
this point the request and error travel as typed slots on the event. Records
from this package's own loggers are ignored so delivery diagnostics never
trigger further deliveries.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from datetime import datetime, timezone
from typing import Any

from lib_log_discord.domain.events import LogEvent
from lib_log_discord.domain.levels import LogLevel
from lib_log_discord.domain.request import LiveRequest, ManualRequest
from lib_log_discord.hook import WebhookHook

REQUEST_FIELD_KEY = "request"
ERROR_FIELD_KEY = "error"

_OWN_LOGGER_PREFIX = "lib_log_discord"


def event_from_record(record: logging.LogRecord, *, message: str | None = None) -> LogEvent:
    """Translate ``record`` into a :class:`LogEvent`.

    ``message`` overrides ``record.getMessage()``; the handler passes its
    formatted output so tracebacks end up in the notification.

    Examples
    --------
    >>> record = logging.LogRecord('app', logging.ERROR, __file__, 1, 'failed %s', ('job',), None)
    >>> record.error = 'disk full'
    >>> event = event_from_record(record)
    >>> event.level.name, event.message, event.error_message
    ('ERROR', 'failed job', 'disk full')
    """

    error = _error_from(record)
    request = getattr(record, REQUEST_FIELD_KEY, None)
    if not isinstance(request, (LiveRequest, ManualRequest)):
        request = None
    return LogEvent(
        level=LogLevel.from_python_level(record.levelno),
        timestamp=datetime.fromtimestamp(record.created, tz=timezone.utc),
        message=record.getMessage() if message is None else message,
        error=error,
        request=request,
        logger_name=record.name,
    )


def _error_from(record: logging.LogRecord) -> BaseException | str | None:
    value = getattr(record, ERROR_FIELD_KEY, None)
    if isinstance(value, (BaseException, str)):
        return value
    if record.exc_info and record.exc_info[1] is not None:
        return record.exc_info[1]
    return None


class DiscordWebhookHandler(logging.Handler):
    """:class:`logging.Handler` forwarding subscribed records to a webhook.

    Parameters
    ----------
    hook:
        Existing :class:`WebhookHook`. When omitted one is built from
        ``webhook_url``, ``levels``, and ``hook_options``.
    webhook_url:
        Destination URL used when ``hook`` is not given.
    levels:
        Levels to subscribe to when ``hook`` is not given.
    **hook_options:
        Extra keyword arguments for :class:`WebhookHook`.
    """

    def __init__(
        self,
        hook: WebhookHook | None = None,
        *,
        webhook_url: str = "",
        levels: Iterable[LogLevel] = (),
        **hook_options: Any,
    ) -> None:
        self.hook = hook if hook is not None else WebhookHook(webhook_url, *levels, **hook_options)
        lowest = min(level.to_python_level() for level in self.hook.levels())
        super().__init__(level=lowest)

    def filter(self, record: logging.LogRecord) -> bool:  # type: ignore[override]
        if record.name == _OWN_LOGGER_PREFIX or record.name.startswith(_OWN_LOGGER_PREFIX + "."):
            return False
        if not self.hook.is_subscribed(LogLevel.from_python_level(record.levelno)):
            return False
        return bool(super().filter(record))

    def emit(self, record: logging.LogRecord) -> None:
        try:
            event = event_from_record(record, message=self.format(record))
            self.hook.fire(event)
        except Exception:  # noqa: BLE001
            self.handleError(record)

    def close(self) -> None:
        try:
            self.hook.shutdown()
        finally:
            super().close()


__all__ = ["DiscordWebhookHandler", "ERROR_FIELD_KEY", "REQUEST_FIELD_KEY", "event_from_record"]
