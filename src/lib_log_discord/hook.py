"""Webhook hook: the boundary object handed log events by the host.

Purpose
-------
Expose the two operations a logging framework needs from a sink (which
levels it wants, and "fire" for one entry) while keeping the caller's thread
free of any network I/O.

Contents
--------
* :class:`WebhookHook` - level query, ``fire``, and lifecycle helpers.

System Role
-----------
``fire`` snapshots the request payload synchronously, because the caller may
keep using (and re-reading) its request as soon as ``fire`` returns. All
rendering and HTTP traffic then runs as a job on the configured dispatcher.
"""

from __future__ import annotations

import logging
from functools import partial
from typing import TYPE_CHECKING, Any

from lib_log_discord.adapters.http import HttpxWebhookTransport
from lib_log_discord.adapters.queue import QueueDispatcher
from lib_log_discord.adapters.threads import ThreadDispatcher
from lib_log_discord.application.ports.dispatcher import DispatcherPort
from lib_log_discord.application.ports.transport import WebhookTransportPort
from lib_log_discord.application.use_cases.compose import DEFAULT_USERNAME
from lib_log_discord.application.use_cases.deliver import (
    DiagnosticHook,
    build_diagnostic_emitter,
    create_deliver_event,
)
from lib_log_discord.domain.events import LogEvent
from lib_log_discord.domain.levels import LogLevel
from lib_log_discord.domain.request import RequestSnapshot, snapshot_request
from lib_log_discord.domain.severity import resolve_levels
from lib_log_discord.errors import WebhookConfigurationError

if TYPE_CHECKING:
    from lib_log_discord.config import HookSettings

logger = logging.getLogger(__name__)


class WebhookHook:
    """Deliver log events to a Discord webhook without blocking the caller.

    Parameters
    ----------
    webhook_url:
        Destination URL. An empty string makes every :meth:`fire` fail fast.
    *levels:
        Levels to subscribe to; none means the default
        ``PANIC``/``FATAL``/``ERROR``/``WARNING`` set.
    transport:
        Optional :class:`WebhookTransportPort`; defaults to
        :class:`HttpxWebhookTransport` for ``webhook_url``.
    dispatcher:
        Optional :class:`DispatcherPort`; defaults to
        :class:`ThreadDispatcher` (one thread per delivery).
    username:
        Display name on every notification.
    diagnostic:
        Optional ``(name, payload)`` callback receiving delivery milestones.

    Examples
    --------
    >>> hook = WebhookHook('https://discord.example/api/webhooks/1/abc')
    >>> [level.name for level in hook.levels()]
    ['PANIC', 'FATAL', 'ERROR', 'WARNING']
    >>> hook.is_subscribed(LogLevel.INFO)
    False
    >>> hook.shutdown()
    """

    def __init__(
        self,
        webhook_url: str,
        *levels: LogLevel,
        transport: WebhookTransportPort | None = None,
        dispatcher: DispatcherPort | None = None,
        username: str = DEFAULT_USERNAME,
        diagnostic: DiagnosticHook = None,
    ) -> None:
        self._webhook_url = webhook_url
        self._levels = resolve_levels(levels)
        self._emit = build_diagnostic_emitter(diagnostic)
        self._transport = transport if transport is not None else HttpxWebhookTransport(webhook_url)
        self._owns_transport = transport is None
        self._dispatcher = dispatcher if dispatcher is not None else ThreadDispatcher(diagnostic=diagnostic)
        self._deliver = create_deliver_event(
            transport=self._transport,
            subscribed_levels=self._levels,
            username=username,
            diagnostic=diagnostic,
        )

    @classmethod
    def from_settings(
        cls,
        settings: HookSettings,
        *,
        transport: WebhookTransportPort | None = None,
        diagnostic: DiagnosticHook = None,
    ) -> "WebhookHook":
        """Compose a hook from resolved :class:`~lib_log_discord.config.HookSettings`.

        A positive ``queue_maxsize`` selects the bounded
        :class:`QueueDispatcher`; otherwise deliveries get a thread each.
        """

        dispatcher: DispatcherPort
        if settings.queue_maxsize > 0:
            dispatcher = QueueDispatcher(
                maxsize=settings.queue_maxsize,
                drop_policy=settings.queue_policy,
                diagnostic=diagnostic,
            )
        else:
            dispatcher = ThreadDispatcher(diagnostic=diagnostic)
        return cls(
            settings.webhook_url,
            *settings.levels,
            transport=transport,
            dispatcher=dispatcher,
            username=settings.username,
            diagnostic=diagnostic,
        )

    @property
    def webhook_url(self) -> str:
        return self._webhook_url

    @property
    def dispatcher(self) -> DispatcherPort:
        return self._dispatcher

    def levels(self) -> tuple[LogLevel, ...]:
        """Return the levels this hook subscribes to."""
        return self._levels

    def is_subscribed(self, level: LogLevel) -> bool:
        return level in self._levels

    def fire(self, event: LogEvent) -> None:
        """Hand ``event`` to the delivery pipeline and return immediately.

        Raises
        ------
        WebhookConfigurationError
            When the webhook URL is empty; nothing is delivered.
        """
        if not self._webhook_url:
            self._emit("webhook_url_missing", {"level": event.level.name, "logger": event.logger_name})
            logger.error("Discord webhook url is empty; dropping %s event", event.level.name)
            raise WebhookConfigurationError("Discord webhook url is empty")

        snapshot = snapshot_request(event.request) if event.request is not None else None
        self._dispatcher.submit(partial(self._run_delivery, event, snapshot))

    def _run_delivery(self, event: LogEvent, snapshot: RequestSnapshot | None) -> None:
        self._deliver(event, snapshot)

    def drain(self, timeout: float | None = None) -> bool:
        """Wait for in-flight deliveries; ``False`` when ``timeout`` expired."""
        return self._dispatcher.drain(timeout)

    def shutdown(self, timeout: float | None = None) -> None:
        """Wait for pending deliveries (bounded by ``timeout``) and release resources."""
        self._dispatcher.shutdown(timeout=timeout)
        if self._owns_transport:
            self._transport.close()

    def __enter__(self) -> "WebhookHook":
        return self

    def __exit__(self, *_exc_info: Any) -> None:
        self.shutdown()


__all__ = ["WebhookHook"]
