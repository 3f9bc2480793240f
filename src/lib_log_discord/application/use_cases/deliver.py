"""Use case running the asynchronous half of the webhook pipeline.

Purpose
-------
Tie together classification, body rendering, composition, and transport for
one event whose request payload has already been snapshotted.

Contents
--------
* :func:`build_diagnostic_emitter` - guard around the optional diagnostic hook.
* :func:`create_deliver_event` - factory returning the delivery callable.

System Role
-----------
Executed on dispatcher threads. Nothing raised in here may reach the code
that logged the event: serialisation and transport failures end the delivery
and are reported through :mod:`logging` and the diagnostic hook.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from typing import Any

from lib_log_discord.application.ports.transport import WebhookTransportPort
from lib_log_discord.domain.events import LogEvent
from lib_log_discord.domain.levels import LogLevel
from lib_log_discord.domain.request import RequestSnapshot
from lib_log_discord.domain.severity import classify
from lib_log_discord.errors import SerializationError, TransportError

from .compose import DEFAULT_USERNAME, compose_delivery
from .render_body import render_request_fields

logger = logging.getLogger(__name__)

DiagnosticHook = Callable[[str, dict[str, Any]], None] | None
DeliveryOutcome = dict[str, Any]
DeliverCallable = Callable[[LogEvent, RequestSnapshot | None], DeliveryOutcome]


def build_diagnostic_emitter(diagnostic: DiagnosticHook) -> Callable[[str, dict[str, Any]], None]:
    """Return a callable that forwards to ``diagnostic`` and never raises.

    Examples
    --------
    >>> seen = []
    >>> emit = build_diagnostic_emitter(lambda name, payload: seen.append(name))
    >>> emit('delivery_sent', {})
    >>> seen
    ['delivery_sent']
    >>> build_diagnostic_emitter(None)('delivery_sent', {}) is None
    True
    """

    def emit(name: str, payload: dict[str, Any]) -> None:
        if diagnostic is None:
            return
        try:
            diagnostic(name, payload)
        except Exception as exc:  # noqa: BLE001
            logger.error("Diagnostic hook raised while reporting %s", name, exc_info=exc)

    return emit


def create_deliver_event(
    *,
    transport: WebhookTransportPort,
    subscribed_levels: Sequence[LogLevel],
    username: str = DEFAULT_USERNAME,
    diagnostic: DiagnosticHook = None,
) -> DeliverCallable:
    """Build the delivery callable bound to ``transport``.

    Parameters
    ----------
    transport:
        Adapter implementing :class:`WebhookTransportPort`.
    subscribed_levels:
        Effective level subscription, passed to the classifier.
    username:
        Display name placed on every document.
    diagnostic:
        Optional ``(name, payload)`` callback for delivery milestones.

    Returns
    -------
    Callable[[LogEvent, RequestSnapshot | None], dict[str, Any]]
        Function returning ``{"ok": bool, ...}``; it does not raise for
        serialisation or transport failures.
    """

    emit = build_diagnostic_emitter(diagnostic)
    levels = tuple(subscribed_levels)

    def deliver(event: LogEvent, snapshot: RequestSnapshot | None) -> DeliveryOutcome:
        classification = classify(event.level, levels)
        fields = render_request_fields(snapshot)
        delivery = compose_delivery(event, classification.color, fields, username=username)
        context = {"level": event.level.name, "logger": event.logger_name, "as_file": delivery.as_file}

        try:
            result = transport.send(delivery)
        except SerializationError as exc:
            logger.error("Failed to marshal Discord webhook payload: %s", exc)
            emit("serialization_failed", {**context, "exception": repr(exc)})
            return {"ok": False, "reason": "serialization_failed"}
        except TransportError as exc:
            logger.error("Failed to post to Discord webhook: %s", exc)
            emit("transport_failed", {**context, "exception": repr(exc)})
            return {"ok": False, "reason": "transport_failed"}

        if not result.ok:
            logger.warning("Discord webhook rejected the delivery with HTTP status %s", result.status_code)
            emit("delivery_rejected", {**context, "status_code": result.status_code})
            return {"ok": False, "reason": "delivery_rejected", "status_code": result.status_code}

        logger.debug("Delivered %s event to Discord webhook (status %s)", event.level.name, result.status_code)
        emit("delivery_sent", {**context, "status_code": result.status_code})
        return {"ok": True, "status_code": result.status_code}

    return deliver


__all__ = ["DeliverCallable", "DiagnosticHook", "build_diagnostic_emitter", "create_deliver_event"]
