from __future__ import annotations

import json
import logging
from collections.abc import Callable
from typing import Any

import httpx
import pytest

from lib_log_discord.application.ports.transport import DeliveryResult, WebhookTransportPort
from lib_log_discord.application.use_cases.deliver import create_deliver_event
from lib_log_discord.domain.document import Delivery
from lib_log_discord.domain.events import LogEvent
from lib_log_discord.domain.levels import LogLevel
from lib_log_discord.domain.request import ManualRequest
from lib_log_discord.domain.severity import DEFAULT_LEVELS, RED
from lib_log_discord.errors import SerializationError


class RaisingTransport(WebhookTransportPort):
    def __init__(self, error: Exception) -> None:
        self.error = error

    def send(self, delivery: Delivery) -> DeliveryResult:
        raise self.error

    def close(self) -> None:
        return None


def test_deliver_posts_document_and_reports_success(
    event_factory: Callable[..., LogEvent],
    webhook_transport: WebhookTransportPort,
    recording_webhook: Any,
    diagnostics: Any,
) -> None:
    deliver = create_deliver_event(transport=webhook_transport, subscribed_levels=DEFAULT_LEVELS, diagnostic=diagnostics)

    outcome = deliver(event_factory(request=ManualRequest(method="GET")), ManualRequest(method="GET"))

    assert outcome == {"ok": True, "status_code": 204}
    assert diagnostics.names() == ["delivery_sent"]
    payload = json.loads(recording_webhook.requests[0].content)
    assert payload["embeds"][0]["color"] == RED
    assert payload["embeds"][1]["fields"][0]["name"] == "Method"


def test_deliver_reports_rejected_status(
    event_factory: Callable[..., LogEvent],
    webhook_transport: WebhookTransportPort,
    recording_webhook: Any,
    diagnostics: Any,
    caplog: pytest.LogCaptureFixture,
) -> None:
    recording_webhook.status = 400
    deliver = create_deliver_event(transport=webhook_transport, subscribed_levels=DEFAULT_LEVELS, diagnostic=diagnostics)

    with caplog.at_level(logging.WARNING):
        outcome = deliver(event_factory(), None)

    assert outcome["ok"] is False
    assert outcome["status_code"] == 400
    name, payload = diagnostics.events[0]
    assert name == "delivery_rejected"
    assert payload["status_code"] == 400
    assert "rejected" in caplog.text


def test_deliver_reports_transport_failure_without_raising(
    event_factory: Callable[..., LogEvent],
    webhook_transport: WebhookTransportPort,
    recording_webhook: Any,
    diagnostics: Any,
    caplog: pytest.LogCaptureFixture,
) -> None:
    recording_webhook.fail_with = httpx.ConnectError("connection refused")
    deliver = create_deliver_event(transport=webhook_transport, subscribed_levels=DEFAULT_LEVELS, diagnostic=diagnostics)

    with caplog.at_level(logging.ERROR):
        outcome = deliver(event_factory(), None)

    assert outcome == {"ok": False, "reason": "transport_failed"}
    assert diagnostics.names() == ["transport_failed"]
    assert "Failed to post to Discord webhook" in caplog.text


def test_deliver_reports_serialisation_failure(event_factory: Callable[..., LogEvent], diagnostics: Any) -> None:
    deliver = create_deliver_event(
        transport=RaisingTransport(SerializationError("bad payload")),
        subscribed_levels=DEFAULT_LEVELS,
        diagnostic=diagnostics,
    )

    outcome = deliver(event_factory(), None)

    assert outcome == {"ok": False, "reason": "serialization_failed"}
    assert diagnostics.names() == ["serialization_failed"]


def test_deliver_reports_unencodable_text_as_serialisation_failure(
    event_factory: Callable[..., LogEvent],
    webhook_transport: WebhookTransportPort,
    recording_webhook: Any,
    diagnostics: Any,
) -> None:
    deliver = create_deliver_event(transport=webhook_transport, subscribed_levels=DEFAULT_LEVELS, diagnostic=diagnostics)

    outcome = deliver(event_factory(message="bad \udcff name"), None)

    assert outcome == {"ok": False, "reason": "serialization_failed"}
    assert diagnostics.names() == ["serialization_failed"]
    assert recording_webhook.requests == []


def test_deliver_survives_a_raising_diagnostic_hook(
    event_factory: Callable[..., LogEvent],
    webhook_transport: WebhookTransportPort,
) -> None:
    def broken(name: str, payload: dict[str, Any]) -> None:
        raise RuntimeError("diagnostic failure")

    deliver = create_deliver_event(transport=webhook_transport, subscribed_levels=DEFAULT_LEVELS, diagnostic=broken)

    assert deliver(event_factory(), None)["ok"] is True


def test_unsubscribed_level_is_still_delivered_in_blue(
    event_factory: Callable[..., LogEvent],
    webhook_transport: WebhookTransportPort,
    recording_webhook: Any,
) -> None:
    deliver = create_deliver_event(transport=webhook_transport, subscribed_levels=DEFAULT_LEVELS)

    deliver(event_factory(level=LogLevel.INFO), None)

    payload = json.loads(recording_webhook.requests[0].content)
    assert payload["embeds"][0]["title"] == "INFO"
    assert payload["embeds"][0]["color"] == 12434877
