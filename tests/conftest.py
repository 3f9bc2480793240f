"""Shared fixtures: event factory, fake live requests, and a recording webhook."""

from __future__ import annotations

import io
import threading
from collections.abc import Callable, Iterator
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any

import httpx
import pytest

from lib_log_discord import config as config_module
from lib_log_discord.adapters.http import HttpxWebhookTransport
from lib_log_discord.domain.events import LogEvent
from lib_log_discord.domain.levels import LogLevel

WEBHOOK_URL = "https://discord.example/api/webhooks/123/token"
FIXED_TIME = datetime(2025, 9, 30, 12, 0, 5, tzinfo=timezone.utc)


class FakeRequest:
    """Minimal live request: method, URL, headers, and a one-shot body stream."""

    def __init__(self, method: str, url: str, headers: dict[str, str] | None = None, body: bytes | None = b"") -> None:
        self.method = method
        self.url = url
        self.headers = headers or {}
        self.body: Any = io.BytesIO(body) if body is not None else None


@dataclass
class RecordingWebhook:
    """httpx mock transport that keeps every request and replies with ``status``."""

    status: int = 204
    requests: list[httpx.Request] = field(default_factory=list)
    fail_with: Exception | None = None
    _lock: threading.Lock = field(default_factory=threading.Lock)

    def __call__(self, request: httpx.Request) -> httpx.Response:
        request.read()
        with self._lock:
            self.requests.append(request)
        if self.fail_with is not None:
            raise self.fail_with
        return httpx.Response(self.status)

    def client(self) -> httpx.Client:
        return httpx.Client(transport=httpx.MockTransport(self))


@dataclass
class DiagnosticRecorder:
    events: list[tuple[str, dict[str, Any]]] = field(default_factory=list)

    def __call__(self, name: str, payload: dict[str, Any]) -> None:
        self.events.append((name, payload))

    def names(self) -> list[str]:
        return [name for name, _ in self.events]


@pytest.fixture
def event_factory() -> Callable[..., LogEvent]:
    def build(
        level: LogLevel = LogLevel.ERROR,
        message: str = "user creation failed",
        **overrides: Any,
    ) -> LogEvent:
        return LogEvent(level=level, timestamp=overrides.pop("timestamp", FIXED_TIME), message=message, **overrides)

    return build


@pytest.fixture
def recording_webhook() -> RecordingWebhook:
    return RecordingWebhook()


@pytest.fixture
def webhook_transport(recording_webhook: RecordingWebhook) -> Iterator[HttpxWebhookTransport]:
    client = recording_webhook.client()
    transport = HttpxWebhookTransport(WEBHOOK_URL, client=client)
    yield transport
    client.close()


@pytest.fixture
def diagnostics() -> DiagnosticRecorder:
    return DiagnosticRecorder()


@pytest.fixture(autouse=True)
def _isolate_environment(monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    """Keep ``DISCORD_*`` variables and cached ``.env`` state out of every test."""

    for name in (
        config_module.WEBHOOK_URL_ENV_VAR,
        config_module.LEVELS_ENV_VAR,
        config_module.USERNAME_ENV_VAR,
        config_module.QUEUE_SIZE_ENV_VAR,
        config_module.QUEUE_POLICY_ENV_VAR,
        config_module.DOTENV_ENV_VAR,
    ):
        monkeypatch.delenv(name, raising=False)
    config_module._reset_dotenv_state_for_testing()
    yield
    config_module._reset_dotenv_state_for_testing()


@pytest.fixture
def webhook_url() -> str:
    return WEBHOOK_URL


@pytest.fixture
def fake_request() -> type[FakeRequest]:
    return FakeRequest
