"""Discord webhook delivery for Python logging.

Attach :class:`DiscordWebhookHandler` to a logger, or drive
:class:`WebhookHook` directly with :class:`LogEvent` objects.
"""

from __future__ import annotations

from .config import HookSettings, load_settings
from .domain import LiveRequest, LogEvent, LogLevel, ManualRequest
from .errors import WebhookConfigurationError, WebhookError
from .handler import ERROR_FIELD_KEY, REQUEST_FIELD_KEY, DiscordWebhookHandler, event_from_record
from .hook import WebhookHook

__all__ = [
    "DiscordWebhookHandler",
    "ERROR_FIELD_KEY",
    "HookSettings",
    "LiveRequest",
    "LogEvent",
    "LogLevel",
    "ManualRequest",
    "REQUEST_FIELD_KEY",
    "WebhookConfigurationError",
    "WebhookError",
    "WebhookHook",
    "event_from_record",
    "load_settings",
]
