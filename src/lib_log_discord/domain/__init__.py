"""Domain entities and value objects used by the webhook pipeline."""

from __future__ import annotations

from .document import Attachment, Delivery, NotificationDocument, RenderedField, Section
from .events import LogEvent
from .levels import LogLevel
from .request import (
    HttpRequestLike,
    LiveRequest,
    LiveRequestSnapshot,
    ManualRequest,
    RequestPayload,
    RequestSnapshot,
    snapshot_request,
)
from .severity import DEFAULT_LEVELS, Classification, classify, color_for, resolve_levels

__all__ = [
    "Attachment",
    "Classification",
    "DEFAULT_LEVELS",
    "Delivery",
    "HttpRequestLike",
    "LiveRequest",
    "LiveRequestSnapshot",
    "LogEvent",
    "LogLevel",
    "ManualRequest",
    "NotificationDocument",
    "RenderedField",
    "RequestPayload",
    "RequestSnapshot",
    "Section",
    "classify",
    "color_for",
    "resolve_levels",
    "snapshot_request",
]
