"""Use cases implementing the webhook pipeline."""

from __future__ import annotations

from .compose import compose_delivery, format_timestamp
from .deliver import build_diagnostic_emitter, create_deliver_event
from .render_body import render_body, render_request_fields

__all__ = [
    "build_diagnostic_emitter",
    "compose_delivery",
    "create_deliver_event",
    "format_timestamp",
    "render_body",
    "render_request_fields",
]
