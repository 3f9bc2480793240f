"""Adapter implementations for the application ports."""

from __future__ import annotations

from .http import HttpxWebhookTransport
from .queue import QueueDispatcher
from .threads import ThreadDispatcher

__all__ = ["HttpxWebhookTransport", "QueueDispatcher", "ThreadDispatcher"]
