"""Exception hierarchy shared by the webhook delivery pipeline.

Only :class:`WebhookConfigurationError` ever reaches the code that emitted a
log record. Everything else is raised and handled inside the delivery worker
and surfaces through diagnostics.
"""

from __future__ import annotations


class WebhookError(Exception):
    """Base class for all errors raised by :mod:`lib_log_discord`."""


class WebhookConfigurationError(WebhookError, ValueError):
    """Raised synchronously from ``fire`` when the hook cannot deliver at all."""


class SerializationError(WebhookError):
    """The notification document could not be encoded for transport."""


class TransportError(WebhookError):
    """The HTTP request could not be built or sent."""


class MultipartError(WebhookError, ValueError):
    """A ``multipart/form-data`` body could not be parsed."""


__all__ = [
    "MultipartError",
    "SerializationError",
    "TransportError",
    "WebhookConfigurationError",
    "WebhookError",
]
