"""Application-layer ports implemented by the adapters."""

from __future__ import annotations

from .dispatcher import DeliveryJob, DispatcherPort
from .transport import DeliveryResult, WebhookTransportPort

__all__ = ["DeliveryJob", "DeliveryResult", "DispatcherPort", "WebhookTransportPort"]
