"""Port describing the outbound webhook transport."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol, runtime_checkable

from lib_log_discord.domain.document import Delivery


@dataclass(slots=True, frozen=True)
class DeliveryResult:
    """Outcome of one POST: ``ok`` when the status is below 300."""

    ok: bool
    status_code: int


@runtime_checkable
class WebhookTransportPort(Protocol):
    """Post a composed :class:`Delivery` to the webhook endpoint."""

    def send(self, delivery: Delivery) -> DeliveryResult:
        """Send ``delivery`` once; raise on serialisation or network failure."""

    def close(self) -> None:
        """Release network resources owned by the transport."""


__all__ = ["DeliveryResult", "WebhookTransportPort"]
