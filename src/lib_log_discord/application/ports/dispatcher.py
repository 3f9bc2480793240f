"""Port for running delivery jobs off the caller's thread."""

from __future__ import annotations

from collections.abc import Callable
from typing import Protocol, runtime_checkable

DeliveryJob = Callable[[], None]


@runtime_checkable
class DispatcherPort(Protocol):
    """Schedule delivery jobs and wait for them at shutdown."""

    def submit(self, job: DeliveryJob) -> bool:
        """Schedule ``job``; return ``False`` when it was dropped instead."""

    def drain(self, timeout: float | None = None) -> bool:
        """Wait for scheduled jobs; ``False`` when ``timeout`` elapsed first."""

    def shutdown(self, *, timeout: float | None = None) -> None:
        """Finish pending jobs (bounded by ``timeout``) and stop accepting new ones."""


__all__ = ["DeliveryJob", "DispatcherPort"]
