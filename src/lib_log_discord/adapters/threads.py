"""Thread-per-delivery dispatcher.

Every submitted job runs on its own daemon thread, so concurrent deliveries
are unbounded. Threads are tracked only so :meth:`ThreadDispatcher.drain` can
join them at shutdown; nothing cancels a running delivery.
"""

from __future__ import annotations

import logging
import threading
import time
from collections.abc import Callable
from typing import Any

from lib_log_discord.application.ports.dispatcher import DeliveryJob, DispatcherPort

LOGGER = logging.getLogger(__name__)


class ThreadDispatcher(DispatcherPort):
    """Run each delivery job on a fresh daemon thread.

    Examples
    --------
    >>> done = []
    >>> dispatcher = ThreadDispatcher()
    >>> dispatcher.submit(lambda: done.append('sent'))
    True
    >>> dispatcher.drain(timeout=2.0)
    True
    >>> done
    ['sent']
    """

    def __init__(self, *, diagnostic: Callable[[str, dict[str, Any]], None] | None = None) -> None:
        self._threads: set[threading.Thread] = set()
        self._lock = threading.Lock()
        self._closed = False
        self._diagnostic = diagnostic

    @property
    def in_flight(self) -> int:
        """Number of deliveries that have not finished yet."""
        with self._lock:
            return len(self._threads)

    def submit(self, job: DeliveryJob) -> bool:
        start_error: RuntimeError | None = None
        with self._lock:
            closed = self._closed
            if not closed:
                thread = threading.Thread(target=self._run, args=(job,), name="lib_log_discord-delivery", daemon=True)
                # registered before start so the job's own discard always finds it
                self._threads.add(thread)
                try:
                    thread.start()
                except RuntimeError as exc:
                    self._threads.discard(thread)
                    start_error = exc
        if closed:
            self._emit_diagnostic("delivery_dropped", {"reason": "closed"})
            return False
        if start_error is not None:
            LOGGER.error("Delivery thread could not be started", exc_info=start_error)
            self._emit_diagnostic("delivery_dropped", {"reason": "thread_start_failed"})
            return False
        return True

    def drain(self, timeout: float | None = None) -> bool:
        """Join in-flight deliveries; ``False`` when ``timeout`` expired first."""
        deadline = time.monotonic() + timeout if timeout is not None else None
        while True:
            with self._lock:
                pending = list(self._threads)
            if not pending:
                return True
            for thread in pending:
                remaining = None if deadline is None else max(0.0, deadline - time.monotonic())
                thread.join(remaining)
                if thread.is_alive():
                    return False

    def shutdown(self, *, timeout: float | None = None) -> None:
        """Stop accepting jobs and wait for in-flight deliveries."""
        with self._lock:
            self._closed = True
        if not self.drain(timeout):
            LOGGER.warning("%d Discord deliveries still running at shutdown", self.in_flight)

    def _run(self, job: DeliveryJob) -> None:
        try:
            job()
        except Exception as exc:  # noqa: BLE001
            LOGGER.error("Delivery job raised an exception", exc_info=exc)
            self._emit_diagnostic("delivery_job_failed", {"exception": repr(exc)})
        finally:
            with self._lock:
                self._threads.discard(threading.current_thread())

    def _emit_diagnostic(self, name: str, payload: dict[str, Any]) -> None:
        if self._diagnostic is None:
            return
        try:
            self._diagnostic(name, payload)
        except Exception as exc:  # noqa: BLE001
            LOGGER.error("Dispatcher diagnostic hook raised while reporting %s", name, exc_info=exc)


__all__ = ["ThreadDispatcher"]
