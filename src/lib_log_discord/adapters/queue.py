"""Bounded queue dispatcher running deliveries on one background thread.

Purpose
-------
Offer a supervised alternative to thread-per-delivery: jobs are buffered in a
bounded queue and processed by a single worker, so a log storm cannot spawn
an unbounded number of concurrent deliveries.

Contents
--------
* :data:`DROP_POLICIES` - accepted overload policies.
* :class:`QueueDispatcher` - :class:`DispatcherPort` implementation.

System Role
-----------
Selected by ``WebhookHook.from_settings`` when ``queue_maxsize`` is positive.
The overload policy decides what happens when the queue is full:

* ``block`` - the caller waits up to ``timeout`` seconds, then the new job is
  dropped.
* ``drop_newest`` - the new job is dropped immediately.
* ``drop_oldest`` - the oldest queued job is discarded to make room.
"""

from __future__ import annotations

import logging
import queue
import threading
import time
from collections.abc import Callable
from typing import Any

from lib_log_discord.application.ports.dispatcher import DeliveryJob, DispatcherPort

LOGGER = logging.getLogger(__name__)

DROP_POLICIES = frozenset({"block", "drop_newest", "drop_oldest"})


class QueueDispatcher(DispatcherPort):
    """Process delivery jobs on a background thread fed by a bounded queue.

    Examples
    --------
    >>> done = []
    >>> dispatcher = QueueDispatcher(maxsize=4)
    >>> dispatcher.submit(lambda: done.append(1))
    True
    >>> dispatcher.shutdown(timeout=2.0)
    >>> done
    [1]
    """

    def __init__(
        self,
        *,
        maxsize: int = 2048,
        drop_policy: str = "block",
        timeout: float | None = 1.0,
        stop_timeout: float | None = 5.0,
        on_drop: Callable[[DeliveryJob], None] | None = None,
        diagnostic: Callable[[str, dict[str, Any]], None] | None = None,
    ) -> None:
        """Create the dispatcher; the worker thread starts on first submit.

        Parameters
        ----------
        maxsize:
            Maximum number of queued jobs.
        drop_policy:
            One of :data:`DROP_POLICIES`.
        timeout:
            Seconds a producer waits under the ``block`` policy before the job
            is dropped; ``None`` waits indefinitely.
        stop_timeout:
            Default drain deadline for :meth:`stop`; ``None`` disables it.
        on_drop:
            Optional callback receiving each dropped job.
        diagnostic:
            Optional ``(name, payload)`` callback for drops and failures.
        """
        if maxsize < 1:
            raise ValueError("maxsize must be positive")
        policy = drop_policy.lower()
        if policy not in DROP_POLICIES:
            raise ValueError(f"drop_policy must be one of {sorted(DROP_POLICIES)}")
        self._queue: queue.Queue[DeliveryJob | None] = queue.Queue(maxsize=maxsize)
        self._drop_policy = policy
        self._timeout = timeout
        self._stop_timeout = stop_timeout
        self._on_drop = on_drop
        self._diagnostic = diagnostic
        self._thread: threading.Thread | None = None
        self._lock = threading.Lock()
        self._stop_event = threading.Event()
        self._drop_pending = False
        self._closed = False
        self._drain_event = threading.Event()
        self._drain_event.set()
        self._worker_failed = False

    @property
    def drop_policy(self) -> str:
        return self._drop_policy

    @property
    def worker_failed(self) -> bool:
        """Return ``True`` once a job raised inside the worker."""
        return self._worker_failed

    def start(self) -> None:
        """Start the worker thread if it is not already running."""
        with self._lock:
            if self._thread is not None and self._thread.is_alive():
                return
            self._closed = False
            self._stop_event.clear()
            self._drop_pending = False
            self._thread = threading.Thread(target=self._run, name="lib_log_discord-queue", daemon=True)
            self._thread.start()

    def submit(self, job: DeliveryJob) -> bool:
        """Enqueue ``job``; return ``False`` when the overload policy dropped it."""
        if self._closed:
            self._handle_drop(job, reason="closed")
            return False
        if self._thread is None:
            self.start()

        if self._drop_policy == "drop_newest":
            try:
                self._queue.put(job, block=False)
            except queue.Full:
                self._handle_drop(job, reason="queue_full")
                return False
        elif self._drop_policy == "drop_oldest":
            self._put_evicting_oldest(job)
        else:
            try:
                self._queue.put(job, timeout=self._timeout)
            except queue.Full:
                self._handle_drop(job, reason="queue_full")
                return False

        self._drain_event.clear()
        return True

    def drain(self, timeout: float | None = None) -> bool:
        """Block until queued jobs finish or ``timeout`` elapses."""
        if self._queue.unfinished_tasks == 0:
            return True
        return self._drain_event.wait(timeout)

    def shutdown(self, *, timeout: float | None = None) -> None:
        """Drain pending jobs and stop the worker."""
        self.stop(drain=True, timeout=timeout)

    def stop(self, *, drain: bool = True, timeout: float | None = None) -> None:
        """Stop the worker thread, optionally draining queued jobs.

        Parameters
        ----------
        drain:
            When ``True`` wait for queued jobs; when ``False`` discard them via
            the drop handler.
        timeout:
            Per-call override of the drain deadline; ``None`` falls back to
            ``stop_timeout``.
        """
        self._closed = True
        thread = self._thread
        if thread is None:
            return

        effective_timeout = timeout if timeout is not None else self._stop_timeout
        deadline = time.monotonic() + effective_timeout if effective_timeout is not None else None

        def remaining_time() -> float | None:
            if deadline is None:
                return None
            return max(0.0, deadline - time.monotonic())

        self._drop_pending = not drain
        self._stop_event.set()
        self._enqueue_stop_signal(deadline)

        drain_completed = True
        if drain:
            drain_completed = self._drain_event.wait(remaining_time())
        if not drain or not drain_completed:
            self._drop_pending = True
            self._drain_pending_items()

        thread.join(remaining_time())
        if thread.is_alive():
            self._emit_diagnostic(
                "queue_shutdown_timeout",
                {"timeout": effective_timeout, "drain_completed": drain_completed},
            )
            LOGGER.warning("Delivery queue worker did not stop within %s seconds", effective_timeout)
            return
        self._thread = None

    def _put_evicting_oldest(self, job: DeliveryJob) -> None:
        while True:
            try:
                self._queue.put(job, block=False)
                return
            except queue.Full:
                try:
                    evicted = self._queue.get_nowait()
                except queue.Empty:
                    continue
                if evicted is not None:
                    self._handle_drop(evicted, reason="evicted")
                self._task_done()

    def _run(self) -> None:
        """Worker loop draining the queue until stopped."""
        while True:
            item = self._queue.get()
            try:
                if item is None:
                    if self._stop_event.is_set():
                        break
                    continue
                if self._drop_pending:
                    self._handle_drop(item, reason="shutdown")
                    continue
                try:
                    item()
                except Exception as exc:  # noqa: BLE001
                    self._worker_failed = True
                    LOGGER.error("Delivery job raised an exception; continuing", exc_info=exc)
                    self._emit_diagnostic("delivery_job_failed", {"exception": repr(exc)})
            finally:
                self._task_done()

            if self._stop_event.is_set() and self._queue.empty():
                break

    def _task_done(self) -> None:
        self._queue.task_done()
        if self._queue.unfinished_tasks == 0:
            self._drain_event.set()

    def _handle_drop(self, job: DeliveryJob, *, reason: str) -> None:
        self._emit_diagnostic("delivery_dropped", {"reason": reason, "policy": self._drop_policy})
        if self._on_drop is None:
            return
        try:
            self._on_drop(job)
        except Exception as exc:  # noqa: BLE001
            LOGGER.error("Queue drop handler raised an exception; continuing", exc_info=exc)

    def _emit_diagnostic(self, name: str, payload: dict[str, Any]) -> None:
        if self._diagnostic is None:
            return
        try:
            self._diagnostic(name, payload)
        except Exception as diagnostic_exc:  # noqa: BLE001
            LOGGER.error("Queue diagnostic hook raised while reporting %s", name, exc_info=diagnostic_exc)

    def _drain_pending_items(self) -> None:
        """Remove jobs left in the queue after a non-draining stop."""
        while True:
            try:
                dropped = self._queue.get_nowait()
            except queue.Empty:
                break
            if dropped is not None:
                self._handle_drop(dropped, reason="shutdown")
            self._task_done()
        self._drain_event.set()

    def _enqueue_stop_signal(self, deadline: float | None) -> None:
        """Make sure the worker wakes up to observe the stop event."""
        while True:
            try:
                if deadline is None:
                    self._queue.put(None)
                else:
                    self._queue.put(None, timeout=max(0.0, deadline - time.monotonic()))
                self._drain_event.clear()
                return
            except queue.Full:
                try:
                    dropped = self._queue.get_nowait()
                except queue.Empty:
                    continue
                if dropped is not None:
                    self._handle_drop(dropped, reason="shutdown")
                self._task_done()


__all__ = ["DROP_POLICIES", "QueueDispatcher"]
