from __future__ import annotations

import threading
from typing import Any

import pytest

from lib_log_discord.adapters.threads import ThreadDispatcher
from lib_log_discord.application.ports.dispatcher import DispatcherPort


def test_thread_dispatcher_satisfies_port() -> None:
    assert isinstance(ThreadDispatcher(), DispatcherPort)


def test_jobs_run_concurrently_off_the_caller_thread() -> None:
    barrier = threading.Barrier(3, timeout=2.0)
    callers: list[str] = []
    lock = threading.Lock()

    def job() -> None:
        with lock:
            callers.append(threading.current_thread().name)
        barrier.wait()

    dispatcher = ThreadDispatcher()
    for _ in range(3):
        assert dispatcher.submit(job) is True

    assert dispatcher.drain(timeout=3.0) is True
    assert len(callers) == 3
    assert threading.current_thread().name not in callers
    assert dispatcher.in_flight == 0


def test_drain_times_out_while_a_job_is_running() -> None:
    gate = threading.Event()
    dispatcher = ThreadDispatcher()
    dispatcher.submit(lambda: gate.wait(5.0))

    assert dispatcher.drain(timeout=0.05) is False
    assert dispatcher.in_flight == 1
    gate.set()
    assert dispatcher.drain(timeout=2.0) is True


def test_failing_job_is_reported(diagnostics: Any) -> None:
    def broken() -> None:
        raise RuntimeError("boom")

    dispatcher = ThreadDispatcher(diagnostic=diagnostics)
    dispatcher.submit(broken)
    dispatcher.drain(timeout=2.0)

    assert diagnostics.names() == ["delivery_job_failed"]
    assert "boom" in diagnostics.events[0][1]["exception"]


def test_thread_start_failure_drops_the_job(monkeypatch: pytest.MonkeyPatch, diagnostics: Any) -> None:
    def refuse(self: threading.Thread) -> None:
        raise RuntimeError("can't start new thread")

    monkeypatch.setattr(threading.Thread, "start", refuse)
    dispatcher = ThreadDispatcher(diagnostic=diagnostics)

    assert dispatcher.submit(lambda: None) is False
    assert dispatcher.in_flight == 0
    assert dispatcher.drain(timeout=1.0) is True
    assert diagnostics.events == [("delivery_dropped", {"reason": "thread_start_failed"})]


def test_shutdown_rejects_later_jobs(diagnostics: Any) -> None:
    dispatcher = ThreadDispatcher(diagnostic=diagnostics)
    dispatcher.shutdown(timeout=1.0)

    assert dispatcher.submit(lambda: None) is False
    assert diagnostics.events == [("delivery_dropped", {"reason": "closed"})]
