"""
tests/test_sweeper.py -- Periodic sweeper behaviour.

Async paths run under asyncio.run() directly; no pytest asyncio plugin needed.
"""

from __future__ import annotations

import asyncio
import logging

from auth.sessions import SessionStore
from core.sweeper import PeriodicSweeper


class FailingTarget:
    def __init__(self, exc: Exception) -> None:
        self.exc = exc
        self.calls = 0

    def sweep(self, now=None, timeout=-1) -> int:
        self.calls += 1
        raise self.exc


def test_sweep_once_removes_stale_entries(clock) -> None:
    store = SessionStore(clock)
    store.create("admin")
    clock.advance(3 * 60 * 60)

    sweeper = PeriodicSweeper("sessions", store, interval=60)
    assert sweeper.sweep_once() == 1
    assert len(store) == 0


def test_busy_store_skips_cycle_with_warning(caplog) -> None:
    target = FailingTarget(TimeoutError("session store lock not acquired within 1.0s"))
    sweeper = PeriodicSweeper("sessions", target, interval=60)
    with caplog.at_level(logging.WARNING, logger="admingate.sweeper"):
        assert sweeper.sweep_once() == 0
    assert "sessions sweep skipped" in caplog.text


def test_unexpected_failure_is_logged_not_raised(caplog) -> None:
    target = FailingTarget(RuntimeError("boom"))
    sweeper = PeriodicSweeper("rate-limits", target, interval=60)
    with caplog.at_level(logging.ERROR, logger="admingate.sweeper"):
        assert sweeper.sweep_once() == 0
    assert "rate-limits sweep failed" in caplog.text


def test_lock_timeout_is_passed_to_target(clock) -> None:
    store = SessionStore(clock)
    store._lock.acquire()
    try:
        sweeper = PeriodicSweeper("sessions", store, interval=60, lock_timeout=0.01)
        assert sweeper.sweep_once() == 0
    finally:
        store._lock.release()


def test_loop_keeps_running_after_failures() -> None:
    target = FailingTarget(RuntimeError("boom"))

    async def scenario() -> None:
        sweeper = PeriodicSweeper("flaky", target, interval=0.01)
        sweeper.start()
        assert sweeper.running
        await asyncio.sleep(0.2)
        assert sweeper.running
        await sweeper.stop()
        assert not sweeper.running

    asyncio.run(scenario())
    assert target.calls >= 2


def test_loop_sweeps_real_store(clock) -> None:
    store = SessionStore(clock)
    store.create("admin")
    clock.advance(25 * 60 * 60)

    async def scenario() -> None:
        sweeper = PeriodicSweeper("sessions", store, interval=0.01)
        sweeper.start()
        for _ in range(100):
            if len(store) == 0:
                break
            await asyncio.sleep(0.01)
        await sweeper.stop()

    asyncio.run(scenario())
    assert len(store) == 0


def test_stop_without_start_is_harmless() -> None:
    sweeper = PeriodicSweeper("idle", FailingTarget(RuntimeError()), interval=60)
    asyncio.run(sweeper.stop())
    assert not sweeper.running
