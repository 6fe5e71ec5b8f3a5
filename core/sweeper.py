"""
core/sweeper.py -- Timer-driven cleanup of in-memory stores.

Each PeriodicSweeper owns one asyncio task that calls target.sweep() every
`interval` seconds. Sweepers are started and stopped by the application
lifespan (api/main.py), never at import time, so tests can build stores
without any timers running.

A failed cycle is logged and skipped; the loop keeps going. A store whose
lock stays busy past lock_timeout raises TimeoutError from sweep(), which is
reported as a warning rather than an error.

Usage:
    sweeper = PeriodicSweeper("sessions", store, interval=3600)
    sweeper.start()
    ...
    await sweeper.stop()
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
from typing import Protocol

logger = logging.getLogger("admingate.sweeper")


class Sweepable(Protocol):
    def sweep(self, now: float | None = None, timeout: float = -1) -> int: ...


class PeriodicSweeper:
    def __init__(self, name: str, target: Sweepable, interval: float, lock_timeout: float = 1.0) -> None:
        self.name = name
        self.target = target
        self.interval = interval
        self.lock_timeout = lock_timeout
        self._task: asyncio.Task | None = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def sweep_once(self) -> int:
        """Run one sweep cycle. Returns entries removed (0 if the cycle was skipped)."""
        try:
            removed = self.target.sweep(timeout=self.lock_timeout)
        except TimeoutError:
            logger.warning("%s sweep skipped: store busy", self.name)
            return 0
        except Exception:
            logger.exception("%s sweep failed", self.name)
            return 0
        if removed:
            logger.info("%s sweep removed %d stale entries", self.name, removed)
        else:
            logger.debug("%s sweep found nothing to remove", self.name)
        return removed

    async def _run(self) -> None:
        # CancelledError from stop() propagates out of asyncio.sleep.
        while True:
            await asyncio.sleep(self.interval)
            await asyncio.to_thread(self.sweep_once)

    def start(self) -> None:
        if self.running:
            return
        self._task = asyncio.create_task(self._run(), name=f"sweep-{self.name}")
        logger.info("%s sweeper started (every %ss)", self.name, self.interval)

    async def stop(self) -> None:
        if self._task is None:
            return
        self._task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await self._task
        self._task = None
        logger.info("%s sweeper stopped", self.name)
