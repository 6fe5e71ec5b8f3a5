"""
core/locking.py -- Bounded lock acquisition for background maintenance.

Request-path operations take a store's lock with a plain `with self._lock:`.
Sweeps run on a timer and must never stall behind a busy store, so they go
through held_within() which gives up after a timeout instead.
"""

from __future__ import annotations

import threading
from collections.abc import Iterator
from contextlib import contextmanager


@contextmanager
def held_within(lock: threading.Lock, timeout: float, owner: str) -> Iterator[None]:
    """Hold lock for the body of the with-block, waiting at most timeout seconds.

    A negative timeout waits indefinitely (threading.Lock semantics).
    Raises TimeoutError naming owner when the lock is not acquired in time.
    """
    if not lock.acquire(timeout=timeout):
        raise TimeoutError(f"{owner} lock not acquired within {timeout}s")
    try:
        yield
    finally:
        lock.release()
