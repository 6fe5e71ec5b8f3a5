"""
core/clock.py -- Time source shared by every in-memory store.

Stores never call time.time() directly. They receive a Clock at construction
so tests can substitute a controllable clock and step through expiry windows
without sleeping.

Layer rule: core/ is the kernel. This module may not import from api/ or auth/.
"""

from __future__ import annotations

import time
from typing import Protocol


class Clock(Protocol):
    def now(self) -> float:
        """Return the current time as epoch seconds."""
        ...


class SystemClock:
    """Wall-clock time from the operating system."""

    def now(self) -> float:
        return time.time()
