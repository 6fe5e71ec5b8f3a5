"""
api/limiter.py -- Fixed-window request rate limiter, keyed by client identity.

One instance lives on app.state.rate_limiter and is shared by every request
through api.middleware.RequestGuardMiddleware. If each caller built its own
instance, each would have an isolated counter and limits would never trigger.

Algorithm: the first request from an identity opens a window of
window_seconds; every later request in that window increments the count,
and anything past max_requests is denied until the window ends. Denied
requests still count. A request after the window's reset time starts a
fresh window rather than zeroing the old one.

Known limitation: fixed windows allow a burst of up to 2 x max_requests
around a window boundary (end of one window + start of the next).
"""

from __future__ import annotations

import logging
import math
import threading
from dataclasses import dataclass

from core.clock import Clock
from core.locking import held_within

logger = logging.getLogger("admingate.api.limiter")

DEFAULT_WINDOW_SECONDS = 15 * 60
DEFAULT_MAX_REQUESTS = 100


@dataclass
class RateWindow:
    count: int
    reset_at: float


@dataclass(frozen=True)
class Decision:
    allowed: bool
    retry_after: int = 0


class RequestRateLimiter:
    def __init__(
        self,
        clock: Clock,
        max_requests: int = DEFAULT_MAX_REQUESTS,
        window_seconds: float = DEFAULT_WINDOW_SECONDS,
    ) -> None:
        self._clock = clock
        self.max_requests = max_requests
        self.window_seconds = window_seconds
        self._windows: dict[str, RateWindow] = {}
        self._lock = threading.Lock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._windows)

    def admit(self, identity: str) -> Decision:
        """Count one request from identity and decide whether it may proceed."""
        now = self._clock.now()
        with self._lock:
            window = self._windows.get(identity)
            if window is None or now > window.reset_at:
                self._windows[identity] = RateWindow(count=1, reset_at=now + self.window_seconds)
                return Decision(allowed=True)
            window.count += 1
            if window.count <= self.max_requests:
                return Decision(allowed=True)
            retry_after = max(1, math.ceil(window.reset_at - now))

        logger.warning("Request rate limit exceeded for %s (retry in %ds)", identity, retry_after)
        return Decision(allowed=False, retry_after=retry_after)

    def sweep(self, now: float | None = None, timeout: float = -1) -> int:
        """Delete windows whose reset time has passed. Returns the number removed."""
        if now is None:
            now = self._clock.now()
        with held_within(self._lock, timeout, "rate limiter"):
            stale = [key for key, w in self._windows.items() if now > w.reset_at]
            for key in stale:
                del self._windows[key]
        return len(stale)
