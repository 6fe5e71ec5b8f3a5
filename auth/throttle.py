"""
auth/throttle.py -- Per-client brute-force protection for the login endpoint.

Failures are counted per client identity (normally the remote IP), not per
account. There is only one account, so an account-scoped lock would let any
attacker lock the real admin out; an identity-scoped one only locks out the
caller that keeps guessing.

Counters expire on their own: once lockout_duration has passed since the last
attempt, the identity is treated as clean again, with or without a success
in between.
"""

from __future__ import annotations

import logging
import math
import threading

from auth.models import LoginAttempts
from core.clock import Clock
from core.locking import held_within

logger = logging.getLogger("admingate.auth.throttle")

DEFAULT_MAX_ATTEMPTS = 5
DEFAULT_LOCKOUT_DURATION = 15 * 60  # 15 minutes


class LoginThrottle:
    def __init__(
        self,
        clock: Clock,
        max_attempts: int = DEFAULT_MAX_ATTEMPTS,
        lockout_duration: float = DEFAULT_LOCKOUT_DURATION,
    ) -> None:
        self._clock = clock
        self.max_attempts = max_attempts
        self.lockout_duration = lockout_duration
        self._attempts: dict[str, LoginAttempts] = {}
        self._lock = threading.Lock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._attempts)

    def _expired(self, attempts: LoginAttempts, now: float) -> bool:
        return now - attempts.last_attempt > self.lockout_duration

    def is_locked(self, identity: str) -> bool:
        """True if identity has used up its attempts within the lockout window."""
        return self.retry_after(identity) > 0

    def retry_after(self, identity: str) -> int:
        """Seconds until identity's lockout lifts, or 0 if it is not locked.

        The verdict and the wait come from one locked read, so a locked identity
        always gets at least 1. A counter past its window is dropped here.
        """
        now = self._clock.now()
        with self._lock:
            attempts = self._attempts.get(identity)
            if attempts is None:
                return 0
            if self._expired(attempts, now):
                del self._attempts[identity]
                return 0
            if attempts.count < self.max_attempts:
                return 0
            return max(1, math.ceil(attempts.last_attempt + self.lockout_duration - now))

    def record(self, identity: str, success: bool) -> None:
        """Record a login outcome. Success clears history; failure counts against identity."""
        now = self._clock.now()
        with self._lock:
            if success:
                self._attempts.pop(identity, None)
                return
            attempts = self._attempts.get(identity)
            if attempts is None or self._expired(attempts, now):
                attempts = LoginAttempts(count=0, last_attempt=now)
                self._attempts[identity] = attempts
            attempts.count += 1
            attempts.last_attempt = now
            count = attempts.count

        if count == self.max_attempts:
            logger.warning("Client %s locked out after %d failed login attempts", identity, count)
        else:
            logger.info("Failed login attempt %d/%d from %s", count, self.max_attempts, identity)

    def sweep(self, now: float | None = None, timeout: float = -1) -> int:
        """Drop counters whose lockout window has passed. Returns the number removed."""
        if now is None:
            now = self._clock.now()
        with held_within(self._lock, timeout, "login throttle"):
            stale = [ip for ip, a in self._attempts.items() if self._expired(a, now)]
            for ip in stale:
                del self._attempts[ip]
        return len(stale)
