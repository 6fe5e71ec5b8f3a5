"""
auth/sessions.py -- In-memory session store with absolute and idle expiry.

Pattern: Repository. SessionStore owns the token -> Session map; routes and
the gateway only ever see tokens and booleans, never the records themselves.

Expiry is enforced twice, independently:
  Lazy:  validate_and_touch() evicts a stale session the moment it is
         presented, so an expired token is never reported valid even if the
         sweep has not run yet.
  Sweep: sweep() removes stale sessions nobody presents again, keeping memory
         bounded. It is driven by core.sweeper.PeriodicSweeper, not by requests.

Tokens are secrets.token_hex(32): 256 bits of entropy, so collisions with a
live token are not re-checked.

Thread safety: one threading.Lock guards the map for the duration of each
operation. All operations are in-memory and short.

Usage:
    store = SessionStore(SystemClock())
    token = store.create("admin")
    store.validate_and_touch(token)   # True, refreshes last_activity
    store.invalidate(token)
"""

from __future__ import annotations

import logging
import secrets
import threading

from auth.models import Session
from core.clock import Clock
from core.locking import held_within

logger = logging.getLogger("admingate.auth.sessions")

DEFAULT_SESSION_DURATION = 24 * 60 * 60  # 24 hours
DEFAULT_INACTIVITY_LIMIT = 2 * 60 * 60  # 2 hours


def _generate_token() -> str:
    return secrets.token_hex(32)


class SessionStore:
    def __init__(
        self,
        clock: Clock,
        session_duration: float = DEFAULT_SESSION_DURATION,
        inactivity_limit: float = DEFAULT_INACTIVITY_LIMIT,
    ) -> None:
        self._clock = clock
        self.session_duration = session_duration
        self.inactivity_limit = inactivity_limit
        self._sessions: dict[str, Session] = {}
        self._lock = threading.Lock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._sessions)

    def __contains__(self, token: object) -> bool:
        with self._lock:
            return token in self._sessions

    def create(self, principal_id: str) -> str:
        """Issue a new session for principal_id and return its token."""
        token = _generate_token()
        now = self._clock.now()
        with self._lock:
            self._sessions[token] = Session(
                principal_id=principal_id,
                expires_at=now + self.session_duration,
                last_activity=now,
            )
        logger.info("Session %s... created for %s", token[:8], principal_id)
        return token

    def validate_and_touch(self, token: str) -> bool:
        """Return True if token names a live session, refreshing its activity.

        A session past its absolute expiry or idle for longer than the
        inactivity limit is deleted on the spot and reported invalid.
        """
        now = self._clock.now()
        with self._lock:
            session = self._sessions.get(token)
            if session is None:
                return False
            if not session.is_valid(now, self.inactivity_limit):
                del self._sessions[token]
                logger.info("Session %s... expired", token[:8])
                return False
            session.last_activity = now
            return True

    def invalidate(self, token: str) -> None:
        """Delete token's session. Unknown tokens are ignored."""
        with self._lock:
            self._sessions.pop(token, None)

    def invalidate_all_for_principal(self, principal_id: str) -> int:
        """Delete every session owned by principal_id. Returns how many were removed."""
        with self._lock:
            doomed = [t for t, s in self._sessions.items() if s.principal_id == principal_id]
            for token in doomed:
                del self._sessions[token]
        if doomed:
            logger.info("Invalidated %d session(s) for %s", len(doomed), principal_id)
        return len(doomed)

    def sweep(self, now: float | None = None, timeout: float = -1) -> int:
        """Delete every expired or idle session. Returns the number removed.

        Raises TimeoutError if the store lock is not free within timeout seconds.
        """
        if now is None:
            now = self._clock.now()
        with held_within(self._lock, timeout, "session store"):
            stale = [t for t, s in self._sessions.items() if not s.is_valid(now, self.inactivity_limit)]
            for token in stale:
                del self._sessions[token]
        return len(stale)
