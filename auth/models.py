"""
auth/models.py -- Domain dataclasses for authentication state.

Pattern: Data class (pure data container, zero logic beyond the validity
predicate). Stores own the maps; these records never leave them.

Layer rule: no imports from api/.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass
class Session:
    """A live login session, keyed in SessionStore by its opaque token.

    principal_id is whoever the session was issued for. The current policy only
    ever issues sessions for "admin", but nothing in the store depends on that.
    Timestamps are epoch seconds.
    """

    principal_id: str
    expires_at: float
    last_activity: float

    def is_valid(self, now: float, inactivity_limit: float) -> bool:
        return now <= self.expires_at and now - self.last_activity <= inactivity_limit


@dataclass
class LoginAttempts:
    """Consecutive failed logins from one client identity."""

    count: int
    last_attempt: float
