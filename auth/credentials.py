"""
auth/credentials.py -- Pluggable check of a password against the admin secret.

The gateway owns password *policy* (length, weak-password denylist). A
CredentialVerifier only answers "is this exactly the configured secret?".
Production wires SharedSecretVerifier with SECRET_PASSWORD from settings;
tests pass their own verifier.
"""

from __future__ import annotations

import hmac
from typing import Protocol


class CredentialVerifier(Protocol):
    def verify(self, candidate: str) -> bool: ...


class SharedSecretVerifier:
    """Exact match against one shared secret.

    hmac.compare_digest keeps the comparison time independent of how many
    leading characters match. An empty secret means "not configured" and
    never matches anything.
    """

    def __init__(self, secret: str) -> None:
        self._secret = secret.encode("utf-8")

    def verify(self, candidate: str) -> bool:
        if not self._secret:
            return False
        return hmac.compare_digest(candidate.encode("utf-8"), self._secret)
