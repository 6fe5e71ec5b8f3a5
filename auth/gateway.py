"""
auth/gateway.py -- login / check / logout for the single admin account.

AuthGateway ties the stores together and owns the password policy:

  login:  throttle check -> presence check -> policy + secret check
          -> drop the principal's old sessions -> mint a new one -> clear
          the throttle counter.
  check:  validate-and-touch the presented token.
  logout: delete the presented token, if any.

Failures are raised as auth.errors types. Anything unexpected is logged here
with its traceback and re-raised as InternalError so the HTTP layer only ever
sees client-safe errors.

The steps of login are not atomic across stores. Two simultaneous correct
logins can both pass invalidate_all_for_principal() before either calls
create(); both tokens then stay live until one is invalidated or expires.
This race is accepted.

Layer rule: no imports from api/ or fastapi.
"""

from __future__ import annotations

import logging

from auth.credentials import CredentialVerifier
from auth.errors import AuthError, BadRequest, InternalError, InvalidCredentials, RateLimited, Unauthenticated
from auth.sessions import SessionStore
from auth.throttle import LoginThrottle

logger = logging.getLogger("admingate.auth.gateway")

ADMIN_PRINCIPAL = "admin"
MIN_PASSWORD_LENGTH = 8
# Compared case-insensitively. These are rejected even if someone configures
# one of them as the secret.
WEAK_PASSWORDS = frozenset({"password", "123456", "admin", "test", "qwerty"})


class AuthGateway:
    def __init__(
        self,
        sessions: SessionStore,
        throttle: LoginThrottle,
        verifier: CredentialVerifier,
        principal_id: str = ADMIN_PRINCIPAL,
    ) -> None:
        self.sessions = sessions
        self.throttle = throttle
        self.verifier = verifier
        self.principal_id = principal_id

    def password_acceptable(self, candidate: object) -> bool:
        """Apply the password policy, then compare against the configured secret."""
        if not isinstance(candidate, str):
            return False
        if len(candidate) < MIN_PASSWORD_LENGTH:
            return False
        if candidate.lower() in WEAK_PASSWORDS:
            return False
        return self.verifier.verify(candidate)

    def login(self, password: object, client_identity: str) -> str:
        """Authenticate password for client_identity and return a new session token.

        Raises:
            RateLimited:        client_identity is locked out; nothing is recorded.
            BadRequest:         no password supplied.
            InvalidCredentials: password rejected by policy or not the secret.
            InternalError:      anything unexpected.
        """
        try:
            retry_after = self.throttle.retry_after(client_identity)
            if retry_after:
                logger.warning("Login refused for locked-out client %s", client_identity)
                raise RateLimited(retry_after)

            if not password:
                self.throttle.record(client_identity, success=False)
                raise BadRequest()

            if not self.password_acceptable(password):
                self.throttle.record(client_identity, success=False)
                raise InvalidCredentials()

            self.sessions.invalidate_all_for_principal(self.principal_id)
            token = self.sessions.create(self.principal_id)
            self.throttle.record(client_identity, success=True)
            logger.info("Successful login for %s from %s", self.principal_id, client_identity)
            return token
        except AuthError:
            raise
        except Exception as exc:
            logger.exception("Unexpected failure during login from %s", client_identity)
            raise InternalError() from exc

    def check(self, token: str | None) -> None:
        """Raise Unauthenticated unless token names a live session."""
        try:
            if not token or not self.sessions.validate_and_touch(token):
                raise Unauthenticated()
        except AuthError:
            raise
        except Exception as exc:
            logger.exception("Unexpected failure during session check")
            raise InternalError() from exc

    def logout(self, token: str | None) -> None:
        """End token's session. Missing or unknown tokens are not an error."""
        try:
            if token:
                self.sessions.invalidate(token)
        except Exception as exc:
            logger.exception("Unexpected failure during logout")
            raise InternalError() from exc
