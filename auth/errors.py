"""
auth/errors.py -- Client-facing failure taxonomy for the auth gate.

Every error carries the HTTP status and the exact message a client may see.
api/main.py turns any AuthError into a JSON body of the form
{"error": message} (plus "retryAfter" for RateLimited). Internal details
never go into message -- they are logged where the error is raised.
"""

from __future__ import annotations


class AuthError(Exception):
    status_code: int = 500
    message: str = "Internal server error."

    def __init__(self, message: str | None = None) -> None:
        if message is not None:
            self.message = message
        super().__init__(self.message)

    def to_body(self) -> dict:
        return {"error": self.message}


class BadRequest(AuthError):
    status_code = 400
    message = "Missing password."


class InvalidCredentials(AuthError):
    status_code = 401
    message = "Invalid password."


class Unauthenticated(AuthError):
    status_code = 401
    message = "Unauthorized."


class RateLimited(AuthError):
    """Raised when a throttle trips. retry_after is whole seconds the caller should wait."""

    status_code = 429
    message = "Too many login attempts. Please try again later."

    def __init__(self, retry_after: int, message: str | None = None) -> None:
        super().__init__(message)
        self.retry_after = retry_after

    def to_body(self) -> dict:
        return {"error": self.message, "retryAfter": self.retry_after}


class InternalError(AuthError):
    status_code = 500
    message = "Internal server error."
