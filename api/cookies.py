"""
api/cookies.py -- The "auth" session cookie.

httponly=True: JS cannot read the cookie (XSS mitigation).
secure / samesite: production serves the API cross-site to the frontend over
    HTTPS, which requires SameSite=None together with Secure. Development runs
    on plain http://localhost, where Secure cookies would be dropped, so it
    uses SameSite=Lax instead.
max_age: matches the absolute session duration so cookie and session end together.
"""

from __future__ import annotations

from starlette.responses import Response

from core.config import Settings

SESSION_COOKIE = "auth"


def _samesite(settings: Settings) -> str:
    return "none" if settings.production else "lax"


def set_session_cookie(response: Response, token: str, settings: Settings) -> None:
    response.set_cookie(
        SESSION_COOKIE,
        value=token,
        max_age=settings.session_duration_seconds,
        path="/",
        secure=settings.production,
        httponly=True,
        samesite=_samesite(settings),
    )


def clear_session_cookie(response: Response, settings: Settings) -> None:
    """Tell the browser to drop the session cookie (Max-Age=0)."""
    response.delete_cookie(
        SESSION_COOKIE,
        path="/",
        secure=settings.production,
        httponly=True,
        samesite=_samesite(settings),
    )
