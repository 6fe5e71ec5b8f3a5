"""
api/client.py -- Resolve the client identity used as the throttling key.

Both the request rate limiter and the login throttle key on this value, so
they must agree on it. Requests without a transport peer (some test and
proxy setups) share the "unknown" identity.
"""

from __future__ import annotations

from starlette.requests import HTTPConnection

UNKNOWN_CLIENT = "unknown"


def client_identity(conn: HTTPConnection, trust_proxy: bool = False) -> str:
    """Return the caller's address.

    With trust_proxy, the first X-Forwarded-For entry wins. Only enable it
    behind a reverse proxy that sets the header itself; otherwise any client
    can pick its own identity and dodge the throttles.
    """
    if trust_proxy:
        forwarded = conn.headers.get("x-forwarded-for")
        if forwarded:
            first = forwarded.split(",")[0].strip()
            if first:
                return first
    if conn.client and conn.client.host:
        return conn.client.host
    return UNKNOWN_CLIENT
