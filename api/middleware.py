"""
api/middleware.py -- Cross-cutting HTTP hardening applied to every route.

SecurityHeadersMiddleware
    Adds the standard browser hardening headers to every response and drops
    X-Powered-By. HSTS is only sent on HTTPS requests, either direct TLS or
    behind a proxy that sets X-Forwarded-Proto: https. Unhandled exceptions
    from inner layers become the generic 500 here, so they carry the headers
    too.

RequestGuardMiddleware
    Pure ASGI middleware (not BaseHTTPMiddleware) because it rewrites the
    request itself:
      1. Asks app.state.rate_limiter to admit the client; answers 429 if not.
      2. Sanitizes the query string in place.
      3. Sanitizes JSON and urlencoded bodies in place, replaying the rewritten
         body to the downstream app.
    Bodies that fail to parse are forwarded untouched; the route decides what
    malformed input means.
"""

from __future__ import annotations

import json
import logging
from urllib.parse import parse_qsl, urlencode

from starlette.datastructures import MutableHeaders
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import HTTPConnection, Request
from starlette.responses import JSONResponse, Response
from starlette.types import ASGIApp, Message, Receive, Scope, Send

from api.client import client_identity
from api.limiter import RequestRateLimiter
from auth.errors import InternalError
from core.sanitize import sanitize

logger = logging.getLogger("admingate.api.middleware")

SECURITY_HEADERS = {
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "DENY",
    "X-XSS-Protection": "1; mode=block",
    "Referrer-Policy": "strict-origin-when-cross-origin",
    "Permissions-Policy": "camera=(), microphone=(), geolocation=()",
}
HSTS_VALUE = "max-age=31536000; includeSubDomains; preload"


def is_secure_request(request: Request) -> bool:
    return request.url.scheme == "https" or request.headers.get("x-forwarded-proto") == "https"


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Injects security headers into every response."""

    async def dispatch(self, request: Request, call_next) -> Response:
        try:
            response = await call_next(request)
        except Exception:
            logger.exception("Unhandled exception on %s %s", request.method, request.url.path)
            response = JSONResponse(status_code=500, content=InternalError().to_body())
        if "x-powered-by" in response.headers:
            del response.headers["x-powered-by"]
        for name, value in SECURITY_HEADERS.items():
            response.headers[name] = value
        if is_secure_request(request):
            response.headers["Strict-Transport-Security"] = HSTS_VALUE
        return response


# ---------------------------------------------------------------------------
# Request guard: rate limiting + input sanitization
# ---------------------------------------------------------------------------

_JSON = "application/json"
_FORM = "application/x-www-form-urlencoded"


def media_type(content_type: str) -> str:
    """Bare, lower-cased media type of a Content-Type header value."""
    return content_type.split(";")[0].strip().lower()


def _sanitize_urlencoded(raw: str) -> str:
    pairs = parse_qsl(raw, keep_blank_values=True)
    return urlencode([(sanitize(k), sanitize(v)) for k, v in pairs])


def _sanitize_body(body: bytes, content_type: str) -> bytes:
    """Return body with its strings sanitized, or unchanged if it cannot be parsed."""
    if not body:
        return body
    kind = media_type(content_type)
    if kind == _JSON:
        try:
            payload = json.loads(body)
        except ValueError:
            return body
        return json.dumps(sanitize(payload)).encode("utf-8")
    if kind == _FORM:
        try:
            raw = body.decode("utf-8")
        except UnicodeDecodeError:
            return body
        return _sanitize_urlencoded(raw).encode("utf-8")
    return body


async def _read_body(receive: Receive) -> bytes | None:
    """Drain the request body. Returns None if the client disconnected first."""
    chunks = []
    while True:
        message = await receive()
        if message["type"] == "http.disconnect":
            return None
        chunks.append(message.get("body", b""))
        if not message.get("more_body", False):
            return b"".join(chunks)


def _replay(body: bytes, receive: Receive) -> Receive:
    sent = False

    async def replay() -> Message:
        nonlocal sent
        if not sent:
            sent = True
            return {"type": "http.request", "body": body, "more_body": False}
        return await receive()

    return replay


class RequestGuardMiddleware:
    def __init__(self, app: ASGIApp) -> None:
        self.app = app

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        state = scope["app"].state
        limiter: RequestRateLimiter = state.rate_limiter
        identity = client_identity(HTTPConnection(scope), state.settings.trust_proxy)

        decision = limiter.admit(identity)
        if not decision.allowed:
            response = JSONResponse(
                status_code=429,
                content={"error": "Too many requests", "retryAfter": decision.retry_after},
                headers={"Retry-After": str(decision.retry_after)},
            )
            await response(scope, receive, send)
            return

        scope = dict(scope, headers=list(scope.get("headers", [])))
        query = scope.get("query_string", b"")
        if query:
            scope["query_string"] = _sanitize_urlencoded(query.decode("latin-1")).encode("latin-1")

        headers = MutableHeaders(scope=scope)
        content_type = headers.get("content-type", "")
        if media_type(content_type) in (_JSON, _FORM):
            body = await _read_body(receive)
            if body is None:
                return
            cleaned = _sanitize_body(body, content_type)
            if cleaned != body:
                headers["content-length"] = str(len(cleaned))
            receive = _replay(cleaned, receive)

        await self.app(scope, receive, send)
