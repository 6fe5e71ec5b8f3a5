"""
api/main.py -- FastAPI application entry point for the admin gate.

Run with:  python main.py
           uvicorn api.main:app --reload

Middleware stack (outermost to innermost):
  1. log_requests              -- access log line per request
  2. SecurityHeadersMiddleware -- hardening headers on every response, 429s included
  3. CORSMiddleware            -- allowed browser origins (FRONTEND_URL in production)
  4. RequestGuardMiddleware    -- per-client rate limit, then input sanitization

Lifespan builds every store (init_state) and starts the periodic sweepers on
startup; shutdown stops them. Nothing is created or scheduled at import time,
so tests can swap the lifespan and wire isolated stores.
"""

from __future__ import annotations

import logging
import time
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from api.cookies import clear_session_cookie
from api.limiter import RequestRateLimiter
from api.middleware import RequestGuardMiddleware, SecurityHeadersMiddleware
from api.models import HealthResponse
from api.routes.auth import router as auth_router
from auth.credentials import CredentialVerifier, SharedSecretVerifier
from auth.errors import AuthError, InternalError, RateLimited, Unauthenticated
from auth.gateway import AuthGateway
from auth.sessions import SessionStore
from auth.throttle import LoginThrottle
from core.clock import Clock, SystemClock
from core.config import Settings, get_settings
from core.sweeper import PeriodicSweeper

__version__ = "1.0.0"

_settings = get_settings()

# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------

logging.basicConfig(
    level=_settings.log_level.upper(),
    format="%(asctime)s %(levelname)-5s %(name)s %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)
logger = logging.getLogger("admingate.api")

# ---------------------------------------------------------------------------
# State wiring
# ---------------------------------------------------------------------------


def init_state(
    app: FastAPI,
    settings: Settings,
    clock: Clock | None = None,
    verifier: CredentialVerifier | None = None,
) -> None:
    """Build the stores and gateway and attach them to app.state.

    Each store is owned by exactly one object here; nothing else constructs
    them. Tests call this directly with a fake clock and a stub verifier.
    """
    clock = clock or SystemClock()
    verifier = verifier or SharedSecretVerifier(settings.secret_password)

    app.state.settings = settings
    app.state.sessions = SessionStore(
        clock,
        session_duration=settings.session_duration_seconds,
        inactivity_limit=settings.session_inactivity_seconds,
    )
    app.state.login_throttle = LoginThrottle(
        clock,
        max_attempts=settings.login_max_attempts,
        lockout_duration=settings.login_lockout_seconds,
    )
    app.state.rate_limiter = RequestRateLimiter(
        clock,
        max_requests=settings.rate_limit_max_requests,
        window_seconds=settings.rate_limit_window_seconds,
    )
    app.state.gateway = AuthGateway(app.state.sessions, app.state.login_throttle, verifier)


def build_sweepers(app: FastAPI, settings: Settings) -> list[PeriodicSweeper]:
    timeout = settings.sweep_lock_timeout_seconds
    return [
        PeriodicSweeper("sessions", app.state.sessions, settings.session_sweep_seconds, timeout),
        PeriodicSweeper("login-attempts", app.state.login_throttle, settings.rate_limit_sweep_seconds, timeout),
        PeriodicSweeper("rate-limits", app.state.rate_limiter, settings.rate_limit_sweep_seconds, timeout),
    ]


# ---------------------------------------------------------------------------
# Lifespan
# ---------------------------------------------------------------------------


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Create stores on startup and run their sweepers until shutdown."""
    settings = get_settings()
    logger.info("Admin gate starting up (production=%s)", settings.production)
    init_state(app, settings)
    app.state.sweepers = build_sweepers(app, settings)
    for sweeper in app.state.sweepers:
        sweeper.start()

    yield

    for sweeper in app.state.sweepers:
        await sweeper.stop()
    logger.info("Admin gate shutdown complete")


# ---------------------------------------------------------------------------
# App instantiation
# ---------------------------------------------------------------------------

app = FastAPI(
    title="Admin Gate",
    description="Password login and session gate for the admin account.",
    version=__version__,
    lifespan=lifespan,
)

# ---------------------------------------------------------------------------
# Middleware stack
#
# Starlette wraps each newly added middleware around the ones already
# registered, so the last registration is the outermost layer. Register from
# the inside out: RequestGuard -> CORS -> SecurityHeaders -> log_requests.
# ---------------------------------------------------------------------------

app.add_middleware(RequestGuardMiddleware)

app.add_middleware(
    CORSMiddleware,
    allow_origins=_settings.cors_origins,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "HEAD", "OPTIONS"],
    allow_headers=["*"],
)

app.add_middleware(SecurityHeadersMiddleware)


@app.middleware("http")
async def log_requests(request: Request, call_next):
    start = time.perf_counter()
    response = await call_next(request)
    ms = (time.perf_counter() - start) * 1000
    logger.info(
        "%s %s %d %.1fms %s",
        request.method,
        request.url.path,
        response.status_code,
        ms,
        request.client.host if request.client else "unknown",
    )
    return response


# ---------------------------------------------------------------------------
# Router registration
# ---------------------------------------------------------------------------

app.include_router(auth_router, tags=["Auth"])


# ---------------------------------------------------------------------------
# Exception handlers
# ---------------------------------------------------------------------------


@app.exception_handler(AuthError)
async def auth_error_handler(request: Request, exc: AuthError) -> JSONResponse:
    """Render any AuthError as {"error": ...} with its own status code.

    RateLimited adds retryAfter to the body and a Retry-After header.
    Unauthenticated also clears the session cookie so the browser stops
    presenting a dead token.
    """
    response = JSONResponse(status_code=exc.status_code, content=exc.to_body())
    if isinstance(exc, RateLimited):
        response.headers["Retry-After"] = str(exc.retry_after)
    if isinstance(exc, Unauthenticated):
        clear_session_cookie(response, request.app.state.settings)
    return response


@app.exception_handler(Exception)
async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Last-resort handler for failures in the outermost layers.

    Errors from routes and the request guard are rendered by
    SecurityHeadersMiddleware so they keep the hardening headers.

    The raw exception goes to the log only, never to the response body.
    """
    logger.exception("Unhandled exception on %s %s", request.method, request.url.path)
    return JSONResponse(status_code=500, content=InternalError().to_body())


# ---------------------------------------------------------------------------
# Health endpoint
#
# Not rate-limit exempt: the request guard wraps every route.
# ---------------------------------------------------------------------------


@app.get("/health", tags=["Health"])
async def health() -> HealthResponse:
    """Return liveness and current version."""
    return HealthResponse(version=__version__)
