"""
api/routes/auth.py -- Login, session check, and logout endpoints.

Routes:
  POST /login   -- password login; sets the "auth" session cookie
  GET  /check   -- 200 if the "auth" cookie names a live session, else 401
  POST /logout  -- ends the session (if any) and clears the cookie; always 200

Failures are raised from AuthGateway as auth.errors types and rendered by the
AuthError handler in api/main.py, which also clears the cookie on 401s from
/check.

Security:
  Login throttling happens in the gateway, per client identity.
  Cache-Control: no-store on login responses.
"""

from __future__ import annotations

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse
from pydantic import ValidationError

from api.client import client_identity
from api.cookies import SESSION_COOKIE, clear_session_cookie, set_session_cookie
from api.middleware import media_type
from api.models import CheckResponse, ErrorResponse, LoginRequest, SuccessResponse
from auth.gateway import AuthGateway
from core.config import Settings

router = APIRouter()


async def _read_login_request(request: Request) -> LoginRequest:
    """Parse the login body. Absent, non-JSON, or non-object bodies carry no password.

    Only bodies declared as JSON are read: those are the ones RequestGuardMiddleware
    has sanitized.
    """
    if media_type(request.headers.get("content-type", "")) != "application/json":
        return LoginRequest()
    try:
        payload = await request.json()
    except ValueError:
        return LoginRequest()
    if not isinstance(payload, dict):
        return LoginRequest()
    try:
        return LoginRequest.model_validate(payload)
    except ValidationError:
        return LoginRequest()


@router.post(
    "/login",
    response_model=SuccessResponse,
    responses={400: {"model": ErrorResponse}, 401: {"model": ErrorResponse}, 429: {"model": ErrorResponse}},
)
async def login(request: Request) -> JSONResponse:
    """Authenticate the admin password and issue a session cookie."""
    gateway: AuthGateway = request.app.state.gateway
    settings: Settings = request.app.state.settings

    body = await _read_login_request(request)
    token = gateway.login(body.password, client_identity(request, settings.trust_proxy))

    resp = JSONResponse(content=SuccessResponse().model_dump())
    set_session_cookie(resp, token, settings)
    resp.headers["Cache-Control"] = "no-store"
    return resp


@router.get("/check", response_model=CheckResponse, responses={401: {"model": ErrorResponse}})
async def check(request: Request) -> CheckResponse:
    """Confirm the caller holds a live session, refreshing its inactivity timer."""
    gateway: AuthGateway = request.app.state.gateway
    gateway.check(request.cookies.get(SESSION_COOKIE))
    return CheckResponse()


@router.post("/logout", response_model=SuccessResponse)
async def logout(request: Request) -> JSONResponse:
    """End the current session. Logging out twice is not an error."""
    gateway: AuthGateway = request.app.state.gateway
    settings: Settings = request.app.state.settings

    gateway.logout(request.cookies.get(SESSION_COOKIE))

    resp = JSONResponse(content=SuccessResponse().model_dump())
    clear_session_cookie(resp, settings)
    return resp
