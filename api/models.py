"""
API request and response models for the admin gate REST endpoints.

These Pydantic v2 models define the HTTP transport contract. The auth/
package never sees them; route handlers map between the two.

Field names follow the wire format the frontend already consumes
("retryAfter", not "retry_after").
"""

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field

# ---------------------------------------------------------------------------
# Request models
# ---------------------------------------------------------------------------


class LoginRequest(BaseModel):
    """Request body for POST /login.

    password is typed loosely on purpose: a missing or empty value is a 400,
    while a value of the wrong type is just a wrong password (401). Both
    decisions belong to the gateway, not to request validation.
    """

    model_config = ConfigDict(extra="ignore")

    password: Any = None


# ---------------------------------------------------------------------------
# Response models
# ---------------------------------------------------------------------------


class SuccessResponse(BaseModel):
    """Response for POST /login and POST /logout."""

    model_config = ConfigDict(frozen=True)

    success: bool = True


class CheckResponse(BaseModel):
    """Response for GET /check."""

    model_config = ConfigDict(frozen=True)

    authorized: bool = True


class ErrorResponse(BaseModel):
    """Body of every 4xx/5xx response."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    error: str
    retry_after: Optional[int] = Field(default=None, alias="retryAfter")


class HealthResponse(BaseModel):
    """Response for GET /health."""

    model_config = ConfigDict(frozen=True)

    status: str = "healthy"
    version: str
