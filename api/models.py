"""
API request and response models for the user service REST endpoints.

These Pydantic v2 models define the HTTP transport contract for the API layer.
They are intentionally separate from the dataclass in auth/models.py, which
owns the internal record shape. Route handlers map between the two.

Request models only check presence and type: every field is a required str,
and empty strings are accepted. A missing or non-string field fails with 422
before any route code runs.
"""

from typing import Any, Optional

from pydantic import BaseModel, Field

# ---------------------------------------------------------------------------
# Request models
# ---------------------------------------------------------------------------


class SignupRequest(BaseModel):
    """Request body for POST /api/users/signup."""

    name: str = Field(description="Display name (free text).")
    email: str = Field(description="Login identifier, matched exactly.")
    password: str = Field(description="Plaintext password; stored only as a bcrypt hash.")


class LoginRequest(BaseModel):
    """Request body for POST /api/users/login."""

    email: str
    password: str


# ---------------------------------------------------------------------------
# Response models
# ---------------------------------------------------------------------------


class UserResponse(BaseModel):
    id: str
    name: str
    email: str


class AuthResponse(BaseModel):
    """Returned by signup (201) and login (200)."""

    message: str
    token: str
    user: UserResponse


class ComponentStatus(BaseModel):
    app: str = "ok"
    database: str = "ok"


class HealthResponse(BaseModel):
    status: str = "healthy"
    version: str
    components: ComponentStatus = Field(default_factory=ComponentStatus)


class ErrorResponse(BaseModel):
    """Single error envelope for every non-2xx JSON response.

    message is the user-facing text. code is stable and machine-readable.
    detail is only filled in for validation errors: one {type, loc, msg}
    entry per failing field, never the submitted values.
    """

    message: str
    code: str
    detail: Optional[list[dict[str, Any]]] = None
