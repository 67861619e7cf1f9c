"""
api/routes/users.py -- Signup, login and current-user endpoints.

Routes:
  POST /api/users/signup   -- create account; 201 with token
  POST /api/users/login    -- password login; 200 with token
  GET  /api/users/me       -- current user info (Bearer token required)

Error contract:
  400 user_exists / invalid_credentials -- business outcomes, message shown to users.
      Unknown email and wrong password share one message so the response does
      not reveal whether an account exists.
  500 server_error -- anything unexpected. The exception is logged here with
      the route name; the body carries no detail.

Handlers are plain def functions. FastAPI runs them on the threadpool, so the
blocking pymongo and bcrypt calls do not hold up the event loop.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException

from api.models import AuthResponse, LoginRequest, SignupRequest, UserResponse
from auth.dependencies import get_current_user, get_user_store
from auth.errors import AuthError
from auth.models import User
from auth.service import login_user, register_user
from auth.store import UserStore

logger = logging.getLogger("userauth.api")

# Auth policy:
# - POST /api/users/signup: public
# - POST /api/users/login:  public
# - GET  /api/users/me:     requires auth (get_current_user)
router = APIRouter()


@router.post("/users/signup", response_model=AuthResponse, status_code=201)
def signup(body: SignupRequest, store: UserStore = Depends(get_user_store)) -> AuthResponse:
    """Register a new user and return a session token."""
    try:
        user, token = register_user(store, body.name, body.email, body.password)
    except AuthError as exc:
        raise _client_error(exc) from None
    except Exception:
        logger.exception("Signup error")
        raise _server_error() from None

    return AuthResponse(message="User created successfully", token=token, user=_user_to_response(user))


@router.post("/users/login", response_model=AuthResponse)
def login(body: LoginRequest, store: UserStore = Depends(get_user_store)) -> AuthResponse:
    """Authenticate with email and password and return a session token."""
    try:
        user, token = login_user(store, body.email, body.password)
    except AuthError as exc:
        raise _client_error(exc) from None
    except Exception:
        logger.exception("Login error")
        raise _server_error() from None

    return AuthResponse(message="Login successful", token=token, user=_user_to_response(user))


@router.get("/users/me", response_model=UserResponse)
def me(current_user: User = Depends(get_current_user)) -> UserResponse:
    """Return the user identified by the Bearer token."""
    return _user_to_response(current_user)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _user_to_response(user: User) -> UserResponse:
    return UserResponse(id=user.id, name=user.name, email=user.email)


def _client_error(exc: AuthError) -> HTTPException:
    return HTTPException(status_code=400, detail={"code": exc.code, "message": exc.message})


def _server_error() -> HTTPException:
    return HTTPException(status_code=500, detail={"code": "server_error", "message": "Server error"})
