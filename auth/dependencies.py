"""
auth/dependencies.py -- FastAPI Depends() helpers.

get_user_store() hands route handlers the UserStore that was injected into the
app at wiring time (create_app(user_store=...) or the lifespan). Routes never
import a store instance directly.

get_current_user() authenticates an Authorization: Bearer <token> header and
raises HTTP 401 on any failure.

Layer rule: auth/dependencies.py may import from fastapi because this module is
part of the FastAPI dependency injection system.
"""

from __future__ import annotations

from fastapi import Depends, HTTPException, Request

from auth.models import User
from auth.store import UserStore
from auth.tokens import decode_access_token


def get_user_store(request: Request) -> UserStore:
    return request.app.state.user_store


def try_get_current_user(request: Request, store: UserStore) -> User | None:
    """Return the user named by a valid Bearer token, or None. Never raises."""
    auth_header = request.headers.get("Authorization", "")
    if not auth_header.startswith("Bearer "):
        return None
    payload = decode_access_token(auth_header[7:])
    if payload is None:
        return None
    return store.get_by_id(payload["id"])


def get_current_user(request: Request, store: UserStore = Depends(get_user_store)) -> User:
    """Require authentication. Raises HTTP 401 if the request is not authenticated.

    Use as a FastAPI dependency:
        @router.get("/protected")
        def route(user: User = Depends(get_current_user)): ...
    """
    user = try_get_current_user(request, store)
    if user is None:
        raise HTTPException(
            status_code=401,
            detail={"code": "unauthorized", "message": "Authentication required."},
        )
    return user
