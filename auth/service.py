"""
auth/service.py -- Signup and login flows.

Both functions take the store as an argument rather than reaching for a global,
so the API layer decides which store a request uses.

Failure modes:
  UserAlreadyExistsError / InvalidCredentialsError -- expected outcomes that the
      route layer reports as 400.
  Anything else (pymongo errors, bcrypt errors) propagates unchanged; the route
      layer logs it and answers 500.

Layer rule: no imports from api/.
"""

from __future__ import annotations

import logging

from pymongo.errors import DuplicateKeyError

from auth.errors import InvalidCredentialsError, UserAlreadyExistsError
from auth.models import User
from auth.store import UserStore
from auth.tokens import burn_password_check, create_access_token, hash_password, verify_password

logger = logging.getLogger("userauth.auth")


def register_user(store: UserStore, name: str, email: str, password: str) -> tuple[User, str]:
    """Create an account and return (user, token).

    The existence check and the insert are two separate operations. Without
    the optional unique index a concurrent signup for the same email can slip
    between them; with it, the losing insert raises DuplicateKeyError and is
    reported like any other duplicate.
    """
    if store.get_by_email(email) is not None:
        raise UserAlreadyExistsError()

    user = User(name=name, email=email, hashed_password=hash_password(password))
    try:
        user.id = store.create_user(user)
    except DuplicateKeyError:
        raise UserAlreadyExistsError() from None

    token = create_access_token(user.id)
    logger.info("Registered user %s", user.id)
    return user, token


def login_user(store: UserStore, email: str, password: str) -> tuple[User, str]:
    """Check credentials and return (user, token).

    Unknown email and wrong password raise the same InvalidCredentialsError.
    A bcrypt check runs in both cases so timing does not tell them apart.
    """
    user = store.get_by_email(email)
    if user is None:
        burn_password_check(password)
        raise InvalidCredentialsError()
    if not verify_password(password, user.hashed_password):
        raise InvalidCredentialsError()

    token = create_access_token(user.id)
    logger.info("Login: %s", user.id)
    return user, token
