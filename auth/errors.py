"""
auth/errors.py -- Domain errors raised by auth/service.py.

Each error carries a stable machine-readable code and the user-facing message.
The API layer copies both into the response body unchanged, so the messages
here are part of the public contract.
"""

from __future__ import annotations


class AuthError(Exception):
    code = "auth_error"
    message = "Authentication failed"

    def __init__(self, message: str | None = None) -> None:
        if message is not None:
            self.message = message
        super().__init__(self.message)


class UserAlreadyExistsError(AuthError):
    code = "user_exists"
    message = "User already exists"


class InvalidCredentialsError(AuthError):
    """Raised for both unknown email and wrong password -- callers cannot tell which."""

    code = "invalid_credentials"
    message = "Invalid email or password"
