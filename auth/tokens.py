"""
auth/tokens.py -- Password hashing and JWT issue / verify.

Security design decisions:
  JWT: python-jose with HS256. Tokens are signed with JWT_SECRET_KEY and carry
       the user id plus iat/exp claims, so any standard JWT library holding the
       key can verify them. Verification returns None on any failure -- the
       route layer turns that into a 401.

  Passwords: bcrypt with a fixed cost factor (BCRYPT_ROUNDS, default 10).
       The _DUMMY_HASH constant lets login run one bcrypt check even when the
       email is unknown, so response time does not reveal whether an account
       exists.

Layer rule: no imports from api/. Import from core/ is allowed.
"""

from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone

import bcrypt
from jose import JWTError, jwt

from core.config import get_settings

logger = logging.getLogger("userauth.auth")

# ---------------------------------------------------------------------------
# Config -- read once at module load via the lru_cache singleton
# ---------------------------------------------------------------------------

_settings = get_settings()

_ALGORITHM = "HS256"

# ---------------------------------------------------------------------------
# Password hashing (bcrypt -- direct usage, no passlib wrapper)
# ---------------------------------------------------------------------------


# bcrypt ignores everything past 72 bytes. bcrypt>=5 raises instead of
# truncating, so cut the input here; hashes match the ones bcryptjs wrote.
_BCRYPT_MAX_BYTES = 72


def _password_bytes(plain: str) -> bytes:
    return plain.encode("utf-8")[:_BCRYPT_MAX_BYTES]


def hash_password(plain: str) -> str:
    """Return a salted bcrypt hash of the given plaintext password."""
    salt = bcrypt.gensalt(rounds=_settings.bcrypt_rounds)
    return bcrypt.hashpw(_password_bytes(plain), salt).decode("utf-8")


def verify_password(plain: str, hashed: str) -> bool:
    """Return True if the plaintext password matches the bcrypt hash."""
    try:
        return bcrypt.checkpw(_password_bytes(plain), hashed.encode("utf-8"))
    except (ValueError, TypeError):
        return False


# Computed once at module load so the first unknown-email login is not
# measurably slower than later ones.
_DUMMY_HASH: str = hash_password("userauth_timing_dummy")


def burn_password_check(plain: str) -> None:
    """Run one bcrypt comparison against a throwaway hash and discard the result."""
    verify_password(plain, _DUMMY_HASH)


# ---------------------------------------------------------------------------
# JWT encode / decode
# ---------------------------------------------------------------------------


def create_access_token(user_id: str, expire_seconds: int = 0, issued_at: datetime | None = None) -> str:
    """Encode a signed JWT for the given user id.

    Args:
        user_id:        Store-assigned user id (hex string), written to the
                        "id" claim.
        expire_seconds: Token lifetime in seconds. If 0 (default), uses
                        Settings.token_expire_seconds (one hour).
        issued_at:      Issue time; defaults to now. Tests backdate it to
                        produce already-expired tokens.
    """
    duration = expire_seconds if expire_seconds > 0 else _settings.token_expire_seconds
    now = issued_at or datetime.now(timezone.utc)
    payload = {
        "id": user_id,
        "iat": now,
        "exp": now + timedelta(seconds=duration),
    }
    return jwt.encode(payload, _settings.jwt_secret_key, algorithm=_ALGORITHM)


def decode_access_token(token: str) -> dict | None:
    """Decode and verify a JWT. Returns the payload dict or None on any failure.

    Signature, expiry and the presence of the "id" claim are all checked.
    """
    try:
        payload = jwt.decode(token, _settings.jwt_secret_key, algorithms=[_ALGORITHM])
    except JWTError:
        return None
    if not isinstance(payload.get("id"), str):
        return None
    return payload
