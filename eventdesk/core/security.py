"""
Credentials and tokens.

Passwords are stored as bcrypt hashes. Sessions use a pair of signed JWTs:
a short-lived access token sent as a bearer header and a refresh token whose
jti is tracked in Redis so it can be revoked. Invitation tokens are opaque
random strings stored on the invitation row.
"""

from __future__ import annotations

import secrets
import uuid
from datetime import UTC, datetime, timedelta
from typing import Any

import bcrypt as _bcrypt
from jose import JWTError, jwt

from eventdesk.core.config import settings

ACCESS_TOKEN_TYPE = "access"
REFRESH_TOKEN_TYPE = "refresh"

BCRYPT_ROUNDS = 12
# bcrypt ignores everything past 72 bytes
BCRYPT_MAX_BYTES = 72

INVITATION_TOKEN_BYTES = 32


# ---------------------------------------------------------------------------
# Passwords
# ---------------------------------------------------------------------------

def _password_bytes(password: str) -> bytes:
    return password.encode("utf-8")[:BCRYPT_MAX_BYTES]


def hash_password(password: str) -> str:
    salt = _bcrypt.gensalt(rounds=BCRYPT_ROUNDS)
    return _bcrypt.hashpw(_password_bytes(password), salt).decode("utf-8")


def verify_password(plain_password: str, hashed_password: str) -> bool:
    return _bcrypt.checkpw(_password_bytes(plain_password), hashed_password.encode("utf-8"))


# ---------------------------------------------------------------------------
# Session JWTs
# ---------------------------------------------------------------------------

def _issue(user_id: str, token_type: str, lifetime: timedelta, jti: str) -> str:
    issued_at = datetime.now(UTC)
    claims: dict[str, Any] = {
        "sub": user_id,
        "jti": jti,
        "type": token_type,
        "iat": issued_at,
        "exp": issued_at + lifetime,
    }
    return jwt.encode(claims, settings.JWT_SECRET_KEY, algorithm=settings.JWT_ALGORITHM)


def create_access_token(user_id: str, jti: str | None = None) -> str:
    lifetime = timedelta(minutes=settings.JWT_ACCESS_TOKEN_EXPIRE_MINUTES)
    return _issue(user_id, ACCESS_TOKEN_TYPE, lifetime, jti or str(uuid.uuid4()))


def create_refresh_token(user_id: str) -> tuple[str, str]:
    """Return ``(token, jti)``; the caller records the jti in Redis."""
    jti = str(uuid.uuid4())
    lifetime = timedelta(days=settings.JWT_REFRESH_TOKEN_EXPIRE_DAYS)
    return _issue(user_id, REFRESH_TOKEN_TYPE, lifetime, jti), jti


def decode_token(token: str, expected_type: str | None = None) -> dict[str, Any]:
    """
    Verify signature and expiry, and optionally the ``type`` claim.

    Raises:
        JWTError: on any validation failure.
    """
    claims = jwt.decode(token, settings.JWT_SECRET_KEY, algorithms=[settings.JWT_ALGORITHM])
    if expected_type is not None and claims.get("type") != expected_type:
        raise JWTError(f"Expected a {expected_type} token")
    return claims


def decode_access_token(token: str) -> dict[str, Any]:
    return decode_token(token, ACCESS_TOKEN_TYPE)


def decode_refresh_token(token: str) -> dict[str, Any]:
    return decode_token(token, REFRESH_TOKEN_TYPE)


# ---------------------------------------------------------------------------
# Redis keys for session state
# ---------------------------------------------------------------------------

def refresh_token_redis_key(user_id: str, jti: str) -> str:
    return f"eventdesk:refresh:{user_id}:{jti}"


def blacklist_redis_key(jti: str) -> str:
    return f"eventdesk:revoked:{jti}"


# ---------------------------------------------------------------------------
# Invitations
# ---------------------------------------------------------------------------

def create_invitation_token() -> str:
    """Opaque hex token, two characters per random byte."""
    return secrets.token_hex(INVITATION_TOKEN_BYTES)
