"""Security primitives for local auth (password hashing + JWT)."""

from __future__ import annotations

import hashlib
import hmac
from datetime import UTC, datetime, timedelta
from typing import Any

import jwt
from pwdlib import PasswordHash
from pwdlib.hashers.argon2 import Argon2Hasher

from olw.auth.exceptions import InvalidTokenError, TokenExpiredError
from olw.config.settings import get_settings
from olw.core.schemas import MAX_RECORD_ID


password_hash = PasswordHash((Argon2Hasher(),))
ALGORITHM = "HS256"
_JWT_KEY_PURPOSE = "jwt"


def _derive_secret_key(secret_key: str, purpose: str) -> str:
    """Derive deterministic sub-keys for auth contexts from a shared secret."""
    return hmac.new(secret_key.encode("utf-8"), purpose.encode("utf-8"), hashlib.sha256).hexdigest()


def get_jwt_signing_key() -> str:
    """Return JWT signing key derived from AUTH_SECRET_KEY."""
    secret_key = get_settings().AUTH_SECRET_KEY.get_secret_value()
    return _derive_secret_key(secret_key, _JWT_KEY_PURPOSE)


def create_access_token(user_id: int, expires_delta: timedelta | None = None) -> str:
    """Create a signed bearer token carrying ``{"userId": user_id}``."""
    if expires_delta is None:
        expires_delta = timedelta(minutes=get_settings().ACCESS_TOKEN_EXPIRE_MINUTES)
    now = datetime.now(UTC)
    to_encode = {"userId": user_id, "iat": now, "exp": now + expires_delta}
    return jwt.encode(to_encode, get_jwt_signing_key(), algorithm=ALGORITHM)


def decode_access_token(token: str) -> dict[str, Any]:
    """Verify signature and expiry, returning the payload.

    Raises
    ------
        TokenExpiredError: the token was valid but is past its ``exp``.
        InvalidTokenError: bad signature, malformed token or missing ``userId``.
    """
    try:
        payload = jwt.decode(
            token,
            get_jwt_signing_key(),
            algorithms=[ALGORITHM],
            options={"require": ["exp", "userId"]},
        )
    except jwt.ExpiredSignatureError as e:
        raise TokenExpiredError from e
    except jwt.InvalidTokenError as e:
        raise InvalidTokenError from e

    user_id = payload["userId"]
    if not isinstance(user_id, int) or not 0 < user_id <= MAX_RECORD_ID:
        raise InvalidTokenError
    return payload


def verify_password(plain: str, hashed: str) -> bool:
    """Check a password against its stored hash."""
    return password_hash.verify(plain, hashed)


def verify_and_update_password(plain: str, hashed: str) -> tuple[bool, str | None]:
    """Verify password and return (verified, updated_hash_if_any)."""
    return password_hash.verify_and_update(plain, hashed)


def get_password_hash(password: str) -> str:
    """Hash password for storage."""
    return password_hash.hash(password)
