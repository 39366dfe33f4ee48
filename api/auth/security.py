"""
Auth security helpers: password hashing and signed session tokens.
"""

from __future__ import annotations

import time
from typing import Any

import bcrypt
import jwt

from core import config

ADMIN_AUDIENCE = "admin"
USER_AUDIENCE = "user"
AUDIENCES = (ADMIN_AUDIENCE, USER_AUDIENCE)


class AuthSecurityError(RuntimeError):
    pass


def jwt_secret() -> str:
    # Local default keeps development simple.
    # In production, set JWT_SECRET in environment.
    return config.env_str("JWT_SECRET", "dev-change-this-secret")


def jwt_algorithm() -> str:
    return config.env_str("JWT_ALG", "HS256")


def session_expire_hours() -> int:
    return config.env_int("SESSION_TOKEN_EXPIRE_HOURS", 24)


def session_max_age_s() -> int:
    return session_expire_hours() * 60 * 60


def now_epoch_s() -> int:
    return int(time.time())


def hash_password(plain_password: str) -> str:
    password = (plain_password or "").encode("utf-8")
    if not password:
        raise AuthSecurityError("Password is empty.")
    return bcrypt.hashpw(password, bcrypt.gensalt()).decode("utf-8")


def verify_password(plain_password: str, password_hash: str) -> bool:
    password = (plain_password or "").encode("utf-8")
    hashed = (password_hash or "").encode("utf-8")
    if not password or not hashed:
        return False
    try:
        return bcrypt.checkpw(password, hashed)
    except ValueError:
        return False


def build_session_token(*, principal_id: int, email: str, role: str, audience: str) -> str:
    if audience not in AUDIENCES:
        raise AuthSecurityError(f"Unknown token audience: {audience!r}.")

    issued_at = now_epoch_s()
    payload = {
        "sub": str(principal_id),
        "email": email,
        "role": role,
        "type": audience,
        "iat": issued_at,
        "exp": issued_at + session_max_age_s(),
    }
    return jwt.encode(payload, jwt_secret(), algorithm=jwt_algorithm())


def decode_session_token(token: str) -> dict[str, Any]:
    """
    Verify signature and expiry; return the claims.

    Tokens without `exp`, `sub` or `type` are rejected.
    """
    raw = (token or "").strip()
    if not raw:
        raise AuthSecurityError("Session token is empty.")

    try:
        return jwt.decode(
            raw,
            jwt_secret(),
            algorithms=[jwt_algorithm()],
            options={"require": ["exp", "sub", "type"]},
        )
    except jwt.InvalidTokenError as exc:
        raise AuthSecurityError("Invalid session token.") from exc
