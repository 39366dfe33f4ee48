"""
Session cookie helpers.

`admin_token` carries admin sessions, `token` carries storefront user sessions.
"""

from __future__ import annotations

from collections.abc import Mapping

from fastapi import Response

from core import config

from .security import ADMIN_AUDIENCE, USER_AUDIENCE, session_max_age_s

ADMIN_COOKIE = "admin_token"
USER_COOKIE = "token"

_COOKIE_BY_AUDIENCE = {
    ADMIN_AUDIENCE: ADMIN_COOKIE,
    USER_AUDIENCE: USER_COOKIE,
}


def cookie_name_for(audience: str) -> str:
    try:
        return _COOKIE_BY_AUDIENCE[audience]
    except KeyError:
        raise ValueError(f"Unknown audience: {audience!r}") from None


def extract_token(cookies: Mapping[str, str], name: str) -> str | None:
    if not isinstance(cookies, Mapping):
        raise TypeError(f"Expected a cookie mapping, got {type(cookies).__name__}.")
    value = (cookies.get(name) or "").strip()
    return value or None


def set_session_cookie(response: Response, name: str, token: str) -> None:
    response.set_cookie(
        key=name,
        value=token,
        max_age=session_max_age_s(),
        path="/",
        secure=config.is_production(),
        httponly=True,
        samesite="lax",
    )


def clear_session_cookie(response: Response, name: str) -> None:
    response.set_cookie(
        key=name,
        value="",
        max_age=0,
        path="/",
        secure=config.is_production(),
        httponly=True,
        samesite="lax",
    )
