"""
Auth business logic.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping

from core import config
from core.db import Database
from core.errors import BadRequest, InvalidCredentials
from uploads import storage

from . import cookies, repository, schemas, security

logger = logging.getLogger(__name__)


def _to_admin_response(admin_row: dict) -> schemas.AdminResponse:
    return schemas.AdminResponse(
        id=int(admin_row["id"]),
        email=str(admin_row["email"]),
        role=str(admin_row.get("role") or "admin"),
    )


def _to_user_response(user_row: dict) -> schemas.UserResponse:
    return schemas.UserResponse(
        id=int(user_row["id"]),
        email=str(user_row["email"]),
        role=str(user_row.get("role") or "user"),
        displayName=user_row.get("display_name"),
        photoURL=user_row.get("profile_picture"),
    )


async def _lookup_principal(db: Database, audience: str, principal_id: int) -> dict | None:
    if audience == security.ADMIN_AUDIENCE:
        return await repository.get_admin_by_id(db, principal_id)
    return await repository.get_active_user_by_id(db, principal_id)


async def verify_session(cookie_jar: Mapping[str, str], audience: str, db: Database) -> dict | None:
    """
    Resolve the principal behind the audience's session cookie.

    Returns None when the cookie is missing, the token does not verify, the
    token was minted for another audience, or the principal no longer exists
    (or, for users, is inactive). The database is only consulted once the
    token itself checks out.
    """
    token = cookies.extract_token(cookie_jar, cookies.cookie_name_for(audience))
    if token is None:
        logger.debug("session_rejected audience=%s reason=missing_cookie", audience)
        return None

    try:
        claims = security.decode_session_token(token)
    except security.AuthSecurityError:
        logger.debug("session_rejected audience=%s reason=bad_token", audience)
        return None

    token_type = str(claims.get("type") or "").strip().lower()
    if token_type != audience:
        logger.debug("session_rejected audience=%s reason=wrong_type type=%s", audience, token_type)
        return None

    subject = str(claims.get("sub") or "").strip()
    if not (subject.isascii() and subject.isdecimal()):
        logger.debug("session_rejected audience=%s reason=bad_subject", audience)
        return None

    principal = await _lookup_principal(db, audience, int(subject))
    if principal is None:
        logger.debug("session_rejected audience=%s reason=unknown_principal id=%s", audience, subject)
        return None
    return principal


async def login_admin(db: Database, payload: schemas.LoginRequest) -> tuple[str, schemas.AdminResponse]:
    admin_row = await repository.get_admin_by_email(db, payload.email)
    if admin_row is None or not security.verify_password(payload.password, str(admin_row.get("password") or "")):
        logger.info("admin_login_failed email=%s", repository.normalize_email(payload.email))
        raise InvalidCredentials()

    if str(admin_row.get("role") or "") != "admin":
        logger.info("admin_login_failed email=%s reason=role", admin_row["email"])
        raise InvalidCredentials()

    token = security.build_session_token(
        principal_id=int(admin_row["id"]),
        email=str(admin_row["email"]),
        role="admin",
        audience=security.ADMIN_AUDIENCE,
    )
    logger.info("admin_login id=%s", admin_row["id"])
    return token, _to_admin_response(admin_row)


async def signup(db: Database, payload: schemas.SignupRequest) -> schemas.UserResponse:
    existing = await repository.get_user_by_email(db, payload.email)
    if existing is not None:
        raise BadRequest("An account with this email already exists.")

    password_hash = security.hash_password(payload.password)
    user_row = await repository.create_user(db, email=payload.email, password_hash=password_hash)
    logger.info("user_signup id=%s", user_row["id"])
    return _to_user_response(user_row)


async def signin(db: Database, payload: schemas.LoginRequest) -> tuple[str, schemas.UserResponse]:
    user_row = await repository.get_user_by_email(db, payload.email)
    if user_row is None or not bool(user_row.get("is_active", False)):
        raise InvalidCredentials()

    if not security.verify_password(payload.password, str(user_row.get("password_hash") or "")):
        raise InvalidCredentials()

    token = security.build_session_token(
        principal_id=int(user_row["id"]),
        email=str(user_row["email"]),
        role=str(user_row.get("role") or "user"),
        audience=security.USER_AUDIENCE,
    )
    return token, _to_user_response(user_row)


async def update_display_name(db: Database, user: dict, payload: schemas.DisplayNameRequest) -> dict[str, bool]:
    display_name = (payload.displayName or "").strip()
    if not display_name:
        raise BadRequest("Display name is required")

    await repository.update_display_name(db, int(user["id"]), display_name)
    return {"success": True}


async def change_password(db: Database, user: dict, payload: schemas.PasswordChangeRequest) -> dict[str, bool]:
    if not payload.currentPassword or not payload.newPassword:
        raise BadRequest("Both current and new passwords are required")
    if len(payload.newPassword) < 8:
        raise BadRequest("New password must be at least 8 characters")

    current_hash = await repository.get_user_password_hash(db, int(user["id"]))
    if not security.verify_password(payload.currentPassword, str(current_hash or "")):
        raise BadRequest("Current password is incorrect")

    await repository.update_password_hash(db, int(user["id"]), security.hash_password(payload.newPassword))
    logger.info("password_changed user_id=%s", user["id"])
    return {"success": True}


async def update_profile_picture(db: Database, user: dict, filename: str, data: bytes) -> dict:
    try:
        stored = storage.save_file(config.uploads_dir(), data, filename, "profiles")
    except storage.UploadError as exc:
        raise BadRequest(str(exc)) from exc

    await repository.update_profile_picture(db, int(user["id"]), stored.path)
    logger.info("profile_picture_updated user_id=%s path=%s", user["id"], stored.path)
    return {"success": True, "imageUrl": stored.path}
