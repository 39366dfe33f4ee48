"""
Auth and profile API endpoints.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, File, Response, UploadFile, status

from core.db import Database, get_database
from core.errors import BadRequest

from . import cookies, schemas, service
from .dependencies import require_admin, require_user

router = APIRouter(prefix="/api/auth")


@router.post("/login")
async def admin_login(
    payload: schemas.LoginRequest,
    response: Response,
    db: Database = Depends(get_database),
) -> dict:
    token, admin = await service.login_admin(db, payload)
    cookies.set_session_cookie(response, cookies.ADMIN_COOKIE, token)
    return {"token": token, "user": admin.model_dump()}


@router.get("/verify")
async def verify(admin: dict = Depends(require_admin)) -> dict:
    return {
        "valid": True,
        "user": {"id": int(admin["id"]), "email": admin["email"], "role": admin["role"]},
    }


@router.post("/signup", status_code=status.HTTP_201_CREATED)
async def signup(
    payload: schemas.SignupRequest,
    db: Database = Depends(get_database),
) -> dict:
    user = await service.signup(db, payload)
    return user.model_dump()


@router.post("/signin")
async def signin(
    payload: schemas.LoginRequest,
    response: Response,
    db: Database = Depends(get_database),
) -> dict:
    token, user = await service.signin(db, payload)
    cookies.set_session_cookie(response, cookies.USER_COOKIE, token)
    return {"user": user.model_dump(), "message": "Successfully logged in"}


@router.post("/logout")
async def logout(response: Response) -> dict:
    # No lookup: clearing an absent cookie is harmless, so this is idempotent.
    cookies.clear_session_cookie(response, cookies.ADMIN_COOKIE)
    cookies.clear_session_cookie(response, cookies.USER_COOKIE)
    return {"message": "Logged out successfully"}


@router.put("/profile/displayName")
async def update_display_name(
    payload: schemas.DisplayNameRequest,
    user: dict = Depends(require_user),
    db: Database = Depends(get_database),
) -> dict:
    return await service.update_display_name(db, user, payload)


@router.put("/profile/password")
async def change_password(
    payload: schemas.PasswordChangeRequest,
    user: dict = Depends(require_user),
    db: Database = Depends(get_database),
) -> dict:
    return await service.change_password(db, user, payload)


@router.put("/profile/picture")
async def update_profile_picture(
    image: UploadFile | None = File(default=None),
    user: dict = Depends(require_user),
    db: Database = Depends(get_database),
) -> dict:
    if image is None or not image.filename:
        raise BadRequest("Image is required")

    data = await image.read()
    return await service.update_profile_picture(db, user, image.filename, data)
