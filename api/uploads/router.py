"""
Image upload API endpoints.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, File, Form, Query, Request, UploadFile
from fastapi.responses import FileResponse

from auth.dependencies import require_admin
from catalog import cache
from core import config
from core.db import Database, get_database
from core.errors import BadRequest, NotFound

from . import storage

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/images")
files_router = APIRouter(prefix="/api/uploads")


async def upload_access(request: Request, db: Database = Depends(get_database)) -> dict | None:
    """
    Gate for the image routes. Open unless UPLOADS_REQUIRE_ADMIN is set.
    """
    if not config.uploads_require_admin():
        return None
    return await require_admin(request, db)


@router.post("")
async def upload_image(
    file: UploadFile | None = File(default=None),
    category: str = Form(default=""),
    admin: dict | None = Depends(upload_access),
) -> dict:
    if file is None or not file.filename:
        raise BadRequest("No file provided")

    data = await file.read()
    try:
        stored = storage.save_file(config.uploads_dir(), data, file.filename, category)
    except storage.UploadError as exc:
        raise BadRequest(str(exc)) from exc

    if admin is None:
        logger.warning("unauthenticated_image_upload path=%s", stored.path)
    return {"filename": stored.filename, "path": stored.path}


@router.delete("")
async def delete_image(
    path: str = Query(default=""),
    _: dict | None = Depends(upload_access),
) -> dict:
    if not path.strip():
        raise BadRequest("No file path provided")

    try:
        deleted = storage.delete_file(config.uploads_dir(), path)
    except storage.UploadError as exc:
        raise BadRequest(str(exc)) from exc

    if not deleted:
        raise NotFound("File not found")
    return {"success": True}


@files_router.get("/{file_path:path}")
async def serve_upload(file_path: str) -> FileResponse:
    """
    Serve a stored image, e.g. `/api/uploads/products/<uuid>.png`.
    """
    try:
        target = storage.resolve_stored_path(config.uploads_dir(), file_path)
    except storage.UploadError as exc:
        raise NotFound("File not found") from exc

    if not target.is_file():
        raise NotFound("File not found")
    return FileResponse(
        target,
        media_type=storage.content_type_for(target),
        headers=cache.static_cache_headers(),
    )
