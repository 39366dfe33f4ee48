"""
Image file storage on local disk.

Files live under `<UPLOADS_DIR>/<category>/<uuid><ext>` and are referred to
by the relative path `uploads/<category>/<uuid><ext>`.
"""

from __future__ import annotations

import logging
import os
import uuid
from dataclasses import dataclass
from pathlib import Path, PurePosixPath

logger = logging.getLogger(__name__)

VALID_CATEGORIES = ("products", "banners", "categories", "profiles")
PUBLIC_PREFIX = "uploads"
MAX_EXTENSION_LENGTH = 10

CONTENT_TYPES = {
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".png": "image/png",
    ".gif": "image/gif",
    ".webp": "image/webp",
    ".svg": "image/svg+xml",
}


class UploadError(ValueError):
    pass


@dataclass(frozen=True)
class StoredFile:
    filename: str
    path: str


def ensure_upload_dirs(root: Path) -> None:
    for category in VALID_CATEGORIES:
        (root / category).mkdir(parents=True, exist_ok=True)


def _safe_extension(original_name: str) -> str:
    ext = os.path.splitext(os.path.basename(original_name or ""))[1].lower()
    if len(ext) > MAX_EXTENSION_LENGTH or not ext[1:].isalnum():
        return ""
    return ext


def save_file(root: Path, data: bytes, original_name: str, category: str) -> StoredFile:
    if category not in VALID_CATEGORIES:
        raise UploadError("Invalid upload directory")

    ensure_upload_dirs(root)
    filename = f"{uuid.uuid4()}{_safe_extension(original_name)}"
    (root / category / filename).write_bytes(data)

    relative = PurePosixPath(PUBLIC_PREFIX, category, filename)
    logger.info("image_saved path=%s size_bytes=%s", relative, len(data))
    return StoredFile(filename=filename, path=str(relative))


def resolve_stored_path(root: Path, image_path: str) -> Path:
    """
    Map `uploads/<category>/<file>` (or `<category>/<file>`) back to a file
    under `root`.

    Raises `UploadError` for unknown categories, for anything that is not a
    single file inside a category, and for anything that would land outside
    `root`.
    """
    raw = (image_path or "").strip().lstrip("/")
    parts = PurePosixPath(raw).parts
    if parts and parts[0] == PUBLIC_PREFIX:
        parts = parts[1:]
    if len(parts) != 2 or parts[0] not in VALID_CATEGORIES:
        raise UploadError("Invalid file path")

    root = root.resolve()
    category_dir = root / parts[0]
    candidate = root.joinpath(*parts).resolve()
    if category_dir not in candidate.parents:
        raise UploadError("Invalid file path")
    return candidate


def content_type_for(path: Path) -> str:
    return CONTENT_TYPES.get(path.suffix.lower(), "application/octet-stream")


def delete_file(root: Path, image_path: str) -> bool:
    """
    Delete a stored image. Returns False when the file does not exist.
    """
    target = resolve_stored_path(root, image_path)
    try:
        target.unlink()
    except FileNotFoundError:
        return False
    except IsADirectoryError as exc:
        raise UploadError("Invalid file path") from exc
    logger.info("image_deleted path=%s", image_path)
    return True
