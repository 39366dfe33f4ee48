"""
Auth dependencies for protected FastAPI routes.

Each dependency re-verifies the session from scratch on every request.
"""

from __future__ import annotations

from fastapi import Depends, Request

from core.db import Database, get_database
from core.errors import Unauthenticated

from . import security, service


async def _require(request: Request, audience: str, db: Database) -> dict:
    principal = await service.verify_session(request.cookies, audience, db)
    if principal is None:
        raise Unauthenticated()
    return principal


async def require_admin(request: Request, db: Database = Depends(get_database)) -> dict:
    return await _require(request, security.ADMIN_AUDIENCE, db)


async def require_user(request: Request, db: Database = Depends(get_database)) -> dict:
    return await _require(request, security.USER_AUDIENCE, db)
