"""
API error types and their JSON responses.

Every error body has the same shape: {"error": "<message>"}.
Database and unexpected failures are logged with detail server-side and
reported to the client with a generic message.
"""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from .db import DatabaseError

logger = logging.getLogger(__name__)

INTERNAL_ERROR_MESSAGE = "Internal Server Error"


class ApiError(Exception):
    status_code = 500
    default_message = INTERNAL_ERROR_MESSAGE

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


# Every failed authentication check looks the same to the client.
class Unauthenticated(ApiError):
    status_code = 401
    default_message = "Unauthorized"

    def __init__(self) -> None:
        super().__init__(self.default_message)


class InvalidCredentials(ApiError):
    status_code = 401
    default_message = "Invalid email or password"


class BadRequest(ApiError):
    status_code = 400
    default_message = "Bad request."


class NotFound(ApiError):
    status_code = 404
    default_message = "Not found."


def error_response(status_code: int, message: str, headers: dict[str, str] | None = None) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message}, headers=headers)


async def _handle_api_error(_: Request, exc: ApiError) -> JSONResponse:
    return error_response(exc.status_code, exc.message)


async def _handle_database_error(request: Request, exc: DatabaseError) -> JSONResponse:
    logger.error(
        "db_failure method=%s path=%s kind=%s detail=%s",
        request.method,
        request.url.path,
        type(exc).__name__,
        exc,
    )
    return error_response(500, INTERNAL_ERROR_MESSAGE)


async def _handle_validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
    logger.debug("invalid_request path=%s errors=%s", request.url.path, exc.errors())
    return error_response(400, "Invalid request.")


async def _handle_http_exception(_: Request, exc: StarletteHTTPException) -> JSONResponse:
    return error_response(exc.status_code, str(exc.detail), headers=getattr(exc, "headers", None))


async def _handle_unexpected(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("unhandled_error method=%s path=%s", request.method, request.url.path)
    return error_response(500, INTERNAL_ERROR_MESSAGE)


def install_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(ApiError, _handle_api_error)
    app.add_exception_handler(DatabaseError, _handle_database_error)
    app.add_exception_handler(RequestValidationError, _handle_validation_error)
    app.add_exception_handler(StarletteHTTPException, _handle_http_exception)
    app.add_exception_handler(Exception, _handle_unexpected)
