"""
Async database access helpers (raw SQL) using asyncpg.

`Database` owns the connection pool. `main.create_app` builds one per
process, connects it on startup and closes it on shutdown; route handlers
receive it through the `get_database` dependency.

SQL parameter style:
- asyncpg uses positional placeholders: $1, $2, $3, ...
- values are always passed as arguments, never formatted into the SQL text.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Any

import asyncpg
from fastapi import Request

logger = logging.getLogger(__name__)


class DatabaseError(RuntimeError):
    pass


# Pool/transport failures are separable from failed statements.
class DatabaseConnectionError(DatabaseError):
    pass


class QueryError(DatabaseError):
    pass


_CONNECTION_ERRORS: tuple[type[BaseException], ...] = (
    OSError,
    asyncio.TimeoutError,
    asyncpg.InterfaceError,
    asyncpg.exceptions.PostgresConnectionError,
    asyncpg.exceptions.CannotConnectNowError,
    asyncpg.exceptions.TooManyConnectionsError,
)


def _translate(exc: BaseException) -> DatabaseError | None:
    if isinstance(exc, DatabaseError):
        return None
    if isinstance(exc, _CONNECTION_ERRORS):
        return DatabaseConnectionError(f"Database connection failed: {exc}")
    if isinstance(exc, asyncpg.PostgresError):
        return QueryError(f"Database query failed: {exc}")
    return None


def _record_to_dict(record: asyncpg.Record) -> dict[str, Any]:
    return dict(record)


class Database:
    def __init__(
        self,
        dsn: str,
        *,
        min_size: int = 1,
        max_size: int = 10,
        command_timeout: float = 30,
    ) -> None:
        self._dsn = dsn
        self._min_size = min_size
        self._max_size = max_size
        self._command_timeout = command_timeout
        self._pool: asyncpg.Pool | None = None

    async def connect(self) -> None:
        if self._pool is not None:
            return None
        try:
            self._pool = await asyncpg.create_pool(
                dsn=self._dsn,
                min_size=self._min_size,
                max_size=self._max_size,
                command_timeout=self._command_timeout,
            )
        except Exception as exc:
            translated = _translate(exc)
            if translated is None:
                raise
            raise translated from exc
        logger.info("db_pool_ready min_size=%s max_size=%s", self._min_size, self._max_size)

    async def close(self) -> None:
        if self._pool is None:
            return None
        await self._pool.close()
        self._pool = None
        logger.info("db_pool_closed")

    @property
    def pool(self) -> asyncpg.Pool:
        if self._pool is None:
            raise RuntimeError("DB pool is not initialized. Call connect() on startup.")
        return self._pool

    @asynccontextmanager
    async def connection(self) -> AsyncIterator[asyncpg.Connection]:
        """
        Acquire a pooled connection for the duration of the block.

        The connection goes back to the pool on every exit path. Driver errors
        raised inside the block come out as `DatabaseConnectionError` or
        `QueryError`.
        """
        try:
            async with self.pool.acquire() as conn:
                yield conn
        except Exception as exc:
            translated = _translate(exc)
            if translated is None:
                raise
            logger.debug("db_error kind=%s detail=%s", type(exc).__name__, exc)
            raise translated from exc

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator[asyncpg.Connection]:
        """
        Like `connection()`, wrapped in a transaction that commits when the
        block exits cleanly and rolls back otherwise.
        """
        async with self.connection() as conn:
            async with conn.transaction():
                yield conn

    async def fetch_one(self, sql: str, *args: Any) -> dict[str, Any] | None:
        """
        Run a query and return a single row as a dict (or None).
        """
        async with self.connection() as conn:
            row = await conn.fetchrow(sql, *args)
        return _record_to_dict(row) if row is not None else None

    async def fetch_all(self, sql: str, *args: Any) -> list[dict[str, Any]]:
        """
        Run a query and return all rows as a list of dicts.
        """
        async with self.connection() as conn:
            rows = await conn.fetch(sql, *args)
        return [_record_to_dict(r) for r in rows]

    async def fetch_value(self, sql: str, *args: Any) -> Any:
        async with self.connection() as conn:
            return await conn.fetchval(sql, *args)

    async def execute(self, sql: str, *args: Any) -> str:
        """
        Run a statement (INSERT/UPDATE/DELETE/DDL). Returns the command tag.
        """
        async with self.connection() as conn:
            return await conn.execute(sql, *args)


def get_database(request: Request) -> Database:
    return request.app.state.db
