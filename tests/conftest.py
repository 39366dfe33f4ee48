from __future__ import annotations

from contextlib import asynccontextmanager
from pathlib import Path
from typing import Any, Callable

import pytest
from fastapi.testclient import TestClient

from auth import security


def normalize_sql(sql: str) -> str:
    return " ".join(sql.split())


class FakeDatabase:
    """
    Stand-in for core.db.Database.

    Answers come from `on(fragment, result)` rules matched against the
    whitespace-normalized SQL, latest rule first. `result` may be a value,
    a callable taking the bound arguments, or an exception to raise.
    Every statement is recorded in `queries` as (sql, args).
    """

    def __init__(self) -> None:
        self.queries: list[tuple[str, tuple[Any, ...]]] = []
        self.rules: list[tuple[str, Any]] = []
        self.transactions = 0
        self.connected = False

    def on(self, fragment: str, result: Any) -> None:
        self.rules.insert(0, (normalize_sql(fragment), result))

    def _answer(self, sql: str, args: tuple[Any, ...]) -> Any:
        normalized = normalize_sql(sql)
        self.queries.append((normalized, args))
        for fragment, result in self.rules:
            if fragment in normalized:
                if isinstance(result, BaseException):
                    raise result
                if callable(result):
                    return result(*args)
                return result
        return None

    def queries_matching(self, fragment: str) -> list[tuple[str, tuple[Any, ...]]]:
        fragment = normalize_sql(fragment)
        return [q for q in self.queries if fragment in q[0]]

    async def connect(self) -> None:
        self.connected = True

    async def close(self) -> None:
        self.connected = False

    async def fetch_one(self, sql: str, *args: Any) -> dict | None:
        return self._answer(sql, args)

    async def fetch_all(self, sql: str, *args: Any) -> list[dict]:
        return self._answer(sql, args) or []

    async def fetch_value(self, sql: str, *args: Any) -> Any:
        return self._answer(sql, args)

    async def execute(self, sql: str, *args: Any) -> str:
        return self._answer(sql, args) or "OK"

    @asynccontextmanager
    async def transaction(self):
        self.transactions += 1
        yield _FakeConnection(self)


class _FakeConnection:
    def __init__(self, db: FakeDatabase) -> None:
        self._db = db

    async def fetchrow(self, sql: str, *args: Any) -> dict | None:
        return await self._db.fetch_one(sql, *args)

    async def fetch(self, sql: str, *args: Any) -> list[dict]:
        return await self._db.fetch_all(sql, *args)

    async def fetchval(self, sql: str, *args: Any) -> Any:
        return await self._db.fetch_value(sql, *args)

    async def execute(self, sql: str, *args: Any) -> str:
        return await self._db.execute(sql, *args)


@pytest.fixture(autouse=True)
def _env(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.setenv("JWT_SECRET", "test-secret")
    monkeypatch.setenv("UPLOADS_DIR", str(tmp_path / "uploads"))
    monkeypatch.delenv("APP_ENV", raising=False)
    monkeypatch.delenv("NODE_ENV", raising=False)
    monkeypatch.delenv("UPLOADS_REQUIRE_ADMIN", raising=False)


@pytest.fixture
def fake_db() -> FakeDatabase:
    return FakeDatabase()


@pytest.fixture
def client(fake_db: FakeDatabase):
    from main import create_app

    app = create_app(database=fake_db)
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def make_token() -> Callable[..., str]:
    def _make(principal_id: int = 1, *, audience: str = "admin", role: str | None = None) -> str:
        return security.build_session_token(
            principal_id=principal_id,
            email=f"{audience}{principal_id}@beyou.test",
            role=role or audience,
            audience=audience,
        )

    return _make


@pytest.fixture
def admin_client(client: TestClient, fake_db: FakeDatabase, make_token) -> TestClient:
    """Client carrying a valid admin session for admin id 1."""
    fake_db.on(
        "FROM admin_users WHERE id = $1 AND role = $2",
        lambda admin_id, role: {"id": admin_id, "email": "admin@beyou.test", "role": role} if admin_id == 1 else None,
    )
    client.cookies.set("admin_token", make_token(1, audience="admin"))
    return client
