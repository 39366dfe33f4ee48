from __future__ import annotations

import asyncio
import time

import jwt
import pytest

from auth import cookies, security, service

ADMIN_ROUTES = [
    "/api/admin/products",
    "/api/admin/products/low-stock",
    "/api/admin/products/stock",
    "/api/admin/sales/overview",
    "/api/admin/sales/recent",
    "/api/admin/dashboard",
]


# ---------- token extraction ----------


def test_extract_token_returns_value_or_none():
    assert cookies.extract_token({"admin_token": " abc "}, "admin_token") == "abc"
    assert cookies.extract_token({"admin_token": ""}, "admin_token") is None
    assert cookies.extract_token({}, "token") is None


def test_extract_token_rejects_non_mapping():
    with pytest.raises(TypeError):
        cookies.extract_token("admin_token=abc", "admin_token")  # type: ignore[arg-type]


def test_cookie_name_for_audience():
    assert cookies.cookie_name_for("admin") == "admin_token"
    assert cookies.cookie_name_for("user") == "token"
    with pytest.raises(ValueError):
        cookies.cookie_name_for("guest")


# ---------- session verification ----------


@pytest.mark.parametrize("path", ADMIN_ROUTES)
def test_admin_routes_without_cookie_are_401_and_touch_no_database(client, fake_db, path):
    res = client.get(path)

    assert res.status_code == 401
    assert res.json() == {"error": "Unauthorized"}
    assert fake_db.queries == []


@pytest.mark.parametrize("path", ADMIN_ROUTES)
def test_admin_routes_reject_user_tokens(client, fake_db, make_token, path):
    # Signature is valid, but the token was minted for the storefront.
    client.cookies.set("admin_token", make_token(1, audience="user"))

    res = client.get(path)

    assert res.status_code == 401
    assert res.json() == {"error": "Unauthorized"}
    assert fake_db.queries == []


def test_admin_route_rejects_token_for_deleted_admin(client, fake_db, make_token):
    fake_db.on("FROM admin_users", None)
    client.cookies.set("admin_token", make_token(42, audience="admin"))

    res = client.get("/api/admin/products/low-stock")

    assert res.status_code == 401
    assert res.json() == {"error": "Unauthorized"}
    lookups = fake_db.queries_matching("FROM admin_users WHERE id = $1 AND role = $2")
    assert [args for _, args in lookups] == [(42, "admin")]
    assert fake_db.queries_matching("FROM products") == []


def test_admin_route_rejects_expired_token(client, fake_db):
    now = int(time.time())
    expired = jwt.encode(
        {"sub": "1", "email": "a@b.c", "role": "admin", "type": "admin", "iat": now - 7200, "exp": now - 3600},
        "test-secret",
        algorithm="HS256",
    )
    client.cookies.set("admin_token", expired)

    res = client.get("/api/admin/products")

    assert res.status_code == 401
    assert fake_db.queries == []


def test_admin_route_rejects_token_signed_with_other_secret(client, fake_db):
    forged = jwt.encode(
        {"sub": "1", "email": "a@b.c", "role": "admin", "type": "admin", "exp": int(time.time()) + 60},
        "not-the-secret",
        algorithm="HS256",
    )
    client.cookies.set("admin_token", forged)

    assert client.get("/api/admin/products").status_code == 401
    assert fake_db.queries == []


def test_verify_session_reverifies_on_every_call(fake_db, make_token):
    fake_db.on("FROM admin_users", {"id": 1, "email": "admin@beyou.test", "role": "admin"})
    jar = {"admin_token": make_token(1, audience="admin")}

    async def run() -> None:
        first = await service.verify_session(jar, "admin", fake_db)
        second = await service.verify_session(jar, "admin", fake_db)
        assert first == second == {"id": 1, "email": "admin@beyou.test", "role": "admin"}

    asyncio.run(run())
    assert len(fake_db.queries) == 2


def test_verify_session_rejects_non_numeric_subject(fake_db):
    token = jwt.encode(
        {"sub": "admin-001", "type": "admin", "exp": int(time.time()) + 60},
        "test-secret",
        algorithm="HS256",
    )
    result = asyncio.run(service.verify_session({"admin_token": token}, "admin", fake_db))

    assert result is None
    assert fake_db.queries == []


def test_token_without_expiry_is_rejected(client, fake_db):
    endless = jwt.encode({"sub": "1", "type": "admin"}, "test-secret", algorithm="HS256")
    client.cookies.set("admin_token", endless)

    res = client.get("/api/auth/verify")

    assert res.status_code == 401
    assert fake_db.queries == []


def test_verify_session_rejects_non_ascii_digit_subject(fake_db):
    token = jwt.encode(
        {"sub": "\u00b2", "type": "admin", "exp": int(time.time()) + 60},
        "test-secret",
        algorithm="HS256",
    )
    result = asyncio.run(service.verify_session({"admin_token": token}, "admin", fake_db))

    assert result is None
    assert fake_db.queries == []


def test_user_session_requires_active_user(fake_db, make_token):
    fake_db.on("FROM users WHERE id = $1 AND is_active = TRUE", None)
    jar = {"token": make_token(7, audience="user")}

    assert asyncio.run(service.verify_session(jar, "user", fake_db)) is None
    assert fake_db.queries_matching("is_active = TRUE")[0][1] == (7,)


# ---------- login / logout ----------


def test_admin_login_sets_cookie_and_verify_accepts_it(client, fake_db):
    password_hash = security.hash_password("admin123")
    fake_db.on(
        "FROM admin_users WHERE lower(email) = lower($1)",
        lambda email: {"id": 1, "email": email, "password": password_hash, "role": "admin"},
    )
    fake_db.on("FROM admin_users WHERE id = $1 AND role = $2", {"id": 1, "email": "admin@beyou.com", "role": "admin"})

    res = client.post("/api/auth/login", json={"email": "Admin@BeYou.com", "password": "admin123"})

    assert res.status_code == 200, res.text
    body = res.json()
    assert body["user"] == {"id": 1, "email": "admin@beyou.com", "role": "admin"}
    set_cookie = res.headers["set-cookie"]
    assert set_cookie.startswith("admin_token=")
    assert "HttpOnly" in set_cookie
    assert "samesite=lax" in set_cookie.lower()

    claims = security.decode_session_token(body["token"])
    assert claims["type"] == "admin"
    assert claims["sub"] == "1"

    verify = client.get("/api/auth/verify")
    assert verify.status_code == 200
    assert verify.json()["valid"] is True


def test_admin_login_with_wrong_password(client, fake_db):
    password_hash = security.hash_password("admin123")
    fake_db.on(
        "FROM admin_users WHERE lower(email) = lower($1)",
        {"id": 1, "email": "admin@beyou.com", "password": password_hash, "role": "admin"},
    )

    res = client.post("/api/auth/login", json={"email": "admin@beyou.com", "password": "nope"})

    assert res.status_code == 401
    assert res.json() == {"error": "Invalid email or password"}
    assert "set-cookie" not in res.headers


def test_logout_is_idempotent(client):
    for _ in range(2):
        res = client.post("/api/auth/logout")

        assert res.status_code == 200
        set_cookies = res.headers.get_list("set-cookie")
        for name in ("admin_token", "token"):
            header = next(h for h in set_cookies if h.startswith(f"{name}="))
            assert "Max-Age=0" in header
            assert "Path=/" in header

    assert client.cookies.get("admin_token") is None


def test_logout_clears_existing_session(client, fake_db):
    password_hash = security.hash_password("admin123")
    fake_db.on(
        "FROM admin_users WHERE lower(email) = lower($1)",
        {"id": 1, "email": "admin@beyou.com", "password": password_hash, "role": "admin"},
    )
    fake_db.on("FROM admin_users WHERE id = $1 AND role = $2", {"id": 1, "email": "admin@beyou.com", "role": "admin"})
    client.post("/api/auth/login", json={"email": "admin@beyou.com", "password": "admin123"})
    assert client.get("/api/admin/products/stock").status_code == 200

    assert client.post("/api/auth/logout").status_code == 200

    assert client.get("/api/admin/products/stock").status_code == 401


def test_cookies_are_secure_in_production(client, monkeypatch):
    monkeypatch.setenv("APP_ENV", "production")

    res = client.post("/api/auth/logout")

    assert all("Secure" in h for h in res.headers.get_list("set-cookie"))


def test_cookies_are_secure_with_node_env(client, monkeypatch):
    monkeypatch.setenv("NODE_ENV", "production")

    res = client.post("/api/auth/logout")

    assert all("Secure" in h for h in res.headers.get_list("set-cookie"))


def test_signup_and_signin(client, fake_db):
    stored: dict = {}

    def create(email, password_hash):
        stored.update(id=5, email=email, password_hash=password_hash, role="user",
                      display_name=None, profile_picture=None, is_active=True)
        return dict(stored)

    fake_db.on("FROM users WHERE lower(email) = lower($1)", lambda email: dict(stored) if stored else None)
    fake_db.on("INSERT INTO users", create)

    res = client.post("/api/auth/signup", json={"email": "New@Shop.com", "password": "password123"})
    assert res.status_code == 201, res.text
    assert res.json()["email"] == "new@shop.com"

    again = client.post("/api/auth/signup", json={"email": "new@shop.com", "password": "password123"})
    assert again.status_code == 400

    signin = client.post("/api/auth/signin", json={"email": "new@shop.com", "password": "password123"})
    assert signin.status_code == 200
    assert signin.headers["set-cookie"].startswith("token=")


# ---------- profile ----------


@pytest.fixture
def user_client(client, fake_db, make_token):
    fake_db.on(
        "FROM users WHERE id = $1 AND is_active = TRUE",
        lambda user_id: {"id": user_id, "email": "u@beyou.test", "role": "user", "display_name": None},
    )
    client.cookies.set("token", make_token(7, audience="user"))
    return client


def test_display_name_requires_session(client, fake_db):
    res = client.put("/api/auth/profile/displayName", json={"displayName": "Ayesha"})

    assert res.status_code == 401
    assert fake_db.queries == []


def test_display_name_rejects_admin_token(client, fake_db, make_token):
    client.cookies.set("token", make_token(1, audience="admin"))

    res = client.put("/api/auth/profile/displayName", json={"displayName": "Ayesha"})

    assert res.status_code == 401


def test_display_name_missing_field(user_client, fake_db):
    res = user_client.put("/api/auth/profile/displayName", json={})

    assert res.status_code == 400
    assert res.json() == {"error": "Display name is required"}
    assert fake_db.queries_matching("UPDATE users") == []


def test_display_name_update(user_client, fake_db):
    res = user_client.put("/api/auth/profile/displayName", json={"displayName": "  Ayesha "})

    assert res.status_code == 200
    assert res.json() == {"success": True}
    updates = fake_db.queries_matching("UPDATE users SET display_name = $1 WHERE id = $2")
    assert [args for _, args in updates] == [("Ayesha", 7)]


def test_password_change(user_client, fake_db):
    fake_db.on("SELECT password_hash FROM users", security.hash_password("old-password"))

    wrong = user_client.put(
        "/api/auth/profile/password",
        json={"currentPassword": "bad-password", "newPassword": "new-password"},
    )
    assert wrong.status_code == 400
    assert wrong.json() == {"error": "Current password is incorrect"}

    ok = user_client.put(
        "/api/auth/profile/password",
        json={"currentPassword": "old-password", "newPassword": "new-password"},
    )
    assert ok.status_code == 200
    (_, args), = fake_db.queries_matching("UPDATE users SET password_hash")
    assert security.verify_password("new-password", args[0])
    assert args[1] == 7


def test_password_change_requires_both_fields(user_client):
    res = user_client.put("/api/auth/profile/password", json={"currentPassword": "x"})

    assert res.status_code == 400


def test_profile_picture_update(user_client, fake_db, tmp_path):
    res = user_client.put(
        "/api/auth/profile/picture",
        files={"image": ("me.JPG", b"jpeg-bytes", "image/jpeg")},
    )

    assert res.status_code == 200, res.text
    body = res.json()
    assert body["success"] is True
    assert body["imageUrl"].startswith("uploads/profiles/")
    assert body["imageUrl"].endswith(".jpg")
    stored = tmp_path / "uploads" / "profiles" / body["imageUrl"].rsplit("/", 1)[1]
    assert stored.read_bytes() == b"jpeg-bytes"
    (_, args), = fake_db.queries_matching("UPDATE users SET profile_picture = $1 WHERE id = $2")
    assert args == (body["imageUrl"], 7)


def test_profile_picture_requires_image(user_client, fake_db):
    res = user_client.put("/api/auth/profile/picture", data={"other": "x"})

    assert res.status_code == 400
    assert res.json() == {"error": "Image is required"}
    assert fake_db.queries_matching("UPDATE users") == []


def test_profile_picture_requires_session(client, fake_db):
    res = client.put("/api/auth/profile/picture", files={"image": ("me.png", b"x", "image/png")})

    assert res.status_code == 401
    assert fake_db.queries == []
