"""
Auth persistence helpers.
"""

from __future__ import annotations

from core.db import Database


def normalize_email(email: str) -> str:
    return (email or "").strip().lower()


async def get_admin_by_id(db: Database, admin_id: int) -> dict | None:
    return await db.fetch_one(
        """
        SELECT id, email, role
        FROM admin_users
        WHERE id = $1
          AND role = $2
        """,
        admin_id,
        "admin",
    )


async def get_admin_by_email(db: Database, email: str) -> dict | None:
    return await db.fetch_one(
        """
        SELECT id, email, password, role
        FROM admin_users
        WHERE lower(email) = lower($1)
        """,
        normalize_email(email),
    )


async def get_active_user_by_id(db: Database, user_id: int) -> dict | None:
    return await db.fetch_one(
        """
        SELECT id, email, role, display_name
        FROM users
        WHERE id = $1
          AND is_active = TRUE
        """,
        user_id,
    )


async def get_user_by_email(db: Database, email: str) -> dict | None:
    return await db.fetch_one(
        """
        SELECT id, email, password_hash, role, display_name, profile_picture, is_active
        FROM users
        WHERE lower(email) = lower($1)
        """,
        normalize_email(email),
    )


async def create_user(db: Database, *, email: str, password_hash: str) -> dict:
    row = await db.fetch_one(
        """
        INSERT INTO users (email, password_hash, role, is_active)
        VALUES ($1, $2, 'user', TRUE)
        RETURNING id, email, role, display_name, profile_picture, is_active
        """,
        normalize_email(email),
        password_hash,
    )
    if row is None:
        raise RuntimeError("Failed to create user.")
    return row


async def get_user_password_hash(db: Database, user_id: int) -> str | None:
    return await db.fetch_value(
        """
        SELECT password_hash
        FROM users
        WHERE id = $1
        """,
        user_id,
    )


async def update_display_name(db: Database, user_id: int, display_name: str) -> None:
    await db.execute(
        """
        UPDATE users
        SET display_name = $1
        WHERE id = $2
        """,
        display_name,
        user_id,
    )


async def update_password_hash(db: Database, user_id: int, password_hash: str) -> None:
    await db.execute(
        """
        UPDATE users
        SET password_hash = $1
        WHERE id = $2
        """,
        password_hash,
        user_id,
    )


async def update_profile_picture(db: Database, user_id: int, image_path: str) -> None:
    await db.execute(
        """
        UPDATE users
        SET profile_picture = $1
        WHERE id = $2
        """,
        image_path,
        user_id,
    )
