"""
Environment-backed settings.

Values are read at call time so tests can change the environment without
re-importing modules.
"""

from __future__ import annotations

import os
from pathlib import Path
from urllib.parse import parse_qsl, quote, urlencode, urlsplit, urlunsplit


def env_str(name: str, default: str = "") -> str:
    return os.environ.get(name, "").strip() or default


def env_int(name: str, default: int) -> int:
    raw = os.environ.get(name, "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def env_bool(name: str, default: bool = False) -> bool:
    raw = os.environ.get(name, "").strip().lower()
    if not raw:
        return default
    return raw in {"1", "true", "yes", "on"}


def _sanitize_database_url(url: str) -> str:
    parts = urlsplit(url)
    if not parts.query:
        return url

    params = [(k, v) for (k, v) in parse_qsl(parts.query, keep_blank_values=True) if k != "sslmode"]
    query = urlencode(params)
    return urlunsplit((parts.scheme, parts.netloc, parts.path, query, parts.fragment))


def database_url() -> str:
    url = env_str("DATABASE_URL")
    if url:
        return _sanitize_database_url(url)

    # MYSQL_* names are read when the DB_* ones are unset.
    host = env_str("DB_HOST") or env_str("MYSQL_HOST", "localhost")
    port = env_int("DB_PORT", env_int("MYSQL_PORT", 5432))
    user = quote(env_str("DB_USER") or env_str("MYSQL_USER", "postgres"), safe="")
    password = quote(os.environ.get("DB_PASSWORD") or os.environ.get("MYSQL_PASSWORD", ""), safe="")
    name = env_str("DB_NAME") or env_str("MYSQL_DATABASE", "beyou_db")
    credentials = f"{user}:{password}" if password else user
    return f"postgresql://{credentials}@{host}:{port}/{name}"


def db_pool_min_size() -> int:
    return max(1, env_int("DB_POOL_MIN_SIZE", 1))


def db_pool_max_size() -> int:
    return max(db_pool_min_size(), env_int("DB_POOL_MAX_SIZE", 10))


def db_command_timeout() -> int:
    return env_int("DB_COMMAND_TIMEOUT", 30)


def is_production() -> bool:
    env = env_str("APP_ENV") or env_str("NODE_ENV", "development")
    return env.lower() == "production"


def site_url() -> str:
    url = env_str("SITE_URL") or env_str("NEXT_PUBLIC_SITE_URL", "http://localhost:3000")
    return url.rstrip("/")


def uploads_dir() -> Path:
    return Path(env_str("UPLOADS_DIR", os.path.join("public", "uploads"))).resolve()


def uploads_require_admin() -> bool:
    return env_bool("UPLOADS_REQUIRE_ADMIN", False)


def log_level() -> str:
    return env_str("LOG_LEVEL", "INFO").upper()
