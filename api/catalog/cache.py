"""
Cache-Control header sets for API responses.
"""

from __future__ import annotations

DEFAULT_REVALIDATE_S = 60
DEFAULT_STALE_S = 300


def cache_headers(*, revalidate_s: int = DEFAULT_REVALIDATE_S, stale_s: int = DEFAULT_STALE_S) -> dict[str, str]:
    value = f"public, s-maxage={revalidate_s}, stale-while-revalidate={stale_s}"
    return {
        "Cache-Control": value,
        "CDN-Cache-Control": value,
    }


# Stored uploads never change: every upload gets a fresh file name.
def static_cache_headers() -> dict[str, str]:
    return {"Cache-Control": "public, max-age=31536000, immutable"}


def no_cache_headers() -> dict[str, str]:
    return {
        "Cache-Control": "no-store, must-revalidate",
        "Pragma": "no-cache",
        "Expires": "0",
    }
