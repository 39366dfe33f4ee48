"""
Product row shaping shared by the storefront and admin endpoints.
"""

from __future__ import annotations

from datetime import datetime, timezone
from decimal import Decimal
from typing import Any

DEFAULT_PRIMARY_IMAGE_URL = "https://placehold.co/400x300.png"

# Columns every product query selects; image columns come from product_images.
PRODUCT_SELECT = """
    SELECT p.id, p.name, p.category, p.subcategory, p.description, p.price,
           p.stock_quantity, p.is_best_seller, p.created_at, p.updated_at,
           COALESCE(
               array_agg(pi.image_path ORDER BY pi.id) FILTER (WHERE pi.image_path IS NOT NULL),
               '{}'
           ) AS image_paths,
           (
               SELECT image_path
               FROM product_images
               WHERE product_id = p.id
                 AND is_primary = TRUE
               LIMIT 1
           ) AS primary_image
    FROM products p
    LEFT JOIN product_images pi ON pi.product_id = p.id
"""


def _number(value: Any) -> float:
    if value is None:
        return 0
    if isinstance(value, Decimal):
        return float(value)
    try:
        return float(value)
    except (TypeError, ValueError):
        return 0


def _iso(value: Any) -> str:
    if isinstance(value, datetime):
        return value.isoformat()
    return datetime.now(timezone.utc).isoformat()


def to_product(row: dict) -> dict:
    image_paths = row.get("image_paths") or []
    return {
        "id": int(row["id"]),
        "name": row.get("name") or "Unnamed Product",
        "category": row.get("category") or "Other",
        "subCategory": row.get("subcategory") or "Miscellaneous",
        "description": row.get("description") or "No description available.",
        "price": _number(row.get("price")),
        "primaryImageUrl": row.get("primary_image") or DEFAULT_PRIMARY_IMAGE_URL,
        "imageUrls": [str(p) for p in image_paths if p],
        "stockQuantity": int(_number(row.get("stock_quantity"))),
        "isBestSeller": bool(row.get("is_best_seller")),
        "createdAt": _iso(row.get("created_at")),
        "updatedAt": _iso(row.get("updated_at")),
    }
