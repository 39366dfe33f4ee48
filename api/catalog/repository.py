"""
Storefront product and sale persistence (raw SQL).
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Any

from core.db import Database

from .products import PRODUCT_SELECT

# Writable product columns. Only these names are ever formatted into SQL.
UPDATABLE_COLUMNS = (
    "name",
    "category",
    "subcategory",
    "description",
    "price",
    "stock_quantity",
    "is_best_seller",
)


class InsufficientStock(Exception):
    def __init__(self, available: int) -> None:
        self.available = available
        super().__init__(f"Insufficient stock: {available} available.")


class ProductHasSales(Exception):
    def __init__(self, sales_count: int) -> None:
        self.sales_count = sales_count
        super().__init__(f"Product has {sales_count} recorded sales.")


@dataclass(frozen=True)
class ProductFilters:
    category: str | None = None
    sub_category: str | None = None
    min_price: Decimal | None = None
    max_price: Decimal | None = None
    is_best_seller: bool | None = None


def build_filter_clause(filters: ProductFilters) -> tuple[str, list[Any]]:
    """
    Return a WHERE clause and its arguments.

    Only placeholder numbers are formatted into the SQL; every value travels
    as a bound argument.
    """
    clauses: list[str] = []
    args: list[Any] = []

    def bind(fragment: str, value: Any) -> None:
        args.append(value)
        clauses.append(fragment.format(f"${len(args)}"))

    if filters.category:
        bind("p.category = {}", filters.category)
    if filters.sub_category:
        bind("p.subcategory = {}", filters.sub_category)
    if filters.min_price is not None:
        bind("p.price >= {}", filters.min_price)
    if filters.max_price is not None:
        bind("p.price <= {}", filters.max_price)
    if filters.is_best_seller is not None:
        bind("p.is_best_seller = {}", filters.is_best_seller)

    if not clauses:
        return "", args
    return "WHERE " + " AND ".join(clauses), args


async def count_products(db: Database, filters: ProductFilters) -> int:
    where, args = build_filter_clause(filters)
    total = await db.fetch_value(f"SELECT COUNT(*) FROM products p {where}", *args)
    return int(total or 0)


async def list_products(
    db: Database,
    filters: ProductFilters,
    *,
    limit: int,
    offset: int,
) -> list[dict]:
    where, args = build_filter_clause(filters)
    limit_ph = f"${len(args) + 1}"
    offset_ph = f"${len(args) + 2}"
    return await db.fetch_all(
        f"""
        {PRODUCT_SELECT}
        {where}
        GROUP BY p.id
        ORDER BY p.updated_at DESC, p.id DESC
        LIMIT {limit_ph} OFFSET {offset_ph}
        """,
        *args,
        limit,
        offset,
    )


async def list_best_sellers(db: Database) -> list[dict]:
    return await db.fetch_all(
        f"""
        {PRODUCT_SELECT}
        WHERE p.is_best_seller = TRUE
        GROUP BY p.id
        ORDER BY p.updated_at DESC
        """
    )


async def get_product(db: Database, product_id: int) -> dict | None:
    return await db.fetch_one(
        f"""
        {PRODUCT_SELECT}
        WHERE p.id = $1
        GROUP BY p.id
        """,
        product_id,
    )


async def record_sale(db: Database, *, product_id: int, quantity: int) -> dict | None:
    """
    Deduct stock and insert a sale row in one transaction.

    Returns the inserted sale row plus `product_name` and `stock_before`, or
    None when the product does not exist. Raises `InsufficientStock` (after
    rolling back) when the product has fewer units than requested.
    """
    async with db.transaction() as conn:
        product = await conn.fetchrow(
            """
            SELECT id, name, stock_quantity, price
            FROM products
            WHERE id = $1
            FOR UPDATE
            """,
            product_id,
        )
        if product is None:
            return None

        if int(product["stock_quantity"]) < quantity:
            raise InsufficientStock(int(product["stock_quantity"]))

        await conn.execute(
            """
            UPDATE products
            SET stock_quantity = stock_quantity - $1,
                updated_at = now()
            WHERE id = $2
            """,
            quantity,
            product_id,
        )

        price = Decimal(product["price"] or 0)
        sale = await conn.fetchrow(
            """
            INSERT INTO sales (product_id, quantity_sold, sale_price_per_unit, total_amount, sale_date)
            VALUES ($1, $2, $3, $4, now())
            RETURNING id, product_id, quantity_sold, sale_price_per_unit, total_amount, sale_date
            """,
            product_id,
            quantity,
            price,
            price * quantity,
        )

    result = dict(sale)
    result["product_name"] = product["name"]
    result["stock_before"] = int(product["stock_quantity"])
    return result




def build_update_clause(fields: dict[str, Any], *, start: int = 1) -> tuple[list[str], list[Any]]:
    """
    Return `column = $n` assignments and their arguments, numbered from
    `start`. Unknown columns raise `ValueError`.
    """
    unknown = set(fields) - set(UPDATABLE_COLUMNS)
    if unknown:
        raise ValueError(f"Unknown product columns: {sorted(unknown)}")

    assignments: list[str] = []
    args: list[Any] = []
    for column in UPDATABLE_COLUMNS:
        if column in fields:
            args.append(fields[column])
            assignments.append(f"{column} = ${start + len(args) - 1}")
    return assignments, args


async def _insert_images(conn, product_id: int, image_paths: list[str], *, primary_index: int | None) -> None:
    for index, image_path in enumerate(image_paths):
        await conn.execute(
            """
            INSERT INTO product_images (product_id, image_path, is_primary)
            VALUES ($1, $2, $3)
            """,
            product_id,
            image_path,
            index == primary_index,
        )


async def create_product(db: Database, fields: dict[str, Any], *, image_paths: list[str]) -> int:
    """
    Insert a product and its images in one transaction; return the new id.
    """
    async with db.transaction() as conn:
        product_id = await conn.fetchval(
            """
            INSERT INTO products (
                name, category, subcategory, description, price,
                stock_quantity, is_best_seller, created_at, updated_at
            )
            VALUES ($1, $2, $3, $4, $5, $6, $7, now(), now())
            RETURNING id
            """,
            fields["name"],
            fields["category"],
            fields.get("subcategory"),
            fields.get("description"),
            fields["price"],
            fields.get("stock_quantity", 0),
            fields.get("is_best_seller", False),
        )
        await _insert_images(conn, int(product_id), image_paths, primary_index=0)
    return int(product_id)


async def update_product(
    db: Database,
    product_id: int,
    fields: dict[str, Any],
    *,
    image_paths: list[str] | None = None,
    primary_image: str | None = None,
) -> bool:
    """
    Update columns and images in one transaction.

    New images are added as non-primary; `primary_image` (an existing or
    newly added path) then becomes the only primary image. Returns False when
    the product does not exist.
    """
    assignments, args = build_update_clause(fields)
    assignments.append("updated_at = now()")
    set_clause = ", ".join(assignments)
    id_ph = f"${len(args) + 1}"

    async with db.transaction() as conn:
        updated = await conn.fetchval(
            f"""
            UPDATE products
            SET {set_clause}
            WHERE id = {id_ph}
            RETURNING id
            """,
            *args,
            product_id,
        )
        if updated is None:
            return False

        await _insert_images(conn, product_id, list(image_paths or []), primary_index=None)
        if primary_image:
            await conn.execute(
                """
                UPDATE product_images
                SET is_primary = (image_path = $1)
                WHERE product_id = $2
                """,
                primary_image,
                product_id,
            )
    return True


async def delete_product(db: Database, product_id: int) -> bool:
    """
    Delete a product and its image rows. Returns False when it does not
    exist; raises `ProductHasSales` when sales reference it.
    """
    async with db.transaction() as conn:
        found = await conn.fetchval("SELECT id FROM products WHERE id = $1 FOR UPDATE", product_id)
        if found is None:
            return False

        sales_count = int(await conn.fetchval("SELECT COUNT(*) FROM sales WHERE product_id = $1", product_id) or 0)
        if sales_count:
            raise ProductHasSales(sales_count)

        await conn.execute("DELETE FROM product_images WHERE product_id = $1", product_id)
        await conn.execute("DELETE FROM products WHERE id = $1", product_id)
    return True
