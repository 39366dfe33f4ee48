"""
Admin dashboard queries (raw SQL).
"""

from __future__ import annotations

from catalog.products import PRODUCT_SELECT
from core.db import Database

LOW_STOCK_THRESHOLD = 10
RECENT_SALES_LIMIT = 10
SALES_OVERVIEW_DAYS = 30


async def list_products(db: Database) -> list[dict]:
    return await db.fetch_all(
        f"""
        {PRODUCT_SELECT}
        GROUP BY p.id
        ORDER BY p.updated_at DESC
        """
    )


async def most_recent_product(db: Database) -> dict | None:
    return await db.fetch_one(
        f"""
        {PRODUCT_SELECT}
        GROUP BY p.id
        ORDER BY p.created_at DESC
        LIMIT 1
        """
    )


async def low_stock_products(db: Database, threshold: int = LOW_STOCK_THRESHOLD) -> list[dict]:
    return await db.fetch_all(
        """
        SELECT id, name, stock_quantity, category
        FROM products
        WHERE stock_quantity < $1
        ORDER BY stock_quantity ASC, id ASC
        """,
        threshold,
    )


async def stock_levels(db: Database) -> list[dict]:
    return await db.fetch_all(
        """
        SELECT name, stock_quantity
        FROM products
        ORDER BY stock_quantity DESC, name ASC
        """
    )


async def daily_sales_totals(db: Database, days: int = SALES_OVERVIEW_DAYS) -> list[dict]:
    return await db.fetch_all(
        """
        SELECT sale_date::date AS date,
               SUM(total_amount) AS total
        FROM sales
        WHERE sale_date >= CURRENT_DATE - make_interval(days => $1)
        GROUP BY sale_date::date
        ORDER BY date
        """,
        days,
    )


async def recent_sales(db: Database, limit: int = RECENT_SALES_LIMIT) -> list[dict]:
    return await db.fetch_all(
        """
        SELECT s.id,
               p.name AS product_name,
               s.quantity_sold,
               s.total_amount,
               s.sale_date
        FROM sales s
        JOIN products p ON p.id = s.product_id
        ORDER BY s.sale_date DESC
        LIMIT $1
        """,
        limit,
    )


async def todays_sales_summary(db: Database) -> dict:
    row = await db.fetch_one(
        """
        SELECT COUNT(*) AS orders_today,
               COALESCE(SUM(total_amount), 0) AS sales_today_amount
        FROM sales
        WHERE sale_date::date = CURRENT_DATE
        """
    )
    return row or {"orders_today": 0, "sales_today_amount": 0}
