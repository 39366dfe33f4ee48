"""
Admin dashboard business logic: row shaping for the admin endpoints.
"""

from __future__ import annotations

from decimal import Decimal
from typing import Any

from catalog.products import to_product
from core.db import Database

from . import repository


def _money(value: Any) -> float:
    if value is None:
        return 0.0
    if isinstance(value, Decimal):
        return float(value)
    return float(value)


async def products(db: Database) -> list[dict]:
    return [to_product(row) for row in await repository.list_products(db)]


async def low_stock(db: Database) -> list[dict]:
    return [
        {
            "id": int(row["id"]),
            "name": row["name"],
            "stock_quantity": int(row["stock_quantity"]),
            "category": row["category"],
        }
        for row in await repository.low_stock_products(db)
    ]


async def stock_levels(db: Database) -> list[dict]:
    return [
        {"name": row["name"], "stock_quantity": int(row["stock_quantity"])}
        for row in await repository.stock_levels(db)
    ]


async def sales_overview(db: Database) -> list[dict]:
    return [
        {"date": row["date"], "total": _money(row["total"])}
        for row in await repository.daily_sales_totals(db)
    ]


async def recent_sales(db: Database) -> list[dict]:
    return [
        {
            "id": row["id"],
            "productName": row["product_name"],
            "quantity": int(row["quantity_sold"]),
            "amount": _money(row["total_amount"]),
            "date": row["sale_date"],
        }
        for row in await repository.recent_sales(db)
    ]


async def dashboard(db: Database) -> dict:
    product_list = await products(db)
    recent_row = await repository.most_recent_product(db)
    summary = await repository.todays_sales_summary(db)
    return {
        "products": product_list,
        "totalProducts": len(product_list),
        "zeroQuantityProducts": [p for p in product_list if p["stockQuantity"] == 0],
        "recentProduct": to_product(recent_row) if recent_row is not None else None,
        "ordersToday": int(summary.get("orders_today") or 0),
        "salesTodayAmount": _money(summary.get("sales_today_amount")),
    }
