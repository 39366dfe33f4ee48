"""
Admin API endpoints. Every route requires an admin session.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Response

from auth.dependencies import require_admin
from catalog import cache, schemas as catalog_schemas, service as catalog_service
from core.db import Database, get_database

from . import service


def _no_store(response: Response) -> None:
    response.headers.update(cache.no_cache_headers())


router = APIRouter(
    prefix="/api/admin",
    dependencies=[Depends(require_admin), Depends(_no_store)],
)


@router.get("/products")
async def list_products(db: Database = Depends(get_database)) -> list[dict]:
    return await service.products(db)


@router.get("/products/low-stock")
async def low_stock_products(db: Database = Depends(get_database)) -> list[dict]:
    """
    Products with fewer than 10 units, lowest stock first.
    """
    return await service.low_stock(db)


@router.get("/products/stock")
async def stock_levels(db: Database = Depends(get_database)) -> list[dict]:
    return await service.stock_levels(db)


# Declared after the fixed /products/* paths so they match first.
@router.get("/products/{product_id}")
async def get_product(product_id: int, db: Database = Depends(get_database)) -> dict:
    return await catalog_service.get_product(db, product_id)


@router.patch("/products/{product_id}")
async def edit_product(
    product_id: int,
    payload: catalog_schemas.ProductUpdateRequest,
    admin: dict = Depends(require_admin),
    db: Database = Depends(get_database),
) -> dict:
    await catalog_service.update_product(db, product_id, payload, admin_id=int(admin["id"]), partial=True)
    return await catalog_service.get_product(db, product_id)


@router.get("/sales/overview")
async def sales_overview(db: Database = Depends(get_database)) -> list[dict]:
    """
    Daily sales totals for the last 30 days, oldest first.
    """
    return await service.sales_overview(db)


@router.get("/sales/recent")
async def recent_sales(db: Database = Depends(get_database)) -> list[dict]:
    return await service.recent_sales(db)


@router.get("/dashboard")
async def dashboard(db: Database = Depends(get_database)) -> dict:
    return await service.dashboard(db)
