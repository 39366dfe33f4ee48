"""
Storefront product API endpoints.
"""

from __future__ import annotations

from decimal import Decimal

from fastapi import APIRouter, Depends, Query, Response, status

from auth.dependencies import require_admin
from core.db import Database, get_database

from . import cache, repository, schemas, service

router = APIRouter(prefix="/api/products")


@router.get("")
async def list_products(
    response: Response,
    page: int = Query(1, ge=1),
    pageSize: int = Query(10, ge=1, le=service.MAX_PAGE_SIZE),
    category: str | None = Query(default=None, max_length=100),
    subCategory: str | None = Query(default=None, max_length=100),
    minPrice: Decimal | None = Query(default=None, ge=0),
    maxPrice: Decimal | None = Query(default=None, ge=0),
    isBestSeller: bool | None = None,
    db: Database = Depends(get_database),
) -> dict:
    filters = repository.ProductFilters(
        category=category or None,
        sub_category=subCategory or None,
        min_price=minPrice,
        max_price=maxPrice,
        is_best_seller=isBestSeller,
    )
    result = await service.list_products(db, filters, page=page, page_size=pageSize)
    response.headers.update(cache.cache_headers())
    return result


@router.get("/best-sellers")
async def best_sellers(response: Response, db: Database = Depends(get_database)) -> list[dict]:
    products = await service.best_sellers(db)
    response.headers.update(cache.cache_headers())
    return products


@router.get("/{product_id}")
async def get_product(
    product_id: int,
    response: Response,
    db: Database = Depends(get_database),
) -> dict:
    product = await service.get_product(db, product_id)
    response.headers.update(cache.cache_headers())
    return product


@router.post("/record-sale")
async def record_sale(
    payload: schemas.RecordSaleRequest,
    response: Response,
    admin: dict = Depends(require_admin),
    db: Database = Depends(get_database),
) -> dict:
    result = await service.record_sale(db, payload, admin_id=int(admin["id"]))
    response.headers.update(cache.no_cache_headers())
    return result


@router.post("/update-stock")
async def update_stock(
    payload: schemas.RecordSaleRequest,
    response: Response,
    admin: dict = Depends(require_admin),
    db: Database = Depends(get_database),
) -> dict:
    result = await service.update_stock(db, payload, admin_id=int(admin["id"]))
    response.headers.update(cache.no_cache_headers())
    return result


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_product(
    payload: schemas.ProductCreateRequest,
    response: Response,
    admin: dict = Depends(require_admin),
    db: Database = Depends(get_database),
) -> dict:
    result = await service.create_product(db, payload, admin_id=int(admin["id"]))
    response.headers.update(cache.no_cache_headers())
    return result


@router.put("/{product_id}")
async def replace_product(
    product_id: int,
    payload: schemas.ProductCreateRequest,
    response: Response,
    admin: dict = Depends(require_admin),
    db: Database = Depends(get_database),
) -> dict:
    await service.update_product(db, product_id, payload, admin_id=int(admin["id"]), partial=False)
    response.headers.update(cache.no_cache_headers())
    return {"success": True}


@router.delete("/{product_id}")
async def delete_product(
    product_id: int,
    response: Response,
    admin: dict = Depends(require_admin),
    db: Database = Depends(get_database),
) -> dict:
    result = await service.delete_product(db, product_id, admin_id=int(admin["id"]))
    response.headers.update(cache.no_cache_headers())
    return result
