"""
Storefront product business logic.
"""

from __future__ import annotations

import logging
import math

from core.db import Database
from core.errors import BadRequest, NotFound

from . import repository, schemas
from .products import to_product

logger = logging.getLogger(__name__)

MAX_PAGE_SIZE = 100


async def list_products(
    db: Database,
    filters: repository.ProductFilters,
    *,
    page: int,
    page_size: int,
) -> dict:
    page = max(1, page)
    page_size = max(1, min(page_size, MAX_PAGE_SIZE))

    total = await repository.count_products(db, filters)
    rows = await repository.list_products(
        db,
        filters,
        limit=page_size,
        offset=(page - 1) * page_size,
    )
    return {
        "products": [to_product(row) for row in rows],
        "total": total,
        "page": page,
        "pageSize": page_size,
        "totalPages": math.ceil(total / page_size) if total else 0,
    }


async def best_sellers(db: Database) -> list[dict]:
    return [to_product(row) for row in await repository.list_best_sellers(db)]


async def get_product(db: Database, product_id: int) -> dict:
    row = await repository.get_product(db, product_id)
    if row is None:
        raise NotFound("Product not found")
    return to_product(row)


async def record_sale(db: Database, payload: schemas.RecordSaleRequest, *, admin_id: int) -> dict:
    if payload.productId is None or payload.quantitySold is None or payload.quantitySold < 1:
        raise BadRequest("Invalid input: Product ID and quantity sold are required.")

    try:
        sale = await repository.record_sale(
            db,
            product_id=payload.productId,
            quantity=payload.quantitySold,
        )
    except repository.InsufficientStock as exc:
        logger.info(
            "sale_rejected product_id=%s requested=%s available=%s",
            payload.productId,
            payload.quantitySold,
            exc.available,
        )
        raise BadRequest("Insufficient stock") from exc

    if sale is None:
        raise NotFound("Product not found")

    logger.info(
        "sale_recorded sale_id=%s product_id=%s quantity=%s admin_id=%s",
        sale["id"],
        payload.productId,
        payload.quantitySold,
        admin_id,
    )
    return {
        "message": "Sale recorded and stock updated successfully",
        "sale": {
            "id": sale["id"],
            "productId": sale["product_id"],
            "quantity": sale["quantity_sold"],
            "amount": float(sale["total_amount"]),
            "date": sale["sale_date"],
        },
    }


# Request field -> products column.
_FIELD_COLUMNS = {
    "name": "name",
    "category": "category",
    "subCategory": "subcategory",
    "description": "description",
    "price": "price",
    "stockQuantity": "stock_quantity",
    "isBestSeller": "is_best_seller",
}


def _columns(payload: schemas.ProductCreateRequest | schemas.ProductUpdateRequest, *, partial: bool) -> dict:
    data = payload.model_dump(exclude_unset=partial, exclude_none=partial)
    return {column: data[field] for field, column in _FIELD_COLUMNS.items() if field in data}


def _image_paths(paths: list[str]) -> list[str]:
    return [p.strip() for p in paths if p and p.strip()]


async def create_product(db: Database, payload: schemas.ProductCreateRequest, *, admin_id: int) -> dict:
    product_id = await repository.create_product(
        db,
        _columns(payload, partial=False),
        image_paths=_image_paths(payload.imagePaths),
    )
    logger.info("product_created product_id=%s admin_id=%s", product_id, admin_id)
    return {
        "message": f'Product "{payload.name}" (ID: {product_id}) has been successfully added.',
        "product": await get_product(db, product_id),
    }


async def update_product(
    db: Database,
    product_id: int,
    payload: schemas.ProductCreateRequest | schemas.ProductUpdateRequest,
    *,
    admin_id: int,
    partial: bool,
) -> None:
    """
    Apply a full (PUT) or partial (PATCH) update. Raises `NotFound` for an
    unknown product and `BadRequest` when a partial update changes nothing.
    """
    fields = _columns(payload, partial=partial)
    image_paths = _image_paths(payload.imagePaths)
    primary_image = getattr(payload, "primaryImagePath", None)
    if not fields and not image_paths and not primary_image:
        raise BadRequest("No fields to update")

    updated = await repository.update_product(
        db,
        product_id,
        fields,
        image_paths=image_paths,
        primary_image=primary_image,
    )
    if not updated:
        raise NotFound("Product not found")
    logger.info("product_updated product_id=%s admin_id=%s columns=%s", product_id, admin_id, ",".join(fields))


async def delete_product(db: Database, product_id: int, *, admin_id: int) -> dict:
    try:
        deleted = await repository.delete_product(db, product_id)
    except repository.ProductHasSales as exc:
        raise BadRequest("Cannot delete a product with recorded sales") from exc

    if not deleted:
        raise NotFound("Product not found")
    logger.info("product_deleted product_id=%s admin_id=%s", product_id, admin_id)
    return {"success": True}


async def update_stock(db: Database, payload: schemas.RecordSaleRequest, *, admin_id: int) -> dict:
    """
    Deduct sold units from stock and record the sale; reports the stock
    before and after.
    """
    if payload.productId is None or payload.quantitySold is None or payload.quantitySold < 1:
        raise BadRequest("Invalid input: Product ID and quantity sold are required.")

    try:
        sale = await repository.record_sale(db, product_id=payload.productId, quantity=payload.quantitySold)
    except repository.InsufficientStock as exc:
        raise BadRequest(
            f"Insufficient stock. Available: {exc.available}, Requested: {payload.quantitySold}"
        ) from exc

    if sale is None:
        raise NotFound("Product not found")

    logger.info(
        "stock_updated product_id=%s deducted=%s admin_id=%s",
        payload.productId,
        payload.quantitySold,
        admin_id,
    )
    return {
        "success": True,
        "message": "Stock updated and sale recorded successfully",
        "productId": sale["product_id"],
        "productName": sale["product_name"],
        "originalStock": sale["stock_before"],
        "deducted": payload.quantitySold,
        "newStock": sale["stock_before"] - payload.quantitySold,
        "saleId": sale["id"],
        "saleAmount": float(sale["total_amount"]),
    }
