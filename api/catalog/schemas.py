"""
Pydantic schemas for storefront and inventory endpoints.
"""

from __future__ import annotations

from decimal import Decimal

from pydantic import BaseModel, Field

MAX_IMAGES_PER_REQUEST = 20


class RecordSaleRequest(BaseModel):
    productId: int | None = None
    quantitySold: int | None = None


class ProductCreateRequest(BaseModel):
    """
    Full product body. `imagePaths` are paths returned by `POST /api/images`;
    the first one becomes the primary image of a new product.
    """

    name: str = Field(..., min_length=1, max_length=255)
    category: str = Field(..., min_length=1, max_length=100)
    subCategory: str | None = Field(default=None, max_length=100)
    description: str | None = Field(default=None, max_length=5000)
    price: Decimal = Field(..., ge=0, max_digits=10, decimal_places=2)
    stockQuantity: int = Field(0, ge=0)
    isBestSeller: bool = False
    imagePaths: list[str] = Field(default_factory=list, max_length=MAX_IMAGES_PER_REQUEST)


class ProductUpdateRequest(BaseModel):
    name: str | None = Field(default=None, min_length=1, max_length=255)
    category: str | None = Field(default=None, min_length=1, max_length=100)
    subCategory: str | None = Field(default=None, max_length=100)
    description: str | None = Field(default=None, max_length=5000)
    price: Decimal | None = Field(default=None, ge=0, max_digits=10, decimal_places=2)
    stockQuantity: int | None = Field(default=None, ge=0)
    isBestSeller: bool | None = None
    # Added as non-primary images unless named in primaryImagePath.
    imagePaths: list[str] = Field(default_factory=list, max_length=MAX_IMAGES_PER_REQUEST)
    primaryImagePath: str | None = Field(default=None, max_length=500)
