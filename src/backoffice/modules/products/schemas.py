"""Pydantic schemas for product operations."""

from datetime import datetime
from decimal import Decimal
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from backoffice.core.constants import MAX_PRODUCT_NAME_LENGTH, MAX_SKU_LENGTH, MAX_SLUG_LENGTH


class ProductCreate(BaseModel):
    """Schema for creating a product. The slug defaults to one built from the name."""

    name: str = Field(..., min_length=1, max_length=MAX_PRODUCT_NAME_LENGTH)
    slug: str | None = Field(None, min_length=1, max_length=MAX_SLUG_LENGTH)
    sku: str = Field(..., min_length=1, max_length=MAX_SKU_LENGTH)
    description: str | None = None
    price: Decimal = Field(..., ge=0, max_digits=10, decimal_places=2)
    quantity: int = Field(0, ge=0)
    is_published: bool = False
    is_digital: bool = False
    category_id: UUID | None = None


class ProductUpdate(BaseModel):
    """Schema for a partial product update."""

    name: str | None = Field(None, min_length=1, max_length=MAX_PRODUCT_NAME_LENGTH)
    slug: str | None = Field(None, min_length=1, max_length=MAX_SLUG_LENGTH)
    sku: str | None = Field(None, min_length=1, max_length=MAX_SKU_LENGTH)
    description: str | None = None
    price: Decimal | None = Field(None, ge=0, max_digits=10, decimal_places=2)
    quantity: int | None = Field(None, ge=0)
    is_published: bool | None = None
    is_digital: bool | None = None
    category_id: UUID | None = None


class ProductSummary(BaseModel):
    """Compact product data embedded in wishlist items."""

    id: UUID
    name: str
    slug: str
    price: Decimal
    is_published: bool

    model_config = ConfigDict(from_attributes=True)


class ProductResponse(ProductSummary):
    sku: str
    description: str | None = None
    quantity: int
    is_digital: bool
    category_id: UUID | None = None
    created_at: datetime
    updated_at: datetime
