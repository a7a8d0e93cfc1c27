"""Pydantic schemas for wishlist operations."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, computed_field

from backoffice.core.constants import MAX_DESCRIPTION_LENGTH, MAX_WISHLIST_NAME_LENGTH
from backoffice.modules.products.schemas import ProductSummary


class WishlistCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=MAX_WISHLIST_NAME_LENGTH)
    description: str | None = Field(None, max_length=MAX_DESCRIPTION_LENGTH)
    is_public: bool = False
    is_default: bool = False


class WishlistUpdate(BaseModel):
    """Schema for a partial wishlist update.

    ``is_default=True`` makes this the owner's default wishlist; a
    default cannot be unset other than by choosing another one.
    """

    name: str | None = Field(None, min_length=1, max_length=MAX_WISHLIST_NAME_LENGTH)
    description: str | None = Field(None, max_length=MAX_DESCRIPTION_LENGTH)
    is_public: bool | None = None
    is_default: bool | None = None


class WishlistItemCreate(BaseModel):
    product_id: UUID
    notes: str | None = None


class WishlistItemNotesUpdate(BaseModel):
    notes: str | None = None


class WishlistItemMove(BaseModel):
    target_wishlist_id: UUID


class WishlistItemResponse(BaseModel):
    id: UUID
    product_id: UUID
    notes: str | None = None
    product: ProductSummary
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class WishlistResponse(BaseModel):
    """Wishlist with its items.

    ``is_default`` is relative to the owner and filled in by the route.
    """

    id: UUID
    customer_id: UUID
    name: str
    description: str | None = None
    is_public: bool
    is_default: bool = False
    items: list[WishlistItemResponse] = Field(default_factory=list)
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def item_count(self) -> int:
        return len(self.items)
