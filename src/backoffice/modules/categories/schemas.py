"""Pydantic schemas for category operations."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from backoffice.core.constants import MAX_CATEGORY_NAME_LENGTH, MAX_SLUG_LENGTH


class CategoryCreate(BaseModel):
    """Schema for creating a category. The slug defaults to one built from the name."""

    name: str = Field(..., min_length=1, max_length=MAX_CATEGORY_NAME_LENGTH)
    slug: str | None = Field(None, min_length=1, max_length=MAX_SLUG_LENGTH)
    description: str | None = None
    parent_id: UUID | None = None
    is_active: bool = True
    position: int = Field(0, ge=0)


class CategoryUpdate(BaseModel):
    """Partial update. Sending ``parent_id: null`` moves the category to the root."""

    name: str | None = Field(None, min_length=1, max_length=MAX_CATEGORY_NAME_LENGTH)
    slug: str | None = Field(None, min_length=1, max_length=MAX_SLUG_LENGTH)
    description: str | None = None
    parent_id: UUID | None = None
    is_active: bool | None = None
    position: int | None = Field(None, ge=0)


class CategoryResponse(BaseModel):
    id: UUID
    name: str
    slug: str
    description: str | None = None
    parent_id: UUID | None = None
    level: int
    is_active: bool
    position: int
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class CategoryTreeNode(BaseModel):
    id: UUID
    name: str
    slug: str
    level: int
    children: list["CategoryTreeNode"] = Field(default_factory=list)
