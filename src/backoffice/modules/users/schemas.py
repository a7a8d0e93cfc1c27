"""Pydantic schemas for user operations."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, EmailStr, Field

from backoffice.core.constants import (
    MAX_NAME_LENGTH,
    MAX_PASSWORD_LENGTH,
    MAX_USERNAME_LENGTH,
    MIN_PASSWORD_LENGTH,
)
from backoffice.core.permissions.schemas import RoleSummary


class UserBase(BaseModel):
    """Base schema for user data."""

    username: str = Field(..., min_length=3, max_length=MAX_USERNAME_LENGTH)
    email: EmailStr
    first_name: str | None = Field(None, max_length=MAX_NAME_LENGTH)
    last_name: str | None = Field(None, max_length=MAX_NAME_LENGTH)


class UserCreate(UserBase):
    """Schema for an admin creating a user."""

    password: str = Field(..., min_length=MIN_PASSWORD_LENGTH, max_length=MAX_PASSWORD_LENGTH)
    is_active: bool = True
    role_ids: list[UUID] = Field(default_factory=list)


class UserUpdate(BaseModel):
    """Schema for updating user data.

    Omitted fields are left unchanged. ``role_ids``, when present,
    replaces the user's role assignments.
    """

    username: str | None = Field(None, min_length=3, max_length=MAX_USERNAME_LENGTH)
    email: EmailStr | None = None
    first_name: str | None = Field(None, max_length=MAX_NAME_LENGTH)
    last_name: str | None = Field(None, max_length=MAX_NAME_LENGTH)
    is_active: bool | None = None
    role_ids: list[UUID] | None = None


class UserPasswordUpdate(BaseModel):
    """Schema for an admin resetting a user's password."""

    password: str = Field(..., min_length=MIN_PASSWORD_LENGTH, max_length=MAX_PASSWORD_LENGTH)


class UserResponse(UserBase):
    """Schema for user response data. The password hash is never included."""

    id: UUID
    is_active: bool
    last_login: datetime | None = None
    default_wishlist_id: UUID | None = None
    roles: list[RoleSummary] = Field(default_factory=list)
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)
