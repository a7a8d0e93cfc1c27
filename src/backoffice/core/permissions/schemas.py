"""Pydantic schemas for role management."""

from datetime import datetime
from typing import Annotated
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, StringConstraints

from backoffice.core.constants import MAX_DESCRIPTION_LENGTH, MAX_ROLE_NAME_LENGTH


# "resource:action", lowercase with underscores
PermissionToken = Annotated[str, StringConstraints(pattern=r"^[a-z][a-z_]*:[a-z][a-z_]*$")]


class RoleSummary(BaseModel):
    """Role as embedded in user responses."""

    id: UUID
    name: str

    model_config = ConfigDict(from_attributes=True)


class RoleResponse(RoleSummary):
    description: str | None = None
    permissions: list[str]
    created_at: datetime
    updated_at: datetime


class RoleCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=MAX_ROLE_NAME_LENGTH)
    description: str | None = Field(None, max_length=MAX_DESCRIPTION_LENGTH)
    permissions: list[PermissionToken] = Field(default_factory=list)


class RolePermissionsUpdate(BaseModel):
    description: str | None = Field(None, max_length=MAX_DESCRIPTION_LENGTH)
    permissions: list[PermissionToken]
