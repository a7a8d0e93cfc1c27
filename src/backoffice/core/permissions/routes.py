"""Role management routes.

Listing needs ``role:view``; changing roles is reserved to superadmins.
"""

from typing import Annotated, Any
from uuid import UUID

from fastapi import APIRouter, Depends, status

from backoffice.api.dependencies import DBSession
from backoffice.core.permissions.dependencies import require_permissions, require_roles
from backoffice.core.permissions.roles import (
    SUPERADMIN,
    create_custom_role,
    list_roles,
    update_role_permissions,
)
from backoffice.core.permissions.schemas import RoleCreate, RolePermissionsUpdate, RoleResponse
from backoffice.core.responses import ListResponse, SuccessResponse


router = APIRouter(prefix="/roles", tags=["roles"])

RoleViewer = Annotated[Any, Depends(require_permissions("role:view"))]
Superadmin = Annotated[Any, Depends(require_roles(SUPERADMIN))]


@router.get(
    "",
    response_model=ListResponse[RoleResponse],
    summary="List roles",
)
async def get_roles(
    db: DBSession,
    current_user: RoleViewer,  # noqa: ARG001
) -> ListResponse[RoleResponse]:
    roles = await list_roles(db)
    return ListResponse(
        results=len(roles),
        data=[RoleResponse.model_validate(role) for role in roles],
    )


@router.post(
    "",
    response_model=SuccessResponse[RoleResponse],
    status_code=status.HTTP_201_CREATED,
    summary="Create custom role",
)
async def create_role(
    data: RoleCreate,
    db: DBSession,
    current_user: Superadmin,  # noqa: ARG001
) -> SuccessResponse[RoleResponse]:
    role = await create_custom_role(db, data.name, data.description, data.permissions)
    return SuccessResponse(data=RoleResponse.model_validate(role))


@router.put(
    "/{role_id}/permissions",
    response_model=SuccessResponse[RoleResponse],
    summary="Replace role permissions",
)
async def replace_role_permissions(
    role_id: UUID,
    data: RolePermissionsUpdate,
    db: DBSession,
    current_user: Superadmin,  # noqa: ARG001
) -> SuccessResponse[RoleResponse]:
    role = await update_role_permissions(db, role_id, data.permissions, data.description)
    return SuccessResponse(data=RoleResponse.model_validate(role))
