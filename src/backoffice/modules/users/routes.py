"""User management API routes.

Every route except ``/me`` requires the matching ``user:*`` permission.
"""

from typing import Annotated, Any
from uuid import UUID

from fastapi import Depends, status

from backoffice.api.dependencies import Pagination
from backoffice.core.auth.dependencies import CurrentUser
from backoffice.core.permissions.dependencies import require_permissions
from backoffice.core.responses import PaginatedResponse, SuccessResponse
from backoffice.core.responses import Pagination as PageInfo
from backoffice.modules.users import router
from backoffice.modules.users.schemas import (
    UserCreate,
    UserPasswordUpdate,
    UserResponse,
    UserUpdate,
)
from backoffice.modules.users.services import UserSvc


UserViewer = Annotated[Any, Depends(require_permissions("user:view"))]
UserCreator = Annotated[Any, Depends(require_permissions("user:create"))]
UserEditor = Annotated[Any, Depends(require_permissions("user:update"))]
UserRemover = Annotated[Any, Depends(require_permissions("user:delete"))]


@router.get(
    "/me",
    response_model=SuccessResponse[UserResponse],
    summary="Get own profile",
)
async def get_me(current_user: CurrentUser) -> SuccessResponse[UserResponse]:
    return SuccessResponse(data=UserResponse.model_validate(current_user))


@router.get(
    "",
    response_model=PaginatedResponse[UserResponse],
    summary="List users",
    description="Get a paginated list of users.",
)
async def list_users(
    service: UserSvc,
    pagination: Pagination,
    current_user: UserViewer,  # noqa: ARG001
) -> PaginatedResponse[UserResponse]:
    """List users with pagination."""
    users, total = await service.list_users(pagination.offset, pagination.page_size)
    return PaginatedResponse(
        results=len(users),
        data=[UserResponse.model_validate(u) for u in users],
        pagination=PageInfo.build(total, pagination.page, pagination.page_size),
    )


@router.post(
    "",
    response_model=SuccessResponse[UserResponse],
    status_code=status.HTTP_201_CREATED,
    summary="Create user",
)
async def create_user(
    data: UserCreate,
    service: UserSvc,
    current_user: UserCreator,  # noqa: ARG001
) -> SuccessResponse[UserResponse]:
    user = await service.create_user(data)
    return SuccessResponse(data=UserResponse.model_validate(user))


@router.get(
    "/{user_id}",
    response_model=SuccessResponse[UserResponse],
    summary="Get user",
)
async def get_user(
    user_id: UUID,
    service: UserSvc,
    current_user: UserViewer,  # noqa: ARG001
) -> SuccessResponse[UserResponse]:
    user = await service.get_user(user_id)
    return SuccessResponse(data=UserResponse.model_validate(user))


@router.put(
    "/{user_id}",
    response_model=SuccessResponse[UserResponse],
    summary="Update user",
    description="Update profile fields, activation flag and role assignments.",
)
async def update_user(
    user_id: UUID,
    data: UserUpdate,
    service: UserSvc,
    current_user: UserEditor,  # noqa: ARG001
) -> SuccessResponse[UserResponse]:
    user = await service.update_user(user_id, data)
    return SuccessResponse(data=UserResponse.model_validate(user))


@router.put(
    "/{user_id}/password",
    response_model=SuccessResponse[None],
    summary="Reset user password",
)
async def update_user_password(
    user_id: UUID,
    data: UserPasswordUpdate,
    service: UserSvc,
    current_user: UserEditor,  # noqa: ARG001
) -> SuccessResponse[None]:
    await service.update_password(user_id, data.password)
    return SuccessResponse(data=None, message="Password updated")


@router.delete(
    "/{user_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete user",
)
async def delete_user(
    user_id: UUID,
    service: UserSvc,
    current_user: UserRemover,  # noqa: ARG001
) -> None:
    await service.delete_user(user_id)
