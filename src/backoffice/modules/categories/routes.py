"""Category API routes.

Browsing active categories is public. Inactive categories are only
visible to principals holding ``category:view``; changes go through
``category:create|update|delete``.
"""

from typing import Annotated, Any
from uuid import UUID

from fastapi import Depends, Query, status

from backoffice.api.dependencies import DBSession, Pagination
from backoffice.core.auth.dependencies import PrincipalId
from backoffice.core.permissions import PermissionChecker
from backoffice.core.permissions.dependencies import require_permissions
from backoffice.core.responses import ListResponse, PaginatedResponse, SuccessResponse
from backoffice.core.responses import Pagination as PageInfo
from backoffice.modules.categories import router
from backoffice.modules.categories.schemas import (
    CategoryCreate,
    CategoryResponse,
    CategoryTreeNode,
    CategoryUpdate,
)
from backoffice.modules.categories.services import CategorySvc
from backoffice.modules.products.schemas import ProductResponse
from backoffice.modules.products.services import ProductSvc


CategoryCreator = Annotated[Any, Depends(require_permissions("category:create"))]
CategoryEditor = Annotated[Any, Depends(require_permissions("category:update"))]
CategoryRemover = Annotated[Any, Depends(require_permissions("category:delete"))]


async def _holds(db: DBSession, principal_id: UUID | None, permission: str) -> bool:
    if principal_id is None:
        return False
    return await PermissionChecker(db).has_any_permission(principal_id, {permission})


@router.get(
    "",
    response_model=PaginatedResponse[CategoryResponse],
    summary="List categories",
)
async def list_categories(
    service: CategorySvc,
    pagination: Pagination,
    db: DBSession,
    principal_id: PrincipalId,
    parent_id: UUID | None = Query(None, description="Only direct children of this category"),
    roots_only: bool = Query(False, description="Only top-level categories"),
) -> PaginatedResponse[CategoryResponse]:
    categories, total = await service.list_categories(
        pagination.offset,
        pagination.page_size,
        include_inactive=await _holds(db, principal_id, "category:view"),
        parent_id=parent_id,
        roots_only=roots_only,
    )
    return PaginatedResponse(
        results=len(categories),
        data=[CategoryResponse.model_validate(c) for c in categories],
        pagination=PageInfo.build(total, pagination.page, pagination.page_size),
    )


@router.get(
    "/tree",
    response_model=ListResponse[CategoryTreeNode],
    summary="Category tree",
)
async def get_category_tree(
    service: CategorySvc,
    db: DBSession,
    principal_id: PrincipalId,
) -> ListResponse[CategoryTreeNode]:
    tree = await service.get_tree(
        include_inactive=await _holds(db, principal_id, "category:view"),
    )
    return ListResponse(results=len(tree), data=tree)


@router.get(
    "/{category_id}",
    response_model=SuccessResponse[CategoryResponse],
    summary="Get category",
)
async def get_category(
    category_id: UUID,
    service: CategorySvc,
    db: DBSession,
    principal_id: PrincipalId,
) -> SuccessResponse[CategoryResponse]:
    category = await service.get_category(
        category_id,
        include_inactive=await _holds(db, principal_id, "category:view"),
    )
    return SuccessResponse(data=CategoryResponse.model_validate(category))


@router.get(
    "/{category_id}/products",
    response_model=PaginatedResponse[ProductResponse],
    summary="List products in a category",
)
async def list_category_products(
    category_id: UUID,
    service: CategorySvc,
    products: ProductSvc,
    pagination: Pagination,
    db: DBSession,
    principal_id: PrincipalId,
) -> PaginatedResponse[ProductResponse]:
    await service.get_category(
        category_id,
        include_inactive=await _holds(db, principal_id, "category:view"),
    )
    items, total = await products.list_products(
        pagination.offset,
        pagination.page_size,
        include_unpublished=await _holds(db, principal_id, "product:view"),
        category_id=category_id,
    )
    return PaginatedResponse(
        results=len(items),
        data=[ProductResponse.model_validate(p) for p in items],
        pagination=PageInfo.build(total, pagination.page, pagination.page_size),
    )


@router.post(
    "",
    response_model=SuccessResponse[CategoryResponse],
    status_code=status.HTTP_201_CREATED,
    summary="Create category",
)
async def create_category(
    data: CategoryCreate,
    service: CategorySvc,
    current_user: CategoryCreator,  # noqa: ARG001
) -> SuccessResponse[CategoryResponse]:
    category = await service.create_category(data)
    return SuccessResponse(data=CategoryResponse.model_validate(category))


@router.patch(
    "/{category_id}",
    response_model=SuccessResponse[CategoryResponse],
    summary="Update category",
)
async def update_category(
    category_id: UUID,
    data: CategoryUpdate,
    service: CategorySvc,
    current_user: CategoryEditor,  # noqa: ARG001
) -> SuccessResponse[CategoryResponse]:
    category = await service.update_category(category_id, data)
    return SuccessResponse(data=CategoryResponse.model_validate(category))


@router.delete(
    "/{category_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete category",
)
async def delete_category(
    category_id: UUID,
    service: CategorySvc,
    current_user: CategoryRemover,  # noqa: ARG001
) -> None:
    await service.delete_category(category_id)
