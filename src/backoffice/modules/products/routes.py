"""Product API routes.

Listing and reading published products is public. Unpublished products
are only visible to principals holding ``product:view``.
"""

from typing import Annotated, Any
from uuid import UUID

from fastapi import Depends, Query, status

from backoffice.api.dependencies import DBSession, Pagination
from backoffice.core.auth.dependencies import PrincipalId
from backoffice.core.permissions import PermissionChecker
from backoffice.core.permissions.dependencies import require_permissions
from backoffice.core.responses import PaginatedResponse, SuccessResponse
from backoffice.core.responses import Pagination as PageInfo
from backoffice.modules.products import router
from backoffice.modules.products.schemas import ProductCreate, ProductResponse, ProductUpdate
from backoffice.modules.products.services import ProductSvc


ProductCreator = Annotated[Any, Depends(require_permissions("product:create"))]
ProductEditor = Annotated[Any, Depends(require_permissions("product:update"))]
ProductRemover = Annotated[Any, Depends(require_permissions("product:delete"))]


async def _can_see_unpublished(db: DBSession, principal_id: UUID | None) -> bool:
    if principal_id is None:
        return False
    return await PermissionChecker(db).has_any_permission(principal_id, {"product:view"})


@router.get(
    "",
    response_model=PaginatedResponse[ProductResponse],
    summary="List products",
)
async def list_products(
    service: ProductSvc,
    pagination: Pagination,
    db: DBSession,
    principal_id: PrincipalId,
    search: str | None = Query(None, description="Match against name or SKU"),
    category_id: UUID | None = Query(None, description="Only products in this category"),
) -> PaginatedResponse[ProductResponse]:
    include_unpublished = await _can_see_unpublished(db, principal_id)
    products, total = await service.list_products(
        pagination.offset,
        pagination.page_size,
        include_unpublished=include_unpublished,
        search=search,
        category_id=category_id,
    )
    return PaginatedResponse(
        results=len(products),
        data=[ProductResponse.model_validate(p) for p in products],
        pagination=PageInfo.build(total, pagination.page, pagination.page_size),
    )


@router.get(
    "/{product_id}",
    response_model=SuccessResponse[ProductResponse],
    summary="Get product",
)
async def get_product(
    product_id: UUID,
    service: ProductSvc,
    db: DBSession,
    principal_id: PrincipalId,
) -> SuccessResponse[ProductResponse]:
    include_unpublished = await _can_see_unpublished(db, principal_id)
    product = await service.get_product(product_id, include_unpublished=include_unpublished)
    return SuccessResponse(data=ProductResponse.model_validate(product))


@router.post(
    "",
    response_model=SuccessResponse[ProductResponse],
    status_code=status.HTTP_201_CREATED,
    summary="Create product",
)
async def create_product(
    data: ProductCreate,
    service: ProductSvc,
    current_user: ProductCreator,  # noqa: ARG001
) -> SuccessResponse[ProductResponse]:
    product = await service.create_product(data)
    return SuccessResponse(data=ProductResponse.model_validate(product))


@router.patch(
    "/{product_id}",
    response_model=SuccessResponse[ProductResponse],
    summary="Update product",
)
async def update_product(
    product_id: UUID,
    data: ProductUpdate,
    service: ProductSvc,
    current_user: ProductEditor,  # noqa: ARG001
) -> SuccessResponse[ProductResponse]:
    product = await service.update_product(product_id, data)
    return SuccessResponse(data=ProductResponse.model_validate(product))


@router.delete(
    "/{product_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete product",
)
async def delete_product(
    product_id: UUID,
    service: ProductSvc,
    current_user: ProductRemover,  # noqa: ARG001
) -> None:
    await service.delete_product(product_id)
