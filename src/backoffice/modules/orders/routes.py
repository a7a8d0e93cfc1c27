"""Order API routes.

Any authenticated user can place orders and read or cancel their own, and
keep drafts under ``/orders/drafts``.
Staff access to other users' orders goes through ``order:*`` permissions.
"""

from datetime import date
from decimal import Decimal
from typing import Annotated, Any, Literal
from uuid import UUID

from fastapi import Depends, Query, status

from backoffice.api.dependencies import DBSession, Pagination
from backoffice.core.auth.dependencies import CurrentUser
from backoffice.core.permissions import PermissionChecker
from backoffice.core.permissions.dependencies import require_permissions
from backoffice.core.responses import PaginatedResponse, SuccessResponse
from backoffice.core.responses import Pagination as PageInfo
from backoffice.modules.orders import router
from backoffice.modules.orders.models import Order, OrderStatus, PaymentStatus
from backoffice.modules.orders.schemas import (
    OrderCancel,
    OrderCreate,
    OrderDraftCreate,
    OrderDraftUpdate,
    OrderFilters,
    OrderPaymentUpdate,
    OrderResponse,
    OrderStatusUpdate,
)
from backoffice.modules.orders.services import OrderSvc


OrderViewer = Annotated[Any, Depends(require_permissions("order:view"))]
OrderEditor = Annotated[Any, Depends(require_permissions("order:update"))]


def get_order_filters(
    status: OrderStatus | None = Query(None),
    payment_status: PaymentStatus | None = Query(None),
    customer_id: UUID | None = Query(None),
    start_date: date | None = Query(None, description="Created on or after this day"),
    end_date: date | None = Query(None, description="Created on or before this day"),
    min_amount: Decimal | None = Query(None, ge=0),
    max_amount: Decimal | None = Query(None, ge=0),
    sort_by: Literal["created_at", "total_amount"] = Query("created_at"),
    sort_order: Literal["asc", "desc"] = Query("desc"),
) -> OrderFilters:
    return OrderFilters(
        status=status,
        payment_status=payment_status,
        customer_id=customer_id,
        start_date=start_date,
        end_date=end_date,
        min_amount=min_amount,
        max_amount=max_amount,
        sort_by=sort_by,
        sort_order=sort_order,
    )


def _page(orders: list[Order], total: int, pagination: Any) -> PaginatedResponse[OrderResponse]:
    return PaginatedResponse(
        results=len(orders),
        data=[OrderResponse.model_validate(o) for o in orders],
        pagination=PageInfo.build(total, pagination.page, pagination.page_size),
    )


@router.post(
    "",
    response_model=SuccessResponse[OrderResponse],
    status_code=status.HTTP_201_CREATED,
    summary="Place order",
)
async def create_order(
    data: OrderCreate,
    service: OrderSvc,
    current_user: CurrentUser,
) -> SuccessResponse[OrderResponse]:
    order = await service.create_order(current_user, data)
    return SuccessResponse(data=OrderResponse.model_validate(order))


@router.get(
    "/my-orders",
    response_model=PaginatedResponse[OrderResponse],
    summary="List own orders",
)
async def list_my_orders(
    service: OrderSvc,
    pagination: Pagination,
    current_user: CurrentUser,
    status: OrderStatus | None = Query(None),
) -> PaginatedResponse[OrderResponse]:
    orders, total = await service.list_my_orders(
        current_user,
        status,
        pagination.offset,
        pagination.page_size,
    )
    return _page(orders, total, pagination)


@router.get(
    "",
    response_model=PaginatedResponse[OrderResponse],
    summary="List all orders",
)
async def list_orders(
    service: OrderSvc,
    pagination: Pagination,
    filters: Annotated[OrderFilters, Depends(get_order_filters)],
    current_user: OrderViewer,  # noqa: ARG001
) -> PaginatedResponse[OrderResponse]:
    orders, total = await service.list_orders(filters, pagination.offset, pagination.page_size)
    return _page(orders, total, pagination)


@router.post(
    "/drafts",
    response_model=SuccessResponse[OrderResponse],
    status_code=status.HTTP_201_CREATED,
    summary="Save draft order",
)
async def save_draft(
    data: OrderDraftCreate,
    service: OrderSvc,
    current_user: CurrentUser,
) -> SuccessResponse[OrderResponse]:
    order = await service.save_draft(current_user, data)
    return SuccessResponse(data=OrderResponse.model_validate(order), message="Draft saved")


@router.get(
    "/drafts",
    response_model=PaginatedResponse[OrderResponse],
    summary="List own drafts",
)
async def list_drafts(
    service: OrderSvc,
    pagination: Pagination,
    current_user: CurrentUser,
) -> PaginatedResponse[OrderResponse]:
    orders, total = await service.list_drafts(
        current_user,
        pagination.offset,
        pagination.page_size,
    )
    return _page(orders, total, pagination)


@router.get(
    "/drafts/{draft_id}",
    response_model=SuccessResponse[OrderResponse],
    summary="Get draft order",
)
async def get_draft(
    draft_id: UUID,
    service: OrderSvc,
    current_user: CurrentUser,
) -> SuccessResponse[OrderResponse]:
    order = await service.get_draft(current_user, draft_id)
    return SuccessResponse(data=OrderResponse.model_validate(order))


@router.put(
    "/drafts/{draft_id}",
    response_model=SuccessResponse[OrderResponse],
    summary="Update draft order",
    description="Only fields present in the body change. Totals are recomputed.",
)
async def update_draft(
    draft_id: UUID,
    data: OrderDraftUpdate,
    service: OrderSvc,
    current_user: CurrentUser,
) -> SuccessResponse[OrderResponse]:
    order = await service.update_draft(current_user, draft_id, data)
    return SuccessResponse(data=OrderResponse.model_validate(order), message="Draft updated")


@router.delete(
    "/drafts/{draft_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete draft order",
)
async def delete_draft(
    draft_id: UUID,
    service: OrderSvc,
    current_user: CurrentUser,
) -> None:
    await service.delete_draft(current_user, draft_id)


@router.post(
    "/drafts/{draft_id}/convert",
    response_model=SuccessResponse[OrderResponse],
    summary="Place draft order",
    description="Reprices the lines at current prices and takes them out of stock.",
)
async def convert_draft(
    draft_id: UUID,
    service: OrderSvc,
    current_user: CurrentUser,
) -> SuccessResponse[OrderResponse]:
    order = await service.convert_draft(current_user, draft_id)
    return SuccessResponse(data=OrderResponse.model_validate(order), message="Order placed")


@router.get(
    "/{order_id}",
    response_model=SuccessResponse[OrderResponse],
    summary="Get order",
    description="Holders of order:view can read any order; others only their own.",
)
async def get_order(
    order_id: UUID,
    service: OrderSvc,
    db: DBSession,
    current_user: CurrentUser,
) -> SuccessResponse[OrderResponse]:
    view_any = await PermissionChecker(db).has_any_permission(current_user.id, {"order:view"})
    order = await service.get_order(current_user, order_id, view_any=view_any)
    return SuccessResponse(data=OrderResponse.model_validate(order))


@router.patch(
    "/{order_id}/status",
    response_model=SuccessResponse[OrderResponse],
    summary="Update order status",
)
async def update_order_status(
    order_id: UUID,
    data: OrderStatusUpdate,
    service: OrderSvc,
    current_user: OrderEditor,  # noqa: ARG001
) -> SuccessResponse[OrderResponse]:
    order = await service.update_status(order_id, data.status)
    return SuccessResponse(data=OrderResponse.model_validate(order))


@router.patch(
    "/{order_id}/payment",
    response_model=SuccessResponse[OrderResponse],
    summary="Update payment status",
)
async def update_payment_status(
    order_id: UUID,
    data: OrderPaymentUpdate,
    service: OrderSvc,
    current_user: OrderEditor,  # noqa: ARG001
) -> SuccessResponse[OrderResponse]:
    order = await service.update_payment(order_id, data.payment_status, data.payment_details)
    return SuccessResponse(data=OrderResponse.model_validate(order))


@router.patch(
    "/{order_id}/cancel",
    response_model=SuccessResponse[OrderResponse],
    summary="Cancel order",
    description="Holders of order:cancel can cancel any order; others only their own.",
)
async def cancel_order(
    order_id: UUID,
    service: OrderSvc,
    db: DBSession,
    current_user: CurrentUser,
    data: OrderCancel | None = None,
) -> SuccessResponse[OrderResponse]:
    cancel_any = await PermissionChecker(db).has_any_permission(
        current_user.id, {"order:cancel"}
    )
    reason = data.reason if data else None
    order = await service.cancel_order(current_user, order_id, reason, cancel_any=cancel_any)
    return SuccessResponse(data=OrderResponse.model_validate(order), message="Order cancelled")
