"""Order service for business logic."""

from collections.abc import Sequence
from datetime import UTC, datetime
from decimal import ROUND_HALF_UP, Decimal
from typing import Annotated, Any
from uuid import UUID

import structlog
from fastapi import Depends

from backoffice.config import settings
from backoffice.core.constants import (
    DEFAULT_PAYMENT_METHOD,
    DRAFT_NUMBER_PREFIX,
    EXPRESS_SHIPPING_METHOD,
)
from backoffice.core.errors import NotFoundError, ValidationError
from backoffice.core.utils.text import generate_order_number
from backoffice.modules.orders.models import Order, OrderItem, OrderStatus, PaymentStatus
from backoffice.modules.orders.repos import OrderRepo
from backoffice.modules.orders.schemas import (
    OrderCreate,
    OrderDraftCreate,
    OrderDraftUpdate,
    OrderFilters,
    OrderItemCreate,
)
from backoffice.modules.products.models import Product
from backoffice.modules.products.repos import ProductRepo


logger = structlog.get_logger()

CENTS = Decimal("0.01")

# An order in one of these states can no longer be cancelled
_FINAL_STATUSES = frozenset({OrderStatus.delivered, OrderStatus.refunded})


def _money(value: Decimal) -> Decimal:
    return value.quantize(CENTS, rounding=ROUND_HALF_UP)


def calculate_line(unit_price: Decimal, quantity: int) -> tuple[Decimal, Decimal, Decimal]:
    """Price one order line.

    Returns:
        Tuple of (subtotal, tax, total)
    """
    subtotal = _money(unit_price * quantity)
    tax = _money(subtotal * settings.order_tax_rate)
    return subtotal, tax, subtotal + tax


def shipping_amount_for(method: str | None) -> Decimal:
    """Flat shipping fee: express costs more, anything else is standard."""
    if method == EXPRESS_SHIPPING_METHOD:
        return settings.express_shipping_amount
    return settings.standard_shipping_amount


def draft_shipping_amount(method: str | None, has_items: bool) -> Decimal:
    """Shipping estimate for a draft; nothing until both items and a method are chosen."""
    if not has_items or method is None:
        return Decimal("0")
    return shipping_amount_for(method)


def _order_not_found(order_id: UUID) -> NotFoundError:
    return NotFoundError("Order not found", resource="order", resource_id=str(order_id))


def _draft_not_found(draft_id: UUID) -> NotFoundError:
    return NotFoundError("Draft order not found", resource="order", resource_id=str(draft_id))


def _order_is_draft() -> ValidationError:
    return ValidationError(
        "Draft orders must be converted before they can be processed",
        error_code="order_is_draft",
    )


def build_items(
    lines: Sequence[OrderItemCreate],
    products: dict[UUID, Product],
) -> list[OrderItem]:
    """Price order lines at the products' current prices.

    Raises:
        NotFoundError: If a line names an unknown product
    """
    items: list[OrderItem] = []
    for position, line in enumerate(lines):
        product = products.get(line.product_id)
        if product is None:
            raise NotFoundError(
                f"Product with ID {line.product_id} not found",
                resource="product",
                resource_id=str(line.product_id),
            )
        unit_price = Decimal(product.price)
        subtotal, tax, total = calculate_line(unit_price, line.quantity)
        items.append(
            OrderItem(
                position=position,
                product_id=product.id,
                sku=product.sku,
                name=product.name,
                quantity=line.quantity,
                unit_price=unit_price,
                subtotal=subtotal,
                tax=tax,
                total=total,
            )
        )
    return items


def take_stock(items: Sequence[OrderItem], products: dict[UUID, Product]) -> None:
    """Take physical items out of stock, line by line.

    Changes made before a failing line are left on the products; the
    request's transaction rollback undoes them.

    Raises:
        ValidationError: If a product is unpublished or out of stock
    """
    for item in items:
        product = products[item.product_id]
        if not product.is_published:
            raise ValidationError(
                f"Product {product.name} is not available for purchase",
                error_code="product_unavailable",
            )
        if product.is_digital:
            continue
        if product.quantity < item.quantity:
            raise ValidationError(
                f"Insufficient stock for product {product.name}",
                error_code="insufficient_stock",
            )
        product.quantity -= item.quantity


def apply_totals(order: Order, items: list[OrderItem], shipping_amount: Decimal) -> None:
    """Set the order's items and recompute every amount from them."""
    subtotal_amount = sum((item.subtotal for item in items), Decimal("0"))
    tax_amount = sum((item.tax for item in items), Decimal("0"))
    order.items = items
    order.subtotal_amount = subtotal_amount
    order.tax_amount = tax_amount
    order.shipping_amount = shipping_amount
    order.total_amount = subtotal_amount + tax_amount + shipping_amount
    order.total_items = len(items)


class OrderService:
    """Service for order operations.

    Visibility is decided by the caller: ``view_any`` / ``cancel_any``
    say whether the user may act on orders they do not own.

    Drafts are orders in the ``draft`` status. They hold no stock and
    are only visible to their owner until converted.
    """

    def __init__(self, repo: OrderRepo, product_repo: ProductRepo) -> None:
        self.repo = repo
        self.product_repo = product_repo

    async def create_order(self, user: Any, data: OrderCreate) -> Order:
        """Place an order for ``user`` and take the items out of stock.

        Raises:
            NotFoundError: If a product does not exist
            ValidationError: If a product is unpublished or out of stock
        """
        products = await self.product_repo.get_many_for_update(
            [line.product_id for line in data.items]
        )
        items = build_items(data.items, products)
        take_stock(items, products)

        order = Order(
            order_number=generate_order_number(),
            customer_id=user.id,
            status=OrderStatus.pending,
            payment_status=PaymentStatus.pending,
            payment_method=data.payment_method or DEFAULT_PAYMENT_METHOD,
            payment_details={},
            shipping_method=data.shipping_method,
            shipping_address=data.shipping_address,
            billing_address=data.billing_address,
            notes=data.notes,
            order_metadata={},
        )
        apply_totals(order, items, shipping_amount_for(data.shipping_method))
        order = await self.repo.create(order)

        logger.info(
            "order_created",
            order_id=str(order.id),
            order_number=order.order_number,
            user_id=str(user.id),
            total_amount=str(order.total_amount),
        )
        return order

    async def get_order(self, user: Any, order_id: UUID, view_any: bool = False) -> Order:
        """Get an order the user owns, or any order when ``view_any``.

        Raises:
            NotFoundError: If the order does not exist or is not visible
        """
        order = await self.repo.get_by_id(order_id)
        if order is None or (not view_any and order.customer_id != user.id):
            raise _order_not_found(order_id)
        return order

    async def list_my_orders(
        self,
        user: Any,
        status: OrderStatus | None = None,
        offset: int = 0,
        limit: int = 20,
    ) -> tuple[list[Order], int]:
        return await self.repo.list_for_customer(user.id, status, offset, limit)

    async def list_orders(
        self,
        filters: OrderFilters,
        offset: int = 0,
        limit: int = 20,
    ) -> tuple[list[Order], int]:
        return await self.repo.list_paginated(filters, offset, limit)

    async def update_status(self, order_id: UUID, status: OrderStatus) -> Order:
        """Set an order's fulfilment status.

        Raises:
            NotFoundError: If the order does not exist
            ValidationError: If the order is a draft or ``status`` is ``draft``
        """
        order = await self.repo.get_by_id(order_id)
        if order is None:
            raise _order_not_found(order_id)
        if order.status == OrderStatus.draft:
            raise _order_is_draft()
        if status == OrderStatus.draft:
            raise ValidationError(
                "A placed order cannot go back to draft",
                error_code="invalid_status",
                errors=[{"field": "status", "message": "Status draft is not allowed"}],
            )

        previous = order.status
        order.status = status
        order = await self.repo.update(order)
        logger.info(
            "order_status_updated",
            order_id=str(order_id),
            previous_status=previous.value,
            status=status.value,
        )
        return order

    async def update_payment(
        self,
        order_id: UUID,
        payment_status: PaymentStatus,
        payment_details: dict[str, Any] | None = None,
    ) -> Order:
        """Set an order's payment status, replacing payment details if given.

        Raises:
            NotFoundError: If the order does not exist
            ValidationError: If the order is a draft
        """
        order = await self.repo.get_by_id(order_id)
        if order is None:
            raise _order_not_found(order_id)
        if order.status == OrderStatus.draft:
            raise _order_is_draft()

        order.payment_status = payment_status
        if payment_details:
            order.payment_details = payment_details
        order = await self.repo.update(order)
        logger.info(
            "order_payment_updated",
            order_id=str(order_id),
            payment_status=payment_status.value,
        )
        return order

    async def cancel_order(
        self,
        user: Any,
        order_id: UUID,
        reason: str | None = None,
        cancel_any: bool = False,
    ) -> Order:
        """Cancel an order and put its physical items back in stock.

        A paid order becomes refunded. Cancellation details are kept in
        the order metadata.

        Raises:
            NotFoundError: If the order does not exist or is not the user's
                and ``cancel_any`` is False
            ValidationError: If the order is a draft, or already cancelled,
                delivered or refunded
        """
        order = await self.repo.get_by_id(order_id, for_update=True)
        if order is None or (not cancel_any and order.customer_id != user.id):
            raise _order_not_found(order_id)

        if order.status == OrderStatus.draft:
            raise _order_is_draft()
        if order.status == OrderStatus.cancelled:
            raise ValidationError("Order is already cancelled", error_code="order_cancelled")
        if order.status in _FINAL_STATUSES:
            raise ValidationError(
                "Cannot cancel an order that is already delivered or refunded",
                error_code="order_not_cancellable",
            )

        products = await self.product_repo.get_many_for_update(
            [item.product_id for item in order.items if item.product_id is not None]
        )
        for item in order.items:
            product = products.get(item.product_id) if item.product_id else None
            if product is not None and not product.is_digital:
                product.quantity += item.quantity

        order.status = OrderStatus.cancelled
        if order.payment_status == PaymentStatus.paid:
            order.payment_status = PaymentStatus.refunded

        order.order_metadata = {
            **(order.order_metadata or {}),
            "cancellation": {
                "cancelled_at": datetime.now(UTC).isoformat(),
                "cancelled_by": user.role_names,
                "cancelled_by_id": str(user.id),
                "reason": reason or "No reason provided",
            },
        }
        order = await self.repo.update(order)

        logger.info(
            "order_cancelled",
            order_id=str(order_id),
            user_id=str(user.id),
            payment_status=order.payment_status.value,
        )
        return order

    # Drafts

    async def _draft_items(self, lines: Sequence[OrderItemCreate]) -> list[OrderItem]:
        products = await self.product_repo.get_many([line.product_id for line in lines])
        return build_items(lines, products)

    async def _owned_draft(self, user: Any, draft_id: UUID, for_update: bool = False) -> Order:
        order = await self.repo.get_by_id(draft_id, for_update=for_update)
        if order is None or order.customer_id != user.id:
            raise _draft_not_found(draft_id)
        if order.status != OrderStatus.draft:
            raise ValidationError("Order is not a draft", error_code="order_not_draft")
        return order

    async def save_draft(self, user: Any, data: OrderDraftCreate) -> Order:
        """Save an unfinished order for ``user``.

        Lines are priced at current prices but nothing is taken out of
        stock, and unpublished products are allowed.

        Raises:
            NotFoundError: If a product does not exist
        """
        items = await self._draft_items(data.items)
        order = Order(
            order_number=generate_order_number(DRAFT_NUMBER_PREFIX),
            customer_id=user.id,
            status=OrderStatus.draft,
            payment_status=PaymentStatus.pending,
            payment_method=data.payment_method,
            payment_details={},
            shipping_method=data.shipping_method,
            shipping_address=data.shipping_address,
            billing_address=data.billing_address,
            notes=data.notes,
            order_metadata={"draft_saved_at": datetime.now(UTC).isoformat()},
        )
        apply_totals(order, items, draft_shipping_amount(data.shipping_method, bool(items)))
        order = await self.repo.create(order)

        logger.info(
            "order_draft_saved",
            order_id=str(order.id),
            order_number=order.order_number,
            user_id=str(user.id),
        )
        return order

    async def get_draft(self, user: Any, draft_id: UUID) -> Order:
        """Get one of the user's drafts.

        Raises:
            NotFoundError: If the draft does not exist or is not the user's
            ValidationError: If the order has already been placed
        """
        return await self._owned_draft(user, draft_id)

    async def list_drafts(
        self,
        user: Any,
        offset: int = 0,
        limit: int = 20,
    ) -> tuple[list[Order], int]:
        return await self.repo.list_drafts(user.id, offset, limit)

    async def update_draft(self, user: Any, draft_id: UUID, data: OrderDraftUpdate) -> Order:
        """Change a draft. Totals are always recomputed from the stored lines.

        Raises:
            NotFoundError: If the draft or a product does not exist
            ValidationError: If the order has already been placed
        """
        order = await self._owned_draft(user, draft_id, for_update=True)
        fields = data.model_fields_set

        for field in (
            "shipping_address",
            "billing_address",
            "payment_method",
            "shipping_method",
            "notes",
        ):
            if field in fields:
                setattr(order, field, getattr(data, field))
        if "payment_details" in fields:
            order.payment_details = data.payment_details or {}

        if "items" in fields:
            items = await self._draft_items(data.items or [])
        else:
            # Keep the stored lines at their saved prices
            items = list(order.items)
        apply_totals(order, items, draft_shipping_amount(order.shipping_method, bool(items)))
        order.order_metadata = {
            **(order.order_metadata or {}),
            "draft_updated_at": datetime.now(UTC).isoformat(),
        }
        order = await self.repo.update(order)

        logger.info("order_draft_updated", order_id=str(order.id), user_id=str(user.id))
        return order

    async def delete_draft(self, user: Any, draft_id: UUID) -> None:
        """Delete one of the user's drafts.

        Raises:
            NotFoundError: If the draft does not exist or is not the user's
            ValidationError: If the order has already been placed
        """
        order = await self._owned_draft(user, draft_id, for_update=True)
        await self.repo.delete(order)
        logger.info("order_draft_deleted", order_id=str(draft_id), user_id=str(user.id))

    async def convert_draft(self, user: Any, draft_id: UUID) -> Order:
        """Place a draft as a regular order.

        Lines are repriced at current prices and taken out of stock, the
        same way :meth:`create_order` does.

        Raises:
            NotFoundError: If the draft or one of its products does not exist
            ValidationError: If the draft is incomplete, already placed, or a
                product is unpublished or out of stock
        """
        order = await self._owned_draft(user, draft_id, for_update=True)
        if not order.items:
            raise ValidationError("Cannot convert an empty draft", error_code="draft_empty")
        missing = [
            {"field": field, "message": "Required to place the order"}
            for field in ("shipping_address", "billing_address")
            if not getattr(order, field)
        ]
        if missing:
            raise ValidationError(
                "Draft is missing required order details",
                error_code="draft_incomplete",
                errors=missing,
            )

        lines = [
            OrderItemCreate(product_id=item.product_id, quantity=item.quantity)
            for item in order.items
            if item.product_id is not None
        ]
        if len(lines) != len(order.items):
            raise ValidationError(
                "A product on this draft no longer exists",
                error_code="product_unavailable",
            )
        products = await self.product_repo.get_many_for_update(
            [line.product_id for line in lines]
        )
        items = build_items(lines, products)
        take_stock(items, products)

        draft_number = order.order_number
        order.order_number = generate_order_number()
        order.status = OrderStatus.pending
        order.payment_status = PaymentStatus.pending
        order.payment_method = order.payment_method or DEFAULT_PAYMENT_METHOD
        apply_totals(order, items, shipping_amount_for(order.shipping_method))
        order.order_metadata = {
            **(order.order_metadata or {}),
            "converted_from_draft": True,
            "draft_order_number": draft_number,
            "converted_at": datetime.now(UTC).isoformat(),
        }
        order = await self.repo.update(order)

        logger.info(
            "order_draft_converted",
            order_id=str(order.id),
            order_number=order.order_number,
            draft_order_number=draft_number,
            user_id=str(user.id),
            total_amount=str(order.total_amount),
        )
        return order


# Type alias for dependency injection
OrderSvc = Annotated[OrderService, Depends(OrderService)]
