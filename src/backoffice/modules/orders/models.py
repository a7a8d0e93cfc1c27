"""Order database models."""

import enum
from decimal import Decimal
from typing import Any
from uuid import UUID

from sqlalchemy import JSON, ForeignKey, Integer, Numeric, String, Text
from sqlalchemy import Enum as SQLEnum
from sqlalchemy.orm import Mapped, mapped_column, relationship

from backoffice.core.constants import (
    MAX_METHOD_LENGTH,
    MAX_ORDER_NUMBER_LENGTH,
    MAX_PRODUCT_NAME_LENGTH,
    MAX_SKU_LENGTH,
)
from backoffice.core.database.base import Base, TimestampMixin, UUIDMixin


class OrderStatus(str, enum.Enum):
    draft = "draft"
    pending = "pending"
    processing = "processing"
    shipped = "shipped"
    delivered = "delivered"
    cancelled = "cancelled"
    refunded = "refunded"
    completed = "completed"


class PaymentStatus(str, enum.Enum):
    pending = "pending"
    paid = "paid"
    failed = "failed"
    refunded = "refunded"


class OrderItem(Base, UUIDMixin, TimestampMixin):
    """A line of an order.

    SKU, name and prices are copied from the product when the order is
    placed, so the line survives later catalogue changes.
    """

    __tablename__ = "order_items"

    order_id: Mapped[UUID] = mapped_column(
        ForeignKey("orders.id", ondelete="CASCADE"),
        index=True,
        nullable=False,
    )
    product_id: Mapped[UUID | None] = mapped_column(
        ForeignKey("products.id", ondelete="SET NULL"),
        index=True,
        nullable=True,
    )
    position: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    sku: Mapped[str] = mapped_column(String(MAX_SKU_LENGTH), nullable=False)
    name: Mapped[str] = mapped_column(String(MAX_PRODUCT_NAME_LENGTH), nullable=False)
    quantity: Mapped[int] = mapped_column(Integer, nullable=False)
    unit_price: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    subtotal: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    tax: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    total: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)


class Order(Base, UUIDMixin, TimestampMixin):
    """A customer order.

    Attributes:
        order_number: Unique human-facing number, ``ORD-`` prefixed
            (``DFT-`` while the order is a draft)
        customer_id: Ordering user
        status: Fulfilment status; ``draft`` for a saved, unplaced order
        payment_status: Payment status
        total_amount: Subtotal plus tax plus shipping
        total_items: Number of order lines
        order_metadata: Free-form data such as cancellation details;
            stored in the ``metadata`` column
    """

    __tablename__ = "orders"

    order_number: Mapped[str] = mapped_column(
        String(MAX_ORDER_NUMBER_LENGTH),
        unique=True,
        index=True,
        nullable=False,
    )
    customer_id: Mapped[UUID] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"),
        index=True,
        nullable=False,
    )
    status: Mapped[OrderStatus] = mapped_column(
        SQLEnum(OrderStatus, name="order_status"),
        default=OrderStatus.pending,
        index=True,
        nullable=False,
    )
    payment_status: Mapped[PaymentStatus] = mapped_column(
        SQLEnum(PaymentStatus, name="payment_status"),
        default=PaymentStatus.pending,
        nullable=False,
    )
    subtotal_amount: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    tax_amount: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    shipping_amount: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    total_amount: Mapped[Decimal] = mapped_column(Numeric(10, 2), index=True, nullable=False)
    total_items: Mapped[int] = mapped_column(Integer, nullable=False)
    # Drafts may leave payment and addresses open until they are converted
    payment_method: Mapped[str | None] = mapped_column(String(MAX_METHOD_LENGTH), nullable=True)
    payment_details: Mapped[dict[str, Any]] = mapped_column(JSON, default=dict, nullable=False)
    shipping_method: Mapped[str | None] = mapped_column(String(MAX_METHOD_LENGTH), nullable=True)
    shipping_address: Mapped[dict[str, Any] | None] = mapped_column(JSON, nullable=True)
    billing_address: Mapped[dict[str, Any] | None] = mapped_column(JSON, nullable=True)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    # "metadata" is reserved on declarative classes
    order_metadata: Mapped[dict[str, Any]] = mapped_column(
        "metadata",
        JSON,
        default=dict,
        nullable=False,
    )

    items: Mapped[list[OrderItem]] = relationship(
        OrderItem,
        lazy="selectin",
        cascade="all, delete-orphan",
        order_by=OrderItem.position,
    )

    def __repr__(self) -> str:
        return f"<Order(id={self.id}, order_number={self.order_number}, status={self.status})>"
