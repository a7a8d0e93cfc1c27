"""Pydantic schemas for order operations."""

from datetime import date, datetime
from decimal import Decimal
from typing import Any, Literal
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from backoffice.core.constants import MAX_METHOD_LENGTH
from backoffice.modules.orders.models import OrderStatus, PaymentStatus


class OrderItemCreate(BaseModel):
    product_id: UUID
    quantity: int = Field(..., ge=1)


class OrderCreate(BaseModel):
    """Schema for placing an order for the current user."""

    items: list[OrderItemCreate] = Field(..., min_length=1)
    shipping_address: dict[str, Any] = Field(..., min_length=1)
    billing_address: dict[str, Any] = Field(..., min_length=1)
    payment_method: str | None = Field(None, max_length=MAX_METHOD_LENGTH)
    shipping_method: str | None = Field(None, max_length=MAX_METHOD_LENGTH)
    notes: str | None = None


class OrderDraftCreate(BaseModel):
    """Schema for saving an unfinished order. Every field may be left empty."""

    items: list[OrderItemCreate] = Field(default_factory=list)
    shipping_address: dict[str, Any] | None = None
    billing_address: dict[str, Any] | None = None
    payment_method: str | None = Field(None, max_length=MAX_METHOD_LENGTH)
    shipping_method: str | None = Field(None, max_length=MAX_METHOD_LENGTH)
    notes: str | None = None


class OrderDraftUpdate(OrderDraftCreate):
    """Partial draft update.

    Only fields present in the body change; sending ``items`` replaces
    every line of the draft.
    """

    items: list[OrderItemCreate] | None = None  # type: ignore[assignment]
    payment_details: dict[str, Any] | None = None


class OrderStatusUpdate(BaseModel):
    status: OrderStatus


class OrderPaymentUpdate(BaseModel):
    payment_status: PaymentStatus
    payment_details: dict[str, Any] | None = None


class OrderCancel(BaseModel):
    reason: str | None = None


class OrderFilters(BaseModel):
    """Filters for the staff order listing. All bounds are inclusive."""

    status: OrderStatus | None = None
    payment_status: PaymentStatus | None = None
    customer_id: UUID | None = None
    start_date: date | None = None
    end_date: date | None = None
    min_amount: Decimal | None = None
    max_amount: Decimal | None = None
    sort_by: Literal["created_at", "total_amount"] = "created_at"
    sort_order: Literal["asc", "desc"] = "desc"


class OrderItemResponse(BaseModel):
    id: UUID
    product_id: UUID | None = None
    sku: str
    name: str
    quantity: int
    unit_price: Decimal
    subtotal: Decimal
    tax: Decimal
    total: Decimal

    model_config = ConfigDict(from_attributes=True)


class OrderResponse(BaseModel):
    id: UUID
    order_number: str
    customer_id: UUID
    status: OrderStatus
    payment_status: PaymentStatus
    subtotal_amount: Decimal
    tax_amount: Decimal
    shipping_amount: Decimal
    total_amount: Decimal
    total_items: int
    payment_method: str | None = None
    payment_details: dict[str, Any] = Field(default_factory=dict)
    shipping_method: str | None = None
    shipping_address: dict[str, Any] | None = None
    billing_address: dict[str, Any] | None = None
    notes: str | None = None
    metadata: dict[str, Any] = Field(default_factory=dict, validation_alias="order_metadata")
    items: list[OrderItemResponse] = Field(default_factory=list)
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)
