"""Order repository for database operations."""

from datetime import UTC, datetime, time, timedelta
from typing import Annotated, Any
from uuid import UUID

from fastapi import Depends
from sqlalchemy import ColumnElement, Select, func, select
from sqlalchemy.orm import selectinload

from backoffice.api.dependencies import DBSession
from backoffice.modules.orders.models import Order, OrderStatus
from backoffice.modules.orders.schemas import OrderFilters


def _status_clause(status: OrderStatus | None) -> ColumnElement[bool]:
    # Drafts only show up when asked for by status
    if status is None:
        return Order.status != OrderStatus.draft
    return Order.status == status


def _order_by_id(order_id: UUID) -> Select[tuple[Order]]:
    return (
        select(Order)
        .where(Order.id == order_id)
        .options(selectinload(Order.items))
        .execution_options(populate_existing=True)
    )


class OrderRepository:
    """Repository for Order database operations."""

    def __init__(self, session: DBSession) -> None:
        self.session = session

    async def create(self, order: Order) -> Order:
        """Insert an order with its items.

        Returns:
            The order reloaded from the database
        """
        self.session.add(order)
        await self.session.flush()
        result = await self.session.execute(_order_by_id(order.id))
        return result.scalar_one()

    async def get_by_id(self, order_id: UUID, for_update: bool = False) -> Order | None:
        """Get an order with its items.

        Args:
            order_id: The order's UUID
            for_update: Lock the order row until the transaction ends
        """
        stmt = _order_by_id(order_id)
        if for_update:
            stmt = stmt.with_for_update()
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def list_paginated(
        self,
        filters: OrderFilters,
        offset: int = 0,
        limit: int = 20,
    ) -> tuple[list[Order], int]:
        """List orders matching ``filters``.

        Args:
            filters: Staff listing filters and sort order; drafts are
                skipped unless ``filters.status`` asks for them
            offset: Rows to skip
            limit: Maximum rows to return

        Returns:
            Tuple of (orders list, total count)
        """
        clauses = [_status_clause(filters.status)]
        if filters.payment_status is not None:
            clauses.append(Order.payment_status == filters.payment_status)
        if filters.customer_id is not None:
            clauses.append(Order.customer_id == filters.customer_id)
        if filters.start_date is not None:
            clauses.append(
                Order.created_at >= datetime.combine(filters.start_date, time.min, tzinfo=UTC)
            )
        if filters.end_date is not None:
            # End date covers the whole day
            next_day = filters.end_date + timedelta(days=1)
            clauses.append(Order.created_at < datetime.combine(next_day, time.min, tzinfo=UTC))
        if filters.min_amount is not None:
            clauses.append(Order.total_amount >= filters.min_amount)
        if filters.max_amount is not None:
            clauses.append(Order.total_amount <= filters.max_amount)

        total = await self.session.scalar(select(func.count()).select_from(Order).where(*clauses))

        sort_column = Order.total_amount if filters.sort_by == "total_amount" else Order.created_at
        ordering = sort_column.asc() if filters.sort_order == "asc" else sort_column.desc()
        stmt = select(Order).where(*clauses).order_by(ordering, Order.order_number)
        result = await self.session.execute(stmt.offset(offset).limit(limit))
        return list(result.scalars().all()), total or 0

    async def list_for_customer(
        self,
        customer_id: UUID,
        status: OrderStatus | None = None,
        offset: int = 0,
        limit: int = 20,
    ) -> tuple[list[Order], int]:
        """List one customer's orders, newest first.

        Args:
            customer_id: Owning user
            status: Only orders in this status; drafts are skipped when None

        Returns:
            Tuple of (orders list, total count)
        """
        clauses = [Order.customer_id == customer_id, _status_clause(status)]
        ordering = (Order.created_at.desc(), Order.order_number)
        return await self._page(clauses, ordering, offset, limit)

    async def list_drafts(
        self,
        customer_id: UUID,
        offset: int = 0,
        limit: int = 20,
    ) -> tuple[list[Order], int]:
        """List one customer's drafts, most recently edited first.

        Args:
            customer_id: Owning user
            offset: Rows to skip
            limit: Maximum rows to return

        Returns:
            Tuple of (drafts list, total count)
        """
        clauses = [Order.customer_id == customer_id, Order.status == OrderStatus.draft]
        ordering = (Order.updated_at.desc(), Order.order_number)
        return await self._page(clauses, ordering, offset, limit)

    async def _page(
        self,
        clauses: list[ColumnElement[bool]],
        ordering: tuple[Any, ...],
        offset: int,
        limit: int,
    ) -> tuple[list[Order], int]:
        total = await self.session.scalar(select(func.count()).select_from(Order).where(*clauses))
        stmt = select(Order).where(*clauses).order_by(*ordering).offset(offset).limit(limit)
        result = await self.session.execute(stmt)
        return list(result.scalars().all()), total or 0

    async def update(self, order: Order) -> Order:
        """Flush changes to an order, including a replaced item list.

        Returns:
            The order reloaded with its current items
        """
        await self.session.flush()
        result = await self.session.execute(_order_by_id(order.id))
        return result.scalar_one()

    async def delete(self, order: Order) -> None:
        """Delete an order; its items go with it."""
        await self.session.delete(order)
        await self.session.flush()


# Type alias for dependency injection
OrderRepo = Annotated[OrderRepository, Depends(OrderRepository)]
