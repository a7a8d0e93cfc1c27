"""Wishlist repository for database operations."""

from typing import Annotated
from uuid import UUID

from fastapi import Depends
from sqlalchemy import Select, select
from sqlalchemy.orm import selectinload

from backoffice.api.dependencies import DBSession
from backoffice.modules.wishlists.models import Wishlist, WishlistItem


def _with_items(stmt: Select[tuple[Wishlist]]) -> Select[tuple[Wishlist]]:
    # Reload items and their products even when the wishlist is already
    # in the session, so collections never go stale after a write
    return stmt.options(
        selectinload(Wishlist.items).selectinload(WishlistItem.product)
    ).execution_options(populate_existing=True)


class WishlistRepository:
    """Repository for Wishlist and WishlistItem database operations."""

    def __init__(self, session: DBSession) -> None:
        self.session = session

    async def create(self, wishlist: Wishlist) -> Wishlist:
        """Create a new wishlist.

        Args:
            wishlist: Wishlist instance to create

        Returns:
            The created wishlist with ID and timestamps populated
        """
        self.session.add(wishlist)
        await self.session.flush()
        await self.session.refresh(wishlist)
        return wishlist

    async def get_by_id(self, wishlist_id: UUID) -> Wishlist | None:
        """Get a wishlist by ID, whoever owns it.

        Args:
            wishlist_id: The wishlist's UUID

        Returns:
            Wishlist with its items and their products if found, None otherwise
        """
        stmt = _with_items(select(Wishlist).where(Wishlist.id == wishlist_id))
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def get_owned(self, wishlist_id: UUID, customer_id: UUID) -> Wishlist | None:
        """Get a wishlist only if ``customer_id`` owns it.

        Args:
            wishlist_id: The wishlist's UUID
            customer_id: The requesting user's UUID

        Returns:
            Wishlist if found and owned, None otherwise
        """
        stmt = _with_items(
            select(Wishlist).where(Wishlist.id == wishlist_id, Wishlist.customer_id == customer_id)
        )
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def lock_owned(self, wishlist_ids: set[UUID], customer_id: UUID) -> dict[UUID, Wishlist]:
        """Lock the given owned wishlist rows until the transaction ends.

        Rows are locked in primary key order. Backends without row locks
        (SQLite) ignore the ``FOR UPDATE``.

        Returns:
            Mapping of wishlist ID to wishlist; IDs not owned are absent
        """
        stmt = _with_items(
            select(Wishlist)
            .where(Wishlist.id.in_(wishlist_ids), Wishlist.customer_id == customer_id)
            .order_by(Wishlist.id)
            .with_for_update()
        )
        result = await self.session.execute(stmt)
        return {wishlist.id: wishlist for wishlist in result.scalars().all()}

    async def list_for_customer(self, customer_id: UUID) -> list[Wishlist]:
        """List a customer's wishlists, oldest first.

        Args:
            customer_id: Owning user

        Returns:
            Wishlists with their items loaded
        """
        stmt = _with_items(
            select(Wishlist)
            .where(Wishlist.customer_id == customer_id)
            .order_by(Wishlist.created_at, Wishlist.name)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def get_oldest_for_customer(self, customer_id: UUID) -> Wishlist | None:
        """Get the customer's earliest wishlist, used to adopt a default.

        Args:
            customer_id: Owning user

        Returns:
            Oldest wishlist if the customer has any, None otherwise
        """
        stmt = _with_items(
            select(Wishlist)
            .where(Wishlist.customer_id == customer_id)
            .order_by(Wishlist.created_at, Wishlist.id)
            .limit(1)
        )
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def update(self, wishlist: Wishlist) -> Wishlist:
        """Update a wishlist.

        Args:
            wishlist: Wishlist instance with updated fields

        Returns:
            The updated wishlist
        """
        await self.session.flush()
        await self.session.refresh(wishlist)
        return wishlist

    async def delete(self, wishlist: Wishlist) -> None:
        """Delete a wishlist; its items go with it.

        Args:
            wishlist: Wishlist instance to delete
        """
        await self.session.delete(wishlist)
        await self.session.flush()

    async def get_item(self, wishlist_id: UUID, item_id: UUID) -> WishlistItem | None:
        """Get an item that belongs to the given wishlist.

        Args:
            wishlist_id: Wishlist expected to hold the item
            item_id: The item's UUID

        Returns:
            WishlistItem if it is in that wishlist, None otherwise
        """
        stmt = select(WishlistItem).where(
            WishlistItem.id == item_id,
            WishlistItem.wishlist_id == wishlist_id,
        )
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def find_item_by_product(
        self,
        wishlist_id: UUID,
        product_id: UUID,
    ) -> WishlistItem | None:
        """Find the item saving ``product_id`` in a wishlist.

        Args:
            wishlist_id: Wishlist to search
            product_id: Product to look for

        Returns:
            WishlistItem if the wishlist already holds the product, None otherwise
        """
        stmt = select(WishlistItem).where(
            WishlistItem.wishlist_id == wishlist_id,
            WishlistItem.product_id == product_id,
        )
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def add_item(self, item: WishlistItem) -> WishlistItem:
        """Insert an item.

        Raises:
            IntegrityError: If the wishlist already holds the product
        """
        self.session.add(item)
        await self.session.flush()
        return item

    async def delete_item(self, item: WishlistItem) -> None:
        """Remove an item from its wishlist.

        Args:
            item: WishlistItem to delete
        """
        await self.session.delete(item)
        await self.session.flush()

    async def flush(self) -> None:
        """Write pending changes to the database without committing."""
        await self.session.flush()


# Type alias for dependency injection
WishlistRepo = Annotated[WishlistRepository, Depends(WishlistRepository)]
