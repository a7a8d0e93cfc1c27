"""Wishlist service for business logic.

All operations are scoped to the calling user: a wishlist the caller
does not own is reported as not found, never as forbidden.
"""

from typing import Annotated, Any
from uuid import UUID

import structlog
from fastapi import Depends
from sqlalchemy.exc import IntegrityError

from backoffice.core.constants import DEFAULT_WISHLIST_DESCRIPTION, DEFAULT_WISHLIST_NAME
from backoffice.core.errors import InternalError, NotFoundError, ValidationError
from backoffice.modules.products.repos import ProductRepo
from backoffice.modules.users.repos import UserRepo
from backoffice.modules.wishlists.models import Wishlist, WishlistItem
from backoffice.modules.wishlists.repos import WishlistRepo
from backoffice.modules.wishlists.schemas import WishlistCreate, WishlistUpdate


logger = structlog.get_logger()


def default_wishlist_name(user: Any) -> str:
    """Name a user's auto-created default wishlist.

    Examples:
        "Ada Lovelace's Wishlist", "Ada's Wishlist", "ada's Wishlist",
        or "My Wishlist" when the user has no usable name.
    """
    if user.first_name and user.last_name:
        return f"{user.first_name} {user.last_name}'s Wishlist"
    if user.first_name:
        return f"{user.first_name}'s Wishlist"
    if user.username:
        return f"{user.username}'s Wishlist"
    return DEFAULT_WISHLIST_NAME


def _wishlist_not_found(wishlist_id: UUID | None) -> NotFoundError:
    return NotFoundError(
        "Wishlist not found",
        resource="wishlist",
        resource_id=str(wishlist_id) if wishlist_id else None,
    )


def _item_not_found(item_id: UUID) -> NotFoundError:
    return NotFoundError(
        "Wishlist item not found",
        resource="wishlist_item",
        resource_id=str(item_id),
    )


def _duplicate_product() -> ValidationError:
    return ValidationError(
        "Product already exists in this wishlist",
        error_code="duplicate_wishlist_item",
        errors=[{"field": "product_id", "message": "Product already in wishlist"}],
    )


class WishlistService:
    """Service for wishlist operations on behalf of the current user."""

    def __init__(
        self,
        repo: WishlistRepo,
        user_repo: UserRepo,
        product_repo: ProductRepo,
    ) -> None:
        self.repo = repo
        self.user_repo = user_repo
        self.product_repo = product_repo

    async def _get_owned(self, user: Any, wishlist_id: UUID) -> Wishlist:
        wishlist = await self.repo.get_owned(wishlist_id, user.id)
        if wishlist is None:
            raise _wishlist_not_found(wishlist_id)
        return wishlist

    async def _resolve(self, user: Any, wishlist_id: UUID | None) -> Wishlist:
        """Resolve an explicit wishlist ID, or the default wishlist when None."""
        if wishlist_id is None:
            return await self.get_or_create_default(user)
        return await self._get_owned(user, wishlist_id)

    async def list_wishlists(self, user: Any) -> list[Wishlist]:
        return await self.repo.list_for_customer(user.id)

    async def get_wishlist(self, user: Any, wishlist_id: UUID) -> Wishlist:
        """Get a wishlist the user owns or that is public.

        Raises:
            NotFoundError: If the wishlist does not exist or is private to someone else
        """
        wishlist = await self.repo.get_by_id(wishlist_id)
        if wishlist is None or (not wishlist.is_public and wishlist.customer_id != user.id):
            raise _wishlist_not_found(wishlist_id)
        return wishlist

    async def create_wishlist(self, user: Any, data: WishlistCreate) -> Wishlist:
        """Create a wishlist.

        The first wishlist a user creates becomes their default, as does
        any wishlist created with ``is_default``.
        """
        wishlist = Wishlist(
            customer_id=user.id,
            name=data.name,
            description=data.description,
            is_public=data.is_public,
        )
        wishlist = await self.repo.create(wishlist)

        if data.is_default:
            await self.user_repo.set_default_wishlist(user.id, wishlist.id)
        else:
            await self.user_repo.set_default_wishlist_if_unset(user.id, wishlist.id)
        await self.user_repo.refresh_default_wishlist(user)

        logger.info("wishlist_created", wishlist_id=str(wishlist.id), user_id=str(user.id))
        return wishlist

    async def update_wishlist(self, user: Any, wishlist_id: UUID, data: WishlistUpdate) -> Wishlist:
        """Update an owned wishlist.

        Raises:
            NotFoundError: If the wishlist is not owned by the user
        """
        wishlist = await self._get_owned(user, wishlist_id)

        if data.name is not None:
            wishlist.name = data.name
        if "description" in data.model_fields_set:
            wishlist.description = data.description
        if data.is_public is not None:
            wishlist.is_public = data.is_public
        wishlist = await self.repo.update(wishlist)

        if data.is_default:
            await self.user_repo.set_default_wishlist(user.id, wishlist.id)
            await self.user_repo.refresh_default_wishlist(user)

        return wishlist

    async def delete_wishlist(self, user: Any, wishlist_id: UUID) -> None:
        """Delete an owned wishlist and its items.

        The user's default pointer is cleared if it referenced this wishlist.

        Raises:
            NotFoundError: If the wishlist is not owned by the user
        """
        wishlist = await self._get_owned(user, wishlist_id)
        await self.user_repo.clear_default_wishlist(user.id, wishlist.id)
        await self.repo.delete(wishlist)
        await self.user_repo.refresh_default_wishlist(user)
        logger.info("wishlist_deleted", wishlist_id=str(wishlist_id), user_id=str(user.id))

    async def get_or_create_default(self, user: Any) -> Wishlist:
        """Return the user's default wishlist, creating it if needed.

        Resolution order: the wishlist the pointer references, else the
        user's oldest wishlist, else a newly created one. The pointer is
        written with a compare-and-set, so concurrent callers all end up
        with the same wishlist; a caller that loses the race deletes the
        wishlist it created and returns the winner's.

        Raises:
            InternalError: If the pointer cannot be resolved after the race
        """
        pointer = await self.user_repo.get_default_wishlist_id(user.id)
        if pointer is not None:
            wishlist = await self.repo.get_owned(pointer, user.id)
            if wishlist is not None:
                return wishlist
            # Dangling pointer, e.g. left by a backend without FK actions
            await self.user_repo.clear_default_wishlist(user.id, pointer)

        candidate = await self.repo.get_oldest_for_customer(user.id)
        created = candidate is None
        if candidate is None:
            candidate = await self.repo.create(
                Wishlist(
                    customer_id=user.id,
                    name=default_wishlist_name(user),
                    description=DEFAULT_WISHLIST_DESCRIPTION,
                    is_public=False,
                )
            )

        if await self.user_repo.set_default_wishlist_if_unset(user.id, candidate.id):
            await self.user_repo.refresh_default_wishlist(user)
            if created:
                logger.info(
                    "default_wishlist_created",
                    wishlist_id=str(candidate.id),
                    user_id=str(user.id),
                )
            return candidate

        if created:
            await self.repo.delete(candidate)
        winner_id = await self.user_repo.get_default_wishlist_id(user.id)
        await self.user_repo.refresh_default_wishlist(user)
        winner = await self.repo.get_owned(winner_id, user.id) if winner_id else None
        if winner is None:
            logger.error("default_wishlist_unresolved", user_id=str(user.id))
            raise InternalError(
                "Could not resolve default wishlist",
                error_code="default_wishlist_unresolved",
            )
        return winner

    async def set_default(self, user: Any, wishlist_id: UUID) -> Wishlist:
        """Make an owned wishlist the user's default.

        Raises:
            NotFoundError: If the wishlist is not owned by the user
        """
        wishlist = await self._get_owned(user, wishlist_id)
        await self.user_repo.set_default_wishlist(user.id, wishlist.id)
        await self.user_repo.refresh_default_wishlist(user)
        return wishlist

    async def add_item(
        self,
        user: Any,
        wishlist_id: UUID | None,
        product_id: UUID,
        notes: str | None = None,
    ) -> Wishlist:
        """Add a product to a wishlist, or to the default wishlist.

        Raises:
            NotFoundError: If the product does not exist or the wishlist is not owned
            ValidationError: If the wishlist already holds the product
        """
        product = await self.product_repo.get_by_id(product_id)
        if product is None:
            raise NotFoundError(
                "Product not found",
                resource="product",
                resource_id=str(product_id),
            )

        wishlist = await self._resolve(user, wishlist_id)
        if await self.repo.find_item_by_product(wishlist.id, product_id) is not None:
            raise _duplicate_product()

        try:
            await self.repo.add_item(
                WishlistItem(
                    wishlist_id=wishlist.id,
                    product_id=product_id,
                    notes=notes,
                    product=product,
                )
            )
        except IntegrityError as e:
            # Lost a race with a concurrent add of the same product
            raise _duplicate_product() from e

        logger.info(
            "wishlist_item_added",
            wishlist_id=str(wishlist.id),
            product_id=str(product_id),
        )
        return await self._get_owned(user, wishlist.id)

    async def remove_item(self, user: Any, wishlist_id: UUID | None, item_id: UUID) -> Wishlist:
        """Remove an item from a wishlist, or from the default wishlist.

        Raises:
            NotFoundError: If the wishlist is not owned or does not hold the item
        """
        wishlist = await self._resolve(user, wishlist_id)
        item = await self.repo.get_item(wishlist.id, item_id)
        if item is None:
            raise _item_not_found(item_id)

        await self.repo.delete_item(item)
        return await self._get_owned(user, wishlist.id)

    async def update_item_notes(
        self,
        user: Any,
        wishlist_id: UUID | None,
        item_id: UUID,
        notes: str | None,
    ) -> Wishlist:
        """Replace an item's notes.

        Raises:
            NotFoundError: If the wishlist is not owned or does not hold the item
        """
        wishlist = await self._resolve(user, wishlist_id)
        item = await self.repo.get_item(wishlist.id, item_id)
        if item is None:
            raise _item_not_found(item_id)

        item.notes = notes
        await self.repo.flush()
        return await self._get_owned(user, wishlist.id)

    async def move_item(
        self,
        user: Any,
        source_id: UUID,
        item_id: UUID,
        target_id: UUID,
    ) -> Wishlist:
        """Move an item to another of the user's wishlists.

        Both wishlist rows are locked for the rest of the transaction, so
        a concurrent add of the same product to the target either waits
        or is rejected by the unique constraint. Any failure leaves the
        item where it was.

        Returns:
            The target wishlist

        Raises:
            NotFoundError: If either wishlist is not owned or the item is not in the source
            ValidationError: If source and target are the same, or the
                target already holds the product
        """
        if source_id == target_id:
            raise ValidationError(
                "Source and target wishlists must be different",
                errors=[{"field": "target_wishlist_id", "message": "Same as source"}],
            )

        locked = await self.repo.lock_owned({source_id, target_id}, user.id)
        if source_id not in locked:
            raise _wishlist_not_found(source_id)
        if target_id not in locked:
            raise _wishlist_not_found(target_id)

        item = await self.repo.get_item(source_id, item_id)
        if item is None:
            raise _item_not_found(item_id)

        if await self.repo.find_item_by_product(target_id, item.product_id) is not None:
            raise ValidationError(
                "Product already exists in the target wishlist",
                error_code="duplicate_wishlist_item",
                errors=[{"field": "target_wishlist_id", "message": "Product already in wishlist"}],
            )

        item.wishlist_id = target_id
        try:
            await self.repo.flush()
        except IntegrityError as e:
            raise _duplicate_product() from e

        logger.info(
            "wishlist_item_moved",
            item_id=str(item_id),
            source_wishlist_id=str(source_id),
            target_wishlist_id=str(target_id),
        )
        return await self._get_owned(user, target_id)


# Type alias for dependency injection
WishlistSvc = Annotated[WishlistService, Depends(WishlistService)]
