"""Wishlist API routes.

Every route needs an authenticated user and acts on that user's own
wishlists. Item routes exist twice: under ``/{wishlist_id}`` and under
``/default``, which resolves (and if needed creates) the default wishlist.
"""

from typing import Any
from uuid import UUID

from fastapi import status

from backoffice.core.auth.dependencies import CurrentUser
from backoffice.core.responses import ListResponse, SuccessResponse
from backoffice.modules.wishlists import router
from backoffice.modules.wishlists.models import Wishlist
from backoffice.modules.wishlists.schemas import (
    WishlistCreate,
    WishlistItemCreate,
    WishlistItemMove,
    WishlistItemNotesUpdate,
    WishlistResponse,
    WishlistUpdate,
)
from backoffice.modules.wishlists.services import WishlistSvc


def _to_response(wishlist: Wishlist, user: Any) -> WishlistResponse:
    response = WishlistResponse.model_validate(wishlist)
    response.is_default = wishlist.id == user.default_wishlist_id
    return response


def _success(
    wishlist: Wishlist,
    user: Any,
    message: str | None = None,
) -> SuccessResponse[WishlistResponse]:
    return SuccessResponse(data=_to_response(wishlist, user), message=message)


# ============================================================
# Default wishlist
# ============================================================


@router.get(
    "/default",
    response_model=SuccessResponse[WishlistResponse],
    summary="Get default wishlist",
    description="Returns the default wishlist, creating one on first use.",
)
async def get_default_wishlist(
    service: WishlistSvc,
    current_user: CurrentUser,
) -> SuccessResponse[WishlistResponse]:
    wishlist = await service.get_or_create_default(current_user)
    return _success(wishlist, current_user)


@router.post(
    "/default/items",
    response_model=SuccessResponse[WishlistResponse],
    status_code=status.HTTP_201_CREATED,
    summary="Add product to default wishlist",
)
async def add_default_item(
    data: WishlistItemCreate,
    service: WishlistSvc,
    current_user: CurrentUser,
) -> SuccessResponse[WishlistResponse]:
    wishlist = await service.add_item(current_user, None, data.product_id, data.notes)
    return _success(wishlist, current_user, "Product added to wishlist")


@router.delete(
    "/default/items/{item_id}",
    response_model=SuccessResponse[WishlistResponse],
    summary="Remove item from default wishlist",
)
async def remove_default_item(
    item_id: UUID,
    service: WishlistSvc,
    current_user: CurrentUser,
) -> SuccessResponse[WishlistResponse]:
    wishlist = await service.remove_item(current_user, None, item_id)
    return _success(wishlist, current_user, "Product removed from wishlist")


@router.put(
    "/default/items/{item_id}",
    response_model=SuccessResponse[WishlistResponse],
    summary="Update item notes in default wishlist",
)
async def update_default_item_notes(
    item_id: UUID,
    data: WishlistItemNotesUpdate,
    service: WishlistSvc,
    current_user: CurrentUser,
) -> SuccessResponse[WishlistResponse]:
    wishlist = await service.update_item_notes(current_user, None, item_id, data.notes)
    return _success(wishlist, current_user)


# ============================================================
# Wishlists
# ============================================================


@router.get(
    "",
    response_model=ListResponse[WishlistResponse],
    summary="List own wishlists",
)
async def list_wishlists(
    service: WishlistSvc,
    current_user: CurrentUser,
) -> ListResponse[WishlistResponse]:
    wishlists = await service.list_wishlists(current_user)
    return ListResponse(
        results=len(wishlists),
        data=[_to_response(w, current_user) for w in wishlists],
    )


@router.post(
    "",
    response_model=SuccessResponse[WishlistResponse],
    status_code=status.HTTP_201_CREATED,
    summary="Create wishlist",
)
async def create_wishlist(
    data: WishlistCreate,
    service: WishlistSvc,
    current_user: CurrentUser,
) -> SuccessResponse[WishlistResponse]:
    wishlist = await service.create_wishlist(current_user, data)
    return _success(wishlist, current_user)


@router.get(
    "/{wishlist_id}",
    response_model=SuccessResponse[WishlistResponse],
    summary="Get wishlist",
    description="Returns an owned wishlist or another user's public wishlist.",
)
async def get_wishlist(
    wishlist_id: UUID,
    service: WishlistSvc,
    current_user: CurrentUser,
) -> SuccessResponse[WishlistResponse]:
    wishlist = await service.get_wishlist(current_user, wishlist_id)
    return _success(wishlist, current_user)


@router.put(
    "/{wishlist_id}",
    response_model=SuccessResponse[WishlistResponse],
    summary="Update wishlist",
)
async def update_wishlist(
    wishlist_id: UUID,
    data: WishlistUpdate,
    service: WishlistSvc,
    current_user: CurrentUser,
) -> SuccessResponse[WishlistResponse]:
    wishlist = await service.update_wishlist(current_user, wishlist_id, data)
    return _success(wishlist, current_user)


@router.delete(
    "/{wishlist_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete wishlist",
)
async def delete_wishlist(
    wishlist_id: UUID,
    service: WishlistSvc,
    current_user: CurrentUser,
) -> None:
    await service.delete_wishlist(current_user, wishlist_id)


@router.post(
    "/{wishlist_id}/set-default",
    response_model=SuccessResponse[WishlistResponse],
    summary="Set default wishlist",
)
async def set_default_wishlist(
    wishlist_id: UUID,
    service: WishlistSvc,
    current_user: CurrentUser,
) -> SuccessResponse[WishlistResponse]:
    wishlist = await service.set_default(current_user, wishlist_id)
    return _success(wishlist, current_user, "Default wishlist updated")


# ============================================================
# Wishlist items
# ============================================================


@router.post(
    "/{wishlist_id}/items",
    response_model=SuccessResponse[WishlistResponse],
    status_code=status.HTTP_201_CREATED,
    summary="Add product to wishlist",
)
async def add_item(
    wishlist_id: UUID,
    data: WishlistItemCreate,
    service: WishlistSvc,
    current_user: CurrentUser,
) -> SuccessResponse[WishlistResponse]:
    wishlist = await service.add_item(current_user, wishlist_id, data.product_id, data.notes)
    return _success(wishlist, current_user, "Product added to wishlist")


@router.delete(
    "/{wishlist_id}/items/{item_id}",
    response_model=SuccessResponse[WishlistResponse],
    summary="Remove item from wishlist",
)
async def remove_item(
    wishlist_id: UUID,
    item_id: UUID,
    service: WishlistSvc,
    current_user: CurrentUser,
) -> SuccessResponse[WishlistResponse]:
    wishlist = await service.remove_item(current_user, wishlist_id, item_id)
    return _success(wishlist, current_user, "Product removed from wishlist")


@router.put(
    "/{wishlist_id}/items/{item_id}",
    response_model=SuccessResponse[WishlistResponse],
    summary="Update item notes",
)
async def update_item_notes(
    wishlist_id: UUID,
    item_id: UUID,
    data: WishlistItemNotesUpdate,
    service: WishlistSvc,
    current_user: CurrentUser,
) -> SuccessResponse[WishlistResponse]:
    wishlist = await service.update_item_notes(current_user, wishlist_id, item_id, data.notes)
    return _success(wishlist, current_user)


@router.post(
    "/{wishlist_id}/items/{item_id}/move",
    response_model=SuccessResponse[WishlistResponse],
    summary="Move item to another wishlist",
    description="Moves the item and returns the target wishlist.",
)
async def move_item(
    wishlist_id: UUID,
    item_id: UUID,
    data: WishlistItemMove,
    service: WishlistSvc,
    current_user: CurrentUser,
) -> SuccessResponse[WishlistResponse]:
    wishlist = await service.move_item(current_user, wishlist_id, item_id, data.target_wishlist_id)
    return _success(wishlist, current_user, "Product moved to another wishlist")
