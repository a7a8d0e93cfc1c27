"""Wishlists module: customer wishlists and their items."""

from fastapi import APIRouter


router = APIRouter(prefix="/wishlists", tags=["wishlists"])

# Import routes to register them (must be after router is defined)
from backoffice.modules.wishlists import routes  # noqa: F401, E402
