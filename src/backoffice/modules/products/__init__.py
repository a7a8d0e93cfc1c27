"""Products module: the catalogue that wishlists and orders reference."""

from fastapi import APIRouter


router = APIRouter(prefix="/products", tags=["products"])

# Import routes to register them (must be after router is defined)
from backoffice.modules.products import routes  # noqa: F401, E402
