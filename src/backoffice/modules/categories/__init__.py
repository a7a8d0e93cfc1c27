"""Categories module: the product category hierarchy."""

from fastapi import APIRouter


router = APIRouter(prefix="/categories", tags=["categories"])

# Import routes to register them (must be after router is defined)
from backoffice.modules.categories import routes  # noqa: F401, E402
