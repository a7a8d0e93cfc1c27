"""Orders module: checkout, order history and fulfilment status."""

from fastapi import APIRouter


router = APIRouter(prefix="/orders", tags=["orders"])

# Import routes to register them (must be after router is defined)
from backoffice.modules.orders import routes  # noqa: F401, E402
