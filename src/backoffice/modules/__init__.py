"""Resource modules (users, products, wishlists, orders).

Each subpackage exposes ``router`` from its ``__init__``; the API mounts
whatever is found here under ``/api/v1``.
"""

from importlib import import_module
from pathlib import Path

import structlog
from fastapi import APIRouter


logger = structlog.get_logger()


def discover_modules() -> list[APIRouter]:
    """Import every resource subpackage and collect its router, in name order.

    Raises:
        TypeError: If a subpackage defines ``router`` as something other than an APIRouter
    """
    routers: list[APIRouter] = []
    for path in sorted(Path(__file__).parent.iterdir()):
        if not path.is_dir() or path.name.startswith("_"):
            continue
        module = import_module(f"{__name__}.{path.name}")
        router = getattr(module, "router", None)
        if router is None:
            continue
        if not isinstance(router, APIRouter):
            raise TypeError(f"{module.__name__}.router is not an APIRouter")
        routers.append(router)
        logger.info("module_loaded", module=path.name, prefix=router.prefix)
    return routers
