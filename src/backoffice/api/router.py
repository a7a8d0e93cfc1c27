"""Top-level routing: unversioned health checks plus the versioned back-office API."""

from typing import Any

import structlog
from fastapi import APIRouter, status
from fastapi.responses import JSONResponse
from pydantic import BaseModel
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from backoffice import __version__
from backoffice.api.dependencies import DBSession
from backoffice.config import settings
from backoffice.core.auth.routes import router as auth_router
from backoffice.core.permissions.roles import missing_default_roles
from backoffice.core.permissions.routes import router as roles_router
from backoffice.modules import discover_modules


logger = structlog.get_logger()


class HealthResponse(BaseModel):
    status: str


class ReadinessResponse(BaseModel):
    status: str
    checks: dict[str, str]


async def _check_database(db: DBSession) -> str:
    try:
        await db.execute(text("SELECT 1"))
    except (SQLAlchemyError, OSError) as e:
        logger.warning("readiness_check_failed", check="database", error=str(e))
        return "unavailable"
    return "ok"


async def _check_roles(db: DBSession) -> str:
    # Registration and every role guard depend on the seeded defaults
    try:
        missing = await missing_default_roles(db)
    except SQLAlchemyError as e:
        logger.warning("readiness_check_failed", check="roles", error=str(e))
        return "unavailable"
    if missing:
        logger.warning("readiness_check_failed", check="roles", missing=missing)
        return "missing: " + ", ".join(missing)
    return "ok"


health_router = APIRouter(tags=["health"])


@health_router.get("/health/live", response_model=HealthResponse, summary="Liveness check")
async def liveness() -> HealthResponse:
    return HealthResponse(status="alive")


@health_router.get(
    "/health/ready",
    response_model=ReadinessResponse,
    summary="Readiness check",
    description="Checks database connectivity and that the default roles are seeded.",
)
async def readiness(db: DBSession) -> JSONResponse:
    checks = {"database": await _check_database(db)}
    if checks["database"] == "ok":
        checks["roles"] = await _check_roles(db)

    ready = all(result == "ok" for result in checks.values())
    return JSONResponse(
        status_code=status.HTTP_200_OK if ready else status.HTTP_503_SERVICE_UNAVAILABLE,
        content={"status": "ready" if ready else "degraded", "checks": checks},
    )


v1_router = APIRouter(prefix="/api/v1")
v1_router.include_router(auth_router)
v1_router.include_router(roles_router)

mounted_modules = discover_modules()
for module_router in mounted_modules:
    v1_router.include_router(module_router)


@health_router.get("/info", summary="Application info")
async def info() -> dict[str, Any]:
    """Report the running build and which resource modules are mounted."""
    return {
        "app": settings.app_name,
        "version": __version__,
        "environment": settings.environment,
        "api_prefix": v1_router.prefix,
        "modules": [module_router.prefix.strip("/") for module_router in mounted_modules],
    }


api_router = APIRouter()
api_router.include_router(health_router)
api_router.include_router(v1_router)
