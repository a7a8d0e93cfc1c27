"""FastAPI application factory."""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from backoffice import __version__
from backoffice.api.router import api_router
from backoffice.config import settings
from backoffice.core.auth import RequestIdMiddleware
from backoffice.core.database import Base, async_engine, async_session_factory
from backoffice.core.errors import register_exception_handlers
from backoffice.core.logging import RequestLoggingMiddleware, configure_logging
from backoffice.core.permissions.roles import initialize_roles


configure_logging(settings.log_level, json_logs=settings.is_production)

logger = structlog.get_logger()


async def create_tables() -> None:
    """Create all tables that do not exist yet, bypassing migrations."""
    async with async_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("database_tables_created")


async def seed_roles() -> None:
    """Create or reconcile the default roles in their own transaction."""
    async with async_session_factory() as session, session.begin():
        await initialize_roles(session)


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncGenerator[None, None]:
    """Prepare the schema and default roles on startup; release the pool on shutdown."""
    logger.info(
        "application_startup",
        app_name=settings.app_name,
        environment=settings.environment,
    )

    if settings.create_tables_on_startup:
        await create_tables()
    if settings.seed_roles_on_startup:
        await seed_roles()

    yield

    logger.info("application_shutdown")
    await async_engine.dispose()


def _install_middleware(app: FastAPI) -> None:
    """Add middleware; the last one added is the outermost."""
    cors_origins = settings.cors_origins
    if settings.is_development and not cors_origins:
        cors_origins = ["http://localhost:3000", "http://localhost:5173"]

    app.add_middleware(
        CORSMiddleware,
        allow_origins=cors_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
        allow_headers=["Authorization", "Content-Type", "X-Request-ID"],
    )

    app.add_middleware(RequestLoggingMiddleware)
    # Outermost, so the request id is bound before anything logs
    app.add_middleware(RequestIdMiddleware)


def create_app() -> FastAPI:
    """Build the back-office application: middleware, error handlers and routes."""
    docs_enabled = not settings.is_production
    app = FastAPI(
        title=settings.app_name,
        description="Back-office API for users, roles, products, wishlists and orders",
        version=__version__,
        debug=settings.debug,
        lifespan=lifespan,
        docs_url="/docs" if docs_enabled else None,
        redoc_url="/redoc" if docs_enabled else None,
        openapi_url="/openapi.json" if docs_enabled else None,
    )
    _install_middleware(app)
    register_exception_handlers(app)

    app.include_router(api_router)

    return app


app = create_app()
