"""Alembic environment for the back-office schema.

Migrations run over the same async driver as the application, using the
URL from ``backoffice.config.settings``.
"""

import asyncio
from logging.config import fileConfig

from alembic import context
from sqlalchemy import pool
from sqlalchemy.engine import Connection
from sqlalchemy.ext.asyncio import async_engine_from_config

from backoffice.config import settings
from backoffice.core.database.base import Base

# Import all models to ensure they're registered with Base.metadata
from backoffice.core.permissions.models import Role, UserRole  # noqa: F401
from backoffice.modules.categories.models import Category  # noqa: F401
from backoffice.modules.orders.models import Order, OrderItem  # noqa: F401
from backoffice.modules.products.models import Product  # noqa: F401
from backoffice.modules.users.models import User  # noqa: F401
from backoffice.modules.wishlists.models import Wishlist, WishlistItem  # noqa: F401


config = context.config

if config.config_file_name is not None:
    fileConfig(config.config_file_name)

# ConfigParser treats "%" as interpolation
config.set_main_option("sqlalchemy.url", settings.async_database_url.replace("%", "%%"))

target_metadata = Base.metadata


def run_migrations_offline() -> None:
    """Emit SQL to stdout instead of connecting (``alembic upgrade --sql``)."""
    context.configure(
        url=config.get_main_option("sqlalchemy.url"),
        target_metadata=target_metadata,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
    )

    with context.begin_transaction():
        context.run_migrations()


def do_run_migrations(connection: Connection) -> None:
    context.configure(
        connection=connection,
        target_metadata=target_metadata,
        # SQLite cannot ALTER constraints in place
        render_as_batch=connection.dialect.name == "sqlite",
    )

    with context.begin_transaction():
        context.run_migrations()


async def run_migrations_online() -> None:
    connectable = async_engine_from_config(
        config.get_section(config.config_ini_section, {}),
        prefix="sqlalchemy.",
        poolclass=pool.NullPool,
    )

    async with connectable.connect() as connection:
        await connection.run_sync(do_run_migrations)

    await connectable.dispose()


if context.is_offline_mode():
    run_migrations_offline()
else:
    asyncio.run(run_migrations_online())
