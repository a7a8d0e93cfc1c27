"""Pytest configuration and shared fixtures."""

import os


# Settings are read when the app package is imported, so point it at an
# in-memory database and cheap bcrypt before anything else loads
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ["CREATE_TABLES_ON_STARTUP"] = "false"
os.environ["SEED_ROLES_ON_STARTUP"] = "false"
os.environ["ENVIRONMENT"] = "test"

from collections.abc import AsyncGenerator, Awaitable, Callable  # noqa: E402
from decimal import Decimal  # noqa: E402
from typing import Any  # noqa: E402
from uuid import UUID, uuid4  # noqa: E402

import pytest  # noqa: E402
from fastapi import FastAPI  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy.ext.asyncio import (  # noqa: E402
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool  # noqa: E402

from backoffice.core.auth.backend import create_access_token, hash_password  # noqa: E402
from backoffice.core.database import Base, get_db  # noqa: E402
from backoffice.core.permissions.models import Role, UserRole  # noqa: E402
from backoffice.core.permissions.roles import initialize_roles  # noqa: E402
from backoffice.main import create_app  # noqa: E402

# Import all models to ensure they're registered with Base.metadata
from backoffice.modules.categories.models import Category  # noqa: E402, F401
from backoffice.modules.orders.models import Order, OrderItem  # noqa: E402, F401
from backoffice.modules.products.models import Product  # noqa: E402
from backoffice.modules.users.models import User  # noqa: E402
from backoffice.modules.wishlists.models import Wishlist, WishlistItem  # noqa: E402, F401
from tests.factories import DEFAULT_PASSWORD  # noqa: E402


TEST_DATABASE_URL = "sqlite+aiosqlite://"

UserMaker = Callable[..., Awaitable[User]]
ProductMaker = Callable[..., Awaitable[Product]]


@pytest.fixture
async def engine() -> AsyncGenerator[AsyncEngine, None]:
    """Create a fresh in-memory database for each test."""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest.fixture
async def db(engine: AsyncEngine) -> AsyncGenerator[AsyncSession, None]:
    """Provide the database session shared by the test and the app."""
    session_factory = async_sessionmaker(
        bind=engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )

    async with session_factory() as session:
        yield session
        await session.rollback()


@pytest.fixture
async def app(db: AsyncSession) -> AsyncGenerator[FastAPI, None]:
    """Create test application instance."""
    application = create_app()

    # Override database dependency
    async def override_get_db() -> AsyncGenerator[AsyncSession, None]:
        yield db

    application.dependency_overrides[get_db] = override_get_db

    yield application

    application.dependency_overrides.clear()


@pytest.fixture
async def client(app: FastAPI) -> AsyncGenerator[AsyncClient, None]:
    """Provide async HTTP client for API testing."""
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as client:
        yield client


# ============================================================
# Role, User and Product Fixtures
# ============================================================


@pytest.fixture
async def roles(db: AsyncSession) -> dict[str, Role]:
    """Seed the default roles, keyed by name."""
    return {role.name: role for role in await initialize_roles(db)}


@pytest.fixture
def make_user(db: AsyncSession, roles: dict[str, Role]) -> UserMaker:
    """Factory fixture creating persisted users with the given roles.

    Usage:
        user = await make_user("ada", "customer", first_name="Ada")
    """

    async def _make_user(
        username: str,
        *role_names: str,
        password: str = DEFAULT_PASSWORD,
        **fields: Any,
    ) -> User:
        user = User(
            username=username,
            email=f"{username}@example.com",
            password_hash=hash_password(password),
            **fields,
        )
        db.add(user)
        await db.flush()

        for name in role_names:
            db.add(UserRole(user_id=user.id, role_id=roles[name].id))
        await db.flush()
        await db.refresh(user)
        return user

    return _make_user


@pytest.fixture
def make_product(db: AsyncSession) -> ProductMaker:
    """Factory fixture creating persisted products."""

    async def _make_product(
        name: str = "Ceramic Mug",
        price: str = "10.00",
        quantity: int = 10,
        is_published: bool = True,
        is_digital: bool = False,
        category_id: UUID | None = None,
    ) -> Product:
        suffix = uuid4().hex[:8]
        product = Product(
            name=name,
            slug=f"product-{suffix}",
            sku=f"SKU-{suffix}",
            price=Decimal(price),
            quantity=quantity,
            is_published=is_published,
            is_digital=is_digital,
            category_id=category_id,
        )
        db.add(product)
        await db.flush()
        await db.refresh(product)
        return product

    return _make_product


@pytest.fixture
async def customer(make_user: UserMaker) -> User:
    return await make_user("ada", "customer", first_name="Ada", last_name="Lovelace")


@pytest.fixture
async def other_customer(make_user: UserMaker) -> User:
    return await make_user("grace", "customer", first_name="Grace")


@pytest.fixture
async def admin(make_user: UserMaker) -> User:
    return await make_user("admin", "admin")


@pytest.fixture
async def superadmin(make_user: UserMaker) -> User:
    return await make_user("root", "superadmin")


@pytest.fixture
async def manager(make_user: UserMaker) -> User:
    return await make_user("manager", "manager")


@pytest.fixture
def auth_headers() -> Callable[[User], dict[str, str]]:
    """Build Authorization headers carrying a valid JWT for a user."""

    def _auth_headers(user: User) -> dict[str, str]:
        token = create_access_token(user_id=user.id)
        return {"Authorization": f"Bearer {token}"}

    return _auth_headers
