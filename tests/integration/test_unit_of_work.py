"""Requests served through the real get_db session: commit on success, rollback on error.

The shared ``client`` fixture overrides get_db with a session that never
commits; these tests point the application's session factory at the test
engine instead and check what a fresh session sees afterwards.
"""

from collections.abc import AsyncGenerator
from decimal import Decimal
from uuid import UUID

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from backoffice.core.auth.backend import create_access_token, hash_password
from backoffice.core.database import session as session_module
from backoffice.core.permissions.models import UserRole
from backoffice.core.permissions.roles import initialize_roles
from backoffice.main import create_app
from backoffice.modules.orders.models import Order
from backoffice.modules.products.models import Product
from backoffice.modules.users.models import User
from backoffice.modules.wishlists.models import WishlistItem
from backoffice.modules.wishlists.repos import WishlistRepository


pytestmark = pytest.mark.integration

Factory = async_sessionmaker[AsyncSession]


@pytest.fixture
def session_factory(engine: AsyncEngine, monkeypatch) -> Factory:
    factory = async_sessionmaker(
        bind=engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )
    monkeypatch.setattr(session_module, "async_session_factory", factory)
    return factory


@pytest.fixture
async def client(session_factory: Factory) -> AsyncGenerator[AsyncClient, None]:
    async with AsyncClient(
        transport=ASGITransport(app=create_app()),
        base_url="http://test",
    ) as client:
        yield client


@pytest.fixture
async def shopper(session_factory: Factory) -> User:
    async with session_factory() as session:
        roles = {role.name: role for role in await initialize_roles(session)}
        user = User(
            username="ada",
            email="ada@example.com",
            password_hash=hash_password("correct-horse-battery"),
            first_name="Ada",
        )
        session.add(user)
        await session.flush()
        session.add(UserRole(user_id=user.id, role_id=roles["customer"].id))
        await session.commit()
        return user


@pytest.fixture
def headers(shopper: User) -> dict[str, str]:
    return {"Authorization": f"Bearer {create_access_token(user_id=shopper.id)}"}


async def _add_product(factory: Factory, name: str, quantity: int) -> Product:
    async with factory() as session:
        slug = name.lower().replace(" ", "-")
        product = Product(
            name=name,
            slug=slug,
            sku=slug.upper(),
            price=Decimal("10.00"),
            quantity=quantity,
            is_published=True,
        )
        session.add(product)
        await session.commit()
        return product


async def _stock(factory: Factory, product_id: UUID) -> int:
    async with factory() as session:
        return (await session.get(Product, product_id)).quantity


async def _order_count(factory: Factory) -> int:
    async with factory() as session:
        return await session.scalar(select(func.count()).select_from(Order))


def _order(*lines: tuple[Product, int]) -> dict:
    address = {"street": "12 Engine Row", "city": "London"}
    return {
        "items": [{"product_id": str(p.id), "quantity": quantity} for p, quantity in lines],
        "shipping_address": address,
        "billing_address": address,
    }


class TestOrderTransaction:
    async def test_placed_order_is_committed(self, client, session_factory, headers):
        mug = await _add_product(session_factory, "Ceramic Mug", quantity=5)

        response = await client.post("/api/v1/orders", json=_order((mug, 2)), headers=headers)

        assert response.status_code == 201
        assert await _stock(session_factory, mug.id) == 3
        assert await _order_count(session_factory) == 1

    async def test_failing_line_rolls_back_earlier_lines(
        self, client, session_factory, headers
    ):
        mug = await _add_product(session_factory, "Ceramic Mug", quantity=5)
        lamp = await _add_product(session_factory, "Desk Lamp", quantity=0)

        response = await client.post(
            "/api/v1/orders", json=_order((mug, 2), (lamp, 1)), headers=headers
        )

        assert response.status_code == 400
        assert response.json()["error_code"] == "insufficient_stock"
        assert await _stock(session_factory, mug.id) == 5
        assert await _order_count(session_factory) == 0


class TestWishlistMoveTransaction:
    async def test_move_failing_on_flush_leaves_item_in_source(
        self, client, session_factory, headers, monkeypatch
    ):
        base = "/api/v1/wishlists"
        mug = await _add_product(session_factory, "Ceramic Mug", quantity=5)
        source = (await client.post(base, json={"name": "Source"}, headers=headers)).json()
        target = (await client.post(base, json={"name": "Target"}, headers=headers)).json()
        source_id, target_id = source["data"]["id"], target["data"]["id"]
        for wishlist_id in (source_id, target_id):
            added = await client.post(
                f"{base}/{wishlist_id}/items",
                json={"product_id": str(mug.id)},
                headers=headers,
            )
            assert added.status_code == 201, added.text
        item_id = added.json()["data"]["items"][0]["id"]
        source_item_id = (await client.get(f"{base}/{source_id}", headers=headers)).json()[
            "data"
        ]["items"][0]["id"]

        # The duplicate in the target is only caught by the unique constraint at flush
        async def _no_duplicate(self, wishlist_id, product_id):
            return None

        monkeypatch.setattr(WishlistRepository, "find_item_by_product", _no_duplicate)

        response = await client.post(
            f"{base}/{source_id}/items/{source_item_id}/move",
            json={"target_wishlist_id": target_id},
            headers=headers,
        )

        assert response.status_code == 400
        async with session_factory() as session:
            rows = await session.execute(select(WishlistItem.id, WishlistItem.wishlist_id))
            placement = {str(row.id): str(row.wishlist_id) for row in rows}
        assert placement == {source_item_id: source_id, item_id: target_id}
