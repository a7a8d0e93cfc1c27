"""Integration tests for product endpoints."""

from decimal import Decimal
from uuid import uuid4

import pytest
from httpx import AsyncClient


pytestmark = pytest.mark.integration


class TestPublicCatalogue:
    """Published products are readable without a token."""

    async def test_list_hides_unpublished(self, client: AsyncClient, make_product):
        await make_product("Ceramic Mug")
        await make_product("Prototype Kettle", is_published=False)

        response = await client.get("/api/v1/products")

        assert response.status_code == 200
        body = response.json()
        assert [p["name"] for p in body["data"]] == ["Ceramic Mug"]
        assert body["pagination"]["total"] == 1

    async def test_staff_sees_unpublished(
        self, client: AsyncClient, make_product, manager, auth_headers
    ):
        await make_product("Ceramic Mug")
        await make_product("Prototype Kettle", is_published=False)

        response = await client.get("/api/v1/products", headers=auth_headers(manager))

        assert response.json()["pagination"]["total"] == 2

    async def test_customer_does_not_see_unpublished(
        self, client: AsyncClient, make_product, customer, auth_headers
    ):
        draft = await make_product("Prototype Kettle", is_published=False)

        response = await client.get(
            f"/api/v1/products/{draft.id}", headers=auth_headers(customer)
        )

        assert response.status_code == 404

    async def test_get_published_product(self, client: AsyncClient, make_product):
        product = await make_product("Ceramic Mug", price="12.50")

        response = await client.get(f"/api/v1/products/{product.id}")

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["sku"] == product.sku
        assert Decimal(data["price"]) == Decimal("12.50")

    async def test_search(self, client: AsyncClient, make_product):
        await make_product("Ceramic Mug")
        await make_product("Tea Towel")

        response = await client.get("/api/v1/products", params={"search": "MUG"})

        assert [p["name"] for p in response.json()["data"]] == ["Ceramic Mug"]

    async def test_pagination(self, client: AsyncClient, make_product):
        for index in range(3):
            await make_product(f"Mug {index}")

        response = await client.get("/api/v1/products", params={"page": 2, "page_size": 2})

        body = response.json()
        assert body["results"] == 1
        assert body["pagination"] == {
            "total": 3,
            "page": 2,
            "page_size": 2,
            "total_pages": 2,
            "has_prev_page": True,
            "has_next_page": False,
        }

    async def test_invalid_page_size(self, client: AsyncClient):
        response = await client.get("/api/v1/products", params={"page_size": 0})

        assert response.status_code == 400
        assert response.json()["errors"][0]["field"] == "page_size"


class TestManageProducts:
    async def test_manager_creates_product(self, client: AsyncClient, manager, auth_headers):
        response = await client.post(
            "/api/v1/products",
            json={"name": "Blue Cotton T-Shirt", "sku": "TS-BLUE", "price": "19.99"},
            headers=auth_headers(manager),
        )

        assert response.status_code == 201
        data = response.json()["data"]
        assert data["slug"] == "blue-cotton-t-shirt"
        assert data["is_published"] is False
        assert data["quantity"] == 0

    async def test_customer_cannot_create(self, client: AsyncClient, customer, auth_headers):
        response = await client.post(
            "/api/v1/products",
            json={"name": "Mug", "sku": "MUG", "price": "1.00"},
            headers=auth_headers(customer),
        )

        assert response.status_code == 403

    async def test_duplicate_sku(
        self, client: AsyncClient, make_product, manager, auth_headers
    ):
        existing = await make_product()

        response = await client.post(
            "/api/v1/products",
            json={"name": "Other Mug", "sku": existing.sku, "price": "1.00"},
            headers=auth_headers(manager),
        )

        assert response.status_code == 400
        assert response.json()["error_code"] == "product_exists"

    async def test_negative_price_rejected(self, client: AsyncClient, manager, auth_headers):
        response = await client.post(
            "/api/v1/products",
            json={"name": "Mug", "sku": "MUG", "price": "-1"},
            headers=auth_headers(manager),
        )

        assert response.status_code == 400

    async def test_update_product(
        self, client: AsyncClient, make_product, manager, auth_headers
    ):
        product = await make_product(is_published=False)

        response = await client.patch(
            f"/api/v1/products/{product.id}",
            json={"is_published": True, "quantity": 42},
            headers=auth_headers(manager),
        )

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["is_published"] is True
        assert data["quantity"] == 42

    async def test_manager_cannot_delete(
        self, client: AsyncClient, make_product, manager, auth_headers
    ):
        product = await make_product()

        response = await client.delete(
            f"/api/v1/products/{product.id}", headers=auth_headers(manager)
        )

        assert response.status_code == 403

    async def test_admin_deletes(self, client: AsyncClient, make_product, admin, auth_headers):
        product = await make_product()

        response = await client.delete(
            f"/api/v1/products/{product.id}", headers=auth_headers(admin)
        )

        assert response.status_code == 204
        assert (await client.get(f"/api/v1/products/{product.id}")).status_code == 404

    async def test_delete_missing(self, client: AsyncClient, admin, auth_headers):
        response = await client.delete(
            f"/api/v1/products/{uuid4()}", headers=auth_headers(admin)
        )

        assert response.status_code == 404
