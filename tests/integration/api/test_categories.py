"""Integration tests for category endpoints."""

from uuid import UUID, uuid4

import pytest
from httpx import AsyncClient


pytestmark = pytest.mark.integration

BASE = "/api/v1/categories"


async def _create(client: AsyncClient, headers: dict[str, str], **body) -> dict:
    response = await client.post(BASE, json=body, headers=headers)
    assert response.status_code == 201, response.text
    return response.json()["data"]


class TestBrowseCategories:
    async def test_public_list_hides_inactive(
        self, client: AsyncClient, manager, auth_headers
    ):
        headers = auth_headers(manager)
        await _create(client, headers, name="Kitchen")
        await _create(client, headers, name="Seasonal", is_active=False)

        public = await client.get(BASE)
        staff = await client.get(BASE, headers=headers)

        assert public.status_code == 200
        assert [c["name"] for c in public.json()["data"]] == ["Kitchen"]
        assert staff.json()["pagination"]["total"] == 2

    async def test_inactive_category_is_not_found_publicly(
        self, client: AsyncClient, manager, auth_headers
    ):
        hidden = await _create(client, auth_headers(manager), name="Seasonal", is_active=False)

        response = await client.get(f"{BASE}/{hidden['id']}")

        assert response.status_code == 404

    async def test_children_and_roots(self, client: AsyncClient, manager, auth_headers):
        headers = auth_headers(manager)
        kitchen = await _create(client, headers, name="Kitchen")
        mugs = await _create(client, headers, name="Mugs", parent_id=kitchen["id"])

        children = await client.get(BASE, params={"parent_id": kitchen["id"]})
        roots = await client.get(BASE, params={"roots_only": True})

        assert mugs["level"] == 1
        assert mugs["slug"] == "mugs"
        assert [c["id"] for c in children.json()["data"]] == [mugs["id"]]
        assert [c["id"] for c in roots.json()["data"]] == [kitchen["id"]]

    async def test_tree(self, client: AsyncClient, manager, auth_headers):
        headers = auth_headers(manager)
        kitchen = await _create(client, headers, name="Kitchen")
        mugs = await _create(client, headers, name="Mugs", parent_id=kitchen["id"])
        await _create(client, headers, name="Travel Mugs", parent_id=mugs["id"])
        await _create(client, headers, name="Hidden", parent_id=kitchen["id"], is_active=False)

        response = await client.get(f"{BASE}/tree")

        assert response.status_code == 200
        [root] = response.json()["data"]
        assert root["name"] == "Kitchen"
        [child] = root["children"]
        assert child["name"] == "Mugs"
        assert [c["name"] for c in child["children"]] == ["Travel Mugs"]

    async def test_products_in_category(
        self, client: AsyncClient, manager, auth_headers, make_product
    ):
        kitchen = await _create(client, auth_headers(manager), name="Kitchen")
        await make_product("Ceramic Mug", category_id=UUID(kitchen["id"]))
        await make_product(
            "Prototype Kettle", is_published=False, category_id=UUID(kitchen["id"])
        )
        await make_product("Garden Hose")

        public = await client.get(f"{BASE}/{kitchen['id']}/products")
        staff = await client.get(
            f"{BASE}/{kitchen['id']}/products", headers=auth_headers(manager)
        )
        filtered = await client.get("/api/v1/products", params={"category_id": kitchen["id"]})

        assert [p["name"] for p in public.json()["data"]] == ["Ceramic Mug"]
        assert staff.json()["pagination"]["total"] == 2
        assert [p["name"] for p in filtered.json()["data"]] == ["Ceramic Mug"]

    async def test_products_of_missing_category(self, client: AsyncClient):
        response = await client.get(f"{BASE}/{uuid4()}/products")

        assert response.status_code == 404


class TestManageCategories:
    async def test_customer_cannot_create(self, client: AsyncClient, customer, auth_headers):
        response = await client.post(
            BASE, json={"name": "Kitchen"}, headers=auth_headers(customer)
        )

        assert response.status_code == 403

    async def test_anonymous_cannot_create(self, client: AsyncClient):
        response = await client.post(BASE, json={"name": "Kitchen"})

        assert response.status_code == 401

    async def test_duplicate_slug(self, client: AsyncClient, manager, auth_headers):
        headers = auth_headers(manager)
        await _create(client, headers, name="Kitchen")

        response = await client.post(BASE, json={"name": "KITCHEN"}, headers=headers)

        assert response.status_code == 400
        assert response.json()["error_code"] == "category_exists"

    async def test_unknown_parent(self, client: AsyncClient, manager, auth_headers):
        response = await client.post(
            BASE,
            json={"name": "Mugs", "parent_id": str(uuid4())},
            headers=auth_headers(manager),
        )

        assert response.status_code == 400
        assert response.json()["error_code"] == "parent_not_found"

    async def test_move_category(self, client: AsyncClient, manager, auth_headers):
        headers = auth_headers(manager)
        kitchen = await _create(client, headers, name="Kitchen")
        mugs = await _create(client, headers, name="Mugs", parent_id=kitchen["id"])
        travel = await _create(client, headers, name="Travel Mugs", parent_id=mugs["id"])

        moved = await client.patch(
            f"{BASE}/{mugs['id']}", json={"parent_id": None}, headers=headers
        )
        cycle = await client.patch(
            f"{BASE}/{mugs['id']}", json={"parent_id": travel["id"]}, headers=headers
        )
        grandchild = await client.get(f"{BASE}/{travel['id']}")

        assert moved.status_code == 200
        assert moved.json()["data"]["level"] == 0
        assert grandchild.json()["data"]["level"] == 1
        assert cycle.status_code == 400
        assert cycle.json()["error_code"] == "category_cycle"

    async def test_manager_cannot_delete(self, client: AsyncClient, manager, auth_headers):
        category = await _create(client, auth_headers(manager), name="Kitchen")

        response = await client.delete(
            f"{BASE}/{category['id']}", headers=auth_headers(manager)
        )

        assert response.status_code == 403

    async def test_delete_guards(
        self, client: AsyncClient, admin, auth_headers, make_product
    ):
        headers = auth_headers(admin)
        kitchen = await _create(client, headers, name="Kitchen")
        mugs = await _create(client, headers, name="Mugs", parent_id=kitchen["id"])
        await make_product(category_id=UUID(mugs["id"]))

        with_children = await client.delete(f"{BASE}/{kitchen['id']}", headers=headers)
        with_products = await client.delete(f"{BASE}/{mugs['id']}", headers=headers)

        assert with_children.json()["error_code"] == "category_has_children"
        assert with_products.json()["error_code"] == "category_has_products"

    async def test_delete(self, client: AsyncClient, admin, auth_headers):
        headers = auth_headers(admin)
        category = await _create(client, headers, name="Kitchen")

        response = await client.delete(f"{BASE}/{category['id']}", headers=headers)
        missing = await client.get(f"{BASE}/{category['id']}", headers=headers)

        assert response.status_code == 204
        assert missing.status_code == 404


class TestProductCategory:
    async def test_unknown_category_rejected(self, client: AsyncClient, manager, auth_headers):
        response = await client.post(
            "/api/v1/products",
            json={
                "name": "Ceramic Mug",
                "sku": "MUG-001",
                "price": "10.00",
                "category_id": str(uuid4()),
            },
            headers=auth_headers(manager),
        )

        assert response.status_code == 400
        assert response.json()["errors"][0]["field"] == "category_id"

    async def test_assign_and_clear_category(
        self, client: AsyncClient, manager, auth_headers, make_product
    ):
        headers = auth_headers(manager)
        kitchen = await _create(client, headers, name="Kitchen")
        product = await make_product()

        assigned = await client.patch(
            f"/api/v1/products/{product.id}",
            json={"category_id": kitchen["id"]},
            headers=headers,
        )
        cleared = await client.patch(
            f"/api/v1/products/{product.id}", json={"category_id": None}, headers=headers
        )

        assert assigned.json()["data"]["category_id"] == kitchen["id"]
        assert cleared.json()["data"]["category_id"] is None
