"""Tests for health check endpoints."""

from unittest.mock import AsyncMock

import pytest
from httpx import AsyncClient
from sqlalchemy.exc import OperationalError


pytestmark = pytest.mark.integration


class TestHealth:
    async def test_liveness_endpoint(self, client: AsyncClient):
        """Test that liveness endpoint returns 200."""
        response = await client.get("/health/live")

        assert response.status_code == 200
        assert response.json()["status"] == "alive"

    async def test_readiness_endpoint(self, client: AsyncClient, roles):
        """Readiness is green once the database answers and default roles exist."""
        response = await client.get("/health/ready")

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "ready"
        assert data["checks"] == {"database": "ok", "roles": "ok"}

    async def test_readiness_without_seeded_roles(self, client: AsyncClient):
        response = await client.get("/health/ready")

        assert response.status_code == 503
        checks = response.json()["checks"]
        assert checks["database"] == "ok"
        assert checks["roles"].startswith("missing: superadmin, admin")

    async def test_readiness_degraded(self, client: AsyncClient, db, monkeypatch):
        """Readiness reports 503 when the database cannot be reached."""
        monkeypatch.setattr(
            db,
            "execute",
            AsyncMock(side_effect=OperationalError("SELECT 1", {}, Exception("down"))),
        )

        response = await client.get("/health/ready")

        assert response.status_code == 503
        body = response.json()
        assert body["status"] == "degraded"
        assert body["checks"] == {"database": "unavailable"}

    async def test_info_endpoint(self, client: AsyncClient):
        """Test that info endpoint returns application metadata."""
        response = await client.get("/info")

        assert response.status_code == 200
        data = response.json()
        assert data["app"] == "Storefront Back Office"
        assert data["environment"] == "test"
        assert data["version"] == "0.1.0"
        assert data["api_prefix"] == "/api/v1"
        assert data["modules"] == ["categories", "orders", "products", "users", "wishlists"]
