"""Integration tests for auth endpoints."""

import pytest
from httpx import AsyncClient

from backoffice.modules.users.repos import UserRepository
from tests.factories import DEFAULT_PASSWORD, RegisterRequestFactory


pytestmark = pytest.mark.integration


async def _no_conflicts(self, *args, **kwargs):
    return []


class TestRegistration:
    """Tests for customer registration endpoint."""

    async def test_register_success(self, client: AsyncClient, roles):
        """POST /api/v1/auth/register should create a customer and return a token."""
        response = await client.post(
            "/api/v1/auth/register",
            json={
                "username": "newuser",
                "email": "newuser@example.com",
                "password": "SecurePass123!",
                "first_name": "New",
            },
        )

        assert response.status_code == 201
        body = response.json()
        assert body["status"] == "success"
        user = body["data"]["user"]
        assert user["email"] == "newuser@example.com"
        assert user["last_login"] is not None
        assert [role["name"] for role in user["roles"]] == ["customer"]
        assert "password_hash" not in user
        token = body["data"]["token"]
        assert token["token_type"] == "bearer"
        assert token["expires_in"] > 0

        me = await client.get(
            "/api/v1/auth/me",
            headers={"Authorization": f"Bearer {token['access_token']}"},
        )
        assert me.status_code == 200
        assert me.json()["data"]["username"] == "newuser"

    async def test_register_duplicate_email(self, client: AsyncClient, customer):
        """POST /api/v1/auth/register should reject a duplicate email."""
        payload = RegisterRequestFactory.build(email=customer.email).model_dump()

        response = await client.post("/api/v1/auth/register", json=payload)

        assert response.status_code == 400
        body = response.json()
        assert body["status"] == "error"
        assert body["error_code"] == "user_exists"
        assert body["path"] == "/api/v1/auth/register"

    async def test_register_duplicate_past_precheck(
        self, client: AsyncClient, customer, monkeypatch
    ):
        """A duplicate that slips past the lookup is caught by the unique constraint."""
        monkeypatch.setattr(UserRepository, "find_conflicting", _no_conflicts)
        payload = RegisterRequestFactory.build(email=customer.email).model_dump()

        response = await client.post("/api/v1/auth/register", json=payload)

        assert response.status_code == 400
        assert response.json()["error_code"] == "user_exists"

    async def test_register_invalid_payload(self, client: AsyncClient, roles):
        """POST /api/v1/auth/register should return 400 with field errors."""
        response = await client.post(
            "/api/v1/auth/register",
            json={"username": "x", "email": "not-an-email", "password": "short"},
        )

        assert response.status_code == 400
        body = response.json()
        assert body["error_code"] == "validation_error"
        fields = {error["field"] for error in body["errors"]}
        assert {"username", "email", "password"} <= fields

    async def test_register_without_seeded_roles(self, client: AsyncClient):
        """Registration fails loudly when the customer role is missing."""
        payload = RegisterRequestFactory.build().model_dump()

        response = await client.post("/api/v1/auth/register", json=payload)

        assert response.status_code == 500
        assert response.json()["error_code"] == "role_missing"


class TestLogin:
    """Tests for login endpoint."""

    async def test_login_success(self, client: AsyncClient, customer):
        """POST /api/v1/auth/login should return a token for valid credentials."""
        response = await client.post(
            "/api/v1/auth/login",
            json={"email": customer.email, "password": DEFAULT_PASSWORD},
        )

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["token"]["access_token"]
        assert data["user"]["id"] == str(customer.id)
        assert data["user"]["last_login"] is not None

    async def test_login_email_is_case_insensitive(self, client: AsyncClient, customer):
        response = await client.post(
            "/api/v1/auth/login",
            json={"email": customer.email.upper(), "password": DEFAULT_PASSWORD},
        )

        assert response.status_code == 200

    async def test_login_wrong_password(self, client: AsyncClient, customer):
        """POST /api/v1/auth/login should reject a wrong password."""
        response = await client.post(
            "/api/v1/auth/login",
            json={"email": customer.email, "password": "WrongPassword!"},
        )

        assert response.status_code == 401
        assert response.json()["error_code"] == "invalid_credentials"

    async def test_login_unknown_email(self, client: AsyncClient, roles):
        response = await client.post(
            "/api/v1/auth/login",
            json={"email": "nobody@example.com", "password": DEFAULT_PASSWORD},
        )

        assert response.status_code == 401
        assert response.json()["error_code"] == "invalid_credentials"

    async def test_login_inactive_user(self, client: AsyncClient, make_user):
        user = await make_user("sleepy", "customer", is_active=False)

        response = await client.post(
            "/api/v1/auth/login",
            json={"email": user.email, "password": DEFAULT_PASSWORD},
        )

        assert response.status_code == 401
        assert response.json()["error_code"] == "account_inactive"


class TestCurrentUser:
    """Tests for the current user endpoint."""

    async def test_me_requires_token(self, client: AsyncClient):
        response = await client.get("/api/v1/auth/me")

        assert response.status_code == 401
        assert response.json()["error_code"] == "missing_token"

    async def test_me_rejects_invalid_token(self, client: AsyncClient):
        response = await client.get(
            "/api/v1/auth/me",
            headers={"Authorization": "Bearer not-a-jwt"},
        )

        assert response.status_code == 401
        assert response.json()["error_code"] == "invalid_token"

    async def test_me_rejects_deactivated_user(
        self, client: AsyncClient, make_user, auth_headers
    ):
        user = await make_user("gone", "customer", is_active=False)

        response = await client.get("/api/v1/auth/me", headers=auth_headers(user))

        assert response.status_code == 401
        assert response.json()["error_code"] == "user_inactive"

    async def test_request_id_is_echoed(self, client: AsyncClient):
        response = await client.get(
            "/api/v1/auth/me",
            headers={"X-Request-ID": "req-123"},
        )

        assert response.headers["X-Request-ID"] == "req-123"
        assert response.json()["request_id"] == "req-123"

    async def test_unsafe_request_id_is_replaced(self, client: AsyncClient):
        response = await client.get(
            "/api/v1/auth/me",
            headers={"X-Request-ID": "bad id; drop table"},
        )

        request_id = response.headers["X-Request-ID"]
        assert request_id != "bad id; drop table"
        assert response.json()["request_id"] == request_id
