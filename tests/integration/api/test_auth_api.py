"""Integration tests for the auth API."""

import pytest
from httpx import AsyncClient

from tests.conftest import TEST_PASSWORD


@pytest.fixture
async def alice(make_user):
    return await make_user("alice@example.com", "Alice")


class TestSignup:
    @pytest.mark.asyncio
    async def test_signup_creates_account_and_session(self, client: AsyncClient) -> None:
        response = await client.post(
            "/api/v1/auth/signup",
            json={"email": " Bob@Example.com ", "password": "a-long-password", "name": " Bob "},
        )

        assert response.status_code == 201
        data = response.json()
        assert data["token_type"] == "bearer"
        assert data["user"]["email"] == "bob@example.com"
        assert data["user"]["name"] == "Bob"
        headers = {"Authorization": f"Bearer {data['access_token']}"}
        me = await client.get("/api/v1/auth/me", headers=headers)
        assert me.status_code == 200
        assert me.json()["id"] == data["user"]["id"]

    @pytest.mark.asyncio
    async def test_new_account_can_log_in(self, client: AsyncClient) -> None:
        await client.post(
            "/api/v1/auth/signup",
            json={"email": "bob@example.com", "password": "a-long-password"},
        )

        response = await client.post(
            "/api/v1/auth/login",
            json={"email": "bob@example.com", "password": "a-long-password"},
        )

        assert response.status_code == 200

    @pytest.mark.asyncio
    async def test_duplicate_email_conflicts(self, client: AsyncClient, alice) -> None:
        response = await client.post(
            "/api/v1/auth/signup",
            json={"email": "ALICE@example.com", "password": "a-long-password"},
        )

        assert response.status_code == 409
        assert response.json()["error_code"] == "EMAIL_ALREADY_REGISTERED"

    @pytest.mark.asyncio
    async def test_invalid_email(self, client: AsyncClient) -> None:
        response = await client.post(
            "/api/v1/auth/signup",
            json={"email": "not-an-email", "password": "a-long-password"},
        )

        assert response.status_code == 400
        assert response.json()["error_code"] == "INVALID_EMAIL"

    @pytest.mark.asyncio
    async def test_short_password_is_rejected(self, client: AsyncClient) -> None:
        response = await client.post(
            "/api/v1/auth/signup",
            json={"email": "bob@example.com", "password": "short"},
        )

        assert response.status_code == 422


class TestLogin:
    @pytest.mark.asyncio
    async def test_login_returns_session(self, client: AsyncClient, alice) -> None:
        response = await client.post(
            "/api/v1/auth/login",
            json={"email": "Alice@Example.com", "password": TEST_PASSWORD},
        )

        assert response.status_code == 200
        data = response.json()
        assert data["token_type"] == "bearer"
        assert data["user"]["email"] == "alice@example.com"
        assert len(data["access_token"]) >= 32

    @pytest.mark.asyncio
    async def test_wrong_password(self, client: AsyncClient, alice) -> None:
        response = await client.post(
            "/api/v1/auth/login",
            json={"email": "alice@example.com", "password": "wrong"},
        )

        assert response.status_code == 401
        assert response.json()["error_code"] == "INVALID_CREDENTIALS"
        assert response.headers["www-authenticate"] == "Bearer"

    @pytest.mark.asyncio
    async def test_unknown_email_looks_the_same(self, client: AsyncClient) -> None:
        response = await client.post(
            "/api/v1/auth/login",
            json={"email": "nobody@example.com", "password": TEST_PASSWORD},
        )

        assert response.status_code == 401
        assert response.json()["error_code"] == "INVALID_CREDENTIALS"


class TestSession:
    @pytest.mark.asyncio
    async def test_me_with_session(self, client: AsyncClient, alice) -> None:
        login = await client.post(
            "/api/v1/auth/login",
            json={"email": "alice@example.com", "password": TEST_PASSWORD},
        )
        headers = {"Authorization": f"Bearer {login.json()['access_token']}"}

        response = await client.get("/api/v1/auth/me", headers=headers)

        assert response.status_code == 200
        assert response.json()["id"] == str(alice.id)

    @pytest.mark.asyncio
    async def test_me_without_session(self, client: AsyncClient) -> None:
        response = await client.get("/api/v1/auth/me")

        assert response.status_code == 401
        assert response.json()["error_code"] == "UNAUTHORIZED"

    @pytest.mark.asyncio
    async def test_garbage_token(self, client: AsyncClient) -> None:
        response = await client.get(
            "/api/v1/auth/me", headers={"Authorization": "Bearer not-a-session"}
        )

        assert response.status_code == 401
        assert response.json()["error_code"] == "INVALID_TOKEN"

    @pytest.mark.asyncio
    async def test_logout_revokes_session(self, client: AsyncClient, alice, auth_headers) -> None:
        headers = await auth_headers(alice)

        response = await client.post("/api/v1/auth/logout", headers=headers)
        assert response.status_code == 204

        response = await client.get("/api/v1/auth/me", headers=headers)
        assert response.status_code == 401
