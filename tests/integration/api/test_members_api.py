"""Integration tests for the members API."""

from urllib.parse import parse_qs, urlparse

import pytest
from httpx import AsyncClient

from domain.entities.membership import ContentPermission, MemberRole
from domain.entities.resource import ResourceType
from tests.conftest import api_path


@pytest.fixture
async def owner(make_user):
    return await make_user("olive@example.com", "Olive")


@pytest.fixture
async def alice(make_user):
    return await make_user("alice@example.com", "Alice")


@pytest.fixture
async def dashboard(make_resource, owner):
    return await make_resource(owner, ResourceType.DASHBOARD, name="Weekly metrics")


class TestListMembers:
    @pytest.mark.asyncio
    async def test_owner_is_listed_first(
        self, client: AsyncClient, auth_headers, owner, alice, dashboard, add_member
    ) -> None:
        await add_member(dashboard, alice, permission=ContentPermission.VIEW)

        response = await client.get(
            api_path("dashboards", dashboard.id, "/members"), headers=await auth_headers(alice)
        )

        assert response.status_code == 200
        data = response.json()
        assert data["meta"]["total"] == 2
        assert [(m["email"], m["role"]) for m in data["data"]] == [
            ("olive@example.com", "owner"),
            ("alice@example.com", "member"),
        ]
        assert data["data"][1]["permission"] == "view"

    @pytest.mark.asyncio
    async def test_stranger_is_forbidden(
        self, client: AsyncClient, auth_headers, alice, dashboard
    ) -> None:
        response = await client.get(
            api_path("dashboards", dashboard.id, "/members"), headers=await auth_headers(alice)
        )

        assert response.status_code == 403

    @pytest.mark.asyncio
    async def test_requires_login(self, client: AsyncClient, dashboard) -> None:
        response = await client.get(api_path("dashboards", dashboard.id, "/members"))

        assert response.status_code == 401


class TestManageMembers:
    @pytest.mark.asyncio
    async def test_add_update_remove(
        self, client: AsyncClient, auth_headers, owner, alice, dashboard
    ) -> None:
        headers = await auth_headers(owner)
        members = api_path("dashboards", dashboard.id, "/members")

        added = await client.post(members, json={"user_id": str(alice.id)}, headers=headers)
        assert added.status_code == 201
        assert added.json()["meta"]["total"] == 2

        updated = await client.patch(
            f"{members}/{alice.id}", json={"role": "admin"}, headers=headers
        )
        assert updated.status_code == 200
        assert updated.json()["data"][1]["role"] == "admin"

        removed = await client.delete(f"{members}/{alice.id}", headers=headers)
        assert removed.status_code == 204

        access = await client.get(
            api_path("dashboards", dashboard.id, "/access"), headers=await auth_headers(alice)
        )
        assert access.status_code == 403

    @pytest.mark.asyncio
    async def test_add_twice_conflicts(
        self, client: AsyncClient, auth_headers, owner, alice, dashboard, add_member
    ) -> None:
        await add_member(dashboard, alice)

        response = await client.post(
            api_path("dashboards", dashboard.id, "/members"),
            json={"user_id": str(alice.id)},
            headers=await auth_headers(owner),
        )

        assert response.status_code == 409
        assert response.json()["error_code"] == "ALREADY_A_MEMBER"

    @pytest.mark.asyncio
    async def test_owner_cannot_be_removed(
        self, client: AsyncClient, auth_headers, owner, alice, dashboard, add_member
    ) -> None:
        await add_member(dashboard, alice, MemberRole.ADMIN)

        response = await client.delete(
            api_path("dashboards", dashboard.id, f"/members/{owner.id}"),
            headers=await auth_headers(alice),
        )

        assert response.status_code == 400
        assert response.json()["error_code"] == "CANNOT_MODIFY_OWNER"

    @pytest.mark.asyncio
    async def test_plain_member_cannot_add(
        self, client: AsyncClient, auth_headers, alice, dashboard, add_member, make_user
    ) -> None:
        await add_member(dashboard, alice)
        bob = await make_user("bob@example.com")

        response = await client.post(
            api_path("dashboards", dashboard.id, "/members"),
            json={"user_id": str(bob.id)},
            headers=await auth_headers(alice),
        )

        assert response.status_code == 403

    @pytest.mark.asyncio
    async def test_empty_update(
        self, client: AsyncClient, auth_headers, owner, alice, dashboard, add_member
    ) -> None:
        await add_member(dashboard, alice)

        response = await client.patch(
            api_path("dashboards", dashboard.id, f"/members/{alice.id}"),
            json={},
            headers=await auth_headers(owner),
        )

        assert response.status_code == 400
        assert response.json()["error_code"] == "NO_CHANGES"

    @pytest.mark.asyncio
    async def test_promoted_viewer_gets_full_admin_rights(
        self, client: AsyncClient, auth_headers, owner, alice, dashboard
    ) -> None:
        owner_headers = await auth_headers(owner)
        alice_headers = await auth_headers(alice)
        invited = await client.post(
            api_path("dashboards", dashboard.id, "/invitations"),
            json={"email": "alice@example.com", "permission": "view"},
            headers=owner_headers,
        )
        token = parse_qs(urlparse(invited.json()["accept_url"]).query)["invite"][0]
        accepted = await client.post(
            "/api/v1/invitations/accept", json={"token": token}, headers=alice_headers
        )
        assert accepted.json()["permission"] == "view"

        promoted = await client.patch(
            api_path("dashboards", dashboard.id, f"/members/{alice.id}"),
            json={"role": "admin"},
            headers=owner_headers,
        )
        assert promoted.status_code == 200

        access = await client.get(
            api_path("dashboards", dashboard.id, "/access"), headers=alice_headers
        )
        data = access.json()
        assert data["role"] == "admin"
        assert data["can_manage_members"] is True
        assert data["can_comment"] is True
        assert data["can_edit_content"] is True
        assert data["can_manage_content"] is True
