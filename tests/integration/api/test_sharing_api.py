"""Integration tests for sharing settings and share links."""

import pytest
from httpx import AsyncClient

from domain.entities.membership import MemberRole
from domain.entities.resource import ResourceType
from tests.conftest import api_path


@pytest.fixture
async def owner(make_user):
    return await make_user("olive@example.com", "Olive")


@pytest.fixture
async def project(make_resource, owner):
    return await make_resource(owner, name="Launch plan")


async def _enable_link(client: AsyncClient, headers: dict[str, str], project) -> str:
    response = await client.patch(
        api_path("projects", project.id, "/sharing"),
        json={"generate_token": True},
        headers=headers,
    )
    assert response.status_code == 200, response.text
    return response.json()["share_token"]


class TestSharingSettings:
    @pytest.mark.asyncio
    async def test_owner_sees_link(self, client: AsyncClient, auth_headers, owner, project) -> None:
        headers = await auth_headers(owner)
        token = await _enable_link(client, headers, project)

        response = await client.get(api_path("projects", project.id, "/sharing"), headers=headers)

        data = response.json()
        assert data["can_manage"] is True
        assert data["share_token"] == token
        assert data["share_link"].endswith(f"/share/project/{token}")
        assert len(token) == 64

    @pytest.mark.asyncio
    async def test_member_sees_flags_only(
        self, client: AsyncClient, auth_headers, owner, project, make_user, add_member
    ) -> None:
        await _enable_link(client, await auth_headers(owner), project)
        alice = await make_user("alice@example.com")
        await add_member(project, alice)

        response = await client.get(
            api_path("projects", project.id, "/sharing"), headers=await auth_headers(alice)
        )

        data = response.json()
        assert response.status_code == 200
        assert data["can_manage"] is False
        assert data["share_token"] is None
        assert data["share_link"] is None

    @pytest.mark.asyncio
    async def test_admin_cannot_change_sharing(
        self, client: AsyncClient, auth_headers, project, make_user, add_member
    ) -> None:
        admin = await make_user("admin@example.com")
        await add_member(project, admin, MemberRole.ADMIN)

        response = await client.patch(
            api_path("projects", project.id, "/sharing"),
            json={"is_public": True},
            headers=await auth_headers(admin),
        )

        assert response.status_code == 403

    @pytest.mark.asyncio
    async def test_empty_update(self, client: AsyncClient, auth_headers, owner, project) -> None:
        response = await client.patch(
            api_path("projects", project.id, "/sharing"),
            json={},
            headers=await auth_headers(owner),
        )

        assert response.status_code == 400
        assert response.json()["error_code"] == "NO_CHANGES"

    @pytest.mark.asyncio
    async def test_make_public(self, client: AsyncClient, auth_headers, owner, project) -> None:
        response = await client.patch(
            api_path("projects", project.id, "/sharing"),
            json={"is_public": True, "workspace_shared": True},
            headers=await auth_headers(owner),
        )

        assert response.json()["is_public"] is True
        assert response.json()["workspace_shared"] is True
        anonymous = await client.get(api_path("projects", project.id))
        assert anonymous.status_code == 200
        assert anonymous.json()["access"]["role"] == "guest-view"


class TestShareLinks:
    @pytest.mark.asyncio
    async def test_link_opens_private_resource(
        self, client: AsyncClient, auth_headers, owner, project
    ) -> None:
        token = await _enable_link(client, await auth_headers(owner), project)

        response = await client.get(f"/api/v1/share/{ResourceType.PROJECT.value}/{token}")

        assert response.status_code == 200
        data = response.json()
        assert data["id"] == str(project.id)
        assert data["access"]["role"] == "guest-view"
        assert data["access"]["source"] == "share_link"
        assert data["access"]["can_comment"] is False

    @pytest.mark.asyncio
    async def test_header_token_opens_private_resource(
        self, client: AsyncClient, auth_headers, owner, project
    ) -> None:
        token = await _enable_link(client, await auth_headers(owner), project)

        response = await client.get(
            api_path("projects", project.id), headers={"X-Share-Token": token}
        )

        assert response.status_code == 200
        assert response.json()["access"]["role"] == "guest-view"

    @pytest.mark.asyncio
    async def test_member_keeps_stronger_grant(
        self, client: AsyncClient, auth_headers, owner, project, make_user, add_member
    ) -> None:
        token = await _enable_link(client, await auth_headers(owner), project)
        alice = await make_user("alice@example.com")
        await add_member(project, alice)

        response = await client.get(
            f"/api/v1/share/project/{token}", headers=await auth_headers(alice)
        )

        assert response.json()["access"]["role"] == "member"

    @pytest.mark.asyncio
    async def test_rotation_invalidates_old_link(
        self, client: AsyncClient, auth_headers, owner, project
    ) -> None:
        headers = await auth_headers(owner)
        old_token = await _enable_link(client, headers, project)

        rotated = await client.post(api_path("projects", project.id, "/sharing/rotate"), headers=headers)
        new_token = rotated.json()["share_token"]

        assert new_token != old_token
        assert (await client.get(f"/api/v1/share/project/{old_token}")).status_code == 404
        assert (await client.get(f"/api/v1/share/project/{new_token}")).status_code == 200
        stale_header = await client.get(
            api_path("projects", project.id), headers={"X-Share-Token": old_token}
        )
        assert stale_header.status_code == 404

    @pytest.mark.asyncio
    async def test_link_for_wrong_type(
        self, client: AsyncClient, auth_headers, owner, project
    ) -> None:
        token = await _enable_link(client, await auth_headers(owner), project)

        response = await client.get(f"/api/v1/share/dashboard/{token}")

        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_link_holder_cannot_list_members(
        self, client: AsyncClient, auth_headers, owner, project, make_user
    ) -> None:
        token = await _enable_link(client, await auth_headers(owner), project)
        guest = await make_user("guest@example.com")

        response = await client.get(
            api_path("projects", project.id, "/members"),
            headers={**(await auth_headers(guest)), "X-Share-Token": token},
        )

        assert response.status_code == 403
