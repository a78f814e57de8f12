"""Integration tests for opening projects, dashboards and tasks."""

from uuid import uuid4

import pytest
from httpx import AsyncClient

from domain.entities.membership import ContentPermission
from domain.entities.resource import ResourceType
from tests.conftest import api_path


@pytest.fixture
async def owner(make_user):
    return await make_user("olive@example.com", "Olive")


@pytest.fixture
async def project(make_resource, owner):
    return await make_resource(owner, name="Launch plan")


class TestOpenResource:
    @pytest.mark.asyncio
    async def test_owner_opens_project(
        self, client: AsyncClient, auth_headers, owner, project
    ) -> None:
        response = await client.get(api_path("projects", project.id), headers=await auth_headers(owner))

        assert response.status_code == 200
        access = response.json()["access"]
        assert access["role"] == "owner"
        assert access["source"] == "ownership"
        assert access["can_delete"] is True

    @pytest.mark.asyncio
    async def test_anonymous_cannot_see_private_project(
        self, client: AsyncClient, project
    ) -> None:
        response = await client.get(api_path("projects", project.id))

        assert response.status_code == 404
        assert response.json()["error_code"] == "RESOURCE_NOT_FOUND"

    @pytest.mark.asyncio
    async def test_stranger_is_forbidden(
        self, client: AsyncClient, auth_headers, project, make_user
    ) -> None:
        stranger = await make_user("stranger@example.com")

        response = await client.get(
            api_path("projects", project.id), headers=await auth_headers(stranger)
        )

        assert response.status_code == 403

    @pytest.mark.asyncio
    async def test_unknown_id(self, client: AsyncClient, auth_headers, owner) -> None:
        response = await client.get(api_path("projects", uuid4()), headers=await auth_headers(owner))

        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_project_id_under_dashboards(
        self, client: AsyncClient, auth_headers, owner, project
    ) -> None:
        response = await client.get(
            api_path("dashboards", project.id), headers=await auth_headers(owner)
        )

        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_opening_dashboard_records_view(
        self, client: AsyncClient, auth_headers, owner, make_resource, uow_factory
    ) -> None:
        dashboard = await make_resource(owner, ResourceType.DASHBOARD, name="Metrics")
        assert dashboard.last_viewed_at is None

        response = await client.get(
            api_path("dashboards", dashboard.id), headers=await auth_headers(owner)
        )

        assert response.json()["last_viewed_at"] is not None
        async with uow_factory() as uow:
            stored = await uow.resources.get(ResourceType.DASHBOARD, dashboard.id)
        assert stored.last_viewed_at is not None

    @pytest.mark.asyncio
    async def test_denied_view_records_nothing(
        self, client: AsyncClient, owner, make_resource, uow_factory
    ) -> None:
        dashboard = await make_resource(owner, ResourceType.DASHBOARD, name="Metrics")

        response = await client.get(api_path("dashboards", dashboard.id))

        assert response.status_code == 404
        async with uow_factory() as uow:
            stored = await uow.resources.get(ResourceType.DASHBOARD, dashboard.id)
        assert stored.last_viewed_at is None


class TestTaskAccess:
    @pytest.mark.asyncio
    async def test_task_inherits_project_grant(
        self, client: AsyncClient, auth_headers, project, make_task, make_user, add_member
    ) -> None:
        task = await make_task(project)
        alice = await make_user("alice@example.com")
        await add_member(project, alice, permission=ContentPermission.COMMENT)

        response = await client.get(
            f"/api/v1/tasks/{task.id}/access", headers=await auth_headers(alice)
        )

        assert response.status_code == 200
        data = response.json()
        assert data["project_id"] == str(project.id)
        assert data["access"]["role"] == "member"
        assert data["access"]["can_comment"] is True
        assert data["access"]["can_edit_content"] is False

    @pytest.mark.asyncio
    async def test_unknown_task(self, client: AsyncClient, auth_headers, owner) -> None:
        response = await client.get(
            f"/api/v1/tasks/{uuid4()}/access", headers=await auth_headers(owner)
        )

        assert response.status_code == 404
