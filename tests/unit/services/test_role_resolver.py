"""Unit tests for RoleResolver."""

from uuid import UUID, uuid4

import pytest

from core.exceptions import ForbiddenError, ResourceNotFoundError
from domain.entities.access import DenyReason
from domain.entities.grant import Action, EffectiveGrant, GrantLevel
from domain.entities.membership import MemberRole, Membership
from domain.entities.resource import Resource, ResourceRef, ResourceType, Task
from domain.services.role_resolver import GrantLookup, RoleResolver, decide
from tests.unit.conftest import FakeUnitOfWork


@pytest.fixture
def resolver(uow: FakeUnitOfWork) -> RoleResolver:
    return RoleResolver(lambda: uow)


def _member(resource: Resource, user_id: UUID, role: MemberRole) -> Membership:
    return Membership(
        resource_type=resource.type, resource_id=resource.id, user_id=user_id, role=role
    )


class TestResolve:
    @pytest.mark.asyncio
    async def test_owner_skips_membership_lookup(
        self, resolver: RoleResolver, uow: FakeUnitOfWork, project: Resource, owner_id: UUID
    ) -> None:
        uow.resources.get.return_value = project

        grant = await resolver.resolve(owner_id, project.ref)

        assert grant == EffectiveGrant.owner()
        uow.members.get.assert_not_called()

    @pytest.mark.asyncio
    async def test_member_role_comes_from_row(
        self, resolver: RoleResolver, uow: FakeUnitOfWork, project: Resource, user_id: UUID
    ) -> None:
        uow.resources.get.return_value = project
        uow.members.get.return_value = _member(project, user_id, MemberRole.ADMIN)

        grant = await resolver.resolve(user_id, project.ref)

        assert grant is not None
        assert grant.level == GrantLevel.ADMIN
        uow.members.get.assert_awaited_once_with(ResourceType.PROJECT, project.id, user_id)

    @pytest.mark.asyncio
    async def test_missing_resource_has_no_grant(
        self, resolver: RoleResolver, uow: FakeUnitOfWork, user_id: UUID
    ) -> None:
        uow.resources.get.return_value = None

        assert await resolver.resolve(user_id, ResourceRef(ResourceType.PROJECT, uuid4())) is None

    @pytest.mark.asyncio
    async def test_task_inherits_project_grant(
        self, resolver: RoleResolver, uow: FakeUnitOfWork, project: Resource, user_id: UUID
    ) -> None:
        task = Task(project_id=project.id, title="Ship it")
        uow.resources.get_task.return_value = task
        uow.resources.get.return_value = project
        uow.members.get.return_value = _member(project, user_id, MemberRole.MEMBER)

        grant = await resolver.resolve(user_id, ResourceRef(ResourceType.TASK, task.id))

        assert grant is not None
        assert grant.level == GrantLevel.MEMBER
        uow.resources.get.assert_awaited_once_with(ResourceType.PROJECT, project.id)

    @pytest.mark.asyncio
    async def test_unknown_task_is_not_found(
        self, resolver: RoleResolver, uow: FakeUnitOfWork, user_id: UUID
    ) -> None:
        lookup = await resolver.lookup(ResourceRef(ResourceType.TASK, uuid4()), user_id)

        assert lookup == GrantLookup(None, None)
        uow.resources.get.assert_not_called()

    @pytest.mark.asyncio
    async def test_can_checks_action(
        self, resolver: RoleResolver, uow: FakeUnitOfWork, project: Resource, user_id: UUID
    ) -> None:
        uow.resources.get.return_value = project
        uow.members.get.return_value = _member(project, user_id, MemberRole.MEMBER)

        assert await resolver.can(user_id, project.ref, Action.EDIT_CONTENT)
        assert not await resolver.can(user_id, project.ref, Action.MANAGE_MEMBERS)


class TestRequire:
    @pytest.mark.asyncio
    async def test_returns_the_authorized_access(
        self, resolver: RoleResolver, uow: FakeUnitOfWork, project: Resource, owner_id: UUID
    ) -> None:
        uow.resources.get.return_value = project

        access = await resolver.require(owner_id, project.ref, Action.DELETE)

        assert access.resource is project
        assert access.grant == EffectiveGrant.owner()

    @pytest.mark.asyncio
    async def test_stranger_is_forbidden(
        self, resolver: RoleResolver, uow: FakeUnitOfWork, project: Resource, user_id: UUID
    ) -> None:
        uow.resources.get.return_value = project

        with pytest.raises(ForbiddenError):
            await resolver.require(user_id, project.ref, Action.VIEW)

    @pytest.mark.asyncio
    async def test_missing_resource_is_not_found(
        self, resolver: RoleResolver, uow: FakeUnitOfWork, user_id: UUID
    ) -> None:
        uow.resources.get.return_value = None

        with pytest.raises(ResourceNotFoundError):
            await resolver.require(user_id, ResourceRef(ResourceType.DASHBOARD, uuid4()), Action.VIEW)

    @pytest.mark.asyncio
    async def test_admin_cannot_manage_sharing(
        self, resolver: RoleResolver, uow: FakeUnitOfWork, project: Resource, user_id: UUID
    ) -> None:
        uow.resources.get.return_value = project
        uow.members.get.return_value = _member(project, user_id, MemberRole.ADMIN)

        with pytest.raises(ForbiddenError):
            await resolver.require(user_id, project.ref, Action.MANAGE_SHARING)


class TestDecide:
    def test_anonymous_without_grant_sees_not_found(self, project: Resource) -> None:
        decision = decide(project.ref, GrantLookup(project, None), Action.VIEW, authenticated=False)

        assert not decision.allowed
        assert decision.reason == DenyReason.NOT_FOUND

    def test_authenticated_without_grant_sees_forbidden(self, project: Resource) -> None:
        decision = decide(project.ref, GrantLookup(project, None), Action.VIEW, authenticated=True)

        assert decision.reason == DenyReason.FORBIDDEN

    def test_guest_writing_is_forbidden(self, project: Resource) -> None:
        lookup = GrantLookup(project, EffectiveGrant.guest())

        decision = decide(project.ref, lookup, Action.COMMENT, authenticated=False)

        assert decision.reason == DenyReason.FORBIDDEN
