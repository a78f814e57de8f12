"""Service layer for explicit project and dashboard membership."""

from collections.abc import Callable
from uuid import UUID

import structlog

from core.exceptions import (
    AlreadyAMemberError,
    CannotModifyOwnerError,
    MemberNotFoundError,
    NoChangesError,
    UserNotFoundError,
)
from domain.entities.grant import Action
from domain.entities.membership import ContentPermission, MemberRole, Membership, MemberView
from domain.entities.resource import Resource, ResourceRef
from domain.repositories.unit_of_work import IUnitOfWork
from domain.services.role_resolver import RoleResolver
from domain.services.schema_guard import SchemaGuard

logger = structlog.get_logger()

OWNER_ROLE = "owner"


class MembershipService:
    """Lists and edits membership rows.

    The owner is derived from ``owner_id`` and is never stored, added,
    changed or removed through this service.
    """

    def __init__(
        self,
        uow_factory: Callable[[], IUnitOfWork],
        resolver: RoleResolver,
        guard: SchemaGuard | None = None,
    ) -> None:
        self._uow_factory = uow_factory
        self._resolver = resolver
        self._guard = guard or SchemaGuard()

    async def list_members(self, actor_id: UUID, ref: ResourceRef) -> list[MemberView]:
        """List the owner first, then every member row.

        A stale row for the owner is not shown a second time. Guests from a
        public flag or share link cannot list members.
        """
        access = await self._resolver.require(actor_id, ref, Action.VIEW_MEMBERS)
        return await self._guard.with_repair(lambda: self._list(access.resource))

    async def _list(self, resource: Resource) -> list[MemberView]:
        async with self._uow_factory() as uow:
            rows = await uow.members.list_for_resource(resource.type, resource.id)
            users = await uow.users.get_many([resource.owner_id, *(row.user_id for row in rows)])

        views: list[MemberView] = []
        owner = users.get(resource.owner_id)
        if owner is not None:
            views.append(
                MemberView(
                    user_id=owner.id,
                    email=owner.email,
                    name=owner.name,
                    avatar_url=owner.avatar_url,
                    role=OWNER_ROLE,
                    joined_at=resource.created_at,
                )
            )
        for row in rows:
            user = users.get(row.user_id)
            if row.user_id == resource.owner_id or user is None:
                continue
            views.append(
                MemberView(
                    user_id=user.id,
                    email=user.email,
                    name=user.name,
                    avatar_url=user.avatar_url,
                    role=row.role.value,
                    permission=row.permission,
                    joined_at=row.created_at,
                )
            )
        return views

    async def add_member(
        self,
        actor_id: UUID,
        ref: ResourceRef,
        user_id: UUID,
        role: str = MemberRole.MEMBER.value,
    ) -> list[MemberView]:
        """Add an existing user as a member. A requested ``owner`` role becomes ``admin``.

        Raises:
            UserNotFoundError: If the target user does not exist.
            CannotModifyOwnerError: If the target already owns the resource.
            AlreadyAMemberError: If the target already has a membership row.
        """
        member_role = MemberRole.ADMIN if role == OWNER_ROLE else MemberRole(role)
        access = await self._resolver.require(actor_id, ref, Action.MANAGE_MEMBERS)
        resource = access.resource
        if resource.owner_id == user_id:
            raise CannotModifyOwnerError()

        async def _run() -> None:
            async with self._uow_factory() as uow:
                if await uow.users.get(user_id) is None:
                    raise UserNotFoundError(str(user_id))
                if await uow.members.get(resource.type, resource.id, user_id) is not None:
                    raise AlreadyAMemberError(str(user_id))
                await uow.members.add(
                    Membership(
                        resource_type=resource.type,
                        resource_id=resource.id,
                        user_id=user_id,
                        role=member_role,
                        invited_by=actor_id,
                    )
                )
                await uow.commit()

        await self._guard.with_repair(_run)
        logger.info(
            "member_added",
            resource=str(resource.ref),
            user_id=str(user_id),
            role=member_role.value,
        )
        return await self._guard.with_repair(lambda: self._list(resource))

    async def update_member(
        self,
        actor_id: UUID,
        ref: ResourceRef,
        user_id: UUID,
        *,
        role: MemberRole | None = None,
        permission: ContentPermission | None = None,
    ) -> list[MemberView]:
        """Change a member's role and/or permission.

        Raises:
            NoChangesError: If neither role nor permission is given.
            CannotModifyOwnerError: If the target is the owner.
            MemberNotFoundError: If no membership row matched.
        """
        if role is None and permission is None:
            raise NoChangesError("Provide role and/or permission to update")
        access = await self._resolver.require(actor_id, ref, Action.MANAGE_MEMBERS)
        resource = access.resource
        if resource.owner_id == user_id:
            raise CannotModifyOwnerError()

        async def _run() -> Membership | None:
            async with self._uow_factory() as uow:
                updated = await uow.members.update(
                    resource.type, resource.id, user_id, role=role, permission=permission
                )
                await uow.commit()
                return updated

        if await self._guard.with_repair(_run) is None:
            raise MemberNotFoundError(str(user_id))
        return await self._guard.with_repair(lambda: self._list(resource))

    async def remove_member(self, actor_id: UUID, ref: ResourceRef, user_id: UUID) -> None:
        """Delete a membership row.

        Raises:
            CannotModifyOwnerError: If the target is the owner.
            MemberNotFoundError: If no membership row matched.
        """
        access = await self._resolver.require(actor_id, ref, Action.MANAGE_MEMBERS)
        resource = access.resource
        if resource.owner_id == user_id:
            raise CannotModifyOwnerError()

        async def _run() -> bool:
            async with self._uow_factory() as uow:
                removed = await uow.members.remove(resource.type, resource.id, user_id)
                await uow.commit()
                return removed

        if not await self._guard.with_repair(_run):
            raise MemberNotFoundError(str(user_id))
        logger.info("member_removed", resource=str(resource.ref), user_id=str(user_id))
