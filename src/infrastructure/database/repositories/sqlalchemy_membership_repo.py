"""SQLAlchemy implementation of Membership repository."""

from typing import Any
from uuid import UUID

from sqlalchemy import delete, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from domain.entities.membership import ContentPermission, MemberRole, Membership
from domain.entities.resource import ResourceType
from infrastructure.database.models import DashboardMemberModel, ProjectMemberModel

MemberModel = ProjectMemberModel | DashboardMemberModel


def _table_for(resource_type: ResourceType) -> tuple[Any, Any]:
    """Model class and its resource foreign key column."""
    if resource_type == ResourceType.PROJECT:
        return ProjectMemberModel, ProjectMemberModel.project_id
    if resource_type == ResourceType.DASHBOARD:
        return DashboardMemberModel, DashboardMemberModel.dashboard_id
    raise ValueError(f"{resource_type} has no membership table")


class SQLAlchemyMembershipRepository:
    """SQLAlchemy implementation of IMembershipRepository."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get(
        self, resource_type: ResourceType, resource_id: UUID, user_id: UUID
    ) -> Membership | None:
        """Get a single membership row."""
        model_cls, resource_col = _table_for(resource_type)
        stmt = select(model_cls).where(resource_col == resource_id, model_cls.user_id == user_id)
        result = await self._session.execute(stmt)
        model = result.scalar_one_or_none()
        return self._to_entity(model, resource_type) if model else None

    async def list_for_resource(
        self, resource_type: ResourceType, resource_id: UUID
    ) -> list[Membership]:
        """List membership rows ordered by join time."""
        model_cls, resource_col = _table_for(resource_type)
        stmt = (
            select(model_cls)
            .where(resource_col == resource_id)
            .order_by(model_cls.created_at)
        )
        result = await self._session.execute(stmt)
        return [self._to_entity(model, resource_type) for model in result.scalars()]

    async def add(self, membership: Membership) -> Membership:
        """Insert a membership row."""
        model_cls, resource_col = _table_for(membership.resource_type)
        model = model_cls(
            user_id=membership.user_id,
            role=membership.role.value,
            permission=membership.permission.label if membership.permission else None,
            invited_by=membership.invited_by,
            created_at=membership.created_at,
        )
        setattr(model, resource_col.key, membership.resource_id)
        self._session.add(model)
        await self._session.flush()
        return self._to_entity(model, membership.resource_type)

    async def update(
        self,
        resource_type: ResourceType,
        resource_id: UUID,
        user_id: UUID,
        *,
        role: MemberRole | None = None,
        permission: ContentPermission | None = None,
    ) -> Membership | None:
        """Update role and/or permission. Returns None when no row matched."""
        model_cls, resource_col = _table_for(resource_type)
        values: dict[str, Any] = {}
        if role is not None:
            values["role"] = role.value
        if permission is not None:
            values["permission"] = permission.label
        if values:
            stmt = (
                update(model_cls)
                .where(resource_col == resource_id, model_cls.user_id == user_id)
                .values(**values)
            )
            result = await self._session.execute(stmt)
            if not result.rowcount:  # type: ignore[attr-defined]
                return None
        stmt = (
            select(model_cls)
            .where(resource_col == resource_id, model_cls.user_id == user_id)
            .execution_options(populate_existing=True)
        )
        fetched = await self._session.execute(stmt)
        model = fetched.scalar_one_or_none()
        return self._to_entity(model, resource_type) if model else None

    async def remove(self, resource_type: ResourceType, resource_id: UUID, user_id: UUID) -> bool:
        """Delete a membership row."""
        model_cls, resource_col = _table_for(resource_type)
        stmt = delete(model_cls).where(resource_col == resource_id, model_cls.user_id == user_id)
        result = await self._session.execute(stmt)
        return bool(result.rowcount)  # type: ignore[attr-defined]

    def _to_entity(self, model: MemberModel, resource_type: ResourceType) -> Membership:
        """Convert ORM model to domain entity."""
        resource_id = (
            model.project_id if isinstance(model, ProjectMemberModel) else model.dashboard_id
        )
        return Membership(
            resource_type=resource_type,
            resource_id=resource_id,
            user_id=model.user_id,
            role=MemberRole(model.role),
            permission=ContentPermission.parse(model.permission) if model.permission else None,
            invited_by=model.invited_by,
            created_at=model.created_at,
        )
