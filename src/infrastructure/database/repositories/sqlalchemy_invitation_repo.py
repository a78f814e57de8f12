"""SQLAlchemy implementation of Invitation repository."""

from datetime import datetime
from uuid import UUID

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from domain.entities.invitation import Invitation
from domain.entities.membership import ContentPermission
from domain.entities.resource import ResourceType
from infrastructure.database.models import InvitationModel


class SQLAlchemyInvitationRepository:
    """SQLAlchemy implementation of IInvitationRepository."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def create(self, invitation: Invitation) -> Invitation:
        """Create a new invitation."""
        model = self._to_model(invitation)
        self._session.add(model)
        await self._session.flush()
        await self._session.refresh(model)
        return self._to_entity(model)

    async def get_by_token_hash(self, token_hash: str) -> Invitation | None:
        """Get an invitation by its hashed token."""
        stmt = select(InvitationModel).where(InvitationModel.token_hash == token_hash)
        result = await self._session.execute(stmt)
        model = result.scalar_one_or_none()
        return self._to_entity(model) if model else None

    async def get_for_resource(
        self, resource_type: ResourceType, resource_id: UUID
    ) -> list[Invitation]:
        """Get all invitations for a resource, newest first."""
        stmt = (
            select(InvitationModel)
            .where(
                InvitationModel.resource_type == resource_type.value,
                InvitationModel.resource_id == resource_id,
            )
            .order_by(InvitationModel.created_at.desc())
        )
        result = await self._session.execute(stmt)
        return [self._to_entity(model) for model in result.scalars()]

    async def mark_accepted(self, id: UUID, accepted_at: datetime) -> bool:
        """Claim an invitation.

        Sets ``accepted_at`` only while it is still NULL. Returns False when a
        concurrent request claimed it first.
        """
        stmt = (
            update(InvitationModel)
            .where(InvitationModel.id == id, InvitationModel.accepted_at.is_(None))
            .values(accepted_at=accepted_at)
        )
        result = await self._session.execute(stmt)
        return bool(result.rowcount)  # type: ignore[attr-defined]

    def _to_entity(self, model: InvitationModel) -> Invitation:
        """Convert ORM model to domain entity."""
        return Invitation(
            id=model.id,
            resource_type=ResourceType(model.resource_type),
            resource_id=model.resource_id,
            task_id=model.task_id,
            email=model.email,
            permission=ContentPermission.parse(model.permission),
            token_hash=model.token_hash,
            invited_by=model.invited_by,
            created_at=model.created_at,
            expires_at=model.expires_at,
            accepted_at=model.accepted_at,
        )

    def _to_model(self, entity: Invitation) -> InvitationModel:
        """Convert domain entity to ORM model."""
        return InvitationModel(
            id=entity.id,
            resource_type=entity.resource_type.value,
            resource_id=entity.resource_id,
            task_id=entity.task_id,
            email=entity.email,
            permission=entity.permission.label,
            token_hash=entity.token_hash,
            invited_by=entity.invited_by,
            created_at=entity.created_at,
            expires_at=entity.expires_at,
            accepted_at=entity.accepted_at,
        )
