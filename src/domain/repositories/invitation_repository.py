"""Invitation repository protocol."""

from datetime import datetime
from typing import Protocol
from uuid import UUID

from domain.entities.invitation import Invitation
from domain.entities.resource import ResourceType


class IInvitationRepository(Protocol):
    """Repository interface for Invitation entities."""

    async def create(self, invitation: Invitation) -> Invitation:
        """Create a new invitation."""
        ...

    async def get_by_token_hash(self, token_hash: str) -> Invitation | None:
        """Get an invitation by its hashed token."""
        ...

    async def get_for_resource(
        self, resource_type: ResourceType, resource_id: UUID
    ) -> list[Invitation]:
        """Get all invitations for a resource, newest first."""
        ...

    async def mark_accepted(self, id: UUID, accepted_at: datetime) -> bool:
        """Claim an invitation.

        Sets ``accepted_at`` only while it is still NULL. Returns False when a
        concurrent request claimed it first.
        """
        ...
