"""Membership repository protocol."""

from typing import Protocol
from uuid import UUID

from domain.entities.membership import ContentPermission, MemberRole, Membership
from domain.entities.resource import ResourceType


class IMembershipRepository(Protocol):
    """Repository interface for project and dashboard membership rows."""

    async def get(
        self, resource_type: ResourceType, resource_id: UUID, user_id: UUID
    ) -> Membership | None:
        """Get a single membership row."""
        ...

    async def list_for_resource(
        self, resource_type: ResourceType, resource_id: UUID
    ) -> list[Membership]:
        """List membership rows ordered by join time."""
        ...

    async def add(self, membership: Membership) -> Membership:
        """Insert a membership row."""
        ...

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
        ...

    async def remove(self, resource_type: ResourceType, resource_id: UUID, user_id: UUID) -> bool:
        """Delete a membership row."""
        ...
