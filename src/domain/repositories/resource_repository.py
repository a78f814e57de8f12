"""Resource repository protocol."""

from datetime import datetime
from typing import Protocol
from uuid import UUID

from domain.entities.resource import Resource, ResourceType, Task


class IResourceRepository(Protocol):
    """Repository interface for projects, dashboards and tasks."""

    async def create(self, resource: Resource) -> Resource:
        """Create a project or dashboard."""
        ...

    async def get(self, resource_type: ResourceType, id: UUID) -> Resource | None:
        """Get a live project or dashboard. Soft-deleted projects are absent."""
        ...

    async def get_by_share_token(
        self, resource_type: ResourceType, share_token: str
    ) -> Resource | None:
        """Get a resource by its current share token."""
        ...

    async def get_task(self, id: UUID) -> Task | None:
        """Get a task by ID."""
        ...

    async def create_task(self, task: Task) -> Task:
        """Create a task."""
        ...

    async def update_sharing(
        self,
        resource_type: ResourceType,
        id: UUID,
        *,
        is_public: bool | None = None,
        workspace_shared: bool | None = None,
        share_token: str | None = None,
    ) -> Resource | None:
        """Update sharing flags in a single statement. ``None`` leaves a field unchanged."""
        ...

    async def touch_last_viewed(
        self, resource_type: ResourceType, id: UUID, viewed_at: datetime
    ) -> None:
        """Record that a resource was opened."""
        ...
