"""Resource domain entities (projects, dashboards and the tasks inside projects)."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import StrEnum
from typing import Any
from uuid import UUID, uuid4


class ResourceType(StrEnum):
    """Kinds of resource an access decision can target."""

    PROJECT = "project"
    DASHBOARD = "dashboard"
    TASK = "task"

    @property
    def owns_grants(self) -> bool:
        """Projects and dashboards carry owners and members; tasks inherit."""
        return self is not ResourceType.TASK


@dataclass(frozen=True)
class ResourceRef:
    """Identifies the target of an authorization request."""

    type: ResourceType
    id: UUID

    def __str__(self) -> str:
        return f"{self.type}:{self.id}"


@dataclass(frozen=True)
class SharingGrant:
    """Instance-level sharing flags stored on a resource."""

    is_public: bool = False
    workspace_shared: bool = False
    share_token: str | None = None


@dataclass
class Resource:
    """A project or dashboard.

    ``owner_id`` is the exclusive owner grant and never changes after
    creation. ``settings`` holds a parsed ProjectSettings or DashboardSettings.
    """

    type: ResourceType
    name: str
    owner_id: UUID
    id: UUID = field(default_factory=uuid4)
    description: str | None = None
    is_public: bool = False
    workspace_shared: bool = False
    share_token: str | None = None
    settings: Any = None
    last_viewed_at: datetime | None = None
    created_at: datetime = field(default_factory=datetime.utcnow)
    updated_at: datetime = field(default_factory=datetime.utcnow)

    @property
    def ref(self) -> ResourceRef:
        return ResourceRef(self.type, self.id)

    @property
    def sharing(self) -> SharingGrant:
        """The derived sharing tuple."""
        return SharingGrant(
            is_public=self.is_public,
            workspace_shared=self.workspace_shared,
            share_token=self.share_token,
        )


@dataclass
class Task:
    """A task. Access is always derived from its project."""

    project_id: UUID
    title: str
    id: UUID = field(default_factory=uuid4)
