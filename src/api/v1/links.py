"""Public URLs handed to users in emails and sharing panels."""

from enum import StrEnum
from uuid import UUID

from core.config import settings
from domain.entities.resource import ResourceType


class ResourceCollection(StrEnum):
    """URL segment for each grant-bearing resource type."""

    PROJECTS = "projects"
    DASHBOARDS = "dashboards"

    @property
    def resource_type(self) -> ResourceType:
        if self is ResourceCollection.PROJECTS:
            return ResourceType.PROJECT
        return ResourceType.DASHBOARD

    @classmethod
    def for_type(cls, resource_type: ResourceType) -> "ResourceCollection":
        if resource_type == ResourceType.DASHBOARD:
            return cls.DASHBOARDS
        return cls.PROJECTS


def _base_url() -> str:
    return settings.app_url.rstrip("/")


def accept_url(resource_type: ResourceType, resource_id: UUID, token: str) -> str:
    """Link that opens the resource and replays the invitation after login."""
    collection = ResourceCollection.for_type(resource_type).value
    return f"{_base_url()}/dashboard/{collection}/{resource_id}?invite={token}"


def share_url(resource_type: ResourceType, token: str | None) -> str | None:
    """Public share link, or None while no token has been generated."""
    if not token:
        return None
    return f"{_base_url()}/share/{resource_type.value}/{token}"
