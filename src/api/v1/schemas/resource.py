"""Pydantic schemas for project, dashboard and task access responses."""

from datetime import datetime
from typing import Any
from uuid import UUID

from pydantic import BaseModel

from domain.entities.grant import EffectiveGrant
from domain.entities.resource import Resource
from domain.entities.resource_settings import dump_settings


class GrantResponse(BaseModel):
    """The caller's effective grant and the actions it allows."""

    role: str
    source: str
    permission: str | None = None
    can_view_members: bool
    can_comment: bool
    can_edit_content: bool
    can_manage_content: bool
    can_edit_resource: bool
    can_manage_members: bool
    can_manage_sharing: bool
    can_delete: bool

    @classmethod
    def from_grant(cls, grant: EffectiveGrant) -> "GrantResponse":
        return cls(
            role=grant.role,
            source=grant.source.value,
            permission=grant.permission.label if grant.permission else None,
            can_view_members=grant.can_view_members,
            can_comment=grant.can_comment,
            can_edit_content=grant.can_edit_content,
            can_manage_content=grant.can_manage_content,
            can_edit_resource=grant.can_edit_resource,
            can_manage_members=grant.can_manage_members,
            can_manage_sharing=grant.can_manage_sharing,
            can_delete=grant.can_delete,
        )


class ResourceResponse(BaseModel):
    """Schema for a project or dashboard as seen by the caller."""

    id: UUID
    type: str
    name: str
    description: str | None = None
    owner_id: UUID
    is_public: bool
    workspace_shared: bool
    settings: dict[str, Any]
    last_viewed_at: datetime | None = None
    created_at: datetime
    updated_at: datetime
    access: GrantResponse

    @classmethod
    def build(cls, resource: Resource, grant: EffectiveGrant) -> "ResourceResponse":
        return cls(
            id=resource.id,
            type=resource.type.value,
            name=resource.name,
            description=resource.description,
            owner_id=resource.owner_id,
            is_public=resource.is_public,
            workspace_shared=resource.workspace_shared,
            settings=dump_settings(resource.settings) if resource.settings else {},
            last_viewed_at=resource.last_viewed_at,
            created_at=resource.created_at,
            updated_at=resource.updated_at,
            access=GrantResponse.from_grant(grant),
        )


class TaskAccessResponse(BaseModel):
    """The caller's grant on a task, inherited from its project."""

    task_id: UUID
    project_id: UUID
    access: GrantResponse
