"""Pydantic schemas for Invitation API."""

from datetime import datetime, timezone
from typing import Any
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from api.v1.schemas.member import PermissionLabel
from domain.entities.invitation import Invitation


class CreateInvitationRequest(BaseModel):
    """Schema for inviting an email address to a project or dashboard."""

    email: str = Field(..., min_length=3, max_length=255)
    permission: PermissionLabel = "full_edit"
    task_id: UUID | None = Field(None, description="Task the invitee should land on")
    ttl_days: int | None = Field(None, ge=1, le=30)


class AcceptInvitationRequest(BaseModel):
    """Schema for accepting an invitation."""

    token: str = Field(..., min_length=1, max_length=255)
    resource_type: str | None = Field(None, pattern="^(project|dashboard|task)$")
    resource_id: UUID | None = None


class InvitationResponse(BaseModel):
    """Schema for Invitation response. The token itself is never echoed."""

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "id": "123e4567-e89b-12d3-a456-426614174000",
                "resource_type": "project",
                "resource_id": "456e4567-e89b-12d3-a456-426614174000",
                "email": "alice@example.com",
                "permission": "edit",
                "status": "pending",
                "invited_by": "789e4567-e89b-12d3-a456-426614174000",
                "created_at": "2026-02-01T10:00:00",
                "expires_at": "2026-02-08T10:00:00",
            }
        },
    )

    id: UUID
    resource_type: str
    resource_id: UUID
    task_id: UUID | None = None
    email: str
    permission: str
    status: str
    invited_by: UUID
    created_at: datetime
    expires_at: datetime
    accepted_at: datetime | None = None

    @classmethod
    def from_entity(
        cls, invitation: Invitation, now: datetime | None = None
    ) -> "InvitationResponse":
        now = now or datetime.now(timezone.utc).replace(tzinfo=None)
        if invitation.is_accepted:
            status = "accepted"
        elif invitation.is_expired_at(now):
            status = "expired"
        else:
            status = "pending"
        return cls(
            id=invitation.id,
            resource_type=invitation.resource_type.value,
            resource_id=invitation.resource_id,
            task_id=invitation.task_id,
            email=invitation.email,
            permission=invitation.permission.label,
            status=status,
            invited_by=invitation.invited_by,
            created_at=invitation.created_at,
            expires_at=invitation.expires_at,
            accepted_at=invitation.accepted_at,
        )


class InvitationListResponse(BaseModel):
    """Schema for list of Invitations response."""

    data: list[InvitationResponse]
    meta: dict[str, Any] = Field(default_factory=dict)


class InvitationCreatedResponse(BaseModel):
    """Schema for invitation creation response."""

    data: InvitationResponse
    accept_url: str = Field(
        ...,
        description="Link carrying the raw invitation token. Only shown once.",
    )
    delivery: str = Field(..., description="delivered, failed or skipped")


class AcceptInvitationResponse(BaseModel):
    """Schema for accepting an invitation response."""

    success: bool = True
    status: str
    already_member: bool
    resource_type: str
    resource_id: UUID
    task_id: UUID | None = None
    permission: str
