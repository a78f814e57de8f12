"""Pydantic schemas for sharing API."""

from uuid import UUID

from pydantic import BaseModel


class UpdateSharingRequest(BaseModel):
    """Schema for changing sharing flags. Omitted fields are left unchanged."""

    is_public: bool | None = None
    workspace_shared: bool | None = None
    generate_token: bool = False


class SharingResponse(BaseModel):
    """Schema for a resource's sharing settings."""

    resource_type: str
    resource_id: UUID
    resource_name: str | None = None
    is_public: bool
    workspace_shared: bool
    share_token: str | None = None
    share_link: str | None = None
    can_manage: bool
