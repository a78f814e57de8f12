"""Pydantic schemas for membership API."""

from datetime import datetime
from typing import Literal
from uuid import UUID

from pydantic import BaseModel

from domain.entities.membership import MemberView

PermissionLabel = Literal["view", "comment", "edit", "full_edit"]


class AddMemberRequest(BaseModel):
    """Schema for adding an existing user. ``owner`` is stored as ``admin``."""

    user_id: UUID
    role: Literal["owner", "admin", "member"] = "member"


class UpdateMemberRequest(BaseModel):
    """Schema for changing a member's role and/or permission."""

    role: Literal["admin", "member"] | None = None
    permission: PermissionLabel | None = None


class MemberResponse(BaseModel):
    """Schema for a listed member."""

    user_id: UUID
    email: str
    name: str | None = None
    avatar_url: str | None = None
    role: str
    permission: str | None = None
    joined_at: datetime | None = None

    @classmethod
    def from_view(cls, view: MemberView) -> "MemberResponse":
        return cls(
            user_id=view.user_id,
            email=view.email,
            name=view.name,
            avatar_url=view.avatar_url,
            role=view.role,
            permission=view.permission.label if view.permission else None,
            joined_at=view.joined_at,
        )


class MemberListResponse(BaseModel):
    """Schema for list of members response."""

    data: list[MemberResponse]
    meta: dict[str, int]

    @classmethod
    def from_views(cls, views: list[MemberView]) -> "MemberListResponse":
        return cls(
            data=[MemberResponse.from_view(view) for view in views],
            meta={"total": len(views)},
        )
