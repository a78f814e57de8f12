"""Membership domain entities."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import IntEnum, StrEnum
from uuid import UUID

from domain.entities.resource import ResourceType


class MemberRole(StrEnum):
    """Roles a membership row may store. Ownership is never stored."""

    ADMIN = "admin"
    MEMBER = "member"


class ContentPermission(IntEnum):
    """Finer-grained permission carried by invitation-originated members.

    Higher values include everything granted by lower values.
    """

    VIEW = 10
    COMMENT = 20
    EDIT = 30
    FULL_EDIT = 40

    @property
    def label(self) -> str:
        return self.name.lower()

    @classmethod
    def parse(cls, value: "str | ContentPermission") -> "ContentPermission":
        """Parse a stored permission label such as ``"full_edit"``."""
        if isinstance(value, ContentPermission):
            return value
        try:
            return cls[value.strip().upper()]
        except KeyError:
            raise ValueError(f"Unknown permission: {value}") from None


PERMISSION_LABELS = tuple(permission.label for permission in ContentPermission)


@dataclass
class Membership:
    """An explicit membership row keyed by (resource, user)."""

    resource_type: ResourceType
    resource_id: UUID
    user_id: UUID
    role: MemberRole = MemberRole.MEMBER
    permission: ContentPermission | None = None
    invited_by: UUID | None = None
    created_at: datetime = field(default_factory=datetime.utcnow)


@dataclass
class MemberView:
    """A member as listed to collaborators, with the owner shown as role ``owner``."""

    user_id: UUID
    email: str
    role: str
    name: str | None = None
    avatar_url: str | None = None
    permission: ContentPermission | None = None
    joined_at: datetime | None = None
