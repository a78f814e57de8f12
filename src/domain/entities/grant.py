"""Effective grants and the actions they permit."""

from dataclasses import dataclass
from enum import IntEnum, StrEnum

from domain.entities.membership import ContentPermission, MemberRole


class GrantLevel(IntEnum):
    """Role tiers ordered by privilege."""

    GUEST_VIEW = 10
    MEMBER = 20
    ADMIN = 30
    OWNER = 40


class GrantSource(StrEnum):
    """Where a grant came from."""

    OWNERSHIP = "ownership"
    MEMBERSHIP = "membership"
    PUBLIC = "public"
    SHARE_LINK = "share_link"


class Action(StrEnum):
    """Operations a route handler may ask to perform on a resource."""

    VIEW = "view"
    VIEW_MEMBERS = "view_members"
    COMMENT = "comment"
    EDIT_CONTENT = "edit_content"
    MANAGE_CONTENT = "manage_content"
    EDIT_RESOURCE = "edit_resource"
    MANAGE_MEMBERS = "manage_members"
    MANAGE_SHARING = "manage_sharing"
    DELETE = "delete"


_ROLE_LEVELS: dict[MemberRole, GrantLevel] = {
    MemberRole.ADMIN: GrantLevel.ADMIN,
    MemberRole.MEMBER: GrantLevel.MEMBER,
}


@dataclass(frozen=True)
class EffectiveGrant:
    """The resolved role of a principal on a resource.

    ``permission`` only narrows comment and content actions for members. It
    never promotes the role.
    """

    level: GrantLevel
    source: GrantSource
    permission: ContentPermission | None = None

    @classmethod
    def owner(cls) -> "EffectiveGrant":
        return cls(GrantLevel.OWNER, GrantSource.OWNERSHIP)

    @classmethod
    def from_role(
        cls, role: MemberRole, permission: ContentPermission | None = None
    ) -> "EffectiveGrant":
        return cls(_ROLE_LEVELS[role], GrantSource.MEMBERSHIP, permission)

    @classmethod
    def guest(cls, source: GrantSource = GrantSource.PUBLIC) -> "EffectiveGrant":
        return cls(GrantLevel.GUEST_VIEW, source)

    @property
    def role(self) -> str:
        """Role name as shown to clients: owner, admin, member or guest-view."""
        return self.level.name.lower().replace("_", "-")

    def _permission_at_least(self, required: ContentPermission) -> bool:
        # Only plain members are narrowed; admins and owners ignore the column.
        if self.level != GrantLevel.MEMBER or self.permission is None:
            return True
        return self.permission >= required

    @property
    def can_view(self) -> bool:
        return True

    @property
    def can_view_members(self) -> bool:
        return self.level >= GrantLevel.MEMBER

    @property
    def can_comment(self) -> bool:
        return self.level >= GrantLevel.MEMBER and self._permission_at_least(
            ContentPermission.COMMENT
        )

    @property
    def can_edit_content(self) -> bool:
        return self.level >= GrantLevel.MEMBER and self._permission_at_least(
            ContentPermission.EDIT
        )

    @property
    def can_manage_content(self) -> bool:
        """Delete or restructure content, e.g. tasks and sections."""
        return self.level >= GrantLevel.MEMBER and self._permission_at_least(
            ContentPermission.FULL_EDIT
        )

    @property
    def can_edit_resource(self) -> bool:
        return self.level >= GrantLevel.ADMIN

    @property
    def can_manage_members(self) -> bool:
        return self.level >= GrantLevel.ADMIN

    @property
    def can_manage_sharing(self) -> bool:
        return self.level == GrantLevel.OWNER

    @property
    def can_delete(self) -> bool:
        return self.level == GrantLevel.OWNER

    def permits(self, action: Action) -> bool:
        """Check whether this grant allows an action."""
        return bool(getattr(self, _ACTION_PREDICATES[action]))


_ACTION_PREDICATES: dict[Action, str] = {
    Action.VIEW: "can_view",
    Action.VIEW_MEMBERS: "can_view_members",
    Action.COMMENT: "can_comment",
    Action.EDIT_CONTENT: "can_edit_content",
    Action.MANAGE_CONTENT: "can_manage_content",
    Action.EDIT_RESOURCE: "can_edit_resource",
    Action.MANAGE_MEMBERS: "can_manage_members",
    Action.MANAGE_SHARING: "can_manage_sharing",
    Action.DELETE: "can_delete",
}
