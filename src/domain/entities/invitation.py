"""Invitation domain entity and accept outcomes."""

from dataclasses import dataclass, field
from datetime import datetime, timedelta
from enum import StrEnum
from uuid import UUID, uuid4

from core.exceptions import (
    InvitationConflictError,
    InvitationEmailMismatchError,
    InvitationExpiredError,
    InvitationNotFoundError,
)
from domain.entities.membership import ContentPermission, Membership
from domain.entities.resource import ResourceRef, ResourceType

# Default invitation expiry: 7 days
INVITATION_EXPIRY_DAYS = 7


@dataclass
class Invitation:
    """An email-bound, single-use invitation to a project or dashboard."""

    resource_type: ResourceType
    resource_id: UUID
    email: str
    token_hash: str
    invited_by: UUID
    permission: ContentPermission = ContentPermission.FULL_EDIT
    id: UUID = field(default_factory=uuid4)
    task_id: UUID | None = None
    created_at: datetime = field(default_factory=datetime.utcnow)
    expires_at: datetime = field(
        default_factory=lambda: datetime.utcnow() + timedelta(days=INVITATION_EXPIRY_DAYS)
    )
    accepted_at: datetime | None = None

    @property
    def ref(self) -> ResourceRef:
        return ResourceRef(self.resource_type, self.resource_id)

    @property
    def is_accepted(self) -> bool:
        return self.accepted_at is not None

    def is_expired_at(self, now: datetime) -> bool:
        """Expiry is checked at use time, never swept."""
        return now > self.expires_at

    def matches_email(self, email: str) -> bool:
        return self.email.strip().lower() == email.strip().lower()


class AcceptStatus(StrEnum):
    """Result of presenting an invitation token."""

    ACCEPTED = "accepted"
    ALREADY_MEMBER = "already_member"
    NOT_FOUND = "not_found"
    EXPIRED = "expired"
    EMAIL_MISMATCH = "email_mismatch"
    CONFLICT = "conflict"


_FAILURES = {
    AcceptStatus.NOT_FOUND: InvitationNotFoundError,
    AcceptStatus.EXPIRED: InvitationExpiredError,
    AcceptStatus.EMAIL_MISMATCH: InvitationEmailMismatchError,
    AcceptStatus.CONFLICT: InvitationConflictError,
}


@dataclass(frozen=True)
class AcceptOutcome:
    """Typed outcome of ``TokenService.accept``."""

    status: AcceptStatus
    invitation: Invitation | None = None
    membership: Membership | None = None

    @property
    def succeeded(self) -> bool:
        return self.status in (AcceptStatus.ACCEPTED, AcceptStatus.ALREADY_MEMBER)

    def raise_for_status(self) -> Invitation:
        """Return the consumed invitation, or raise the matching exception."""
        if self.succeeded and self.invitation is not None:
            return self.invitation
        raise _FAILURES.get(self.status, InvitationNotFoundError)()
