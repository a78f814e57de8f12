"""Login session domain entity."""

from dataclasses import dataclass, field
from datetime import datetime, timedelta
from uuid import UUID, uuid4

# Default session lifetime: 7 days
SESSION_EXPIRY_DAYS = 7


@dataclass
class Session:
    """A server-side login session.

    Only the SHA-256 hash of the bearer token is stored. ``ip_address`` and
    ``user_agent`` are kept for audit and are not enforced on validation.
    """

    user_id: UUID
    token_hash: str
    id: UUID = field(default_factory=uuid4)
    ip_address: str | None = None
    user_agent: str | None = None
    created_at: datetime = field(default_factory=datetime.utcnow)
    expires_at: datetime = field(
        default_factory=lambda: datetime.utcnow() + timedelta(days=SESSION_EXPIRY_DAYS)
    )

    def is_expired_at(self, now: datetime) -> bool:
        """A session is invalid from its expiry instant onwards."""
        return now >= self.expires_at
