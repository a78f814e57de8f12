"""Principal and user domain entities."""

from dataclasses import dataclass, field
from datetime import datetime
from uuid import UUID, uuid4


@dataclass(frozen=True)
class Principal:
    """An authenticated identity, produced by session validation."""

    id: UUID
    email: str
    name: str | None = None


@dataclass
class User:
    """Domain entity for a registered user."""

    email: str
    name: str | None = None
    password_hash: str | None = None
    avatar_url: str | None = None
    id: UUID = field(default_factory=uuid4)
    created_at: datetime = field(default_factory=datetime.utcnow)
    updated_at: datetime = field(default_factory=datetime.utcnow)

    def to_principal(self) -> Principal:
        """Project the user onto the identity carried through a request."""
        return Principal(id=self.id, email=self.email, name=self.name)
