"""Session repository protocol."""

from typing import Protocol

from domain.entities.session import Session


class ISessionRepository(Protocol):
    """Repository interface for login sessions."""

    async def create(self, session: Session) -> Session:
        """Persist a new session."""
        ...

    async def get_by_token_hash(self, token_hash: str) -> Session | None:
        """Get a session by its hashed token."""
        ...

    async def delete_by_token_hash(self, token_hash: str) -> bool:
        """Delete a session. Returns False when no row matched."""
        ...
