"""Unit of Work protocol."""

from typing import Protocol

from domain.repositories.invitation_repository import IInvitationRepository
from domain.repositories.membership_repository import IMembershipRepository
from domain.repositories.resource_repository import IResourceRepository
from domain.repositories.session_repository import ISessionRepository
from domain.repositories.user_repository import IUserRepository


class IUnitOfWork(Protocol):
    """Unit of Work interface for managing transactions."""

    users: IUserRepository
    sessions: ISessionRepository
    resources: IResourceRepository
    members: IMembershipRepository
    invitations: IInvitationRepository

    async def commit(self) -> None:
        """Commit the current transaction."""
        ...

    async def rollback(self) -> None:
        """Rollback the current transaction."""
        ...

    async def __aenter__(self) -> "IUnitOfWork":
        """Enter the context manager."""
        ...

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:  # type: ignore
        """Exit the context manager."""
        ...
