"""Shared fixtures for unit tests."""

from datetime import datetime
from typing import Any
from unittest.mock import AsyncMock
from uuid import UUID, uuid4

import pytest

from domain.entities.principal import Principal
from domain.entities.resource import Resource, ResourceType


class FakeUnitOfWork:
    """Fake Unit of Work with all 5 repository mocks for unit testing."""

    def __init__(self) -> None:
        self.users = AsyncMock()
        self.sessions = AsyncMock()
        self.resources = AsyncMock()
        self.members = AsyncMock()
        self.invitations = AsyncMock()
        self.committed = False
        self.rolled_back = False
        # Unconfigured lookups find nothing.
        self.members.get.return_value = None
        self.resources.get_task.return_value = None

    async def commit(self) -> None:
        self.committed = True

    async def rollback(self) -> None:
        self.rolled_back = True

    async def __aenter__(self) -> "FakeUnitOfWork":
        return self

    async def __aexit__(self, *args: Any) -> None:
        pass


class FakeClock:
    """Settable clock for expiry tests."""

    def __init__(self, now: datetime) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now


@pytest.fixture
def uow() -> FakeUnitOfWork:
    """Create a fresh FakeUnitOfWork."""
    return FakeUnitOfWork()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock(datetime(2026, 3, 1, 12, 0, 0))


@pytest.fixture
def owner_id() -> UUID:
    """A random owner ID."""
    return uuid4()


@pytest.fixture
def user_id() -> UUID:
    """A random user ID (distinct from owner_id)."""
    return uuid4()


@pytest.fixture
def principal(user_id: UUID) -> Principal:
    return Principal(id=user_id, email="alice@example.com", name="Alice")


@pytest.fixture
def project(owner_id: UUID) -> Resource:
    return Resource(type=ResourceType.PROJECT, name="Roadmap", owner_id=owner_id)


@pytest.fixture
def dashboard(owner_id: UUID) -> Resource:
    return Resource(type=ResourceType.DASHBOARD, name="Ops", owner_id=owner_id)
