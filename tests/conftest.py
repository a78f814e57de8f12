"""Pytest configuration and fixtures."""

import os
from collections.abc import AsyncGenerator, Awaitable, Callable
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any
from uuid import UUID

# Disable rate limiting in tests
os.environ["RATE_LIMIT_ENABLED"] = "false"

import pytest
import structlog
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.ext.compiler import compiles

from core.security import hash_password
from domain.entities.membership import ContentPermission, MemberRole, Membership
from domain.entities.principal import User
from domain.entities.resource import Resource, ResourceType, Task
from domain.services.access_gateway import AccessGateway
from domain.services.membership_service import MembershipService
from domain.services.resource_service import ResourceService
from domain.services.role_resolver import RoleResolver
from domain.services.schema_guard import SchemaGuard
from domain.services.token_service import TokenService
from infrastructure.database.models import Base
from infrastructure.database.schema_repairs import REPAIRS, SQLAlchemyRepairExecutor
from infrastructure.database.sqlalchemy_uow import SQLAlchemyUnitOfWork
from infrastructure.notify.provider import DeliveryStatus, EmailMessage
from main import create_app

# Loggers must stay uncached so structlog.testing.capture_logs sees them.
structlog.configure(cache_logger_on_first_use=False)

# Low iteration count for tests.
TEST_PASSWORD = "correct horse battery staple"
TEST_PASSWORD_HASH = hash_password(TEST_PASSWORD, iterations=1_000)


# Compile JSONB as JSON for SQLite (used in tests)
@compiles(JSONB, "sqlite")
def _compile_jsonb_sqlite(type_: Any, compiler: Any, **kw: Any) -> str:
    return "JSON"


@pytest.fixture
def database_path(tmp_path: Path) -> Path:
    return tmp_path / "test.db"


@pytest.fixture
async def engine(database_path: Path) -> AsyncGenerator[AsyncEngine, None]:
    """Create a file-backed SQLite engine so repair DDL and queries share one schema."""
    engine = create_async_engine(f"sqlite+aiosqlite:///{database_path}", echo=False)
    yield engine
    await engine.dispose()


@pytest.fixture
async def setup_database(engine: AsyncEngine) -> None:
    """Create all tables at the current schema."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


@pytest.fixture
def session_factory(
    engine: AsyncEngine, setup_database: None
) -> async_sessionmaker[AsyncSession]:
    """Create session factory."""
    return async_sessionmaker(
        bind=engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )


@pytest.fixture
def uow_factory(
    session_factory: async_sessionmaker[AsyncSession],
) -> Callable[[], SQLAlchemyUnitOfWork]:
    def factory() -> SQLAlchemyUnitOfWork:
        return SQLAlchemyUnitOfWork(session_factory)

    return factory


@pytest.fixture
def schema_guard(engine: AsyncEngine) -> SchemaGuard:
    return SchemaGuard(REPAIRS, SQLAlchemyRepairExecutor(engine))


@dataclass
class Services:
    """The real service graph, wired against the test database."""

    resolver: RoleResolver
    tokens: TokenService
    gateway: AccessGateway
    members: MembershipService
    resources: ResourceService


@pytest.fixture
def services(
    uow_factory: Callable[[], SQLAlchemyUnitOfWork], schema_guard: SchemaGuard
) -> Services:
    resolver = RoleResolver(uow_factory, guard=schema_guard)
    tokens = TokenService(uow_factory, resolver, guard=schema_guard)
    gateway = AccessGateway(resolver, tokens, timeout_seconds=5.0)
    return Services(
        resolver=resolver,
        tokens=tokens,
        gateway=gateway,
        members=MembershipService(uow_factory, resolver, guard=schema_guard),
        resources=ResourceService(uow_factory, gateway, guard=schema_guard),
    )


@dataclass
class RecordingNotifier:
    """Notifier that keeps messages instead of sending them."""

    status: DeliveryStatus = DeliveryStatus.DELIVERED
    sent: list[tuple[str, EmailMessage]] = field(default_factory=list)

    async def notify(self, recipient: str, payload: EmailMessage) -> DeliveryStatus:
        self.sent.append((recipient, payload))
        return self.status


@pytest.fixture
def notifier() -> RecordingNotifier:
    return RecordingNotifier()


# --- Data factories ---


MakeUser = Callable[..., Awaitable[User]]
MakeResource = Callable[..., Awaitable[Resource]]


@pytest.fixture
def make_user(uow_factory: Callable[[], SQLAlchemyUnitOfWork]) -> MakeUser:
    """Insert a user who can log in with TEST_PASSWORD."""

    async def _make(email: str, name: str | None = None) -> User:
        async with uow_factory() as uow:
            user = await uow.users.create(
                User(email=email, name=name, password_hash=TEST_PASSWORD_HASH)
            )
            await uow.commit()
        return user

    return _make


@pytest.fixture
def make_resource(uow_factory: Callable[[], SQLAlchemyUnitOfWork]) -> MakeResource:
    """Insert a project (default) or dashboard owned by ``owner``."""

    async def _make(
        owner: User,
        resource_type: ResourceType = ResourceType.PROJECT,
        name: str = "Roadmap",
        **kwargs: Any,
    ) -> Resource:
        async with uow_factory() as uow:
            resource = await uow.resources.create(
                Resource(type=resource_type, name=name, owner_id=owner.id, **kwargs)
            )
            await uow.commit()
        return resource

    return _make


@pytest.fixture
def make_task(uow_factory: Callable[[], SQLAlchemyUnitOfWork]) -> Callable[..., Awaitable[Task]]:
    async def _make(project: Resource, title: str = "Write launch post") -> Task:
        async with uow_factory() as uow:
            task = await uow.resources.create_task(Task(project_id=project.id, title=title))
            await uow.commit()
        return task

    return _make


@pytest.fixture
def add_member(
    uow_factory: Callable[[], SQLAlchemyUnitOfWork],
) -> Callable[..., Awaitable[Membership]]:
    async def _add(
        resource: Resource,
        user: User,
        role: MemberRole = MemberRole.MEMBER,
        permission: ContentPermission | None = None,
    ) -> Membership:
        async with uow_factory() as uow:
            membership = await uow.members.add(
                Membership(
                    resource_type=resource.type,
                    resource_id=resource.id,
                    user_id=user.id,
                    role=role,
                    permission=permission,
                )
            )
            await uow.commit()
        return membership

    return _add


# --- API ---


@pytest.fixture
def app(
    services: Services,
    schema_guard: SchemaGuard,
    session_factory: async_sessionmaker[AsyncSession],
    uow_factory: Callable[[], SQLAlchemyUnitOfWork],
    notifier: RecordingNotifier,
) -> FastAPI:
    """The application with every service bound to the test database."""
    from api.v1.dependencies import (
        get_access_gateway,
        get_membership_service,
        get_notifier,
        get_resource_service,
        get_role_resolver,
        get_schema_guard,
        get_token_service,
        get_uow_factory,
    )
    from infrastructure.database.session import get_async_session

    app = create_app()

    async def override_get_async_session() -> AsyncGenerator[AsyncSession, None]:
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_uow_factory] = lambda: uow_factory
    app.dependency_overrides[get_schema_guard] = lambda: schema_guard
    app.dependency_overrides[get_role_resolver] = lambda: services.resolver
    app.dependency_overrides[get_token_service] = lambda: services.tokens
    app.dependency_overrides[get_access_gateway] = lambda: services.gateway
    app.dependency_overrides[get_membership_service] = lambda: services.members
    app.dependency_overrides[get_resource_service] = lambda: services.resources
    app.dependency_overrides[get_notifier] = lambda: notifier
    app.dependency_overrides[get_async_session] = override_get_async_session
    return app


@pytest.fixture
async def client(app: FastAPI) -> AsyncGenerator[AsyncClient, None]:
    """Create async test client (no auth)."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture
def auth_headers(services: Services) -> Callable[[User], Awaitable[dict[str, str]]]:
    """Open a real session for ``user`` and return its Authorization header."""

    async def _headers(user: User) -> dict[str, str]:
        issued = await services.tokens.issue_session(user.id)
        return {"Authorization": f"Bearer {issued.value}"}

    return _headers


def api_path(collection: str, resource_id: UUID, suffix: str = "") -> str:
    return f"/api/v1/{collection}/{resource_id}{suffix}"
