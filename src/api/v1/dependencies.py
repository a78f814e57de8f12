"""Dependency injection factories for API v1."""

from functools import lru_cache
from typing import Callable

from core.config import settings
from domain.services.access_gateway import AccessGateway
from domain.services.membership_service import MembershipService
from domain.services.resource_service import ResourceService
from domain.services.role_resolver import RoleResolver
from domain.services.schema_guard import SchemaGuard
from domain.services.token_service import TokenService
from infrastructure.database.schema_repairs import REPAIRS, SQLAlchemyRepairExecutor
from infrastructure.database.session import async_session_factory, engine
from infrastructure.database.sqlalchemy_uow import SQLAlchemyUnitOfWork
from infrastructure.notify.email_notifier import build_notifier
from infrastructure.notify.provider import INotifier


def get_uow_factory() -> Callable[[], SQLAlchemyUnitOfWork]:
    """Factory for creating Unit of Work instances."""

    def factory() -> SQLAlchemyUnitOfWork:
        return SQLAlchemyUnitOfWork(async_session_factory)

    return factory


@lru_cache
def get_schema_guard() -> SchemaGuard:
    """Get the process-wide SchemaGuard (holds the completed-repair markers)."""
    return SchemaGuard(
        REPAIRS,
        SQLAlchemyRepairExecutor(engine),
        enabled=settings.schema_repair_enabled,
    )


@lru_cache
def get_role_resolver() -> RoleResolver:
    """Get RoleResolver instance."""
    return RoleResolver(get_uow_factory(), guard=get_schema_guard())


@lru_cache
def get_token_service() -> TokenService:
    """Get TokenService instance."""
    return TokenService(
        get_uow_factory(),
        get_role_resolver(),
        guard=get_schema_guard(),
        session_ttl_days=settings.session_ttl_days,
        invitation_ttl_days=settings.invitation_ttl_days,
    )


@lru_cache
def get_access_gateway() -> AccessGateway:
    """Get AccessGateway instance."""
    return AccessGateway(
        get_role_resolver(),
        get_token_service(),
        timeout_seconds=settings.authorization_timeout_seconds,
    )


@lru_cache
def get_membership_service() -> MembershipService:
    """Get MembershipService instance."""
    return MembershipService(get_uow_factory(), get_role_resolver(), guard=get_schema_guard())


@lru_cache
def get_resource_service() -> ResourceService:
    """Get ResourceService instance."""
    return ResourceService(get_uow_factory(), get_access_gateway(), guard=get_schema_guard())


@lru_cache
def get_notifier() -> INotifier:
    """Get the email notifier for the configured environment."""
    return build_notifier()
