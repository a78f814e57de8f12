"""Reads of projects, dashboards and tasks behind the access gateway."""

from collections.abc import Callable
from datetime import datetime, timezone

from domain.entities.access import AuthorizedAccess
from domain.entities.grant import Action
from domain.entities.principal import Principal
from domain.entities.resource import ResourceRef, ResourceType
from domain.repositories.unit_of_work import IUnitOfWork
from domain.services.access_gateway import AccessGateway
from domain.services.schema_guard import SchemaGuard


class ResourceService:
    """Opens resources for viewing.

    Any side effect of a read happens strictly after the gateway allowed it.
    """

    def __init__(
        self,
        uow_factory: Callable[[], IUnitOfWork],
        gateway: AccessGateway,
        guard: SchemaGuard | None = None,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self._uow_factory = uow_factory
        self._gateway = gateway
        self._guard = guard or SchemaGuard()
        self._clock = clock or (lambda: datetime.now(timezone.utc).replace(tzinfo=None))

    async def open(
        self,
        ref: ResourceRef,
        principal: Principal | None = None,
        share_token: str | None = None,
    ) -> AuthorizedAccess:
        """Authorize a view and, for dashboards, record ``last_viewed_at``.

        Raises:
            ResourceNotFoundError: If denied as not found.
            ForbiddenError: If denied as forbidden.
        """
        decision = await self._gateway.authorize(
            ref, Action.VIEW, principal=principal, share_token=share_token
        )
        access = decision.raise_for_denial()
        resource = access.resource
        if resource.type == ResourceType.DASHBOARD:
            viewed_at = self._clock()

            async def _run() -> None:
                async with self._uow_factory() as uow:
                    await uow.resources.touch_last_viewed(resource.type, resource.id, viewed_at)
                    await uow.commit()

            await self._guard.with_repair(_run)
            resource.last_viewed_at = viewed_at
        return access
