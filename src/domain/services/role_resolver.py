"""Resolution of a principal's effective grant on a resource."""

from collections.abc import Callable
from dataclasses import dataclass
from uuid import UUID

from domain.entities.access import AccessDecision, AuthorizedAccess, DenyReason
from domain.entities.grant import Action, EffectiveGrant
from domain.entities.membership import Membership
from domain.entities.resource import Resource, ResourceRef, ResourceType
from domain.repositories.unit_of_work import IUnitOfWork
from domain.services.schema_guard import SchemaGuard


def effective_grant(
    resource: Resource,
    user_id: UUID | None,
    membership: Membership | None,
) -> EffectiveGrant | None:
    """Apply the grant precedence for one principal on one resource.

    Highest tier wins and lower tiers are never combined:

    1. ``owner_id`` match gives ``owner``, whatever membership rows exist.
    2. A membership row gives its role, carrying its permission along.
    3. A public resource gives ``guest-view``.
    4. Otherwise there is no grant.
    """
    if user_id is not None and resource.owner_id == user_id:
        return EffectiveGrant.owner()
    if user_id is not None and membership is not None and membership.user_id == user_id:
        return EffectiveGrant.from_role(membership.role, membership.permission)
    if resource.is_public:
        return EffectiveGrant.guest()
    return None


@dataclass(frozen=True)
class GrantLookup:
    """A loaded resource and the grant resolved on it (either may be None)."""

    resource: Resource | None
    grant: EffectiveGrant | None


def decide(
    ref: ResourceRef,
    lookup: GrantLookup,
    action: Action,
    *,
    authenticated: bool,
) -> AccessDecision:
    """Turn a lookup into Allow or Deny.

    Callers without a session never learn that a private resource exists.
    """
    if lookup.resource is None:
        return AccessDecision.deny(ref, DenyReason.NOT_FOUND)
    if lookup.grant is None:
        reason = DenyReason.FORBIDDEN if authenticated else DenyReason.NOT_FOUND
        return AccessDecision.deny(ref, reason)
    if not lookup.grant.permits(action):
        return AccessDecision.deny(ref, DenyReason.FORBIDDEN)
    return AccessDecision.allow(lookup.resource, lookup.grant, ref)


async def load_resource(uow: IUnitOfWork, ref: ResourceRef) -> Resource | None:
    """Load the grant-bearing resource for a ref. Tasks resolve to their project."""
    if ref.type == ResourceType.TASK:
        task = await uow.resources.get_task(ref.id)
        if task is None:
            return None
        return await uow.resources.get(ResourceType.PROJECT, task.project_id)
    return await uow.resources.get(ref.type, ref.id)


class RoleResolver:
    """Computes effective grants from ownership, membership and sharing flags."""

    def __init__(
        self,
        uow_factory: Callable[[], IUnitOfWork],
        guard: SchemaGuard | None = None,
    ) -> None:
        self._uow_factory = uow_factory
        self._guard = guard or SchemaGuard()

    async def lookup(self, ref: ResourceRef, user_id: UUID | None) -> GrantLookup:
        """Load the resource and resolve the grant for ``user_id``."""
        return await self._guard.with_repair(lambda: self._lookup(ref, user_id))

    async def _lookup(self, ref: ResourceRef, user_id: UUID | None) -> GrantLookup:
        async with self._uow_factory() as uow:
            resource = await load_resource(uow, ref)
            if resource is None:
                return GrantLookup(None, None)
            membership = None
            if user_id is not None and resource.owner_id != user_id:
                membership = await uow.members.get(resource.type, resource.id, user_id)
            return GrantLookup(resource, effective_grant(resource, user_id, membership))

    async def resolve(self, user_id: UUID | None, ref: ResourceRef) -> EffectiveGrant | None:
        """Return the effective grant, or None when there is none (or no resource)."""
        return (await self.lookup(ref, user_id)).grant

    async def can(self, user_id: UUID | None, ref: ResourceRef, action: Action) -> bool:
        grant = await self.resolve(user_id, ref)
        return grant is not None and grant.permits(action)

    async def require(self, user_id: UUID, ref: ResourceRef, action: Action) -> AuthorizedAccess:
        """Resolve and raise unless ``user_id`` may perform ``action``.

        Raises:
            ResourceNotFoundError: If the resource does not exist.
            ForbiddenError: If the grant is missing or too weak.
        """
        lookup = await self.lookup(ref, user_id)
        return decide(ref, lookup, action, authenticated=True).raise_for_denial()
