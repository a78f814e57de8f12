"""Authorization decision value objects."""

from dataclasses import dataclass
from enum import StrEnum

from core.exceptions import ForbiddenError, ResourceNotFoundError
from domain.entities.grant import EffectiveGrant
from domain.entities.resource import Resource, ResourceRef


class DenyReason(StrEnum):
    """Why a request was denied.

    ``NOT_FOUND`` is also used when disclosing that the resource exists would
    leak information to the caller.
    """

    NOT_FOUND = "not_found"
    FORBIDDEN = "forbidden"


@dataclass(frozen=True)
class AuthorizedAccess:
    """An allowed decision, with the resource and grant it was made on."""

    ref: ResourceRef
    resource: Resource
    grant: EffectiveGrant


@dataclass(frozen=True)
class AccessDecision:
    """Allow(grant) or Deny(reason) for one request."""

    allowed: bool
    ref: ResourceRef
    grant: EffectiveGrant | None = None
    reason: DenyReason | None = None
    resource: Resource | None = None

    @classmethod
    def allow(cls, resource: Resource, grant: EffectiveGrant, ref: ResourceRef) -> "AccessDecision":
        return cls(allowed=True, ref=ref, grant=grant, resource=resource)

    @classmethod
    def deny(cls, ref: ResourceRef, reason: DenyReason) -> "AccessDecision":
        return cls(allowed=False, ref=ref, reason=reason)

    def raise_for_denial(self) -> AuthorizedAccess:
        """Return the granted access, or raise the matching HTTP-mapped exception."""
        if self.allowed and self.resource is not None and self.grant is not None:
            return AuthorizedAccess(self.ref, self.resource, self.grant)
        if self.reason == DenyReason.FORBIDDEN:
            raise ForbiddenError()
        raise ResourceNotFoundError(self.ref.type.value)
