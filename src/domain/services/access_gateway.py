"""Single entry point for authorization decisions."""

import asyncio
from uuid import UUID

import structlog

from domain.entities.access import AccessDecision, DenyReason
from domain.entities.grant import Action, EffectiveGrant, GrantSource
from domain.entities.principal import Principal
from domain.entities.resource import ResourceRef, ResourceType
from domain.services.role_resolver import GrantLookup, RoleResolver, decide
from domain.services.token_service import TokenService

logger = structlog.get_logger()

_UNKNOWN_ID = UUID(int=0)


class AccessGateway:
    """Answers ``authorize(principal | token, resource, action)``.

    Decisions have no side effects. Callers perform any mutation (such as
    touching ``last_viewed_at``) only after an Allow.
    """

    def __init__(
        self,
        resolver: RoleResolver,
        tokens: TokenService,
        timeout_seconds: float | None = None,
    ) -> None:
        self._resolver = resolver
        self._tokens = tokens
        self._timeout = timeout_seconds

    async def authorize(
        self,
        ref: ResourceRef,
        action: Action,
        *,
        principal: Principal | None = None,
        share_token: str | None = None,
    ) -> AccessDecision:
        """Decide whether ``principal`` (or a share-link holder) may act on ``ref``.

        A valid share token adds a ``guest-view`` grant only when the caller
        has no stronger one. A timed-out decision is a Deny.
        """
        try:
            decision = await asyncio.wait_for(
                self._decide(ref, action, principal, share_token),
                timeout=self._timeout,
            )
        except TimeoutError:
            logger.warning("authorization_timed_out", resource=str(ref), action=action.value)
            reason = DenyReason.FORBIDDEN if principal else DenyReason.NOT_FOUND
            decision = AccessDecision.deny(ref, reason)

        if not decision.allowed:
            logger.info(
                "authorization_denied",
                resource=str(ref),
                action=action.value,
                reason=decision.reason.value if decision.reason else None,
                user_id=str(principal.id) if principal else None,
            )
        return decision

    async def _decide(
        self,
        ref: ResourceRef,
        action: Action,
        principal: Principal | None,
        share_token: str | None,
    ) -> AccessDecision:
        user_id = principal.id if principal else None
        lookup = await self._resolver.lookup(ref, user_id)
        if (
            lookup.resource is not None
            and lookup.grant is None
            and share_token
            and self._tokens.verify_share_token(lookup.resource, share_token)
        ):
            lookup = GrantLookup(lookup.resource, EffectiveGrant.guest(GrantSource.SHARE_LINK))
        return decide(ref, lookup, action, authenticated=principal is not None)

    async def authorize_session(
        self,
        session_token: str | None,
        ref: ResourceRef,
        action: Action,
        *,
        share_token: str | None = None,
    ) -> AccessDecision:
        """Resolve the session first, then authorize. Invalid sessions count as anonymous."""
        principal = await self._tokens.validate_session(session_token)
        return await self.authorize(ref, action, principal=principal, share_token=share_token)

    async def authorize_share_link(
        self,
        resource_type: ResourceType,
        token: str,
        action: Action = Action.VIEW,
        *,
        principal: Principal | None = None,
    ) -> AccessDecision:
        """Authorize a request that arrives through a public share link.

        Unknown and rotated-out tokens are NotFound.
        """
        resource = await self._tokens.resolve_share_token(resource_type, token)
        if resource is None:
            logger.info("share_link_rejected", resource_type=resource_type.value)
            # The token is the only identifier the caller presented.
            return AccessDecision.deny(
                ResourceRef(resource_type, _UNKNOWN_ID), DenyReason.NOT_FOUND
            )
        return await self.authorize(
            resource.ref, action, principal=principal, share_token=token
        )
