"""Invitation API routes."""

from uuid import UUID

from fastapi import APIRouter, Depends, Request, status

from api.dependencies.auth import CurrentPrincipal, OptionalPrincipal
from api.v1.dependencies import get_notifier, get_token_service
from api.v1.links import ResourceCollection, accept_url
from api.v1.schemas.common import ERROR_RESPONSES
from api.v1.schemas.invitation import (
    AcceptInvitationRequest,
    AcceptInvitationResponse,
    CreateInvitationRequest,
    InvitationCreatedResponse,
    InvitationListResponse,
    InvitationResponse,
)
from core.config import settings
from core.exceptions import AuthenticationError
from core.rate_limit import limiter
from domain.entities.invitation import AcceptStatus
from domain.entities.resource import ResourceRef, ResourceType
from domain.services.token_service import TokenService
from infrastructure.notify.email_notifier import render_invitation
from infrastructure.notify.provider import INotifier

# Resource-scoped invitation routes
resource_invitations_router = APIRouter(
    prefix="/{collection}/{resource_id}/invitations",
    tags=["invitations"],
)

# Invitee-facing routes
invitations_router = APIRouter(
    prefix="/invitations",
    tags=["invitations"],
)


@resource_invitations_router.post(
    "",
    response_model=InvitationCreatedResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Invite an email address",
    responses={
        **ERROR_RESPONSES,
        201: {"description": "Invitation created"},
        400: {"description": "Invalid email or permission"},
    },
)
@limiter.limit("10/minute")  # type: ignore[untyped-decorator]
async def create_invitation(
    request: Request,
    collection: ResourceCollection,
    resource_id: UUID,
    body: CreateInvitationRequest,
    principal: CurrentPrincipal,
    tokens: TokenService = Depends(get_token_service),
    notifier: INotifier = Depends(get_notifier),
) -> InvitationCreatedResponse:
    """Create an invitation and email its link. Requires Admin+ role.

    The invitation stays valid when email delivery fails; the response
    reports the delivery status and carries the link for manual sharing.
    """
    invitation, issued, resource = await tokens.invite(
        principal.id,
        ResourceRef(collection.resource_type, resource_id),
        body.email,
        body.permission,
        ttl_days=body.ttl_days,
        task_id=body.task_id,
    )
    link = accept_url(resource.type, resource.id, issued.value)
    delivery = await notifier.notify(
        invitation.email,
        render_invitation(
            inviter_name=principal.name or principal.email,
            resource_name=resource.name,
            resource_kind=resource.type.value,
            permission=invitation.permission.label,
            accept_url=link,
            ttl_days=settings.invitation_ttl_days if body.ttl_days is None else body.ttl_days,
        ),
    )
    return InvitationCreatedResponse(
        data=InvitationResponse.from_entity(invitation),
        accept_url=link,
        delivery=delivery.value,
    )


@resource_invitations_router.get(
    "",
    response_model=InvitationListResponse,
    summary="List invitations",
    responses=ERROR_RESPONSES,
)
@limiter.limit("30/minute")  # type: ignore[untyped-decorator]
async def list_invitations(
    request: Request,
    collection: ResourceCollection,
    resource_id: UUID,
    principal: CurrentPrincipal,
    tokens: TokenService = Depends(get_token_service),
) -> InvitationListResponse:
    """List all invitations for a resource. Requires Admin+ role."""
    invitations = await tokens.list_invitations(
        principal.id, ResourceRef(collection.resource_type, resource_id)
    )
    data = [InvitationResponse.from_entity(inv) for inv in invitations]
    return InvitationListResponse(data=data, meta={"total": len(data)})


@invitations_router.post(
    "/accept",
    response_model=AcceptInvitationResponse,
    summary="Accept invitation",
    responses={
        200: {"description": "Invitation accepted, or already a member"},
        401: {"description": "Login required; details carry the token to replay"},
        403: {"description": "Invitation sent to a different email"},
        404: {"description": "Invalid or already used invitation"},
        409: {"description": "Consumed by a concurrent request"},
        410: {"description": "Invitation expired"},
    },
)
@limiter.limit("10/minute")  # type: ignore[untyped-decorator]
async def accept_invitation(
    request: Request,
    body: AcceptInvitationRequest,
    principal: OptionalPrincipal,
    tokens: TokenService = Depends(get_token_service),
) -> AcceptInvitationResponse:
    """Accept an invitation using its token.

    Anonymous callers get a 401 whose details let the client replay the
    token after login or signup.
    """
    if principal is None:
        raise AuthenticationError(
            message="Login required to accept this invitation",
            details={"login_required": True, "invite_token": body.token},
        )

    ref = None
    if body.resource_type and body.resource_id:
        ref = ResourceRef(ResourceType(body.resource_type), body.resource_id)

    outcome = await tokens.accept(body.token, principal, ref)
    invitation = outcome.raise_for_status()
    return AcceptInvitationResponse(
        status=outcome.status.value,
        already_member=outcome.status == AcceptStatus.ALREADY_MEMBER,
        resource_type=invitation.resource_type.value,
        resource_id=invitation.resource_id,
        task_id=invitation.task_id,
        permission=invitation.permission.label,
    )
