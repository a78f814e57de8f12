"""Project and dashboard membership routes."""

from uuid import UUID

from fastapi import APIRouter, Depends, Request, status

from api.dependencies.auth import CurrentPrincipal
from api.v1.dependencies import get_membership_service
from api.v1.links import ResourceCollection
from api.v1.schemas.common import ERROR_RESPONSES
from api.v1.schemas.member import (
    AddMemberRequest,
    MemberListResponse,
    UpdateMemberRequest,
)
from core.rate_limit import limiter
from domain.entities.membership import ContentPermission, MemberRole
from domain.entities.resource import ResourceRef
from domain.services.membership_service import MembershipService

router = APIRouter(prefix="/{collection}/{resource_id}/members", tags=["members"])


@router.get(
    "",
    response_model=MemberListResponse,
    summary="List members",
    responses=ERROR_RESPONSES,
)
@limiter.limit("30/minute")  # type: ignore[untyped-decorator]
async def list_members(
    request: Request,
    collection: ResourceCollection,
    resource_id: UUID,
    principal: CurrentPrincipal,
    service: MembershipService = Depends(get_membership_service),
) -> MemberListResponse:
    """List the owner followed by every member. Requires membership."""
    members = await service.list_members(
        principal.id, ResourceRef(collection.resource_type, resource_id)
    )
    return MemberListResponse.from_views(members)


@router.post(
    "",
    response_model=MemberListResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Add a member",
    responses={
        **ERROR_RESPONSES,
        400: {"description": "Target is the owner"},
        409: {"description": "Already a member"},
    },
)
@limiter.limit("20/minute")  # type: ignore[untyped-decorator]
async def add_member(
    request: Request,
    collection: ResourceCollection,
    resource_id: UUID,
    body: AddMemberRequest,
    principal: CurrentPrincipal,
    service: MembershipService = Depends(get_membership_service),
) -> MemberListResponse:
    """Add an existing user. Requires Admin+ role."""
    members = await service.add_member(
        principal.id,
        ResourceRef(collection.resource_type, resource_id),
        body.user_id,
        role=body.role,
    )
    return MemberListResponse.from_views(members)


@router.patch(
    "/{user_id}",
    response_model=MemberListResponse,
    summary="Change a member's role or permission",
    responses={**ERROR_RESPONSES, 400: {"description": "Nothing to change, or target is the owner"}},
)
@limiter.limit("20/minute")  # type: ignore[untyped-decorator]
async def update_member(
    request: Request,
    collection: ResourceCollection,
    resource_id: UUID,
    user_id: UUID,
    body: UpdateMemberRequest,
    principal: CurrentPrincipal,
    service: MembershipService = Depends(get_membership_service),
) -> MemberListResponse:
    """Update a membership row. Requires Admin+ role."""
    members = await service.update_member(
        principal.id,
        ResourceRef(collection.resource_type, resource_id),
        user_id,
        role=MemberRole(body.role) if body.role else None,
        permission=ContentPermission.parse(body.permission) if body.permission else None,
    )
    return MemberListResponse.from_views(members)


@router.delete(
    "/{user_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Remove a member",
    responses={**ERROR_RESPONSES, 400: {"description": "Target is the owner"}},
)
@limiter.limit("20/minute")  # type: ignore[untyped-decorator]
async def remove_member(
    request: Request,
    collection: ResourceCollection,
    resource_id: UUID,
    user_id: UUID,
    principal: CurrentPrincipal,
    service: MembershipService = Depends(get_membership_service),
) -> None:
    """Remove a member. Requires Admin+ role."""
    await service.remove_member(
        principal.id, ResourceRef(collection.resource_type, resource_id), user_id
    )
