"""Sharing settings and public share-link routes."""

from uuid import UUID

from fastapi import APIRouter, Depends, Request

from api.dependencies.auth import CurrentPrincipal, OptionalPrincipal
from api.v1.dependencies import get_access_gateway, get_token_service
from api.v1.links import ResourceCollection, share_url
from api.v1.schemas.common import ERROR_RESPONSES
from api.v1.schemas.resource import ResourceResponse
from api.v1.schemas.sharing import SharingResponse, UpdateSharingRequest
from core.rate_limit import limiter
from domain.entities.grant import Action
from domain.entities.resource import Resource, ResourceRef, ResourceType, SharingGrant
from domain.services.access_gateway import AccessGateway
from domain.services.token_service import TokenService

router = APIRouter(prefix="/{collection}/{resource_id}/sharing", tags=["sharing"])
share_router = APIRouter(prefix="/share", tags=["sharing"])


def _sharing_response(
    resource: Resource, sharing: SharingGrant, can_manage: bool
) -> SharingResponse:
    # Only the owner sees the token itself.
    token = sharing.share_token if can_manage else None
    return SharingResponse(
        resource_type=resource.type.value,
        resource_id=resource.id,
        resource_name=resource.name,
        is_public=sharing.is_public,
        workspace_shared=sharing.workspace_shared,
        share_token=token,
        share_link=share_url(resource.type, token),
        can_manage=can_manage,
    )


@router.get(
    "",
    response_model=SharingResponse,
    summary="Get sharing settings",
    responses=ERROR_RESPONSES,
)
@limiter.limit("30/minute")  # type: ignore[untyped-decorator]
async def get_sharing(
    request: Request,
    collection: ResourceCollection,
    resource_id: UUID,
    principal: CurrentPrincipal,
    tokens: TokenService = Depends(get_token_service),
) -> SharingResponse:
    """Read sharing flags. Members see the flags; the owner also sees the link."""
    resource, grant = await tokens.get_sharing(
        principal.id, ResourceRef(collection.resource_type, resource_id)
    )
    return _sharing_response(resource, resource.sharing, grant.can_manage_sharing)


@router.patch(
    "",
    response_model=SharingResponse,
    summary="Update sharing settings",
    responses={**ERROR_RESPONSES, 400: {"description": "No changes requested"}},
)
@limiter.limit("10/minute")  # type: ignore[untyped-decorator]
async def update_sharing(
    request: Request,
    collection: ResourceCollection,
    resource_id: UUID,
    body: UpdateSharingRequest,
    principal: CurrentPrincipal,
    tokens: TokenService = Depends(get_token_service),
) -> SharingResponse:
    """Change sharing flags and optionally generate a new link. Owner only."""
    ref = ResourceRef(collection.resource_type, resource_id)
    sharing, _ = await tokens.update_sharing(
        principal.id,
        ref,
        is_public=body.is_public,
        workspace_shared=body.workspace_shared,
        regenerate_token=body.generate_token,
    )
    resource, _ = await tokens.get_sharing(principal.id, ref)
    return _sharing_response(resource, sharing, can_manage=True)


@router.post(
    "/rotate",
    response_model=SharingResponse,
    summary="Rotate the share link",
    responses=ERROR_RESPONSES,
)
@limiter.limit("10/minute")  # type: ignore[untyped-decorator]
async def rotate_share_token(
    request: Request,
    collection: ResourceCollection,
    resource_id: UUID,
    principal: CurrentPrincipal,
    tokens: TokenService = Depends(get_token_service),
) -> SharingResponse:
    """Replace the share token. Links built from the old token stop working. Owner only."""
    ref = ResourceRef(collection.resource_type, resource_id)
    await tokens.rotate(principal.id, ref)
    resource, _ = await tokens.get_sharing(principal.id, ref)
    return _sharing_response(resource, resource.sharing, can_manage=True)


@share_router.get(
    "/{resource_type}/{token}",
    response_model=ResourceResponse,
    summary="Open a share link",
    responses={404: ERROR_RESPONSES[404]},
)
@limiter.limit("60/minute")  # type: ignore[untyped-decorator]
async def open_share_link(
    request: Request,
    resource_type: ResourceType,
    token: str,
    principal: OptionalPrincipal,
    gateway: AccessGateway = Depends(get_access_gateway),
) -> ResourceResponse:
    """Resolve a share link. A signed-in member keeps their stronger grant."""
    decision = await gateway.authorize_share_link(
        resource_type, token, Action.VIEW, principal=principal
    )
    access = decision.raise_for_denial()
    return ResourceResponse.build(access.resource, access.grant)
