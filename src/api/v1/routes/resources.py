"""Project, dashboard and task access routes."""

from uuid import UUID

from fastapi import APIRouter, Depends, Request

from api.dependencies.auth import OptionalPrincipal, ShareToken
from api.v1.dependencies import get_access_gateway, get_resource_service
from api.v1.links import ResourceCollection
from api.v1.schemas.common import ERROR_RESPONSES
from api.v1.schemas.resource import GrantResponse, ResourceResponse, TaskAccessResponse
from core.rate_limit import limiter
from domain.entities.grant import Action
from domain.entities.resource import ResourceRef, ResourceType
from domain.services.access_gateway import AccessGateway
from domain.services.resource_service import ResourceService

router = APIRouter(tags=["resources"])
tasks_router = APIRouter(prefix="/tasks", tags=["resources"])


@tasks_router.get(
    "/{task_id}/access",
    response_model=TaskAccessResponse,
    summary="Get the caller's grant on a task",
    responses=ERROR_RESPONSES,
)
@limiter.limit("60/minute")  # type: ignore[untyped-decorator]
async def get_task_access(
    request: Request,
    task_id: UUID,
    principal: OptionalPrincipal,
    share_token: ShareToken,
    gateway: AccessGateway = Depends(get_access_gateway),
) -> TaskAccessResponse:
    """Tasks carry no grants of their own; access comes from the parent project."""
    decision = await gateway.authorize(
        ResourceRef(ResourceType.TASK, task_id),
        Action.VIEW,
        principal=principal,
        share_token=share_token,
    )
    access = decision.raise_for_denial()
    return TaskAccessResponse(
        task_id=task_id,
        project_id=access.resource.id,
        access=GrantResponse.from_grant(access.grant),
    )


@router.get(
    "/{collection}/{resource_id}",
    response_model=ResourceResponse,
    summary="Open a project or dashboard",
    responses=ERROR_RESPONSES,
)
@limiter.limit("60/minute")  # type: ignore[untyped-decorator]
async def get_resource(
    request: Request,
    collection: ResourceCollection,
    resource_id: UUID,
    principal: OptionalPrincipal,
    share_token: ShareToken,
    service: ResourceService = Depends(get_resource_service),
) -> ResourceResponse:
    """Return the resource with the caller's effective grant.

    Anonymous callers see public resources, or any resource when the
    ``X-Share-Token`` header carries its current share token.
    """
    access = await service.open(
        ResourceRef(collection.resource_type, resource_id),
        principal=principal,
        share_token=share_token,
    )
    return ResourceResponse.build(access.resource, access.grant)


@router.get(
    "/{collection}/{resource_id}/access",
    response_model=GrantResponse,
    summary="Get the caller's grant on a project or dashboard",
    responses=ERROR_RESPONSES,
)
@limiter.limit("60/minute")  # type: ignore[untyped-decorator]
async def get_resource_access(
    request: Request,
    collection: ResourceCollection,
    resource_id: UUID,
    principal: OptionalPrincipal,
    share_token: ShareToken,
    gateway: AccessGateway = Depends(get_access_gateway),
) -> GrantResponse:
    decision = await gateway.authorize(
        ResourceRef(collection.resource_type, resource_id),
        Action.VIEW,
        principal=principal,
        share_token=share_token,
    )
    return GrantResponse.from_grant(decision.raise_for_denial().grant)
