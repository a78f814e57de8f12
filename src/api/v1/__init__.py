"""API v1 router configuration."""

from fastapi import APIRouter

from api.v1.routes.auth import router as auth_router
from api.v1.routes.invitations import invitations_router, resource_invitations_router
from api.v1.routes.members import router as members_router
from api.v1.routes.resources import router as resources_router
from api.v1.routes.resources import tasks_router
from api.v1.routes.sharing import router as sharing_router
from api.v1.routes.sharing import share_router

router = APIRouter()
# Fixed-prefix routers go first so "/{collection}/{resource_id}" cannot shadow them.
router.include_router(auth_router)
router.include_router(invitations_router)
router.include_router(share_router)
router.include_router(tasks_router)
router.include_router(members_router)
router.include_router(resource_invitations_router)
router.include_router(sharing_router)
router.include_router(resources_router)
