"""Main FastAPI application entry point."""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import ORJSONResponse
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware

from api.exception_handlers import setup_exception_handlers
from api.middleware.logging import RequestLoggingMiddleware
from api.middleware.request_id import RequestIDMiddleware
from api.middleware.security import SecurityHeadersMiddleware
from api.routes.health import VERSION
from api.routes.health import router as health_router
from api.v1 import router as v1_router
from core.config import settings
from core.logging import setup_logging
from core.rate_limit import limiter, rate_limit_exceeded_handler
from infrastructure.database.session import engine

logger = structlog.get_logger()

# Initialize structured logging
setup_logging()


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Application lifespan manager for startup/shutdown tasks."""
    logger.info(
        "application_started",
        environment=settings.app_env,
        schema_repair_enabled=settings.schema_repair_enabled,
    )
    yield
    await engine.dispose()
    logger.info("application_stopped")


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    app = FastAPI(
        lifespan=lifespan,
        default_response_class=ORJSONResponse,
        title=settings.app_name,
        description=(
            "## Access control for shared projects and dashboards\n\n"
            "Gatehouse decides who may see and change projects, dashboards and "
            "their tasks.\n\n"
            "### Features\n"
            "- **Roles**: owner, admin, member and guest-view, resolved per request\n"
            "- **Invitations**: single-use, email-bound, expiring links\n"
            "- **Sharing**: public flag and rotatable share links\n"
            "- **Self-healing schema**: known drift is repaired and the query retried\n\n"
            "### Authentication\n"
            "Log in at `/api/v1/auth/login` and send the session token:\n"
            "```\nAuthorization: Bearer <your_token>\n```\n"
            "Share-link holders send `X-Share-Token: <token>` instead.\n\n"
            "### Rate Limits\n"
            "- GET endpoints: 30-60 requests/minute\n"
            "- POST/PATCH/DELETE: 10-20 requests/minute"
        ),
        version=VERSION,
        debug=settings.debug,
        contact={
            "name": "Gatehouse Support",
        },
        license_info={
            "name": "MIT",
        },
        openapi_tags=[
            {
                "name": "health",
                "description": "Health check endpoints",
            },
            {
                "name": "auth",
                "description": "Login sessions",
            },
            {
                "name": "resources",
                "description": "Opening projects, dashboards and tasks",
            },
            {
                "name": "members",
                "description": "Explicit membership management",
            },
            {
                "name": "invitations",
                "description": "Email invitations",
            },
            {
                "name": "sharing",
                "description": "Public flag and share links",
            },
        ],
    )

    # Rate limiting
    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, rate_limit_exceeded_handler)
    app.add_middleware(SlowAPIMiddleware)

    # Security & tracking middleware (LIFO order - last added = outermost)
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(SecurityHeadersMiddleware)
    app.add_middleware(RequestIDMiddleware)

    # GZip compression for responses > 1KB
    app.add_middleware(GZipMiddleware, minimum_size=1000)

    # Configure CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Setup exception handlers
    setup_exception_handlers(app)

    # Include routers
    app.include_router(health_router)
    app.include_router(v1_router, prefix="/api/v1")

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "main:app",
        host=settings.host,
        port=settings.port,
        reload=not settings.is_production,
    )
