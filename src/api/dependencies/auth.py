"""Authentication dependencies for FastAPI."""

from typing import Annotated

from fastapi import Depends, Header
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from api.v1.dependencies import get_token_service
from core.exceptions import AuthenticationError, ErrorCode
from domain.entities.principal import Principal
from domain.services.token_service import TokenService

# Security scheme for OpenAPI docs
security = HTTPBearer(auto_error=False)


async def get_session_token(
    credentials: Annotated[
        HTTPAuthorizationCredentials | None,
        Depends(security),
    ],
) -> str | None:
    """Raw bearer token, if one was sent."""
    return credentials.credentials if credentials else None


async def get_current_principal(
    token: Annotated[str | None, Depends(get_session_token)],
    tokens: TokenService = Depends(get_token_service),
) -> Principal:
    """
    Dependency to get the current authenticated principal.

    Raises:
        AuthenticationError: If no token provided or the session is invalid
    """
    if not token:
        raise AuthenticationError(
            message="Authorization header required",
            error_code=ErrorCode.UNAUTHORIZED,
        )

    principal = await tokens.validate_session(token)

    if not principal:
        raise AuthenticationError(
            message="Invalid or expired session",
            error_code=ErrorCode.INVALID_TOKEN,
        )

    return principal


async def get_optional_principal(
    token: Annotated[str | None, Depends(get_session_token)],
    tokens: TokenService = Depends(get_token_service),
) -> Principal | None:
    """
    Dependency to get the current principal if authenticated.

    Returns:
        Principal if the session is valid, None otherwise (no exception raised)
    """
    if not token:
        return None

    return await tokens.validate_session(token)


async def get_share_token(
    x_share_token: Annotated[str | None, Header()] = None,
) -> str | None:
    """Share-link token presented alongside (or instead of) a session."""
    return x_share_token.strip() if x_share_token and x_share_token.strip() else None


# Type aliases for convenience in route handlers
CurrentPrincipal = Annotated[Principal, Depends(get_current_principal)]
OptionalPrincipal = Annotated[Principal | None, Depends(get_optional_principal)]
SessionToken = Annotated[str | None, Depends(get_session_token)]
ShareToken = Annotated[str | None, Depends(get_share_token)]
