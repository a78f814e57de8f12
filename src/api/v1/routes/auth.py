"""Authentication API routes."""

from fastapi import APIRouter, Depends, Request, status

from api.dependencies.auth import CurrentPrincipal, SessionToken
from api.v1.dependencies import get_token_service
from api.v1.schemas.auth import (
    LoginRequest,
    PrincipalResponse,
    SessionResponse,
    SignupRequest,
)
from core.exceptions import InvalidCredentialsError
from core.rate_limit import limiter
from domain.entities.principal import Principal
from domain.entities.token import IssuedSession
from domain.services.token_service import TokenService

router = APIRouter(prefix="/auth", tags=["auth"])


def _session_response(principal: Principal, issued: IssuedSession) -> SessionResponse:
    return SessionResponse(
        access_token=issued.value,
        expires_at=issued.expires_at,
        user=PrincipalResponse(id=principal.id, email=principal.email, name=principal.name),
    )


@router.post(
    "/signup",
    response_model=SessionResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create an account",
    responses={
        201: {"description": "Account created and signed in"},
        400: {"description": "Invalid email address"},
        409: {"description": "Email already registered"},
    },
)
@limiter.limit("5/minute")  # type: ignore[untyped-decorator]
async def signup(
    request: Request,
    body: SignupRequest,
    tokens: TokenService = Depends(get_token_service),
) -> SessionResponse:
    """Register with email and password; the response carries a session like login."""
    principal, issued = await tokens.register(
        body.email,
        body.password,
        body.name,
        ip_address=request.client.host if request.client else None,
        user_agent=request.headers.get("user-agent"),
    )
    return _session_response(principal, issued)


@router.post(
    "/login",
    response_model=SessionResponse,
    summary="Log in with email and password",
    responses={
        200: {"description": "Session created"},
        401: {"description": "Invalid email or password"},
    },
)
@limiter.limit("10/minute")  # type: ignore[untyped-decorator]
async def login(
    request: Request,
    body: LoginRequest,
    tokens: TokenService = Depends(get_token_service),
) -> SessionResponse:
    """Exchange credentials for a bearer session token."""
    result = await tokens.authenticate(
        body.email,
        body.password,
        ip_address=request.client.host if request.client else None,
        user_agent=request.headers.get("user-agent"),
    )
    if result is None:
        raise InvalidCredentialsError()
    principal, issued = result
    return _session_response(principal, issued)


@router.post(
    "/logout",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="End the current session",
    responses={204: {"description": "Session revoked"}},
)
async def logout(
    principal: CurrentPrincipal,
    token: SessionToken,
    tokens: TokenService = Depends(get_token_service),
) -> None:
    """Delete the session behind the presented bearer token."""
    if token:
        await tokens.revoke_session(token)


@router.get(
    "/me",
    response_model=PrincipalResponse,
    summary="Get the current user",
    responses={401: {"description": "Missing or invalid session"}},
)
async def me(principal: CurrentPrincipal) -> PrincipalResponse:
    return PrincipalResponse(id=principal.id, email=principal.email, name=principal.name)
