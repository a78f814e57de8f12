"""Pydantic schemas for authentication API."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, Field


class LoginRequest(BaseModel):
    """Schema for email/password login."""

    email: str = Field(..., min_length=3, max_length=255)
    password: str = Field(..., min_length=1, max_length=1024)


class SignupRequest(BaseModel):
    """Schema for creating an account."""

    email: str = Field(..., min_length=3, max_length=255)
    password: str = Field(..., min_length=8, max_length=1024)
    name: str | None = Field(None, max_length=255)


class PrincipalResponse(BaseModel):
    """The authenticated user."""

    id: UUID
    email: str
    name: str | None = None


class SessionResponse(BaseModel):
    """Schema for a newly issued session."""

    access_token: str
    token_type: str = "bearer"
    expires_at: datetime
    user: PrincipalResponse
