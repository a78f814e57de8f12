"""Custom exceptions and error codes."""

from enum import StrEnum
from typing import Any


class ErrorCode(StrEnum):
    """Standardized error codes for the API."""

    # Authentication errors (401)
    UNAUTHORIZED = "UNAUTHORIZED"
    INVALID_TOKEN = "INVALID_TOKEN"
    INVALID_CREDENTIALS = "INVALID_CREDENTIALS"

    # Authorization errors (403)
    FORBIDDEN = "FORBIDDEN"

    # Not found errors (404)
    RESOURCE_NOT_FOUND = "RESOURCE_NOT_FOUND"
    USER_NOT_FOUND = "USER_NOT_FOUND"
    MEMBER_NOT_FOUND = "MEMBER_NOT_FOUND"

    # Validation errors (400)
    VALIDATION_ERROR = "VALIDATION_ERROR"
    INVALID_EMAIL = "INVALID_EMAIL"
    CANNOT_MODIFY_OWNER = "CANNOT_MODIFY_OWNER"
    NO_CHANGES = "NO_CHANGES"

    # Invitation errors
    INVITATION_NOT_FOUND = "INVITATION_NOT_FOUND"
    INVITATION_EXPIRED = "INVITATION_EXPIRED"
    INVITATION_EMAIL_MISMATCH = "INVITATION_EMAIL_MISMATCH"
    INVITATION_CONFLICT = "INVITATION_CONFLICT"

    # Conflict errors (409)
    ALREADY_A_MEMBER = "ALREADY_A_MEMBER"
    EMAIL_ALREADY_REGISTERED = "EMAIL_ALREADY_REGISTERED"

    # Rate limiting (429)
    RATE_LIMIT_EXCEEDED = "RATE_LIMIT_EXCEEDED"

    # Server errors (500/503)
    INTERNAL_ERROR = "INTERNAL_ERROR"
    DATABASE_ERROR = "DATABASE_ERROR"
    SCHEMA_DRIFT_UNREPAIRABLE = "SCHEMA_DRIFT_UNREPAIRABLE"


class AppException(Exception):
    """Base application exception."""

    def __init__(
        self,
        error_code: ErrorCode,
        message: str,
        status_code: int = 400,
        details: Any | None = None,
    ) -> None:
        self.error_code = error_code
        self.message = message
        self.status_code = status_code
        self.details = details
        super().__init__(self.message)


class AuthenticationError(AppException):
    """Authentication failed."""

    def __init__(
        self,
        message: str = "Authentication required",
        error_code: ErrorCode = ErrorCode.UNAUTHORIZED,
        details: Any | None = None,
    ) -> None:
        super().__init__(
            error_code=error_code,
            message=message,
            status_code=401,
            details=details,
        )


class InvalidCredentialsError(AuthenticationError):
    """Email/password pair did not match a user."""

    def __init__(self) -> None:
        super().__init__(
            message="Invalid email or password",
            error_code=ErrorCode.INVALID_CREDENTIALS,
        )


class ForbiddenError(AppException):
    """Principal is known but lacks a sufficient grant."""

    def __init__(self, message: str = "Access denied") -> None:
        super().__init__(
            error_code=ErrorCode.FORBIDDEN,
            message=message,
            status_code=403,
        )


class ResourceNotFoundError(AppException):
    """Resource is absent, or its existence must not be disclosed."""

    def __init__(self, resource_type: str = "resource") -> None:
        super().__init__(
            error_code=ErrorCode.RESOURCE_NOT_FOUND,
            message=f"{resource_type.capitalize()} not found",
            status_code=404,
        )


class UserNotFoundError(AppException):
    """User not found."""

    def __init__(self, user_id: str) -> None:
        super().__init__(
            error_code=ErrorCode.USER_NOT_FOUND,
            message=f"User not found: {user_id}",
            status_code=404,
            details={"user_id": user_id},
        )


class MemberNotFoundError(AppException):
    """Membership row not found."""

    def __init__(self, user_id: str) -> None:
        super().__init__(
            error_code=ErrorCode.MEMBER_NOT_FOUND,
            message="Member not found",
            status_code=404,
            details={"user_id": user_id},
        )


class AlreadyAMemberError(AppException):
    """User is already a member of the resource."""

    def __init__(self, user_id: str) -> None:
        super().__init__(
            error_code=ErrorCode.ALREADY_A_MEMBER,
            message="User is already a member",
            status_code=409,
            details={"user_id": user_id},
        )


class EmailAlreadyRegisteredError(AppException):
    """Signup with an email that already has an account."""

    def __init__(self, email: str) -> None:
        super().__init__(
            error_code=ErrorCode.EMAIL_ALREADY_REGISTERED,
            message="Email already registered",
            status_code=409,
            details={"email": email},
        )


class CannotModifyOwnerError(AppException):
    """The owner grant is derived from the resource and cannot be edited as a member."""

    def __init__(self) -> None:
        super().__init__(
            error_code=ErrorCode.CANNOT_MODIFY_OWNER,
            message="The resource owner cannot be added, changed or removed as a member",
            status_code=400,
        )


class InvalidEmailError(AppException):
    """Email address failed validation."""

    def __init__(self, email: str) -> None:
        super().__init__(
            error_code=ErrorCode.INVALID_EMAIL,
            message="Invalid email address",
            status_code=400,
            details={"email": email},
        )


class NoChangesError(AppException):
    """An update request carried nothing to change."""

    def __init__(self, message: str = "No updates provided") -> None:
        super().__init__(
            error_code=ErrorCode.NO_CHANGES,
            message=message,
            status_code=400,
        )


class InvitationNotFoundError(AppException):
    """Invitation unknown or already consumed."""

    def __init__(self) -> None:
        super().__init__(
            error_code=ErrorCode.INVITATION_NOT_FOUND,
            message="Invalid or already used invitation",
            status_code=404,
        )


class InvitationExpiredError(AppException):
    """Invitation has expired."""

    def __init__(self) -> None:
        super().__init__(
            error_code=ErrorCode.INVITATION_EXPIRED,
            message="This invitation has expired",
            status_code=410,
        )


class InvitationEmailMismatchError(AppException):
    """The user's email does not match the invitation email."""

    def __init__(self) -> None:
        super().__init__(
            error_code=ErrorCode.INVITATION_EMAIL_MISMATCH,
            message="This invitation was sent to a different email address",
            status_code=403,
        )


class InvitationConflictError(AppException):
    """A concurrent request consumed the invitation first."""

    def __init__(self) -> None:
        super().__init__(
            error_code=ErrorCode.INVITATION_CONFLICT,
            message="This invitation was consumed by a concurrent request",
            status_code=409,
        )


class SchemaDriftUnrepairableError(AppException):
    """Schema drift was detected but repairing it did not make the operation succeed."""

    def __init__(self, repair: str, step: str | None = None) -> None:
        details: dict[str, str] = {"repair": repair}
        if step:
            details["step"] = step
        super().__init__(
            error_code=ErrorCode.SCHEMA_DRIFT_UNREPAIRABLE,
            message="The database schema is out of date and could not be repaired",
            status_code=503,
            details=details,
        )
