"""Lifecycle of session, invitation and sharing tokens."""

import re
from collections.abc import Callable
from datetime import datetime, timedelta, timezone
from uuid import UUID

import structlog

from core.exceptions import (
    AppException,
    EmailAlreadyRegisteredError,
    ErrorCode,
    InvalidEmailError,
    NoChangesError,
    ResourceNotFoundError,
)
from core.security import (
    generate_share_token,
    generate_token,
    hash_password,
    hash_token,
    tokens_match,
    verify_password,
)
from domain.entities.grant import Action, EffectiveGrant
from domain.entities.invitation import (
    INVITATION_EXPIRY_DAYS,
    AcceptOutcome,
    AcceptStatus,
    Invitation,
)
from domain.entities.membership import ContentPermission, MemberRole, Membership
from domain.entities.principal import Principal, User
from domain.entities.resource import Resource, ResourceRef, ResourceType, SharingGrant
from domain.entities.session import SESSION_EXPIRY_DAYS, Session
from domain.entities.token import IssuedSession, IssuedToken, TokenKind
from domain.repositories.unit_of_work import IUnitOfWork
from domain.services.role_resolver import RoleResolver
from domain.services.schema_guard import SchemaGuard

logger = structlog.get_logger()

# The local part must contain at least one letter.
EMAIL_PATTERN = re.compile(
    r"^[a-zA-Z0-9._%+-]*[a-zA-Z][a-zA-Z0-9._%+-]*@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$"
)


def normalize_email(email: str) -> str:
    return email.strip().lower()


def is_valid_email(email: str) -> bool:
    return bool(EMAIL_PATTERN.match(email))


def _utcnow() -> datetime:
    return datetime.now(timezone.utc).replace(tzinfo=None)


class TokenService:
    """Issues, validates and consumes bounded-lifetime tokens.

    Issuance paths raise ``AppException`` subclasses. Consumption paths
    return typed outcomes: ``validate_session`` returns None for any invalid
    token and ``accept`` returns an ``AcceptOutcome``.
    """

    def __init__(
        self,
        uow_factory: Callable[[], IUnitOfWork],
        resolver: RoleResolver,
        guard: SchemaGuard | None = None,
        *,
        session_ttl_days: int = SESSION_EXPIRY_DAYS,
        invitation_ttl_days: int = INVITATION_EXPIRY_DAYS,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._uow_factory = uow_factory
        self._resolver = resolver
        self._guard = guard or SchemaGuard()
        self._session_ttl = timedelta(days=session_ttl_days)
        self._invitation_ttl_days = invitation_ttl_days
        self._clock = clock

    # --- Sessions ---

    async def authenticate(
        self,
        email: str,
        password: str,
        ip_address: str | None = None,
        user_agent: str | None = None,
    ) -> tuple[Principal, IssuedSession] | None:
        """Verify a password and open a new session.

        Returns None when the email is unknown or the password is wrong.
        """
        email = normalize_email(email)

        async def _run() -> tuple[Principal, IssuedSession] | None:
            async with self._uow_factory() as uow:
                user = await uow.users.get_by_email(email)
                if user is None or not verify_password(password, user.password_hash):
                    return None
                issued = await self._create_session(uow, user.id, ip_address, user_agent)
                await uow.commit()
                return user.to_principal(), issued

        result = await self._guard.with_repair(_run)
        if result is None:
            logger.info("login_failed", email=email)
        return result

    async def register(
        self,
        email: str,
        password: str,
        name: str | None = None,
        ip_address: str | None = None,
        user_agent: str | None = None,
    ) -> tuple[Principal, IssuedSession]:
        """Create an account and open its first session.

        Raises:
            InvalidEmailError: If the email fails validation.
            EmailAlreadyRegisteredError: If an account already uses the email.
        """
        email = normalize_email(email)
        if not is_valid_email(email):
            raise InvalidEmailError(email)
        password_hash = hash_password(password)
        display_name = (name or "").strip() or None

        async def _run() -> User:
            async with self._uow_factory() as uow:
                if await uow.users.get_by_email(email) is not None:
                    raise EmailAlreadyRegisteredError(email)
                user = await uow.users.create(
                    User(email=email, name=display_name, password_hash=password_hash)
                )
                await uow.commit()
                return user

        user = await self._guard.with_repair(_run)
        logger.info("user_signed_up", user_id=str(user.id))
        issued = await self.issue_session(user.id, ip_address, user_agent)
        return user.to_principal(), issued

    async def issue_session(
        self,
        user_id: UUID,
        ip_address: str | None = None,
        user_agent: str | None = None,
    ) -> IssuedSession:
        """Open a session for an already-verified user (e.g. right after signup)."""

        async def _run() -> IssuedSession:
            async with self._uow_factory() as uow:
                issued = await self._create_session(uow, user_id, ip_address, user_agent)
                await uow.commit()
                return issued

        return await self._guard.with_repair(_run)

    async def _create_session(
        self,
        uow: IUnitOfWork,
        user_id: UUID,
        ip_address: str | None,
        user_agent: str | None,
    ) -> IssuedSession:
        raw_token = generate_token()
        now = self._clock()
        session = Session(
            user_id=user_id,
            token_hash=hash_token(raw_token),
            ip_address=ip_address,
            user_agent=user_agent,
            created_at=now,
            expires_at=now + self._session_ttl,
        )
        await uow.sessions.create(session)
        return IssuedSession(raw_token, session.expires_at)

    async def validate_session(self, token: str | None) -> Principal | None:
        """Resolve a bearer token to its principal.

        Fails closed: unknown, expired (no grace period) or orphaned sessions
        all return None.
        """
        if not token:
            return None
        token_hash = hash_token(token)

        async def _run() -> Principal | None:
            async with self._uow_factory() as uow:
                session = await uow.sessions.get_by_token_hash(token_hash)
                if session is None or session.is_expired_at(self._clock()):
                    return None
                user = await uow.users.get(session.user_id)
                return user.to_principal() if user else None

        return await self._guard.with_repair(_run)

    async def revoke_session(self, token: str) -> bool:
        """Log out by deleting the session row."""
        token_hash = hash_token(token)

        async def _run() -> bool:
            async with self._uow_factory() as uow:
                deleted = await uow.sessions.delete_by_token_hash(token_hash)
                await uow.commit()
                return deleted

        return await self._guard.with_repair(_run)

    # --- Invitations ---

    async def invite(
        self,
        grantor_id: UUID,
        ref: ResourceRef,
        email: str,
        permission: str | ContentPermission = ContentPermission.FULL_EDIT,
        *,
        ttl_days: int | None = None,
        task_id: UUID | None = None,
    ) -> tuple[Invitation, IssuedToken, Resource]:
        """Create an email-bound invitation.

        A task ref, or a project ref with ``task_id``, invites to the project
        and records the task.

        Returns:
            The stored invitation, the raw token (only available now) and the
            resource the invitation grants access to.

        Raises:
            ResourceNotFoundError: If the resource does not exist, or
                ``task_id`` is not a task of the project.
            ForbiddenError: If the grantor cannot manage members.
            InvalidEmailError: If the email fails validation.
            AppException: If the permission or lifetime is invalid.
        """
        email = normalize_email(email)
        if not is_valid_email(email):
            raise InvalidEmailError(email)
        try:
            parsed_permission = ContentPermission.parse(permission)
        except ValueError:
            raise AppException(
                error_code=ErrorCode.VALIDATION_ERROR,
                message="Invalid permission",
                details={"permission": str(permission)},
            ) from None
        ttl = self._invitation_ttl_days if ttl_days is None else ttl_days
        if ttl < 1:
            raise AppException(
                error_code=ErrorCode.VALIDATION_ERROR,
                message="Invitation lifetime must be at least one day",
                details={"ttl_days": ttl},
            )

        access = await self._resolver.require(grantor_id, ref, Action.MANAGE_MEMBERS)
        resource = access.resource
        if ref.type == ResourceType.TASK:
            task_id = ref.id
        elif task_id is not None:
            await self._require_task_of(resource, task_id)

        raw_token = generate_token()
        now = self._clock()
        invitation = Invitation(
            resource_type=resource.type,
            resource_id=resource.id,
            email=email,
            permission=parsed_permission,
            token_hash=hash_token(raw_token),
            invited_by=grantor_id,
            task_id=task_id,
            created_at=now,
            expires_at=now + timedelta(days=ttl),
        )

        async def _run() -> Invitation:
            async with self._uow_factory() as uow:
                created = await uow.invitations.create(invitation)
                await uow.commit()
                return created

        created = await self._guard.with_repair(_run)
        logger.info(
            "invitation_created",
            resource=str(resource.ref),
            permission=parsed_permission.label,
            invited_by=str(grantor_id),
        )
        return created, IssuedToken(raw_token, TokenKind.INVITATION, created.expires_at), resource

    async def _require_task_of(self, resource: Resource, task_id: UUID) -> None:
        async def _run() -> bool:
            async with self._uow_factory() as uow:
                task = await uow.resources.get_task(task_id)
                return task is not None and task.project_id == resource.id

        if resource.type != ResourceType.PROJECT or not await self._guard.with_repair(_run):
            raise ResourceNotFoundError("task")

    async def accept(
        self,
        token: str,
        principal: Principal,
        ref: ResourceRef | None = None,
    ) -> AcceptOutcome:
        """Consume an invitation for ``principal``.

        Checks run in a fixed order: unknown or used token, wrong resource,
        expiry, then email binding. The claim itself is a conditional update,
        so of two concurrent accepts exactly one succeeds.
        """
        token_hash = hash_token(token)

        async def _run() -> AcceptOutcome:
            async with self._uow_factory() as uow:
                return await self._accept(uow, token_hash, principal, ref)

        outcome = await self._guard.with_repair(_run)
        logger.info(
            "invitation_accept_attempted",
            status=outcome.status.value,
            user_id=str(principal.id),
        )
        return outcome

    async def _accept(
        self,
        uow: IUnitOfWork,
        token_hash: str,
        principal: Principal,
        ref: ResourceRef | None,
    ) -> AcceptOutcome:
        invitation = await uow.invitations.get_by_token_hash(token_hash)
        if invitation is None or invitation.is_accepted:
            return AcceptOutcome(AcceptStatus.NOT_FOUND)
        if ref is not None and not self._invitation_targets(invitation, ref):
            return AcceptOutcome(AcceptStatus.NOT_FOUND)

        now = self._clock()
        if invitation.is_expired_at(now):
            return AcceptOutcome(AcceptStatus.EXPIRED, invitation)
        if not invitation.matches_email(principal.email):
            return AcceptOutcome(AcceptStatus.EMAIL_MISMATCH, invitation)

        if not await uow.invitations.mark_accepted(invitation.id, now):
            await uow.rollback()
            return AcceptOutcome(AcceptStatus.CONFLICT, invitation)
        invitation.accepted_at = now

        resource = await uow.resources.get(invitation.resource_type, invitation.resource_id)
        if resource is None:
            await uow.rollback()
            return AcceptOutcome(AcceptStatus.NOT_FOUND, invitation)

        if resource.owner_id == principal.id:
            await uow.commit()
            return AcceptOutcome(AcceptStatus.ALREADY_MEMBER, invitation)

        existing = await uow.members.get(resource.type, resource.id, principal.id)
        if existing is not None:
            await uow.commit()
            return AcceptOutcome(AcceptStatus.ALREADY_MEMBER, invitation, existing)

        membership = await uow.members.add(
            Membership(
                resource_type=resource.type,
                resource_id=resource.id,
                user_id=principal.id,
                role=MemberRole.MEMBER,
                permission=invitation.permission,
                invited_by=invitation.invited_by,
                created_at=now,
            )
        )
        await uow.commit()
        return AcceptOutcome(AcceptStatus.ACCEPTED, invitation, membership)

    @staticmethod
    def _invitation_targets(invitation: Invitation, ref: ResourceRef) -> bool:
        if ref.type == ResourceType.TASK:
            return invitation.task_id == ref.id
        return invitation.resource_type == ref.type and invitation.resource_id == ref.id

    async def list_invitations(self, actor_id: UUID, ref: ResourceRef) -> list[Invitation]:
        """List a resource's invitations. Requires member management rights."""
        access = await self._resolver.require(actor_id, ref, Action.MANAGE_MEMBERS)
        resource = access.resource

        async def _run() -> list[Invitation]:
            async with self._uow_factory() as uow:
                return await uow.invitations.get_for_resource(resource.type, resource.id)

        return await self._guard.with_repair(_run)

    # --- Sharing ---

    async def get_sharing(
        self, actor_id: UUID, ref: ResourceRef
    ) -> tuple[Resource, EffectiveGrant]:
        """Read sharing settings. Requires membership or ownership."""
        access = await self._resolver.require(actor_id, ref, Action.VIEW_MEMBERS)
        return access.resource, access.grant

    async def rotate(self, actor_id: UUID, ref: ResourceRef) -> IssuedToken:
        """Replace the share token. The previous value stops working immediately."""
        new_token = generate_share_token()
        await self._write_sharing(actor_id, ref, share_token=new_token)
        return IssuedToken(new_token, TokenKind.SHARE)

    async def update_sharing(
        self,
        actor_id: UUID,
        ref: ResourceRef,
        *,
        is_public: bool | None = None,
        workspace_shared: bool | None = None,
        regenerate_token: bool = False,
    ) -> tuple[SharingGrant, IssuedToken | None]:
        """Change sharing flags and optionally rotate the share token. Owner only.

        All changes are written in a single UPDATE.

        Raises:
            NoChangesError: If nothing was requested.
        """
        if is_public is None and workspace_shared is None and not regenerate_token:
            raise NoChangesError()
        new_token = generate_share_token() if regenerate_token else None
        sharing = await self._write_sharing(
            actor_id,
            ref,
            is_public=is_public,
            workspace_shared=workspace_shared,
            share_token=new_token,
        )
        issued = IssuedToken(new_token, TokenKind.SHARE) if new_token else None
        return sharing, issued

    async def _write_sharing(
        self,
        actor_id: UUID,
        ref: ResourceRef,
        *,
        is_public: bool | None = None,
        workspace_shared: bool | None = None,
        share_token: str | None = None,
    ) -> SharingGrant:
        access = await self._resolver.require(actor_id, ref, Action.MANAGE_SHARING)
        resource = access.resource

        async def _run() -> Resource | None:
            async with self._uow_factory() as uow:
                updated = await uow.resources.update_sharing(
                    resource.type,
                    resource.id,
                    is_public=is_public,
                    workspace_shared=workspace_shared,
                    share_token=share_token,
                )
                await uow.commit()
                return updated

        updated = await self._guard.with_repair(_run)
        if updated is None:
            raise ResourceNotFoundError(resource.type.value)
        if share_token:
            logger.info("share_token_rotated", resource=str(resource.ref), actor_id=str(actor_id))
        return updated.sharing

    async def resolve_share_token(
        self, resource_type: ResourceType, token: str
    ) -> Resource | None:
        """Find the resource whose current share token is ``token``."""
        if not token or resource_type == ResourceType.TASK:
            return None

        async def _run() -> Resource | None:
            async with self._uow_factory() as uow:
                return await uow.resources.get_by_share_token(resource_type, token)

        resource = await self._guard.with_repair(_run)
        if resource is None or not self.verify_share_token(resource, token):
            return None
        return resource

    @staticmethod
    def verify_share_token(resource: Resource, token: str | None) -> bool:
        """Check a presented share token against the resource's current one."""
        return tokens_match(token, resource.share_token)
