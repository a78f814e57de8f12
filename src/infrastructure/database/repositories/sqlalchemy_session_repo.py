"""SQLAlchemy implementation of Session repository."""

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from domain.entities.session import Session
from infrastructure.database.models import SessionModel


class SQLAlchemySessionRepository:
    """SQLAlchemy implementation of ISessionRepository."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def create(self, session: Session) -> Session:
        """Persist a new session."""
        model = self._to_model(session)
        self._session.add(model)
        await self._session.flush()
        return self._to_entity(model)

    async def get_by_token_hash(self, token_hash: str) -> Session | None:
        """Get a session by its hashed token."""
        stmt = select(SessionModel).where(SessionModel.token_hash == token_hash)
        result = await self._session.execute(stmt)
        model = result.scalar_one_or_none()
        return self._to_entity(model) if model else None

    async def delete_by_token_hash(self, token_hash: str) -> bool:
        """Delete a session. Returns False when no row matched."""
        stmt = delete(SessionModel).where(SessionModel.token_hash == token_hash)
        result = await self._session.execute(stmt)
        return bool(result.rowcount)  # type: ignore[attr-defined]

    def _to_entity(self, model: SessionModel) -> Session:
        """Convert ORM model to domain entity."""
        return Session(
            id=model.id,
            user_id=model.user_id,
            token_hash=model.token_hash,
            ip_address=model.ip_address,
            user_agent=model.user_agent,
            created_at=model.created_at,
            expires_at=model.expires_at,
        )

    def _to_model(self, entity: Session) -> SessionModel:
        """Convert domain entity to ORM model."""
        return SessionModel(
            id=entity.id,
            user_id=entity.user_id,
            token_hash=entity.token_hash,
            ip_address=entity.ip_address,
            user_agent=entity.user_agent,
            created_at=entity.created_at,
            expires_at=entity.expires_at,
        )
