"""SQLAlchemy implementation of Resource repository."""

from datetime import datetime
from typing import Any
from uuid import UUID

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from domain.entities.resource import Resource, ResourceType, Task
from domain.entities.resource_settings import dump_settings, parse_settings
from infrastructure.database.models import DashboardModel, ProjectModel, TaskModel

ResourceModel = ProjectModel | DashboardModel

_MODELS: dict[ResourceType, type[ProjectModel] | type[DashboardModel]] = {
    ResourceType.PROJECT: ProjectModel,
    ResourceType.DASHBOARD: DashboardModel,
}


def _model_for(resource_type: ResourceType) -> Any:
    try:
        return _MODELS[resource_type]
    except KeyError:
        raise ValueError(f"{resource_type} is not stored as a resource") from None


class SQLAlchemyResourceRepository:
    """SQLAlchemy implementation of IResourceRepository."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def create(self, resource: Resource) -> Resource:
        """Create a project or dashboard."""
        model = self._to_model(resource)
        self._session.add(model)
        await self._session.flush()
        return self._to_entity(model, resource.type)

    async def get(self, resource_type: ResourceType, id: UUID) -> Resource | None:
        """Get a live project or dashboard. Soft-deleted projects are absent."""
        model_cls = _model_for(resource_type)
        stmt = select(model_cls).where(model_cls.id == id)
        if model_cls is ProjectModel:
            stmt = stmt.where(ProjectModel.deleted_at.is_(None))
        result = await self._session.execute(stmt)
        model = result.scalar_one_or_none()
        return self._to_entity(model, resource_type) if model else None

    async def get_by_share_token(
        self, resource_type: ResourceType, share_token: str
    ) -> Resource | None:
        """Get a resource by its current share token."""
        model_cls = _model_for(resource_type)
        stmt = select(model_cls).where(model_cls.share_token == share_token)
        if model_cls is ProjectModel:
            stmt = stmt.where(ProjectModel.deleted_at.is_(None))
        result = await self._session.execute(stmt)
        model = result.scalar_one_or_none()
        return self._to_entity(model, resource_type) if model else None

    async def get_task(self, id: UUID) -> Task | None:
        """Get a task by ID."""
        model = await self._session.get(TaskModel, id)
        if not model:
            return None
        return Task(id=model.id, project_id=model.project_id, title=model.title)

    async def create_task(self, task: Task) -> Task:
        """Create a task."""
        self._session.add(TaskModel(id=task.id, project_id=task.project_id, title=task.title))
        await self._session.flush()
        return task

    async def update_sharing(
        self,
        resource_type: ResourceType,
        id: UUID,
        *,
        is_public: bool | None = None,
        workspace_shared: bool | None = None,
        share_token: str | None = None,
    ) -> Resource | None:
        """Update sharing flags in a single statement. ``None`` leaves a field unchanged."""
        model_cls = _model_for(resource_type)
        values: dict[str, Any] = {"updated_at": datetime.utcnow()}
        if is_public is not None:
            values["is_public"] = is_public
        if workspace_shared is not None:
            values["workspace_shared"] = workspace_shared
        if share_token is not None:
            values["share_token"] = share_token

        stmt = update(model_cls).where(model_cls.id == id).values(**values)
        result = await self._session.execute(stmt)
        if not result.rowcount:  # type: ignore[attr-defined]
            return None
        return await self._refetch(resource_type, id)

    async def touch_last_viewed(
        self, resource_type: ResourceType, id: UUID, viewed_at: datetime
    ) -> None:
        """Record that a resource was opened."""
        if resource_type != ResourceType.DASHBOARD:
            return
        stmt = (
            update(DashboardModel)
            .where(DashboardModel.id == id)
            .values(last_viewed_at=viewed_at)
        )
        await self._session.execute(stmt)

    async def _refetch(self, resource_type: ResourceType, id: UUID) -> Resource | None:
        model_cls = _model_for(resource_type)
        stmt = (
            select(model_cls)
            .where(model_cls.id == id)
            .execution_options(populate_existing=True)
        )
        result = await self._session.execute(stmt)
        model = result.scalar_one_or_none()
        return self._to_entity(model, resource_type) if model else None

    def _to_entity(self, model: ResourceModel, resource_type: ResourceType) -> Resource:
        """Convert ORM model to domain entity."""
        return Resource(
            id=model.id,
            type=resource_type,
            name=model.name,
            description=model.description,
            owner_id=model.owner_id,
            is_public=bool(model.is_public),
            workspace_shared=bool(model.workspace_shared),
            share_token=model.share_token,
            settings=parse_settings(resource_type, model.settings),
            last_viewed_at=getattr(model, "last_viewed_at", None),
            created_at=model.created_at,
            updated_at=model.updated_at,
        )

    def _to_model(self, entity: Resource) -> ResourceModel:
        """Convert domain entity to ORM model."""
        model_cls = _model_for(entity.type)
        settings = entity.settings or parse_settings(entity.type, None)
        model = model_cls(
            id=entity.id,
            name=entity.name,
            description=entity.description,
            owner_id=entity.owner_id,
            is_public=entity.is_public,
            workspace_shared=entity.workspace_shared,
            share_token=entity.share_token,
            settings=dump_settings(settings),
            created_at=entity.created_at,
            updated_at=entity.updated_at,
        )
        if entity.type == ResourceType.DASHBOARD:
            model.last_viewed_at = entity.last_viewed_at
        return model  # type: ignore[no-any-return]
