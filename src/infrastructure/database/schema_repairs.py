"""Catalogue of additive repairs and the executor that applies them.

Each repair mirrors an alembic revision under ``migrations/versions`` so a
database that missed a deploy-time migration converges to the same schema
the first time a request trips over the gap.
"""

from collections.abc import Callable

import sqlalchemy as sa
from alembic.migration import MigrationContext
from alembic.operations import Operations
from sqlalchemy.engine import Connection
from sqlalchemy.ext.asyncio import AsyncEngine

from domain.entities.schema_repair import Repair, RepairStep
from infrastructure.database.models import (
    DashboardModel,
    InvitationModel,
    ProjectModel,
    SessionModel,
    UserModel,
)


def _operations(conn: Connection) -> Operations:
    return Operations(MigrationContext.configure(conn))


def _has_column(conn: Connection, table: str, column: str) -> bool:
    inspector = sa.inspect(conn)
    return any(col["name"] == column for col in inspector.get_columns(table))


def _has_index(conn: Connection, table: str, index: str) -> bool:
    inspector = sa.inspect(conn)
    return any(idx["name"] == index for idx in inspector.get_indexes(table))


def add_column(table: str, column_factory: Callable[[], sa.Column]) -> RepairStep:
    """Add a column unless the live table already has it."""
    name = column_factory().name

    def apply(conn: Connection) -> None:
        if _has_column(conn, table, name):
            return
        _operations(conn).add_column(table, column_factory())

    return RepairStep(name=f"add_column:{table}.{name}", apply=apply)


def create_index(table: str, index: str, columns: list[str], unique: bool = False) -> RepairStep:
    """Create an index unless it already exists."""

    def apply(conn: Connection) -> None:
        if _has_index(conn, table, index):
            return
        _operations(conn).create_index(index, table, columns, unique=unique)

    return RepairStep(name=f"create_index:{index}", apply=apply)


def create_table(table: sa.Table) -> RepairStep:
    """Create a table (and its indexes) unless it already exists."""

    def apply(conn: Connection) -> None:
        table.create(conn, checkfirst=True)

    return RepairStep(name=f"create_table:{table.name}", apply=apply)


def _sharing_columns(table: str) -> list[RepairStep]:
    return [
        add_column(
            table,
            lambda: sa.Column("is_public", sa.Boolean(), nullable=False, server_default=sa.false()),
        ),
        add_column(
            table,
            lambda: sa.Column(
                "workspace_shared", sa.Boolean(), nullable=False, server_default=sa.false()
            ),
        ),
        # Uniqueness comes from the index below.
        add_column(table, lambda: sa.Column("share_token", sa.String(64), nullable=True)),
        create_index(table, f"idx_{table}_share_token", ["share_token"], unique=True),
    ]


AUTH_REPAIR = Repair(
    name="auth",
    elements=("password_hash", "avatar_url", SessionModel.__tablename__),
    steps=(
        add_column(UserModel.__tablename__, lambda: sa.Column("password_hash", sa.String(255))),
        add_column(UserModel.__tablename__, lambda: sa.Column("avatar_url", sa.String(500))),
        create_table(SessionModel.__table__),
    ),
)

RESOURCE_SHARING_REPAIR = Repair(
    name="resource_sharing",
    elements=("is_public", "share_token", "workspace_shared", "last_viewed_at"),
    steps=(
        *_sharing_columns(ProjectModel.__tablename__),
        *_sharing_columns(DashboardModel.__tablename__),
        add_column(DashboardModel.__tablename__, lambda: sa.Column("last_viewed_at", sa.DateTime())),
    ),
)

INVITATIONS_REPAIR = Repair(
    name="invitations",
    elements=(InvitationModel.__tablename__, "permission"),
    steps=(
        create_table(InvitationModel.__table__),
        add_column("project_members", lambda: sa.Column("permission", sa.String(20))),
        add_column("dashboard_members", lambda: sa.Column("permission", sa.String(20))),
    ),
)

REPAIRS: tuple[Repair, ...] = (AUTH_REPAIR, RESOURCE_SHARING_REPAIR, INVITATIONS_REPAIR)


class SQLAlchemyRepairExecutor:
    """Runs each repair step in its own transaction on a fresh connection."""

    def __init__(self, engine: AsyncEngine) -> None:
        self._engine = engine

    async def run(self, step: RepairStep) -> None:
        async with self._engine.begin() as conn:
            await conn.run_sync(step.apply)
