"""create_core_tables

Revision ID: 4b1d2e7a9c10
Revises:
Create Date: 2026-09-14 09:12:44.102931

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql


# revision identifiers, used by Alembic.
revision: str = '4b1d2e7a9c10'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _member_table(name: str, resource_column: str, resource_table: str) -> None:
    op.create_table(name,
        sa.Column('id', sa.UUID(), nullable=False),
        sa.Column(resource_column, sa.UUID(), nullable=False),
        sa.Column('user_id', sa.UUID(), nullable=False),
        sa.Column('role', sa.String(length=20), nullable=False, server_default='member'),
        sa.Column('invited_by', sa.UUID(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.CheckConstraint("role IN ('admin', 'member')", name=f'ck_{name}_role'),
        sa.ForeignKeyConstraint([resource_column], [f'{resource_table}.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['invited_by'], ['users.id'], ondelete='SET NULL'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint(resource_column, 'user_id'),
    )


def upgrade() -> None:
    """Create users, projects, dashboards, memberships and tasks."""
    op.create_table('users',
        sa.Column('id', sa.UUID(), nullable=False),
        sa.Column('email', sa.String(length=255), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('email'),
    )
    op.create_table('projects',
        sa.Column('id', sa.UUID(), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('owner_id', sa.UUID(), nullable=False),
        sa.Column('settings', postgresql.JSONB(astext_type=sa.Text()), nullable=True),
        sa.Column('deleted_at', sa.DateTime(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(['owner_id'], ['users.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_table('dashboards',
        sa.Column('id', sa.UUID(), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('owner_id', sa.UUID(), nullable=False),
        sa.Column('settings', postgresql.JSONB(astext_type=sa.Text()), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(['owner_id'], ['users.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
    )
    _member_table('project_members', 'project_id', 'projects')
    _member_table('dashboard_members', 'dashboard_id', 'dashboards')
    op.create_table('tasks',
        sa.Column('id', sa.UUID(), nullable=False),
        sa.Column('project_id', sa.UUID(), nullable=False),
        sa.Column('title', sa.String(length=500), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(['project_id'], ['projects.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
    )
    # Membership lookups by user (the unique constraints cover resource-first lookups)
    op.create_index('ix_project_members_user', 'project_members', ['user_id'], unique=False)
    op.create_index('ix_dashboard_members_user', 'dashboard_members', ['user_id'], unique=False)
    op.create_index('ix_tasks_project', 'tasks', ['project_id'], unique=False)


def downgrade() -> None:
    """Drop core tables."""
    op.drop_index('ix_tasks_project', table_name='tasks')
    op.drop_index('ix_dashboard_members_user', table_name='dashboard_members')
    op.drop_index('ix_project_members_user', table_name='project_members')
    op.drop_table('tasks')
    op.drop_table('dashboard_members')
    op.drop_table('project_members')
    op.drop_table('dashboards')
    op.drop_table('projects')
    op.drop_table('users')
