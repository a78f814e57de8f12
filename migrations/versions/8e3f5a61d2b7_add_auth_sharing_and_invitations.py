"""add_auth_sharing_and_invitations

Revision ID: 8e3f5a61d2b7
Revises: 4b1d2e7a9c10
Create Date: 2026-10-02 16:27:05.448210

The same additions are applied at runtime by
``infrastructure.database.schema_repairs`` when a database missed this
revision; every statement here must stay additive.

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '8e3f5a61d2b7'
down_revision: Union[str, Sequence[str], None] = '4b1d2e7a9c10'
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

PERMISSIONS = "'view', 'comment', 'edit', 'full_edit'"


def upgrade() -> None:
    """Add password login, sharing columns and resource invitations."""
    # Auth
    op.add_column('users', sa.Column('password_hash', sa.String(length=255), nullable=True))
    op.add_column('users', sa.Column('avatar_url', sa.String(length=500), nullable=True))
    op.create_table('user_sessions',
        sa.Column('id', sa.UUID(), nullable=False),
        sa.Column('user_id', sa.UUID(), nullable=False),
        sa.Column('token_hash', sa.String(length=64), nullable=False),
        sa.Column('ip_address', sa.String(length=45), nullable=True),
        sa.Column('user_agent', sa.String(length=500), nullable=True),
        sa.Column('expires_at', sa.DateTime(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('idx_user_sessions_token', 'user_sessions', ['token_hash'], unique=True)
    op.create_index('idx_user_sessions_user_expires', 'user_sessions', ['user_id', 'expires_at'], unique=False)

    # Sharing
    for table in ('projects', 'dashboards'):
        op.add_column(table, sa.Column('is_public', sa.Boolean(), nullable=False, server_default=sa.false()))
        op.add_column(table, sa.Column('workspace_shared', sa.Boolean(), nullable=False, server_default=sa.false()))
        op.add_column(table, sa.Column('share_token', sa.String(length=64), nullable=True))
        op.create_index(f'idx_{table}_share_token', table, ['share_token'], unique=True)
    op.add_column('dashboards', sa.Column('last_viewed_at', sa.DateTime(), nullable=True))

    # Invitations
    for table in ('project_members', 'dashboard_members'):
        op.add_column(table, sa.Column('permission', sa.String(length=20), nullable=True))
        op.create_check_constraint(
            f'ck_{table}_permission', table,
            f"permission IS NULL OR permission IN ({PERMISSIONS})",
        )
    op.create_table('resource_invitations',
        sa.Column('id', sa.UUID(), nullable=False),
        sa.Column('resource_type', sa.String(length=20), nullable=False),
        sa.Column('resource_id', sa.UUID(), nullable=False),
        sa.Column('task_id', sa.UUID(), nullable=True),
        sa.Column('email', sa.String(length=255), nullable=False),
        sa.Column('permission', sa.String(length=20), nullable=False, server_default='full_edit'),
        sa.Column('token_hash', sa.String(length=64), nullable=False),
        sa.Column('invited_by', sa.UUID(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('expires_at', sa.DateTime(), nullable=False),
        sa.Column('accepted_at', sa.DateTime(), nullable=True),
        sa.CheckConstraint("resource_type IN ('project', 'dashboard')", name='ck_resource_invitations_type'),
        sa.CheckConstraint(f"permission IN ({PERMISSIONS})", name='ck_resource_invitations_permission'),
        sa.ForeignKeyConstraint(['invited_by'], ['users.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('token_hash'),
    )
    op.create_index('idx_resource_invitations_resource', 'resource_invitations', ['resource_type', 'resource_id'], unique=False)


def downgrade() -> None:
    """Remove auth, sharing and invitation additions."""
    op.drop_index('idx_resource_invitations_resource', table_name='resource_invitations')
    op.drop_table('resource_invitations')
    for table in ('dashboard_members', 'project_members'):
        op.drop_constraint(f'ck_{table}_permission', table, type_='check')
        op.drop_column(table, 'permission')

    op.drop_column('dashboards', 'last_viewed_at')
    for table in ('dashboards', 'projects'):
        op.drop_index(f'idx_{table}_share_token', table_name=table)
        op.drop_column(table, 'share_token')
        op.drop_column(table, 'workspace_shared')
        op.drop_column(table, 'is_public')

    op.drop_index('idx_user_sessions_user_expires', table_name='user_sessions')
    op.drop_index('idx_user_sessions_token', table_name='user_sessions')
    op.drop_table('user_sessions')
    op.drop_column('users', 'avatar_url')
    op.drop_column('users', 'password_hash')
