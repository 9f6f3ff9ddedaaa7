"""Initial schema: users, organizations, organization_users

Revision ID: 001
Revises:
Create Date: 2026-10-19

Creates the three tables together with the partial unique index that allows
a single personal organization per creator, and the ON DELETE CASCADE
foreign keys from memberships to organizations and users.
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '001'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


system_role = sa.Enum('user', 'admin', name='system_role')
organization_member_role = sa.Enum('owner', 'admin', 'member', name='organization_member_role')


def upgrade() -> None:
    op.create_table(
        'users',
        sa.Column('id', sa.String(length=255), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('email', sa.String(length=255), nullable=False, server_default=''),
        sa.Column('email_verified', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('role', system_role, nullable=False, server_default='user'),
        sa.Column('public_keys', sa.JSON(), nullable=False, server_default='[]'),
        sa.Column('key_pair', sa.JSON(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.text('CURRENT_TIMESTAMP')),
        sa.Column('updated_at', sa.DateTime(), nullable=False, server_default=sa.text('CURRENT_TIMESTAMP')),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_users_email', 'users', ['email'])

    op.create_table(
        'organizations',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('created_by', sa.String(length=255), nullable=False),
        sa.Column('personal', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('telemetry_enabled', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('total_cpu_quota', sa.Integer(), nullable=False, server_default='10'),
        sa.Column('total_memory_quota', sa.Integer(), nullable=False, server_default='10'),
        sa.Column('total_disk_quota', sa.Integer(), nullable=False, server_default='30'),
        sa.Column('max_cpu_per_sandbox', sa.Integer(), nullable=False, server_default='4'),
        sa.Column('max_memory_per_sandbox', sa.Integer(), nullable=False, server_default='8'),
        sa.Column('max_disk_per_sandbox', sa.Integer(), nullable=False, server_default='10'),
        sa.Column('max_snapshot_size', sa.Integer(), nullable=False, server_default='20'),
        sa.Column('snapshot_quota', sa.Integer(), nullable=False, server_default='100'),
        sa.Column('volume_quota', sa.Integer(), nullable=False, server_default='100'),
        sa.Column('suspended', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('suspended_at', sa.DateTime(), nullable=True),
        sa.Column('suspension_reason', sa.String(length=255), nullable=True),
        sa.Column('suspended_until', sa.DateTime(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.text('CURRENT_TIMESTAMP')),
        sa.Column('updated_at', sa.DateTime(), nullable=False, server_default=sa.text('CURRENT_TIMESTAMP')),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_organizations_name', 'organizations', ['name'])
    op.create_index('ix_organizations_created_by', 'organizations', ['created_by'])
    op.create_index('ix_organizations_suspended', 'organizations', ['suspended'])
    # One personal organization per creator
    op.create_index(
        'uq_organizations_personal_creator',
        'organizations',
        ['created_by'],
        unique=True,
        postgresql_where=sa.text('personal'),
        sqlite_where=sa.text('personal'),
    )

    op.create_table(
        'organization_users',
        sa.Column('organization_id', sa.String(length=36), nullable=False),
        sa.Column('user_id', sa.String(length=255), nullable=False),
        sa.Column('role', organization_member_role, nullable=False, server_default='member'),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.text('CURRENT_TIMESTAMP')),
        sa.Column('updated_at', sa.DateTime(), nullable=False, server_default=sa.text('CURRENT_TIMESTAMP')),
        sa.ForeignKeyConstraint(['organization_id'], ['organizations.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('organization_id', 'user_id')
    )
    op.create_index('ix_organization_users_user_id', 'organization_users', ['user_id'])


def downgrade() -> None:
    op.drop_index('ix_organization_users_user_id', table_name='organization_users')
    op.drop_table('organization_users')

    op.drop_index('uq_organizations_personal_creator', table_name='organizations')
    op.drop_index('ix_organizations_suspended', table_name='organizations')
    op.drop_index('ix_organizations_created_by', table_name='organizations')
    op.drop_index('ix_organizations_name', table_name='organizations')
    op.drop_table('organizations')

    op.drop_index('ix_users_email', table_name='users')
    op.drop_table('users')

    organization_member_role.drop(op.get_bind(), checkfirst=True)
    system_role.drop(op.get_bind(), checkfirst=True)
