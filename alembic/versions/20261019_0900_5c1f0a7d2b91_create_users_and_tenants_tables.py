"""create_users_and_tenants_tables

Revision ID: 5c1f0a7d2b91
Revises:
Create Date: 2026-10-19 09:00:00

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects.postgresql import UUID

# revision identifiers, used by Alembic.
revision: str = '5c1f0a7d2b91'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Create users and tenants tables."""
    op.create_table(
        'users',
        sa.Column('id', UUID(as_uuid=True), primary_key=True, server_default=sa.text('gen_random_uuid()')),
        sa.Column('email', sa.String(length=255), nullable=False),
        sa.Column('password_hash', sa.String(length=255), nullable=True),
        sa.Column('display_name', sa.String(length=100), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.text('true')),
        sa.Column('roles', sa.JSON(), nullable=False, server_default=sa.text("'[\"user\"]'")),
        sa.Column(
            'pricing_plan',
            sa.Enum('free', 'pro', 'organizations', 'unlimited', name='pricing_plan'),
            nullable=True,
        ),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )
    op.create_index('idx_users_email', 'users', ['email'], unique=True)
    op.create_index('idx_users_created_at', 'users', ['created_at'])

    op.create_table(
        'tenants',
        sa.Column('id', UUID(as_uuid=True), primary_key=True, server_default=sa.text('gen_random_uuid()')),
        sa.Column('kind', sa.Enum('organization', 'team', name='tenant_kind'), nullable=False),
        sa.Column('name', sa.String(length=100), nullable=False),
        sa.Column('slug', sa.String(length=120), nullable=False),
        sa.Column('owner_id', UUID(as_uuid=True), nullable=False),
        sa.Column('email_config', sa.JSON(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )
    # Users cannot be deleted while they own a tenant
    op.create_foreign_key(
        'tenants_owner_id_fkey',
        'tenants', 'users',
        ['owner_id'], ['id'],
        ondelete='RESTRICT',
    )
    op.create_index('idx_tenants_slug', 'tenants', ['slug'], unique=True)
    op.create_index('idx_tenants_owner_id', 'tenants', ['owner_id'])
    op.create_index('idx_tenants_kind', 'tenants', ['kind'])


def downgrade() -> None:
    """Drop tenants and users tables."""
    op.drop_index('idx_tenants_kind', table_name='tenants')
    op.drop_index('idx_tenants_owner_id', table_name='tenants')
    op.drop_index('idx_tenants_slug', table_name='tenants')
    op.drop_constraint('tenants_owner_id_fkey', 'tenants', type_='foreignkey')
    op.drop_table('tenants')
    sa.Enum(name='tenant_kind').drop(op.get_bind(), checkfirst=True)

    op.drop_index('idx_users_created_at', table_name='users')
    op.drop_index('idx_users_email', table_name='users')
    op.drop_table('users')
    sa.Enum(name='pricing_plan').drop(op.get_bind(), checkfirst=True)
