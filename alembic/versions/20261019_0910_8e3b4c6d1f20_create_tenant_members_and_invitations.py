"""create_tenant_members_and_invitations

Revision ID: 8e3b4c6d1f20
Revises: 5c1f0a7d2b91
Create Date: 2026-10-19 09:10:00

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects.postgresql import ENUM, UUID

revision: str = '8e3b4c6d1f20'
down_revision: Union[str, None] = '5c1f0a7d2b91'
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Create tenant_members (one row per tenant/user) and invitations."""
    op.create_table(
        'tenant_members',
        sa.Column('id', UUID(as_uuid=True), primary_key=True, server_default=sa.text('gen_random_uuid()')),
        sa.Column('tenant_id', UUID(as_uuid=True), nullable=False),
        sa.Column('user_id', UUID(as_uuid=True), nullable=False),
        sa.Column(
            'role',
            sa.Enum('owner', 'admin', 'editor', 'viewer', name='tenant_role'),
            nullable=False,
            server_default='editor',
        ),
        sa.Column('joined_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.UniqueConstraint('tenant_id', 'user_id', name='uq_tenant_members_tenant_user'),
    )
    op.create_foreign_key(
        'tenant_members_tenant_id_fkey',
        'tenant_members', 'tenants',
        ['tenant_id'], ['id'],
        ondelete='CASCADE',
    )
    op.create_foreign_key(
        'tenant_members_user_id_fkey',
        'tenant_members', 'users',
        ['user_id'], ['id'],
        ondelete='CASCADE',
    )
    op.create_index('idx_tenant_members_tenant_id', 'tenant_members', ['tenant_id'])
    op.create_index('idx_tenant_members_user_id', 'tenant_members', ['user_id'])

    op.create_table(
        'invitations',
        sa.Column('id', UUID(as_uuid=True), primary_key=True, server_default=sa.text('gen_random_uuid()')),
        sa.Column('tenant_id', UUID(as_uuid=True), nullable=False),
        sa.Column('email', sa.String(length=255), nullable=False),
        sa.Column(
            'role',
            ENUM('owner', 'admin', 'editor', 'viewer', name='tenant_role', create_type=False),
            nullable=False,
            server_default='editor',
        ),
        sa.Column(
            'status',
            sa.Enum('pending', 'accepted', 'declined', 'expired', name='invitation_status'),
            nullable=False,
            server_default='pending',
        ),
        sa.Column('token', sa.String(length=255), nullable=False),
        sa.Column('expires_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('invited_by', UUID(as_uuid=True), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )
    op.create_foreign_key(
        'invitations_tenant_id_fkey',
        'invitations', 'tenants',
        ['tenant_id'], ['id'],
        ondelete='CASCADE',
    )
    op.create_foreign_key(
        'invitations_invited_by_fkey',
        'invitations', 'users',
        ['invited_by'], ['id'],
        ondelete='SET NULL',
    )
    op.create_index('idx_invitations_tenant_id', 'invitations', ['tenant_id'])
    op.create_index('idx_invitations_token', 'invitations', ['token'], unique=True)
    op.create_index('idx_invitations_email', 'invitations', ['email'])


def downgrade() -> None:
    """Drop invitations and tenant_members."""
    op.drop_index('idx_invitations_email', table_name='invitations')
    op.drop_index('idx_invitations_token', table_name='invitations')
    op.drop_index('idx_invitations_tenant_id', table_name='invitations')
    op.drop_constraint('invitations_invited_by_fkey', 'invitations', type_='foreignkey')
    op.drop_constraint('invitations_tenant_id_fkey', 'invitations', type_='foreignkey')
    op.drop_table('invitations')
    sa.Enum(name='invitation_status').drop(op.get_bind(), checkfirst=True)

    op.drop_index('idx_tenant_members_user_id', table_name='tenant_members')
    op.drop_index('idx_tenant_members_tenant_id', table_name='tenant_members')
    op.drop_constraint('tenant_members_user_id_fkey', 'tenant_members', type_='foreignkey')
    op.drop_constraint('tenant_members_tenant_id_fkey', 'tenant_members', type_='foreignkey')
    op.drop_table('tenant_members')
    sa.Enum(name='tenant_role').drop(op.get_bind(), checkfirst=True)
