"""create_events_and_registrations

Revision ID: b71d9e2a4c35
Revises: 8e3b4c6d1f20
Create Date: 2026-10-19 09:20:00

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects.postgresql import ENUM, UUID

revision: str = 'b71d9e2a4c35'
down_revision: Union[str, None] = '8e3b4c6d1f20'
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

REGISTRATION_TABLES = ('participants', 'partners')


def upgrade() -> None:
    """Create events, participants and partners."""
    op.create_table(
        'events',
        sa.Column('id', UUID(as_uuid=True), primary_key=True, server_default=sa.text('gen_random_uuid()')),
        sa.Column('tenant_id', UUID(as_uuid=True), nullable=False),
        sa.Column('name', sa.String(length=200), nullable=False),
        sa.Column('slug', sa.String(length=220), nullable=False),
        sa.Column(
            'status',
            sa.Enum('planning', 'open', 'closed', 'archived', name='event_status'),
            nullable=False,
            server_default='planning',
        ),
        sa.Column('start_date', sa.DateTime(timezone=True), nullable=False),
        sa.Column('end_date', sa.DateTime(timezone=True), nullable=True),
        sa.Column('timezone', sa.String(length=64), nullable=True),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column(
            'event_type',
            sa.Enum('physical', 'online', name='event_type'),
            nullable=False,
            server_default='online',
        ),
        sa.Column('address', sa.String(length=500), nullable=True),
        sa.Column('created_by', UUID(as_uuid=True), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.CheckConstraint('end_date IS NULL OR end_date >= start_date', name='ck_events_end_after_start'),
    )
    op.create_foreign_key(
        'events_tenant_id_fkey',
        'events', 'tenants',
        ['tenant_id'], ['id'],
        ondelete='CASCADE',
    )
    op.create_foreign_key(
        'events_created_by_fkey',
        'events', 'users',
        ['created_by'], ['id'],
        ondelete='SET NULL',
    )
    op.create_index('idx_events_tenant_id', 'events', ['tenant_id'])
    op.create_index('idx_events_slug', 'events', ['slug'], unique=True)

    registration_status = sa.Enum('approved', 'not-approved', name='registration_status')
    registration_status.create(op.get_bind(), checkfirst=True)

    for table in REGISTRATION_TABLES:
        op.create_table(
            table,
            sa.Column('id', UUID(as_uuid=True), primary_key=True, server_default=sa.text('gen_random_uuid()')),
            sa.Column('event_id', UUID(as_uuid=True), nullable=False),
            sa.Column('tenant_id', UUID(as_uuid=True), nullable=False),
            sa.Column('name', sa.String(length=200), nullable=False),
            sa.Column('email', sa.String(length=255), nullable=False),
            sa.Column('company', sa.String(length=200), nullable=True),
            sa.Column(
                'status',
                ENUM('approved', 'not-approved', name='registration_status', create_type=False),
                nullable=False,
                server_default='approved',
            ),
            sa.Column('registration_date', sa.DateTime(timezone=True), nullable=True),
            sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
            sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        )
        op.create_foreign_key(
            f'{table}_event_id_fkey',
            table, 'events',
            ['event_id'], ['id'],
            ondelete='CASCADE',
        )
        op.create_foreign_key(
            f'{table}_tenant_id_fkey',
            table, 'tenants',
            ['tenant_id'], ['id'],
            ondelete='CASCADE',
        )
        op.create_index(f'idx_{table}_event_id', table, ['event_id'])
        op.create_index(f'idx_{table}_tenant_id', table, ['tenant_id'])


def downgrade() -> None:
    """Drop partners, participants and events."""
    for table in reversed(REGISTRATION_TABLES):
        op.drop_index(f'idx_{table}_tenant_id', table_name=table)
        op.drop_index(f'idx_{table}_event_id', table_name=table)
        op.drop_constraint(f'{table}_tenant_id_fkey', table, type_='foreignkey')
        op.drop_constraint(f'{table}_event_id_fkey', table, type_='foreignkey')
        op.drop_table(table)
    sa.Enum(name='registration_status').drop(op.get_bind(), checkfirst=True)

    op.drop_index('idx_events_slug', table_name='events')
    op.drop_index('idx_events_tenant_id', table_name='events')
    op.drop_constraint('events_created_by_fkey', 'events', type_='foreignkey')
    op.drop_constraint('events_tenant_id_fkey', 'events', type_='foreignkey')
    op.drop_table('events')
    sa.Enum(name='event_type').drop(op.get_bind(), checkfirst=True)
    sa.Enum(name='event_status').drop(op.get_bind(), checkfirst=True)
