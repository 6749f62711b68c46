"""webhook dedupe table and dead letters

Revision ID: 8b2e4d6f0a13
Revises: 3f1a9c2b7d10
Create Date: 2026-09-21 16:05:00.000000

"""
from alembic import op
import sqlalchemy as sa
from sqlalchemy import inspect


# revision identifiers, used by Alembic.
revision = '8b2e4d6f0a13'
down_revision = '3f1a9c2b7d10'
branch_labels = None
depends_on = None


def upgrade():
    bind = op.get_bind()
    insp = inspect(bind)
    tables = set(insp.get_table_names())

    if "webhook_events" not in tables:
        op.create_table(
            'webhook_events',
            sa.Column('id', sa.Integer(), nullable=False),
            sa.Column('provider', sa.String(length=32), nullable=False),
            sa.Column('event', sa.String(length=64), nullable=False),
            sa.Column('reference', sa.String(length=128), nullable=False),
            sa.Column('created_at', sa.DateTime(), nullable=False),
            sa.PrimaryKeyConstraint('id'),
            sa.UniqueConstraint('provider', 'event', 'reference', name='uq_webhook_events_provider_event_reference'),
        )

    if "webhook_dead_letters" not in tables:
        op.create_table(
            'webhook_dead_letters',
            sa.Column('id', sa.Integer(), nullable=False),
            sa.Column('provider', sa.String(length=32), nullable=False),
            sa.Column('event', sa.String(length=64), nullable=False),
            sa.Column('reference', sa.String(length=128), nullable=True),
            sa.Column('reason', sa.String(length=64), nullable=False),
            sa.Column('payload', sa.JSON(), nullable=True),
            sa.Column('created_at', sa.DateTime(), nullable=False),
            sa.Column('resolved_at', sa.DateTime(), nullable=True),
            sa.PrimaryKeyConstraint('id'),
        )
        with op.batch_alter_table('webhook_dead_letters', schema=None) as batch_op:
            batch_op.create_index('ix_webhook_dead_letters_reference', ['reference'], unique=False)


def downgrade():
    with op.batch_alter_table('webhook_dead_letters', schema=None) as batch_op:
        batch_op.drop_index('ix_webhook_dead_letters_reference')
    op.drop_table('webhook_dead_letters')
    op.drop_table('webhook_events')
