"""refund running total and vendor order fulfillments

Revision ID: c4d7e9f1a215
Revises: 8b2e4d6f0a13
Create Date: 2026-10-19 11:20:00.000000

"""
from alembic import op
import sqlalchemy as sa
from sqlalchemy import inspect


# revision identifiers, used by Alembic.
revision = 'c4d7e9f1a215'
down_revision = '8b2e4d6f0a13'
branch_labels = None
depends_on = None


def upgrade():
    bind = op.get_bind()
    insp = inspect(bind)
    tables = set(insp.get_table_names())

    payment_cols = {c["name"] for c in insp.get_columns("payments")}
    if "refunded_amount" not in payment_cols:
        with op.batch_alter_table('payments', schema=None) as batch_op:
            batch_op.add_column(sa.Column('refunded_amount', sa.Numeric(precision=12, scale=2), nullable=False, server_default='0'))

    if "order_fulfillments" not in tables:
        op.create_table(
            'order_fulfillments',
            sa.Column('id', sa.Integer(), nullable=False),
            sa.Column('order_id', sa.Integer(), nullable=False),
            sa.Column('vendor_id', sa.Integer(), nullable=False),
            sa.Column('status', sa.String(length=16), nullable=False),
            sa.Column('tracking_number', sa.String(length=64), nullable=True),
            sa.Column('notes', sa.Text(), nullable=True),
            sa.Column('fulfilled_by', sa.Integer(), nullable=True),
            sa.Column('fulfilled_at', sa.DateTime(), nullable=True),
            sa.Column('shipped_by', sa.Integer(), nullable=True),
            sa.Column('shipped_at', sa.DateTime(), nullable=True),
            sa.Column('delivered_at', sa.DateTime(), nullable=True),
            sa.Column('created_at', sa.DateTime(), nullable=False),
            sa.Column('updated_at', sa.DateTime(), nullable=False),
            sa.ForeignKeyConstraint(['order_id'], ['orders.id']),
            sa.ForeignKeyConstraint(['vendor_id'], ['vendors.id']),
            sa.ForeignKeyConstraint(['fulfilled_by'], ['users.id']),
            sa.ForeignKeyConstraint(['shipped_by'], ['users.id']),
            sa.PrimaryKeyConstraint('id'),
            sa.UniqueConstraint('order_id', 'vendor_id', name='uq_order_fulfillments_order_vendor'),
        )
        with op.batch_alter_table('order_fulfillments', schema=None) as batch_op:
            batch_op.create_index('ix_order_fulfillments_order_id', ['order_id'], unique=False)
            batch_op.create_index('ix_order_fulfillments_vendor_id', ['vendor_id'], unique=False)


def downgrade():
    with op.batch_alter_table('order_fulfillments', schema=None) as batch_op:
        batch_op.drop_index('ix_order_fulfillments_vendor_id')
        batch_op.drop_index('ix_order_fulfillments_order_id')
    op.drop_table('order_fulfillments')

    with op.batch_alter_table('payments', schema=None) as batch_op:
        batch_op.drop_column('refunded_amount')
