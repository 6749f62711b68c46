"""initial marketplace schema

Revision ID: 3f1a9c2b7d10
Revises:
Create Date: 2026-09-14 10:20:00.000000

"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '3f1a9c2b7d10'
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    op.create_table(
        'vendors',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('handle', sa.String(length=80), nullable=False),
        sa.Column('name', sa.String(length=160), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('logo_url', sa.String(length=255), nullable=True),
        sa.Column('business_email', sa.String(length=255), nullable=False),
        sa.Column('business_phone', sa.String(length=32), nullable=False),
        sa.Column('ghana_business_registration', sa.String(length=64), nullable=False),
        sa.Column('tin_number', sa.String(length=32), nullable=True),
        sa.Column('vat_number', sa.String(length=32), nullable=True),
        sa.Column('region', sa.String(length=64), nullable=False),
        sa.Column('city', sa.String(length=64), nullable=False),
        sa.Column('address', sa.String(length=255), nullable=False),
        sa.Column('gps_coordinates', sa.String(length=32), nullable=True),
        sa.Column('primary_category', sa.String(length=32), nullable=False),
        sa.Column('secondary_categories', sa.JSON(), nullable=True),
        sa.Column('bank_name', sa.String(length=120), nullable=True),
        sa.Column('account_number', sa.String(length=32), nullable=True),
        sa.Column('account_name', sa.String(length=160), nullable=True),
        sa.Column('mobile_money_number', sa.String(length=32), nullable=True),
        sa.Column('mobile_money_provider', sa.String(length=16), nullable=True),
        sa.Column('contact_first_name', sa.String(length=80), nullable=False),
        sa.Column('contact_last_name', sa.String(length=80), nullable=False),
        sa.Column('contact_email', sa.String(length=255), nullable=True),
        sa.Column('contact_phone', sa.String(length=32), nullable=True),
        sa.Column('contact_role', sa.String(length=64), nullable=False),
        sa.Column('verification_status', sa.String(length=16), nullable=False),
        sa.Column('is_verified', sa.Boolean(), nullable=False),
        sa.Column('verified_at', sa.DateTime(), nullable=True),
        sa.Column('verified_by', sa.Integer(), nullable=True),
        sa.Column('verification_notes', sa.Text(), nullable=True),
        sa.Column('verification_requirements', sa.JSON(), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        sa.Column('rating', sa.Float(), nullable=False),
        sa.Column('total_sales', sa.Numeric(precision=14, scale=2), nullable=False),
        sa.Column('total_orders', sa.Integer(), nullable=False),
        sa.Column('registration_source', sa.String(length=32), nullable=False),
        sa.Column('terms_accepted_at', sa.DateTime(), nullable=True),
        sa.Column('privacy_accepted_at', sa.DateTime(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
    )
    with op.batch_alter_table('vendors', schema=None) as batch_op:
        batch_op.create_index('ix_vendors_handle', ['handle'], unique=True)
        batch_op.create_index('ix_vendors_business_email', ['business_email'], unique=True)
        batch_op.create_index('ix_vendors_region', ['region'], unique=False)
        batch_op.create_index('ix_vendors_primary_category', ['primary_category'], unique=False)
        batch_op.create_index('ix_vendors_verification_status', ['verification_status'], unique=False)

    op.create_table(
        'users',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('email', sa.String(length=255), nullable=False),
        sa.Column('password_hash', sa.String(length=255), nullable=False),
        sa.Column('first_name', sa.String(length=80), nullable=False),
        sa.Column('last_name', sa.String(length=80), nullable=False),
        sa.Column('phone', sa.String(length=32), nullable=True),
        sa.Column('role', sa.String(length=32), nullable=False),
        sa.Column('vendor_id', sa.Integer(), nullable=True),
        sa.Column('permissions', sa.JSON(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(['vendor_id'], ['vendors.id']),
        sa.PrimaryKeyConstraint('id'),
    )
    with op.batch_alter_table('users', schema=None) as batch_op:
        batch_op.create_index('ix_users_email', ['email'], unique=True)
        batch_op.create_index('ix_users_vendor_id', ['vendor_id'], unique=False)

    op.create_table(
        'vendor_admins',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('vendor_id', sa.Integer(), nullable=False),
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column('role', sa.String(length=16), nullable=False),
        sa.Column('manage_products', sa.Boolean(), nullable=False),
        sa.Column('manage_orders', sa.Boolean(), nullable=False),
        sa.Column('view_analytics', sa.Boolean(), nullable=False),
        sa.Column('manage_settings', sa.Boolean(), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(['user_id'], ['users.id']),
        sa.ForeignKeyConstraint(['vendor_id'], ['vendors.id']),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('vendor_id', 'user_id', name='uq_vendor_admin_vendor_user'),
    )
    with op.batch_alter_table('vendor_admins', schema=None) as batch_op:
        batch_op.create_index('ix_vendor_admins_vendor_id', ['vendor_id'], unique=False)
        batch_op.create_index('ix_vendor_admins_user_id', ['user_id'], unique=False)

    op.create_table(
        'vendor_settings',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('vendor_id', sa.Integer(), nullable=False),
        sa.Column('store_name', sa.String(length=160), nullable=False),
        sa.Column('store_description', sa.Text(), nullable=True),
        sa.Column('store_banner_url', sa.String(length=255), nullable=True),
        sa.Column('store_theme_color', sa.String(length=16), nullable=False),
        sa.Column('business_hours', sa.JSON(), nullable=False),
        sa.Column('offers_delivery', sa.Boolean(), nullable=False),
        sa.Column('delivery_zones', sa.JSON(), nullable=False),
        sa.Column('delivery_fee', sa.Numeric(precision=10, scale=2), nullable=False),
        sa.Column('free_delivery_threshold', sa.Numeric(precision=10, scale=2), nullable=True),
        sa.Column('accepted_payment_methods', sa.JSON(), nullable=False),
        sa.Column('email_notifications', sa.Boolean(), nullable=False),
        sa.Column('sms_notifications', sa.Boolean(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(['vendor_id'], ['vendors.id']),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('vendor_id'),
    )

    op.create_table(
        'products',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('vendor_id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(length=200), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('category', sa.String(length=32), nullable=False),
        sa.Column('subcategory', sa.String(length=64), nullable=True),
        sa.Column('price', sa.Numeric(precision=12, scale=2), nullable=False),
        sa.Column('currency', sa.String(length=8), nullable=False),
        sa.Column('stock', sa.Integer(), nullable=False),
        sa.Column('status', sa.String(length=16), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(['vendor_id'], ['vendors.id']),
        sa.PrimaryKeyConstraint('id'),
    )
    with op.batch_alter_table('products', schema=None) as batch_op:
        batch_op.create_index('ix_products_vendor_id', ['vendor_id'], unique=False)
        batch_op.create_index('ix_products_category', ['category'], unique=False)
        batch_op.create_index('ix_products_status', ['status'], unique=False)

    op.create_table(
        'orders',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('order_number', sa.String(length=32), nullable=False),
        sa.Column('customer_email', sa.String(length=255), nullable=False),
        sa.Column('customer_phone', sa.String(length=32), nullable=True),
        sa.Column('customer_name', sa.String(length=160), nullable=True),
        sa.Column('subtotal', sa.Numeric(precision=12, scale=2), nullable=False),
        sa.Column('tax_amount', sa.Numeric(precision=12, scale=2), nullable=False),
        sa.Column('delivery_fee', sa.Numeric(precision=12, scale=2), nullable=False),
        sa.Column('total', sa.Numeric(precision=12, scale=2), nullable=False),
        sa.Column('currency', sa.String(length=8), nullable=False),
        sa.Column('delivery_region', sa.String(length=64), nullable=True),
        sa.Column('delivery_address', sa.JSON(), nullable=True),
        sa.Column('status', sa.String(length=16), nullable=False),
        sa.Column('payment_status', sa.String(length=24), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
    )
    with op.batch_alter_table('orders', schema=None) as batch_op:
        batch_op.create_index('ix_orders_order_number', ['order_number'], unique=True)
        batch_op.create_index('ix_orders_status', ['status'], unique=False)
        batch_op.create_index('ix_orders_payment_status', ['payment_status'], unique=False)

    op.create_table(
        'order_items',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('order_id', sa.Integer(), nullable=False),
        sa.Column('product_id', sa.Integer(), nullable=True),
        sa.Column('vendor_id', sa.Integer(), nullable=True),
        sa.Column('product_name', sa.String(length=200), nullable=False),
        sa.Column('unit_price', sa.Numeric(precision=12, scale=2), nullable=False),
        sa.Column('quantity', sa.Integer(), nullable=False),
        sa.Column('total_price', sa.Numeric(precision=12, scale=2), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(['order_id'], ['orders.id']),
        sa.ForeignKeyConstraint(['product_id'], ['products.id']),
        sa.ForeignKeyConstraint(['vendor_id'], ['vendors.id']),
        sa.PrimaryKeyConstraint('id'),
    )
    with op.batch_alter_table('order_items', schema=None) as batch_op:
        batch_op.create_index('ix_order_items_order_id', ['order_id'], unique=False)
        batch_op.create_index('ix_order_items_product_id', ['product_id'], unique=False)
        batch_op.create_index('ix_order_items_vendor_id', ['vendor_id'], unique=False)

    op.create_table(
        'payments',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('reference', sa.String(length=128), nullable=False),
        sa.Column('order_id', sa.Integer(), nullable=True),
        sa.Column('email', sa.String(length=255), nullable=False),
        sa.Column('amount', sa.Numeric(precision=12, scale=2), nullable=False),
        sa.Column('currency', sa.String(length=8), nullable=False),
        sa.Column('payment_method', sa.String(length=24), nullable=False),
        sa.Column('provider', sa.String(length=16), nullable=True),
        sa.Column('phone', sa.String(length=32), nullable=True),
        sa.Column('status', sa.String(length=16), nullable=False),
        sa.Column('gateway_id', sa.String(length=64), nullable=True),
        sa.Column('channel', sa.String(length=32), nullable=True),
        sa.Column('gateway_response', sa.String(length=255), nullable=True),
        sa.Column('authorization_code', sa.String(length=64), nullable=True),
        sa.Column('card_type', sa.String(length=32), nullable=True),
        sa.Column('card_last4', sa.String(length=4), nullable=True),
        sa.Column('bank', sa.String(length=120), nullable=True),
        sa.Column('fees', sa.Numeric(precision=12, scale=2), nullable=True),
        sa.Column('paid_at', sa.DateTime(), nullable=True),
        sa.Column('failure_reason', sa.String(length=255), nullable=True),
        sa.Column('failed_at', sa.DateTime(), nullable=True),
        sa.Column('refund_processed', sa.Boolean(), nullable=False),
        sa.Column('refunded_at', sa.DateTime(), nullable=True),
        sa.Column('raw_response', sa.JSON(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(['order_id'], ['orders.id']),
        sa.PrimaryKeyConstraint('id'),
    )
    with op.batch_alter_table('payments', schema=None) as batch_op:
        batch_op.create_index('ix_payments_reference', ['reference'], unique=True)
        batch_op.create_index('ix_payments_order_id', ['order_id'], unique=False)
        batch_op.create_index('ix_payments_status', ['status'], unique=False)

    op.create_table(
        'vendor_payouts',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('vendor_id', sa.Integer(), nullable=False),
        sa.Column('order_id', sa.Integer(), nullable=False),
        sa.Column('payment_reference', sa.String(length=128), nullable=False),
        sa.Column('reference', sa.String(length=200), nullable=False),
        sa.Column('gross_amount', sa.Numeric(precision=12, scale=2), nullable=False),
        sa.Column('commission_amount', sa.Numeric(precision=12, scale=2), nullable=False),
        sa.Column('amount', sa.Numeric(precision=12, scale=2), nullable=False),
        sa.Column('currency', sa.String(length=8), nullable=False),
        sa.Column('item_ids', sa.JSON(), nullable=False),
        sa.Column('status', sa.String(length=16), nullable=False),
        sa.Column('transfer_reference', sa.String(length=128), nullable=True),
        sa.Column('failure_reason', sa.String(length=255), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(['order_id'], ['orders.id']),
        sa.ForeignKeyConstraint(['vendor_id'], ['vendors.id']),
        sa.PrimaryKeyConstraint('id'),
    )
    with op.batch_alter_table('vendor_payouts', schema=None) as batch_op:
        batch_op.create_index('ix_vendor_payouts_vendor_id', ['vendor_id'], unique=False)
        batch_op.create_index('ix_vendor_payouts_order_id', ['order_id'], unique=False)
        batch_op.create_index('ix_vendor_payouts_payment_reference', ['payment_reference'], unique=False)
        batch_op.create_index('ix_vendor_payouts_reference', ['reference'], unique=True)
        batch_op.create_index('ix_vendor_payouts_status', ['status'], unique=False)

    op.create_table(
        'email_outbox',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('to', sa.String(length=255), nullable=False),
        sa.Column('cc', sa.String(length=255), nullable=True),
        sa.Column('subject', sa.String(length=255), nullable=False),
        sa.Column('html', sa.Text(), nullable=False),
        sa.Column('template', sa.String(length=64), nullable=False),
        sa.Column('status', sa.String(length=16), nullable=False),
        sa.Column('reference', sa.String(length=128), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('sent_at', sa.DateTime(), nullable=True),
        sa.PrimaryKeyConstraint('id'),
    )
    with op.batch_alter_table('email_outbox', schema=None) as batch_op:
        batch_op.create_index('ix_email_outbox_reference', ['reference'], unique=False)

    op.create_table(
        'audit_logs',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('actor_user_id', sa.Integer(), nullable=True),
        sa.Column('action', sa.String(length=64), nullable=False),
        sa.Column('target_type', sa.String(length=64), nullable=True),
        sa.Column('target_id', sa.Integer(), nullable=True),
        sa.Column('meta', sa.JSON(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
    )
    with op.batch_alter_table('audit_logs', schema=None) as batch_op:
        batch_op.create_index('ix_audit_logs_action', ['action'], unique=False)

    op.create_table(
        'idempotency_keys',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('key', sa.String(length=128), nullable=False),
        sa.Column('route', sa.String(length=128), nullable=False),
        sa.Column('request_hash', sa.String(length=64), nullable=False),
        sa.Column('response_json', sa.Text(), nullable=True),
        sa.Column('status_code', sa.Integer(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('key'),
    )


def downgrade():
    op.drop_table('idempotency_keys')
    op.drop_table('audit_logs')
    op.drop_table('email_outbox')
    op.drop_table('vendor_payouts')
    op.drop_table('payments')
    op.drop_table('order_items')
    op.drop_table('orders')
    op.drop_table('products')
    op.drop_table('vendor_settings')
    op.drop_table('vendor_admins')
    op.drop_table('users')
    op.drop_table('vendors')
