"""Initial migration

Revision ID: 001
Revises:
Create Date: 2024-01-01 00:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = '001'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # Create profiles table
    op.create_table(
        'profiles',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column('email', sa.String(255), unique=True),
        sa.Column('hashed_password', sa.String(255)),
        sa.Column('full_name', sa.String(255)),
        sa.Column('role', sa.String(50), default='operator'),
        sa.Column('avatar_url', sa.String(500)),
        sa.Column('created_at', sa.DateTime(), default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(), default=sa.func.now(), onupdate=sa.func.now()),
    )

    # Create categories table
    op.create_table(
        'categories',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column('name', sa.String(100), nullable=False),
        sa.Column('description', sa.Text()),
        sa.Column('color', sa.String(20)),
        sa.Column('icon', sa.String(50)),
        sa.Column('active', sa.Boolean(), default=True),
        sa.Column('created_at', sa.DateTime(), default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(), default=sa.func.now(), onupdate=sa.func.now()),
    )

    # Create products table
    op.create_table(
        'products',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('description', sa.Text()),
        sa.Column('price', sa.Numeric(12, 2), nullable=False, server_default='0'),
        sa.Column('image_url', sa.String(500)),
        sa.Column('category_id', postgresql.UUID(as_uuid=True), sa.ForeignKey('categories.id', ondelete='SET NULL')),
        sa.Column('available', sa.Boolean(), default=True),
        sa.Column('featured', sa.Boolean(), default=False),
        sa.Column('created_at', sa.DateTime(), default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(), default=sa.func.now(), onupdate=sa.func.now()),
    )

    # Create stock table
    op.create_table(
        'stock',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column('product_id', postgresql.UUID(as_uuid=True), sa.ForeignKey('products.id', ondelete='CASCADE')),
        sa.Column('quantity', sa.Numeric(12, 3), nullable=False, server_default='0'),
        sa.Column('unit', sa.String(20), nullable=False, server_default='un'),
        sa.Column('min_stock', sa.Numeric(12, 3), server_default='0'),
        sa.Column('purchase_price', sa.Numeric(12, 2)),
        sa.Column('category', sa.String(50), server_default='Ingredientes'),
        sa.Column('last_update', sa.DateTime(), default=sa.func.now()),
    )

    # Create shifts table
    op.create_table(
        'shifts',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=False),
        sa.Column('start_time', sa.String(32), nullable=False),
        sa.Column('end_time', sa.String(32)),
        sa.Column('operator_name', sa.String(255), nullable=False),
        sa.Column('initial_amount', sa.Numeric(12, 2), nullable=False, server_default='0'),
        sa.Column('closing_amount', sa.Numeric(12, 2)),
        sa.Column('closing_cash_amount', sa.Numeric(12, 2)),
        sa.Column('closing_debit_amount', sa.Numeric(12, 2)),
        sa.Column('closing_credit_amount', sa.Numeric(12, 2)),
        sa.Column('closing_pix_amount', sa.Numeric(12, 2)),
        sa.Column('status', sa.String(10), nullable=False, server_default='active'),
        sa.Column('cash_transactions', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('card_transactions', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('pix_transactions', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('total_transactions', sa.Integer(), nullable=False, server_default='0'),
    )

    # Create orders table
    op.create_table(
        'orders',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column('order_type', sa.String(20), nullable=False, server_default='Retirada'),
        sa.Column('table_number', sa.String(20)),
        sa.Column('customer_name', sa.String(255)),
        sa.Column('delivery_info', postgresql.JSON()),
        sa.Column('status', sa.String(20), nullable=False, server_default='pending'),
        sa.Column('total_amount', sa.Numeric(12, 2), nullable=False, server_default='0'),
        sa.Column('has_service_fee', sa.Boolean(), default=False),
        sa.Column('payment_method', sa.String(20)),
        sa.Column('paid', sa.Boolean(), default=False),
        sa.Column('shift_id', sa.Integer(), sa.ForeignKey('shifts.id')),
        sa.Column('notes', sa.Text()),
        sa.Column('idempotency_key', sa.String(128), unique=True),
        sa.Column('created_at', sa.DateTime(), default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(), default=sa.func.now(), onupdate=sa.func.now()),
    )

    # Create order_items table
    op.create_table(
        'order_items',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column('order_id', postgresql.UUID(as_uuid=True), sa.ForeignKey('orders.id', ondelete='CASCADE'), nullable=False),
        sa.Column('product_id', postgresql.UUID(as_uuid=True), sa.ForeignKey('products.id', ondelete='SET NULL')),
        sa.Column('name', sa.String(255)),
        sa.Column('quantity', sa.Integer(), nullable=False, server_default='1'),
        sa.Column('unit_price', sa.Numeric(12, 2), nullable=False, server_default='0'),
        sa.Column('notes', sa.Text(), server_default=''),
        sa.Column('created_at', sa.DateTime(), default=sa.func.now()),
    )

    # Create indexes
    op.create_index('ix_orders_status', 'orders', ['status'])
    op.create_index('ix_orders_created_at', 'orders', ['created_at'])
    op.create_index('ix_order_items_order_id', 'order_items', ['order_id'])
    op.create_index('ix_stock_product_id', 'stock', ['product_id'])
    op.create_index(
        'uq_shifts_single_active',
        'shifts',
        ['status'],
        unique=True,
        postgresql_where=sa.text("status = 'active'"),
    )


def downgrade() -> None:
    op.drop_table('order_items')
    op.drop_table('orders')
    op.drop_table('shifts')
    op.drop_table('stock')
    op.drop_table('products')
    op.drop_table('categories')
    op.drop_table('profiles')
