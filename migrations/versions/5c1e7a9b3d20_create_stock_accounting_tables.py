"""create catalog, attribute and stock accounting tables

Revision ID: 5c1e7a9b3d20
Revises:
Create Date: 2026-10-19 10:00:00.000000

"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '5c1e7a9b3d20'
down_revision = None
branch_labels = None
depends_on = None


def _timestamps():
    return [
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=True),
    ]


def upgrade():
    op.create_table(
        'categories',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('name', sa.String(100), nullable=False),
        sa.Column('slug', sa.String(120), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index('ix_categories_slug', 'categories', ['slug'], unique=True)

    op.create_table(
        'subcategories',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('category_id', sa.Integer(),
                  sa.ForeignKey('categories.id', ondelete='CASCADE'), nullable=False),
        sa.Column('name', sa.String(100), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index('ix_subcategories_category_id', 'subcategories', ['category_id'])

    op.create_table(
        'products',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('price', sa.Integer(), nullable=False),
        sa.Column('cost', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('stock', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('attribute_ids', sa.JSON(), nullable=True),
        sa.Column('category_id', sa.Integer(), sa.ForeignKey('categories.id'), nullable=True),
        sa.Column('subcategory_id', sa.Integer(), sa.ForeignKey('subcategories.id'), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('is_featured', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('is_new', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('cover_image', sa.String(1024), nullable=True),
        sa.Column('hover_image', sa.String(1024), nullable=True),
        sa.Column('product_images', sa.JSON(), nullable=True),
        *_timestamps(),
    )
    op.create_index('ix_products_category_id', 'products', ['category_id'])
    op.create_index('ix_products_subcategory_id', 'products', ['subcategory_id'])
    op.create_index('ix_products_is_active', 'products', ['is_active'])

    op.create_table(
        'product_attributes',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('subcategory_id', sa.Integer(),
                  sa.ForeignKey('subcategories.id'), nullable=False),
        sa.Column('name', sa.String(100), nullable=False),
        sa.Column('type', sa.String(20), nullable=False, server_default='variant'),
        sa.Column('value', sa.String(100), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('color_hex', sa.String(9), nullable=True),
        sa.Column('sort_order', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.true()),
        *_timestamps(),
    )
    op.create_index('ix_product_attributes_subcategory_id', 'product_attributes', ['subcategory_id'])
    op.create_index(
        'uq_attribute_option',
        'product_attributes',
        ['subcategory_id', sa.text('lower(name)'), sa.text('lower(value)')],
        unique=True,
        postgresql_where=sa.text('is_active'),
        sqlite_where=sa.text('is_active'),
    )

    op.create_table(
        'product_variant_inventory',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('product_id', sa.Integer(),
                  sa.ForeignKey('products.id', ondelete='CASCADE'), nullable=False),
        sa.Column('variant_data', sa.JSON(), nullable=False),
        sa.Column('quantity', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('reserved_quantity', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.true()),
        *_timestamps(),
        sa.CheckConstraint('quantity >= 0', name='ck_variant_quantity_non_negative'),
        sa.CheckConstraint('reserved_quantity >= 0', name='ck_variant_reserved_non_negative'),
    )
    op.create_index('ix_product_variant_inventory_product_id', 'product_variant_inventory', ['product_id'])
    op.create_index('ix_product_variant_inventory_created_at', 'product_variant_inventory', ['created_at'])

    op.create_table(
        'product_sales',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('product_id', sa.Integer(), sa.ForeignKey('products.id'), nullable=False),
        sa.Column('quantity', sa.Integer(), nullable=False),
        sa.Column('unit_price', sa.Integer(), nullable=False),
        sa.Column('total_price', sa.Integer(), nullable=False),
        sa.Column('attribute_id', sa.Integer(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index('ix_product_sales_product_id', 'product_sales', ['product_id'])
    op.create_index('ix_product_sales_created_at', 'product_sales', ['created_at'])

    op.create_table(
        'stock_orders',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('order_date', sa.Date(), nullable=False),
        sa.Column('status', sa.String(20), nullable=False, server_default='pending'),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('received_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index('ix_stock_orders_status', 'stock_orders', ['status'])

    op.create_table(
        'stock_order_items',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('stock_order_id', sa.Integer(),
                  sa.ForeignKey('stock_orders.id', ondelete='CASCADE'), nullable=False),
        sa.Column('product_id', sa.Integer(),
                  sa.ForeignKey('products.id', ondelete='SET NULL'), nullable=True),
        sa.Column('product_name', sa.String(255), nullable=False),
        sa.Column('quantity', sa.Integer(), nullable=False),
        sa.Column('attribute_id', sa.Integer(), nullable=True),
        sa.Column('attribute_name', sa.String(100), nullable=True),
        sa.Column('attribute_value', sa.String(100), nullable=True),
    )
    op.create_index('ix_stock_order_items_stock_order_id', 'stock_order_items', ['stock_order_id'])
    op.create_index('ix_stock_order_items_product_id', 'stock_order_items', ['product_id'])

    op.create_table(
        'settings',
        sa.Column('key', sa.String(100), primary_key=True),
        sa.Column('value', sa.Text(), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=True),
    )

    op.create_table(
        'audit_log',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('admin_id', sa.BigInteger(), nullable=True),
        sa.Column('action', sa.String(50), nullable=False),
        sa.Column('product_id', sa.Integer(),
                  sa.ForeignKey('products.id', ondelete='SET NULL'), nullable=True),
        sa.Column('payload', sa.JSON(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index('ix_audit_log_admin_id', 'audit_log', ['admin_id'])
    op.create_index('ix_audit_log_product_id', 'audit_log', ['product_id'])
    op.create_index('ix_audit_log_created_at', 'audit_log', ['created_at'])


def downgrade():
    op.drop_table('audit_log')
    op.drop_table('settings')
    op.drop_table('stock_order_items')
    op.drop_table('stock_orders')
    op.drop_table('product_sales')
    op.drop_table('product_variant_inventory')
    op.drop_table('product_attributes')
    op.drop_table('products')
    op.drop_table('subcategories')
    op.drop_table('categories')
