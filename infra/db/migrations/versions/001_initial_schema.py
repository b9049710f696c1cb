"""Initial schema for the Thrifty storefront

Revision ID: 001_initial_schema
Revises:
Create Date: 2026-10-19 10:00:00.000000

"""
from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision = '001_initial_schema'
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.execute('CREATE EXTENSION IF NOT EXISTS "pgcrypto";')

    # Categories (created lazily by the categorizer; slug is the identity)
    op.create_table(
        'categories',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True, server_default=sa.text('gen_random_uuid()')),
        sa.Column('name', sa.Text, nullable=False),
        sa.Column('slug', sa.Text, nullable=False, comment='Lowercase hyphenated, unique'),
        sa.Column('description', sa.Text),
        sa.Column('image', sa.Text, comment='Image URL'),
        sa.Column('is_active', sa.Boolean, nullable=False, server_default='true'),
        sa.Column('sort_order', sa.Integer, nullable=False, server_default='0'),
        sa.Column('created_at', sa.TIMESTAMP(timezone=True), nullable=False, server_default=sa.text('NOW()')),
        sa.Column('updated_at', sa.TIMESTAMP(timezone=True), nullable=False, server_default=sa.text('NOW()')),
    )
    # Concurrent get-or-create relies on this constraint
    op.create_unique_constraint('uq_categories_slug', 'categories', ['slug'])
    op.create_index('idx_categories_active_name', 'categories', ['is_active', 'name'])

    # Products (categorizer input text + category references)
    op.create_table(
        'products',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True, server_default=sa.text('gen_random_uuid()')),
        sa.Column('name', sa.Text, nullable=False),
        sa.Column('description', sa.Text),
        sa.Column('brand', sa.Text),
        sa.Column('tags', postgresql.ARRAY(sa.Text), nullable=False, server_default='{}'),
        sa.Column('base_price', sa.Numeric(12, 2), nullable=False, server_default='0'),
        sa.Column('discounted_price', sa.Numeric(12, 2)),
        sa.Column('is_on_sale', sa.Boolean, nullable=False, server_default='false'),
        sa.Column('images', postgresql.JSONB, nullable=False, server_default=sa.text("'[]'::jsonb"),
                  comment='[{url, alt}]'),
        sa.Column('rating_average', sa.Numeric(3, 2), nullable=False, server_default='0'),
        sa.Column('rating_count', sa.Integer, nullable=False, server_default='0'),
        sa.Column('primary_category_id', postgresql.UUID(as_uuid=True),
                  sa.ForeignKey('categories.id', ondelete='SET NULL'), comment='Gender category'),
        sa.Column('secondary_category_id', postgresql.UUID(as_uuid=True),
                  sa.ForeignKey('categories.id', ondelete='SET NULL'), comment='Product-type category'),
        sa.Column('is_active', sa.Boolean, nullable=False, server_default='true'),
        sa.Column('created_at', sa.TIMESTAMP(timezone=True), nullable=False, server_default=sa.text('NOW()')),
        sa.Column('updated_at', sa.TIMESTAMP(timezone=True), nullable=False, server_default=sa.text('NOW()')),
    )
    op.create_index('idx_products_primary_category', 'products', ['primary_category_id', 'is_active'])
    op.create_index('idx_products_secondary_category', 'products', ['secondary_category_id', 'is_active'])
    op.create_index('idx_products_created_at', 'products', ['created_at'])

    # Carts (one document per user; totals denormalized for reporting)
    op.create_table(
        'carts',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True, server_default=sa.text('gen_random_uuid()')),
        sa.Column('user_id', sa.Text, nullable=False),
        sa.Column('items', postgresql.JSONB, nullable=False, server_default=sa.text("'[]'::jsonb")),
        sa.Column('coupon', postgresql.JSONB),
        sa.Column('subtotal', sa.Numeric(12, 2), nullable=False, server_default='0'),
        sa.Column('discount', sa.Numeric(12, 2), nullable=False, server_default='0'),
        sa.Column('tax', sa.Numeric(12, 2), nullable=False, server_default='0'),
        sa.Column('shipping', sa.Numeric(12, 2), nullable=False, server_default='0'),
        sa.Column('total', sa.Numeric(12, 2), nullable=False, server_default='0'),
        sa.Column('currency', sa.String(3), nullable=False, server_default='INR'),
        sa.Column('created_at', sa.TIMESTAMP(timezone=True), nullable=False, server_default=sa.text('NOW()')),
        sa.Column('updated_at', sa.TIMESTAMP(timezone=True), nullable=False, server_default=sa.text('NOW()')),
    )
    op.create_unique_constraint('uq_carts_user_id', 'carts', ['user_id'])
    op.create_index('idx_carts_items', 'carts', ['items'], postgresql_using='gin')


def downgrade() -> None:
    op.drop_table('carts')
    op.drop_table('products')
    op.drop_table('categories')
