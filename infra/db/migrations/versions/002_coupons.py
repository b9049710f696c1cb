"""add coupons

Revision ID: 002_coupons
Revises: 001_initial_schema
Create Date: 2026-10-20 09:00:00.000000

"""
from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = '002_coupons'
down_revision = '001_initial_schema'
branch_labels = None
depends_on = None


def upgrade() -> None:
    # Coupon terms live server-side; carts only reference them by code
    op.create_table(
        'coupons',
        sa.Column('code', sa.Text, primary_key=True, comment='Upper-case coupon code'),
        sa.Column('discount', sa.Numeric(12, 2), nullable=False, comment='Percent (0-100) or flat amount'),
        sa.Column('type', sa.Text, nullable=False, server_default='percentage'),
        sa.Column('min_amount', sa.Numeric(12, 2), nullable=False, server_default='0',
                  comment='Minimum subtotal for the discount to apply'),
        sa.Column('is_active', sa.Boolean, nullable=False, server_default='true'),
        sa.Column('expires_at', sa.TIMESTAMP(timezone=True)),
        sa.Column('created_at', sa.TIMESTAMP(timezone=True), nullable=False, server_default=sa.text('NOW()')),

        sa.CheckConstraint("type IN ('percentage', 'fixed')", name='ck_coupons_type'),
        sa.CheckConstraint("code = UPPER(code)", name='ck_coupons_code_upper'),
        sa.CheckConstraint("discount >= 0 AND (type = 'fixed' OR discount <= 100)", name='ck_coupons_discount'),
    )


def downgrade() -> None:
    op.drop_table('coupons')
