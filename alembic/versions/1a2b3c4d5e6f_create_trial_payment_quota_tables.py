"""create trial_records, payment_orders and daily_quota tables

Revision ID: 1a2b3c4d5e6f
Revises:
Create Date: 2026-10-19 12:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '1a2b3c4d5e6f'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Create the trial, payment order and daily quota tables."""
    op.create_table(
        'trial_records',
        sa.Column('id', sa.String(length=64), nullable=False),
        sa.Column('ip', sa.String(length=255), nullable=True),
        sa.Column('last_ip', sa.String(length=255), nullable=True),
        sa.Column('user_metadata', sa.JSON(), nullable=True),
        sa.Column('free_used', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('paid_credits', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.Column('last_seen', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=True),
        sa.CheckConstraint('paid_credits >= 0', name='ck_trial_records_paid_credits_non_negative'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_trial_records_id'), 'trial_records', ['id'], unique=False)

    op.create_table(
        'payment_orders',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('order_id', sa.String(length=100), nullable=False),
        sa.Column('trial_id', sa.String(length=64), nullable=False),
        sa.Column('amount', sa.Integer(), nullable=False),
        sa.Column('currency', sa.String(length=10), nullable=False, server_default='INR'),
        sa.Column('credits', sa.Integer(), nullable=False, server_default='1'),
        sa.Column(
            'status',
            sa.Enum('pending', 'success', 'failed', name='paymentstatus'),
            nullable=False,
            server_default='pending',
        ),
        sa.Column('payment_id', sa.String(length=100), nullable=True),
        sa.Column('gateway_response', sa.JSON(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('paid_at', sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_payment_orders_id'), 'payment_orders', ['id'], unique=False)
    op.create_index(op.f('ix_payment_orders_order_id'), 'payment_orders', ['order_id'], unique=True)
    op.create_index(op.f('ix_payment_orders_trial_id'), 'payment_orders', ['trial_id'], unique=False)
    op.create_index(op.f('ix_payment_orders_status'), 'payment_orders', ['status'], unique=False)

    op.create_table(
        'daily_quota',
        sa.Column('day', sa.Date(), nullable=False),
        sa.Column('free_used', sa.Integer(), nullable=False, server_default='0'),
        sa.PrimaryKeyConstraint('day'),
    )


def downgrade() -> None:
    """Drop the trial, payment order and daily quota tables."""
    op.drop_table('daily_quota')
    op.drop_index(op.f('ix_payment_orders_status'), table_name='payment_orders')
    op.drop_index(op.f('ix_payment_orders_trial_id'), table_name='payment_orders')
    op.drop_index(op.f('ix_payment_orders_order_id'), table_name='payment_orders')
    op.drop_index(op.f('ix_payment_orders_id'), table_name='payment_orders')
    op.drop_table('payment_orders')
    op.execute("DROP TYPE IF EXISTS paymentstatus")
    op.drop_index(op.f('ix_trial_records_id'), table_name='trial_records')
    op.drop_table('trial_records')
