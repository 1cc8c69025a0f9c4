"""001 Initial schema - profiles, destinations, bookings, transactions, reviews

Revision ID: tripdesk_001_initial
Revises:
Create Date: 2026-10-19
"""

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = 'tripdesk_001_initial'
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    op.create_table(
        'profiles',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('full_name', sa.String(200), nullable=False, server_default=''),
        sa.Column('email', sa.String(255), nullable=False),
        sa.Column('role', sa.String(20), nullable=False, server_default='user'),
        sa.Column('phone', sa.String(30), nullable=True),
        sa.Column('created_at', sa.DateTime(), server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(), server_default=sa.func.now()),
    )
    op.create_index('ix_profiles_email', 'profiles', ['email'])

    op.create_table(
        'destinations',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('name', sa.String(200), nullable=False),
        sa.Column('country', sa.String(100), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('image_url', sa.String(500), nullable=True),
        sa.Column('price_per_person', sa.Numeric(10, 2), nullable=False, server_default='0'),
        sa.Column('created_at', sa.DateTime(), server_default=sa.func.now()),
    )

    op.create_table(
        'bookings',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('user_id', sa.String(36),
                  sa.ForeignKey('profiles.id', ondelete='CASCADE'), nullable=False),
        sa.Column('trip_id', sa.String(36),
                  sa.ForeignKey('destinations.id', ondelete='SET NULL'), nullable=True),
        sa.Column('start_date', sa.Date(), nullable=False),
        sa.Column('end_date', sa.Date(), nullable=False),
        sa.Column('travelers_count', sa.Integer(), nullable=False, server_default='1'),
        sa.Column('total_amount', sa.Numeric(10, 2), server_default='0'),
        sa.Column('status', sa.String(20), server_default='upcoming'),
        sa.Column('refund_requested', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('refund_processed', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('created_at', sa.DateTime(), server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(), server_default=sa.func.now()),
    )
    op.create_index('ix_booking_user', 'bookings', ['user_id'])
    op.create_index('ix_booking_status', 'bookings', ['status'])

    op.create_table(
        'transactions',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('user_id', sa.String(36),
                  sa.ForeignKey('profiles.id', ondelete='SET NULL'), nullable=True),
        sa.Column('booking_id', sa.String(36),
                  sa.ForeignKey('bookings.id', ondelete='SET NULL'), nullable=True),
        sa.Column('amount', sa.Numeric(10, 2), nullable=False, server_default='0'),
        sa.Column('payment_method', sa.String(50), nullable=False, server_default=''),
        sa.Column('status', sa.String(20), nullable=False, server_default='pending'),
        sa.Column('refund_status', sa.String(20), nullable=False, server_default='none'),
        sa.Column('created_at', sa.DateTime(), server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(), server_default=sa.func.now()),
    )
    op.create_index('ix_transaction_user', 'transactions', ['user_id'])
    op.create_index('ix_transaction_booking', 'transactions', ['booking_id'])
    op.create_index('ix_transaction_created_at', 'transactions', ['created_at'])

    op.create_table(
        'reviews',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('user_id', sa.String(36),
                  sa.ForeignKey('profiles.id', ondelete='CASCADE'), nullable=False),
        sa.Column('booking_id', sa.String(36),
                  sa.ForeignKey('bookings.id', ondelete='CASCADE'), nullable=False),
        sa.Column('rating', sa.Integer(), nullable=False),
        sa.Column('comment', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(), server_default=sa.func.now()),
        sa.CheckConstraint('rating >= 1 AND rating <= 5', name='ck_review_rating_range'),
        sa.UniqueConstraint('user_id', 'booking_id', name='uq_review_user_booking'),
    )


def downgrade():
    op.drop_table('reviews')
    op.drop_index('ix_transaction_created_at', table_name='transactions')
    op.drop_index('ix_transaction_booking', table_name='transactions')
    op.drop_index('ix_transaction_user', table_name='transactions')
    op.drop_table('transactions')
    op.drop_index('ix_booking_status', table_name='bookings')
    op.drop_index('ix_booking_user', table_name='bookings')
    op.drop_table('bookings')
    op.drop_table('destinations')
    op.drop_index('ix_profiles_email', table_name='profiles')
    op.drop_table('profiles')
