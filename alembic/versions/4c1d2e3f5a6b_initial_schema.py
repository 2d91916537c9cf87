"""initial_schema

Revision ID: 4c1d2e3f5a6b
Revises:
Create Date: 2026-10-19 10:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '4c1d2e3f5a6b'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamps(updated: bool = True):
    columns = [sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('(CURRENT_TIMESTAMP)'), nullable=True)]
    if updated:
        columns.append(sa.Column('updated_at', sa.DateTime(timezone=True), nullable=True))
    return columns


def upgrade() -> None:
    """Upgrade schema."""
    op.create_table(
        'profiles',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('auth_id', sa.String(length=255), nullable=False),
        sa.Column('first_name', sa.String(length=100), nullable=False),
        sa.Column('last_name', sa.String(length=100), nullable=False),
        sa.Column('username', sa.String(length=100), nullable=False),
        sa.Column('email', sa.String(length=255), nullable=False),
        sa.Column('profile_image', sa.String(length=500), nullable=False),
        sa.Column('citizen', sa.String(length=100), nullable=True),
        sa.Column('dob', sa.String(length=10), nullable=True),
        sa.Column('phone', sa.String(length=30), nullable=True),
        sa.Column('address', sa.Text(), nullable=True),
        sa.Column('gender', sa.String(length=20), nullable=True),
        sa.Column('bank_name', sa.String(length=100), nullable=True),
        sa.Column('bank_acc_num', sa.String(length=50), nullable=True),
        sa.Column('bank_acc_name', sa.String(length=255), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_profiles_id'), 'profiles', ['id'], unique=False)
    op.create_index(op.f('ix_profiles_auth_id'), 'profiles', ['auth_id'], unique=True)

    op.create_table(
        'tiers',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('tier_name', sa.String(length=100), nullable=False),
        sa.Column('commission', sa.Numeric(precision=5, scale=2), nullable=False),
        sa.Column('min_referrals', sa.Integer(), nullable=False),
        *_timestamps(updated=False),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_tiers_id'), 'tiers', ['id'], unique=False)
    op.create_index(op.f('ix_tiers_tier_name'), 'tiers', ['tier_name'], unique=True)

    op.create_table(
        'rewards',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('reward_name', sa.String(length=255), nullable=False),
        sa.Column('point_req', sa.Integer(), nullable=False),
        *_timestamps(updated=False),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_rewards_id'), 'rewards', ['id'], unique=False)

    op.create_table(
        'general_variables',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('variable_name', sa.String(length=100), nullable=False),
        sa.Column('variable_value', sa.String(length=500), nullable=False),
        sa.Column('variable_type', sa.String(length=20), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_general_variables_id'), 'general_variables', ['id'], unique=False)
    op.create_index(op.f('ix_general_variables_variable_name'), 'general_variables', ['variable_name'], unique=True)

    op.create_table(
        'properties',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('profile_id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('tagline', sa.String(length=255), nullable=False),
        sa.Column('category', sa.String(length=100), nullable=False),
        sa.Column('image', sa.String(length=500), nullable=False),
        sa.Column('country', sa.String(length=100), nullable=False),
        sa.Column('city', sa.String(length=100), nullable=False),
        sa.Column('description', sa.Text(), nullable=False),
        sa.Column('price', sa.Integer(), nullable=False),
        sa.Column('guests', sa.Integer(), nullable=False),
        sa.Column('bedrooms', sa.Integer(), nullable=False),
        sa.Column('beds', sa.Integer(), nullable=False),
        sa.Column('baths', sa.Integer(), nullable=False),
        sa.Column('amenities', sa.Text(), nullable=False),
        *_timestamps(),
        sa.ForeignKeyConstraint(['profile_id'], ['profiles.id']),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_properties_id'), 'properties', ['id'], unique=False)
    op.create_index(op.f('ix_properties_profile_id'), 'properties', ['profile_id'], unique=False)
    op.create_index(op.f('ix_properties_category'), 'properties', ['category'], unique=False)
    op.create_index(op.f('ix_properties_created_at'), 'properties', ['created_at'], unique=False)

    op.create_table(
        'favorites',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('profile_id', sa.Integer(), nullable=False),
        sa.Column('property_id', sa.Integer(), nullable=False),
        *_timestamps(updated=False),
        sa.ForeignKeyConstraint(['profile_id'], ['profiles.id']),
        sa.ForeignKeyConstraint(['property_id'], ['properties.id']),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('profile_id', 'property_id', name='uq_favorites_profile_property'),
    )
    op.create_index(op.f('ix_favorites_id'), 'favorites', ['id'], unique=False)
    op.create_index(op.f('ix_favorites_profile_id'), 'favorites', ['profile_id'], unique=False)
    op.create_index(op.f('ix_favorites_property_id'), 'favorites', ['property_id'], unique=False)

    op.create_table(
        'bookings',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('profile_id', sa.Integer(), nullable=False),
        sa.Column('property_id', sa.Integer(), nullable=False),
        sa.Column('check_in', sa.Date(), nullable=False),
        sa.Column('check_out', sa.Date(), nullable=False),
        sa.Column('total_nights', sa.Integer(), nullable=False),
        sa.Column('order_total', sa.Numeric(precision=16, scale=2), nullable=False),
        sa.Column('payment_status', sa.Boolean(), nullable=False),
        *_timestamps(),
        sa.ForeignKeyConstraint(['profile_id'], ['profiles.id']),
        sa.ForeignKeyConstraint(['property_id'], ['properties.id']),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_bookings_id'), 'bookings', ['id'], unique=False)
    op.create_index(op.f('ix_bookings_profile_id'), 'bookings', ['profile_id'], unique=False)
    op.create_index(op.f('ix_bookings_property_id'), 'bookings', ['property_id'], unique=False)
    op.create_index(op.f('ix_bookings_payment_status'), 'bookings', ['payment_status'], unique=False)
    op.create_index(op.f('ix_bookings_created_at'), 'bookings', ['created_at'], unique=False)

    op.create_table(
        'reviews',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('profile_id', sa.Integer(), nullable=False),
        sa.Column('property_id', sa.Integer(), nullable=False),
        sa.Column('rating', sa.Integer(), nullable=False),
        sa.Column('comment', sa.Text(), nullable=False),
        *_timestamps(updated=False),
        sa.ForeignKeyConstraint(['profile_id'], ['profiles.id']),
        sa.ForeignKeyConstraint(['property_id'], ['properties.id']),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_reviews_id'), 'reviews', ['id'], unique=False)
    op.create_index(op.f('ix_reviews_profile_id'), 'reviews', ['profile_id'], unique=False)
    op.create_index(op.f('ix_reviews_property_id'), 'reviews', ['property_id'], unique=False)
    op.create_index(op.f('ix_reviews_created_at'), 'reviews', ['created_at'], unique=False)

    op.create_table(
        'members',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('profile_id', sa.Integer(), nullable=False),
        sa.Column('member_code', sa.String(length=16), nullable=False),
        sa.Column('parent_code', sa.String(length=16), nullable=True),
        sa.Column('tier_id', sa.Integer(), nullable=False),
        sa.Column('commission', sa.Numeric(precision=18, scale=4), nullable=False),
        sa.Column('point', sa.Integer(), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        *_timestamps(),
        sa.ForeignKeyConstraint(['profile_id'], ['profiles.id']),
        sa.ForeignKeyConstraint(['tier_id'], ['tiers.id']),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_members_id'), 'members', ['id'], unique=False)
    op.create_index(op.f('ix_members_profile_id'), 'members', ['profile_id'], unique=True)
    op.create_index(op.f('ix_members_member_code'), 'members', ['member_code'], unique=True)
    op.create_index(op.f('ix_members_parent_code'), 'members', ['parent_code'], unique=False)
    op.create_index(op.f('ix_members_tier_id'), 'members', ['tier_id'], unique=False)

    op.create_table(
        'booking_commission_transactions',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('profile_id', sa.Integer(), nullable=False),
        sa.Column('booking_id', sa.Integer(), nullable=False),
        sa.Column('referral_code', sa.String(length=16), nullable=True),
        sa.Column('commission', sa.Numeric(precision=18, scale=4), nullable=False),
        sa.Column('payment_status', sa.Boolean(), nullable=False),
        *_timestamps(updated=False),
        sa.ForeignKeyConstraint(['profile_id'], ['profiles.id']),
        sa.ForeignKeyConstraint(['booking_id'], ['bookings.id']),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('booking_id'),
    )
    op.create_index(op.f('ix_booking_commission_transactions_id'), 'booking_commission_transactions', ['id'], unique=False)
    op.create_index(op.f('ix_booking_commission_transactions_profile_id'), 'booking_commission_transactions', ['profile_id'], unique=False)
    op.create_index(op.f('ix_booking_commission_transactions_referral_code'), 'booking_commission_transactions', ['referral_code'], unique=False)

    op.create_table(
        'membership_commission_transactions',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('profile_id', sa.Integer(), nullable=False),
        sa.Column('member_id', sa.Integer(), nullable=False),
        sa.Column('referral_code', sa.String(length=16), nullable=True),
        sa.Column('commission', sa.Numeric(precision=18, scale=4), nullable=False),
        sa.Column('closer_code', sa.String(length=16), nullable=True),
        sa.Column('closer_commission', sa.Numeric(precision=18, scale=4), nullable=False),
        sa.Column('order_total', sa.Numeric(precision=16, scale=2), nullable=False),
        sa.Column('payment_method', sa.String(length=50), nullable=False),
        sa.Column('proof_of_payment', sa.Text(), nullable=True),
        sa.Column('payment_status', sa.Boolean(), nullable=False),
        *_timestamps(updated=False),
        sa.ForeignKeyConstraint(['profile_id'], ['profiles.id']),
        sa.ForeignKeyConstraint(['member_id'], ['members.id']),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_membership_commission_transactions_id'), 'membership_commission_transactions', ['id'], unique=False)
    op.create_index(op.f('ix_membership_commission_transactions_profile_id'), 'membership_commission_transactions', ['profile_id'], unique=False)
    op.create_index(op.f('ix_membership_commission_transactions_member_id'), 'membership_commission_transactions', ['member_id'], unique=False)
    op.create_index(op.f('ix_membership_commission_transactions_referral_code'), 'membership_commission_transactions', ['referral_code'], unique=False)
    op.create_index(op.f('ix_membership_commission_transactions_closer_code'), 'membership_commission_transactions', ['closer_code'], unique=False)

    op.create_table(
        'point_transactions',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('member_id', sa.Integer(), nullable=False),
        sa.Column('profile_id', sa.Integer(), nullable=False),
        sa.Column('reward_id', sa.Integer(), nullable=True),
        sa.Column('point', sa.Integer(), nullable=False),
        sa.Column('description', sa.String(length=255), nullable=False),
        *_timestamps(updated=False),
        sa.ForeignKeyConstraint(['member_id'], ['members.id']),
        sa.ForeignKeyConstraint(['profile_id'], ['profiles.id']),
        sa.ForeignKeyConstraint(['reward_id'], ['rewards.id'], ondelete='SET NULL'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_point_transactions_id'), 'point_transactions', ['id'], unique=False)
    op.create_index(op.f('ix_point_transactions_member_id'), 'point_transactions', ['member_id'], unique=False)
    op.create_index(op.f('ix_point_transactions_profile_id'), 'point_transactions', ['profile_id'], unique=False)
    op.create_index(op.f('ix_point_transactions_reward_id'), 'point_transactions', ['reward_id'], unique=False)
    op.create_index(op.f('ix_point_transactions_created_at'), 'point_transactions', ['created_at'], unique=False)

    op.create_table(
        'withdrawal_requests',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('member_id', sa.Integer(), nullable=False),
        sa.Column('amount', sa.Numeric(precision=18, scale=4), nullable=False),
        sa.Column('bank_name', sa.String(length=100), nullable=False),
        sa.Column('bank_acc_number', sa.String(length=50), nullable=False),
        sa.Column('bank_acc_name', sa.String(length=255), nullable=False),
        sa.Column('status', sa.Enum('Pending', 'Approved', 'Rejected', name='withdrawalstatusenum', native_enum=False), nullable=False),
        *_timestamps(),
        sa.ForeignKeyConstraint(['member_id'], ['members.id']),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_withdrawal_requests_id'), 'withdrawal_requests', ['id'], unique=False)
    op.create_index(op.f('ix_withdrawal_requests_member_id'), 'withdrawal_requests', ['member_id'], unique=False)
    op.create_index(op.f('ix_withdrawal_requests_created_at'), 'withdrawal_requests', ['created_at'], unique=False)

    op.create_table(
        'promotions',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('profile_id', sa.Integer(), nullable=True),
        sa.Column('title', sa.String(length=255), nullable=False),
        sa.Column('subtitle', sa.String(length=255), nullable=False),
        sa.Column('category', sa.String(length=100), nullable=False),
        sa.Column('description', sa.Text(), nullable=False),
        sa.Column('media', sa.String(length=500), nullable=False),
        *_timestamps(),
        sa.ForeignKeyConstraint(['profile_id'], ['profiles.id']),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_promotions_id'), 'promotions', ['id'], unique=False)
    op.create_index(op.f('ix_promotions_profile_id'), 'promotions', ['profile_id'], unique=False)

    op.create_table(
        'galleries',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('profile_id', sa.Integer(), nullable=True),
        sa.Column('title', sa.String(length=255), nullable=False),
        sa.Column('media', sa.String(length=500), nullable=False),
        *_timestamps(updated=False),
        sa.ForeignKeyConstraint(['profile_id'], ['profiles.id']),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_galleries_id'), 'galleries', ['id'], unique=False)
    op.create_index(op.f('ix_galleries_profile_id'), 'galleries', ['profile_id'], unique=False)


def downgrade() -> None:
    """Downgrade schema."""
    for table in (
        'galleries',
        'promotions',
        'withdrawal_requests',
        'point_transactions',
        'membership_commission_transactions',
        'booking_commission_transactions',
        'members',
        'reviews',
        'bookings',
        'favorites',
        'properties',
        'general_variables',
        'rewards',
        'tiers',
        'profiles',
    ):
        op.drop_table(table)
