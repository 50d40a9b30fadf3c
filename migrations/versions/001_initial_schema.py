"""Initial schema - create all tables

Revision ID: 001
Revises:
Create Date: 2026-10-19 10:00:00.000000

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


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
    ]


def upgrade() -> None:
    # Create users table
    op.create_table(
        'users',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('email', sa.String(length=255), nullable=False),
        sa.Column('username', sa.String(length=30), nullable=True),
        sa.Column('password', sa.String(length=255), nullable=True),
        sa.Column('roles', postgresql.JSONB(astext_type=sa.Text()), nullable=False),
        sa.Column('is_email_verified', sa.Boolean(), nullable=False, server_default=sa.text('false')),
        sa.Column('email_verification_otp', sa.String(length=16), nullable=True),
        sa.Column('email_verification_token', sa.String(length=64), nullable=True),
        sa.Column('email_verification_expires', sa.DateTime(timezone=True), nullable=True),
        sa.Column('email_verified_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('reset_password_token', sa.String(length=64), nullable=True),
        sa.Column('reset_token_expires', sa.DateTime(timezone=True), nullable=True),
        sa.Column('reset_password_verified_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('first_name', sa.String(length=50), nullable=True),
        sa.Column('last_name', sa.String(length=50), nullable=True),
        sa.Column('profession', sa.String(length=50), nullable=True),
        sa.Column('company_name', sa.String(length=50), nullable=True),
        sa.Column('industry', sa.String(length=255), nullable=True),
        sa.Column('team_size', sa.String(length=20), nullable=True),
        sa.Column('looking_for', sa.String(length=50), nullable=True),
        sa.Column('is_onboarding_complete', sa.Boolean(), nullable=False, server_default=sa.text('false')),
        sa.Column('instagram_connected', sa.Boolean(), nullable=False, server_default=sa.text('false')),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id', name='pk_users'),
        sa.UniqueConstraint('username', name='uq_users_username')
    )
    op.create_index('ix_users_email', 'users', ['email'], unique=True)

    # Create stores table
    op.create_table(
        'stores',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('user_id', sa.Uuid(), nullable=False),
        sa.Column('store_name', sa.String(length=100), nullable=False),
        sa.Column('store_type', sa.String(length=255), nullable=False),
        sa.Column('email_id', sa.String(length=255), nullable=False),
        sa.Column('manager_email_id', sa.String(length=255), nullable=False),
        sa.Column('address', sa.String(length=500), nullable=False),
        sa.Column('city', sa.String(length=255), nullable=False),
        sa.Column('state', sa.String(length=255), nullable=False),
        sa.Column('pincode', sa.String(length=6), nullable=False),
        *_timestamps(),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], name='fk_stores_user_id_users', ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id', name='pk_stores'),
        sa.UniqueConstraint('email_id', name='uq_stores_email_id')
    )
    op.create_index('ix_stores_user_id', 'stores', ['user_id'])

    # Create offers table
    op.create_table(
        'offers',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('store_id', sa.Uuid(), nullable=False),
        sa.Column('location', sa.String(length=255), nullable=False),
        sa.Column('offer_type', sa.String(length=50), nullable=False),
        sa.Column('offer_title', sa.String(length=255), nullable=False),
        sa.Column('offer_description', sa.Text(), nullable=False),
        sa.Column('start_date', sa.DateTime(timezone=True), nullable=False),
        sa.Column('end_date', sa.DateTime(timezone=True), nullable=False),
        sa.Column('discount_percentage', sa.Float(), nullable=True),
        sa.Column('min_spend_amount', sa.Float(), nullable=True),
        sa.Column('coupon_code', sa.String(length=100), nullable=True),
        sa.Column('applicable_products', sa.Text(), nullable=False),
        sa.Column('select_offer_status', sa.String(length=50), nullable=False),
        sa.Column('offer_status', sa.String(length=50), nullable=False),
        sa.Column('audience', sa.String(length=20), nullable=False, server_default='Public'),
        sa.Column('offer_images', postgresql.JSONB(astext_type=sa.Text()), nullable=False),
        *_timestamps(),
        sa.ForeignKeyConstraint(['store_id'], ['stores.id'], name='fk_offers_store_id_stores', ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id', name='pk_offers')
    )
    op.create_index('idx_offers_store_id', 'offers', ['store_id'])

    # Create image bucket tables
    op.create_table(
        'offer_image_files',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('filename', sa.String(length=255), nullable=False),
        sa.Column('content_type', sa.String(length=255), nullable=False),
        sa.Column('length', sa.BigInteger(), nullable=False, server_default='0'),
        sa.Column('chunk_size', sa.Integer(), nullable=False),
        sa.Column('original_name', sa.String(length=255), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id', name='pk_offer_image_files')
    )

    op.create_table(
        'offer_image_chunks',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('file_id', sa.Uuid(), nullable=False),
        sa.Column('n', sa.Integer(), nullable=False),
        sa.Column('data', sa.LargeBinary(), nullable=False),
        *_timestamps(),
        sa.ForeignKeyConstraint(
            ['file_id'], ['offer_image_files.id'],
            name='fk_offer_image_chunks_file_id_offer_image_files',
            ondelete='CASCADE'
        ),
        sa.PrimaryKeyConstraint('id', name='pk_offer_image_chunks'),
        sa.UniqueConstraint('file_id', 'n', name='uq_offer_image_chunks_file_id_n')
    )
    op.create_index('ix_offer_image_chunks_file_id', 'offer_image_chunks', ['file_id'])


def downgrade() -> None:
    op.drop_table('offer_image_chunks')
    op.drop_table('offer_image_files')
    op.drop_index('idx_offers_store_id', table_name='offers')
    op.drop_table('offers')
    op.drop_index('ix_stores_user_id', table_name='stores')
    op.drop_table('stores')
    op.drop_index('ix_users_email', table_name='users')
    op.drop_table('users')
