"""Initial schema: accounts, agent profiles, offices, listings

Revision ID: 0001_initial
Revises:
Create Date: 2026-10-19 09:00:00.000000

"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '0001_initial'
down_revision = None
branch_labels = None
depends_on = None


def _timestamps():
    return [
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
    ]


def upgrade():
    # Accounts first; references to profiles and offices are added once those exist
    op.create_table(
        'users',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('email', sa.String(128), nullable=False, unique=True),
        sa.Column('password_hash', sa.String(128), nullable=False),
        sa.Column('first_name', sa.String(64), nullable=False),
        sa.Column('last_name', sa.String(64), nullable=False),
        sa.Column('phone', sa.String(32)),
        sa.Column('role', sa.String(16), nullable=False, server_default='buyer'),
        sa.Column('additional_roles', sa.JSON(), nullable=False),
        sa.Column('onboarding_completed', sa.JSON(), nullable=False),
        sa.Column('is_profile_complete', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('agent_verification_status', sa.String(16), nullable=False, server_default='none'),
        sa.Column('agent_profile_id', sa.Integer(), nullable=True),
        sa.Column('office_id', sa.Integer(), nullable=True),
        sa.Column('manager_application_status', sa.String(16), nullable=False, server_default='none'),
        sa.Column('manager_application_office_id', sa.Integer(), nullable=True),
        sa.Column('manager_application_message', sa.Text()),
        sa.Column('manager_application_applied_at', sa.DateTime()),
        sa.Column('manager_application_approved_at', sa.DateTime()),
        sa.Column('preferences', sa.JSON(), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('last_login', sa.DateTime()),
        sa.Column('password_reset_token', sa.String(64)),
        sa.Column('password_reset_expires', sa.DateTime()),
        *_timestamps(),
    )
    op.create_index('ix_users_password_reset_token', 'users', ['password_reset_token'])

    op.create_table(
        'agent_profiles',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('user_id', sa.Integer(), sa.ForeignKey('users.id'), nullable=False, unique=True),
        sa.Column('bio', sa.Text()),
        sa.Column('license_number', sa.String(64), nullable=False),
        sa.Column('license_state', sa.String(2), nullable=False),
        sa.Column('license_expiration', sa.DateTime()),
        sa.Column('years_experience', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('specialties', sa.JSON(), nullable=False),
        sa.Column('languages', sa.JSON(), nullable=False),
        sa.Column('social_media', sa.JSON(), nullable=False),
        sa.Column('profile_image', sa.String(256)),
        sa.Column('office_id', sa.Integer(), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.false()),
        *_timestamps(),
    )

    op.create_table(
        'offices',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('name', sa.String(120), nullable=False),
        sa.Column('franchise_id', sa.String(32), nullable=False, unique=True),
        sa.Column('description', sa.Text()),
        sa.Column('address', sa.JSON(), nullable=False),
        sa.Column('phone', sa.String(32), nullable=False),
        sa.Column('email', sa.String(128), nullable=False),
        sa.Column('website', sa.String(256)),
        sa.Column('specialties', sa.JSON(), nullable=False),
        sa.Column('services', sa.JSON(), nullable=False),
        sa.Column('languages', sa.JSON(), nullable=False),
        sa.Column('office_hours', sa.JSON(), nullable=False),
        sa.Column('social_media', sa.JSON(), nullable=False),
        sa.Column('settings', sa.JSON(), nullable=False),
        sa.Column('market_areas', sa.JSON(), nullable=False),
        sa.Column('is_premium', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('manager_id', sa.Integer(), sa.ForeignKey('agent_profiles.id'), nullable=False),
        sa.Column('statistics', sa.JSON(), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('deleted_at', sa.DateTime()),
        *_timestamps(),
    )

    op.create_foreign_key('fk_users_agent_profile', 'users', 'agent_profiles', ['agent_profile_id'], ['id'])
    op.create_foreign_key('fk_users_office', 'users', 'offices', ['office_id'], ['id'])
    op.create_foreign_key(
        'fk_users_manager_application_office', 'users', 'offices', ['manager_application_office_id'], ['id']
    )
    op.create_foreign_key('fk_agent_profiles_office', 'agent_profiles', 'offices', ['office_id'], ['id'])

    op.create_table(
        'office_agents',
        sa.Column('office_id', sa.Integer(), sa.ForeignKey('offices.id'), primary_key=True),
        sa.Column('agent_id', sa.Integer(), sa.ForeignKey('agent_profiles.id'), primary_key=True),
        sa.Column('added_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
    )

    op.create_table(
        'properties',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('mls_number', sa.String(32), unique=True, nullable=True),
        sa.Column('title', sa.String(200), nullable=False),
        sa.Column('description', sa.Text(), nullable=False),
        sa.Column('price', sa.Numeric(14, 2), nullable=False),
        sa.Column('property_type', sa.String(16), nullable=False),
        sa.Column('status', sa.String(16), nullable=False, server_default='pending'),
        sa.Column('bedrooms', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('bathrooms', sa.Float(), nullable=False, server_default='0'),
        sa.Column('square_footage', sa.Integer(), nullable=False),
        sa.Column('lot_size', sa.Float()),
        sa.Column('year_built', sa.Integer()),
        sa.Column('address', sa.JSON(), nullable=False),
        sa.Column('images', sa.JSON(), nullable=False),
        sa.Column('amenities', sa.JSON(), nullable=False),
        sa.Column('features', sa.JSON(), nullable=False),
        sa.Column('virtual_tour', sa.String(256)),
        sa.Column('listing_agent_id', sa.Integer(), sa.ForeignKey('agent_profiles.id'), nullable=True),
        sa.Column('listing_office_id', sa.Integer(), sa.ForeignKey('offices.id'), nullable=True),
        sa.Column('seller_id', sa.Integer(), sa.ForeignKey('users.id'), nullable=True),
        sa.Column('sold_at', sa.DateTime()),
        *_timestamps(),
    )
    op.create_index('ix_properties_status', 'properties', ['status'])
    op.create_index('ix_properties_listing_office', 'properties', ['listing_office_id'])

    op.create_table(
        'favorite_properties',
        sa.Column('user_id', sa.Integer(), sa.ForeignKey('users.id'), primary_key=True),
        sa.Column('property_id', sa.Integer(), sa.ForeignKey('properties.id'), primary_key=True),
        sa.Column('added_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
    )

    op.create_table(
        'saved_searches',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('user_id', sa.Integer(), sa.ForeignKey('users.id'), nullable=False),
        sa.Column('name', sa.String(120), nullable=False),
        sa.Column('filters', sa.JSON(), nullable=False),
        sa.Column('email_alerts', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('frequency', sa.String(16), nullable=False, server_default='weekly'),
        *_timestamps(),
    )
    op.create_index('ix_saved_searches_user_id', 'saved_searches', ['user_id'])


def downgrade():
    op.drop_index('ix_saved_searches_user_id', table_name='saved_searches')
    op.drop_table('saved_searches')
    op.drop_table('favorite_properties')
    op.drop_index('ix_properties_listing_office', table_name='properties')
    op.drop_index('ix_properties_status', table_name='properties')
    op.drop_table('properties')
    op.drop_table('office_agents')
    op.drop_constraint('fk_agent_profiles_office', 'agent_profiles', type_='foreignkey')
    op.drop_constraint('fk_users_manager_application_office', 'users', type_='foreignkey')
    op.drop_constraint('fk_users_office', 'users', type_='foreignkey')
    op.drop_constraint('fk_users_agent_profile', 'users', type_='foreignkey')
    op.drop_table('offices')
    op.drop_table('agent_profiles')
    op.drop_index('ix_users_password_reset_token', table_name='users')
    op.drop_table('users')
