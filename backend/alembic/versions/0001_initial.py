"""initial schema

Revision ID: 0001_initial
Revises: 
Create Date: 2026-10-17
"""
from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = '0001_initial'
down_revision = None
branch_labels = None
depends_on = None

PERMISSION_COLUMNS = ('can_manage_users', 'can_view_all_specialties', 'can_view_prices', 'can_edit_prices', 'can_audit')


def _permission_columns():
    return [sa.Column(name, sa.Boolean(), nullable=False, server_default=sa.text('false')) for name in PERMISSION_COLUMNS]


def upgrade():
    op.create_table('users',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('username', sa.String(length=64), nullable=False),
        sa.Column('hashed_password', sa.String(length=255), nullable=False),
        sa.Column('global_role', sa.String(length=32), nullable=False, server_default='user'),
        sa.Column('created_at', sa.DateTime(), nullable=True),
        sa.UniqueConstraint('username'),
    )
    op.create_index('ix_users_username', 'users', ['username'])
    op.create_table('trades',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('slug', sa.String(length=64), nullable=False, unique=True),
        sa.Column('name', sa.String(length=120), nullable=False),
    )
    op.create_index('ix_trades_slug', 'trades', ['slug'])
    op.create_table('specialties',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('trade_id', sa.Integer(), sa.ForeignKey('trades.id'), nullable=False),
        sa.Column('slug', sa.String(length=64), nullable=False),
        sa.Column('name', sa.String(length=120), nullable=False),
        sa.UniqueConstraint('trade_id', 'slug', name='uq_specialty_trade_slug'),
    )
    op.create_index('ix_specialties_trade_id', 'specialties', ['trade_id'])
    op.create_table('regions',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('code', sa.String(length=16), nullable=False, unique=True),
        sa.Column('name', sa.String(length=120), nullable=False),
    )
    op.create_table('companies',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('name', sa.String(length=255), nullable=False, unique=True),
        sa.Column('trade_id', sa.Integer(), sa.ForeignKey('trades.id'), nullable=True),
        sa.Column('owner_user_id', sa.Integer(), sa.ForeignKey('users.id'), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.text('true')),
    )
    op.create_table('company_users',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('company_id', sa.Integer(), sa.ForeignKey('companies.id', ondelete='CASCADE'), nullable=False),
        sa.Column('user_id', sa.Integer(), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('role', sa.String(length=16), nullable=False, server_default='USER'),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.text('true')),
        *_permission_columns(),
        sa.UniqueConstraint('company_id', 'user_id', name='uq_company_user'),
    )
    op.create_index('ix_company_users_company_id', 'company_users', ['company_id'])
    op.create_index('ix_company_users_user_id', 'company_users', ['user_id'])
    op.create_table('user_specialties',
        sa.Column('company_id', sa.Integer(), sa.ForeignKey('companies.id', ondelete='CASCADE'), primary_key=True),
        sa.Column('user_id', sa.Integer(), sa.ForeignKey('users.id', ondelete='CASCADE'), primary_key=True),
        sa.Column('specialty_id', sa.Integer(), sa.ForeignKey('specialties.id'), primary_key=True),
        sa.Column('created_at', sa.DateTime(), nullable=True),
    )
    op.create_table('company_settings',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('company_id', sa.Integer(), sa.ForeignKey('companies.id', ondelete='CASCADE'), nullable=False, unique=True),
        sa.Column('region_id', sa.Integer(), sa.ForeignKey('regions.id'), nullable=True),
        sa.Column('tax_rate', sa.Numeric(5, 2), nullable=False, server_default='0'),
        sa.Column('overhead_rate', sa.Numeric(5, 2), nullable=False, server_default='0'),
        sa.Column('profit_rate', sa.Numeric(5, 2), nullable=False, server_default='0'),
        sa.Column('updated_at', sa.DateTime(), nullable=True),
    )
    op.create_table('services',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('company_id', sa.Integer(), sa.ForeignKey('companies.id', ondelete='CASCADE'), nullable=False),
        sa.Column('specialty_id', sa.Integer(), sa.ForeignKey('specialties.id'), nullable=False),
        sa.Column('category', sa.String(length=120), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('pricing_unit', sa.String(length=8), nullable=False, server_default='EA'),
        sa.Column('unit_price', sa.Numeric(10, 2), nullable=False, server_default='0'),
        sa.Column('active', sa.Boolean(), nullable=False, server_default=sa.text('true')),
    )
    op.create_index('ix_services_company_id', 'services', ['company_id'])
    op.create_index('ix_services_specialty_id', 'services', ['specialty_id'])
    op.create_table('jobs',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('company_id', sa.Integer(), sa.ForeignKey('companies.id', ondelete='CASCADE'), nullable=False),
        sa.Column('trade_id', sa.Integer(), sa.ForeignKey('trades.id'), nullable=False),
        sa.Column('specialty_id', sa.Integer(), sa.ForeignKey('specialties.id'), nullable=True),
        sa.Column('created_by', sa.Integer(), sa.ForeignKey('users.id'), nullable=True),
        sa.Column('client_name', sa.String(length=255), nullable=False, server_default=''),
        sa.Column('client_phone', sa.String(length=64), nullable=True),
        sa.Column('client_email', sa.String(length=255), nullable=True),
        sa.Column('address', sa.Text(), nullable=True),
        sa.Column('door_code', sa.String(length=64), nullable=True),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('status', sa.String(length=16), nullable=False, server_default='DRAFT'),
        sa.Column('scheduled_at', sa.String(length=32), nullable=True),
        sa.Column('address_locked', sa.Boolean(), nullable=False, server_default=sa.text('true')),
        sa.Column('created_at', sa.DateTime(), nullable=True),
        sa.Column('updated_at', sa.DateTime(), nullable=True),
    )
    op.create_index('ix_jobs_company_id', 'jobs', ['company_id'])
    op.create_index('ix_jobs_specialty_id', 'jobs', ['specialty_id'])
    op.create_table('job_items',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('job_id', sa.Integer(), sa.ForeignKey('jobs.id', ondelete='CASCADE'), nullable=False),
        sa.Column('service_id', sa.Integer(), sa.ForeignKey('services.id'), nullable=True),
        sa.Column('qty', sa.Numeric(10, 2), nullable=False, server_default='1'),
        sa.Column('unit_price', sa.Numeric(10, 2), nullable=False, server_default='0'),
        sa.Column('line_total', sa.Numeric(12, 2), nullable=False, server_default='0'),
        sa.Column('pricing_unit', sa.String(length=8), nullable=False, server_default='EA'),
    )
    op.create_index('ix_job_items_job_id', 'job_items', ['job_id'])
    op.create_table('job_assignments',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('job_id', sa.Integer(), sa.ForeignKey('jobs.id', ondelete='CASCADE'), nullable=False),
        sa.Column('user_id', sa.Integer(), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        *_permission_columns(),
        sa.UniqueConstraint('job_id', 'user_id', name='uq_job_assignment'),
    )
    op.create_index('ix_job_assignments_job_id', 'job_assignments', ['job_id'])
    op.create_index('ix_job_assignments_user_id', 'job_assignments', ['user_id'])
    op.create_table('audit_log',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('company_id', sa.Integer(), sa.ForeignKey('companies.id', ondelete='CASCADE'), nullable=False),
        sa.Column('actor_user_id', sa.Integer(), sa.ForeignKey('users.id'), nullable=True),
        sa.Column('action', sa.String(length=64), nullable=False),
        sa.Column('job_id', sa.Integer(), nullable=True),
        sa.Column('meta', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=True),
    )
    op.create_index('ix_audit_log_company_id', 'audit_log', ['company_id'])
    op.create_index('ix_audit_log_job_id', 'audit_log', ['job_id'])
    op.create_table('pricing_rules',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('region_id', sa.Integer(), sa.ForeignKey('regions.id'), nullable=False),
        sa.Column('trade_id', sa.Integer(), sa.ForeignKey('trades.id'), nullable=False),
        sa.Column('specialty_id', sa.Integer(), sa.ForeignKey('specialties.id'), nullable=True),
        sa.Column('unit', sa.String(length=8), nullable=False),
        sa.Column('base_price', sa.Numeric(10, 2), nullable=False),
        sa.Column('anchor_multiplier', sa.Numeric(5, 2), nullable=False, server_default='1.15'),
        sa.Column('material_multiplier', sa.JSON(), nullable=True),
        sa.Column('complexity_multiplier', sa.JSON(), nullable=True),
        sa.Column('enabled', sa.Boolean(), nullable=False, server_default=sa.text('true')),
    )
    op.create_index('ix_pricing_rules_region_id', 'pricing_rules', ['region_id'])
    op.create_index('ix_pricing_rules_trade_id', 'pricing_rules', ['trade_id'])
    op.create_table('estimate_photos',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('job_id', sa.Integer(), sa.ForeignKey('jobs.id', ondelete='SET NULL'), nullable=True),
        sa.Column('company_id', sa.Integer(), sa.ForeignKey('companies.id', ondelete='CASCADE'), nullable=False),
        sa.Column('url', sa.Text(), nullable=False),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=True),
    )
    op.create_index('ix_estimate_photos_job_id', 'estimate_photos', ['job_id'])
    op.create_table('invite_tokens',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('token', sa.String(length=128), nullable=False, unique=True),
        sa.Column('company_id', sa.Integer(), sa.ForeignKey('companies.id', ondelete='CASCADE'), nullable=False),
        sa.Column('created_by', sa.Integer(), sa.ForeignKey('users.id'), nullable=False),
        sa.Column('role', sa.String(length=16), nullable=False, server_default='USER'),
        sa.Column('expires_at', sa.DateTime(), nullable=False),
        sa.Column('used_at', sa.DateTime(), nullable=True),
        sa.Column('used_by', sa.Integer(), sa.ForeignKey('users.id'), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=True),
    )
    op.create_index('ix_invite_tokens_token', 'invite_tokens', ['token'])
    op.create_index('ix_invite_tokens_company_id', 'invite_tokens', ['company_id'])


def downgrade():
    for table in (
        'invite_tokens', 'estimate_photos', 'pricing_rules', 'audit_log', 'job_assignments', 'job_items',
        'jobs', 'services', 'company_settings', 'user_specialties', 'company_users', 'companies',
        'regions', 'specialties', 'trades', 'users',
    ):
        op.drop_table(table)
