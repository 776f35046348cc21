"""Initial schema: bases, assets, stock ledger, transactions, users, audit log

Revision ID: 20261018_initial
Revises:
Create Date: 2026-10-18

This migration creates:
1. bases and assets (reference data)
2. users (one role each, optional home base)
3. stocks (one running balance row per base/asset pair, versioned)
4. purchases, transfers, assignments (transaction records)
5. logs (append-only audit trail)
"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '20261018_initial'
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    # ==========================================================================
    # 1. REFERENCE DATA
    # ==========================================================================
    op.create_table('bases',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(length=120), nullable=False),
        sa.Column('location', sa.String(length=255), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('name'),
        sqlite_autoincrement=True,
    )

    op.create_table('assets',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('type', sa.String(length=32), nullable=False),
        sa.Column('description', sa.String(length=255), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.CheckConstraint(
            "type IN ('vehicles', 'weapons', 'ammunition', 'equipment')",
            name='ck_assets_type',
        ),
        sa.PrimaryKeyConstraint('id'),
        sqlite_autoincrement=True,
    )
    op.create_index('ix_assets_type', 'assets', ['type'])

    # ==========================================================================
    # 2. USERS
    # ==========================================================================
    op.create_table('users',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(length=120), nullable=False),
        sa.Column('email', sa.String(length=255), nullable=False),
        sa.Column('password_hash', sa.String(length=255), nullable=False),
        sa.Column('role', sa.String(length=16), nullable=False),
        sa.Column('base_id', sa.Integer(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.CheckConstraint("role IN ('admin', 'commander', 'logistics')", name='ck_users_role'),
        sa.ForeignKeyConstraint(['base_id'], ['bases.id']),
        sa.PrimaryKeyConstraint('id'),
        sqlite_autoincrement=True,
    )
    op.create_index('ix_users_email', 'users', ['email'], unique=True)
    op.create_index('ix_users_base_id', 'users', ['base_id'])

    # ==========================================================================
    # 3. STOCK LEDGER
    # ==========================================================================
    op.create_table('stocks',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('base_id', sa.Integer(), nullable=False),
        sa.Column('asset_id', sa.Integer(), nullable=False),
        sa.Column('opening_balance', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('closing_balance', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('assigned', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('expended', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('version_id', sa.Integer(), nullable=False, server_default='1'),
        sa.CheckConstraint('closing_balance >= 0', name='ck_stocks_closing_nonneg'),
        sa.CheckConstraint('assigned >= 0', name='ck_stocks_assigned_nonneg'),
        sa.CheckConstraint('expended >= 0', name='ck_stocks_expended_nonneg'),
        sa.ForeignKeyConstraint(['asset_id'], ['assets.id']),
        sa.ForeignKeyConstraint(['base_id'], ['bases.id']),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('base_id', 'asset_id', name='uq_stocks_base_asset'),
        sqlite_autoincrement=True,
    )
    op.create_index('ix_stocks_base_id', 'stocks', ['base_id'])
    op.create_index('ix_stocks_asset_id', 'stocks', ['asset_id'])

    # ==========================================================================
    # 4. TRANSACTIONS
    # ==========================================================================
    op.create_table('purchases',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('asset_id', sa.Integer(), nullable=False),
        sa.Column('base_id', sa.Integer(), nullable=False),
        sa.Column('quantity', sa.Integer(), nullable=False),
        sa.Column('purchase_date', sa.DateTime(timezone=True), nullable=False),
        sa.Column('created_by', sa.Integer(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.CheckConstraint('quantity > 0', name='ck_purchases_quantity_positive'),
        sa.ForeignKeyConstraint(['asset_id'], ['assets.id']),
        sa.ForeignKeyConstraint(['base_id'], ['bases.id']),
        sa.ForeignKeyConstraint(['created_by'], ['users.id']),
        sa.PrimaryKeyConstraint('id'),
        sqlite_autoincrement=True,
    )
    op.create_index('ix_purchases_asset_id', 'purchases', ['asset_id'])
    op.create_index('ix_purchases_base_id', 'purchases', ['base_id'])
    op.create_index('ix_purchases_created_at', 'purchases', ['created_at'])
    op.create_index('ix_purchases_base_date', 'purchases', ['base_id', 'purchase_date'])

    op.create_table('transfers',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('asset_id', sa.Integer(), nullable=False),
        sa.Column('from_base_id', sa.Integer(), nullable=False),
        sa.Column('to_base_id', sa.Integer(), nullable=False),
        sa.Column('quantity', sa.Integer(), nullable=False),
        sa.Column('transfer_date', sa.DateTime(timezone=True), nullable=False),
        sa.Column('initiated_by', sa.Integer(), nullable=False),
        sa.Column('status', sa.String(length=16), nullable=False, server_default='pending'),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('version_id', sa.Integer(), nullable=False, server_default='1'),
        sa.CheckConstraint('quantity > 0', name='ck_transfers_quantity_positive'),
        sa.CheckConstraint('from_base_id <> to_base_id', name='ck_transfers_distinct_bases'),
        sa.CheckConstraint(
            "status IN ('pending', 'completed', 'cancelled')",
            name='ck_transfers_status',
        ),
        sa.ForeignKeyConstraint(['asset_id'], ['assets.id']),
        sa.ForeignKeyConstraint(['from_base_id'], ['bases.id']),
        sa.ForeignKeyConstraint(['to_base_id'], ['bases.id']),
        sa.ForeignKeyConstraint(['initiated_by'], ['users.id']),
        sa.PrimaryKeyConstraint('id'),
        sqlite_autoincrement=True,
    )
    op.create_index('ix_transfers_asset_id', 'transfers', ['asset_id'])
    op.create_index('ix_transfers_from_base_id', 'transfers', ['from_base_id'])
    op.create_index('ix_transfers_to_base_id', 'transfers', ['to_base_id'])
    op.create_index('ix_transfers_status', 'transfers', ['status'])
    op.create_index('ix_transfers_created_at', 'transfers', ['created_at'])

    op.create_table('assignments',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('asset_id', sa.Integer(), nullable=False),
        sa.Column('base_id', sa.Integer(), nullable=False),
        sa.Column('assigned_to', sa.String(length=255), nullable=False),
        sa.Column('personnel_id', sa.String(length=64), nullable=True),
        sa.Column('quantity', sa.Integer(), nullable=False),
        sa.Column('assigned_date', sa.DateTime(timezone=True), nullable=False),
        sa.Column('status', sa.String(length=16), nullable=False, server_default='assigned'),
        sa.Column('reason', sa.Text(), nullable=True),
        sa.Column('created_by', sa.Integer(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('version_id', sa.Integer(), nullable=False, server_default='1'),
        sa.CheckConstraint('quantity > 0', name='ck_assignments_quantity_positive'),
        sa.CheckConstraint("status IN ('assigned', 'expended')", name='ck_assignments_status'),
        sa.ForeignKeyConstraint(['asset_id'], ['assets.id']),
        sa.ForeignKeyConstraint(['base_id'], ['bases.id']),
        sa.ForeignKeyConstraint(['created_by'], ['users.id']),
        sa.PrimaryKeyConstraint('id'),
        sqlite_autoincrement=True,
    )
    op.create_index('ix_assignments_asset_id', 'assignments', ['asset_id'])
    op.create_index('ix_assignments_base_id', 'assignments', ['base_id'])
    op.create_index('ix_assignments_status', 'assignments', ['status'])
    op.create_index('ix_assignments_created_at', 'assignments', ['created_at'])
    op.create_index('ix_assignments_base_date', 'assignments', ['base_id', 'assigned_date'])

    # ==========================================================================
    # 5. AUDIT TRAIL
    # ==========================================================================
    op.create_table('logs',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column('action_type', sa.String(length=32), nullable=False),
        sa.Column('resource_id', sa.Integer(), nullable=True),
        sa.Column('old_data', sa.JSON(), nullable=True),
        sa.Column('new_data', sa.JSON(), nullable=True),
        sa.Column('timestamp', sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(['user_id'], ['users.id']),
        sa.PrimaryKeyConstraint('id'),
        sqlite_autoincrement=True,
    )
    op.create_index('ix_logs_user_id', 'logs', ['user_id'])
    op.create_index('ix_logs_action_type', 'logs', ['action_type'])
    op.create_index('ix_logs_timestamp', 'logs', ['timestamp'])
    op.create_index('ix_logs_user_timestamp', 'logs', ['user_id', 'timestamp'])


def downgrade():
    op.drop_table('logs')
    op.drop_table('assignments')
    op.drop_table('transfers')
    op.drop_table('purchases')
    op.drop_table('stocks')
    op.drop_table('users')
    op.drop_table('assets')
    op.drop_table('bases')
