"""Initial quoting schema: users, sessions, quotes, material quotes

Revision ID: 20261019_initial
Revises:
Create Date: 2026-10-19

This migration adds:
1. users and session_tokens (bearer auth, password reset)
2. quotes, quote_windows, quote_versions
3. material_quotes, material_lines, material_quote_versions
"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '20261019_initial'
down_revision = None
branch_labels = None
depends_on = None


def _timestamps(*names):
    return [
        sa.Column(name, sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now())
        for name in names
    ]


def upgrade():
    # ==========================================================================
    # 1. USERS / SESSIONS
    # ==========================================================================
    op.create_table('users',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(length=120), nullable=False),
        sa.Column('email', sa.String(length=255), nullable=False),
        sa.Column('password_hash', sa.String(length=255), nullable=False),
        sa.Column('reset_token_hash', sa.String(length=64), nullable=True),
        sa.Column('reset_token_expires_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default='1'),
        *_timestamps('created_at'),
        sa.Column('last_login_at', sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('email', name='uq_users_email'),
        sqlite_autoincrement=True,
    )
    op.create_index('ix_users_email', 'users', ['email'])
    op.create_index('ix_users_reset_token_hash', 'users', ['reset_token_hash'])

    op.create_table('session_tokens',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column('token_hash', sa.String(length=255), nullable=False),
        *_timestamps('created_at', 'last_used_at'),
        sa.Column('expires_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('is_revoked', sa.Boolean(), nullable=False, server_default='0'),
        sa.Column('revoked_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('revoked_reason', sa.String(length=255), nullable=True),
        sa.Column('user_agent', sa.String(length=255), nullable=True),
        sa.Column('ip_address', sa.String(length=64), nullable=True),
        sa.ForeignKeyConstraint(['user_id'], ['users.id']),
        sa.PrimaryKeyConstraint('id'),
        sqlite_autoincrement=True,
    )
    op.create_index('ix_session_tokens_user_id', 'session_tokens', ['user_id'])
    op.create_index('ix_session_tokens_token_hash', 'session_tokens', ['token_hash'], unique=True)
    op.create_index('ix_session_tokens_expires_at', 'session_tokens', ['expires_at'])
    op.create_index('ix_session_tokens_user_active', 'session_tokens', ['user_id', 'is_revoked'])

    # ==========================================================================
    # 2. WINDOW QUOTES
    # ==========================================================================
    op.create_table('quotes',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('code', sa.String(length=16), nullable=False),
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column('client_name', sa.String(length=255), nullable=False, server_default=''),
        sa.Column('project', sa.String(length=255), nullable=False, server_default=''),
        sa.Column('finish', sa.String(length=255), nullable=False, server_default=''),
        sa.Column('apply_tax', sa.Boolean(), nullable=False, server_default='1'),
        sa.Column('first_tax_percent', sa.Float(), nullable=False, server_default='9'),
        sa.Column('second_tax_percent', sa.Float(), nullable=False, server_default='9'),
        sa.Column('packing_charge', sa.Float(), nullable=False, server_default='0'),
        sa.Column('subtotal', sa.Float(), nullable=False, server_default='0'),
        sa.Column('first_tax_amount', sa.Float(), nullable=False, server_default='0'),
        sa.Column('second_tax_amount', sa.Float(), nullable=False, server_default='0'),
        sa.Column('grand_total', sa.Float(), nullable=False, server_default='0'),
        sa.Column('status', sa.String(length=16), nullable=False, server_default='pending'),
        *_timestamps('created_at', 'updated_at'),
        sa.ForeignKeyConstraint(['user_id'], ['users.id']),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('code', name='uq_quotes_code'),
        sqlite_autoincrement=True,
    )
    op.create_index('ix_quotes_user_id', 'quotes', ['user_id'])
    op.create_index('ix_quotes_status', 'quotes', ['status'])
    op.create_index('ix_quotes_user_created', 'quotes', ['user_id', 'created_at'])

    op.create_table('quote_windows',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('quote_id', sa.Integer(), nullable=False),
        sa.Column('position', sa.Integer(), nullable=False),
        sa.Column('window_type', sa.String(length=32), nullable=False, server_default='normal'),
        sa.Column('width', sa.Float(), nullable=False),
        sa.Column('height', sa.Float(), nullable=False),
        *[
            sa.Column(name, sa.String(length=255), nullable=False, server_default='')
            for name in ('profile_system', 'design', 'glass_type', 'locking', 'grill', 'hardware', 'mesh', 'make')
        ],
        sa.Column('quantity', sa.Integer(), nullable=False),
        sa.Column('price_per_sqft', sa.Float(), nullable=False),
        sa.Column('sq_ft', sa.Float(), nullable=False),
        sa.Column('amount', sa.Float(), nullable=False),
        sa.ForeignKeyConstraint(['quote_id'], ['quotes.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sqlite_autoincrement=True,
    )
    op.create_index('ix_quote_windows_quote_id', 'quote_windows', ['quote_id'])
    op.create_index('ix_quote_windows_quote_position', 'quote_windows', ['quote_id', 'position'])

    op.create_table('quote_versions',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('quote_id', sa.Integer(), nullable=False),
        sa.Column('version_number', sa.Integer(), nullable=False),
        sa.Column('snapshot', sa.JSON(), nullable=False),
        *_timestamps('created_at'),
        sa.ForeignKeyConstraint(['quote_id'], ['quotes.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('quote_id', 'version_number', name='uq_quote_versions_number'),
        sqlite_autoincrement=True,
    )
    op.create_index('ix_quote_versions_quote_id', 'quote_versions', ['quote_id'])

    # ==========================================================================
    # 3. MATERIAL QUOTES
    # ==========================================================================
    op.create_table('material_quotes',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('code', sa.String(length=16), nullable=False),
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column('to_name', sa.String(length=255), nullable=False, server_default=''),
        sa.Column('company', sa.String(length=255), nullable=False, server_default=''),
        sa.Column('address', sa.Text(), nullable=False, server_default=''),
        sa.Column('reference', sa.String(length=255), nullable=False, server_default=''),
        sa.Column('total_value', sa.Float(), nullable=False, server_default='0'),
        sa.Column('status', sa.String(length=16), nullable=False, server_default='pending'),
        *_timestamps('created_at', 'updated_at'),
        sa.ForeignKeyConstraint(['user_id'], ['users.id']),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('code', name='uq_material_quotes_code'),
        sqlite_autoincrement=True,
    )
    op.create_index('ix_material_quotes_user_id', 'material_quotes', ['user_id'])
    op.create_index('ix_material_quotes_status', 'material_quotes', ['status'])
    op.create_index('ix_material_quotes_user_created', 'material_quotes', ['user_id', 'created_at'])

    op.create_table('material_lines',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('material_quote_id', sa.Integer(), nullable=False),
        sa.Column('position', sa.Integer(), nullable=False),
        sa.Column('description', sa.String(length=500), nullable=False),
        sa.Column('unit', sa.String(length=8), nullable=False, server_default='pcs'),
        sa.Column('qty', sa.Float(), nullable=False),
        sa.Column('rate', sa.Float(), nullable=False),
        sa.Column('amount', sa.Float(), nullable=False),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.ForeignKeyConstraint(['material_quote_id'], ['material_quotes.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sqlite_autoincrement=True,
    )
    op.create_index('ix_material_lines_material_quote_id', 'material_lines', ['material_quote_id'])
    op.create_index('ix_material_lines_quote_position', 'material_lines', ['material_quote_id', 'position'])

    op.create_table('material_quote_versions',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('material_quote_id', sa.Integer(), nullable=False),
        sa.Column('version_number', sa.Integer(), nullable=False),
        sa.Column('snapshot', sa.JSON(), nullable=False),
        *_timestamps('created_at'),
        sa.ForeignKeyConstraint(['material_quote_id'], ['material_quotes.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('material_quote_id', 'version_number', name='uq_material_quote_versions_number'),
        sqlite_autoincrement=True,
    )
    op.create_index('ix_material_quote_versions_material_quote_id', 'material_quote_versions', ['material_quote_id'])


def downgrade():
    op.drop_table('material_quote_versions')
    op.drop_table('material_lines')
    op.drop_table('material_quotes')
    op.drop_table('quote_versions')
    op.drop_table('quote_windows')
    op.drop_table('quotes')
    op.drop_table('session_tokens')
    op.drop_table('users')
