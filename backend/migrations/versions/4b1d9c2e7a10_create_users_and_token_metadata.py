"""create users and token_metadata

Revision ID: 4b1d9c2e7a10
Revises:
Create Date: 2026-10-19 00:00:00.000000
"""
import sqlalchemy as sa
from alembic import op

# revision identifiers, used by Alembic.
revision = '4b1d9c2e7a10'
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    op.create_table(
        'users',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('email', sa.String(length=254), nullable=False),
        sa.Column('password_hash', sa.String(length=254), nullable=False),
        sa.Column('first_name', sa.String(length=100), nullable=True),
        sa.Column('last_name', sa.String(length=100), nullable=True),
        sa.Column('role', sa.String(length=20), nullable=False),
        sa.Column('is_active', sa.Boolean(), server_default=sa.true(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.CheckConstraint("role IN ('user', 'manager', 'admin')", name=op.f('ck_users_role')),
        sa.PrimaryKeyConstraint('id', name=op.f('pk_users')),
        sa.UniqueConstraint('email', name='uq_users_email'),
    )
    op.create_index('ix_users_email', 'users', ['email'], unique=False)

    op.create_table(
        'token_metadata',
        sa.Column('id', sa.String(length=64), nullable=False),
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column('token_type', sa.String(length=16), nullable=False),
        sa.Column('device_id', sa.String(length=255), nullable=True),
        sa.Column('client_id', sa.String(length=255), nullable=True),
        sa.Column('is_revoked', sa.Boolean(), server_default=sa.false(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('expires_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('last_used_at', sa.DateTime(timezone=True), nullable=True),
        sa.CheckConstraint(
            "token_type IN ('access', 'refresh')", name=op.f('ck_token_metadata_token_type')
        ),
        sa.CheckConstraint(
            'expires_at > created_at', name=op.f('ck_token_metadata_expires_after_created')
        ),
        sa.ForeignKeyConstraint(
            ['user_id'], ['users.id'],
            name=op.f('fk_token_metadata_user_id_users'),
            ondelete='CASCADE',
        ),
        sa.PrimaryKeyConstraint('id', name=op.f('pk_token_metadata')),
    )
    op.create_index('ix_token_metadata_user_id', 'token_metadata', ['user_id'], unique=False)
    op.create_index('ix_token_metadata_expires_at', 'token_metadata', ['expires_at'], unique=False)
    op.create_index(
        'ix_token_metadata_user_active',
        'token_metadata',
        ['user_id', 'is_revoked', 'expires_at'],
        unique=False,
    )


def downgrade():
    op.drop_index('ix_token_metadata_user_active', table_name='token_metadata')
    op.drop_index('ix_token_metadata_expires_at', table_name='token_metadata')
    op.drop_index('ix_token_metadata_user_id', table_name='token_metadata')
    op.drop_table('token_metadata')
    op.drop_index('ix_users_email', table_name='users')
    op.drop_table('users')
