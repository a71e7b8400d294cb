"""create_auth_and_tenant_tables

Revision ID: 3f1a9c2d7b10
Revises:
Create Date: 2026-10-16 12:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '3f1a9c2d7b10'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamps():
    return [
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    ]


def upgrade() -> None:
    """Create user, session, password reset, organization and membership tables."""
    op.create_table(
        'user',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('email', sa.String(), nullable=False),
        sa.Column('hashed_password', sa.String(), nullable=False),
        sa.Column('first_name', sa.String(50), nullable=False),
        sa.Column('last_name', sa.String(50), nullable=False),
        sa.Column('avatar', sa.String(), nullable=True),
        sa.Column('is_email_verified', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('last_login_at', sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
    )
    op.create_index('ix_user_email', 'user', ['email'], unique=True)

    op.create_table(
        'refresh_token',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('user_id', sa.String(36), sa.ForeignKey('user.id', ondelete='CASCADE'), nullable=False),
        sa.Column('token', sa.String(), nullable=False),
        sa.Column('expires_at', sa.DateTime(timezone=True), nullable=False),
        *_timestamps(),
    )
    op.create_index('ix_refresh_token_token', 'refresh_token', ['token'], unique=True)
    op.create_index('ix_refresh_token_user_id', 'refresh_token', ['user_id'])

    op.create_table(
        'password_reset_token',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('user_id', sa.String(36), sa.ForeignKey('user.id', ondelete='CASCADE'), nullable=False),
        sa.Column('token_hash', sa.String(64), nullable=False),
        sa.Column('expires_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('used', sa.Boolean(), nullable=False, server_default=sa.false()),
        *_timestamps(),
    )
    op.create_index('ix_password_reset_token_token_hash', 'password_reset_token', ['token_hash'], unique=True)
    op.create_index('ix_password_reset_token_user_id', 'password_reset_token', ['user_id'])

    op.create_table(
        'organization',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('name', sa.String(100), nullable=False),
        sa.Column('slug', sa.String(50), nullable=False),
        sa.Column('logo', sa.String(), nullable=True),
        sa.Column('plan', sa.Enum('FREE', 'PRO', 'ENTERPRISE', name='organizationplan'), nullable=False),
        sa.Column('status', sa.Enum('ACTIVE', 'SUSPENDED', 'CANCELED', name='organizationstatus'), nullable=False),
        sa.Column('owner_id', sa.String(36), sa.ForeignKey('user.id'), nullable=False),
        *_timestamps(),
    )
    op.create_index('ix_organization_slug', 'organization', ['slug'], unique=True)
    op.create_index('ix_organization_owner_id', 'organization', ['owner_id'])

    op.create_table(
        'organization_member',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('user_id', sa.String(36), sa.ForeignKey('user.id', ondelete='CASCADE'), nullable=False),
        sa.Column('organization_id', sa.String(36), sa.ForeignKey('organization.id', ondelete='CASCADE'), nullable=False),
        sa.Column('role', sa.Enum('OWNER', 'ADMIN', 'MEMBER', 'GUEST', name='memberrole'), nullable=False),
        sa.Column('status', sa.Enum('ACTIVE', 'INVITED', 'SUSPENDED', name='memberstatus'), nullable=False),
        sa.Column('joined_at', sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
        sa.UniqueConstraint('user_id', 'organization_id', name='uq_organization_member_user_org'),
    )
    op.create_index('ix_organization_member_user_id', 'organization_member', ['user_id'])
    op.create_index('ix_organization_member_organization_id', 'organization_member', ['organization_id'])


def downgrade() -> None:
    """Drop all auth and tenant tables."""
    op.drop_table('organization_member')
    op.drop_table('organization')
    op.drop_table('password_reset_token')
    op.drop_table('refresh_token')
    op.drop_table('user')
    for enum_name in ('memberstatus', 'memberrole', 'organizationstatus', 'organizationplan'):
        sa.Enum(name=enum_name).drop(op.get_bind(), checkfirst=True)
