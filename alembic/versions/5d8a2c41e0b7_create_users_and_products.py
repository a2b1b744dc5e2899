"""create users and products

Revision ID: 5d8a2c41e0b7
Revises:
Create Date: 2026-10-17 10:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '5d8a2c41e0b7'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Upgrade schema."""
    op.create_table(
        'users',
        sa.Column('id', sa.Integer(), nullable=False, comment='Internal primary key'),
        sa.Column('uuid', sa.String(length=36), nullable=False, comment='Public identifier exposed by the API'),
        sa.Column('name', sa.String(length=100), nullable=False, comment='Display name'),
        sa.Column('email', sa.String(length=255), nullable=False, comment='Login email, unique'),
        sa.Column('password_hash', sa.String(length=255), nullable=False, comment='bcrypt hash, never returned by the API'),
        sa.Column('bio', sa.Text(), nullable=True, comment='Short creator bio'),
        sa.Column('store_name', sa.String(length=100), nullable=True, comment='Storefront display name'),
        sa.Column('profile_image', sa.String(length=512), nullable=True, comment='Reference to the profile image asset'),
        sa.Column('created_at', sa.DateTime(), server_default=sa.text('(CURRENT_TIMESTAMP)'), nullable=False),
        sa.Column('updated_at', sa.DateTime(), server_default=sa.text('(CURRENT_TIMESTAMP)'), nullable=False),
        sa.PrimaryKeyConstraint('id', name=op.f('pk_users')),
    )
    op.create_index(op.f('ix_users_uuid'), 'users', ['uuid'], unique=True)
    op.create_index(op.f('ix_users_email'), 'users', ['email'], unique=True)

    op.create_table(
        'products',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('uuid', sa.String(length=36), nullable=False),
        sa.Column('title', sa.String(length=100), nullable=False),
        sa.Column('description', sa.Text(), nullable=False),
        sa.Column('price', sa.DECIMAL(precision=10, scale=2), nullable=False),
        sa.Column('image_url', sa.String(length=512), nullable=False),
        sa.Column('file_url', sa.String(length=512), nullable=False),
        sa.Column('creator_id', sa.Integer(), nullable=False),
        sa.Column('created_at', sa.DateTime(), server_default=sa.text('(CURRENT_TIMESTAMP)'), nullable=False),
        sa.Column('updated_at', sa.DateTime(), server_default=sa.text('(CURRENT_TIMESTAMP)'), nullable=False),
        sa.CheckConstraint('price >= 0.01', name=op.f('ck_products_price_minimum')),
        sa.ForeignKeyConstraint(['creator_id'], ['users.id'], name=op.f('fk_products_creator_id_users'), ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id', name=op.f('pk_products')),
    )
    op.create_index(op.f('ix_products_uuid'), 'products', ['uuid'], unique=True)
    op.create_index(op.f('ix_products_creator_id'), 'products', ['creator_id'], unique=False)


def downgrade() -> None:
    """Downgrade schema."""
    op.drop_index(op.f('ix_products_creator_id'), table_name='products')
    op.drop_index(op.f('ix_products_uuid'), table_name='products')
    op.drop_table('products')
    op.drop_index(op.f('ix_users_email'), table_name='users')
    op.drop_index(op.f('ix_users_uuid'), table_name='users')
    op.drop_table('users')
