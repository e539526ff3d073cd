"""add passcodetoken

Revision ID: add_passcodetoken
Revises:
Create Date: 2026-10-19
"""

import sqlalchemy as sa
from alembic import op

# revision identifiers, used by Alembic.
revision = 'add_passcodetoken'
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        'passcodetoken',
        sa.Column('id', sa.String(length=50), nullable=False),
        sa.Column('user_ref', sa.String(length=50), nullable=False),
        sa.Column('code', sa.String(length=6), nullable=False),
        sa.Column('expires_at', sa.DateTime(), nullable=False),
        sa.Column('consumed_at', sa.DateTime(), nullable=True),
        sa.Column('created_at', sa.DateTime(), server_default=sa.text('CURRENT_TIMESTAMP'), nullable=False),
        sa.Column('modified_at', sa.DateTime(), nullable=True),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_passcodetoken_lookup', 'passcodetoken', ['code', 'consumed_at', 'expires_at'])
    op.create_index('ix_passcodetoken_expires_at', 'passcodetoken', ['expires_at'])
    op.create_index(
        'uq_passcodetoken_active_user_ref',
        'passcodetoken',
        ['user_ref'],
        unique=True,
        sqlite_where=sa.text('consumed_at IS NULL'),
        postgresql_where=sa.text('consumed_at IS NULL'),
    )


def downgrade() -> None:
    op.drop_index('uq_passcodetoken_active_user_ref', table_name='passcodetoken')
    op.drop_index('ix_passcodetoken_expires_at', table_name='passcodetoken')
    op.drop_index('ix_passcodetoken_lookup', table_name='passcodetoken')
    op.drop_table('passcodetoken')
