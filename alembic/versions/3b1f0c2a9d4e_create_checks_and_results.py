"""Create checks and check_results tables

Revision ID: 3b1f0c2a9d4e
Revises:
Create Date: 2026-10-16 09:12:44.310521

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '3b1f0c2a9d4e'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        'checks',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('url', sa.String(length=2048), nullable=False),
        sa.Column('interval_seconds', sa.Integer(), nullable=False),
        sa.Column('alert_email', sa.String(length=320), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        sa.Column('last_status', sa.String(length=16), nullable=True),
        sa.Column('last_checked_at', sa.DateTime(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_checks_is_active'), 'checks', ['is_active'], unique=False)

    op.create_table(
        'check_results',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('check_id', sa.String(length=36), nullable=False),
        sa.Column('checked_at', sa.DateTime(), nullable=False),
        sa.Column('status', sa.String(length=16), nullable=False),
        sa.Column('http_status', sa.Integer(), nullable=True),
        sa.Column('latency_ms', sa.Integer(), nullable=True),
        sa.Column('error', sa.Text(), nullable=True),
        sa.ForeignKeyConstraint(['check_id'], ['checks.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('idx_results_check_time', 'check_results', ['check_id', 'checked_at'], unique=False)


def downgrade() -> None:
    op.drop_index('idx_results_check_time', table_name='check_results')
    op.drop_table('check_results')
    op.drop_index(op.f('ix_checks_is_active'), table_name='checks')
    op.drop_table('checks')
