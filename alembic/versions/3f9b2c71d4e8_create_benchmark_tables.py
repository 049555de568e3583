"""Create functions, databases and stats tables

Revision ID: 3f9b2c71d4e8
Revises:
Create Date: 2026-10-19 12:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '3f9b2c71d4e8'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        'functions',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('region_code', sa.String(50), nullable=False),
        sa.Column('region_label', sa.String(255), nullable=False),
        sa.Column('platform', sa.Enum('vercel', name='platform'), nullable=False),
    )

    op.create_table(
        'databases',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('provider', sa.String(50), nullable=False),
        sa.Column('region_code', sa.String(50), nullable=False),
        sa.Column('region_label', sa.String(255), nullable=False),
        sa.Column('function_id', sa.Integer(), sa.ForeignKey('functions.id'), nullable=False),
        sa.Column('connection_method', sa.Enum('http', 'ws', 'tcp', name='connection_method'),
                  nullable=False),
        sa.Column('connection_url', sa.String(255), nullable=False),
        sa.Column('neon_project_id', sa.String(255), nullable=False),
        sa.UniqueConstraint('function_id', 'connection_method', 'region_code',
                            name='uq_databases_function_connection_region'),
    )

    op.create_table(
        'stats',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('date_time', sa.DateTime(), nullable=False),
        sa.Column('function_id', sa.Integer(), sa.ForeignKey('functions.id'), nullable=False),
        sa.Column('database_id', sa.Integer(), sa.ForeignKey('databases.id'), nullable=False),
        sa.Column('latency_ms', sa.Numeric(10, 2), nullable=False),
        sa.Column('query_type', sa.Enum('cold', 'hot', name='query_type'), nullable=False),
    )

    # -- Window queries filter on date_time --
    op.create_index('ix_stats_date_time', 'stats', ['date_time'])


def downgrade() -> None:
    op.drop_index('ix_stats_date_time', table_name='stats')
    op.drop_table('stats')
    op.drop_table('databases')
    op.drop_table('functions')

    # -- Postgres keeps enum types after their tables are gone --
    sa.Enum(name='query_type').drop(op.get_bind(), checkfirst=True)
    sa.Enum(name='connection_method').drop(op.get_bind(), checkfirst=True)
    sa.Enum(name='platform').drop(op.get_bind(), checkfirst=True)
