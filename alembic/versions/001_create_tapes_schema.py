"""create_tapes_schema

Revision ID: 001
Revises:
Create Date: 2026-10-19 10:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '001'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Upgrade schema."""
    bind = op.get_bind()
    inspector = sa.inspect(bind)

    if not inspector.has_table('tapes'):
        op.create_table('tapes',
        sa.Column('id', sa.Integer(), autoincrement=False, nullable=False),
        sa.Column('title', sa.Text(), nullable=False),
        sa.Column('year', sa.Integer(), nullable=True),
        sa.Column('runtime', sa.Integer(), nullable=True),
        sa.Column('contributor_id', sa.Text(), nullable=True),
        sa.Column('synced_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=True),
        sa.PrimaryKeyConstraint('id')
        )

    if not inspector.has_table('tags'):
        op.create_table('tags',
        sa.Column('name', sa.Text(), nullable=False),
        sa.PrimaryKeyConstraint('name')
        )

    if not inspector.has_table('tape_tags'):
        op.create_table('tape_tags',
        sa.Column('tape_id', sa.Integer(), nullable=False),
        sa.Column('tag_name', sa.Text(), nullable=False),
        sa.ForeignKeyConstraint(['tape_id'], ['tapes.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['tag_name'], ['tags.name'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('tape_id', 'tag_name')
        )

    if not inspector.has_table('tape_images'):
        op.create_table('tape_images',
        sa.Column('tape_id', sa.Integer(), nullable=False),
        sa.Column('index', sa.Integer(), autoincrement=False, nullable=False),
        sa.Column('color', sa.String(length=7), nullable=False),
        sa.Column('width', sa.Integer(), nullable=False),
        sa.Column('height', sa.Integer(), nullable=False),
        sa.Column('rotated', sa.Boolean(), nullable=False),
        sa.ForeignKeyConstraint(['tape_id'], ['tapes.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('tape_id', 'index')
        )

    if not inspector.has_table('sync_runs'):
        op.create_table('sync_runs',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('started_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('finished_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('error', sa.Text(), nullable=True),
        sa.Column('num_tapes', sa.Integer(), nullable=True),
        sa.Column('warnings', sa.Text(), nullable=True),
        sa.PrimaryKeyConstraint('id')
        )
        op.create_index(op.f('ix_sync_runs_started_at'), 'sync_runs', ['started_at'], unique=False)


def downgrade() -> None:
    """Downgrade schema."""
    bind = op.get_bind()
    inspector = sa.inspect(bind)

    if inspector.has_table('sync_runs'):
        indexes = [idx['name'] for idx in inspector.get_indexes('sync_runs')]
        if 'ix_sync_runs_started_at' in indexes:
            op.drop_index(op.f('ix_sync_runs_started_at'), table_name='sync_runs')
        op.drop_table('sync_runs')

    for table in ('tape_images', 'tape_tags', 'tags', 'tapes'):
        if inspector.has_table(table):
            op.drop_table(table)
