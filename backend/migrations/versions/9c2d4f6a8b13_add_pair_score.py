"""add pair_score table

Revision ID: 9c2d4f6a8b13
Revises: 5a7c1e9d2b40
Create Date: 2026-09-14 00:00:00
"""

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '9c2d4f6a8b13'
down_revision = '5a7c1e9d2b40'
branch_labels = None
depends_on = None


def upgrade():
    bind = op.get_bind()
    insp = sa.inspect(bind)
    if 'pair_score' in insp.get_table_names():
        return
    op.create_table(
        'pair_score',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('player1', sa.String(length=64), nullable=False),
        sa.Column('player2', sa.String(length=64), nullable=False),
        sa.Column('score', sa.Integer(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=True),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('player1', 'player2', name='uq_pair_score_players'),
    )


def downgrade():
    op.drop_table('pair_score')
