"""create user and score tables

Revision ID: 5a7c1e9d2b40
Revises:
Create Date: 2026-09-02 00:00:00
"""

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '5a7c1e9d2b40'
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    op.create_table(
        'user',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('nickname', sa.String(length=64), nullable=False),
        sa.Column('password_hash', sa.String(length=128), nullable=False),
        sa.PrimaryKeyConstraint('id'),
    )
    with op.batch_alter_table('user') as batch_op:
        batch_op.create_index(batch_op.f('ix_user_nickname'), ['nickname'], unique=True)

    op.create_table(
        'score',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('nickname', sa.String(length=64), nullable=False),
        sa.Column('ghost_count', sa.Integer(), nullable=False),
        sa.Column('score', sa.Integer(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=True),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('nickname', 'ghost_count', name='uq_score_nickname_ghost_count'),
    )
    with op.batch_alter_table('score') as batch_op:
        batch_op.create_index(batch_op.f('ix_score_nickname'), ['nickname'], unique=False)


def downgrade():
    with op.batch_alter_table('score') as batch_op:
        batch_op.drop_index(batch_op.f('ix_score_nickname'))
    op.drop_table('score')
    with op.batch_alter_table('user') as batch_op:
        batch_op.drop_index(batch_op.f('ix_user_nickname'))
    op.drop_table('user')
