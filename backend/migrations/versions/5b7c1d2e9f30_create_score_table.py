"""create score history table

Revision ID: 5b7c1d2e9f30
Revises:
Create Date: 2025-09-14 00:00:00
"""

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '5b7c1d2e9f30'
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    bind = op.get_bind()
    insp = sa.inspect(bind)
    if 'score' in insp.get_table_names():
        return
    op.create_table(
        'score',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('player', sa.String(length=255), nullable=False),
        sa.Column('score', sa.Integer(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
    )
    with op.batch_alter_table('score') as batch_op:
        batch_op.create_index('ix_score_player', ['player'], unique=False)


def downgrade():
    with op.batch_alter_table('score') as batch_op:
        batch_op.drop_index('ix_score_player')
    op.drop_table('score')
