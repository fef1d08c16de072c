"""create employee and game_scores tables

Revision ID: 5b7c1d2e9f30
Revises:
Create Date: 2026-10-17 00:00:00
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
    tables = set(insp.get_table_names())
    if 'employee' not in tables:
        op.create_table(
            'employee',
            sa.Column('id', sa.Integer(), primary_key=True),
            sa.Column('email', sa.String(length=255), nullable=False),
            sa.Column('arrival_month_year', sa.String(length=64), nullable=False),
        )
        op.create_index('ix_employee_email', 'employee', ['email'], unique=True)
    if 'game_scores' not in tables:
        op.create_table(
            'game_scores',
            sa.Column('id', sa.Integer(), primary_key=True),
            sa.Column('game_id', sa.String(length=64), nullable=False),
            sa.Column('player_email', sa.String(length=255), nullable=False),
            sa.Column('player_answer', sa.Text(), nullable=True),
            sa.Column('answer_time', sa.Float(), nullable=True),
            sa.Column('score', sa.Float(), nullable=True),
            sa.Column('rank', sa.Integer(), nullable=True),
            sa.Column('is_correct', sa.Boolean(), nullable=False),
            sa.Column('game_timestamp', sa.DateTime(timezone=True), nullable=True),
            sa.Column('created_at', sa.DateTime(timezone=True), nullable=True),
        )
        op.create_index('ix_game_scores_game_id', 'game_scores', ['game_id'])


def downgrade():
    op.drop_index('ix_game_scores_game_id', table_name='game_scores')
    op.drop_table('game_scores')
    op.drop_index('ix_employee_email', table_name='employee')
    op.drop_table('employee')
