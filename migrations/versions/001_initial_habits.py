"""Create user, habit and habit_completion tables

Revision ID: 001
Revises:
Create Date: 2025-01-06 00:00:00.000000

"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '001'
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        'user',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('telegram_id', sa.BigInteger(), nullable=False),
        sa.Column('username', sa.String(64), nullable=True),
        sa.Column('first_name', sa.String(64), nullable=True),
        sa.Column('last_name', sa.String(64), nullable=True),
        sa.Column('timezone', sa.String(64), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
    )
    op.create_index('ix_user_telegram_id', 'user', ['telegram_id'], unique=True)

    op.create_table(
        'habit',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('user_id', sa.Integer(), sa.ForeignKey('user.id', ondelete='CASCADE'), nullable=False),
        sa.Column('name', sa.String(128), nullable=False),
        sa.Column('identity', sa.String(256), nullable=False, server_default=''),
        sa.Column('anchor', sa.String(256), nullable=False, server_default=''),
        sa.Column('description', sa.String(1024), nullable=False, server_default=''),
        # Mon..Sun mask, 1 = scheduled
        sa.Column('schedule_mask', sa.String(7), nullable=False, server_default='1111111'),
        sa.Column('sort_order', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('archived', sa.Boolean(), nullable=False, server_default=sa.false()),
        # YYYY-MM-DD creation day in the owner's timezone
        sa.Column('created_on', sa.String(10), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
    )
    op.create_index('ix_habit_user_id', 'habit', ['user_id'])
    op.create_index('ix_habit_name', 'habit', ['name'])

    op.create_table(
        'habit_completion',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('habit_id', sa.Integer(), sa.ForeignKey('habit.id', ondelete='CASCADE'), nullable=False),
        sa.Column('user_id', sa.Integer(), sa.ForeignKey('user.id', ondelete='CASCADE'), nullable=False),
        # YYYY-MM-DD local calendar date
        sa.Column('completed_date', sa.String(10), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.UniqueConstraint('habit_id', 'completed_date', name='uq_habit_completion_day'),
    )
    op.create_index('ix_habit_completion_habit_id', 'habit_completion', ['habit_id'])
    op.create_index('ix_habit_completion_user_id', 'habit_completion', ['user_id'])
    op.create_index('ix_habit_completion_completed_date', 'habit_completion', ['completed_date'])


def downgrade() -> None:
    op.drop_table('habit_completion')
    op.drop_table('habit')
    op.drop_table('user')
