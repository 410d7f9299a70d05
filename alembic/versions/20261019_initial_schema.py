"""Create lessons, users, progress, app_state, user_stats and badges tables.

Revision ID: 20261019_initial_schema
Revises:
Create Date: 2026-10-19
"""

from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op

# revision identifiers, used by Alembic.
revision: str = '20261019_initial_schema'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
  """Create the initial schema."""
  op.create_table(
    'lessons',
    sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
    sa.Column('title', sa.String(255), nullable=False),
    sa.Column('track', sa.String(50), nullable=False),
    sa.Column('content', sa.Text(), nullable=False),
    sa.Column('sort_order', sa.Integer(), nullable=False),
    sa.Column('is_active', sa.Boolean(), nullable=False),
  )
  op.create_table(
    'app_state',
    sa.Column('key', sa.String(100), primary_key=True),
    sa.Column('value', sa.String(255), nullable=False),
  )
  op.create_table(
    'users',
    sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
    sa.Column('name', sa.String(255), nullable=False),
    sa.Column('email', sa.String(255), nullable=False),
    sa.Column('password_hash', sa.String(255), nullable=True),
    sa.Column('plan', sa.String(20), nullable=False),
    sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
  )
  op.create_index('ix_users_email', 'users', ['email'], unique=True)
  op.create_table(
    'progress',
    sa.Column(
      'user_id',
      sa.Integer(),
      sa.ForeignKey('users.id', ondelete='CASCADE'),
      primary_key=True,
    ),
    sa.Column(
      'lesson_id',
      sa.Integer(),
      sa.ForeignKey('lessons.id', ondelete='CASCADE'),
      primary_key=True,
    ),
    sa.Column('status', sa.String(20), nullable=False),
    sa.Column('completed_at', sa.DateTime(timezone=True), nullable=True),
  )
  op.create_table(
    'user_stats',
    sa.Column(
      'user_id',
      sa.Integer(),
      sa.ForeignKey('users.id', ondelete='CASCADE'),
      primary_key=True,
    ),
    sa.Column('xp', sa.Integer(), nullable=False),
    sa.Column('streak', sa.Integer(), nullable=False),
    sa.Column('last_check_in', sa.Date(), nullable=True),
  )
  op.create_table(
    'badges',
    sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
    sa.Column(
      'user_id',
      sa.Integer(),
      sa.ForeignKey('users.id', ondelete='CASCADE'),
      nullable=False,
      index=True,
    ),
    sa.Column('badge_id', sa.String(50), nullable=False),
    sa.Column('label', sa.String(255), nullable=False),
    sa.Column('earned_at', sa.DateTime(timezone=True), nullable=False),
    sa.UniqueConstraint('user_id', 'badge_id', name='uq_badges_user_badge'),
  )


def downgrade() -> None:
  """Drop the initial schema."""
  op.drop_table('badges')
  op.drop_table('user_stats')
  op.drop_table('progress')
  op.drop_index('ix_users_email', table_name='users')
  op.drop_table('users')
  op.drop_table('app_state')
  op.drop_table('lessons')
