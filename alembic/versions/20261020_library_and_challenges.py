"""Create saved_prompts, challenges and challenge_entries tables.

Revision ID: 20261020_library_and_challenges
Revises: 20261019_initial_schema
Create Date: 2026-10-20
"""

from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op

# revision identifiers, used by Alembic.
revision: str = '20261020_library_and_challenges'
down_revision: Union[str, None] = '20261019_initial_schema'
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
  """Add the prompt library and challenge tables."""
  op.create_table(
    'saved_prompts',
    sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
    sa.Column(
      'user_id',
      sa.Integer(),
      sa.ForeignKey('users.id', ondelete='CASCADE'),
      nullable=False,
      index=True,
    ),
    sa.Column(
      'lesson_id',
      sa.Integer(),
      sa.ForeignKey('lessons.id', ondelete='SET NULL'),
      nullable=True,
    ),
    sa.Column('title', sa.String(255), nullable=False),
    sa.Column('input_text', sa.Text(), nullable=False),
    sa.Column('output_text', sa.Text(), nullable=False),
    sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
  )
  op.create_table(
    'challenges',
    sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
    sa.Column('title', sa.String(255), nullable=False),
    sa.Column('prompt', sa.Text(), nullable=False),
    sa.Column('is_active', sa.Boolean(), nullable=False),
    sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
  )
  op.create_table(
    'challenge_entries',
    sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
    sa.Column(
      'challenge_id',
      sa.Integer(),
      sa.ForeignKey('challenges.id', ondelete='CASCADE'),
      nullable=False,
      index=True,
    ),
    sa.Column(
      'user_id',
      sa.Integer(),
      sa.ForeignKey('users.id', ondelete='CASCADE'),
      nullable=False,
    ),
    sa.Column('content', sa.Text(), nullable=False),
    sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
  )


def downgrade() -> None:
  """Drop the prompt library and challenge tables."""
  op.drop_table('challenge_entries')
  op.drop_table('challenges')
  op.drop_table('saved_prompts')
