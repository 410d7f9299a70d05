"""Community prompt challenges."""

import logging
from typing import Optional

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from ..db import Challenge, ChallengeEntry
from ..errors import NotFoundError, ValidationError

logger = logging.getLogger(__name__)

DEFAULT_CHALLENGES = [
  {
    'title': 'One-Prompt Product Brief',
    'prompt': 'Write a single prompt that turns rough meeting notes into a '
              'one-page product brief with goals, risks and open questions.',
  },
]


class ChallengeStorage:
  """Challenge lookup and entry submission within a session."""

  def __init__(self, session: AsyncSession):
    self.session = session

  async def get_active(self) -> Challenge:
    """The most recently created active challenge.

    Raises:
        NotFoundError: If no challenge is active
    """
    result = await self.session.execute(
      select(Challenge)
      .where(Challenge.is_active.is_(True))
      .order_by(Challenge.created_at.desc(), Challenge.id.desc())
      .limit(1)
    )
    challenge = result.scalar_one_or_none()
    if challenge is None:
      raise NotFoundError('No active challenge')
    return challenge

  async def create_entry(self, user_id: int, content: Optional[str]) -> ChallengeEntry:
    """Submit an entry to the active challenge.

    Raises:
        ValidationError: If content is blank
        NotFoundError: If no challenge is active
    """
    if not content or not content.strip():
      raise ValidationError('Entry content is required')
    challenge = await self.get_active()

    entry = ChallengeEntry(challenge_id=challenge.id, user_id=user_id, content=content)
    self.session.add(entry)
    await self.session.flush()
    logger.info(f'User {user_id} submitted entry {entry.id} to challenge {challenge.id}')
    return entry

  async def entries_for(self, user_id: int, challenge_id: int) -> list[ChallengeEntry]:
    result = await self.session.execute(
      select(ChallengeEntry)
      .where(ChallengeEntry.user_id == user_id, ChallengeEntry.challenge_id == challenge_id)
      .order_by(ChallengeEntry.id)
    )
    return list(result.scalars().all())


async def seed_challenges(session: AsyncSession, challenges: Optional[list[dict]] = None) -> int:
  """Insert the default challenges when none exist. Returns the number inserted."""
  result = await session.execute(select(func.count()).select_from(Challenge))
  if result.scalar_one() > 0:
    logger.info('Challenges already seeded, skipping')
    return 0

  challenges = DEFAULT_CHALLENGES if challenges is None else challenges
  for data in challenges:
    session.add(
      Challenge(
        title=data['title'],
        prompt=data.get('prompt', ''),
        is_active=data.get('is_active', True),
      )
    )
  await session.flush()
  logger.info(f'Seeded {len(challenges)} challenges')
  return len(challenges)
