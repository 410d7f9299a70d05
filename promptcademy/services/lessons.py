"""Lesson catalog storage and seeding."""

import logging
from typing import Optional

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from ..db import Lesson

logger = logging.getLogger(__name__)

ALL_TRACKS = 'All'

DEFAULT_LESSONS = [
  {
    'title': 'Prompting 101: Roles & Constraints',
    'track': 'general',
    'content': 'Write a role, goal, constraints, and steps.',
  },
  {
    'title': 'Marketing: 5 Ad Variants Fast',
    'track': 'marketing',
    'content': 'Generate 5 paid ad variants using a brand voice.',
  },
  {
    'title': 'HR: Structured Interview Rubric',
    'track': 'hr',
    'content': 'Create a rubric with 4 competencies and behavior questions.',
  },
  {
    'title': 'Finance: Cashflow Summary',
    'track': 'finance',
    'content': 'Summarize last 30 days transactions into 5 insights.',
  },
]


class LessonCatalog:
  """Read access to the lesson catalog within a session."""

  def __init__(self, session: AsyncSession):
    self.session = session

  async def get(self, lesson_id: int) -> Optional[Lesson]:
    return await self.session.get(Lesson, lesson_id)

  async def get_all(self, track: Optional[str] = None) -> list[Lesson]:
    """List lessons ordered by their catalog order, then id.

    A track of None or 'All' returns every lesson.
    """
    stmt = select(Lesson).order_by(Lesson.order, Lesson.id)
    if track and track != ALL_TRACKS:
      stmt = stmt.where(Lesson.track == track)
    result = await self.session.execute(stmt)
    return list(result.scalars().all())

  async def active_ids(self) -> list[int]:
    """Ids of lessons eligible for rotation, ascending."""
    result = await self.session.execute(
      select(Lesson.id).where(Lesson.is_active.is_(True)).order_by(Lesson.id)
    )
    return list(result.scalars().all())

  async def count(self) -> int:
    result = await self.session.execute(select(func.count()).select_from(Lesson))
    return result.scalar_one()

  async def tracks(self) -> list[str]:
    result = await self.session.execute(select(Lesson.track).distinct().order_by(Lesson.track))
    return list(result.scalars().all())


async def seed_lessons(session: AsyncSession, lessons: Optional[list[dict]] = None) -> int:
  """Insert the given lessons (default catalog if None) when the catalog is empty.

  Returns the number of lessons inserted.
  """
  catalog = LessonCatalog(session)
  if await catalog.count() > 0:
    logger.info('Lesson catalog already seeded, skipping')
    return 0

  lessons = DEFAULT_LESSONS if lessons is None else lessons
  for position, data in enumerate(lessons, start=1):
    session.add(
      Lesson(
        title=data['title'],
        track=data.get('track', 'general'),
        content=data.get('content', ''),
        order=data.get('order', position),
        is_active=data.get('is_active', True),
      )
    )
  await session.flush()
  logger.info(f'Seeded {len(lessons)} lessons')
  return len(lessons)
