"""Per-user lesson progress tracking."""

import logging
from typing import Any

from sqlalchemy import case, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from ..db import Lesson, Progress
from ..db.models import utc_now
from ..errors import NotFoundError, ValidationError
from .stats import FIRST_LESSON_BADGE, StatsStorage

logger = logging.getLogger(__name__)

NOT_STARTED = 'not_started'
IN_PROGRESS = 'in_progress'
COMPLETED = 'completed'

STATUSES = (NOT_STARTED, IN_PROGRESS, COMPLETED)


class ProgressStorage:
  """User-scoped progress storage operations."""

  def __init__(self, session: AsyncSession, user_id: int):
    self.session = session
    self.user_id = user_id

  async def record(self, lesson_id: int, status: str) -> dict[str, int]:
    """Upsert the status of a lesson and return the user's summary.

    completed_at is stamped only when status is completed; other statuses
    keep whatever timestamp the row already has.

    Raises:
        ValidationError: If status is not a known status
        NotFoundError: If the lesson does not exist
    """
    if status not in STATUSES:
      raise ValidationError(f"Invalid status '{status}', expected one of {', '.join(STATUSES)}")
    if await self.session.get(Lesson, lesson_id) is None:
      raise NotFoundError(f'Lesson {lesson_id} not found')

    row = await self.session.get(Progress, (self.user_id, lesson_id))
    if row is None:
      row = Progress(user_id=self.user_id, lesson_id=lesson_id, status=status)
      self.session.add(row)
    row.status = status
    if status == COMPLETED:
      row.completed_at = utc_now()
    await self.session.flush()

    summary = await self.summary()
    logger.info(
      f'User {self.user_id} lesson {lesson_id} -> {status} '
      f'({summary["completed"]}/{summary["total"]})'
    )

    if status == COMPLETED and summary['completed'] == 1:
      await StatsStorage(self.session, self.user_id).award_badge(*FIRST_LESSON_BADGE)

    return summary

  async def summary(self) -> dict[str, int]:
    """Count completed rows and all rows for the user."""
    result = await self.session.execute(
      select(
        func.coalesce(func.sum(case((Progress.status == COMPLETED, 1), else_=0)), 0),
        func.count(),
      ).where(Progress.user_id == self.user_id)
    )
    completed, total = result.one()
    return {'completed': int(completed), 'total': int(total)}

  async def get_all(self) -> list[dict[str, Any]]:
    """Progress entries joined with lesson details.

    Ordered by completed_at descending with nulls last, then lesson id descending.
    """
    result = await self.session.execute(
      select(Progress, Lesson.title, Lesson.track)
      .join(Lesson, Lesson.id == Progress.lesson_id)
      .where(Progress.user_id == self.user_id)
      .order_by(Progress.completed_at.desc().nulls_last(), Progress.lesson_id.desc())
    )
    return [
      {
        'lesson_id': progress.lesson_id,
        'status': progress.status,
        'completed_at': progress.completed_at.isoformat() if progress.completed_at else None,
        'title': title,
        'track': track,
      }
      for progress, title, track in result.all()
    ]

  async def completed_lesson_ids(self) -> list[int]:
    result = await self.session.execute(
      select(Progress.lesson_id)
      .where(Progress.user_id == self.user_id, Progress.status == COMPLETED)
      .order_by(Progress.lesson_id)
    )
    return list(result.scalars().all())
