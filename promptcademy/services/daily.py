"""Daily lesson rotation.

One process-wide pointer (app_state.current_lesson_id) names today's lesson
for every user. The pointer advances at most once per calendar day in the
reference timezone, moving to the next active lesson by ascending id and
wrapping to the smallest active id after the last one.

The read-then-write is not locked: two requests racing across a day boundary
can advance the pointer twice. That skips one lesson and is accepted.
"""

import logging
import os
from datetime import date, datetime
from typing import Optional
from zoneinfo import ZoneInfo

from sqlalchemy.ext.asyncio import AsyncSession

from ..db import AppState, Lesson
from ..errors import ConfigurationError
from .lessons import LessonCatalog

logger = logging.getLogger(__name__)

DAY_KEY = 'current_day'
LESSON_KEY = 'current_lesson_id'

# Forces the next read to rotate
SENTINEL_DAY = '1900-01-01'

DEFAULT_TIMEZONE = 'America/Toronto'


def get_lesson_timezone() -> ZoneInfo:
  return ZoneInfo(os.environ.get('LESSON_TIMEZONE', DEFAULT_TIMEZONE))


def today_in_reference_timezone(now: Optional[datetime] = None) -> str:
  """Return today's ISO date in the lesson timezone."""
  tz = get_lesson_timezone()
  current = now.astimezone(tz) if now else datetime.now(tz)
  return current.date().isoformat()


class AppStateStore:
  """Key/value access to the app_state table within a session."""

  def __init__(self, session: AsyncSession):
    self.session = session

  async def get(self, key: str) -> Optional[str]:
    row = await self.session.get(AppState, key)
    return row.value if row else None

  async def set(self, key: str, value) -> None:
    row = await self.session.get(AppState, key)
    if row:
      row.value = str(value)
    else:
      self.session.add(AppState(key=key, value=str(value)))
    await self.session.flush()


def next_lesson_id(active_ids: list[int], current_id: Optional[int]) -> int:
  """Pick the smallest active id after current_id, wrapping to the first.

  active_ids must be sorted ascending.
  """
  if not active_ids:
    raise ConfigurationError('No active lessons seeded.')
  pointer = current_id or 0
  for lesson_id in active_ids:
    if lesson_id > pointer:
      return lesson_id
  return active_ids[0]


def _parse_pointer(value: Optional[str]) -> Optional[int]:
  if value is None:
    return None
  try:
    return int(value)
  except ValueError:
    logger.warning(f'Ignoring malformed rotation pointer: {value!r}')
    return None


class DailyRotation:
  """Decides which lesson is today's lesson."""

  def __init__(self, session: AsyncSession, state: Optional[AppStateStore] = None):
    self.session = session
    self.state = state or AppStateStore(session)
    self.catalog = LessonCatalog(session)

  async def current_pointer(self) -> Optional[int]:
    return _parse_pointer(await self.state.get(LESSON_KEY))

  async def get_today_lesson(self, today: Optional[str | date] = None) -> Lesson:
    """Return today's lesson, advancing the pointer on the first call of a new day.

    Raises:
        ConfigurationError: If no active lessons exist
    """
    if today is None:
      today = today_in_reference_timezone()
    elif isinstance(today, date):
      today = today.isoformat()

    active_ids = await self.catalog.active_ids()
    if not active_ids:
      raise ConfigurationError('No active lessons seeded.')

    stored_day = await self.state.get(DAY_KEY)
    pointer = await self.current_pointer()

    if stored_day != today:
      new_pointer = next_lesson_id(active_ids, pointer)
      await self.state.set(LESSON_KEY, new_pointer)
      await self.state.set(DAY_KEY, today)
      logger.info(f'Rotated daily lesson {pointer} -> {new_pointer} for {today}')
      pointer = new_pointer

    lesson = await self.catalog.get(pointer) if pointer is not None else None
    if lesson is None:
      raise ConfigurationError(f'Rotation pointer references missing lesson {pointer}')
    return lesson

  async def force_rotation(self, today: Optional[str | date] = None) -> Lesson:
    """Reset the day marker and rotate immediately."""
    await self.state.set(DAY_KEY, SENTINEL_DAY)
    return await self.get_today_lesson(today)
