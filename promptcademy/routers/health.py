"""Health check and diagnostic endpoints."""

import logging

from fastapi import APIRouter, Request

from ..db import session_scope
from ..errors import ConfigurationError
from ..services.daily import DAY_KEY, DailyRotation
from ..services.lessons import LessonCatalog

logger = logging.getLogger(__name__)
router = APIRouter()


@router.get('/health')
async def health_check(request: Request):
  """Return health status and the size of the lesson catalog.

  Reports unhealthy (500) when the database cannot be queried.
  """
  async with session_scope() as session:
    lessons = await LessonCatalog(session).count()
  return {
    'status': 'healthy',
    'lessons': lessons,
    'database_available': getattr(request.app.state, 'database_available', False),
  }


@router.get('/debug/state')
async def debug_state():
  """Report today's lesson id and the rotation day marker.

  Reading goes through the rotation, so it rotates on a new day like any
  other reader. dailyLessonId is null when no lesson can be served.
  """
  async with session_scope() as session:
    rotation = DailyRotation(session)
    try:
      lesson_id = (await rotation.get_today_lesson()).id
    except ConfigurationError as e:
      logger.warning(f'No daily lesson for debug state: {e.message}')
      lesson_id = None
    return {'ok': True, 'dailyLessonId': lesson_id, 'day': await rotation.state.get(DAY_KEY)}
