"""XP/streak/badge and dashboard endpoints."""

import logging
from datetime import date

from fastapi import APIRouter, Query, Request

from ..db import session_scope
from ..errors import ConfigurationError
from ..services.accounts import AccountStorage
from ..services.daily import DailyRotation, today_in_reference_timezone
from ..services.lessons import ALL_TRACKS, LessonCatalog
from ..services.progress import ProgressStorage
from ..services.stats import StatsStorage
from ..services.user import get_current_user

logger = logging.getLogger(__name__)
router = APIRouter()


@router.get('/stats')
async def get_stats(request: Request):
  """Get the current user's XP, streak and badges."""
  async with session_scope() as session:
    user = await get_current_user(request, AccountStorage(session))
    return {'ok': True, 'stats': await StatsStorage(session, user.id).snapshot()}


@router.post('/stats/check-in')
async def check_in(request: Request):
  """Record today's visit for the streak counter."""
  async with session_scope() as session:
    user = await get_current_user(request, AccountStorage(session))
    stats = StatsStorage(session, user.id)
    await stats.check_in(date.fromisoformat(today_in_reference_timezone()))
    return {'ok': True, 'stats': await stats.snapshot()}


@router.get('/dashboard')
async def get_dashboard(request: Request, cat: str = Query(ALL_TRACKS)):
  """Lessons, completion percentage, daily lesson and stats in one payload."""
  async with session_scope() as session:
    user = await get_current_user(request, AccountStorage(session))
    catalog = LessonCatalog(session)
    lessons = await catalog.get_all(track=cat)
    total_count = await catalog.count()
    completed_ids = await ProgressStorage(session, user.id).completed_lesson_ids()

    try:
      daily = (await DailyRotation(session).get_today_lesson()).to_dict()
    except ConfigurationError as e:
      logger.warning(f'Dashboard without daily lesson: {e.message}')
      daily = None

    completed_count = len(completed_ids)
    return {
      'ok': True,
      'active_track': cat,
      'lessons': [lesson.to_dict() for lesson in lessons],
      'completed_ids': completed_ids,
      'completed_count': completed_count,
      'total_count': total_count,
      'progress_pct': round(completed_count / total_count * 100) if total_count else 0,
      'daily': daily,
      'stats': await StatsStorage(session, user.id).snapshot(),
    }
