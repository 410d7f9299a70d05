"""Daily lesson and progress endpoints.

Mounted without the /api prefix; these paths are what the dashboard widget calls.
"""

import logging
from datetime import date

from fastapi import APIRouter, Request
from pydantic import BaseModel, ConfigDict, Field

from ..db import session_scope
from ..services.accounts import AccountStorage
from ..services.daily import DailyRotation, today_in_reference_timezone
from ..services.progress import ProgressStorage
from ..services.stats import StatsStorage
from ..services.user import get_current_user

logger = logging.getLogger(__name__)
router = APIRouter()


class RecordProgressRequest(BaseModel):
  """Request to record a lesson status."""

  model_config = ConfigDict(populate_by_name=True)

  lesson_id: int = Field(alias='lessonId')
  status: str


@router.get('/lesson/today')
async def get_today_lesson():
  """Get today's lesson, rotating the shared pointer on a new day."""
  async with session_scope() as session:
    lesson = await DailyRotation(session).get_today_lesson()
    return {'ok': True, 'lesson': lesson.to_dict()}


@router.post('/rotate')
async def force_rotate():
  """Force the rotation to advance now. Intended for admins and testing."""
  async with session_scope() as session:
    lesson = await DailyRotation(session).force_rotation()
    logger.info(f'Forced rotation to lesson {lesson.id}')
    return {'ok': True, 'forced': True, 'lesson': lesson.to_dict()}


@router.post('/progress')
async def record_progress(request: Request, body: RecordProgressRequest):
  """Record the current user's status for a lesson."""
  async with session_scope() as session:
    user = await get_current_user(request, AccountStorage(session))
    summary = await ProgressStorage(session, user.id).record(body.lesson_id, body.status)
    await StatsStorage(session, user.id).check_in(
      date.fromisoformat(today_in_reference_timezone())
    )
    return {'ok': True, 'summary': summary}


@router.get('/progress/summary')
async def get_progress_summary(request: Request):
  """List the current user's progress, most recently completed first."""
  async with session_scope() as session:
    user = await get_current_user(request, AccountStorage(session))
    items = await ProgressStorage(session, user.id).get_all()
    return {'ok': True, 'items': items}
