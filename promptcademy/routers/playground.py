"""Lesson playground endpoints."""

import logging
from datetime import date

from fastapi import APIRouter, Request
from pydantic import BaseModel

from ..db import session_scope
from ..errors import NotFoundError
from ..services.accounts import AccountStorage
from ..services.daily import today_in_reference_timezone
from ..services.lessons import LessonCatalog
from ..services.playground import run_lesson_prompt
from ..services.progress import COMPLETED, ProgressStorage
from ..services.stats import StatsStorage
from ..services.user import get_current_user

logger = logging.getLogger(__name__)
router = APIRouter()


class RunRequest(BaseModel):
  user_input: str = ''


@router.post('/run/{lesson_id}')
async def run_lesson(request: Request, lesson_id: int, body: RunRequest):
  """Run the lesson's prompt template with the user's input.

  Returns 404 for an unknown lesson and 500 when OpenAI is not configured
  or the call fails.
  """
  async with session_scope() as session:
    user = await get_current_user(request, AccountStorage(session))
    lesson = await LessonCatalog(session).get(lesson_id)
    if lesson is None:
      raise NotFoundError(f'Lesson {lesson_id} not found')
    completed = lesson.id in await ProgressStorage(session, user.id).completed_lesson_ids()

  ai_text = await run_lesson_prompt(lesson, body.user_input)
  return {
    'ok': True,
    'lesson_id': lesson.id,
    'user_input': body.user_input,
    'ai_text': ai_text,
    'completed': completed,
  }


@router.post('/complete/{lesson_id}')
async def complete_lesson(request: Request, lesson_id: int):
  """Mark a lesson completed for the current user."""
  async with session_scope() as session:
    user = await get_current_user(request, AccountStorage(session))
    summary = await ProgressStorage(session, user.id).record(lesson_id, COMPLETED)
    await StatsStorage(session, user.id).check_in(
      date.fromisoformat(today_in_reference_timezone())
    )
    return {'ok': True, 'lesson_id': lesson_id, 'summary': summary}
