"""Lesson catalog endpoints."""

import logging
from typing import Optional

from fastapi import APIRouter, Query

from ..db import session_scope
from ..errors import NotFoundError
from ..services.lessons import ALL_TRACKS, LessonCatalog

logger = logging.getLogger(__name__)
router = APIRouter()


@router.get('/lessons')
async def get_lessons(cat: Optional[str] = Query(ALL_TRACKS, description='Track to filter by')):
  """List lessons in catalog order, optionally filtered by track."""
  async with session_scope() as session:
    catalog = LessonCatalog(session)
    lessons = await catalog.get_all(track=cat)
    return {
      'ok': True,
      'active_track': cat or ALL_TRACKS,
      'tracks': [ALL_TRACKS] + await catalog.tracks(),
      'lessons': [lesson.to_dict() for lesson in lessons],
    }


@router.get('/lessons/{lesson_id}')
async def get_lesson(lesson_id: int):
  """Get a single lesson."""
  async with session_scope() as session:
    lesson = await LessonCatalog(session).get(lesson_id)
    if not lesson:
      raise NotFoundError(f'Lesson {lesson_id} not found')
    return {'ok': True, 'lesson': lesson.to_dict()}
