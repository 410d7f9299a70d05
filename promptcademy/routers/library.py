"""Prompt library endpoints."""

import logging
from typing import Optional

from fastapi import APIRouter, Request
from pydantic import BaseModel

from ..db import session_scope
from ..services.accounts import AccountStorage
from ..services.library import LibraryStorage
from ..services.user import get_current_user

logger = logging.getLogger(__name__)
router = APIRouter()


class SavePromptRequest(BaseModel):
  """Request to save a prompt to the library."""

  title: str
  input_text: str
  output_text: str = ''
  lesson_id: Optional[int] = None


@router.get('/library')
async def list_prompts(request: Request):
  """List the current user's saved prompts, newest first."""
  async with session_scope() as session:
    user = await get_current_user(request, AccountStorage(session))
    prompts = await LibraryStorage(session, user.id).get_all()
    return {'ok': True, 'prompts': [prompt.to_dict() for prompt in prompts]}


@router.post('/library')
async def save_prompt(request: Request, body: SavePromptRequest):
  async with session_scope() as session:
    user = await get_current_user(request, AccountStorage(session))
    prompt = await LibraryStorage(session, user.id).save(
      body.title, body.input_text, body.output_text, lesson_id=body.lesson_id
    )
    return {'ok': True, 'prompt': prompt.to_dict()}


@router.post('/library/save/{lesson_id}')
async def save_lesson_prompt(request: Request, lesson_id: int):
  """Save a lesson's prompt template as 'From: <lesson title>'."""
  async with session_scope() as session:
    user = await get_current_user(request, AccountStorage(session))
    prompt = await LibraryStorage(session, user.id).save_from_lesson(lesson_id)
    return {'ok': True, 'prompt': prompt.to_dict()}
