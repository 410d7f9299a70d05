"""Per-user prompt library."""

import logging
from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ..db import Lesson, SavedPrompt
from ..errors import NotFoundError, ValidationError

logger = logging.getLogger(__name__)


class LibraryStorage:
  """User-scoped saved prompt storage operations."""

  def __init__(self, session: AsyncSession, user_id: int):
    self.session = session
    self.user_id = user_id

  async def get_all(self) -> list[SavedPrompt]:
    """Saved prompts, newest first."""
    result = await self.session.execute(
      select(SavedPrompt)
      .where(SavedPrompt.user_id == self.user_id)
      .order_by(SavedPrompt.created_at.desc(), SavedPrompt.id.desc())
    )
    return list(result.scalars().all())

  async def save(
    self,
    title: str,
    input_text: str,
    output_text: str = '',
    lesson_id: Optional[int] = None,
  ) -> SavedPrompt:
    """Add a prompt to the library.

    Raises:
        ValidationError: If title or input_text is blank
        NotFoundError: If lesson_id is given but does not exist
    """
    if not title or not title.strip():
      raise ValidationError('Title is required')
    if not input_text or not input_text.strip():
      raise ValidationError('Prompt text is required')
    if lesson_id is not None and await self.session.get(Lesson, lesson_id) is None:
      raise NotFoundError(f'Lesson {lesson_id} not found')

    prompt = SavedPrompt(
      user_id=self.user_id,
      lesson_id=lesson_id,
      title=title.strip(),
      input_text=input_text,
      output_text=output_text or '',
    )
    self.session.add(prompt)
    await self.session.flush()
    logger.info(f'User {self.user_id} saved prompt {prompt.id}')
    return prompt

  async def save_from_lesson(self, lesson_id: int) -> SavedPrompt:
    """Copy a lesson's prompt template into the library.

    Raises:
        NotFoundError: If the lesson does not exist
    """
    lesson = await self.session.get(Lesson, lesson_id)
    if lesson is None:
      raise NotFoundError(f'Lesson {lesson_id} not found')
    return await self.save(f'From: {lesson.title}', lesson.content, '', lesson_id=lesson.id)
