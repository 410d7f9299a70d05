"""Lesson playground: run a lesson's prompt template with the learner's input."""

import asyncio
import logging
import os

from ..db import Lesson
from ..errors import ConfigurationError, UpstreamError
from . import llm

logger = logging.getLogger(__name__)

_DEFAULT_MODEL = 'gpt-3.5-turbo-0125'
MAX_TOKENS = 300


def build_prompt(lesson: Lesson, user_input: str) -> str:
  """Lesson template followed by a blank line and the learner's input."""
  return f'{lesson.content}\n\n{user_input}'


async def run_lesson_prompt(lesson: Lesson, user_input: str = '') -> str:
  """Send the lesson prompt to the chat model and return the reply text.

  Raises:
      ConfigurationError: If no API key is set
      UpstreamError: If the completion call fails or times out
  """
  client = llm.get_client()
  if client is None:
    raise ConfigurationError('OpenAI not configured')

  model = os.environ.get('PLAYGROUND_MODEL', _DEFAULT_MODEL)
  timeout = llm.get_timeout()
  try:
    response = await asyncio.wait_for(
      client.chat.completions.create(
        model=model,
        max_tokens=MAX_TOKENS,
        messages=[{'role': 'user', 'content': build_prompt(lesson, user_input or '')}],
        timeout=timeout,
      ),
      timeout=timeout,
    )
  except asyncio.TimeoutError as e:
    logger.warning(f'Playground run for lesson {lesson.id} timed out after {timeout}s')
    raise UpstreamError(
      'Playground run timed out', {'ok': False, 'error': 'Error calling OpenAI: timeout'}
    ) from e
  except Exception as e:
    logger.error(f'Playground run for lesson {lesson.id} failed: {e}')
    raise UpstreamError(
      'Playground run failed', {'ok': False, 'error': f'Error calling OpenAI: {e}'}
    ) from e

  try:
    return llm.first_message_text(response)
  except (AttributeError, IndexError, TypeError):
    logger.warning(f'Playground reply for lesson {lesson.id} had no message')
    return ''
