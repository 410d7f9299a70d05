"""OpenAI-compatible chat client shared by the coach and the playground."""

import os
from typing import Optional

from openai import AsyncOpenAI

_DEFAULT_TIMEOUT_SECONDS = 30.0


def get_client() -> Optional[AsyncOpenAI]:
  """Create an OpenAI client, or None when no API key is configured.

  Retries are disabled; callers bound each call with their own timeout.
  """
  api_key = os.environ.get('OPENAI_API_KEY')
  if not api_key:
    return None
  base_url = os.environ.get('OPENAI_BASE_URL')
  if base_url:
    return AsyncOpenAI(api_key=api_key, base_url=base_url, max_retries=0)
  return AsyncOpenAI(api_key=api_key, max_retries=0)


def get_timeout() -> float:
  return float(os.environ.get('COACH_TIMEOUT_SECONDS', _DEFAULT_TIMEOUT_SECONDS))


def first_message_text(response) -> str:
  """Text of the first choice, or an empty string."""
  return response.choices[0].message.content or ''
