"""Rubric scoring of learner deliverables.

Sends the deliverable and rubric to an OpenAI-compatible chat completions
endpoint and validates the reply into a fixed result schema. The upstream
reply is never trusted: item scores are clamped to each criterion's max, the
total to [0, 100], and an unparsable reply produces a neutral result instead
of an error.
"""

import asyncio
import json
import logging
import math
import os
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic import ValidationError as PydanticValidationError

from ..errors import UpstreamError, ValidationError
from . import llm
from .coach_prompt import get_coach_system_prompt

logger = logging.getLogger(__name__)

_DEFAULT_MODEL = 'gpt-4o-mini'

NEUTRAL_TOTAL = 50

MISSING_KEY_MESSAGE = (
  'AI scoring is not configured. Set OPENAI_API_KEY in the server environment '
  '(or .env.local) and restart the app.'
)


class RubricItem(BaseModel):
  """A named scoring criterion."""

  name: str = Field(min_length=1)
  max: float = Field(gt=0)


class ScoreItem(BaseModel):
  name: str
  score: float
  max: float
  reason: str = ''


class ScoreResult(BaseModel):
  """Validated coach response."""

  model_config = ConfigDict(populate_by_name=True)

  scores: list[ScoreItem] = Field(default_factory=list)
  total: int = 0
  summary: str = ''
  actions: list[str] = Field(default_factory=list)
  xp_awarded: int = Field(default=0, alias='xpAwarded')
  degraded: bool = False
  error: Optional[str] = None

  def to_response(self) -> dict[str, Any]:
    return self.model_dump(by_alias=True, exclude_none=True)


def xp_for_total(total: float) -> int:
  """XP awarded for a scored submission."""
  if total >= 80:
    return 150
  if total >= 60:
    return 60
  return 20


def clamp(value: float, low: float, high: float) -> float:
  return max(low, min(high, value))


def _as_number(value: Any) -> Optional[float]:
  """Finite float from a reply field, or None when it is missing or unusable.

  NaN, infinities and integers too large for a float count as missing.
  """
  if isinstance(value, bool) or not isinstance(value, (int, float, str)):
    return None
  try:
    number = float(value.strip() if isinstance(value, str) else value)
  except (OverflowError, ValueError):
    return None
  if not math.isfinite(number):
    return None
  return number


def parse_rubric(rubric: Any) -> list[RubricItem]:
  """Validate a rubric payload into RubricItems.

  Raises:
      ValidationError: If the rubric is missing, empty or malformed
  """
  if not rubric or not isinstance(rubric, list):
    raise ValidationError('Missing deliverable or rubric')
  try:
    return [RubricItem.model_validate(item) for item in rubric]
  except PydanticValidationError as e:
    raise ValidationError(f'Invalid rubric: {e.errors()[0]["msg"]}') from e


def unconfigured_result(rubric: list[RubricItem]) -> ScoreResult:
  """Zero score with remediation steps, used when no API key is set."""
  return ScoreResult(
    scores=[ScoreItem(name=item.name, score=0, max=item.max) for item in rubric],
    total=0,
    summary=MISSING_KEY_MESSAGE,
    actions=[MISSING_KEY_MESSAGE],
    xp_awarded=0,
    error='Coach scoring is not configured',
  )


def neutral_result(rubric: list[RubricItem], reason: str) -> ScoreResult:
  """Mid-range result used when the model reply cannot be parsed."""
  return ScoreResult(
    scores=[
      ScoreItem(name=item.name, score=round(item.max / 2, 1), max=item.max, reason=reason)
      for item in rubric
    ],
    total=NEUTRAL_TOTAL,
    summary='The coach reply could not be read, so a neutral score was recorded. '
            'Try submitting again for detailed feedback.',
    actions=[],
    xp_awarded=xp_for_total(NEUTRAL_TOTAL),
    degraded=True,
  )


def failure_payload(rubric: list[RubricItem], detail: str) -> dict[str, Any]:
  """Safe response body for an upstream failure."""
  return ScoreResult(
    scores=[ScoreItem(name=item.name, score=0, max=item.max) for item in rubric],
    total=0,
    summary='Coach scoring is temporarily unavailable. Your work was not scored; please retry.',
    actions=[],
    xp_awarded=0,
    error=f'Coach scoring failed: {detail}',
  ).to_response()


def normalize_reply(parsed: dict[str, Any], rubric: list[RubricItem]) -> ScoreResult:
  """Coerce an arbitrary JSON reply into a ScoreResult.

  Criteria the model skipped score 0 and unknown names are dropped. A
  missing total is derived from the item scores.
  """
  by_name: dict[str, dict] = {}
  raw_scores = parsed.get('scores')
  if isinstance(raw_scores, list):
    for entry in raw_scores:
      if isinstance(entry, dict) and isinstance(entry.get('name'), str):
        by_name.setdefault(entry['name'], entry)

  scores = []
  for item in rubric:
    entry = by_name.get(item.name, {})
    value = _as_number(entry.get('score'))
    reason = entry.get('reason')
    scores.append(
      ScoreItem(
        name=item.name,
        score=clamp(value, 0, item.max) if value is not None else 0,
        max=item.max,
        reason=str(reason) if reason is not None else ('' if value is not None else 'Not scored'),
      )
    )

  total = _as_number(parsed.get('total'))
  if total is None:
    possible = sum(item.max for item in rubric)
    total = sum(s.score for s in scores) / possible * 100 if possible else 0
  total = int(round(clamp(total, 0, 100)))

  raw_actions = parsed.get('actions')
  actions = [str(a) for a in raw_actions if a is not None] if isinstance(raw_actions, list) else []

  summary = parsed.get('summary')
  return ScoreResult(
    scores=scores,
    total=total,
    summary=str(summary) if summary is not None else '',
    actions=actions,
    xp_awarded=xp_for_total(total),
  )


async def score_deliverable(
  deliverable: Optional[str],
  rubric: Any,
  context: Optional[dict[str, Any]] = None,
  model: Optional[str] = None,
) -> ScoreResult:
  """Score a deliverable against a rubric.

  Args:
      deliverable: The learner's work
      rubric: List of {name, max} criteria
      context: Optional lesson details passed through to the model
      model: Chat model name, defaults to COACH_MODEL

  Returns:
      A validated ScoreResult. Without an API key the result has total 0
      and a remediation message; an unparsable reply yields a neutral result.

  Raises:
      ValidationError: If deliverable or rubric is missing or malformed
      UpstreamError: If the completion call itself fails
  """
  if not deliverable or not str(deliverable).strip():
    raise ValidationError('Missing deliverable or rubric')
  items = parse_rubric(rubric)

  client = llm.get_client()
  if client is None:
    logger.warning('OPENAI_API_KEY not set - returning unconfigured coach result')
    return unconfigured_result(items)

  model = model or os.environ.get('COACH_MODEL', _DEFAULT_MODEL)
  rubric_payload = [item.model_dump() for item in items]
  messages = [
    {'role': 'system', 'content': get_coach_system_prompt(rubric_payload)},
    {
      'role': 'user',
      'content': json.dumps(
        {'deliverable': deliverable, 'rubric': rubric_payload, 'context': context or {}}
      ),
    },
  ]

  timeout = llm.get_timeout()
  try:
    response = await asyncio.wait_for(
      client.chat.completions.create(
        model=model,
        messages=messages,
        response_format={'type': 'json_object'},
        timeout=timeout,
      ),
      timeout=timeout,
    )
  except asyncio.TimeoutError as e:
    logger.warning(f'Coach scoring timed out after {timeout}s')
    raise UpstreamError('Coach scoring timed out', failure_payload(items, 'timeout')) from e
  except Exception as e:
    logger.error(f'Coach scoring call failed: {e}')
    raise UpstreamError('Coach scoring failed', failure_payload(items, str(e))) from e

  try:
    content = llm.first_message_text(response)
    parsed = json.loads(content)
  except (AttributeError, IndexError, TypeError, ValueError) as e:
    logger.warning(f'Unparsable coach reply, using neutral score: {e}')
    return neutral_result(items, 'Reply could not be parsed')

  if not isinstance(parsed, dict):
    logger.warning('Coach reply was JSON but not an object, using neutral score')
    return neutral_result(items, 'Reply could not be parsed')

  result = normalize_reply(parsed, items)
  logger.info(f'Scored deliverable: total={result.total} xp={result.xp_awarded}')
  return result
