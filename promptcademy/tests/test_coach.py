"""Tests for coach scoring."""

import asyncio
import json

import pytest

RUBRIC = [{'name': 'Clarity', 'max': 40}, {'name': 'Structure', 'max': 60}]


def _score(deliverable='Role: analyst. Goal: summarize.', rubric=RUBRIC, **kwargs):
  from promptcademy.services.coach import score_deliverable

  return asyncio.run(score_deliverable(deliverable, rubric, **kwargs))


def _reply(total, **extra):
  body = {
    'scores': [
      {'name': 'Clarity', 'score': 30, 'reason': 'Clear goal'},
      {'name': 'Structure', 'score': 45, 'reason': 'Steps listed'},
    ],
    'total': total,
    'summary': 'Solid work.',
    'actions': ['Add constraints'],
  }
  body.update(extra)
  return json.dumps(body)


@pytest.mark.parametrize('total,xp', [(85, 150), (80, 150), (65, 60), (60, 60), (10, 20)])
def test_xp_thresholds(fake_openai, total, xp):
  fake_openai(_reply(total))

  result = _score()

  assert result.total == total
  assert result.xp_awarded == xp


def test_scored_result_shape(fake_openai):
  fake_openai(_reply(85))

  response = _score().to_response()

  assert response['xpAwarded'] == 150
  assert response['summary'] == 'Solid work.'
  assert response['actions'] == ['Add constraints']
  assert [s['name'] for s in response['scores']] == ['Clarity', 'Structure']
  assert response['scores'][0]['score'] == 30
  assert 'error' not in response


def test_prompt_has_system_and_json_user_message(fake_openai):
  completions = fake_openai(_reply(70))

  _score(context={'lesson': 'Roles'}, model='gpt-test')

  call = completions.calls[0]
  assert call['model'] == 'gpt-test'
  assert call['response_format'] == {'type': 'json_object'}
  assert call['timeout'] == 30.0
  system, user = call['messages']
  assert system['role'] == 'system'
  assert 'Clarity' in system['content']
  payload = json.loads(user['content'])
  assert payload['deliverable'] == 'Role: analyst. Goal: summarize.'
  assert payload['rubric'] == [{'name': 'Clarity', 'max': 40.0}, {'name': 'Structure', 'max': 60.0}]
  assert payload['context'] == {'lesson': 'Roles'}


def test_total_is_clamped(fake_openai):
  fake_openai(_reply(140))
  assert _score().total == 100

  fake_openai(_reply(-5))
  result = _score()
  assert result.total == 0
  assert result.xp_awarded == 20


def test_item_scores_are_clamped_and_missing_items_zeroed(fake_openai):
  fake_openai(json.dumps({
    'scores': [
      {'name': 'Clarity', 'score': 99},
      {'name': 'Bonus', 'score': 10},
    ],
    'total': 50,
  }))

  scores = {s.name: s for s in _score().scores}

  assert set(scores) == {'Clarity', 'Structure'}
  assert scores['Clarity'].score == 40
  assert scores['Structure'].score == 0
  assert scores['Structure'].reason == 'Not scored'


def test_missing_total_is_derived_from_scores(fake_openai):
  fake_openai(json.dumps({'scores': [
    {'name': 'Clarity', 'score': 40},
    {'name': 'Structure', 'score': 30},
  ]}))

  result = _score()

  assert result.total == 70
  assert result.xp_awarded == 60


def test_non_json_reply_falls_back_to_neutral(fake_openai):
  fake_openai('Great job! 9/10')

  result = _score()

  assert result.degraded is True
  assert result.total == 50
  assert [s.score for s in result.scores] == [20, 30]
  assert result.error is None


def test_json_array_reply_falls_back_to_neutral(fake_openai):
  fake_openai('[1, 2, 3]')

  result = _score()

  assert result.degraded is True
  assert result.total == 50


def test_empty_reply_falls_back_to_neutral(fake_openai):
  fake_openai(None)

  assert _score().degraded is True


def test_missing_credential_returns_zero_with_remediation():
  result = _score()

  assert result.total == 0
  assert result.xp_awarded == 0
  assert 'OPENAI_API_KEY' in result.summary
  assert result.actions
  assert result.error


def test_missing_deliverable_is_validation_error(fake_openai):
  from promptcademy.errors import ValidationError

  fake_openai(_reply(85))

  with pytest.raises(ValidationError):
    _score(deliverable='')
  with pytest.raises(ValidationError):
    _score(deliverable='   ')
  with pytest.raises(ValidationError):
    _score(deliverable=None)


def test_invalid_rubric_is_validation_error(fake_openai):
  from promptcademy.errors import ValidationError

  fake_openai(_reply(85))

  with pytest.raises(ValidationError):
    _score(rubric=[])
  with pytest.raises(ValidationError):
    _score(rubric=[{'name': 'Clarity'}])
  with pytest.raises(ValidationError):
    _score(rubric=[{'name': 'Clarity', 'max': 0}])
  with pytest.raises(ValidationError):
    _score(rubric='Clarity')


def test_upstream_failure_raises_with_fallback(fake_openai):
  from promptcademy.errors import UpstreamError

  fake_openai(error=RuntimeError('connection reset'))

  with pytest.raises(UpstreamError) as exc_info:
    _score()

  fallback = exc_info.value.fallback
  assert fallback['total'] == 0
  assert fallback['xpAwarded'] == 0
  assert 'connection reset' in fallback['error']
  assert [s['name'] for s in fallback['scores']] == ['Clarity', 'Structure']


def test_timeout_raises_with_fallback(fake_openai, monkeypatch):
  from promptcademy.errors import UpstreamError

  monkeypatch.setenv('COACH_TIMEOUT_SECONDS', '0.01')
  completions = fake_openai(_reply(85), delay=1)

  with pytest.raises(UpstreamError) as exc_info:
    _score()

  assert exc_info.value.message == 'Coach scoring timed out'
  assert exc_info.value.fallback['error'] == 'Coach scoring failed: timeout'
  assert exc_info.value.fallback['xpAwarded'] == 0
  assert completions.calls[0]['timeout'] == 0.01


def test_huge_integer_total_is_ignored(fake_openai):
  fake_openai(_reply(10 ** 400))

  result = _score()

  # Derived from the item scores: (30 + 45) / 100
  assert result.total == 75
  assert result.xp_awarded == 60
  assert result.degraded is False


def test_huge_integer_item_score_is_not_scored(fake_openai):
  fake_openai(json.dumps({
    'scores': [
      {'name': 'Clarity', 'score': 10 ** 400},
      {'name': 'Structure', 'score': 45},
    ],
    'total': 45,
  }))

  scores = {s.name: s for s in _score().scores}

  assert scores['Clarity'].score == 0
  assert scores['Clarity'].reason == 'Not scored'
  assert scores['Structure'].score == 45


def test_integer_beyond_parser_digit_limit_does_not_fail(fake_openai):
  import sys

  fake_openai('{"total": 1' + '0' * 5000 + '}')

  result = _score()

  if hasattr(sys, 'get_int_max_str_digits'):
    # json.loads rejects the reply outright
    assert result.degraded is True
    assert result.total == 50
  else:
    assert result.total == 0
  assert result.error is None


def test_non_finite_numbers_count_as_missing(fake_openai):
  fake_openai(
    '{"total": NaN, "scores": [{"name": "Clarity", "score": NaN},'
    ' {"name": "Structure", "score": 30}]}'
  )

  result = _score()

  scores = {s.name: s for s in result.scores}
  assert scores['Clarity'].score == 0
  assert scores['Clarity'].reason == 'Not scored'
  assert result.total == 30
  assert result.xp_awarded == 20


def test_infinite_numbers_count_as_missing(fake_openai):
  fake_openai(json.dumps({
    'scores': [
      {'name': 'Clarity', 'score': '-Infinity'},
      {'name': 'Structure', 'score': 'nan'},
    ],
    'total': float('inf'),
  }))

  result = _score()

  assert [s.score for s in result.scores] == [0, 0]
  assert result.total == 0
  assert result.xp_awarded == 20
