"""Tests for the HTTP endpoints."""

import asyncio
import json

RUBRIC = [{'name': 'Clarity', 'max': 50}, {'name': 'Structure', 'max': 50}]


def test_today_lesson_endpoint(client, lessons):
  response = client.get('/lesson/today')

  assert response.status_code == 200
  data = response.json()
  assert data['ok'] is True
  assert data['lesson']['id'] == 1
  assert data['lesson']['title'] == 'Roles'

  # Same day, same lesson
  assert client.get('/lesson/today').json()['lesson']['id'] == 1


def test_today_lesson_without_catalog_is_500(client):
  response = client.get('/lesson/today')

  assert response.status_code == 500
  assert response.json() == {'ok': False, 'error': 'No active lessons seeded.'}


def test_rotate_forces_next_lesson(client, lessons):
  client.get('/lesson/today')

  response = client.post('/rotate')

  assert response.status_code == 200
  data = response.json()
  assert data['forced'] is True
  assert data['lesson']['id'] == 2
  assert client.get('/lesson/today').json()['lesson']['id'] == 2


def test_record_progress_and_summary(client, lessons):
  response = client.post('/progress', json={'lessonId': 1, 'status': 'completed'})
  assert response.status_code == 200
  assert response.json() == {'ok': True, 'summary': {'completed': 1, 'total': 1}}

  client.post('/progress', json={'lessonId': 2, 'status': 'in_progress'})
  response = client.post('/progress', json={'lessonId': 2, 'status': 'in_progress'})
  assert response.json()['summary'] == {'completed': 1, 'total': 2}

  items = client.get('/progress/summary').json()['items']
  assert [item['lesson_id'] for item in items] == [1, 2]
  assert items[0]['status'] == 'completed'
  assert items[0]['completed_at'] is not None
  assert items[1]['completed_at'] is None


def test_progress_is_per_user(client, lessons):
  client.post('/progress', json={'lessonId': 1, 'status': 'completed'})

  response = client.post(
    '/progress',
    json={'lessonId': 2, 'status': 'completed'},
    headers={'X-Forwarded-User': 'other@example.com'},
  )

  assert response.json()['summary'] == {'completed': 1, 'total': 1}


def test_record_progress_rejects_bad_status(client, lessons):
  response = client.post('/progress', json={'lessonId': 1, 'status': 'done'})

  assert response.status_code == 400
  assert response.json()['ok'] is False


def test_record_progress_unknown_lesson(client, lessons):
  response = client.post('/progress', json={'lessonId': 42, 'status': 'completed'})

  assert response.status_code == 404


def test_coach_score_requires_deliverable_and_rubric(client):
  assert client.post('/api/coach/score', json={'rubric': RUBRIC}).status_code == 400
  assert client.post('/api/coach/score', json={'deliverable': 'text'}).status_code == 400
  response = client.post('/api/coach/score', json={'deliverable': '', 'rubric': RUBRIC})
  assert response.status_code == 400
  assert response.json() == {'ok': False, 'error': 'Missing deliverable or rubric'}


def test_coach_score_unconfigured(client):
  response = client.post('/api/coach/score', json={'deliverable': 'text', 'rubric': RUBRIC})

  assert response.status_code == 500
  data = response.json()
  assert data['total'] == 0
  assert data['xpAwarded'] == 0
  assert 'OPENAI_API_KEY' in data['summary']


def test_coach_score_awards_xp(client, fake_openai):
  fake_openai(json.dumps({
    'scores': [{'name': 'Clarity', 'score': 45}, {'name': 'Structure', 'score': 40}],
    'total': 85,
    'summary': 'Nice',
    'actions': [],
  }))

  response = client.post('/api/coach/score', json={'deliverable': 'text', 'rubric': RUBRIC})

  assert response.status_code == 200
  data = response.json()
  assert data['total'] == 85
  assert data['xpAwarded'] == 150

  stats = client.get('/api/stats').json()['stats']
  assert stats['xp'] == 150
  assert stats['streak'] == 1


def test_coach_score_malformed_reply_is_degraded_not_failed(client, fake_openai):
  fake_openai('not json at all')

  response = client.post('/api/coach/score', json={'deliverable': 'text', 'rubric': RUBRIC})

  assert response.status_code == 200
  data = response.json()
  assert data['total'] == 50
  assert data['degraded'] is True


def test_coach_score_extreme_numbers_are_not_full_marks(client, fake_openai):
  fake_openai(
    '{"total": 1' + '0' * 400 + ', "scores": [{"name": "Clarity", "score": NaN},'
    ' {"name": "Structure", "score": 20}]}'
  )

  response = client.post('/api/coach/score', json={'deliverable': 'text', 'rubric': RUBRIC})

  assert response.status_code == 200
  data = response.json()
  assert data['total'] == 20
  assert data['xpAwarded'] == 20
  assert data['scores'][0]['score'] == 0


def test_coach_score_upstream_failure_returns_fallback(client, fake_openai):
  fake_openai(error=RuntimeError('boom'))

  response = client.post('/api/coach/score', json={'deliverable': 'text', 'rubric': RUBRIC})

  assert response.status_code == 500
  data = response.json()
  assert data['total'] == 0
  assert data['xpAwarded'] == 0
  assert data['error'].startswith('Coach scoring failed')


def test_signup_login_and_me(client):
  response = client.post(
    '/api/signup',
    json={'name': 'Ada', 'email': 'Ada@Example.com', 'password': 'secret'},
  )
  assert response.status_code == 200
  assert response.json()['user']['email'] == 'ada@example.com'

  me = client.get('/api/me').json()['user']
  assert me['email'] == 'ada@example.com'
  assert me['plan'] == 'free'

  client.post('/api/logout')
  assert client.get('/api/me').json()['user']['email'] == 'dev-user@local'

  response = client.post('/api/login', json={'email': 'ADA@example.com', 'password': 'secret'})
  assert response.status_code == 200
  assert client.get('/api/me').json()['user']['email'] == 'ada@example.com'


def test_signup_duplicate_email_is_conflict(client):
  client.post('/api/signup', json={'email': 'ada@example.com', 'password': 'secret'})

  response = client.post('/api/signup', json={'email': 'ADA@example.com', 'password': 'other'})

  assert response.status_code == 409
  assert response.json() == {'ok': False, 'error': 'Email already exists'}


def test_login_with_wrong_password(client):
  client.post('/api/signup', json={'email': 'ada@example.com', 'password': 'secret'})

  response = client.post('/api/login', json={'email': 'ada@example.com', 'password': 'nope'})

  assert response.status_code == 401
  assert response.json()['error'] == 'Invalid credentials'


def test_settings_success_upgrades_plan(client):
  assert client.get('/api/settings').json()['user']['plan'] == 'free'

  data = client.get('/api/settings', params={'success': 'true'}).json()

  assert data['user']['plan'] == 'paid'
  assert data['message'] == "You're upgraded!"


def test_lessons_catalog_filter(client):
  from promptcademy.db import session_scope
  from promptcademy.services.lessons import seed_lessons

  async def _seed():
    async with session_scope() as session:
      await seed_lessons(session)

  asyncio.run(_seed())

  data = client.get('/api/lessons').json()
  assert len(data['lessons']) == 4
  assert 'marketing' in data['tracks']

  data = client.get('/api/lessons', params={'cat': 'hr'}).json()
  assert [lesson['track'] for lesson in data['lessons']] == ['hr']

  lesson_id = data['lessons'][0]['id']
  assert client.get(f'/api/lessons/{lesson_id}').json()['lesson']['track'] == 'hr'
  assert client.get('/api/lessons/999').status_code == 404


def test_dashboard(client, lessons):
  client.post('/progress', json={'lessonId': 2, 'status': 'completed'})

  data = client.get('/api/dashboard').json()

  assert data['completed_ids'] == [2]
  assert data['total_count'] == 3
  assert data['progress_pct'] == 33
  assert data['daily']['id'] == 1
  assert [badge['id'] for badge in data['stats']['badges']] == ['first-lesson']


def test_health(client, lessons):
  response = client.get('/api/health')

  assert response.status_code == 200
  assert response.json()['status'] == 'healthy'
  assert response.json()['lessons'] == 3
