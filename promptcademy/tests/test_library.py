"""Tests for the prompt library."""

import asyncio

import pytest


def _library(fn, email='learner@example.com'):
  from promptcademy.db import session_scope
  from promptcademy.services.accounts import AccountStorage
  from promptcademy.services.library import LibraryStorage

  async def _scoped():
    async with session_scope() as session:
      user = await AccountStorage(session).get_or_provision(email)
      return await fn(LibraryStorage(session, user.id))

  return asyncio.run(_scoped())


def test_save_from_lesson_copies_template(lessons):
  prompt = _library(lambda library: library.save_from_lesson(2))

  assert prompt.title == 'From: Constraints'
  assert prompt.input_text == 'Content for Constraints'
  assert prompt.output_text == ''
  assert prompt.lesson_id == 2


def test_save_from_unknown_lesson_is_not_found(lessons):
  from promptcademy.errors import NotFoundError

  with pytest.raises(NotFoundError):
    _library(lambda library: library.save_from_lesson(999))


def test_save_requires_title_and_text(database):
  from promptcademy.errors import ValidationError

  with pytest.raises(ValidationError):
    _library(lambda library: library.save('  ', 'Summarize this'))
  with pytest.raises(ValidationError):
    _library(lambda library: library.save('Summary', ''))


def test_save_rejects_unknown_lesson(database):
  from promptcademy.errors import NotFoundError

  with pytest.raises(NotFoundError):
    _library(lambda library: library.save('Summary', 'Summarize this', lesson_id=42))


def test_get_all_is_newest_first_and_per_user(lessons):
  _library(lambda library: library.save('First', 'one'))
  _library(lambda library: library.save('Second', 'two', 'reply'))
  _library(lambda library: library.save('Other', 'three'), email='other@example.com')

  prompts = _library(lambda library: library.get_all())

  assert [prompt.title for prompt in prompts] == ['Second', 'First']
  assert prompts[0].to_dict()['output_text'] == 'reply'


def test_library_endpoints(client, lessons):
  assert client.get('/api/library').json() == {'ok': True, 'prompts': []}

  response = client.post('/api/library/save/1')
  assert response.status_code == 200
  assert response.json()['prompt']['title'] == 'From: Roles'

  response = client.post(
    '/api/library',
    json={'title': 'Ad copy', 'input_text': 'Write 3 ads', 'output_text': 'Ad 1...'},
  )
  assert response.status_code == 200

  prompts = client.get('/api/library').json()['prompts']
  assert [prompt['title'] for prompt in prompts] == ['Ad copy', 'From: Roles']
  assert prompts[1]['input_text'] == 'Content for Roles'
  assert prompts[1]['lesson_id'] == 1


def test_library_endpoint_errors(client, lessons):
  assert client.post('/api/library/save/999').status_code == 404

  response = client.post('/api/library', json={'title': '', 'input_text': 'x'})
  assert response.status_code == 400
  assert response.json()['ok'] is False
