"""Shared fixtures: an isolated SQLite database per test."""

import asyncio
import os
from types import SimpleNamespace

import pytest

# Must be set before promptcademy.app is imported
os.environ['ENV'] = 'development'


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
  """Keep host configuration out of tests."""
  for name in (
    'OPENAI_API_KEY',
    'OPENAI_BASE_URL',
    'COACH_MODEL',
    'COACH_TIMEOUT_SECONDS',
    'PLAYGROUND_MODEL',
    'LESSON_TIMEZONE',
    'DATABASE_URL',
    'SEED_ON_BOOT',
  ):
    monkeypatch.delenv(name, raising=False)


@pytest.fixture
def database(tmp_path):
  """Point the app at a fresh database file with all tables created."""
  from promptcademy.db import create_tables, dispose_engine, init_database

  init_database(f'sqlite+aiosqlite:///{tmp_path / "test.db"}')
  asyncio.run(create_tables())
  yield
  asyncio.run(dispose_engine())


def insert_lessons(*lessons):
  """Insert lessons given as (id, title, is_active) tuples."""
  from promptcademy.db import Lesson, session_scope

  async def _insert():
    async with session_scope() as session:
      for lesson_id, title, is_active in lessons:
        session.add(
          Lesson(
            id=lesson_id,
            title=title,
            track='general',
            content=f'Content for {title}',
            order=lesson_id,
            is_active=is_active,
          )
        )

  asyncio.run(_insert())


@pytest.fixture
def lessons(database):
  """Catalog of three active lessons with ids 1, 2, 3."""
  insert_lessons((1, 'Roles', True), (2, 'Constraints', True), (3, 'Examples', True))


@pytest.fixture
def client(database):
  from fastapi.testclient import TestClient

  from promptcademy.app import app

  return TestClient(app)


class FakeCompletions:
  """Stands in for client.chat.completions."""

  def __init__(self, content=None, error=None, delay=0):
    self.content = content
    self.error = error
    self.delay = delay
    self.calls = []

  async def create(self, **kwargs):
    self.calls.append(kwargs)
    if self.delay:
      await asyncio.sleep(self.delay)
    if self.error:
      raise self.error
    message = SimpleNamespace(content=self.content)
    return SimpleNamespace(choices=[SimpleNamespace(message=message)])


@pytest.fixture
def fake_openai(monkeypatch):
  """Replace the OpenAI client; returns a function that sets the reply."""
  from promptcademy.services import llm

  def install(content=None, error=None, delay=0):
    completions = FakeCompletions(content=content, error=error, delay=delay)
    fake_client = SimpleNamespace(chat=SimpleNamespace(completions=completions))
    monkeypatch.setattr(llm, 'get_client', lambda: fake_client)
    return completions

  return install


@pytest.fixture
def add_lessons(database):
  return insert_lessons
