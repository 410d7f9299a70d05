"""Database module."""

from .database import (
  create_tables,
  dispose_engine,
  get_database_url,
  get_engine,
  get_session,
  get_session_factory,
  init_database,
  run_migrations,
  session_scope,
)
from .models import (
  AppState,
  Badge,
  Base,
  Challenge,
  ChallengeEntry,
  Lesson,
  Progress,
  SavedPrompt,
  User,
  UserStats,
)

__all__ = [
  'AppState',
  'Badge',
  'Base',
  'Challenge',
  'ChallengeEntry',
  'Lesson',
  'Progress',
  'SavedPrompt',
  'User',
  'UserStats',
  'create_tables',
  'dispose_engine',
  'get_database_url',
  'get_engine',
  'get_session',
  'get_session_factory',
  'init_database',
  'run_migrations',
  'session_scope',
]
