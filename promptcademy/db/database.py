"""Async database connection and session management.

Uses SQLite via aiosqlite by default and PostgreSQL via the psycopg3 async
driver when DATABASE_URL points at a Postgres server.
"""

import logging
import os
from contextlib import asynccontextmanager
from pathlib import Path
from typing import AsyncGenerator, Optional

from sqlalchemy.ext.asyncio import (
  AsyncEngine,
  AsyncSession,
  async_sessionmaker,
  create_async_engine,
)
from sqlalchemy.pool import NullPool

from .models import Base

logger = logging.getLogger(__name__)

DEFAULT_DATABASE_URL = 'sqlite+aiosqlite:///./promptcademy.db'

# Global engine and session factory
_engine: Optional[AsyncEngine] = None
_async_session_maker: Optional[async_sessionmaker[AsyncSession]] = None


def get_database_url() -> str:
  """Get database URL from environment.

  Converts standard PostgreSQL and SQLite URLs to their async driver format.
  """
  url = os.environ.get('DATABASE_URL') or DEFAULT_DATABASE_URL
  return _prepare_async_url(url)


def _prepare_async_url(url: str) -> str:
  if url.startswith('postgresql://'):
    url = url.replace('postgresql://', 'postgresql+psycopg://', 1)
  elif url.startswith('postgres://'):
    url = url.replace('postgres://', 'postgresql+psycopg://', 1)
  elif url.startswith('sqlite://'):
    url = url.replace('sqlite://', 'sqlite+aiosqlite://', 1)
  return url


def get_sync_database_url(url: Optional[str] = None) -> str:
  """Get the synchronous equivalent of the database URL (used by Alembic)."""
  url = url or get_database_url()
  return url.replace('sqlite+aiosqlite://', 'sqlite://', 1)


def init_database(database_url: Optional[str] = None) -> AsyncEngine:
  """Initialize async database connection.

  Replaces any previously initialized engine, so tests can point each run at
  an isolated database.
  """
  global _engine, _async_session_maker

  url = _prepare_async_url(database_url) if database_url else get_database_url()

  if url.startswith('sqlite'):
    logger.info(f'Using SQLite database: {url}')
    _engine = create_async_engine(url, poolclass=NullPool, echo=False)
  else:
    logger.info('Using PostgreSQL database from DATABASE_URL')
    _engine = create_async_engine(
      url,
      pool_size=int(os.environ.get('DB_POOL_SIZE', '10')),
      max_overflow=int(os.environ.get('DB_MAX_OVERFLOW', '20')),
      pool_pre_ping=True,
      pool_recycle=int(os.environ.get('DB_POOL_RECYCLE_INTERVAL', '1800')),
      echo=False,
    )

  _async_session_maker = async_sessionmaker(
    _engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autoflush=False,
  )

  return _engine


def get_engine() -> AsyncEngine:
  """Get the database engine, initializing if needed."""
  global _engine
  if _engine is None:
    init_database()
  return _engine


def get_session_factory() -> async_sessionmaker[AsyncSession]:
  """Get the async session factory, initializing if needed."""
  global _async_session_maker
  if _async_session_maker is None:
    init_database()
  return _async_session_maker


async def get_session() -> AsyncSession:
  """Create a new async database session."""
  factory = get_session_factory()
  return factory()


@asynccontextmanager
async def session_scope() -> AsyncGenerator[AsyncSession, None]:
  """Provide a transactional scope around a series of operations."""
  session = await get_session()
  try:
    yield session
    await session.commit()
  except Exception:
    await session.rollback()
    raise
  finally:
    await session.close()


async def create_tables():
  """Create all database tables asynchronously."""
  engine = get_engine()
  async with engine.begin() as conn:
    await conn.run_sync(Base.metadata.create_all)


def run_migrations():
  """Upgrade the database to the latest Alembic revision.

  Blocking; call through asyncio.to_thread from async code.
  """
  from alembic import command
  from alembic.config import Config

  root = Path(__file__).resolve().parent.parent.parent
  config = Config(str(root / 'alembic.ini'))
  config.set_main_option('script_location', str(root / 'alembic'))
  config.set_main_option('sqlalchemy.url', get_sync_database_url())
  config.attributes['configure_logger'] = False
  command.upgrade(config, 'head')
  logger.info('Database migrations applied')


async def dispose_engine():
  """Dispose of the engine's connection pool on shutdown."""
  global _engine, _async_session_maker
  if _engine is not None:
    await _engine.dispose()
  _engine = None
  _async_session_maker = None
