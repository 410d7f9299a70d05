"""Alembic environment for PromptCademy migrations."""

from logging.config import fileConfig

from alembic import context
from sqlalchemy import engine_from_config, pool

from promptcademy.db.database import get_sync_database_url
from promptcademy.db.models import Base

config = context.config

if config.config_file_name is not None and config.attributes.get('configure_logger', True):
  fileConfig(config.config_file_name, disable_existing_loggers=False)

if not config.get_main_option('sqlalchemy.url'):
  config.set_main_option('sqlalchemy.url', get_sync_database_url())

target_metadata = Base.metadata


def run_migrations_offline() -> None:
  """Emit SQL without a live connection."""
  context.configure(
    url=config.get_main_option('sqlalchemy.url'),
    target_metadata=target_metadata,
    literal_binds=True,
    dialect_opts={'paramstyle': 'named'},
  )
  with context.begin_transaction():
    context.run_migrations()


def run_migrations_online() -> None:
  """Run migrations against the configured database."""
  connectable = engine_from_config(
    config.get_section(config.config_ini_section, {}),
    prefix='sqlalchemy.',
    poolclass=pool.NullPool,
  )
  with connectable.connect() as connection:
    context.configure(connection=connection, target_metadata=target_metadata)
    with context.begin_transaction():
      context.run_migrations()


if context.is_offline_mode():
  run_migrations_offline()
else:
  run_migrations_online()
