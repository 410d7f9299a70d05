"""FastAPI app for PromptCademy."""

import asyncio
import logging
import os
from contextlib import asynccontextmanager

# Configure logging BEFORE importing other modules
logging.basicConfig(
  level=logging.INFO,
  format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
  handlers=[
    logging.StreamHandler(),
  ],
)

from dotenv import load_dotenv  # noqa: E402
from fastapi import FastAPI, Request  # noqa: E402
from fastapi.responses import JSONResponse  # noqa: E402
from starlette.middleware.cors import CORSMiddleware  # noqa: E402
from starlette.middleware.sessions import SessionMiddleware  # noqa: E402

from .db import (  # noqa: E402
  create_tables,
  dispose_engine,
  init_database,
  run_migrations,
  session_scope,
)
from .errors import PromptCademyError, UpstreamError  # noqa: E402
from .routers import (  # noqa: E402
  account_router,
  challenge_router,
  coach_router,
  daily_router,
  health_router,
  lessons_router,
  library_router,
  playground_router,
  stats_router,
)
from .services.challenges import seed_challenges  # noqa: E402
from .services.lessons import seed_lessons  # noqa: E402

logger = logging.getLogger(__name__)

# Load environment variables
env_local_loaded = load_dotenv(dotenv_path='.env.local')
env = os.getenv('ENV', 'development' if env_local_loaded else 'production')

if env_local_loaded:
  logger.info(f'Loaded .env.local (ENV={env})')
else:
  logger.info(f'Using system environment variables (ENV={env})')


@asynccontextmanager
async def lifespan(app: FastAPI):
  """Async lifespan context manager for startup/shutdown events."""
  logger.info('Starting application...')

  app.state.database_available = False
  logger.info('Initializing database...')
  try:
    init_database()

    # Run migrations synchronously before serving requests
    try:
      await asyncio.to_thread(run_migrations)
    except Exception as e:
      logger.warning(f'Migration failed (will try create_tables fallback): {e}')
      await create_tables()
      logger.info('Created tables via fallback (create_tables)')

    app.state.database_available = True
  except Exception as e:
    logger.error(f'Database initialization failed: {e}')
    raise

  if os.environ.get('SEED_ON_BOOT', '').lower() == 'true':
    async with session_scope() as session:
      await seed_lessons(session)
      await seed_challenges(session)

  if not os.environ.get('OPENAI_API_KEY'):
    logger.warning('OPENAI_API_KEY not set - coach scoring will return unconfigured results')

  yield

  logger.info('Shutting down application...')
  await dispose_engine()


app = FastAPI(
  title='PromptCademy',
  description='Daily prompt-engineering lessons with rubric coaching',
  lifespan=lifespan,
)


@app.exception_handler(UpstreamError)
async def upstream_exception_handler(request: Request, exc: UpstreamError):
  """Return the safe fallback payload instead of the upstream error."""
  logger.warning(f'Upstream failure for {request.method} {request.url.path}: {exc.message}')
  return JSONResponse(
    status_code=exc.status_code,
    content=exc.fallback or {'ok': False, 'error': exc.message},
  )


@app.exception_handler(PromptCademyError)
async def app_exception_handler(request: Request, exc: PromptCademyError):
  """Convert service errors into the JSON error envelope."""
  if exc.status_code >= 500:
    logger.error(f'{type(exc).__name__} for {request.method} {request.url.path}: {exc.message}')
  return JSONResponse(
    status_code=exc.status_code,
    content={'ok': False, 'error': exc.message},
  )


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
  """Log all unhandled exceptions."""
  logger.exception(f'Unhandled exception for {request.method} {request.url}: {exc}')
  return JSONResponse(
    status_code=500,
    content={'ok': False, 'error': 'Internal Server Error'},
  )


app.add_middleware(
  SessionMiddleware,
  secret_key=os.environ.get('SESSION_SECRET', 'dev-secret'),
  https_only=env == 'production',
)

# Configure CORS - only needed in development
# (production serves the frontend from the same origin)
if env == 'development':
  allowed_origins = ['http://localhost:3000', 'http://localhost:5173']
  logger.info(f'CORS allowed origins: {allowed_origins}')
  app.add_middleware(
    CORSMiddleware,
    allow_origins=allowed_origins,
    allow_credentials=True,
    allow_methods=['*'],
    allow_headers=['*'],
  )
else:
  logger.info('Production mode: CORS middleware not added (same-origin)')

API_PREFIX = '/api'

# Include routers
app.include_router(daily_router, tags=['daily'])
app.include_router(lessons_router, prefix=API_PREFIX, tags=['lessons'])
app.include_router(coach_router, prefix=API_PREFIX, tags=['coach'])
app.include_router(playground_router, prefix=API_PREFIX, tags=['playground'])
app.include_router(library_router, prefix=API_PREFIX, tags=['library'])
app.include_router(challenge_router, prefix=API_PREFIX, tags=['challenge'])
app.include_router(account_router, prefix=API_PREFIX, tags=['account'])
app.include_router(stats_router, prefix=API_PREFIX, tags=['stats'])
app.include_router(health_router, prefix=API_PREFIX, tags=['health'])
