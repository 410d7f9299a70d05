"""API routers module."""

from .account import router as account_router
from .challenge import router as challenge_router
from .coach import router as coach_router
from .daily import router as daily_router
from .health import router as health_router
from .lessons import router as lessons_router
from .library import router as library_router
from .playground import router as playground_router
from .stats import router as stats_router

__all__ = [
  'account_router',
  'challenge_router',
  'coach_router',
  'daily_router',
  'health_router',
  'lessons_router',
  'library_router',
  'playground_router',
  'stats_router',
]
