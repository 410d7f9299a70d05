"""User service for resolving the current learner.

Identity sources, in order:
- the signed session cookie set by /api/login and /api/signup
- the X-Forwarded-User header set by an authenticating proxy
- in development, a fixed local user
"""

import logging
import os

from fastapi import Request

from ..db import User
from ..errors import AuthenticationError
from .accounts import AccountStorage

logger = logging.getLogger(__name__)

DEV_USER_EMAIL = 'dev-user@local'
SESSION_USER_KEY = 'user_email'


def _is_local_development() -> bool:
  """Check if running in local development mode."""
  return os.getenv('ENV', 'development') == 'development'


def get_current_user_email(request: Request) -> str:
  """Get the current user's email from the request.

  Raises:
      AuthenticationError: If no identity is present outside development
  """
  session = request.scope.get('session') or {}
  user = session.get(SESSION_USER_KEY)
  if user:
    return user

  user = request.headers.get('X-Forwarded-User')
  if user:
    logger.debug(f'Got user from X-Forwarded-User header: {user}')
    return user

  if _is_local_development():
    return DEV_USER_EMAIL

  raise AuthenticationError('Not signed in')


async def get_current_user(request: Request, accounts: AccountStorage) -> User:
  """Resolve the current user row, provisioning it on first sight."""
  email = get_current_user_email(request)
  return await accounts.get_or_provision(email)


def remember_user(request: Request, user: User) -> None:
  """Store the signed-in user in the session cookie."""
  request.session[SESSION_USER_KEY] = user.email


def forget_user(request: Request) -> None:
  request.session.pop(SESSION_USER_KEY, None)
