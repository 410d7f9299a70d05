"""User account storage: signup, login and plan changes."""

import logging
from typing import Optional

import bcrypt
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ..db import User
from ..errors import AuthenticationError, ConflictError, NotFoundError, ValidationError

logger = logging.getLogger(__name__)

PLANS = ('free', 'paid')


def normalize_email(email: str) -> str:
  return (email or '').strip().lower()


def hash_password(password: str) -> str:
  return bcrypt.hashpw(password.encode('utf-8'), bcrypt.gensalt()).decode('utf-8')


def verify_password(password: str, password_hash: Optional[str]) -> bool:
  if not password_hash:
    return False
  try:
    return bcrypt.checkpw(password.encode('utf-8'), password_hash.encode('utf-8'))
  except ValueError:
    logger.warning('Stored password hash is malformed')
    return False


class AccountStorage:
  """User account operations within a session."""

  def __init__(self, session: AsyncSession):
    self.session = session

  async def get(self, user_id: int) -> Optional[User]:
    return await self.session.get(User, user_id)

  async def get_by_email(self, email: str) -> Optional[User]:
    result = await self.session.execute(
      select(User).where(User.email == normalize_email(email))
    )
    return result.scalar_one_or_none()

  async def create_user(self, name: str, email: str, password: str) -> User:
    """Register a new user.

    Raises:
        ValidationError: If email or password is empty
        ConflictError: If the email is already registered (case-insensitive)
    """
    email = normalize_email(email)
    if not email or not password:
      raise ValidationError('Email and password are required')
    if await self.get_by_email(email):
      raise ConflictError('Email already exists')

    user = User(name=(name or '').strip(), email=email, password_hash=hash_password(password))
    self.session.add(user)
    await self.session.flush()
    logger.info(f'Created user {user.id} ({email})')
    return user

  async def authenticate(self, email: str, password: str) -> User:
    """Return the user if the credentials match.

    Raises:
        AuthenticationError: On unknown email or wrong password
    """
    user = await self.get_by_email(email)
    if not user or not verify_password(password or '', user.password_hash):
      raise AuthenticationError('Invalid credentials')
    return user

  async def get_or_provision(self, email: str) -> User:
    """Get the user for a forwarded identity, creating a passwordless row on first use."""
    user = await self.get_by_email(email)
    if user:
      return user
    email = normalize_email(email)
    user = User(name=email.split('@')[0], email=email)
    self.session.add(user)
    await self.session.flush()
    logger.info(f'Provisioned user {user.id} for {email}')
    return user

  async def update_plan(self, user_id: int, plan: str) -> User:
    if plan not in PLANS:
      raise ValidationError(f"Invalid plan '{plan}'")
    user = await self.get(user_id)
    if not user:
      raise NotFoundError(f'User {user_id} not found')
    user.plan = plan
    await self.session.flush()
    logger.info(f'User {user_id} plan set to {plan}')
    return user
