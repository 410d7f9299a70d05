"""Signup, login and account settings endpoints."""

import logging

from fastapi import APIRouter, Query, Request
from pydantic import BaseModel

from ..db import session_scope
from ..services.accounts import AccountStorage
from ..services.user import forget_user, get_current_user, remember_user

logger = logging.getLogger(__name__)
router = APIRouter()


class SignupRequest(BaseModel):
  name: str = ''
  email: str
  password: str


class LoginRequest(BaseModel):
  email: str
  password: str


@router.post('/signup')
async def signup(request: Request, body: SignupRequest):
  """Create an account and sign in."""
  async with session_scope() as session:
    user = await AccountStorage(session).create_user(body.name, body.email, body.password)
    remember_user(request, user)
    return {'ok': True, 'user': user.to_dict()}


@router.post('/login')
async def login(request: Request, body: LoginRequest):
  """Check credentials and sign in."""
  async with session_scope() as session:
    user = await AccountStorage(session).authenticate(body.email, body.password)
    remember_user(request, user)
    logger.info(f'User {user.id} logged in')
    return {'ok': True, 'user': user.to_dict()}


@router.post('/logout')
async def logout(request: Request):
  forget_user(request)
  return {'ok': True}


@router.get('/me')
async def get_me(request: Request):
  """Get the current user."""
  async with session_scope() as session:
    user = await get_current_user(request, AccountStorage(session))
    return {'ok': True, 'user': user.to_dict()}


@router.get('/settings')
async def get_settings(request: Request, success: bool = Query(False)):
  """Account settings; `success=true` is the checkout return URL and upgrades the plan."""
  async with session_scope() as session:
    accounts = AccountStorage(session)
    user = await get_current_user(request, accounts)
    message = None
    if success:
      user = await accounts.update_plan(user.id, 'paid')
      message = "You're upgraded!"
    return {'ok': True, 'user': user.to_dict(), 'message': message}
