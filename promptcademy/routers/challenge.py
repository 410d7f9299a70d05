"""Challenge endpoints."""

import logging
from typing import Optional

from fastapi import APIRouter, Request
from pydantic import BaseModel

from ..db import session_scope
from ..services.accounts import AccountStorage
from ..services.challenges import ChallengeStorage
from ..services.user import get_current_user

logger = logging.getLogger(__name__)
router = APIRouter()


class EntryRequest(BaseModel):
  content: Optional[str] = None


@router.get('/challenge')
async def get_challenge(request: Request):
  """Get the active challenge and the current user's entries to it."""
  async with session_scope() as session:
    user = await get_current_user(request, AccountStorage(session))
    storage = ChallengeStorage(session)
    challenge = await storage.get_active()
    entries = await storage.entries_for(user.id, challenge.id)
    return {
      'ok': True,
      'challenge': challenge.to_dict(),
      'entries': [entry.to_dict() for entry in entries],
    }


@router.post('/challenge')
async def submit_entry(request: Request, body: EntryRequest):
  async with session_scope() as session:
    user = await get_current_user(request, AccountStorage(session))
    entry = await ChallengeStorage(session).create_entry(user.id, body.content)
    return {'ok': True, 'message': 'Submitted!', 'entry': entry.to_dict()}
