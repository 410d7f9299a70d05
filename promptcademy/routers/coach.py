"""Coach scoring endpoint."""

import logging
from datetime import date
from typing import Any, Optional

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from ..db import session_scope
from ..services.accounts import AccountStorage
from ..services.coach import score_deliverable
from ..services.daily import today_in_reference_timezone
from ..services.stats import StatsStorage
from ..services.user import get_current_user

logger = logging.getLogger(__name__)
router = APIRouter()


class ScoreRequest(BaseModel):
  """Deliverable to score. Fields are optional so missing ones return 400, not 422."""

  deliverable: Optional[str] = None
  rubric: Optional[Any] = None
  context: Optional[dict[str, Any]] = None
  model: Optional[str] = None


@router.post('/coach/score')
async def score(request: Request, body: ScoreRequest):
  """Score a deliverable against a rubric and credit the awarded XP.

  Returns 400 for a missing deliverable or rubric and 500 with a structured
  body when scoring is unconfigured or the upstream call fails.
  """
  result = await score_deliverable(
    body.deliverable,
    body.rubric,
    context=body.context,
    model=body.model,
  )

  if result.error:
    return JSONResponse(status_code=500, content=result.to_response())

  async with session_scope() as session:
    user = await get_current_user(request, AccountStorage(session))
    stats = StatsStorage(session, user.id)
    await stats.add_xp(result.xp_awarded)
    await stats.check_in(date.fromisoformat(today_in_reference_timezone()))

  return result.to_response()
