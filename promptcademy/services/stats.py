"""XP, daily check-in streaks and badges."""

import logging
from datetime import date, timedelta

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ..db import Badge, UserStats

logger = logging.getLogger(__name__)

FIRST_LESSON_BADGE = ('first-lesson', 'First lesson completed')
STREAK_BADGE = ('streak-7', '7-day streak')
XP_BADGE = ('xp-1000', '1000 XP earned')

STREAK_BADGE_DAYS = 7
XP_BADGE_THRESHOLD = 1000


class StatsStorage:
  """User-scoped gamification stats."""

  def __init__(self, session: AsyncSession, user_id: int):
    self.session = session
    self.user_id = user_id

  async def get_or_create(self) -> UserStats:
    stats = await self.session.get(UserStats, self.user_id)
    if stats:
      return stats
    stats = UserStats(user_id=self.user_id, xp=0, streak=0)
    self.session.add(stats)
    await self.session.flush()
    return stats

  async def add_xp(self, amount: int) -> UserStats:
    stats = await self.get_or_create()
    stats.xp += amount
    await self.session.flush()
    logger.info(f'User {self.user_id} gained {amount} XP (total {stats.xp})')
    if stats.xp >= XP_BADGE_THRESHOLD:
      await self.award_badge(*XP_BADGE)
    return stats

  async def check_in(self, today: date) -> UserStats:
    """Record a visit on `today`.

    A visit on the day after the last check-in extends the streak; any longer
    gap restarts it at 1. Repeat visits on the same day change nothing.
    """
    stats = await self.get_or_create()
    if stats.last_check_in == today:
      return stats

    if stats.last_check_in == today - timedelta(days=1):
      stats.streak += 1
    else:
      stats.streak = 1
    stats.last_check_in = today
    await self.session.flush()

    if stats.streak >= STREAK_BADGE_DAYS:
      await self.award_badge(*STREAK_BADGE)
    return stats

  async def award_badge(self, badge_id: str, label: str) -> Badge:
    """Award a badge once; later awards return the existing badge."""
    result = await self.session.execute(
      select(Badge).where(Badge.user_id == self.user_id, Badge.badge_id == badge_id)
    )
    badge = result.scalar_one_or_none()
    if badge:
      return badge

    badge = Badge(user_id=self.user_id, badge_id=badge_id, label=label)
    self.session.add(badge)
    await self.session.flush()
    logger.info(f'User {self.user_id} earned badge {badge_id}')
    return badge

  async def badges(self) -> list[Badge]:
    result = await self.session.execute(
      select(Badge).where(Badge.user_id == self.user_id).order_by(Badge.earned_at, Badge.id)
    )
    return list(result.scalars().all())

  async def snapshot(self) -> dict:
    """Stats and badges as a response payload."""
    stats = await self.session.get(UserStats, self.user_id)
    data = stats.to_dict() if stats else {'xp': 0, 'streak': 0, 'last_check_in': None}
    data['badges'] = [badge.to_dict() for badge in await self.badges()]
    return data
