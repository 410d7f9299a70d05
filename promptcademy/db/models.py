"""Database models for lessons, users, progress, rotation state, saved prompts and challenges."""

from datetime import date, datetime, timezone
from typing import Any, Optional

from sqlalchemy import (
  Boolean,
  Date,
  DateTime,
  ForeignKey,
  Integer,
  String,
  Text,
  UniqueConstraint,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


def utc_now() -> datetime:
  """Return the current UTC datetime."""
  return datetime.now(timezone.utc)


def _isoformat(value: Optional[datetime]) -> Optional[str]:
  return value.isoformat() if value else None


class Base(DeclarativeBase):
  """Base class for SQLAlchemy models."""

  pass


class Lesson(Base):
  """A lesson in the catalog. Rows are written by the seed step only."""

  __tablename__ = 'lessons'

  id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
  title: Mapped[str] = mapped_column(String(255), nullable=False)
  track: Mapped[str] = mapped_column(String(50), nullable=False, default='general')
  content: Mapped[str] = mapped_column(Text, nullable=False, default='')
  order: Mapped[int] = mapped_column('sort_order', Integer, nullable=False, default=0)
  is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

  def to_dict(self) -> dict[str, Any]:
    return {
      'id': self.id,
      'title': self.title,
      'track': self.track,
      'content': self.content,
      'order': self.order,
      'is_active': self.is_active,
    }


class AppState(Base):
  """Process-wide scalars such as the rotation pointer and its day marker."""

  __tablename__ = 'app_state'

  key: Mapped[str] = mapped_column(String(100), primary_key=True)
  value: Mapped[str] = mapped_column(String(255), nullable=False)


class User(Base):
  """A registered learner. Email is stored lower-cased."""

  __tablename__ = 'users'

  id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
  name: Mapped[str] = mapped_column(String(255), nullable=False, default='')
  email: Mapped[str] = mapped_column(String(255), nullable=False, unique=True, index=True)
  password_hash: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
  plan: Mapped[str] = mapped_column(String(20), nullable=False, default='free')
  created_at: Mapped[datetime] = mapped_column(
    DateTime(timezone=True),
    default=utc_now,
  )

  def to_dict(self) -> dict[str, Any]:
    return {
      'id': self.id,
      'name': self.name,
      'email': self.email,
      'plan': self.plan,
      'created_at': _isoformat(self.created_at),
    }


class Progress(Base):
  """Per-user status of a lesson.

  completed_at is set when the status becomes completed and is never cleared.
  """

  __tablename__ = 'progress'

  user_id: Mapped[int] = mapped_column(
    Integer, ForeignKey('users.id', ondelete='CASCADE'), primary_key=True
  )
  lesson_id: Mapped[int] = mapped_column(
    Integer, ForeignKey('lessons.id', ondelete='CASCADE'), primary_key=True
  )
  status: Mapped[str] = mapped_column(String(20), nullable=False, default='not_started')
  completed_at: Mapped[Optional[datetime]] = mapped_column(
    DateTime(timezone=True), nullable=True
  )


class UserStats(Base):
  """XP total and daily check-in streak for a user."""

  __tablename__ = 'user_stats'

  user_id: Mapped[int] = mapped_column(
    Integer, ForeignKey('users.id', ondelete='CASCADE'), primary_key=True
  )
  xp: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
  streak: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
  last_check_in: Mapped[Optional[date]] = mapped_column(Date, nullable=True)

  def to_dict(self) -> dict[str, Any]:
    return {
      'xp': self.xp,
      'streak': self.streak,
      'last_check_in': self.last_check_in.isoformat() if self.last_check_in else None,
    }


class Badge(Base):
  """A badge earned by a user. Each badge is awarded at most once."""

  __tablename__ = 'badges'
  __table_args__ = (UniqueConstraint('user_id', 'badge_id', name='uq_badges_user_badge'),)

  id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
  user_id: Mapped[int] = mapped_column(
    Integer, ForeignKey('users.id', ondelete='CASCADE'), nullable=False, index=True
  )
  badge_id: Mapped[str] = mapped_column(String(50), nullable=False)
  label: Mapped[str] = mapped_column(String(255), nullable=False)
  earned_at: Mapped[datetime] = mapped_column(
    DateTime(timezone=True),
    default=utc_now,
  )

  def to_dict(self) -> dict[str, Any]:
    return {
      'id': self.badge_id,
      'label': self.label,
      'earned_at': _isoformat(self.earned_at),
    }


class SavedPrompt(Base):
  """A prompt kept in a user's library, optionally copied from a lesson."""

  __tablename__ = 'saved_prompts'

  id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
  user_id: Mapped[int] = mapped_column(
    Integer, ForeignKey('users.id', ondelete='CASCADE'), nullable=False, index=True
  )
  lesson_id: Mapped[Optional[int]] = mapped_column(
    Integer, ForeignKey('lessons.id', ondelete='SET NULL'), nullable=True
  )
  title: Mapped[str] = mapped_column(String(255), nullable=False)
  input_text: Mapped[str] = mapped_column(Text, nullable=False, default='')
  output_text: Mapped[str] = mapped_column(Text, nullable=False, default='')
  created_at: Mapped[datetime] = mapped_column(
    DateTime(timezone=True),
    default=utc_now,
  )

  def to_dict(self) -> dict[str, Any]:
    return {
      'id': self.id,
      'lesson_id': self.lesson_id,
      'title': self.title,
      'input_text': self.input_text,
      'output_text': self.output_text,
      'created_at': _isoformat(self.created_at),
    }


class Challenge(Base):
  """A community prompt challenge. The newest active row is the current one."""

  __tablename__ = 'challenges'

  id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
  title: Mapped[str] = mapped_column(String(255), nullable=False)
  prompt: Mapped[str] = mapped_column(Text, nullable=False, default='')
  is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
  created_at: Mapped[datetime] = mapped_column(
    DateTime(timezone=True),
    default=utc_now,
  )

  def to_dict(self) -> dict[str, Any]:
    return {
      'id': self.id,
      'title': self.title,
      'prompt': self.prompt,
      'is_active': self.is_active,
      'created_at': _isoformat(self.created_at),
    }


class ChallengeEntry(Base):
  """A user's submission to a challenge."""

  __tablename__ = 'challenge_entries'

  id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
  challenge_id: Mapped[int] = mapped_column(
    Integer, ForeignKey('challenges.id', ondelete='CASCADE'), nullable=False, index=True
  )
  user_id: Mapped[int] = mapped_column(
    Integer, ForeignKey('users.id', ondelete='CASCADE'), nullable=False
  )
  content: Mapped[str] = mapped_column(Text, nullable=False)
  created_at: Mapped[datetime] = mapped_column(
    DateTime(timezone=True),
    default=utc_now,
  )

  def to_dict(self) -> dict[str, Any]:
    return {
      'id': self.id,
      'challenge_id': self.challenge_id,
      'content': self.content,
      'created_at': _isoformat(self.created_at),
    }
