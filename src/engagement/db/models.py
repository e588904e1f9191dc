"""ORM models for the engagement ledger.

The tables are created by alembic/versions/001_engagement_tables.py.
JSON columns are JSONB on PostgreSQL and plain JSON elsewhere (tests run
on SQLite).
"""

from __future__ import annotations

from datetime import date, datetime
from typing import Any

from sqlalchemy import (
    JSON,
    BigInteger,
    Date,
    DateTime,
    Integer,
    String,
    Text,
    UniqueConstraint,
    func,
)
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column

from engagement.db.base import Base

JSONType = JSON().with_variant(JSONB(), "postgresql")


# ---------------------------------------------------------------------------
# Engagement state
# ---------------------------------------------------------------------------


class UserAchievement(Base):
    """One row per member: streaks, session counters, points and badges."""

    __tablename__ = "user_achievements"

    member_id: Mapped[str] = mapped_column(String(128), primary_key=True)
    user_name: Mapped[str | None] = mapped_column(String(256), nullable=True)
    user_picture: Mapped[str | None] = mapped_column(Text, nullable=True)
    team_id: Mapped[str | None] = mapped_column(String(128), nullable=True, index=True)

    current_streak: Mapped[int] = mapped_column(Integer, nullable=False, default=0, server_default="0")
    longest_streak: Mapped[int] = mapped_column(Integer, nullable=False, default=0, server_default="0")
    total_sessions: Mapped[int] = mapped_column(Integer, nullable=False, default=0, server_default="0")
    sessions_today: Mapped[int] = mapped_column(Integer, nullable=False, default=0, server_default="0")
    sessions_this_week: Mapped[int] = mapped_column(Integer, nullable=False, default=0, server_default="0")
    sessions_this_month: Mapped[int] = mapped_column(Integer, nullable=False, default=0, server_default="0")
    last_session_date: Mapped[str | None] = mapped_column(String(10), nullable=True)

    daily_points: Mapped[dict[str, Any]] = mapped_column(JSONType, nullable=False, default=dict)
    unlocked_badges: Mapped[list[str]] = mapped_column(JSONType, nullable=False, default=list)
    weekly_reset_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True, index=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now()
    )


class PracticeStreak(Base):
    """One row per member per practiced calendar day."""

    __tablename__ = "practice_streaks"
    __table_args__ = (
        UniqueConstraint("member_id", "practice_date", name="practice_streaks_member_date_key"),
    )

    id: Mapped[int] = mapped_column(BigInteger().with_variant(Integer, "sqlite"), primary_key=True, autoincrement=True)
    member_id: Mapped[str] = mapped_column(String(128), nullable=False, index=True)
    practice_date: Mapped[date] = mapped_column(Date, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now()
    )


# ---------------------------------------------------------------------------
# Activity log
# ---------------------------------------------------------------------------


class ActivitySession(Base):
    """Append-only log of activity sessions."""

    __tablename__ = "activity_sessions"

    id: Mapped[int] = mapped_column(BigInteger().with_variant(Integer, "sqlite"), primary_key=True, autoincrement=True)
    member_id: Mapped[str] = mapped_column(String(128), nullable=False, index=True)
    session_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, index=True)
