"""Engagement ledger persistence: load, record a session, save.

One user_achievements row per member. A session is applied in memory by
ledger.record_event() and written back in a single upsert, together with
the practice-day row, in one commit.
"""

from __future__ import annotations

import logging
from dataclasses import replace
from datetime import datetime, tzinfo
from typing import Any

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from engagement.db.dialect import insert_for
from engagement.db.models import UserAchievement
from engagement.errors import InvalidInput
from engagement.gamification.ledger import (
    EventOutcome,
    MemberEngagementState,
    reconcile_state,
    record_event,
)
from engagement.gamification.streak_service import record_practice_day
from engagement.gamification.week_utils import as_utc, local_today, utc_now
from engagement.redis_client import publish_event

logger = logging.getLogger(__name__)

BADGE_UNLOCKED_CHANNEL = "pubsub:badge_unlocked"


def require_member_id(member_id: str | None) -> str:
    member_id = (member_id or "").strip()
    if not member_id:
        raise InvalidInput("Member ID required")
    return member_id


def row_to_state(row: UserAchievement) -> MemberEngagementState:
    """Build a reconciled state snapshot from a stored row."""
    state = MemberEngagementState(
        member_id=row.member_id,
        user_name=row.user_name,
        user_picture=row.user_picture,
        team_id=row.team_id,
        current_streak=row.current_streak,
        longest_streak=row.longest_streak,
        daily_points=dict(row.daily_points or {}),
        total_sessions=row.total_sessions,
        sessions_today=row.sessions_today,
        sessions_this_week=row.sessions_this_week,
        sessions_this_month=row.sessions_this_month,
        last_session_date=row.last_session_date,
        unlocked_badges=tuple(row.unlocked_badges or ()),
        weekly_reset_at=as_utc(row.weekly_reset_at) if row.weekly_reset_at else None,
    )
    return reconcile_state(state)


async def load_state(db: AsyncSession, member_id: str) -> MemberEngagementState | None:
    result = await db.execute(
        select(UserAchievement)
        .where(UserAchievement.member_id == member_id)
        .execution_options(populate_existing=True)
    )
    row = result.scalar_one_or_none()
    return row_to_state(row) if row is not None else None


def _row_values(state: MemberEngagementState) -> dict[str, Any]:
    return {
        "member_id": state.member_id,
        "user_name": state.user_name,
        "user_picture": state.user_picture,
        "team_id": state.team_id,
        "current_streak": state.current_streak,
        "longest_streak": state.longest_streak,
        "daily_points": dict(state.daily_points),
        "total_sessions": state.total_sessions,
        "sessions_today": state.sessions_today,
        "sessions_this_week": state.sessions_this_week,
        "sessions_this_month": state.sessions_this_month,
        "last_session_date": state.last_session_date,
        "unlocked_badges": list(state.unlocked_badges),
        "weekly_reset_at": as_utc(state.weekly_reset_at) if state.weekly_reset_at else None,
    }


async def save_state(db: AsyncSession, state: MemberEngagementState) -> None:
    """Upsert the full state row. Does not commit.

    Profile fields are only overwritten when the new state carries a value.
    """
    values = _row_values(state)
    stmt = insert_for(db, UserAchievement).values(**values)
    update = {k: stmt.excluded[k] for k in values if k != "member_id"}
    for key in ("user_name", "user_picture", "team_id"):
        update[key] = func.coalesce(stmt.excluded[key], getattr(UserAchievement, key))
    update["updated_at"] = func.now()
    stmt = stmt.on_conflict_do_update(index_elements=["member_id"], set_=update)
    await db.execute(stmt)


async def record_session(
    db: AsyncSession,
    redis: object | None,
    member_id: str,
    points: Any = 0,
    user_name: str | None = None,
    user_picture: str | None = None,
    team_id: str | None = None,
    now: datetime | None = None,
    tz: str | tzinfo | None = None,
) -> EventOutcome:
    """Apply one session to a member's ledger and persist it.

    Concurrent sessions for the same member are last-write-wins.
    """
    member_id = require_member_id(member_id)
    now = as_utc(now) if now is not None else utc_now()

    state = await load_state(db, member_id) or MemberEngagementState(member_id=member_id)
    if user_name or user_picture or team_id:
        state = replace(
            state,
            user_name=user_name or state.user_name,
            user_picture=user_picture or state.user_picture,
            team_id=team_id or state.team_id,
        )

    outcome = record_event(state, points, now=now, tz=tz)
    await save_state(db, outcome.state)
    await record_practice_day(db, member_id, local_today(now, tz))
    await db.commit()

    logger.info(
        "Session recorded for %s: total=%d streak=%d",
        member_id, outcome.state.total_sessions, outcome.state.current_streak,
    )
    if outcome.newly_unlocked:
        logger.info("Badges unlocked for %s: %s", member_id, ", ".join(outcome.newly_unlocked))
        await publish_event(redis, BADGE_UNLOCKED_CHANNEL, {
            "member_id": member_id,
            "badge_ids": list(outcome.newly_unlocked),
        })
    return outcome


async def get_state(db: AsyncSession, member_id: str) -> MemberEngagementState:
    """Stored state, or the default empty state for an unknown member."""
    member_id = require_member_id(member_id)
    return await load_state(db, member_id) or MemberEngagementState(member_id=member_id)
