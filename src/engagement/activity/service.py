"""Activity session log: append a session, count sessions per period."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, tzinfo

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from engagement.db.models import ActivitySession
from engagement.gamification.achievement_service import require_member_id
from engagement.gamification.week_utils import (
    as_utc,
    local_midnight,
    local_today,
    month_start,
    utc_now,
    year_start,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ActivityCounts:
    today: int = 0
    week: int = 0
    month: int = 0
    year: int = 0


async def get_activity_counts(
    db: AsyncSession,
    member_id: str,
    now: datetime | None = None,
    tz: str | tzinfo | None = None,
) -> ActivityCounts:
    """Sessions since local midnight, the 7 days before today, the month and the year."""
    member_id = require_member_id(member_id)
    today = local_today(now, tz)
    since_today = local_midnight(today, tz)
    since_week = local_midnight(today - timedelta(days=7), tz)
    since_month = local_midnight(month_start(today), tz)
    since_year = local_midnight(year_start(today), tz)

    at = ActivitySession.session_at
    result = await db.execute(
        select(
            func.count().filter(at >= since_today),
            func.count().filter(at >= since_week),
            func.count().filter(at >= since_month),
            func.count().filter(at >= since_year),
        ).where(ActivitySession.member_id == member_id)
    )
    today_count, week_count, month_count, year_count = result.one()
    return ActivityCounts(
        today=today_count or 0,
        week=week_count or 0,
        month=month_count or 0,
        year=year_count or 0,
    )


async def record_activity_session(
    db: AsyncSession,
    member_id: str,
    now: datetime | None = None,
    tz: str | tzinfo | None = None,
) -> ActivityCounts:
    """Log one session and return the updated counts."""
    member_id = require_member_id(member_id)
    now = as_utc(now) if now is not None else utc_now()
    db.add(ActivitySession(member_id=member_id, session_at=now))
    await db.commit()
    logger.info("Activity session logged for %s", member_id)
    return await get_activity_counts(db, member_id, now, tz)
