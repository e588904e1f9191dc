"""Practice-day records and the strict read-time streak."""

from __future__ import annotations

import logging
from datetime import date, datetime, tzinfo

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from engagement.db.dialect import insert_for
from engagement.db.models import PracticeStreak
from engagement.gamification.streak_calc import PracticeStreakSummary, compute_practice_streak
from engagement.gamification.week_utils import local_today

logger = logging.getLogger(__name__)


async def record_practice_day(db: AsyncSession, member_id: str, day: date) -> None:
    """Insert (member, day); a second insert for the same day is a no-op."""
    stmt = insert_for(db, PracticeStreak).values(member_id=member_id, practice_date=day)
    stmt = stmt.on_conflict_do_nothing(index_elements=["member_id", "practice_date"])
    await db.execute(stmt)


async def record_practice(
    db: AsyncSession,
    member_id: str,
    now: datetime | None = None,
    tz: str | tzinfo | None = None,
) -> tuple[date, int]:
    """Record today's practice. Returns (today, number of practiced days)."""
    today = local_today(now, tz)
    await record_practice_day(db, member_id, today)
    await db.commit()

    result = await db.execute(
        select(func.count()).select_from(PracticeStreak).where(PracticeStreak.member_id == member_id)
    )
    count = result.scalar_one()
    logger.info("Practice recorded for %s on %s (%d days)", member_id, today.isoformat(), count)
    return today, count


async def get_practice_dates(db: AsyncSession, member_id: str) -> list[date]:
    """All practiced days for a member, newest first."""
    result = await db.execute(
        select(PracticeStreak.practice_date)
        .where(PracticeStreak.member_id == member_id)
        .order_by(PracticeStreak.practice_date.desc())
    )
    return list(result.scalars())


async def get_practice_streak(
    db: AsyncSession,
    member_id: str,
    now: datetime | None = None,
    tz: str | tzinfo | None = None,
) -> tuple[PracticeStreakSummary, list[date]]:
    """Strict streak summary plus the dates it was computed from."""
    dates = await get_practice_dates(db, member_id)
    return compute_practice_streak(dates, local_today(now, tz)), dates
